"""Error taxonomy shared by the WKT reader, projections, transforms and grids."""
from __future__ import annotations

from typing import Optional


class CrsError(Exception):
    """Base class for every engine error."""


class ParseError(CrsError):
    def __init__(self, message: str, fragment: str = "", position: Optional[int] = None):
        self.fragment = fragment
        self.position = position
        detail = message
        if position is not None:
            detail += f" at position {position}"
        if fragment:
            detail += f": {fragment!r}"
        super().__init__(detail)


class UnknownProjectionError(CrsError, LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Projection {name!r} is not supported")


class MissingParameterError(CrsError, KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing projection parameter {name!r}")

    def __str__(self) -> str:  # KeyError would repr() the message
        return self.args[0]


class UnsupportedTransformError(CrsError):
    pass


class SingularMatrixError(CrsError, ArithmeticError):
    pass


class ConvergenceError(CrsError, ArithmeticError):
    pass


class FormatError(CrsError, ValueError):
    pass


class UnknownParentGridError(FormatError):
    def __init__(self, sub_name: str, parent: str):
        self.sub_name = sub_name
        self.parent = parent
        super().__init__(f"Sub-grid {sub_name!r} names unknown parent grid {parent!r}")


__all__ = [
    "CrsError",
    "ParseError",
    "UnknownProjectionError",
    "MissingParameterError",
    "UnsupportedTransformError",
    "SingularMatrixError",
    "ConvergenceError",
    "FormatError",
    "UnknownParentGridError",
]
