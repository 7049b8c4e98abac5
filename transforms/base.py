"""MathTransform capability and the trivial variants.

Every transform maps ``(x, y, z)`` to ``(x, y, z)``; two-dimensional
transforms carry ``z`` through untouched so heights survive a pipeline that
passes through a geocentric leg. Transforms are immutable after
construction and safe to share between threads. ``invert()`` always returns
a new object.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

Point3 = Tuple[float, float, float]


class MathTransform:
    dim_source: int = 2
    dim_target: int = 2

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        raise NotImplementedError

    def transform(self, point: Sequence[float]) -> Tuple[float, ...]:
        """Transform one point given as ``(x, y)`` or ``(x, y, z)``."""
        if len(point) < 2:
            raise ValueError("A point needs at least two ordinates")
        z = float(point[2]) if len(point) > 2 else 0.0
        x, y, z = self.apply(float(point[0]), float(point[1]), z)
        if self.dim_target >= 3 or len(point) > 2:
            return (x, y, z)
        return (x, y)

    def transform_many(self, points: Iterable[Sequence[float]]) -> List[Tuple[float, ...]]:
        return [self.transform(p) for p in points]

    def invert(self) -> "MathTransform":
        raise NotImplementedError(f"{type(self).__name__} has no inverse")

    @property
    def is_identity(self) -> bool:
        return False

    @property
    def wkt(self) -> str:
        raise NotImplementedError(f"{type(self).__name__} has no WKT form")

    def _key(self) -> tuple:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MathTransform):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))


class IdentityTransform(MathTransform):
    def __init__(self, dimension: int = 2):
        self.dim_source = dimension
        self.dim_target = dimension

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        return x, y, z

    def invert(self) -> "IdentityTransform":
        return IdentityTransform(self.dim_source)

    @property
    def is_identity(self) -> bool:
        return True

    @property
    def wkt(self) -> str:
        from .affine import AffineTransform

        return AffineTransform.identity(self.dim_source).wkt

    def _key(self) -> tuple:
        return (self.dim_source,)

    def __repr__(self) -> str:
        return f"IdentityTransform({self.dim_source})"


class InverseTransform(MathTransform):
    """The inverse of ``base``, keeping ``base`` as its written form (``INVERSE_MT``)."""

    def __init__(self, base: MathTransform):
        self.base = base
        self._delegate = base.invert()
        self.dim_source = base.dim_target
        self.dim_target = base.dim_source

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        return self._delegate.apply(x, y, z)

    def invert(self) -> MathTransform:
        return self._delegate.invert()

    @property
    def is_identity(self) -> bool:
        return self.base.is_identity

    @property
    def wkt(self) -> str:
        return f"INVERSE_MT[{self.base.wkt}]"

    def _key(self) -> tuple:
        return (self.base,)

    def __repr__(self) -> str:
        return f"InverseTransform({self.base!r})"


__all__ = ["Point3", "MathTransform", "IdentityTransform", "InverseTransform"]
