"""Chain of transforms applied in order (``CONCAT_MT``)."""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .base import MathTransform, Point3


class ConcatenatedTransform(MathTransform):
    """Children run first to last; each child's output feeds the next one.

    The children are held in a tuple owned by this instance. ``invert()``
    inverts every child into a fresh object and reverses the order; neither
    chain is touched.
    """

    def __init__(self, children: Iterable[MathTransform]):
        chain: Tuple[MathTransform, ...] = tuple(children)
        if not chain:
            raise ValueError("A concatenated transform needs at least one child")
        for previous, current in zip(chain, chain[1:]):
            if previous.dim_target != current.dim_source:
                raise ValueError(
                    f"Dimension mismatch in chain: {type(previous).__name__} produces "
                    f"{previous.dim_target}D, {type(current).__name__} expects {current.dim_source}D"
                )
        self._children = chain
        self.dim_source = chain[0].dim_source
        self.dim_target = chain[-1].dim_target

    @property
    def children(self) -> Tuple[MathTransform, ...]:
        return self._children

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        for child in self._children:
            x, y, z = child.apply(x, y, z)
        return x, y, z

    def invert(self) -> "ConcatenatedTransform":
        return ConcatenatedTransform([child.invert() for child in reversed(self._children)])

    @property
    def is_identity(self) -> bool:
        return all(child.is_identity for child in self._children)

    @property
    def wkt(self) -> str:
        return "CONCAT_MT[" + ", ".join(child.wkt for child in self._children) + "]"

    def _key(self) -> tuple:
        return self._children

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"ConcatenatedTransform({list(self._children)!r})"


def concatenate(*parts: Optional[MathTransform]) -> ConcatenatedTransform:
    """Flatten nested chains and drop ``None`` legs into one ``ConcatenatedTransform``."""
    flat = []
    for part in parts:
        if part is None:
            continue
        if isinstance(part, ConcatenatedTransform):
            flat.extend(part.children)
        else:
            flat.append(part)
    return ConcatenatedTransform(flat)


__all__ = ["ConcatenatedTransform", "concatenate"]
