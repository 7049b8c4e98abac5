"""NTv2 grid shift as a two-dimensional MathTransform (degrees in, degrees out)."""
from __future__ import annotations

import logging

from ntv2.model import GridFile

from .base import MathTransform, Point3

logger = logging.getLogger(__name__)


class GridTransform(MathTransform):
    """Points outside every sub-grid pass through unchanged."""

    def __init__(self, grid_file: GridFile, inverse: bool = False):
        self.grid_file = grid_file
        self.inverse = inverse

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        shifted = self.grid_file.transform(x, y, self.inverse)
        if shifted is None:
            logger.debug("ntv2.no_coverage source=%s lon=%s lat=%s", self.grid_file.source, x, y)
            return x, y, z
        return shifted[0], shifted[1], z

    def invert(self) -> "GridTransform":
        return GridTransform(self.grid_file, not self.inverse)

    def _key(self) -> tuple:
        return (id(self.grid_file), self.inverse)

    def __repr__(self) -> str:
        return f"GridTransform({self.grid_file.source!r}, inverse={self.inverse})"


__all__ = ["GridTransform"]
