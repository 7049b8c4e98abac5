"""Unit-aware wrapper that exposes a ``MapProjection`` as a MathTransform."""
from __future__ import annotations

import math

from app.crs.wkt_writer import format_number, quote
from projections.base import MapProjection

from .base import MathTransform, Point3

_DEGREE = math.pi / 180.0


class ProjectionTransform(MathTransform):
    """Geographic (angular units) -> projected (linear units), or the reverse.

    Projection math stays in radians and metres; conversion happens here:
    input angles are scaled by ``radians_per_unit``, output metres divided by
    the projection's ``unit`` parameter after false easting/northing.
    """

    def __init__(self, projection: MapProjection, radians_per_unit: float = _DEGREE, inverse: bool = False):
        self.projection = projection
        self.radians_per_unit = radians_per_unit
        self.inverse = inverse

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        p = self.projection
        if not self.inverse:
            px, py = p.forward(x * self.radians_per_unit, y * self.radians_per_unit)
            return (px + p.false_easting) / p.meters_per_unit, (py + p.false_northing) / p.meters_per_unit, z
        lam, phi = p.inverse(x * p.meters_per_unit - p.false_easting, y * p.meters_per_unit - p.false_northing)
        return lam / self.radians_per_unit, phi / self.radians_per_unit, z

    def invert(self) -> "ProjectionTransform":
        return ProjectionTransform(self.projection, self.radians_per_unit, not self.inverse)

    @property
    def wkt(self) -> str:
        params = ", ".join(
            f"PARAMETER[{quote(param.name)}, {format_number(param.value)}]" for param in self.projection.parameters
        )
        body = f"PARAM_MT[{quote(self.projection.name)}, {params}]" if params else f"PARAM_MT[{quote(self.projection.name)}]"
        return f"INVERSE_MT[{body}]" if self.inverse else body

    def _key(self) -> tuple:
        return (self.projection, self.radians_per_unit, self.inverse)

    def __repr__(self) -> str:
        direction = "inverse" if self.inverse else "forward"
        return f"ProjectionTransform({self.projection.name!r}, {direction})"


__all__ = ["ProjectionTransform"]
