"""Same-datum geographic conversion: angular unit and prime meridian changes."""
from __future__ import annotations

import math

from app.crs.model import GeographicCoordinateSystem
from app.crs.wkt_writer import format_number, quote

from .base import MathTransform, Point3


class GeographicTransform(MathTransform):
    """Longitude/latitude from one geographic system's units and meridian to another's.

    Longitudes are shifted by the difference between the two prime
    meridians; both ordinates are rescaled between the angular units.
    """

    def __init__(
        self,
        source_radians_per_unit: float,
        target_radians_per_unit: float,
        source_meridian: float = 0.0,
        target_meridian: float = 0.0,
    ):
        self.source_radians_per_unit = source_radians_per_unit
        self.target_radians_per_unit = target_radians_per_unit
        # prime meridian longitudes in radians east of Greenwich
        self.source_meridian = source_meridian
        self.target_meridian = target_meridian

    @classmethod
    def between(cls, source: GeographicCoordinateSystem, target: GeographicCoordinateSystem) -> "GeographicTransform":
        return cls(
            source.angular_unit.radians_per_unit,
            target.angular_unit.radians_per_unit,
            source.prime_meridian.longitude_radians,
            target.prime_meridian.longitude_radians,
        )

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        lon = x * self.source_radians_per_unit + self.source_meridian - self.target_meridian
        lat = y * self.source_radians_per_unit
        return lon / self.target_radians_per_unit, lat / self.target_radians_per_unit, z

    def invert(self) -> "GeographicTransform":
        return GeographicTransform(
            self.target_radians_per_unit,
            self.source_radians_per_unit,
            self.target_meridian,
            self.source_meridian,
        )

    @property
    def is_identity(self) -> bool:
        # unit factors read from WKT often differ from pi/180 only in the last digits
        same_unit = math.isclose(self.source_radians_per_unit, self.target_radians_per_unit, rel_tol=1e-12)
        same_meridian = math.isclose(self.source_meridian, self.target_meridian, rel_tol=1e-12, abs_tol=1e-15)
        return same_unit and same_meridian

    @property
    def wkt(self) -> str:
        scale = self.source_radians_per_unit / self.target_radians_per_unit
        offset = (self.source_meridian - self.target_meridian) / self.target_radians_per_unit
        elements = {(0, 0): scale, (0, 2): offset, (1, 1): scale}
        parts = [quote("Affine"), f"PARAMETER[{quote('num_row')}, 3]", f"PARAMETER[{quote('num_col')}, 3]"]
        for (i, j), value in elements.items():
            if value != (1.0 if i == j else 0.0):
                parts.append(f"PARAMETER[{quote(f'elt_{i}_{j}')}, {format_number(value)}]")
        return f"PARAM_MT[{', '.join(parts)}]"

    def _key(self) -> tuple:
        return (
            self.source_radians_per_unit,
            self.target_radians_per_unit,
            self.source_meridian,
            self.target_meridian,
        )

    def __repr__(self) -> str:
        return f"GeographicTransform({self._key()!r})"


__all__ = ["GeographicTransform"]
