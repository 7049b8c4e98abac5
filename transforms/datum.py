"""Seven-parameter Helmert (Bursa-Wolf) shift between geocentric frames."""
from __future__ import annotations

from app.crs.model import Wgs84ConversionInfo
from app.crs.wkt_writer import format_number, quote

from .base import MathTransform, Point3

_WKT_NAMES = ("dx", "dy", "dz", "ex", "ey", "ez", "ppm")


class DatumTransform(MathTransform):
    """Forward maps the datum's geocentric frame to WGS84, using ``TOWGS84`` values.

    The inverse is the small-angle approximation: rotations and translations
    are negated and the scale becomes ``1 - ppm``.
    """

    dim_source = 3
    dim_target = 3

    def __init__(self, towgs84: Wgs84ConversionInfo, inverse: bool = False):
        self.towgs84 = towgs84
        self.inverse = inverse
        self._v = towgs84.affine_vector()

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        v = self._v
        if not self.inverse:
            return (
                v[0] * (x - v[3] * y + v[2] * z) + v[4],
                v[0] * (v[3] * x + y - v[1] * z) + v[5],
                v[0] * (-v[2] * x + v[1] * y + z) + v[6],
            )
        s = 1 - (v[0] - 1)
        return (
            s * (x + v[3] * y - v[2] * z) - v[4],
            s * (-v[3] * x + y + v[1] * z) - v[5],
            s * (v[2] * x - v[1] * y + z) - v[6],
        )

    def invert(self) -> "DatumTransform":
        return DatumTransform(self.towgs84, not self.inverse)

    @property
    def wkt(self) -> str:
        params = ", ".join(
            f"PARAMETER[{quote(name)}, {format_number(value)}]"
            for name, value in zip(_WKT_NAMES, self.towgs84.values())
        )
        body = f"PARAM_MT[{quote('Bursa_Wolf')}, {params}]"
        return f"INVERSE_MT[{body}]" if self.inverse else body

    def _key(self) -> tuple:
        return (self.towgs84.values(), self.inverse)

    def __repr__(self) -> str:
        return f"DatumTransform({self.towgs84.values()!r}, inverse={self.inverse})"


__all__ = ["DatumTransform"]
