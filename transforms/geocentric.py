"""Geographic (degrees, ellipsoidal height) <-> geocentric X/Y/Z (metres)."""
from __future__ import annotations

import math

from app.crs.wkt_writer import format_number, quote

from .base import MathTransform, Point3

COS_67P5 = 0.38268343236508977
AD_C = 1.0026000
LATITUDE_TOLERANCE = 1e-12
MAX_LATITUDE_ITERATIONS = 10


class GeocentricTransform(MathTransform):
    """Forward direction converts longitude/latitude/height to X/Y/Z.

    ``geographic_dim`` is the dimension of the geographic side (2 when the
    height is implicit); the geocentric side is always 3-D. The reverse
    direction uses Bowring's method with Toms' initial estimate, refined
    until successive latitudes agree to 1e-12 rad.
    """

    def __init__(self, semi_major: float, semi_minor: float, geographic_dim: int = 2, inverse: bool = False):
        self.semi_major = semi_major
        self.semi_minor = semi_minor
        self.geographic_dim = geographic_dim
        self.inverse = inverse
        self.es = 1.0 - (semi_minor * semi_minor) / (semi_major * semi_major)
        self.ses = (semi_major * semi_major - semi_minor * semi_minor) / (semi_minor * semi_minor)
        if inverse:
            self.dim_source, self.dim_target = 3, geographic_dim
        else:
            self.dim_source, self.dim_target = geographic_dim, 3

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        if self.inverse:
            return self._to_geographic(x, y, z)
        return self._to_geocentric(x, y, z)

    def _to_geocentric(self, lon: float, lat: float, h: float) -> Point3:
        lon = math.radians(lon)
        lat = math.radians(lat)
        h = 0.0 if math.isnan(h) else h
        v = self.semi_major / math.sqrt(1 - self.es * math.sin(lat) ** 2)
        x = (v + h) * math.cos(lat) * math.cos(lon)
        y = (v + h) * math.cos(lat) * math.sin(lon)
        z = ((1 - self.es) * v + h) * math.sin(lat)
        return x, y, z

    def _to_geographic(self, x: float, y: float, z: float) -> Point3:
        at_pole = False
        lat = 0.0
        if x != 0.0:
            lon = math.atan2(y, x)
        elif y > 0:
            lon = math.pi / 2
        elif y < 0:
            lon = -math.pi * 0.5
        else:
            at_pole = True
            lon = 0.0
            if z > 0.0:
                lat = math.pi * 0.5
            elif z < 0.0:
                lat = -math.pi * 0.5
            else:
                # centre of the earth
                return 0.0, 90.0, -self.semi_minor

        w2 = x * x + y * y
        w = math.sqrt(w2)
        t0 = z * AD_C
        s0 = math.sqrt(t0 * t0 + w2)
        sin_b0 = t0 / s0
        cos_b0 = w / s0
        t1 = z + self.semi_minor * self.ses * sin_b0 ** 3
        total = w - self.semi_major * self.es * cos_b0 * cos_b0 * cos_b0
        s1 = math.sqrt(t1 * t1 + total * total)
        sin_p1 = t1 / s1
        cos_p1 = total / s1
        if not at_pole:
            lat = self._refine_latitude(math.atan2(sin_p1, cos_p1), w, z)
            sin_p1, cos_p1 = math.sin(lat), math.cos(lat)
        rn = self.semi_major / math.sqrt(1.0 - self.es * sin_p1 * sin_p1)
        if cos_p1 >= COS_67P5:
            height = w / cos_p1 - rn
        elif cos_p1 <= -COS_67P5:
            height = w / -cos_p1 - rn
        else:
            height = z / sin_p1 + rn * (self.es - 1.0)
        return math.degrees(lon), math.degrees(lat), height

    def _refine_latitude(self, lat: float, w: float, z: float) -> float:
        """Fixed-point iteration on the Bowring estimate until the change is below 1e-12 rad."""
        for _ in range(MAX_LATITUDE_ITERATIONS):
            sin_lat = math.sin(lat)
            rn = self.semi_major / math.sqrt(1.0 - self.es * sin_lat * sin_lat)
            refined = math.atan2(z + rn * self.es * sin_lat, w)
            if abs(refined - lat) < LATITUDE_TOLERANCE:
                return refined
            lat = refined
        return lat

    def invert(self) -> "GeocentricTransform":
        return GeocentricTransform(self.semi_major, self.semi_minor, self.geographic_dim, not self.inverse)

    @property
    def wkt(self) -> str:
        body = (
            f"PARAM_MT[{quote('Ellipsoid_To_Geocentric')}, "
            f"PARAMETER[{quote('semi_major')}, {format_number(self.semi_major)}], "
            f"PARAMETER[{quote('semi_minor')}, {format_number(self.semi_minor)}]]"
        )
        return f"INVERSE_MT[{body}]" if self.inverse else body

    def _key(self) -> tuple:
        return (self.semi_major, self.semi_minor, self.geographic_dim, self.inverse)

    def __repr__(self) -> str:
        direction = "to_geographic" if self.inverse else "to_geocentric"
        return f"GeocentricTransform(a={self.semi_major!r}, b={self.semi_minor!r}, {direction})"


__all__ = ["GeocentricTransform"]
