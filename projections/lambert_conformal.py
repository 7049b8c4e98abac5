"""Lambert Conformal Conic, one and two standard parallel forms."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPSLN, HALF_PI, MapProjection, adjust_lon, msfnz, phi2z, tsfnz


class LambertConformalConic2SP(MapProjection):
    canonical_name = "Lambert_Conformal_Conic_2SP"
    epsg_method = 9802

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        lat1, lat2 = self._standard_parallels()
        if abs(lat1 + lat2) < EPSLN:
            raise CrsError("Equal latitudes for standard parallels on opposite sides of the equator")

        sin1, cos1 = math.sin(lat1), math.cos(lat1)
        ms1 = msfnz(self.e, sin1, cos1)
        ts1 = tsfnz(self.e, lat1, sin1)
        sin2, cos2 = math.sin(lat2), math.cos(lat2)
        ms2 = msfnz(self.e, sin2, cos2)
        ts2 = tsfnz(self.e, lat2, sin2)
        ts0 = tsfnz(self.e, self.lat_origin, math.sin(self.lat_origin))

        if abs(lat1 - lat2) > EPSLN:
            self.ns = math.log(ms1 / ms2) / math.log(ts1 / ts2)
        else:
            self.ns = sin1
        self.f0 = ms1 / (self.ns * ts1 ** self.ns) * self._scale()
        self.rh = self.semi_major * self.f0 * ts0 ** self.ns

    def _standard_parallels(self) -> Tuple[float, float]:
        p = self.parameters
        return (
            math.radians(p.value("standard_parallel_1")),
            math.radians(p.value("standard_parallel_2")),
        )

    def _scale(self) -> float:
        return 1.0

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        if abs(abs(phi) - HALF_PI) > EPSLN:
            ts = tsfnz(self.e, phi, math.sin(phi))
            rh1 = self.semi_major * self.f0 * ts ** self.ns
        else:
            if phi * self.ns <= 0:
                raise CrsError("Point cannot be projected")
            rh1 = 0.0
        theta = self.ns * adjust_lon(lam - self.central_meridian)
        return rh1 * math.sin(theta), self.rh - rh1 * math.cos(theta)

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        dx = x
        dy = self.rh - y
        if self.ns > 0:
            rh1 = math.sqrt(dx * dx + dy * dy)
            con = 1.0
        else:
            rh1 = -math.sqrt(dx * dx + dy * dy)
            con = -1.0
        theta = 0.0
        if rh1 != 0:
            theta = math.atan2(con * dx, con * dy)
        if rh1 != 0 or self.ns > 0.0:
            ts = (rh1 / (self.semi_major * self.f0)) ** (1.0 / self.ns)
            phi = phi2z(self.e, ts)
        else:
            phi = -HALF_PI
        return adjust_lon(theta / self.ns + self.central_meridian), phi


class LambertConformalConic1SP(LambertConformalConic2SP):
    """Single tangent parallel at the latitude of origin, scaled by ``scale_factor``."""

    canonical_name = "Lambert_Conformal_Conic_1SP"
    epsg_method = 9801

    def _standard_parallels(self) -> Tuple[float, float]:
        return self.lat_origin, self.lat_origin

    def _scale(self) -> float:
        return self.scale_factor


__all__ = ["LambertConformalConic2SP", "LambertConformalConic1SP"]
