"""Krovak oblique conformal conic (Czech/Slovak S-JTSK)."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.parameters import ProjectionParameterSet

from .base import MapProjection

MAX_ITERATIONS = 15
ITERATION_TOLERANCE = 1e-11
S45 = 0.785398163397448  # 45 degrees


class Krovak(MapProjection):
    """Output axes are southing/westing, both negative over the area of use."""

    canonical_name = "Krovak"
    epsg_method = 9819

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        azimuth = math.radians(parameters.value("azimuth"))
        pseudo_parallel = math.radians(parameters.value("pseudo_standard_parallel_1"))

        self.sin_azim = math.sin(azimuth)
        self.cos_azim = math.cos(azimuth)
        self.n = math.sin(pseudo_parallel)
        self.tan_s2 = math.tan(pseudo_parallel / 2 + S45)

        sin_lat = math.sin(self.lat_origin)
        cos_lat = math.cos(self.lat_origin)
        cos_l2 = cos_lat * cos_lat
        self.alfa = math.sqrt(1 + (self.es * (cos_l2 * cos_l2)) / (1 - self.es))
        self.hae = self.alfa * self.e / 2
        u0 = math.asin(sin_lat / self.alfa)
        esl = self.e * sin_lat
        g = ((1 - esl) / (1 + esl)) ** (self.alfa * self.e / 2)
        self.k1 = math.tan(self.lat_origin / 2 + S45) ** self.alfa * g / math.tan(u0 / 2 + S45)
        self.ka = (1 / self.k1) ** (-1 / self.alfa)
        radius = math.sqrt(1 - self.es) / (1 - self.es * sin_lat * sin_lat)
        self.ro0 = self.scale_factor * radius / math.tan(pseudo_parallel)
        self.rop = self.ro0 * self.tan_s2 ** self.n

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        lam -= self.central_meridian
        esp = self.e * math.sin(phi)
        gfi = ((1.0 - esp) / (1.0 + esp)) ** self.hae
        u = 2 * (math.atan(math.tan(phi / 2 + S45) ** self.alfa / self.k1 * gfi) - S45)
        deltav = -lam * self.alfa
        cos_u = math.cos(u)
        s = math.asin(self.cos_azim * math.sin(u) + self.sin_azim * cos_u * math.cos(deltav))
        d = math.asin(cos_u * math.sin(deltav) / math.cos(s))
        eps = self.n * d
        ro = self.rop / math.tan(s / 2 + S45) ** self.n
        return -(ro * math.sin(eps)) * self.semi_major, -(ro * math.cos(eps)) * self.semi_major

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self.semi_major
        y /= self.semi_major
        ro = math.hypot(x, y)
        eps = math.atan2(-x, -y)
        d = eps / self.n
        s = 2 * (math.atan((self.ro0 / ro) ** (1 / self.n) * self.tan_s2) - S45)
        cs = math.cos(s)
        u = math.asin(self.cos_azim * math.sin(s) - self.sin_azim * cs * math.cos(d))
        kau = self.ka * math.tan(u / 2.0 + S45) ** (1 / self.alfa)
        deltav = math.asin(cs * math.sin(d) / math.cos(u))
        lam = -deltav / self.alfa

        # no error after MAX_ITERATIONS, the last estimate is returned
        phi = 0.0
        for _ in range(MAX_ITERATIONS + 1):
            previous = phi
            esf = self.e * math.sin(previous)
            phi = 2.0 * (math.atan(kau * ((1.0 + esf) / (1.0 - esf)) ** (self.e / 2.0)) - S45)
            if abs(previous - phi) <= ITERATION_TOLERANCE:
                break
        return lam + self.central_meridian, phi


__all__ = ["Krovak"]
