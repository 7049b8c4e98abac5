"""Cassini-Soldner, ellipsoidal series form (EPSG method 9806)."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.parameters import ProjectionParameterSet

from .base import MapProjection, adjust_lon

ONE_6TH = 1.0 / 6.0
ONE_120TH = 1.0 / 120.0
ONE_24TH = 1.0 / 24.0
ONE_3RD = 1.0 / 3.0
ONE_15TH = 1.0 / 15.0


class CassiniSoldner(MapProjection):
    canonical_name = "Cassini_Soldner"
    epsg_method = 9806

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        self.c_factor = self.es / (1.0 - self.es)
        self.m0 = self.mlfn(self.lat_origin, math.sin(self.lat_origin), math.cos(self.lat_origin))

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        lam = adjust_lon(lam - self.central_meridian)
        sinphi = math.sin(phi)
        cosphi = math.cos(phi)
        n = 1.0 / math.sqrt(1.0 - self.es * sinphi * sinphi)
        tn = math.tan(phi)
        t = tn * tn
        a1 = lam * cosphi
        a2 = a1 * a1
        c = self.c_factor * cosphi * cosphi

        x = n * a1 * (1.0 - a2 * t * (ONE_6TH - (8.0 - t + 8.0 * c) * a2 * ONE_120TH))
        y = self.mlfn(phi, sinphi, cosphi) - self.m0 + n * tn * a2 * (0.5 + (5.0 - t + 6.0 * c) * a2 * ONE_24TH)
        return x * self.semi_major, y * self.semi_major

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self.semi_major
        y /= self.semi_major
        # footpoint latitude
        phi1 = self.inv_mlfn(self.m0 + y)

        tn = math.tan(phi1)
        t = tn * tn
        s = math.sin(phi1)
        r = 1.0 / (1.0 - self.es * s * s)
        n = math.sqrt(r)
        r *= (1.0 - self.es) * n
        dd = x / n
        d2 = dd * dd

        phi = phi1 - (n * tn / r) * d2 * (0.5 - (1.0 + 3.0 * t) * d2 * ONE_24TH)
        lam = dd * (1.0 + t * d2 * (-ONE_3RD + (1.0 + 3.0 * t) * d2 * ONE_15TH)) / math.cos(phi1)
        return adjust_lon(lam + self.central_meridian), phi


__all__ = ["CassiniSoldner"]
