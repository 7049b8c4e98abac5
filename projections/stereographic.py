"""Stereographic projections.

``ObliqueStereographic`` is the double projection (ellipsoid to conformal
sphere, then sphere to plane) of EPSG method 9809, used for example by the
Dutch RD grid. ``PolarStereographic`` is EPSG method 9810 (variant A); a
latitude of origin other than +/-90 degrees acts as the latitude of true
scale.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import ConvergenceError, CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPS10, FORT_PI, HALF_PI, MapProjection, adjust_lon

ITERATION_TOLERANCE = 1e-14
MAX_ITERATIONS = 15


def _srat(esinp: float, exp: float) -> float:
    return ((1.0 - esinp) / (1.0 + esinp)) ** exp


class ObliqueStereographic(MapProjection):
    canonical_name = "Oblique_Stereographic"
    epsg_method = 9809

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        phi0 = self.lat_origin
        sphi = math.sin(phi0)
        cphi = math.cos(phi0) ** 2
        self.r2 = 2.0 * math.sqrt(1.0 - self.es) / (1.0 - self.es * sphi * sphi)
        self.c = math.sqrt(1.0 + self.es * cphi * cphi / (1.0 - self.es))
        # conformal latitude of the origin
        self.phic0 = math.asin(sphi / self.c)
        self.sinc0 = math.sin(self.phic0)
        self.cosc0 = math.cos(self.phic0)
        self.ratexp = 0.5 * self.c * self.e
        self.k = math.tan(0.5 * self.phic0 + FORT_PI) / (
            math.tan(0.5 * phi0 + FORT_PI) ** self.c * _srat(self.e * sphi, self.ratexp)
        )
        self._scale = self.scale_factor * self.semi_major

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        lam = adjust_lon(lam - self.central_meridian) * self.c
        conformal = self.k * math.tan(0.5 * phi + FORT_PI) ** self.c * _srat(self.e * math.sin(phi), self.ratexp)
        chi = 2.0 * math.atan(conformal) - HALF_PI
        sinc = math.sin(chi)
        cosc = math.cos(chi)
        cosl = math.cos(lam)
        denom = 1.0 + self.sinc0 * sinc + self.cosc0 * cosc * cosl
        if denom < EPS10:
            raise CrsError("Point projects to infinity")
        k = self.r2 / denom
        return k * cosc * math.sin(lam) * self._scale, k * (self.cosc0 * sinc - self.sinc0 * cosc * cosl) * self._scale

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self._scale
        y /= self._scale
        rho = math.hypot(x, y)
        if rho < 1e-6:
            lam = 0.0
            chi = self.phic0
        else:
            ce = 2.0 * math.atan2(rho, self.r2)
            sinc = math.sin(ce)
            cosc = math.cos(ce)
            lam = math.atan2(x * sinc, rho * self.cosc0 * cosc - y * self.sinc0 * sinc)
            chi = math.asin(max(-1.0, min(1.0, cosc * self.sinc0 + y * sinc * self.cosc0 / rho)))

        lam /= self.c
        num = (math.tan(0.5 * chi + FORT_PI) / self.k) ** (1.0 / self.c)
        phi = chi
        for _ in range(MAX_ITERATIONS + 1):
            refined = 2.0 * math.atan(num * _srat(self.e * math.sin(phi), -0.5 * self.e)) - HALF_PI
            if abs(refined - phi) < ITERATION_TOLERANCE:
                return adjust_lon(lam + self.central_meridian), refined
            phi = refined
        raise ConvergenceError("Oblique stereographic inverse did not converge")


class PolarStereographic(MapProjection):
    canonical_name = "Polar_Stereographic"
    epsg_method = 9810

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        if self.e == 0.0:
            raise CrsError("Polar stereographic needs an ellipsoid, not a sphere")
        self.north = self.lat_origin > 0.0
        phits = abs(self.lat_origin)
        if abs(phits - HALF_PI) < EPS10:
            one_p_e = 1.0 + self.e
            one_m_e = 1.0 - self.e
            self.akm1 = 2.0 / math.sqrt(one_p_e ** one_p_e * one_m_e ** one_m_e)
        else:
            sinphits = math.sin(phits)
            cosphits = math.cos(phits)
            t = self.e * sinphits
            self.akm1 = cosphits / self._tsfn(cosphits, sinphits) / math.sqrt(1.0 - t * t)
        self._scale = self.scale_factor * self.semi_major

    def _tsfn(self, cosphi: float, sinphi: float) -> float:
        t = cosphi / (1.0 + sinphi) if sinphi > 0.0 else (1.0 - sinphi) / cosphi
        return math.exp(self.e * math.atanh(self.e * sinphi)) * t

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        lam = adjust_lon(lam - self.central_meridian)
        coslam = math.cos(lam)
        sinlam = math.sin(lam)
        if not self.north:
            phi = -phi
            coslam = -coslam
        if abs(phi - HALF_PI) < 1e-15:
            rho = 0.0
        else:
            rho = self.akm1 * self._tsfn(math.cos(phi), math.sin(phi))
        return rho * sinlam * self._scale, -rho * coslam * self._scale

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self._scale
        y /= self._scale
        if self.north:
            y = -y
        tp = -math.hypot(x, y) / self.akm1
        half_e = -0.5 * self.e
        phi = HALF_PI - 2.0 * math.atan(tp)
        for _ in range(MAX_ITERATIONS + 1):
            sinphi = self.e * math.sin(phi)
            refined = 2.0 * math.atan(tp * ((1.0 + sinphi) / (1.0 - sinphi)) ** half_e) + HALF_PI
            if abs(phi - refined) < ITERATION_TOLERANCE:
                break
            phi = refined
        else:
            raise ConvergenceError("Polar stereographic inverse did not converge")
        if not self.north:
            refined = -refined
        lam = 0.0 if x == 0.0 and y == 0.0 else math.atan2(x, y)
        return adjust_lon(lam + self.central_meridian), refined


__all__ = ["ObliqueStereographic", "PolarStereographic"]
