"""Lambert Azimuthal Equal Area, ellipsoidal and spherical forms.

The aspect (north pole, south pole, equatorial, oblique) is fixed by the
latitude of origin at construction time.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional, Tuple

from app.crs.errors import CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPS10, FORT_PI, HALF_PI, MapProjection, adjust_lon, authlat, authset, qsfn


class Aspect(Enum):
    N_POLE = "n_pole"
    S_POLE = "s_pole"
    EQUIT = "equit"
    OBLIQ = "obliq"


class LambertAzimuthalEqualArea(MapProjection):
    canonical_name = "Lambert_Azimuthal_Equal_Area"
    epsg_method = 9820

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        phi0 = self.lat_origin
        t = abs(phi0)
        if t > HALF_PI + EPS10:
            raise CrsError("Latitude of origin out of range")
        if abs(t - HALF_PI) < EPS10:
            self.aspect = Aspect.S_POLE if phi0 < 0.0 else Aspect.N_POLE
        elif t < EPS10:
            self.aspect = Aspect.EQUIT
        else:
            self.aspect = Aspect.OBLIQ

        self.spherical = self.es == 0.0
        self.sinb1 = self.cosb1 = 0.0
        self.dd = self.rq = self.xmf = self.ymf = 0.0
        if not self.spherical:
            self.one_es = 1.0 - self.es
            self.qp = qsfn(1.0, self.e, self.one_es)
            self.apa = authset(self.es)
            if self.aspect in (Aspect.N_POLE, Aspect.S_POLE):
                self.dd = 1.0
            elif self.aspect is Aspect.EQUIT:
                self.rq = math.sqrt(0.5 * self.qp)
                self.dd = 1.0 / self.rq
                self.xmf = 1.0
                self.ymf = 0.5 * self.qp
            else:
                self.rq = math.sqrt(0.5 * self.qp)
                sinphi = math.sin(phi0)
                self.sinb1 = qsfn(sinphi, self.e, self.one_es) / self.qp
                self.cosb1 = math.sqrt(1.0 - self.sinb1 * self.sinb1)
                self.dd = math.cos(phi0) / (math.sqrt(1.0 - self.es * sinphi * sinphi) * self.rq * self.cosb1)
                self.xmf = self.rq * self.dd
                self.ymf = self.rq / self.dd
        elif self.aspect is Aspect.OBLIQ:
            self.sinb1 = math.sin(phi0)
            self.cosb1 = math.cos(phi0)
        self._k = self.scale_factor * self.semi_major

    # -----------------------------
    # Forward
    # -----------------------------

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        lam = adjust_lon(lam - self.central_meridian)
        if self.spherical:
            x, y = self._spherical_forward(lam, phi)
        else:
            x, y = self._ellipsoidal_forward(lam, phi)
        return x * self._k, y * self._k

    def _ellipsoidal_forward(self, lam: float, phi: float) -> Tuple[float, float]:
        coslam = math.cos(lam)
        sinlam = math.sin(lam)
        q = qsfn(math.sin(phi), self.e, self.one_es)
        sinb = cosb = 0.0
        if self.aspect in (Aspect.OBLIQ, Aspect.EQUIT):
            sinb = q / self.qp
            cosb = math.sqrt(1.0 - sinb * sinb)

        if self.aspect is Aspect.OBLIQ:
            b = 1.0 + self.sinb1 * sinb + self.cosb1 * cosb * coslam
        elif self.aspect is Aspect.EQUIT:
            b = 1.0 + cosb * coslam
        elif self.aspect is Aspect.N_POLE:
            b = HALF_PI + phi
            q = self.qp - q
        else:
            b = phi - HALF_PI
            q = self.qp + q
        if abs(b) < EPS10:
            raise CrsError("Point projects to infinity")

        if self.aspect is Aspect.OBLIQ:
            b = math.sqrt(2.0 / b)
            y = self.ymf * b * (self.cosb1 * sinb - self.sinb1 * cosb * coslam)
            x = self.xmf * b * cosb * sinlam
        elif self.aspect is Aspect.EQUIT:
            b = math.sqrt(2.0 / (1.0 + cosb * coslam))
            y = b * sinb * self.ymf
            x = self.xmf * b * cosb * sinlam
        elif q >= 1e-15:
            b = math.sqrt(q)
            x = b * sinlam
            y = coslam * (b if self.aspect is Aspect.S_POLE else -b)
        else:
            x = y = 0.0
        return x, y

    def _spherical_forward(self, lam: float, phi: float) -> Tuple[float, float]:
        sinphi = math.sin(phi)
        cosphi = math.cos(phi)
        coslam = math.cos(lam)
        if self.aspect in (Aspect.EQUIT, Aspect.OBLIQ):
            if self.aspect is Aspect.EQUIT:
                y = 1.0 + cosphi * coslam
            else:
                y = 1.0 + self.sinb1 * sinphi + self.cosb1 * cosphi * coslam
            if y <= EPS10:
                raise CrsError("Point projects to infinity")
            y = math.sqrt(2.0 / y)
            x = y * cosphi * math.sin(lam)
            if self.aspect is Aspect.EQUIT:
                y *= sinphi
            else:
                y *= self.cosb1 * sinphi - self.sinb1 * cosphi * coslam
            return x, y

        if self.aspect is Aspect.N_POLE:
            coslam = -coslam
        if abs(phi + self.lat_origin) < EPS10:
            raise CrsError("Point projects to infinity")
        y = FORT_PI - phi * 0.5
        y = 2.0 * (math.cos(y) if self.aspect is Aspect.S_POLE else math.sin(y))
        return y * math.sin(lam), y * coslam

    # -----------------------------
    # Inverse
    # -----------------------------

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self._k
        y /= self._k
        if self.spherical:
            return self._spherical_inverse(x, y)
        return self._ellipsoidal_inverse(x, y)

    def _ellipsoidal_inverse(self, x: float, y: float) -> Tuple[float, float]:
        if self.aspect in (Aspect.EQUIT, Aspect.OBLIQ):
            x /= self.dd
            y *= self.dd
            rho = math.hypot(x, y)
            if rho < EPS10:
                return self.central_meridian, self.lat_origin
            s_ce = 2.0 * math.asin(0.5 * rho / self.rq)
            c_ce = math.cos(s_ce)
            s_ce = math.sin(s_ce)
            x *= s_ce
            if self.aspect is Aspect.OBLIQ:
                ab = c_ce * self.sinb1 + y * s_ce * self.cosb1 / rho
                y = rho * self.cosb1 * c_ce - y * self.sinb1 * s_ce
            else:
                ab = y * s_ce / rho
                y = rho * c_ce
        else:
            if self.aspect is Aspect.N_POLE:
                y = -y
            q = x * x + y * y
            if q == 0.0:
                return self.central_meridian, self.lat_origin
            ab = 1.0 - q / self.qp
            if self.aspect is Aspect.S_POLE:
                ab = -ab
        lam = adjust_lon(math.atan2(x, y) + self.central_meridian)
        return lam, authlat(math.asin(ab), self.apa)

    def _spherical_inverse(self, x: float, y: float) -> Tuple[float, float]:
        rh = math.hypot(x, y)
        phi = rh * 0.5
        if phi > 1.0:
            raise CrsError("Point outside the projection domain")
        phi = 2.0 * math.asin(phi)
        sinz = cosz = 0.0
        if self.aspect in (Aspect.OBLIQ, Aspect.EQUIT):
            sinz = math.sin(phi)
            cosz = math.cos(phi)

        if self.aspect is Aspect.EQUIT:
            phi = 0.0 if abs(rh) <= EPS10 else math.asin(y * sinz / rh)
            x *= sinz
            y = cosz * rh
        elif self.aspect is Aspect.OBLIQ:
            phi = self.lat_origin if abs(rh) <= EPS10 else math.asin(cosz * self.sinb1 + y * sinz * self.cosb1 / rh)
            x *= sinz * self.cosb1
            y = (cosz - math.sin(phi) * self.sinb1) * rh
        elif self.aspect is Aspect.N_POLE:
            y = -y
            phi = HALF_PI - phi
        else:
            phi -= HALF_PI

        if y == 0.0 and self.aspect in (Aspect.EQUIT, Aspect.OBLIQ):
            lam = 0.0
        else:
            lam = math.atan2(x, y)
        return adjust_lon(lam + self.central_meridian), phi


__all__ = ["Aspect", "LambertAzimuthalEqualArea"]
