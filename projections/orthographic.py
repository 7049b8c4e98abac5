"""Orthographic (EPSG method 9840), spherical and ellipsoidal forms.

Only the hemisphere facing the origin is projected; points on the far
side raise ``CrsError``. The ellipsoidal oblique inverse starts from the
spherical solution and refines it with Newton-Raphson steps.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPS10, HALF_PI, MapProjection, adjust_lon, sign
from .lambert_azimuthal import Aspect

NEWTON_ITERATIONS = 20
NEWTON_TOLERANCE = 1e-12


class Orthographic(MapProjection):
    canonical_name = "Orthographic"
    epsg_method = 9840

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        phi0 = self.lat_origin
        self.sinph0 = math.sin(phi0)
        self.cosph0 = math.cos(phi0)
        if abs(abs(phi0) - HALF_PI) <= EPS10:
            self.aspect = Aspect.S_POLE if phi0 < 0.0 else Aspect.N_POLE
        elif abs(phi0) > EPS10:
            self.aspect = Aspect.OBLIQ
        else:
            self.aspect = Aspect.EQUIT
        self.spherical = self.es == 0.0
        self.nu0 = self.y_shift = 0.0
        self.y_scale = 1.0
        if not self.spherical:
            self.nu0 = self.semi_major / math.sqrt(1.0 - self.es * self.sinph0 * self.sinph0)
            self.y_shift = self.es * self.nu0 / self.semi_major * self.sinph0 * self.cosph0
            self.y_scale = 1.0 / math.sqrt(1.0 - self.es * self.cosph0 * self.cosph0)

    def _far_side(self, lam: float, phi: float) -> CrsError:
        return CrsError(
            f"Coordinate ({math.degrees(lam):.3f}, {math.degrees(phi):.3f}) is on the unprojected hemisphere"
        )

    # -----------------------------
    # Forward
    # -----------------------------

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        dlam = adjust_lon(lam - self.central_meridian)
        sinphi = math.sin(phi)
        cosphi = math.cos(phi)
        coslam = math.cos(dlam)
        if self.sinph0 * sinphi + self.cosph0 * cosphi * coslam < -EPS10:
            raise self._far_side(lam, phi)
        if self.spherical:
            return self._spherical_forward(dlam, sinphi, cosphi, coslam)
        nu = self.semi_major / math.sqrt(1.0 - self.es * sinphi * sinphi)
        x = nu * cosphi * math.sin(dlam)
        y = nu * (sinphi * self.cosph0 - cosphi * self.sinph0 * coslam) + self.es * (
            self.nu0 * self.sinph0 - nu * sinphi
        ) * self.cosph0
        return x * self.scale_factor, y * self.scale_factor

    def _spherical_forward(self, dlam: float, sinphi: float, cosphi: float, coslam: float) -> Tuple[float, float]:
        a = self.semi_major * self.scale_factor
        if self.aspect is Aspect.EQUIT:
            y = sinphi
        elif self.aspect is Aspect.OBLIQ:
            y = self.cosph0 * sinphi - self.sinph0 * cosphi * coslam
        elif self.aspect is Aspect.N_POLE:
            y = -cosphi * coslam
        else:
            y = cosphi * coslam
        return a * cosphi * math.sin(dlam), a * y

    # -----------------------------
    # Inverse
    # -----------------------------

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self.scale_factor
        y /= self.scale_factor
        if self.spherical:
            lam, phi = self._spherical_inverse(x, y)
        else:
            lam, phi = self._ellipsoidal_inverse(x, y)
        return adjust_lon(lam + self.central_meridian), phi

    def _spherical_inverse(self, x: float, y: float) -> Tuple[float, float]:
        """Longitude relative to the central meridian and latitude, on the sphere of radius ``semi_major``."""
        a = self.semi_major
        rho = math.hypot(x, y)
        if rho > a:
            if rho - a > EPS10:
                raise CrsError(f"Point ({x:.3f}, {y:.3f}) is outside of the projection boundary")
            rho = a
        if rho <= EPS10:
            return 0.0, self.lat_origin
        sinc = rho / a
        cosc = math.sqrt(1.0 - sinc * sinc)
        if self.aspect is Aspect.N_POLE:
            return math.atan2(x, -y), math.asin(cosc)
        if self.aspect is Aspect.S_POLE:
            return math.atan2(x, y), -math.asin(cosc)
        if self.aspect is Aspect.EQUIT:
            phi = math.copysign(HALF_PI, y) if abs(y) >= a else math.asin(y / a)
            return math.atan2(x / a, cosc), phi
        phi = math.asin(max(-1.0, min(1.0, cosc * self.sinph0 + y * self.cosph0 / a)))
        return math.atan2(x * sinc, rho * self.cosph0 * cosc - y * self.sinph0 * sinc), phi

    def _ellipsoidal_inverse(self, x: float, y: float) -> Tuple[float, float]:
        es = self.es
        xs = x / self.semi_major
        ys = y / self.semi_major
        if self.aspect in (Aspect.N_POLE, Aspect.S_POLE):
            lam = math.atan2(x, -y * sign(self.lat_origin))
            rh2 = xs * xs + ys * ys
            if rh2 >= 1.0 - 1e-15:
                if rh2 - 1.0 > EPS10:
                    raise CrsError(f"Point ({x:.3f}, {y:.3f}) is outside of the projection boundary")
                return lam, 0.0
            return lam, math.acos(math.sqrt(rh2 * (1.0 - es) / (1.0 - es * rh2))) * sign(self.lat_origin)

        if self.aspect is Aspect.EQUIT:
            if xs * xs + (ys * self.semi_major / self.semi_minor) ** 2 > 1.0 + 1e-11:
                raise CrsError(f"Point ({x:.3f}, {y:.3f}) is outside of the projection boundary")
            sinphi2 = ys * ys / ((1.0 - es) ** 2 + ys * ys * es)
            if sinphi2 > 1.0 - 1e-11:
                return 0.0, HALF_PI * sign(ys)
            phi = math.asin(math.sqrt(sinphi2)) * sign(ys)
            sinlam = xs * math.sqrt((1.0 - es * sinphi2) / (1.0 - sinphi2))
            lam = HALF_PI * sign(xs) if abs(sinlam) - 1.0 > -1e-15 else math.asin(sinlam)
            return lam, phi

        if xs * xs + ys * ys > 1.0 + 1e-11:
            raise CrsError(f"Point ({x:.3f}, {y:.3f}) is outside of the projection boundary")
        lam, phi = self._spherical_inverse(x, (y - self.y_shift * self.semi_major) / self.y_scale)
        for _ in range(NEWTON_ITERATIONS):
            sinphi, cosphi = math.sin(phi), math.cos(phi)
            sinlam, coslam = math.sin(lam), math.cos(lam)
            w = 1.0 - es * sinphi * sinphi
            nu = self.semi_major / math.sqrt(w)
            rho = (1.0 - es) * nu / w
            x_new = nu * cosphi * sinlam
            y_new = nu * (sinphi * self.cosph0 - cosphi * self.sinph0 * coslam) + es * (
                self.nu0 * self.sinph0 - nu * sinphi
            ) * self.cosph0
            j11 = -rho * sinphi * sinlam
            j12 = nu * cosphi * coslam
            j21 = rho * (cosphi * self.cosph0 + sinphi * self.sinph0 * coslam)
            j22 = nu * self.sinph0 * cosphi * sinlam
            det = j11 * j22 - j12 * j21
            dx = x - x_new
            dy = y - y_new
            dphi = (j22 * dx - j12 * dy) / det
            dlam = (-j21 * dx + j11 * dy) / det
            phi = max(-HALF_PI, min(HALF_PI, phi + dphi))
            lam += dlam
            if abs(dphi) < NEWTON_TOLERANCE and abs(dlam) < NEWTON_TOLERANCE:
                break
        return lam, phi


__all__ = ["Orthographic"]
