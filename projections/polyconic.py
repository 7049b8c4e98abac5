"""American Polyconic."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import ConvergenceError
from app.crs.parameters import ProjectionParameterSet

from .base import MapProjection, adjust_lon

EPSILON = 1e-10
MAX_ITERATIONS = 20
ITERATION_TOLERANCE = 1e-12


class Polyconic(MapProjection):
    canonical_name = "Polyconic"
    epsg_method = 9818

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        self.ml0 = self.mlfn(self.lat_origin, math.sin(self.lat_origin), math.cos(self.lat_origin))
        self._k = self.semi_major * self.scale_factor

    def _msfn(self, s: float, c: float) -> float:
        return c / math.sqrt(1.0 - s * s * self.es)

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        delta_lam = adjust_lon(lam - self.central_meridian)
        if abs(phi) <= EPSILON:
            x = delta_lam
            y = -self.ml0
        else:
            sp = math.sin(phi)
            cp = math.cos(phi)
            ms = self._msfn(sp, cp) / sp if abs(cp) > EPSILON else 0.0
            delta_lam *= sp
            x = ms * math.sin(delta_lam)
            y = self.mlfn(phi, sp, cp) - self.ml0 + ms * (1.0 - math.cos(delta_lam))
        return self._k * x, self._k * y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self._k
        y /= self._k
        y += self.ml0
        if abs(y) <= EPSILON:
            return adjust_lon(x + self.central_meridian), 0.0

        r = y * y + x * x
        phi = y
        for _ in range(MAX_ITERATIONS + 1):
            sp = math.sin(phi)
            cp = math.cos(phi)
            if abs(cp) < ITERATION_TOLERANCE:
                raise ConvergenceError("Polyconic inverse did not converge")
            s2ph = sp * cp
            mlp = math.sqrt(1.0 - self.es * sp * sp)
            c = sp * mlp / cp
            ml = self.mlfn(phi, sp, cp)
            mlb = ml * ml + r
            mlp = (1.0 - self.es) / (mlp * mlp * mlp)
            d_phi = (ml + ml + c * mlb - 2.0 * y * (c * ml + 1.0)) / (
                self.es * s2ph * (mlb - 2.0 * y * ml) / c
                + 2.0 * (y - ml) * (c * mlp - 1.0 / s2ph)
                - mlp
                - mlp
            )
            if abs(d_phi) <= ITERATION_TOLERANCE:
                break
            phi += d_phi
        else:
            raise ConvergenceError("Polyconic inverse did not converge")

        sin_phi = math.sin(phi)
        lam = math.asin(x * math.tan(phi) * math.sqrt(1.0 - self.es * sin_phi * sin_phi)) / sin_phi
        return adjust_lon(lam + self.central_meridian), phi


__all__ = ["Polyconic"]
