"""Albers Equal-Area Conic."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import ConvergenceError, CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import MapProjection

_TOLERANCE = 1e-6
_MAX_ITER = 25


class AlbersConicEqualArea(MapProjection):
    canonical_name = "Albers_Conic_Equal_Area"
    epsg_method = 9822

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        lat1 = math.radians(parameters.value("standard_parallel_1"))
        lat2 = math.radians(parameters.value("standard_parallel_2"))
        if abs(lat1 + lat2) < 5e-324:
            raise CrsError("Equal latitudes for standard parallels on opposite sides of the equator")

        alpha1 = self._alpha(lat1)
        alpha2 = self._alpha(lat2)
        m1 = math.cos(lat1) / math.sqrt(1 - self.es * math.sin(lat1) ** 2)
        m2 = math.cos(lat2) / math.sqrt(1 - self.es * math.sin(lat2) ** 2)
        self.n = (m1 * m1 - m2 * m2) / (alpha2 - alpha1)
        self.c = m1 * m1 + self.n * alpha1
        self.ro0 = self._ro(self._alpha(self.lat_origin))

    def _alpha(self, lat: float) -> float:
        sin = math.sin(lat)
        return (1 - self.es) * (
            sin / (1 - self.es * sin * sin)
            - 1 / (2 * self.e) * math.log((1 - self.e * sin) / (1 + self.e * sin))
        )

    def _ro(self, a: float) -> float:
        return self.semi_major * math.sqrt(self.c - self.n * a) / self.n

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        ro = self._ro(self._alpha(phi))
        theta = self.n * (lam - self.central_meridian)
        return ro * math.sin(theta), self.ro0 - ro * math.cos(theta)

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        theta = math.atan(x / (self.ro0 - y))
        ro = math.hypot(x, self.ro0 - y)
        q = (self.c - ro * ro * self.n * self.n / (self.semi_major * self.semi_major)) / self.n
        lat = math.asin(q * 0.5)
        previous = math.inf
        iterations = 0
        while abs(lat - previous) > _TOLERANCE:
            previous = lat
            sin = math.sin(lat)
            e2sin2 = self.es * sin * sin
            lat += (1 - e2sin2) ** 2 / (2 * math.cos(lat)) * (
                q / (1 - self.es)
                - sin / (1 - e2sin2)
                + 1 / (2 * self.e) * math.log((1 - self.e * sin) / (1 + self.e * sin))
            )
            iterations += 1
            if iterations > _MAX_ITER:
                raise ConvergenceError("Albers inverse failed to converge")
        return self.central_meridian + theta / self.n, lat


__all__ = ["AlbersConicEqualArea"]
