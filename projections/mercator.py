"""Mercator (1SP, 2SP) and the spherical Pseudo-Mercator used for web maps."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPSLN, HALF_PI, MapProjection, adjust_lon, msfnz, phi2z, tsfnz


class Mercator(MapProjection):
    """Ellipsoidal Mercator.

    With ``standard_parallel_1`` present the 2SP form is used and the scale
    factor is derived from that parallel; otherwise ``scale_factor`` applies.
    """

    canonical_name = "Mercator_1SP"
    epsg_method = 9804

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        std_parallel = parameters.find("standard_parallel_1")
        if std_parallel is not None:
            phi1 = math.radians(std_parallel.value)
            self.scale_factor = msfnz(self.e, math.sin(phi1), math.cos(phi1))
            self.epsg_method = 9805
        self._k = self.semi_major * self.scale_factor

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        if abs(abs(phi) - HALF_PI) <= EPSLN:
            raise CrsError("Transformation cannot be computed at the poles")
        x = self._k * adjust_lon(lam - self.central_meridian)
        y = -self._k * math.log(tsfnz(self.e, phi, math.sin(phi)))
        return x, y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        phi = phi2z(self.e, math.exp(-y / self._k))
        lam = adjust_lon(x / self._k + self.central_meridian)
        return lam, phi


class PseudoMercator(Mercator):
    """Mercator formulas evaluated on the sphere of radius ``semi_major``."""

    canonical_name = "Popular_Visualisation_Pseudo_Mercator"
    epsg_method = 1024

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        semi_major = parameters.value("semi_major")
        spherical = parameters.with_values(semi_minor=semi_major, scale_factor=1.0)
        super().__init__(spherical, name)
        # equality and WKT keep the parameters as written
        self.parameters = parameters


__all__ = ["Mercator", "PseudoMercator"]
