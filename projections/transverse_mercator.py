"""Transverse Mercator (Gauss-Krüger) and its south-orientated variant.

Series expansion to the eighth order in the longitude difference, accurate
well beyond a standard 6 degree UTM zone.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.parameters import ProjectionParameterSet

from .base import HALF_PI, MapProjection, adjust_lon

EPSILON = 1.0e-6

FC1 = 1.0
FC2 = 0.5
FC3 = 0.16666666666666666666
FC4 = 0.08333333333333333333
FC5 = 0.05
FC6 = 0.03333333333333333333
FC7 = 0.02380952380952380952
FC8 = 0.01785714285714285714


class TransverseMercator(MapProjection):
    canonical_name = "Transverse_Mercator"
    epsg_method = 9807

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        self.esp = self.es / (1.0 - self.es)
        self.ml0 = self.mlfn(self.lat_origin, math.sin(self.lat_origin), math.cos(self.lat_origin))

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        x = adjust_lon(lam - self.central_meridian)
        sinphi = math.sin(phi)
        cosphi = math.cos(phi)

        t = sinphi / cosphi if abs(cosphi) > EPSILON else 0.0
        t *= t
        al = cosphi * x
        als = al * al
        al /= math.sqrt(1.0 - self.es * sinphi * sinphi)
        n = self.esp * cosphi * cosphi

        y = self.mlfn(phi, sinphi, cosphi) - self.ml0 + sinphi * al * x * FC2 * (
            1.0
            + FC4
            * als
            * (
                5.0
                - t
                + n * (9.0 + 4.0 * n)
                + FC6
                * als
                * (
                    61.0
                    + t * (t - 58.0)
                    + n * (270.0 - 330.0 * t)
                    + FC8 * als * (1385.0 + t * (t * (543.0 - t) - 3111.0))
                )
            )
        )
        x = al * (
            FC1
            + FC3
            * als
            * (
                1.0
                - t
                + n
                + FC5
                * als
                * (
                    5.0
                    + t * (t - 18.0)
                    + n * (14.0 - 58.0 * t)
                    + FC7 * als * (61.0 + t * (t * (179.0 - t) - 479.0))
                )
            )
        )
        k = self.scale_factor * self.semi_major
        return k * x, k * y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        x /= self.semi_major
        y /= self.semi_major
        phi = self.inv_mlfn(self.ml0 + y / self.scale_factor)

        if abs(phi) >= HALF_PI:
            return self.central_meridian, math.copysign(HALF_PI, y)

        sinphi = math.sin(phi)
        cosphi = math.cos(phi)
        t = sinphi / cosphi if abs(cosphi) > EPSILON else 0.0
        n = self.esp * cosphi * cosphi
        con = 1.0 - self.es * sinphi * sinphi
        d = x * math.sqrt(con) / self.scale_factor
        con *= t
        t *= t
        ds = d * d

        lat = phi - (con * ds / (1.0 - self.es)) * FC2 * (
            1.0
            - ds
            * FC4
            * (
                5.0
                + t * (3.0 - 9.0 * n)
                + n * (1.0 - 4.0 * n)
                - ds
                * FC6
                * (
                    61.0
                    + t * (90.0 - 252.0 * n + 45.0 * t)
                    + 46.0 * n
                    - ds * FC8 * (1385.0 + t * (3633.0 + t * (4095.0 + 1574.0 * t)))
                )
            )
        )
        lam = adjust_lon(
            self.central_meridian
            + d
            * (
                FC1
                - ds
                * FC3
                * (
                    1.0
                    + 2.0 * t
                    + n
                    - ds
                    * FC5
                    * (
                        5.0
                        + t * (28.0 + 24.0 * t + 8.0 * n)
                        + 6.0 * n
                        - ds * FC7 * (61.0 + t * (662.0 + t * (1320.0 + 720.0 * t)))
                    )
                )
            )
            / cosphi
        )
        return lam, lat


class TransverseMercatorSouthOrientated(TransverseMercator):
    """Axes point west and south; the formulas are the same with both signs flipped."""

    canonical_name = "Transverse_Mercator_South_Orientated"
    epsg_method = 9808

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        x, y = super().forward(lam, phi)
        return -x, -y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        return super().inverse(-x, -y)


__all__ = ["TransverseMercator", "TransverseMercatorSouthOrientated"]
