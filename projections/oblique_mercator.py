"""Hotine Oblique Mercator, variants A (9812) and B (9815).

Variant A measures the rectified coordinates from the natural origin on the
equator of the aposphere; variant B (``Oblique_Mercator``) from the centre of
the projection, which drops the ``u`` offset along the initial line.
"""
from __future__ import annotations

import math
from typing import Optional, Tuple

from app.crs.errors import CrsError
from app.crs.parameters import ProjectionParameterSet

from .base import EPSLN, HALF_PI, PI, MapProjection, adjust_lon, asinz, phi2z, sign, tsfnz


class HotineObliqueMercator(MapProjection):
    canonical_name = "Hotine_Oblique_Mercator"
    epsg_method = 9812
    natural_origin_offsets = False

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        super().__init__(parameters, name)
        azimuth = math.radians(parameters.value("azimuth"))
        grid_angle = math.radians(parameters.optional("rectified_grid_angle", math.degrees(azimuth)))
        lat0 = self.lat_origin

        sin_p20, cos_p20 = math.sin(lat0), math.cos(lat0)
        con = 1.0 - self.es * sin_p20 * sin_p20
        com = math.sqrt(1.0 - self.es)
        self.bl = math.sqrt(1.0 + self.es * cos_p20 ** 4 / (1.0 - self.es))
        self.al = self.semi_major * self.bl * self.scale_factor * com / con

        if abs(lat0) < EPSLN:
            self.d = 1.0
            self.el = 1.0
            f = 1.0
        else:
            ts = tsfnz(self.e, lat0, sin_p20)
            con = math.sqrt(con)
            self.d = self.bl * com / (cos_p20 * con)
            if self.d * self.d - 1.0 > 0.0:
                root = math.sqrt(self.d * self.d - 1.0)
                f = self.d + root if lat0 >= 0.0 else self.d - root
            else:
                f = self.d
            self.el = f * ts ** self.bl

        g = 0.5 * (f - 1.0 / f)
        gama = asinz(math.sin(azimuth) / self.d)
        self.lon_origin = self.central_meridian - asinz(g * math.tan(gama)) / self.bl

        con = abs(lat0)
        if con <= EPSLN or abs(con - HALF_PI) <= EPSLN:
            raise CrsError("Oblique Mercator needs a latitude of centre off the equator and the poles")
        self.singam, self.cosgam = math.sin(gama), math.cos(gama)
        self.sinaz, self.cosaz = math.sin(azimuth), math.cos(azimuth)
        u = (self.al / self.bl) * math.atan(math.sqrt(self.d * self.d - 1.0) / self.cosaz)
        self.u = u if lat0 >= 0 else -u
        self.singrid, self.cosgrid = math.sin(grid_angle), math.cos(grid_angle)

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        dlon = adjust_lon(lam - self.lon_origin)
        vl = math.sin(self.bl * dlon)
        if abs(abs(phi) - HALF_PI) > EPSLN:
            ts1 = tsfnz(self.e, phi, math.sin(phi))
            q = self.el / ts1 ** self.bl
            s = 0.5 * (q - 1.0 / q)
            t = 0.5 * (q + 1.0 / q)
            ul = (s * self.singam - vl * self.cosgam) / t
            con = math.cos(self.bl * dlon)
            if abs(con) < 1e-7:
                us = self.al * self.bl * dlon
            else:
                us = self.al * math.atan((s * self.cosgam + vl * self.singam) / con) / self.bl
                if con < 0:
                    us += PI * self.al / self.bl
        else:
            ul = self.singam if phi >= 0 else -self.singam
            us = self.al * phi / self.bl

        if abs(abs(ul) - 1.0) <= EPSLN:
            raise CrsError("Point projects into infinity")
        vs = 0.5 * self.al * math.log((1.0 - ul) / (1.0 + ul)) / self.bl
        if not self.natural_origin_offsets:
            us -= self.u
        x = vs * self.cosgrid + us * self.singrid
        y = us * self.cosgrid - vs * self.singrid
        return x, y

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        vs = x * self.cosgrid - y * self.singrid
        us = y * self.cosgrid + x * self.singrid
        if not self.natural_origin_offsets:
            us += self.u
        q = math.exp(-self.bl * vs / self.al)
        s = 0.5 * (q - 1.0 / q)
        t = 0.5 * (q + 1.0 / q)
        vl = math.sin(self.bl * us / self.al)
        ul = (vl * self.cosgam + s * self.singam) / t
        if abs(abs(ul) - 1.0) <= EPSLN:
            return self.lon_origin, sign(ul) * HALF_PI

        ts1 = (self.el / math.sqrt((1.0 + ul) / (1.0 - ul))) ** (1.0 / self.bl)
        phi = phi2z(self.e, ts1)
        con = math.cos(self.bl * us / self.al)
        theta = self.lon_origin - math.atan2(s * self.cosgam - vl * self.singam, con) / self.bl
        return adjust_lon(theta), phi


class ObliqueMercator(HotineObliqueMercator):
    canonical_name = "Oblique_Mercator"
    epsg_method = 9815
    natural_origin_offsets = True


__all__ = ["HotineObliqueMercator", "ObliqueMercator"]
