"""Shared projection machinery.

``MapProjection`` is the capability every projection implements:
``forward(lam, phi) -> (x, y)`` and ``inverse(x, y) -> (lam, phi)``, both in
radians and metres relative to the natural origin (false easting/northing and
unit scaling are applied by ``transforms.projection.ProjectionTransform``).

The helper functions follow the GCTP/PROJ naming (msfnz, tsfnz, phi2z, ...),
which is how the formulas are usually cited.
"""
from __future__ import annotations

import math
from typing import ClassVar, List, Optional, Tuple

from app.crs.errors import ConvergenceError
from app.crs.parameters import ProjectionParameterSet

PI = math.pi
HALF_PI = PI * 0.5
FORT_PI = PI * 0.25
TWO_PI = PI * 2.0
EPSLN = 1e-10
EPS7 = 1e-7
EPS10 = 1e-10

_MAX_LONG = 2147483647
_DBL_LONG = 4.61168601e18

# meridian distance coefficients
C00 = 1.0
C02 = 0.25
C04 = 0.046875
C06 = 0.01953125
C08 = 0.01068115234375
C22 = 0.75
C44 = 0.46875
C46 = 0.01302083333333333333
C48 = 0.00712076822916666666
C66 = 0.36458333333333333333
C68 = 0.00569661458333333333
C88 = 0.3076171875

# authalic latitude series
P00 = 0.33333333333333333333
P01 = 0.17222222222222222222
P02 = 0.10257936507936507937
P10 = 0.06388888888888888888
P11 = 0.06640211640211640212
P20 = 0.01677689594356261023


# -----------------------------
# Helper functions
# -----------------------------


def sign(x: float) -> float:
    return -1.0 if x < 0.0 else 1.0


def adjust_lon(x: float) -> float:
    """Wrap a longitude in radians into [-pi, pi]."""
    count = 0
    while abs(x) > PI:
        if int(abs(x / PI)) < 2:
            x -= sign(x) * TWO_PI
        elif int(abs(x / TWO_PI)) < _MAX_LONG:
            x -= int(x / TWO_PI) * TWO_PI
        elif int(abs(x / (_MAX_LONG * TWO_PI))) < _MAX_LONG:
            x -= int(x / (_MAX_LONG * TWO_PI)) * (TWO_PI * _MAX_LONG)
        elif int(abs(x / (_DBL_LONG * TWO_PI))) < _MAX_LONG:
            x -= int(x / (_DBL_LONG * TWO_PI)) * (TWO_PI * _DBL_LONG)
        else:
            x -= sign(x) * TWO_PI
        count += 1
        if count > 4:
            break
    return x


def asinz(con: float) -> float:
    return math.asin(max(-1.0, min(1.0, con)))


def msfnz(eccent: float, sinphi: float, cosphi: float) -> float:
    con = eccent * sinphi
    return cosphi / math.sqrt(1.0 - con * con)


def qsfnz(eccent: float, sinphi: float) -> float:
    if eccent > 1.0e-7:
        con = eccent * sinphi
        return (1.0 - eccent * eccent) * (
            sinphi / (1.0 - con * con) - (0.5 / eccent) * math.log((1.0 - con) / (1.0 + con))
        )
    return 2.0 * sinphi


def qsfn(sinphi: float, eccent: float, one_es: float) -> float:
    if eccent >= EPS7:
        con = eccent * sinphi
        div1 = 1.0 - con * con
        div2 = 1.0 + con
        if div1 == 0.0 or div2 == 0.0:
            return math.nan
        return one_es * (sinphi / div1 - (0.5 / eccent) * math.log((1.0 - con) / div2))
    return sinphi + sinphi


def tsfnz(eccent: float, phi: float, sinphi: float) -> float:
    con = eccent * sinphi
    com = 0.5 * eccent
    con = ((1.0 - con) / (1.0 + con)) ** com
    return math.tan(0.5 * (HALF_PI - phi)) / con


def phi2z(eccent: float, ts: float) -> float:
    """Latitude from the isometric quantity ``ts`` (15 iterations, tol 1e-10)."""
    eccnth = 0.5 * eccent
    chi = HALF_PI - 2.0 * math.atan(ts)
    for _ in range(16):
        sinpi = math.sin(chi)
        con = eccent * sinpi
        dphi = HALF_PI - 2.0 * math.atan(ts * ((1.0 - con) / (1.0 + con)) ** eccnth) - chi
        chi += dphi
        if abs(dphi) <= 1e-10:
            return chi
    raise ConvergenceError("phi2z did not converge")


def authset(es: float) -> Tuple[float, float, float]:
    t = es * es
    a0 = es * P00 + t * P01
    a1 = t * P10
    t *= es
    a0 += t * P02
    a1 += t * P11
    a2 = t * P20
    return a0, a1, a2


def authlat(beta: float, apa: Tuple[float, float, float]) -> float:
    t = beta + beta
    return beta + apa[0] * math.sin(t) + apa[1] * math.sin(t + t) + apa[2] * math.sin(t + t + t)


def eccentricity_squared(semi_major: float, semi_minor: float) -> float:
    f = (semi_major - semi_minor) / semi_major
    return 2.0 * f - f * f


# -----------------------------
# Base class
# -----------------------------


class MapProjection:
    """Projection parameterised by a ``ProjectionParameterSet``.

    The set must carry ``semi_major`` and ``semi_minor`` (metres) and
    ``unit`` (metres per projected unit); the transformation factory adds
    those from the enclosing coordinate system. Angular parameters are in
    degrees, false easting/northing in projected units.
    """

    canonical_name: ClassVar[str] = ""
    epsg_method: ClassVar[int] = -1

    def __init__(self, parameters: ProjectionParameterSet, name: Optional[str] = None):
        self.parameters = parameters
        self.name = name or self.canonical_name
        p = parameters
        self.semi_major = p.value("semi_major")
        self.semi_minor = p.value("semi_minor")
        self.es = eccentricity_squared(self.semi_major, self.semi_minor)
        self.e = math.sqrt(self.es)
        self.scale_factor = p.optional("scale_factor", 1.0)
        self.central_meridian = math.radians(p.value("central_meridian", "longitude_of_center"))
        self.lat_origin = math.radians(p.optional("latitude_of_origin", 0.0, "latitude_of_center"))
        self.meters_per_unit = p.optional("unit", 1.0)
        self.false_easting = p.optional("false_easting", 0.0) * self.meters_per_unit
        self.false_northing = p.optional("false_northing", 0.0) * self.meters_per_unit

        es = self.es
        self.en0 = C00 - es * (C02 + es * (C04 + es * (C06 + es * C08)))
        self.en1 = es * (C22 - es * (C04 + es * (C06 + es * C08)))
        t = es * es
        self.en2 = t * (C44 - es * (C46 + es * C48))
        t *= es
        self.en3 = t * (C66 - es * C68)
        self.en4 = t * es * C88

    # -- capability -------------------------------------------------

    def forward(self, lam: float, phi: float) -> Tuple[float, float]:
        raise NotImplementedError

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        raise NotImplementedError

    # -- meridian distance ------------------------------------------

    def mlfn(self, phi: float, sphi: float, cphi: float) -> float:
        cphi *= sphi
        sphi *= sphi
        return self.en0 * phi - cphi * (self.en1 + sphi * (self.en2 + sphi * (self.en3 + sphi * self.en4)))

    def inv_mlfn(self, arg: float) -> float:
        k = 1.0 / (1.0 - self.es)
        phi = arg
        for _ in range(20):
            s = math.sin(phi)
            t = 1.0 - self.es * s * s
            t = (self.mlfn(phi, s, math.cos(phi)) - arg) * (t * math.sqrt(t)) * k
            phi -= t
            if abs(t) < 1e-11:
                return phi
        raise ConvergenceError("inv_mlfn did not converge")

    # -- identity ---------------------------------------------------

    def _key(self):
        return (type(self), self.parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MapProjection):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def parameter_names(projection: MapProjection) -> List[str]:
    return [p.name for p in projection.parameters]


__all__ = [
    "PI",
    "HALF_PI",
    "FORT_PI",
    "TWO_PI",
    "EPSLN",
    "EPS10",
    "sign",
    "adjust_lon",
    "asinz",
    "msfnz",
    "qsfnz",
    "qsfn",
    "tsfnz",
    "phi2z",
    "authset",
    "authlat",
    "eccentricity_squared",
    "MapProjection",
]
