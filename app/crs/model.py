"""Coordinate reference system value objects.

Every object here is a frozen dataclass: created by the WKT reader (or by the
well-known constants at the bottom of the module) and never mutated. ``==``
compares full structure including names and authority codes;
``equal_params()`` compares only what matters for transformation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from functools import cached_property
from typing import Any, Optional, Tuple

from .parameters import ProjectionParameterSet, normalize_name

SEC_TO_RAD = 4.84813681109535993589914102357e-6


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=1e-12, abs_tol=1e-15)


# -----------------------------
# Shared metadata
# -----------------------------


@dataclass(frozen=True, kw_only=True)
class Info:
    name: str = ""
    authority: str = ""
    authority_code: int = -1
    alias: str = ""
    abbreviation: str = ""
    remarks: str = ""

    @property
    def has_authority(self) -> bool:
        return bool(self.authority) and self.authority_code > 0

    @cached_property
    def wkt(self) -> str:
        from .wkt_writer import to_wkt

        return to_wkt(self)


# -----------------------------
# Units
# -----------------------------


@dataclass(frozen=True)
class AngularUnit(Info):
    radians_per_unit: float = math.pi / 180.0

    def __post_init__(self) -> None:
        if not self.radians_per_unit > 0:
            raise ValueError("Angular unit factor must be > 0")

    def equal_params(self, other: object) -> bool:
        return isinstance(other, AngularUnit) and _close(self.radians_per_unit, other.radians_per_unit)


@dataclass(frozen=True)
class LinearUnit(Info):
    meters_per_unit: float = 1.0

    def __post_init__(self) -> None:
        if not self.meters_per_unit > 0:
            raise ValueError("Linear unit factor must be > 0")

    def equal_params(self, other: object) -> bool:
        return isinstance(other, LinearUnit) and _close(self.meters_per_unit, other.meters_per_unit)


# -----------------------------
# Ellipsoid, prime meridian, datums
# -----------------------------


@dataclass(frozen=True)
class Ellipsoid(Info):
    semi_major: float = 6378137.0
    inverse_flattening: float = 0.0  # 0 means sphere
    axis_unit: LinearUnit = field(default_factory=lambda: METRE)

    def __post_init__(self) -> None:
        if not self.semi_major > 0:
            raise ValueError("Ellipsoid semi-major axis must be > 0")
        if self.inverse_flattening < 0:
            raise ValueError("Ellipsoid inverse flattening must be >= 0")

    @classmethod
    def from_semi_minor(cls, semi_major: float, semi_minor: float, **info: Any) -> "Ellipsoid":
        invf = 0.0 if semi_major == semi_minor else semi_major / (semi_major - semi_minor)
        return cls(semi_major=semi_major, inverse_flattening=invf, **info)

    @property
    def semi_minor(self) -> float:
        if self.inverse_flattening == 0:
            return self.semi_major
        return self.semi_major * (1.0 - 1.0 / self.inverse_flattening)

    @property
    def is_sphere(self) -> bool:
        return self.inverse_flattening == 0

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, Ellipsoid)
            and _close(self.semi_major, other.semi_major)
            and _close(self.inverse_flattening, other.inverse_flattening)
            and self.axis_unit.equal_params(other.axis_unit)
        )


@dataclass(frozen=True)
class PrimeMeridian(Info):
    longitude: float = 0.0
    angular_unit: AngularUnit = field(default_factory=lambda: DEGREE)

    @property
    def longitude_radians(self) -> float:
        return self.longitude * self.angular_unit.radians_per_unit

    def equal_params(self, other: object) -> bool:
        return isinstance(other, PrimeMeridian) and _close(self.longitude_radians, other.longitude_radians)


@dataclass(frozen=True)
class Wgs84ConversionInfo:
    """Bursa-Wolf parameters: translations in metres, rotations in arc-seconds, scale in ppm."""

    dx: float = 0.0
    dy: float = 0.0
    dz: float = 0.0
    ex: float = 0.0
    ey: float = 0.0
    ez: float = 0.0
    ppm: float = 0.0
    area_of_use: str = ""

    @property
    def has_zero_values_only(self) -> bool:
        return not any((self.dx, self.dy, self.dz, self.ex, self.ey, self.ez, self.ppm))

    def values(self) -> Tuple[float, ...]:
        return (self.dx, self.dy, self.dz, self.ex, self.ey, self.ez, self.ppm)

    def affine_vector(self) -> Tuple[float, ...]:
        """(scale, ex, ey, ez [radians], dx, dy, dz) as used by the Helmert transform."""
        return (
            1.0 + self.ppm * 1e-6,
            self.ex * SEC_TO_RAD,
            self.ey * SEC_TO_RAD,
            self.ez * SEC_TO_RAD,
            self.dx,
            self.dy,
            self.dz,
        )


class DatumType(IntEnum):
    HD_OTHER = 1000
    HD_CLASSIC = 1001
    HD_GEOCENTRIC = 1002
    VD_OTHER = 2000
    VD_ORTHOMETRIC = 2001
    VD_ELLIPSOIDAL = 2002
    VD_ALTITUDE_BAROMETRIC = 2003
    VD_NORMAL = 2004
    VD_GEOID_MODEL_DERIVED = 2005
    VD_DEPTH = 2006


@dataclass(frozen=True)
class HorizontalDatum(Info):
    ellipsoid: Ellipsoid = field(default_factory=lambda: WGS84_ELLIPSOID)
    towgs84: Optional[Wgs84ConversionInfo] = None
    datum_type: DatumType = DatumType.HD_GEOCENTRIC

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, HorizontalDatum)
            and self.ellipsoid.equal_params(other.ellipsoid)
            and self.towgs84 == other.towgs84
            and self.datum_type == other.datum_type
        )


@dataclass(frozen=True)
class VerticalDatum(Info):
    datum_type: DatumType = DatumType.VD_ORTHOMETRIC

    def equal_params(self, other: object) -> bool:
        return isinstance(other, VerticalDatum) and self.datum_type == other.datum_type


# -----------------------------
# Axes
# -----------------------------


class AxisOrientation(str, Enum):
    OTHER = "OTHER"
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class AxisInfo:
    name: str
    orientation: AxisOrientation


def _orientations(axes: Tuple[AxisInfo, ...]) -> Tuple[AxisOrientation, ...]:
    return tuple(a.orientation for a in axes)


# -----------------------------
# Projection
# -----------------------------


@dataclass(frozen=True)
class Projection(Info):
    class_name: str = ""
    parameters: ProjectionParameterSet = field(default_factory=ProjectionParameterSet)

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, Projection)
            and normalize_name(self.class_name) == normalize_name(other.class_name)
            and self.parameters == other.parameters
        )


# -----------------------------
# Coordinate systems
# -----------------------------


@dataclass(frozen=True)
class CoordinateSystem(Info):
    axes: Tuple[AxisInfo, ...] = ()

    @property
    def dimension(self) -> int:
        return len(self.axes)

    def equal_params(self, other: object) -> bool:  # pragma: no cover - overridden
        return self == other


@dataclass(frozen=True)
class GeographicCoordinateSystem(CoordinateSystem):
    angular_unit: AngularUnit = field(default_factory=lambda: DEGREE)
    datum: HorizontalDatum = field(default_factory=lambda: WGS84_DATUM)
    prime_meridian: PrimeMeridian = field(default_factory=lambda: GREENWICH)
    axes: Tuple[AxisInfo, ...] = (
        AxisInfo("Lon", AxisOrientation.EAST),
        AxisInfo("Lat", AxisOrientation.NORTH),
    )

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, GeographicCoordinateSystem)
            and self.angular_unit.equal_params(other.angular_unit)
            and self.datum.equal_params(other.datum)
            and self.prime_meridian.equal_params(other.prime_meridian)
            and _orientations(self.axes) == _orientations(other.axes)
        )


@dataclass(frozen=True)
class ProjectedCoordinateSystem(CoordinateSystem):
    geographic: GeographicCoordinateSystem = field(default_factory=lambda: WGS84)
    projection: Projection = field(default_factory=Projection)
    linear_unit: LinearUnit = field(default_factory=lambda: METRE)
    axes: Tuple[AxisInfo, ...] = (
        AxisInfo("X", AxisOrientation.EAST),
        AxisInfo("Y", AxisOrientation.NORTH),
    )

    @property
    def datum(self) -> HorizontalDatum:
        return self.geographic.datum

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, ProjectedCoordinateSystem)
            and self.geographic.equal_params(other.geographic)
            and self.linear_unit.equal_params(other.linear_unit)
            and self.projection.equal_params(other.projection)
            and _orientations(self.axes) == _orientations(other.axes)
        )


@dataclass(frozen=True)
class GeocentricCoordinateSystem(CoordinateSystem):
    datum: HorizontalDatum = field(default_factory=lambda: WGS84_DATUM)
    linear_unit: LinearUnit = field(default_factory=lambda: METRE)
    prime_meridian: PrimeMeridian = field(default_factory=lambda: GREENWICH)
    axes: Tuple[AxisInfo, ...] = (
        AxisInfo("Geocentric X", AxisOrientation.OTHER),
        AxisInfo("Geocentric Y", AxisOrientation.OTHER),
        AxisInfo("Geocentric Z", AxisOrientation.NORTH),
    )

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, GeocentricCoordinateSystem)
            and self.datum.equal_params(other.datum)
            and self.linear_unit.equal_params(other.linear_unit)
            and self.prime_meridian.equal_params(other.prime_meridian)
        )


@dataclass(frozen=True)
class VerticalCoordinateSystem(CoordinateSystem):
    datum: VerticalDatum = field(default_factory=VerticalDatum)
    linear_unit: LinearUnit = field(default_factory=lambda: METRE)
    axes: Tuple[AxisInfo, ...] = (AxisInfo("Up", AxisOrientation.UP),)

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, VerticalCoordinateSystem)
            and self.datum.equal_params(other.datum)
            and self.linear_unit.equal_params(other.linear_unit)
            and _orientations(self.axes) == _orientations(other.axes)
        )


@dataclass(frozen=True)
class FittedCoordinateSystem(CoordinateSystem):
    base: Optional[CoordinateSystem] = None
    to_base: Any = None  # MathTransform mapping fitted coordinates to the base system

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, FittedCoordinateSystem)
            and self.base is not None
            and self.base.equal_params(other.base)
            and self.to_base == other.to_base
        )


@dataclass(frozen=True)
class CompoundCoordinateSystem(CoordinateSystem):
    head: Optional[CoordinateSystem] = None
    tail: Optional[CoordinateSystem] = None

    @property
    def dimension(self) -> int:
        return (self.head.dimension if self.head else 0) + (self.tail.dimension if self.tail else 0)

    def equal_params(self, other: object) -> bool:
        return (
            isinstance(other, CompoundCoordinateSystem)
            and self.head is not None
            and self.tail is not None
            and self.head.equal_params(other.head)
            and self.tail.equal_params(other.tail)
        )


# -----------------------------
# Well-known definitions
# -----------------------------

METRE = LinearUnit(meters_per_unit=1.0, name="metre", authority="EPSG", authority_code=9001)
FOOT = LinearUnit(meters_per_unit=0.3048, name="foot", authority="EPSG", authority_code=9002)
US_SURVEY_FOOT = LinearUnit(
    meters_per_unit=0.304800609601219, name="US survey foot", authority="EPSG", authority_code=9003
)
DEGREE = AngularUnit(
    radians_per_unit=0.017453292519943295, name="degree", authority="EPSG", authority_code=9122
)
RADIAN = AngularUnit(radians_per_unit=1.0, name="radian", authority="EPSG", authority_code=9101)
GRAD = AngularUnit(radians_per_unit=math.pi / 200.0, name="grad", authority="EPSG", authority_code=9105)

GREENWICH = PrimeMeridian(longitude=0.0, name="Greenwich", authority="EPSG", authority_code=8901)

WGS84_ELLIPSOID = Ellipsoid(
    semi_major=6378137.0, inverse_flattening=298.257223563, name="WGS 84", authority="EPSG", authority_code=7030
)
GRS80 = Ellipsoid(
    semi_major=6378137.0, inverse_flattening=298.257222101, name="GRS 1980", authority="EPSG", authority_code=7019
)

WGS84_DATUM = HorizontalDatum(
    ellipsoid=WGS84_ELLIPSOID, name="WGS_1984", authority="EPSG", authority_code=6326
)

WGS84 = GeographicCoordinateSystem(
    angular_unit=DEGREE,
    datum=WGS84_DATUM,
    prime_meridian=GREENWICH,
    axes=(AxisInfo("Lon", AxisOrientation.EAST), AxisInfo("Lat", AxisOrientation.NORTH)),
    name="WGS 84",
    authority="EPSG",
    authority_code=4326,
)

WGS84_GEOCENTRIC = GeocentricCoordinateSystem(
    datum=WGS84_DATUM, linear_unit=METRE, prime_meridian=GREENWICH, name="WGS 84 Geocentric"
)

WEB_MERCATOR = ProjectedCoordinateSystem(
    geographic=WGS84,
    projection=Projection(
        class_name="Popular Visualisation Pseudo-Mercator",
        parameters=ProjectionParameterSet.from_pairs(
            [
                ("latitude_of_origin", 0.0),
                ("central_meridian", 0.0),
                ("false_easting", 0.0),
                ("false_northing", 0.0),
            ]
        ),
        name="Popular Visualisation Pseudo-Mercator",
        authority="EPSG",
        authority_code=3856,
    ),
    linear_unit=METRE,
    axes=(AxisInfo("East", AxisOrientation.EAST), AxisInfo("North", AxisOrientation.NORTH)),
    name="WGS 84 / Pseudo-Mercator",
    authority="EPSG",
    authority_code=3857,
    alias="WebMercator",
)


__all__ = [
    "SEC_TO_RAD",
    "Info",
    "AngularUnit",
    "LinearUnit",
    "Ellipsoid",
    "PrimeMeridian",
    "Wgs84ConversionInfo",
    "DatumType",
    "HorizontalDatum",
    "VerticalDatum",
    "AxisOrientation",
    "AxisInfo",
    "Projection",
    "CoordinateSystem",
    "GeographicCoordinateSystem",
    "ProjectedCoordinateSystem",
    "GeocentricCoordinateSystem",
    "VerticalCoordinateSystem",
    "FittedCoordinateSystem",
    "CompoundCoordinateSystem",
    "METRE",
    "FOOT",
    "US_SURVEY_FOOT",
    "DEGREE",
    "RADIAN",
    "GRAD",
    "GREENWICH",
    "WGS84_ELLIPSOID",
    "GRS80",
    "WGS84_DATUM",
    "WGS84",
    "WGS84_GEOCENTRIC",
    "WEB_MERCATOR",
]
