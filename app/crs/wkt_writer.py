"""Serialise model objects and math transforms to OGC WKT.

Numbers are written with ``repr()`` so every double survives a round trip
through the reader unchanged; integral values drop the trailing ``.0``.
"""
from __future__ import annotations

from typing import List

from .model import (
    AngularUnit,
    AxisInfo,
    CompoundCoordinateSystem,
    Ellipsoid,
    FittedCoordinateSystem,
    GeocentricCoordinateSystem,
    GeographicCoordinateSystem,
    HorizontalDatum,
    Info,
    LinearUnit,
    PrimeMeridian,
    Projection,
    ProjectedCoordinateSystem,
    VerticalCoordinateSystem,
    VerticalDatum,
    Wgs84ConversionInfo,
)


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _clause(keyword: str, parts: List[str]) -> str:
    return f"{keyword}[{', '.join(parts)}]"


def _authority(info: Info) -> List[str]:
    if not info.has_authority:
        return []
    return [f"AUTHORITY[{quote(info.authority)}, {quote(str(info.authority_code))}]"]


def _axes(axes) -> List[str]:
    return [_axis(a) for a in axes]


def _axis(axis: AxisInfo) -> str:
    return f"AXIS[{quote(axis.name)}, {axis.orientation.value}]"


def _unit(unit, factor: float) -> str:
    return _clause("UNIT", [quote(unit.name or "unknown"), format_number(factor)] + _authority(unit))


def _towgs84(info: Wgs84ConversionInfo) -> str:
    return _clause("TOWGS84", [format_number(v) for v in info.values()])


def to_wkt(obj: object) -> str:
    """WKT for any model object; math transforms render through their ``wkt`` property."""
    if isinstance(obj, AngularUnit):
        return _unit(obj, obj.radians_per_unit)
    if isinstance(obj, LinearUnit):
        return _unit(obj, obj.meters_per_unit)
    if isinstance(obj, Ellipsoid):
        return _clause(
            "SPHEROID",
            [quote(obj.name), format_number(obj.semi_major), format_number(obj.inverse_flattening)]
            + _authority(obj),
        )
    if isinstance(obj, PrimeMeridian):
        return _clause("PRIMEM", [quote(obj.name), format_number(obj.longitude)] + _authority(obj))
    if isinstance(obj, HorizontalDatum):
        parts = [quote(obj.name), to_wkt(obj.ellipsoid)]
        if obj.towgs84 is not None:
            parts.append(_towgs84(obj.towgs84))
        return _clause("DATUM", parts + _authority(obj))
    if isinstance(obj, VerticalDatum):
        return _clause("VERT_DATUM", [quote(obj.name), str(int(obj.datum_type))] + _authority(obj))
    if isinstance(obj, Projection):
        return _clause("PROJECTION", [quote(obj.class_name)] + _authority(obj))
    if isinstance(obj, GeographicCoordinateSystem):
        parts = [quote(obj.name), to_wkt(obj.datum), to_wkt(obj.prime_meridian), to_wkt(obj.angular_unit)]
        return _clause("GEOGCS", parts + _axes(obj.axes) + _authority(obj))
    if isinstance(obj, ProjectedCoordinateSystem):
        parts = [quote(obj.name), to_wkt(obj.geographic), to_wkt(obj.projection)]
        parts += [
            f"PARAMETER[{quote(p.name)}, {format_number(p.value)}]" for p in obj.projection.parameters
        ]
        parts.append(to_wkt(obj.linear_unit))
        return _clause("PROJCS", parts + _axes(obj.axes) + _authority(obj))
    if isinstance(obj, GeocentricCoordinateSystem):
        parts = [quote(obj.name), to_wkt(obj.datum), to_wkt(obj.prime_meridian), to_wkt(obj.linear_unit)]
        return _clause("GEOCCS", parts + _axes(obj.axes) + _authority(obj))
    if isinstance(obj, VerticalCoordinateSystem):
        parts = [quote(obj.name), to_wkt(obj.datum), to_wkt(obj.linear_unit)]
        return _clause("VERT_CS", parts + _axes(obj.axes) + _authority(obj))
    if isinstance(obj, CompoundCoordinateSystem):
        return _clause("COMPD_CS", [quote(obj.name), to_wkt(obj.head), to_wkt(obj.tail)] + _authority(obj))
    if isinstance(obj, FittedCoordinateSystem):
        return _clause("FITTED_CS", [quote(obj.name), obj.to_base.wkt, to_wkt(obj.base)] + _authority(obj))
    if not isinstance(obj, Info):
        wkt = getattr(obj, "wkt", None)
        if isinstance(wkt, str):
            return wkt
    raise TypeError(f"Cannot write {type(obj).__name__} as WKT")


__all__ = ["format_number", "quote", "to_wkt"]
