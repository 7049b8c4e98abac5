from __future__ import annotations

from typing import Any, Dict, List

from transforms.base import MathTransform
from transforms.concatenated import ConcatenatedTransform

from .model import (
    CompoundCoordinateSystem,
    CoordinateSystem,
    FittedCoordinateSystem,
    GeocentricCoordinateSystem,
    GeographicCoordinateSystem,
    ProjectedCoordinateSystem,
    VerticalCoordinateSystem,
)

_KINDS = {
    GeographicCoordinateSystem: "geographic",
    ProjectedCoordinateSystem: "projected",
    GeocentricCoordinateSystem: "geocentric",
    VerticalCoordinateSystem: "vertical",
    FittedCoordinateSystem: "fitted",
    CompoundCoordinateSystem: "compound",
}


def system_kind(cs: CoordinateSystem) -> str:
    return _KINDS.get(type(cs), type(cs).__name__)


def describe_system(cs: CoordinateSystem) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "name": cs.name,
        "kind": system_kind(cs),
        "dimension": cs.dimension,
        "authority": cs.authority or None,
        "authority_code": cs.authority_code if cs.has_authority else None,
        "axes": [{"name": a.name, "orientation": a.orientation.value} for a in cs.axes],
    }
    if isinstance(cs, ProjectedCoordinateSystem):
        out["projection"] = cs.projection.class_name
        out["parameters"] = cs.projection.parameters.to_dict()
        out["linear_unit"] = cs.linear_unit.name
        out["datum"] = cs.datum.name
    elif isinstance(cs, GeographicCoordinateSystem):
        out["angular_unit"] = cs.angular_unit.name
        out["datum"] = cs.datum.name
        out["prime_meridian"] = cs.prime_meridian.name
    elif isinstance(cs, GeocentricCoordinateSystem):
        out["linear_unit"] = cs.linear_unit.name
        out["datum"] = cs.datum.name
    return out


def describe_pipeline(transform: MathTransform) -> List[Dict[str, Any]]:
    legs = transform.children if isinstance(transform, ConcatenatedTransform) else (transform,)
    out = []
    for i, leg in enumerate(legs):
        try:
            wkt = leg.wkt
        except NotImplementedError:
            # grid shifts have no WKT form
            wkt = None
        out.append({
            "index": i,
            "type": type(leg).__name__,
            "dim_source": leg.dim_source,
            "dim_target": leg.dim_target,
            "inverse": bool(getattr(leg, "inverse", False)),
            "identity": leg.is_identity,
            "wkt": wkt,
        })
    return out


__all__ = ["system_kind", "describe_system", "describe_pipeline"]
