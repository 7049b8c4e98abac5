"""Name -> projection factory map.

A ``ProjectionRegistry`` is an ordinary object handed to the WKT reader and
the transformation factory; nothing is registered process-wide.
``build_default_registry()`` returns a fresh registry with every built-in
projection and the aliases commonly found in EPSG/ESRI WKT.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from app.crs.errors import UnknownProjectionError
from app.crs.parameters import ProjectionParameterSet

from .albers import AlbersConicEqualArea
from .base import MapProjection
from .cassini import CassiniSoldner
from .krovak import Krovak
from .lambert_azimuthal import LambertAzimuthalEqualArea
from .lambert_conformal import LambertConformalConic1SP, LambertConformalConic2SP
from .mercator import Mercator, PseudoMercator
from .oblique_mercator import HotineObliqueMercator, ObliqueMercator
from .orthographic import Orthographic
from .polyconic import Polyconic
from .stereographic import ObliqueStereographic, PolarStereographic
from .transverse_mercator import TransverseMercator, TransverseMercatorSouthOrientated

logger = logging.getLogger(__name__)

ProjectionFactory = Callable[..., MapProjection]


def registry_key(name: str) -> str:
    return name.strip().lower().replace(" ", "_")


class ProjectionRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._factories: Dict[str, ProjectionFactory] = {}

    def register(self, name: str, factory: ProjectionFactory) -> None:
        key = registry_key(name)
        with self._lock:
            if key in self._factories:
                logger.debug("projection.override name=%s", key)
            self._factories[key] = factory

    def register_alias(self, alias: str, name: str) -> None:
        key = registry_key(name)
        with self._lock:
            if key not in self._factories:
                raise UnknownProjectionError(name)
            self._factories[registry_key(alias)] = self._factories[key]

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return registry_key(name) in self._factories

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def create(self, name: str, parameters: ProjectionParameterSet) -> MapProjection:
        with self._lock:
            factory: Optional[ProjectionFactory] = self._factories.get(registry_key(name))
        if factory is None:
            raise UnknownProjectionError(name)
        return factory(parameters, name=name)


_BUILTINS: Dict[str, ProjectionFactory] = {
    "mercator": Mercator,
    "mercator_1sp": Mercator,
    "mercator_2sp": Mercator,
    "popular_visualisation_pseudo_mercator": PseudoMercator,
    "transverse_mercator": TransverseMercator,
    "transverse_mercator_south_orientated": TransverseMercatorSouthOrientated,
    "albers": AlbersConicEqualArea,
    "krovak": Krovak,
    "polyconic": Polyconic,
    "lambert_conformal_conic_2sp": LambertConformalConic2SP,
    "lambert_conformal_conic_1sp": LambertConformalConic1SP,
    "lambert_azimuthal_equal_area": LambertAzimuthalEqualArea,
    "hotine_oblique_mercator": HotineObliqueMercator,
    "oblique_mercator": ObliqueMercator,
    "cassini_soldner": CassiniSoldner,
    "oblique_stereographic": ObliqueStereographic,
    "polar_stereographic": PolarStereographic,
    "orthographic": Orthographic,
}

_ALIASES: Dict[str, str] = {
    "pseudo-mercator": "popular_visualisation_pseudo_mercator",
    "popular visualisation pseudo-mercator": "popular_visualisation_pseudo_mercator",
    "google_mercator": "popular_visualisation_pseudo_mercator",
    "gauss_kruger": "transverse_mercator",
    "albers_conic_equal_area": "albers",
    "lambert_conformal_conic": "lambert_conformal_conic_2sp",
    "lambert_conic_conformal_(2sp)": "lambert_conformal_conic_2sp",
    "lambert_conic_conformal_(1sp)": "lambert_conformal_conic_1sp",
    "hotine_oblique_mercator_azimuth_center": "oblique_mercator",
    "cassini": "cassini_soldner",
    "double_stereographic": "oblique_stereographic",
    "polar_stereographic_(variant_a)": "polar_stereographic",
}


def build_default_registry() -> ProjectionRegistry:
    registry = ProjectionRegistry()
    for name, factory in _BUILTINS.items():
        registry.register(name, factory)
    for alias, name in _ALIASES.items():
        registry.register_alias(alias, name)
    return registry


__all__ = ["ProjectionRegistry", "ProjectionFactory", "registry_key", "build_default_registry"]
