"""Build the MathTransform pipeline between two coordinate systems.

Supported pairs: projected/geographic/geocentric in any combination and
fitted systems on either side. A datum change goes through geocentric
coordinates with the Helmert parameters of each datum's ``TOWGS84``, or
through an NTv2 grid when one is configured for the datum pair.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from app.crs.errors import CrsError, MissingParameterError, UnknownProjectionError, UnsupportedTransformError
from app.crs.model import (
    DEGREE,
    CoordinateSystem,
    Ellipsoid,
    FittedCoordinateSystem,
    GeocentricCoordinateSystem,
    GeographicCoordinateSystem,
    HorizontalDatum,
    ProjectedCoordinateSystem,
)
from app.crs.parameters import normalize_name
from ntv2.loader import GridCache
from projections.registry import ProjectionRegistry, build_default_registry

from .base import IdentityTransform, MathTransform
from .concatenated import ConcatenatedTransform, concatenate
from .datum import DatumTransform
from .geocentric import GeocentricTransform
from .geographic import GeographicTransform
from .grid import GridTransform
from .projection import ProjectionTransform

logger = logging.getLogger(__name__)

DatumGrids = Dict[Tuple[str, str], str]


class CoordinateTransformationFactory:
    """Creates pipelines; holds no per-call state and may be shared."""

    def __init__(
        self,
        projections: Optional[ProjectionRegistry] = None,
        datum_grids: Optional[DatumGrids] = None,
        grid_cache: Optional[GridCache] = None,
    ):
        self.projections = projections or build_default_registry()
        self.datum_grids: DatumGrids = {
            (normalize_name(s), normalize_name(t)): path for (s, t), path in (datum_grids or {}).items()
        }
        self.grid_cache = grid_cache or GridCache()

    def create(self, source: CoordinateSystem, target: CoordinateSystem) -> ConcatenatedTransform:
        legs = self._legs(source, target)
        legs = [leg for leg in legs if leg is not None]
        if not legs:
            legs = [IdentityTransform(source.dimension or 2)]
        pipeline = concatenate(*legs)
        logger.debug(
            "transform.created source=%s target=%s legs=%d",
            source.name or type(source).__name__,
            target.name or type(target).__name__,
            len(pipeline),
        )
        return pipeline

    # -----------------------------
    # Dispatch
    # -----------------------------

    def _legs(self, source: CoordinateSystem, target: CoordinateSystem) -> List[Optional[MathTransform]]:
        if isinstance(source, ProjectedCoordinateSystem) and isinstance(target, GeographicCoordinateSystem):
            return self._proj_to_geog(source, target)
        if isinstance(source, GeographicCoordinateSystem) and isinstance(target, ProjectedCoordinateSystem):
            return self._geog_to_proj(source, target)
        if isinstance(source, GeographicCoordinateSystem) and isinstance(target, GeocentricCoordinateSystem):
            return self._geog_to_geoc(source, target)
        if isinstance(source, GeocentricCoordinateSystem) and isinstance(target, GeographicCoordinateSystem):
            return self._geoc_to_geog(source, target)
        if isinstance(source, ProjectedCoordinateSystem) and isinstance(target, ProjectedCoordinateSystem):
            return self._proj_to_proj(source, target)
        if isinstance(source, GeocentricCoordinateSystem) and isinstance(target, GeocentricCoordinateSystem):
            return self._geoc_to_geoc(source.datum, target.datum)
        if isinstance(source, GeographicCoordinateSystem) and isinstance(target, GeographicCoordinateSystem):
            return self._geog_to_geog(source, target)
        if isinstance(source, FittedCoordinateSystem):
            return self._fitted_to_any(source, target)
        if isinstance(target, FittedCoordinateSystem):
            return self._any_to_fitted(source, target)
        raise UnsupportedTransformError(
            f"No support for transforming between {type(source).__name__} and {type(target).__name__}"
        )

    # -----------------------------
    # Pairs
    # -----------------------------

    def _proj_to_geog(self, source: ProjectedCoordinateSystem, target: GeographicCoordinateSystem):
        return [self._projection(source).invert()] + self._geog_to_geog(source.geographic, target)

    def _geog_to_proj(self, source: GeographicCoordinateSystem, target: ProjectedCoordinateSystem):
        return self._geog_to_geog(source, target.geographic) + [self._projection(target)]

    def _proj_to_proj(self, source: ProjectedCoordinateSystem, target: ProjectedCoordinateSystem):
        return (
            [self._projection(source).invert()]
            + self._geog_to_geog(source.geographic, target.geographic)
            + [self._projection(target)]
        )

    def _geog_to_geoc(self, source: GeographicCoordinateSystem, target: GeocentricCoordinateSystem):
        to_degrees = GeographicTransform(
            source.angular_unit.radians_per_unit,
            DEGREE.radians_per_unit,
            source.prime_meridian.longitude_radians,
            target.prime_meridian.longitude_radians,
        )
        return [
            None if to_degrees.is_identity else to_degrees,
            _geocentric(target.datum.ellipsoid, source.dimension),
        ]

    def _geoc_to_geog(self, source: GeocentricCoordinateSystem, target: GeographicCoordinateSystem):
        return [leg.invert() for leg in reversed(self._geog_to_geoc(target, source)) if leg is not None]

    def _geoc_to_geoc(self, source: HorizontalDatum, target: HorizontalDatum) -> List[Optional[MathTransform]]:
        legs: List[Optional[MathTransform]] = []
        if source.towgs84 is not None and not source.towgs84.has_zero_values_only:
            legs.append(DatumTransform(source.towgs84))
        if target.towgs84 is not None and not target.towgs84.has_zero_values_only:
            legs.append(DatumTransform(target.towgs84).invert())
        return legs

    def _geog_to_geog(self, source: GeographicCoordinateSystem, target: GeographicCoordinateSystem):
        # a configured grid wins even over datums with matching parameters
        grid = self._grid_for(source.datum, target.datum)
        if grid is not None:
            to_degrees = GeographicTransform(
                source.angular_unit.radians_per_unit,
                DEGREE.radians_per_unit,
                source.prime_meridian.longitude_radians,
            )
            from_degrees = GeographicTransform(
                DEGREE.radians_per_unit,
                target.angular_unit.radians_per_unit,
                0.0,
                target.prime_meridian.longitude_radians,
            )
            return [
                None if to_degrees.is_identity else to_degrees,
                grid,
                None if from_degrees.is_identity else from_degrees,
            ]

        if source.datum.equal_params(target.datum):
            same_datum = GeographicTransform.between(source, target)
            return [] if same_datum.is_identity else [same_datum]

        source_centric = GeocentricCoordinateSystem(
            datum=source.datum, prime_meridian=source.prime_meridian, name=f"{source.datum.name} Geocentric"
        )
        target_centric = GeocentricCoordinateSystem(
            datum=target.datum, prime_meridian=source.prime_meridian, name=f"{target.datum.name} Geocentric"
        )
        return (
            self._geog_to_geoc(source, source_centric)
            + self._geoc_to_geoc(source.datum, target.datum)
            + self._geoc_to_geog(target_centric, target)
        )

    def _fitted_to_any(self, source: FittedCoordinateSystem, target: CoordinateSystem):
        to_base = _fitted_transform(source)
        if source.base is not None and source.base.equal_params(target):
            return [to_base]
        return [to_base] + self._legs(source.base, target)

    def _any_to_fitted(self, source: CoordinateSystem, target: FittedCoordinateSystem):
        from_base = _fitted_transform(target).invert()
        if target.base is not None and target.base.equal_params(source):
            return [from_base]
        return self._legs(source, target.base) + [from_base]

    # -----------------------------
    # Leg builders
    # -----------------------------

    def _projection(self, system: ProjectedCoordinateSystem) -> ProjectionTransform:
        ellipsoid = system.geographic.datum.ellipsoid
        to_metre = ellipsoid.axis_unit.meters_per_unit
        parameters = system.projection.parameters.with_defaults(
            semi_major=ellipsoid.semi_major * to_metre,
            semi_minor=ellipsoid.semi_minor * to_metre,
            unit=system.linear_unit.meters_per_unit,
        )
        try:
            projection = self.projections.create(system.projection.class_name, parameters)
        except (UnknownProjectionError, MissingParameterError) as exc:
            raise UnsupportedTransformError(f"Cannot build projection for {system.name!r}: {exc}") from exc
        except CrsError as exc:
            raise UnsupportedTransformError(f"Invalid projection parameters for {system.name!r}: {exc}") from exc
        return ProjectionTransform(projection, system.geographic.angular_unit.radians_per_unit)

    def _grid_for(self, source: HorizontalDatum, target: HorizontalDatum) -> Optional[GridTransform]:
        pair = (normalize_name(source.name), normalize_name(target.name))
        inverse = False
        path = self.datum_grids.get(pair)
        if path is None:
            path = self.datum_grids.get((pair[1], pair[0]))
            inverse = path is not None
        if path is None:
            return None
        try:
            grid_file = self.grid_cache.get(path)
        except OSError as exc:
            raise UnsupportedTransformError(f"Datum shift grid {path!r} cannot be read: {exc}") from exc
        return GridTransform(grid_file, inverse=inverse)


def _geocentric(ellipsoid: Ellipsoid, geographic_dim: int) -> GeocentricTransform:
    to_metre = ellipsoid.axis_unit.meters_per_unit
    return GeocentricTransform(
        ellipsoid.semi_major * to_metre,
        ellipsoid.semi_minor * to_metre,
        geographic_dim=max(2, min(3, geographic_dim)),
    )


def _fitted_transform(system: FittedCoordinateSystem) -> MathTransform:
    if system.base is None or not isinstance(system.to_base, MathTransform):
        raise UnsupportedTransformError(f"Fitted system {system.name!r} has no usable TOBASE transform")
    return system.to_base


__all__ = ["CoordinateTransformationFactory", "DatumGrids"]
