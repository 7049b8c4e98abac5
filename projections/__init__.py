"""Map projections: pure radians <-> metres formulas plus a name registry."""

from .base import MapProjection
from .registry import ProjectionRegistry, build_default_registry

__all__ = ["MapProjection", "ProjectionRegistry", "build_default_registry"]
