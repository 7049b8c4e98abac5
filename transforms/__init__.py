"""Math transforms and the factory that chains them between coordinate systems."""

from .affine import AffineTransform
from .base import IdentityTransform, InverseTransform, MathTransform
from .concatenated import ConcatenatedTransform, concatenate
from .factory import CoordinateTransformationFactory

__all__ = [
    "MathTransform",
    "IdentityTransform",
    "InverseTransform",
    "AffineTransform",
    "ConcatenatedTransform",
    "concatenate",
    "CoordinateTransformationFactory",
]
