import math

import numpy as np
import pytest

from app.crs.errors import SingularMatrixError
from app.crs.model import Wgs84ConversionInfo
from transforms.affine import AffineTransform, invert_matrix
from transforms.base import IdentityTransform, InverseTransform
from transforms.concatenated import ConcatenatedTransform, concatenate
from transforms.datum import DatumTransform
from transforms.geocentric import GeocentricTransform
from transforms.geographic import GeographicTransform

WGS84_A = 6378137.0
WGS84_B = 6356752.314245179

ROTATE_AND_SHIFT = AffineTransform(
    [
        [0.883485346527455, -0.468458794848877, 3455869.17937689],
        [0.468458794848877, 0.883485346527455, 5478710.88035753],
        [0.0, 0.0, 1.0],
    ]
)


# -----------------------------
# Affine
# -----------------------------


def test_affine_inverse_round_trip():
    x, y = ROTATE_AND_SHIFT.transform((1250.0, -730.5))
    back = ROTATE_AND_SHIFT.invert().transform((x, y))
    assert back[0] == pytest.approx(1250.0, abs=1e-6)
    assert back[1] == pytest.approx(-730.5, abs=1e-6)


def test_affine_double_inversion_restores_matrix_exactly():
    twice = ROTATE_AND_SHIFT.invert().invert()
    assert twice is not ROTATE_AND_SHIFT
    assert np.array_equal(twice.matrix, ROTATE_AND_SHIFT.matrix)
    assert twice == ROTATE_AND_SHIFT


def test_singular_affine():
    flat = AffineTransform([[1.0, 2.0, 0.0], [2.0, 4.0, 0.0], [0.0, 0.0, 1.0]])
    # construction succeeds; only inversion fails
    assert flat.transform((1.0, 1.0)) == (3.0, 6.0)
    with pytest.raises(SingularMatrixError):
        flat.invert()
    with pytest.raises(ArithmeticError):
        invert_matrix(((0.0, 0.0), (0.0, 0.0)))
    # rows parallel up to rounding
    with pytest.raises(SingularMatrixError):
        invert_matrix([[1.0, 1.0], [1.0, 1.0 + 1e-15]])
    inverse = invert_matrix([[2.0, 0.0], [0.0, 4.0]])
    assert np.array_equal(inverse, [[0.5, 0.0], [0.0, 0.25]])


def test_affine_identity_and_wkt():
    ident = AffineTransform.identity(2)
    assert ident.is_identity
    assert ident.wkt == 'PARAM_MT["Affine", PARAMETER["num_row", 3], PARAMETER["num_col", 3]]'
    assert not ROTATE_AND_SHIFT.is_identity


def test_affine_keeps_height_when_two_dimensional():
    assert ROTATE_AND_SHIFT.transform((0.0, 0.0, 42.0)) == (3455869.17937689, 5478710.88035753, 42.0)


# -----------------------------
# Concatenated
# -----------------------------


def _chain():
    scale = AffineTransform([[2.0, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 1.0]])
    return ConcatenatedTransform([ROTATE_AND_SHIFT, scale])


def test_concatenated_applies_children_in_order():
    chain = _chain()
    x, y = chain.transform((0.0, 0.0))
    assert x == pytest.approx(2 * 3455869.17937689)
    assert y == pytest.approx(2 * 5478710.88035753)


def test_concatenated_inverse_is_reversed_and_independent():
    chain = _chain()
    inverse = chain.invert()
    assert inverse is not chain
    assert len(inverse) == len(chain)
    assert all(a is not b for a, b in zip(inverse.children, reversed(chain.children)))
    point = (1000.0, 2000.0)
    back = inverse.transform(chain.transform(point))
    assert back[0] == pytest.approx(point[0], abs=1e-6)
    assert back[1] == pytest.approx(point[1], abs=1e-6)


def test_concatenated_double_inversion_leaves_original_untouched():
    chain = _chain()
    children_before = chain.children
    again = chain.invert().invert()
    assert again is not chain
    assert again == chain
    assert len(again) == len(chain)
    assert all(a is not b for a, b in zip(again.children, chain.children))
    assert again.children is not chain.children
    assert chain.children is children_before
    assert chain.children[0] is ROTATE_AND_SHIFT
    assert again.transform((5.0, 7.0)) == pytest.approx(chain.transform((5.0, 7.0)))


def test_concatenate_flattens_and_skips_missing_legs():
    chain = concatenate(None, _chain(), None, IdentityTransform(2))
    assert len(chain) == 3
    assert isinstance(chain.children[-1], IdentityTransform)


def test_concatenated_rejects_dimension_mismatch():
    with pytest.raises(ValueError):
        ConcatenatedTransform([GeocentricTransform(WGS84_A, WGS84_B), ROTATE_AND_SHIFT])
    with pytest.raises(ValueError):
        ConcatenatedTransform([])


def test_concatenated_identity_and_wkt():
    chain = ConcatenatedTransform([IdentityTransform(2), AffineTransform.identity(2)])
    assert chain.is_identity
    assert chain.wkt.startswith("CONCAT_MT[PARAM_MT[")


# -----------------------------
# Geocentric and Helmert
# -----------------------------


def test_geocentric_round_trip_with_height():
    to_xyz = GeocentricTransform(WGS84_A, WGS84_B, geographic_dim=3)
    x, y, z = to_xyz.transform((7.45, 46.95, 560.0))
    lon, lat, h = to_xyz.invert().transform((x, y, z))
    assert lon == pytest.approx(7.45, abs=1e-10)
    assert lat == pytest.approx(46.95, abs=1e-10)
    assert h == pytest.approx(560.0, abs=1e-4)


def test_geocentric_inverse_round_trips_at_all_latitudes():
    to_xyz = GeocentricTransform(WGS84_A, WGS84_B, geographic_dim=3)
    to_geog = to_xyz.invert()
    for lat in (-89.5, -60.0, -12.3, 0.5, 33.0, 67.5, 80.0, 89.9):
        back = to_geog.transform(to_xyz.transform((-71.0, lat, 2500.0)))
        assert back[1] == pytest.approx(lat, abs=1e-10)
        assert back[2] == pytest.approx(2500.0, abs=1e-4)


def test_geocentric_known_points():
    to_xyz = GeocentricTransform(WGS84_A, WGS84_B)
    assert to_xyz.transform((90.0, 0.0))[1] == pytest.approx(WGS84_A)
    assert to_xyz.transform((0.0, 90.0))[2] == pytest.approx(WGS84_B)
    # the earth's centre maps to the north pole at depth b
    assert to_xyz.invert().transform((0.0, 0.0, 0.0)) == (0.0, 90.0, -WGS84_B)


def test_helmert_pure_translation():
    shift = DatumTransform(Wgs84ConversionInfo(100.0, -50.0, 20.0))
    assert shift.transform((4000000.0, 500000.0, 4900000.0)) == (4000100.0, 499950.0, 4900020.0)


def test_helmert_round_trip():
    params = Wgs84ConversionInfo(612.4, 77.0, 440.2, -0.054, 0.057, -2.797, 0.525975255930096)
    shift = DatumTransform(params)
    point = (4157222.543, 664789.307, 4774952.099)
    there = shift.transform(point)
    assert there != point
    back = shift.invert().transform(there)
    for a, b in zip(back, point):
        assert a == pytest.approx(b, abs=0.01)


def test_helmert_wkt_marks_inverse():
    shift = DatumTransform(Wgs84ConversionInfo(1.0, 2.0, 3.0))
    assert shift.wkt.startswith('PARAM_MT["Bursa_Wolf"')
    assert shift.invert().wkt.startswith('INVERSE_MT[PARAM_MT["Bursa_Wolf"')
    assert shift.invert().invert() == shift


# -----------------------------
# Geographic and wrappers
# -----------------------------


def test_geographic_units_and_meridian():
    grads = math.pi / 200.0
    paris = math.radians(2.33722917)
    to_greenwich = GeographicTransform(grads, math.pi / 180.0, paris, 0.0)
    lon, lat = to_greenwich.transform((0.0, 50.0))
    assert lon == pytest.approx(2.33722917)
    assert lat == pytest.approx(45.0)
    back = to_greenwich.invert().transform((lon, lat))
    assert back == pytest.approx((0.0, 50.0))


def test_inverse_transform_wrapper():
    wrapped = InverseTransform(ROTATE_AND_SHIFT)
    assert wrapped.dim_source == ROTATE_AND_SHIFT.dim_target
    assert wrapped.transform((3455869.17937689, 5478710.88035753)) == pytest.approx((0.0, 0.0), abs=1e-6)
    assert wrapped.invert() == ROTATE_AND_SHIFT
    assert wrapped.wkt == f"INVERSE_MT[{ROTATE_AND_SHIFT.wkt}]"


def test_transform_output_dimension():
    ident = IdentityTransform(2)
    assert ident.transform((1.0, 2.0)) == (1.0, 2.0)
    assert ident.transform((1.0, 2.0, 3.0)) == (1.0, 2.0, 3.0)
    assert ident.transform_many([(1, 2), (3, 4)]) == [(1.0, 2.0), (3.0, 4.0)]
    with pytest.raises(ValueError):
        ident.transform((1.0,))
