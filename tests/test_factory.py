import math

import pytest

from app.crs.errors import UnsupportedTransformError
from app.crs.model import (
    WEB_MERCATOR,
    WGS84,
    WGS84_GEOCENTRIC,
    Ellipsoid,
    GeographicCoordinateSystem,
    HorizontalDatum,
    Projection,
    ProjectedCoordinateSystem,
    VerticalCoordinateSystem,
)
from app.crs.wkt_reader import parse_coordinate_system
from transforms.affine import AffineTransform
from transforms.factory import CoordinateTransformationFactory
from transforms.grid import GridTransform

from tests.ntv2_builders import parent_grid, write_grid
from tests.wkt_samples import DHDN_GK3, ETRS89_UTM32, FITTED_MNAU, NAD83_UTM10

ARCSEC = 1.0 / 3600.0

CLARKE_1866 = Ellipsoid(semi_major=6378206.4, inverse_flattening=294.978698213898, name="Clarke 1866")
GRS80 = Ellipsoid(semi_major=6378137.0, inverse_flattening=298.257222101, name="GRS 1980")

NAD27 = GeographicCoordinateSystem(
    datum=HorizontalDatum(ellipsoid=CLARKE_1866, name="North American Datum 1927"), name="NAD27"
)
NAD83 = GeographicCoordinateSystem(
    datum=HorizontalDatum(ellipsoid=GRS80, name="North_American_Datum_1983"), name="NAD83"
)


def test_utm_to_web_mercator():
    t = CoordinateTransformationFactory().create(parse_coordinate_system(ETRS89_UTM32), WEB_MERCATOR)
    x, y = t.transform((702575.0, 6153153.0))
    assert math.hypot(x - 1358761.89, y - 7456070.47) < 0.015


def test_utm_to_wgs84():
    t = CoordinateTransformationFactory().create(parse_coordinate_system(NAD83_UTM10), WGS84)
    lon, lat = t.transform((3523562.711189, 6246615.391161))
    assert lon == pytest.approx(-82.0479097, abs=0.01)
    assert lat == pytest.approx(48.4185597, abs=0.01)


def test_same_system_is_identity():
    t = CoordinateTransformationFactory().create(WGS84, WGS84)
    assert t.is_identity
    assert t.transform((12.5, 55.7)) == pytest.approx((12.5, 55.7), abs=1e-12)


def test_geographic_to_geocentric():
    t = CoordinateTransformationFactory().create(WGS84, WGS84_GEOCENTRIC)
    x, y, z = t.transform((0.0, 0.0))
    assert (x, y, z) == pytest.approx((6378137.0, 0.0, 0.0))
    back = CoordinateTransformationFactory().create(WGS84_GEOCENTRIC, WGS84).transform((x, y, z))
    assert back[:2] == pytest.approx((0.0, 0.0), abs=1e-9)


def test_datum_change_goes_through_helmert():
    dhdn = parse_coordinate_system(DHDN_GK3).geographic
    factory = CoordinateTransformationFactory()
    t = factory.create(dhdn, WGS84)
    lon, lat = t.transform((9.0, 50.0))
    # the DHDN shift is on the order of a hundred metres
    assert 0 < abs(lon - 9.0) + abs(lat - 50.0) < 0.01
    back = factory.create(WGS84, dhdn).transform((lon, lat))
    assert back[0] == pytest.approx(9.0, abs=1e-6)
    assert back[1] == pytest.approx(50.0, abs=1e-6)


def test_same_datum_projected_pair_has_no_middle_leg():
    utm32 = parse_coordinate_system(ETRS89_UTM32)
    utm33 = parse_coordinate_system(
        ETRS89_UTM32.replace("zone 32N", "zone 33N").replace('central_meridian",9', 'central_meridian",15')
    )
    t = CoordinateTransformationFactory().create(utm32, utm33)
    assert len(t) == 2
    assert [leg.inverse for leg in t.children] == [True, False]
    x, y = t.transform((500000.0, 5760000.0))
    # 9E lies six degrees west of the zone 33 meridian
    assert x < 200000.0
    assert y > 5760000.0


def test_projected_to_projected_across_datums():
    factory = CoordinateTransformationFactory()
    gk3 = parse_coordinate_system(DHDN_GK3)
    utm32 = parse_coordinate_system(ETRS89_UTM32)
    t = factory.create(gk3, utm32)
    x, y = t.transform((3500000.0, 5540000.0))
    # both grids share the 9E meridian; eastings differ only by the false easting and datum shift
    assert abs(x - 500000.0) < 300.0
    back = factory.create(utm32, gk3).transform((x, y))
    assert back[0] == pytest.approx(3500000.0, abs=0.01)
    assert back[1] == pytest.approx(5540000.0, abs=0.01)


def test_fitted_to_base_is_the_affine_leg():
    fitted = parse_coordinate_system(FITTED_MNAU)
    factory = CoordinateTransformationFactory()
    t = factory.create(fitted, fitted.base)
    assert len(t) == 1
    assert isinstance(t.children[0], AffineTransform)
    assert t.transform((0.0, 0.0)) == pytest.approx((3455869.17937689, 5478710.88035753))

    to_fitted = factory.create(fitted.base, fitted)
    assert to_fitted.transform((3455869.17937689, 5478710.88035753)) == pytest.approx((0.0, 0.0), abs=1e-6)


def test_fitted_to_geographic_chains_through_base():
    fitted = parse_coordinate_system(FITTED_MNAU)
    t = CoordinateTransformationFactory().create(fitted, WGS84)
    assert len(t) > 2
    lon, lat = t.transform((0.0, 0.0))
    assert 8.0 < lon < 9.0
    assert 49.0 < lat < 50.0


def test_datum_grid_replaces_helmert(tmp_path):
    path = write_grid(tmp_path, "nad.gsb", [parent_grid()])
    factory = CoordinateTransformationFactory(
        datum_grids={("North American Datum 1927", "north_american_datum_1983"): path}
    )
    forward = factory.create(NAD27, NAD83)
    assert len(forward) == 1
    assert isinstance(forward.children[0], GridTransform)
    lon, lat = forward.transform((0.3, 40.2))
    assert lon == pytest.approx(0.3 - 2 * ARCSEC, abs=1e-12)
    assert lat == pytest.approx(40.2 + ARCSEC, abs=1e-12)

    # the reverse pair uses the same file inverted
    backward = factory.create(NAD83, NAD27)
    assert backward.children[0].inverse
    back = backward.transform((lon, lat))
    assert back == pytest.approx((0.3, 40.2), abs=1e-9)
    assert len(factory.grid_cache) == 1


def test_datum_grid_used_between_datums_with_equal_parameters(tmp_path):
    path = write_grid(tmp_path, "csrs.gsb", [parent_grid()])
    csrs = GeographicCoordinateSystem(datum=HorizontalDatum(ellipsoid=GRS80, name="NAD83_CSRS"), name="NAD83(CSRS)")
    assert NAD83.datum.equal_params(csrs.datum)
    factory = CoordinateTransformationFactory(datum_grids={("North_American_Datum_1983", "NAD83_CSRS"): path})

    t = factory.create(NAD83, csrs)
    assert [type(leg) for leg in t.children] == [GridTransform]
    lon, lat = t.transform((0.3, 40.2))
    assert lon == pytest.approx(0.3 - 2 * ARCSEC, abs=1e-12)
    assert lat == pytest.approx(40.2 + ARCSEC, abs=1e-12)
    assert factory.create(csrs, NAD83).children[0].inverse

    # without a configured grid the datums are interchangeable
    assert CoordinateTransformationFactory().create(NAD83, csrs).is_identity


def test_unreadable_grid_is_unsupported(tmp_path):
    factory = CoordinateTransformationFactory(
        datum_grids={("North_American_Datum_1927", "North_American_Datum_1983"): str(tmp_path / "missing.gsb")}
    )
    with pytest.raises(UnsupportedTransformError):
        factory.create(NAD27, NAD83)


def test_unknown_projection_class_is_unsupported():
    bonne = ProjectedCoordinateSystem(projection=Projection(class_name="Bonne"), name="Bonne")
    with pytest.raises(UnsupportedTransformError):
        CoordinateTransformationFactory().create(WGS84, bonne)


def test_vertical_systems_are_unsupported():
    with pytest.raises(UnsupportedTransformError):
        CoordinateTransformationFactory().create(VerticalCoordinateSystem(name="a"), VerticalCoordinateSystem(name="b"))
