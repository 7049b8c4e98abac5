import math

import pytest

from app.crs.errors import ParseError, UnknownProjectionError
from app.crs.model import (
    WEB_MERCATOR,
    WGS84,
    AxisOrientation,
    CompoundCoordinateSystem,
    DatumType,
    FittedCoordinateSystem,
    GeocentricCoordinateSystem,
    GeographicCoordinateSystem,
    LinearUnit,
    ProjectedCoordinateSystem,
    Wgs84ConversionInfo,
)
from app.crs.wkt_reader import WktReader, parse, parse_coordinate_system, parse_math_transform, read_tree
from transforms.affine import AffineTransform
from transforms.base import InverseTransform
from transforms.concatenated import ConcatenatedTransform

from tests.wkt_samples import AFFINE_MT, DHDN_GK3, ETRS89_LAEA, ETRS89_UTM32, FITTED_MNAU

WGS84_GEOGCS = (
    'GEOGCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563,AUTHORITY["EPSG","7030"]],'
    'AUTHORITY["EPSG","6326"]],PRIMEM["Greenwich",0,AUTHORITY["EPSG","8901"]],'
    'UNIT["degree",0.0174532925199433,AUTHORITY["EPSG","9122"]],AUTHORITY["EPSG",{code}]]'
)


# -----------------------------
# Numbers and tree
# -----------------------------


def test_exponent_literals_decode_exactly():
    t = parse_math_transform(
        'PARAM_MT["Affine",PARAMETER["num_row",3],PARAMETER["num_col",3],'
        'PARAMETER["elt_0_1",6.12303176911189E-17],PARAMETER["elt_1_2",5.235E+4]]'
    )
    assert isinstance(t, AffineTransform)
    assert t.matrix[0][1] == 6.12303176911189e-17
    assert t.matrix[1][2] == 52350.0
    # absent elements take identity values
    assert t.matrix[0][0] == 1.0
    assert t.matrix[2][2] == 1.0


def test_affine_offsets_applied_to_origin():
    t = parse_math_transform(AFFINE_MT)
    assert t.dim_source == 2 and t.dim_target == 2
    assert t.transform((0.0, 0.0)) == (3455869.17937689, 5478710.88035753)


def test_round_and_square_brackets_are_interchangeable():
    a = parse('UNIT["metre",1,AUTHORITY["EPSG","9001"]]')
    b = parse('UNIT("metre",1,AUTHORITY("EPSG","9001"))')
    assert isinstance(a, LinearUnit)
    assert a == b


def test_read_tree_keeps_keywords_and_bare_words():
    node = read_tree('AXIS["Easting",EAST]')
    assert node.keyword == "AXIS"
    assert node.args == ["Easting", "EAST"]


def test_doubled_quotes_inside_names():
    cs = parse_coordinate_system(WGS84_GEOGCS.format(code='"4326"').replace('"WGS 84",DATUM', '"My ""quoted"" CS",DATUM'))
    assert cs.name == 'My "quoted" CS'
    assert parse(cs.wkt) == cs


# -----------------------------
# Coordinate systems
# -----------------------------


def test_authority_code_quoted_or_bare():
    quoted = parse_coordinate_system(WGS84_GEOGCS.format(code='"4326"'))
    bare = parse_coordinate_system(WGS84_GEOGCS.format(code="4326"))
    assert quoted.authority == "EPSG"
    assert quoted.authority_code == 4326
    assert bare.authority_code == 4326
    assert quoted == bare


def test_non_numeric_authority_code_is_kept_as_unknown():
    cs = parse_coordinate_system(WGS84_GEOGCS.format(code='"WGS84"'))
    assert cs.authority_code == -1
    assert not cs.has_authority


def test_geographic_defaults_axes_when_absent():
    cs = parse_coordinate_system(WGS84_GEOGCS.format(code="4326"))
    assert isinstance(cs, GeographicCoordinateSystem)
    assert [a.orientation for a in cs.axes] == [AxisOrientation.EAST, AxisOrientation.NORTH]
    assert cs.equal_params(WGS84)


def test_well_known_constants_round_trip():
    assert parse(WGS84.wkt) == WGS84
    web = parse(WEB_MERCATOR.wkt)
    # the alias is not part of WKT
    assert web.equal_params(WEB_MERCATOR)
    assert web.wkt == WEB_MERCATOR.wkt


@pytest.mark.parametrize("wkt", [ETRS89_UTM32, ETRS89_LAEA, DHDN_GK3])
def test_projected_round_trip(wkt):
    cs = parse_coordinate_system(wkt)
    assert isinstance(cs, ProjectedCoordinateSystem)
    again = parse(cs.wkt)
    assert again == cs
    assert again.wkt == cs.wkt


def test_unit_position_in_projcs_does_not_matter():
    unit = 'UNIT["metre",1,AUTHORITY["EPSG","9001"]],'
    assert unit in ETRS89_UTM32
    moved = ETRS89_UTM32.replace(unit, "").replace('AXIS["Easting"', unit + 'AXIS["Easting"')
    assert moved != ETRS89_UTM32
    assert parse(moved) == parse(ETRS89_UTM32)


def test_projcs_parameters_keep_names_and_values():
    cs = parse_coordinate_system(ETRS89_UTM32)
    params = cs.projection.parameters
    assert cs.projection.class_name == "Transverse_Mercator"
    assert [p.name for p in params] == [
        "latitude_of_origin",
        "central_meridian",
        "scale_factor",
        "false_easting",
        "false_northing",
    ]
    assert params.value("central_meridian") == 9.0
    assert params.value("Scale Factor") == 0.9996
    assert cs.linear_unit.meters_per_unit == 1.0
    assert cs.datum.towgs84 == Wgs84ConversionInfo()


def test_projcs_without_unit_defaults_to_metre():
    wkt = ETRS89_UTM32.replace('UNIT["metre",1,AUTHORITY["EPSG","9001"]],', "")
    cs = parse_coordinate_system(wkt)
    assert cs.linear_unit.name == "metre"
    assert cs.linear_unit.meters_per_unit == 1.0


def test_towgs84_with_three_values():
    wkt = DHDN_GK3.replace(
        "TOWGS84[612.4, 77, 440.2, -0.054, 0.057, -2.797, 0.525975255930096]", "TOWGS84[598.1, 73.7, 418.2]"
    )
    cs = parse_coordinate_system(wkt)
    assert cs.datum.towgs84 == Wgs84ConversionInfo(598.1, 73.7, 418.2)
    assert cs.datum.towgs84.ppm == 0.0


def test_towgs84_with_four_values_is_rejected():
    wkt = DHDN_GK3.replace(
        "TOWGS84[612.4, 77, 440.2, -0.054, 0.057, -2.797, 0.525975255930096]", "TOWGS84[1, 2, 3, 4]"
    )
    with pytest.raises(ParseError):
        parse(wkt)


def test_prime_meridian_is_read_in_degrees():
    cs = parse_coordinate_system(
        'GEOGCS["NTF (Paris)",DATUM["Nouvelle_Triangulation_Francaise_Paris",'
        'SPHEROID["Clarke 1880 (IGN)",6378249.2,293.4660212936269]],'
        'PRIMEM["Paris",2.33722917],UNIT["grad",0.01570796326794897]]'
    )
    assert cs.angular_unit.radians_per_unit == 0.01570796326794897
    assert cs.prime_meridian.longitude == 2.33722917
    assert cs.prime_meridian.longitude_radians == pytest.approx(math.radians(2.33722917))


def test_geocentric_system():
    cs = parse_coordinate_system(
        'GEOCCS["WGS 84",DATUM["WGS_1984",SPHEROID["WGS 84",6378137,298.257223563]],'
        'PRIMEM["Greenwich",0],UNIT["metre",1],'
        'AXIS["Geocentric X",OTHER],AXIS["Geocentric Y",OTHER],AXIS["Geocentric Z",NORTH],'
        'AUTHORITY["EPSG","4978"]]'
    )
    assert isinstance(cs, GeocentricCoordinateSystem)
    assert cs.dimension == 3
    assert cs.authority_code == 4978
    assert parse(cs.wkt) == cs


def test_compound_system():
    cs = parse_coordinate_system(
        'COMPD_CS["ETRS89 / UTM 32N + height",' + ETRS89_UTM32 + ","
        'VERT_CS["NAVD88",VERT_DATUM["North American Vertical Datum 1988",2005,AUTHORITY["EPSG","5103"]],'
        'UNIT["metre",1],AXIS["Gravity-related height",UP],AUTHORITY["EPSG","5703"]]]'
    )
    assert isinstance(cs, CompoundCoordinateSystem)
    assert cs.dimension == 3
    assert cs.tail.datum.datum_type is DatumType.VD_GEOID_MODEL_DERIVED
    assert parse(cs.wkt) == cs


def test_fitted_system():
    cs = parse_coordinate_system(FITTED_MNAU)
    assert isinstance(cs, FittedCoordinateSystem)
    assert cs.authority == "CUSTOM" and cs.authority_code == 12345
    assert isinstance(cs.to_base, AffineTransform)
    assert cs.base.authority_code == 31467
    assert parse(cs.wkt) == cs


# -----------------------------
# Math transforms
# -----------------------------


def test_concat_and_inverse_round_trip():
    t = parse_math_transform(f"CONCAT_MT[{AFFINE_MT}, INVERSE_MT[{AFFINE_MT}]]")
    assert isinstance(t, ConcatenatedTransform)
    assert isinstance(t.children[1], InverseTransform)
    x, y = t.transform((120.5, -33.25))
    assert x == pytest.approx(120.5, abs=1e-6)
    assert y == pytest.approx(-33.25, abs=1e-6)
    assert parse_math_transform(t.wkt) == t


def test_projection_param_mt():
    t = parse_math_transform(
        'PARAM_MT["Transverse_Mercator",PARAMETER["semi_major",6378137],PARAMETER["semi_minor",6356752.314140356],'
        'PARAMETER["central_meridian",9],PARAMETER["scale_factor",0.9996],PARAMETER["false_easting",500000]]'
    )
    x, y = t.transform((9.0, 0.0))
    assert x == pytest.approx(500000.0, abs=1e-6)
    assert y == pytest.approx(0.0, abs=1e-6)
    assert parse_math_transform(t.wkt) == t


def test_geocentric_param_mt():
    t = parse_math_transform(
        'PARAM_MT["Ellipsoid_To_Geocentric",PARAMETER["semi_major",6378137],PARAMETER["semi_minor",6356752.314245179]]'
    )
    assert t.dim_target == 3
    x, y, z = t.transform((0.0, 0.0))
    assert x == pytest.approx(6378137.0)
    assert y == pytest.approx(0.0, abs=1e-6)
    assert z == pytest.approx(0.0, abs=1e-6)


def test_concat_dimension_mismatch_is_parse_error():
    geocentric = 'PARAM_MT["Ellipsoid_To_Geocentric",PARAMETER["semi_major",6378137],PARAMETER["semi_minor",6356752.3]]'
    with pytest.raises(ParseError):
        parse_math_transform(f"CONCAT_MT[{geocentric}, {AFFINE_MT}]")


def test_affine_element_outside_matrix():
    with pytest.raises(ParseError):
        parse_math_transform('PARAM_MT["Affine",PARAMETER["num_row",3],PARAMETER["num_col",3],PARAMETER["elt_3_0",1]]')


# -----------------------------
# Errors
# -----------------------------


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        'GEOGCS["x"',
        'UNIT["metre",1)',
        'UNIT["metre",1]]',
        'UNIT["metre" 1]',
        'UNIT["metre",1] trailing',
        'UNIT["metre",@]',
        'FOO["x"]',
        'LOCAL_CS["x"]',
        'GEOGCS["x",DATUM["d",SPHEROID["s",6378137,298.3]],PRIMEM["Greenwich",0],UNIT["degree",0.017],AXIS["Lon",SIDEWAYS]]',
    ],
)
def test_malformed_input_raises_parse_error(text):
    with pytest.raises(ParseError):
        parse(text)


def test_parse_error_carries_fragment_and_position():
    text = 'GEOGCS["x",PRIMEM["Greenwich",0]]'
    with pytest.raises(ParseError) as info:
        parse(text)
    assert info.value.position == 0
    assert info.value.fragment.startswith('GEOGCS["x"')
    assert "UNIT" in str(info.value)


def test_unknown_projection():
    with pytest.raises(UnknownProjectionError):
        parse(ETRS89_UTM32.replace("Transverse_Mercator", "Bogus_Projection"))


def test_type_checked_entry_points():
    with pytest.raises(ParseError):
        parse_coordinate_system(AFFINE_MT)
    with pytest.raises(ParseError):
        parse_math_transform(ETRS89_UTM32)


def test_reader_uses_its_own_projection_registry():
    from projections.registry import ProjectionRegistry
    from projections.transverse_mercator import TransverseMercator

    registry = ProjectionRegistry()
    registry.register("my_tm", TransverseMercator)
    reader = WktReader(projections=registry)
    cs = reader.parse_coordinate_system(ETRS89_UTM32.replace("Transverse_Mercator", "My_TM"))
    assert cs.projection.class_name == "My_TM"
    with pytest.raises(UnknownProjectionError):
        reader.parse(ETRS89_UTM32)
