from app.crs.diagnostics import describe_pipeline, describe_system, system_kind
from app.crs.model import WEB_MERCATOR, WGS84, WGS84_GEOCENTRIC
from app.crs.wkt_reader import parse_coordinate_system
from ntv2.binary_reader import parse_binary_grid
from transforms.factory import CoordinateTransformationFactory
from transforms.grid import GridTransform

from tests.ntv2_builders import build_gsb, parent_grid
from tests.wkt_samples import DHDN_GK3


def test_describe_systems():
    geog = describe_system(WGS84)
    assert geog["kind"] == "geographic"
    assert geog["authority_code"] == 4326
    assert geog["angular_unit"] == "degree"
    assert geog["prime_meridian"] == "Greenwich"

    proj = describe_system(WEB_MERCATOR)
    assert proj["kind"] == "projected"
    assert proj["projection"] == "Popular Visualisation Pseudo-Mercator"
    assert proj["parameters"]["central_meridian"] == 0.0
    assert proj["datum"] == "WGS_1984"

    assert system_kind(WGS84_GEOCENTRIC) == "geocentric"
    assert describe_system(WGS84_GEOCENTRIC)["dimension"] == 3


def test_describe_pipeline_legs():
    pipeline = CoordinateTransformationFactory().create(parse_coordinate_system(DHDN_GK3), WGS84)
    legs = describe_pipeline(pipeline)
    assert [leg["index"] for leg in legs] == list(range(len(pipeline)))
    assert [leg["type"] for leg in legs] == [
        "ProjectionTransform",
        "GeocentricTransform",
        "DatumTransform",
        "GeocentricTransform",
    ]
    assert legs[0]["inverse"] is True
    assert legs[1]["dim_target"] == 3
    assert legs[-1]["inverse"] is True
    assert all(leg["wkt"] for leg in legs)


def test_grid_legs_have_no_wkt():
    grid = GridTransform(parse_binary_grid(build_gsb([parent_grid()])))
    (leg,) = describe_pipeline(grid)
    assert leg["type"] == "GridTransform"
    assert leg["wkt"] is None
