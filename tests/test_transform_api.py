import math

import pytest
from fastapi.testclient import TestClient

from app.main import app, create_app
from app.registry import CoordinateSystemRegistry
from app.settings import Settings

from tests.ntv2_builders import build_gsb, parent_grid, write_grid
from tests.wkt_samples import AFFINE_MT, ETRS89_UTM32

client = TestClient(app)

LOCAL_GEOGCS = (
    'GEOGCS["Local",DATUM["Local_Datum",SPHEROID["Local",6378137,298.257223563]],'
    'PRIMEM["Greenwich",0],UNIT["degree",0.0174532925199433]]'
)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


# -----------------------------
# WKT and registry
# -----------------------------


def test_parse_coordinate_system_wkt():
    resp = client.post("/wkt/parse", json={"wkt": ETRS89_UTM32})
    assert resp.status_code == 200
    data = resp.json()
    assert data["kind"] == "projected"
    assert data["wkt"].startswith('PROJCS["ETRS89 / UTM zone 32N"')
    summary = data["summary"]
    assert summary["authority_code"] == 25832
    assert summary["projection"] == "Transverse_Mercator"
    assert summary["parameters"]["central_meridian"] == 9.0
    assert summary["datum"] == "European_Terrestrial_Reference_System_1989"
    assert [a["orientation"] for a in summary["axes"]] == ["EAST", "NORTH"]


def test_parse_math_transform_wkt():
    resp = client.post("/wkt/parse", json={"wkt": AFFINE_MT})
    assert resp.status_code == 200
    data = resp.json()
    assert data["kind"] == "math_transform"
    assert data["dim_source"] == 2 and data["dim_target"] == 2
    assert data["wkt"].startswith('PARAM_MT["Affine"')


def test_parse_rejects_malformed_wkt():
    resp = client.post("/wkt/parse", json={"wkt": 'GEOGCS["x", DATUM['})
    assert resp.status_code == 422
    assert resp.json()["detail"].startswith("ParseError")


def test_get_default_crs():
    resp = client.get("/crs/4326")
    assert resp.status_code == 200
    data = resp.json()
    assert data["srid"] == 4326
    assert data["summary"]["name"] == "WGS 84"
    assert data["summary"]["kind"] == "geographic"
    assert client.get("/crs/999999").status_code == 404


def test_register_transform_and_delete():
    resp = client.post("/crs", json={"wkt": ETRS89_UTM32})
    assert resp.status_code == 201
    assert resp.json()["srid"] == 25832
    try:
        resp = client.post("/transform", json={"source": 25832, "target": 3857, "points": [[702575.0, 6153153.0]]})
        assert resp.status_code == 200
        data = resp.json()
        x, y = data["points"][0]
        assert math.hypot(x - 1358761.89, y - 7456070.47) < 0.015
        assert data["legs"] >= 2
        assert data["cached"] is False
    finally:
        assert client.delete("/crs/25832").status_code == 200
    assert client.delete("/crs/25832").status_code == 404
    assert client.get("/crs/25832").status_code == 404


def test_register_needs_srid_without_authority():
    resp = client.post("/crs", json={"wkt": LOCAL_GEOGCS})
    assert resp.status_code == 422
    resp = client.post("/crs", json={"srid": 900001, "wkt": LOCAL_GEOGCS})
    assert resp.status_code == 201
    assert resp.json()["summary"]["authority_code"] is None
    assert client.delete("/crs/900001").status_code == 200


# -----------------------------
# Transformations
# -----------------------------


def test_transform_with_inline_wkt():
    resp = client.post(
        "/transform", json={"source": ETRS89_UTM32, "target": "4326", "points": [[500000.0, 0.0, 12.5]]}
    )
    assert resp.status_code == 200
    lon, lat, h = resp.json()["points"][0]
    assert lon == pytest.approx(9.0, abs=1e-6)
    assert lat == pytest.approx(0.0, abs=1e-6)


def test_transform_errors():
    resp = client.post("/transform", json={"source": 4326, "target": 999, "points": [[0.0, 0.0]]})
    assert resp.status_code == 404
    resp = client.post("/transform", json={"source": 4326, "target": 3857, "points": [[0.0]]})
    assert resp.status_code == 422
    resp = client.post("/transform", json={"source": 'PROJCS["x"', "target": 3857, "points": [[0.0, 0.0]]})
    assert resp.status_code == 422


def test_transform_point_limit():
    limited = create_app(settings=Settings(json_logs=False, max_points=2), registry=CoordinateSystemRegistry())
    small = TestClient(limited)
    points = [[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]
    resp = small.post("/transform", json={"source": 4326, "target": 3857, "points": points})
    assert resp.status_code == 413
    resp = small.post("/transform", json={"source": 4326, "target": 3857, "points": points[:2]})
    assert resp.status_code == 200


def test_pipeline_description():
    resp = client.post("/transform/pipeline", json={"source": 4326, "target": 3857})
    assert resp.status_code == 200
    data = resp.json()
    assert [leg["type"] for leg in data["legs"]] == ["ProjectionTransform"]
    assert data["legs"][0]["inverse"] is False
    assert data["wkt"].startswith("CONCAT_MT[PARAM_MT[")

    back = client.post("/transform/pipeline", json={"source": 3857, "target": 4326}).json()
    assert back["legs"][0]["inverse"] is True


# -----------------------------
# NTv2 grids
# -----------------------------


def test_ntv2_shift(tmp_path, gsb_path):
    path = gsb_path
    resp = client.post("/ntv2/shift", json={"path": path, "points": [[0.3, 40.2], [5.0, 5.0]]})
    assert resp.status_code == 200
    shifted, outside = resp.json()["points"]
    assert shifted[0] == pytest.approx(0.3 - 2.0 / 3600.0, abs=1e-12)
    assert shifted[1] == pytest.approx(40.2 + 1.0 / 3600.0, abs=1e-12)
    assert outside is None

    resp = client.post("/ntv2/shift", json={"path": path, "points": [shifted], "inverse": True})
    assert resp.json()["points"][0] == pytest.approx([0.3, 40.2], abs=1e-9)

    assert client.post("/ntv2/shift", json={"path": str(tmp_path / "nope.gsb"), "points": []}).status_code == 404
    assert client.post("/ntv2/shift", json={"path": path, "points": [[1.0, 2.0, 3.0]]}).status_code == 422


def test_ntv2_inspect_upload():
    files = {"file": ("grid.gsb", build_gsb([parent_grid()]))}
    resp = client.post("/ntv2/inspect", files=files)
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "grid.gsb"
    assert data["header"]["NUM_FILE"] == 1
    assert [g["name"] for g in data["grids"]] == ["PARENT"]


def test_ntv2_inspect_path(tmp_path):
    path = write_grid(tmp_path, "grid.gsa", [parent_grid()])
    resp = client.post("/ntv2/inspect", data={"path": path})
    assert resp.status_code == 200
    assert resp.json()["header"]["GS_TYPE"] == "SECONDS"


def test_ntv2_inspect_input_errors(tmp_path, gsb_path):
    files = {"file": ("grid.gsb", build_gsb([parent_grid()]))}
    assert client.post("/ntv2/inspect", files=files, data={"path": gsb_path}).status_code == 400
    assert client.post("/ntv2/inspect").status_code == 400
    bad = {"file": ("grid.gsb", b"not a grid file at all")}
    assert client.post("/ntv2/inspect", files=bad).status_code == 422
    assert client.post("/ntv2/inspect", data={"path": str(tmp_path / "nope.gsb")}).status_code == 404
