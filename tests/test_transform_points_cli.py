import io

import pytest

from scripts.transform_points import main, read_points

from tests.wkt_samples import ETRS89_UTM32


def test_read_points_skips_header_and_blank_rows():
    fh = io.StringIO("x,y\n\n1,2\n3,4,5\n")
    assert read_points(fh) == [[1.0, 2.0], [3.0, 4.0, 5.0]]
    with pytest.raises(ValueError):
        read_points(io.StringIO("1,2,3,4\n"))


def test_transform_csv_with_catalog(tmp_path, monkeypatch):
    monkeypatch.delenv("CRS_CATALOG_PATH", raising=False)
    catalog = tmp_path / "catalog.txt"
    catalog.write_text("25832;" + ETRS89_UTM32 + "\n", encoding="utf-8")
    src = tmp_path / "in.csv"
    src.write_text("easting,northing\n500000,0\n", encoding="utf-8")
    out = tmp_path / "out.csv"

    rc = main(
        ["--source", "25832", "--target", "4326", "--input", str(src), "--output", str(out), "--catalog", str(catalog)]
    )
    assert rc == 0
    lon, lat = (float(v) for v in out.read_text().strip().split(","))
    assert lon == pytest.approx(9.0, abs=1e-6)
    assert lat == pytest.approx(0.0, abs=1e-6)


def test_unknown_srid_exits_with_error(tmp_path, capsys):
    src = tmp_path / "in.csv"
    src.write_text("1,2\n", encoding="utf-8")
    assert main(["--source", "4326", "--target", "999", "--input", str(src)]) == 2
    assert "Cannot transform 4326 -> 999" in capsys.readouterr().err
