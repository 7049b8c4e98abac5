import json
import logging

from fastapi.testclient import TestClient

from app.logging_setup import REQUEST_ID_HEADER, _JsonFormatter, _PlainFormatter
from app.main import app

client = TestClient(app)


def _record(**extra):
    record = logging.LogRecord("request", logging.INFO, __file__, 1, "request.end", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_lines_carry_extra_fields():
    line = json.loads(_JsonFormatter().format(_record(request_id="abc", status=200, points=3)))
    assert line["msg"] == "request.end"
    assert line["logger"] == "request"
    assert (line["request_id"], line["status"], line["points"]) == ("abc", 200, 3)
    assert "exc_type" not in line


def test_plain_lines_list_extra_fields():
    text = _PlainFormatter().format(_record(request_id="abc", path="/health"))
    assert " I request: request.end " in text
    assert text.endswith("request_id=abc path=/health")


def test_request_id_header():
    resp = client.get("/health")
    assert len(resp.headers[REQUEST_ID_HEADER]) == 8
    resp = client.get("/health", headers={REQUEST_ID_HEADER: "upstream-1"})
    assert resp.headers[REQUEST_ID_HEADER] == "upstream-1"
