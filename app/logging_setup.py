"""Process-wide logging for the service and the CLI.

``ENABLE_JSON_LOGS=1`` (default) writes one JSON object per line; otherwise
a compact ``HH:MM:SS L logger: msg key=value`` line. Either way the fields
passed through ``extra=`` (request id, route, status, timings, transform
source/target/point counts) are carried on the line.
"""
from __future__ import annotations

import json
import logging
import sys
import uuid
from time import perf_counter
from typing import Any, Dict, Optional

from app.settings import Settings, load_settings

REQUEST_ID_HEADER = "X-Request-ID"

# attributes every LogRecord carries; anything else arrived through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line.update(_record_extras(record))
        if record.exc_info and record.exc_info[0] is not None:
            line["exc_type"] = record.exc_info[0].__name__
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


class _PlainFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        text = f"{self.formatTime(record, datefmt='%H:%M:%S')} {record.levelname[0]} {record.name}: {record.getMessage()}"
        extras = _record_extras(record)
        if extras:
            text += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install a single stdout handler on the root logger; later calls are no-ops."""
    if getattr(configure_logging, "_configured", False):
        return
    settings = settings or load_settings()
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if settings.json_logs else _PlainFormatter())
    root.addHandler(handler)
    configure_logging._configured = True  # type: ignore[attr-defined]


async def logging_middleware(request, call_next):
    # reuse an upstream id when the caller sent one
    rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
    request.state.request_id = rid
    log = logging.getLogger("request")
    started = perf_counter()
    status = None
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers[REQUEST_ID_HEADER] = rid
        return response
    finally:
        log.info(
            "request.end",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round((perf_counter() - started) * 1000.0, 2),
            },
        )


__all__ = ["REQUEST_ID_HEADER", "configure_logging", "logging_middleware"]
