"""Environment-driven configuration.

All knobs are plain environment variables; malformed numbers fall back to
their defaults rather than failing start-up.

  LOG_LEVEL              root log level (default INFO)
  ENABLE_JSON_LOGS=1     JSON log lines (default), 0 for the plain formatter
  CRS_CATALOG_PATH       optional "srid;wkt" catalog loaded into the registry
  CRS_NTV2_GRIDS         "source>target=path;..." NTv2 grid per datum pair
  CRS_REGISTRY_TIMEOUT   seconds a lookup waits for registry population (30)
  CRS_MAX_POINTS         maximum points per /transform request (100000)
  REDIS_URL              e.g. redis://redis:6379/0; unset means no cache
  CACHE_DISABLE=1        force the cache off even when REDIS_URL is set
  CACHE_PREFIX           key namespace (default 'crs')
  CACHE_TTL_SECONDS      lifetime of cached transform results (3600)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from app.crs.parameters import normalize_name

logger = logging.getLogger(__name__)

DatumGrids = Dict[Tuple[str, str], str]


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    json_logs: bool = True
    catalog_path: Optional[str] = None
    datum_grids: DatumGrids = field(default_factory=dict)
    registry_timeout: float = 30.0
    max_points: int = 100_000
    redis_url: Optional[str] = None
    cache_disabled: bool = False
    cache_prefix: str = "crs"
    cache_ttl: int = 3600

    @property
    def cache_enabled(self) -> bool:
        return bool(self.redis_url) and not self.cache_disabled


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("settings.invalid_number name=%s value=%r", name, raw)
        return default


def parse_datum_grids(raw: Optional[str]) -> DatumGrids:
    """``"NAD27>NAD83=/grids/ntv2_0.gsb;..."`` -> ``{("nad27", "nad83"): "/grids/ntv2_0.gsb"}``."""
    out: DatumGrids = {}
    for entry in (raw or "").split(";"):
        entry = entry.strip()
        if not entry:
            continue
        pair, sep, path = entry.partition("=")
        source, arrow, target = pair.partition(">")
        if not sep or not arrow or not source.strip() or not target.strip() or not path.strip():
            logger.warning("settings.bad_grid_entry entry=%r", entry)
            continue
        out[(normalize_name(source), normalize_name(target))] = path.strip()
    return out


def load_settings() -> Settings:
    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        json_logs=os.getenv("ENABLE_JSON_LOGS", "1") == "1",
        catalog_path=os.getenv("CRS_CATALOG_PATH") or None,
        datum_grids=parse_datum_grids(os.getenv("CRS_NTV2_GRIDS")),
        registry_timeout=_float_env("CRS_REGISTRY_TIMEOUT", 30.0),
        max_points=int(_float_env("CRS_MAX_POINTS", 100_000)),
        redis_url=os.getenv("REDIS_URL") or None,
        cache_disabled=os.getenv("CACHE_DISABLE") == "1",
        cache_prefix=os.getenv("CACHE_PREFIX", "crs"),
        cache_ttl=int(_float_env("CACHE_TTL_SECONDS", 3600)),
    )


__all__ = ["Settings", "DatumGrids", "parse_datum_grids", "load_settings"]
