from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import CrsError
from .model import CoordinateSystem
from .wkt_reader import WktReader

logger = logging.getLogger(__name__)

# Catalog files hold one "srid;wkt" definition per line; '#' starts a comment line.


@dataclass(frozen=True)
class EntryResult:
    srid: int
    system: Optional[CoordinateSystem] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.system is not None


@dataclass
class CatalogLoad:
    systems: Dict[int, CoordinateSystem] = field(default_factory=dict)
    skipped: List[Tuple[int, str]] = field(default_factory=list)

    def add(self, result: EntryResult) -> "CatalogLoad":
        if result.ok:
            self.systems[result.srid] = result.system
        else:
            self.skipped.append((result.srid, result.error))
        return self


def read_catalog_file(path: str) -> Iterator[Tuple[int, str]]:
    with open(path, "r", encoding="utf-8") as fh:
        for lineno, raw in enumerate(fh, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            srid_text, sep, wkt = line.partition(";")
            if not sep:
                logger.warning("catalog.bad_line path=%s line=%d", path, lineno)
                continue
            try:
                srid = int(srid_text.strip())
            except ValueError:
                logger.warning("catalog.bad_srid path=%s line=%d srid=%r", path, lineno, srid_text)
                continue
            yield srid, wkt.strip()


def parse_entry(srid: int, wkt: str, reader: WktReader) -> EntryResult:
    """One catalog entry as a result value; reader failures become an error message."""
    try:
        system = reader.parse_coordinate_system(wkt)
    except (CrsError, ValueError) as exc:
        return EntryResult(srid, error=str(exc))
    return EntryResult(srid, system=system)


def load_catalog(entries: Iterable[Tuple[int, str]], reader: Optional[WktReader] = None) -> CatalogLoad:
    reader = reader or WktReader()
    load = CatalogLoad()
    for srid, wkt in entries:
        load.add(parse_entry(srid, wkt, reader))
    for srid, reason in load.skipped:
        logger.warning("catalog.skipped srid=%s reason=%s", srid, reason)
    logger.info("catalog.loaded systems=%d skipped=%d", len(load.systems), len(load.skipped))
    return load


__all__ = ["EntryResult", "CatalogLoad", "read_catalog_file", "parse_entry", "load_catalog"]
