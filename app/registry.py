"""Coordinate system registry service.

Population (EPSG:4326, EPSG:3857 and the optional catalog file) runs once in
a background worker started by the constructor. Every lookup waits on that
future first; afterwards a single lock guards both indexes so readers never
see the srid and authority maps out of step.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Dict, Iterable, List, Optional, Tuple, Union

from app.crs.catalog import load_catalog, read_catalog_file
from app.crs.errors import CrsError
from app.crs.model import WEB_MERCATOR, WGS84, CoordinateSystem
from app.crs.wkt_reader import WktReader
from transforms.concatenated import ConcatenatedTransform
from transforms.factory import CoordinateTransformationFactory, DatumGrids

logger = logging.getLogger(__name__)

SystemRef = Union[int, CoordinateSystem]


class RegistryTimeoutError(CrsError):
    pass


class UnknownSystemError(CrsError, LookupError):
    def __init__(self, srid: int):
        self.srid = srid
        super().__init__(f"No coordinate system registered for srid {srid}")


DEFAULT_SYSTEMS: Tuple[Tuple[int, CoordinateSystem], ...] = ((4326, WGS84), (3857, WEB_MERCATOR))


class CoordinateSystemRegistry:
    def __init__(
        self,
        catalog_path: Optional[str] = None,
        entries: Optional[Iterable[Tuple[int, str]]] = None,
        datum_grids: Optional[DatumGrids] = None,
        timeout: float = 30.0,
        reader: Optional[WktReader] = None,
    ):
        self.reader = reader or WktReader()
        self.factory = CoordinateTransformationFactory(projections=self.reader.projections, datum_grids=datum_grids)
        self.timeout = timeout
        self._lock = threading.Lock()
        self._by_srid: Dict[int, CoordinateSystem] = {}
        self._by_authority: Dict[Tuple[str, int], int] = {}
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="crs-registry")
        self._ready: Future = executor.submit(self._populate, catalog_path, entries)
        executor.shutdown(wait=False)

    # -----------------------------
    # Population
    # -----------------------------

    def _populate(self, catalog_path: Optional[str], entries: Optional[Iterable[Tuple[int, str]]]) -> int:
        logger.info("registry.populate.start catalog=%s", catalog_path)
        for srid, cs in DEFAULT_SYSTEMS:
            self._insert(srid, cs)
        loaded = 0
        try:
            if catalog_path:
                loaded += self._load(read_catalog_file(catalog_path))
            if entries is not None:
                loaded += self._load(entries)
        except OSError as exc:
            logger.error("registry.catalog_unreadable path=%s error=%s", catalog_path, exc)
        logger.info("registry.populate.done systems=%d catalog_entries=%d", len(self._by_srid), loaded)
        return loaded

    def _load(self, entries: Iterable[Tuple[int, str]]) -> int:
        result = load_catalog(entries, self.reader)
        for srid, cs in result.systems.items():
            self._insert(srid, cs)
        return len(result.systems)

    def wait_ready(self) -> None:
        try:
            self._ready.result(timeout=self.timeout)
        except FutureTimeout as exc:
            raise RegistryTimeoutError(f"Registry not populated after {self.timeout}s") from exc

    # -----------------------------
    # Index maintenance
    # -----------------------------

    @staticmethod
    def _authority_key(authority: str, code: int) -> Tuple[str, int]:
        return authority.upper(), int(code)

    def _insert(self, srid: int, cs: CoordinateSystem) -> None:
        with self._lock:
            previous = self._by_srid.get(srid)
            if previous is cs:
                return
            if previous is not None and previous.has_authority:
                self._by_authority.pop(self._authority_key(previous.authority, previous.authority_code), None)
            self._by_srid[srid] = cs
            if cs.has_authority:
                self._by_authority[self._authority_key(cs.authority, cs.authority_code)] = srid

    # -----------------------------
    # Lookup contract
    # -----------------------------

    def get_coordinate_system(self, srid: int) -> Optional[CoordinateSystem]:
        self.wait_ready()
        with self._lock:
            return self._by_srid.get(int(srid))

    def get_srid(self, authority: str, code: int) -> Optional[int]:
        self.wait_ready()
        with self._lock:
            return self._by_authority.get(self._authority_key(authority, code))

    def get_by_authority(self, authority: str, code: int) -> Optional[CoordinateSystem]:
        srid = self.get_srid(authority, code)
        return None if srid is None else self.get_coordinate_system(srid)

    def add(self, srid: int, cs: CoordinateSystem) -> None:
        self.wait_ready()
        self._insert(int(srid), cs)
        logger.info("registry.added srid=%s name=%s", srid, cs.name)

    def add_system(self, cs: CoordinateSystem) -> int:
        """Register under the system's own authority code, which becomes its srid."""
        if not cs.has_authority:
            raise ValueError(f"Coordinate system {cs.name!r} has no authority code")
        self.add(cs.authority_code, cs)
        return cs.authority_code

    def add_wkt(self, srid: int, wkt: str) -> CoordinateSystem:
        cs = self.reader.parse_coordinate_system(wkt)
        self.add(srid, cs)
        return cs

    def remove(self, srid: int) -> bool:
        self.wait_ready()
        with self._lock:
            cs = self._by_srid.pop(int(srid), None)
            if cs is None:
                return False
            stale = [k for k, v in self._by_authority.items() if v == int(srid)]
            for key in stale:
                del self._by_authority[key]
        logger.info("registry.removed srid=%s", srid)
        return True

    def items(self) -> List[Tuple[int, CoordinateSystem]]:
        self.wait_ready()
        with self._lock:
            return sorted(self._by_srid.items())

    def __len__(self) -> int:
        self.wait_ready()
        with self._lock:
            return len(self._by_srid)

    # -----------------------------
    # Transformations
    # -----------------------------

    def resolve(self, ref: SystemRef) -> CoordinateSystem:
        if isinstance(ref, CoordinateSystem):
            return ref
        cs = self.get_coordinate_system(int(ref))
        if cs is None:
            raise UnknownSystemError(int(ref))
        return cs

    def create_transformation(self, source: SystemRef, target: SystemRef) -> ConcatenatedTransform:
        return self.factory.create(self.resolve(source), self.resolve(target))


__all__ = [
    "CoordinateSystemRegistry",
    "RegistryTimeoutError",
    "UnknownSystemError",
    "DEFAULT_SYSTEMS",
]
