"""NTv2 grid file model and shift lookup.

Bounds are kept in degrees with longitudes positive east; the file itself
stores longitudes positive west, so ``E_LONG``/``W_LONG`` are negated when
a grid is indexed. Shift records are ``(lat_shift, lon_shift)`` in the
file's data unit, laid out row by row from the south-east corner going
west.
"""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple

from app.crs.errors import FormatError, UnknownParentGridError

logger = logging.getLogger(__name__)

EXPECTED_OREC = 11
EXPECTED_SREC = 11
MAX_INVERSE_ITERATIONS = 10
INVERSE_EPSILON = 1e-12

ShiftRecord = Tuple[float, float]

# GS_TYPE -> (header units to degrees, data units to arc-seconds)
_CONVERSIONS: Dict[str, Tuple[float, float]] = {
    "SECONDS": (1.0 / 3600.0, 1.0),
    "MINUTES": (1.0 / 60.0, 60.0),
    "DEGREES": (1.0, 3600.0),
}


@dataclass
class GridFileHeader:
    NUM_OREC: int = EXPECTED_OREC
    NUM_SREC: int = EXPECTED_SREC
    NUM_FILE: int = 0
    GS_TYPE: str = "SECONDS"
    VERSION: str = ""
    SYSTEM_F: str = ""
    SYSTEM_T: str = ""
    MAJOR_F: float = 0.0
    MINOR_F: float = 0.0
    MAJOR_T: float = 0.0
    MINOR_T: float = 0.0


@dataclass
class GridHeader:
    SUB_NAME: str = ""
    PARENT: str = "NONE"
    CREATED: str = ""
    UPDATED: str = ""
    S_LAT: float = 0.0
    N_LAT: float = 0.0
    E_LONG: float = 0.0
    W_LONG: float = 0.0
    LAT_INC: float = 0.0
    LONG_INC: float = 0.0
    GS_COUNT: int = 0


@dataclass(eq=False)
class Grid:
    header: GridHeader
    shifts: List[ShiftRecord]
    accuracies: Optional[List[ShiftRecord]] = None
    parent: Optional["Grid"] = field(default=None, repr=False)
    children: List["Grid"] = field(default_factory=list, repr=False)
    lat_min: float = 0.0
    lat_max: float = 0.0
    lat_inc: float = 0.0
    lon_min: float = 0.0
    lon_max: float = 0.0
    lon_inc: float = 0.0
    rows: int = 0
    columns: int = 0

    @property
    def name(self) -> str:
        return self.header.SUB_NAME

    def index(self, header_conversion: float) -> None:
        h = self.header
        self.lat_min = h.S_LAT * header_conversion
        self.lat_max = h.N_LAT * header_conversion
        self.lat_inc = h.LAT_INC * header_conversion
        self.lon_max = h.E_LONG * -header_conversion
        self.lon_min = h.W_LONG * -header_conversion
        self.lon_inc = h.LONG_INC * header_conversion
        if self.lat_inc <= 0 or self.lon_inc <= 0:
            raise FormatError(f"Sub-grid {h.SUB_NAME!r} has non-positive increments")
        self.rows = int(math.floor((self.lat_max - self.lat_min) / self.lat_inc + 0.5)) + 1
        self.columns = int(math.floor((self.lon_max - self.lon_min) / self.lon_inc + 0.5)) + 1
        if self.rows * self.columns != len(self.shifts):
            raise FormatError(
                f"Sub-grid {h.SUB_NAME!r} declares {self.rows}x{self.columns} nodes "
                f"but holds {len(self.shifts)} shift records"
            )

    def contains(self, lon: float, lat: float) -> bool:
        return self.lat_min < lat <= self.lat_max and self.lon_min < lon <= self.lon_max

    def summary(self) -> dict:
        return {
            "name": self.name,
            "parent": self.header.PARENT,
            "lat_min": self.lat_min,
            "lat_max": self.lat_max,
            "lon_min": self.lon_min,
            "lon_max": self.lon_max,
            "lat_inc": self.lat_inc,
            "lon_inc": self.lon_inc,
            "rows": self.rows,
            "columns": self.columns,
            "children": [c.name for c in self.children],
        }


class GridFile:
    """All sub-grids of one NTv2 file, linked into their parent/child hierarchy."""

    def __init__(self, header: GridFileHeader, grids: List[Grid], source: str = ""):
        conversion = _CONVERSIONS.get(header.GS_TYPE.strip().upper())
        if conversion is None:
            raise FormatError(f"Invalid GS_TYPE specified: {header.GS_TYPE!r}")
        self.header = header
        self.source = source
        self.header_conversion, self.data_conversion = conversion
        self.grids = grids
        self._link()

    def _link(self) -> None:
        by_name: Dict[str, Grid] = {}
        for g in self.grids:
            by_name[g.name] = g
        self.lat_min = self.lon_min = math.inf
        self.lat_max = self.lon_max = -math.inf
        for g in self.grids:
            g.index(self.header_conversion)
            self.lat_min = min(self.lat_min, g.lat_min)
            self.lat_max = max(self.lat_max, g.lat_max)
            self.lon_min = min(self.lon_min, g.lon_min)
            self.lon_max = max(self.lon_max, g.lon_max)
            parent_name = g.header.PARENT.strip()
            if parent_name.upper() == "NONE":
                continue
            parent = by_name.get(parent_name)
            if parent is None:
                raise UnknownParentGridError(g.name, parent_name)
            g.parent = parent
            parent.children.append(g)

    @property
    def top_level(self) -> List[Grid]:
        return [g for g in self.grids if g.parent is None]

    # -----------------------------
    # Lookup
    # -----------------------------

    def find_grid(self, lon: float, lat: float) -> Optional[Grid]:
        """Deepest sub-grid containing the point; first match wins at each level."""
        grid = next((g for g in self.top_level if g.contains(lon, lat)), None)
        if grid is None:
            return None
        while True:
            child = next((c for c in grid.children if c.contains(lon, lat)), None)
            if child is None:
                return grid
            grid = child

    def shift(self, lon: float, lat: float, grid: Grid) -> Optional[Tuple[float, float]]:
        """Bilinear ``(dlon, dlat)`` in degrees, positive east/north; None outside ``grid``."""
        if lon < grid.lon_min or lon > grid.lon_max or lat < grid.lat_min or lat > grid.lat_max:
            return None
        fcol = (grid.lon_max - lon) / grid.lon_inc
        frow = (lat - grid.lat_min) / grid.lat_inc
        col = int(math.floor(fcol))
        row = int(math.floor(frow))
        ppr = grid.columns
        ppc = grid.rows

        se = row * ppr + col
        sw = se + 1
        ne = se + ppr
        nw = ne + 1
        if col >= ppr - 1:
            # west border
            sw = se
            nw = ne
        if row >= ppc - 1:
            # north border
            ne = se
            nw = sw

        dx = fcol - math.floor(fcol)
        dy = frow - math.floor(frow)
        s = grid.shifts
        w_se = (1.0 - dx) * (1.0 - dy)
        w_sw = dx * (1.0 - dy)
        w_ne = (1.0 - dx) * dy
        w_nw = dx * dy
        slat = w_se * s[se][0] + w_sw * s[sw][0] + w_ne * s[ne][0] + w_nw * s[nw][0]
        slon = w_se * s[se][1] + w_sw * s[sw][1] + w_ne * s[ne][1] + w_nw * s[nw][1]
        return -slon * self.data_conversion / 3600.0, slat * self.data_conversion / 3600.0

    def transform(self, lon: float, lat: float, inverse: bool = False) -> Optional[Tuple[float, float]]:
        """Shifted ``(lon, lat)`` in degrees, or None when no grid covers the point."""
        grid = self.find_grid(lon, lat)
        if grid is None:
            return None
        if not inverse:
            d = self.shift(lon, lat, grid)
            if d is None:
                return None
            return lon + d[0], lat + d[1]

        qlon, qlat = lon, lat
        for _ in range(MAX_INVERSE_ITERATIONS):
            d = self.shift(qlon, qlat, grid)
            if d is None:
                return None
            dlon = qlon + d[0] - lon
            dlat = qlat + d[1] - lat
            if _almost_zero(dlon, lon) and _almost_zero(dlat, lat):
                break
            qlon -= dlon
            qlat -= dlat
        return qlon, qlat

    def summary(self) -> dict:
        return {
            "source": self.source,
            "header": asdict(self.header),
            "bounds": {
                "lat_min": self.lat_min,
                "lat_max": self.lat_max,
                "lon_min": self.lon_min,
                "lon_max": self.lon_max,
            },
            "grids": [g.summary() for g in self.grids],
        }

    def __repr__(self) -> str:
        return f"GridFile({self.source!r}, grids={len(self.grids)})"


def _almost_zero(delta: float, reference: float) -> bool:
    return abs(delta) <= INVERSE_EPSILON * max(1.0, abs(reference))


__all__ = [
    "EXPECTED_OREC",
    "EXPECTED_SREC",
    "ShiftRecord",
    "GridFileHeader",
    "GridHeader",
    "Grid",
    "GridFile",
]
