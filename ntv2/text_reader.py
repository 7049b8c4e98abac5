"""Reader for ASCII NTv2 files (``.gsa``).

Header lines carry the record name in the first 8 characters and the value
after it. Shift lines hold two floats (latitude and longitude shift) or
four (with accuracies), separated by whitespace.
"""
from __future__ import annotations

import io
from typing import Callable, Dict, Iterator, List, Optional, TextIO, Tuple

from app.crs.errors import FormatError

from .model import EXPECTED_OREC, EXPECTED_SREC, Grid, GridFile, GridFileHeader, GridHeader, ShiftRecord

_FILE_FIELDS: Dict[str, Callable[[str], object]] = {
    "NUM_OREC": int,
    "NUM_SREC": int,
    "NUM_FILE": int,
    "GS_TYPE": str,
    "VERSION": str,
    "SYSTEM_F": str,
    "SYSTEM_T": str,
    "MAJOR_F": float,
    "MINOR_F": float,
    "MAJOR_T": float,
    "MINOR_T": float,
}

_GRID_FIELDS: Dict[str, Callable[[str], object]] = {
    "SUB_NAME": str,
    "PARENT": str,
    "CREATED": str,
    "UPDATED": str,
    "S_LAT": float,
    "N_LAT": float,
    "E_LONG": float,
    "W_LONG": float,
    "LAT_INC": float,
    "LONG_INC": float,
    "GS_COUNT": int,
}


def _lines(stream: TextIO) -> Iterator[str]:
    for line in stream:
        line = line.rstrip("\r\n")
        if line.strip():
            yield line


class TextGridReader:
    def __init__(self, stream: TextIO, source: str = ""):
        self._lines = _lines(stream)
        self.source = source

    def _records(self, count: int, what: str) -> Iterator[Tuple[str, str]]:
        for _ in range(count):
            line = next(self._lines, None)
            if line is None:
                raise FormatError(f"Invalid {what} in {self.source!r}: file ended early")
            yield line[:8].strip().upper(), line[8:].strip()

    def _fill(self, target: object, fields: Dict[str, Callable[[str], object]], count: int, what: str) -> None:
        for key, value in self._records(count, what):
            convert = fields.get(key)
            if convert is None:
                continue
            try:
                setattr(target, key, convert(value))
            except ValueError as exc:
                raise FormatError(f"Invalid {key} value {value!r} in {self.source!r}") from exc

    def read_header(self) -> GridFileHeader:
        header = GridFileHeader(NUM_OREC=0, NUM_SREC=0)
        self._fill(header, _FILE_FIELDS, EXPECTED_OREC, "grid header")
        if header.NUM_OREC != EXPECTED_OREC:
            raise FormatError("Invalid grid header (expected NUM_OREC = 11)")
        if header.NUM_SREC != EXPECTED_SREC:
            raise FormatError("Invalid grid header (expected NUM_SREC = 11)")
        return header

    def read_grid_header(self) -> GridHeader:
        header = GridHeader()
        self._fill(header, _GRID_FIELDS, EXPECTED_SREC, "sub-grid header")
        return header

    def read_grid(self, header: GridHeader, accuracies: bool = False) -> Grid:
        shifts: List[ShiftRecord] = []
        accuracy: Optional[List[Tuple[float, float]]] = [] if accuracies else None
        for _ in range(header.GS_COUNT):
            line = next(self._lines, None)
            if line is None:
                raise FormatError(f"Sub-grid {header.SUB_NAME!r} in {self.source!r} is truncated")
            parts = line.split()
            try:
                values = [float(p) for p in parts[:4]]
            except ValueError as exc:
                raise FormatError(f"Invalid shift record {line!r}") from exc
            if len(values) < 2:
                raise FormatError(f"Invalid shift record {line!r}")
            shifts.append((values[0], values[1]))
            if accuracy is not None:
                accuracy.append((values[2], values[3]) if len(values) == 4 else (0.0, 0.0))
        return Grid(header=header, shifts=shifts, accuracies=accuracy)

    def read(self, accuracies: bool = False) -> GridFile:
        header = self.read_header()
        grids = []
        for _ in range(header.NUM_FILE):
            sub = self.read_grid_header()
            grids.append(self.read_grid(sub, accuracies))
        return GridFile(header, grids, source=self.source)


def read_text_grid(path: str, accuracies: bool = False) -> GridFile:
    with open(path, "r", encoding="ascii", errors="replace") as f:
        return TextGridReader(f, source=path).read(accuracies)


def parse_text_grid(text: str, source: str = "<text>", accuracies: bool = False) -> GridFile:
    return TextGridReader(io.StringIO(text), source=source).read(accuracies)


__all__ = ["TextGridReader", "read_text_grid", "parse_text_grid"]
