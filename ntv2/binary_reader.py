"""Reader for binary NTv2 files (``.gsb``).

Every header record is an 8-byte ASCII name followed by an 8-byte value:
a 4-byte integer (plus 4 pad bytes in most files) or an 8-byte double or
string. Byte order is detected from ``NUM_OREC``; whether integers carry
pad bytes is detected once from the four bytes that follow it.
"""
from __future__ import annotations

import io
import logging
import struct
from typing import BinaryIO, List, Optional, Tuple

from app.crs.errors import FormatError

from .model import EXPECTED_OREC, EXPECTED_SREC, Grid, GridFile, GridFileHeader, GridHeader, ShiftRecord

logger = logging.getLogger(__name__)

NAME_LEN = 8
NODE_LEN = 16


def _clean_string(raw: bytes) -> str:
    # trailing blanks, NULs and control bytes are padding
    end = len(raw)
    while end > 0 and not (0x20 < raw[end - 1] <= 0x7E):
        end -= 1
    return raw[:end].decode("ascii", errors="replace")


class BinaryGridReader:
    def __init__(self, stream: BinaryIO, source: str = ""):
        self._stream = stream
        self.source = source
        self.byte_order = "<"
        self.padding = False

    # -- primitives -------------------------------------------------

    def _read(self, n: int) -> bytes:
        data = self._stream.read(n)
        if len(data) != n:
            raise FormatError(f"Unexpected end of grid file {self.source!r}")
        return data

    def _skip_name(self) -> None:
        self._read(NAME_LEN)

    def _int(self) -> int:
        value = struct.unpack(self.byte_order + "i", self._read(4))[0]
        if self.padding:
            self._read(4)
        return value

    def _double(self) -> float:
        return struct.unpack(self.byte_order + "d", self._read(8))[0]

    def _string(self) -> str:
        return _clean_string(self._read(NAME_LEN))

    # -- records ----------------------------------------------------

    def read_header(self) -> GridFileHeader:
        header = GridFileHeader()
        self._skip_name()
        raw = self._read(4)
        k = struct.unpack("<i", raw)[0]
        if k != EXPECTED_OREC:
            k = struct.unpack(">i", raw)[0]
            if k != EXPECTED_OREC:
                raise FormatError("Invalid grid header (expected NUM_OREC = 11)")
            self.byte_order = ">"
        header.NUM_OREC = k

        pad = self._read(4)
        if struct.unpack(self.byte_order + "i", pad)[0] == 0:
            self.padding = True
        else:
            self._stream.seek(-4, io.SEEK_CUR)

        self._skip_name()
        header.NUM_SREC = self._int()
        if header.NUM_SREC != EXPECTED_SREC:
            raise FormatError("Invalid grid header (expected NUM_SREC = 11)")
        self._skip_name()
        header.NUM_FILE = self._int()
        for name in ("GS_TYPE", "VERSION", "SYSTEM_F", "SYSTEM_T"):
            self._skip_name()
            setattr(header, name, self._string())
        for name in ("MAJOR_F", "MINOR_F", "MAJOR_T", "MINOR_T"):
            self._skip_name()
            setattr(header, name, self._double())
        logger.debug(
            "ntv2.header source=%s byte_order=%s padding=%s num_file=%d",
            self.source,
            "big" if self.byte_order == ">" else "little",
            self.padding,
            header.NUM_FILE,
        )
        return header

    def read_grid_header(self) -> GridHeader:
        header = GridHeader()
        for name in ("SUB_NAME", "PARENT", "CREATED", "UPDATED"):
            self._skip_name()
            setattr(header, name, self._string())
        for name in ("S_LAT", "N_LAT", "E_LONG", "W_LONG", "LAT_INC", "LONG_INC"):
            self._skip_name()
            setattr(header, name, self._double())
        self._skip_name()
        header.GS_COUNT = self._int()
        if header.GS_COUNT < 0:
            raise FormatError(f"Negative GS_COUNT in sub-grid {header.SUB_NAME!r}")
        return header

    def read_grid(self, header: GridHeader, accuracies: bool = False) -> Grid:
        node = struct.Struct(self.byte_order + "4f")
        data = self._read(header.GS_COUNT * NODE_LEN)
        shifts: List[ShiftRecord] = []
        accuracy: Optional[List[Tuple[float, float]]] = [] if accuracies else None
        for lat_shift, lon_shift, lat_acc, lon_acc in node.iter_unpack(data):
            shifts.append((lat_shift, lon_shift))
            if accuracy is not None:
                accuracy.append((lat_acc, lon_acc))
        return Grid(header=header, shifts=shifts, accuracies=accuracy)

    def read(self, accuracies: bool = False) -> GridFile:
        header = self.read_header()
        grids = []
        for _ in range(header.NUM_FILE):
            sub = self.read_grid_header()
            grids.append(self.read_grid(sub, accuracies))
        return GridFile(header, grids, source=self.source)


def read_binary_grid(path: str, accuracies: bool = False) -> GridFile:
    with open(path, "rb") as f:
        return BinaryGridReader(f, source=path).read(accuracies)


def parse_binary_grid(data: bytes, source: str = "<bytes>", accuracies: bool = False) -> GridFile:
    return BinaryGridReader(io.BytesIO(data), source=source).read(accuracies)


__all__ = ["BinaryGridReader", "read_binary_grid", "parse_binary_grid"]
