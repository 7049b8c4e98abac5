"""Open NTv2 files by extension and memoise them per path."""
from __future__ import annotations

import logging
import os
import threading
from typing import Dict

from app.crs.errors import FormatError

from .binary_reader import read_binary_grid
from .model import GridFile
from .text_reader import read_text_grid

logger = logging.getLogger(__name__)


def load_grid_file(path: str, accuracies: bool = False) -> GridFile:
    """Read ``.gsb`` (binary) or ``.gsa`` (text) grid files."""
    ext = os.path.splitext(path)[1].lower()
    if ext == ".gsb":
        grid_file = read_binary_grid(path, accuracies)
    elif ext == ".gsa":
        grid_file = read_text_grid(path, accuracies)
    else:
        raise FormatError(f"Unsupported grid file extension {ext!r} (expected .gsb or .gsa)")
    logger.info(
        "ntv2.loaded path=%s gs_type=%s subgrids=%d",
        path,
        grid_file.header.GS_TYPE,
        len(grid_file.grids),
    )
    return grid_file


class GridCache:
    """Thread-safe path -> GridFile memo; a file is read at most once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files: Dict[str, GridFile] = {}

    def get(self, path: str) -> GridFile:
        key = os.path.abspath(path)
        with self._lock:
            cached = self._files.get(key)
            if cached is None:
                cached = load_grid_file(path)
                self._files[key] = cached
            return cached

    def clear(self) -> None:
        with self._lock:
            self._files.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)


__all__ = ["load_grid_file", "GridCache"]
