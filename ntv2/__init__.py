"""NTv2 datum shift grids: file readers, sub-grid hierarchy and shift lookup."""

from .loader import GridCache, load_grid_file
from .model import Grid, GridFile, GridFileHeader, GridHeader

__all__ = ["Grid", "GridFile", "GridFileHeader", "GridHeader", "GridCache", "load_grid_file"]
