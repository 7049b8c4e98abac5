"""Homogeneous affine transform (``PARAM_MT["Affine", ...]``)."""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from app.crs.errors import SingularMatrixError
from app.crs.wkt_writer import format_number, quote

from .base import MathTransform, Point3


def _as_matrix(rows) -> np.ndarray:
    matrix = np.array(rows, dtype=float)
    if matrix.ndim != 2 or matrix.size == 0:
        raise ValueError("Affine matrix rows must be non-empty and of equal length")
    matrix.setflags(write=False)
    return matrix


def invert_matrix(matrix) -> np.ndarray:
    m = np.asarray(matrix, dtype=float)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise SingularMatrixError("Only square matrices can be inverted")
    # rank uses an SVD tolerance relative to the largest singular value
    if np.linalg.matrix_rank(m) < m.shape[0]:
        raise SingularMatrixError("Affine matrix is not invertible")
    try:
        inverse = np.linalg.inv(m)
    except np.linalg.LinAlgError as exc:
        raise SingularMatrixError(f"Affine matrix is not invertible: {exc}") from exc
    if not np.all(np.isfinite(inverse)):
        raise SingularMatrixError("Affine matrix inverse is not finite")
    return _as_matrix(inverse)


class AffineTransform(MathTransform):
    """``num_row x num_col`` matrix acting on homogeneous coordinates.

    The inverse matrix is computed once on first use. The transform
    returned by ``invert()`` remembers this matrix as its own inverse, so
    inverting twice reproduces the original matrix exactly.
    """

    def __init__(self, matrix: Sequence[Sequence[float]], inverse_matrix: Optional[np.ndarray] = None):
        self.matrix = _as_matrix(matrix)
        self.num_row, self.num_col = self.matrix.shape
        self.dim_source = self.num_col - 1
        self.dim_target = self.num_row - 1
        self._inverse_matrix = inverse_matrix

    @classmethod
    def identity(cls, dimension: int = 2) -> "AffineTransform":
        return cls(np.eye(dimension + 1))

    @classmethod
    def from_elements(cls, num_row: int, num_col: int, elements: dict) -> "AffineTransform":
        """Build from ``{(i, j): value}``; absent entries take identity values."""
        matrix = np.eye(num_row, num_col)
        for (i, j), value in elements.items():
            if i < num_row and j < num_col:
                matrix[i, j] = float(value)
        return cls(matrix)

    def apply(self, x: float, y: float, z: float = 0.0) -> Point3:
        ordinates = (x, y, z)
        src = np.array(ordinates[: self.dim_source] + (1.0,))
        out = self.matrix @ src
        w = out[-1]
        if w != 1.0 and w != 0.0:
            out = out / w
        values = [float(v) for v in out[:-1]] + list(ordinates[self.dim_target :])
        return values[0], values[1], values[2]

    def inverse_matrix(self) -> np.ndarray:
        if self._inverse_matrix is None:
            self._inverse_matrix = invert_matrix(self.matrix)
        return self._inverse_matrix

    def invert(self) -> "AffineTransform":
        return AffineTransform(self.inverse_matrix(), inverse_matrix=self.matrix)

    @property
    def is_identity(self) -> bool:
        return self.num_row == self.num_col and bool(np.array_equal(self.matrix, np.eye(self.num_row)))

    @property
    def wkt(self) -> str:
        parts = [
            quote("Affine"),
            f"PARAMETER[{quote('num_row')}, {self.num_row}]",
            f"PARAMETER[{quote('num_col')}, {self.num_col}]",
        ]
        identity = np.eye(self.num_row, self.num_col)
        for i, j in zip(*np.nonzero(self.matrix != identity)):
            parts.append(f"PARAMETER[{quote(f'elt_{i}_{j}')}, {format_number(float(self.matrix[i, j]))}]")
        return f"PARAM_MT[{', '.join(parts)}]"

    def _key(self) -> tuple:
        return tuple(tuple(row) for row in self.matrix.tolist())

    def __repr__(self) -> str:
        return f"AffineTransform({self.matrix.tolist()!r})"


__all__ = ["invert_matrix", "AffineTransform"]
