# planar_mbs/kernel/sparse.py
"""
FIXED-PATTERN SPARSE MATRICES
=============================

PURPOSE:
--------
The constraint Jacobian Phi_q of a multibody model is very sparse: a
constant-distance constraint touches at most 4 columns of q no matter how
large the model is. More importantly, WHICH entries can be nonzero never
changes during a simulation; only their values do.

So we split a sparse matrix in two parts:

    SparsityPattern   (row, col) positions, registered once, then frozen
    SparseRowMatrix   a values array aligned with the pattern

Every entry gets a "slot" (an integer handle) when it is registered.
Constraint objects keep their slots and write values[slot] at update time,
without any lookup. Several matrices (Phi_q, dotPhi_q, ...) share one
pattern, so one slot addresses the same (row, col) in all of them.

USAGE:
------
    pattern = SparsityPattern(n_cols=5)
    row = pattern.add_row()
    slot = pattern.register(row, 3)

    Phi_q = SparseRowMatrix(pattern)
    Phi_q.values[slot] = -1.0

    Phi_q.to_csr()      # scipy.sparse.csr_matrix, shape (1, 5)
"""

import logging
from typing import Dict, List, Tuple

import numpy as np
import scipy.sparse

from .errors import AssemblyError, ModelIndexError

logger = logging.getLogger(__name__)


class SparsityPattern:
    """
    Set of (row, col) positions shared by a family of sparse matrices.

    Rows can be appended at any time (existing entries are unaffected).
    Entries can only be registered until freeze() is called.
    """

    def __init__(self, n_cols: int = 0):
        self.n_rows = 0
        self.n_cols = n_cols
        self._rows: List[int] = []
        self._cols: List[int] = []
        self._index: Dict[Tuple[int, int], int] = {}
        self._matrices: List["SparseRowMatrix"] = []
        self._frozen = False

    @property
    def nnz(self) -> int:
        return len(self._rows)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def rows(self) -> np.ndarray:
        return np.asarray(self._rows, dtype=int)

    @property
    def cols(self) -> np.ndarray:
        return np.asarray(self._cols, dtype=int)

    def set_col_count(self, n_cols: int) -> None:
        self.n_cols = n_cols

    def add_row(self) -> int:
        """Append one empty row and return its index."""
        self.n_rows += 1
        return self.n_rows - 1

    def register(self, row: int, col: int) -> int:
        """
        Declare that (row, col) may hold a nonzero value.

        Registering the same position twice returns the same slot, so
        contributions written to it must be accumulated.

        Returns:
            slot: index into the values array of every attached matrix

        Raises:
            AssemblyError: if the pattern is frozen
            ModelIndexError: if (row, col) is outside the matrix shape
        """
        key = (row, col)
        if key in self._index:
            return self._index[key]

        if self._frozen:
            raise AssemblyError(
                f"Cannot register entry ({row}, {col}): sparsity pattern is frozen"
            )
        if not (0 <= row < self.n_rows and 0 <= col < self.n_cols):
            raise ModelIndexError(
                f"Entry ({row}, {col}) outside matrix of shape ({self.n_rows}, {self.n_cols})"
            )

        slot = len(self._rows)
        self._rows.append(row)
        self._cols.append(col)
        self._index[key] = slot
        for m in self._matrices:
            m._grow(slot + 1)
        return slot

    def slot(self, row: int, col: int):
        """Slot of (row, col), or None if the position is structurally zero."""
        return self._index.get((row, col))

    def freeze(self) -> None:
        self._frozen = True
        logger.debug(
            "Sparsity pattern frozen: %d x %d, nnz=%d", self.n_rows, self.n_cols, self.nnz
        )

    def _attach(self, matrix: "SparseRowMatrix") -> None:
        self._matrices.append(matrix)


class SparseRowMatrix:
    """
    Sparse matrix whose nonzero positions come from a shared SparsityPattern.

    Attributes:
    -----------
    pattern : SparsityPattern
        The (possibly shared) structure of this matrix
    values : np.ndarray
        One value per registered slot, shape (pattern.nnz,)
    """

    def __init__(self, pattern: SparsityPattern):
        self.pattern = pattern
        self.values = np.zeros(pattern.nnz, dtype=float)
        pattern._attach(self)

    def _grow(self, nnz: int) -> None:
        if nnz > len(self.values):
            self.values = np.concatenate([self.values, np.zeros(nnz - len(self.values))])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.pattern.n_rows, self.pattern.n_cols

    @property
    def row_count(self) -> int:
        return self.pattern.n_rows

    @property
    def col_count(self) -> int:
        return self.pattern.n_cols

    def __getitem__(self, key: Tuple[int, int]) -> float:
        row, col = key
        if not (0 <= row < self.pattern.n_rows and 0 <= col < self.pattern.n_cols):
            raise ModelIndexError(f"Entry ({row}, {col}) outside matrix of shape {self.shape}")
        slot = self.pattern.slot(row, col)
        return 0.0 if slot is None else float(self.values[slot])

    def row(self, row: int) -> Dict[int, float]:
        """Nonzero entries of one row, as {col: value}."""
        return {
            c: float(self.values[s])
            for s, (r, c) in enumerate(zip(self.pattern._rows, self.pattern._cols))
            if r == row
        }

    def column(self, col: int) -> Dict[int, float]:
        """Nonzero entries of one column, as {row: value}."""
        return {
            r: float(self.values[s])
            for s, (r, c) in enumerate(zip(self.pattern._rows, self.pattern._cols))
            if c == col
        }

    def dot(self, x: np.ndarray) -> np.ndarray:
        """Matrix-vector product A @ x."""
        x = np.asarray(x, dtype=float)
        if x.shape != (self.pattern.n_cols,):
            raise ValueError(f"Vector of shape {x.shape} incompatible with matrix {self.shape}")
        rows = self.pattern.rows
        cols = self.pattern.cols
        return np.bincount(rows, weights=self.values * x[cols], minlength=self.pattern.n_rows)

    def to_csr(self) -> scipy.sparse.csr_matrix:
        return scipy.sparse.csr_matrix(
            (self.values.copy(), (self.pattern.rows, self.pattern.cols)), shape=self.shape
        )

    def toarray(self) -> np.ndarray:
        A = np.zeros(self.shape, dtype=float)
        np.add.at(A, (self.pattern.rows, self.pattern.cols), self.values)
        return A
