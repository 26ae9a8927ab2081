from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from quantlib_api.exceptions import ConfigurationError
from quantlib_api.typing import FloatArray

__all__ = [
    "SymmetricTridiag",
    "solve_tridiag",
]


@dataclass(frozen=True, slots=True)
class SymmetricTridiag:
    """Symmetric tridiagonal matrix stored by its main and off diagonals.

    ``off`` holds the ``n - 1`` entries shared by the sub- and super-diagonal.
    The natural cubic spline moment equations have this shape.
    """

    diag: FloatArray
    off: FloatArray

    def __post_init__(self) -> None:
        diag = np.array(self.diag, dtype=np.float64)
        off = np.array(self.off, dtype=np.float64)
        if diag.ndim != 1 or diag.size == 0:
            raise ConfigurationError("diag must be a non-empty 1D array")
        if off.shape != (diag.size - 1,):
            raise ConfigurationError(
                f"off must have shape {(diag.size - 1,)}, got {off.shape}"
            )
        object.__setattr__(self, "diag", diag)
        object.__setattr__(self, "off", off)

    @property
    def size(self) -> int:
        return int(self.diag.size)

    def to_dense(self) -> FloatArray:
        return np.diag(self.diag) + np.diag(self.off, -1) + np.diag(self.off, 1)


def solve_tridiag(A: SymmetricTridiag, rhs: FloatArray) -> FloatArray:
    """Solve ``A x = rhs`` by forward elimination and back substitution.

    No pivoting; spline systems are strictly diagonally dominant. A pivot
    smaller than ``100 * eps`` in magnitude raises ``np.linalg.LinAlgError``.
    """
    n = A.size
    b = np.array(rhs, dtype=np.float64)
    if b.shape != (n,):
        raise ConfigurationError(f"rhs must have shape {(n,)}, got {b.shape}")

    tiny = 100.0 * np.finfo(np.float64).eps
    c = np.empty(max(n - 1, 0), dtype=np.float64)  # eliminated super-diagonal
    pivot = A.diag[0]
    for i in range(n):
        if i > 0:
            pivot = A.diag[i] - A.off[i - 1] * c[i - 1]
            b[i] -= A.off[i - 1] * b[i - 1]
        if abs(pivot) < tiny:
            raise np.linalg.LinAlgError(f"zero pivot at row {i}")
        b[i] /= pivot
        if i < n - 1:
            c[i] = A.off[i] / pivot

    for i in range(n - 2, -1, -1):
        b[i] -= c[i] * b[i + 1]
    return b
