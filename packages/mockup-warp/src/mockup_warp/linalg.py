from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import SingularSystemError

PIVOT_EPSILON = 1e-8


def solve_linear_system(
    A: np.ndarray | Sequence[Sequence[float]],
    b: np.ndarray | Sequence[float],
    eps: float = PIVOT_EPSILON,
) -> np.ndarray:
    """Solve ``A @ x = b`` by Gaussian elimination with partial pivoting.

    For every column the remaining row with the largest absolute entry is
    swapped into the pivot position. Raises ``SingularSystemError`` when that
    entry does not exceed ``eps``. The inputs are copied, never modified.
    """
    m = np.array(A, dtype=np.float64)
    rhs = np.array(b, dtype=np.float64).reshape(-1)

    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {m.shape}")
    n = m.shape[0]
    if rhs.shape[0] != n:
        raise ValueError(f"Right-hand side has {rhs.shape[0]} entries, expected {n}")
    if not (np.all(np.isfinite(m)) and np.all(np.isfinite(rhs))):
        raise ValueError("Linear system contains non-finite values")

    for col in range(n):
        pivot = col + int(np.argmax(np.abs(m[col:, col])))
        if abs(m[pivot, col]) <= eps:
            raise SingularSystemError(f"No pivot above {eps:g} in column {col}")
        if pivot != col:
            m[[col, pivot]] = m[[pivot, col]]
            rhs[[col, pivot]] = rhs[[pivot, col]]

        factors = m[col + 1 :, col] / m[col, col]
        m[col + 1 :, col:] -= np.outer(factors, m[col, col:])
        rhs[col + 1 :] -= factors * rhs[col]

    x = np.zeros(n, dtype=np.float64)
    for row in range(n - 1, -1, -1):
        x[row] = (rhs[row] - float(m[row, row + 1 :] @ x[row + 1 :])) / m[row, row]
    return x
