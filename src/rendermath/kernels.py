"""
Numba-optimized kernels for batch transforms.

Matrices are passed as their 16 column-major elements, so element (column c,
row r) is ``m[c * 4 + r]``.
"""

from __future__ import annotations

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray


@njit(parallel=True, fastmath=True, cache=True, nogil=True)
def transform_positions_numba(
    points: NDArray[np.floating],
    m: NDArray[np.floating],
    out: NDArray[np.floating],
) -> None:
    """
    Transform points (w = 1), ignoring the last matrix row.

    Args:
        points: Input points [N, 3]
        m: Column-major matrix [16]
        out: Output points [N, 3] (may alias points)
    """
    n = points.shape[0]

    for i in prange(n):
        x = points[i, 0]
        y = points[i, 1]
        z = points[i, 2]
        out[i, 0] = m[0] * x + m[4] * y + m[8] * z + m[12]
        out[i, 1] = m[1] * x + m[5] * y + m[9] * z + m[13]
        out[i, 2] = m[2] * x + m[6] * y + m[10] * z + m[14]


@njit(parallel=True, fastmath=True, cache=True, nogil=True)
def transform_directions_numba(
    vectors: NDArray[np.floating],
    m: NDArray[np.floating],
    out: NDArray[np.floating],
) -> None:
    """
    Transform directions (w = 0); translation has no effect.

    Args:
        vectors: Input directions [N, 3]
        m: Column-major matrix [16]
        out: Output directions [N, 3] (may alias vectors)
    """
    n = vectors.shape[0]

    for i in prange(n):
        x = vectors[i, 0]
        y = vectors[i, 1]
        z = vectors[i, 2]
        out[i, 0] = m[0] * x + m[4] * y + m[8] * z
        out[i, 1] = m[1] * x + m[5] * y + m[9] * z
        out[i, 2] = m[2] * x + m[6] * y + m[10] * z


# Division by a zero w must give inf/NaN rather than raise
@njit(parallel=True, cache=True, nogil=True, error_model="numpy")
def transform_project_numba(
    points: NDArray[np.floating],
    m: NDArray[np.floating],
    out: NDArray[np.floating],
) -> None:
    """
    Transform points (w = 1) and divide by the resulting w.

    Args:
        points: Input points [N, 3]
        m: Column-major matrix [16]
        out: Output points [N, 3] (may alias points)
    """
    n = points.shape[0]

    for i in prange(n):
        x = points[i, 0]
        y = points[i, 1]
        z = points[i, 2]
        inv_w = 1.0 / (m[3] * x + m[7] * y + m[11] * z + m[15])
        out[i, 0] = (m[0] * x + m[4] * y + m[8] * z + m[12]) * inv_w
        out[i, 1] = (m[1] * x + m[5] * y + m[9] * z + m[13]) * inv_w
        out[i, 2] = (m[2] * x + m[6] * y + m[10] * z + m[14]) * inv_w
