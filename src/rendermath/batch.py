"""
Batch transforms of many points through one matrix.

These mirror :meth:`Matrix4.transform_position`, :meth:`Matrix4.transform_direction`
and :meth:`Matrix4.transform_project` over ``[N, 3]`` arrays. Large batches run
on the Numba kernels when the accelerator is available; everything else uses
NumPy's BLAS-backed matmul, which is already fast for this shape.

Results have the matrix' precision dtype. ``out`` may be the input array
itself for an in-place transform.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import numpy as np

from rendermath.accel import DEFAULT_ACCELERATOR, Accelerator
from rendermath.config import CONFIG
from rendermath.kernels import (
    transform_directions_numba,
    transform_positions_numba,
    transform_project_numba,
)
from rendermath.matrix4 import Matrix4

logger = logging.getLogger(__name__)

type Kernel = Callable[[np.ndarray, np.ndarray, np.ndarray], None]


def _prepare(
    matrix: Matrix4, points: np.ndarray, out: np.ndarray | None, name: str
) -> tuple[np.ndarray, np.ndarray | None]:
    """Validate shapes and bring the input to the matrix dtype."""
    if not isinstance(matrix, Matrix4):
        raise TypeError(f"matrix must be a Matrix4, got {type(matrix).__name__}")
    dtype = matrix.precision.dtype
    points = np.asarray(points)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"{name} must have shape [N, 3], got {list(points.shape)}")
    points = np.ascontiguousarray(points, dtype=dtype)
    if out is not None:
        if out.shape != points.shape:
            raise ValueError(f"out must have shape {list(points.shape)}, got {list(out.shape)}")
        if out.dtype != dtype:
            raise TypeError(f"out must have dtype {np.dtype(dtype).name}, got {out.dtype.name}")
    return points, out


def _use_kernel(n: int, accelerator: Accelerator | None) -> bool:
    accelerator = DEFAULT_ACCELERATOR if accelerator is None else accelerator
    return n >= CONFIG.batch_min_size and accelerator.is_available()


def _run_kernel(
    kernel: Kernel, matrix: Matrix4, points: np.ndarray, out: np.ndarray | None
) -> np.ndarray:
    if out is None:
        out = np.empty_like(points)
    if out.flags.c_contiguous:
        kernel(points, matrix.to_numpy(), out)
        return out
    # Kernels write row by row into contiguous memory
    result = np.empty_like(points)
    kernel(points, matrix.to_numpy(), result)
    out[...] = result
    return out


def _linear_part(matrix: Matrix4) -> tuple[np.ndarray, np.ndarray]:
    """``(R^T, t)`` such that ``points @ R^T + t`` applies the affine part.

    Column-major storage reshaped row-wise is already the transpose.
    """
    m = matrix.to_numpy().reshape(4, 4)
    return m[:3, :3], m[3, :3]


def transform_positions(
    matrix: Matrix4,
    points: np.ndarray,
    out: np.ndarray | None = None,
    accelerator: Accelerator | None = None,
) -> np.ndarray:
    """Transform ``[N, 3]`` points (w = 1), ignoring the matrix' last row.

    :param matrix: Transform to apply
    :param points: Input points [N, 3]
    :param out: Optional output buffer [N, 3] with the matrix dtype
    :param accelerator: Accelerator to ask for the JIT path; defaults to Numba
    :returns: Transformed points (``out`` if given)
    :raises ValueError: If points or out have the wrong shape
    """
    points, out = _prepare(matrix, points, out, "points")
    if _use_kernel(points.shape[0], accelerator):
        logger.debug("[Batch] transform_positions: numba, n=%d", points.shape[0])
        return _run_kernel(transform_positions_numba, matrix, points, out)

    logger.debug("[Batch] transform_positions: numpy, n=%d", points.shape[0])
    rt, t = _linear_part(matrix)
    if out is not None:
        result = points @ rt
        result += t
        out[...] = result
        return out
    return points @ rt + t


def transform_directions(
    matrix: Matrix4,
    vectors: np.ndarray,
    out: np.ndarray | None = None,
    accelerator: Accelerator | None = None,
) -> np.ndarray:
    """Transform ``[N, 3]`` directions (w = 0); translation is ignored.

    :param matrix: Transform to apply
    :param vectors: Input directions [N, 3]
    :param out: Optional output buffer [N, 3] with the matrix dtype
    :param accelerator: Accelerator to ask for the JIT path; defaults to Numba
    :returns: Transformed directions (``out`` if given)
    """
    vectors, out = _prepare(matrix, vectors, out, "vectors")
    if _use_kernel(vectors.shape[0], accelerator):
        logger.debug("[Batch] transform_directions: numba, n=%d", vectors.shape[0])
        return _run_kernel(transform_directions_numba, matrix, vectors, out)

    logger.debug("[Batch] transform_directions: numpy, n=%d", vectors.shape[0])
    rt, _ = _linear_part(matrix)
    if out is not None:
        out[...] = vectors @ rt
        return out
    return vectors @ rt


def transform_project(
    matrix: Matrix4,
    points: np.ndarray,
    out: np.ndarray | None = None,
    accelerator: Accelerator | None = None,
) -> np.ndarray:
    """Transform ``[N, 3]`` points (w = 1) and divide by the resulting w.

    Points that end up with w = 0 produce inf/NaN components.

    :param matrix: Projective transform to apply
    :param points: Input points [N, 3]
    :param out: Optional output buffer [N, 3] with the matrix dtype
    :param accelerator: Accelerator to ask for the JIT path; defaults to Numba
    :returns: Projected points (``out`` if given)
    """
    points, out = _prepare(matrix, points, out, "points")
    if _use_kernel(points.shape[0], accelerator):
        logger.debug("[Batch] transform_project: numba, n=%d", points.shape[0])
        return _run_kernel(transform_project_numba, matrix, points, out)

    logger.debug("[Batch] transform_project: numpy, n=%d", points.shape[0])
    m = matrix.to_numpy().reshape(4, 4)
    homogeneous = points @ m[:3, :] + m[3, :]
    with np.errstate(divide="ignore", invalid="ignore"):
        result = homogeneous[:, :3] / homogeneous[:, 3:4]
    if out is not None:
        out[...] = result
        return out
    return result
