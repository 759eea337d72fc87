"""
Benchmark batch point transforms.

Compares, for several batch sizes:
- Numba kernels (parallel, JIT compiled)
- NumPy matmul path (NullAccelerator)
- Per-point Matrix4.transform_position calls

Helps choose RENDERMATH_BATCH_MIN_SIZE, the batch size at which the
kernels take over from NumPy.

Usage:
    python benchmark_batch_transform.py
"""

import dataclasses
import time

import numpy as np

import rendermath.batch
from rendermath import (
    CONFIG,
    Matrix4f,
    NullAccelerator,
    NumbaAccelerator,
    Vector3f,
    transform_positions,
    transform_project,
)

NUM_ITERATIONS = 50
WARMUP_ITERATIONS = 5
SIZES = [100, 1_000, 10_000, 100_000, 1_000_000]

print("=" * 80)
print("BATCH TRANSFORM BENCHMARK")
print("=" * 80)
print(f"Testing with {NUM_ITERATIONS} iterations per test")
print(f"Warmup: {WARMUP_ITERATIONS} iterations")

# Always route to the kernels so both paths are measured at every size
rendermath.batch.CONFIG = dataclasses.replace(CONFIG, batch_min_size=0)


def create_points(n: int) -> np.ndarray:
    """Create a synthetic float32 point cloud."""
    rng = np.random.default_rng(42)
    return rng.standard_normal((n, 3)).astype(np.float32) * 10.0


def create_camera() -> Matrix4f:
    """View-projection matrix of a camera looking at the origin."""
    return (
        Matrix4f()
        .perspective(1.0, 16 / 9, 0.1, 1000.0)
        .look_at((0, 5, 50), (0, 0, 0), (0, 1, 0))
    )


def time_call(func, *args, **kwargs) -> float:
    """Average wall time of func in milliseconds."""
    for _ in range(WARMUP_ITERATIONS):
        func(*args, **kwargs)
    start = time.perf_counter()
    for _ in range(NUM_ITERATIONS):
        func(*args, **kwargs)
    return (time.perf_counter() - start) / NUM_ITERATIONS * 1000


def per_point(matrix: Matrix4f, points: np.ndarray) -> None:
    """Reference loop using the single-vector API."""
    v = Vector3f()
    for p in points:
        matrix.transform_position(v.set(p), v)


def benchmark_positions():
    """Benchmark transform_positions across batch sizes."""
    print(f"\n{'=' * 80}")
    print("transform_positions")
    print(f"{'=' * 80}")
    print(f"{'N':>12} {'numba (ms)':>12} {'numpy (ms)':>12} {'speedup':>10}")

    matrix = Matrix4f().translation(1, 2, 3).rotate_xyz(0.1, 0.2, 0.3).scale(2.0)
    numba_acc = NumbaAccelerator()
    numpy_acc = NullAccelerator()
    for n in SIZES:
        points = create_points(n)
        out = np.empty_like(points)
        t_numba = time_call(transform_positions, matrix, points, out=out, accelerator=numba_acc)
        t_numpy = time_call(transform_positions, matrix, points, out=out, accelerator=numpy_acc)
        print(f"{n:>12,} {t_numba:>12.3f} {t_numpy:>12.3f} {t_numpy / t_numba:>9.1f}x")


def benchmark_project():
    """Benchmark transform_project across batch sizes."""
    print(f"\n{'=' * 80}")
    print("transform_project")
    print(f"{'=' * 80}")
    print(f"{'N':>12} {'numba (ms)':>12} {'numpy (ms)':>12} {'speedup':>10}")

    matrix = create_camera()
    numba_acc = NumbaAccelerator()
    numpy_acc = NullAccelerator()
    for n in SIZES:
        points = create_points(n)
        out = np.empty_like(points)
        t_numba = time_call(transform_project, matrix, points, out=out, accelerator=numba_acc)
        t_numpy = time_call(transform_project, matrix, points, out=out, accelerator=numpy_acc)
        print(f"{n:>12,} {t_numba:>12.3f} {t_numpy:>12.3f} {t_numpy / t_numba:>9.1f}x")


def benchmark_per_point():
    """Show the cost of looping over the single-vector API."""
    print(f"\n{'=' * 80}")
    print("Per-point Matrix4.transform_position (10,000 points)")
    print(f"{'=' * 80}")

    matrix = Matrix4f().translation(1, 2, 3)
    points = create_points(10_000)
    start = time.perf_counter()
    per_point(matrix, points)
    elapsed = (time.perf_counter() - start) * 1000
    batch = time_call(transform_positions, matrix, points)
    print(f"Loop:  {elapsed:.3f} ms")
    print(f"Batch: {batch:.3f} ms ({elapsed / batch:.0f}x faster)")


if __name__ == "__main__":
    if not NumbaAccelerator().is_available():
        print("\n[WARNING] Numba unavailable, numba column measures the NumPy path")
    benchmark_positions()
    benchmark_project()
    benchmark_per_point()
