"""Argument validation and debug assumption checks.

Programmer errors (bad indices, unknown selectors, malformed viewports) are
reported immediately and before any value is mutated. Numerical degeneracy
is never checked here; singular matrices and zero-length vectors propagate
NaN/inf by convention.

The ``assume_*`` helpers guard the fast paths that trust their input to be
affine, unit-scaled or normalized. They only run when
``CONFIG.debug_assertions`` is enabled.
"""

from __future__ import annotations

import logging
import math
import operator
from collections.abc import Sequence

from rendermath.config import CONFIG
from rendermath.constants import FrustumCorner, FrustumPlane

logger = logging.getLogger(__name__)


def check_index(index: int, size: int, name: str = "index") -> int:
    """Validate a row/column/component index.

    :param index: Index to check
    :param size: Number of valid positions (3 or 4)
    :param name: Argument name used in the error message
    :returns: The index
    :raises IndexError: If index is not an integer in ``[0, size - 1]``
    """
    if isinstance(index, bool):
        raise IndexError(f"{name} must be an integer, got bool")
    try:
        index = operator.index(index)
    except TypeError:
        raise IndexError(f"{name} must be an integer, got {type(index).__name__}") from None
    if not 0 <= index < size:
        raise IndexError(f"{name}={index} is outside valid range [0, {size - 1}]")
    return index


def check_plane(plane: int) -> FrustumPlane:
    """Resolve a frustum plane selector.

    :param plane: ``FrustumPlane`` member or its integer value
    :returns: The matching ``FrustumPlane``
    :raises ValueError: If the selector is unknown
    """
    try:
        return FrustumPlane(plane)
    except ValueError:
        raise ValueError(f"Unknown frustum plane: {plane!r}") from None


def check_corner(corner: int) -> FrustumCorner:
    """Resolve a frustum corner selector.

    :param corner: ``FrustumCorner`` member or its integer value
    :returns: The matching ``FrustumCorner``
    :raises ValueError: If the selector is unknown
    """
    try:
        return FrustumCorner(corner)
    except ValueError:
        raise ValueError(f"Unknown frustum corner: {corner!r}") from None


def check_viewport(viewport: Sequence[float]) -> tuple[float, float, float, float]:
    """Validate a ``[x, y, width, height]`` viewport.

    :param viewport: Viewport in window pixel coordinates
    :returns: Viewport as a tuple of floats
    :raises ValueError: If the viewport does not have exactly 4 entries
    """
    values = [float(v) for v in viewport]
    if len(values) != 4:
        raise ValueError(f"viewport must be [x, y, width, height], got {len(values)} values")
    return values[0], values[1], values[2], values[3]


def check_near_far(z_near: float, z_far: float) -> None:
    """Reject a projection whose near and far planes are both infinite.

    :param z_near: Near plane distance
    :param z_far: Far plane distance
    :raises ValueError: If both distances are positive infinity
    """
    if math.isinf(z_near) and z_near > 0 and math.isinf(z_far) and z_far > 0:
        raise ValueError("z_near and z_far must not both be infinite")


# ============================================================================
# Debug assumption checks
# ============================================================================


def assume(condition: bool, message: str) -> None:
    """Raise ``AssertionError`` if debug assertions are on and condition is false."""
    if CONFIG.debug_assertions and not condition:
        logger.debug("[assume] %s", message)
        raise AssertionError(message)


def assume_affine(m: Sequence[float], operation: str) -> None:
    """Check that a column-major 4x4 matrix has last row (0, 0, 0, 1).

    :param m: 16 column-major elements
    :param operation: Name of the fast path, for the error message
    """
    if not CONFIG.debug_assertions:
        return
    tol = CONFIG.assumption_tolerance
    affine = (
        abs(m[3]) <= tol and abs(m[7]) <= tol and abs(m[11]) <= tol and abs(m[15] - 1.0) <= tol
    )
    assume(affine, f"{operation} requires an affine matrix, last row is "
                   f"({m[3]}, {m[7]}, {m[11]}, {m[15]})")


def assume_unit_columns(columns: Sequence[Sequence[float]], operation: str) -> None:
    """Check that each 3-column has unit length.

    :param columns: Three (x, y, z) basis columns
    :param operation: Name of the fast path, for the error message
    """
    if not CONFIG.debug_assertions:
        return
    tol = CONFIG.assumption_tolerance
    for i, (x, y, z) in enumerate(columns):
        length = math.sqrt(x * x + y * y + z * z)
        assume(abs(length - 1.0) <= tol,
               f"{operation} requires unit-length basis columns, column {i} has length {length}")


def assume_unit(values: Sequence[float], operation: str) -> None:
    """Check that a vector or quaternion has unit length.

    :param values: Components
    :param operation: Name of the operation, for the error message
    """
    if not CONFIG.debug_assertions:
        return
    length = math.sqrt(sum(v * v for v in values))
    assume(abs(length - 1.0) <= CONFIG.assumption_tolerance,
           f"{operation} requires a unit-length input, got length {length}")
