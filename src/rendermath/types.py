"""Type aliases for rendermath.

Provides unified type hints for vector-like parameters across all modules.
Wherever a vector is read, a library value of the same precision, a plain
sequence or a NumPy array is accepted.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from rendermath.quaternion import Quaternion
    from rendermath.vector import Vector3, Vector4

# 3D vector type (position, direction, scale, ...)
type Vector3Like = Vector3 | Sequence[float] | np.ndarray

# 4D vector type (homogeneous point, plane equation, light)
type Vector4Like = Vector4 | Sequence[float] | np.ndarray

# Mirror plane given as a plane equation, a normal or an orientation
type PlaneLike = Vector4Like | Vector3Like | Quaternion

# Viewport [x, y, width, height] in window pixels
type Viewport = Sequence[int] | Sequence[float] | np.ndarray
