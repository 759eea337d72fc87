"""
rendermath - 3D linear algebra for real-time rendering

Fixed-size vectors, quaternions, axis-angle rotations and 3x3/4x4 matrices
in single and double precision, with the projection, camera and frustum
utilities a renderer needs.

Features:
- Vector2/3/4, Quaternion, AxisAngle, Matrix3, Matrix4 in ``f`` (float32) and ``d`` (float64)
- Column-major storage, right-handed coordinates, post-multiplying composition
- OpenGL ([-1, 1]) and Direct3D/Vulkan ([0, 1]) depth ranges, infinite far/near planes
- look-at/look-along cameras, shadows, reflections, billboards, arcball
- Frustum planes, corners, rays, AABBs and perspective parameter recovery
- Batch transforms of [N, 3] arrays (NumPy/Numba optimized)

Every operation writes into the receiver or an explicit ``dest`` and returns
it, so calls chain and temporaries can be reused. Singular matrices and
zero-length vectors yield NaN/inf instead of raising.

Example - Camera and projection:
    >>> from rendermath import Matrix4f, Vector3f
    >>>
    >>> view = Matrix4f().set_look_at((0, 0, 5), (0, 0, 0), (0, 1, 0))
    >>> proj = Matrix4f().set_perspective(1.0, 16 / 9, 0.1, 100.0)
    >>> view_proj = proj.mul(view, Matrix4f())
    >>> window = view_proj.project(Vector3f(0, 0, 0), [0, 0, 1920, 1080])

Example - Rotations:
    >>> from rendermath import Quaterniond, Vector3d
    >>>
    >>> q = Quaterniond().rotation_xyz(0.1, 0.2, 0.3)
    >>> v = q.transform(Vector3d(1, 0, 0))
    >>> m = q.to_matrix4()

Example - Batch transforms:
    >>> import numpy as np
    >>> from rendermath import Matrix4f, transform_positions
    >>>
    >>> points = np.random.rand(1_000_000, 3).astype(np.float32)
    >>> moved = transform_positions(Matrix4f().translation(1, 2, 3), points)
"""

__version__ = "0.1.0"

# Value types
from rendermath.axis_angle import AxisAngle, AxisAngled, AxisAnglef
from rendermath.base import Value

# Configuration
from rendermath.config import CONFIG, DOUBLE, FLOAT, Precision, RenderMathConfig

# Selectors
from rendermath.constants import FrustumCorner, FrustumPlane
from rendermath.matrix3 import Matrix3, Matrix3d, Matrix3f
from rendermath.matrix4 import Matrix4, Matrix4d, Matrix4f
from rendermath.quaternion import Quaternion, Quaterniond, Quaternionf
from rendermath.vector import (
    Vector2,
    Vector2d,
    Vector2f,
    Vector3,
    Vector3d,
    Vector3f,
    Vector4,
    Vector4d,
    Vector4f,
)

# Batch transforms
from rendermath.accel import Accelerator, NullAccelerator, NumbaAccelerator
from rendermath.batch import transform_directions, transform_positions, transform_project

# Protocols
from rendermath.protocols import (
    MutableMatrix3,
    MutableMatrix4,
    MutableQuaternion,
    MutableVector3,
    ReadableMatrix3,
    ReadableMatrix4,
    ReadableQuaternion,
    ReadableVector3,
)

__all__ = [
    # Version
    "__version__",
    # Base
    "Value",
    # Vectors
    "Vector2",
    "Vector2f",
    "Vector2d",
    "Vector3",
    "Vector3f",
    "Vector3d",
    "Vector4",
    "Vector4f",
    "Vector4d",
    # Rotations
    "Quaternion",
    "Quaternionf",
    "Quaterniond",
    "AxisAngle",
    "AxisAnglef",
    "AxisAngled",
    # Matrices
    "Matrix3",
    "Matrix3f",
    "Matrix3d",
    "Matrix4",
    "Matrix4f",
    "Matrix4d",
    # Selectors
    "FrustumPlane",
    "FrustumCorner",
    # Configuration
    "CONFIG",
    "RenderMathConfig",
    "Precision",
    "FLOAT",
    "DOUBLE",
    # Batch transforms
    "transform_positions",
    "transform_directions",
    "transform_project",
    "Accelerator",
    "NumbaAccelerator",
    "NullAccelerator",
    # Protocols
    "ReadableVector3",
    "MutableVector3",
    "ReadableQuaternion",
    "MutableQuaternion",
    "ReadableMatrix3",
    "MutableMatrix3",
    "ReadableMatrix4",
    "MutableMatrix4",
]
