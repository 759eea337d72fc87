"""
3x3 matrices.

Column-major storage, ``mCR`` accessors (first digit column, second digit
row). All composing operations post-multiply: ``m.rotate_x(a)`` computes
``m := m * Rx(a)``, so the new rotation is applied before whatever ``m``
already encoded.

The ``*_block`` helpers build column-major 3x3 rotation blocks and are
shared with :mod:`rendermath.matrix4`.
"""

from __future__ import annotations

import math
from typing import Any, Self

from rendermath.axis_angle import axis_angle_to_matrix3
from rendermath.base import SquareMatrix, Value, component_property, ieee_div, multiply_square
from rendermath.config import DOUBLE, FLOAT
from rendermath.quaternion import Block3, quaternion_to_matrix3, rotation_block_of

# ============================================================================
# Rotation blocks
# ============================================================================


def rotation_x_block(angle: float) -> Block3:
    sin, cos = math.sin(angle), math.cos(angle)
    return (1.0, 0.0, 0.0, 0.0, cos, sin, 0.0, -sin, cos)


def rotation_y_block(angle: float) -> Block3:
    sin, cos = math.sin(angle), math.cos(angle)
    return (cos, 0.0, -sin, 0.0, 1.0, 0.0, sin, 0.0, cos)


def rotation_z_block(angle: float) -> Block3:
    sin, cos = math.sin(angle), math.cos(angle)
    return (cos, sin, 0.0, -sin, cos, 0.0, 0.0, 0.0, 1.0)


def euler_xyz_block(angle_x: float, angle_y: float, angle_z: float) -> Block3:
    """``Rx(angle_x) * Ry(angle_y) * Rz(angle_z)`` in one pass."""
    sx, cx = math.sin(angle_x), math.cos(angle_x)
    sy, cy = math.sin(angle_y), math.cos(angle_y)
    sz, cz = math.sin(angle_z), math.cos(angle_z)
    return (
        cy * cz, sx * sy * cz + cx * sz, sx * sz - cx * sy * cz,
        -cy * sz, cx * cz - sx * sy * sz, cx * sy * sz + sx * cz,
        sy, -sx * cy, cx * cy,
    )


def euler_zyx_block(angle_z: float, angle_y: float, angle_x: float) -> Block3:
    """``Rz(angle_z) * Ry(angle_y) * Rx(angle_x)`` in one pass."""
    sx, cx = math.sin(angle_x), math.cos(angle_x)
    sy, cy = math.sin(angle_y), math.cos(angle_y)
    sz, cz = math.sin(angle_z), math.cos(angle_z)
    return (
        cz * cy, sz * cy, -sy,
        cz * sy * sx - sz * cx, cz * cx + sz * sy * sx, cy * sx,
        sz * sx + cz * sy * cx, sz * sy * cx - cz * sx, cy * cx,
    )


def euler_yxz_block(angle_y: float, angle_x: float, angle_z: float) -> Block3:
    """``Ry(angle_y) * Rx(angle_x) * Rz(angle_z)`` in one pass."""
    sx, cx = math.sin(angle_x), math.cos(angle_x)
    sy, cy = math.sin(angle_y), math.cos(angle_y)
    sz, cz = math.sin(angle_z), math.cos(angle_z)
    return (
        cy * cz + sy * sx * sz, cx * sz, cy * sx * sz - sy * cz,
        sy * sx * cz - cy * sz, cx * cz, sy * sz + cy * sx * cz,
        sy * cx, -sx, cy * cx,
    )


def axis_rotation_block(angle: float, x: float, y: float, z: float) -> Block3:
    """Rotation about an arbitrary axis, which is normalized first.

    Quaternion.rotation_axis normalizes the same way; only AxisAngle values
    are used as they are.
    """
    inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z))
    return axis_angle_to_matrix3(angle, x * inv, y * inv, z * inv)


def rotation_block_from(value: Value) -> Block3:
    """Rotation block of a Quaternion or AxisAngle (axis taken as is)."""
    if value.kind == "quaternion":
        return quaternion_to_matrix3(*value._values())
    if value.kind == "axis_angle":
        return axis_angle_to_matrix3(*value._values())
    raise TypeError(f"Expected a Quaternion or AxisAngle, got {type(value).__name__}")


def determinant3(m: Block3) -> float:
    m00, m01, m02, m10, m11, m12, m20, m21, m22 = m
    return (
        (m00 * m11 - m01 * m10) * m22
        + (m02 * m10 - m00 * m12) * m21
        + (m01 * m12 - m02 * m11) * m20
    )


def invert3(m: Block3) -> Block3:
    """Inverse of a 3x3 block as adjugate over determinant.

    A singular block divides by zero and yields inf/NaN elements.
    """
    m00, m01, m02, m10, m11, m12, m20, m21, m22 = m
    a = m00 * m11 - m01 * m10
    b = m02 * m10 - m00 * m12
    c = m01 * m12 - m02 * m11
    s = ieee_div(1.0, a * m22 + b * m21 + c * m20)
    return (
        (m11 * m22 - m21 * m12) * s, (m21 * m02 - m01 * m22) * s, c * s,
        (m20 * m12 - m10 * m22) * s, (m00 * m22 - m20 * m02) * s, b * s,
        (m10 * m21 - m20 * m11) * s, (m20 * m01 - m00 * m21) * s, a * s,
    )


def look_along_block(
    dir_x: float, dir_y: float, dir_z: float, up_x: float, up_y: float, up_z: float
) -> Block3:
    """Right-handed view rotation looking along ``dir``.

    The basis is ``left = up x dir`` and ``up = dir x left`` with ``dir``
    pointing backwards (towards the viewer).
    """
    inv_dir = ieee_div(1.0, math.sqrt(dir_x * dir_x + dir_y * dir_y + dir_z * dir_z))
    dir_x, dir_y, dir_z = -dir_x * inv_dir, -dir_y * inv_dir, -dir_z * inv_dir
    left_x = up_y * dir_z - up_z * dir_y
    left_y = up_z * dir_x - up_x * dir_z
    left_z = up_x * dir_y - up_y * dir_x
    inv_left = ieee_div(1.0, math.sqrt(left_x * left_x + left_y * left_y + left_z * left_z))
    left_x, left_y, left_z = left_x * inv_left, left_y * inv_left, left_z * inv_left
    upn_x = dir_y * left_z - dir_z * left_y
    upn_y = dir_z * left_x - dir_x * left_z
    upn_z = dir_x * left_y - dir_y * left_x
    return (
        left_x, upn_x, dir_x,
        left_y, upn_y, dir_y,
        left_z, upn_z, dir_z,
    )


# ============================================================================
# Matrix3
# ============================================================================


class Matrix3(SquareMatrix):
    """3x3 matrix (rotation, scale, normal matrix).

    Default-constructed matrices are the identity. The constructor also
    accepts 9 column-major scalars, another Matrix3, or a Matrix4 (whose
    upper-left block is copied).
    """

    kind = "matrix3"
    size = 9
    order = 3
    __slots__ = ()

    m00 = component_property(0)
    m01 = component_property(1)
    m02 = component_property(2)
    m10 = component_property(3)
    m11 = component_property(4)
    m12 = component_property(5)
    m20 = component_property(6)
    m21 = component_property(7)
    m22 = component_property(8)

    def set(self, *components: Any) -> Self:
        """Set from 9 column-major scalars, a Matrix3 or a Matrix4."""
        if len(components) == 1 and isinstance(components[0], Value):
            other = components[0]
            if other.kind == "matrix4":
                self._check_precision(other)
                return self._assign(rotation_block_of(other))
        return self._assign(self._read(self._flatten(components), 9, "components"))

    # ------------------------------------------------------------------
    # Inversion and determinant
    # ------------------------------------------------------------------

    def determinant(self) -> float:
        return determinant3(self._values())

    def invert(self, dest: Matrix3 | None = None) -> Matrix3:
        """Invert; a singular matrix yields inf/NaN elements instead of raising."""
        return self._dest(dest)._assign(invert3(self._values()))

    def normal(self, dest: Matrix3 | None = None) -> Matrix3:
        """Normal matrix: the transpose of the inverse."""
        inv = invert3(self._values())
        return self._dest(dest)._assign([inv[r * 3 + c] for c in range(3) for r in range(3)])

    # ------------------------------------------------------------------
    # Builders (replace)
    # ------------------------------------------------------------------

    def scaling(self, x: float, y: float | None = None, z: float | None = None) -> Self:
        """Set to a scale matrix; a single argument scales uniformly."""
        y = x if y is None else y
        z = x if z is None else z
        return self._assign((x, 0.0, 0.0, 0.0, y, 0.0, 0.0, 0.0, z))

    def rotation(self, value: Value) -> Self:
        """Set to the rotation of a Quaternion or AxisAngle."""
        self._check_precision(value)
        return self._assign(rotation_block_from(value))

    def rotation_axis(self, angle: float, x: float, y: float, z: float) -> Self:
        """Set to a rotation of ``angle`` radians about ``(x, y, z)``.

        The axis is normalized first, whereas :meth:`rotation` takes an
        AxisAngle's axis as is.
        """
        return self._assign(axis_rotation_block(angle, x, y, z))

    def rotation_x(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the x axis."""
        return self._assign(rotation_x_block(angle))

    def rotation_y(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the y axis."""
        return self._assign(rotation_y_block(angle))

    def rotation_z(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the z axis."""
        return self._assign(rotation_z_block(angle))

    def rotation_xyz(self, angle_x: float, angle_y: float, angle_z: float) -> Self:
        """Set to ``Rx(angle_x) * Ry(angle_y) * Rz(angle_z)``."""
        return self._assign(euler_xyz_block(angle_x, angle_y, angle_z))

    def rotation_zyx(self, angle_z: float, angle_y: float, angle_x: float) -> Self:
        """Set to ``Rz(angle_z) * Ry(angle_y) * Rx(angle_x)``."""
        return self._assign(euler_zyx_block(angle_z, angle_y, angle_x))

    def rotation_yxz(self, angle_y: float, angle_x: float, angle_z: float) -> Self:
        """Set to ``Ry(angle_y) * Rx(angle_x) * Rz(angle_z)``."""
        return self._assign(euler_yxz_block(angle_y, angle_x, angle_z))

    def set_look_along(self, direction: Any, up: Any) -> Self:
        dx, dy, dz = self._read(direction, 3, "direction")
        ux, uy, uz = self._read(up, 3, "up")
        return self._assign(look_along_block(dx, dy, dz, ux, uy, uz))

    # ------------------------------------------------------------------
    # Composition (post-multiply)
    # ------------------------------------------------------------------

    def _post(self, block: Block3, dest: Matrix3 | None) -> Matrix3:
        return self._dest(dest)._assign(multiply_square(self._values(), block, 3))

    def scale(
        self, x: float, y: float | None = None, z: float | None = None,
        dest: Matrix3 | None = None,
    ) -> Matrix3:
        """Post-multiply a scale; a single factor scales uniformly."""
        y = x if y is None else y
        z = x if z is None else z
        m = self._values()
        return self._dest(dest)._assign(
            [v * x for v in m[0:3]] + [v * y for v in m[3:6]] + [v * z for v in m[6:9]]
        )

    def rotate(self, value: Value, dest: Matrix3 | None = None) -> Matrix3:
        """Post-multiply the rotation of a Quaternion or AxisAngle."""
        self._check_precision(value)
        return self._post(rotation_block_from(value), dest)

    def rotate_axis(
        self, angle: float, x: float, y: float, z: float, dest: Matrix3 | None = None
    ) -> Matrix3:
        """Post-multiply a rotation about ``(x, y, z)``, which is normalized first."""
        return self._post(axis_rotation_block(angle, x, y, z), dest)

    def rotate_x(self, angle: float, dest: Matrix3 | None = None) -> Matrix3:
        """Post-multiply a rotation about x: ``dest = self * Rx(angle)``."""
        return self._post(rotation_x_block(angle), dest)

    def rotate_y(self, angle: float, dest: Matrix3 | None = None) -> Matrix3:
        """Post-multiply a rotation about y: ``dest = self * Ry(angle)``."""
        return self._post(rotation_y_block(angle), dest)

    def rotate_z(self, angle: float, dest: Matrix3 | None = None) -> Matrix3:
        """Post-multiply a rotation about z: ``dest = self * Rz(angle)``."""
        return self._post(rotation_z_block(angle), dest)

    def rotate_xyz(
        self, angle_x: float, angle_y: float, angle_z: float, dest: Matrix3 | None = None
    ) -> Matrix3:
        """Equivalent to ``rotate_x(angle_x).rotate_y(angle_y).rotate_z(angle_z)``."""
        return self._post(euler_xyz_block(angle_x, angle_y, angle_z), dest)

    def rotate_zyx(
        self, angle_z: float, angle_y: float, angle_x: float, dest: Matrix3 | None = None
    ) -> Matrix3:
        """Equivalent to ``rotate_z(angle_z).rotate_y(angle_y).rotate_x(angle_x)``."""
        return self._post(euler_zyx_block(angle_z, angle_y, angle_x), dest)

    def rotate_yxz(
        self, angle_y: float, angle_x: float, angle_z: float, dest: Matrix3 | None = None
    ) -> Matrix3:
        """Equivalent to ``rotate_y(angle_y).rotate_x(angle_x).rotate_z(angle_z)``."""
        return self._post(euler_yxz_block(angle_y, angle_x, angle_z), dest)

    def look_along(self, direction: Any, up: Any, dest: Matrix3 | None = None) -> Matrix3:
        dx, dy, dz = self._read(direction, 3, "direction")
        ux, uy, uz = self._read(up, 3, "up")
        return self._post(look_along_block(dx, dy, dz, ux, uy, uz), dest)

    # ------------------------------------------------------------------
    # Decomposition
    # ------------------------------------------------------------------

    def get_scale(self, dest: Value | None = None) -> Value:
        """Length of each column."""
        m = self._values()
        return self._dest_of("vector3", dest)._assign(
            [math.sqrt(m[i] * m[i] + m[i + 1] * m[i + 1] + m[i + 2] * m[i + 2]) for i in (0, 3, 6)]
        )

    def get_normalized_rotation(self, dest: Value | None = None) -> Value:
        """Rotation as a quaternion, assuming unit-length columns."""
        return self._dest_of("quaternion", dest).set_from_normalized(self)

    def get_unnormalized_rotation(self, dest: Value | None = None) -> Value:
        """Rotation as a quaternion, dividing out per-column scale first."""
        return self._dest_of("quaternion", dest).set_from_unnormalized(self)

    # ------------------------------------------------------------------
    # Vector transformation
    # ------------------------------------------------------------------

    def transform(self, v: Any, dest: Value | None = None) -> Value:
        """``dest = self * v``.

        :param v: Vector3 (or 3 scalars)
        :param dest: Destination Vector3; defaults to ``v`` when it is a Vector3
        """
        x, y, z = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        m00, m01, m02, m10, m11, m12, m20, m21, m22 = self._values()
        return self._dest_of("vector3", dest)._assign((
            m00 * x + m10 * y + m20 * z,
            m01 * x + m11 * y + m21 * z,
            m02 * x + m12 * y + m22 * z,
        ))

    def transform_transpose(self, v: Any, dest: Value | None = None) -> Value:
        """``dest = transpose(self) * v``."""
        x, y, z = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        m00, m01, m02, m10, m11, m12, m20, m21, m22 = self._values()
        return self._dest_of("vector3", dest)._assign((
            m00 * x + m01 * y + m02 * z,
            m10 * x + m11 * y + m12 * z,
            m20 * x + m21 * y + m22 * z,
        ))


class Matrix3f(Matrix3):
    precision = FLOAT
    __slots__ = ()


class Matrix3d(Matrix3):
    precision = DOUBLE
    __slots__ = ()
