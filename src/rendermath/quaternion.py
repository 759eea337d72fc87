"""
Quaternions for representing rotations.

Quaternion Convention: (x, y, z, w) - scalar last, identity is (0, 0, 0, 1).

Multiplication concatenates rotations: ``q.mul(r)`` is the rotation that
applies ``r`` first, then ``q``, matching the matrix post-multiply
convention. The module-level helpers convert between quaternion components
and column-major 3x3 rotation blocks and are shared with the matrix types.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Self

from rendermath.base import Value, component_property, ieee_div, ieee_sqrt, safe_acos
from rendermath.config import DOUBLE, FLOAT
from rendermath.constants import PI, PI_OVER_2, PI_TIMES_2
from rendermath.validators import assume_unit_columns

type Quat = tuple[float, float, float, float]
type Block3 = tuple[float, float, float, float, float, float, float, float, float]


# ============================================================================
# Component-level helpers
# ============================================================================


def quaternion_multiply(a: Sequence[float], b: Sequence[float]) -> Quat:
    """Hamilton product ``a * b`` of two (x, y, z, w) quaternions."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return (
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def quaternion_to_matrix3(x: float, y: float, z: float, w: float) -> Block3:
    """Column-major 3x3 rotation block of a unit quaternion.

    Uses the doubled cross terms directly; a non-unit quaternion yields a
    rotation scaled by its squared length.

    :returns: (m00, m01, m02, m10, m11, m12, m20, m21, m22)
    """
    w2, x2, y2, z2 = w * w, x * x, y * y, z * z
    dzw = 2.0 * z * w
    dxy = 2.0 * x * y
    dxz = 2.0 * x * z
    dyw = 2.0 * y * w
    dyz = 2.0 * y * z
    dxw = 2.0 * x * w
    return (
        w2 + x2 - z2 - y2, dxy + dzw, dxz - dyw,
        dxy - dzw, y2 - z2 + w2 - x2, dyz + dxw,
        dyw + dxz, dyz - dxw, z2 - y2 - x2 + w2,
    )


def quaternion_from_normalized(m: Sequence[float]) -> Quat:
    """Quaternion of a rotation block with unit-length columns.

    Branches on the trace and the largest diagonal element to keep the
    square root argument well away from zero.

    :param m: Column-major 3x3 block (m00, m01, m02, m10, ..., m22)
    :returns: (x, y, z, w)
    """
    m00, m01, m02, m10, m11, m12, m20, m21, m22 = m
    tr = m00 + m11 + m22
    if tr >= 0.0:
        t = math.sqrt(tr + 1.0)
        w = t * 0.5
        t = 0.5 / t
        return (m12 - m21) * t, (m20 - m02) * t, (m01 - m10) * t, w
    if m00 >= m11 and m00 >= m22:
        t = ieee_sqrt(m00 - (m11 + m22) + 1.0)
        x = t * 0.5
        t = ieee_div(0.5, t)
        return x, (m10 + m01) * t, (m02 + m20) * t, (m12 - m21) * t
    if m11 > m22:
        t = ieee_sqrt(m11 - (m22 + m00) + 1.0)
        y = t * 0.5
        t = ieee_div(0.5, t)
        return (m10 + m01) * t, y, (m21 + m12) * t, (m20 - m02) * t
    t = ieee_sqrt(m22 - (m00 + m11) + 1.0)
    z = t * 0.5
    t = ieee_div(0.5, t)
    return (m02 + m20) * t, (m21 + m12) * t, z, (m01 - m10) * t


def normalize_columns3(m: Sequence[float]) -> Block3:
    """Divide each column of a 3x3 block by its length (removes scale)."""
    out = []
    for c in range(3):
        cx, cy, cz = m[3 * c], m[3 * c + 1], m[3 * c + 2]
        inv = ieee_div(1.0, math.sqrt(cx * cx + cy * cy + cz * cz))
        out.extend((cx * inv, cy * inv, cz * inv))
    return tuple(out)


def rotation_block_of(m: Value) -> Block3:
    """Upper-left 3x3 block of a Matrix3 or Matrix4, column-major."""
    values = m._values()
    if m.kind == "matrix3":
        return tuple(values)
    if m.kind == "matrix4":
        return tuple(values[4 * c + r] for c in range(3) for r in range(3))
    raise TypeError(f"Expected a Matrix3 or Matrix4, got {type(m).__name__}")


def _safe_asin(v: float) -> float:
    if v <= -1.0:
        return -PI_OVER_2
    if v >= 1.0:
        return PI_OVER_2
    return math.asin(v)


def _half_angles(angle: float) -> tuple[float, float]:
    half = angle * 0.5
    return math.sin(half), math.cos(half)


# ============================================================================
# Quaternion
# ============================================================================


class Quaternion(Value):
    """Rotation quaternion (x, y, z, w).

    Default-constructed quaternions are the identity rotation.
    """

    kind = "quaternion"
    size = 4
    __slots__ = ()

    x = component_property(0)
    y = component_property(1)
    z = component_property(2)
    w = component_property(3)

    def __init__(self, *components: Any) -> None:
        super().__init__()
        if not components:
            self._data[3] = 1.0
            return
        self._assign(self._read(self._flatten(components), 4, "components"))

    def set(self, x: float, y: float, z: float, w: float) -> Self:
        return self._assign((x, y, z, w))

    def identity(self) -> Self:
        return self._assign((0.0, 0.0, 0.0, 1.0))

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def length_squared(self) -> float:
        x, y, z, w = self._values()
        return x * x + y * y + z * z + w * w

    def dot(self, q: Quaternion | Sequence[float]) -> float:
        a = self._values()
        b = self._read(q, 4, "q")
        return a[0] * b[0] + a[1] * b[1] + a[2] * b[2] + a[3] * b[3]

    def normalize(self, dest: Quaternion | None = None) -> Quaternion:
        x, y, z, w = self._values()
        inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z + w * w))
        return self._dest(dest)._assign((x * inv, y * inv, z * inv, w * inv))

    def conjugate(self, dest: Quaternion | None = None) -> Quaternion:
        x, y, z, w = self._values()
        return self._dest(dest)._assign((-x, -y, -z, w))

    def invert(self, dest: Quaternion | None = None) -> Quaternion:
        """Multiplicative inverse ``conjugate / |q|^2``."""
        x, y, z, w = self._values()
        inv = ieee_div(1.0, x * x + y * y + z * z + w * w)
        return self._dest(dest)._assign((-x * inv, -y * inv, -z * inv, w * inv))

    def mul(self, q: Quaternion | Sequence[float], dest: Quaternion | None = None) -> Quaternion:
        """``dest = self * q``: the rotation ``q`` is applied first."""
        b = self._read(q, 4, "q")
        return self._dest(dest)._assign(quaternion_multiply(self._values(), b))

    def premul(self, q: Quaternion | Sequence[float], dest: Quaternion | None = None) -> Quaternion:
        """``dest = q * self``: the rotation ``q`` is applied last."""
        a = self._read(q, 4, "q")
        return self._dest(dest)._assign(quaternion_multiply(a, self._values()))

    def difference(self, other: Quaternion, dest: Quaternion | None = None) -> Quaternion:
        """Rotation ``d`` such that ``self * d == other``."""
        x, y, z, w = self._values()
        inv = ieee_div(1.0, x * x + y * y + z * z + w * w)
        inverse = (-x * inv, -y * inv, -z * inv, w * inv)
        b = self._read(other, 4, "other")
        return self._dest(dest)._assign(quaternion_multiply(inverse, b))

    def angle(self) -> float:
        """Rotation angle in radians, in ``[0, pi]``."""
        angle = 2.0 * safe_acos(self._data[3].item())
        return angle if angle <= PI else PI_TIMES_2 - angle

    # ------------------------------------------------------------------
    # Rotation builders
    # ------------------------------------------------------------------

    def rotation_axis(self, angle: float, x: float, y: float, z: float) -> Self:
        """Set to a rotation of ``angle`` radians about the axis ``(x, y, z)``.

        The axis is normalized first.
        """
        s, c = _half_angles(angle)
        inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z))
        return self._assign((x * inv * s, y * inv * s, z * inv * s, c))

    def set_angle_axis(self, angle: float, x: float, y: float, z: float) -> Self:
        """Set from an angle and an axis that is assumed to be unit length."""
        s, c = _half_angles(angle)
        return self._assign((x * s, y * s, z * s, c))

    def set_axis_angle(self, axis_angle: Value) -> Self:
        """Set from an AxisAngle; its axis is not normalized."""
        if axis_angle.kind != "axis_angle":
            raise TypeError(f"Expected an AxisAngle, got {type(axis_angle).__name__}")
        self._check_precision(axis_angle)
        angle, x, y, z = axis_angle._values()
        return self.set_angle_axis(angle, x, y, z)

    def rotation_x(self, angle: float) -> Self:
        s, c = _half_angles(angle)
        return self._assign((s, 0.0, 0.0, c))

    def rotation_y(self, angle: float) -> Self:
        s, c = _half_angles(angle)
        return self._assign((0.0, s, 0.0, c))

    def rotation_z(self, angle: float) -> Self:
        s, c = _half_angles(angle)
        return self._assign((0.0, 0.0, s, c))

    def rotation_xyz(self, angle_x: float, angle_y: float, angle_z: float) -> Self:
        """Set to ``Rx(angle_x) * Ry(angle_y) * Rz(angle_z)``."""
        return self._assign(_euler_xyz(angle_x, angle_y, angle_z))

    def rotation_zyx(self, angle_z: float, angle_y: float, angle_x: float) -> Self:
        """Set to ``Rz(angle_z) * Ry(angle_y) * Rx(angle_x)``."""
        return self._assign(_euler_zyx(angle_z, angle_y, angle_x))

    def rotation_yxz(self, angle_y: float, angle_x: float, angle_z: float) -> Self:
        """Set to ``Ry(angle_y) * Rx(angle_x) * Rz(angle_z)``."""
        return self._assign(_euler_yxz(angle_y, angle_x, angle_z))

    def rotate_x(self, angle: float, dest: Quaternion | None = None) -> Quaternion:
        s, c = _half_angles(angle)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), (s, 0.0, 0.0, c)))

    def rotate_y(self, angle: float, dest: Quaternion | None = None) -> Quaternion:
        s, c = _half_angles(angle)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), (0.0, s, 0.0, c)))

    def rotate_z(self, angle: float, dest: Quaternion | None = None) -> Quaternion:
        s, c = _half_angles(angle)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), (0.0, 0.0, s, c)))

    def rotate_xyz(
        self, angle_x: float, angle_y: float, angle_z: float, dest: Quaternion | None = None
    ) -> Quaternion:
        r = _euler_xyz(angle_x, angle_y, angle_z)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), r))

    def rotate_zyx(
        self, angle_z: float, angle_y: float, angle_x: float, dest: Quaternion | None = None
    ) -> Quaternion:
        r = _euler_zyx(angle_z, angle_y, angle_x)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), r))

    def rotate_yxz(
        self, angle_y: float, angle_x: float, angle_z: float, dest: Quaternion | None = None
    ) -> Quaternion:
        r = _euler_yxz(angle_y, angle_x, angle_z)
        return self._dest(dest)._assign(quaternion_multiply(self._values(), r))

    def get_euler_angles_xyz(self, dest: Value | None = None) -> Value:
        """Euler angles ``(x, y, z)`` such that ``rotation_xyz(*angles)`` gives this rotation.

        :param dest: Optional Vector3 receiving the angles
        :returns: Vector3 of angles in radians
        """
        x, y, z, w = self._values()
        angles = (
            math.atan2(x * w - y * z, 0.5 - x * x - y * y),
            _safe_asin(2.0 * (x * z + y * w)),
            math.atan2(z * w - x * y, 0.5 - y * y - z * z),
        )
        return self._dest_of("vector3", dest)._assign(angles)

    # ------------------------------------------------------------------
    # Matrix conversion
    # ------------------------------------------------------------------

    def set_from_normalized(self, m: Value) -> Self:
        """Set from the rotation of a Matrix3/Matrix4 with unit-length columns.

        Cheaper than :meth:`set_from_unnormalized`, but gives a wrong result
        if the matrix carries scale.
        """
        self._check_precision(m)
        block = rotation_block_of(m)
        assume_unit_columns((block[0:3], block[3:6], block[6:9]), "set_from_normalized")
        return self._assign(quaternion_from_normalized(block))

    def set_from_unnormalized(self, m: Value) -> Self:
        """Set from the rotation of a Matrix3/Matrix4 whose columns may be scaled."""
        self._check_precision(m)
        return self._assign(quaternion_from_normalized(normalize_columns3(rotation_block_of(m))))

    def to_matrix3(self, dest: Value | None = None) -> Value:
        return self._dest_of("matrix3", dest).rotation(self)

    def to_matrix4(self, dest: Value | None = None) -> Value:
        return self._dest_of("matrix4", dest).rotation(self)

    def to_axis_angle(self, dest: Value | None = None) -> Value:
        return self._dest_of("axis_angle", dest).set_from_quaternion(self)

    # ------------------------------------------------------------------
    # Vector transformation and interpolation
    # ------------------------------------------------------------------

    def transform(self, v: Value | Sequence[float], dest: Value | None = None) -> Value:
        """Rotate a vector by this quaternion.

        The quaternion's length is divided out, so it need not be unit length.

        :param v: Vector3 (or 3 scalars)
        :param dest: Destination Vector3; defaults to ``v`` itself when it is a
            Vector3, otherwise a new one
        """
        vx, vy, vz = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        x, y, z, w = self._values()
        xx, yy, zz, ww = x * x, y * y, z * z, w * w
        xy, xz, yz = x * y, x * z, y * z
        xw, zw, yw = x * w, z * w, y * w
        k = ieee_div(1.0, xx + yy + zz + ww)
        return self._dest_of("vector3", dest)._assign((
            (xx - yy - zz + ww) * k * vx + 2.0 * (xy - zw) * k * vy + 2.0 * (xz + yw) * k * vz,
            2.0 * (xy + zw) * k * vx + (yy - xx - zz + ww) * k * vy + 2.0 * (yz - xw) * k * vz,
            2.0 * (xz - yw) * k * vx + 2.0 * (yz + xw) * k * vy + (zz - xx - yy + ww) * k * vz,
        ))

    def slerp(
        self, target: Quaternion, alpha: float, dest: Quaternion | None = None
    ) -> Quaternion:
        """Spherical linear interpolation along the shortest arc.

        Falls back to linear weights when the quaternions are nearly equal.
        """
        a = self._values()
        b = self._read(target, 4, "target")
        cosom = a[0] * b[0] + a[1] * b[1] + a[2] * b[2] + a[3] * b[3]
        abs_cosom = abs(cosom)
        if 1.0 - abs_cosom > 1e-6:
            sin_sqr = 1.0 - abs_cosom * abs_cosom
            sinom = 1.0 / math.sqrt(sin_sqr)
            omega = math.atan2(sin_sqr * sinom, abs_cosom)
            scale0 = math.sin((1.0 - alpha) * omega) * sinom
            scale1 = math.sin(alpha * omega) * sinom
        else:
            scale0 = 1.0 - alpha
            scale1 = alpha
        scale1 = scale1 if cosom >= 0.0 else -scale1
        return self._dest(dest)._assign([scale0 * p + scale1 * q for p, q in zip(a, b)])

    def nlerp(
        self, target: Quaternion, alpha: float, dest: Quaternion | None = None
    ) -> Quaternion:
        """Normalized linear interpolation along the shortest arc."""
        a = self._values()
        b = self._read(target, 4, "target")
        cosom = a[0] * b[0] + a[1] * b[1] + a[2] * b[2] + a[3] * b[3]
        scale0 = 1.0 - alpha
        scale1 = alpha if cosom >= 0.0 else -alpha
        q = [scale0 * p + scale1 * r for p, r in zip(a, b)]
        inv = ieee_div(1.0, ieee_sqrt(sum(c * c for c in q)))
        return self._dest(dest)._assign([c * inv for c in q])

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __mul__(self, other: Any) -> Any:
        if isinstance(other, Value) and other.kind == "vector3":
            return self.transform(other, other.copy())
        return self.mul(other, self.copy())


class Quaternionf(Quaternion):
    precision = FLOAT
    __slots__ = ()


class Quaterniond(Quaternion):
    precision = DOUBLE
    __slots__ = ()


def _euler_xyz(angle_x: float, angle_y: float, angle_z: float) -> Quat:
    sx, cx = _half_angles(angle_x)
    sy, cy = _half_angles(angle_y)
    sz, cz = _half_angles(angle_z)
    cycz, sysz, sycz, cysz = cy * cz, sy * sz, sy * cz, cy * sz
    return (
        sx * cycz + cx * sysz,
        cx * sycz - sx * cysz,
        cx * cysz + sx * sycz,
        cx * cycz - sx * sysz,
    )


def _euler_zyx(angle_z: float, angle_y: float, angle_x: float) -> Quat:
    sx, cx = _half_angles(angle_x)
    sy, cy = _half_angles(angle_y)
    sz, cz = _half_angles(angle_z)
    cycz, sysz, sycz, cysz = cy * cz, sy * sz, sy * cz, cy * sz
    return (
        sx * cycz - cx * sysz,
        cx * sycz + sx * cysz,
        cx * cysz - sx * sycz,
        cx * cycz + sx * sysz,
    )


def _euler_yxz(angle_y: float, angle_x: float, angle_z: float) -> Quat:
    sx, cx = _half_angles(angle_x)
    sy, cy = _half_angles(angle_y)
    sz, cz = _half_angles(angle_z)
    return (
        cy * sx * cz + sy * cx * sz,
        sy * cx * cz - cy * sx * sz,
        cy * cx * sz - sy * sx * cz,
        cy * cx * cz + sy * sx * sz,
    )
