"""
Axis-angle rotations.

An ``AxisAngle`` stores ``(angle, x, y, z)``: a rotation of ``angle`` radians
about the axis ``(x, y, z)``. The axis is expected to be unit length; none of
the conversions normalize it, call :meth:`AxisAngle.normalize` first if needed.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Self

from rendermath.base import Value, component_property, ieee_div, ieee_sqrt, safe_acos
from rendermath.config import DOUBLE, FLOAT
from rendermath.constants import PI, PI_TIMES_2
from rendermath.quaternion import Block3, normalize_columns3, rotation_block_of

# Tolerances for detecting the 0 and 180 degree cases of a rotation matrix
SYMMETRY_EPSILON = 1e-4
IDENTITY_EPSILON = 1e-3


def axis_angle_to_matrix3(angle: float, x: float, y: float, z: float) -> Block3:
    """Column-major 3x3 rotation block by Rodrigues' formula.

    ``R = I + sin(angle) K + (1 - cos(angle)) K^2`` written out in closed form.
    The axis must be unit length.

    :returns: (m00, m01, m02, m10, m11, m12, m20, m21, m22)
    """
    sin = math.sin(angle)
    cos = math.cos(angle)
    c = 1.0 - cos
    xy, xz, yz = x * y, x * z, y * z
    return (
        cos + x * x * c, xy * c + z * sin, xz * c - y * sin,
        xy * c - z * sin, cos + y * y * c, yz * c + x * sin,
        xz * c + y * sin, yz * c - x * sin, cos + z * z * c,
    )


def axis_angle_from_matrix3(m: Sequence[float]) -> tuple[float, float, float, float]:
    """Recover ``(angle, x, y, z)`` from a rotation block.

    Columns are normalized first so that scaled matrices are accepted. A
    symmetric block is either the identity (angle 0, axis +z) or a half turn,
    which needs its own branch because the antisymmetric part vanishes.
    """
    m00, m01, m02, m10, m11, m12, m20, m21, m22 = normalize_columns3(m)
    if (
        abs(m10 - m01) < SYMMETRY_EPSILON
        and abs(m20 - m02) < SYMMETRY_EPSILON
        and abs(m21 - m12) < SYMMETRY_EPSILON
    ):
        if (
            abs(m10 + m01) < IDENTITY_EPSILON
            and abs(m20 + m02) < IDENTITY_EPSILON
            and abs(m21 + m12) < IDENTITY_EPSILON
            and abs(m00 + m11 + m22 - 3.0) < IDENTITY_EPSILON
        ):
            return 0.0, 0.0, 0.0, 1.0
        xx = (m00 + 1.0) / 2.0
        yy = (m11 + 1.0) / 2.0
        zz = (m22 + 1.0) / 2.0
        xy = (m01 + m10) / 4.0
        xz = (m02 + m20) / 4.0
        yz = (m12 + m21) / 4.0
        if xx > yy and xx > zz:
            x = math.sqrt(xx)
            return PI, x, ieee_div(xy, x), ieee_div(xz, x)
        if yy > zz:
            y = math.sqrt(yy)
            return PI, ieee_div(xy, y), y, ieee_div(yz, y)
        z = math.sqrt(max(zz, 0.0))
        return PI, ieee_div(xz, z), ieee_div(yz, z), z
    s = math.sqrt((m12 - m21) ** 2 + (m20 - m02) ** 2 + (m01 - m10) ** 2)
    cos = (m00 + m11 + m22 - 1.0) / 2.0
    return safe_acos(cos), (m12 - m21) / s, (m20 - m02) / s, (m01 - m10) / s


class AxisAngle(Value):
    """Rotation of ``angle`` radians about ``(x, y, z)``.

    Default-constructed values are the zero rotation about +z.
    """

    kind = "axis_angle"
    size = 4
    __slots__ = ()

    angle = component_property(0, "Rotation angle in radians")
    x = component_property(1)
    y = component_property(2)
    z = component_property(3)

    def __init__(self, *components: Any) -> None:
        super().__init__()
        if not components:
            self._data[3] = 1.0
            return
        self._assign(self._read(self._flatten(components), 4, "components"))

    def set(self, angle: float, x: float, y: float, z: float) -> Self:
        return self._assign((angle, x, y, z))

    def set_from_quaternion(self, q: Value) -> Self:
        """Set from a unit quaternion.

        The angle is ``2 acos(w)`` and the axis the vector part divided by
        ``sqrt(1 - w^2)``. The identity rotation has no defined axis and maps
        to angle 0 about +z; a non-unit quaternion with ``|w| > 1`` gives a
        NaN axis.
        """
        if q.kind != "quaternion":
            raise TypeError(f"Expected a Quaternion, got {type(q).__name__}")
        self._check_precision(q)
        x, y, z, w = q._values()
        s = 1.0 - w * w
        if s == 0.0:
            return self._assign((0.0, 0.0, 0.0, 1.0))
        inv = ieee_div(1.0, ieee_sqrt(s))
        angle = 2.0 * safe_acos(w)
        return self._assign((angle, x * inv, y * inv, z * inv))

    def set_from_matrix(self, m: Value) -> Self:
        """Set from the rotation part of a Matrix3 or Matrix4.

        Scale is divided out of the columns before the axis is extracted.
        """
        self._check_precision(m)
        return self._assign(axis_angle_from_matrix3(rotation_block_of(m)))

    def normalize(self, dest: AxisAngle | None = None) -> AxisAngle:
        """Normalize the axis; the angle is unchanged."""
        angle, x, y, z = self._values()
        inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z))
        return self._dest(dest)._assign((angle, x * inv, y * inv, z * inv))

    def rotate(self, angle: float, dest: AxisAngle | None = None) -> AxisAngle:
        """Add to the angle, wrapping the result into ``[0, 2 pi)``."""
        current, x, y, z = self._values()
        return self._dest(dest)._assign(((current + angle) % PI_TIMES_2, x, y, z))

    def transform(self, v: Value | Sequence[float], dest: Value | None = None) -> Value:
        """Rotate a vector by Rodrigues' formula.

        :param v: Vector3 (or 3 scalars)
        :param dest: Destination Vector3; defaults to ``v`` itself when it is a
            Vector3, otherwise a new one
        """
        vx, vy, vz = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        angle, x, y, z = self._values()
        sin = math.sin(angle)
        cos = math.cos(angle)
        dot = x * vx + y * vy + z * vz
        k = (1.0 - cos) * dot
        return self._dest_of("vector3", dest)._assign((
            vx * cos + sin * (y * vz - z * vy) + k * x,
            vy * cos + sin * (z * vx - x * vz) + k * y,
            vz * cos + sin * (x * vy - y * vx) + k * z,
        ))

    def to_quaternion(self, dest: Value | None = None) -> Value:
        return self._dest_of("quaternion", dest).set_axis_angle(self)

    def to_matrix3(self, dest: Value | None = None) -> Value:
        return self._dest_of("matrix3", dest).rotation(self)

    def to_matrix4(self, dest: Value | None = None) -> Value:
        return self._dest_of("matrix4", dest).rotation(self)


class AxisAnglef(AxisAngle):
    precision = FLOAT
    __slots__ = ()


class AxisAngled(AxisAngle):
    precision = DOUBLE
    __slots__ = ()
