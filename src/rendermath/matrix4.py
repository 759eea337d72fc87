"""
4x4 matrices.

Column-major storage with ``mCR`` accessors (first digit column, second digit
row), so ``m30``, ``m31``, ``m32`` hold the translation. Composing operations
post-multiply (``M := M * B``); the ``*_local`` variants pre-multiply
(``M := B * M``).

"Affine" means the last row is ``(0, 0, 0, 1)``. The ``*_affine`` fast paths
assume it without checking unless ``CONFIG.debug_assertions`` is enabled.

The projection, view and frustum methods are thin wrappers around the pure
functions in :mod:`rendermath.projection`, :mod:`rendermath.view` and
:mod:`rendermath.frustum`.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Sequence
from typing import Any, Self

from rendermath.base import (
    SquareMatrix,
    Value,
    component_property,
    ieee_div,
    multiply_square,
)
from rendermath.config import DOUBLE, FLOAT
from rendermath.matrix3 import (
    axis_rotation_block,
    determinant3,
    euler_xyz_block,
    euler_yxz_block,
    euler_zyx_block,
    invert3,
    rotation_block_from,
    rotation_x_block,
    rotation_y_block,
    rotation_z_block,
)
from rendermath.quaternion import Block3, quaternion_to_matrix3, rotation_block_of
from rendermath.types import PlaneLike, Vector3Like, Vector4Like, Viewport
from rendermath.validators import assume_affine, assume_unit_columns

type Mat4 = list[float]

IDENTITY3: Block3 = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

# ============================================================================
# Element-level algebra
# ============================================================================


def embed3(block: Sequence[float], tx: float = 0.0, ty: float = 0.0, tz: float = 0.0) -> Mat4:
    """Affine 4x4 matrix with the given 3x3 block and translation."""
    return [
        block[0], block[1], block[2], 0.0,
        block[3], block[4], block[5], 0.0,
        block[6], block[7], block[8], 0.0,
        tx, ty, tz, 1.0,
    ]


def multiply4(a: Sequence[float], b: Sequence[float]) -> Mat4:
    """General product ``a * b``."""
    return multiply_square(a, b, 4)


def multiply_affine_right4(a: Sequence[float], b: Sequence[float]) -> Mat4:
    """Product ``a * b`` where ``b`` is affine; its last row is not read."""
    out = []
    for c in range(4):
        b0, b1, b2 = b[c * 4], b[c * 4 + 1], b[c * 4 + 2]
        for r in range(4):
            v = a[r] * b0 + a[4 + r] * b1 + a[8 + r] * b2
            if c == 3:
                v += a[12 + r]
            out.append(v)
    return out


def multiply_affine4(a: Sequence[float], b: Sequence[float]) -> Mat4:
    """Product of two affine matrices; only the first three rows are computed."""
    out = multiply_affine_right4(a, b)
    out[3], out[7], out[11], out[15] = a[3], a[7], a[11], a[15]
    return out


def determinant4(m: Sequence[float]) -> float:
    """Laplace expansion over 2x2 sub-determinants of the first two and last two rows."""
    (m00, m01, m02, m03, m10, m11, m12, m13,
     m20, m21, m22, m23, m30, m31, m32, m33) = m
    return (
        (m00 * m11 - m01 * m10) * (m22 * m33 - m23 * m32)
        + (m02 * m10 - m00 * m12) * (m21 * m33 - m23 * m31)
        + (m00 * m13 - m03 * m10) * (m21 * m32 - m22 * m31)
        + (m01 * m12 - m02 * m11) * (m20 * m33 - m23 * m30)
        + (m03 * m11 - m01 * m13) * (m20 * m32 - m22 * m30)
        + (m02 * m13 - m03 * m12) * (m20 * m31 - m21 * m30)
    )


def invert4(m: Sequence[float]) -> Mat4:
    """General inverse as adjugate over determinant.

    Uses the same twelve 2x2 sub-determinants as :func:`determinant4`. A
    singular matrix divides by zero and yields inf/NaN elements.
    """
    (m00, m01, m02, m03, m10, m11, m12, m13,
     m20, m21, m22, m23, m30, m31, m32, m33) = m
    a = m00 * m11 - m01 * m10
    b = m00 * m12 - m02 * m10
    c = m00 * m13 - m03 * m10
    d = m01 * m12 - m02 * m11
    e = m01 * m13 - m03 * m11
    f = m02 * m13 - m03 * m12
    g = m20 * m31 - m21 * m30
    h = m20 * m32 - m22 * m30
    i = m20 * m33 - m23 * m30
    j = m21 * m32 - m22 * m31
    k = m21 * m33 - m23 * m31
    l = m22 * m33 - m23 * m32  # noqa: E741
    s = ieee_div(1.0, a * l - b * k + c * j + d * i - e * h + f * g)
    return [
        (m11 * l - m12 * k + m13 * j) * s,
        (-m01 * l + m02 * k - m03 * j) * s,
        (m31 * f - m32 * e + m33 * d) * s,
        (-m21 * f + m22 * e - m23 * d) * s,
        (-m10 * l + m12 * i - m13 * h) * s,
        (m00 * l - m02 * i + m03 * h) * s,
        (-m30 * f + m32 * c - m33 * b) * s,
        (m20 * f - m22 * c + m23 * b) * s,
        (m10 * k - m11 * i + m13 * g) * s,
        (-m00 * k + m01 * i - m03 * g) * s,
        (m30 * e - m31 * c + m33 * a) * s,
        (-m20 * e + m21 * c - m23 * a) * s,
        (-m10 * j + m11 * h - m12 * g) * s,
        (m00 * j - m01 * h + m02 * g) * s,
        (-m30 * d + m31 * b - m32 * a) * s,
        (m20 * d - m21 * b + m22 * a) * s,
    ]


def invert_affine4(m: Sequence[float]) -> Mat4:
    """Inverse of an affine matrix: invert the 3x3 block, then ``t' = -(R^-1 t)``."""
    inv = invert3(rotation_block_of_values(m))
    tx, ty, tz = m[12], m[13], m[14]
    return embed3(
        inv,
        -(inv[0] * tx + inv[3] * ty + inv[6] * tz),
        -(inv[1] * tx + inv[4] * ty + inv[7] * tz),
        -(inv[2] * tx + inv[5] * ty + inv[8] * tz),
    )


def rotation_block_of_values(m: Sequence[float]) -> Block3:
    """Upper-left 3x3 block of 16 column-major elements."""
    return (m[0], m[1], m[2], m[4], m[5], m[6], m[8], m[9], m[10])


def transform_point4(m: Sequence[float], x: float, y: float, z: float, w: float) -> tuple:
    """``m * (x, y, z, w)``."""
    return (
        m[0] * x + m[4] * y + m[8] * z + m[12] * w,
        m[1] * x + m[5] * y + m[9] * z + m[13] * w,
        m[2] * x + m[6] * y + m[10] * z + m[14] * w,
        m[3] * x + m[7] * y + m[11] * z + m[15] * w,
    )


def unproject_point(m: Sequence[float], x: float, y: float, z: float) -> tuple:
    """``m * (x, y, z, 1)`` followed by the perspective divide."""
    px, py, pz, pw = transform_point4(m, x, y, z, 1.0)
    inv_w = ieee_div(1.0, pw)
    return px * inv_w, py * inv_w, pz * inv_w


# ============================================================================
# Matrix4
# ============================================================================


class Matrix4(SquareMatrix):
    """4x4 matrix for affine and projective transforms.

    Default-constructed matrices are the identity. The constructor also
    accepts 16 column-major scalars, another Matrix4, or a Matrix3 (embedded
    in the upper-left block with identity elsewhere).
    """

    kind = "matrix4"
    size = 16
    order = 4
    __slots__ = ()

    m00 = component_property(0)
    m01 = component_property(1)
    m02 = component_property(2)
    m03 = component_property(3)
    m10 = component_property(4)
    m11 = component_property(5)
    m12 = component_property(6)
    m13 = component_property(7)
    m20 = component_property(8)
    m21 = component_property(9)
    m22 = component_property(10)
    m23 = component_property(11)
    m30 = component_property(12)
    m31 = component_property(13)
    m32 = component_property(14)
    m33 = component_property(15)

    def set(self, *components: Any) -> Self:
        """Set from 16 column-major scalars, a Matrix4 or a Matrix3."""
        if len(components) == 1 and isinstance(components[0], Value):
            other = components[0]
            if other.kind == "matrix3":
                self._check_precision(other)
                return self._assign(embed3(other._values()))
        return self._assign(self._read(self._flatten(components), 16, "components"))

    def set3x3(self, m: Value) -> Self:
        """Replace the upper-left 3x3 block with that of a Matrix3 or Matrix4."""
        self._check_precision(m)
        block = rotation_block_of(m)
        for c in range(3):
            self._data[c * 4:c * 4 + 3] = block[c * 3:c * 3 + 3]
        return self

    def is_affine(self) -> bool:
        """True if the last row is exactly ``(0, 0, 0, 1)``."""
        m = self._values()
        return m[3] == 0.0 and m[7] == 0.0 and m[11] == 0.0 and m[15] == 1.0

    # ------------------------------------------------------------------
    # Multiplication
    # ------------------------------------------------------------------

    def mul_affine(self, right: Any, dest: Matrix4 | None = None) -> Matrix4:
        """``dest = self * right`` for two affine matrices."""
        a = self._values()
        b = self._read(right, 16, "right")
        assume_affine(a, "mul_affine")
        assume_affine(b, "mul_affine")
        return self._dest(dest)._assign(multiply_affine4(a, b))

    def mul_affine_r(self, right: Any, dest: Matrix4 | None = None) -> Matrix4:
        """``dest = self * right`` where only ``right`` is affine."""
        b = self._read(right, 16, "right")
        assume_affine(b, "mul_affine_r")
        return self._dest(dest)._assign(multiply_affine_right4(self._values(), b))

    # ------------------------------------------------------------------
    # Determinant and inversion
    # ------------------------------------------------------------------

    def determinant(self) -> float:
        return determinant4(self._values())

    def determinant3x3(self) -> float:
        """Determinant of the upper-left 3x3 block."""
        return determinant3(rotation_block_of_values(self._values()))

    def determinant_affine(self) -> float:
        """Determinant of an affine matrix (equals the 3x3 block's determinant)."""
        m = self._values()
        assume_affine(m, "determinant_affine")
        return determinant3(rotation_block_of_values(m))

    def invert(self, dest: Matrix4 | None = None) -> Matrix4:
        """General inverse; a singular matrix yields inf/NaN elements instead of raising."""
        return self._dest(dest)._assign(invert4(self._values()))

    def invert_affine(self, dest: Matrix4 | None = None) -> Matrix4:
        """Inverse of an affine matrix."""
        m = self._values()
        assume_affine(m, "invert_affine")
        return self._dest(dest)._assign(invert_affine4(m))

    def invert_affine_unit_scale(self, dest: Matrix4 | None = None) -> Matrix4:
        """Inverse of an affine matrix whose 3x3 block is orthonormal.

        The block is transposed and the translation rotated back, which is
        only correct for rigid transforms such as view matrices.
        """
        m = self._values()
        assume_affine(m, "invert_affine_unit_scale")
        assume_unit_columns((m[0:3], m[4:7], m[8:11]), "invert_affine_unit_scale")
        m00, m01, m02, _, m10, m11, m12, _, m20, m21, m22, _, m30, m31, m32, _ = m
        return self._dest(dest)._assign((
            m00, m10, m20, 0.0,
            m01, m11, m21, 0.0,
            m02, m12, m22, 0.0,
            -(m00 * m30 + m01 * m31 + m02 * m32),
            -(m10 * m30 + m11 * m31 + m12 * m32),
            -(m20 * m30 + m21 * m31 + m22 * m32),
            1.0,
        ))

    invert_look_at = invert_affine_unit_scale

    def invert_perspective(self, dest: Matrix4 | None = None) -> Matrix4:
        """Inverse of a matrix built by ``perspective``/``set_perspective``."""
        m = self._values()
        m00, m11, m22, m23, m32 = m[0], m[5], m[10], m[11], m[14]
        a = ieee_div(1.0, m00 * m11)
        l = ieee_div(-1.0, m23 * m32)  # noqa: E741
        return self._dest(dest)._assign((
            m11 * a, 0.0, 0.0, 0.0,
            0.0, m00 * a, 0.0, 0.0,
            0.0, 0.0, 0.0, -m23 * l,
            0.0, 0.0, -m32 * l, m22 * l,
        ))

    def invert_frustum(self, dest: Matrix4 | None = None) -> Matrix4:
        """Inverse of a matrix built by ``frustum``/``set_frustum``."""
        m = self._values()
        m00, m11, m20, m21, m22, m23, m32 = m[0], m[5], m[8], m[9], m[10], m[11], m[14]
        return self._dest(dest)._assign((
            ieee_div(1.0, m00), 0.0, 0.0, 0.0,
            0.0, ieee_div(1.0, m11), 0.0, 0.0,
            0.0, 0.0, 0.0, ieee_div(1.0, m32),
            ieee_div(-m20, m00 * m23), ieee_div(-m21, m11 * m23),
            ieee_div(1.0, m23), ieee_div(-m22, m23 * m32),
        ))

    def invert_ortho(self, dest: Matrix4 | None = None) -> Matrix4:
        """Inverse of a matrix built by one of the ``ortho`` builders."""
        m = self._values()
        m00, m11, m22, m30, m31, m32 = m[0], m[5], m[10], m[12], m[13], m[14]
        return self._dest(dest)._assign((
            ieee_div(1.0, m00), 0.0, 0.0, 0.0,
            0.0, ieee_div(1.0, m11), 0.0, 0.0,
            0.0, 0.0, ieee_div(1.0, m22), 0.0,
            ieee_div(-m30, m00), ieee_div(-m31, m11), ieee_div(-m32, m22), 1.0,
        ))

    def transpose3x3(self, dest: Matrix4 | None = None) -> Matrix4:
        """Transpose the upper-left 3x3 block; translation and last row become identity."""
        m = self._values()
        return self._dest(dest)._assign(embed3((
            m[0], m[4], m[8],
            m[1], m[5], m[9],
            m[2], m[6], m[10],
        )))

    def normal(self, dest: Matrix4 | None = None) -> Matrix4:
        """Normal matrix: inverse transpose of the 3x3 block, embedded without translation."""
        inv = invert3(rotation_block_of_values(self._values()))
        return self._dest(dest)._assign(embed3(
            [inv[r * 3 + c] for c in range(3) for r in range(3)]
        ))

    # ------------------------------------------------------------------
    # Affine builders (replace)
    # ------------------------------------------------------------------

    def translation(self, x: float, y: float, z: float) -> Self:
        """Set to a pure translation matrix.

        :param x: Offset along x
        :param y: Offset along y
        :param z: Offset along z
        :returns: self
        """
        return self._assign(embed3(IDENTITY3, x, y, z))

    def set_translation(self, x: float, y: float, z: float) -> Self:
        """Overwrite only the translation column."""
        self._data[12:15] = (x, y, z)
        return self

    def scaling(self, x: float, y: float | None = None, z: float | None = None) -> Self:
        """Set to a scale matrix; a single argument scales uniformly.

        :param x: Scale along x, or the uniform factor
        :param y: Scale along y (defaults to x)
        :param z: Scale along z (defaults to x)
        :returns: self
        """
        y = x if y is None else y
        z = x if z is None else z
        return self._assign(embed3((x, 0.0, 0.0, 0.0, y, 0.0, 0.0, 0.0, z)))

    def rotation(self, value: Value) -> Self:
        """Set to the rotation of a Quaternion or AxisAngle (axis taken as is)."""
        self._check_precision(value)
        return self._assign(embed3(rotation_block_from(value)))

    def rotation_axis(self, angle: float, x: float, y: float, z: float) -> Self:
        """Set to a rotation of ``angle`` radians about ``(x, y, z)``.

        Unlike :meth:`rotation` with an AxisAngle, the axis is normalized
        here, so any non-zero length works.

        :param angle: Angle in radians, counter-clockwise looking down the axis
        :returns: self
        """
        return self._assign(embed3(axis_rotation_block(angle, x, y, z)))

    def rotation_x(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the x axis."""
        return self._assign(embed3(rotation_x_block(angle)))

    def rotation_y(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the y axis."""
        return self._assign(embed3(rotation_y_block(angle)))

    def rotation_z(self, angle: float) -> Self:
        """Set to a rotation of ``angle`` radians about the z axis."""
        return self._assign(embed3(rotation_z_block(angle)))

    def rotation_xyz(self, angle_x: float, angle_y: float, angle_z: float) -> Self:
        """Set to ``Rx(angle_x) * Ry(angle_y) * Rz(angle_z)``."""
        return self._assign(embed3(euler_xyz_block(angle_x, angle_y, angle_z)))

    def rotation_zyx(self, angle_z: float, angle_y: float, angle_x: float) -> Self:
        """Set to ``Rz(angle_z) * Ry(angle_y) * Rx(angle_x)``."""
        return self._assign(embed3(euler_zyx_block(angle_z, angle_y, angle_x)))

    def rotation_yxz(self, angle_y: float, angle_x: float, angle_z: float) -> Self:
        """Set to ``Ry(angle_y) * Rx(angle_x) * Rz(angle_z)``."""
        return self._assign(embed3(euler_yxz_block(angle_y, angle_x, angle_z)))

    def translation_rotate_scale(self, translation: Any, rotation: Value, scale: Any) -> Self:
        """Set to ``T * R * S``.

        :param translation: 3 components
        :param rotation: Quaternion
        :param scale: 3 components or a single uniform factor
        """
        tx, ty, tz = self._read(translation, 3, "translation")
        if isinstance(scale, numbers.Real):
            sx = sy = sz = float(scale)
        else:
            sx, sy, sz = self._read(scale, 3, "scale")
        self._check_precision(rotation)
        r = quaternion_to_matrix3(*rotation._values())
        return self._assign(embed3((
            r[0] * sx, r[1] * sx, r[2] * sx,
            r[3] * sy, r[4] * sy, r[5] * sy,
            r[6] * sz, r[7] * sz, r[8] * sz,
        ), tx, ty, tz))

    # ------------------------------------------------------------------
    # Composition (post-multiply, and pre-multiply for *_local)
    # ------------------------------------------------------------------

    def _post3(self, block: Block3, dest: Matrix4 | None) -> Matrix4:
        return self._dest(dest)._assign(multiply_affine_right4(self._values(), embed3(block)))

    def _post3_affine(self, block: Block3, dest: Matrix4 | None, operation: str) -> Matrix4:
        m = self._values()
        assume_affine(m, operation)
        return self._dest(dest)._assign(multiply_affine4(m, embed3(block)))

    def _pre3(self, block: Block3, dest: Matrix4 | None) -> Matrix4:
        return self._dest(dest)._assign(multiply4(embed3(block), self._values()))

    def translate(self, x: float, y: float, z: float, dest: Matrix4 | None = None) -> Matrix4:
        """Post-multiply a translation: ``dest = self * T(x, y, z)``."""
        m = self._values()
        out = list(m)
        for r in range(4):
            out[12 + r] = m[r] * x + m[4 + r] * y + m[8 + r] * z + m[12 + r]
        return self._dest(dest)._assign(out)

    def translate_local(
        self, x: float, y: float, z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """Pre-multiply a translation: ``dest = T(x, y, z) * self``."""
        return self._dest(dest)._assign(
            multiply4(embed3(IDENTITY3, x, y, z), self._values())
        )

    def scale(
        self, x: float, y: float | None = None, z: float | None = None,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        """Post-multiply a scale; a single factor scales uniformly."""
        y = x if y is None else y
        z = x if z is None else z
        m = self._values()
        return self._dest(dest)._assign(
            [v * x for v in m[0:4]] + [v * y for v in m[4:8]] + [v * z for v in m[8:12]] + m[12:16]
        )

    def scale_local(
        self, x: float, y: float | None = None, z: float | None = None,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        """Pre-multiply a scale: every row is scaled instead of every column."""
        y = x if y is None else y
        z = x if z is None else z
        m = self._values()
        factors = (x, y, z, 1.0)
        return self._dest(dest)._assign([v * factors[i % 4] for i, v in enumerate(m)])

    def rotate(self, value: Value, dest: Matrix4 | None = None) -> Matrix4:
        """Post-multiply the rotation of a Quaternion or AxisAngle."""
        self._check_precision(value)
        return self._post3(rotation_block_from(value), dest)

    def rotate_local(self, value: Value, dest: Matrix4 | None = None) -> Matrix4:
        """Pre-multiply the rotation of a Quaternion or AxisAngle."""
        self._check_precision(value)
        return self._pre3(rotation_block_from(value), dest)

    def rotate_axis(
        self, angle: float, x: float, y: float, z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """Post-multiply a rotation about ``(x, y, z)``, which is normalized first.

        :param angle: Angle in radians
        :param dest: Destination matrix (defaults to self)
        :returns: dest
        """
        return self._post3(axis_rotation_block(angle, x, y, z), dest)

    def rotate_x(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Post-multiply a rotation about x: ``dest = self * Rx(angle)``."""
        return self._post3(rotation_x_block(angle), dest)

    def rotate_y(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Post-multiply a rotation about y: ``dest = self * Ry(angle)``."""
        return self._post3(rotation_y_block(angle), dest)

    def rotate_z(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Post-multiply a rotation about z: ``dest = self * Rz(angle)``."""
        return self._post3(rotation_z_block(angle), dest)

    def rotate_local_x(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Pre-multiply a rotation about x: ``dest = Rx(angle) * self``."""
        return self._pre3(rotation_x_block(angle), dest)

    def rotate_local_y(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Pre-multiply a rotation about y: ``dest = Ry(angle) * self``."""
        return self._pre3(rotation_y_block(angle), dest)

    def rotate_local_z(self, angle: float, dest: Matrix4 | None = None) -> Matrix4:
        """Pre-multiply a rotation about z: ``dest = Rz(angle) * self``."""
        return self._pre3(rotation_z_block(angle), dest)

    def rotate_xyz(
        self, angle_x: float, angle_y: float, angle_z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """Equivalent to ``rotate_x(angle_x).rotate_y(angle_y).rotate_z(angle_z)``."""
        return self._post3(euler_xyz_block(angle_x, angle_y, angle_z), dest)

    def rotate_zyx(
        self, angle_z: float, angle_y: float, angle_x: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """Equivalent to ``rotate_z(angle_z).rotate_y(angle_y).rotate_x(angle_x)``."""
        return self._post3(euler_zyx_block(angle_z, angle_y, angle_x), dest)

    def rotate_yxz(
        self, angle_y: float, angle_x: float, angle_z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """Equivalent to ``rotate_y(angle_y).rotate_x(angle_x).rotate_z(angle_z)``."""
        return self._post3(euler_yxz_block(angle_y, angle_x, angle_z), dest)

    def rotate_affine_xyz(
        self, angle_x: float, angle_y: float, angle_z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        """:meth:`rotate_xyz` for an affine matrix; the last row is copied, not computed."""
        return self._post3_affine(
            euler_xyz_block(angle_x, angle_y, angle_z), dest, "rotate_affine_xyz"
        )

    def rotate_affine_zyx(
        self, angle_z: float, angle_y: float, angle_x: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        return self._post3_affine(
            euler_zyx_block(angle_z, angle_y, angle_x), dest, "rotate_affine_zyx"
        )

    def rotate_affine_yxz(
        self, angle_y: float, angle_x: float, angle_z: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        return self._post3_affine(
            euler_yxz_block(angle_y, angle_x, angle_z), dest, "rotate_affine_yxz"
        )

    # ------------------------------------------------------------------
    # Decomposition
    # ------------------------------------------------------------------

    def get_translation(self, dest: Value | None = None) -> Value:
        return self._dest_of("vector3", dest)._assign(self._values()[12:15])

    def get_scale(self, dest: Value | None = None) -> Value:
        """Length of each of the first three columns."""
        m = self._values()
        return self._dest_of("vector3", dest)._assign(
            [math.sqrt(m[i] * m[i] + m[i + 1] * m[i + 1] + m[i + 2] * m[i + 2]) for i in (0, 4, 8)]
        )

    def get_normalized_rotation(self, dest: Value | None = None) -> Value:
        """Rotation as a quaternion, assuming unit-length columns."""
        return self._dest_of("quaternion", dest).set_from_normalized(self)

    def get_unnormalized_rotation(self, dest: Value | None = None) -> Value:
        """Rotation as a quaternion, dividing out per-column scale first."""
        return self._dest_of("quaternion", dest).set_from_unnormalized(self)

    def get_matrix3(self, dest: Value | None = None) -> Value:
        """Upper-left 3x3 block as a Matrix3."""
        return self._dest_of("matrix3", dest).set(self)

    def positive_x(self, dest: Value | None = None) -> Value:
        """Direction of +X before this transform, i.e. the normalized first row of the inverse."""
        m00, m01, m02, _, m10, m11, m12, _, m20, m21, m22 = self._values()[:11]
        return self._dest_of("vector3", dest)._assign((
            m11 * m22 - m12 * m21, m02 * m21 - m01 * m22, m01 * m12 - m02 * m11,
        )).normalize()

    def positive_y(self, dest: Value | None = None) -> Value:
        """Direction of +Y before this transform."""
        m00, m01, m02, _, m10, m11, m12, _, m20, m21, m22 = self._values()[:11]
        return self._dest_of("vector3", dest)._assign((
            m12 * m20 - m10 * m22, m00 * m22 - m02 * m20, m02 * m10 - m00 * m12,
        )).normalize()

    def positive_z(self, dest: Value | None = None) -> Value:
        """Direction of +Z before this transform."""
        m00, m01, m02, _, m10, m11, m12, _, m20, m21, m22 = self._values()[:11]
        return self._dest_of("vector3", dest)._assign((
            m10 * m21 - m11 * m20, m20 * m01 - m21 * m00, m00 * m11 - m01 * m10,
        )).normalize()

    def normalized_positive_x(self, dest: Value | None = None) -> Value:
        """:meth:`positive_x` for an orthonormal 3x3 block: the first row."""
        m = self._values()
        return self._dest_of("vector3", dest)._assign((m[0], m[4], m[8]))

    def normalized_positive_y(self, dest: Value | None = None) -> Value:
        m = self._values()
        return self._dest_of("vector3", dest)._assign((m[1], m[5], m[9]))

    def normalized_positive_z(self, dest: Value | None = None) -> Value:
        m = self._values()
        return self._dest_of("vector3", dest)._assign((m[2], m[6], m[10]))

    def origin_affine(self, dest: Value | None = None) -> Value:
        """Point that this affine matrix maps to the origin (e.g. a camera position)."""
        m = self._values()
        assume_affine(m, "origin_affine")
        return self._dest_of("vector3", dest)._assign(invert_affine4(m)[12:15])

    def origin(self, dest: Value | None = None) -> Value:
        """Point that this (possibly projective) matrix maps to the origin."""
        inv = invert4(self._values())
        inv_w = ieee_div(1.0, inv[15])
        return self._dest_of("vector3", dest)._assign(
            (inv[12] * inv_w, inv[13] * inv_w, inv[14] * inv_w)
        )

    # ------------------------------------------------------------------
    # Vector transformation
    # ------------------------------------------------------------------

    def transform(self, v: Any, dest: Value | None = None) -> Value:
        """``dest = self * v`` for a Vector4.

        :param v: Vector4 (or 4 scalars)
        :param dest: Destination Vector4; defaults to ``v`` when it is a Vector4
        """
        x, y, z, w = self._read(v, 4, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        return self._dest_of("vector4", dest)._assign(transform_point4(self._values(), x, y, z, w))

    def transform_position(self, v: Any, dest: Value | None = None) -> Value:
        """Transform a Vector3 as a point (w = 1), ignoring the last row."""
        x, y, z = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        return self._dest_of("vector3", dest)._assign(
            transform_point4(self._values(), x, y, z, 1.0)[:3]
        )

    def transform_direction(self, v: Any, dest: Value | None = None) -> Value:
        """Transform a Vector3 as a direction (w = 0)."""
        x, y, z = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        return self._dest_of("vector3", dest)._assign(
            transform_point4(self._values(), x, y, z, 0.0)[:3]
        )

    def transform_project(self, v: Any, dest: Value | None = None) -> Value:
        """Transform a Vector3 as a point and divide by the resulting w."""
        x, y, z = self._read(v, 3, "v")
        if dest is None and isinstance(v, Value):
            dest = v
        return self._dest_of("vector3", dest)._assign(unproject_point(self._values(), x, y, z))

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Value) and other.kind == "vector3":
            return self.transform_position(other, other.copy())
        return super().__matmul__(other)

    # ------------------------------------------------------------------
    # Projection builders (rendermath.projection)
    # ------------------------------------------------------------------

    def set_ortho(
        self, left: float, right: float, bottom: float, top: float,
        z_near: float, z_far: float, *, z_zero_to_one: bool = False,
    ) -> Self:
        from rendermath import projection

        return projection.set_ortho(
            self, left, right, bottom, top, z_near, z_far, z_zero_to_one=z_zero_to_one
        )

    def ortho(
        self, left: float, right: float, bottom: float, top: float,
        z_near: float, z_far: float, *, z_zero_to_one: bool = False,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.ortho(
            self, left, right, bottom, top, z_near, z_far,
            z_zero_to_one=z_zero_to_one, dest=dest,
        )

    def set_ortho_symmetric(
        self, width: float, height: float, z_near: float, z_far: float,
        *, z_zero_to_one: bool = False,
    ) -> Self:
        from rendermath import projection

        return projection.set_ortho_symmetric(
            self, width, height, z_near, z_far, z_zero_to_one=z_zero_to_one
        )

    def ortho_symmetric(
        self, width: float, height: float, z_near: float, z_far: float,
        *, z_zero_to_one: bool = False, dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.ortho_symmetric(
            self, width, height, z_near, z_far, z_zero_to_one=z_zero_to_one, dest=dest
        )

    def set_ortho_2d(self, left: float, right: float, bottom: float, top: float) -> Self:
        from rendermath import projection

        return projection.set_ortho_2d(self, left, right, bottom, top)

    def ortho_2d(
        self, left: float, right: float, bottom: float, top: float,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.ortho_2d(self, left, right, bottom, top, dest=dest)

    def set_perspective(
        self, fovy: float, aspect: float, z_near: float, z_far: float,
        *, z_zero_to_one: bool = False,
    ) -> Self:
        from rendermath import projection

        return projection.set_perspective(
            self, fovy, aspect, z_near, z_far, z_zero_to_one=z_zero_to_one
        )

    def perspective(
        self, fovy: float, aspect: float, z_near: float, z_far: float,
        *, z_zero_to_one: bool = False, dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.perspective(
            self, fovy, aspect, z_near, z_far, z_zero_to_one=z_zero_to_one, dest=dest
        )

    def set_frustum(
        self, left: float, right: float, bottom: float, top: float,
        z_near: float, z_far: float, *, z_zero_to_one: bool = False,
    ) -> Self:
        from rendermath import projection

        return projection.set_frustum(
            self, left, right, bottom, top, z_near, z_far, z_zero_to_one=z_zero_to_one
        )

    def frustum(
        self, left: float, right: float, bottom: float, top: float,
        z_near: float, z_far: float, *, z_zero_to_one: bool = False,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.frustum(
            self, left, right, bottom, top, z_near, z_far,
            z_zero_to_one=z_zero_to_one, dest=dest,
        )

    def project(
        self, position: Vector3Like, viewport: Viewport, dest: Value | None = None
    ) -> Value:
        from rendermath import projection

        return projection.project(self, position, viewport, dest=dest)

    def unproject(
        self, window: Vector3Like, viewport: Viewport, dest: Value | None = None
    ) -> Value:
        from rendermath import projection

        return projection.unproject(self, window, viewport, dest=dest)

    def unproject_ray(
        self, window_x: float, window_y: float, viewport: Viewport,
        origin_dest: Value | None = None, dir_dest: Value | None = None,
    ) -> tuple[Value, Value]:
        from rendermath import projection

        return projection.unproject_ray(
            self, window_x, window_y, viewport, origin_dest=origin_dest, dir_dest=dir_dest
        )

    def pick(
        self, x: float, y: float, width: float, height: float, viewport: Viewport,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import projection

        return projection.pick(self, x, y, width, height, viewport, dest=dest)

    # ------------------------------------------------------------------
    # View builders (rendermath.view)
    # ------------------------------------------------------------------

    def set_look_at(self, eye: Vector3Like, center: Vector3Like, up: Vector3Like) -> Self:
        from rendermath import view

        return view.set_look_at(self, eye, center, up)

    def look_at(
        self, eye: Vector3Like, center: Vector3Like, up: Vector3Like,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import view

        return view.look_at(self, eye, center, up, dest=dest)

    def set_look_along(self, direction: Vector3Like, up: Vector3Like) -> Self:
        from rendermath import view

        return view.set_look_along(self, direction, up)

    def look_along(
        self, direction: Vector3Like, up: Vector3Like, dest: Matrix4 | None = None
    ) -> Matrix4:
        from rendermath import view

        return view.look_along(self, direction, up, dest=dest)

    def shadow(
        self, light: Vector4Like, plane: Vector4Like | Matrix4, dest: Matrix4 | None = None
    ) -> Matrix4:
        from rendermath import view

        return view.shadow(self, light, plane, dest=dest)

    def reflection(self, plane_or_normal: PlaneLike, point: Vector3Like | None = None) -> Self:
        from rendermath import view

        return view.reflection(self, plane_or_normal, point)

    def reflect(
        self, plane_or_normal: PlaneLike, point: Vector3Like | None = None,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import view

        return view.reflect(self, plane_or_normal, point, dest=dest)

    def billboard_cylindrical(
        self, obj_pos: Vector3Like, target_pos: Vector3Like, up: Vector3Like
    ) -> Self:
        from rendermath import view

        return view.billboard_cylindrical(self, obj_pos, target_pos, up)

    def billboard_spherical(
        self, obj_pos: Vector3Like, target_pos: Vector3Like, up: Vector3Like | None = None
    ) -> Self:
        from rendermath import view

        return view.billboard_spherical(self, obj_pos, target_pos, up)

    def arcball(
        self, radius: float, center: Vector3Like, angle_x: float, angle_y: float,
        dest: Matrix4 | None = None,
    ) -> Matrix4:
        from rendermath import view

        return view.arcball(self, radius, center, angle_x, angle_y, dest=dest)

    # ------------------------------------------------------------------
    # Frustum analysis (rendermath.frustum)
    # ------------------------------------------------------------------

    def frustum_plane(self, plane: int, dest: Value | None = None) -> Value:
        from rendermath import frustum

        return frustum.frustum_plane(self, plane, dest=dest)

    def frustum_corner(self, corner: int, dest: Value | None = None) -> Value:
        from rendermath import frustum

        return frustum.frustum_corner(self, corner, dest=dest)

    def frustum_ray_dir(self, x: float, y: float, dest: Value | None = None) -> Value:
        from rendermath import frustum

        return frustum.frustum_ray_dir(self, x, y, dest=dest)

    def test_point(self, x: float, y: float, z: float) -> bool:
        """Whether a point lies inside the frustum of this projection-view matrix."""
        from rendermath import frustum

        return frustum.test_point(self, x, y, z)

    def test_sphere(self, x: float, y: float, z: float, r: float) -> bool:
        """Whether a sphere is at least partly inside the frustum (conservative)."""
        from rendermath import frustum

        return frustum.test_sphere(self, x, y, z, r)

    def test_aab(self, min_corner: Vector3Like, max_corner: Vector3Like) -> bool:
        """Whether an axis-aligned box is at least partly inside the frustum (conservative)."""
        from rendermath import frustum

        return frustum.test_aab(self, min_corner, max_corner)

    def frustum_aabb(
        self, min_dest: Value | None = None, max_dest: Value | None = None
    ) -> tuple[Value, Value]:
        from rendermath import frustum

        return frustum.frustum_aabb(self, min_dest=min_dest, max_dest=max_dest)

    def projected_grid_range(
        self, projector: Matrix4, s_lower: float, s_upper: float, dest: Matrix4 | None = None
    ) -> Matrix4 | None:
        from rendermath import frustum

        return frustum.projected_grid_range(self, projector, s_lower, s_upper, dest=dest)

    def ortho_crop(self, view: Matrix4, dest: Matrix4 | None = None) -> Matrix4:
        from rendermath import frustum

        return frustum.ortho_crop(self, view, dest=dest)

    def perspective_origin(self, dest: Value | None = None) -> Value:
        from rendermath import frustum

        return frustum.perspective_origin(self, dest=dest)

    def perspective_fov(self) -> float:
        from rendermath import frustum

        return frustum.perspective_fov(self)

    def perspective_near(self) -> float:
        from rendermath import frustum

        return frustum.perspective_near(self)

    def perspective_far(self) -> float:
        from rendermath import frustum

        return frustum.perspective_far(self)

    def perspective_frustum_slice(
        self, z_near: float, z_far: float, dest: Matrix4 | None = None
    ) -> Matrix4:
        from rendermath import frustum

        return frustum.perspective_frustum_slice(self, z_near, z_far, dest=dest)


class Matrix4f(Matrix4):
    precision = FLOAT
    __slots__ = ()


class Matrix4d(Matrix4):
    precision = DOUBLE
    __slots__ = ()
