"""
Protocol definitions for rendermath value types.

Each value type is described by two capability sets: a read-only one
(accessors and queries that never mutate the receiver) and a mutating one
(operations that write into the receiver or an explicit ``dest``). One
concrete class per precision implements both, so code that only inspects a
value can be typed against the read-only protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from rendermath.config import Precision
    from rendermath.matrix3 import Matrix3
    from rendermath.quaternion import Quaternion
    from rendermath.vector import Vector3, Vector4


@runtime_checkable
class ReadableVector3(Protocol):
    """Read-only capabilities of a 3-component vector."""

    precision: Precision

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...

    @property
    def z(self) -> float: ...

    def length(self) -> float:
        """Euclidean length."""
        ...

    def dot(self, other: ReadableVector3) -> float:
        """Dot product."""
        ...


@runtime_checkable
class MutableVector3(ReadableVector3, Protocol):
    """Mutating capabilities of a 3-component vector."""

    def set(self, x: float, y: float, z: float) -> Self: ...

    def normalize(self, dest: Vector3 | None = None) -> Vector3: ...

    def cross(self, other: ReadableVector3, dest: Vector3 | None = None) -> Vector3: ...


@runtime_checkable
class ReadableQuaternion(Protocol):
    """Read-only capabilities of a quaternion."""

    precision: Precision

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...

    @property
    def z(self) -> float: ...

    @property
    def w(self) -> float: ...

    def length_squared(self) -> float: ...

    def transform(self, v: Vector3, dest: Vector3 | None = None) -> Vector3: ...


@runtime_checkable
class MutableQuaternion(ReadableQuaternion, Protocol):
    """Mutating capabilities of a quaternion."""

    def identity(self) -> Self: ...

    def mul(self, q: ReadableQuaternion, dest: Quaternion | None = None) -> Quaternion: ...

    def normalize(self, dest: Quaternion | None = None) -> Quaternion: ...


@runtime_checkable
class ReadableMatrix3(Protocol):
    """Read-only capabilities of a 3x3 matrix."""

    precision: Precision

    def get(self, column: int, row: int) -> float: ...

    def determinant(self) -> float: ...

    def transform(self, v: Vector3, dest: Vector3 | None = None) -> Vector3: ...


@runtime_checkable
class MutableMatrix3(ReadableMatrix3, Protocol):
    """Mutating capabilities of a 3x3 matrix."""

    def identity(self) -> Self: ...

    def mul(self, right: ReadableMatrix3, dest: Matrix3 | None = None) -> Matrix3: ...

    def invert(self, dest: Matrix3 | None = None) -> Matrix3: ...

    def transpose(self, dest: Matrix3 | None = None) -> Matrix3: ...


@runtime_checkable
class ReadableMatrix4(Protocol):
    """Read-only capabilities of a 4x4 matrix.

    Element accessors follow the ``mCR`` naming: first digit column,
    second digit row.
    """

    precision: Precision

    @property
    def m00(self) -> float: ...

    @property
    def m11(self) -> float: ...

    @property
    def m22(self) -> float: ...

    @property
    def m33(self) -> float: ...

    def get(self, column: int, row: int) -> float: ...

    def determinant(self) -> float: ...

    def is_affine(self) -> bool: ...

    def transform(self, v: Vector4, dest: Vector4 | None = None) -> Vector4: ...

    def frustum_plane(self, plane: int, dest: Vector4 | None = None) -> Vector4: ...

    def test_point(self, x: float, y: float, z: float) -> bool: ...

    def test_sphere(self, x: float, y: float, z: float, r: float) -> bool: ...


@runtime_checkable
class MutableMatrix4(ReadableMatrix4, Protocol):
    """Mutating capabilities of a 4x4 matrix."""

    def identity(self) -> Self: ...

    def mul(self, right: ReadableMatrix4, dest: MutableMatrix4 | None = None) -> MutableMatrix4: ...

    def invert(self, dest: MutableMatrix4 | None = None) -> MutableMatrix4: ...

    def transpose(self, dest: MutableMatrix4 | None = None) -> MutableMatrix4: ...
