"""
Fixed-size vectors.

``Vector2``, ``Vector3`` and ``Vector4`` hold their components in a flat NumPy
array of the class' precision. Every mutating operation writes into ``dest``
when given and into ``self`` otherwise, and returns the destination, so calls
chain fluently::

    v = Vector3f(1, 2, 3)
    v.add((1, 0, 0)).normalize()       # in place
    w = v.cross(Vector3f(0, 1, 0), Vector3f())  # into a new vector

Plain numbers and sequences are accepted wherever a vector is read. Library
values of the other precision are rejected with ``TypeError``.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import TYPE_CHECKING, Any, Self

from rendermath.base import Value, component_property, ieee_div, safe_acos
from rendermath.config import DOUBLE, FLOAT

if TYPE_CHECKING:
    from rendermath.quaternion import Quaternion


class _Vector(Value):
    """Component-wise operations shared by all vector sizes."""

    __slots__ = ()

    def __init__(self, *components: Any) -> None:
        super().__init__()
        if not components:
            return
        values = self._flatten(components)
        if len(values) == 1:
            values = values * self.size
        if len(values) != self.size:
            raise ValueError(
                f"{type(self).__name__} takes {self.size} components, got {len(values)}"
            )
        self._assign(values)

    def _operand(self, v: Any, name: str = "v") -> tuple[float, ...]:
        if isinstance(v, Real):
            return (float(v),) * self.size
        return self._read(v, self.size, name)

    def set(self, *components: Any) -> Self:
        """Set all components.

        Accepts ``size`` scalars, a single scalar (broadcast), another vector
        of the same size or any flat sequence.
        """
        values = self._flatten(components)
        if len(values) == 1:
            values = values * self.size
        return self._assign(self._read(values, self.size, "components"))

    def zero(self) -> Self:
        """Set all components to zero."""
        self._data[:] = 0.0
        return self

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, v: Any, dest: _Vector | None = None) -> Any:
        """Component-wise ``self + v``."""
        b = self._operand(v)
        return self._dest(dest)._assign([x + y for x, y in zip(self._values(), b)])

    def sub(self, v: Any, dest: _Vector | None = None) -> Any:
        """Component-wise ``self - v``."""
        b = self._operand(v)
        return self._dest(dest)._assign([x - y for x, y in zip(self._values(), b)])

    def mul(self, v: Any, dest: _Vector | None = None) -> Any:
        """Component-wise ``self * v``; ``v`` may be a scalar."""
        b = self._operand(v)
        return self._dest(dest)._assign([x * y for x, y in zip(self._values(), b)])

    def div(self, v: Any, dest: _Vector | None = None) -> Any:
        """Component-wise ``self / v``; ``v`` may be a scalar.

        Division by zero yields inf/NaN rather than raising.
        """
        b = self._operand(v)
        return self._dest(dest)._assign([ieee_div(x, y) for x, y in zip(self._values(), b)])

    def fma(self, a: Any, b: Any, dest: _Vector | None = None) -> Any:
        """``self + a * b`` component-wise."""
        va = self._operand(a, "a")
        vb = self._operand(b, "b")
        return self._dest(dest)._assign(
            [x + p * q for x, p, q in zip(self._values(), va, vb)]
        )

    def negate(self, dest: _Vector | None = None) -> Any:
        return self._dest(dest)._assign([-x for x in self._values()])

    def absolute(self, dest: _Vector | None = None) -> Any:
        return self._dest(dest)._assign([abs(x) for x in self._values()])

    def min(self, v: Any, dest: _Vector | None = None) -> Any:
        b = self._operand(v)
        return self._dest(dest)._assign([min(x, y) for x, y in zip(self._values(), b)])

    def max(self, v: Any, dest: _Vector | None = None) -> Any:
        b = self._operand(v)
        return self._dest(dest)._assign([max(x, y) for x, y in zip(self._values(), b)])

    def lerp(self, other: Any, t: float, dest: _Vector | None = None) -> Any:
        """Linear interpolation ``self + (other - self) * t``."""
        b = self._read(other, self.size, "other")
        return self._dest(dest)._assign([x + (y - x) * t for x, y in zip(self._values(), b)])

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def dot(self, v: Any) -> float:
        b = self._read(v, self.size, "v")
        return sum(x * y for x, y in zip(self._values(), b))

    def length_squared(self) -> float:
        return sum(x * x for x in self._values())

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def distance_squared(self, v: Any) -> float:
        b = self._read(v, self.size, "v")
        return sum((x - y) * (x - y) for x, y in zip(self._values(), b))

    def distance(self, v: Any) -> float:
        return math.sqrt(self.distance_squared(v))

    def normalize(self, dest: _Vector | None = None) -> Any:
        """Scale to unit length.

        A zero-length vector produces NaN components.
        """
        values = self._values()
        inv = ieee_div(1.0, math.sqrt(sum(x * x for x in values)))
        return self._dest(dest)._assign([x * inv for x in values])

    def is_finite(self) -> bool:
        return all(math.isfinite(x) for x in self._values())

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __add__(self, other: Any) -> Any:
        return self.add(other, self.copy())

    def __sub__(self, other: Any) -> Any:
        return self.sub(other, self.copy())

    def __mul__(self, other: Any) -> Any:
        return self.mul(other, self.copy())

    def __rmul__(self, other: Any) -> Any:
        return self.mul(other, self.copy())

    def __truediv__(self, other: Any) -> Any:
        return self.div(other, self.copy())

    def __iadd__(self, other: Any) -> Self:
        return self.add(other)

    def __isub__(self, other: Any) -> Self:
        return self.sub(other)

    def __imul__(self, other: Any) -> Self:
        return self.mul(other)

    def __itruediv__(self, other: Any) -> Self:
        return self.div(other)

    def __neg__(self) -> Any:
        return self.negate(self.copy())


# ============================================================================
# Vector2
# ============================================================================


class Vector2(_Vector):
    """Two-component vector."""

    kind = "vector2"
    size = 2
    __slots__ = ()

    x = component_property(0)
    y = component_property(1)

    def perpendicular(self, dest: Vector2 | None = None) -> Vector2:
        """Rotate by 90 degrees clockwise: ``(x, y) -> (y, -x)``."""
        x, y = self._values()
        return self._dest(dest)._assign((y, -x))

    def angle(self, v: Any) -> float:
        """Signed angle in radians from ``self`` to ``v``."""
        x1, y1 = self._values()
        x2, y2 = self._read(v, 2, "v")
        return math.atan2(x1 * y2 - y1 * x2, x1 * x2 + y1 * y2)


class Vector2f(Vector2):
    precision = FLOAT
    __slots__ = ()


class Vector2d(Vector2):
    precision = DOUBLE
    __slots__ = ()


# ============================================================================
# Vector3
# ============================================================================


class Vector3(_Vector):
    """Three-component vector (position, direction or scale)."""

    kind = "vector3"
    size = 3
    __slots__ = ()

    x = component_property(0)
    y = component_property(1)
    z = component_property(2)

    def cross(self, v: Any, dest: Vector3 | None = None) -> Vector3:
        """Right-handed cross product ``self x v``."""
        x1, y1, z1 = self._values()
        x2, y2, z2 = self._read(v, 3, "v")
        return self._dest(dest)._assign(
            (y1 * z2 - z1 * y2, z1 * x2 - x1 * z2, x1 * y2 - y1 * x2)
        )

    def angle_cos(self, v: Any) -> float:
        """Cosine of the angle between ``self`` and ``v``."""
        x1, y1, z1 = self._values()
        x2, y2, z2 = self._read(v, 3, "v")
        length1_squared = x1 * x1 + y1 * y1 + z1 * z1
        length2_squared = x2 * x2 + y2 * y2 + z2 * z2
        dot = x1 * x2 + y1 * y2 + z1 * z2
        return ieee_div(dot, math.sqrt(length1_squared * length2_squared))

    def angle(self, v: Any) -> float:
        """Unsigned angle in radians between ``self`` and ``v``."""
        return safe_acos(self.angle_cos(v))

    def rotate(self, q: Quaternion, dest: Vector3 | None = None) -> Vector3:
        """Rotate by the (unit) quaternion ``q``."""
        return q.transform(self, self._dest(dest))

    def reflect(self, normal: Any, dest: Vector3 | None = None) -> Vector3:
        """Reflect about the plane with the given unit normal."""
        x, y, z = self._values()
        nx, ny, nz = self._read(normal, 3, "normal")
        d = 2.0 * (x * nx + y * ny + z * nz)
        return self._dest(dest)._assign((x - d * nx, y - d * ny, z - d * nz))


class Vector3f(Vector3):
    precision = FLOAT
    __slots__ = ()


class Vector3d(Vector3):
    precision = DOUBLE
    __slots__ = ()


# ============================================================================
# Vector4
# ============================================================================


class Vector4(_Vector):
    """Four-component vector (homogeneous point, plane equation or light)."""

    kind = "vector4"
    size = 4
    __slots__ = ()

    x = component_property(0)
    y = component_property(1)
    z = component_property(2)
    w = component_property(3)

    def normalize3(self, dest: Vector4 | None = None) -> Vector4:
        """Divide all four components by the length of ``(x, y, z)``.

        Used to normalize plane equations so that ``w`` becomes the signed
        distance of the plane from the origin.
        """
        x, y, z, w = self._values()
        inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z))
        return self._dest(dest)._assign((x * inv, y * inv, z * inv, w * inv))

    def dot3(self, v: Any) -> float:
        """Dot product of the ``(x, y, z)`` parts."""
        x1, y1, z1, _ = self._values()
        values = self._flatten((v,))
        if len(values) not in (3, 4):
            raise ValueError(f"v must have 3 or 4 components, got {len(values)}")
        x2, y2, z2 = values[:3]
        return x1 * x2 + y1 * y2 + z1 * z2

    def div_w(self, dest: Vector4 | None = None) -> Vector4:
        """Perspective divide: divide ``(x, y, z)`` by ``w`` and set ``w`` to 1."""
        x, y, z, w = self._values()
        inv = ieee_div(1.0, w)
        return self._dest(dest)._assign((x * inv, y * inv, z * inv, 1.0))

    def distance_to_plane(self, point: Any) -> float:
        """Signed distance of a point from this plane equation ``(a, b, c, d)``.

        Positive distances lie on the side the normal points to.
        """
        a, b, c, d = self._values()
        px, py, pz = self._read(point, 3, "point")
        return a * px + b * py + c * pz + d

    def xyz(self, dest: Vector3 | None = None) -> Vector3:
        """Copy ``(x, y, z)`` into a Vector3 of the same precision."""
        x, y, z, _ = self._values()
        return self._dest_of("vector3", dest)._assign((x, y, z))


class Vector4f(Vector4):
    precision = FLOAT
    __slots__ = ()


class Vector4d(Vector4):
    precision = DOUBLE
    __slots__ = ()
