"""Shared plumbing for the fixed-size value types.

Every value type (vectors, quaternion, axis-angle, matrices) stores its
scalars in a flat NumPy array whose dtype comes from the class'
:class:`~rendermath.config.Precision`. The generic class (``Vector3``,
``Matrix4``, ...) holds the implementation; the ``f``/``d`` variants only
bind a precision and register themselves so that methods can allocate
results of matching precision.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from typing import Any, ClassVar, Self

import numpy as np

from rendermath.config import DOUBLE, FLOAT, Precision
from rendermath.validators import check_index


class Value:
    """Base class of all rendermath value types."""

    __slots__ = ("_data",)

    kind: ClassVar[str]
    size: ClassVar[int]
    precision: ClassVar[Precision]
    _variants: ClassVar[dict[tuple[str, str], type[Value]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "precision" in cls.__dict__:
            Value._variants[(cls.kind, cls.precision.name)] = cls

    def __init__(self) -> None:
        if "precision" not in _class_attrs(type(self)):
            raise TypeError(
                f"{type(self).__name__} is generic; instantiate the "
                f"{type(self).__name__}f or {type(self).__name__}d variant"
            )
        self._data = np.zeros(self.size, dtype=self.precision.dtype)

    # ------------------------------------------------------------------
    # Variants and precision
    # ------------------------------------------------------------------

    @classmethod
    def variant(cls, kind: str, precision: Precision) -> type[Value]:
        """Return the concrete class for a value kind and precision.

        :param kind: Value kind, e.g. "vector3" or "matrix4"
        :param precision: Precision of the requested class
        :returns: Registered concrete class
        """
        return Value._variants[(kind, precision.name)]

    def _new(self, kind: str) -> Any:
        """Allocate a fresh value of another kind with this precision."""
        return Value.variant(kind, self.precision)()

    def _check_precision(self, other: Value) -> None:
        if other.precision is not self.precision:
            raise TypeError(
                f"Cannot mix {self.precision.name} and {other.precision.name} values "
                f"({type(self).__name__} with {type(other).__name__}); "
                "convert explicitly with to_float() or to_double()"
            )

    def _dest(self, dest: Value | None) -> Self:
        """Resolve an optional destination of the same kind."""
        if dest is None:
            return self
        if dest.kind != self.kind:
            raise TypeError(f"dest must be a {self.kind}, got {type(dest).__name__}")
        self._check_precision(dest)
        return dest

    def _dest_of(self, kind: str, dest: Value | None) -> Any:
        """Resolve an optional destination of another kind, allocating if needed."""
        if dest is None:
            return self._new(kind)
        if dest.kind != kind:
            raise TypeError(f"dest must be a {kind}, got {type(dest).__name__}")
        self._check_precision(dest)
        return dest

    def _flatten(self, components: Sequence[Any]) -> list[float]:
        """Concatenate the scalars of library values, sequences and numbers."""
        values: list[float] = []
        for component in components:
            if isinstance(component, Value):
                self._check_precision(component)
                values.extend(component._data.tolist())
            else:
                values.extend(np.asarray(component, dtype=np.float64).reshape(-1).tolist())
        return values

    def _read(self, value: Any, n: int, name: str = "value") -> tuple[float, ...]:
        """Read n scalars from a library value or a plain sequence.

        Library values of another precision are rejected; plain numbers and
        NumPy arrays are taken as they are.
        """
        if isinstance(value, Value):
            self._check_precision(value)
            if value.size != n:
                raise ValueError(f"{name} must have {n} components, got {type(value).__name__}")
            return tuple(value._data.tolist())
        values = tuple(float(v) for v in np.asarray(value, dtype=np.float64).reshape(-1))
        if len(values) != n:
            raise ValueError(f"{name} must have {n} components, got {len(values)}")
        return values

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    def _values(self) -> list[float]:
        return self._data.tolist()

    def _assign(self, values: Sequence[float]) -> Self:
        self._data[:] = values
        return self

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the flat storage (column-major for matrices)."""
        return self._data.copy()

    def to_list(self) -> list[float]:
        """Return the flat storage as Python floats (column-major for matrices)."""
        return self._data.tolist()

    def set_from_array(self, values: Sequence[float] | np.ndarray) -> Self:
        """Set all scalars from a flat sequence in storage order.

        :param values: ``size`` scalars (column-major for matrices)
        :returns: self
        """
        return self._assign(self._read(values, self.size, "values"))

    @classmethod
    def from_numpy(cls, values: Sequence[float] | np.ndarray) -> Self:
        """Build a value from a flat array in storage order.

        :param values: ``size`` scalars (column-major for matrices)
        :returns: New value of this class
        """
        return cls().set_from_array(values)

    # ------------------------------------------------------------------
    # Precision conversion
    # ------------------------------------------------------------------

    def to_precision(self, precision: Precision) -> Any:
        """Return a copy of this value converted to the given precision."""
        out = Value.variant(self.kind, precision)()
        out._data[:] = self._data
        return out

    def to_float(self) -> Any:
        """Return a single-precision copy (explicit narrowing)."""
        return self.to_precision(FLOAT)

    def to_double(self) -> Any:
        """Return a double-precision copy (explicit widening)."""
        return self.to_precision(DOUBLE)

    # ------------------------------------------------------------------
    # Python protocol
    # ------------------------------------------------------------------

    def copy(self) -> Self:
        """Return an independent copy."""
        out = type(self).__new__(type(self))
        out._data = self._data.copy()
        return out

    def __copy__(self) -> Self:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Self:
        return self.copy()

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __getitem__(self, index: int) -> float:
        return float(self._data[check_index(index, self.size)])

    def __setitem__(self, index: int, value: float) -> None:
        self._data[check_index(index, self.size)] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return (
            other.kind == self.kind
            and other.precision is self.precision
            and bool(np.array_equal(self._data, other._data))
        )

    __hash__ = None  # mutable

    def equals(self, other: Value, delta: float | None = None) -> bool:
        """Element-wise comparison within a tolerance.

        :param other: Value of the same kind and precision
        :param delta: Absolute tolerance, defaults to the precision epsilon
        :returns: True if every element differs by at most delta
        """
        self._check_precision(other)
        if other.kind != self.kind:
            return False
        delta = self.precision.epsilon if delta is None else delta
        return bool(np.all(np.abs(self._data - other._data) <= delta))

    def __repr__(self) -> str:
        body = ", ".join(repr(v) for v in self._data.tolist())
        return f"{type(self).__name__}({body})"


def _class_attrs(cls: type) -> set[str]:
    names: set[str] = set()
    for klass in cls.__mro__:
        if klass is Value:
            break
        names.update(klass.__dict__)
    return names


def component_property(index: int, doc: str | None = None) -> property:
    """Expose one flat storage slot as a float attribute."""

    def fget(self: Value) -> float:
        return float(self._data[index])

    def fset(self: Value, value: float) -> None:
        self._data[index] = value

    return property(fget, fset, doc=doc)


def ieee_div(a: float, b: float) -> float:
    """Divide with IEEE semantics: x/0 gives +-inf and 0/0 gives NaN."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def ieee_sqrt(x: float) -> float:
    """Square root that returns NaN for negative input instead of raising."""
    return math.sqrt(x) if x >= 0.0 else math.nan


def safe_acos(x: float) -> float:
    """Arc cosine with the argument clamped to [-1, 1]; NaN propagates."""
    if math.isnan(x):
        return math.nan
    return math.acos(max(-1.0, min(1.0, x)))


def multiply_square(a: Sequence[float], b: Sequence[float], n: int) -> list[float]:
    """Column-major product ``a * b`` of two n x n matrices given as flat sequences."""
    return [
        sum(a[k * n + r] * b[c * n + k] for k in range(n))
        for c in range(n)
        for r in range(n)
    ]


class SquareMatrix(Value):
    """Operations shared by Matrix3 and Matrix4.

    Storage is column-major: element (column c, row r) lives at flat index
    ``c * order + r``.
    """

    __slots__ = ()

    order: ClassVar[int]

    def __init__(self, *components: Any) -> None:
        super().__init__()
        if not components:
            self.identity()
            return
        self.set(*components)

    def identity(self) -> Self:
        n = self.order
        self._data[:] = 0.0
        self._data[:: n + 1] = 1.0
        return self

    def zero(self) -> Self:
        self._data[:] = 0.0
        return self

    def _vector_kind(self) -> str:
        return f"vector{self.order}"

    def _mul_values(self, right: Any, name: str = "right") -> list[float]:
        return multiply_square(self._values(), self._read(right, self.size, name), self.order)

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def get(self, column: int, row: int) -> float:
        """Element at (column, row).

        :raises IndexError: If column or row is out of range
        """
        n = self.order
        return float(self._data[check_index(column, n, "column") * n + check_index(row, n, "row")])

    def set_element(self, column: int, row: int, value: float) -> Self:
        """Set the element at (column, row).

        :raises IndexError: If column or row is out of range
        """
        n = self.order
        self._data[check_index(column, n, "column") * n + check_index(row, n, "row")] = value
        return self

    def get_row(self, row: int, dest: Value | None = None) -> Any:
        n = self.order
        check_index(row, n, "row")
        values = self._values()
        return self._dest_of(self._vector_kind(), dest)._assign(
            [values[c * n + row] for c in range(n)]
        )

    def get_column(self, column: int, dest: Value | None = None) -> Any:
        n = self.order
        check_index(column, n, "column")
        return self._dest_of(self._vector_kind(), dest)._assign(
            self._values()[column * n:(column + 1) * n]
        )

    def set_row(self, row: int, values: Any) -> Self:
        n = self.order
        check_index(row, n, "row")
        components = self._read(values, n, "values")
        for c in range(n):
            self._data[c * n + row] = components[c]
        return self

    def set_column(self, column: int, values: Any) -> Self:
        n = self.order
        check_index(column, n, "column")
        self._data[column * n:(column + 1) * n] = self._read(values, n, "values")
        return self

    def get_transposed(self) -> list[float]:
        """Elements in row-major order, for APIs that expect it."""
        n = self.order
        values = self._values()
        return [values[c * n + r] for r in range(n) for c in range(n)]

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    def mul(self, right: Any, dest: Value | None = None) -> Any:
        """``dest = self * right``: ``right`` is applied first when transforming."""
        return self._dest(dest)._assign(self._mul_values(right))

    def mul_local(self, left: Any, dest: Value | None = None) -> Any:
        """``dest = left * self``: ``left`` is applied last when transforming."""
        values = multiply_square(self._read(left, self.size, "left"), self._values(), self.order)
        return self._dest(dest)._assign(values)

    def transpose(self, dest: Value | None = None) -> Any:
        return self._dest(dest)._assign(self.get_transposed())

    def lerp(self, other: Any, t: float, dest: Value | None = None) -> Any:
        """Element-wise linear interpolation ``self + (other - self) * t``."""
        b = self._read(other, self.size, "other")
        return self._dest(dest)._assign([x + (y - x) * t for x, y in zip(self._values(), b)])

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, Value) and other.kind == self._vector_kind():
            return self.transform(other, other.copy())
        if isinstance(other, Value) and other.kind == self.kind:
            return self.mul(other, self.copy())
        return NotImplemented

    def __imatmul__(self, other: Any) -> Self:
        return self.mul(other)
