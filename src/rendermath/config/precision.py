"""Scalar precision configuration.

Every value type in rendermath has exactly one implementation that is
parameterized over a :class:`Precision`. The single-precision variants
(``Vector3f``, ``Matrix4f``, ...) store ``numpy.float32`` and the
double-precision variants (``Vector3d``, ``Matrix4d``, ...) store
``numpy.float64``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Precision:
    """Floating-point width used for storage of a value type.

    Attributes:
        name: Short name ("float" or "double")
        dtype: NumPy storage dtype
        epsilon: Default tolerance for approximate comparisons
    """

    name: str
    dtype: type[np.floating]
    epsilon: float

    @property
    def suffix(self) -> str:
        """Class-name suffix used by the concrete variants ("f" or "d")."""
        return self.name[0]

    def cast(self, value: float) -> float:
        """Round a Python float to this precision.

        :param value: Value to round
        :returns: Value after a round trip through the storage dtype
        """
        return float(self.dtype(value))

    def __repr__(self) -> str:
        return f"Precision({self.name}, {np.dtype(self.dtype).name}, eps={self.epsilon})"


FLOAT = Precision(name="float", dtype=np.float32, epsilon=1e-5)
DOUBLE = Precision(name="double", dtype=np.float64, epsilon=1e-12)
