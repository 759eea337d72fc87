"""
Accelerator capability for batch transforms.

The batch functions ask an :class:`Accelerator` whether the JIT kernels can
be used. :class:`NumbaAccelerator` compiles a tiny probe kernel the first
time it is asked and remembers the answer; :class:`NullAccelerator` always
declines so the NumPy path runs.
"""

from __future__ import annotations

import functools
import logging
from typing import Protocol, runtime_checkable

import numpy as np
from numba import njit
from numba.core.errors import NumbaError

logger = logging.getLogger(__name__)


@runtime_checkable
class Accelerator(Protocol):
    """Capability check for JIT-compiled batch kernels."""

    name: str

    def is_available(self) -> bool:
        """True if the batch kernels can be used."""
        ...


@njit(cache=True, nogil=True)
def _probe_kernel(values: np.ndarray) -> float:
    total = 0.0
    for i in range(values.shape[0]):
        total += values[i]
    return total


@functools.cache
def _numba_works() -> bool:
    try:
        _probe_kernel(np.ones(4, dtype=np.float64))
    except NumbaError as e:
        logger.warning("[Accel] Numba JIT unavailable, using NumPy batch path: %s", e)
        return False
    logger.debug("[Accel] Numba JIT probe compiled")
    return True


class NumbaAccelerator:
    """Numba JIT kernels, probed lazily on first use."""

    name = "numba"

    def is_available(self) -> bool:
        return _numba_works()

    def __repr__(self) -> str:
        return "NumbaAccelerator()"


class NullAccelerator:
    """Accelerator that is never available; forces the NumPy path."""

    name = "numpy"

    def is_available(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NullAccelerator()"


DEFAULT_ACCELERATOR: Accelerator = NumbaAccelerator()
