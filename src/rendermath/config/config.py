"""Unified rendermath configuration.

This module provides a top-level configuration dataclass holding the
precision definitions and the runtime switches of the kernel. The
snapshot is built once at import time from environment variables and is
read-only afterwards.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from rendermath.config.precision import DOUBLE, FLOAT, Precision

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class RenderMathConfig:
    """Top-level configuration.

    Attributes:
        single: Single-precision definition
        double: Double-precision definition
        debug_assertions: Verify the preconditions of fast paths such as
            ``invert_affine`` and raise ``AssertionError`` when they fail
        assumption_tolerance: Absolute tolerance used by those checks
        batch_min_size: Smallest batch routed to the JIT kernels; smaller
            batches use the NumPy path
    """

    single: Precision = FLOAT
    double: Precision = DOUBLE
    debug_assertions: bool = False
    assumption_tolerance: float = 1e-4
    batch_min_size: int = 1024

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RenderMathConfig:
        """Build a configuration from ``RENDERMATH_*`` environment variables.

        :param environ: Mapping to read instead of ``os.environ``
        :returns: New configuration snapshot
        :raises ValueError: If a numeric variable cannot be parsed
        """
        environ = os.environ if environ is None else environ

        debug = environ.get("RENDERMATH_DEBUG_ASSERTIONS", "").strip().lower() in _TRUTHY

        raw_min = environ.get("RENDERMATH_BATCH_MIN_SIZE")
        batch_min_size = cls.batch_min_size
        if raw_min is not None:
            try:
                batch_min_size = int(raw_min)
            except ValueError as e:
                raise ValueError(
                    f"RENDERMATH_BATCH_MIN_SIZE must be an integer, got {raw_min!r}"
                ) from e
            if batch_min_size < 0:
                raise ValueError(f"RENDERMATH_BATCH_MIN_SIZE must be >= 0, got {batch_min_size}")

        config = cls(debug_assertions=debug, batch_min_size=batch_min_size)
        logger.debug("[config] Loaded %s", config)
        return config

    def precision(self, name: str) -> Precision:
        """Look up a precision by name.

        :param name: "float" or "double"
        :returns: Matching precision definition
        :raises ValueError: If the name is unknown
        """
        if name == self.single.name:
            return self.single
        if name == self.double.name:
            return self.double
        raise ValueError(f"Unknown precision: {name!r}")


# Main singleton instance
CONFIG = RenderMathConfig.from_env()
