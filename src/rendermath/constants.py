"""Constants and selector enums shared across rendermath."""

from __future__ import annotations

import math
from enum import IntEnum

# Bias keeping infinite projection matrices well conditioned.
# See: "Infinite Projection Matrix" (http://www.terathon.com/gdc07_lengyel.pdf)
INFINITE_PROJECTION_BIAS = 1e-6

PI = math.pi
PI_TIMES_2 = 2.0 * math.pi
PI_OVER_2 = 0.5 * math.pi

# Matrix dimensions
MATRIX3_SIZE = 3
MATRIX4_SIZE = 4


class FrustumPlane(IntEnum):
    """Frustum plane selectors for ``frustum_plane``.

    ``N``/``P`` name the sign of the clip-space axis the plane bounds, so
    ``NX`` is the left plane (x = -1) and ``PZ`` the far plane (z = +1).
    """

    NX = 0
    PX = 1
    NY = 2
    PY = 3
    NZ = 4
    PZ = 5


class FrustumCorner(IntEnum):
    """Frustum corner selectors for ``frustum_corner``.

    Each name lists the clip-space signs of the corner, e.g. ``NXNYNZ`` is
    the left-bottom-near corner.
    """

    NXNYNZ = 0
    PXNYNZ = 1
    PXPYNZ = 2
    NXPYNZ = 3
    PXNYPZ = 4
    NXNYPZ = 5
    NXPYPZ = 6
    PXPYPZ = 7
