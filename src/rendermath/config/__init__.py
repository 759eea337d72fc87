"""Configuration for rendermath.

Access the process-wide snapshot via ``CONFIG`` and the precision
definitions via ``FLOAT`` / ``DOUBLE``.
"""

from rendermath.config.config import CONFIG, RenderMathConfig
from rendermath.config.precision import DOUBLE, FLOAT, Precision

__all__ = [
    "CONFIG",
    "RenderMathConfig",
    "Precision",
    "FLOAT",
    "DOUBLE",
]
