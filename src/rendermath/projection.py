"""
Projection builders and window-space mapping.

Every builder comes in two forms: ``set_*`` replaces the matrix with the
projection, the plain form post-multiplies it (``M := M * P``) and writes into
``dest`` (or the matrix itself). All builders take ``z_zero_to_one``: False
maps view depth to the OpenGL NDC range ``[-1, 1]``, True to the
Direct3D/Vulkan range ``[0, 1]``. The flag only changes the z row.

Viewports are ``[x, y, width, height]`` in window pixels.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from rendermath.base import Value, ieee_div
from rendermath.constants import INFINITE_PROJECTION_BIAS
from rendermath.matrix4 import Mat4, invert4, multiply4, unproject_point
from rendermath.types import Vector3Like, Viewport
from rendermath.validators import check_near_far, check_viewport

if TYPE_CHECKING:
    from rendermath.matrix4 import Matrix4

logger = logging.getLogger(__name__)


def _is_pos_inf(v: float) -> bool:
    return v > 0.0 and math.isinf(v)


def _post(m: Matrix4, b: Sequence[float], dest: Matrix4 | None) -> Matrix4:
    return m._dest(dest)._assign(multiply4(m._values(), b))


def _depth_terms(z_near: float, z_far: float, z_zero_to_one: bool) -> tuple[float, float]:
    """``(m22, m32)`` of a perspective projection, including the infinite cases."""
    check_near_far(z_near, z_far)
    if _is_pos_inf(z_far):
        logger.debug("Infinite far plane projection, z_near=%s", z_near)
        e = INFINITE_PROJECTION_BIAS
        return e - 1.0, (e - (1.0 if z_zero_to_one else 2.0)) * z_near
    if _is_pos_inf(z_near):
        logger.debug("Infinite near plane projection, z_far=%s", z_far)
        e = INFINITE_PROJECTION_BIAS
        return (0.0 if z_zero_to_one else 1.0) - e, ((1.0 if z_zero_to_one else 2.0) - e) * z_far
    inv = ieee_div(1.0, z_near - z_far)
    m22 = (z_far if z_zero_to_one else z_far + z_near) * inv
    m32 = (z_far if z_zero_to_one else z_far + z_far) * z_near * inv
    return m22, m32


# ============================================================================
# Matrix construction
# ============================================================================


def ortho_matrix(
    left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, z_zero_to_one: bool = False,
) -> Mat4:
    """Orthographic projection mapping the given box to the NDC cube."""
    inv_nf = ieee_div(1.0, z_near - z_far)
    return [
        ieee_div(2.0, right - left), 0.0, 0.0, 0.0,
        0.0, ieee_div(2.0, top - bottom), 0.0, 0.0,
        0.0, 0.0, (1.0 if z_zero_to_one else 2.0) * inv_nf, 0.0,
        ieee_div(right + left, left - right),
        ieee_div(top + bottom, bottom - top),
        (z_near if z_zero_to_one else z_far + z_near) * inv_nf,
        1.0,
    ]


def ortho_symmetric_matrix(
    width: float, height: float, z_near: float, z_far: float, z_zero_to_one: bool = False
) -> Mat4:
    """Orthographic projection of a box centered on the view axis."""
    inv_nf = ieee_div(1.0, z_near - z_far)
    return [
        ieee_div(2.0, width), 0.0, 0.0, 0.0,
        0.0, ieee_div(2.0, height), 0.0, 0.0,
        0.0, 0.0, (1.0 if z_zero_to_one else 2.0) * inv_nf, 0.0,
        0.0, 0.0, (z_near if z_zero_to_one else z_far + z_near) * inv_nf, 1.0,
    ]


def ortho_2d_matrix(left: float, right: float, bottom: float, top: float) -> Mat4:
    """Orthographic projection with near -1 and far +1, as used for 2D drawing."""
    return [
        ieee_div(2.0, right - left), 0.0, 0.0, 0.0,
        0.0, ieee_div(2.0, top - bottom), 0.0, 0.0,
        0.0, 0.0, -1.0, 0.0,
        ieee_div(right + left, left - right), ieee_div(top + bottom, bottom - top), 0.0, 1.0,
    ]


def perspective_matrix(
    fovy: float, aspect: float, z_near: float, z_far: float, z_zero_to_one: bool = False
) -> Mat4:
    """Symmetric perspective projection.

    :param fovy: Vertical field of view in radians
    :param aspect: Width over height
    :param z_near: Near plane distance, may be ``inf`` if ``z_far`` is finite
    :param z_far: Far plane distance, may be ``inf`` for an infinite far plane
    :raises ValueError: If both distances are infinite
    """
    m22, m32 = _depth_terms(z_near, z_far, z_zero_to_one)
    h = math.tan(fovy * 0.5)
    return [
        ieee_div(1.0, h * aspect), 0.0, 0.0, 0.0,
        0.0, ieee_div(1.0, h), 0.0, 0.0,
        0.0, 0.0, m22, -1.0,
        0.0, 0.0, m32, 0.0,
    ]


def frustum_matrix(
    left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, z_zero_to_one: bool = False,
) -> Mat4:
    """General (possibly off-axis) perspective projection.

    The edges are given on the near plane. ``z_far`` (or ``z_near``) may be
    ``inf`` as in :func:`perspective_matrix`.

    :raises ValueError: If both distances are infinite
    """
    m22, m32 = _depth_terms(z_near, z_far, z_zero_to_one)
    return [
        ieee_div(z_near + z_near, right - left), 0.0, 0.0, 0.0,
        0.0, ieee_div(z_near + z_near, top - bottom), 0.0, 0.0,
        ieee_div(right + left, right - left), ieee_div(top + bottom, top - bottom), m22, -1.0,
        0.0, 0.0, m32, 0.0,
    ]


# ============================================================================
# Matrix4 builders
# ============================================================================


def set_ortho(
    m: Matrix4, left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, *, z_zero_to_one: bool = False,
) -> Matrix4:
    return m._assign(ortho_matrix(left, right, bottom, top, z_near, z_far, z_zero_to_one))


def ortho(
    m: Matrix4, left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, *, z_zero_to_one: bool = False,
    dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply an orthographic projection.

    The matrix maps coordinates; it never clips or clamps them.
    """
    b = ortho_matrix(left, right, bottom, top, z_near, z_far, z_zero_to_one)
    return _post(m, b, dest)


def set_ortho_symmetric(
    m: Matrix4, width: float, height: float, z_near: float, z_far: float,
    *, z_zero_to_one: bool = False,
) -> Matrix4:
    return m._assign(ortho_symmetric_matrix(width, height, z_near, z_far, z_zero_to_one))


def ortho_symmetric(
    m: Matrix4, width: float, height: float, z_near: float, z_far: float,
    *, z_zero_to_one: bool = False, dest: Matrix4 | None = None,
) -> Matrix4:
    b = ortho_symmetric_matrix(width, height, z_near, z_far, z_zero_to_one)
    return _post(m, b, dest)


def set_ortho_2d(m: Matrix4, left: float, right: float, bottom: float, top: float) -> Matrix4:
    return m._assign(ortho_2d_matrix(left, right, bottom, top))


def ortho_2d(
    m: Matrix4, left: float, right: float, bottom: float, top: float,
    dest: Matrix4 | None = None,
) -> Matrix4:
    return _post(m, ortho_2d_matrix(left, right, bottom, top), dest)


def set_perspective(
    m: Matrix4, fovy: float, aspect: float, z_near: float, z_far: float,
    *, z_zero_to_one: bool = False,
) -> Matrix4:
    return m._assign(perspective_matrix(fovy, aspect, z_near, z_far, z_zero_to_one))


def perspective(
    m: Matrix4, fovy: float, aspect: float, z_near: float, z_far: float,
    *, z_zero_to_one: bool = False, dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply a symmetric perspective projection."""
    b = perspective_matrix(fovy, aspect, z_near, z_far, z_zero_to_one)
    return _post(m, b, dest)


def set_frustum(
    m: Matrix4, left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, *, z_zero_to_one: bool = False,
) -> Matrix4:
    return m._assign(frustum_matrix(left, right, bottom, top, z_near, z_far, z_zero_to_one))


def frustum(
    m: Matrix4, left: float, right: float, bottom: float, top: float,
    z_near: float, z_far: float, *, z_zero_to_one: bool = False,
    dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply a general perspective projection."""
    b = frustum_matrix(left, right, bottom, top, z_near, z_far, z_zero_to_one)
    return _post(m, b, dest)


def pick(
    m: Matrix4, x: float, y: float, width: float, height: float,
    viewport: Viewport, dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply a picking region.

    Restricts rendering to a ``width`` x ``height`` window region centered at
    ``(x, y)`` by scaling and translating in NDC.

    :param viewport: ``[x, y, width, height]`` of the full viewport
    :raises ValueError: If the viewport does not have 4 entries
    """
    vx, vy, vw, vh = check_viewport(viewport)
    sx = ieee_div(vw, width)
    sy = ieee_div(vh, height)
    tx = ieee_div(vw + 2.0 * (vx - x), width)
    ty = ieee_div(vh + 2.0 * (vy - y), height)
    b = [
        sx, 0.0, 0.0, 0.0,
        0.0, sy, 0.0, 0.0,
        0.0, 0.0, 1.0, 0.0,
        tx, ty, 0.0, 1.0,
    ]
    return _post(m, b, dest)


# ============================================================================
# Window-space mapping
# ============================================================================


def project(
    m: Matrix4, position: Vector3Like, viewport: Viewport, dest: Value | None = None
) -> Value:
    """Map an object-space position to window coordinates.

    Window depth is in ``[0, 1]`` for points between the near and far planes
    of an OpenGL-range projection.

    :param position: 3 components
    :param viewport: ``[x, y, width, height]``
    :returns: Vector3 ``(window_x, window_y, window_z)``
    """
    vx, vy, vw, vh = check_viewport(viewport)
    x, y, z = m._read(position, 3, "position")
    nx, ny, nz = unproject_point(m._values(), x, y, z)
    return m._dest_of("vector3", dest)._assign((
        (nx * 0.5 + 0.5) * vw + vx,
        (ny * 0.5 + 0.5) * vh + vy,
        (1.0 + nz) * 0.5,
    ))


def _window_to_ndc(
    viewport: tuple[float, float, float, float], window_x: float, window_y: float
) -> tuple[float, float]:
    vx, vy, vw, vh = viewport
    return ieee_div(window_x - vx, vw) * 2.0 - 1.0, ieee_div(window_y - vy, vh) * 2.0 - 1.0


def unproject(
    m: Matrix4, window: Vector3Like, viewport: Viewport, dest: Value | None = None
) -> Value:
    """Inverse of :func:`project`: window coordinates back to object space.

    ``m`` is the (non-inverted) model-view-projection matrix; it is inverted
    internally.

    :param window: ``(window_x, window_y, window_z)``
    :returns: Vector3 in object space
    """
    vp = check_viewport(viewport)
    wx, wy, wz = m._read(window, 3, "window")
    ndc_x, ndc_y = _window_to_ndc(vp, wx, wy)
    inv = invert4(m._values())
    return m._dest_of("vector3", dest)._assign(unproject_point(inv, ndc_x, ndc_y, wz + wz - 1.0))


def unproject_ray(
    m: Matrix4, window_x: float, window_y: float, viewport: Viewport,
    origin_dest: Value | None = None, dir_dest: Value | None = None,
) -> tuple[Value, Value]:
    """Ray through a window position, from the near plane towards the far plane.

    :returns: ``(origin, direction)`` as Vector3s; the direction spans from
        the near plane point to the far plane point and is not normalized
    """
    vp = check_viewport(viewport)
    origin = m._dest_of("vector3", origin_dest)
    direction = m._dest_of("vector3", dir_dest)
    ndc_x, ndc_y = _window_to_ndc(vp, window_x, window_y)
    inv = invert4(m._values())
    near = unproject_point(inv, ndc_x, ndc_y, -1.0)
    far = unproject_point(inv, ndc_x, ndc_y, 1.0)
    origin._assign(near)
    direction._assign((far[0] - near[0], far[1] - near[1], far[2] - near[2]))
    return origin, direction
