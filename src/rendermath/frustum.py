"""
Frustum analysis.

Plane, corner and ray extraction and the culling tests work on a combined
projection-view matrix (Gribb/Hartmann plane extraction). ``frustum_aabb``,
``projected_grid_range`` and ``ortho_crop`` instead expect the *inverse* of
that matrix and unproject the eight corners of the NDC cube. The
``perspective_*`` recovery functions assume a symmetric OpenGL-range
perspective matrix.

None of these functions mutate the input matrix; results go to ``dest`` or a
newly allocated value.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from rendermath.base import Value, ieee_div, safe_acos
from rendermath.constants import FrustumCorner, FrustumPlane
from rendermath.matrix4 import unproject_point
from rendermath.projection import ortho_matrix
from rendermath.types import Vector3Like
from rendermath.validators import check_corner, check_plane

if TYPE_CHECKING:
    from rendermath.matrix4 import Matrix4

logger = logging.getLogger(__name__)

type Plane = tuple[float, float, float, float]


def _row(m: Sequence[float], i: int) -> Plane:
    return m[i], m[4 + i], m[8 + i], m[12 + i]


def _plane_of(m: Sequence[float], plane: FrustumPlane) -> Plane:
    """Unnormalized plane ``row3 +- row(axis)``; N planes add, P planes subtract."""
    axis, positive = divmod(int(plane), 2)
    w = _row(m, 3)
    r = _row(m, axis)
    sign = -1.0 if positive else 1.0
    return w[0] + sign * r[0], w[1] + sign * r[1], w[2] + sign * r[2], w[3] + sign * r[3]


def _corner_planes(corner: FrustumCorner) -> tuple[FrustumPlane, FrustumPlane, FrustumPlane]:
    """X, Y and Z planes meeting at a corner, read off the selector name."""
    name = corner.name
    return (
        FrustumPlane[name[0:2]],
        FrustumPlane[name[2:4]],
        FrustumPlane[name[4:6]],
    )


def intersect_planes(p1: Plane, p2: Plane, p3: Plane) -> tuple[float, float, float]:
    """Point common to three planes ``n . x + d = 0`` by Cramer's rule.

    Parallel planes divide by zero and yield inf/NaN components.
    """
    n1x, n1y, n1z, d1 = p1
    n2x, n2y, n2z, d2 = p2
    n3x, n3y, n3z, d3 = p3
    c23x, c23y, c23z = n2y * n3z - n2z * n3y, n2z * n3x - n2x * n3z, n2x * n3y - n2y * n3x
    c31x, c31y, c31z = n3y * n1z - n3z * n1y, n3z * n1x - n3x * n1z, n3x * n1y - n3y * n1x
    c12x, c12y, c12z = n1y * n2z - n1z * n2y, n1z * n2x - n1x * n2z, n1x * n2y - n1y * n2x
    inv_dot = ieee_div(1.0, n1x * c23x + n1y * c23y + n1z * c23z)
    return (
        (-c23x * d1 - c31x * d2 - c12x * d3) * inv_dot,
        (-c23y * d1 - c31y * d2 - c12y * d3) * inv_dot,
        (-c23z * d1 - c31z * d2 - c12z * d3) * inv_dot,
    )


def _ndc_corners() -> Iterator[tuple[float, float, float]]:
    """The 8 corners of the NDC cube; bit 0 of the index is x, bit 1 y, bit 2 z."""
    for t in range(8):
        yield (
            float(((t & 1) << 1) - 1),
            float((((t >> 1) & 1) << 1) - 1),
            float((((t >> 2) & 1) << 1) - 1),
        )


def _ndc_edges() -> Iterator[tuple[tuple[float, float, float], tuple[float, float, float]]]:
    """The 12 edges of the NDC cube as (start, end) pairs, 4 per axis."""
    for axis in range(3):
        for t in range(4):
            a = float(((t & 1) << 1) - 1)
            b = float((((t >> 1) & 1) << 1) - 1)
            if axis == 0:
                yield (-1.0, a, b), (1.0, a, b)
            elif axis == 1:
                yield (a, -1.0, b), (a, 1.0, b)
            else:
                yield (a, b, -1.0), (a, b, 1.0)


# ============================================================================
# Planes, corners and rays
# ============================================================================


def frustum_plane(m: Matrix4, plane: int, dest: Value | None = None) -> Value:
    """Plane equation of one frustum side, normalized so ``(a, b, c)`` has unit length.

    Normals point into the frustum, so points inside have a positive distance.

    :param plane: :class:`~rendermath.constants.FrustumPlane` selector
    :param dest: Destination Vector4
    :returns: Vector4 ``(a, b, c, d)``
    :raises ValueError: If the selector is unknown
    """
    selector = check_plane(plane)
    return m._dest_of("vector4", dest)._assign(_plane_of(m._values(), selector)).normalize3()


def frustum_corner(m: Matrix4, corner: int, dest: Value | None = None) -> Value:
    """World-space position of a frustum corner.

    :param corner: :class:`~rendermath.constants.FrustumCorner` selector
    :param dest: Destination Vector3
    :raises ValueError: If the selector is unknown
    """
    selector = check_corner(corner)
    values = m._values()
    planes = [_plane_of(values, p) for p in _corner_planes(selector)]
    return m._dest_of("vector3", dest)._assign(intersect_planes(*planes))


def perspective_origin(m: Matrix4, dest: Value | None = None) -> Value:
    """Camera position of a perspective projection-view matrix.

    Intersects the left, right and top planes, which all pass through the eye.
    """
    values = m._values()
    point = intersect_planes(
        _plane_of(values, FrustumPlane.NX),
        _plane_of(values, FrustumPlane.PX),
        _plane_of(values, FrustumPlane.PY),
    )
    return m._dest_of("vector3", dest)._assign(point)


def frustum_ray_dir(m: Matrix4, x: float, y: float, dest: Value | None = None) -> Value:
    """Normalized direction of the ray through the frustum at ``(x, y)``.

    ``(0, 0)`` is the left-bottom edge and ``(1, 1)`` the right-top edge; the
    four corner rays are interpolated bilinearly.

    :param dest: Destination Vector3
    """
    (m00, m01, _, m03, m10, m11, _, m13,
     m20, m21, _, m23) = m._values()[:12]
    a, b, c = m10 * m23, m13 * m21, m10 * m21
    d, e, f = m11 * m23, m13 * m20, m11 * m20
    g, h, i = m03 * m20, m01 * m23, m01 * m20
    j, k, l = m03 * m21, m00 * m23, m00 * m21  # noqa: E741
    mm, n, o = m00 * m13, m03 * m11, m00 * m11
    p, q, r = m01 * m13, m03 * m10, m01 * m10
    # Left edge (x = 0) and right edge (x = 1), each interpolated along y
    y0 = 1.0 - y
    left = (
        (d + e + f - a - b - c) * y0 + (a - b - c + d - e + f) * y,
        (j + k + l - g - h - i) * y0 + (g - h - i + j - k + l) * y,
        (p + q + r - mm - n - o) * y0 + (mm - n - o + p - q + r) * y,
    )
    right = (
        (b - c - d + e + f - a) * y0 + (a + b - c - d - e + f) * y,
        (h - i - j + k + l - g) * y0 + (g + h - i - j - k + l) * y,
        (n - o - p + q + r - mm) * y0 + (mm + n - o - p - q + r) * y,
    )
    x0 = 1.0 - x
    direction = [lo * x0 + hi * x for lo, hi in zip(left, right)]
    return m._dest_of("vector3", dest)._assign(direction).normalize()


# ============================================================================
# Culling
# ============================================================================


def test_point(m: Matrix4, x: float, y: float, z: float) -> bool:
    """Whether a point lies inside (or on) the frustum of a projection-view matrix.

    :returns: True unless the point is outside at least one plane
    """
    values = m._values()
    for selector in FrustumPlane:
        a, b, c, d = _plane_of(values, selector)
        if a * x + b * y + c * z + d < 0.0:
            return False
    return True


def test_sphere(m: Matrix4, x: float, y: float, z: float, r: float) -> bool:
    """Whether a sphere is at least partly inside the frustum.

    Conservative: a sphere near a frustum edge, outside the volume but not
    fully behind any single plane, is reported as inside.

    :param r: Sphere radius
    """
    values = m._values()
    for selector in FrustumPlane:
        a, b, c, d = _plane_of(values, selector)
        inv_len = ieee_div(1.0, math.sqrt(a * a + b * b + c * c))
        if (a * x + b * y + c * z + d) * inv_len < -r:
            return False
    return True


def test_aab(m: Matrix4, min_corner: Vector3Like, max_corner: Vector3Like) -> bool:
    """Whether an axis-aligned box is at least partly inside the frustum.

    For each plane only the box corner farthest along the plane normal is
    tested; the box is culled once that corner is behind a plane. Like
    :func:`test_sphere` this may report boxes near frustum edges as inside.

    :param min_corner: Minimum corner of the box
    :param max_corner: Maximum corner of the box
    """
    min_x, min_y, min_z = m._read(min_corner, 3, "min_corner")
    max_x, max_y, max_z = m._read(max_corner, 3, "max_corner")
    values = m._values()
    for selector in FrustumPlane:
        a, b, c, d = _plane_of(values, selector)
        px = max_x if a >= 0.0 else min_x
        py = max_y if b >= 0.0 else min_y
        pz = max_z if c >= 0.0 else min_z
        if a * px + b * py + c * pz + d < 0.0:
            return False
    return True


# ============================================================================
# Bounds and crops (on inverse projection-view matrices)
# ============================================================================


def frustum_aabb(
    m: Matrix4, min_dest: Value | None = None, max_dest: Value | None = None
) -> tuple[Value, Value]:
    """Axis-aligned bounds of the frustum described by an inverse projection-view matrix.

    :param min_dest: Destination Vector3 for the minimum corner
    :param max_dest: Destination Vector3 for the maximum corner
    :returns: ``(min, max)``
    """
    lo_dest = m._dest_of("vector3", min_dest)
    hi_dest = m._dest_of("vector3", max_dest)
    values = m._values()
    corners = [unproject_point(values, *c) for c in _ndc_corners()]
    lo = [min(c[axis] for c in corners) for axis in range(3)]
    hi = [max(c[axis] for c in corners) for axis in range(3)]
    return lo_dest._assign(lo), hi_dest._assign(hi)


def projected_grid_range(
    m: Matrix4, projector: Matrix4, s_lower: float, s_upper: float,
    dest: Matrix4 | None = None,
) -> Matrix4 | None:
    """Range matrix for a projected grid between the planes ``y = -s_lower`` and ``y = -s_upper``.

    Each frustum edge is clipped against both planes and the hits are
    projected with ``projector`` into the grid's XY range.

    :param m: Inverse projection-view matrix of the viewing frustum
    :param projector: Projector matrix mapping world XZ to grid coordinates
    :returns: The range matrix, or None if the grid is not visible
    """
    m._check_precision(projector)
    values = m._values()
    pm = projector._values()
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    hit = False
    for start, end in _ndc_edges():
        p0x, p0y, p0z = unproject_point(values, *start)
        p1x, p1y, p1z = unproject_point(values, *end)
        dir_x, dir_y, dir_z = p1x - p0x, p1y - p0y, p1z - p0z
        for s in (s_lower, s_upper):
            t = ieee_div(-(p0y + s), dir_y)
            if not 0.0 <= t <= 1.0:
                continue
            hit = True
            ix = p0x + t * dir_x
            iz = p0z + t * dir_z
            inv_w = ieee_div(1.0, pm[3] * ix + pm[11] * iz + pm[15])
            px = (pm[0] * ix + pm[8] * iz + pm[12]) * inv_w
            py = (pm[1] * ix + pm[9] * iz + pm[13]) * inv_w
            min_x, max_x = min(min_x, px), max(max_x, px)
            min_y, max_y = min(min_y, py), max(max_y, py)
    if not hit:
        logger.debug("[frustum] Projected grid not visible for s in [%s, %s]", s_lower, s_upper)
        return None
    return m._dest_of("matrix4", dest)._assign((
        max_x - min_x, 0.0, 0.0, 0.0,
        0.0, max_y - min_y, 0.0, 0.0,
        0.0, 0.0, 1.0, 0.0,
        min_x, min_y, 0.0, 1.0,
    ))


def ortho_crop(m: Matrix4, view: Matrix4, dest: Matrix4 | None = None) -> Matrix4:
    """Orthographic projection that tightly encloses a frustum as seen from ``view``.

    Typical use is fitting a directional light's shadow map to the camera
    frustum.

    :param m: Inverse projection-view matrix of the frustum to enclose
    :param view: Orthographic view matrix (e.g. the light's view)
    :returns: ``dest`` (or a new Matrix4) set to the cropping ortho projection
    """
    m._check_precision(view)
    values = m._values()
    v = view._values()
    xs, ys, zs = [], [], []
    for corner in _ndc_corners():
        wx, wy, wz = unproject_point(values, *corner)
        inv_w = ieee_div(1.0, v[3] * wx + v[7] * wy + v[11] * wz + v[15])
        xs.append(v[0] * wx + v[4] * wy + v[8] * wz + v[12])
        ys.append(v[1] * wx + v[5] * wy + v[9] * wz + v[13])
        zs.append((v[2] * wx + v[6] * wy + v[10] * wz + v[14]) * inv_w)
    return m._dest_of("matrix4", dest)._assign(
        ortho_matrix(min(xs), max(xs), min(ys), max(ys), -max(zs), -min(zs))
    )


# ============================================================================
# Perspective parameter recovery
# ============================================================================


def perspective_fov(m: Matrix4) -> float:
    """Vertical field of view in radians: the angle between the bottom and top plane normals."""
    v = m._values()
    n1 = (v[3] + v[1], v[7] + v[5], v[11] + v[9])
    n2 = (v[1] - v[3], v[5] - v[7], v[9] - v[11])
    len1 = math.sqrt(sum(c * c for c in n1))
    len2 = math.sqrt(sum(c * c for c in n2))
    return safe_acos(ieee_div(sum(a * b for a, b in zip(n1, n2)), len1 * len2))


def perspective_near(m: Matrix4) -> float:
    return ieee_div(m.m32, m.m23 + m.m22)


def perspective_far(m: Matrix4) -> float:
    return ieee_div(m.m32, m.m22 - m.m23)


def perspective_frustum_slice(
    m: Matrix4, z_near: float, z_far: float, dest: Matrix4 | None = None
) -> Matrix4:
    """Same perspective projection restricted to a new depth range.

    Used for cascaded shadow maps. The x/y scale is adjusted so the slice
    covers the same field of view.

    :param z_near: Near distance of the slice
    :param z_far: Far distance of the slice
    :returns: ``dest`` (or a new Matrix4)
    """
    values = m._values()
    inv_old_near = ieee_div(values[11] + values[10], values[14])
    inv_near_far = ieee_div(1.0, z_near - z_far)
    values[0] *= inv_old_near * z_near
    values[5] *= inv_old_near * z_near
    values[10] = (z_far + z_near) * inv_near_far
    values[14] = (z_far + z_far) * z_near * inv_near_far
    return m._dest_of("matrix4", dest)._assign(values)
