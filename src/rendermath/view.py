"""
View and special-purpose transform builders.

Right-handed look-at/look-along cameras, planar shadows, mirror reflections,
billboards and an arcball camera. Builders whose name starts with ``set_``
(and ``reflection``/``billboard_*``) replace the matrix; the others
post-multiply (``M := M * B``).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rendermath.base import Value, ieee_div
from rendermath.matrix3 import look_along_block, rotation_x_block, rotation_y_block
from rendermath.matrix4 import IDENTITY3, Mat4, embed3, multiply4
from rendermath.quaternion import quaternion_to_matrix3
from rendermath.types import PlaneLike, Vector3Like, Vector4Like

if TYPE_CHECKING:
    from rendermath.matrix4 import Matrix4


def _post(m: Matrix4, b: Mat4, dest: Matrix4 | None) -> Matrix4:
    return m._dest(dest)._assign(multiply4(m._values(), b))


def _normalized(x: float, y: float, z: float) -> tuple[float, float, float]:
    inv = ieee_div(1.0, math.sqrt(x * x + y * y + z * z))
    return x * inv, y * inv, z * inv


def _cross(
    ax: float, ay: float, az: float, bx: float, by: float, bz: float
) -> tuple[float, float, float]:
    return ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx


# ============================================================================
# Cameras
# ============================================================================


def look_at_matrix(eye: tuple, center: tuple, up: tuple) -> Mat4:
    """Right-handed view matrix.

    ``dir = normalize(eye - center)`` points backwards, ``left = up x dir``
    and the up vector is re-orthogonalized as ``dir x left``.
    """
    ex, ey, ez = eye
    dir_x, dir_y, dir_z = _normalized(ex - center[0], ey - center[1], ez - center[2])
    left_x, left_y, left_z = _normalized(*_cross(*up, dir_x, dir_y, dir_z))
    upn_x, upn_y, upn_z = _cross(dir_x, dir_y, dir_z, left_x, left_y, left_z)
    return [
        left_x, upn_x, dir_x, 0.0,
        left_y, upn_y, dir_y, 0.0,
        left_z, upn_z, dir_z, 0.0,
        -(left_x * ex + left_y * ey + left_z * ez),
        -(upn_x * ex + upn_y * ey + upn_z * ez),
        -(dir_x * ex + dir_y * ey + dir_z * ez),
        1.0,
    ]


def set_look_at(m: Matrix4, eye: Vector3Like, center: Vector3Like, up: Vector3Like) -> Matrix4:
    """Set to a view matrix placing the camera at ``eye`` looking at ``center``."""
    return m._assign(look_at_matrix(
        m._read(eye, 3, "eye"), m._read(center, 3, "center"), m._read(up, 3, "up")
    ))


def look_at(
    m: Matrix4, eye: Vector3Like, center: Vector3Like, up: Vector3Like, dest: Matrix4 | None = None
) -> Matrix4:
    """Post-multiply a view matrix."""
    b = look_at_matrix(m._read(eye, 3, "eye"), m._read(center, 3, "center"), m._read(up, 3, "up"))
    return _post(m, b, dest)


def set_look_along(m: Matrix4, direction: Vector3Like, up: Vector3Like) -> Matrix4:
    """Set to a rotation looking along ``direction``, like :func:`set_look_at` from the origin."""
    dx, dy, dz = m._read(direction, 3, "direction")
    ux, uy, uz = m._read(up, 3, "up")
    return m._assign(embed3(look_along_block(dx, dy, dz, ux, uy, uz)))


def look_along(
    m: Matrix4, direction: Vector3Like, up: Vector3Like, dest: Matrix4 | None = None
) -> Matrix4:
    dx, dy, dz = m._read(direction, 3, "direction")
    ux, uy, uz = m._read(up, 3, "up")
    return _post(m, embed3(look_along_block(dx, dy, dz, ux, uy, uz)), dest)


def arcball(
    m: Matrix4, radius: float, center: Vector3Like, angle_x: float, angle_y: float,
    dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply an arcball camera orbiting ``center`` at distance ``radius``.

    Equivalent to ``translate(0, 0, -radius) * rotate_x(angle_x) *
    rotate_y(angle_y) * translate(-center)``.
    """
    cx, cy, cz = m._read(center, 3, "center")
    b = embed3(IDENTITY3, 0.0, 0.0, -radius)
    b = multiply4(b, embed3(rotation_x_block(angle_x)))
    b = multiply4(b, embed3(rotation_y_block(angle_y)))
    b = multiply4(b, embed3(IDENTITY3, -cx, -cy, -cz))
    return _post(m, b, dest)


# ============================================================================
# Shadows and reflections
# ============================================================================


def shadow_matrix(light: tuple, plane: tuple) -> Mat4:
    """Planar shadow ``S = dot * I - light (x) plane``.

    :param light: ``(x, y, z, w)``; w = 1 for a point light, w = 0 for a
        directional light
    :param plane: Plane equation ``(a, b, c, d)``, normalized here
    """
    lx, ly, lz, lw = light
    a, b, c, d = plane
    inv = ieee_div(1.0, math.sqrt(a * a + b * b + c * c))
    an, bn, cn, dn = a * inv, b * inv, c * inv, d * inv
    dot = an * lx + bn * ly + cn * lz + dn * lw
    return [
        dot - an * lx, -an * ly, -an * lz, -an * lw,
        -bn * lx, dot - bn * ly, -bn * lz, -bn * lw,
        -cn * lx, -cn * ly, dot - cn * lz, -cn * lw,
        -dn * lx, -dn * ly, -dn * lz, dot - dn * lw,
    ]


def shadow(
    m: Matrix4, light: Vector4Like, plane: Vector4Like | Matrix4, dest: Matrix4 | None = None
) -> Matrix4:
    """Post-multiply a matrix projecting geometry onto a plane along light rays.

    :param light: 4 components ``(x, y, z, w)``
    :param plane: Plane equation ``(a, b, c, d)``, or a Matrix4 whose local
        XZ plane (normal along its Y axis) is the shadow receiver
    """
    l4 = m._read(light, 4, "light")
    if isinstance(plane, Value) and plane.kind == "matrix4":
        m._check_precision(plane)
        t = plane._values()
        a, b, c = t[4], t[5], t[6]
        plane4 = (a, b, c, -(a * t[12] + b * t[13] + c * t[14]))
    else:
        plane4 = m._read(plane, 4, "plane")
    return _post(m, shadow_matrix(l4, plane4), dest)


def reflection_matrix(a: float, b: float, c: float, d: float) -> Mat4:
    """Householder reflection ``I - 2 n (x) n`` about the unit-normal plane ``(a, b, c, d)``."""
    da, db, dc = -2.0 * a, -2.0 * b, -2.0 * c
    return [
        1.0 + da * a, db * a, dc * a, 0.0,
        da * b, 1.0 + db * b, dc * b, 0.0,
        da * c, db * c, 1.0 + dc * c, 0.0,
        da * d, db * d, dc * d, 1.0,
    ]


def _reflection_plane(
    m: Matrix4, plane_or_normal: PlaneLike, point: Vector3Like | None
) -> tuple:
    if point is None:
        return m._read(plane_or_normal, 4, "plane")
    px, py, pz = m._read(point, 3, "point")
    if isinstance(plane_or_normal, Value) and plane_or_normal.kind == "quaternion":
        m._check_precision(plane_or_normal)
        # Mirror plane normal is the orientation's +Z axis
        block = quaternion_to_matrix3(*plane_or_normal._values())
        nx, ny, nz = block[6], block[7], block[8]
    else:
        nx, ny, nz = _normalized(*m._read(plane_or_normal, 3, "normal"))
    return nx, ny, nz, -(nx * px + ny * py + nz * pz)


def reflection(m: Matrix4, plane_or_normal: PlaneLike, point: Vector3Like | None = None) -> Matrix4:
    """Set to a mirror reflection.

    :param plane_or_normal: Plane ``(a, b, c, d)`` with unit normal when
        ``point`` is None; otherwise a normal (normalized here) or an
        orientation Quaternion whose +Z axis is the plane normal
    :param point: A point on the plane
    """
    return m._assign(reflection_matrix(*_reflection_plane(m, plane_or_normal, point)))


def reflect(
    m: Matrix4, plane_or_normal: PlaneLike, point: Vector3Like | None = None,
    dest: Matrix4 | None = None,
) -> Matrix4:
    """Post-multiply a mirror reflection; arguments as in :func:`reflection`."""
    b = reflection_matrix(*_reflection_plane(m, plane_or_normal, point))
    return _post(m, b, dest)


# ============================================================================
# Billboards
# ============================================================================


def billboard_cylindrical(
    m: Matrix4, obj_pos: Vector3Like, target_pos: Vector3Like, up: Vector3Like
) -> Matrix4:
    """Set to a billboard rotating about ``up`` to face ``target_pos``.

    :param up: Rotation axis, must be unit length
    """
    ox, oy, oz = m._read(obj_pos, 3, "obj_pos")
    tx, ty, tz = m._read(target_pos, 3, "target_pos")
    ux, uy, uz = m._read(up, 3, "up")
    left = _normalized(*_cross(ux, uy, uz, tx - ox, ty - oy, tz - oz))
    direction = _normalized(*_cross(*left, ux, uy, uz))
    return m._assign(embed3((*left, ux, uy, uz, *direction), ox, oy, oz))


def billboard_spherical(
    m: Matrix4, obj_pos: Vector3Like, target_pos: Vector3Like, up: Vector3Like | None = None
) -> Matrix4:
    """Set to a billboard whose +Z axis points at ``target_pos``.

    With ``up`` the billboard keeps its up vector as close to ``up`` as
    possible. Without it, the shortest-arc rotation from +Z is used.
    """
    ox, oy, oz = m._read(obj_pos, 3, "obj_pos")
    tx, ty, tz = m._read(target_pos, 3, "target_pos")
    if up is not None:
        ux, uy, uz = m._read(up, 3, "up")
        direction = _normalized(tx - ox, ty - oy, tz - oz)
        left = _normalized(*_cross(ux, uy, uz, *direction))
        upn = _cross(*direction, *left)
        return m._assign(embed3((*left, *upn, *direction), ox, oy, oz))
    to_x, to_y, to_z = tx - ox, ty - oy, tz - oz
    # Shortest-arc quaternion from +Z to the target direction
    x, y = -to_y, to_x
    w = math.sqrt(to_x * to_x + to_y * to_y + to_z * to_z) + to_z
    inv = ieee_div(1.0, math.sqrt(x * x + y * y + w * w))
    return m._assign(embed3(quaternion_to_matrix3(x * inv, y * inv, 0.0, w * inv), ox, oy, oz))
