"""
Example: Camera, projection and frustum usage.

Demonstrates how to use rendermath for:
- Building view and projection matrices
- Projecting points to the window and picking rays back
- Frustum culling of points, spheres and boxes
- Fitting a shadow map to the camera frustum
- Transforming a point cloud in one batch
"""

import logging
import math

import numpy as np

from rendermath import (
    FrustumPlane,
    Matrix4d,
    Matrix4f,
    Quaterniond,
    Vector3d,
    transform_project,
)

# Configure logging to see which batch path runs
logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

VIEWPORT = [0, 0, 1280, 720]


def build_camera() -> tuple[Matrix4d, Matrix4d]:
    """Return (view, projection) for a camera orbiting the origin."""
    view = Matrix4d().set_look_at((4, 3, 8), (0, 0, 0), (0, 1, 0))
    proj = Matrix4d().set_perspective(math.radians(60), 1280 / 720, 0.1, 100.0)
    return view, proj


def example_1_project_and_pick():
    """Example 1: Window projection and picking rays."""
    print("\n" + "=" * 70)
    print("EXAMPLE 1: Project and Unproject")
    print("=" * 70)

    view, proj = build_camera()
    view_proj = proj.mul(view, Matrix4d())

    window = view_proj.project(Vector3d(0, 0, 0), VIEWPORT)
    print(f"Origin on screen: ({window.x:.1f}, {window.y:.1f}), depth {window.z:.4f}")

    back = view_proj.unproject(window, VIEWPORT)
    print(f"Unprojected back: {back}")

    origin, direction = view_proj.unproject_ray(640, 360, VIEWPORT)
    print(f"Center ray: origin={origin}, direction={direction.normalize()}")
    print(f"Camera position: {view.origin_affine()}")


def example_2_frustum_culling():
    """Example 2: Point, sphere and box culling, plus frustum bounds."""
    print("\n" + "=" * 70)
    print("EXAMPLE 2: Frustum Culling")
    print("=" * 70)

    view, proj = build_camera()
    view_proj = proj.mul(view, Matrix4d())
    for point in [(0, 0, 0), (50, 0, 0), (0, 0, -30)]:
        print(f"Point {point}: {'visible' if view_proj.test_point(*point) else 'culled'}")

    for center, radius in [((12, 0, 0), 1.0), ((12, 0, 0), 8.0)]:
        visible = view_proj.test_sphere(*center, radius)
        print(f"Sphere {center} r={radius}: {'visible' if visible else 'culled'}")

    box = ((-1, -1, -1), (1, 1, 1))
    print(f"Box {box}: {'visible' if view_proj.test_aab(*box) else 'culled'}")

    near = view_proj.frustum_plane(FrustumPlane.NZ)
    print(f"Near plane: {near}")
    lo, hi = view_proj.invert(Matrix4d()).frustum_aabb()
    print(f"Frustum bounds: {lo} .. {hi}")
    print(f"Recovered fov: {math.degrees(view_proj.perspective_fov()):.1f} degrees")


def example_3_shadow_map_crop():
    """Example 3: Fit a directional light's shadow projection to the camera."""
    print("\n" + "=" * 70)
    print("EXAMPLE 3: Shadow Map Crop")
    print("=" * 70)

    view, proj = build_camera()
    # Only the first 20 units of the camera frustum cast shadows
    near_slice = proj.perspective_frustum_slice(0.1, 20.0)
    inv_slice = near_slice.mul(view, Matrix4d()).invert()

    light_view = Matrix4d().set_look_at((10, 20, 5), (0, 0, 0), (0, 1, 0))
    crop = inv_slice.ortho_crop(light_view)
    light_view_proj = crop.mul(light_view, Matrix4d())
    print(f"Light view-projection:\n{light_view_proj}")


def example_4_batch_transform():
    """Example 4: Project a point cloud in one call."""
    print("\n" + "=" * 70)
    print("EXAMPLE 4: Batch Projection")
    print("=" * 70)

    rng = np.random.default_rng(42)
    points = rng.standard_normal((100_000, 3)).astype(np.float32) * 2.0

    q = Quaterniond().rotation_y(math.radians(30)).to_float()
    model = Matrix4f().translation(0, 1, 0).rotate(q)
    view_proj = (
        Matrix4f()
        .perspective(math.radians(60), 1280 / 720, 0.1, 100.0)
        .look_at((4, 3, 8), (0, 0, 0), (0, 1, 0))
    )
    mvp = view_proj.mul(model, Matrix4f())

    ndc = transform_project(mvp, points)
    visible = np.all(np.abs(ndc) <= 1.0, axis=1)
    print(f"Projected {len(points):,} points, {visible.sum():,} inside the view volume")


if __name__ == "__main__":
    example_1_project_and_pick()
    example_2_frustum_culling()
    example_3_shadow_map_crop()
    example_4_batch_transform()
