"""Tests for frustum analysis.

Tests cover:
- Plane, corner and ray extraction from projection-view matrices
- Bounds, projected grid ranges and cropping from inverse matrices
- Perspective parameter recovery
- Selector validation and input immutability
"""

import math

import numpy as np
import pytest

from rendermath import (
    FrustumCorner,
    FrustumPlane,
    Matrix4d,
    Matrix4f,
    Vector3d,
    Vector3f,
    Vector4d,
)


@pytest.fixture
def rotated_perspective():
    """90 degree perspective camera turned 90 degrees about Y."""
    return Matrix4d().perspective(math.radians(90), 1.0, 0.1, 100.0).rotate_y(math.radians(90))


@pytest.fixture
def camera_at_z10():
    """90 degree perspective camera at (0, 0, 10) looking at the origin."""
    return (
        Matrix4d()
        .perspective(math.radians(90), 1.0, 0.1, 100.0)
        .look_at((0, 0, 10), (0, 0, 0), (0, 1, 0))
    )


def assert_vector_close(actual, expected, atol=1e-9):
    np.testing.assert_allclose(actual.to_numpy(), np.asarray(expected, dtype=float), atol=atol)


class TestFrustumPlanes:
    """Test Gribb/Hartmann plane extraction."""

    def test_rotated_translated_perspective(self):
        """Test all six planes of a moved and rotated camera."""
        m = (
            Matrix4d()
            .perspective(math.radians(90), 1.0, 0.1, 100.0)
            .rotate_y(math.radians(90))
            .translate(0, -5, 0)
        )
        expected = {
            FrustumPlane.NX: (1, 0, 1, 0),
            FrustumPlane.PX: (1, 0, -1, 0),
            FrustumPlane.PY: (1, -1, 0, 5),
            FrustumPlane.NY: (1, 1, 0, -5),
            FrustumPlane.NZ: (1, 0, 0, -0.1),
        }
        for plane, equation in expected.items():
            assert_vector_close(m.frustum_plane(plane), Vector4d(equation).normalize3().to_numpy())
        assert_vector_close(
            m.frustum_plane(FrustumPlane.PZ), Vector4d(-1, 0, 0, 100).normalize3().to_numpy(),
            atol=1e-4,
        )

    def test_inside_points_have_positive_distance(self):
        """Test plane normals point into the frustum."""
        m = Matrix4d().set_perspective(math.radians(60), 1.0, 1.0, 50.0)
        for plane in FrustumPlane:
            assert m.frustum_plane(plane).distance_to_plane((0, 0, -10)) > 0.0

    def test_perspective_normals_are_unit_length(self):
        """Test all six normalized planes have unit-length normals."""
        m = Matrix4d().set_perspective(math.pi / 2, 1.0, 1.0, 100.0)
        for plane in FrustumPlane:
            assert m.frustum_plane(plane).xyz().length() == pytest.approx(1.0, abs=1e-12)

    def test_point_just_past_near_is_inside(self):
        """Test a point just beyond the near plane is inside every plane."""
        m = Matrix4d().set_perspective(math.pi / 2, 1.0, 1.0, 100.0)
        for plane in FrustumPlane:
            assert m.frustum_plane(plane).distance_to_plane((0, 0, -1.0 - 1e-3)) > 0.0

    def test_point_beyond_far_is_outside(self):
        """Test a point one unit past the far plane is outside at least one plane."""
        m = Matrix4d().set_perspective(math.pi / 2, 1.0, 1.0, 100.0)
        distances = [m.frustum_plane(p).distance_to_plane((0, 0, -101.0)) for p in FrustumPlane]
        assert min(distances) < 0.0
        assert m.frustum_plane(FrustumPlane.PZ).distance_to_plane((0, 0, -101.0)) < 0.0

    def test_plane_into_dest(self):
        """Test the plane is written into a provided Vector4."""
        dest = Vector4d()
        result = Matrix4d().frustum_plane(FrustumPlane.PX, dest)
        assert result is dest
        assert dest.to_list() == [-1.0, 0.0, 0.0, 1.0]

    def test_unknown_plane_raises(self):
        """Test out-of-range plane selectors."""
        with pytest.raises(ValueError, match="Unknown frustum plane"):
            Matrix4d().frustum_plane(6)
        with pytest.raises(ValueError):
            Matrix4d().frustum_plane(-1)


class TestFrustumCorners:
    """Test corner extraction by three-plane intersection."""

    def test_identity(self):
        """Test the identity frustum is the NDC cube."""
        m = Matrix4d()
        assert_vector_close(m.frustum_corner(FrustumCorner.NXNYNZ), (-1, -1, -1))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYNZ), (1, -1, -1))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYPZ), (1, -1, 1))
        assert_vector_close(m.frustum_corner(FrustumCorner.NXPYPZ), (-1, 1, 1))

    def test_ortho_wide(self):
        """Test corners of a 2D orthographic projection."""
        m = Matrix4d().ortho_2d(-2, 2, -1, 1)
        assert_vector_close(m.frustum_corner(FrustumCorner.NXNYNZ), (-2, -1, 1))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYNZ), (2, -1, 1))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYPZ), (2, -1, -1))
        assert_vector_close(m.frustum_corner(FrustumCorner.NXPYPZ), (-2, 1, -1))

    def test_perspective_camera(self, camera_at_z10):
        """Test near and far corners of a perspective camera."""
        m = camera_at_z10
        assert_vector_close(m.frustum_corner(FrustumCorner.NXNYNZ), (-0.1, -0.1, 9.9))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYNZ), (0.1, -0.1, 9.9))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYPZ), (100, -100, -90), atol=1e-6)

    def test_wide_perspective_camera(self):
        """Test corners of an aspect 2 camera."""
        m = (
            Matrix4d()
            .perspective(math.radians(90), 2.0, 0.1, 100.0)
            .look_at((0, 0, 10), (0, 0, 0), (0, 1, 0))
        )
        assert_vector_close(m.frustum_corner(FrustumCorner.NXNYNZ), (-0.2, -0.1, 9.9))
        assert_vector_close(m.frustum_corner(FrustumCorner.PXNYPZ), (200, -100, -90), atol=1e-6)

    def test_unknown_corner_raises(self):
        """Test out-of-range corner selectors."""
        with pytest.raises(ValueError, match="Unknown frustum corner"):
            Matrix4d().frustum_corner(8)


class TestFrustumRays:
    """Test interpolated frustum ray directions."""

    def test_rotated_perspective(self, rotated_perspective):
        """Test the four corner rays of a camera turned about Y."""
        m = rotated_perspective
        cases = {
            (0, 0): (1, -1, -1),
            (1, 0): (1, -1, 1),
            (0, 1): (1, 1, -1),
            (1, 1): (1, 1, 1),
        }
        for (x, y), direction in cases.items():
            expected = Vector3d(direction).normalize().to_numpy()
            assert_vector_close(m.frustum_ray_dir(x, y), expected)

    def test_rolled_perspective(self):
        """Test the corner rays of a camera rolled 45 degrees."""
        m = Matrix4d().perspective(math.radians(90), 1.0, 0.1, 100.0).rotate_z(math.radians(45))
        s = math.sqrt(2)
        cases = {
            (0, 0): (-s, 0, -1),
            (1, 0): (0, -s, -1),
            (0, 1): (0, s, -1),
            (1, 1): (s, 0, -1),
        }
        for (x, y), direction in cases.items():
            expected = Vector3d(direction).normalize().to_numpy()
            assert_vector_close(m.frustum_ray_dir(x, y), expected)

    def test_center_ray(self):
        """Test the center ray is the view direction."""
        m = Matrix4d().perspective(math.radians(70), 1.5, 0.1, 100.0)
        assert_vector_close(m.frustum_ray_dir(0.5, 0.5), (0, 0, -1))


class TestCulling:
    """Test point, sphere and box culling against the frustum planes."""

    def test_point(self, camera_at_z10):
        """Test points inside, behind, beside and beyond the frustum."""
        m = camera_at_z10
        assert m.test_point(0, 0, 0)
        assert m.test_point(9, 0, 0)
        assert not m.test_point(0, 0, 11)
        assert not m.test_point(50, 0, 0)
        assert not m.test_point(0, 0, -95)

    def test_point_matches_plane_distances(self, camera_at_z10):
        """Test test_point agrees with the signed distances of all six planes."""
        m = camera_at_z10
        planes = [m.frustum_plane(p) for p in FrustumPlane]
        rng = np.random.default_rng(7)
        for x, y, z in rng.uniform(-40.0, 40.0, size=(200, 3)):
            expected = all(plane.distance_to_plane((x, y, z)) >= 0.0 for plane in planes)
            assert m.test_point(x, y, z) is expected

    def test_sphere(self, camera_at_z10):
        """Test spheres are culled only when fully behind one plane."""
        m = camera_at_z10
        assert m.test_sphere(0, 0, 0, 1.0)
        assert not m.test_sphere(0, 0, 11, 0.5)
        assert m.test_sphere(0, 0, 11, 2.0)
        assert not m.test_sphere(12, 0, 0, 1.0)
        assert m.test_sphere(12, 0, 0, 2.0)

    def test_aab(self, camera_at_z10):
        """Test boxes inside, outside and straddling the frustum."""
        m = camera_at_z10
        assert m.test_aab((-1, -1, -1), (1, 1, 1))
        assert m.test_aab(Vector3d(-50, -1, -1), Vector3d(50, 1, 1))
        assert not m.test_aab((20, 0, 0), (21, 1, 1))
        assert not m.test_aab((-1, -1, 11), (1, 1, 12))

    def test_float_matrix(self):
        """Test culling with a single-precision matrix."""
        m = Matrix4f().set_perspective(math.pi / 2, 1.0, 1.0, 100.0)
        assert m.test_point(0, 0, -10)
        assert not m.test_point(0, 0, -101)
        assert m.test_aab(Vector3f(-1, -1, -11), Vector3f(1, 1, -9))

    def test_aab_precision_mixing_raises(self, camera_at_z10):
        """Test box corners of another precision are rejected."""
        with pytest.raises(TypeError, match="Cannot mix"):
            camera_at_z10.test_aab(Vector3f(-1, -1, -1), Vector3f(1, 1, 1))

    def test_does_not_mutate(self, camera_at_z10):
        """Test culling queries leave the matrix unchanged."""
        before = camera_at_z10.to_numpy()
        camera_at_z10.test_point(1, 2, 3)
        camera_at_z10.test_sphere(1, 2, 3, 4)
        camera_at_z10.test_aab((0, 0, 0), (1, 1, 1))
        np.testing.assert_array_equal(camera_at_z10.to_numpy(), before)


class TestBoundsAndCrop:
    """Test functions taking an inverse projection-view matrix."""

    def test_aabb_of_ortho_box(self):
        """Test the bounds of an orthographic view volume."""
        inv = Matrix4d().set_ortho(-2, 2, -1, 1, 1, 10).invert()
        lo, hi = inv.frustum_aabb()
        assert_vector_close(lo, (-2, -1, -10))
        assert_vector_close(hi, (2, 1, -1))

    def test_aabb_of_perspective(self):
        """Test the bounds of a perspective frustum reach the far plane corners."""
        inv = Matrix4d().set_perspective(math.radians(90), 1.0, 1.0, 10.0).invert()
        lo, hi = inv.frustum_aabb(Vector3d(), Vector3d())
        assert_vector_close(lo, (-10, -10, -10), atol=1e-8)
        assert_vector_close(hi, (10, 10, -1), atol=1e-8)

    def test_aabb_bad_max_dest_leaves_min(self):
        """Test a rejected max dest leaves the min dest untouched."""
        inv = Matrix4d().set_ortho(-2, 2, -1, 1, 1, 10).invert()
        lo = Vector3d(7, 8, 9)
        with pytest.raises(TypeError, match="Cannot mix"):
            inv.frustum_aabb(lo, Vector3f())
        assert lo.to_list() == [7.0, 8.0, 9.0]

    def test_projected_grid_range(self):
        """Test the grid range spans the frustum slab between the two planes."""
        inv = Matrix4d().set_ortho(-2, 2, -1, 1, 1, 10).invert()
        # Maps world x to grid x and world z to grid y
        projector = Matrix4d(1, 0, 0, 0, 0, 0, 1, 0, 0, 1, 0, 0, 0, 0, 0, 1)
        grid = inv.projected_grid_range(projector, 0.0, 0.5)
        assert grid is not None
        expected = Matrix4d(4, 0, 0, 0, 0, 9, 0, 0, 0, 0, 1, 0, -2, -10, 0, 1)
        np.testing.assert_allclose(grid.to_numpy(), expected.to_numpy(), atol=1e-9)

    def test_projected_grid_not_visible(self):
        """Test None is returned when the planes miss the frustum."""
        inv = Matrix4d().set_ortho(-2, 2, -1, 1, 1, 10).invert()
        assert inv.projected_grid_range(Matrix4d(), 5.0, 6.0) is None

    def test_ortho_crop(self):
        """Test cropping a light projection to an orthographic frustum."""
        light_view = Matrix4d().look_at((0, 5, 0), (0, 0, 0), (-1, 0, 0))
        crop = Matrix4d().ortho_2d(-1, 1, -1, 1).invert_affine().ortho_crop(light_view)
        fin = crop.mul(light_view, Matrix4d())
        assert_vector_close(fin.transform_project(Vector3d(1, -1, -1)), (1, -1, 1))
        assert_vector_close(fin.transform_project(Vector3d(-1, -1, -1)), (1, 1, 1))

    def test_ortho_crop_with_perspective(self):
        """Test cropping a light projection to a perspective frustum."""
        light_view = Matrix4d().look_at((0, 5, 0), (0, 0, 0), (0, 0, -1))
        inv = Matrix4d().perspective(math.radians(90), 1.0, 5, 10).invert_perspective()
        fin = inv.ortho_crop(light_view).mul(light_view)
        assert_vector_close(fin.transform_project(Vector3d(0, 0, -5)), (0, -1, 0))
        assert_vector_close(fin.transform_project(Vector3d(0, 0, -10)), (0, 1, 0))
        assert_vector_close(fin.transform_project(Vector3d(-10, 10, -10)), (-1, 1, -1))


class TestPerspectiveRecovery:
    """Test recovering camera parameters from a perspective matrix."""

    def test_origin_symmetric(self):
        """Test the eye position of symmetric frustums."""
        m = Matrix4d().perspective(math.radians(90), 1.0, 0.1, 100.0).look_at(
            (6, 0, 1), (0, 0, 0), (0, 1, 0)
        )
        assert_vector_close(m.perspective_origin(), (6, 0, 1))
        m = Matrix4d().perspective(math.radians(90), 1.0, 0.1, 100.0).look_at(
            (-5, 2, 1), (0, 1, 0), (0, 1, 0)
        )
        assert_vector_close(m.perspective_origin(), (-5, 2, 1))

    def test_origin_asymmetric(self):
        """Test the eye position of an off-axis frustum."""
        m = Matrix4d().frustum(-0.1, 0.5, -0.1, 0.1, 0.1, 100.0).look_at(
            (-5, 2, 1), (0, 1, 0), (0, 1, 0)
        )
        assert_vector_close(m.perspective_origin(), (-5, 2, 1))

    def test_fov(self):
        """Test the vertical field of view is recovered."""
        m = Matrix4d().perspective(math.radians(45), 1.0, 0.1, 100.0)
        assert m.perspective_fov() == pytest.approx(math.radians(45), abs=1e-9)
        m = Matrix4d().perspective(math.radians(90), 1.0, 0.1, 100.0).look_at(
            (6, 0, 1), (0, 0, 0), (0, 1, 0)
        )
        assert m.perspective_fov() == pytest.approx(math.radians(90), abs=1e-9)

    def test_near_and_far(self):
        """Test near and far distances are recovered."""
        m = Matrix4d().set_perspective(1.0, 1.0, 0.5, 50.0)
        assert m.perspective_near() == pytest.approx(0.5)
        assert m.perspective_far() == pytest.approx(50.0)

    def test_near_and_far_right_angle(self):
        """Test recovery from a 90 degree square projection."""
        m = Matrix4d().set_perspective(math.pi / 2, 1.0, 1.0, 100.0)
        assert m.perspective_far() == pytest.approx(100.0, rel=1e-12)
        assert m.perspective_near() == pytest.approx(1.0, rel=1e-12)
        assert m.perspective_fov() == pytest.approx(math.pi / 2, abs=1e-12)

    def test_frustum_slice(self):
        """Test a slice keeps the projection but changes the depth range."""
        m = Matrix4d().set_perspective(1.0, 1.5, 0.1, 100.0)
        sliced = m.perspective_frustum_slice(1.0, 10.0)
        assert sliced is not m
        assert sliced.perspective_near() == pytest.approx(1.0)
        assert sliced.perspective_far() == pytest.approx(10.0)
        assert sliced.m23 == -1.0


class TestInputNotMutated:
    """Test frustum queries leave their input unchanged."""

    def test_queries_do_not_mutate(self, camera_at_z10):
        """Test every query writes to a new value or dest."""
        m = camera_at_z10
        before = m.to_numpy()
        m.frustum_plane(FrustumPlane.NZ)
        m.frustum_corner(FrustumCorner.PXPYPZ)
        m.frustum_ray_dir(0.3, 0.7)
        m.perspective_origin()
        m.perspective_frustum_slice(1.0, 2.0)
        m.ortho_crop(Matrix4d())
        m.frustum_aabb()
        np.testing.assert_array_equal(m.to_numpy(), before)
