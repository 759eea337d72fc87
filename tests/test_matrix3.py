"""Tests for Matrix3.

Tests cover:
- Element access and column-major layout
- Inversion, determinant and normal matrix
- Rotation builders and post-multiplication order
- Aliasing of receiver, operand and destination
"""

import math

import numpy as np
import pytest

from rendermath import AxisAngled, Matrix3d, Matrix3f, Matrix4d, Quaterniond, Vector3d


class TestLayout:
    """Test storage order and element access."""

    def test_identity_default(self):
        """Test default construction gives the identity."""
        np.testing.assert_array_equal(Matrix3d().to_numpy(), np.eye(3).reshape(-1))

    def test_column_major_constructor(self):
        """Test scalars are taken column by column."""
        m = Matrix3d(1, 2, 3, 4, 5, 6, 7, 8, 9)
        assert m.m00 == 1.0 and m.m01 == 2.0 and m.m10 == 4.0 and m.m21 == 8.0
        assert m.get(2, 1) == 8.0
        assert m.get_transposed() == [1.0, 4.0, 7.0, 2.0, 5.0, 8.0, 3.0, 6.0, 9.0]

    def test_rows_and_columns(self):
        """Test row/column getters and setters."""
        m = Matrix3d(1, 2, 3, 4, 5, 6, 7, 8, 9)
        assert m.get_column(1).to_list() == [4.0, 5.0, 6.0]
        assert m.get_row(1).to_list() == [2.0, 5.0, 8.0]
        m.set_row(0, (10, 20, 30))
        assert m.get_row(0).to_list() == [10.0, 20.0, 30.0]
        m.set_column(2, Vector3d(0, 0, 1))
        assert m.get_column(2).to_list() == [0.0, 0.0, 1.0]

    def test_index_errors(self):
        """Test out-of-range rows and columns raise IndexError."""
        m = Matrix3d()
        with pytest.raises(IndexError, match="column=3"):
            m.get(3, 0)
        with pytest.raises(IndexError, match="row"):
            m.get_row(5)
        with pytest.raises(IndexError):
            m.set_element(0, -1, 1.0)

    def test_set_from_matrix4(self):
        """Test construction from the upper-left block of a Matrix4."""
        m4 = Matrix4d().translation(1, 2, 3).rotate_x(0.3)
        np.testing.assert_allclose(
            Matrix3d(m4).to_numpy(), Matrix3d().rotation_x(0.3).to_numpy(), atol=1e-15
        )

    def test_wrong_component_count(self):
        """Test construction from the wrong number of scalars."""
        with pytest.raises(ValueError):
            Matrix3d(1, 2, 3)


class TestInversion:
    """Test determinant, inverse and normal matrix."""

    def test_determinant(self):
        """Test the determinant of a known matrix."""
        assert Matrix3d(2, 0, 1, 1, 3, 0, 0, 1, 4).determinant() == pytest.approx(25.0)

    def test_invert_twice(self):
        """Test inverting twice restores the matrix."""
        m = Matrix3d(2, 0, 1, 1, 3, 0, 0, 1, 4)
        result = m.invert(Matrix3d()).invert()
        np.testing.assert_allclose(result.to_numpy(), m.to_numpy(), atol=1e-12)

    def test_product_with_inverse(self):
        """Test M * M^-1 is the identity."""
        m = Matrix3d().rotation_xyz(0.3, 0.2, 0.1).scale(2, 3, 4)
        product = m.mul(m.invert(Matrix3d()), Matrix3d())
        np.testing.assert_allclose(product.to_numpy(), np.eye(3).reshape(-1), atol=1e-12)

    def test_singular_yields_non_finite(self):
        """Test a singular matrix inverts to inf/NaN without raising."""
        m = Matrix3d(1, 2, 3, 2, 4, 6, 0, 0, 1)
        assert m.determinant() == 0.0
        assert not np.all(np.isfinite(m.invert().to_numpy()))

    def test_transpose_twice(self):
        """Test transposing twice restores the matrix."""
        m = Matrix3d(1, 2, 3, 4, 5, 6, 7, 8, 9)
        assert m.transpose(Matrix3d()).transpose() == m

    def test_normal_of_scaling(self):
        """Test the normal matrix of a scale is the inverse scale."""
        n = Matrix3d().scaling(2, 4, 8).normal()
        np.testing.assert_allclose(n.to_numpy(), Matrix3d().scaling(0.5, 0.25, 0.125).to_numpy())

    def test_normal_of_rotation_is_rotation(self):
        """Test the normal matrix of a pure rotation is the rotation itself."""
        r = Matrix3d().rotation_yxz(0.4, -0.3, 1.0)
        np.testing.assert_allclose(r.normal(Matrix3d()).to_numpy(), r.to_numpy(), atol=1e-12)


class TestRotation:
    """Test rotation builders and composition."""

    def test_rotate_xyz_is_sequential(self):
        """Test rotate_xyz equals rotate_x, rotate_y, rotate_z in turn."""
        m = Matrix3d().rotate_xyz(0.1, 0.2, 0.3)
        n = Matrix3d().rotate_x(0.1).rotate_y(0.2).rotate_z(0.3)
        np.testing.assert_allclose(m.to_numpy(), n.to_numpy(), atol=1e-12)

    def test_rotate_zyx_and_yxz_are_sequential(self):
        """Test rotate_zyx/rotate_yxz match their sequential forms."""
        np.testing.assert_allclose(
            Matrix3d().rotate_zyx(0.1, 0.2, 0.3).to_numpy(),
            Matrix3d().rotate_z(0.1).rotate_y(0.2).rotate_x(0.3).to_numpy(),
            atol=1e-12,
        )
        np.testing.assert_allclose(
            Matrix3d().rotate_yxz(0.1, 0.2, 0.3).to_numpy(),
            Matrix3d().rotate_y(0.1).rotate_x(0.2).rotate_z(0.3).to_numpy(),
            atol=1e-12,
        )

    def test_rotation_builders_match_rotate(self):
        """Test rotation_* on identity equals rotate_* on identity."""
        np.testing.assert_allclose(
            Matrix3d().rotation_zyx(0.5, 0.6, 0.7).to_numpy(),
            Matrix3d().rotate_zyx(0.5, 0.6, 0.7).to_numpy(),
            atol=1e-12,
        )

    def test_rotation_axis(self):
        """Test rotation about a non-unit axis matches the axis rotation."""
        np.testing.assert_allclose(
            Matrix3d().rotation_axis(0.8, 0, 0, 3).to_numpy(),
            Matrix3d().rotation_z(0.8).to_numpy(),
            atol=1e-12,
        )

    def test_rotation_axis_normalizes_but_axis_angle_does_not(self):
        """Test rotation_axis normalizes while rotation(AxisAngle) takes the axis as is."""
        by_axis = Matrix3d().rotation_axis(0.8, 0, 0, 3)
        unit = Matrix3d().rotation(AxisAngled(0.8, 0, 0, 1))
        raw = Matrix3d().rotation(AxisAngled(0.8, 0, 0, 3))
        np.testing.assert_allclose(by_axis.to_numpy(), unit.to_numpy(), atol=1e-12)
        assert by_axis.determinant() == pytest.approx(1.0)
        assert raw.determinant() != pytest.approx(1.0)

    def test_transform(self):
        """Test transforming a vector."""
        v = Matrix3d().rotation_z(math.pi / 2).transform(Vector3d(1, 0, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 1.0, 0.0], atol=1e-12)

    def test_transform_transpose_inverts_rotation(self):
        """Test transform_transpose undoes a rotation."""
        m = Matrix3d().rotation_xyz(0.3, 0.6, 0.9)
        v = m.transform_transpose(m.transform(Vector3d(1, 2, 3)))
        np.testing.assert_allclose(v.to_numpy(), [1.0, 2.0, 3.0], atol=1e-12)

    def test_post_multiply_order(self):
        """Test m.mul(n) applies n first."""
        m = Matrix3d().rotation_z(math.pi / 2).mul(Matrix3d().rotation_x(math.pi / 2))
        v = m.transform(Vector3d(0, 1, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 0.0, 1.0], atol=1e-12)

    def test_rotation_from_quaternion(self):
        """Test rotation(q) matches the quaternion's own matrix."""
        q = Quaterniond().rotation_axis(1.1, 1, 2, 3)
        np.testing.assert_allclose(
            Matrix3d().rotation(q).to_numpy(), q.to_matrix3().to_numpy(), atol=1e-15
        )

    def test_look_along_negative_z_is_identity(self):
        """Test looking down -Z with +Y up is the identity."""
        m = Matrix3d().set_look_along((0, 0, -1), (0, 1, 0))
        np.testing.assert_allclose(m.to_numpy(), np.eye(3).reshape(-1), atol=1e-15)

    def test_look_along_maps_direction_to_negative_z(self):
        """Test the view direction is mapped onto -Z."""
        m = Matrix3d().set_look_along((1, 0, 0), (0, 1, 0))
        v = m.transform(Vector3d(1, 0, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 0.0, -1.0], atol=1e-15)

    def test_get_scale_and_rotation(self):
        """Test decomposition into scale and rotation."""
        q = Quaterniond().rotation_axis(0.6, 1, 0, 1)
        m = Matrix3d().rotation(q).scale(2, 3, 4)
        np.testing.assert_allclose(m.get_scale().to_numpy(), [2.0, 3.0, 4.0], atol=1e-12)
        r = m.get_unnormalized_rotation()
        np.testing.assert_allclose(abs(r.dot(q)), 1.0, atol=1e-12)


class TestAliasingAndPrecision:
    """Test aliasing and precision rules."""

    def test_mul_with_itself(self):
        """Test m.mul(m) in place equals the product into a fresh matrix."""
        m = Matrix3d().rotation_xyz(0.3, 0.4, 0.5).scale(1, 2, 3)
        expected = m.mul(m, Matrix3d())
        m.mul(m)
        np.testing.assert_allclose(m.to_numpy(), expected.to_numpy(), atol=1e-15)

    def test_dest_is_operand(self):
        """Test writing into the right operand."""
        a = Matrix3d().rotation_x(0.3)
        b = Matrix3d().scaling(2)
        expected = a.mul(b, Matrix3d())
        a.mul(b, b)
        np.testing.assert_allclose(b.to_numpy(), expected.to_numpy(), atol=1e-15)

    def test_precision_mixing_raises(self):
        """Test float and double matrices cannot be combined."""
        with pytest.raises(TypeError, match="Cannot mix"):
            Matrix3d().mul(Matrix3f())

    def test_matmul_operator(self):
        """Test ``@`` with matrices and vectors."""
        m = Matrix3d().scaling(2)
        v = Vector3d(1, 2, 3)
        assert (m @ v).to_list() == [2.0, 4.0, 6.0]
        assert v.to_list() == [1.0, 2.0, 3.0]
        assert (m @ m) == Matrix3d().scaling(4)

    def test_lerp(self):
        """Test element-wise interpolation."""
        m = Matrix3d().zero().lerp(Matrix3d().scaling(2), 0.5)
        assert m == Matrix3d()
