"""Tests for Quaternion and AxisAngle.

Tests cover:
- Rotation builders and their agreement with matrix builders
- Multiplication order and vector transformation
- Matrix and axis-angle round trips
- Interpolation (slerp/nlerp) and inversion
"""

import math

import numpy as np
import pytest

from rendermath import (
    AxisAngled,
    Matrix3d,
    Matrix4d,
    Quaterniond,
    Quaternionf,
    Vector3d,
    Vector4d,
)


def assert_same_rotation(q, r, atol=1e-12):
    """Assert two quaternions encode the same rotation (q or -q)."""
    a = q.to_numpy()
    b = r.to_numpy()
    if np.dot(a, b) < 0:
        b = -b
    np.testing.assert_allclose(a, b, atol=atol)


class TestQuaternionBuilders:
    """Test quaternion construction and rotation builders."""

    def test_default_is_identity(self):
        """Test default construction gives the identity rotation."""
        assert Quaterniond().to_list() == [0.0, 0.0, 0.0, 1.0]

    def test_rotation_axis_normalizes(self):
        """Test rotation_axis normalizes a non-unit axis."""
        q = Quaterniond().rotation_axis(math.pi / 2, 0, 0, 5)
        assert_same_rotation(q, Quaterniond().rotation_z(math.pi / 2))

    def test_set_angle_axis_keeps_axis(self):
        """Test set_angle_axis uses the axis as given."""
        q = Quaterniond().set_angle_axis(math.pi, 0, 0, 2)
        assert abs(q.z - 2.0) < 1e-12
        assert abs(q.w) < 1e-12

    def test_rotation_xyz_matches_matrix(self):
        """Test rotation_xyz agrees with Matrix4.rotate_xyz."""
        q = Quaterniond().rotation_xyz(0.12, 0.521, 0.951)
        m = Matrix4d().rotate_xyz(0.12, 0.521, 0.951)
        np.testing.assert_allclose(Matrix4d().rotation(q).to_numpy(), m.to_numpy(), atol=1e-12)

    def test_rotation_zyx_matches_matrix(self):
        """Test rotation_zyx agrees with Matrix4.rotate_zyx."""
        q = Quaterniond().rotation_zyx(0.12, 0.521, 0.951)
        m = Matrix4d().rotate_zyx(0.12, 0.521, 0.951)
        np.testing.assert_allclose(Matrix4d().rotation(q).to_numpy(), m.to_numpy(), atol=1e-12)

    def test_rotation_yxz_matches_matrix(self):
        """Test rotation_yxz agrees with Matrix4.rotation_yxz."""
        q = Quaterniond().rotation_yxz(0.12, 0.521, 0.951)
        m = Matrix4d().rotation_yxz(0.12, 0.521, 0.951)
        np.testing.assert_allclose(Matrix4d().rotation(q).to_numpy(), m.to_numpy(), atol=1e-12)

    @pytest.mark.parametrize(("cls", "atol"), [(Quaternionf, 1e-5), (Quaterniond, 1e-12)])
    def test_rotate_xyz_is_sequential(self, cls, atol):
        """Test rotate_xyz equals rotate_x, rotate_y, rotate_z in turn."""
        base = cls().rotation_axis(0.4, 1, 1, 0)
        combined = base.copy().rotate_xyz(0.3, -0.2, 0.9)
        sequential = base.copy().rotate_x(0.3).rotate_y(-0.2).rotate_z(0.9)
        np.testing.assert_allclose(combined.to_numpy(), sequential.to_numpy(), atol=atol)

    def test_rotate_zyx_and_yxz_are_sequential(self):
        """Test rotate_zyx/rotate_yxz match their sequential forms."""
        zyx = Quaterniond().rotate_zyx(0.5, 0.6, 0.7)
        np.testing.assert_allclose(
            zyx.to_numpy(), Quaterniond().rotate_z(0.5).rotate_y(0.6).rotate_x(0.7).to_numpy(),
            atol=1e-12,
        )
        yxz = Quaterniond().rotate_yxz(0.5, 0.6, 0.7)
        np.testing.assert_allclose(
            yxz.to_numpy(), Quaterniond().rotate_y(0.5).rotate_x(0.6).rotate_z(0.7).to_numpy(),
            atol=1e-12,
        )


class TestQuaternionAlgebra:
    """Test multiplication, inversion and vector transformation."""

    def test_transform(self):
        """Test rotating a vector about z."""
        v = Quaterniond().rotation_z(math.pi / 2).transform(Vector3d(1, 0, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 1.0, 0.0], atol=1e-12)

    def test_transform_defaults_dest_to_input(self):
        """Test transform writes into the input vector when no dest is given."""
        v = Vector3d(1, 0, 0)
        result = Quaterniond().rotation_y(0.3).transform(v)
        assert result is v

    def test_transform_divides_out_length(self):
        """Test a non-unit quaternion still rotates without scaling."""
        q = Quaterniond().rotation_x(0.8)
        scaled = Quaterniond(*(2.0 * c for c in q))
        a = q.transform(Vector3d(0.2, 0.5, -1.0), Vector3d())
        b = scaled.transform(Vector3d(0.2, 0.5, -1.0), Vector3d())
        np.testing.assert_allclose(a.to_numpy(), b.to_numpy(), atol=1e-12)

    def test_mul_applies_right_operand_first(self):
        """Test q.mul(r) applies r before q."""
        rz = Quaterniond().rotation_z(math.pi / 2)
        rx = Quaterniond().rotation_x(math.pi / 2)
        v = rz.mul(rx, Quaterniond()).transform(Vector3d(0, 1, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 0.0, 1.0], atol=1e-12)

    def test_premul(self):
        """Test premul is mul with swapped operands."""
        rz = Quaterniond().rotation_z(0.7)
        rx = Quaterniond().rotation_x(0.2)
        expected = rz.mul(rx, Quaterniond())
        np.testing.assert_allclose(rx.premul(rz).to_numpy(), expected.to_numpy(), atol=1e-15)

    def test_mul_with_identity(self):
        """Test identity is neutral on both sides."""
        q = Quaterniond(1, 23.3, -7.57, 2.1)
        assert q.mul(Quaterniond(), Quaterniond()).equals(q, 1e-12)
        assert Quaterniond().mul(q, Quaterniond()).equals(q, 1e-12)

    def test_mul_with_conjugate(self):
        """Test q * conj(q) is (0, 0, 0, |q|^2)."""
        q = Quaterniond(1, 23.3, -7.57, 2.1)
        result = q.mul(q.conjugate(Quaterniond()), Quaterniond())
        np.testing.assert_allclose(result.to_numpy(), [0, 0, 0, q.dot(q)], atol=1e-10)

    def test_invert(self):
        """Test q * q^-1 is the identity for a non-unit quaternion."""
        q = Quaterniond(1, 2, 3, 4)
        result = q.mul(q.invert(Quaterniond()), Quaterniond())
        np.testing.assert_allclose(result.to_numpy(), [0, 0, 0, 1], atol=1e-12)

    def test_difference(self):
        """Test self * difference == other."""
        a = Quaterniond().rotation_xyz(0.1, 0.2, 0.3)
        b = Quaterniond().rotation_yxz(-0.4, 0.5, 1.2)
        d = a.difference(b, Quaterniond())
        np.testing.assert_allclose(a.mul(d, Quaterniond()).to_numpy(), b.to_numpy(), atol=1e-12)

    def test_angle(self):
        """Test angle extraction stays within [0, pi]."""
        assert Quaterniond().rotation_axis(2.0, 1, 1, 0).angle() == pytest.approx(2.0)
        assert Quaterniond().rotation_x(5.0).angle() == pytest.approx(2 * math.pi - 5.0)

    def test_euler_angles_round_trip(self):
        """Test get_euler_angles_xyz reproduces the rotation."""
        p = Quaterniond().rotate_xyz(0.3, -0.7, 1.1)
        a = p.get_euler_angles_xyz()
        q = Quaterniond().rotate_x(a.x).rotate_y(a.y).rotate_z(a.z)
        v = Vector3d(0.3, -0.6, 0.9)
        np.testing.assert_allclose(
            p.transform(v, Vector3d()).to_numpy(), q.transform(v, Vector3d()).to_numpy(),
            atol=1e-10,
        )

    def test_mul_operator(self):
        """Test ``*`` composes quaternions and rotates vectors without mutation."""
        q = Quaterniond().rotation_z(math.pi / 2)
        v = Vector3d(1, 0, 0)
        rotated = q * v
        assert v.to_list() == [1.0, 0.0, 0.0]
        np.testing.assert_allclose(rotated.to_numpy(), [0, 1, 0], atol=1e-12)
        assert_same_rotation(q * q, Quaterniond().rotation_z(math.pi))

    def test_precision_mixing_raises(self):
        """Test combining float and double quaternions raises TypeError."""
        with pytest.raises(TypeError):
            Quaterniond().mul(Quaternionf())


class TestQuaternionConversion:
    """Test conversions to and from matrices."""

    @pytest.mark.parametrize(("cls", "atol"), [(Quaternionf, 1e-5), (Quaterniond, 1e-12)])
    def test_matrix_round_trip(self, cls, atol):
        """Test quaternion -> matrix -> quaternion in both precisions."""
        q = cls().rotation_axis(1.2, 1, 2, 3)
        r = cls().set_from_normalized(q.to_matrix3())
        assert_same_rotation(q, r, atol=atol)

    @pytest.mark.parametrize(("cls", "atol"), [(Quaternionf, 1e-5), (Quaterniond, 1e-12)])
    def test_round_trip_large_angle(self, cls, atol):
        """Test the non-trace branches of the matrix conversion."""
        for axis in ((1, 0, 0), (0, 1, 0), (0, 0, 1), (1, -1, 0.5)):
            q = cls().rotation_axis(3.0, *axis)
            r = cls().set_from_normalized(q.to_matrix4())
            assert_same_rotation(q, r, atol=atol)

    def test_unnormalized_matrix(self):
        """Test scaled matrices are handled by set_from_unnormalized."""
        q = Quaterniond().rotation_axis(0.9, 0, 1, 1)
        m = q.to_matrix4().scale(2, 3, 4)
        assert_same_rotation(q, m.get_unnormalized_rotation())

    def test_to_matrix3_matches_euler_matrix(self):
        """Test to_matrix3 agrees with Matrix3.rotation_xyz."""
        q = Quaterniond().rotation_xyz(0.4, 0.5, 0.6)
        np.testing.assert_allclose(
            q.to_matrix3().to_numpy(), Matrix3d().rotation_xyz(0.4, 0.5, 0.6).to_numpy(),
            atol=1e-12,
        )

    def test_to_axis_angle(self):
        """Test conversion to axis-angle."""
        aa = Quaterniond().rotation_axis(1.0, 0, 1, 0).to_axis_angle()
        np.testing.assert_allclose(aa.to_numpy(), [1.0, 0.0, 1.0, 0.0], atol=1e-12)


class TestInterpolation:
    """Test slerp and nlerp."""

    def test_slerp_halfway(self):
        """Test slerp halfway between identity and a z rotation."""
        q = Quaterniond().slerp(Quaterniond().rotation_z(1.0), 0.5)
        expected = Quaterniond().rotation_z(0.5).to_numpy()
        np.testing.assert_allclose(q.to_numpy(), expected, atol=1e-12)

    def test_slerp_takes_shortest_arc(self):
        """Test slerp towards -q equals slerp towards q."""
        target = Quaterniond().rotation_z(1.0)
        negated = Quaterniond(*(-c for c in target))
        a = Quaterniond().slerp(target, 0.3, Quaterniond())
        b = Quaterniond().slerp(negated, 0.3, Quaterniond())
        np.testing.assert_allclose(a.to_numpy(), b.to_numpy(), atol=1e-12)

    def test_slerp_nearly_equal(self):
        """Test the linear fallback for nearly equal inputs."""
        a = Quaterniond().rotation_x(1e-9)
        q = Quaterniond().slerp(a, 0.5)
        assert np.all(np.isfinite(q.to_numpy()))
        assert abs(q.w - 1.0) < 1e-12

    def test_nlerp_endpoints(self):
        """Test nlerp returns the endpoints at alpha 0 and 1."""
        a = Quaterniond().rotation_y(0.2)
        b = Quaterniond().rotation_y(1.4)
        start = a.nlerp(b, 0.0, Quaterniond())
        np.testing.assert_allclose(start.to_numpy(), a.to_numpy(), atol=1e-12)
        end = a.nlerp(b, 1.0, Quaterniond())
        np.testing.assert_allclose(end.to_numpy(), b.to_numpy(), atol=1e-12)

    def test_nlerp_is_unit(self):
        """Test nlerp output has unit length."""
        q = Quaterniond().rotation_y(0.2).nlerp(Quaterniond().rotation_x(2.0), 0.4)
        assert abs(q.length_squared() - 1.0) < 1e-12


class TestAxisAngle:
    """Test AxisAngle conversions and operations."""

    def test_default(self):
        """Test default is the zero rotation about +z."""
        assert AxisAngled().to_list() == [0.0, 0.0, 0.0, 1.0]

    def test_from_identity_quaternion(self):
        """Test the identity quaternion maps to angle 0 about +z."""
        aa = AxisAngled().set_from_quaternion(Quaterniond())
        assert aa.to_list() == [0.0, 0.0, 0.0, 1.0]

    def test_from_negated_identity_quaternion(self):
        """Test w = -1 is the identity too."""
        aa = AxisAngled().set_from_quaternion(Quaterniond(0, 0, 0, -1))
        assert aa.to_list() == [0.0, 0.0, 0.0, 1.0]

    def test_from_non_unit_quaternion_propagates_nan(self):
        """Test |w| > 1 yields a NaN axis instead of the identity."""
        aa = AxisAngled().set_from_quaternion(Quaterniond(0.1, 0.0, 0.0, 1.5))
        assert all(math.isnan(c) for c in (aa.x, aa.y, aa.z))

    def test_from_half_turn_matrix(self):
        """Test a 180 degree rotation is recovered from its matrix."""
        aa = AxisAngled().set_from_matrix(Matrix3d().rotation_y(math.pi))
        np.testing.assert_allclose(aa.to_numpy(), [math.pi, 0.0, 1.0, 0.0], atol=1e-12)

    def test_from_identity_matrix(self):
        """Test the identity matrix maps to angle 0 about +z."""
        aa = AxisAngled().set_from_matrix(Matrix4d())
        assert aa.to_list() == [0.0, 0.0, 0.0, 1.0]

    def test_from_general_matrix(self):
        """Test axis and angle of an arbitrary rotation matrix."""
        aa = AxisAngled().set_from_matrix(Matrix3d().rotation_axis(0.7, 1, 2, 2))
        np.testing.assert_allclose(aa.to_numpy(), [0.7, 1 / 3, 2 / 3, 2 / 3], atol=1e-12)

    def test_from_scaled_matrix(self):
        """Test scale is divided out before extraction."""
        m = Matrix4d().rotation_axis(0.7, 1, 2, 2).scale(2, 3, 4)
        aa = AxisAngled().set_from_matrix(m)
        np.testing.assert_allclose(aa.to_numpy(), [0.7, 1 / 3, 2 / 3, 2 / 3], atol=1e-12)

    def test_transform(self):
        """Test Rodrigues rotation of a vector."""
        v = AxisAngled(math.pi / 2, 0, 0, 1).transform(Vector3d(1, 0, 0))
        np.testing.assert_allclose(v.to_numpy(), [0.0, 1.0, 0.0], atol=1e-12)

    def test_transform_matches_matrix(self):
        """Test transform agrees with the equivalent matrix."""
        aa = AxisAngled(1.3, 0.0, 0.6, 0.8)
        v = aa.transform(Vector3d(1, 2, 3), Vector3d())
        w = aa.to_matrix3().transform(Vector3d(1, 2, 3))
        np.testing.assert_allclose(v.to_numpy(), w.to_numpy(), atol=1e-12)

    def test_rotate_wraps(self):
        """Test rotate keeps the angle in [0, 2 pi)."""
        aa = AxisAngled(6.0, 0, 0, 1).rotate(1.0)
        assert aa.angle == pytest.approx(7.0 - 2 * math.pi)

    def test_normalize(self):
        """Test normalize scales the axis only."""
        aa = AxisAngled(0.5, 0, 3, 4).normalize()
        np.testing.assert_allclose(aa.to_numpy(), [0.5, 0.0, 0.6, 0.8])

    def test_quaternion_and_matrix_agree(self):
        """Test to_quaternion and to_matrix3 describe the same rotation."""
        aa = AxisAngled(2.1, 0.0, 0.6, 0.8)
        np.testing.assert_allclose(
            aa.to_matrix3().to_numpy(), aa.to_quaternion().to_matrix3().to_numpy(), atol=1e-12
        )

    def test_set_from_quaternion_rejects_other_kinds(self):
        """Test non-quaternion input raises TypeError."""
        with pytest.raises(TypeError, match="Expected a Quaternion"):
            AxisAngled().set_from_quaternion(Vector4d(0, 0, 0, 1))
