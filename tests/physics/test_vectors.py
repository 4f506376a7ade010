"""Tests for Vector3 and Quaternion."""

import dataclasses
import math

import pytest

from fpvdrone.physics.vectors import Quaternion, Vector3


def assert_vector_approx(actual: Vector3, expected: Vector3, abs_tol: float = 1e-9) -> None:
    assert actual.to_tuple() == pytest.approx(expected.to_tuple(), abs=abs_tol)


class TestVector3:
    """Test Vector3 arithmetic."""

    def test_arithmetic(self) -> None:
        """Test componentwise operators and scalar scaling."""
        a = Vector3(1.0, 2.0, 3.0)
        b = Vector3(4.0, -5.0, 6.0)

        assert a + b == Vector3(5.0, -3.0, 9.0)
        assert a - b == Vector3(-3.0, 7.0, -3.0)
        assert a * 2.0 == Vector3(2.0, 4.0, 6.0)
        assert 2.0 * a == Vector3(2.0, 4.0, 6.0)
        assert a / 2.0 == Vector3(0.5, 1.0, 1.5)
        assert -a == Vector3(-1.0, -2.0, -3.0)

    def test_dot(self) -> None:
        """Test dot product."""
        assert Vector3(1.0, 0.0, 0.0).dot(Vector3(0.0, 1.0, 0.0)) == 0.0
        assert Vector3(1.0, 2.0, 3.0).dot(Vector3(4.0, -5.0, 6.0)) == 12.0

    def test_magnitude(self) -> None:
        """Test magnitude and normalization."""
        v = Vector3(3.0, 4.0, 0.0)
        assert v.magnitude() == pytest.approx(5.0)
        assert v.magnitude_squared() == pytest.approx(25.0)
        assert v.normalized().magnitude() == pytest.approx(1.0)

    def test_normalized_zero_vector(self) -> None:
        """Test normalizing the zero vector yields zero."""
        assert Vector3.zero().normalized() == Vector3.zero()

    def test_lerp(self) -> None:
        """Test linear interpolation."""
        a = Vector3(0.0, 0.0, 0.0)
        b = Vector3(10.0, -10.0, 4.0)
        assert a.lerp(b, 0.0) == a
        assert a.lerp(b, 1.0) == b
        assert a.lerp(b, 0.25) == Vector3(2.5, -2.5, 1.0)

    def test_clamped_magnitude(self) -> None:
        """Test long vectors are scaled down and short ones kept."""
        v = Vector3(30.0, 40.0, 0.0)
        clamped = v.clamped_magnitude(10.0)
        assert clamped.magnitude() == pytest.approx(10.0)
        assert_vector_approx(clamped, Vector3(6.0, 8.0, 0.0))
        assert Vector3(1.0, 0.0, 0.0).clamped_magnitude(10.0) == Vector3(1.0, 0.0, 0.0)

    def test_is_finite(self) -> None:
        """Test NaN and infinity detection."""
        assert Vector3(1.0, 2.0, 3.0).is_finite()
        assert not Vector3(math.nan, 0.0, 0.0).is_finite()
        assert not Vector3(0.0, math.inf, 0.0).is_finite()

    def test_from_sequence(self) -> None:
        """Test building from a three-element list."""
        assert Vector3.from_sequence([0, 0.1, -0.2]) == Vector3(0.0, 0.1, -0.2)
        with pytest.raises(ValueError, match="expected 3 components"):
            Vector3.from_sequence([1.0, 2.0])

    def test_immutable(self) -> None:
        """Test vectors cannot be mutated."""
        v = Vector3(1.0, 2.0, 3.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.x = 5.0  # type: ignore[misc]


class TestQuaternion:
    """Test Quaternion rotation math."""

    def test_identity_rotation(self) -> None:
        """Test identity leaves vectors unchanged."""
        v = Vector3(1.0, 2.0, 3.0)
        assert_vector_approx(Quaternion.identity().rotate(v), v)

    def test_rotate_about_y(self) -> None:
        """Test positive rotation about +Y turns +X toward -Z."""
        q = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), math.pi / 2)
        assert_vector_approx(q.rotate(Vector3(1.0, 0.0, 0.0)), Vector3(0.0, 0.0, -1.0))

    def test_rotate_about_z(self) -> None:
        """Test positive rotation about +Z turns +Y toward -X."""
        q = Quaternion.from_axis_angle(Vector3(0.0, 0.0, 1.0), math.pi / 2)
        assert_vector_approx(q.rotate(Vector3(0.0, 1.0, 0.0)), Vector3(-1.0, 0.0, 0.0))

    def test_product_applies_right_operand_first(self) -> None:
        """Test q_a * q_b rotates by q_b in q_a's frame."""
        qa = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), math.pi / 2)
        qb = Quaternion.from_axis_angle(Vector3(1.0, 0.0, 0.0), math.pi / 2)
        v = Vector3(0.0, 1.0, 0.0)

        assert_vector_approx((qa * qb).rotate(v), qa.rotate(qb.rotate(v)))

    def test_conjugate_undoes_rotation(self) -> None:
        """Test the conjugate applies the inverse rotation."""
        q = Quaternion.from_euler_yxz(0.3, -1.2, 0.7)
        v = Vector3(1.0, -2.0, 0.5)
        assert_vector_approx(q.conjugate().rotate(q.rotate(v)), v)

    def test_normalized(self) -> None:
        """Test normalization gives unit norm."""
        q = Quaternion(1.0, 2.0, 3.0, 4.0).normalized()
        assert q.norm() == pytest.approx(1.0)

    def test_normalized_zero_is_identity(self) -> None:
        """Test normalizing a zero quaternion falls back to identity."""
        assert Quaternion(0.0, 0.0, 0.0, 0.0).normalized() == Quaternion.identity()

    def test_euler_yxz_round_trip(self) -> None:
        """Test YXZ Euler angles decompose back to their inputs."""
        q = Quaternion.from_euler_yxz(0.3, 0.5, -0.2)
        pitch, yaw, roll = q.to_euler_yxz()
        assert pitch == pytest.approx(0.3)
        assert yaw == pytest.approx(0.5)
        assert roll == pytest.approx(-0.2)

    def test_euler_pitch_independent_of_heading(self) -> None:
        """Test pitch and roll read the same whatever the yaw."""
        for yaw in (0.0, 1.0, -2.5, math.pi * 0.9):
            pitch, _, roll = Quaternion.from_euler_yxz(0.4, yaw, 0.1).to_euler_yxz()
            assert pitch == pytest.approx(0.4)
            assert roll == pytest.approx(0.1)

    def test_euler_gimbal_lock(self) -> None:
        """Test straight-up pitch folds roll into yaw."""
        pitch, _, roll = Quaternion.from_euler_yxz(math.pi / 2, 0.3, 0.0).to_euler_yxz()
        assert pitch == pytest.approx(math.pi / 2, abs=1e-3)
        assert roll == 0.0

    def test_is_finite(self) -> None:
        """Test NaN detection."""
        assert Quaternion.identity().is_finite()
        assert not Quaternion(math.nan, 0.0, 0.0, 1.0).is_finite()
