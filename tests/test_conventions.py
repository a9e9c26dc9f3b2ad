"""Tests for the engine/BVH coordinate conventions."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from bvhtools.core.conventions import (
    Convention,
    euler_zxy,
    from_bvh_offset,
    from_bvh_rotation,
    from_euler_zxy,
    to_bvh_offset,
    to_bvh_rotation,
    wrap_angle,
    zxy_order,
)
from bvhtools.utils.math_utils import (
    AXIS_X,
    AXIS_Y,
    AXIS_Z,
    angle_axis,
    normalize_quaternion,
    quaternion_multiply,
)


def assert_same_rotation(a, b, atol=1e-6):
    """Quaternions q and -q describe the same rotation."""
    dots = np.abs(np.sum(np.asarray(a) * np.asarray(b), axis=-1))
    assert_allclose(dots, 1.0, atol=atol)


def random_quaternions(n, seed=0):
    rng = np.random.default_rng(seed)
    return normalize_quaternion(rng.normal(size=(n, 4)))


class TestWrapAngle:
    @pytest.mark.parametrize("angle, expected", [
        (181.0, -179.0),
        (-181.0, 179.0),
        (180.0, 180.0),
        (-180.0, -180.0),
        (0.0, 0.0),
        (359.0, -1.0),
    ])
    def test_scalar(self, angle, expected):
        assert wrap_angle(angle) == pytest.approx(expected)
        assert isinstance(wrap_angle(angle), float)

    def test_array(self):
        assert_allclose(wrap_angle(np.array([190.0, -190.0, 45.0])), [-170.0, 170.0, 45.0])


class TestEulerZXY:
    def test_single_axis_rotations(self):
        assert_allclose(euler_zxy(angle_axis(30.0, AXIS_X)), [30.0, 0.0, 0.0], atol=1e-9)
        assert_allclose(euler_zxy(angle_axis(40.0, AXIS_Y)), [0.0, 40.0, 0.0], atol=1e-9)
        assert_allclose(euler_zxy(angle_axis(50.0, AXIS_Z)), [0.0, 0.0, 50.0], atol=1e-9)

    def test_composition_order(self):
        expected = quaternion_multiply(
            quaternion_multiply(angle_axis(30.0, AXIS_Z), angle_axis(20.0, AXIS_X)),
            angle_axis(10.0, AXIS_Y),
        )
        assert_allclose(from_euler_zxy([20.0, 10.0, 30.0]), expected, atol=1e-12)

    def test_decomposition_inverts_composition(self):
        rng = np.random.default_rng(1)
        euler = np.column_stack([
            rng.uniform(-85.0, 85.0, 50),
            rng.uniform(-179.0, 179.0, 50),
            rng.uniform(-179.0, 179.0, 50),
        ])
        assert_allclose(euler_zxy(from_euler_zxy(euler)), euler, atol=1e-8)

    def test_identity(self):
        assert_allclose(euler_zxy([0.0, 0.0, 0.0, 1.0]), [0.0, 0.0, 0.0], atol=1e-12)

    def test_gimbal_lock_is_finite(self):
        q = angle_axis(90.0, AXIS_X)
        euler = euler_zxy(q)
        assert np.all(np.isfinite(euler))
        assert euler[0] == pytest.approx(90.0)
        assert_same_rotation(from_euler_zxy(euler), q)


class TestRotationConventions:
    @pytest.mark.parametrize("convention", list(Convention))
    def test_round_trip(self, convention):
        quats = random_quaternions(100)
        euler = to_bvh_rotation(quats, convention)
        assert np.all(euler > -180.0) and np.all(euler <= 180.0)
        assert_same_rotation(from_bvh_rotation(euler, convention), quats)

    def test_standard_negates_y_and_z(self):
        q = angle_axis(30.0, AXIS_Y)
        assert_allclose(to_bvh_rotation(q, Convention.STANDARD), [0.0, -30.0, 0.0], atol=1e-9)
        q = angle_axis(30.0, AXIS_X)
        assert_allclose(to_bvh_rotation(q, Convention.STANDARD), [30.0, 0.0, 0.0], atol=1e-9)

    def test_blender_swaps_y_and_z(self):
        # Engine Y (up) becomes BVH -Z; engine Z becomes BVH Y.
        q = angle_axis(30.0, AXIS_Y)
        assert_allclose(to_bvh_rotation(q, Convention.BLENDER), [0.0, 0.0, -30.0], atol=1e-9)
        q = angle_axis(30.0, AXIS_Z)
        assert_allclose(to_bvh_rotation(q, Convention.BLENDER), [0.0, 30.0, 0.0], atol=1e-9)

    def test_decode_wraps_input(self):
        a = from_bvh_rotation(np.array([0.0, 0.0, 370.0]), Convention.STANDARD)
        b = from_bvh_rotation(np.array([0.0, 0.0, 10.0]), Convention.STANDARD)
        assert_same_rotation(a, b)

    def test_unnormalized_input(self):
        q = angle_axis(25.0, AXIS_Z) * 3.0
        euler = to_bvh_rotation(q, Convention.STANDARD)
        assert_allclose(euler, [0.0, 0.0, -25.0], atol=1e-9)


class TestOffsetConventions:
    def test_standard_mirrors_x(self):
        assert_allclose(to_bvh_offset([1.0, 2.0, 3.0], Convention.STANDARD), [-1.0, 2.0, 3.0])
        assert_allclose(from_bvh_offset([1.0, 2.0, 3.0], Convention.STANDARD), [-1.0, 2.0, 3.0])

    def test_blender_remap(self):
        assert_allclose(to_bvh_offset([1.0, 2.0, 3.0], Convention.BLENDER), [-1.0, -3.0, 2.0])
        assert_allclose(from_bvh_offset([1.0, 2.0, 3.0], Convention.BLENDER), [-1.0, 3.0, -2.0])

    @pytest.mark.parametrize("convention", list(Convention))
    def test_round_trip(self, convention):
        offsets = np.random.default_rng(2).normal(size=(20, 3))
        assert_allclose(from_bvh_offset(to_bvh_offset(offsets, convention), convention), offsets)

    def test_scale_compensation(self):
        result = to_bvh_offset([2.0, 4.0, 6.0], Convention.STANDARD, scale=[2.0, 4.0, 0.5])
        assert_allclose(result, [-1.0, 1.0, 12.0])


class TestHelpers:
    def test_zxy_order(self):
        assert_allclose(zxy_order([1.0, 2.0, 3.0]), [3.0, 1.0, 2.0])
        assert_allclose(zxy_order([[1.0, 2.0, 3.0]]), [[3.0, 1.0, 2.0]])

    def test_from_flag(self):
        assert Convention.from_flag(True) is Convention.BLENDER
        assert Convention.from_flag(False) is Convention.STANDARD
