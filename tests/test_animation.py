"""Tests for animation clips and curves."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from bvhtools.data.animation import (
    POSITION_PROPERTIES,
    ROTATION_PROPERTIES,
    AnimationClip,
    Curve,
)
from bvhtools.utils.math_utils import AXIS_Z, angle_axis


def set_rotations(clip, path, times, quats):
    quats = np.asarray(quats, dtype=float)
    for axis, prop in enumerate(ROTATION_PROPERTIES):
        clip.set_curve(path, prop, times, quats[:, axis])


class TestCurve:
    def test_evaluate_interpolates_and_clamps(self):
        curve = Curve(times=[1.0, 2.0], values=[0.0, 10.0])
        assert curve.evaluate(1.5) == pytest.approx(5.0)
        assert curve.evaluate(0.0) == pytest.approx(0.0)
        assert curve.evaluate(3.0) == pytest.approx(10.0)
        assert curve.duration == pytest.approx(2.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            Curve(times=[0.0, 1.0], values=[1.0])

    def test_empty_curve(self):
        curve = Curve(times=[], values=[])
        assert curve.num_keys == 0
        assert curve.duration == 0.0
        assert curve.evaluate(1.0) == 0.0


class TestAnimationClip:
    def test_default_names_are_unique(self):
        first, second = AnimationClip(), AnimationClip()
        assert first.name.startswith("BVHClip (")
        assert first.name != second.name
        assert AnimationClip(name="Run").name == "Run"

    def test_curve_storage(self):
        clip = AnimationClip()
        times = np.array([0.1, 0.2])
        for axis, prop in enumerate(POSITION_PROPERTIES):
            clip.set_curve("Hips", prop, times, np.array([axis, axis + 1.0]))

        assert clip.paths == ["Hips"]
        assert clip.has_position("Hips")
        assert not clip.has_rotation("Hips")
        assert clip.curve_count == 3
        assert clip.duration == pytest.approx(0.2)
        assert clip.get_curve("Hips", "position.y").values[1] == pytest.approx(2.0)
        assert clip.get_curve("Spine", "position.y") is None

    def test_quaternion_continuity(self):
        clip = AnimationClip()
        q = angle_axis(np.array([0.0, 10.0, 20.0, 30.0]), AXIS_Z)
        flipped = q * np.array([[1.0], [-1.0], [-1.0], [1.0]])
        set_rotations(clip, "Hips", np.arange(4) / 30.0, flipped)

        clip.ensure_quaternion_continuity()
        _, quats = clip.rotation_keys("Hips")
        assert_allclose(quats, q, atol=1e-12)

    def test_continuity_keeps_first_key(self):
        clip = AnimationClip()
        q = -angle_axis(np.array([0.0, 10.0]), AXIS_Z)
        set_rotations(clip, "Hips", [0.0, 1.0], q)
        clip.ensure_quaternion_continuity()
        _, quats = clip.rotation_keys("Hips")
        assert_allclose(quats, q)

    def test_sample_position(self):
        clip = AnimationClip()
        for axis, prop in enumerate(POSITION_PROPERTIES):
            clip.set_curve("Hips", prop, [0.0, 1.0], [0.0, 2.0 * (axis + 1)])
        assert_allclose(clip.sample_position("Hips", 0.5), [1.0, 2.0, 3.0])

    def test_sample_rotation_slerps(self):
        clip = AnimationClip()
        set_rotations(clip, "Hips", [0.0, 1.0], angle_axis(np.array([0.0, 90.0]), AXIS_Z))
        result = clip.sample_rotation("Hips", 0.5)
        expected = angle_axis(45.0, AXIS_Z)
        assert abs(np.dot(result, expected)) == pytest.approx(1.0)

    def test_sample_groups(self):
        clip = AnimationClip()
        set_rotations(clip, "Hips/Spine", [0.0], angle_axis(np.array([30.0]), AXIS_Z))
        sample = clip.sample("Hips/Spine", 5.0)
        assert set(sample) == {"rotation"}
        assert abs(np.dot(sample["rotation"], angle_axis(30.0, AXIS_Z))) == pytest.approx(1.0)
