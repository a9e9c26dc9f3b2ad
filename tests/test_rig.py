"""Tests for the rig scene graph and math helpers."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from bvhtools.data.rig import Rig, RigNode
from bvhtools.utils.math_utils import (
    AXIS_Y,
    AXIS_Z,
    IDENTITY_QUATERNION,
    angle_axis,
    quaternion_inverse,
    quaternion_multiply,
    quaternion_to_matrix,
)


class TestQuaternionMath:
    def test_multiply_composes_rotations(self):
        q = quaternion_multiply(angle_axis(30.0, AXIS_Z), angle_axis(60.0, AXIS_Z))
        assert_allclose(q, angle_axis(90.0, AXIS_Z), atol=1e-12)

    def test_inverse(self):
        q = angle_axis(40.0, [0.0, 0.6, 0.8])
        assert_allclose(quaternion_multiply(q, quaternion_inverse(q)), IDENTITY_QUATERNION, atol=1e-12)

    def test_matrix_rotates_vectors(self):
        q = angle_axis(90.0, AXIS_Z)
        v = np.array([1.0, 0.0, 0.0])
        assert_allclose(quaternion_to_matrix(q) @ v, [0.0, 1.0, 0.0], atol=1e-12)

    def test_angle_axis_batches(self):
        q = angle_axis(np.array([0.0, 180.0]), AXIS_Y)
        assert q.shape == (2, 4)
        assert_allclose(q[1], [0.0, 1.0, 0.0, 0.0], atol=1e-12)


class TestRigNode:
    def test_hierarchy_helpers(self, rig):
        hips = rig.find("Hips")
        head = rig.find("Head")
        assert head.is_child_of(hips)
        assert head.is_child_of(head)
        assert not hips.is_child_of(head)
        assert head.path_from(rig) == "Hips/Spine/Head"
        assert hips.child_count == 2
        assert [node.name for node in rig.bones()] == ["Hips", "Spine", "Head", "LeftArm", "LeftLeg"]
        assert rig.nodes()[0] is rig

    def test_path_from_non_ancestor(self, rig):
        with pytest.raises(ValueError):
            rig.find("Head").path_from(rig.find("LeftLeg"))

    def test_add_child_reparents(self, rig):
        leg = rig.find("LeftLeg")
        spine = rig.find("Spine")
        spine.add_child(leg)
        assert leg.parent is spine
        assert leg not in rig.find("Hips").children

    def test_world_transforms(self, rig):
        hips = rig.find("Hips")
        hips.set_rotation(angle_axis(90.0, AXIS_Z))
        spine = rig.find("Spine")
        # Spine sits 0.5 up from Hips; a 90 degree turn about Z moves it to -X.
        assert_allclose(spine.world_position(), [-0.5, 1.0, 0.0], atol=1e-12)
        assert_allclose(spine.world_rotation(), angle_axis(90.0, AXIS_Z), atol=1e-12)

    def test_rig_placement(self):
        rig = Rig(position=(10.0, 0.0, 0.0), scale=(2.0, 2.0, 2.0))
        hips = rig.add("Hips", position=(0.0, 1.0, 0.0))
        assert_allclose(hips.world_position(), [10.0, 2.0, 0.0])
        assert_allclose(hips.lossy_scale(), [2.0, 2.0, 2.0])

    def test_origin_evaluation_keeps_scale(self):
        rig = Rig(position=(10.0, 0.0, 0.0), rotation=angle_axis(90.0, AXIS_Y), scale=(2.0, 2.0, 2.0))
        hips = rig.add("Hips", position=(0.0, 1.0, 0.0))
        assert_allclose(hips.world_position(origin=rig), [0.0, 2.0, 0.0], atol=1e-12)
        assert_allclose(hips.world_rotation(origin=rig), IDENTITY_QUATERNION)
        # The rig itself is left untouched.
        assert_allclose(rig.position, [10.0, 0.0, 0.0])

    def test_inverse_transform_point(self, rig):
        hips = rig.find("Hips")
        point = np.array([[0.0, 1.5, 0.0], [1.0, 1.0, 0.0]])
        assert_allclose(hips.inverse_transform_point(point), [[0.0, 0.5, 0.0], [1.0, 0.0, 0.0]], atol=1e-12)

    def test_rotation_is_normalized(self):
        node = RigNode("Bone", local_rotation=[0.0, 0.0, 2.0, 0.0])
        assert_allclose(node.local_rotation, [0.0, 0.0, 1.0, 0.0])
