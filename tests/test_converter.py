"""Tests for converting documents between conventions."""

import numpy as np
from numpy.testing import assert_allclose

from bvhtools.core.conventions import Convention, from_bvh_rotation
from bvhtools.core.converter import convert_document, convert_text
from bvhtools.core.parser import parse
from bvhtools.data.document import ChannelKind


class TestConvertDocument:
    def test_offsets_and_positions(self, simple_bvh):
        document = parse(simple_bvh)
        converted = convert_document(document, Convention.STANDARD, Convention.BLENDER)

        # Engine (x, y, z) = (-x, y, z) in STANDARD and (-x, -z, y) in BLENDER.
        assert_allclose(converted.find_joint("Spine").offset, [0.0, 0.0, 10.0])
        assert_allclose(converted.root.positions(), [[1.0, -3.0, 2.0], [-1.0, 3.0, -2.0]])

    def test_rotations_describe_same_engine_rotation(self, simple_bvh):
        document = parse(simple_bvh)
        converted = convert_document(document, Convention.STANDARD, Convention.BLENDER)
        for before, after in zip(document.joints, converted.joints):
            a = from_bvh_rotation(before.rotations(), Convention.STANDARD)
            b = from_bvh_rotation(after.rotations(), Convention.BLENDER)
            assert_allclose(np.abs(np.sum(a * b, axis=-1)), 1.0, atol=1e-9)

    def test_round_trip(self, branching_bvh):
        document = parse(branching_bvh)
        there = convert_document(document, Convention.BLENDER, Convention.STANDARD)
        back = convert_document(there, Convention.STANDARD, Convention.BLENDER)
        assert_allclose(back.motion_matrix()[:, :3], document.motion_matrix()[:, :3], atol=1e-9)
        for before, after in zip(document.joints, back.joints):
            assert_allclose(after.offset, before.offset, atol=1e-12)
            a = from_bvh_rotation(before.rotations(), Convention.BLENDER)
            b = from_bvh_rotation(after.rotations(), Convention.BLENDER)
            assert_allclose(np.abs(np.sum(a * b, axis=-1)), 1.0, atol=1e-9)

    def test_source_untouched_and_structure_kept(self, branching_bvh):
        document = parse(branching_bvh)
        before = document.motion_matrix().copy()
        converted = convert_document(document, Convention.STANDARD, Convention.BLENDER)

        assert_allclose(document.motion_matrix(), before)
        assert converted.frame_count == document.frame_count
        assert converted.frame_time == document.frame_time
        assert [j.channel_order for j in converted.joints] == [j.channel_order for j in document.joints]
        assert not converted.root.values(ChannelKind.XROTATION).flags.writeable

    def test_partial_rotation_channels_unchanged(self, simple_bvh, caplog):
        text = (simple_bvh
                .replace("CHANNELS 3 Zrotation Xrotation Yrotation", "CHANNELS 2 Zrotation Xrotation")
                .replace("5.0 6.0 7.0", "5.0 6.0")
                .replace("0.0 0.0 0.0 0.0 0.0 0.0\n", "0.0 0.0 0.0 0.0 0.0\n"))
        document = parse(text)
        converted = convert_document(document, Convention.STANDARD, Convention.BLENDER)
        spine = converted.find_joint("Spine")
        assert_allclose(spine.values(ChannelKind.ZROTATION), [5.0, 0.0])
        assert_allclose(spine.values(ChannelKind.XROTATION), [6.0, 0.0])
        assert "partial rotation channel set" in caplog.text

    def test_partial_position_channels_unchanged(self, simple_bvh, caplog):
        text = (simple_bvh
                .replace("CHANNELS 6 Xposition Yposition Zposition", "CHANNELS 5 Xposition Yposition")
                .replace("1.0 2.0 3.0 10.0", "1.0 2.0 10.0")
                .replace("-1.0 -2.0 -3.0 0.0", "-1.0 -2.0 0.0"))
        document = parse(text)
        converted = convert_document(document, Convention.STANDARD, Convention.BLENDER)
        assert_allclose(converted.root.values(ChannelKind.XPOSITION), [1.0, -1.0])
        assert_allclose(converted.root.values(ChannelKind.YPOSITION), [2.0, -2.0])
        assert "partial position channel set" in caplog.text


class TestConvertText:
    def test_output_parses(self, simple_bvh):
        text = convert_text(simple_bvh, Convention.STANDARD, Convention.BLENDER)
        document = parse(text)
        assert [joint.name for joint in document.joints] == ["Hips", "Spine"]
        assert document.frame_count == 2

    def test_low_precision(self, simple_bvh):
        text = convert_text(simple_bvh, Convention.STANDARD, Convention.STANDARD, low_precision=True)
        first_frame = text.strip().splitlines()[-2]
        assert all(len(value.split(".")[1]) == 2 for value in first_frame.split("\t"))

    def test_same_convention_keeps_values(self, simple_bvh):
        text = convert_text(simple_bvh, Convention.STANDARD, Convention.STANDARD)
        assert_allclose(parse(text).motion_matrix(), parse(simple_bvh).motion_matrix(), atol=1e-6)
