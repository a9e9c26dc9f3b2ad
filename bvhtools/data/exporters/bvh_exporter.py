"""
BVH (Biovision Hierarchy) format exporter.

Writes skeletons and captured poses as BVH text:
1. HIERARCHY section - joint tree with rest offsets and channels
2. MOTION section - one tab-separated line of channel values per frame

The root joint carries six channels (position, then Z/X/Y rotation); every
other joint carries the three rotation channels only.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from bvhtools.core.conventions import (
    Convention,
    to_bvh_offset,
    to_bvh_rotation,
    zxy_order,
)
from bvhtools.data.document import BVHDocument, BVHJoint
from bvhtools.data.skeleton import PoseSnapshot, SkeletonNode

ROOT_CHANNELS = "CHANNELS 6 Xposition Yposition Zposition Zrotation Xrotation Yrotation"
JOINT_CHANNELS = "CHANNELS 3 Zrotation Xrotation Yrotation"

# Offset written for a root joint that has no children, so the leaf has length.
DEFAULT_END_SITE = "\tEnd Site\n\t{\n\t\tOFFSET\t1.0\t0.0\t0.0\n\t}\n"


def tabs(n: int) -> str:
    return "\t" * n


def format_frame_time(frame_time: float) -> str:
    """Shortest text that reads back as the same float."""
    return repr(float(frame_time))


class BVHExporter:
    """
    Formats skeletons and poses as BVH text.

    Args:
        convention: Axis convention to write
        low_precision: Write two decimals instead of six
        scale: Rig scale; offsets and root positions are divided by it
    """

    def __init__(
        self,
        convention: Convention = Convention.BLENDER,
        low_precision: bool = False,
        scale: Optional[Sequence[float]] = None,
    ):
        self.convention = convention
        self.low_precision = low_precision
        self.scale = None if scale is None else np.asarray(scale, dtype=float)

    @property
    def number_format(self) -> str:
        # A space stands in for the sign of non-negative numbers.
        return " .2f" if self.low_precision else " .6f"

    def format_values(self, values: Sequence[float]) -> str:
        # Adding 0.0 turns -0.0 into 0.0.
        return "\t".join(format(float(v) + 0.0, self.number_format) for v in values)

    def format_offset(self, offset: np.ndarray) -> str:
        """Scale-compensate, remap and format a rig-space displacement."""
        return self.format_values(to_bvh_offset(offset, self.convention, self.scale))

    def format_rotation(self, rotation: np.ndarray) -> str:
        """Format a quaternion as its Z, X, Y Euler channel values."""
        return self.format_values(zxy_order(to_bvh_rotation(rotation, self.convention)))

    # Hierarchy

    def _write_joint(self, level: int, joint: SkeletonNode) -> str:
        indent = tabs(level)
        offset = self.format_offset(joint.rest_offset)
        result = (
            f"{indent}JOINT {joint.name}\n{indent}{{\n"
            f"{indent}\tOFFSET\t{offset}\n"
            f"{indent}\t{JOINT_CHANNELS}\n"
        )

        if joint.children:
            for child in joint.children:
                result += self._write_joint(level + 1, child)
        else:
            end = tabs(level + 1)
            result += f"{end}End Site\n{end}{{\n{end}\tOFFSET\t{offset}\n{end}}}\n"

        result += f"{indent}}}\n"
        return result

    def write_hierarchy(self, skeleton: SkeletonNode) -> str:
        """HIERARCHY section for a skeleton, including the trailing newline."""
        hierarchy = (
            f"HIERARCHY\nROOT {skeleton.name}\n{{\n"
            f"\tOFFSET\t0.00\t0.00\t0.00\n"
            f"\t{ROOT_CHANNELS}\n"
        )
        if skeleton.children:
            for child in skeleton.children:
                hierarchy += self._write_joint(1, child)
        else:
            hierarchy += DEFAULT_END_SITE
        hierarchy += "}\n"
        return hierarchy

    # Motion

    def encode_frame(self, pose: PoseSnapshot) -> str:
        """One motion line: root position then Z/X/Y rotations in joint order."""
        fields = [self.format_offset(pose.root_position)]
        for rotation in pose.rotations:
            fields.append(self.format_rotation(rotation))
        return "\t".join(fields) + "\n"

    @staticmethod
    def write_motion(frames: Sequence[str], frame_time: float) -> str:
        motion = f"MOTION\nFrames:    {len(frames)}\nFrame Time: {format_frame_time(frame_time)}\n"
        return motion + "".join(frames)

    def write(
        self,
        skeleton: SkeletonNode,
        frames: Sequence[Union[str, PoseSnapshot]],
        frame_time: float,
    ) -> str:
        """
        Complete BVH text for a skeleton and its captured frames.

        Args:
            skeleton: Skeleton to write
            frames: Encoded motion lines or raw pose snapshots
            frame_time: Seconds per frame

        Returns:
            BVH text
        """
        lines = [
            frame if isinstance(frame, str) else self.encode_frame(frame)
            for frame in frames
        ]
        return self.write_hierarchy(skeleton) + self.write_motion(lines, frame_time)

    # Documents

    def _write_document_joint(self, lines: List[str], joint: BVHJoint, level: int, root: bool):
        indent = tabs(level)
        keyword = "ROOT" if root else "JOINT"
        lines.append(f"{indent}{keyword} {joint.name}")
        lines.append(f"{indent}{{")
        lines.append(f"{indent}\tOFFSET\t{self.format_values(joint.offset)}")
        channels = " ".join(kind.token for kind in joint.channel_order)
        lines.append(f"{indent}\tCHANNELS {joint.channel_count} {channels}")

        if joint.children:
            for child in joint.children:
                self._write_document_joint(lines, child, level + 1, False)
        else:
            end = tabs(level + 1)
            lines.append(f"{end}End Site")
            lines.append(f"{end}{{")
            lines.append(f"{end}\tOFFSET\t{self.format_values(joint.offset)}")
            lines.append(f"{end}}}")

        lines.append(f"{indent}}}")

    def write_document(self, document: BVHDocument) -> str:
        """
        Write a parsed document back out, keeping its declared channel order.

        Values are written as stored; no convention remapping is applied.
        """
        lines = ["HIERARCHY"]
        self._write_document_joint(lines, document.root, 0, True)
        hierarchy = "\n".join(lines) + "\n"

        motion = document.motion_matrix()
        frames = [self.format_values(row) + "\n" for row in motion]
        return hierarchy + self.write_motion(frames, document.frame_time)


def serialize(
    skeleton: SkeletonNode,
    frames: Sequence[Union[str, PoseSnapshot]],
    frame_time: float,
    low_precision: bool = False,
    convention: Convention = Convention.BLENDER,
    scale: Optional[Sequence[float]] = None,
) -> str:
    """Serialize a skeleton and its frames to BVH text."""
    exporter = BVHExporter(convention=convention, low_precision=low_precision, scale=scale)
    return exporter.write(skeleton, frames, frame_time)
