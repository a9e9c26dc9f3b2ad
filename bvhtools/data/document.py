"""
In-memory representation of a parsed BVH file.

Provides:
- ChannelKind: the six animatable degrees of freedom
- Channel: per-joint channel slot with its per-frame values
- BVHJoint: named node with offset, channel set and children
- BVHDocument: joint tree plus frame count and frame time
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterator, List, Optional

import numpy as np


class ChannelKind(IntEnum):
    """Channel kinds, position kinds first and rotation kinds offset by 3."""
    XPOSITION = 0
    YPOSITION = 1
    ZPOSITION = 2
    XROTATION = 3
    YROTATION = 4
    ZROTATION = 5

    @property
    def axis(self) -> int:
        """Axis index 0-2 (X, Y, Z)."""
        return int(self) % 3

    @property
    def is_rotation(self) -> bool:
        return self >= ChannelKind.XROTATION

    @property
    def token(self) -> str:
        """Channel token as written in the CHANNELS line."""
        kind = "rotation" if self.is_rotation else "position"
        return "XYZ"[self.axis] + kind

    @classmethod
    def from_axis(cls, axis: int, rotation: bool) -> "ChannelKind":
        return cls(axis + (3 if rotation else 0))


POSITION_KINDS = (ChannelKind.XPOSITION, ChannelKind.YPOSITION, ChannelKind.ZPOSITION)
ROTATION_KINDS = (ChannelKind.XROTATION, ChannelKind.YROTATION, ChannelKind.ZROTATION)


@dataclass
class Channel:
    """
    A single channel slot of a joint.

    Disabled channels have no value array; absence is not the same as zero.
    """
    kind: ChannelKind
    enabled: bool = False
    values: Optional[np.ndarray] = None


def _empty_channels() -> List[Channel]:
    return [Channel(kind) for kind in ChannelKind]


@dataclass(eq=False)
class BVHJoint:
    """
    Joint of a BVH hierarchy.

    Attributes:
        name: Joint name
        offset: Rest offset from the parent joint (x, y, z)
        channels: Six slots indexed by ChannelKind
        channel_order: Channel kinds in the order the file declared them
        children: Child joints in file order
    """
    name: str
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    channels: List[Channel] = field(default_factory=_empty_channels)
    channel_order: List[ChannelKind] = field(default_factory=list)
    children: List["BVHJoint"] = field(default_factory=list)

    @property
    def channel_count(self) -> int:
        return len(self.channel_order)

    def has_channel(self, kind: ChannelKind) -> bool:
        return self.channels[kind].enabled

    def values(self, kind: ChannelKind) -> Optional[np.ndarray]:
        """Per-frame values of a channel, or None if it is not declared."""
        return self.channels[kind].values

    @property
    def has_positions(self) -> bool:
        """True when all three position channels are declared."""
        return all(self.has_channel(kind) for kind in POSITION_KINDS)

    @property
    def has_rotations(self) -> bool:
        """True when all three rotation channels are declared."""
        return all(self.has_channel(kind) for kind in ROTATION_KINDS)

    def positions(self) -> np.ndarray:
        """Stacked (frames, 3) position values in X, Y, Z order."""
        return np.stack([self.values(kind) for kind in POSITION_KINDS], axis=-1)

    def rotations(self) -> np.ndarray:
        """Stacked (frames, 3) Euler values in X, Y, Z order, degrees."""
        return np.stack([self.values(kind) for kind in ROTATION_KINDS], axis=-1)

    def iter_joints(self) -> Iterator["BVHJoint"]:
        """Iterate over this joint and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_joints()


@dataclass(eq=False)
class BVHDocument:
    """
    A parsed BVH file.

    The flat joint list (pre-order, root first) defines the column order of
    the motion section.
    """
    root: BVHJoint
    frame_count: int = 0
    frame_time: float = 1.0 / 60.0

    @property
    def joints(self) -> List[BVHJoint]:
        return list(self.root.iter_joints())

    @property
    def frame_rate(self) -> float:
        return 1.0 / self.frame_time if self.frame_time > 0 else 0.0

    @property
    def duration(self) -> float:
        return self.frame_count * self.frame_time

    @property
    def channel_count(self) -> int:
        """Total number of motion columns."""
        return sum(joint.channel_count for joint in self.joints)

    def find_joint(self, name: str) -> Optional[BVHJoint]:
        for joint in self.root.iter_joints():
            if joint.name == name:
                return joint
        return None

    def joint_map(self) -> Dict[str, BVHJoint]:
        return {joint.name: joint for joint in self.joints}

    def motion_matrix(self) -> np.ndarray:
        """
        Motion data as a (frames, columns) array in file column order.
        """
        columns = [
            joint.values(kind)
            for joint in self.joints
            for kind in joint.channel_order
        ]
        if not columns:
            return np.zeros((self.frame_count, 0))
        return np.stack(columns, axis=-1)
