"""
Data structures for BVH documents, rigs and animation.

Provides:
- Parsed BVH documents (joints, channels, motion values)
- Rig scene graph and recording skeletons
- Animation clips holding decoded curves
"""

from bvhtools.data.document import (
    BVHDocument,
    BVHJoint,
    Channel,
    ChannelKind,
)
from bvhtools.data.rig import Rig, RigNode
from bvhtools.data.skeleton import (
    SkeletonNode,
    PoseSnapshot,
    build_skeleton,
    capture_pose,
)
from bvhtools.data.animation import AnimationClip, Curve

__all__ = [
    "BVHDocument",
    "BVHJoint",
    "Channel",
    "ChannelKind",
    "Rig",
    "RigNode",
    "SkeletonNode",
    "PoseSnapshot",
    "build_skeleton",
    "capture_pose",
    "AnimationClip",
    "Curve",
]
