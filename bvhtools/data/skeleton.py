"""
Skeleton trees for recording.

Provides:
- SkeletonNode: a named joint stand-in bound to a rig node
- build_skeleton: minimal tree spanning a set of bones
- PoseSnapshot / capture_pose: read-only capture of the current pose
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Set

import numpy as np

from bvhtools.core.errors import PreconditionError
from bvhtools.data.rig import RigNode

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SkeletonNode:
    """
    Joint of a skeleton built over a rig.

    Attributes:
        name: Joint name written to the BVH file
        node: Rig node this joint reads its pose from
        rest_offset: Displacement from the parent joint with every rotation
            at identity, in rig space (before scale compensation)
        children: Child joints
    """
    name: str
    node: RigNode
    rest_offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    children: List["SkeletonNode"] = field(default_factory=list)

    def iter_nodes(self) -> Iterator["SkeletonNode"]:
        """This joint and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    @property
    def joint_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())


def cleanup_bones(bones: Iterable[Optional[RigNode]]) -> List[RigNode]:
    """Drop empty entries from a bone list."""
    return [bone for bone in bones if bone is not None]


def get_root_bone(bones: Iterable[RigNode]) -> Optional[RigNode]:
    """
    Find the bone all other listed bones descend from.

    Starts from the first bone and moves up to any listed bone that contains
    the current candidate.
    """
    root = None
    for bone in bones:
        if root is None:
            root = bone
        if root.is_child_of(bone) and bone is not root:
            root = bone
    return root


def _has_bone(bone_set: Set[RigNode], bone: RigNode) -> bool:
    """
    Check whether ``bone`` is a listed bone or has one below it.

    A listed bone that is found is removed from the set.
    """
    result = False
    for other in bone_set:
        if other is bone:
            bone_set.discard(bone)
            return True
        if other.is_child_of(bone):
            result = True
    return result


def _joint_name(node: RigNode, bone_map: Optional[Dict[RigNode, str]]) -> str:
    name = node.name
    if bone_map:
        if node in bone_map:
            return bone_map[node]
        if name in bone_map.values():
            return name + "_"
    return name


def _rest_offset(node: RigNode) -> np.ndarray:
    if node.parent is None:
        return np.zeros(3)
    return node.parent.lossy_scale() * node.local_position


def build_skeleton(
    bones: Iterable[Optional[RigNode]],
    bone_map: Optional[Dict[RigNode, str]] = None,
) -> SkeletonNode:
    """
    Build the minimal tree covering all given bones.

    The tree is rooted at the common ancestor bone and includes intermediate
    nodes that lead to listed bones. Rest offsets are recorded here, once.

    Args:
        bones: Rig nodes to record
        bone_map: Optional node -> joint name table

    Returns:
        Root joint of the skeleton

    Raises:
        PreconditionError: If no bones are given
    """
    bones = cleanup_bones(bones)
    if not bones:
        raise PreconditionError(
            "The bones list has to be set before building a skeleton."
        )

    root_bone = get_root_bone(bones)
    bone_set = set(bones)
    skeleton = SkeletonNode(name=_joint_name(root_bone, bone_map), node=root_bone)

    queue = deque([skeleton])
    while queue:
        joint = queue.popleft()
        for child in joint.node.children:
            if _has_bone(bone_set, child):
                child_joint = SkeletonNode(
                    name=_joint_name(child, bone_map),
                    node=child,
                    rest_offset=_rest_offset(child),
                )
                queue.append(child_joint)
                joint.children.append(child_joint)

    logger.debug(f"Built skeleton rooted at {skeleton.name} with {skeleton.joint_count} joints")
    return skeleton


@dataclass(frozen=True)
class PoseSnapshot:
    """
    Pose of a skeleton at one instant.

    Attributes:
        root_position: Root position relative to the base position, rig space
        rotations: (joints, 4) quaternions in skeleton pre-order; the root
            entry is a world rotation, all others are local rotations
    """
    root_position: np.ndarray
    rotations: np.ndarray


def capture_pose(skeleton: SkeletonNode, base_position: np.ndarray) -> PoseSnapshot:
    """Read the current pose of a skeleton's rig nodes without modifying them."""
    rotations = []
    for joint in skeleton.iter_nodes():
        if joint is skeleton:
            rotations.append(joint.node.world_rotation())
        else:
            rotations.append(joint.node.local_rotation.copy())
    return PoseSnapshot(
        root_position=skeleton.node.world_position() - np.asarray(base_position, dtype=float),
        rotations=np.array(rotations),
    )
