"""
Decoding parsed BVH motion into animation curves for a rig.

``decode`` walks the document joint tree, resolves each joint to a rig node
and converts its channels back into engine space. The rig is only read,
never modified; root-space values are computed with the rig evaluated at the
origin. ``BVHAnimationLoader`` wraps parsing and decoding with the settings
a caller usually keeps between loads.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import numpy as np

from bvhtools.core.conventions import Convention, from_bvh_offset, from_bvh_rotation
from bvhtools.core.errors import NameResolutionError, PreconditionError
from bvhtools.core.naming import NameResolver
from bvhtools.core.parser import parse
from bvhtools.data.animation import POSITION_PROPERTIES, ROTATION_PROPERTIES, AnimationClip
from bvhtools.data.document import BVHDocument, BVHJoint
from bvhtools.data.rig import Rig, RigNode
from bvhtools.utils.math_utils import quaternion_inverse, quaternion_multiply

logger = logging.getLogger(__name__)


class _CurveDecoder:
    """Per-call state of a decode: rig, convention, key times and output clip."""

    def __init__(self, rig: Rig, convention: Convention, resolver: NameResolver,
                 times: np.ndarray, clip: AnimationClip):
        self.rig = rig
        self.convention = convention
        self.resolver = resolver
        self.times = times
        self.clip = clip

    def decode_joint(self, joint: BVHJoint, node: RigNode, first: bool):
        path = node.path_from(self.rig)

        if joint.has_positions:
            if first:
                self._decode_root_positions(path, joint, node)
            else:
                logger.warning(
                    f"Position channels on non-root joint {joint.name} are not supported "
                    "and have been ignored."
                )

        if joint.has_rotations:
            self._decode_rotations(path, joint, node, first)

        for child in joint.children:
            child_node = self.resolver.find_bone(child.name, node)
            self.decode_joint(child, child_node, False)

    def _decode_root_positions(self, path: str, joint: BVHJoint, node: RigNode):
        positions = from_bvh_offset(joint.positions(), self.convention)
        offset = from_bvh_offset(joint.offset, self.convention)
        points = positions + offset
        if node.parent is not None:
            points = node.parent.inverse_transform_point(points, origin=self.rig)
        points = points * self.rig.scale

        for axis, prop in enumerate(POSITION_PROPERTIES):
            self.clip.set_curve(path, prop, self.times, points[:, axis])

    def _decode_rotations(self, path: str, joint: BVHJoint, node: RigNode, first: bool):
        rotations = from_bvh_rotation(joint.rotations(), self.convention)
        if first and node.parent is not None:
            parent_rotation = node.parent.world_rotation(origin=self.rig)
            rotations = quaternion_multiply(quaternion_inverse(parent_rotation), rotations)

        for axis, prop in enumerate(ROTATION_PROPERTIES):
            self.clip.set_curve(path, prop, self.times, rotations[:, axis])


def decode(
    document: BVHDocument,
    rig: Rig,
    convention: Convention = Convention.BLENDER,
    frame_rate: Optional[float] = None,
    resolver: Optional[NameResolver] = None,
    root_node: Optional[RigNode] = None,
    clip: Optional[AnimationClip] = None,
) -> AnimationClip:
    """
    Convert a parsed document into animation curves for ``rig``.

    Only joints with all three rotation (or position) channels get rotation
    (or position) curves; partial channel sets are skipped. Key ``i`` is
    placed at ``(i + 1) / frame_rate``.

    Args:
        document: Parsed BVH document
        rig: Target rig (read only)
        convention: Convention the file was written in
        frame_rate: Key rate; defaults to the document's frame rate
        resolver: Name matching policy; defaults to flexible matching
        root_node: Root bone of the rig; the root joint must be this node or
            one of its children. Looked up by name if omitted
        clip: Clip to fill; a new one is created if omitted

    Returns:
        The filled clip, with quaternion continuity enforced

    Raises:
        NameResolutionError: If a joint has no matching rig node
        PreconditionError: If the frame rate is not positive
    """
    resolver = resolver or NameResolver()
    if frame_rate is None:
        frame_rate = document.frame_rate
    if frame_rate <= 0:
        raise PreconditionError(f"Frame rate must be positive, got {frame_rate}")

    if root_node is None:
        root_node = resolver.find_root(document.root.name, rig)
        if root_node is None:
            raise NameResolutionError(document.root.name)
    else:
        root_node = resolver.find_bone(document.root.name, root_node, include_self=True)

    clip = clip or AnimationClip(frame_rate=frame_rate)
    times = (np.arange(document.frame_count) + 1) / frame_rate
    decoder = _CurveDecoder(rig, convention, resolver, times, clip)
    decoder.decode_joint(document.root, root_node, True)

    clip.ensure_quaternion_continuity()
    logger.debug(f"Decoded {clip.curve_count} curves over {document.frame_count} frames")
    return clip


class BVHAnimationLoader:
    """
    Loads BVH animations onto a rig.

    Args:
        rig: Target rig; node names should match the BVH joint names and all
            bones should have identity rest rotations
        convention: Convention of the files being loaded
        respect_bvh_time: Use the file's frame time; otherwise ``frame_rate``
            overrides it
        frame_rate: Frame rate used when ``respect_bvh_time`` is off
        clip_name: Name given to loaded clips; empty for an automatic name
        flexible_bone_names: Match names ignoring case, spaces and underscores
        bone_renaming_map: BVH name -> rig name table
        bone_map: Rig node -> standard bone name table
    """

    def __init__(
        self,
        rig: Rig,
        convention: Convention = Convention.BLENDER,
        respect_bvh_time: bool = True,
        frame_rate: float = 60.0,
        clip_name: str = "",
        flexible_bone_names: bool = True,
        bone_renaming_map: Optional[Mapping[str, str]] = None,
        bone_map: Optional[Mapping[RigNode, str]] = None,
    ):
        self.rig = rig
        self.convention = convention
        self.respect_bvh_time = respect_bvh_time
        self.frame_rate = frame_rate
        self.clip_name = clip_name
        self.flexible_bone_names = flexible_bone_names
        self.bone_renaming_map: Dict[str, str] = dict(bone_renaming_map or {})
        self.bone_map: Dict[RigNode, str] = dict(bone_map or {})

        self.document: Optional[BVHDocument] = None
        self.clip: Optional[AnimationClip] = None
        self.root_bone: Optional[RigNode] = None

    def parse(self, text: str) -> BVHDocument:
        """
        Parse BVH text. Does not touch the rig.

        Raises:
            ParseError: If the text is not valid BVH
            PreconditionError: If the override frame rate is not positive
        """
        if self.respect_bvh_time:
            self.document = parse(text)
            self.frame_rate = self.document.frame_rate
        else:
            if self.frame_rate <= 0:
                raise PreconditionError(f"Frame rate must be positive, got {self.frame_rate}")
            self.document = parse(text, frame_time=1.0 / self.frame_rate)
        return self.document

    def parse_file(self, path: Union[str, Path]) -> BVHDocument:
        path = Path(path)
        logger.info(f"Loading BVH file: {path}")
        return self.parse(path.read_text(encoding="utf-8"))

    def _resolver(self) -> NameResolver:
        name_map = {name: node for node, name in self.bone_map.items()}
        return NameResolver(
            flexible=self.flexible_bone_names,
            renaming_map=self.bone_renaming_map,
            name_map=name_map,
        )

    def _find_root_bone(self, resolver: NameResolver) -> RigNode:
        root_name = self.document.root.name
        root_bone = resolver.find_root(root_name, self.rig)
        if root_bone is not None:
            return root_bone

        if not self.rig.children:
            raise NameResolutionError(root_name)
        root_bone = self.rig.children[0]
        logger.warning(f'Using "{root_bone.name}" as the root bone.')
        return root_bone

    def load_animation(self) -> AnimationClip:
        """
        Decode the parsed document into a new clip.

        Raises:
            PreconditionError: If nothing has been parsed yet
            NameResolutionError: If a joint cannot be matched to the rig
        """
        if self.document is None:
            raise PreconditionError("No BVH file has been parsed.")

        resolver = self._resolver()
        self.root_bone = self._find_root_bone(resolver)
        clip = AnimationClip(name=self.clip_name or None, frame_rate=self.frame_rate)
        self.clip = decode(
            self.document,
            self.rig,
            convention=self.convention,
            frame_rate=self.frame_rate,
            resolver=resolver,
            root_node=self.root_bone,
            clip=clip,
        )
        logger.info(
            f"Loaded clip {self.clip.name}: {self.document.frame_count} frames, "
            f"{len(self.clip.paths)} animated nodes"
        )
        return self.clip
