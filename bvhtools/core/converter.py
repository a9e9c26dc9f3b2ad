"""
Re-encoding BVH documents between coordinate conventions.

Every offset, root position and rotation triple is decoded to engine space
with the source convention and encoded again with the target one. Joints
that declare only part of a position or rotation group keep those values
unchanged, the same way the decoder skips them.

End Site offsets are not kept by the parser. When the result is written
with ``BVHExporter.write_document`` each leaf gets an End Site that repeats
the leaf joint's own offset, so converted files can change bone tail
lengths.
"""

import logging
from typing import Optional

import numpy as np

from bvhtools.core.conventions import (
    Convention,
    from_bvh_offset,
    from_bvh_rotation,
    to_bvh_offset,
    to_bvh_rotation,
)
from bvhtools.core.parser import parse
from bvhtools.data.document import (
    POSITION_KINDS,
    ROTATION_KINDS,
    BVHDocument,
    BVHJoint,
    Channel,
)
from bvhtools.data.exporters.bvh_exporter import BVHExporter

logger = logging.getLogger(__name__)


def _frozen(values: np.ndarray) -> np.ndarray:
    values = np.array(values, dtype=float)
    values.setflags(write=False)
    return values


def _convert_joint(joint: BVHJoint, source: Convention, target: Convention) -> BVHJoint:
    converted = BVHJoint(
        name=joint.name,
        offset=to_bvh_offset(from_bvh_offset(joint.offset, source), target),
        channels=[
            Channel(kind=ch.kind, enabled=ch.enabled, values=ch.values)
            for ch in joint.channels
        ],
        channel_order=list(joint.channel_order),
    )

    if joint.has_positions:
        positions = to_bvh_offset(from_bvh_offset(joint.positions(), source), target)
        for axis, kind in enumerate(POSITION_KINDS):
            converted.channels[kind].values = _frozen(positions[:, axis])
    elif any(joint.has_channel(kind) for kind in POSITION_KINDS):
        logger.warning(f"Joint {joint.name} has a partial position channel set; values kept as-is")

    if joint.has_rotations:
        euler = to_bvh_rotation(from_bvh_rotation(joint.rotations(), source), target)
        for axis, kind in enumerate(ROTATION_KINDS):
            converted.channels[kind].values = _frozen(euler[:, axis])
    elif any(joint.has_channel(kind) for kind in ROTATION_KINDS):
        logger.warning(f"Joint {joint.name} has a partial rotation channel set; values kept as-is")

    converted.children = [_convert_joint(child, source, target) for child in joint.children]
    return converted


def convert_document(
    document: BVHDocument,
    source: Convention,
    target: Convention,
) -> BVHDocument:
    """
    Re-express a parsed document in another convention.

    Args:
        document: Parsed document, left untouched
        source: Convention the document was written in
        target: Convention to convert to

    Returns:
        New document with the same joints, channel order and frame timing
    """
    root = _convert_joint(document.root, source, target)
    return BVHDocument(root=root, frame_count=document.frame_count, frame_time=document.frame_time)


def convert_text(
    text: str,
    source: Convention,
    target: Convention,
    low_precision: bool = False,
    frame_time: Optional[float] = None,
) -> str:
    """Parse BVH text, convert it and write it back out."""
    document = convert_document(parse(text, frame_time=frame_time), source, target)
    logger.debug(f"Converted {len(document.joints)} joints from {source.value} to {target.value}")
    return BVHExporter(low_precision=low_precision).write_document(document)
