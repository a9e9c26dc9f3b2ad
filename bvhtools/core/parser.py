"""
BVH text parser.

Reads the HIERARCHY section by recursive descent and the MOTION section as a
dense grid of floats laid out in the order the channels were declared, joint
by joint in pre-order. The parse is a single synchronous pass that touches
nothing but the text, so it may run on any thread; the resulting document is
read-only.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from bvhtools.core.scanner import Scanner
from bvhtools.data.document import BVHDocument, BVHJoint

logger = logging.getLogger(__name__)

MAX_CHANNELS = 6


def _parse_offset(scanner: Scanner, what: str) -> np.ndarray:
    offset = np.zeros(3)
    for axis, label in enumerate("XYZ"):
        scanner.skip_whitespace()
        value, ok = scanner.read_float()
        scanner.require(f"{what} {label}", ok, numeric=True)
        offset[axis] = value
    return offset


def _skip_end_site(scanner: Scanner):
    """Parse an End Site block; its offset is discarded."""
    scanner.expect("End Site")
    scanner.skip_whitespace()
    scanner.expect("{")
    scanner.skip_whitespace()
    scanner.expect("OFFSET")
    _parse_offset(scanner, "end site offset")
    scanner.skip_whitespace()
    scanner.expect("}")


def _parse_joint(scanner: Scanner, keyword: str) -> BVHJoint:
    """Parse a ROOT or JOINT block and everything nested in it."""
    scanner.skip_whitespace()
    scanner.expect(keyword)
    name, ok = scanner.read_line_string()
    scanner.require("joint name", ok)

    scanner.skip_whitespace()
    scanner.expect("{")
    scanner.skip_whitespace()
    scanner.expect("OFFSET")
    joint = BVHJoint(name=name, offset=_parse_offset(scanner, "offset"))

    scanner.skip_whitespace()
    scanner.expect("CHANNELS")
    scanner.skip_whitespace()
    count, ok = scanner.read_int()
    scanner.require("channel number", ok, numeric=True)
    scanner.require("valid channel number", 1 <= count <= MAX_CHANNELS)

    for _ in range(count):
        scanner.skip_whitespace()
        kind, ok = scanner.read_channel()
        scanner.require("channel ID", ok)
        scanner.require("unique channel ID", not joint.channels[kind].enabled)
        joint.channels[kind].enabled = True
        joint.channel_order.append(kind)

    while True:
        scanner.skip_whitespace()
        peek = scanner.peek()
        scanner.require("child joint", peek is not None)
        if peek in "Jj":
            joint.children.append(_parse_joint(scanner, "JOINT"))
        elif peek in "Ee":
            _skip_end_site(scanner)
        elif peek == "}":
            scanner.expect("}")
            return joint
        else:
            scanner.fail("child joint")


def _parse_motion(
    scanner: Scanner,
    root: BVHJoint,
    frame_time_override: Optional[float],
) -> BVHDocument:
    scanner.skip_whitespace()
    scanner.expect("MOTION")
    scanner.skip_whitespace()
    scanner.expect("FRAMES:")
    scanner.skip_whitespace()
    frame_count, ok = scanner.read_int()
    scanner.require("frame number", ok, numeric=True)
    scanner.require("non-negative frame number", frame_count >= 0)
    scanner.skip_whitespace()
    scanner.expect("FRAME TIME:")
    scanner.skip_whitespace()
    frame_time, ok = scanner.read_float()
    scanner.require("frame time", ok, numeric=True)

    if frame_time_override is not None:
        frame_time = frame_time_override

    # One array per declared channel, in column order.
    columns: List[np.ndarray] = []
    for joint in root.iter_joints():
        for kind in joint.channel_order:
            values = np.empty(frame_count)
            joint.channels[kind].values = values
            columns.append(values)

    for frame in range(frame_count):
        scanner.expect_newline()
        for values in columns:
            scanner.skip_inline_whitespace()
            value, ok = scanner.read_float()
            scanner.require("channel value", ok, numeric=True)
            values[frame] = value

    scanner.skip_whitespace()
    scanner.require("end of motion data", scanner.at_end)

    for values in columns:
        values.setflags(write=False)

    return BVHDocument(root=root, frame_count=frame_count, frame_time=frame_time)


def parse(text: str, frame_time: Optional[float] = None) -> BVHDocument:
    """
    Parse BVH text into a document.

    Args:
        text: Complete BVH file contents
        frame_time: If given, replaces the frame time declared in the file

    Returns:
        Parsed document

    Raises:
        ParseError: On any grammar violation; there is no partial result
    """
    scanner = Scanner(text)
    scanner.skip_whitespace()
    scanner.expect("HIERARCHY")
    root = _parse_joint(scanner, "ROOT")
    document = _parse_motion(scanner, root, frame_time)

    logger.debug(
        "Parsed BVH: %d joints, %d channels, %d frames at %.6fs",
        len(document.joints), document.channel_count,
        document.frame_count, document.frame_time,
    )
    return document


class BVHParser:
    """
    Parser front end with a configurable frame time override.
    """

    def __init__(self, frame_time_override: Optional[float] = None):
        self.frame_time_override = frame_time_override

    def parse(self, text: str) -> BVHDocument:
        return parse(text, self.frame_time_override)

    def parse_file(self, path: Union[str, Path]) -> BVHDocument:
        path = Path(path)
        logger.info(f"Reading BVH file: {path}")
        return self.parse(path.read_text(encoding="utf-8"))
