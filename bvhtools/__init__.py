"""
bvhtools - BVH motion file parsing, recording and conversion

Reads and writes Biovision Hierarchy (BVH) files and moves motion between
BVH text and a scene-graph rig model.

Features:
- Tolerant BVH parser with position-accurate error diagnostics
- Recording of rig poses as BVH text
- Decoding of BVH motion into animation curves for a rig
- Standard (Y up) and Blender (Z up) axis conventions
- Command-line inspection, validation and conversion

License: MIT
"""

__version__ = "1.0.0"
__author__ = "bvhtools Contributors"
__license__ = "MIT"

from bvhtools.core.errors import BVHError, ParseError, NameResolutionError, PreconditionError
from bvhtools.core.conventions import Convention
from bvhtools.core.parser import BVHParser, parse
from bvhtools.core.loader import BVHAnimationLoader, decode
from bvhtools.core.recorder import BVHRecorder
from bvhtools.data.document import BVHDocument, BVHJoint, ChannelKind
from bvhtools.data.rig import Rig, RigNode
from bvhtools.data.animation import AnimationClip

__all__ = [
    "BVHError",
    "ParseError",
    "NameResolutionError",
    "PreconditionError",
    "Convention",
    "BVHParser",
    "parse",
    "BVHAnimationLoader",
    "decode",
    "BVHRecorder",
    "BVHDocument",
    "BVHJoint",
    "ChannelKind",
    "Rig",
    "RigNode",
    "AnimationClip",
]
