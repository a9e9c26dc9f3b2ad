"""
Core BVH processing module.

Contains:
- Scanner and recursive-descent parser for BVH text
- Coordinate convention engine (engine space <-> BVH space)
- Curve decoder and loader facade
- Recorder facade and convention converter
"""

from bvhtools.core.errors import (
    BVHError,
    ParseError,
    StructuralParseError,
    NumericParseError,
    NameResolutionError,
    PreconditionError,
)
from bvhtools.core.scanner import Scanner
from bvhtools.core.parser import BVHParser, parse
from bvhtools.core.conventions import (
    Convention,
    wrap_angle,
    euler_zxy,
    from_euler_zxy,
    to_bvh_rotation,
    from_bvh_rotation,
    to_bvh_offset,
    from_bvh_offset,
)
from bvhtools.core.naming import NameResolver
from bvhtools.core.loader import BVHAnimationLoader, decode
from bvhtools.core.recorder import BVHRecorder
from bvhtools.core.converter import convert_document, convert_text

__all__ = [
    "BVHError",
    "ParseError",
    "StructuralParseError",
    "NumericParseError",
    "NameResolutionError",
    "PreconditionError",
    "Scanner",
    "BVHParser",
    "parse",
    "Convention",
    "wrap_angle",
    "euler_zxy",
    "from_euler_zxy",
    "to_bvh_rotation",
    "from_bvh_rotation",
    "to_bvh_offset",
    "from_bvh_offset",
    "NameResolver",
    "BVHAnimationLoader",
    "decode",
    "BVHRecorder",
    "convert_document",
    "convert_text",
]
