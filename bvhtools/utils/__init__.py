"""Utility modules for bvhtools."""

from bvhtools.utils.math_utils import (
    IDENTITY_QUATERNION,
    angle_axis,
    normalize_quaternion,
    quaternion_inverse,
    quaternion_multiply,
)

__all__ = [
    "IDENTITY_QUATERNION",
    "angle_axis",
    "normalize_quaternion",
    "quaternion_inverse",
    "quaternion_multiply",
]
