"""
Coordinate conventions between engine space and BVH space.

Engine space is the joint-transform space of the rig model: quaternions
[x, y, z, w] and an X axis mirrored relative to BVH. BVH space holds Euler
triples applied in Z, X, Y order and offsets in file units.

Two conventions are supported:
- STANDARD: BVH default, Y up and Z forward
- BLENDER: Z up and Y forward, as written and read by Blender

All functions are pure and accept batches with arbitrary leading dimensions.
"""

from enum import Enum
from typing import Optional

import numpy as np

from bvhtools.utils.math_utils import (
    AXIS_X,
    AXIS_Y,
    AXIS_Z,
    angle_axis,
    normalize_quaternion,
    quaternion_multiply,
)


class Convention(Enum):
    """Axis/sign policy used when reading or writing BVH data."""
    STANDARD = "standard"
    BLENDER = "blender"

    @classmethod
    def from_flag(cls, blender: bool) -> "Convention":
        return cls.BLENDER if blender else cls.STANDARD


def wrap_angle(angle):
    """
    Wrap angles in degrees into (-180, 180].

    Only a single turn is removed, matching values produced by atan2/asin.
    """
    a = np.asarray(angle, dtype=float)
    wrapped = np.where(a > 180.0, a - 360.0, np.where(a < -180.0, a + 360.0, a))
    if wrapped.ndim == 0:
        return float(wrapped)
    return wrapped


def euler_zxy(q: np.ndarray) -> np.ndarray:
    """
    Decompose quaternions into Euler angles for Z-then-X-then-Y order.

    Inverse of ``from_euler_zxy``.

    Args:
        q: Unit quaternion(s) [x, y, z, w]

    Returns:
        Euler angles in degrees [x, y, z]
    """
    q = np.asarray(q, dtype=float)
    x, y, z, w = q[..., 0], q[..., 1], q[..., 2], q[..., 3]

    ez = np.arctan2(-2.0 * (x * y - w * z), w * w - x * x + y * y - z * z)
    ex = np.arcsin(np.clip(2.0 * (y * z + w * x), -1.0, 1.0))
    ey = np.arctan2(-2.0 * (x * z - w * y), w * w - x * x - y * y + z * z)

    return np.degrees(np.stack([ex, ey, ez], axis=-1))


def from_euler_zxy(euler: np.ndarray) -> np.ndarray:
    """
    Compose AngleAxis(z, +Z) * AngleAxis(x, +X) * AngleAxis(y, +Y).

    Args:
        euler: Euler angles in degrees [x, y, z]

    Returns:
        Quaternion(s) [x, y, z, w]
    """
    euler = np.asarray(euler, dtype=float)
    qz = angle_axis(euler[..., 2], AXIS_Z)
    qx = angle_axis(euler[..., 0], AXIS_X)
    qy = angle_axis(euler[..., 1], AXIS_Y)
    return quaternion_multiply(quaternion_multiply(qz, qx), qy)


def _rotation_to_bvh_space(q: np.ndarray, convention: Convention) -> np.ndarray:
    x, y, z, w = q[..., 0], q[..., 1], q[..., 2], q[..., 3]
    if convention is Convention.BLENDER:
        return np.stack([x, z, -y, w], axis=-1)
    return np.stack([x, -y, -z, w], axis=-1)


def _rotation_from_bvh_space(q: np.ndarray, convention: Convention) -> np.ndarray:
    x, y, z, w = q[..., 0], q[..., 1], q[..., 2], q[..., 3]
    if convention is Convention.BLENDER:
        return np.stack([x, -z, y, w], axis=-1)
    return np.stack([x, -y, -z, w], axis=-1)


def to_bvh_rotation(q: np.ndarray, convention: Convention) -> np.ndarray:
    """
    Encode engine rotation(s) as wrapped BVH Euler angles.

    Args:
        q: Quaternion(s) [x, y, z, w]
        convention: Target convention

    Returns:
        Euler angles in degrees [x, y, z], each in (-180, 180]
    """
    q = np.asarray(q, dtype=float)
    remapped = normalize_quaternion(_rotation_to_bvh_space(q, convention))
    return np.asarray(wrap_angle(euler_zxy(remapped)))


def from_bvh_rotation(euler: np.ndarray, convention: Convention) -> np.ndarray:
    """
    Decode BVH Euler angles (degrees, [x, y, z]) into engine quaternion(s).
    """
    wrapped = np.asarray(wrap_angle(euler))
    return _rotation_from_bvh_space(from_euler_zxy(wrapped), convention)


def to_bvh_offset(
    offset: np.ndarray,
    convention: Convention,
    scale: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Encode engine-space displacement(s) as BVH offsets.

    Args:
        offset: Displacement(s) [x, y, z] in rig space
        convention: Target convention
        scale: Rig scale; offsets are divided by it element-wise first

    Returns:
        BVH offset(s) [x, y, z]
    """
    offset = np.asarray(offset, dtype=float)
    if scale is not None:
        offset = offset * (1.0 / np.asarray(scale, dtype=float))
    x, y, z = offset[..., 0], offset[..., 1], offset[..., 2]
    if convention is Convention.BLENDER:
        return np.stack([-x, -z, y], axis=-1)
    return np.stack([-x, y, z], axis=-1)


def from_bvh_offset(offset: np.ndarray, convention: Convention) -> np.ndarray:
    """Decode BVH offset(s) [x, y, z] into engine-space displacement(s)."""
    offset = np.asarray(offset, dtype=float)
    x, y, z = offset[..., 0], offset[..., 1], offset[..., 2]
    if convention is Convention.BLENDER:
        return np.stack([-x, z, -y], axis=-1)
    return np.stack([-x, y, z], axis=-1)


def zxy_order(euler: np.ndarray) -> np.ndarray:
    """Reorder [x, y, z] Euler angles into the Z, X, Y channel order."""
    euler = np.asarray(euler, dtype=float)
    return euler[..., [2, 0, 1]]
