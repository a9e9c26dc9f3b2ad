"""
Mathematical utilities for skeletal motion data.

Provides functions for:
- Quaternion algebra (product, inverse)
- Axis-angle and rotation matrix conversions
- Rigid transform matrices

All quaternions are stored as [x, y, z, w] and every function accepts
arrays with arbitrary leading dimensions.
"""

import numpy as np
from typing import Sequence

IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])

AXIS_X = np.array([1.0, 0.0, 0.0])
AXIS_Y = np.array([0.0, 1.0, 0.0])
AXIS_Z = np.array([0.0, 0.0, 1.0])


def normalize_quaternion(q: np.ndarray) -> np.ndarray:
    """
    Normalize quaternions to unit length along the last axis.

    Zero-length quaternions are replaced by the identity.
    """
    q = np.asarray(q, dtype=float)
    norm = np.linalg.norm(q, axis=-1, keepdims=True)
    safe = np.where(norm < 1e-10, 1.0, norm)
    result = q / safe
    return np.where(norm < 1e-10, IDENTITY_QUATERNION, result)


def quaternion_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Hamilton product a * b.

    Args:
        a: Left quaternion(s) [x, y, z, w]
        b: Right quaternion(s) [x, y, z, w]

    Returns:
        Product quaternion(s), broadcast over leading dimensions
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    ax, ay, az, aw = a[..., 0], a[..., 1], a[..., 2], a[..., 3]
    bx, by, bz, bw = b[..., 0], b[..., 1], b[..., 2], b[..., 3]

    return np.stack([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ], axis=-1)


def quaternion_inverse(q: np.ndarray) -> np.ndarray:
    """Inverse of (not necessarily unit) quaternions."""
    q = np.asarray(q, dtype=float)
    conjugate = q * np.array([-1.0, -1.0, -1.0, 1.0])
    return conjugate / np.sum(q * q, axis=-1, keepdims=True)


def angle_axis(angle_deg, axis: Sequence[float]) -> np.ndarray:
    """
    Quaternion rotating by an angle (degrees) around a unit axis.

    Args:
        angle_deg: Angle in degrees, scalar or array
        axis: Unit rotation axis

    Returns:
        Quaternion(s) [x, y, z, w] with shape angle.shape + (4,)
    """
    half = np.radians(np.asarray(angle_deg, dtype=float)) / 2.0
    axis = np.asarray(axis, dtype=float)
    s = np.sin(half)[..., np.newaxis]
    c = np.cos(half)[..., np.newaxis]
    return np.concatenate([s * axis, c], axis=-1)


def quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert a unit quaternion to a 3x3 rotation matrix.

    Args:
        q: Quaternion [x, y, z, w]

    Returns:
        3x3 rotation matrix
    """
    x, y, z, w = normalize_quaternion(q)

    return np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y)],
        [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x)],
        [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y)]
    ])


def trs_matrix(
    translation: np.ndarray,
    rotation: np.ndarray,
    scale: np.ndarray
) -> np.ndarray:
    """
    Build a 4x4 translate-rotate-scale matrix.

    Args:
        translation: 3D translation vector
        rotation: Quaternion [x, y, z, w]
        scale: Per-axis scale factors

    Returns:
        4x4 homogeneous transform
    """
    matrix = np.eye(4)
    matrix[:3, :3] = quaternion_to_matrix(rotation) * np.asarray(scale, dtype=float)
    matrix[:3, 3] = translation
    return matrix


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Apply a 4x4 homogeneous transform to point(s).

    Args:
        matrix: 4x4 transform
        points: Point or (N, 3) array of points

    Returns:
        Transformed point(s) with the input shape
    """
    points = np.asarray(points, dtype=float)
    return points @ matrix[:3, :3].T + matrix[:3, 3]
