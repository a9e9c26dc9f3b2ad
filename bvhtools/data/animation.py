"""
Animation curves produced by decoding BVH motion.

Provides:
- Curve: time-ordered keys of a single scalar property
- AnimationClip: curves grouped by rig path and property name
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation, Slerp

logger = logging.getLogger(__name__)

POSITION_PROPERTIES = ("position.x", "position.y", "position.z")
ROTATION_PROPERTIES = ("rotation.x", "rotation.y", "rotation.z", "rotation.w")


@dataclass
class Curve:
    """
    Keys of one animated property.

    Attributes:
        times: Key times in seconds, ascending
        values: Key values, same length as times
    """
    times: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=float)
        self.values = np.asarray(self.values, dtype=float)
        if self.times.shape != self.values.shape:
            raise ValueError(
                f"Curve needs one value per key, got {self.times.shape} times "
                f"and {self.values.shape} values"
            )

    @property
    def num_keys(self) -> int:
        return len(self.times)

    @property
    def duration(self) -> float:
        """Time of the last key."""
        return float(self.times[-1]) if self.num_keys else 0.0

    def evaluate(self, time: float) -> float:
        """Linearly interpolated value, clamped to the first and last key."""
        if self.num_keys == 0:
            return 0.0
        return float(np.interp(time, self.times, self.values))


class AnimationClip:
    """
    Collection of curves keyed by rig path and property.

    Paths are slash-separated node names relative to the rig; properties are
    ``position.x/y/z`` and ``rotation.x/y/z/w``.
    """

    _clip_counter = itertools.count()

    def __init__(self, name: Optional[str] = None, frame_rate: float = 60.0):
        if not name:
            name = f"BVHClip ({next(self._clip_counter)})"
        self.name = name
        self.frame_rate = frame_rate
        self._curves: Dict[str, Dict[str, Curve]] = {}

    def set_curve(self, path: str, prop: str, times: np.ndarray, values: np.ndarray):
        """Store (or replace) the curve of ``prop`` on ``path``."""
        self._curves.setdefault(path, {})[prop] = Curve(times=times, values=values)

    def get_curve(self, path: str, prop: str) -> Optional[Curve]:
        return self._curves.get(path, {}).get(prop)

    @property
    def paths(self) -> List[str]:
        return list(self._curves)

    def properties(self, path: str) -> List[str]:
        return list(self._curves.get(path, {}))

    @property
    def curve_count(self) -> int:
        return sum(len(props) for props in self._curves.values())

    @property
    def duration(self) -> float:
        durations = [
            curve.duration
            for props in self._curves.values()
            for curve in props.values()
        ]
        return max(durations, default=0.0)

    def has_position(self, path: str) -> bool:
        props = self._curves.get(path, {})
        return all(prop in props for prop in POSITION_PROPERTIES)

    def has_rotation(self, path: str) -> bool:
        props = self._curves.get(path, {})
        return all(prop in props for prop in ROTATION_PROPERTIES)

    def position_keys(self, path: str) -> Tuple[np.ndarray, np.ndarray]:
        """Key times and (keys, 3) positions of a path."""
        curves = [self._curves[path][prop] for prop in POSITION_PROPERTIES]
        return curves[0].times, np.stack([c.values for c in curves], axis=-1)

    def rotation_keys(self, path: str) -> Tuple[np.ndarray, np.ndarray]:
        """Key times and (keys, 4) quaternions [x, y, z, w] of a path."""
        curves = [self._curves[path][prop] for prop in ROTATION_PROPERTIES]
        return curves[0].times, np.stack([c.values for c in curves], axis=-1)

    def ensure_quaternion_continuity(self):
        """
        Flip rotation keys so consecutive quaternions lie in the same hemisphere.

        Each key is negated when its dot product with the (already fixed)
        previous key is negative; the represented rotations do not change.
        """
        for path in self.paths:
            if not self.has_rotation(path):
                continue
            times, quats = self.rotation_keys(path)
            if len(quats) < 2:
                continue
            dots = np.sum(quats[1:] * quats[:-1], axis=-1)
            steps = np.where(dots < 0.0, -1.0, 1.0)
            signs = np.concatenate([[1.0], np.cumprod(steps)])
            flipped = int(np.count_nonzero(steps < 0))
            if flipped:
                logger.debug(f"Flipped {flipped} rotation keys on {path}")
            quats = quats * signs[:, np.newaxis]
            for axis, prop in enumerate(ROTATION_PROPERTIES):
                self.set_curve(path, prop, times, quats[:, axis])

    def sample_position(self, path: str, time: float) -> np.ndarray:
        """Linearly interpolated position at ``time``."""
        return np.array([self._curves[path][prop].evaluate(time) for prop in POSITION_PROPERTIES])

    def sample_rotation(self, path: str, time: float) -> np.ndarray:
        """Spherically interpolated rotation [x, y, z, w] at ``time``."""
        times, quats = self.rotation_keys(path)
        if len(times) == 1:
            return Rotation.from_quat(quats[0]).as_quat()
        slerp = Slerp(times, Rotation.from_quat(quats))
        clamped = float(np.clip(time, times[0], times[-1]))
        return slerp([clamped]).as_quat()[0]

    def sample(self, path: str, time: float) -> Dict[str, np.ndarray]:
        """Sample every complete property group of a path at ``time``."""
        result = {}
        if self.has_position(path):
            result["position"] = self.sample_position(path, time)
        if self.has_rotation(path):
            result["rotation"] = self.sample_rotation(path, time)
        return result
