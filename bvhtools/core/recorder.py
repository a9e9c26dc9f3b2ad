"""
Recording rig motion as BVH.

``BVHRecorder`` builds a skeleton over a set of rig bones, writes its
hierarchy once, then captures one motion line per call to ``capture_frame``.
Capturing reads the rig through ``capture_pose`` and never changes it, but it
must run on whatever thread animates the rig.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from bvhtools.core.conventions import Convention
from bvhtools.core.errors import PreconditionError
from bvhtools.data.exporters.bvh_exporter import BVHExporter
from bvhtools.data.rig import Rig, RigNode
from bvhtools.data.skeleton import SkeletonNode, build_skeleton, capture_pose, cleanup_bones

logger = logging.getLogger(__name__)


def unique_path(path: Path) -> Path:
    """Append `` (n)`` before the extension until the path does not exist."""
    path = Path(path)
    candidate = path
    i = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem} ({i}){path.suffix}")
        i += 1
    return candidate


def bvh_filename(filename: str) -> str:
    """Complete a file name with the .bvh extension, or invent one."""
    if not filename:
        return "motion-" + datetime.now().strftime("%Y%m%d%H%M%S") + ".bvh"
    if filename.lower().endswith(".bvh"):
        return filename
    if filename.endswith("."):
        return filename + "bvh"
    return filename + ".bvh"


class BVHRecorder:
    """
    Captures rig poses and writes them as BVH.

    Typical use::

        recorder = BVHRecorder(rig, bones)
        recorder.build_skeleton()
        recorder.gen_hierarchy()
        for _ in range(frames):
            animate(rig)
            recorder.capture_frame()
        text = recorder.gen_bvh()

    Args:
        rig: Rig to record; every bone should have an identity rest rotation
        bones: Bones to record; defaults to every node below the rig
        frame_rate: Frames per second written to the file
        convention: Axis convention to write
        low_precision: Write two decimals instead of six
        bone_map: Rig node -> standard bone name table used for joint names
        directory: Default directory for saved files; the current directory if
            omitted
        overwrite: Default for replacing existing files when saving
    """

    def __init__(
        self,
        rig: Rig,
        bones: Optional[List[RigNode]] = None,
        frame_rate: float = 60.0,
        convention: Convention = Convention.BLENDER,
        low_precision: bool = False,
        bone_map: Optional[Dict[RigNode, str]] = None,
        directory: Optional[Union[str, Path]] = None,
        overwrite: bool = False,
    ):
        self.rig = rig
        self.bones: List[RigNode] = list(bones) if bones is not None else []
        self.frame_rate = frame_rate
        self.convention = convention
        self.low_precision = low_precision
        self.bone_map = bone_map
        self.directory = Path(directory) if directory is not None else None
        self.overwrite = overwrite

        self.skeleton: Optional[SkeletonNode] = None
        self.base_position = np.zeros(3)
        self.last_saved_file: Optional[Path] = None

        self._exporter: Optional[BVHExporter] = None
        self._hierarchy = ""
        self._frames: Optional[List[str]] = None

    @property
    def frame_number(self) -> int:
        """Number of frames captured so far."""
        return len(self._frames) if self._frames is not None else 0

    @property
    def frame_time(self) -> float:
        return 1.0 / self.frame_rate

    def get_bones(self) -> List[RigNode]:
        """Fill the bone list with every node below the rig."""
        self.bones = self.rig.bones()
        return self.bones

    def build_skeleton(self) -> SkeletonNode:
        """
        Build the minimal skeleton covering the bone list.

        Also records the rig position that root positions are measured from.
        """
        self.bones = cleanup_bones(self.bones)
        if not self.bones:
            self.get_bones()
        self.skeleton = build_skeleton(self.bones, self.bone_map)
        self.base_position = self.rig.world_position()
        return self.skeleton

    def gen_hierarchy(self) -> str:
        """
        Generate the hierarchy section and reset the captured frames.

        Raises:
            PreconditionError: If the skeleton has not been built
        """
        if self.skeleton is None:
            raise PreconditionError(
                "Skeleton not initialized. You can initialize the skeleton by calling build_skeleton()."
            )
        self._exporter = BVHExporter(
            convention=self.convention,
            low_precision=self.low_precision,
            scale=self.rig.scale,
        )
        self._hierarchy = self._exporter.write_hierarchy(self.skeleton)
        self._frames = []
        logger.debug(f"Generated hierarchy for {self.skeleton.joint_count} joints")
        return self._hierarchy

    def _require_hierarchy(self):
        if self._frames is None or not self._hierarchy:
            raise PreconditionError(
                "Hierarchy not initialized. You can initialize the hierarchy by calling gen_hierarchy()."
            )

    def capture_frame(self) -> str:
        """Capture the rig's current pose as one motion line."""
        self._require_hierarchy()
        pose = capture_pose(self.skeleton, self.base_position)
        line = self._exporter.encode_frame(pose)
        self._frames.append(line)
        return line

    def clear_capture(self):
        """Drop all captured frames, keeping the hierarchy."""
        self._require_hierarchy()
        self._frames.clear()

    def gen_bvh(self) -> str:
        """Hierarchy plus all captured frames as BVH text."""
        self._require_hierarchy()
        return self._hierarchy + BVHExporter.write_motion(self._frames, self.frame_time)

    def save_bvh(
        self,
        filename: str = "",
        directory: Optional[Union[str, Path]] = None,
        overwrite: Optional[bool] = None,
    ) -> Path:
        """
        Write the BVH text to disk.

        Args:
            filename: Target file name; ``.bvh`` is appended if missing and
                a timestamped name is used if empty
            directory: Directory for relative names; defaults to the
                recorder's directory
            overwrite: Replace existing files instead of numbering new ones;
                defaults to the recorder's setting

        Returns:
            Path that was written
        """
        self._require_hierarchy()
        if directory is None:
            directory = self.directory
        if overwrite is None:
            overwrite = self.overwrite
        output = Path(bvh_filename(filename))
        if directory is not None and not output.is_absolute():
            output = Path(directory) / output
        if not overwrite:
            output = unique_path(output)

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(self.gen_bvh(), encoding="utf-8")
        self.last_saved_file = output
        logger.info(f"Saved {self.frame_number} frames to {output}")
        return output
