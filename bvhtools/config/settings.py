"""
Configuration for loading, recording and parsing BVH files.

Sections are plain dataclasses with ``to_dict``/``from_dict``; ``Settings``
groups them and reads/writes YAML. Unknown keys are ignored on load and
conventions are stored by name.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from bvhtools.core.conventions import Convention
from bvhtools.core.loader import BVHAnimationLoader
from bvhtools.core.parser import BVHParser
from bvhtools.core.recorder import BVHRecorder

logger = logging.getLogger(__name__)


def _convention(value) -> Convention:
    if isinstance(value, Convention):
        return value
    return Convention[str(value).upper()]


@dataclass
class LoaderConfig:
    """Settings for decoding BVH files onto a rig."""

    convention: Convention = Convention.BLENDER
    respect_bvh_time: bool = True
    frame_rate: float = 60.0
    clip_name: str = ""

    # Name matching
    flexible_bone_names: bool = True
    bone_renaming_map: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "convention": self.convention.name,
            "respect_bvh_time": self.respect_bvh_time,
            "frame_rate": self.frame_rate,
            "clip_name": self.clip_name,
            "flexible_bone_names": self.flexible_bone_names,
            "bone_renaming_map": dict(self.bone_renaming_map),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LoaderConfig":
        """Create from dictionary."""
        config = cls()
        for key, value in data.items():
            if key == "convention":
                value = _convention(value)
            elif key == "bone_renaming_map":
                value = dict(value or {})
            if hasattr(config, key):
                setattr(config, key, value)
        return config

    def create_loader(self, rig) -> BVHAnimationLoader:
        return BVHAnimationLoader(
            rig,
            convention=self.convention,
            respect_bvh_time=self.respect_bvh_time,
            frame_rate=self.frame_rate,
            clip_name=self.clip_name,
            flexible_bone_names=self.flexible_bone_names,
            bone_renaming_map=self.bone_renaming_map,
        )


@dataclass
class RecorderConfig:
    """Settings for capturing rig motion as BVH."""

    convention: Convention = Convention.BLENDER
    frame_rate: float = 60.0
    low_precision: bool = False

    # Output
    output_dir: Path = field(default_factory=lambda: Path("."))
    overwrite: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "convention": self.convention.name,
            "frame_rate": self.frame_rate,
            "low_precision": self.low_precision,
            "output_dir": str(self.output_dir),
            "overwrite": self.overwrite,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecorderConfig":
        """Create from dictionary."""
        config = cls()
        for key, value in data.items():
            if key == "convention":
                value = _convention(value)
            elif key == "output_dir":
                value = Path(value)
            if hasattr(config, key):
                setattr(config, key, value)
        return config

    def create_recorder(self, rig, bones=None) -> BVHRecorder:
        return BVHRecorder(
            rig,
            bones=bones,
            frame_rate=self.frame_rate,
            convention=self.convention,
            low_precision=self.low_precision,
            directory=self.output_dir,
            overwrite=self.overwrite,
        )


@dataclass
class ParserConfig:
    """Settings for reading BVH text."""

    # Replaces the frame time declared in the file when set
    frame_time_override: Optional[float] = None

    def to_dict(self) -> dict:
        return {"frame_time_override": self.frame_time_override}

    @classmethod
    def from_dict(cls, data: dict) -> "ParserConfig":
        config = cls()
        if "frame_time_override" in data:
            value = data["frame_time_override"]
            config.frame_time_override = None if value is None else float(value)
        return config

    def create_parser(self) -> BVHParser:
        return BVHParser(frame_time_override=self.frame_time_override)


@dataclass
class Settings:
    """
    All configuration sections.

    Example YAML::

        loader:
          convention: BLENDER
          flexible_bone_names: true
        recorder:
          frame_rate: 30
          low_precision: true
        parser:
          frame_time_override: null
    """

    loader: LoaderConfig = field(default_factory=LoaderConfig)
    recorder: RecorderConfig = field(default_factory=RecorderConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)

    def to_dict(self) -> dict:
        return {
            "loader": self.loader.to_dict(),
            "recorder": self.recorder.to_dict(),
            "parser": self.parser.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Settings":
        settings = cls()
        data = data or {}
        if "loader" in data:
            settings.loader = LoaderConfig.from_dict(data["loader"] or {})
        if "recorder" in data:
            settings.recorder = RecorderConfig.from_dict(data["recorder"] or {})
        if "parser" in data:
            settings.parser = ParserConfig.from_dict(data["parser"] or {})
        return settings

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Settings":
        """Load settings from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        logger.debug(f"Loaded settings from {path}")
        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save settings to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """
        Check the settings for values that cannot work.

        Returns:
            Human-readable issues; empty when the settings are usable
        """
        issues = []
        if self.loader.frame_rate <= 0:
            issues.append(f"loader.frame_rate must be positive, got {self.loader.frame_rate}")
        if self.recorder.frame_rate <= 0:
            issues.append(f"recorder.frame_rate must be positive, got {self.recorder.frame_rate}")
        override = self.parser.frame_time_override
        if override is not None and override <= 0:
            issues.append(f"parser.frame_time_override must be positive, got {override}")
        for bvh_name, rig_name in self.loader.bone_renaming_map.items():
            if not bvh_name or not rig_name:
                issues.append(f"loader.bone_renaming_map entry {bvh_name!r} -> {rig_name!r} is ignored")
        return issues
