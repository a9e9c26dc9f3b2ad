"""Configuration module for bvhtools."""

from bvhtools.config.settings import Settings, LoaderConfig, RecorderConfig, ParserConfig

__all__ = ["Settings", "LoaderConfig", "RecorderConfig", "ParserConfig"]
