"""Exporters for writing BVH text."""

from bvhtools.data.exporters.bvh_exporter import BVHExporter, serialize

__all__ = ["BVHExporter", "serialize"]
