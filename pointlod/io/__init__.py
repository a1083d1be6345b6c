"""
IO module for reading and writing PointCloud archives.
"""

from .npz import CloudReader, CloudWriter
from .config import (
    CloudReaderConfig,
    CloudWriterConfig,
    build_cloud_reader,
    build_cloud_writer,
)

__all__ = [
    "CloudReader",
    "CloudWriter",
    "CloudReaderConfig",
    "CloudWriterConfig",
    "build_cloud_reader",
    "build_cloud_writer",
]
