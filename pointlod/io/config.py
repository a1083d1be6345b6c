from dataclasses import dataclass

from omegaconf import MISSING
from .npz import CloudReader, CloudWriter


@dataclass
class CloudReaderConfig:
    """Configuration for reading a PointCloud archive."""
    path: str = MISSING


@dataclass
class CloudWriterConfig:
    """Configuration for writing a PointCloud archive."""
    path: str = MISSING
    compressed: bool = True


def build_cloud_reader(config: CloudReaderConfig) -> CloudReader:
    """Build a CloudReader from configuration."""
    return CloudReader(
        path=config.path,
    )


def build_cloud_writer(config: CloudWriterConfig) -> CloudWriter:
    """Build a CloudWriter from configuration."""
    return CloudWriter(
        path=config.path,
        compressed=config.compressed,
    )
