"""
Factories for the built-in filters and their registration.
"""

from dataclasses import is_dataclass

from omegaconf import DictConfig, OmegaConf

from ..io import CloudReader
from ..knn import KnnVoterConfig, NeighborClassifierConfig, NeighborClassifierFilter
from ..morton import RevertMortonConfig, RevertMortonFilter
from ..quadtree import QuadtreeLODConfig, QuadtreeLODFilter
from .registry import register_filter


def _to_config(config, config_class):
    """Turn a Hydra DictConfig into its structured dataclass, leave dataclasses alone."""
    if isinstance(config, DictConfig):
        config = OmegaConf.to_object(OmegaConf.merge(OmegaConf.structured(config_class), config))
    if not is_dataclass(config):
        raise ValueError(f"Expected a {config_class.__name__}, got {type(config).__name__}")
    return config


def build_quadtree_filter(config: QuadtreeLODConfig = QuadtreeLODConfig()) -> QuadtreeLODFilter:
    """Create a quadtree level-of-detail filter."""
    return QuadtreeLODFilter(_to_config(config, QuadtreeLODConfig))


def build_revertmorton_filter(config: RevertMortonConfig = RevertMortonConfig()) -> RevertMortonFilter:
    """Create a reversed Morton filter."""
    return RevertMortonFilter(_to_config(config, RevertMortonConfig))


def build_neighborclassifier_filter(config: KnnVoterConfig) -> NeighborClassifierFilter:
    """
    Create a neighbor classifier filter.

    If the config names a candidate archive, it is read here so that a
    missing file fails before any point is processed.
    """
    config = _to_config(config, NeighborClassifierConfig)
    candidate = None
    if getattr(config, "candidate", None):
        candidate = CloudReader(config.candidate).read()
    return NeighborClassifierFilter(config, candidate=candidate)


register_filter(
    name="quadtree",
    factory=build_quadtree_filter,
    config_class=QuadtreeLODConfig,
    description="Reorder points coarse-to-fine by recursive nearest-to-center selection",
)

register_filter(
    name="revertmorton",
    factory=build_revertmorton_filter,
    config_class=RevertMortonConfig,
    description="Reorder points by bit-reversed Morton code",
)

register_filter(
    name="neighborclassifier",
    factory=build_neighborclassifier_filter,
    config_class=NeighborClassifierConfig,
    description="Re-assign a point attribute by K-nearest neighbor majority vote",
)
