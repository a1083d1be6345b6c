from .cloud import Box, PointCloud
from .domain import DomainRange, parse_domain, bind_domain, domain_mask
from .filter import AbstractFilter
from .quadtree import LevelOrder, QuadtreeLODConfig, QuadtreeLODFilter, compute_quadtree_order
from .morton import RevertMortonConfig, RevertMortonFilter, compute_revert_morton_order
from .knn import NeighborIndex, KDTreeIndex, BruteForceIndex, KnnVoterConfig, KnnVoter

__all__ = [
    "Box",
    "PointCloud",
    "DomainRange",
    "parse_domain",
    "bind_domain",
    "domain_mask",
    "AbstractFilter",
    "LevelOrder",
    "QuadtreeLODConfig",
    "QuadtreeLODFilter",
    "compute_quadtree_order",
    "RevertMortonConfig",
    "RevertMortonFilter",
    "compute_revert_morton_order",
    "NeighborIndex",
    "KDTreeIndex",
    "BruteForceIndex",
    "KnnVoterConfig",
    "KnnVoter",
]
