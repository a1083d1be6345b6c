"""
Quadtree level-of-detail reordering filter.

This module wraps the quadtree ordering into a filter that returns a
reordered copy of a PointCloud.
"""

import logging
from dataclasses import dataclass

from ..cloud import PointCloud
from ..filter import AbstractFilter
from .order import compute_quadtree_order, count_levels, quadtree_permutation

logger = logging.getLogger(__name__)


@dataclass
class QuadtreeLODConfig:
    """
    Configuration parameters for the quadtree level-of-detail filter.

    Attributes:
        n: Number of children per axis when splitting a box (2 gives a quadtree).
    """
    n: int = 2


class QuadtreeLODFilter(AbstractFilter):
    """
    Reorder a cloud coarse-to-fine by recursive nearest-to-center selection.

    Level 0 holds the point closest to the center of the cloud's X/Y bounding
    box; each following level holds one point per non-empty sub-box.
    """

    def __init__(self, config: QuadtreeLODConfig = QuadtreeLODConfig()):
        if config.n < 2:
            raise ValueError(f"Invalid 'n' option: {config.n}, must be >= 2")
        self.config = config

    def run(self, cloud: PointCloud) -> PointCloud:
        """
        Reorder the cloud by quadtree level.

        Args:
            cloud: The PointCloud to reorder. It is not modified.

        Returns:
            A new PointCloud holding the same points in level order.
        """
        if len(cloud) == 0:
            return cloud.select([])

        order = compute_quadtree_order(cloud.xy, cloud.bounds_2d(), n=self.config.n)
        logger.info(f"Quadtree order: {len(order)} points over {count_levels(order)} levels")
        return cloud.select(quadtree_permutation(order))
