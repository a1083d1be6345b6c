"""
Reversed Morton reordering filter.
"""

import logging
from dataclasses import dataclass

from ..cloud import PointCloud
from ..filter import AbstractFilter
from .order import compute_revert_morton_order

logger = logging.getLogger(__name__)


@dataclass
class RevertMortonConfig:
    """
    Configuration parameters for the reversed Morton filter.

    Attributes:
        ndim: 2 to code X/Y only, 3 to code X/Y/Z.
    """
    ndim: int = 2


class RevertMortonFilter(AbstractFilter):
    """
    Reorder a cloud by bit-reversed Morton code.

    Cheaper than the quadtree ordering, but points that share a grid cell
    share a code and only the last of them survives.
    """

    def __init__(self, config: RevertMortonConfig = RevertMortonConfig()):
        if config.ndim not in (2, 3):
            raise ValueError(f"Invalid 'ndim' option: {config.ndim}, must be 2 or 3")
        self.config = config

    def run(self, cloud: PointCloud) -> PointCloud:
        """
        Reorder the cloud by reversed Morton code.

        Args:
            cloud: The PointCloud to reorder. It is not modified.

        Returns:
            A new PointCloud with the surviving points in code order.
        """
        if len(cloud) == 0:
            return cloud.select([])

        points = cloud.positions[:, :self.config.ndim]
        order = compute_revert_morton_order(points, ndim=self.config.ndim)
        dropped = len(cloud) - order.numel()
        if dropped > 0:
            logger.warning(f"Reversed Morton order dropped {dropped} colliding points out of {len(cloud)}")
        logger.info(f"Reversed Morton order: {order.numel()} points")
        return cloud.select(order)
