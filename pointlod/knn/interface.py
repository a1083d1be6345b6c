"""
Neighbor classifier filter.

This module wraps KnnVoter into a filter that reclassifies a cloud in place.
"""

from dataclasses import dataclass
from typing import Optional

from ..cloud import PointCloud
from ..filter import AbstractFilter
from .vote import KnnVoter, KnnVoterConfig


@dataclass
class NeighborClassifierConfig(KnnVoterConfig):
    """
    Configuration for the neighbor classifier filter.

    Attributes:
        candidate: Optional path of an .npz cloud whose points are used as
            neighbors instead of the processed cloud itself.
    """
    candidate: Optional[str] = None


class NeighborClassifierFilter(AbstractFilter):
    """
    Reclassify points by K-nearest neighbor majority vote.

    When a candidate cloud is given, neighbors and their votes come from it;
    otherwise a point's neighbors are taken from its own cloud.
    """

    def __init__(self, config: KnnVoterConfig, candidate: Optional[PointCloud] = None):
        self.voter = KnnVoter(config)
        self.candidate = candidate

    def prepare(self, cloud: PointCloud) -> None:
        self.voter.prepare(cloud, candidate=self.candidate)

    def run(self, cloud: PointCloud) -> PointCloud:
        """
        Reclassify the cloud in place.

        Args:
            cloud: The prepared PointCloud.

        Returns:
            The same PointCloud, mutated.
        """
        self.voter.apply(cloud, candidate=self.candidate)
        return cloud
