import logging
from typing import List

from ..cloud import PointCloud
from ..filter import AbstractFilter

logger = logging.getLogger(__name__)


class PipelineFilter(AbstractFilter):
    """
    A filter that runs multiple filters one after the other.

    Every sub-filter is prepared on the input cloud before any of them runs,
    so a bad configuration anywhere in the pipeline fails before a point is
    touched. Filters keep the dimensions of the cloud they receive, which
    makes the input a valid binding target for every stage.

    Example:
        pipeline = PipelineFilter([
            NeighborClassifierFilter(KnnVoterConfig(k=8)),
            QuadtreeLODFilter(),
        ])
        ordered = pipeline.process(cloud)
    """

    def __init__(self, filters: List[AbstractFilter]):
        """
        Initialize the pipeline with a list of filters.

        Args:
            filters: List of AbstractFilter instances, run in order.
        """
        if not filters:
            raise ValueError("At least one filter must be provided")
        self.filters = filters

    def prepare(self, cloud: PointCloud) -> None:
        """Prepare every filter on the input cloud."""
        for stage in self.filters:
            stage.prepare(cloud)

    def run(self, cloud: PointCloud) -> PointCloud:
        """
        Run every filter in order.

        Args:
            cloud: The PointCloud to process, already prepared for every filter.

        Returns:
            The PointCloud returned by the last filter.
        """
        for stage in self.filters:
            logger.info(f"Running {type(stage).__name__} on {len(cloud)} points")
            cloud = stage.run(cloud)
        return cloud
