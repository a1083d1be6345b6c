from abc import ABC, abstractmethod

from .cloud import PointCloud


class AbstractFilter(ABC):
    """
    Abstract base class for point cloud filters.

    A filter runs in two stages:
    1. Bind to the cloud it will process (via `prepare`)
    2. Transform the cloud (via `run`)

    `prepare` is where configuration is checked against the actual
    dimensions of the cloud, so that a bad configuration fails before any
    point is touched. `run` never raises for degenerate inputs such as an
    empty or single-point cloud.
    """

    def prepare(self, cloud: PointCloud) -> None:
        """
        Bind the filter to a cloud before processing.

        The default implementation has nothing to bind.

        Args:
            cloud: The PointCloud that will be passed to `run`.

        Raises:
            ValueError: If the configuration cannot be resolved against the cloud.
        """
        pass

    @abstractmethod
    def run(self, cloud: PointCloud) -> PointCloud:
        """
        Process a prepared cloud.

        Reordering filters return a new PointCloud and leave the input
        untouched. Classifying filters mutate the input in place and return it.

        Args:
            cloud: The PointCloud to process.

        Returns:
            The processed PointCloud.
        """
        pass

    def process(self, cloud: PointCloud) -> PointCloud:
        """
        Prepare and run the filter on a cloud.

        Args:
            cloud: The PointCloud to process.

        Returns:
            The processed PointCloud.
        """
        self.prepare(cloud)
        return self.run(cloud)
