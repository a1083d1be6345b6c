"""
K-nearest neighbor majority voting on a discrete point attribute.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import torch
from omegaconf import MISSING

from ..cloud import PointCloud
from ..domain import DomainRange, bind_domain, domain_mask, parse_domain
from .index import KDTreeIndex, NeighborIndex

logger = logging.getLogger(__name__)


def majority_vote(values: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Row-wise majority vote.

    Values are truncated toward zero to integers before counting. When
    several values share the highest count, the lowest value wins.

    Args:
        values: Neighbor values, shape (M, K).

    Returns:
        Winning value and its count per row, both long tensors of shape (M,).
    """
    n_rows, n_cols = values.shape
    if n_cols == 0:
        zeros = torch.zeros(n_rows, dtype=torch.long, device=values.device)
        return zeros, zeros.clone()

    sorted_values, _ = values.to(torch.long).sort(dim=1)
    # Equal values form runs in each sorted row; tally run lengths
    starts = torch.ones_like(sorted_values, dtype=torch.bool)
    starts[:, 1:] = sorted_values[:, 1:] != sorted_values[:, :-1]
    run_ids = starts.long().cumsum(dim=1) - 1
    run_lengths = torch.zeros_like(run_ids).scatter_add_(1, run_ids, torch.ones_like(run_ids))
    counts = run_lengths.gather(1, run_ids)
    best_count = counts.max(dim=1).values
    # Values are sorted ascending, so the first maximal slot is the lowest value
    first = (counts == best_count.unsqueeze(1)).int().argmax(dim=1)
    winner = sorted_values.gather(1, first.unsqueeze(1)).squeeze(1)
    return winner, best_count


@dataclass
class KnnVoterConfig:
    """
    Configuration for K-nearest neighbor reclassification.

    Attributes:
        k: Number of nearest neighbors to consult, must be > 0.
        domain: Range strings such as ``"Classification[2:2]"``. A point is
            reclassified only if it passes at least one of them. Empty means
            every point is reclassified.
        dimension: The attribute voted on and rewritten.
        chunk_size: Number of points voted on at once.
    """
    k: int = MISSING
    domain: List[str] = field(default_factory=list)
    dimension: str = "Classification"
    chunk_size: int = 65536


class KnnVoter:
    """
    Reassign a point attribute to the strict majority of its K nearest neighbors.

    A point changes only when the winning value is held by more than half of
    the neighbors returned and differs from the point's current value.
    Neighbors include the point itself when it is part of the indexed set.

    Example:
        voter = KnnVoter(KnnVoterConfig(k=8, domain=["Classification[1:1]"]))
        voter.prepare(cloud)
        changed = voter.apply(cloud)
    """

    def __init__(self, config: KnnVoterConfig):
        if isinstance(config.k, bool) or not isinstance(config.k, int):
            raise ValueError(f"Invalid 'k' option: {config.k!r}, must be an integer > 0")
        if config.k < 1:
            raise ValueError(f"Invalid 'k' option: {config.k}, must be > 0")
        if config.chunk_size < 1:
            raise ValueError(f"Invalid 'chunk_size' option: {config.chunk_size}, must be > 0")
        self.config = config
        self._domain = parse_domain(config.domain)
        self._ranges: List[DomainRange] = []
        self._dimension: Optional[str] = None

    @property
    def dimension(self) -> Optional[str]:
        """Canonical name of the voted dimension, None until prepared."""
        return self._dimension

    @property
    def ranges(self) -> List[DomainRange]:
        """Bound domain ranges, empty until prepared or when no domain is configured."""
        return list(self._ranges)

    def prepare(self, cloud: PointCloud, candidate: Optional[PointCloud] = None) -> None:
        """
        Resolve the voted dimension and domain ranges against a cloud.

        Args:
            cloud: The cloud whose points will be reclassified.
            candidate: Optional cloud supplying the neighbors and their votes.

        Raises:
            ValueError: If a dimension name cannot be resolved.
        """
        dimension = cloud.find_dimension(self.config.dimension)
        if dimension is None:
            raise ValueError(f"Invalid dimension name in 'dimension' option: '{self.config.dimension}'.")
        if candidate is not None and not candidate.has_dimension(dimension):
            raise ValueError(f"Candidate cloud has no dimension '{dimension}'.")
        self._ranges = bind_domain(self._domain, cloud)
        self._dimension = dimension
        if self._ranges:
            logger.info(f"Voting on '{dimension}' with k={self.config.k} in domain {[str(r) for r in self._ranges]}")
        else:
            logger.info(f"Voting on '{dimension}' with k={self.config.k} for all points")

    def _require_prepared(self) -> str:
        if self._dimension is None:
            raise RuntimeError("KnnVoter.prepare() must be called before voting")
        return self._dimension

    def vote(
        self,
        cloud: PointCloud,
        ids: torch.Tensor,
        index: NeighborIndex,
        source: Optional[PointCloud] = None,
    ) -> Tuple[torch.Tensor, torch.Tensor, int]:
        """
        Compute the vote for some points without modifying anything.

        Args:
            cloud: The cloud the queried points belong to.
            ids: Ids of the queried points.
            index: Neighbor index over ``source``.
            source: Cloud the neighbor ids refer to. Defaults to ``cloud``.

        Returns:
            Winning value and its count per queried point, and the number of
            neighbors each point consulted.
        """
        dimension = self._require_prepared()
        source = cloud if source is None else source
        neighbors = index.k_nearest(cloud.positions[ids], self.config.k)
        values = source.get(dimension)[neighbors]
        winner, count = majority_vote(values)
        return winner, count, neighbors.shape[1]

    def _changes(
        self,
        current: torch.Tensor,
        winner: torch.Tensor,
        count: torch.Tensor,
        n_neighbors: int,
    ) -> torch.Tensor:
        thresh = n_neighbors / 2.0
        return (count > thresh) & (current.to(torch.float64) != winner.to(torch.float64))

    def apply_point(
        self,
        cloud: PointCloud,
        point_id: int,
        index: NeighborIndex,
        candidate: Optional[PointCloud] = None,
    ) -> bool:
        """
        Reclassify a single point in place.

        Args:
            cloud: The cloud holding the point.
            point_id: Id of the point.
            index: Neighbor index over ``candidate`` (or ``cloud``).
            candidate: Optional cloud supplying the neighbors and their votes.

        Returns:
            True if the point's value changed.
        """
        dimension = self._require_prepared()
        ids = torch.tensor([point_id], dtype=torch.long)
        if not bool(domain_mask(self._ranges, cloud, ids)[0]):
            return False
        winner, count, n_neighbors = self.vote(cloud, ids, index, candidate)
        current = cloud.get(dimension, ids)
        if not bool(self._changes(current, winner, count, n_neighbors)[0]):
            return False
        cloud.set(dimension, ids, winner)
        return True

    def apply(
        self,
        cloud: PointCloud,
        index: Optional[NeighborIndex] = None,
        candidate: Optional[PointCloud] = None,
    ) -> int:
        """
        Reclassify every point of a cloud that passes the domain.

        All votes are computed from the values present before the pass;
        changes are written once the whole pass is done.

        Args:
            cloud: The cloud to reclassify in place.
            index: Neighbor index over ``candidate`` (or ``cloud``). Built with
                KDTreeIndex when not given.
            candidate: Optional cloud supplying the neighbors and their votes.

        Returns:
            Number of points whose value changed.
        """
        dimension = self._require_prepared()
        source = cloud if candidate is None else candidate
        if len(cloud) == 0 or len(source) == 0:
            return 0
        if index is None:
            index = KDTreeIndex(source.positions)

        ids = torch.nonzero(domain_mask(self._ranges, cloud), as_tuple=True)[0]
        logger.debug(f"{ids.numel()} of {len(cloud)} points pass the domain")

        changed_ids = []
        changed_values = []
        for start in range(0, ids.numel(), self.config.chunk_size):
            chunk = ids[start:start + self.config.chunk_size]
            winner, count, n_neighbors = self.vote(cloud, chunk, index, source)
            mask = self._changes(cloud.get(dimension, chunk), winner, count, n_neighbors)
            changed_ids.append(chunk[mask])
            changed_values.append(winner[mask])

        if not changed_ids:
            return 0
        changed_ids = torch.cat(changed_ids)
        if changed_ids.numel() > 0:
            cloud.set(dimension, changed_ids, torch.cat(changed_values))
        logger.info(f"Reclassified {changed_ids.numel()} of {ids.numel()} candidate points on '{dimension}'")
        return int(changed_ids.numel())
