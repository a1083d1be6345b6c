"""
Nearest neighbor query capability over 3D point positions.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import List

import numpy as np
import torch
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)


class NeighborIndex(ABC):
    """
    Abstract nearest neighbor index over a fixed set of points.

    The indexed points must not move while the index is in use.
    """

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of indexed points."""
        pass

    @abstractmethod
    def k_nearest(self, queries: torch.Tensor, k: int) -> torch.Tensor:
        """
        Find the k nearest indexed points of each query by 3D Euclidean distance.

        A query that coincides with an indexed point gets that point back as
        its nearest neighbor.

        Args:
            queries: Query coordinates, shape (M, 3).
            k: Number of neighbors wanted. Clamped to the index size.

        Returns:
            Long tensor of indexed point ids ordered by increasing distance,
            shape (M, min(k, size)).
        """
        pass

    @abstractmethod
    def within_radius(self, queries: torch.Tensor, radius: float) -> List[torch.Tensor]:
        """
        Find all indexed points within ``radius`` of each query.

        Args:
            queries: Query coordinates, shape (M, 3).
            radius: Search radius (inclusive).

        Returns:
            One long tensor of point ids per query, ordered by increasing distance.
        """
        pass


class KDTreeIndex(NeighborIndex):
    """
    Neighbor index backed by scipy's cKDTree, O(N log N) to build.
    """

    def __init__(self, positions: torch.Tensor):
        self._device = positions.device
        self._size = positions.shape[0]
        self._tree = None
        if self._size > 0:
            start = time.perf_counter()
            self._tree = cKDTree(positions.detach().cpu().numpy().astype(np.float64))
            logger.debug(f"Built kd-tree over {self._size} points in {time.perf_counter() - start:.3f}s")

    @property
    def size(self) -> int:
        return self._size

    def k_nearest(self, queries: torch.Tensor, k: int) -> torch.Tensor:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        n_queries = queries.shape[0]
        k = min(k, self._size)
        if k == 0 or n_queries == 0:
            return torch.zeros((n_queries, k), dtype=torch.long, device=self._device)

        queries_np = queries.detach().cpu().numpy().astype(np.float64)
        _, ids = self._tree.query(queries_np, k=k)
        # cKDTree drops the neighbor axis when k == 1
        ids = np.asarray(ids, dtype=np.int64).reshape(n_queries, k)
        return torch.from_numpy(ids).to(self._device)

    def within_radius(self, queries: torch.Tensor, radius: float) -> List[torch.Tensor]:
        if self._size == 0:
            return [torch.zeros(0, dtype=torch.long, device=self._device) for _ in range(queries.shape[0])]
        queries_np = queries.detach().cpu().numpy().astype(np.float64)
        result = []
        for query, ids in zip(queries_np, self._tree.query_ball_point(queries_np, r=radius)):
            ids = np.asarray(ids, dtype=np.int64)
            dist = np.linalg.norm(self._tree.data[ids] - query, axis=1)
            ids = ids[np.argsort(dist, kind="stable")]
            result.append(torch.from_numpy(ids).to(self._device))
        return result


class BruteForceIndex(NeighborIndex):
    """
    Exhaustive neighbor index using pairwise distances.

    Quadratic in memory, meant for small clouds. Equal distances are broken
    by the lower point id.
    """

    def __init__(self, positions: torch.Tensor):
        self._positions = positions.detach().to(torch.float64)

    @property
    def size(self) -> int:
        return self._positions.shape[0]

    def _distances(self, queries: torch.Tensor) -> torch.Tensor:
        queries = queries.to(device=self._positions.device, dtype=torch.float64)
        return torch.cdist(queries, self._positions)

    def k_nearest(self, queries: torch.Tensor, k: int) -> torch.Tensor:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        k = min(k, self.size)
        if k == 0 or queries.shape[0] == 0:
            return torch.zeros((queries.shape[0], k), dtype=torch.long, device=self._positions.device)
        order = torch.argsort(self._distances(queries), dim=1, stable=True)
        return order[:, :k]

    def within_radius(self, queries: torch.Tensor, radius: float) -> List[torch.Tensor]:
        if self.size == 0:
            return [torch.zeros(0, dtype=torch.long) for _ in range(queries.shape[0])]
        dist = self._distances(queries)
        order = torch.argsort(dist, dim=1, stable=True)
        return [row_order[row[row_order] <= radius] for row, row_order in zip(dist, order)]
