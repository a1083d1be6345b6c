"""
Quadtree level-of-detail ordering.

Each box picks the unplaced point nearest to its center, then hands the
rest of its points down to its n x n children one level deeper. Reading the
picks level by level gives a coarse-to-fine ordering of the cloud.
"""

from collections import deque
from typing import List, NamedTuple, Optional

import torch

from ..cloud import Box


class LevelOrder(NamedTuple):
    """A point picked at a given quadtree level."""
    level: int
    point_id: int


def compute_quadtree_order(
    xy: torch.Tensor,
    box: Optional[Box] = None,
    n: int = 2,
) -> List[LevelOrder]:
    """
    Compute the quadtree level-of-detail order of a set of points.

    Boxes are processed from a FIFO work list instead of recursively. Within a
    level, boxes are visited in the same sibling order a depth-first walk would
    record them (children in ``Box.split`` order), so the result comes out
    grouped by ascending level without a final sort.

    Args:
        xy: Point coordinates, shape (N, 2) or (N, 3); only X/Y are used.
        box: The region to subdivide. Defaults to the bounding box of ``xy``.
            Points outside the box are never placed.
        n: Number of children per axis when splitting a box.

    Returns:
        List of (level, point_id) pairs, each point id appearing once.
    """
    if xy.shape[0] == 0:
        return []
    xy = xy[:, :2]
    box = Box.of_points(xy) if box is None else box.to_2d()

    ids = torch.nonzero(box.contains_points(xy), as_tuple=True)[0]
    order: List[LevelOrder] = []
    work = deque([(box, 0, ids)])
    while work:
        box, level, ids = work.popleft()
        if ids.numel() == 0:
            continue

        # Every id in the list lies in this box by construction; argmin keeps
        # the first of equally distant points.
        center = torch.tensor(box.center, dtype=xy.dtype, device=xy.device)
        dist = torch.linalg.vector_norm(xy[ids] - center, dim=1)
        best = int(torch.argmin(dist))
        order.append(LevelOrder(level, int(ids[best])))

        keep = torch.ones(ids.numel(), dtype=torch.bool, device=ids.device)
        keep[best] = False
        ids = ids[keep]
        if ids.numel() == 0:
            continue

        child = box.child_index(xy[ids], n)
        for index, child_box in enumerate(box.split(n)):
            child_ids = ids[child == index]
            if child_ids.numel() > 0:
                work.append((child_box, level + 1, child_ids))
    return order


def quadtree_permutation(order: List[LevelOrder]) -> torch.Tensor:
    """Flatten (level, point_id) pairs into a permutation of point ids."""
    return torch.tensor([pair.point_id for pair in order], dtype=torch.long)


def count_levels(order: List[LevelOrder]) -> int:
    """Number of distinct levels in an order."""
    return order[-1].level + 1 if order else 0
