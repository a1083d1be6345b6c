"""
Reversed Morton ordering of a point cloud.
"""

import math
from typing import Optional, Tuple

import torch

from ..cloud import Box
from .codes import encode_morton, encode_morton3, reverse_bits32


def grid_cells(n_points: int, ndim: int = 2) -> int:
    """
    Grid resolution per axis: floor of the ndim-th root of the point count, at least 1.
    """
    if ndim == 2:
        return max(1, math.isqrt(n_points))
    cell = round(n_points ** (1.0 / ndim))
    while cell > 0 and cell ** ndim > n_points:
        cell -= 1
    while (cell + 1) ** ndim <= n_points:
        cell += 1
    return max(1, cell)


def grid_coordinates(
    points: torch.Tensor,
    box: Box,
    cell: int,
) -> torch.Tensor:
    """
    Integer grid coordinates of points inside a box divided into ``cell`` cells per axis.

    ``floor((coordinate - min) / cell_size)`` clamped to ``[0, cell]``, so a
    point on the upper edge of the box lands on index ``cell``. An axis with
    zero extent maps every point to index 0.

    Args:
        points: Coordinates, shape (N, D) with D equal to the box dimension.
        box: The box the grid spans.
        cell: Number of cells per axis.

    Returns:
        Long tensor of grid coordinates, shape (N, D).
    """
    columns = []
    for axis, (lo, hi) in enumerate(zip(box.mins, box.maxs)):
        extent = hi - lo
        if extent > 0:
            cell_size = extent / cell
            pos = torch.floor((points[:, axis] - lo) / cell_size).long().clamp(0, cell)
        else:
            pos = torch.zeros(points.shape[0], dtype=torch.long, device=points.device)
        columns.append(pos)
    return torch.stack(columns, dim=1)


def compute_morton_codes(
    points: torch.Tensor,
    box: Optional[Box] = None,
    ndim: int = 2,
) -> Tuple[int, torch.Tensor]:
    """
    Compute the bit-reversed Morton code of every point.

    Args:
        points: Coordinates, shape (N, 2) or (N, 3); the first ``ndim`` columns are used.
        box: The box the grid spans. Defaults to the bounding box of the points.
        ndim: 2 for X/Y codes, 3 for X/Y/Z codes.

    Returns:
        The grid resolution and the reversed codes, shape (N,), dtype int64.
    """
    if ndim not in (2, 3):
        raise ValueError(f"Morton codes support 2 or 3 dimensions, got {ndim}")
    points = points[:, :ndim]
    if points.shape[0] == 0:
        return 1, torch.zeros(0, dtype=torch.long, device=points.device)
    if box is None:
        box = Box.of_points(points)

    cell = grid_cells(points.shape[0], ndim)
    grid = grid_coordinates(points, box, cell)
    if ndim == 2:
        codes = encode_morton(grid[:, 0], grid[:, 1])
    else:
        codes = encode_morton3(grid[:, 0], grid[:, 1], grid[:, 2])
    return cell, reverse_bits32(codes)


def compute_revert_morton_order(
    points: torch.Tensor,
    box: Optional[Box] = None,
    ndim: int = 2,
) -> torch.Tensor:
    """
    Order points by ascending reversed Morton code.

    Points sharing a code collide: only the one with the highest id (the last
    one processed) is kept, the others are dropped from the result.

    Args:
        points: Coordinates, shape (N, 2) or (N, 3).
        box: The box the grid spans. Defaults to the bounding box of the points.
        ndim: 2 for X/Y codes, 3 for X/Y/Z codes.

    Returns:
        Long tensor of point ids, shape (N - collisions,).
    """
    _, codes = compute_morton_codes(points, box=box, ndim=ndim)
    if codes.numel() == 0:
        return torch.zeros(0, dtype=torch.long, device=codes.device)

    # Stable sort keeps ids ascending within a run of equal codes
    order = torch.argsort(codes, stable=True)
    sorted_codes = codes[order]
    last_of_run = torch.ones_like(sorted_codes, dtype=torch.bool)
    last_of_run[:-1] = sorted_codes[1:] != sorted_codes[:-1]
    return order[last_of_run]
