"""
Point collection and axis-aligned box primitives shared by all filters.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Self, Tuple

import numpy as np
import torch

POSITION_DIMENSIONS = ("X", "Y", "Z")


@dataclass(frozen=True)
class Box:
    """
    Axis-aligned 2D or 3D bounding region.

    Attributes:
        mins: Minimum coordinate on each axis.
        maxs: Maximum coordinate on each axis.
    """
    mins: Tuple[float, ...]
    maxs: Tuple[float, ...]

    def __post_init__(self):
        if len(self.mins) != len(self.maxs) or len(self.mins) not in (2, 3):
            raise ValueError(
                f"Box needs 2 or 3 axes with matching bounds, got mins={self.mins}, maxs={self.maxs}"
            )
        for axis, (lo, hi) in enumerate(zip(self.mins, self.maxs)):
            if lo > hi:
                raise ValueError(f"Box axis {axis} has min {lo} > max {hi}")

    @classmethod
    def of_points(cls, points: torch.Tensor) -> Self:
        """
        Compute the bounding box of a set of points.

        Args:
            points: Coordinates, shape (N, 2) or (N, 3).

        Returns:
            The tight bounding box of the points.

        Raises:
            ValueError: If there are no points.
        """
        if points.shape[0] == 0:
            raise ValueError("Cannot compute the bounds of an empty point set")
        mins = points.min(dim=0).values.tolist()
        maxs = points.max(dim=0).values.tolist()
        return cls(tuple(mins), tuple(maxs))

    @property
    def ndim(self) -> int:
        return len(self.mins)

    @property
    def width(self) -> float:
        return self.maxs[0] - self.mins[0]

    @property
    def height(self) -> float:
        return self.maxs[1] - self.mins[1]

    @property
    def center(self) -> Tuple[float, ...]:
        return tuple(lo + (hi - lo) / 2 for lo, hi in zip(self.mins, self.maxs))

    def to_2d(self) -> Self:
        return Box(self.mins[:2], self.maxs[:2])

    def contains(self, *coords: float) -> bool:
        """Closed-interval containment test on the first len(coords) axes."""
        return all(lo <= c <= hi for c, lo, hi in zip(coords, self.mins, self.maxs))

    def contains_points(self, points: torch.Tensor) -> torch.Tensor:
        """Vectorized closed-interval containment, returns a bool tensor of shape (N,)."""
        ndim = min(points.shape[1], self.ndim)
        mins = torch.tensor(self.mins[:ndim], dtype=points.dtype, device=points.device)
        maxs = torch.tensor(self.maxs[:ndim], dtype=points.dtype, device=points.device)
        return ((points[:, :ndim] >= mins) & (points[:, :ndim] <= maxs)).all(dim=1)

    def edges(self, axis: int, n: int = 2) -> List[float]:
        """
        The n + 1 boundaries of an n-way equal split along one axis.

        The last boundary is this box's max exactly, so the children tile the
        box without a rounding gap at the top.
        """
        lo, hi = self.mins[axis], self.maxs[axis]
        step = (hi - lo) / n
        return [lo + i * step for i in range(n)] + [hi]

    def split(self, n: int = 2) -> List[Self]:
        """
        Split the 2D footprint into n x n equal sub-boxes.

        Children are laid out contiguously from the minimum corner and listed
        x-major: index ``i * n + j`` covers column ``i`` along X and row ``j``
        along Y.
        """
        xs = self.edges(0, n)
        ys = self.edges(1, n)
        boxes = []
        for i in range(n):
            for j in range(n):
                boxes.append(Box((xs[i], ys[j]), (xs[i + 1], ys[j + 1])))
        return boxes

    def child_index(self, xy: torch.Tensor, n: int = 2) -> torch.Tensor:
        """
        Assign each point to the child of ``split(n)`` that holds it.

        Interior edges are half-open: a point on the edge shared by two
        children belongs to the child with the larger coordinate. A point on
        the upper edge of this box belongs to the last child on that axis, and
        a zero-extent axis sends everything to child 0 along it. Buckets are
        cut at ``edges``, the same boundaries ``split`` builds the children
        from, so every point inside this box lands in a child that contains it.

        Args:
            xy: Point coordinates, shape (N, 2) or wider (only X/Y are used).
            n: Number of children per axis.

        Returns:
            Long tensor of child indices in ``[0, n * n)``, shape (N,).
        """
        columns = []
        for axis in range(2):
            if self.maxs[axis] > self.mins[axis]:
                interior = torch.tensor(self.edges(axis, n)[1:-1], dtype=xy.dtype, device=xy.device)
                pos = torch.bucketize(xy[:, axis].contiguous(), interior, right=True)
            else:
                pos = torch.zeros(xy.shape[0], dtype=torch.long, device=xy.device)
            columns.append(pos)
        return columns[0] * n + columns[1]


class PointCloud:
    """
    An ordered collection of 3D points with named scalar attributes.

    Point ids are positions in the collection. ``X``, ``Y`` and ``Z`` are
    columns of ``positions``; every other dimension lives in ``attributes``.
    Dimension lookups are case-insensitive.

    Example:
        cloud = PointCloud(torch.rand(100, 3), {"Classification": torch.ones(100)})
        cloud.set("classification", [0, 1], [2, 2])
    """

    def __init__(
        self,
        positions,
        attributes: Optional[Dict[str, torch.Tensor]] = None,
    ):
        positions = torch.as_tensor(positions, dtype=torch.float64)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"positions must have shape (N, 3), got {tuple(positions.shape)}")
        self.positions = positions
        self.attributes: Dict[str, torch.Tensor] = {}
        for name, values in (attributes or {}).items():
            self.add_dimension(name, values)

    def __len__(self) -> int:
        return self.positions.shape[0]

    def __repr__(self) -> str:
        return f"PointCloud(size={len(self)}, dimensions={self.dimensions})"

    @property
    def dimensions(self) -> List[str]:
        return list(POSITION_DIMENSIONS) + list(self.attributes.keys())

    @property
    def xy(self) -> torch.Tensor:
        return self.positions[:, :2]

    def find_dimension(self, name: str) -> Optional[str]:
        """Return the canonical spelling of a dimension name, or None if unknown."""
        lowered = name.strip().lower()
        for dim in self.dimensions:
            if dim.lower() == lowered:
                return dim
        return None

    def has_dimension(self, name: str) -> bool:
        return self.find_dimension(name) is not None

    def _resolve(self, name: str) -> str:
        dim = self.find_dimension(name)
        if dim is None:
            raise ValueError(f"Unknown dimension '{name}'. Available: {self.dimensions}")
        return dim

    def add_dimension(
        self,
        name: str,
        values=None,
        fill: float = 0,
        dtype: torch.dtype = torch.float64,
    ) -> None:
        """
        Add a named attribute.

        Args:
            name: Dimension name, must not clash with an existing dimension.
            values: Initial values, shape (N,). If None, filled with ``fill``.
            fill: Fill value used when ``values`` is None.
            dtype: Tensor dtype used when ``values`` is None.
        """
        if self.find_dimension(name) is not None:
            raise ValueError(f"Dimension '{name}' already exists")
        if values is None:
            values = torch.full((len(self),), fill, dtype=dtype)
        else:
            values = torch.as_tensor(values)
        if values.shape != (len(self),):
            raise ValueError(
                f"Dimension '{name}' needs shape ({len(self)},), got {tuple(values.shape)}"
            )
        self.attributes[name] = values

    def get(self, name: str, ids=None) -> torch.Tensor:
        """Return the values of one dimension, optionally restricted to ``ids``."""
        dim = self._resolve(name)
        if dim in POSITION_DIMENSIONS:
            values = self.positions[:, POSITION_DIMENSIONS.index(dim)]
        else:
            values = self.attributes[dim]
        return values if ids is None else values[ids]

    def set(self, name: str, ids, values) -> None:
        """Overwrite the values of one dimension at ``ids`` in place."""
        dim = self._resolve(name)
        if dim in POSITION_DIMENSIONS:
            target = self.positions[:, POSITION_DIMENSIONS.index(dim)]
        else:
            target = self.attributes[dim]
        target[ids] = torch.as_tensor(values, dtype=target.dtype, device=target.device)

    def bounds(self) -> Box:
        """3D bounding box, recomputed on every call."""
        return Box.of_points(self.positions)

    def bounds_2d(self) -> Box:
        """X/Y bounding box, recomputed on every call."""
        return Box.of_points(self.xy)

    def select(self, ids) -> Self:
        """
        Build a new PointCloud holding the points at ``ids`` in that order.

        The input cloud is not modified.
        """
        ids = torch.as_tensor(ids, dtype=torch.long)
        return PointCloud(
            self.positions[ids].clone(),
            {name: values[ids].clone() for name, values in self.attributes.items()},
        )

    def append(self, other: Self) -> Self:
        """Append all points of ``other`` to this cloud in place."""
        if set(self.attributes) != set(other.attributes):
            raise ValueError(
                f"Cannot append clouds with different dimensions: "
                f"{sorted(self.attributes)} vs {sorted(other.attributes)}"
            )
        self.positions = torch.cat([self.positions, other.positions])
        for name in self.attributes:
            self.attributes[name] = torch.cat(
                [self.attributes[name], other.attributes[name].to(self.attributes[name].dtype)]
            )
        return self

    def clone(self) -> Self:
        return PointCloud(
            self.positions.clone(),
            {name: values.clone() for name, values in self.attributes.items()},
        )

    @classmethod
    def from_numpy(
        cls,
        positions: np.ndarray,
        attributes: Optional[Dict[str, np.ndarray]] = None,
    ) -> Self:
        """Build a PointCloud from a (N, 3) positions array and a name-to-array mapping."""
        return cls(
            torch.from_numpy(np.asarray(positions, dtype=np.float64)),
            {name: torch.from_numpy(np.asarray(values)) for name, values in (attributes or {}).items()},
        )

    def to_numpy(self) -> Dict[str, np.ndarray]:
        """Return ``positions`` plus one array per attribute."""
        arrays = {"positions": self.positions.cpu().numpy()}
        for name, values in self.attributes.items():
            arrays[name] = values.cpu().numpy()
        return arrays
