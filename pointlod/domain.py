"""
Dimension range predicates used to restrict which points a filter touches.

A range is written ``Name[lower:upper]``. Square brackets include the bound,
parentheses exclude it, an empty bound is unbounded and ``!`` after the name
inverts the range:

    Classification[2:2]     Classification equal to 2
    Z(0:10]                 0 < Z <= 10
    Intensity[100:]         Intensity >= 100
    Classification![7:7]    everything but class 7
"""

import math
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Self, Sequence

import torch

from .cloud import PointCloud

_RANGE_PATTERN = re.compile(
    r"^\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*(?P<negate>!?)\s*"
    r"(?P<open>[\[\(])\s*(?P<lower>[^:\[\]\(\)]*?)\s*:\s*(?P<upper>[^:\[\]\(\)]*?)\s*(?P<close>[\]\)])\s*$"
)


def _parse_bound(text: str, default: float, spec: str) -> float:
    if not text:
        return default
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"Invalid bound '{text}' in range '{spec}'") from None
    if math.isnan(value):
        raise ValueError(f"Invalid bound '{text}' in range '{spec}'")
    return value


@dataclass(frozen=True)
class DomainRange:
    """
    A (dimension, interval) predicate.

    Attributes:
        name: Dimension name as written in the range string.
        lower: Lower bound, -inf when unbounded.
        upper: Upper bound, +inf when unbounded.
        inclusive_lower: Whether ``lower`` itself passes.
        inclusive_upper: Whether ``upper`` itself passes.
        negate: Whether the range is inverted.
        dimension: Canonical dimension name once bound to a cloud.
    """
    name: str
    lower: float = -math.inf
    upper: float = math.inf
    inclusive_lower: bool = True
    inclusive_upper: bool = True
    negate: bool = False
    dimension: Optional[str] = None

    @classmethod
    def parse(cls, spec: str) -> Self:
        """
        Parse a ``Name[lower:upper]`` range string.

        Raises:
            ValueError: If the string is malformed or lower > upper.
        """
        match = _RANGE_PATTERN.match(spec)
        if match is None:
            raise ValueError(f"Invalid range '{spec}', expected 'Name[lower:upper]'")
        lower = _parse_bound(match["lower"], -math.inf, spec)
        upper = _parse_bound(match["upper"], math.inf, spec)
        if lower > upper:
            raise ValueError(f"Invalid range '{spec}': lower bound {lower} > upper bound {upper}")
        return cls(
            name=match["name"],
            lower=lower,
            upper=upper,
            inclusive_lower=match["open"] == "[",
            inclusive_upper=match["close"] == "]",
            negate=match["negate"] == "!",
        )

    def bind(self, cloud: PointCloud) -> Self:
        """
        Resolve the dimension name against a cloud.

        Returns:
            A copy of the range with ``dimension`` set.

        Raises:
            ValueError: If the cloud has no such dimension.
        """
        dimension = cloud.find_dimension(self.name)
        if dimension is None:
            raise ValueError(f"Invalid dimension name in 'domain' option: '{self.name}'.")
        return replace(self, dimension=dimension)

    def value_passes(self, values: torch.Tensor) -> torch.Tensor:
        """Element-wise test of values against the range, returns a bool tensor."""
        above = values >= self.lower if self.inclusive_lower else values > self.lower
        below = values <= self.upper if self.inclusive_upper else values < self.upper
        passes = above & below
        return ~passes if self.negate else passes

    def passes(self, cloud: PointCloud, ids=None) -> torch.Tensor:
        """Test the points of a cloud against the range on its bound dimension."""
        if self.dimension is None:
            raise ValueError(f"Range '{self}' must be bound to a cloud before use")
        return self.value_passes(cloud.get(self.dimension, ids))

    def sort_key(self):
        return (self.name.lower(), self.lower, self.upper, self.negate)

    def __str__(self) -> str:
        lower = "" if math.isinf(self.lower) else f"{self.lower:g}"
        upper = "" if math.isinf(self.upper) else f"{self.upper:g}"
        return (
            f"{self.name}{'!' if self.negate else ''}"
            f"{'[' if self.inclusive_lower else '('}{lower}:{upper}{']' if self.inclusive_upper else ')'}"
        )


def parse_domain(specs: Sequence[str]) -> List[DomainRange]:
    """
    Parse a list of range strings.

    Raises:
        ValueError: Naming the first malformed string.
    """
    ranges = []
    for spec in specs:
        try:
            ranges.append(DomainRange.parse(spec))
        except ValueError as err:
            raise ValueError(f"Invalid 'domain' option: '{spec}': {err}") from err
    return ranges


def bind_domain(ranges: Sequence[DomainRange], cloud: PointCloud) -> List[DomainRange]:
    """Bind every range to a cloud and sort them by dimension and bounds."""
    return sorted((r.bind(cloud) for r in ranges), key=DomainRange.sort_key)


def domain_mask(ranges: Sequence[DomainRange], cloud: PointCloud, ids=None) -> torch.Tensor:
    """
    Points passing at least one range.

    With no ranges every point passes.

    Args:
        ranges: Bound ranges.
        cloud: The cloud the ranges are bound to.
        ids: Optional subset of point ids to test.

    Returns:
        Bool tensor with one entry per tested point.
    """
    size = len(cloud) if ids is None else len(ids)
    if not ranges:
        return torch.ones(size, dtype=torch.bool)
    mask = torch.zeros(size, dtype=torch.bool)
    for r in ranges:
        mask |= r.passes(cloud, ids).cpu()
    return mask
