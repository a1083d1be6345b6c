"""
Global registry for filters.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Type

from ..filter import AbstractFilter


@dataclass
class FilterEntry:
    """Entry in the filter registry."""
    name: str
    factory: Callable[..., AbstractFilter]
    config_class: Type
    description: str = ""


# Global registry
FILTERS: Dict[str, FilterEntry] = {}


def register_filter(
    name: str,
    factory: Callable[..., AbstractFilter],
    config_class: Type,
    description: str = "",
) -> None:
    """Register a filter."""
    FILTERS[name] = FilterEntry(name, factory, config_class, description)
