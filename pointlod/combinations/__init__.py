"""
Filter registry and filter composition.
"""

from .registry import (
    FILTERS,
    register_filter,
    FilterEntry,
)
from .pipeline import PipelineFilter

# Import to trigger registration
from . import builtin

from .builtin import (
    build_quadtree_filter,
    build_revertmorton_filter,
    build_neighborclassifier_filter,
)

__all__ = [
    "FILTERS",
    "register_filter",
    "FilterEntry",
    "PipelineFilter",
    "build_quadtree_filter",
    "build_revertmorton_filter",
    "build_neighborclassifier_filter",
]
