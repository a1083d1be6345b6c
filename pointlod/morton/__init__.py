"""
Morton (Z-order) codes and the reversed Morton level-of-detail ordering.
"""

from .codes import part1_by1, part1_by2, encode_morton, encode_morton3, reverse_bits32
from .order import grid_cells, grid_coordinates, compute_morton_codes, compute_revert_morton_order
from .interface import RevertMortonConfig, RevertMortonFilter

__all__ = [
    # codes.py
    'part1_by1',
    'part1_by2',
    'encode_morton',
    'encode_morton3',
    'reverse_bits32',
    # order.py
    'grid_cells',
    'grid_coordinates',
    'compute_morton_codes',
    'compute_revert_morton_order',
    # interface.py
    'RevertMortonConfig',
    'RevertMortonFilter',
]
