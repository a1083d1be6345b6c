from .order import LevelOrder, compute_quadtree_order, quadtree_permutation, count_levels
from .interface import QuadtreeLODConfig, QuadtreeLODFilter

__all__ = [
    # order.py
    'LevelOrder',
    'compute_quadtree_order',
    'quadtree_permutation',
    'count_levels',
    # interface.py
    'QuadtreeLODConfig',
    'QuadtreeLODFilter',
]
