"""
K-nearest neighbor indexes and majority-vote reclassification.
"""

from .index import NeighborIndex, KDTreeIndex, BruteForceIndex
from .vote import majority_vote, KnnVoterConfig, KnnVoter
from .interface import NeighborClassifierConfig, NeighborClassifierFilter

__all__ = [
    # index.py
    'NeighborIndex',
    'KDTreeIndex',
    'BruteForceIndex',
    # vote.py
    'majority_vote',
    'KnnVoterConfig',
    'KnnVoter',
    # interface.py
    'NeighborClassifierConfig',
    'NeighborClassifierFilter',
]
