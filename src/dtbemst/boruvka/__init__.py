"""Dual-Tree Boruvka minimum spanning tree engine.

This module turns a point set into its Euclidean minimum spanning tree by
repeated rounds of pruned nearest out-of-component neighbor search over a
spatial tree, merging components with a union-find tracker until one is
left.
"""

from dtbemst.boruvka.dual_tree import DualTreeBoruvka, as_point_matrix
from dtbemst.boruvka.models import CandidateTable, EdgePair, MSTResult
from dtbemst.boruvka.statistics import reset_statistics

__all__ = [
    "CandidateTable",
    "DualTreeBoruvka",
    "EdgePair",
    "MSTResult",
    "as_point_matrix",
    "reset_statistics",
]
