"""Spatial trees consumed by the dual-tree spanning-tree search.

- ``SpatialTree``: structural protocol the engine is written against
- ``KDTree``: kd-tree over hyper-rectangle bounds, stored as a node arena
- ``NodeStatistic``: per-node pruning cache (``MIXED`` sentinel)
"""

from dtbemst.tree.bounds import HRectBound
from dtbemst.tree.kdtree import KDTree
from dtbemst.tree.models import MIXED, NodeStatistic, TreeNode
from dtbemst.tree.protocol import SpatialTree

__all__ = [
    "HRectBound",
    "KDTree",
    "MIXED",
    "NodeStatistic",
    "SpatialTree",
    "TreeNode",
]
