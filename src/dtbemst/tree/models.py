"""Per-node data carried by spatial trees."""

import math
from dataclasses import dataclass, field

from dtbemst.tree.bounds import HRectBound

MIXED = -1
"""Component membership of a node whose points span several components."""


@dataclass
class NodeStatistic:
    """Pruning statistic cached on every tree node.

    Attributes
    ----------
    max_neighbor_distance : float
        Upper bound on the squared distance from any point under the node
        to the best known out-of-component neighbor of that point's
        component. ``inf`` right after a reset.
    component_membership : int
        Component shared by every point under the node, or ``MIXED``.
    """

    max_neighbor_distance: float = math.inf
    component_membership: int = MIXED

    @property
    def is_mixed(self) -> bool:
        """True if the node's points span more than one component."""
        return self.component_membership == MIXED

    def reset(self) -> None:
        """Forget the bound and the membership."""
        self.max_neighbor_distance = math.inf
        self.component_membership = MIXED


@dataclass
class TreeNode:
    """One entry of a tree's flat node arena.

    Attributes
    ----------
    start : int
        First point index (in tree order) owned by the node.
    count : int
        Number of points owned by the node.
    bound : HRectBound
        Bounding box of the node's points.
    left : int
        Arena index of the left child, ``-1`` for leaves.
    right : int
        Arena index of the right child, ``-1`` for leaves.
    stat : NodeStatistic
        Mutable pruning statistic.
    """

    start: int
    count: int
    bound: HRectBound
    left: int = -1
    right: int = -1
    stat: NodeStatistic = field(default_factory=NodeStatistic)

    @property
    def is_leaf(self) -> bool:
        return self.left < 0

    @property
    def end(self) -> int:
        return self.start + self.count
