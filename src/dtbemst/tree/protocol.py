"""Capability set the spanning-tree engine needs from a spatial index."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from dtbemst.tree.models import NodeStatistic


@runtime_checkable
class SpatialTree(Protocol):
    """Structural protocol for a binary spatial partition.

    Nodes are addressed by integer handles. Any index (kd-tree, ball tree,
    ...) exposing these members can drive ``DualTreeBoruvka``.

    Attributes
    ----------
    data : NDArray[np.float64]
        Points in tree order, shape ``(num_points, dimensions)``.
    """

    data: NDArray[np.float64]

    @property
    def root(self) -> int: ...

    @property
    def num_points(self) -> int: ...

    @property
    def dimensions(self) -> int: ...

    def is_leaf(self, node: int) -> bool: ...

    def point_range(self, node: int) -> tuple[int, int]:
        """Return ``(start, count)`` of the node's contiguous points."""
        ...

    def children(self, node: int) -> tuple[int, int]:
        """Return ``(left, right)`` child handles of an internal node."""
        ...

    def min_distance(self, node_a: int, node_b: int) -> float:
        """Lower bound on the squared distance between the two nodes' points."""
        ...

    def statistic(self, node: int) -> NodeStatistic:
        """Mutable pruning statistic of *node*."""
        ...
