"""kd-tree stored as a flat node arena.

Construction copies the input, then sorts that copy in place so that every
node owns a contiguous slice of points. ``old_from_new`` maps a tree-order
index back to the caller's row index.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from dtbemst.tree.bounds import HRectBound
from dtbemst.tree.models import NodeStatistic, TreeNode

__all__ = ["KDTree"]


class KDTree:
    """Binary kd-tree with hyper-rectangle bounds.

    Each internal node splits its points at the median of the dimension with
    the widest extent, so the tree depth is ``O(log n)`` even for clustered
    or duplicated points. Nodes are created parent-first, so every child
    has a larger arena index than its parent.

    Attributes
    ----------
    data : NDArray[np.float64]
        Private copy of the points, permuted into tree order.
    old_from_new : NDArray[np.intp]
        ``old_from_new[i]`` is the input row of tree-order point ``i``.
    leaf_size : int
        Maximum number of points in a leaf.
    nodes : list[TreeNode]
        Node arena; index 0 is the root.
    """

    def __init__(self, data: ArrayLike, leaf_size: int = 1) -> None:
        """Build the tree over a copy of *data*.

        Parameters
        ----------
        data : ArrayLike
            Points, shape ``(n, d)``.
        leaf_size : int, optional
            Maximum points per leaf, by default 1.

        Raises
        ------
        ValueError
            If *data* is not two-dimensional or ``leaf_size < 1``.
        """
        points = np.array(data, dtype=np.float64, copy=True)
        if points.ndim != 2:
            raise ValueError(f"points must be a 2-D array, got shape {points.shape}")
        if leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {leaf_size}")

        self.data: NDArray[np.float64] = points
        self.old_from_new: NDArray[np.intp] = np.arange(points.shape[0], dtype=np.intp)
        self.leaf_size = leaf_size
        self.nodes: list[TreeNode] = []

        self._build(0, points.shape[0])

    def _build(self, start: int, count: int) -> int:
        index = len(self.nodes)
        end = start + count
        node = TreeNode(
            start=start,
            count=count,
            bound=HRectBound.from_points(self.data[start:end]),
        )
        self.nodes.append(node)

        if count > self.leaf_size:
            split_dim = int(np.argmax(node.bound.width()))
            order = np.argsort(self.data[start:end, split_dim], kind="stable")
            self.data[start:end] = self.data[start:end][order]
            self.old_from_new[start:end] = self.old_from_new[start:end][order]

            half = count // 2
            node.left = self._build(start, half)
            node.right = self._build(start + half, count - half)
        elif count == 1:
            # A single point is trivially its own component.
            node.stat = NodeStatistic(component_membership=start)

        return index

    # ------------------------------------------------------------------
    # SpatialTree protocol
    # ------------------------------------------------------------------

    @property
    def root(self) -> int:
        return 0

    @property
    def num_points(self) -> int:
        return int(self.data.shape[0])

    @property
    def dimensions(self) -> int:
        return int(self.data.shape[1])

    def is_leaf(self, node: int) -> bool:
        return self.nodes[node].is_leaf

    def point_range(self, node: int) -> tuple[int, int]:
        entry = self.nodes[node]
        return entry.start, entry.count

    def children(self, node: int) -> tuple[int, int]:
        entry = self.nodes[node]
        if entry.is_leaf:
            raise ValueError(f"node {node} is a leaf")
        return entry.left, entry.right

    def min_distance(self, node_a: int, node_b: int) -> float:
        return self.nodes[node_a].bound.min_distance(self.nodes[node_b].bound)

    def statistic(self, node: int) -> NodeStatistic:
        return self.nodes[node].stat

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def num_nodes(self) -> int:
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def leaves(self) -> Iterator[int]:
        """Yield arena indices of all leaves in left-to-right order."""
        for index, node in enumerate(self.nodes):
            if node.is_leaf:
                yield index

    def depth(self) -> int:
        """Number of levels below the root (0 for a single-leaf tree)."""
        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            index, level = stack.pop()
            node = self.nodes[index]
            if node.is_leaf:
                deepest = max(deepest, level)
            else:
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))
        return deepest
