"""Maintenance of the per-node pruning statistics.

The reset pass runs before every Boruvka round; the tightening helpers run
during the dual-tree search. Together they keep each node's
``max_neighbor_distance`` a valid upper bound and its
``component_membership`` equal to the shared component of its points.
"""

from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from dtbemst.boruvka.models import CandidateTable
from dtbemst.components import ComponentTracker
from dtbemst.tree import MIXED, SpatialTree

__all__ = [
    "iter_postorder",
    "reset_statistics",
    "tighten_leaf_bound",
    "propagate_bound",
]


def iter_postorder(tree: SpatialTree) -> Iterator[int]:
    """Yield node handles children-first, ending with the root."""
    stack: list[tuple[int, bool]] = [(tree.root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or tree.is_leaf(node):
            yield node
            continue
        left, right = tree.children(node)
        stack.append((node, True))
        stack.append((right, False))
        stack.append((left, False))


def reset_statistics(tree: SpatialTree, tracker: ComponentTracker) -> NDArray[np.intp]:
    """Reset every node's statistic for a new round.

    Bounds go back to ``inf``. A leaf takes the component of its points when
    they all share one; an internal node takes its children's common
    component; anything else is ``MIXED``.

    Parameters
    ----------
    tree : SpatialTree
        Tree whose statistics are rewritten.
    tracker : ComponentTracker
        Current component partition (indexed in tree order).

    Returns
    -------
    NDArray[np.intp]
        Component representative of every point for the round ahead.
    """
    n = tree.num_points
    components = np.fromiter((tracker.find(i) for i in range(n)), dtype=np.intp, count=n)

    for node in iter_postorder(tree):
        stat = tree.statistic(node)
        stat.reset()

        if tree.is_leaf(node):
            start, count = tree.point_range(node)
            members = components[start : start + count]
            if count > 0 and np.all(members == members[0]):
                stat.component_membership = int(members[0])
        else:
            left, right = tree.children(node)
            left_membership = tree.statistic(left).component_membership
            if left_membership != MIXED and left_membership == tree.statistic(right).component_membership:
                stat.component_membership = left_membership

    return components


def tighten_leaf_bound(
    tree: SpatialTree,
    leaf: int,
    components: NDArray[np.intp],
    candidates: CandidateTable,
) -> None:
    """Set a leaf's bound to the worst best-candidate among its points' components."""
    start, count = tree.point_range(leaf)
    if count == 0:
        return
    members = components[start : start + count]
    tree.statistic(leaf).max_neighbor_distance = float(candidates.distance[members].max())


def propagate_bound(tree: SpatialTree, node: int) -> None:
    """Set an internal node's bound to the larger of its children's bounds."""
    left, right = tree.children(node)
    tree.statistic(node).max_neighbor_distance = max(
        tree.statistic(left).max_neighbor_distance,
        tree.statistic(right).max_neighbor_distance,
    )
