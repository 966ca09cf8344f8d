"""Dual-Tree Boruvka computation of the Euclidean minimum spanning tree.

Each round resets the node statistics, runs a pruned dual-tree search that
finds every component's nearest out-of-component neighbor, and merges along
all of those edges at once. Rounds repeat until a single component is left,
which takes ``O(log n)`` rounds.

All distances inside the search are squared Euclidean distances; edge
lengths are converted back to Euclidean distances on output.

Reference: March, W. B.; Ram, P.; and Gray, A. G. Fast Euclidean Minimum
Spanning Tree: Algorithm, Analysis, Applications. In KDD, 2010.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from dtbemst.audit.logger import AuditLogger
from dtbemst.boruvka.models import CandidateTable, EdgePair, MSTResult
from dtbemst.boruvka.statistics import (
    propagate_bound,
    reset_statistics,
    tighten_leaf_bound,
)
from dtbemst.components import ComponentTracker
from dtbemst.tree import MIXED, KDTree, SpatialTree

__all__ = ["DualTreeBoruvka", "as_point_matrix"]

# Upper limit on the elements of one temporary difference block in the base case.
_MAX_BLOCK_ELEMENTS = 1 << 20


def as_point_matrix(data: ArrayLike) -> NDArray[np.float64]:
    """Validate *data* as an ``(n, d)`` matrix of finite coordinates.

    An empty sequence is accepted as zero points.

    Raises
    ------
    ValueError
        If the data is not two-dimensional, has no coordinates, or holds
        NaN/infinite values.
    """
    points = np.asarray(data, dtype=np.float64)
    if points.ndim == 1 and points.size == 0:
        points = points.reshape(0, 0)
    if points.ndim != 2:
        raise ValueError(
            f"points must be a 2-D array of shape (n, d), got shape {points.shape}; "
            "use reshape(-1, 1) for one-dimensional points"
        )
    if points.shape[0] > 0 and points.shape[1] == 0:
        raise ValueError("points must have at least one coordinate")
    if not np.all(np.isfinite(points)):
        raise ValueError("points must not contain NaN or infinite coordinates")
    return points


class DualTreeBoruvka:
    """Euclidean minimum spanning tree via Dual-Tree Boruvka.

    Parameters
    ----------
    data : ArrayLike
        Points, shape ``(n, d)``. Unless *tree* is given, a kd-tree is
        built over a private copy and results are mapped back to the
        caller's row order.
    naive : bool, optional
        Use an exhaustive ``O(n^2)`` search each round (the whole dataset
        in one leaf) instead of the pruned dual-tree search.
    leaf_size : int, optional
        Maximum points per kd-tree leaf, by default 1.
    tree : SpatialTree | None, optional
        Pre-built tree. *data* must then be the tree's permuted points;
        no copy is made and edges are reported in tree order.
    prune : bool, optional
        Apply the distance and same-component prunes, by default True.
        Disabling them forces a full recursion with identical results.
    logger : AuditLogger | None, optional
        Receives one ``boruvka_round_complete`` event per round.

    Raises
    ------
    ValueError
        On malformed data, ``leaf_size < 1``, a pre-built tree that does not
        match *data*, or *naive* combined with a pre-built tree.
    """

    def __init__(
        self,
        data: ArrayLike,
        naive: bool = False,
        leaf_size: int = 1,
        *,
        tree: SpatialTree | None = None,
        prune: bool = True,
        logger: AuditLogger | None = None,
    ) -> None:
        points = as_point_matrix(data)

        if leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {leaf_size}")

        self.naive = naive
        self.leaf_size = leaf_size
        self.prune = prune
        self.logger = logger

        if tree is None:
            tree_leaf_size = max(points.shape[0], 1) if naive else leaf_size
            kdtree = KDTree(points, leaf_size=tree_leaf_size)
            self.tree: SpatialTree = kdtree
            self.data = kdtree.data
            self.old_from_new: NDArray[np.intp] | None = kdtree.old_from_new
        else:
            if naive:
                raise ValueError(
                    "naive mode is not available with a pre-built tree; "
                    "build the tree with a single leaf instead"
                )
            _check_tree_matches(tree, points)
            self.tree = tree
            self.data = points
            self.old_from_new = None

        self._num_points = int(self.data.shape[0])
        self._tracker = ComponentTracker(self._num_points)
        self._candidates = CandidateTable(self._num_points)
        self._components: NDArray[np.intp] = np.arange(self._num_points, dtype=np.intp)

    @classmethod
    def from_tree(
        cls,
        tree: SpatialTree,
        data: ArrayLike,
        *,
        prune: bool = True,
        logger: AuditLogger | None = None,
    ) -> DualTreeBoruvka:
        """Create the engine over an already built tree and its permuted points."""
        return cls(data, tree=tree, prune=prune, logger=logger)

    @property
    def num_points(self) -> int:
        return self._num_points

    @property
    def tracker(self) -> ComponentTracker:
        """Component tracker of the latest computation."""
        return self._tracker

    def compute_mst(self) -> MSTResult:
        """Iterate Boruvka rounds until all points form one component.

        Returns
        -------
        MSTResult
            ``n - 1`` edges (none for ``n <= 1``) sorted ascending by
            Euclidean distance, each as ``(lesser, greater, distance)``.
        """
        n = self._num_points
        self._tracker = ComponentTracker(n)
        found: list[tuple[int, int, float]] = []
        rounds = 0

        while self._tracker.component_count() > 1:
            rounds += 1
            self._components = reset_statistics(self.tree, self._tracker)
            self._candidates.clear()

            root = self.tree.root
            if self.naive:
                self._base_case(root, root)
            else:
                self._recurse(root, root, self.tree.min_distance(root, root))

            added = self._add_all_edges(found)
            if added == 0:
                raise RuntimeError(f"Boruvka round {rounds} merged no components")

            if self.logger:
                self.logger.round_finished(
                    round_index=rounds,
                    edges_added=added,
                    edges_total=len(found),
                    components=self._tracker.component_count(),
                )

        result = self._emit_results(found, rounds)

        if self.logger:
            self.logger.event("mst_complete", data=result.to_dict())

        return result

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _recurse(self, query: int, reference: int, lower_bound: float) -> None:
        tree = self.tree
        query_stat = tree.statistic(query)

        if self.prune:
            membership = query_stat.component_membership
            if membership != MIXED and membership == tree.statistic(reference).component_membership:
                return
            if lower_bound > query_stat.max_neighbor_distance:
                return

        query_leaf = tree.is_leaf(query)
        reference_leaf = tree.is_leaf(reference)

        if query_leaf and reference_leaf:
            self._base_case(query, reference)
        elif query_leaf:
            self._recurse_nearest_first(query, *tree.children(reference))
        elif reference_leaf:
            left, right = tree.children(query)
            self._recurse(left, reference, tree.min_distance(left, reference))
            self._recurse(right, reference, tree.min_distance(right, reference))
            propagate_bound(tree, query)
        else:
            left, right = tree.children(query)
            reference_left, reference_right = tree.children(reference)
            self._recurse_nearest_first(left, reference_left, reference_right)
            self._recurse_nearest_first(right, reference_left, reference_right)
            propagate_bound(tree, query)

    def _recurse_nearest_first(self, query: int, reference_a: int, reference_b: int) -> None:
        distance_a = self.tree.min_distance(query, reference_a)
        distance_b = self.tree.min_distance(query, reference_b)

        if distance_b < distance_a:
            self._recurse(query, reference_b, distance_b)
            self._recurse(query, reference_a, distance_a)
        else:
            self._recurse(query, reference_a, distance_a)
            self._recurse(query, reference_b, distance_b)

    def _base_case(self, query: int, reference: int) -> None:
        query_start, query_count = self.tree.point_range(query)
        reference_start, reference_count = self.tree.point_range(reference)
        if query_count == 0 or reference_count == 0:
            return

        components = self._components
        query_components = components[query_start : query_start + query_count]
        reference_components = components[reference_start : reference_start + reference_count]
        reference_points = self.data[reference_start : reference_start + reference_count]

        block_rows = max(1, _MAX_BLOCK_ELEMENTS // (reference_count * self.data.shape[1]))

        for block_start in range(0, query_count, block_rows):
            block_end = min(block_start + block_rows, query_count)
            block_points = self.data[query_start + block_start : query_start + block_end]
            block_components = query_components[block_start:block_end]

            diff = block_points[:, np.newaxis, :] - reference_points[np.newaxis, :, :]
            distances = np.einsum("ijk,ijk->ij", diff, diff)
            # Same-component pairs (self-pairs included) are not merge candidates.
            distances[block_components[:, np.newaxis] == reference_components[np.newaxis, :]] = np.inf

            nearest = np.argmin(distances, axis=1)
            nearest_distances = distances[np.arange(block_end - block_start), nearest]

            for offset in np.flatnonzero(np.isfinite(nearest_distances)):
                self._candidates.offer(
                    int(block_components[offset]),
                    query_start + block_start + int(offset),
                    reference_start + int(nearest[offset]),
                    float(nearest_distances[offset]),
                )

        tighten_leaf_bound(self.tree, query, components, self._candidates)

    # ------------------------------------------------------------------
    # Edge bookkeeping
    # ------------------------------------------------------------------

    def _add_all_edges(self, found: list[tuple[int, int, float]]) -> int:
        """Union along every component's candidate edge; return edges added.

        Several components may nominate the same pair of components; only
        the first union is effective and later ones are dropped.
        """
        added = 0
        for component in self._candidates.active_components():
            point_in, point_out, distance = self._candidates.edge(component)
            if self._tracker.union(point_in, point_out):
                found.append((point_in, point_out, distance))
                added += 1
        return added

    def _emit_results(self, found: list[tuple[int, int, float]], rounds: int) -> MSTResult:
        """Map edges to original indices and sort them by length."""
        edges: list[EdgePair] = []
        for point_a, point_b, squared in found:
            if self.old_from_new is not None:
                point_a = int(self.old_from_new[point_a])
                point_b = int(self.old_from_new[point_b])
            edges.append(EdgePair.between(point_a, point_b, math.sqrt(squared)))

        edges.sort(key=lambda edge: edge.distance)
        return MSTResult(edges=edges, rounds=rounds, num_points=self._num_points)


def _check_tree_matches(tree: SpatialTree, points: NDArray[np.float64]) -> None:
    if tree.num_points != points.shape[0]:
        raise ValueError(
            f"tree holds {tree.num_points} points but the dataset has {points.shape[0]}"
        )
    if points.shape[0] > 0 and tree.dimensions != points.shape[1]:
        raise ValueError(
            f"tree is {tree.dimensions}-dimensional but the dataset has {points.shape[1]} columns"
        )
    if not np.array_equal(tree.data, points):
        raise ValueError(
            "dataset does not match the tree's points; pass the tree's permuted data"
        )
