"""Pytest configuration and fixtures for test suite."""

import math
import sys
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from dtbemst.boruvka import MSTResult  # noqa: E402
from dtbemst.components import ComponentTracker  # noqa: E402

COLLINEAR_POINTS = [[0.0], [1.0], [2.0], [10.0], [11.0]]
"""Five points on a line; their spanning tree has total length 11."""


def prim_mst_weight(points: np.ndarray) -> float:
    """Total Euclidean length of the MST by brute-force Prim, O(n^2)."""
    n = points.shape[0]
    if n <= 1:
        return 0.0

    in_tree = np.zeros(n, dtype=bool)
    best = np.full(n, np.inf)
    best[0] = 0.0
    lengths: list[float] = []

    for _ in range(n):
        nearest = int(np.argmin(np.where(in_tree, np.inf, best)))
        lengths.append(math.sqrt(best[nearest]))
        in_tree[nearest] = True
        diff = points - points[nearest]
        best = np.minimum(best, np.einsum("ij,ij->i", diff, diff))

    return math.fsum(lengths)


def assert_spanning_tree(result: MSTResult, num_points: int) -> None:
    """Assert the edges connect all points without forming a cycle."""
    assert len(result) == max(num_points - 1, 0)

    tracker = ComponentTracker(num_points)
    for edge in result.edges:
        assert 0 <= edge.lesser < edge.greater < num_points
        assert tracker.union(edge.lesser, edge.greater), f"cycle at {edge}"

    assert tracker.component_count() == min(num_points, 1)

    distances = [edge.distance for edge in result.edges]
    assert distances == sorted(distances)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator so point sets are reproducible."""
    return np.random.default_rng(20100725)


@pytest.fixture
def collinear_points() -> np.ndarray:
    """Five points at 0, 1, 2, 10 and 11 on a line."""
    return np.array(COLLINEAR_POINTS)


@pytest.fixture
def write_points(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a point matrix to a file under tmp_path."""

    def _factory(points: np.ndarray, name: str = "points.csv", delimiter: str = ",") -> Path:
        path = tmp_path / name
        if path.suffix == ".npy":
            np.save(path, points)
        else:
            lines = [delimiter.join(repr(float(x)) for x in row) for row in np.asarray(points)]
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def prim_weight() -> Callable[[np.ndarray], float]:
    """Brute-force reference for the total MST length."""
    return prim_mst_weight


@pytest.fixture
def check_spanning_tree() -> Callable[[MSTResult, int], None]:
    """Assertion helper for spanning-tree structure and edge order."""
    return assert_spanning_tree
