"""Edge and result models for the spanning-tree computation."""

import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class EdgePair:
    """An edge of the minimum spanning tree.

    Attributes
    ----------
    lesser : int
        Smaller point index of the edge.
    greater : int
        Larger point index of the edge.
    distance : float
        Euclidean length of the edge.
    """

    lesser: int
    greater: int
    distance: float

    @staticmethod
    def between(a: int, b: int, distance: float) -> "EdgePair":
        """Build an edge with its endpoints in ascending order."""
        if a > b:
            a, b = b, a
        return EdgePair(lesser=a, greater=b, distance=distance)

    def to_dict(self) -> dict[str, Any]:
        return {"lesser": self.lesser, "greater": self.greater, "distance": self.distance}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "EdgePair":
        return EdgePair(
            lesser=int(data["lesser"]),
            greater=int(data["greater"]),
            distance=float(data["distance"]),
        )


class CandidateTable:
    """Best known out-of-component edge for each component in a round.

    Slots are indexed by component representative (a point index), so the
    table is sized to the number of points and cleared between rounds.

    Attributes
    ----------
    distance : NDArray[np.float64]
        Best squared distance found for each component.
    point_in : NDArray[np.intp]
        Endpoint inside the component, ``-1`` when none was found.
    point_out : NDArray[np.intp]
        Endpoint outside the component.
    """

    def __init__(self, size: int) -> None:
        self.distance: NDArray[np.float64] = np.full(size, np.inf)
        self.point_in: NDArray[np.intp] = np.full(size, -1, dtype=np.intp)
        self.point_out: NDArray[np.intp] = np.full(size, -1, dtype=np.intp)

    def clear(self) -> None:
        self.distance.fill(np.inf)
        self.point_in.fill(-1)
        self.point_out.fill(-1)

    def offer(self, component: int, point_in: int, point_out: int, distance: float) -> bool:
        """Record the edge if it is strictly shorter than the component's best.

        Returns
        -------
        bool
            True if the candidate replaced the previous best.
        """
        if distance < self.distance[component]:
            self.distance[component] = distance
            self.point_in[component] = point_in
            self.point_out[component] = point_out
            return True
        return False

    def best_distance(self, component: int) -> float:
        return float(self.distance[component])

    def active_components(self) -> list[int]:
        """Components holding a candidate, in ascending order."""
        return [int(c) for c in np.flatnonzero(self.point_in >= 0)]

    def edge(self, component: int) -> tuple[int, int, float]:
        """Return ``(point_in, point_out, squared distance)`` for *component*."""
        return (
            int(self.point_in[component]),
            int(self.point_out[component]),
            float(self.distance[component]),
        )

    def __len__(self) -> int:
        return int(np.count_nonzero(self.point_in >= 0))


@dataclass
class MSTResult:
    """Result of a minimum spanning tree computation.

    Attributes
    ----------
    edges : list[EdgePair]
        Spanning tree edges in original point indices, ascending by distance.
    rounds : int
        Number of Boruvka rounds executed.
    num_points : int
        Number of points spanned.
    """

    edges: list[EdgePair] = field(default_factory=list)
    rounds: int = 0
    num_points: int = 0

    def __len__(self) -> int:
        return len(self.edges)

    @property
    def total_weight(self) -> float:
        """Sum of Euclidean edge lengths."""
        return math.fsum(edge.distance for edge in self.edges)

    @property
    def total_squared_length(self) -> float:
        """Sum of squared edge lengths."""
        return math.fsum(edge.distance * edge.distance for edge in self.edges)

    def to_array(self) -> NDArray[np.float64]:
        """Edges as an ``(n_edges, 3)`` matrix of ``[lesser, greater, distance]``."""
        if not self.edges:
            return np.empty((0, 3), dtype=np.float64)
        return np.array(
            [(edge.lesser, edge.greater, edge.distance) for edge in self.edges],
            dtype=np.float64,
        )

    def to_dict(self) -> dict[str, Any]:
        """Summary without the edge list."""
        return {
            "num_points": self.num_points,
            "num_edges": len(self.edges),
            "rounds": self.rounds,
            "total_weight": self.total_weight,
            "total_squared_length": self.total_squared_length,
        }
