"""Axis-aligned hyper-rectangle bounds."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


class HRectBound:
    """Axis-aligned bounding box over a set of points.

    Distances reported by this class are squared Euclidean distances, the
    same space the spanning-tree search works in.

    Attributes
    ----------
    lo : NDArray[np.float64]
        Per-dimension minimum.
    hi : NDArray[np.float64]
        Per-dimension maximum.
    """

    def __init__(self, lo: NDArray[np.float64], hi: NDArray[np.float64]) -> None:
        self.lo = np.asarray(lo, dtype=np.float64)
        self.hi = np.asarray(hi, dtype=np.float64)

    @classmethod
    def from_points(cls, points: NDArray[np.float64]) -> HRectBound:
        """Smallest box containing every row of *points*.

        An empty point set gives an empty box (``lo = inf``, ``hi = -inf``).
        """
        if points.shape[0] == 0:
            dims = points.shape[1]
            return cls(np.full(dims, np.inf), np.full(dims, -np.inf))
        return cls(points.min(axis=0), points.max(axis=0))

    @property
    def dimensions(self) -> int:
        return int(self.lo.shape[0])

    def width(self) -> NDArray[np.float64]:
        """Per-dimension extent of the box."""
        return self.hi - self.lo

    def center(self) -> NDArray[np.float64]:
        return (self.lo + self.hi) / 2.0

    def contains(self, other: HRectBound) -> bool:
        """True if *other* lies entirely inside this box."""
        return bool(np.all(self.lo <= other.lo) and np.all(other.hi <= self.hi))

    def contains_point(self, point: NDArray[np.float64]) -> bool:
        return bool(np.all(self.lo <= point) and np.all(point <= self.hi))

    def min_distance(self, other: HRectBound) -> float:
        """Squared distance between the closest points of the two boxes.

        Zero when the boxes overlap.
        """
        gap = np.maximum(0.0, np.maximum(other.lo - self.hi, self.lo - other.hi))
        return float(np.dot(gap, gap))

    def max_distance(self, other: HRectBound) -> float:
        """Squared distance between the farthest points of the two boxes."""
        span = np.maximum(np.abs(other.hi - self.lo), np.abs(self.hi - other.lo))
        return float(np.dot(span, span))

    def __repr__(self) -> str:
        return f"HRectBound(lo={self.lo.tolist()}, hi={self.hi.tolist()})"
