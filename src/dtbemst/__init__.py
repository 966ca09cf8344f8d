"""Euclidean minimum spanning trees with the Dual-Tree Boruvka algorithm.

This package provides:
- Components (dtbemst.components) — union-find component tracking
- Trees (dtbemst.tree) — spatial tree protocol and kd-tree
- Boruvka (dtbemst.boruvka) — dual-tree MST engine
- Parsing (dtbemst.parse) — point file loading
- Output (dtbemst.output) — edge list writers
- Engine (dtbemst.engine) — pipeline orchestration
- Audit (dtbemst.audit) — logging and traceability
- CLI (dtbemst.cli) — command-line interface
- Public API (dtbemst.api) — high-level convenience functions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from dtbemst.api import (
    PointsFormatError,
    compute_mst,
    emst,
    load_points,
    write_edges_csv,
)
from dtbemst.boruvka import DualTreeBoruvka, EdgePair, MSTResult

__all__ = [
    "__version__",
    "__license__",
    "DualTreeBoruvka",
    "EdgePair",
    "MSTResult",
    "compute_mst",
    "emst",
    "load_points",
    "write_edges_csv",
    "PointsFormatError",
]
