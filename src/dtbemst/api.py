"""Public API for computing Euclidean minimum spanning trees.

This module provides the main public API for dtbemst, enabling:
- Computing the MST of an in-memory point matrix
- Loading points from files and exporting edge lists
- Running the audited file-to-file pipeline
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from numpy.typing import ArrayLike

from dtbemst.boruvka import DualTreeBoruvka, MSTResult
from dtbemst.output import write_edges_csv
from dtbemst.parse import PointsFormatError, load_points

if TYPE_CHECKING:
    from dtbemst.engine.config import PipelineResult

__all__ = [
    "compute_mst",
    "emst",
    "load_points",
    "write_edges_csv",
    "PointsFormatError",
]


def compute_mst(
    points: ArrayLike,
    *,
    naive: bool = False,
    leaf_size: int = 1,
) -> MSTResult:
    """Compute the Euclidean minimum spanning tree of a point matrix.

    Parameters
    ----------
    points : ArrayLike
        Points, shape ``(n, d)``.
    naive : bool, optional
        Use the exhaustive O(n^2) search, by default False.
    leaf_size : int, optional
        Maximum points per kd-tree leaf, by default 1.

    Returns
    -------
    MSTResult
        ``n - 1`` edges in the caller's row indices, ascending by distance.

    Raises
    ------
    ValueError
        If *points* is not a finite ``(n, d)`` matrix or ``leaf_size < 1``.

    Examples
    --------
        >>> from dtbemst import compute_mst
        >>> result = compute_mst([[0.0], [1.0], [2.0], [10.0], [11.0]])
        >>> result.total_weight
        11.0
    """
    return DualTreeBoruvka(points, naive=naive, leaf_size=leaf_size).compute_mst()


def emst(
    input_path: str | Path,
    *,
    output_dir: str | Path = "out",
    naive: bool = False,
    leaf_size: int = 1,
) -> PipelineResult:
    """Compute the EMST of a points file and write audited outputs.

    Simplified interface to the full pipeline.

    Parameters
    ----------
    input_path : str | Path
        Points file (.csv, .tsv, .txt or .npy).
    output_dir : str | Path, optional
        Directory for output files, by default "out".
    naive : bool, optional
        Use the exhaustive O(n^2) search, by default False.
    leaf_size : int, optional
        Maximum points per kd-tree leaf, by default 1.

    Returns
    -------
    PipelineResult
        Pipeline result with statistics and output file paths.

    Raises
    ------
    FileNotFoundError
        If input path does not exist.
    PointsFormatError
        If the pipeline fails.

    Examples
    --------
        >>> from dtbemst import emst
        >>> result = emst("points.csv", output_dir="results", leaf_size=8)
        >>> print(result.output_files["edges_csv"])
    """
    from dtbemst.engine import PipelineConfig, run_pipeline

    input_path_obj = Path(input_path)

    if not input_path_obj.exists():
        raise FileNotFoundError(f"Input path not found: {input_path}")

    config = PipelineConfig(
        naive=naive,
        leaf_size=leaf_size,
        output_dir=Path(output_dir),
    )

    result = run_pipeline(input_path=input_path_obj, config=config)

    if not result.success:
        raise PointsFormatError(
            f"EMST computation failed: {result.error_message}",
            file=str(input_path_obj),
        )

    return result
