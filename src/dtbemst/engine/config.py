"""Pipeline configuration and result dataclasses."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass
class PipelineConfig:
    """Configuration for an EMST pipeline run.

    Attributes
    ----------
    naive : bool
        Use the exhaustive O(n^2) search instead of the dual-tree search.
    leaf_size : int
        Maximum number of points per kd-tree leaf (default: 1).
    output_dir : Path
        Base directory for all outputs.
    write_jsonl : bool
        Also write the edge list as JSONL next to the CSV.
    track_execution_time : bool
        Record the MST computation wall-clock time in mst_summary.json.
    """

    naive: bool = False
    leaf_size: int = 1
    output_dir: Path = Path("out")
    write_jsonl: bool = True
    track_execution_time: bool = False

    def __post_init__(self) -> None:
        """Validate and coerce fields."""
        if self.leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {self.leaf_size}")

        self.output_dir = Path(self.output_dir)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["output_dir"] = str(self.output_dir)
        return data


@dataclass
class PipelineResult:
    """Results from pipeline execution.

    Attributes
    ----------
    success : bool
        Whether pipeline completed successfully.
    total_points : int
        Points loaded from the input.
    dimensions : int
        Coordinates per point.
    total_edges : int
        Edges in the spanning tree.
    total_weight : float
        Sum of Euclidean edge lengths.
    rounds : int
        Boruvka rounds executed.
    output_files : dict[str, str]
        Map of artifact type to file path.
    error_message : str | None
        Error message if failed.
    """

    success: bool
    total_points: int
    dimensions: int
    total_edges: int
    total_weight: float
    rounds: int
    output_files: dict[str, str]
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
