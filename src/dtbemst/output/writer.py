"""Writers for spanning tree edge lists and run summaries.

CSV output has one ``lesser,greater,distance`` row per edge and no header.
JSONL output has one object per edge with sorted keys. Both are written in
the order of the result (ascending distance), so output is deterministic.
"""

import json
from pathlib import Path
from typing import Any

from dtbemst.boruvka.models import MSTResult

__all__ = ["write_edges_csv", "write_edges_jsonl", "write_summary_json"]


def write_edges_csv(result: MSTResult, path: str | Path) -> int:
    """Write the edge list as CSV.

    Parameters
    ----------
    result : MSTResult
        Computed spanning tree.
    path : str | Path
        Output file path; parent directories are created.

    Returns
    -------
    int
        Number of rows written.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        for edge in result.edges:
            f.write(f"{edge.lesser},{edge.greater},{edge.distance!r}\n")

    return len(result.edges)


def write_edges_jsonl(result: MSTResult, path: str | Path) -> int:
    """Write the edge list as JSONL; returns the number of lines written."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        for edge in result.edges:
            f.write(json.dumps(edge.to_dict(), sort_keys=True) + "\n")

    return len(result.edges)


def write_summary_json(summary: dict[str, Any], path: str | Path) -> None:
    """Write a run summary as indented JSON with sorted keys."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with file_path.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2, sort_keys=True)
        f.write("\n")
