"""Writing spanning tree results to disk."""

from dtbemst.output.writer import write_edges_csv, write_edges_jsonl, write_summary_json

__all__ = ["write_edges_csv", "write_edges_jsonl", "write_summary_json"]
