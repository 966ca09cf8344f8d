"""Timestamp utilities for dtbemst."""

from datetime import UTC, datetime
from pathlib import Path

__all__ = ["get_iso_timestamp", "get_file_mtime"]


def get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO8601 format with microseconds.

    Returns
    -------
    str
        ISO8601 timestamp with microseconds (e.g., "2026-02-03T12:34:56.123456Z").
    """
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def get_file_mtime(file_path: Path) -> str | None:
    """Get modification time of a file as ISO8601 timestamp.

    Parameters
    ----------
    file_path : Path
        Path to file.

    Returns
    -------
    str | None
        ISO8601 timestamp truncated to seconds, or None if the file
        cannot be stat'ed.
    """
    try:
        mtime = datetime.fromtimestamp(file_path.stat().st_mtime, UTC)
    except (OSError, ValueError):
        return None
    return mtime.replace(microsecond=0).isoformat().replace("+00:00", "Z")
