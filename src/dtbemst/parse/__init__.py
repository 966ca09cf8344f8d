"""Loading point sets from disk."""

from dtbemst.parse.points import (
    SUPPORTED_EXTENSIONS,
    PointsFile,
    PointsFormatError,
    detect_delimiter,
    load_points,
    parse_points_text,
    read_points_file,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "PointsFile",
    "PointsFormatError",
    "detect_delimiter",
    "load_points",
    "parse_points_text",
    "read_points_file",
]
