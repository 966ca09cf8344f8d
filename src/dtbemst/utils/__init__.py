"""Common utility functions for dtbemst.

Shared helpers for hashing output artifacts and producing timestamps
for the audit trail.
"""

from dtbemst.utils.hashing import (
    calculate_file_sha256,
    calculate_string_sha256,
    format_sha256,
)
from dtbemst.utils.timestamps import get_file_mtime, get_iso_timestamp

__all__ = [
    "get_iso_timestamp",
    "get_file_mtime",
    "calculate_file_sha256",
    "calculate_string_sha256",
    "format_sha256",
]
