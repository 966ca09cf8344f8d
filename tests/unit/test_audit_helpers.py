"""Tests for audit helpers and the shared hashing/timestamp utilities."""

import hashlib
import subprocess
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from dtbemst.audit.helpers import (
    generate_run_id,
    get_dependency_versions,
    get_git_sha,
    get_package_version,
    get_platform_info,
    get_python_version,
    parse_iso_timestamp,
)
from dtbemst.utils import (
    calculate_file_sha256,
    calculate_string_sha256,
    get_file_mtime,
    get_iso_timestamp,
)

# ---------------------------------------------------------------------------
# Run metadata
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_generate_run_id_format_and_uniqueness() -> None:
    """Test run ID is an ISO timestamp plus a random hex suffix."""
    first = generate_run_id()
    second = generate_run_id()

    timestamp, suffix = first.split("__")
    assert timestamp.endswith("Z")
    parse_iso_timestamp(timestamp)
    assert len(suffix) == 8
    int(suffix, 16)

    assert first != second


@pytest.mark.unit
@pytest.mark.parametrize(
    "iso_str",
    ["2026-02-03T12:00:00Z", "2026-02-03T12:00:00+00:00", "2026-02-03T12:00:00.123456Z"],
)
def test_parse_iso_timestamp(iso_str: str) -> None:
    """Test both Z and +00:00 suffixes parse to aware datetimes."""
    result = parse_iso_timestamp(iso_str)

    assert isinstance(result, datetime)
    assert (result.year, result.month, result.day) == (2026, 2, 3)
    assert result.tzinfo is not None


@pytest.mark.unit
def test_get_git_sha_success() -> None:
    """Test git SHA is truncated to 7 chars on success."""
    with patch("subprocess.run", return_value=Mock(stdout="0123456789abcdef\n")):
        assert get_git_sha() == "0123456"


@pytest.mark.unit
@pytest.mark.parametrize(
    "side_effect",
    [subprocess.CalledProcessError(128, "git"), FileNotFoundError, subprocess.TimeoutExpired("git", 5)],
)
def test_get_git_sha_returns_none_on_failure(side_effect: type | Exception) -> None:
    """Test git SHA is None outside a repository or without git."""
    with patch("subprocess.run", side_effect=side_effect):
        assert get_git_sha() is None


@pytest.mark.unit
def test_environment_info_functions() -> None:
    """Test version/platform functions return non-empty strings."""
    assert get_python_version().count(".") >= 1
    assert get_platform_info().count("-") >= 2
    version = get_package_version()
    assert version == "unknown" or "." in version


@pytest.mark.unit
def test_get_dependency_versions() -> None:
    """Test installed packages report versions, absent ones 'unknown'."""
    versions = get_dependency_versions(["numpy", "nonexistent_xyz_pkg"])

    assert "." in versions["numpy"]
    assert versions["nonexistent_xyz_pkg"] == "unknown"


# ---------------------------------------------------------------------------
# Hashing and timestamps
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_file_and_string_digests_agree(tmp_path: Path) -> None:
    """Test file and string hashing give the same prefixed digest."""
    path = tmp_path / "edges.csv"
    path.write_bytes(b"0,1,1.0\n")
    expected = "sha256:" + hashlib.sha256(b"0,1,1.0\n").hexdigest()

    assert calculate_file_sha256(path) == expected
    assert calculate_string_sha256("0,1,1.0\n") == expected


@pytest.mark.unit
def test_file_digest_missing_file_raises(tmp_path: Path) -> None:
    """Test hashing a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        calculate_file_sha256(tmp_path / "absent.csv")


@pytest.mark.unit
def test_timestamps_are_utc_iso(tmp_path: Path) -> None:
    """Test timestamps end in Z and file mtimes drop microseconds."""
    path = tmp_path / "points.csv"
    path.write_text("0\n")

    assert get_iso_timestamp().endswith("Z")
    mtime = get_file_mtime(path)
    assert mtime is not None
    assert mtime.endswith("Z")
    assert "." not in mtime
    assert get_file_mtime(tmp_path / "absent.csv") is None
