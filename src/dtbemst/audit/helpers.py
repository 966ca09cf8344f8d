"""Helper utilities for audit logging.

Run ID generation plus git, package, platform and dependency
information for the run manifest.
"""

import importlib.metadata
import platform
import secrets
import subprocess
import sys
from datetime import UTC, datetime

__all__ = [
    "generate_run_id",
    "get_git_sha",
    "get_package_version",
    "get_python_version",
    "get_platform_info",
    "get_dependency_versions",
    "parse_iso_timestamp",
]

PACKAGE_NAME = "dtbemst"


def generate_run_id() -> str:
    """Generate unique run identifier.

    Returns
    -------
    str
        Run ID in format: ISO8601_timestamp__random_suffix.
    """
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    suffix = secrets.token_hex(4)
    return f"{timestamp}__{suffix}"


def parse_iso_timestamp(iso_str: str) -> datetime:
    """Parse ISO8601 timestamp string (``Z`` or ``+00:00`` suffix) to aware datetime."""
    return datetime.fromisoformat(iso_str.replace("Z", "+00:00"))


def get_git_sha() -> str | None:
    """Get current Git commit SHA if in repository.

    Returns
    -------
    str | None
        Short Git SHA (7 chars) or None if unavailable.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
        sha = result.stdout.strip()
        return sha[:7] if sha else None
    except (subprocess.SubprocessError, FileNotFoundError):
        return None


def get_package_version() -> str:
    """Get installed dtbemst version, or "unknown"."""
    try:
        return importlib.metadata.version(PACKAGE_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_python_version() -> str:
    """Get Python version string (e.g., "3.12.3")."""
    return sys.version.split()[0]


def get_platform_info() -> str:
    """Get platform string (e.g., "Linux-6.8.0-x86_64")."""
    return f"{platform.system()}-{platform.release()}-{platform.machine()}"


def get_dependency_versions(packages: list[str]) -> dict[str, str]:
    """Map each package name to its installed version ("unknown" if absent)."""
    versions: dict[str, str] = {}
    for package in packages:
        try:
            versions[package] = importlib.metadata.version(package)
        except importlib.metadata.PackageNotFoundError:
            versions[package] = "unknown"
    return versions
