"""Command-line interface for dtbemst."""

from dtbemst.cli.main import cli

__all__ = ["cli"]
