"""Tests for CLI module."""

import json
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from click.testing import CliRunner

from dtbemst.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Provide Click test CLI runner."""
    return CliRunner()


# ---------------------------------------------------------------------------
# Top-level CLI
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_cli_version_flag(runner: CliRunner) -> None:
    """Test --version flag outputs version string."""
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "dtbemst" in result.output


@pytest.mark.unit
def test_cli_help(runner: CliRunner) -> None:
    """Test --help output lists commands."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "compute" in result.output
    assert "run" in result.output
    assert "verify" in result.output


@pytest.mark.unit
def test_cli_invalid_command(runner: CliRunner) -> None:
    """Test invalid command returns non-zero exit code."""
    result = runner.invoke(cli, ["invalid-command"])

    assert result.exit_code != 0


# ---------------------------------------------------------------------------
# compute command
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_compute_writes_edges(
    runner: CliRunner,
    collinear_points: np.ndarray,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test compute writes the edge CSV and reports the total length."""
    output = tmp_path / "edges.csv"

    result = runner.invoke(cli, ["compute", str(write_points(collinear_points)), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert "Wrote 4 edges" in result.output
    assert "total length 11" in result.output
    assert output.read_text().splitlines() == ["0,1,1.0", "1,2,1.0", "3,4,1.0", "2,3,8.0"]


@pytest.mark.unit
@pytest.mark.parametrize("extra", [["--naive"], ["--leaf-size", "3"], ["-l", "2", "-v"]])
def test_compute_options(
    runner: CliRunner,
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    tmp_path: Path,
    extra: list[str],
) -> None:
    """Test search options all produce n - 1 edges."""
    input_file = write_points(rng.random((25, 2)), name="points.npy")
    output = tmp_path / "edges.csv"

    result = runner.invoke(cli, ["compute", str(input_file), "-o", str(output), *extra])

    assert result.exit_code == 0, result.output
    assert len(output.read_text().splitlines()) == 24


@pytest.mark.unit
def test_compute_rejects_zero_leaf_size(
    runner: CliRunner,
    collinear_points: np.ndarray,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test --leaf-size below one is a usage error."""
    result = runner.invoke(
        cli,
        ["compute", str(write_points(collinear_points)), "-o", str(tmp_path / "e.csv"), "-l", "0"],
    )

    assert result.exit_code == 2


@pytest.mark.unit
def test_compute_malformed_input(runner: CliRunner, tmp_path: Path) -> None:
    """Test a malformed points file exits 1 with an error message."""
    input_file = tmp_path / "bad.csv"
    input_file.write_text("1,2\n3\n", encoding="utf-8")

    result = runner.invoke(cli, ["compute", str(input_file), "-o", str(tmp_path / "e.csv")])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "line 2" in result.output


@pytest.mark.unit
def test_compute_missing_input(runner: CliRunner, tmp_path: Path) -> None:
    """Test a missing input path is rejected by click."""
    result = runner.invoke(cli, ["compute", str(tmp_path / "absent.csv"), "-o", "e.csv"])

    assert result.exit_code == 2


# ---------------------------------------------------------------------------
# run and verify commands
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_run_command(
    runner: CliRunner,
    collinear_points: np.ndarray,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test run writes the audited output directory."""
    output_dir = tmp_path / "out"

    result = runner.invoke(
        cli,
        ["run", str(write_points(collinear_points)), "-o", str(output_dir), "--no-jsonl", "-v"],
    )

    assert result.exit_code == 0, result.output
    assert "Spanning tree over 5 points: 4 edges" in result.output
    assert (output_dir / "artifacts" / "mst_edges.csv").exists()
    assert not (output_dir / "artifacts" / "mst_edges.jsonl").exists()

    summary = json.loads((output_dir / "reports" / "mst_summary.json").read_text())
    assert "execution_time_seconds" in summary


@pytest.mark.unit
def test_run_command_failure(runner: CliRunner, tmp_path: Path) -> None:
    """Test a failed pipeline exits 1."""
    input_file = tmp_path / "bad.csv"
    input_file.write_text("1,nan\n", encoding="utf-8")

    result = runner.invoke(cli, ["run", str(input_file), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Pipeline failed" in result.output


@pytest.mark.unit
def test_verify_command(
    runner: CliRunner,
    collinear_points: np.ndarray,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test verify accepts a pipeline output directory."""
    output_dir = tmp_path / "out"
    runner.invoke(cli, ["run", str(write_points(collinear_points)), "-o", str(output_dir)])

    result = runner.invoke(cli, ["verify", str(output_dir)])

    assert result.exit_code == 0, result.output
    assert "events are valid" in result.output


@pytest.mark.unit
def test_verify_command_rejects_tampered_manifest(
    runner: CliRunner,
    collinear_points: np.ndarray,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test verify fails when run.json no longer matches its schema."""
    output_dir = tmp_path / "out"
    runner.invoke(cli, ["run", str(write_points(collinear_points)), "-o", str(output_dir)])

    manifest_path = output_dir / "run.json"
    manifest = json.loads(manifest_path.read_text())
    manifest["status"] = "finished"
    manifest_path.write_text(json.dumps(manifest))

    result = runner.invoke(cli, ["verify", str(output_dir)])

    assert result.exit_code == 1
    assert "Invalid run output" in result.output


@pytest.mark.unit
def test_verify_command_missing_events(runner: CliRunner, tmp_path: Path) -> None:
    """Test verify fails on a directory without run outputs."""
    result = runner.invoke(cli, ["verify", str(tmp_path)])

    assert result.exit_code == 1
    assert "File not found" in result.output
