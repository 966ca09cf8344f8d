"""End-to-end tests: points file in, audited spanning tree out."""

import json
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from click.testing import CliRunner

from dtbemst import compute_mst, emst
from dtbemst.audit import validate_run_outputs
from dtbemst.boruvka import MSTResult
from dtbemst.cli.main import cli
from dtbemst.components import ComponentTracker
from dtbemst.engine import PipelineConfig, run_pipeline


def _read_edges_csv(path: Path) -> list[tuple[int, int, float]]:
    rows = []
    for line in path.read_text().splitlines():
        lesser, greater, distance = line.split(",")
        rows.append((int(lesser), int(greater), float(distance)))
    return rows


@pytest.mark.integration
def test_end_to_end_pipeline_matches_brute_force(
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    prim_weight: Callable[[np.ndarray], float],
    tmp_path: Path,
) -> None:
    """Test the pipeline's edge list is a spanning tree of brute-force length."""
    points = rng.random((400, 3))
    output_dir = tmp_path / "out"

    result = run_pipeline(
        write_points(points, name="points.npy"),
        config=PipelineConfig(output_dir=output_dir, leaf_size=8),
    )

    assert result.success is True
    assert result.total_edges == 399

    edges = _read_edges_csv(output_dir / "artifacts" / "mst_edges.csv")
    tracker = ComponentTracker(400)
    for lesser, greater, distance in edges:
        assert tracker.union(lesser, greater)
        assert distance == pytest.approx(float(np.linalg.norm(points[lesser] - points[greater])))
    assert tracker.component_count() == 1

    expected = prim_weight(points)
    assert result.total_weight == pytest.approx(expected, rel=1e-9)
    assert sum(d for _, _, d in edges) == pytest.approx(expected, rel=1e-9)

    assert validate_run_outputs(output_dir) > 0


@pytest.mark.integration
def test_end_to_end_outputs_agree(
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test CSV, JSONL, summary and manifest describe the same tree."""
    output_dir = tmp_path / "out"
    result = emst(write_points(rng.normal(size=(150, 2))), output_dir=output_dir, leaf_size=4)

    csv_edges = _read_edges_csv(output_dir / "artifacts" / "mst_edges.csv")
    with (output_dir / "artifacts" / "mst_edges.jsonl").open() as f:
        jsonl_edges = [json.loads(line) for line in f]
    summary = json.loads((output_dir / "reports" / "mst_summary.json").read_text())
    manifest = json.loads((output_dir / "run.json").read_text())

    assert [(e["lesser"], e["greater"], e["distance"]) for e in jsonl_edges] == csv_edges
    assert summary["num_edges"] == len(csv_edges) == result.total_edges
    assert summary["total_weight"] == result.total_weight
    assert summary["leaf_size"] == 4
    assert manifest["status"] == "success"

    stages = {stage["name"]: stage for stage in manifest["stages"]}
    assert stages["stage3_mst"]["counters"]["rounds"] == summary["rounds"]


@pytest.mark.integration
def test_end_to_end_pipeline_determinism(
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test two runs over the same input write byte-identical edge lists."""
    input_file = write_points(rng.random((120, 4)))

    for name in ("run_a", "run_b"):
        run_pipeline(input_file, config=PipelineConfig(output_dir=tmp_path / name, leaf_size=2))

    for artifact in ("mst_edges.csv", "mst_edges.jsonl"):
        first = (tmp_path / "run_a" / "artifacts" / artifact).read_bytes()
        second = (tmp_path / "run_b" / "artifacts" / artifact).read_bytes()
        assert first == second

    manifest_a = json.loads((tmp_path / "run_a" / "run.json").read_text())
    manifest_b = json.loads((tmp_path / "run_b" / "run.json").read_text())
    assert manifest_a["run_id"] != manifest_b["run_id"]
    assert manifest_a["outputs"]["artifacts"][0]["sha256"] == manifest_b["outputs"]["artifacts"][0]["sha256"]


@pytest.mark.integration
def test_end_to_end_naive_and_tree_agree(
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test the naive pipeline writes the same edges as the tree pipeline."""
    input_file = write_points(rng.random((90, 2)))

    run_pipeline(input_file, config=PipelineConfig(output_dir=tmp_path / "tree"))
    run_pipeline(input_file, config=PipelineConfig(output_dir=tmp_path / "naive", naive=True))

    tree_edges = _read_edges_csv(tmp_path / "tree" / "artifacts" / "mst_edges.csv")
    naive_edges = _read_edges_csv(tmp_path / "naive" / "artifacts" / "mst_edges.csv")
    assert tree_edges == naive_edges


@pytest.mark.integration
def test_end_to_end_cli_matches_api(
    rng: np.random.Generator,
    write_points: Callable[..., Path],
    tmp_path: Path,
) -> None:
    """Test the compute command writes exactly the API's edges."""
    points = rng.random((80, 3))
    input_file = write_points(points, name="points.tsv", delimiter="\t")
    output = tmp_path / "edges.csv"

    result = CliRunner().invoke(cli, ["compute", str(input_file), "-o", str(output), "-l", "4"])

    assert result.exit_code == 0, result.output
    expected: MSTResult = compute_mst(points, leaf_size=4)
    assert _read_edges_csv(output) == [(e.lesser, e.greater, e.distance) for e in expected.edges]


@pytest.mark.integration
def test_end_to_end_pipeline_error_handling(tmp_path: Path) -> None:
    """Test a bad input leaves a failed but schema-valid run directory."""
    input_file = tmp_path / "points.csv"
    input_file.write_text("0,0\n1,1\n2,two\n", encoding="utf-8")
    output_dir = tmp_path / "out"

    result = run_pipeline(input_file, config=PipelineConfig(output_dir=output_dir))

    assert result.success is False
    assert "line 3" in result.error_message
    assert not (output_dir / "artifacts" / "mst_edges.csv").exists()

    validate_run_outputs(output_dir)
    manifest = json.loads((output_dir / "run.json").read_text())
    assert manifest["status"] == "failed"
    assert [stage["name"] for stage in manifest["stages"]] == ["stage1_load"]
    assert manifest["stages"][0]["finished_at"] is None
