"""Tests for run context module."""

import json
from pathlib import Path

import pytest

from dtbemst.audit.context import RunContext
from dtbemst.audit.models import FileInfo, InputsInfo


def _read_manifest(output_dir: Path) -> dict:
    """Read and parse run.json."""
    with (output_dir / "run.json").open() as f:
        return json.load(f)


def _read_events(output_dir: Path) -> list[dict]:
    """Read and parse events.jsonl."""
    with (output_dir / "events.jsonl").open() as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.mark.unit
def test_context_start_creates_structure(tmp_path: Path) -> None:
    """Test start() creates dirs, events file, and sets run_id."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={"leaf_size": 1})

    assert run.run_id is not None
    assert "__" in run.run_id
    assert output_dir.exists()
    assert (output_dir / "artifacts").is_dir()
    assert (output_dir / "reports").is_dir()
    assert (output_dir / "events.jsonl").exists()

    run.finish(status="success")


@pytest.mark.unit
def test_context_tracks_numeric_stack(tmp_path: Path) -> None:
    """Test the manifest environment lists the runtime dependencies."""
    run = RunContext.start(output_dir=tmp_path / "output", parameters={})

    assert set(run.manifest_writer.manifest.environment.dependencies) == {"numpy", "click", "jsonschema"}

    run.finish(status="success")


@pytest.mark.unit
def test_context_stage_lifecycle(tmp_path: Path) -> None:
    """Test start_stage → finish_stage records timing and counters."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={})

    run.start_stage("s1", expected_points=50)
    run.finish_stage("s1", counters={"edges": 49, "rounds": 4})

    stage = run.manifest_writer.manifest.stages[0]
    assert stage.name == "s1"
    assert stage.finished_at is not None
    assert stage.duration_seconds is not None
    assert stage.duration_seconds >= 0
    assert stage.counters["edges"] == 49

    run.finish(status="success")


@pytest.mark.unit
def test_context_finish_stage_not_started_raises(tmp_path: Path) -> None:
    """Test finishing a stage that was never started raises ValueError."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={})

    with pytest.raises(ValueError, match="Stage not started"):
        run.finish_stage("ghost")

    run.finish(status="failed")


@pytest.mark.unit
def test_context_register_artifact(tmp_path: Path) -> None:
    """Test artifacts are hashed and stored relative to the output dir."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={})
    run.start_stage("s4")
    path = output_dir / "artifacts" / "mst_edges.csv"
    path.write_text("0,1,1.0\n")

    artifact = run.register_artifact("s4", path, record_count=1)
    run.finish_stage("s4")
    run.finish(status="success")

    assert artifact.path == "artifacts/mst_edges.csv"
    assert artifact.bytes == 8
    assert artifact.sha256.startswith("sha256:")

    written = [e for e in _read_events(output_dir) if e["event"] == "artifact_written"]
    assert written[0]["data"]["path"] == "artifacts/mst_edges.csv"
    assert written[0]["data"]["record_count"] == 1
    assert written[0]["stage"] == "s4"


@pytest.mark.unit
def test_context_set_inputs(tmp_path: Path) -> None:
    """Test the input inventory reaches run.json."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={})

    run.set_inputs(
        InputsInfo(
            root="data",
            files=[
                FileInfo(
                    name="points.npy",
                    format="npy",
                    bytes=208,
                    sha256="sha256:" + "b" * 64,
                    points_loaded=10,
                    dimensions=2,
                )
            ],
            total_points=10,
        )
    )
    run.finish(status="success", points_processed=10)

    data = _read_manifest(output_dir)
    assert data["inputs"]["files"][0]["format"] == "npy"
    assert data["inputs"]["total_points"] == 10


@pytest.mark.unit
def test_context_error_recording(tmp_path: Path) -> None:
    """Test record_error adds error to manifest and events."""
    output_dir = tmp_path / "output"
    run = RunContext.start(output_dir=output_dir, parameters={})

    exc = ValueError("bad input")
    run.record_error(exc, stage="s1", include_traceback=True)

    error = run.manifest_writer.manifest.errors[0]
    assert error.exception_class == "ValueError"
    assert error.message == "bad input"
    assert error.stage == "s1"
    assert error.traceback is not None

    run.finish(status="failed")

    error_events = [e for e in _read_events(output_dir) if e["event"] == "error"]
    assert error_events[0]["level"] == "ERROR"
    assert error_events[0]["stage"] == "s1"


@pytest.mark.unit
def test_context_manager_success(tmp_path: Path) -> None:
    """Test context manager writes success manifest on clean exit."""
    output_dir = tmp_path / "output"

    with RunContext.start(output_dir=output_dir, parameters={}) as run:
        run.start_stage("s1")
        run.finish_stage("s1", counters={"n": 10})

    data = _read_manifest(output_dir)
    assert data["status"] == "success"
    assert data["duration_seconds"] > 0


@pytest.mark.unit
def test_context_manager_exception(tmp_path: Path) -> None:
    """Test context manager writes failed manifest on exception."""
    output_dir = tmp_path / "output"

    with pytest.raises(RuntimeError):
        with RunContext.start(output_dir=output_dir, parameters={}):
            raise RuntimeError("boom")

    data = _read_manifest(output_dir)
    assert data["status"] == "failed"
    assert len(data["errors"]) == 1
    assert data["errors"][0]["exception_class"] == "RuntimeError"


@pytest.mark.unit
def test_context_full_workflow_produces_valid_outputs(tmp_path: Path) -> None:
    """Test full workflow: events.jsonl has all lifecycle events, run.json is complete."""
    output_dir = tmp_path / "output"

    run = RunContext.start(
        output_dir=output_dir,
        parameters={"naive": False, "leaf_size": 8},
        command_argv=["dtbemst", "run"],
    )
    run.start_stage("stage1_load", expected_points=100)
    run.finish_stage("stage1_load", counters={"points": 100, "dimensions": 3})
    run.finish(status="success", points_processed=100)

    events = _read_events(output_dir)
    event_types = [e["event"] for e in events]
    assert event_types == ["run_started", "stage_started", "stage_finished", "run_finished"]
    assert all(e["run_id"] == run.run_id for e in events)
    assert events[-1]["data"]["points_processed"] == 100

    data = _read_manifest(output_dir)
    assert data["status"] == "success"
    assert data["manifest_version"] == "1.0.0"
    assert data["parameters"]["leaf_size"] == 8
    assert data["command"]["argv"] == ["dtbemst", "run"]
    assert data["environment"]["python_version"] is not None
    assert len(data["stages"]) == 1
    assert data["stages"][0]["counters"]["dimensions"] == 3
    assert data["duration_seconds"] > 0

    # events.jsonl is hashed in outputs
    artifact_paths = [a["path"] for a in data["outputs"]["artifacts"]]
    assert "events.jsonl" in artifact_paths
