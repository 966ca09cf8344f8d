"""End-to-end EMST pipeline runner.

This module chains the four stages of a run into a single deterministic,
auditable pipeline.

Architecture Flow:
    Stage 1: Load points
    Stage 2: Build the spatial tree
    Stage 3: Dual-Tree Boruvka MST computation
    Stage 4: Write edge list and summary

Every run writes ``run.json`` (manifest) and ``events.jsonl`` (audit
events) into the output directory alongside its artifacts.
"""

import time
from pathlib import Path

from dtbemst.audit import RunContext
from dtbemst.audit.models import FileInfo, InputsInfo
from dtbemst.boruvka import DualTreeBoruvka, MSTResult
from dtbemst.engine.config import PipelineConfig, PipelineResult
from dtbemst.output import write_edges_csv, write_edges_jsonl, write_summary_json
from dtbemst.parse import PointsFile, read_points_file
from dtbemst.tree import KDTree

STAGE_LOAD = "stage1_load"
STAGE_BUILD_TREE = "stage2_build_tree"
STAGE_MST = "stage3_mst"
STAGE_WRITE = "stage4_write"


def _failed_result(error_message: str, total_points: int = 0, dimensions: int = 0) -> PipelineResult:
    return PipelineResult(
        success=False,
        total_points=total_points,
        dimensions=dimensions,
        total_edges=0,
        total_weight=0.0,
        rounds=0,
        output_files={},
        error_message=error_message,
    )


# ---------------------------------------------------------------------------
# Individual stage functions
# ---------------------------------------------------------------------------


def _stage1_load(input_path: Path, run: RunContext) -> PointsFile:
    """Stage 1: Read the points file and record it in the manifest inputs."""
    run.start_stage(STAGE_LOAD)

    points_file = read_points_file(input_path)

    run.set_inputs(
        InputsInfo(
            root=input_path.parent.name,
            files=[
                FileInfo(
                    name=input_path.name,
                    format=points_file.format,
                    bytes=points_file.file_size,
                    sha256=points_file.file_digest,
                    points_loaded=points_file.num_points,
                    dimensions=points_file.dimensions,
                    mtime=points_file.file_mtime,
                )
            ],
            total_points=points_file.num_points,
        )
    )

    run.finish_stage(
        STAGE_LOAD,
        counters={
            "points": points_file.num_points,
            "dimensions": points_file.dimensions,
        },
    )
    return points_file


def _stage2_build_tree(
    points_file: PointsFile,
    config: PipelineConfig,
    run: RunContext,
) -> DualTreeBoruvka:
    """Stage 2: Build the kd-tree and the engine over it."""
    run.start_stage(STAGE_BUILD_TREE, expected_points=points_file.num_points)

    engine = DualTreeBoruvka(
        points_file.points,
        naive=config.naive,
        leaf_size=config.leaf_size,
        logger=run.audit_logger,
    )

    counters: dict[str, int] = {}
    if isinstance(engine.tree, KDTree):
        counters = {
            "nodes": engine.tree.num_nodes,
            "leaves": sum(1 for _ in engine.tree.leaves()),
            "depth": engine.tree.depth(),
        }

    run.finish_stage(STAGE_BUILD_TREE, counters=counters)
    return engine


def _stage3_compute_mst(engine: DualTreeBoruvka, run: RunContext) -> tuple[MSTResult, float]:
    """Stage 3: Run Dual-Tree Boruvka; returns the result and elapsed seconds."""
    run.start_stage(STAGE_MST, expected_points=engine.num_points)

    started = time.perf_counter()
    result = engine.compute_mst()
    elapsed = time.perf_counter() - started

    run.finish_stage(
        STAGE_MST,
        counters={"edges": len(result), "rounds": result.rounds},
    )
    return result, elapsed


def _stage4_write_results(
    result: MSTResult,
    config: PipelineConfig,
    elapsed_seconds: float,
    run: RunContext,
) -> dict[str, str]:
    """Stage 4: Write the edge list artifacts and the summary report."""
    run.start_stage(STAGE_WRITE)

    output_dir = config.output_dir
    output_files: dict[str, str] = {}

    edges_csv = output_dir / "artifacts" / "mst_edges.csv"
    rows = write_edges_csv(result, edges_csv)
    run.register_artifact(STAGE_WRITE, edges_csv, record_count=rows)
    output_files["edges_csv"] = str(edges_csv)

    if config.write_jsonl:
        edges_jsonl = output_dir / "artifacts" / "mst_edges.jsonl"
        rows = write_edges_jsonl(result, edges_jsonl)
        run.register_artifact(STAGE_WRITE, edges_jsonl, record_count=rows)
        output_files["edges_jsonl"] = str(edges_jsonl)

    summary = result.to_dict()
    summary["naive"] = config.naive
    summary["leaf_size"] = config.leaf_size
    if config.track_execution_time:
        summary["execution_time_seconds"] = elapsed_seconds

    summary_path = output_dir / "reports" / "mst_summary.json"
    write_summary_json(summary, summary_path)
    run.register_artifact(STAGE_WRITE, summary_path)
    output_files["summary"] = str(summary_path)

    run.finish_stage(STAGE_WRITE, counters={"artifacts": len(output_files)})
    return output_files


# ---------------------------------------------------------------------------
# Pipeline runner
# ---------------------------------------------------------------------------


def run_pipeline(
    input_path: Path | str,
    config: PipelineConfig | None = None,
    command_argv: list[str] | None = None,
) -> PipelineResult:
    """Run the complete EMST pipeline.

    Stage failures do not raise: they are recorded in the manifest and the
    audit log, and reported through ``PipelineResult.error_message``.

    Parameters
    ----------
    input_path : Path | str
        Path to a points file (.csv, .tsv, .txt or .npy).
    config : PipelineConfig | None, optional
        Pipeline configuration. If None, uses defaults.
    command_argv : list[str] | None, optional
        Command line recorded in the manifest, defaults to sys.argv.

    Returns
    -------
    PipelineResult
        Pipeline execution results.

    Examples
    --------
    Run with defaults:

        >>> from dtbemst.engine import run_pipeline
        >>> result = run_pipeline("data/points.csv")
        >>> if result.success:
        ...     print(f"{result.total_edges} edges, weight {result.total_weight}")

    Run with custom config:

        >>> from dtbemst.engine import PipelineConfig
        >>> config = PipelineConfig(leaf_size=16, output_dir=Path("results"))
        >>> result = run_pipeline(Path("data/points.csv"), config=config)
    """
    input_path = Path(input_path)

    if config is None:
        config = PipelineConfig()

    if not input_path.exists():
        return _failed_result(f"Input path does not exist: {input_path}")

    run = RunContext.start(
        output_dir=config.output_dir,
        parameters=config.to_dict(),
        command_argv=command_argv,
    )

    total_points = 0
    dimensions = 0
    current_stage = STAGE_LOAD

    try:
        points_file = _stage1_load(input_path, run)
        total_points = points_file.num_points
        dimensions = points_file.dimensions

        current_stage = STAGE_BUILD_TREE
        engine = _stage2_build_tree(points_file, config, run)

        current_stage = STAGE_MST
        result, elapsed = _stage3_compute_mst(engine, run)

        current_stage = STAGE_WRITE
        output_files = _stage4_write_results(result, config, elapsed, run)

    except Exception as e:
        run.record_error(e, stage=current_stage, include_traceback=True)
        run.finish(status="failed", points_processed=total_points)
        return _failed_result(f"{type(e).__name__}: {e}", total_points, dimensions)

    run.finish(status="success", points_processed=total_points)

    output_files["manifest"] = str(config.output_dir / "run.json")
    output_files["events"] = str(config.output_dir / "events.jsonl")

    return PipelineResult(
        success=True,
        total_points=total_points,
        dimensions=dimensions,
        total_edges=len(result),
        total_weight=result.total_weight,
        rounds=result.rounds,
        output_files=output_files,
    )
