"""Command-line interface for dtbemst.

Provides CLI commands for computing Euclidean minimum spanning trees.
"""

import importlib.metadata
import sys
from pathlib import Path

import click

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("dtbemst")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="dtbemst")
def cli() -> None:
    """Euclidean minimum spanning trees with Dual-Tree Boruvka.

    Use 'dtbemst COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output CSV file (lesser,greater,distance per line)",
)
@click.option(
    "--naive",
    is_flag=True,
    help="Use the O(n^2) brute-force search instead of the dual-tree search",
)
@click.option(
    "--leaf-size",
    "-l",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Maximum number of points per kd-tree leaf",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def compute(
    input_path: str,
    output: str,
    naive: bool,
    leaf_size: int,
    verbose: bool,
) -> None:
    """Compute the minimum spanning tree of the points in INPUT_PATH.

    INPUT_PATH holds one point per row (.csv, .tsv, .txt or .npy). The
    edges are written to OUTPUT sorted by distance, with indices referring
    to input rows.

    Examples
    --------
        dtbemst compute points.csv -o edges.csv
        dtbemst compute points.npy -o edges.csv --leaf-size 16
    """
    from dtbemst import compute_mst, load_points, write_edges_csv

    try:
        points = load_points(Path(input_path))

        if verbose:
            click.echo(f"Loaded {points.shape[0]} points from {input_path}", err=True)
            mode = "naive" if naive else f"dual-tree (leaf size {leaf_size})"
            click.echo(f"Computing MST: {mode}", err=True)

        result = compute_mst(points, naive=naive, leaf_size=leaf_size)

        if verbose:
            click.echo(f"Rounds: {result.rounds}", err=True)
            click.echo(f"Total squared length: {result.total_squared_length}", err=True)

        write_edges_csv(result, output)

        click.secho(
            f"✓ Wrote {len(result)} edges to {output} (total length {result.total_weight:.6g})",
            fg="green",
        )

    except Exception as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default="out",
    help="Output directory for results (default: out)",
)
@click.option(
    "--naive",
    is_flag=True,
    help="Use the O(n^2) brute-force search instead of the dual-tree search",
)
@click.option(
    "--leaf-size",
    "-l",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Maximum number of points per kd-tree leaf",
)
@click.option(
    "--no-jsonl",
    is_flag=True,
    help="Skip the JSONL copy of the edge list",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def run(
    input_path: str,
    output_dir: str,
    naive: bool,
    leaf_size: int,
    no_jsonl: bool,
    verbose: bool,
) -> None:
    """Run the audited EMST pipeline on INPUT_PATH.

    This command executes all 4 stages of the pipeline:
    1. Load points
    2. Build kd-tree
    3. Dual-Tree Boruvka MST
    4. Write edge list and summary

    Outputs, run.json and events.jsonl are written to OUTPUT_DIR.

    Examples
    --------
        dtbemst run points.csv
        dtbemst run points.csv -o results --leaf-size 8
    """
    from dtbemst.engine import PipelineConfig, run_pipeline

    if verbose:
        click.echo("Starting EMST pipeline...", err=True)
        click.echo(f"  Input: {input_path}", err=True)
        click.echo(f"  Output: {output_dir}", err=True)
        click.echo(f"  Mode: {'naive' if naive else 'dual-tree'}", err=True)
        click.echo(f"  Leaf size: {leaf_size}", err=True)

    try:
        config = PipelineConfig(
            naive=naive,
            leaf_size=leaf_size,
            output_dir=Path(output_dir),
            write_jsonl=not no_jsonl,
            track_execution_time=verbose,
        )

        result = run_pipeline(input_path=Path(input_path), config=config)

        if not result.success:
            click.secho(f"✗ Pipeline failed: {result.error_message}", fg="red", err=True)
            sys.exit(1)

        if verbose:
            click.echo("\n✓ Pipeline completed successfully!", err=True)
            click.echo("\nResults:", err=True)
            click.echo(f"  Points: {result.total_points} ({result.dimensions}-D)", err=True)
            click.echo(f"  Edges: {result.total_edges}", err=True)
            click.echo(f"  Rounds: {result.rounds}", err=True)
            click.echo("\nOutputs:", err=True)
            for name, path in result.output_files.items():
                click.echo(f"  {name}: {path}", err=True)

        click.secho(
            f"✓ Spanning tree over {result.total_points} points: "
            f"{result.total_edges} edges, total length {result.total_weight:.6g}",
            fg="green",
        )

    except Exception as e:
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        if verbose:
            import traceback

            click.echo(traceback.format_exc(), err=True)
        sys.exit(1)


@cli.command()
@click.argument("output_dir", type=click.Path(exists=True, file_okay=False))
def verify(output_dir: str) -> None:
    """Validate run.json and events.jsonl in OUTPUT_DIR against their schemas.

    Examples
    --------
        dtbemst verify out
    """
    import jsonschema

    from dtbemst.audit.validation import validate_run_outputs

    try:
        count = validate_run_outputs(Path(output_dir))
    except (FileNotFoundError, ValueError, jsonschema.ValidationError) as e:
        message = e.message if isinstance(e, jsonschema.ValidationError) else str(e)
        click.secho(f"✗ Invalid run output: {message}", fg="red", err=True)
        sys.exit(1)

    click.secho(f"✓ Manifest and {count} events are valid", fg="green")


if __name__ == "__main__":
    cli()
