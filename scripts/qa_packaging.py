#!/usr/bin/env python3
"""Packaging QA automation for dtbemst.

This script performs packaging quality assurance checks:
1. Build wheel + sdist artifacts
2. Validate metadata and README rendering with twine check --strict
3. Install from wheel and from sdist in clean venvs + smoke tests
4. Run the CLI end to end on a generated points file

Exit code: 0 if all checks pass, 1 if any check fails.

Usage:
    python scripts/qa_packaging.py
"""

import json
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import NoReturn

# Five collinear points; their spanning tree has 4 edges and total length 11.
SMOKE_POINTS = "0\n1\n2\n10\n11\n"


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    check: bool = True,
    capture_output: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a command and handle errors.

    Parameters
    ----------
    cmd : list[str]
        Command and arguments to run.
    cwd : Path | None, optional
        Working directory for command, by default None.
    check : bool, optional
        Raise exception on non-zero exit, by default True.
    capture_output : bool, optional
        Capture stdout/stderr, by default False.

    Returns
    -------
    subprocess.CompletedProcess[str]
        Result of command execution.
    """
    print(f"→ Running: {' '.join(cmd)}")
    return subprocess.run(
        cmd,
        cwd=cwd,
        check=check,
        text=True,
        capture_output=capture_output,
    )


def fail(message: str) -> NoReturn:
    """Print error message and exit with code 1."""
    print(f"\n❌ FAILED: {message}", file=sys.stderr)
    sys.exit(1)


def section(title: str) -> None:
    """Print section header."""
    print(f"\n{'=' * 70}")
    print(f"  {title}")
    print(f"{'=' * 70}\n")


def create_venv(venv_path: Path, package: Path) -> tuple[Path, Path]:
    """Create a clean venv, install *package* into it.

    Returns
    -------
    tuple[Path, Path]
        The venv's python interpreter and its ``dtbemst`` console script.
    """
    print(f"Creating clean venv at {venv_path}")
    run_command([sys.executable, "-m", "venv", str(venv_path)])

    bin_dir = venv_path / ("Scripts" if sys.platform == "win32" else "bin")
    suffix = ".exe" if sys.platform == "win32" else ""
    python_exe = bin_dir / f"python{suffix}"

    run_command([str(python_exe), "-m", "pip", "install", "--upgrade", "pip"])
    run_command([str(python_exe), "-m", "pip", "install", str(package)])

    return python_exe, bin_dir / f"dtbemst{suffix}"


def check_build_artifacts(repo_root: Path) -> tuple[Path, Path]:
    """Build and validate wheel + sdist artifacts.

    Returns
    -------
    tuple[Path, Path]
        Paths to wheel and sdist files.
    """
    section("A) Build Artifacts (wheel + sdist)")

    dist_dir = repo_root / "dist"
    for directory in [dist_dir, repo_root / "build"]:
        if directory.exists():
            print(f"Cleaning {directory}")
            shutil.rmtree(directory)

    run_command([sys.executable, "-m", "build", "--sdist", "--wheel"], cwd=repo_root)

    wheels = list(dist_dir.glob("*.whl"))
    sdists = list(dist_dir.glob("*.tar.gz"))
    if not wheels:
        fail("No wheel (.whl) file found in dist/")
    if not sdists:
        fail("No sdist (.tar.gz) file found in dist/")

    print(f"✓ Wheel created: {wheels[0].name}")
    print(f"✓ Sdist created: {sdists[0].name}")
    return wheels[0], sdists[0]


def check_metadata_and_readme(repo_root: Path) -> None:
    """Validate metadata and README rendering with twine."""
    section("B) Metadata + README Rendering (twine check)")

    dist_files = [str(path) for path in sorted((repo_root / "dist").iterdir())]
    result = run_command(
        [sys.executable, "-m", "twine", "check", "--strict", *dist_files],
        cwd=repo_root,
        check=False,
        capture_output=True,
    )

    print(result.stdout)
    if result.stderr:
        print(result.stderr, file=sys.stderr)
    if result.returncode != 0:
        fail("twine check --strict reported warnings or errors")

    print("✓ All metadata and README checks passed")


def check_install(package: Path, label: str) -> None:
    """Install *package* in a clean venv and smoke test import, schemas and CLI."""
    section(f"C) Install Test ({label})")

    with tempfile.TemporaryDirectory(prefix=f"venv_pkg_{label}_") as tmpdir:
        python_exe, dtbemst_exe = create_venv(Path(tmpdir), package)

        result = run_command(
            [
                str(python_exe),
                "-c",
                "import dtbemst; from dtbemst.audit.validation import load_schema; "
                "load_schema('run_manifest.schema.json'); print('import-ok', dtbemst.__version__)",
            ],
            capture_output=True,
        )
        if "import-ok" not in result.stdout:
            fail(f"Failed to import dtbemst from {label}")
        print(f"✓ Import and bundled schemas ok: {result.stdout.strip()}")

        run_command([str(dtbemst_exe), "--help"], capture_output=True)
        print("✓ CLI --help passed")

        result = run_command([str(dtbemst_exe), "--version"], capture_output=True)
        print(f"✓ CLI --version passed: {result.stdout.strip()}")


def check_cli_functional(wheel_path: Path) -> None:
    """Run compute, run and verify on a generated points file."""
    section("D) CLI Functional Smoke Test")

    with tempfile.TemporaryDirectory(prefix="venv_cli_test_") as tmpdir:
        workdir = Path(tmpdir)
        _, dtbemst_exe = create_venv(workdir / "venv", wheel_path)

        points_path = workdir / "points.txt"
        points_path.write_text(SMOKE_POINTS, encoding="utf-8")

        edges_path = workdir / "edges.csv"
        run_command([str(dtbemst_exe), "compute", str(points_path), "-o", str(edges_path)])
        edges = edges_path.read_text().splitlines()
        if edges[-1] != "2,3,8.0" or len(edges) != 4:
            fail(f"Unexpected edge list: {edges}")
        print("✓ compute wrote the expected 4 edges")

        output_dir = workdir / "out"
        run_command([str(dtbemst_exe), "run", str(points_path), "-o", str(output_dir)])
        summary = json.loads((output_dir / "reports" / "mst_summary.json").read_text())
        if summary["total_weight"] != 11.0:
            fail(f"Unexpected total weight: {summary['total_weight']}")
        print("✓ run wrote the audited output directory")

        run_command([str(dtbemst_exe), "verify", str(output_dir)])
        print("✓ verify accepted run.json and events.jsonl")

        print("\n✓ All CLI functional tests passed")


def main() -> None:
    """Run all packaging QA checks."""
    repo_root = Path(__file__).parent.parent.resolve()

    print("=" * 70)
    print("  PACKAGING QA - dtbemst")
    print("=" * 70)
    print(f"\nRepository root: {repo_root}\n")

    try:
        wheel_path, sdist_path = check_build_artifacts(repo_root)
        check_metadata_and_readme(repo_root)
        check_install(wheel_path, "wheel")
        check_install(sdist_path, "sdist")
        check_cli_functional(wheel_path)

        print("\n" + "=" * 70)
        print("  ✅ ALL PACKAGING QA CHECKS PASSED")
        print("=" * 70)
        sys.exit(0)

    except subprocess.CalledProcessError as e:
        fail(f"Command failed with exit code {e.returncode}: {' '.join(e.cmd)}")
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
