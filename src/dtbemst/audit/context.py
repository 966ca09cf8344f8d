"""Run context manager for audit logging and manifest tracking."""

import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dtbemst.audit.helpers import (
    generate_run_id,
    get_dependency_versions,
    get_git_sha,
    get_package_version,
    get_platform_info,
    get_python_version,
)
from dtbemst.audit.logger import AuditLogger
from dtbemst.audit.manifest import ManifestWriter
from dtbemst.audit.models import (
    ArtifactInfo,
    CommandInfo,
    EnvironmentInfo,
    ErrorInfo,
    InputsInfo,
    StageInfo,
)
from dtbemst.utils import calculate_file_sha256, get_iso_timestamp

__all__ = ["RunContext"]

_TRACKED_DEPENDENCIES = ["numpy", "click", "jsonschema"]


class RunContext:
    """Context manager for an EMST pipeline run lifecycle.

    Manages audit logging and manifest writing for a complete run.
    Tracks stage timing internally so the manifest writer only ever
    receives finished values.

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    output_dir : Path
        Output directory for all artifacts.
    audit_logger : AuditLogger
        Structured event logger.
    manifest_writer : ManifestWriter
        Manifest builder and writer.
    start_time : datetime
        Run start timestamp.
    """

    def __init__(
        self,
        run_id: str,
        output_dir: Path,
        audit_logger: AuditLogger,
        manifest_writer: ManifestWriter,
    ) -> None:
        self.run_id = run_id
        self.output_dir = output_dir
        self.audit_logger = audit_logger
        self.manifest_writer = manifest_writer
        self.start_time = datetime.now(UTC)
        self._stage_start_times: dict[str, datetime] = {}

    @classmethod
    def start(
        cls,
        output_dir: Path,
        parameters: dict[str, Any],
        command_argv: list[str] | None = None,
    ) -> "RunContext":
        """Start a new run context.

        Creates the output directory structure, opens ``events.jsonl`` and
        prepares the manifest.

        Parameters
        ----------
        output_dir : Path
            Output directory for run artifacts.
        parameters : dict[str, Any]
            Configuration parameters for run.
        command_argv : list[str] | None, optional
            Command-line arguments, uses sys.argv if None.

        Returns
        -------
        RunContext
            Initialized run context.
        """
        run_id = generate_run_id()

        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "artifacts").mkdir(exist_ok=True)
        (output_dir / "reports").mkdir(exist_ok=True)

        command = CommandInfo(
            argv=command_argv or sys.argv,
            cwd=Path.cwd().name or None,
        )

        environment = EnvironmentInfo(
            python_version=get_python_version(),
            platform=get_platform_info(),
            package_version=get_package_version(),
            dependencies=get_dependency_versions(_TRACKED_DEPENDENCIES),
        )

        git_sha = get_git_sha()
        transform_version = f"git:{git_sha}" if git_sha else get_package_version()

        audit_logger = AuditLogger(
            run_id=run_id,
            log_path=output_dir / "events.jsonl",
        )

        manifest_writer = ManifestWriter(
            run_id=run_id,
            output_dir=output_dir,
            command=command,
            environment=environment,
            transform_version=transform_version,
            parameters=parameters,
        )

        audit_logger.run_started(command=command.argv, parameters=parameters)

        return cls(
            run_id=run_id,
            output_dir=output_dir,
            audit_logger=audit_logger,
            manifest_writer=manifest_writer,
        )

    def set_inputs(self, inputs: InputsInfo) -> None:
        """Record the input inventory in the manifest."""
        self.manifest_writer.set_inputs(inputs)

    def start_stage(self, stage_name: str, expected_points: int | None = None) -> None:
        """Start a pipeline stage.

        Parameters
        ----------
        stage_name : str
            Stage identifier.
        expected_points : int | None, optional
            Number of points the stage is expected to process.
        """
        self._stage_start_times[stage_name] = datetime.now(UTC)

        self.manifest_writer.add_stage(
            StageInfo(
                name=stage_name,
                started_at=get_iso_timestamp(),
            )
        )

        self.audit_logger.stage_started(
            stage=stage_name,
            expected_points=expected_points,
        )

    def finish_stage(
        self,
        stage_name: str,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Finish a pipeline stage.

        Parameters
        ----------
        stage_name : str
            Stage identifier.
        counters : dict[str, int] | None, optional
            Final counters for stage.

        Raises
        ------
        ValueError
            If stage was not started.
        """
        start_time = self._stage_start_times.pop(stage_name, None)
        if start_time is None:
            raise ValueError(f"Stage not started: {stage_name}")

        finished_at = get_iso_timestamp()
        duration = (datetime.now(UTC) - start_time).total_seconds()

        self.manifest_writer.finish_stage(
            stage_name=stage_name,
            finished_at=finished_at,
            duration_seconds=duration,
        )

        if counters:
            self.manifest_writer.update_stage_counters(
                stage_name=stage_name,
                counters=counters,
            )

        self.audit_logger.stage_finished(
            stage=stage_name,
            duration_seconds=duration,
            counters=counters,
        )

    def register_artifact(
        self,
        stage_name: str,
        path: Path,
        record_count: int | None = None,
    ) -> ArtifactInfo:
        """Hash an artifact written under ``output_dir`` and record it.

        Parameters
        ----------
        stage_name : str
            Stage that produced the artifact.
        path : Path
            Artifact path; stored relative to ``output_dir``.
        record_count : int | None, optional
            Number of rows in the artifact.

        Returns
        -------
        ArtifactInfo
            The recorded artifact metadata.
        """
        artifact = ArtifactInfo(
            path=path.relative_to(self.output_dir).as_posix(),
            sha256=calculate_file_sha256(path),
            bytes=path.stat().st_size,
            record_count=record_count,
        )
        self.manifest_writer.add_stage_artifact(stage_name, artifact)
        self.audit_logger.artifact_written(
            path=artifact.path,
            sha256=artifact.sha256,
            stage=stage_name,
            bytes_written=artifact.bytes,
            record_count=record_count,
        )
        return artifact

    def record_error(
        self,
        exception: BaseException,
        stage: str | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Record an error in logs and manifest.

        Parameters
        ----------
        exception : BaseException
            Exception that occurred.
        stage : str | None, optional
            Stage where error occurred.
        include_traceback : bool, optional
            Whether to include stack trace, by default False.
        """
        exception_class = type(exception).__name__
        message = str(exception)

        tb = None
        if include_traceback:
            tb = "".join(
                traceback.format_exception(
                    type(exception),
                    exception,
                    exception.__traceback__,
                )
            )

        self.manifest_writer.add_error(
            ErrorInfo(
                timestamp=get_iso_timestamp(),
                exception_class=exception_class,
                message=message,
                stage=stage,
                traceback=tb,
            )
        )

        self.audit_logger.error(
            exception_class=exception_class,
            message=message,
            stage=stage,
            traceback=tb,
        )

    def finish(
        self,
        status: str = "success",
        points_processed: int | None = None,
    ) -> None:
        """Finish the run and write final manifest.

        Closes the audit logger before hashing ``events.jsonl`` so the file
        is complete on disk.

        Parameters
        ----------
        status : str, optional
            Final run status, by default "success".
        points_processed : int | None, optional
            Total points processed.
        """
        duration = (datetime.now(UTC) - self.start_time).total_seconds()

        self.audit_logger.run_finished(
            status=status,
            duration_seconds=duration,
            points_processed=points_processed,
        )

        self.audit_logger.close()

        self.manifest_writer.compute_output_artifacts()

        self.manifest_writer.finish(
            status=status,
            finished_at=get_iso_timestamp(),
            duration_seconds=duration,
        )

    def __enter__(self) -> "RunContext":
        """Enter context manager."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager, recording errors if present."""
        if exc_type is not None:
            self.record_error(exc_val, include_traceback=True)
            self.finish(status="failed")
        else:
            self.finish(status="success")
