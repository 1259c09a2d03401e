"""Run context manager for audit logging and manifest tracking."""

import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from bibmerge.audit.helpers import (
    collect_environment,
    generate_run_id,
    get_git_sha,
    get_package_version,
)
from bibmerge.audit.logger import AuditLogger
from bibmerge.audit.manifest import ManifestWriter
from bibmerge.audit.models import ArtifactInfo, CommandInfo, ErrorInfo, InputsInfo, StageInfo
from bibmerge.utils import calculate_file_sha256, get_iso_timestamp

__all__ = ["RunContext"]


class RunContext:
    """Context manager for the lifecycle of one audited run.

    Owns the ``AuditLogger`` writing ``events.jsonl`` and the
    ``ManifestWriter`` producing ``run.json`` in ``output_dir``. Leaving
    the ``with`` block finishes the run, as "failed" when an exception
    escaped (the exception is recorded and propagates).

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    output_dir : Path
        Audit directory.
    audit_logger : AuditLogger
        Structured event logger; pass it as ``logger`` to the pipeline.
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
        self._finished = False

    @classmethod
    def start(
        cls,
        output_dir: Path,
        parameters: dict[str, Any],
        command_argv: list[str] | None = None,
        min_level: str = "INFO",
    ) -> "RunContext":
        """Start a new run context.

        Creates the audit directory, opens the event log and emits
        ``run_started``.

        Parameters
        ----------
        output_dir : Path
            Audit directory for ``events.jsonl`` and ``run.json``.
        parameters : dict[str, Any]
            Configuration snapshot (``DedupConfig.to_dict()``).
        command_argv : list[str] | None, optional
            Command-line arguments, uses sys.argv if None.
        min_level : str, optional
            Lowest event level written, by default "INFO".

        Returns
        -------
        RunContext
            Initialized run context.
        """
        run_id = generate_run_id()
        output_dir.mkdir(parents=True, exist_ok=True)

        command = CommandInfo(
            argv=list(command_argv) if command_argv is not None else list(sys.argv),
            cwd=Path.cwd().name or None,
        )

        git_sha = get_git_sha()
        transform_version = f"git:{git_sha}" if git_sha else get_package_version()

        audit_logger = AuditLogger(
            run_id=run_id,
            log_path=output_dir / "events.jsonl",
            min_level=min_level,
        )

        manifest_writer = ManifestWriter(
            run_id=run_id,
            output_dir=output_dir,
            command=command,
            environment=collect_environment(),
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
        """Record the input batches inventory in the manifest."""
        self.manifest_writer.set_inputs(inputs)

    def start_stage(self, stage_name: str, expected_records: int | None = None) -> None:
        """Start a run stage.

        Parameters
        ----------
        stage_name : str
            Stage identifier.
        expected_records : int | None, optional
            Expected number of records to process.
        """
        self._stage_start_times[stage_name] = datetime.now(UTC)
        self.manifest_writer.add_stage(StageInfo(name=stage_name, started_at=get_iso_timestamp()))
        self.audit_logger.stage_started(stage=stage_name, expected_records=expected_records)

    def finish_stage(self, stage_name: str, counters: dict[str, int] | None = None) -> None:
        """Finish a run stage.

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

        duration = (datetime.now(UTC) - start_time).total_seconds()

        self.manifest_writer.finish_stage(
            stage_name=stage_name,
            finished_at=get_iso_timestamp(),
            duration_seconds=duration,
        )
        if counters:
            self.manifest_writer.update_stage_counters(stage_name, counters)

        self.audit_logger.stage_finished(
            stage=stage_name,
            duration_seconds=duration,
            counters=counters,
        )

    def record_artifact(self, path: Path, record_count: int | None = None) -> None:
        """Hash a written file, log ``artifact_written`` and add it to the manifest."""
        sha256 = calculate_file_sha256(path)
        size = path.stat().st_size

        self.manifest_writer.add_artifact(
            ArtifactInfo(path=str(path), sha256=sha256, bytes=size, record_count=record_count)
        )
        self.audit_logger.artifact_written(
            path=str(path),
            sha256=sha256,
            bytes_written=size,
            record_count=record_count,
        )

    def set_summary(self, summary: dict[str, Any]) -> None:
        """Record the final run summary in the manifest."""
        self.manifest_writer.set_summary(summary)

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
                traceback.format_exception(type(exception), exception, exception.__traceback__)
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

    def finish(self, status: str = "success", records_processed: int | None = None) -> None:
        """Finish the run and write the final manifest.

        Closes the audit logger before hashing ``events.jsonl`` so the
        digest covers the complete file. Calling it twice is a no-op.

        Parameters
        ----------
        status : str, optional
            Final run status, by default "success".
        records_processed : int | None, optional
            Total records processed.
        """
        if self._finished:
            return
        self._finished = True

        duration = (datetime.now(UTC) - self.start_time).total_seconds()

        self.audit_logger.run_finished(
            status=status,
            duration_seconds=duration,
            records_processed=records_processed,
        )
        self.audit_logger.close()

        self.manifest_writer.compute_event_log_artifact()
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
