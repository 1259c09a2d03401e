"""Structured audit logger for JSONL event logging.

Provides append-only structured event logging to JSONL files with
a persistent file handle and a minimum-level filter.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from bibmerge.audit.models import LEVELS, LogEvent
from bibmerge.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes structured log events to a JSONL file (one JSON object per line).
    Events are append-only and flushed after each write. Events below
    ``min_level`` are dropped.

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    log_path : Path
        Path to JSONL log file.
    min_level : str
        Lowest level written ("DEBUG", "INFO", "WARN", "ERROR").
    current_stage : str | None
        Current stage name for context.

    Raises
    ------
    ValueError
        If ``min_level`` is not a known level.
    """

    def __init__(self, run_id: str, log_path: Path, min_level: str = "INFO") -> None:
        if min_level not in LEVELS:
            raise ValueError(f"Unknown log level: {min_level!r}")

        self.run_id = run_id
        self.log_path = log_path
        self.min_level = min_level
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Set (or clear, with None) the current stage context."""
        self.current_stage = stage

    def enabled_for(self, level: str) -> bool:
        """Return True if events at ``level`` are written."""
        return LEVELS.get(level, 0) >= LEVELS[self.min_level]

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        source_id: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "dedupe_started").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        stage : str | None, optional
            Stage identifier, uses current_stage if not provided.
        source_id : str | None, optional
            Source the event concerns.
        """
        if not self.enabled_for(level):
            return

        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            stage=stage if stage is not None else self.current_stage,
            source_id=source_id,
        )

        json.dump(asdict(log_event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Log run_started event."""
        self.event("run_started", data={"command": command, "parameters": parameters})

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        records_processed: int | None = None,
    ) -> None:
        """Log run_finished event.

        Parameters
        ----------
        status : str
            Run status ("success", "failed", "partial").
        duration_seconds : float
            Total execution time in seconds.
        records_processed : int | None, optional
            Total records processed.
        """
        data: dict[str, Any] = {
            "status": status,
            "duration_seconds": duration_seconds,
        }
        if records_processed is not None:
            data["records_processed"] = records_processed

        self.event("run_finished", data=data)

    def stage_started(self, stage: str, expected_records: int | None = None) -> None:
        """Log stage_started event and make ``stage`` the current stage."""
        self.set_stage(stage)

        data: dict[str, Any] = {}
        if expected_records is not None:
            data["expected_records"] = expected_records

        self.event("stage_started", data=data, stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Log stage_finished event and clear the current stage.

        Parameters
        ----------
        stage : str
            Stage identifier.
        duration_seconds : float
            Stage execution time in seconds.
        counters : dict[str, int] | None, optional
            Stage-specific counters.
        """
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters

        self.event("stage_finished", data=data, stage=stage)
        self.set_stage(None)

    # ------------------------------------------------------------------
    # Deduplication events
    # ------------------------------------------------------------------

    def dedupe_started(self, batches: int, records: int, parameters: dict[str, Any]) -> None:
        """Log dedupe_started event with input counters and configuration."""
        self.event(
            "dedupe_started",
            data={"batches": batches, "records": records, "parameters": parameters},
        )

    def cluster_merged(
        self,
        merged_id: str,
        keys: list[tuple[str, str]],
        method: str,
        confidence: float,
        conflicts: list[str] | None = None,
    ) -> None:
        """Log cluster_merged event (DEBUG) for one multi-member cluster.

        Parameters
        ----------
        merged_id : str
            Identifier of the canonical record produced.
        keys : list[tuple[str, str]]
            ``(source_id, source_local_id)`` of every member.
        method : str
            Cluster link method ("identifier" or "fuzzy").
        confidence : float
            Cluster confidence.
        conflicts : list[str] | None, optional
            Consistency conflicts found in the cluster.
        """
        self.event(
            "cluster_merged",
            data={
                "merged_id": merged_id,
                "size": len(keys),
                "members": [list(key) for key in keys],
                "method": method,
                "confidence": confidence,
                "conflicts": conflicts or [],
            },
            level="DEBUG",
        )

    def dedupe_finished(self, summary: dict[str, Any]) -> None:
        """Log dedupe_finished event with the run summary."""
        self.event("dedupe_finished", data=summary)

    def source_failed(self, source_id: str, exception_class: str, message: str) -> None:
        """Log source_failed event (WARN) for a source omitted after raising."""
        self.event(
            "source_failed",
            data={"exception_class": exception_class, "message": message},
            level="WARN",
            source_id=source_id,
        )

    def source_timeout(self, source_id: str, timeout_seconds: float) -> None:
        """Log source_timeout event (WARN) for a source omitted after the deadline."""
        self.event(
            "source_timeout",
            data={"timeout_seconds": timeout_seconds},
            level="WARN",
            source_id=source_id,
        )

    # ------------------------------------------------------------------
    # Artifacts and errors
    # ------------------------------------------------------------------

    def artifact_written(
        self,
        path: str,
        sha256: str,
        bytes_written: int | None = None,
        record_count: int | None = None,
    ) -> None:
        """Log artifact_written event.

        Parameters
        ----------
        path : str
            Path to artifact.
        sha256 : str
            SHA256 hash of artifact.
        bytes_written : int | None, optional
            File size in bytes.
        record_count : int | None, optional
            Number of records in artifact.
        """
        data: dict[str, Any] = {"path": path, "sha256": sha256}
        if bytes_written is not None:
            data["bytes"] = bytes_written
        if record_count is not None:
            data["record_count"] = record_count

        self.event("artifact_written", data=data)

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        traceback: str | None = None,
    ) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        stage : str | None, optional
            Stage where error occurred.
        traceback : str | None, optional
            Stack trace.
        """
        data: dict[str, Any] = {
            "exception_class": exception_class,
            "message": message,
        }
        if traceback is not None:
            data["traceback"] = traceback

        self.event("error", data=data, stage=stage, level="ERROR")
