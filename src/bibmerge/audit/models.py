"""Data models for audit logging and run manifests.

This module defines dataclasses for structured audit events and the
``run.json`` manifest written for every audited deduplication run.
"""

from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "LEVELS",
    "CommandInfo",
    "EnvironmentInfo",
    "BatchInfo",
    "InputsInfo",
    "ArtifactInfo",
    "StageInfo",
    "ErrorInfo",
    "ManifestData",
    "LogEvent",
]

# Severity order for event filtering
LEVELS: dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


@dataclass
class CommandInfo:
    """Command-line information.

    Attributes
    ----------
    argv : list[str]
        Complete command-line arguments.
    cwd : str | None
        Working directory basename (for privacy).
    """

    argv: list[str]
    cwd: str | None = None


@dataclass
class EnvironmentInfo:
    """Execution environment information.

    Attributes
    ----------
    python_version : str
        Python version (e.g., "3.12.3").
    platform : str
        OS and architecture (e.g., "Linux-6.8.0-x86_64").
    package_version : str
        bibmerge package version.
    dependencies : dict[str, str]
        Key dependency versions.
    """

    python_version: str
    platform: str
    package_version: str
    dependencies: dict[str, str] = field(default_factory=dict)


@dataclass
class BatchInfo:
    """One source batch fed to the run.

    Attributes
    ----------
    index : int
        Position of the batch in the run.
    records : int
        Number of raw results in the batch.
    source_ids : list[str]
        Distinct source ids seen in the batch.
    path : str | None
        File name when the batch was loaded from disk.
    sha256 : str | None
        File digest with "sha256:" prefix.
    """

    index: int
    records: int
    source_ids: list[str] = field(default_factory=list)
    path: str | None = None
    sha256: str | None = None


@dataclass
class InputsInfo:
    """Input batches inventory.

    Attributes
    ----------
    batches : list[BatchInfo]
        Per-batch metadata, in run order.
    total_records : int
        Sum of records across all batches.
    """

    batches: list[BatchInfo] = field(default_factory=list)
    total_records: int = 0


@dataclass
class ArtifactInfo:
    """Output artifact metadata.

    Attributes
    ----------
    path : str
        Path relative to the audit directory, or file name.
    sha256 : str
        SHA256 digest with "sha256:" prefix.
    bytes : int | None
        File size in bytes.
    record_count : int | None
        Number of records in artifact.
    """

    path: str
    sha256: str
    bytes: int | None = None
    record_count: int | None = None


@dataclass
class StageInfo:
    """Stage execution information.

    Attributes
    ----------
    name : str
        Stage identifier ("clustering", "merge").
    started_at : str
        ISO8601 start time.
    counters : dict[str, int]
        Stage-specific metrics.
    finished_at : str | None
        ISO8601 end time.
    duration_seconds : float | None
        Stage execution duration.
    """

    name: str
    started_at: str
    counters: dict[str, int] = field(default_factory=dict)
    finished_at: str | None = None
    duration_seconds: float | None = None


@dataclass
class ErrorInfo:
    """Error record.

    Attributes
    ----------
    timestamp : str
        ISO8601 when error occurred.
    exception_class : str
        Exception class name.
    message : str
        Error message.
    stage : str | None
        Stage where error occurred.
    traceback : str | None
        Stack trace (if requested).
    """

    timestamp: str
    exception_class: str
    message: str
    stage: str | None = None
    traceback: str | None = None


@dataclass
class ManifestData:
    """Complete run manifest.

    Attributes
    ----------
    manifest_version : str
        Schema version (semver).
    run_id : str
        Unique run identifier.
    created_at : str
        ISO8601 UTC timestamp when run started.
    status : str
        Run status ("success", "failed", "partial").
    transform_version : str
        Git SHA or package version.
    command : CommandInfo
        Command-line information.
    environment : EnvironmentInfo
        Execution environment.
    parameters : dict[str, Any]
        Configuration snapshot (``DedupConfig.to_dict()``).
    inputs : InputsInfo
        Input batches inventory.
    stages : list[StageInfo]
        Stage execution records.
    artifacts : list[ArtifactInfo]
        Output artifacts.
    summary : dict[str, Any]
        Final ``DedupSummary`` of the run.
    finished_at : str | None
        ISO8601 UTC timestamp when run finished.
    duration_seconds : float | None
        Total execution time.
    errors : list[ErrorInfo]
        Error records.
    """

    manifest_version: str
    run_id: str
    created_at: str
    status: str
    transform_version: str
    command: CommandInfo
    environment: EnvironmentInfo
    parameters: dict[str, Any]
    inputs: InputsInfo = field(default_factory=InputsInfo)
    stages: list[StageInfo] = field(default_factory=list)
    artifacts: list[ArtifactInfo] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)
    finished_at: str | None = None
    duration_seconds: float | None = None
    errors: list[ErrorInfo] = field(default_factory=list)


@dataclass
class LogEvent:
    """Structured log event.

    Attributes
    ----------
    ts : str
        ISO8601 timestamp with microseconds (UTC).
    run_id : str
        Unique run identifier.
    level : str
        Log level ("DEBUG", "INFO", "WARN", "ERROR").
    event : str
        Event type identifier.
    data : dict[str, Any]
        Event-specific data payload.
    stage : str | None
        Current stage identifier.
    source_id : str | None
        Source the event concerns, if any.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
    source_id: str | None = None
