"""Manifest writer for deduplication run metadata.

Builds the ``run.json`` manifest of one audited run and writes it
atomically.
"""

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

from bibmerge.audit.models import (
    ArtifactInfo,
    CommandInfo,
    EnvironmentInfo,
    ErrorInfo,
    InputsInfo,
    ManifestData,
    StageInfo,
)
from bibmerge.utils import calculate_file_sha256, get_iso_timestamp

__all__ = ["MANIFEST_VERSION", "ManifestWriter"]

MANIFEST_VERSION = "1.0.0"


class ManifestWriter:
    """Atomic manifest writer with indexed stage lookup.

    Attributes
    ----------
    manifest : ManifestData
        Current manifest data being built.
    output_dir : Path
        Audit directory holding ``run.json`` and ``events.jsonl``.
    manifest_path : Path
        Final manifest location.
    """

    def __init__(
        self,
        run_id: str,
        output_dir: Path,
        command: CommandInfo,
        environment: EnvironmentInfo,
        transform_version: str,
        parameters: dict[str, Any],
    ) -> None:
        self.output_dir = output_dir
        self.manifest_path = output_dir / "run.json"

        self.manifest = ManifestData(
            manifest_version=MANIFEST_VERSION,
            run_id=run_id,
            created_at=get_iso_timestamp(),
            status="partial",
            transform_version=transform_version,
            command=command,
            environment=environment,
            parameters=parameters,
        )

        self._stage_index: dict[str, StageInfo] = {}

    def _get_stage(self, stage_name: str) -> StageInfo:
        stage = self._stage_index.get(stage_name)
        if stage is None:
            raise ValueError(f"Stage not found: {stage_name}")
        return stage

    def set_inputs(self, inputs: InputsInfo) -> None:
        """Set the input batches inventory."""
        self.manifest.inputs = inputs

    def add_stage(self, stage: StageInfo) -> None:
        """Add stage execution information.

        Raises
        ------
        ValueError
            If a stage with the same name was already added.
        """
        if stage.name in self._stage_index:
            raise ValueError(f"Stage already recorded: {stage.name}")
        self.manifest.stages.append(stage)
        self._stage_index[stage.name] = stage

    def update_stage_counters(self, stage_name: str, counters: dict[str, int]) -> None:
        """Merge ``counters`` into an existing stage.

        Raises
        ------
        ValueError
            If stage not found.
        """
        self._get_stage(stage_name).counters.update(counters)

    def finish_stage(
        self,
        stage_name: str,
        finished_at: str | None = None,
        duration_seconds: float | None = None,
    ) -> None:
        """Mark stage as finished.

        Parameters
        ----------
        stage_name : str
            Name of stage to finish.
        finished_at : str | None, optional
            ISO8601 timestamp, uses current time if None.
        duration_seconds : float | None, optional
            Stage duration in seconds.

        Raises
        ------
        ValueError
            If stage not found.
        """
        stage = self._get_stage(stage_name)
        stage.finished_at = finished_at or get_iso_timestamp()
        stage.duration_seconds = duration_seconds

    def add_artifact(self, artifact: ArtifactInfo) -> None:
        """Register an output artifact."""
        self.manifest.artifacts.append(artifact)

    def set_summary(self, summary: dict[str, Any]) -> None:
        """Record the run's ``DedupSummary`` (as a dict)."""
        self.manifest.summary = dict(summary)

    def add_error(self, error: ErrorInfo) -> None:
        """Add error record to manifest."""
        self.manifest.errors.append(error)

    def compute_event_log_artifact(self) -> None:
        """Hash ``events.jsonl`` and register it as an artifact."""
        events_path = self.output_dir / "events.jsonl"

        if events_path.exists():
            self.add_artifact(
                ArtifactInfo(
                    path="events.jsonl",
                    sha256=calculate_file_sha256(events_path),
                    bytes=events_path.stat().st_size,
                )
            )

    def finish(
        self,
        status: str,
        finished_at: str | None = None,
        duration_seconds: float | None = None,
    ) -> None:
        """Finalize manifest and write it atomically.

        Parameters
        ----------
        status : str
            Final run status ("success", "failed", "partial").
        finished_at : str | None, optional
            ISO8601 timestamp, uses current time if None.
        duration_seconds : float | None, optional
            Total run duration in seconds.
        """
        self.manifest.status = status
        self.manifest.finished_at = finished_at or get_iso_timestamp()
        self.manifest.duration_seconds = duration_seconds

        self._write_atomic(self.manifest_path)

    def _write_atomic(self, path: Path) -> None:
        # Temp file, fsync, then rename over the target
        temp_path = path.with_suffix(".tmp")

        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        temp_path.replace(path)

    def to_dict(self) -> dict[str, Any]:
        """Return the manifest as a dictionary."""
        return asdict(self.manifest)
