"""Public API for bibmerge.

This module provides the high-level entry points:
- Loading per-source batches from JSONL files
- Exporting canonical records to JSONL format
- Running the deduplication pipeline on batches or live sources
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from functools import cache
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jsonschema.exceptions import best_match
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from bibmerge.models import CanonicalRecord, RawResult

if TYPE_CHECKING:
    from bibmerge.audit.logger import AuditLogger
    from bibmerge.decision import MatchResult
    from bibmerge.engine.config import DedupConfig
    from bibmerge.sources import SearchSource

__all__ = [
    "BatchFormatError",
    "load_batch",
    "load_batches",
    "load_schema",
    "write_jsonl",
    "deduplicate",
    "search_and_deduplicate",
    "compare_results",
]


class BatchFormatError(ValueError):
    """Raised when a batch file does not hold valid raw results."""

    def __init__(
        self,
        message: str,
        file: str | None = None,
        line: int | None = None,
    ) -> None:
        """Initialize batch format error.

        Parameters
        ----------
        message : str
            Error message.
        file : str | None, optional
            File where error occurred.
        line : int | None, optional
            1-based line number of the offending record.
        """
        location = file or ""
        if line is not None:
            location = f"{location}:{line}"
        super().__init__(f"{location}: {message}" if location else message)
        self.file = file
        self.line = line


@cache
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by file name (e.g., "raw_result.schema.json").

    Raises
    ------
    FileNotFoundError
        If no schema with that name is bundled.
    """
    resource = files("bibmerge") / "schemas" / name
    if not resource.is_file():
        raise FileNotFoundError(f"Schema not found: {name}")
    schema: dict[str, Any] = json.loads(resource.read_text(encoding="utf-8"))
    return schema


@cache
def _raw_result_validator() -> Validator:
    schema = load_schema("raw_result.schema.json")
    validator_class = validator_for(schema)
    validator_class.check_schema(schema)
    return validator_class(schema)


def load_batch(path: str | Path) -> list[RawResult]:
    """Load one source batch from a JSONL file.

    Each non-blank line holds one raw result object as produced by
    ``RawResult.to_dict``. Unknown keys are ignored.

    Parameters
    ----------
    path : str | Path
        Path to JSONL file.

    Returns
    -------
    list[RawResult]
        Results in file order.

    Raises
    ------
    FileNotFoundError
        If file does not exist.
    BatchFormatError
        If a line is not valid JSON or does not match the raw result schema.

    Examples
    --------
    Load two source batches:

        >>> from bibmerge import load_batch
        >>> crossref = load_batch("crossref.jsonl")
        >>> arxiv = load_batch("arxiv.jsonl")
    """
    file_path = Path(path)

    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    validator = _raw_result_validator()
    results: list[RawResult] = []

    with file_path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue

            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise BatchFormatError(f"Invalid JSON: {e.msg}", str(file_path), line_no) from e

            error = best_match(validator.iter_errors(data))
            if error is not None:
                where = "/".join(str(p) for p in error.absolute_path) or "record"
                raise BatchFormatError(f"{where}: {error.message}", str(file_path), line_no)

            try:
                results.append(RawResult.from_dict(data))
            except (KeyError, TypeError) as e:
                raise BatchFormatError(str(e), str(file_path), line_no) from e

    return results


def load_batches(paths: Iterable[str | Path]) -> list[list[RawResult]]:
    """Load several batch files, one batch per path, in the given order."""
    return [load_batch(path) for path in paths]


def write_jsonl(
    records: Iterable[CanonicalRecord],
    path: str | Path,
    *,
    sort_keys: bool = True,
) -> int:
    """Write records to JSONL file (one JSON object per line).

    Output is deterministic with consistent field ordering and UTF-8 encoding.

    Parameters
    ----------
    records : Iterable[CanonicalRecord]
        Records to write.
    path : str | Path
        Output file path.
    sort_keys : bool, optional
        Whether to sort dictionary keys for deterministic output,
        by default True.

    Returns
    -------
    int
        Number of records written.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        for record in records:
            json_str = json.dumps(record.to_dict(), ensure_ascii=False, sort_keys=sort_keys)
            f.write(json_str + "\n")
            count += 1

    return count


def deduplicate(
    batches: Sequence[Iterable[RawResult]],
    config: DedupConfig | None = None,
    logger: AuditLogger | None = None,
) -> list[CanonicalRecord]:
    """Deduplicate per-source batches into canonical records.

    Parameters
    ----------
    batches : Sequence[Iterable[RawResult]]
        One batch per source, in a stable order.
    config : DedupConfig | None, optional
        Run configuration, defaults to ``DedupConfig()``.
    logger : AuditLogger | None, optional
        Audit logger for events, by default None.

    Returns
    -------
    list[CanonicalRecord]
        One record per publication, ordered by first appearance.

    Examples
    --------
    Deduplicate batches loaded from disk:

        >>> from bibmerge import deduplicate, load_batches, write_jsonl
        >>> batches = load_batches(["crossref.jsonl", "arxiv.jsonl"])
        >>> write_jsonl(deduplicate(batches), "merged.jsonl")

    Favour arXiv metadata and disable fuzzy matching:

        >>> from bibmerge.engine import DedupConfig
        >>> config = DedupConfig(priority=("arxiv", "crossref"), use_fuzzy_matching=False)
        >>> records = deduplicate(batches, config=config)
    """
    from bibmerge.engine import run_pipeline

    return run_pipeline(batches, config=config, logger=logger)


def search_and_deduplicate(
    sources: Iterable[SearchSource],
    query: str,
    config: DedupConfig | None = None,
    timeout: float | None = None,
    logger: AuditLogger | None = None,
) -> list[CanonicalRecord]:
    """Query every source concurrently, then deduplicate the joined batches.

    Sources that fail or exceed ``timeout`` are omitted (and logged); the
    pipeline runs once on the batches of the others, in source order.

    Parameters
    ----------
    sources : Iterable[SearchSource]
        Sources in priority-independent batch order (e.g., a SourceRegistry).
    query : str
        Query passed to every source.
    config : DedupConfig | None, optional
        Run configuration.
    timeout : float | None, optional
        Seconds to wait for all sources together.
    logger : AuditLogger | None, optional
        Audit logger for events.

    Returns
    -------
    list[CanonicalRecord]
        Canonical records in stable order.
    """
    from bibmerge.engine import run_pipeline
    from bibmerge.sources import gather_batches

    batches = gather_batches(sources, query, timeout=timeout, logger=logger)
    return run_pipeline(batches, config=config, logger=logger)


def compare_results(
    a: RawResult,
    b: RawResult,
    config: DedupConfig | None = None,
) -> MatchResult:
    """Explain whether two raw results would be clustered together.

    Parameters
    ----------
    a : RawResult
        First result.
    b : RawResult
        Second result.
    config : DedupConfig | None, optional
        Thresholds to test with, defaults to ``DedupConfig()``.

    Returns
    -------
    MatchResult
        Decision, deciding criterion and per-field comparisons.
    """
    from bibmerge.decision import EquivalenceTester
    from bibmerge.engine import DedupConfig

    return EquivalenceTester.from_config(config or DedupConfig()).explain(a, b)
