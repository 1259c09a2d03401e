"""Deterministic deduplication of bibliographic search results.

This package provides:
- Data models (bibmerge.models) — raw results and canonical records
- Normalization (bibmerge.normalize) — identifier and text normalization
- Scoring (bibmerge.scoring) — title, author, year and identifier comparators
- Decision (bibmerge.decision) — two-tier equivalence test
- Candidates (bibmerge.candidates) — identifier and year/author indexes
- Clustering (bibmerge.clustering) — incremental, order-independent clustering
- Merge (bibmerge.merge) — source-priority field merge
- Engine (bibmerge.engine) — pipeline and configuration
- Sources (bibmerge.sources) — search source protocol and concurrent fan-out
- Audit (bibmerge.audit) — logging and traceability
- CLI (bibmerge.cli) — command-line interface
- Public API (bibmerge.api) — high-level convenience functions
"""

__version__ = "0.1.0"
__license__ = "MIT"

from bibmerge.api import (
    BatchFormatError,
    compare_results,
    deduplicate,
    load_batch,
    load_batches,
    search_and_deduplicate,
    write_jsonl,
)
from bibmerge.engine import DedupConfig, DeduplicationPipeline
from bibmerge.models import CanonicalRecord, RawResult

__all__ = [
    "__version__",
    "__license__",
    "BatchFormatError",
    "CanonicalRecord",
    "DedupConfig",
    "DeduplicationPipeline",
    "RawResult",
    "compare_results",
    "deduplicate",
    "load_batch",
    "load_batches",
    "search_and_deduplicate",
    "write_jsonl",
]
