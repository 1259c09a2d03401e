"""Data models for source-priority merge."""

import hashlib
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

# Curation quality for scalar bibliographic fields, best first
DEFAULT_SOURCE_PRIORITY: tuple[str, ...] = (
    "crossref",
    "pubmed",
    "ads",
    "semanticscholar",
    "openalex",
    "arxiv",
    "dblp",
)

# Scalar fields chosen whole from a single member
SCALAR_FIELDS: tuple[str, ...] = ("title", "authors", "year", "venue", "abstract")


@dataclass
class DedupSummary:
    """Summary statistics for one deduplication run.

    Attributes
    ----------
    batches_in : int
        Number of source batches received.
    records_in : int
        Total raw results received.
    clusters_out : int
        Canonical records produced.
    multi_member_clusters : int
        Canonical records built from two or more results.
    identifier_clusters : int
        Multi-member clusters linked by identifiers alone.
    fuzzy_clusters : int
        Multi-member clusters relying on at least one fuzzy link.
    largest_cluster : int
        Size of the largest cluster.
    comparisons : int
        Pairwise fuzzy comparisons performed while clustering.
    dedup_rate : float
        Proportion of input records removed by dedup (0.0–1.0).
    timestamp : str
        ISO-8601 timestamp of run completion.
    execution_time_seconds : float
        Wall-clock duration of the run in seconds.
    """

    batches_in: int = 0
    records_in: int = 0
    clusters_out: int = 0
    multi_member_clusters: int = 0
    identifier_clusters: int = 0
    fuzzy_clusters: int = 0
    largest_cluster: int = 0
    comparisons: int = 0
    dedup_rate: float = 0.0
    timestamp: str = ""
    execution_time_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return asdict(self)


def compute_merged_id(keys: Sequence[tuple[str, str]]) -> str:
    """Compute deterministic merged ID from result keys.

    Parameters
    ----------
    keys : Sequence[tuple[str, str]]
        ``(source_id, source_local_id)`` of every member.

    Returns
    -------
    str
        Merged ID in format "m:{sha256_prefix}".
    """
    sorted_keys = sorted(f"{source_id}\t{local_id}" for source_id, local_id in keys)
    content = "\n".join(sorted_keys)
    hash_digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"m:{hash_digest[:12]}"
