"""Deduplication configuration dataclass."""

from dataclasses import dataclass
from typing import Any

from bibmerge.merge.models import DEFAULT_SOURCE_PRIORITY


@dataclass
class DedupConfig:
    """Configuration for one deduplication run.

    Attributes
    ----------
    priority : tuple[str, ...]
        Source ids, best first, used to pick scalar fields and the primary
        member (default: ``DEFAULT_SOURCE_PRIORITY``).
    title_threshold : float
        Minimum title Jaccard similarity for a fuzzy match, inclusive
        (default: 0.85).
    year_tolerance : int
        Maximum year difference for a fuzzy match (default: 1).
    use_fuzzy_matching : bool
        Evaluate the fuzzy tier at all (default: True). When False only
        shared identifiers link results.
    """

    priority: tuple[str, ...] = DEFAULT_SOURCE_PRIORITY
    title_threshold: float = 0.85
    year_tolerance: int = 1
    use_fuzzy_matching: bool = True

    def __post_init__(self) -> None:
        """Normalize and validate."""
        if isinstance(self.priority, str):
            raise ValueError(f"priority must be a sequence of source ids, got {self.priority!r}")
        self.priority = tuple(self.priority)

        if not all(isinstance(source, str) and source for source in self.priority):
            raise ValueError(f"priority entries must be non-empty strings, got {self.priority}")

        if len(set(self.priority)) != len(self.priority):
            raise ValueError(f"priority contains duplicate source ids: {self.priority}")

        if not 0.0 <= self.title_threshold <= 1.0:
            raise ValueError(f"title_threshold must be in [0, 1], got {self.title_threshold}")

        if isinstance(self.year_tolerance, bool) or not isinstance(self.year_tolerance, int):
            raise ValueError(f"year_tolerance must be an int, got {self.year_tolerance!r}")

        if self.year_tolerance < 0:
            raise ValueError(f"year_tolerance must be >= 0, got {self.year_tolerance}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "priority": list(self.priority),
            "title_threshold": self.title_threshold,
            "year_tolerance": self.year_tolerance,
            "use_fuzzy_matching": self.use_fuzzy_matching,
        }
