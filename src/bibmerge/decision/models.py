"""Data models for pairwise equivalence decisions.

This module defines the match methods, reason codes, and the explainable
result returned for every pair of raw results tested.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from bibmerge.scoring.models import ComparisonResult, comparison_to_dict


class MatchMethod(StrEnum):
    """Path of the equivalence test that produced a decision.

    Attributes
    ----------
    IDENTIFIER : str
        The records share a normalized identifier.
    FUZZY : str
        Title, first author and year agree.
    NONE : str
        The records are not equivalent.
    """

    IDENTIFIER = "identifier"
    FUZZY = "fuzzy"
    NONE = "none"


class ReasonCode(StrEnum):
    """Reason codes for equivalence decisions.

    Attributes
    ----------
    SHARED_IDENTIFIER : str
        At least one normalized (kind, value) pair is shared.
    FUZZY_MATCH : str
        All fuzzy criteria hold.
    FUZZY_DISABLED : str
        No shared identifier and fuzzy matching is turned off.
    TITLE_MISSING : str
        One or both titles have no comparable tokens.
    TITLE_BELOW_THRESHOLD : str
        Title similarity is below the configured threshold.
    AUTHOR_MISSING : str
        One or both records have no usable first author.
    AUTHOR_MISMATCH : str
        First-author surnames differ.
    YEAR_OUT_OF_TOLERANCE : str
        Both years present and further apart than the tolerance.
    """

    SHARED_IDENTIFIER = "shared_identifier"
    FUZZY_MATCH = "fuzzy_match"
    FUZZY_DISABLED = "fuzzy_disabled"
    TITLE_MISSING = "title_missing"
    TITLE_BELOW_THRESHOLD = "title_below_threshold"
    AUTHOR_MISSING = "author_missing"
    AUTHOR_MISMATCH = "author_mismatch"
    YEAR_OUT_OF_TOLERANCE = "year_out_of_tolerance"


@dataclass(frozen=True)
class MatchResult:
    """Explainable outcome of one equivalence test.

    Attributes
    ----------
    matched : bool
        Whether the two records denote the same publication.
    method : MatchMethod
        Path that decided the outcome.
    score : float
        1.0 for identifier matches, otherwise the title similarity.
    reason : ReasonCode
        First criterion that decided the outcome.
    shared_identifiers : tuple[tuple[str, str], ...]
        Sorted ``(kind, value)`` pairs present in both records.
    comparison : ComparisonResult
        Per-field comparisons computed for the pair.
    """

    matched: bool
    method: MatchMethod
    score: float
    reason: ReasonCode
    shared_identifiers: tuple[tuple[str, str], ...] = ()
    comparison: ComparisonResult = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "matched": self.matched,
            "method": self.method.value,
            "score": self.score,
            "reason": self.reason.value,
            "shared_identifiers": [list(pair) for pair in self.shared_identifiers],
            "comparison": comparison_to_dict(self.comparison),
        }
