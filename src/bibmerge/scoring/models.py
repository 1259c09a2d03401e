"""Data models for pairwise field comparison.

This module defines the per-field comparison record attached to every
equivalence decision for explainability.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FieldComparison:
    """Comparison result for a single field.

    Attributes
    ----------
    level : str
        Agreement level (e.g., 'exact', 'partial', 'missing').
    sim : float | None
        Similarity score if applicable (0.0-1.0), None otherwise.
    warnings : tuple[str, ...]
        Warning codes raised by the comparator.
    """

    level: str
    sim: float | None
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return data


# Type alias for comparison results - flexible dict-based structure
ComparisonResult = dict[str, FieldComparison]


def comparison_to_dict(comparison: ComparisonResult) -> dict[str, dict[str, Any]]:
    """Convert ComparisonResult to dictionary for JSON serialization.

    Parameters
    ----------
    comparison : ComparisonResult
        Field comparisons mapping.

    Returns
    -------
    dict[str, dict[str, Any]]
        Dictionary with field names as keys and comparison dicts as values.
    """
    return {field: fc.to_dict() for field, fc in comparison.items()}
