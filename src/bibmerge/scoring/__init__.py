"""Title, author and year comparison.

This module implements the text-similarity layer: title token sets with
Jaccard similarity, first-author surname equality, and discrete field
comparators used to explain equivalence decisions.
"""

from bibmerge.scoring.comparators import (
    ANNOTATION_WORDS,
    STOP_WORDS,
    TITLE_STOP_WORDS,
    compare_first_author,
    compare_identifiers,
    compare_title,
    compare_year,
    first_author_surname,
    jaccard_similarity,
    same_first_author,
    title_similarity,
    title_tokens,
    years_within,
)
from bibmerge.scoring.models import ComparisonResult, FieldComparison, comparison_to_dict

__all__ = [
    # Models
    "FieldComparison",
    "ComparisonResult",
    "comparison_to_dict",
    # Text similarity
    "STOP_WORDS",
    "ANNOTATION_WORDS",
    "TITLE_STOP_WORDS",
    "title_tokens",
    "jaccard_similarity",
    "title_similarity",
    "first_author_surname",
    "same_first_author",
    "years_within",
    # Comparators
    "compare_identifiers",
    "compare_title",
    "compare_first_author",
    "compare_year",
]
