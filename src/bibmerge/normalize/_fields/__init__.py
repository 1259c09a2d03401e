"""Identifier normalization functions.

One normalizer per identifier kind. Each function is pure and total:
it returns the canonical string, or None when the value is malformed.
"""

from .arxiv import normalize_arxiv
from .bibcode import normalize_bibcode
from .doi import normalize_doi
from .pmid import normalize_pmid

__all__ = [
    "normalize_arxiv",
    "normalize_bibcode",
    "normalize_doi",
    "normalize_pmid",
]
