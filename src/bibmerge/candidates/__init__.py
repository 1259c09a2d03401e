"""Candidate lookup indexes that keep clustering near-linear."""

from bibmerge.candidates.blockers import (
    CandidateIndex,
    IdentifierIndex,
    IndexStats,
    YearFirstAuthorIndex,
)

__all__ = [
    # Protocol
    "CandidateIndex",
    "IndexStats",
    # Exact index
    "IdentifierIndex",
    # Bibliographic index
    "YearFirstAuthorIndex",
]
