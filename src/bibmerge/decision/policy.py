"""Two-tier equivalence policy.

This module decides whether two raw results denote the same publication:
first by exact normalized identifier, then by a fuzzy test over title
similarity, first-author surname and year.
"""

from typing import TYPE_CHECKING

from bibmerge.decision.models import MatchMethod, MatchResult, ReasonCode
from bibmerge.models import RawResult
from bibmerge.scoring import (
    FieldComparison,
    compare_first_author,
    compare_identifiers,
    compare_title,
    compare_year,
    years_within,
)

if TYPE_CHECKING:
    from bibmerge.engine.config import DedupConfig


class EquivalenceTester:
    """Symmetric same-publication test for pairs of raw results.

    Parameters
    ----------
    title_threshold : float, optional
        Minimum title Jaccard similarity for a fuzzy match, inclusive,
        by default 0.85.
    year_tolerance : int, optional
        Maximum year difference for a fuzzy match when both years are
        present, by default 1.
    use_fuzzy_matching : bool, optional
        Whether the fuzzy path is evaluated at all, by default True.

    Notes
    -----
    ``same(a, b) == same(b, a)`` for every pair: every criterion is a
    symmetric function of the two records.
    """

    def __init__(
        self,
        title_threshold: float = 0.85,
        year_tolerance: int = 1,
        use_fuzzy_matching: bool = True,
    ) -> None:
        self.title_threshold = title_threshold
        self.year_tolerance = year_tolerance
        self.use_fuzzy_matching = use_fuzzy_matching

    @classmethod
    def from_config(cls, config: "DedupConfig") -> "EquivalenceTester":
        """Build a tester from a pipeline configuration."""
        return cls(
            title_threshold=config.title_threshold,
            year_tolerance=config.year_tolerance,
            use_fuzzy_matching=config.use_fuzzy_matching,
        )

    def same(self, a: RawResult, b: RawResult) -> bool:
        """Return True if ``a`` and ``b`` denote the same publication."""
        if a.identifier_pairs & b.identifier_pairs:
            return True
        if not self.use_fuzzy_matching:
            return False
        return self._fuzzy_match(a, b)

    def _fuzzy_match(self, a: RawResult, b: RawResult) -> bool:
        # Cheapest criteria first
        surname = a.first_author_surname
        if surname is None or surname != b.first_author_surname:
            return False
        if not years_within(a.year, b.year, self.year_tolerance):
            return False
        level, sim, _ = compare_title(a.title_tokens, b.title_tokens)
        return level != "missing" and sim is not None and sim >= self.title_threshold

    def explain(self, a: RawResult, b: RawResult) -> MatchResult:
        """Test a pair and report which criterion decided the outcome.

        Parameters
        ----------
        a : RawResult
            First record.
        b : RawResult
            Second record.

        Returns
        -------
        MatchResult
            Decision with method, score, reason and per-field comparisons.
            ``explain(a, b).matched == same(a, b)``.
        """
        comparison = {
            "identifiers": _field(compare_identifiers(a.identifier_pairs, b.identifier_pairs)),
            "title": _field(compare_title(a.title_tokens, b.title_tokens)),
            "first_author": _field(
                compare_first_author(a.first_author_surname, b.first_author_surname)
            ),
            "year": _field(compare_year(a.year, b.year)),
        }
        title_sim = comparison["title"].sim or 0.0

        shared = tuple(sorted(a.identifier_pairs & b.identifier_pairs))
        if shared:
            return MatchResult(
                matched=True,
                method=MatchMethod.IDENTIFIER,
                score=1.0,
                reason=ReasonCode.SHARED_IDENTIFIER,
                shared_identifiers=shared,
                comparison=comparison,
            )

        reason = self._fuzzy_failure(comparison, a.year, b.year)
        matched = reason is None
        return MatchResult(
            matched=matched,
            method=MatchMethod.FUZZY if matched else MatchMethod.NONE,
            score=title_sim,
            reason=reason or ReasonCode.FUZZY_MATCH,
            comparison=comparison,
        )

    def _fuzzy_failure(
        self,
        comparison: dict[str, FieldComparison],
        year_a: int | None,
        year_b: int | None,
    ) -> ReasonCode | None:
        if not self.use_fuzzy_matching:
            return ReasonCode.FUZZY_DISABLED

        title = comparison["title"]
        if title.level == "missing":
            return ReasonCode.TITLE_MISSING
        if title.sim is None or title.sim < self.title_threshold:
            return ReasonCode.TITLE_BELOW_THRESHOLD

        author_level = comparison["first_author"].level
        if author_level == "missing":
            return ReasonCode.AUTHOR_MISSING
        if author_level == "mismatch":
            return ReasonCode.AUTHOR_MISMATCH

        if not years_within(year_a, year_b, self.year_tolerance):
            return ReasonCode.YEAR_OUT_OF_TOLERANCE

        return None


def _field(result: tuple[str, float | None, list[str]]) -> FieldComparison:
    level, sim, warnings = result
    return FieldComparison(level=level, sim=sim, warnings=tuple(warnings))
