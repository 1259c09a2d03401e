"""Field comparators for pairwise equivalence testing.

This module provides pure, deterministic functions for comparing raw result
fields: title token sets, first-author surnames, years, and normalized
identifiers. Each ``compare_*`` function maps field values to an agreement
level and an optional similarity score.

All functions are locale-independent and reproducible.
"""

from collections.abc import Iterable, Sequence

from bibmerge.normalize import normalize_name_part, normalize_text_for_matching
from bibmerge.normalize._helpers import SUFFIX_RE

# Type alias for comparator result
CompareResult = tuple[str, float | None, list[str]]

# Articles, conjunctions and prepositions carrying no identity
STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "as",
        "at",
        "by",
        "for",
        "from",
        "in",
        "into",
        "of",
        "on",
        "or",
        "the",
        "to",
        "via",
        "with",
    }
)

# Version annotations sources append to titles ("... (preprint)")
ANNOTATION_WORDS: frozenset[str] = frozenset({"eprint", "preprint"})

TITLE_STOP_WORDS: frozenset[str] = STOP_WORDS | ANNOTATION_WORDS


# ---------------------------------------------------------------------------
# Text similarity
# ---------------------------------------------------------------------------


def title_tokens(title: str | None) -> frozenset[str]:
    """Tokenize a title into its comparable word set.

    Parameters
    ----------
    title : str | None
        Raw title.

    Returns
    -------
    frozenset[str]
        Casefolded, punctuation-free tokens minus stop words.

    Examples
    --------
    >>> sorted(title_tokens("The Dark Matter Halos (preprint)"))
    ['dark', 'halos', 'matter']
    """
    if not title:
        return frozenset()
    return frozenset(
        token
        for token in normalize_text_for_matching(title).split()
        if token not in TITLE_STOP_WORDS
    )


def jaccard_similarity(set_a: Iterable[str], set_b: Iterable[str]) -> float:
    """Calculate Jaccard similarity between two sets.

    Parameters
    ----------
    set_a : Iterable[str]
        First set.
    set_b : Iterable[str]
        Second set.

    Returns
    -------
    float
        Jaccard similarity (0.0-1.0).

    Notes
    -----
    Jaccard = |A ∩ B| / |A ∪ B|

    **Edge case**: When either set is empty, returns 0.0. Two empty sets
    also score 0.0: "both missing" cannot confirm that two titles agree.
    """
    set_a = set(set_a)
    set_b = set(set_b)
    if not set_a or not set_b:
        return 0.0

    return len(set_a & set_b) / len(set_a | set_b)


def title_similarity(title_a: str | None, title_b: str | None) -> float:
    """Jaccard similarity of two titles' token sets.

    Parameters
    ----------
    title_a : str | None
        First title.
    title_b : str | None
        Second title.

    Returns
    -------
    float
        Similarity in [0, 1]; 0.0 when either title has no tokens.
    """
    return jaccard_similarity(title_tokens(title_a), title_tokens(title_b))


def first_author_surname(authors: Sequence[str]) -> str | None:
    """Extract the comparable surname of the first listed author.

    "Last, First" yields the text before the comma; "First Last" yields the
    last whitespace token once generational suffixes are removed.

    Parameters
    ----------
    authors : Sequence[str]
        Author names in source order.

    Returns
    -------
    str | None
        Casefolded, accent-stripped surname, or None when there is no
        usable first author.
    """
    if not authors:
        return None

    name = " ".join(authors[0].split())
    if not name:
        return None

    if "," in name:
        surname = name.split(",", 1)[0]
    else:
        surname = SUFFIX_RE.sub("", name).rsplit(" ", 1)[-1]

    return normalize_name_part(surname) or None


def same_first_author(authors_a: Sequence[str], authors_b: Sequence[str]) -> bool:
    """Return True when both first-author surnames are present and equal."""
    surname_a = first_author_surname(authors_a)
    return surname_a is not None and surname_a == first_author_surname(authors_b)


# ---------------------------------------------------------------------------
# Field comparators
# ---------------------------------------------------------------------------


def compare_identifiers(
    pairs_a: frozenset[tuple[str, str]],
    pairs_b: frozenset[tuple[str, str]],
) -> CompareResult:
    """Compare normalized identifier pairs between two records.

    Parameters
    ----------
    pairs_a : frozenset[tuple[str, str]]
        ``(kind, value)`` pairs of the first record.
    pairs_b : frozenset[tuple[str, str]]
        ``(kind, value)`` pairs of the second record.

    Returns
    -------
    tuple[str, float | None, list[str]]
        (level, similarity, warnings)
        - level: 'exact', 'both_present_mismatch', or 'missing'
        - similarity: None (identifier comparison is binary)
        - warnings: 'both_present_id_conflicts' when a kind present on
          both sides disagrees

    Notes
    -----
    A single shared pair is enough for 'exact'; a conflicting kind is
    reported as a warning but does not veto the match.
    """
    warnings: list[str] = []

    kinds_a = dict(pairs_a)
    kinds_b = dict(pairs_b)
    if any(kinds_a[kind] != kinds_b[kind] for kind in kinds_a.keys() & kinds_b.keys()):
        warnings.append("both_present_id_conflicts")

    if pairs_a & pairs_b:
        return ("exact", None, warnings)

    if warnings:
        return ("both_present_mismatch", None, warnings)

    return ("missing", None, warnings)


def compare_title(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> CompareResult:
    """Compare title token sets between two records.

    Parameters
    ----------
    tokens_a : frozenset[str]
        Title tokens from first record.
    tokens_b : frozenset[str]
        Title tokens from second record.

    Returns
    -------
    tuple[str, float | None, list[str]]
        (level, similarity, warnings)
        - level: 'exact', 'partial', or 'missing'
        - similarity: Jaccard similarity on tokens (0.0-1.0)
        - warnings: List of warning codes (e.g., 'title_missing')
    """
    warnings: list[str] = []

    if not tokens_a or not tokens_b:
        warnings.append("title_missing")
        return ("missing", 0.0, warnings)

    if tokens_a == tokens_b:
        return ("exact", 1.0, warnings)

    return ("partial", jaccard_similarity(tokens_a, tokens_b), warnings)


def compare_first_author(surname_a: str | None, surname_b: str | None) -> CompareResult:
    """Compare first-author surnames between two records.

    Parameters
    ----------
    surname_a : str | None
        Normalized surname from first record.
    surname_b : str | None
        Normalized surname from second record.

    Returns
    -------
    tuple[str, float | None, list[str]]
        (level, similarity, warnings)
        - level: 'match', 'mismatch', or 'missing'
        - similarity: None (surname comparison is binary)
        - warnings: List of warning codes
    """
    warnings: list[str] = []

    if not surname_a or not surname_b:
        return ("missing", None, warnings)

    if surname_a == surname_b:
        return ("match", None, warnings)

    return ("mismatch", None, warnings)


def compare_year(year_a: int | None, year_b: int | None) -> CompareResult:
    """Compare year fields between two records.

    Parameters
    ----------
    year_a : int | None
        Year from first record.
    year_b : int | None
        Year from second record.

    Returns
    -------
    tuple[str, float | None, list[str]]
        (level, similarity, warnings)
        - level: 'exact', 'pm1', 'pm2', 'far', or 'missing'
        - similarity: None (year comparison is discrete)
        - warnings: List of warning codes

    Notes
    -----
    Levels:
    - exact: Years match exactly
    - pm1: Years differ by 1
    - pm2: Years differ by 2
    - far: Years differ by more than 2
    - missing: One or both years missing
    """
    warnings: list[str] = []

    if year_a is None or year_b is None:
        return ("missing", None, warnings)

    delta = abs(year_a - year_b)

    if delta == 0:
        return ("exact", None, warnings)
    elif delta == 1:
        return ("pm1", None, warnings)
    elif delta == 2:
        return ("pm2", None, warnings)
    else:
        return ("far", None, warnings)


def years_within(year_a: int | None, year_b: int | None, tolerance: int) -> bool:
    """Return True unless both years are present and further apart than ``tolerance``."""
    if year_a is None or year_b is None:
        return True
    return abs(year_a - year_b) <= tolerance
