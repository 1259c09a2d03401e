"""Deterministic identifier normalization.

This module dispatches each identifier kind of a raw result to its field
normalizer. All functions are pure, deterministic, and never raise on
malformed input: values that cannot be normalized are dropped.
"""

from collections.abc import Callable, Mapping
from typing import Any

from ._fields import normalize_arxiv, normalize_bibcode, normalize_doi, normalize_pmid

_KIND_NORMALIZERS: dict[str, Callable[[str], str | None]] = {
    "doi": normalize_doi,
    "arxiv": normalize_arxiv,
    "bibcode": normalize_bibcode,
    "pmid": normalize_pmid,
}


def normalize_identifier(kind: str, value: Any) -> str | None:
    """Normalize one identifier value.

    Parameters
    ----------
    kind : str
        Identifier kind, already lower-cased and trimmed.
    value : Any
        Raw value. Anything but a string is treated as malformed.

    Returns
    -------
    str | None
        Normalized value, or None if the value is dropped.
    """
    if not isinstance(value, str):
        return None

    normalizer = _KIND_NORMALIZERS.get(kind)
    if normalizer is None:
        # Unknown kinds pass through trimmed
        return value.strip() or None

    return normalizer(value)


def normalize_identifiers(identifiers: Mapping[Any, Any]) -> dict[str, str]:
    """Normalize an identifier mapping.

    Parameters
    ----------
    identifiers : Mapping[Any, Any]
        Identifier kind -> raw value, as supplied by a source.

    Returns
    -------
    dict[str, str]
        Kind -> normalized value, containing only the kinds that survived
        normalization. Key order follows the input.

    Notes
    -----
    This function is idempotent: normalizing its own output returns the
    same mapping.

    Examples
    --------
    >>> normalize_identifiers({"DOI": "https://doi.org/10.1000/X", "pmid": "n/a"})
    {'doi': '10.1000/x'}
    """
    normalized: dict[str, str] = {}
    for raw_kind, value in identifiers.items():
        if not isinstance(raw_kind, str):
            continue
        kind = raw_kind.strip().lower()
        if not kind:
            continue
        norm = normalize_identifier(kind, value)
        if norm is not None and kind not in normalized:
            normalized[kind] = norm
    return normalized
