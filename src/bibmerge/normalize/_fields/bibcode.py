"""Bibliographic code normalization."""


def normalize_bibcode(value: str) -> str | None:
    """Normalize a bibcode.

    Bibcodes are position-encoded and case-sensitive, so only surrounding
    whitespace is removed.

    Parameters
    ----------
    value : str
        Raw bibcode (e.g., ``2024ApJ...960L...1N``).

    Returns
    -------
    str | None
        Trimmed bibcode, or None if empty.
    """
    return value.strip() or None
