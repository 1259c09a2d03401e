"""PMID normalization."""

from .._helpers import NON_DIGIT_RE


def normalize_pmid(value: str) -> str | None:
    """Normalize a PubMed identifier to its digits.

    Parameters
    ----------
    value : str
        Raw PMID (e.g., ``"PMID: 12345678"``).

    Returns
    -------
    str | None
        Digits only, or None if no digit remains.
    """
    return NON_DIGIT_RE.sub("", value) or None
