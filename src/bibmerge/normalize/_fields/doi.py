"""DOI normalization."""

from .._helpers import DOI_PREFIX_RE


def normalize_doi(value: str) -> str | None:
    """Normalize a DOI string.

    Parameters
    ----------
    value : str
        Raw DOI, bare or as a ``doi:`` / ``https://doi.org/`` reference.

    Returns
    -------
    str | None
        Lower-cased DOI starting with ``10.``, or None if malformed.
    """
    doi = value.strip().lower()
    doi = DOI_PREFIX_RE.sub("", doi).strip()

    # Validate format (registrant prefix and suffix)
    if not doi.startswith("10.") or "/" not in doi:
        return None

    return doi
