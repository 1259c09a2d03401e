"""arXiv identifier normalization."""

from .._helpers import ARXIV_PREFIX_RE, ARXIV_VERSION_RE


def normalize_arxiv(value: str) -> str | None:
    """Normalize an arXiv identifier.

    ``arXiv:2401.12345v2`` and ``2401.12345`` both normalize to
    ``2401.12345``. Old-style ids (``astro-ph/0601001v1``) are handled
    the same way.

    Parameters
    ----------
    value : str
        Raw arXiv identifier.

    Returns
    -------
    str | None
        Version-less, lower-cased identifier, or None if empty.
    """
    arxiv_id = ARXIV_PREFIX_RE.sub("", value.strip()).strip()
    arxiv_id = ARXIV_VERSION_RE.sub("", arxiv_id).lower()
    return arxiv_id or None
