"""Helper functions and compiled regex patterns for normalization.

This module provides reusable text utilities shared by the identifier
normalizers and the title/author comparators.
"""

import re
import unicodedata

# Pre-compiled regex patterns
DOI_PREFIX_RE = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:)", re.IGNORECASE)
ARXIV_PREFIX_RE = re.compile(r"^arxiv:", re.IGNORECASE)
ARXIV_VERSION_RE = re.compile(r"v\d+$", re.IGNORECASE)
NON_DIGIT_RE = re.compile(r"\D+")
NON_ALNUM_RE = re.compile(r"[^\w\s]|_")
SUFFIX_RE = re.compile(r"\s+(Jr\.?|Sr\.?|II|III|IV|V)$", re.IGNORECASE)
TRAILING_PUNCT_RE = re.compile(r"[.,;:]+$")


# ---------------------------------------------------------------------------
# Text normalization functions
# ---------------------------------------------------------------------------


def strip_accents(text: str) -> str:
    """Remove diacritical marks for cross-locale matching.

    Parameters
    ----------
    text : str
        Input text with potential diacritics.

    Returns
    -------
    str
        Text with diacritical marks removed.
    """
    nfd = unicodedata.normalize("NFD", text)
    stripped = "".join(c for c in nfd if unicodedata.category(c) != "Mn")
    return unicodedata.normalize("NFC", stripped)


def normalize_text_for_matching(text: str) -> str:
    """Full text normalization for dedup matching.

    Applies NFKC, casefold, accent stripping, punctuation removal,
    and whitespace collapsing. Punctuation is deleted rather than
    replaced, so ``"Dark-matter"`` becomes ``"darkmatter"``.

    Parameters
    ----------
    text : str
        Raw text to normalize.

    Returns
    -------
    str
        Normalized text ready for matching.
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text)
    text = text.casefold()
    text = strip_accents(text)
    text = NON_ALNUM_RE.sub("", text)
    return " ".join(text.split())


def normalize_name_part(name: str) -> str:
    """Normalize one surname for equality tests.

    Strips generational suffixes (Jr., Sr., II...) and trailing
    punctuation, then casefolds and removes accents.

    Parameters
    ----------
    name : str
        Raw surname.

    Returns
    -------
    str
        Normalized surname, possibly empty.
    """
    name = " ".join(name.split())
    name = SUFFIX_RE.sub("", name)
    name = TRAILING_PUNCT_RE.sub("", name).strip()
    return strip_accents(unicodedata.normalize("NFKC", name).casefold())
