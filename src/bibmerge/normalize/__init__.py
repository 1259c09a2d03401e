"""Identifier and text normalization."""

from ._helpers import normalize_name_part, normalize_text_for_matching, strip_accents
from .normalizer import normalize_identifier, normalize_identifiers

__all__ = [
    "normalize_identifier",
    "normalize_identifiers",
    "normalize_name_part",
    "normalize_text_for_matching",
    "strip_accents",
]
