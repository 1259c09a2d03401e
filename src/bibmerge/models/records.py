"""Record data models for bibmerge.

This module defines the two record types that cross the engine boundary:
``RawResult`` (one hit from one source) and ``CanonicalRecord`` (the merged
output for one publication).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any

from bibmerge.normalize.normalizer import normalize_identifiers
from bibmerge.scoring.comparators import first_author_surname, title_tokens

# Schema version constant
SCHEMA_VERSION = "1.0.0"

IDENTIFIER_KINDS: tuple[str, ...] = ("doi", "arxiv", "bibcode", "pmid")

_OPTIONAL_TEXT_FIELDS = ("venue", "abstract", "external_url", "pdf_url")


@dataclass(frozen=True)
class ProvenanceEntry:
    """Origin of one contributing raw result.

    Attributes
    ----------
    source_id : str
        External database that produced the result (e.g., 'crossref').
    source_local_id : str
        The source's own identifier for the item.
    """

    source_id: str
    source_local_id: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"source_id": self.source_id, "source_local_id": self.source_local_id}


@dataclass(frozen=True, eq=False)
class RawResult:
    """One search hit as returned by exactly one source.

    Instances are immutable. ``(source_id, source_local_id)`` identifies a
    result within one deduplication run. Equality is identity: two results
    are the same object or they are different results.

    Attributes
    ----------
    source_id : str
        External database identifier (e.g., 'crossref', 'arxiv').
    source_local_id : str
        Source-local identifier (DOI, arXiv id, bibcode, PMID or opaque id).
    title : str
        Title, ``""`` when unknown. Never None.
    authors : tuple[str, ...]
        Author names in source order ("Last, First" or "First Last").
    year : int | None
        Publication year.
    venue : str | None
        Journal, proceedings or other venue name.
    abstract : str | None
        Abstract text.
    external_url : str | None
        Landing page URL.
    pdf_url : str | None
        Direct PDF URL.
    identifiers : Mapping[str, str]
        Identifier kind -> raw string (kinds include doi, arxiv, bibcode, pmid).

    Raises
    ------
    TypeError
        If a field violates the record contract (e.g., ``title=None``).
    """

    source_id: str
    source_local_id: str
    title: str
    authors: tuple[str, ...] = ()
    year: int | None = None
    venue: str | None = None
    abstract: str | None = None
    external_url: str | None = None
    pdf_url: str | None = None
    identifiers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the record contract and freeze container fields."""
        for name in ("source_id", "source_local_id", "title"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"RawResult.{name} must be str, got {getattr(self, name)!r}")

        if isinstance(self.authors, str) or not isinstance(self.authors, Iterable):
            raise TypeError(f"RawResult.authors must be a sequence of str, got {self.authors!r}")
        authors = tuple(self.authors)
        if not all(isinstance(a, str) for a in authors):
            raise TypeError(f"RawResult.authors must contain only str, got {authors!r}")
        object.__setattr__(self, "authors", authors)

        if self.year is not None and (isinstance(self.year, bool) or not isinstance(self.year, int)):
            raise TypeError(f"RawResult.year must be int or None, got {self.year!r}")

        for name in _OPTIONAL_TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"RawResult.{name} must be str or None, got {value!r}")

        if not isinstance(self.identifiers, Mapping):
            raise TypeError(f"RawResult.identifiers must be a mapping, got {self.identifiers!r}")
        object.__setattr__(self, "identifiers", MappingProxyType(dict(self.identifiers)))

    @property
    def key(self) -> tuple[str, str]:
        """Return the ``(source_id, source_local_id)`` identity of this result."""
        return (self.source_id, self.source_local_id)

    @property
    def provenance(self) -> ProvenanceEntry:
        """Return the provenance entry naming this result."""
        return ProvenanceEntry(self.source_id, self.source_local_id)

    @cached_property
    def normalized_identifiers(self) -> Mapping[str, str]:
        """Normalized identifiers, computed once per result."""
        return MappingProxyType(normalize_identifiers(self.identifiers))

    @cached_property
    def identifier_pairs(self) -> frozenset[tuple[str, str]]:
        """Normalized identifiers as comparable ``(kind, value)`` pairs."""
        return frozenset(self.normalized_identifiers.items())

    @cached_property
    def title_tokens(self) -> frozenset[str]:
        """Comparable title word set (see ``bibmerge.scoring.title_tokens``)."""
        return title_tokens(self.title)

    @cached_property
    def first_author_surname(self) -> str | None:
        """Normalized surname of the first listed author, if any."""
        return first_author_surname(self.authors)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary with snake_case keys, readable by ``from_dict``.
        """
        return {
            "source_id": self.source_id,
            "source_local_id": self.source_local_id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "venue": self.venue,
            "abstract": self.abstract,
            "external_url": self.external_url,
            "pdf_url": self.pdf_url,
            "identifiers": dict(self.identifiers),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "RawResult":
        """Create a RawResult from a dictionary.

        Unknown keys are ignored so that source payloads may carry extra
        fields.

        Parameters
        ----------
        data : Mapping[str, Any]
            Dictionary as produced by ``to_dict`` (or a source client).

        Returns
        -------
        RawResult
            Constructed record.

        Raises
        ------
        KeyError
            If ``source_id``, ``source_local_id`` or ``title`` is missing.
        TypeError
            If a field has the wrong type.
        """
        return RawResult(
            source_id=data["source_id"],
            source_local_id=data["source_local_id"],
            title=data["title"],
            authors=data.get("authors") or (),
            year=data.get("year"),
            venue=data.get("venue"),
            abstract=data.get("abstract"),
            external_url=data.get("external_url"),
            pdf_url=data.get("pdf_url"),
            identifiers=data.get("identifiers") or {},
        )


@dataclass(frozen=True)
class CanonicalRecord:
    """Merged output record for one cluster of raw results.

    Attributes
    ----------
    merged_id : str
        Deterministic identifier derived from the provenance keys.
    title : str
        Title chosen by source priority (``""`` if no member had one).
    authors : tuple[str, ...]
        Author list taken whole from one member, chosen by source priority.
    year : int | None
        Year chosen by source priority.
    venue : str | None
        Venue chosen by source priority.
    abstract : str | None
        Abstract chosen by source priority.
    identifiers : Mapping[str, tuple[str, ...]]
        Union of normalized identifiers per kind, first-seen order.
    pdf_urls : tuple[str, ...]
        Union of PDF URLs, de-duplicated.
    external_urls : tuple[str, ...]
        Union of landing page URLs, de-duplicated.
    provenance : tuple[ProvenanceEntry, ...]
        Every contributing result, in insertion order.
    primary : ProvenanceEntry
        Member from the highest-priority source.
    match_method : str
        'single', 'identifier' or 'fuzzy'.
    confidence : float
        1.0 for singletons and identifier-linked clusters, otherwise the
        weakest title-similarity support inside the cluster.
    field_sources : Mapping[str, str]
        Scalar field name -> source_id that supplied the value.
    """

    merged_id: str
    title: str
    authors: tuple[str, ...]
    year: int | None
    venue: str | None
    abstract: str | None
    identifiers: Mapping[str, tuple[str, ...]]
    pdf_urls: tuple[str, ...]
    external_urls: tuple[str, ...]
    provenance: tuple[ProvenanceEntry, ...]
    primary: ProvenanceEntry
    match_method: str
    confidence: float
    field_sources: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze mapping fields so the record stays read-only."""
        object.__setattr__(self, "identifiers", MappingProxyType(dict(self.identifiers)))
        object.__setattr__(self, "field_sources", MappingProxyType(dict(self.field_sources)))

    def identifier(self, kind: str) -> str | None:
        """Return the first normalized identifier of ``kind``, if any."""
        values = self.identifiers.get(kind)
        return values[0] if values else None

    @property
    def source_ids(self) -> tuple[str, ...]:
        """Distinct contributing sources, in first-contribution order."""
        return tuple(dict.fromkeys(entry.source_id for entry in self.provenance))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "merged_id": self.merged_id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "venue": self.venue,
            "abstract": self.abstract,
            "identifiers": {kind: list(values) for kind, values in self.identifiers.items()},
            "pdf_urls": list(self.pdf_urls),
            "external_urls": list(self.external_urls),
            "provenance": [entry.to_dict() for entry in self.provenance],
            "primary": self.primary.to_dict(),
            "match_method": self.match_method,
            "confidence": self.confidence,
            "field_sources": dict(self.field_sources),
        }
