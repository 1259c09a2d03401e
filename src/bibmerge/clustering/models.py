"""Data models for clustering and cluster support."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from bibmerge.models import RawResult


class ClusterMethod(StrEnum):
    """How the members of a cluster are linked.

    Attributes
    ----------
    SINGLE : str
        One-member cluster.
    IDENTIFIER : str
        Every member is reachable through shared identifiers alone.
    FUZZY : str
        At least one link relies on the fuzzy title/author/year test.
    """

    SINGLE = "single"
    IDENTIFIER = "identifier"
    FUZZY = "fuzzy"


class ConflictType(StrEnum):
    """Informational inconsistencies inside a cluster.

    Clusters are never split; conflicts are reported for audit only.

    Attributes
    ----------
    DOI_CONFLICT : str
        Multiple distinct DOIs present.
    ARXIV_CONFLICT : str
        Multiple distinct arXiv ids present.
    BIBCODE_CONFLICT : str
        Multiple distinct bibcodes present.
    PMID_CONFLICT : str
        Multiple distinct PMIDs present.
    YEAR_SPREAD : str
        Member years spread wider than the year tolerance.
    """

    DOI_CONFLICT = "doi_conflict"
    ARXIV_CONFLICT = "arxiv_conflict"
    BIBCODE_CONFLICT = "bibcode_conflict"
    PMID_CONFLICT = "pmid_conflict"
    YEAR_SPREAD = "year_spread"


@dataclass
class Cluster:
    """Arena slot holding one equivalence class of raw results.

    Clusters are owned by a ``ClusterIndex`` for the duration of one run.
    They grow by ``add`` and ``absorb`` and are never split.

    Attributes
    ----------
    cluster_id : int
        Arena index; the lowest id survives a merge.
    members : list[int]
        Insertion sequence numbers, ascending.
    records : list[RawResult]
        Member records, parallel to ``members``.
    identifiers : set[tuple[str, str]]
        Union of the members' normalized ``(kind, value)`` pairs.
    """

    cluster_id: int
    members: list[int] = field(default_factory=list)
    records: list[RawResult] = field(default_factory=list)
    identifiers: set[tuple[str, str]] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.members)

    @property
    def first_seq(self) -> int:
        """Sequence number of the earliest inserted member."""
        return self.members[0]

    @property
    def keys(self) -> tuple[tuple[str, str], ...]:
        """``(source_id, source_local_id)`` of every member, insertion order."""
        return tuple(record.key for record in self.records)

    def add(self, seq: int, record: RawResult) -> None:
        """Append a newly inserted record.

        Parameters
        ----------
        seq : int
            Insertion sequence number, larger than any existing member's.
        record : RawResult
            Record to add.
        """
        self.members.append(seq)
        self.records.append(record)
        self.identifiers.update(record.identifier_pairs)

    def absorb(self, other: "Cluster") -> None:
        """Move every member of ``other`` into this cluster, keeping seq order.

        Parameters
        ----------
        other : Cluster
            Cluster being merged away. Left untouched; the caller retires it.
        """
        merged = sorted(
            zip(self.members + other.members, self.records + other.records, strict=True),
            key=lambda item: item[0],
        )
        self.members = [seq for seq, _ in merged]
        self.records = [record for _, record in merged]
        self.identifiers |= other.identifiers

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "cluster_id": self.cluster_id,
            "size": len(self),
            "members": [{"source_id": s, "source_local_id": lid} for s, lid in self.keys],
            "identifiers": [list(pair) for pair in sorted(self.identifiers)],
        }


@dataclass(frozen=True)
class ClusterSupport:
    """Evidence linking the members of a cluster.

    Attributes
    ----------
    method : ClusterMethod
        Weakest link type needed to connect the cluster.
    confidence : float
        1.0 for single and identifier clusters, otherwise the weakest
        title similarity joining identifier-linked groups.
    identifier_groups : int
        Number of groups connected by shared identifiers alone.
    """

    method: ClusterMethod
    confidence: float
    identifier_groups: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "method": self.method.value,
            "confidence": self.confidence,
            "identifier_groups": self.identifier_groups,
        }


@dataclass(frozen=True)
class ClusterConsistency:
    """Consistency check results for cluster.

    Attributes
    ----------
    conflicts : tuple[str, ...]
        Conflict type values found in the cluster.
    notes : tuple[str, ...]
        Additional notes about cluster.
    """

    conflicts: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns
        -------
        dict[str, Any]
            Dictionary representation.
        """
        return {
            "conflicts": list(self.conflicts),
            "notes": list(self.notes),
        }
