"""Support and consistency assessment for finished clusters."""

from collections.abc import Sequence

from bibmerge.clustering.models import (
    ClusterConsistency,
    ClusterMethod,
    ClusterSupport,
    ConflictType,
)
from bibmerge.clustering.union_find import UnionFind
from bibmerge.models import RawResult
from bibmerge.scoring import jaccard_similarity

# Size above which a note is attached for review
LARGE_CLUSTER_SIZE = 25

_KIND_CONFLICTS: dict[str, ConflictType] = {
    "doi": ConflictType.DOI_CONFLICT,
    "arxiv": ConflictType.ARXIV_CONFLICT,
    "bibcode": ConflictType.BIBCODE_CONFLICT,
    "pmid": ConflictType.PMID_CONFLICT,
}


def identifier_groups(records: Sequence[RawResult]) -> list[list[int]]:
    """Group record positions connected through shared identifiers.

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members.

    Returns
    -------
    list[list[int]]
        Positions into ``records``, one list per identifier-connected group.
    """
    uf = UnionFind()
    holders: dict[tuple[str, str], int] = {}

    for i, record in enumerate(records):
        uf.make_set(i)
        for pair in record.identifier_pairs:
            if pair in holders:
                uf.union(holders[pair], i)
            else:
                holders[pair] = i

    return [[int(i) for i in group] for group in uf.get_components()]


def assess_cluster(records: Sequence[RawResult]) -> ClusterSupport:
    """Classify how a cluster is linked and how strongly.

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members in insertion order.

    Returns
    -------
    ClusterSupport
        Link method and confidence.

    Notes
    -----
    For fuzzy clusters the confidence is the minimum, over identifier
    groups, of the best title similarity between a group member and any
    record outside the group. Every group is attached by at least one
    fuzzy link, so the value is never below the threshold in force when
    the cluster was built.
    """
    if len(records) <= 1:
        return ClusterSupport(ClusterMethod.SINGLE, 1.0, len(records))

    groups = identifier_groups(records)
    if len(groups) == 1:
        return ClusterSupport(ClusterMethod.IDENTIFIER, 1.0, 1)

    support = 1.0
    for group in groups:
        inside = set(group)
        best = max(
            jaccard_similarity(records[i].title_tokens, records[j].title_tokens)
            for i in group
            for j in range(len(records))
            if j not in inside
        )
        support = min(support, best)

    return ClusterSupport(ClusterMethod.FUZZY, round(support, 4), len(groups))


def check_cluster_consistency(
    records: Sequence[RawResult],
    year_tolerance: int,
) -> ClusterConsistency:
    """Report identifier and year conflicts inside a cluster.

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members.
    year_tolerance : int
        Year window of the fuzzy test.

    Returns
    -------
    ClusterConsistency
        Immutable consistency check results.
    """
    values: dict[str, set[str]] = {}
    for record in records:
        for kind, value in record.normalized_identifiers.items():
            values.setdefault(kind, set()).add(value)

    conflicts = [
        conflict.value
        for kind, conflict in _KIND_CONFLICTS.items()
        if len(values.get(kind, ())) >= 2
    ]

    years = [record.year for record in records if record.year is not None]
    if years and max(years) - min(years) > year_tolerance:
        conflicts.append(ConflictType.YEAR_SPREAD.value)

    notes: list[str] = []
    if len(records) > LARGE_CLUSTER_SIZE:
        notes.append(f"large_cluster:{len(records)}")

    return ClusterConsistency(conflicts=tuple(conflicts), notes=tuple(notes))
