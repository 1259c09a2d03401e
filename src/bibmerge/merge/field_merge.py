"""Field-level merge rules for canonical records."""

from collections.abc import Iterable, Sequence
from typing import Any

from bibmerge.clustering import Cluster, assess_cluster
from bibmerge.merge.models import DEFAULT_SOURCE_PRIORITY, SCALAR_FIELDS, compute_merged_id
from bibmerge.merge.survivor import select_primary
from bibmerge.models import CanonicalRecord, RawResult

_EMPTY_SCALARS: dict[str, Any] = {
    "title": "",
    "authors": (),
    "year": None,
    "venue": None,
    "abstract": None,
}


class SourcePriorityMerger:
    """Merge one cluster of raw results into a canonical record.

    Parameters
    ----------
    priority : Sequence[str], optional
        Source ids, best first, by default ``DEFAULT_SOURCE_PRIORITY``.

    Notes
    -----
    Scalar fields (title, authors, year, venue, abstract) are taken whole
    from a single member: the first member, in arrival order, of the
    highest-priority source that has a non-empty value. When no listed
    source has one, the first member of an unlisted source with a value
    is used. Identifiers and URLs are unioned across all members.
    """

    def __init__(self, priority: Sequence[str] = DEFAULT_SOURCE_PRIORITY) -> None:
        self.priority = tuple(priority)

    def merge(
        self,
        cluster: Cluster | Sequence[RawResult],
        priority: Sequence[str] | None = None,
    ) -> CanonicalRecord:
        """Merge cluster members into one canonical record.

        Parameters
        ----------
        cluster : Cluster | Sequence[RawResult]
            Cluster slot or member records in arrival order.
        priority : Sequence[str] | None, optional
            Overrides the merger's priority for this call.

        Returns
        -------
        CanonicalRecord
            Merged record with provenance.

        Raises
        ------
        ValueError
            If the cluster has no members.
        """
        records = list(cluster.records if isinstance(cluster, Cluster) else cluster)
        if not records:
            raise ValueError("Cannot merge an empty cluster")
        order = self.priority if priority is None else tuple(priority)

        scalars: dict[str, Any] = {}
        field_sources: dict[str, str] = {}
        for field_name in SCALAR_FIELDS:
            value, source = pick_scalar(records, field_name, order)
            scalars[field_name] = value
            if source is not None:
                field_sources[field_name] = source.source_id

        support = assess_cluster(records)
        primary = select_primary(records, order)

        return CanonicalRecord(
            merged_id=compute_merged_id([record.key for record in records]),
            title=scalars["title"],
            authors=scalars["authors"],
            year=scalars["year"],
            venue=scalars["venue"],
            abstract=scalars["abstract"],
            identifiers=merge_identifiers(records),
            pdf_urls=merge_urls(record.pdf_url for record in records),
            external_urls=merge_urls(record.external_url for record in records),
            provenance=tuple(record.provenance for record in records),
            primary=primary.provenance,
            match_method=support.method.value,
            confidence=support.confidence,
            field_sources=field_sources,
        )


def pick_scalar(
    records: Sequence[RawResult],
    field_name: str,
    priority: Sequence[str],
) -> tuple[Any, RawResult | None]:
    """Choose a scalar field value by source priority.

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members in arrival order.
    field_name : str
        One of ``SCALAR_FIELDS``.
    priority : Sequence[str]
        Source ids, best first.

    Returns
    -------
    tuple[Any, RawResult | None]
        Chosen value and the member that supplied it, or the field's empty
        value and None when no member has one.
    """
    for source_id in priority:
        for record in records:
            if record.source_id == source_id and _has_value(getattr(record, field_name)):
                return getattr(record, field_name), record

    listed = set(priority)
    for record in records:
        if record.source_id not in listed and _has_value(getattr(record, field_name)):
            return getattr(record, field_name), record

    return _EMPTY_SCALARS[field_name], None


def merge_identifiers(records: Sequence[RawResult]) -> dict[str, tuple[str, ...]]:
    """Union normalized identifiers per kind, in first-seen order.

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members in arrival order.

    Returns
    -------
    dict[str, tuple[str, ...]]
        Kind -> distinct normalized values.
    """
    merged: dict[str, dict[str, None]] = {}
    for record in records:
        for kind, value in record.normalized_identifiers.items():
            merged.setdefault(kind, {})[value] = None
    return {kind: tuple(values) for kind, values in merged.items()}


def merge_urls(urls: Iterable[str | None]) -> tuple[str, ...]:
    """Union URLs, ignoring case and trailing slashes when comparing.

    Parameters
    ----------
    urls : Iterable[str | None]
        URLs in arrival order; None and blank values are skipped.

    Returns
    -------
    tuple[str, ...]
        Distinct URLs, first-seen spelling kept.
    """
    seen: dict[str, str] = {}
    for url in urls:
        if not url or not url.strip():
            continue
        url = url.strip()
        seen.setdefault(url_key(url), url)
    return tuple(seen.values())


def url_key(url: str) -> str:
    """Comparison key for URL de-duplication."""
    return url.strip().casefold().rstrip("/")


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, tuple):
        return any(isinstance(v, str) and v.strip() for v in value)
    return True
