"""Primary member selection for canonical merge."""

from collections.abc import Sequence

from bibmerge.models import RawResult


def source_rank(source_id: str, priority: Sequence[str]) -> int:
    """Position of ``source_id`` in ``priority``; unlisted sources rank last.

    Parameters
    ----------
    source_id : str
        Source to rank.
    priority : Sequence[str]
        Source ids, best first.

    Returns
    -------
    int
        Zero-based rank, or ``len(priority)`` for unlisted sources.
    """
    try:
        return list(priority).index(source_id)
    except ValueError:
        return len(priority)


def select_primary(records: Sequence[RawResult], priority: Sequence[str]) -> RawResult:
    """Select the primary member of a cluster.

    Selection is based on lexicographic tuple ranking:
    1. source rank in ``priority`` (lower first, unlisted last)
    2. tie-breaker: arrival order in the cluster

    Parameters
    ----------
    records : Sequence[RawResult]
        Cluster members in arrival order.
    priority : Sequence[str]
        Source ids, best first.

    Returns
    -------
    RawResult
        Primary member.

    Raises
    ------
    ValueError
        If records is empty.
    """
    if not records:
        raise ValueError("Cannot select primary from empty records list")

    _, primary = min(
        enumerate(records),
        key=lambda item: (source_rank(item[1].source_id, priority), item[0]),
    )
    return primary
