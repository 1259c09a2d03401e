"""Concurrent fan-out of one query to several search sources."""

import concurrent.futures
from collections.abc import Iterable

from bibmerge.audit.logger import AuditLogger
from bibmerge.models import RawResult
from bibmerge.sources.base import SearchSource

__all__ = ["gather_batches"]


def gather_batches(
    sources: Iterable[SearchSource],
    query: str,
    timeout: float | None = None,
    max_workers: int | None = None,
    logger: AuditLogger | None = None,
) -> list[list[RawResult]]:
    """Run ``search(query)`` on every source concurrently and join.

    Parameters
    ----------
    sources : Iterable[SearchSource]
        Sources in batch order (a ``SourceRegistry`` works directly).
    query : str
        Query passed unchanged to every source.
    timeout : float | None, optional
        Seconds to wait for all sources together; None waits indefinitely.
    max_workers : int | None, optional
        Thread pool size; defaults to one thread per source.
    logger : AuditLogger | None, optional
        Receives ``source_failed`` / ``source_timeout`` events.

    Returns
    -------
    list[list[RawResult]]
        One batch per successful source, in the order of ``sources``.
        Sources that raised or missed the deadline are omitted.
    """
    ordered = list(sources)
    if not ordered:
        return []

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=max_workers or len(ordered),
        thread_name_prefix="bibmerge-source",
    )
    try:
        futures = [executor.submit(_search, source, query) for source in ordered]
        concurrent.futures.wait(futures, timeout=timeout)

        batches: list[list[RawResult]] = []
        for source, future in zip(ordered, futures, strict=True):
            if not future.done():
                future.cancel()
                if logger:
                    logger.source_timeout(source.source_id, timeout_seconds=timeout or 0.0)
                continue

            error = future.exception()
            if error is not None:
                if logger:
                    logger.source_failed(source.source_id, type(error).__name__, str(error))
                continue

            batches.append(future.result())
    finally:
        # Do not wait for sources still running past the deadline
        executor.shutdown(wait=False, cancel_futures=True)

    return batches


def _search(source: SearchSource, query: str) -> list[RawResult]:
    results = list(source.search(query))
    for result in results:
        if not isinstance(result, RawResult):
            raise TypeError(
                f"{source.source_id}.search returned {type(result).__name__}, expected RawResult"
            )
    return results
