"""Search source protocol and registry."""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from bibmerge.models import RawResult

__all__ = ["SearchSource", "SourceRegistry"]


@runtime_checkable
class SearchSource(Protocol):
    """External bibliographic database client.

    Implementations perform their own network I/O and map hits to
    ``RawResult`` with ``source_id`` set to their own id.

    Attributes
    ----------
    source_id : str
        Stable identifier used for source priority (e.g., 'crossref').
    """

    source_id: str

    def search(self, query: str) -> list[RawResult]:
        """Return the hits for ``query``."""
        ...

    def fetch_full_record(self, result: RawResult) -> RawResult:
        """Return ``result`` completed with fields the search response omitted."""
        ...


class SourceRegistry:
    """Ordered, explicitly constructed set of search sources.

    Registration order is the batch order seen by the pipeline, so it
    decides the arrival order of results.

    Parameters
    ----------
    sources : Iterator[SearchSource] | list[SearchSource] | None, optional
        Sources to register immediately, in order.
    """

    def __init__(self, sources: Iterator[SearchSource] | list[SearchSource] | None = None) -> None:
        self._sources: dict[str, SearchSource] = {}
        for source in sources or ():
            self.register(source)

    def register(self, source: SearchSource) -> None:
        """Add ``source`` after the already registered ones.

        Raises
        ------
        TypeError
            If ``source`` does not implement ``SearchSource``.
        ValueError
            If a source with the same ``source_id`` is already registered.
        """
        if not isinstance(source, SearchSource):
            raise TypeError(f"Not a SearchSource: {source!r}")
        if source.source_id in self._sources:
            raise ValueError(f"Source already registered: {source.source_id}")
        self._sources[source.source_id] = source

    def get(self, source_id: str) -> SearchSource:
        """Return the source registered as ``source_id``.

        Raises
        ------
        KeyError
            If no such source is registered.
        """
        try:
            return self._sources[source_id]
        except KeyError:
            raise KeyError(f"Unknown source: {source_id}") from None

    @property
    def source_ids(self) -> tuple[str, ...]:
        """Registered ids in registration order."""
        return tuple(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def __iter__(self) -> Iterator[SearchSource]:
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)
