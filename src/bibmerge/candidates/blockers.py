"""Candidate indexes for incremental clustering.

Each index remembers the records inserted so far and, for a new record,
yields the insertion sequence numbers of earlier records it could be
equivalent to. The design prioritises *recall*: every earlier record that
the equivalence test could accept must be reachable through some index,
while precision is left to the test itself.

Architecture
------------
* ``CandidateIndex`` — structural protocol (one attribute + two methods).
* ``IdentifierIndex`` — exact (kind, value) lookup.
* ``YearFirstAuthorIndex`` — fuzzy buckets keyed by (first-author surname,
  year), probed over the year tolerance window.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass
from typing import Protocol, runtime_checkable

from bibmerge.models import RawResult

# ============================================================================
# Statistics
# ============================================================================


@dataclass
class IndexStats:
    """Counters collected while running a single candidate index.

    Attributes
    ----------
    records_seen : int
        Total records added.
    records_keyed : int
        Records that produced at least one index key.
    unique_keys : int
        Distinct index keys stored.
    probes : int
        Candidate lookups performed.
    candidates : int
        Candidate sequence numbers yielded across all probes.
    max_block : int
        Largest block size encountered.
    """

    records_seen: int = 0
    records_keyed: int = 0
    unique_keys: int = 0
    probes: int = 0
    candidates: int = 0
    max_block: int = 0

    def to_dict(self) -> dict[str, int]:
        """Serialise to a plain dict."""
        return asdict(self)


# ============================================================================
# Protocol
# ============================================================================


@runtime_checkable
class CandidateIndex(Protocol):
    """Structural protocol every candidate index must satisfy.

    Attributes
    ----------
    name : str
        Stable identifier used in audit logs.
    stats : IndexStats
        Running counters.
    """

    name: str
    stats: IndexStats

    def candidates(self, record: RawResult) -> Iterator[int]:
        """Yield sequence numbers of earlier records worth testing against *record*.

        Yields nothing when the record lacks the data this index needs.
        """
        ...

    def add(self, seq: int, record: RawResult) -> None:
        """Index *record* under its insertion sequence number *seq*."""
        ...


# ============================================================================
# Exact-match index
# ============================================================================


class IdentifierIndex:
    """Index by normalized ``(kind, value)`` identifier pair.

    Only the first holder of each pair is stored: any later holder is
    identifier-equal to it and therefore already shares its cluster.
    """

    name: str = "identifier_exact"

    def __init__(self) -> None:
        self._holders: dict[tuple[str, str], int] = {}
        self.stats = IndexStats()

    def candidates(self, record: RawResult) -> Iterator[int]:
        """Yield the first holder of each of the record's identifier pairs."""
        self.stats.probes += 1
        for pair in sorted(record.identifier_pairs):
            holder = self._holders.get(pair)
            if holder is not None:
                self.stats.candidates += 1
                yield holder

    def add(self, seq: int, record: RawResult) -> None:
        """Register *record* as holder of any pair not seen before."""
        self.stats.records_seen += 1
        if record.identifier_pairs:
            self.stats.records_keyed += 1
        for pair in record.identifier_pairs:
            if pair not in self._holders:
                self._holders[pair] = seq
                self.stats.unique_keys += 1


# ============================================================================
# Bibliographic index
# ============================================================================


class YearFirstAuthorIndex:
    """Bucket records by (first-author surname, year).

    Records without a first author are never fuzzy-equivalent to anything
    and are not indexed. Records without a year live in a per-surname
    ``None`` bucket.

    Parameters
    ----------
    year_tolerance : int, optional
        Width of the probed year window on each side, by default 1.

    Notes
    -----
    Probing covers every bucket the fuzzy test could accept:

    * a record with year *y* probes ``y - tolerance .. y + tolerance``
      plus the ``None`` bucket of its surname;
    * a record without a year probes every bucket of its surname.
    """

    name: str = "year_first_author"

    def __init__(self, year_tolerance: int = 1) -> None:
        if year_tolerance < 0:
            raise ValueError(f"year_tolerance must be >= 0, got {year_tolerance}")
        self.year_tolerance = year_tolerance
        self._buckets: dict[str, dict[int | None, list[int]]] = {}
        self.stats = IndexStats()

    def candidates(self, record: RawResult) -> Iterator[int]:
        """Yield members of every bucket within the record's year window."""
        surname = record.first_author_surname
        if surname is None:
            return
        self.stats.probes += 1
        by_year = self._buckets.get(surname)
        if not by_year:
            return

        if record.year is None:
            years: list[int | None] = list(by_year)
        else:
            years = [
                record.year + offset
                for offset in range(-self.year_tolerance, self.year_tolerance + 1)
            ]
            years.append(None)

        for year in years:
            for seq in by_year.get(year, ()):
                self.stats.candidates += 1
                yield seq

    def add(self, seq: int, record: RawResult) -> None:
        """Append *record* to its (surname, year) bucket."""
        self.stats.records_seen += 1
        surname = record.first_author_surname
        if surname is None:
            return
        self.stats.records_keyed += 1
        by_year = self._buckets.setdefault(surname, {})
        if record.year not in by_year:
            self.stats.unique_keys += 1
        bucket = by_year.setdefault(record.year, [])
        bucket.append(seq)
        self.stats.max_block = max(self.stats.max_block, len(bucket))
