"""Incremental, order-independent clustering of raw results.

Clusters live in an arena addressed by integer id. Each inserted record
gets a sequence number and a "current cluster" pointer; merging two
clusters re-points every member of the higher id to the lower id and
retires the higher slot. No pointer graph between records is built.
"""

from collections.abc import Iterable
from typing import Any

from bibmerge.candidates import IdentifierIndex, YearFirstAuthorIndex
from bibmerge.clustering.models import Cluster
from bibmerge.decision import EquivalenceTester
from bibmerge.models import RawResult


class ClusterIndex:
    """Partition raw results into equivalence classes as they arrive.

    Parameters
    ----------
    tester : EquivalenceTester | None, optional
        Pairwise equivalence test; defaults to ``EquivalenceTester()``.

    Notes
    -----
    On insert, every existing cluster holding a record the tester accepts
    is found (identifier hits through the identifier index, fuzzy hits
    through the year/first-author buckets), and all of them are unioned
    into the lowest-id one together with the new record. The final
    partition therefore equals the connected components of
    ``tester.same`` and does not depend on insertion order.
    """

    def __init__(self, tester: EquivalenceTester | None = None) -> None:
        self.tester = tester or EquivalenceTester()
        self._records: list[RawResult] = []
        self._record_cluster: list[int] = []
        self._slots: list[Cluster | None] = []
        self._seq_by_key: dict[tuple[str, str], int] = {}
        self._id_index = IdentifierIndex()
        self._bucket_index = YearFirstAuthorIndex(self.tester.year_tolerance)
        self.comparisons = 0
        self.unions = 0

    def __len__(self) -> int:
        return len(self._slots) - self._slots.count(None)

    @property
    def record_count(self) -> int:
        """Number of records inserted so far."""
        return len(self._records)

    def insert(self, record: RawResult) -> Cluster:
        """Insert one record and return the cluster now holding it.

        Parameters
        ----------
        record : RawResult
            Record to cluster.

        Returns
        -------
        Cluster
            Live cluster slot containing ``record``.

        Raises
        ------
        TypeError
            If ``record`` is not a RawResult.
        ValueError
            If a record with the same ``(source_id, source_local_id)`` was
            already inserted.
        """
        if not isinstance(record, RawResult):
            raise TypeError(f"ClusterIndex.insert expects RawResult, got {type(record).__name__}")
        if record.key in self._seq_by_key:
            raise ValueError(f"Duplicate result key in one run: {record.key!r}")

        matched = {self._record_cluster[seq] for seq in self._id_index.candidates(record)}

        if self.tester.use_fuzzy_matching:
            for seq in self._bucket_index.candidates(record):
                cluster_id = self._record_cluster[seq]
                if cluster_id in matched:
                    continue
                self.comparisons += 1
                if self.tester.same(record, self._records[seq]):
                    matched.add(cluster_id)

        seq = len(self._records)
        self._records.append(record)
        self._seq_by_key[record.key] = seq

        if matched:
            target = min(matched)
            for cluster_id in sorted(matched - {target}):
                self._union(target, cluster_id)
        else:
            target = len(self._slots)
            self._slots.append(Cluster(cluster_id=target))

        self._record_cluster.append(target)
        cluster = self._slot(target)
        cluster.add(seq, record)

        self._id_index.add(seq, record)
        self._bucket_index.add(seq, record)
        return cluster

    def extend(self, records: Iterable[RawResult]) -> None:
        """Insert every record of ``records`` in iteration order."""
        for record in records:
            self.insert(record)

    def clusters(self) -> list[Cluster]:
        """Return the live clusters ordered by their earliest member.

        Returns
        -------
        list[Cluster]
            Current partition. Slots are owned by the index.
        """
        return [slot for slot in self._slots if slot is not None]

    def partition(self) -> frozenset[frozenset[tuple[str, str]]]:
        """Return the partition as sets of ``RawResult.key``.

        Two indexes built from the same records in different orders return
        equal partitions.
        """
        return frozenset(frozenset(cluster.keys) for cluster in self.clusters())

    def cluster_of(self, record: RawResult) -> Cluster:
        """Return the cluster currently holding ``record``.

        Raises
        ------
        KeyError
            If ``record`` was never inserted.
        """
        seq = self._seq_by_key[record.key]
        return self._slot(self._record_cluster[seq])

    def stats(self) -> dict[str, Any]:
        """Counters for audit logging."""
        return {
            "records": self.record_count,
            "clusters": len(self),
            "comparisons": self.comparisons,
            "unions": self.unions,
            "indexes": {
                self._id_index.name: self._id_index.stats.to_dict(),
                self._bucket_index.name: self._bucket_index.stats.to_dict(),
            },
        }

    def _slot(self, cluster_id: int) -> Cluster:
        slot = self._slots[cluster_id]
        if slot is None:
            raise RuntimeError(f"Cluster slot {cluster_id} was retired")
        return slot

    def _union(self, target: int, other: int) -> None:
        survivor = self._slot(target)
        retired = self._slot(other)
        for seq in retired.members:
            self._record_cluster[seq] = target
        survivor.absorb(retired)
        self._slots[other] = None
        self.unions += 1
