"""Deduplication pipeline runner.

Chains clustering and merge into one deterministic, auditable pass:

    Stage 1: Clustering  (flatten batches, insert into a fresh ClusterIndex)
    Stage 2: Merge       (one CanonicalRecord per cluster, source priority)

The pipeline performs no I/O of its own; reading batches and writing
results belong to ``bibmerge.api`` and the CLI.
"""

import time
from collections.abc import Iterable, Sequence

from bibmerge.audit.logger import AuditLogger
from bibmerge.clustering import Cluster, ClusterIndex, check_cluster_consistency
from bibmerge.decision import EquivalenceTester
from bibmerge.engine.config import DedupConfig
from bibmerge.merge import DedupSummary, SourcePriorityMerger
from bibmerge.models import CanonicalRecord, RawResult
from bibmerge.utils import get_iso_timestamp


class DeduplicationPipeline:
    """Turn per-source result batches into canonical records.

    Parameters
    ----------
    config : DedupConfig | None, optional
        Run configuration; defaults to ``DedupConfig()``.
    logger : AuditLogger | None, optional
        Audit logger for events, by default None.

    Attributes
    ----------
    last_summary : DedupSummary | None
        Counters of the most recent successful ``run``.
    """

    def __init__(
        self,
        config: DedupConfig | None = None,
        logger: AuditLogger | None = None,
    ) -> None:
        self.config = config or DedupConfig()
        self.logger = logger
        self.tester = EquivalenceTester.from_config(self.config)
        self.merger = SourcePriorityMerger(self.config.priority)
        self.last_summary: DedupSummary | None = None

    def run(self, batches: Sequence[Iterable[RawResult]]) -> list[CanonicalRecord]:
        """Deduplicate ``batches`` into canonical records.

        Parameters
        ----------
        batches : Sequence[Iterable[RawResult]]
            One batch per source, in a stable order.

        Returns
        -------
        list[CanonicalRecord]
            One record per cluster, ordered by the earliest member's
            (batch index, position).

        Raises
        ------
        TypeError
            If a batch holds something other than RawResult.
        ValueError
            If two results share ``(source_id, source_local_id)``.
        """
        start_time = time.perf_counter()
        records = _flatten(batches)

        if self.logger:
            self.logger.dedupe_started(
                batches=len(batches),
                records=len(records),
                parameters=self.config.to_dict(),
            )

        try:
            index = self._cluster(records)
            merged = self._merge(index.clusters())
        except (TypeError, ValueError) as e:
            if self.logger:
                self.logger.error(exception_class=type(e).__name__, message=str(e))
            raise

        summary = _summarize(len(batches), index, merged)
        summary.execution_time_seconds = round(time.perf_counter() - start_time, 6)
        self.last_summary = summary

        if self.logger:
            self.logger.dedupe_finished(summary.to_dict())

        return merged

    def _cluster(self, records: list[RawResult]) -> ClusterIndex:
        index = ClusterIndex(self.tester)
        index.extend(records)

        if self.logger:
            self.logger.event("clustering_complete", data=index.stats(), stage="clustering")

        return index

    def _merge(self, clusters: list[Cluster]) -> list[CanonicalRecord]:
        # ClusterIndex returns clusters ordered by earliest member
        merged: list[CanonicalRecord] = []
        for cluster in clusters:
            canonical = self.merger.merge(cluster)
            merged.append(canonical)

            if self.logger and len(cluster) > 1:
                consistency = check_cluster_consistency(cluster.records, self.config.year_tolerance)
                self.logger.cluster_merged(
                    merged_id=canonical.merged_id,
                    keys=list(cluster.keys),
                    method=canonical.match_method,
                    confidence=canonical.confidence,
                    conflicts=list(consistency.conflicts + consistency.notes),
                )

        return merged


def run_pipeline(
    batches: Sequence[Iterable[RawResult]],
    config: DedupConfig | None = None,
    logger: AuditLogger | None = None,
) -> list[CanonicalRecord]:
    """Run the deduplication pipeline once.

    Parameters
    ----------
    batches : Sequence[Iterable[RawResult]]
        One batch per source, in a stable order.
    config : DedupConfig | None, optional
        Run configuration. If None, uses defaults.
    logger : AuditLogger | None, optional
        Audit logger for tracking. If None, no logging.

    Returns
    -------
    list[CanonicalRecord]
        Canonical records in stable order.

    Examples
    --------
    >>> from bibmerge.engine import run_pipeline
    >>> from bibmerge.models import RawResult
    >>> a = RawResult("crossref", "10.1/x", "Dark Matter Halos", identifiers={"doi": "10.1/X"})
    >>> b = RawResult("arxiv", "2401.00001", "Dark matter halos", identifiers={"doi": "10.1/x"})
    >>> [len(r.provenance) for r in run_pipeline([[a], [b]])]
    [2]
    """
    return DeduplicationPipeline(config=config, logger=logger).run(batches)


def _flatten(batches: Sequence[Iterable[RawResult]]) -> list[RawResult]:
    return [record for batch in batches for record in batch]


def _summarize(
    batches_in: int,
    index: ClusterIndex,
    merged: list[CanonicalRecord],
) -> DedupSummary:
    records_in = index.record_count
    clusters_out = len(merged)
    multi = [record for record in merged if len(record.provenance) > 1]

    return DedupSummary(
        batches_in=batches_in,
        records_in=records_in,
        clusters_out=clusters_out,
        multi_member_clusters=len(multi),
        identifier_clusters=sum(1 for record in multi if record.match_method == "identifier"),
        fuzzy_clusters=sum(1 for record in multi if record.match_method == "fuzzy"),
        largest_cluster=max((len(record.provenance) for record in merged), default=0),
        comparisons=index.comparisons,
        dedup_rate=round((records_in - clusters_out) / records_in, 4) if records_in else 0.0,
        timestamp=get_iso_timestamp(),
    )
