"""Source-priority merge of clusters into canonical records."""

from bibmerge.merge.field_merge import (
    SourcePriorityMerger,
    merge_identifiers,
    merge_urls,
    pick_scalar,
)
from bibmerge.merge.models import (
    DEFAULT_SOURCE_PRIORITY,
    SCALAR_FIELDS,
    DedupSummary,
    compute_merged_id,
)
from bibmerge.merge.survivor import select_primary, source_rank

__all__ = [
    "DEFAULT_SOURCE_PRIORITY",
    "SCALAR_FIELDS",
    "DedupSummary",
    "SourcePriorityMerger",
    "compute_merged_id",
    "merge_identifiers",
    "merge_urls",
    "pick_scalar",
    "select_primary",
    "source_rank",
]
