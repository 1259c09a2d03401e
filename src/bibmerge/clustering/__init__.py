"""Incremental clustering of raw results into equivalence classes.

This module assigns raw results to clusters as they arrive, using an arena
of cluster slots, and assesses how strongly each finished cluster is
linked.
"""

from bibmerge.clustering.cluster_index import ClusterIndex
from bibmerge.clustering.consistency import (
    assess_cluster,
    check_cluster_consistency,
    identifier_groups,
)
from bibmerge.clustering.models import (
    Cluster,
    ClusterConsistency,
    ClusterMethod,
    ClusterSupport,
    ConflictType,
)
from bibmerge.clustering.union_find import UnionFind

__all__ = [
    "Cluster",
    "ClusterConsistency",
    "ClusterIndex",
    "ClusterMethod",
    "ClusterSupport",
    "ConflictType",
    "UnionFind",
    "assess_cluster",
    "check_cluster_consistency",
    "identifier_groups",
]
