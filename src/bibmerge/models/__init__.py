"""Shared data types for bibmerge.

This package contains the record types that cross the engine boundary.

Domain-specific types live closer to their consumers:
- Audit types → bibmerge.audit.models
- Cluster types → bibmerge.clustering.models
- Match decisions → bibmerge.decision.models
"""

from bibmerge.models.records import (
    IDENTIFIER_KINDS,
    SCHEMA_VERSION,
    CanonicalRecord,
    ProvenanceEntry,
    RawResult,
)

__all__ = [
    # Schema version
    "SCHEMA_VERSION",
    "IDENTIFIER_KINDS",
    # Record models
    "RawResult",
    "CanonicalRecord",
    "ProvenanceEntry",
]
