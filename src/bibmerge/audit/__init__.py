"""Audit logging and run manifest subsystem for bibmerge.

Main Components
---------------
- RunContext: High-level context manager for audited runs
- AuditLogger: JSONL event logger
- ManifestWriter: Run manifest builder
"""

from bibmerge.audit.context import RunContext
from bibmerge.audit.helpers import generate_run_id
from bibmerge.audit.logger import AuditLogger
from bibmerge.audit.manifest import ManifestWriter
from bibmerge.audit.models import LEVELS, BatchInfo, InputsInfo

__all__ = [
    "LEVELS",
    "RunContext",
    "AuditLogger",
    "ManifestWriter",
    "BatchInfo",
    "InputsInfo",
    "generate_run_id",
]
