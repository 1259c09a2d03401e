"""Deduplication engine.

This package provides the pipeline entry points and their configuration.
"""

from bibmerge.engine.config import DedupConfig
from bibmerge.engine.runner import DeduplicationPipeline, run_pipeline

__all__ = [
    "DedupConfig",
    "DeduplicationPipeline",
    "run_pipeline",
]
