"""Same-publication decision policy.

This module implements the decision layer that combines identifier
normalization and text similarity into a single, explainable
same-publication test for a pair of raw results.
"""

from bibmerge.decision.models import MatchMethod, MatchResult, ReasonCode
from bibmerge.decision.policy import EquivalenceTester

__all__ = [
    "EquivalenceTester",
    "MatchMethod",
    "MatchResult",
    "ReasonCode",
]
