"""Boundary to external bibliographic databases.

Clients for individual databases live outside this package; it defines
the protocol they implement, an explicit registry and the concurrent
fan-out that turns one query into per-source batches.
"""

from bibmerge.sources.base import SearchSource, SourceRegistry
from bibmerge.sources.gather import gather_batches

__all__ = ["SearchSource", "SourceRegistry", "gather_batches"]
