"""
On-disk metadata cache.

Provides the cache-aside snapshot store and the in-memory name filter
applied to cached universes.
"""

from schema_explorer.cache.filters import filter_by_names
from schema_explorer.cache.store import MetadataCacheStore

__all__ = [
    "MetadataCacheStore",
    "filter_by_names",
]
