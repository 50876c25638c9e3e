"""
In-memory cache layer for activity snapshots.

Provides:
- SnapshotCache: bounded LRU keyed on source revisions and `now`
- CacheStats: hit/miss/eviction counters
- snapshot_key: build a cache key
"""

from .snapshot_cache import CacheStats, SnapshotCache, SnapshotKey, snapshot_key

__all__ = [
    "CacheStats",
    "SnapshotCache",
    "SnapshotKey",
    "snapshot_key",
]
