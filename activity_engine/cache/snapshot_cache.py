"""
In-memory memoization of activity snapshots.

Keys are (task_rev, shooting_rev, meeting_rev, now_iso). Derived status
depends on `now`, so a different instant is always a different key and a
snapshot is never reused across a `now` boundary. Source changes bump a
revision, which makes older keys unreachable; they age out by LRU.

Features:
- Thread-safe operations with RLock
- LRU eviction when max size reached
- Hit/miss statistics tracking
"""

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SnapshotKey = tuple[int, int, int, str]


def snapshot_key(revision: tuple[int, ...], now: datetime) -> SnapshotKey:
    """Cache key for a source revision tuple evaluated at `now`."""
    if len(revision) != 3:
        raise ValueError(f"expected 3 source revisions, got {len(revision)}")
    return (revision[0], revision[1], revision[2], now.isoformat())


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    size: int = 0
    max_size: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "max_size": self.max_size,
            "evictions": self.evictions,
            "hit_rate": self.hit_rate,
        }


class SnapshotCache(Generic[T]):
    """Thread-safe bounded LRU cache of computed snapshots."""

    def __init__(self, max_size: int = 32):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._entries: OrderedDict[SnapshotKey, T] = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: SnapshotKey) -> T | None:
        """Cached value for key, or None. Marks the entry most recently used."""
        with self._lock:
            if key not in self._entries:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return self._entries[key]

    def set(self, key: SnapshotKey, value: T) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted LRU snapshot: {evicted}")

    def get_or_compute(self, key: SnapshotKey, compute: Callable[[], T]) -> T:
        """
        Return the cached value or compute, store and return it.

        The computation runs outside the lock; two threads missing on the
        same key may both compute, and the results are equal.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = compute()
        self.set(key, value)
        return value

    def __contains__(self, key: SnapshotKey) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                max_size=self._max_size,
                evictions=self._evictions,
            )
