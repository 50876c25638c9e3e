"""
Tests for the snapshot cache.

Tests cover:
- Key construction
- Basic get/set and get_or_compute
- LRU eviction
- Statistics tracking
- Thread safety
"""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from activity_engine.cache import CacheStats, SnapshotCache, snapshot_key

NOW = datetime(2024, 6, 1, tzinfo=UTC)


def key(n: int):
    return snapshot_key((n, 0, 0), NOW)


class TestSnapshotKey:
    def test_key_shape(self):
        assert snapshot_key((1, 2, 3), NOW) == (1, 2, 3, "2024-06-01T00:00:00+00:00")

    def test_different_now_different_key(self):
        assert snapshot_key((1, 1, 1), NOW) != snapshot_key((1, 1, 1), NOW + timedelta(seconds=1))

    def test_requires_three_revisions(self):
        with pytest.raises(ValueError):
            snapshot_key((1, 2), NOW)


class TestCacheBasicOperations:
    """Test basic cache operations."""

    def test_set_and_get(self):
        cache = SnapshotCache()
        cache.set(key(1), "snapshot-1")
        assert cache.get(key(1)) == "snapshot-1"
        assert key(1) in cache
        assert len(cache) == 1

    def test_get_missing(self):
        assert SnapshotCache().get(key(1)) is None

    def test_get_or_compute_computes_once(self):
        cache = SnapshotCache()
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute(key(1), compute) == "value"
        assert cache.get_or_compute(key(1), compute) == "value"
        assert len(calls) == 1

    def test_clear(self):
        cache = SnapshotCache()
        cache.set(key(1), "a")
        cache.clear()
        assert len(cache) == 0

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            SnapshotCache(max_size=0)


class TestLRUEviction:
    def test_oldest_evicted(self):
        cache = SnapshotCache(max_size=2)
        cache.set(key(1), "a")
        cache.set(key(2), "b")
        cache.set(key(3), "c")
        assert key(1) not in cache
        assert cache.stats().evictions == 1

    def test_get_refreshes_recency(self):
        cache = SnapshotCache(max_size=2)
        cache.set(key(1), "a")
        cache.set(key(2), "b")
        cache.get(key(1))
        cache.set(key(3), "c")
        assert key(1) in cache
        assert key(2) not in cache


class TestCacheStats:
    def test_hits_and_misses(self):
        cache = SnapshotCache(max_size=4)
        cache.get(key(1))
        cache.set(key(1), "a")
        cache.get(key(1))
        cache.get(key(1))
        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size, stats.max_size) == (2, 1, 1, 4)
        assert stats.hit_rate == pytest.approx(2 / 3)

    def test_empty_hit_rate(self):
        assert CacheStats().hit_rate == 0.0

    def test_to_dict(self):
        data = SnapshotCache(max_size=3).stats().to_dict()
        assert data == {
            "hits": 0,
            "misses": 0,
            "size": 0,
            "max_size": 3,
            "evictions": 0,
            "hit_rate": 0.0,
        }


class TestThreadSafety:
    def test_concurrent_sets(self):
        cache = SnapshotCache(max_size=50)

        def writer(offset):
            for i in range(100):
                cache.set(key(offset * 1000 + i), i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = cache.stats()
        assert stats.size == 50
        assert stats.evictions == 350
