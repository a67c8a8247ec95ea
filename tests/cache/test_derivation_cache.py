"""
Unit tests for DerivationCache.

Tests cover:
- Basic get/set keyed by input identity
- Stale-source detection
- TTL expiration with time mocking
- LRU eviction order
- Thread safety with concurrent access
- Metrics accuracy
"""

import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from portfolio_analytics.cache.derivation_cache import (
    CacheEntry,
    CacheMetrics,
    DerivationCache,
    derivation_key,
)


class TestCacheEntry:
    def test_cache_entry_is_frozen(self):
        entry = CacheEntry(value="records", source=[], expires_at=datetime.now(UTC))

        with pytest.raises(AttributeError):
            entry.value = "modified"


class TestCacheMetrics:
    def test_hit_rate_calculation(self):
        metrics = CacheMetrics(hits=3, misses=1)

        assert metrics.total_requests == 4
        assert metrics.hit_rate == pytest.approx(0.75)

    def test_hit_rate_zero_requests(self):
        assert CacheMetrics().hit_rate == 0.0


class TestDerivationKey:
    def test_key_uses_source_identity(self):
        timeline = []

        assert derivation_key("chart_records", timeline, ("a",)) == (
            "chart_records",
            id(timeline),
            ("a",),
        )

    def test_equal_but_distinct_sources_get_distinct_keys(self):
        assert derivation_key("x", []) != derivation_key("x", [1])


class TestDerivationCacheBasic:
    """Tests for basic DerivationCache operations."""

    def test_basic_get_set(self):
        cache: DerivationCache[str] = DerivationCache()
        source = ["timeline"]
        key = derivation_key("chart_records", source)
        cache.set(key, source, "records")

        assert cache.get(key, source) == "records"

    def test_get_miss_returns_none(self):
        cache: DerivationCache[str] = DerivationCache()

        assert cache.get(("missing",), object()) is None

    def test_different_source_is_a_miss(self):
        cache: DerivationCache[str] = DerivationCache()
        source = ["timeline"]
        key = derivation_key("chart_records", source)
        cache.set(key, source, "records")

        assert cache.get(key, ["timeline"]) is None
        assert len(cache) == 0
        assert cache.get_metrics().stale == 1

    def test_invalidate_source(self):
        cache: DerivationCache[str] = DerivationCache()
        first, second = ["a"], ["b"]
        cache.set(derivation_key("x", first), first, "1")
        cache.set(derivation_key("y", first), first, "2")
        cache.set(derivation_key("x", second), second, "3")

        removed = cache.invalidate_source(first)

        assert removed == 2
        assert len(cache) == 1
        assert cache.get(derivation_key("x", second), second) == "3"

    def test_clear(self):
        cache: DerivationCache[str] = DerivationCache()
        source = ["a"]
        cache.set(derivation_key("x", source), source, "1")

        cache.clear()

        assert len(cache) == 0


class TestDerivationCacheTTL:
    def test_ttl_expired(self):
        cache: DerivationCache[str] = DerivationCache(ttl_seconds=1)
        source = ["a"]
        key = derivation_key("x", source)
        cache.set(key, source, "1")

        future = datetime.now(UTC) + timedelta(seconds=2)
        with patch("portfolio_analytics.cache.derivation_cache.datetime") as mock_dt:
            mock_dt.now.return_value = future

            assert cache.get(key, source) is None

        assert len(cache) == 0


class TestDerivationCacheLRU:
    def test_lru_access_updates_order(self):
        cache: DerivationCache[str] = DerivationCache(max_entries=2)
        source = ["a"]
        cache.set(("k1",), source, "1")
        cache.set(("k2",), source, "2")

        _ = cache.get(("k1",), source)
        cache.set(("k3",), source, "3")

        assert cache.get(("k1",), source) == "1"
        assert cache.get(("k2",), source) is None
        assert cache.get(("k3",), source) == "3"
        assert cache.get_metrics().evictions == 1

    def test_set_overwrites_existing(self):
        cache: DerivationCache[str] = DerivationCache(max_entries=1)
        source = ["a"]
        cache.set(("k1",), source, "1")
        cache.set(("k1",), source, "2")

        assert cache.get(("k1",), source) == "2"
        assert cache.get_metrics().evictions == 0


class TestDerivationCacheThreadSafety:
    def test_concurrent_access(self):
        cache: DerivationCache[int] = DerivationCache(max_entries=50)
        source = ["shared"]
        errors = []

        def worker(offset):
            try:
                for i in range(200):
                    key = ("k", (offset + i) % 75)
                    cache.set(key, source, i)
                    cache.get(key, source)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n * 10,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(cache) <= 50
        assert cache.get_metrics().total_requests == 8 * 200
