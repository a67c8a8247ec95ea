"""
Derivation Cache.

Thread-safe LRU cache with TTL expiration for derived outputs (chart records,
axis domains, rankings). Entries are keyed by the identity of the input
object plus the derivation arguments, and remember the input itself: a hit
is only returned while the stored input is the very object being asked
about, so a recycled ``id()`` can never serve a stale result.
"""

from collections import OrderedDict
from collections.abc import Hashable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Any, Generic, Optional, TypeVar

import structlog

from portfolio_analytics.config import settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")

CacheKey = tuple[Hashable, ...]


def derivation_key(name: str, source: Any, *args: Hashable) -> CacheKey:
    """Build a cache key from a derivation name, the input's identity and arguments."""
    return (name, id(source), *args)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Derived value, the input it was derived from and its expiry."""

    value: T
    source: Any
    expires_at: datetime


@dataclass
class CacheMetrics:
    """Cache performance metrics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    stale: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


class DerivationCache(Generic[T]):
    """
    Identity-aware LRU/TTL memo cache.

    Example:
        cache = DerivationCache[list[ChartRecord]](ttl_seconds=600, max_entries=32)
        key = derivation_key("chart_records", timeline, ("dca_classic",))
        records = cache.get(key, timeline)
        if records is None:
            records = projector.project(timeline, ["dca_classic"])
            cache.set(key, timeline, records)
    """

    def __init__(self, ttl_seconds: Optional[int] = None, max_entries: Optional[int] = None):
        self._ttl = timedelta(seconds=ttl_seconds or settings.cache_ttl_seconds)
        self._max_entries = max_entries or settings.cache_max_entries
        self._cache: OrderedDict[CacheKey, CacheEntry[T]] = OrderedDict()
        self._lock = Lock()
        self._metrics = CacheMetrics()

    def get(self, key: CacheKey, source: Any) -> Optional[T]:
        """Cached value for ``key`` derived from ``source``, or None."""
        now = datetime.now(UTC)
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._metrics.misses += 1
                return None

            if now > entry.expires_at:
                del self._cache[key]
                self._metrics.misses += 1
                logger.debug("derivation_cache_expired", derivation=key[0])
                return None

            if entry.source is not source:
                del self._cache[key]
                self._metrics.misses += 1
                self._metrics.stale += 1
                logger.debug("derivation_cache_stale_source", derivation=key[0])
                return None

            self._cache.move_to_end(key)
            self._metrics.hits += 1
            return entry.value

    def set(self, key: CacheKey, source: Any, value: T) -> None:
        """Store ``value`` derived from ``source``, evicting the least recently used entry when full."""
        now = datetime.now(UTC)
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            while len(self._cache) >= self._max_entries:
                evicted_key, _ = self._cache.popitem(last=False)
                self._metrics.evictions += 1
                logger.debug("derivation_cache_eviction", derivation=evicted_key[0])

            self._cache[key] = CacheEntry(value=value, source=source, expires_at=now + self._ttl)

    def invalidate_source(self, source: Any) -> int:
        """Drop every entry derived from ``source``. Returns count removed."""
        with self._lock:
            keys_to_remove = [key for key, entry in self._cache.items() if entry.source is source]
            for key in keys_to_remove:
                del self._cache[key]
            if keys_to_remove:
                logger.debug("derivation_cache_source_invalidated", count=len(keys_to_remove))
            return len(keys_to_remove)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            logger.debug("derivation_cache_cleared")

    def get_metrics(self) -> CacheMetrics:
        """Get cache performance metrics (returns a copy)."""
        with self._lock:
            return CacheMetrics(
                hits=self._metrics.hits,
                misses=self._metrics.misses,
                evictions=self._metrics.evictions,
                stale=self._metrics.stale,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
