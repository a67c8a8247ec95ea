"""Memoization of derived outputs."""

from portfolio_analytics.cache.derivation_cache import (
    CacheEntry,
    CacheMetrics,
    DerivationCache,
    derivation_key,
)

__all__ = ["CacheEntry", "CacheMetrics", "DerivationCache", "derivation_key"]
