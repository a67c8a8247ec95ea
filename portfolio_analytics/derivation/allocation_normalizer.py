"""
Allocation Normalizer.

Converts a strategy's Spot/Stable/LP composition into percentages, and maps
the backtest per-asset breakdown onto the unified BTC / BTC-STABLE / STABLE /
ALT segment model used by the allocation bars.

Negative inputs are not validated here; they flow through the arithmetic.
"""

from collections.abc import Iterable
from decimal import Decimal
from types import MappingProxyType

from portfolio_analytics.models.allocation import (
    AllocationPercentages,
    StrategyBuckets,
    UnifiedCategory,
    UnifiedSegment,
)
from portfolio_analytics.models.constituents import BreakdownBucket, PortfolioConstituents

HUNDRED = Decimal("100")
ZERO = Decimal("0")

CATEGORY_LABELS = MappingProxyType(
    {
        "btc": "BTC",
        "btc-stable": "BTC-STABLE",
        "stable": "STABLE",
        "alt": "ALT",
    }
)

UNIFIED_COLORS = MappingProxyType(
    {
        "btc": "#F7931A",
        "btc-stable": "#F59E0B",
        "stable": "#2775CA",
        "alt": "#627EEA",
    }
)


class AllocationNormalizer:
    """Normalize bucket compositions into percentages.

    Stateless calculator - all methods are pure functions.

    Example:
        normalizer = AllocationNormalizer()
        pct = normalizer.calculate_percentages(snapshot.portfolio_constituant)
        segments = normalizer.map_backtest_to_unified(snapshot.portfolio_constituant)
    """

    __slots__ = ()

    def bucket_totals(self, constituents: PortfolioConstituents) -> tuple[Decimal, Decimal, Decimal]:
        """Reduce each bucket to a single scalar (spot, stable, lp)."""
        return constituents.spot.total(), constituents.stable, constituents.lp.total()

    def calculate_percentages(self, constituents: PortfolioConstituents) -> AllocationPercentages:
        """Share of each bucket in the snapshot total, scaled to 100.

        Args:
            constituents: Spot/Stable/LP composition of one snapshot

        Returns:
            AllocationPercentages; all zero when the total is zero
        """
        spot, stable, lp = self.bucket_totals(constituents)
        total = spot + stable + lp
        if total == 0:
            return AllocationPercentages()
        return AllocationPercentages(
            spot=spot / total * HUNDRED,
            stable=stable / total * HUNDRED,
            lp=lp / total * HUNDRED,
        )

    def map_backtest_to_unified(self, constituents: PortfolioConstituents) -> list[UnifiedSegment]:
        """Map a backtest composition onto unified segments with LP pair attribution.

        - spot.btc -> BTC
        - lp.btc -> BTC-STABLE
        - stable -> STABLE
        - spot.eth + lp.eth + every other asset (or an undivided bucket) -> ALT

        Returns:
            Positive segments sorted by percentage, descending; empty for a zero total
        """
        spot_total, stable, lp_total = self.bucket_totals(constituents)
        total = spot_total + stable + lp_total
        if total == 0:
            return []

        btc_spot = constituents.spot.asset_value("btc")
        btc_lp = constituents.lp.asset_value("btc")
        alt = (spot_total - btc_spot) + (lp_total - btc_lp)

        return self.normalize_segments(
            [
                self._segment("btc", btc_spot / total * HUNDRED),
                self._segment("btc-stable", btc_lp / total * HUNDRED),
                self._segment("stable", stable / total * HUNDRED),
                self._segment("alt", alt / total * HUNDRED),
            ]
        )

    def map_strategy_to_unified(self, buckets: StrategyBuckets) -> list[UnifiedSegment]:
        """Map ratio buckets (0-1): spot -> BTC, lp -> BTC-STABLE, stable -> STABLE."""
        return self.normalize_segments(
            [
                self._segment("btc", buckets.spot * HUNDRED),
                self._segment("btc-stable", buckets.lp * HUNDRED),
                self._segment("stable", buckets.stable * HUNDRED),
            ]
        )

    def spot_breakdown(self, constituents: PortfolioConstituents) -> str | None:
        """Format positive Spot assets as "BTC: $3,000, ETH: $2,000".

        Returns None for an undivided Spot bucket or when no asset is positive.
        """
        spot = constituents.spot
        if not isinstance(spot, BreakdownBucket):
            return None
        parts = [
            f"{symbol.upper()}: {format_currency(value)}"
            for symbol, value in spot.assets.items()
            if value > 0
        ]
        return ", ".join(parts) if parts else None

    @staticmethod
    def normalize_segments(segments: Iterable[UnifiedSegment]) -> list[UnifiedSegment]:
        """Drop non-positive segments and sort by percentage, descending (stable)."""
        kept = [segment for segment in segments if segment.percentage > 0]
        return sorted(kept, key=lambda segment: segment.percentage, reverse=True)

    @staticmethod
    def _segment(category: UnifiedCategory, percentage: Decimal) -> UnifiedSegment:
        return UnifiedSegment(
            category=category,
            label=CATEGORY_LABELS[category],
            percentage=percentage,
            color=UNIFIED_COLORS[category],
        )


def format_currency(value: Decimal) -> str:
    """Whole-dollar currency text, e.g. ``$3,000`` or ``-$12``."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def calculate_total_percentage(segments: Iterable[UnifiedSegment]) -> Decimal:
    """Sum of segment percentages (about 100 for a non-empty allocation)."""
    return sum((segment.percentage for segment in segments), ZERO)


def allocation_summary(segments: Iterable[UnifiedSegment]) -> str:
    """Human-readable summary, e.g. "BTC 50%, STABLE 25%, ALT 25%"."""
    return ", ".join(f"{segment.label} {segment.percentage:.0f}%" for segment in segments)
