"""
Allocation percentage models.

AllocationPercentages is the per-strategy Spot/Stable/LP share; UnifiedSegment
is the four-category view (BTC, BTC-STABLE, STABLE, ALT) shared by the
dashboard, strategy and backtest allocation bars.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

__all__ = [
    "AllocationPercentages",
    "UnifiedCategory",
    "UnifiedSegment",
    "StrategyBuckets",
]

UnifiedCategory = Literal["btc", "btc-stable", "stable", "alt"]


class AllocationPercentages(BaseModel):
    """Bucket shares in percent (0-100); all zero when the total is zero."""

    model_config = ConfigDict(frozen=True)

    spot: Decimal = Decimal("0")
    stable: Decimal = Decimal("0")
    lp: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.spot + self.stable + self.lp

    @property
    def has_allocation(self) -> bool:
        return self.spot > 0 or self.stable > 0 or self.lp > 0


class StrategyBuckets(BaseModel):
    """Target or current bucket split as ratios (0-1)."""

    model_config = ConfigDict(frozen=True)

    spot: Decimal = Decimal("0")
    lp: Decimal = Decimal("0")
    stable: Decimal = Decimal("0")


class UnifiedSegment(BaseModel):
    """One bar segment of the unified allocation view."""

    model_config = ConfigDict(frozen=True)

    category: UnifiedCategory
    label: str
    percentage: Decimal
    color: str
