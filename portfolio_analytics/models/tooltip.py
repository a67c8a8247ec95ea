"""Point-in-time tooltip models assembled from one chart record."""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from portfolio_analytics.models.allocation import AllocationPercentages
from portfolio_analytics.models.chart import SignalKey
from portfolio_analytics.models.constituents import PortfolioConstituents

__all__ = [
    "TooltipStrategyValue",
    "TooltipEvent",
    "TooltipMarketSignal",
    "TooltipAllocation",
    "TooltipBundle",
]


class TooltipStrategyValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_id: str
    display_name: str
    value: Decimal
    color: str


class TooltipEvent(BaseModel):
    """A signal that fired at this date and the strategies that fired it."""

    model_config = ConfigDict(frozen=True)

    signal: SignalKey
    name: str
    value: Decimal
    strategies: list[str] = Field(default_factory=list)


class TooltipMarketSignal(BaseModel):
    """Ambient market reading (sentiment, moving average)."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: Union[str, Decimal]


class TooltipAllocation(BaseModel):
    """
    Allocation block for one strategy.

    Attributes:
        index: Position in the canonical strategy ordering, None when the
            strategy was not part of it
        spot_breakdown: "BTC: $3,000, ETH: $2,000" when Spot is a per-asset
            breakdown with a positive entry, else None
    """

    model_config = ConfigDict(frozen=True)

    strategy_id: str
    display_name: str
    color: str
    constituents: PortfolioConstituents
    percentages: AllocationPercentages
    spot_breakdown: Optional[str] = None
    index: Optional[int] = None


class TooltipBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    spot_price: Optional[Decimal] = None
    strategy_ids: list[str] = Field(default_factory=list)
    strategies: list[TooltipStrategyValue] = Field(default_factory=list)
    events: list[TooltipEvent] = Field(default_factory=list)
    signals: list[TooltipMarketSignal] = Field(default_factory=list)
    allocations: list[TooltipAllocation] = Field(default_factory=list)
