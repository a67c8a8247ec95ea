"""Chart record models produced by the timeline projector.

Records are derived, never mutated: a new timeline yields new records.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from portfolio_analytics.models.timeline import StrategySnapshot

__all__ = [
    "SignalKey",
    "TRADE_SIGNALS",
    "LEVERAGE_SIGNALS",
    "ChartRecord",
]


class SignalKey(str, Enum):
    """Fixed vocabulary of trading signals shown as chart markers."""

    BUY_SPOT = "buy_spot"
    SELL_SPOT = "sell_spot"
    BUY_LP = "buy_lp"
    SELL_LP = "sell_lp"
    BORROW = "borrow"
    REPAY = "repay"
    LIQUIDATE = "liquidate"

    @property
    def field_name(self) -> str:
        """Renderer row key, e.g. ``buySpotSignal``."""
        head, *rest = self.value.split("_")
        return head + "".join(part.capitalize() for part in rest) + "Signal"

    @property
    def label(self) -> str:
        """Legend label, e.g. ``Buy LP``."""
        return " ".join(
            part.upper() if part == "lp" else part.capitalize() for part in self.value.split("_")
        )


TRADE_SIGNALS = (SignalKey.BUY_SPOT, SignalKey.SELL_SPOT, SignalKey.BUY_LP, SignalKey.SELL_LP)
LEVERAGE_SIGNALS = (SignalKey.BORROW, SignalKey.REPAY, SignalKey.LIQUIDATE)


class ChartRecord(BaseModel):
    """
    One plot-ready row per timeline date.

    Attributes:
        date: Date copied from the timeline point
        values: Portfolio value per strategy id; strategies absent at this
            date have no entry (absence is not zero)
        signals: Highest firing portfolio value per signal; a key is present
            only when at least one strategy fired it
        event_strategies: Display names of the strategies that fired each
            signal, in firing order without duplicates
        sentiment: Sentiment on the 0-4 scale
        strategies: Original snapshots, kept for tooltip attribution
    """

    model_config = ConfigDict(frozen=True)

    date: str
    token_price: dict[str, Any] = Field(default_factory=dict)
    price: Optional[Decimal] = None
    sentiment: Optional[int] = None
    sentiment_label: Optional[str] = None
    dma_200: Optional[Decimal] = None
    strategies: dict[str, StrategySnapshot] = Field(default_factory=dict)
    extra_fields: dict[str, Any] = Field(default_factory=dict)
    values: dict[str, Decimal] = Field(default_factory=dict)
    signals: dict[SignalKey, Decimal] = Field(default_factory=dict)
    event_strategies: dict[SignalKey, list[str]] = Field(default_factory=dict)

    def value_of(self, strategy_id: str) -> Optional[Decimal]:
        return self.values.get(strategy_id)

    def signal_value(self, signal: SignalKey) -> Optional[Decimal]:
        return self.signals.get(signal)

    def to_chart_row(self) -> dict[str, Any]:
        """Flatten into the renderer's row shape (``<id>_value``, ``buySpotSignal``...)."""
        row: dict[str, Any] = dict(self.extra_fields)
        row["date"] = self.date
        if self.token_price:
            row["token_price"] = dict(self.token_price)
        for key in ("price", "sentiment", "sentiment_label", "dma_200"):
            value = getattr(self, key)
            if value is not None:
                row[key] = value
        for strategy_id, value in self.values.items():
            row[f"{strategy_id}_value"] = value
        for signal, value in self.signals.items():
            row[signal.field_name] = value
        if self.event_strategies:
            row["eventStrategies"] = {
                signal.value: list(names) for signal, names in self.event_strategies.items()
            }
        return row
