"""
Per-strategy summary and ranked comparison models.

A summary field that is missing, non-numeric or non-finite is stored as
``None``; it is never coerced to zero.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "HighlightMode",
    "StrategyMetricSummary",
    "RankedMetricEntry",
    "RankedMetric",
    "to_metric_number",
]

HighlightMode = Literal["highest", "lowest"]


def to_metric_number(value: Any) -> Optional[Decimal]:
    """Return value as a finite Decimal, or None when it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else None
    return None


class StrategyMetricSummary(BaseModel):
    """
    Aggregate performance of one strategy over the simulated period.

    Attributes:
        final_value: Portfolio value at the last date
        roi_percent: Return on investment in percent
        max_drawdown_percent: Peak-to-trough decline in percent (non-positive)
        sharpe_ratio: Return per unit of total volatility
        sortino_ratio: Return per unit of downside volatility
        calmar_ratio: Annualized return over max drawdown
        volatility: Annualized volatility (non-negative)
        beta: Sensitivity to the reference asset
        trade_count: Number of regime-driven trades
        total_borrow_events: Leverage: number of borrows
        total_interest_paid: Leverage: interest paid
        liquidation_events: Leverage: number of liquidations
        time_in_leverage_pct: Leverage: share of days with open debt
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    final_value: Optional[Decimal] = None
    roi_percent: Optional[Decimal] = None
    max_drawdown_percent: Optional[Decimal] = None
    sharpe_ratio: Optional[Decimal] = None
    sortino_ratio: Optional[Decimal] = None
    calmar_ratio: Optional[Decimal] = None
    volatility: Optional[Decimal] = None
    beta: Optional[Decimal] = None
    trade_count: Optional[int] = None
    total_borrow_events: Optional[int] = None
    total_interest_paid: Optional[Decimal] = None
    liquidation_events: Optional[int] = None
    time_in_leverage_pct: Optional[Decimal] = None

    @field_validator(
        "final_value",
        "roi_percent",
        "max_drawdown_percent",
        "sharpe_ratio",
        "sortino_ratio",
        "calmar_ratio",
        "volatility",
        "beta",
        "total_interest_paid",
        "time_in_leverage_pct",
        mode="before",
    )
    @classmethod
    def drop_non_numeric(cls, v: Any) -> Optional[Decimal]:
        return to_metric_number(v)

    @field_validator("trade_count", "total_borrow_events", "liquidation_events", mode="before")
    @classmethod
    def drop_non_integral(cls, v: Any) -> Optional[int]:
        number = to_metric_number(v)
        if number is None or number != number.to_integral_value():
            return None
        return int(number)

    def metric(self, key: str) -> Optional[Decimal]:
        """Read a metric by name, including extra fields sent by the service."""
        if key in type(self).model_fields:
            value = getattr(self, key)
        else:
            value = (self.model_extra or {}).get(key)
        return to_metric_number(value)


class RankedMetricEntry(BaseModel):
    """One strategy's position in a metric comparison."""

    model_config = ConfigDict(frozen=True)

    strategy_id: str
    value: Optional[Decimal] = None
    formatted: str = "N/A"


class RankedMetric(BaseModel):
    """
    Cross-strategy comparison for one metric.

    Entries with a value are ordered best-first under ``highlight_mode``;
    entries without a value follow them.
    """

    model_config = ConfigDict(frozen=True)

    metric: str
    highlight_mode: HighlightMode
    entries: list[RankedMetricEntry] = Field(default_factory=list)

    @property
    def best_index(self) -> Optional[int]:
        if self.entries and self.entries[0].value is not None:
            return 0
        return None

    @property
    def best(self) -> Optional[RankedMetricEntry]:
        index = self.best_index
        return None if index is None else self.entries[index]
