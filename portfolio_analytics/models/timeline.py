"""
Backtest timeline models.

This module contains the immutable per-date records received from the
backtest service: the dated point, the per-strategy snapshot and the
transfer metadata attached to a snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_analytics.models.constituents import PortfolioConstituents

__all__ = [
    "Transfer",
    "TransferMetadata",
    "SnapshotMetrics",
    "StrategySnapshot",
    "TimelinePoint",
]


class Transfer(BaseModel):
    """Movement of value between two portfolio buckets.

    Bucket names are kept verbatim; unknown names simply classify to no signal.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    from_bucket: str
    to_bucket: str
    amount_usd: Optional[Decimal] = None


class TransferMetadata(BaseModel):
    """Event metadata carrying the transfers executed on one date."""

    model_config = ConfigDict(frozen=True, extra="allow")

    transfers: list[Transfer] = Field(default_factory=list)

    @field_validator("transfers", mode="before")
    @classmethod
    def drop_malformed_transfers(cls, v: Any) -> list[Any]:
        """Tolerate a non-list value and skip entries lacking bucket names."""
        if not isinstance(v, list):
            return []
        return [
            entry
            for entry in v
            if isinstance(entry, (Mapping, Transfer))
            and _has_buckets(entry)
        ]


def _has_buckets(entry: Any) -> bool:
    if isinstance(entry, Transfer):
        return True
    return isinstance(entry.get("from_bucket"), str) and isinstance(entry.get("to_bucket"), str)


class SnapshotMetrics(BaseModel):
    """
    Loosely structured metrics bag attached to a strategy snapshot.

    Attributes:
        signal: Regime signal that drove the day's action ("dca" marks a
            plain periodic contribution)
        borrow_event: Leverage marker ("borrow", "repay", "liquidate")
        metadata: Transfer metadata for the day
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    signal: Optional[str] = None
    borrow_event: Optional[str] = None
    metadata: TransferMetadata = Field(default_factory=TransferMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: Any) -> Any:
        return v if isinstance(v, (Mapping, TransferMetadata)) else {}

    @property
    def transfers(self) -> list[Transfer]:
        return self.metadata.transfers


class StrategySnapshot(BaseModel):
    """One strategy's state at one date."""

    model_config = ConfigDict(frozen=True)

    portfolio_value: Decimal
    event: Optional[str] = None
    metrics: SnapshotMetrics = Field(default_factory=SnapshotMetrics)
    portfolio_constituant: Optional[PortfolioConstituents] = None

    @field_validator("metrics", mode="before")
    @classmethod
    def default_metrics(cls, v: Any) -> Any:
        return v if isinstance(v, (Mapping, SnapshotMetrics)) else {}


class TimelinePoint(BaseModel):
    """
    One calendar date of a backtest run.

    Attributes:
        date: ISO date string as produced by the service
        token_price: Spot prices keyed by asset symbol (values may be malformed)
        price: Legacy single spot price
        sentiment: Numeric sentiment on the five-level scale
        sentiment_label: Regime label (e.g. "extreme_fear")
        dma_200: Long moving-average reference price
        strategies: Snapshot per strategy id
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    date: str
    token_price: dict[str, Any] = Field(default_factory=dict)
    price: Optional[Decimal] = None
    sentiment: Optional[int] = None
    sentiment_label: Optional[str] = None
    dma_200: Optional[Decimal] = None
    strategies: dict[str, StrategySnapshot] = Field(default_factory=dict)

    @field_validator("token_price", "strategies", mode="before")
    @classmethod
    def default_mapping(cls, v: Any) -> Any:
        return v if isinstance(v, Mapping) else {}
