"""
Pytest configuration and fixtures for the analytics test suite.

Provides builder fixtures for timeline points, strategy snapshots and
backtest responses so tests can describe payloads in the service's own
raw shape.
"""

from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, Optional

import pytest

from portfolio_analytics.models import BacktestResponse, StrategySnapshot, TimelinePoint


# =============================
# Raw payload builders
# =============================


def raw_snapshot(
    value: Any,
    *,
    signal: Optional[str] = None,
    event: Optional[str] = None,
    borrow_event: Optional[str] = None,
    transfers: Optional[list[tuple[str, str]]] = None,
    constituents: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Raw strategy snapshot as sent by the backtest service."""
    metrics: dict[str, Any] = {}
    if signal is not None:
        metrics["signal"] = signal
    if borrow_event is not None:
        metrics["borrow_event"] = borrow_event
    if transfers is not None:
        metrics["metadata"] = {
            "transfers": [
                {"from_bucket": source, "to_bucket": target, "amount_usd": 100}
                for source, target in transfers
            ]
        }
    snapshot: dict[str, Any] = {"portfolio_value": value, "metrics": metrics}
    if event is not None:
        snapshot["event"] = event
    if constituents is not None:
        snapshot["portfolio_constituant"] = constituents
    return snapshot


def raw_point(day: str, strategies: dict[str, Any], **fields: Any) -> dict[str, Any]:
    """Raw timeline point; ``fields`` carries token_price, sentiment, etc."""
    return {"date": day, "strategies": strategies, **fields}


# =============================
# Model fixtures
# =============================


@pytest.fixture
def snapshot_factory() -> Callable[..., StrategySnapshot]:
    """Build a validated StrategySnapshot from raw keyword arguments."""

    def _build(value: Any, **kwargs: Any) -> StrategySnapshot:
        return StrategySnapshot.model_validate(raw_snapshot(value, **kwargs))

    return _build


@pytest.fixture
def point_factory() -> Callable[..., TimelinePoint]:
    """Build a validated TimelinePoint; snapshot values may be numbers or raw dicts."""

    def _build(day: str, strategies: Optional[dict[str, Any]] = None, **fields: Any) -> TimelinePoint:
        raw_strategies = {
            strategy_id: snapshot if isinstance(snapshot, dict) else raw_snapshot(snapshot)
            for strategy_id, snapshot in (strategies or {}).items()
        }
        return TimelinePoint.model_validate(raw_point(day, raw_strategies, **fields))

    return _build


@pytest.fixture
def daily_timeline(point_factory) -> Callable[..., list[TimelinePoint]]:
    """Build ``days`` consecutive daily points starting 2024-01-01.

    ``btc_prices`` (optional) sets token_price.btc per point; ``strategies``
    maps strategy id to a callable ``index -> raw snapshot or value``.
    """

    def _build(
        days: int,
        btc_prices: Optional[list[Any]] = None,
        strategies: Optional[dict[str, Callable[[int], Any]]] = None,
    ) -> list[TimelinePoint]:
        start = date(2024, 1, 1)
        points = []
        for index in range(days):
            fields: dict[str, Any] = {}
            if btc_prices is not None:
                fields["token_price"] = {"btc": btc_prices[index]}
            points.append(
                point_factory(
                    (start + timedelta(days=index)).isoformat(),
                    {
                        strategy_id: build(index)
                        for strategy_id, build in (strategies or {}).items()
                    },
                    **fields,
                )
            )
        return points

    return _build


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Three-day, three-strategy backtest payload with trades, leverage and DCA."""
    return {
        "timeline": [
            raw_point(
                "2024-01-01",
                {
                    "dca_classic": raw_snapshot(1000, signal="dca"),
                    "simple_regime": raw_snapshot(
                        1000,
                        constituents={"spot": {"btc": 600, "eth": 400}, "stable": 0, "lp": 0},
                    ),
                    "leveraged_regime": raw_snapshot(1000),
                },
                token_price={"btc": 42000},
                sentiment_label="neutral",
            ),
            raw_point(
                "2024-01-02",
                {
                    "dca_classic": raw_snapshot(1100, signal="dca", transfers=[("stable", "spot")]),
                    "simple_regime": raw_snapshot(
                        1050,
                        event="rebalance",
                        transfers=[("spot", "stable")],
                        constituents={"spot": {"btc": 500, "eth": 0}, "stable": 550, "lp": 0},
                    ),
                    "leveraged_regime": raw_snapshot(
                        1200, event="borrow", borrow_event="borrow", transfers=[("spot", "stable")]
                    ),
                },
                token_price={"btc": 43000},
                sentiment=1,
                sentiment_label="fear",
                dma_200=41234.567,
            ),
            raw_point(
                "2024-01-03",
                {
                    "dca_classic": raw_snapshot(1150, signal="dca"),
                    "simple_regime": raw_snapshot(1080),
                },
                price=44000,
            ),
        ],
        "strategies": {
            "simple_regime": {
                "final_value": 1080,
                "roi_percent": 8.0,
                "max_drawdown_percent": -4.2,
                "sharpe_ratio": 1.4,
                "volatility": 0.35,
                "trade_count": 3,
            },
            "dca_classic": {
                "final_value": 1150,
                "roi_percent": 15.0,
                "max_drawdown_percent": -9.5,
                "sharpe_ratio": 1.1,
                "volatility": 0.52,
                "trade_count": 0,
            },
            "leveraged_regime": {
                "final_value": 1200,
                "roi_percent": 20.0,
                "max_drawdown_percent": -12.0,
                "sharpe_ratio": "NaN",
                "volatility": 0.61,
            },
        },
    }


@pytest.fixture
def sample_response(sample_payload) -> BacktestResponse:
    return BacktestResponse.model_validate(sample_payload)
