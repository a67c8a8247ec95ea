"""
Unit tests for TooltipAggregator.

Tests canonical ordering, event attribution, market signal text, spot
price fallback and the per-strategy allocation blocks.
"""

from decimal import Decimal

import pytest

from portfolio_analytics.derivation.strategy_display import DEFAULT_PALETTE, sort_strategy_ids
from portfolio_analytics.derivation.timeline_projector import TimelineProjector
from portfolio_analytics.derivation.tooltip_aggregator import TooltipAggregator, format_sentiment
from portfolio_analytics.models.chart import ChartRecord, SignalKey
from portfolio_analytics.models.timeline import StrategySnapshot


@pytest.fixture
def aggregator():
    return TooltipAggregator()


@pytest.fixture
def records(sample_response):
    return TimelineProjector().project(sample_response.timeline, sample_response.strategy_ids)


@pytest.fixture
def canonical(sample_response):
    return sort_strategy_ids(sample_response.strategy_ids)


class TestStrategySection:
    """Tests for strategy values and ordering."""

    def test_canonical_order_and_colors(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[1], canonical)

        assert canonical == ["dca_classic", "leveraged_regime", "simple_regime"]
        assert bundle.strategy_ids == canonical
        assert [(s.strategy_id, s.value) for s in bundle.strategies] == [
            ("dca_classic", Decimal("1100")),
            ("leveraged_regime", Decimal("1200")),
            ("simple_regime", Decimal("1050")),
        ]
        assert bundle.strategies[0].display_name == "DCA Classic"
        assert bundle.strategies[0].color == "#6b7280"
        assert bundle.strategies[1].color == DEFAULT_PALETTE[1]
        assert bundle.strategies[2].color == DEFAULT_PALETTE[2]

    def test_unknown_ids_are_appended(self, aggregator, records):
        bundle = aggregator.aggregate(records[1], ["simple_regime"])

        assert bundle.strategy_ids == ["simple_regime", "dca_classic", "leveraged_regime"]
        assert len(bundle.strategies) == 3

    def test_strategy_missing_at_date_has_no_value(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[2], canonical)

        assert [s.strategy_id for s in bundle.strategies] == ["dca_classic", "simple_regime"]


class TestEventSection:
    """Tests for fired signal events."""

    def test_events_with_attribution(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[1], canonical)

        assert [(e.signal, e.name, e.value, e.strategies) for e in bundle.events] == [
            (
                SignalKey.SELL_SPOT,
                "Sell Spot",
                Decimal("1200"),
                ["Simple Regime", "Leveraged Regime"],
            ),
            (SignalKey.BORROW, "Borrow", Decimal("1200"), ["Leveraged Regime"]),
        ]

    def test_no_events_on_quiet_day(self, aggregator, records, canonical):
        assert aggregator.aggregate(records[0], canonical).events == []


class TestMarketSignals:
    """Tests for sentiment and DMA readings."""

    def test_sentiment_and_dma(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[1], canonical)

        assert [(s.name, s.value) for s in bundle.signals] == [
            ("Sentiment", "Fear (1)"),
            ("DMA 200", Decimal("41234.57")),
        ]

    def test_sentiment_from_label_only(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[0], canonical)

        assert [(s.name, s.value) for s in bundle.signals] == [("Sentiment", "Neutral (2)")]

    def test_no_market_signals(self, aggregator, records, canonical):
        assert aggregator.aggregate(records[2], canonical).signals == []

    @pytest.mark.parametrize(
        "index,label,expected",
        [
            (2, "neutral", "Neutral (2)"),
            (4, "extreme_greed", "Extreme Greed (4)"),
            (3, None, "Unknown (3)"),
            (0, "", "Unknown (0)"),
        ],
    )
    def test_format_sentiment(self, index, label, expected):
        assert format_sentiment(index, label) == expected


class TestSpotPrice:
    def test_btc_token_price(self, aggregator, records, canonical):
        assert aggregator.aggregate(records[1], canonical).spot_price == Decimal("43000")

    def test_legacy_price_fallback(self, aggregator, records, canonical):
        assert aggregator.aggregate(records[2], canonical).spot_price == Decimal("44000")

    def test_malformed_btc_price_falls_back(self, aggregator):
        record = ChartRecord(date="2024-01-01", token_price={"btc": "n/a"}, price=Decimal("5"))

        assert aggregator.aggregate(record).spot_price == Decimal("5")

    def test_no_price(self, aggregator):
        assert aggregator.aggregate(ChartRecord(date="2024-01-01")).spot_price is None


class TestAllocationSection:
    """Tests for per-strategy allocation blocks."""

    def test_breakdown_allocation(self, aggregator, records, canonical):
        bundle = aggregator.aggregate(records[0], canonical)

        assert len(bundle.allocations) == 1
        allocation = bundle.allocations[0]
        assert allocation.strategy_id == "simple_regime"
        assert allocation.display_name == "Simple Regime"
        assert allocation.index == 2
        assert allocation.percentages.spot == Decimal("100")
        assert allocation.spot_breakdown == "BTC: $600, ETH: $400"

    def test_zero_entries_left_out_of_breakdown(self, aggregator, records, canonical):
        allocation = aggregator.aggregate(records[1], canonical).allocations[0]

        assert allocation.spot_breakdown == "BTC: $500"
        assert allocation.percentages.has_allocation

    def test_zero_total_allocation_is_skipped(self, aggregator):
        snapshot = StrategySnapshot.model_validate(
            {
                "portfolio_value": 0,
                "portfolio_constituant": {"spot": {"btc": 0}, "stable": 0, "lp": 0},
            }
        )
        record = ChartRecord(
            date="2024-01-01",
            values={"empty": Decimal("0")},
            strategies={"empty": snapshot},
        )

        bundle = aggregator.aggregate(record, ["empty"])

        assert bundle.allocations == []
        assert [s.strategy_id for s in bundle.strategies] == ["empty"]

    def test_unknown_strategy_has_no_index(self, aggregator, records):
        allocation = aggregator.aggregate(records[0], ["dca_classic"]).allocations[0]

        assert allocation.strategy_id == "simple_regime"
        assert allocation.index is None
        assert allocation.color in DEFAULT_PALETTE
