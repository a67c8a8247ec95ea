"""
Unit tests for TimelineProjector.

Tests per-strategy values, max-wins signal slots with attribution, the
sentiment label fallback, ordering preservation and idempotence.
"""

from decimal import Decimal

import pytest

from portfolio_analytics.derivation.timeline_projector import (
    TimelineProjector,
    sentiment_label_to_index,
)
from portfolio_analytics.models.chart import SignalKey


@pytest.fixture
def projector():
    return TimelineProjector()


class TestProject:
    """Tests for project."""

    def test_empty_timeline(self, projector):
        assert projector.project([], ["a"]) == []
        assert projector.project(None, ["a"]) == []

    def test_plain_values_without_signals(self, projector, point_factory):
        timeline = [point_factory("2024-01-01", {"A": 100, "B": 90})]

        records = projector.project(timeline, ["A", "B"])

        assert len(records) == 1
        assert records[0].date == "2024-01-01"
        assert records[0].values == {"A": Decimal("100"), "B": Decimal("90")}
        assert records[0].signals == {}
        assert records[0].to_chart_row() == {
            "date": "2024-01-01",
            "A_value": Decimal("100"),
            "B_value": Decimal("90"),
        }

    def test_absent_strategy_is_omitted(self, projector, point_factory):
        timeline = [point_factory("2024-01-01", {"A": 100})]

        record = projector.project(timeline, ["A", "B"])[0]

        assert "B" not in record.values
        assert "B_value" not in record.to_chart_row()

    def test_unrequested_strategy_is_not_charted(self, projector, point_factory):
        timeline = [point_factory("2024-01-01", {"A": 100, "B": 90})]

        record = projector.project(timeline, ["A"])[0]

        assert record.values == {"A": Decimal("100")}

    def test_order_and_length_preserved(self, projector, point_factory):
        dates = ["2024-01-03", "2024-01-01", "2024-01-02"]
        timeline = [point_factory(day, {"A": 1}) for day in dates]

        records = projector.project(timeline, ["A"])

        assert [record.date for record in records] == dates

    def test_idempotent(self, projector, sample_response):
        first = projector.project(sample_response.timeline, sample_response.strategy_ids)
        second = projector.project(sample_response.timeline, sample_response.strategy_ids)

        assert first == second


class TestSignals:
    """Tests for signal slots and attribution."""

    def test_max_wins_with_attribution(self, projector, point_factory, snapshot_factory):
        def raw(value, **kwargs):
            return snapshot_factory(value, **kwargs).model_dump()

        timeline = [
            point_factory(
                "2024-01-02",
                {
                    "low_regime": raw(900, transfers=[("spot", "stable")]),
                    "high_regime": raw(1200, transfers=[("spot", "stable")]),
                    "lp_regime": raw(1000, transfers=[("stable", "lp")]),
                },
            )
        ]

        record = projector.project(timeline, ["low_regime", "high_regime", "lp_regime"])[0]

        assert record.signals == {
            SignalKey.SELL_SPOT: Decimal("1200"),
            SignalKey.BUY_LP: Decimal("1000"),
        }
        assert record.event_strategies[SignalKey.SELL_SPOT] == ["Low Regime", "High Regime"]
        assert record.event_strategies[SignalKey.BUY_LP] == ["Lp Regime"]

    def test_dca_snapshot_never_fires(self, projector, sample_response):
        records = projector.project(sample_response.timeline, ["dca_classic"])

        assert all(record.signals == {} for record in records)

    def test_leverage_and_trade_signals(self, projector, sample_response):
        record = projector.project(sample_response.timeline, sample_response.strategy_ids)[1]

        assert record.signals[SignalKey.SELL_SPOT] == Decimal("1200")
        assert record.signals[SignalKey.BORROW] == Decimal("1200")
        assert record.event_strategies[SignalKey.SELL_SPOT] == [
            "Simple Regime",
            "Leveraged Regime",
        ]
        assert record.event_strategies[SignalKey.BORROW] == ["Leveraged Regime"]
        assert SignalKey.BUY_SPOT not in record.signals

    def test_custom_display_names(self, point_factory, snapshot_factory):
        projector = TimelineProjector(display_name=str.upper)
        raw = snapshot_factory(10, event="borrow").model_dump()
        timeline = [point_factory("2024-01-01", {"alpha": raw})]

        record = projector.project(timeline, ["alpha"])[0]

        assert record.event_strategies == {SignalKey.BORROW: ["ALPHA"]}


class TestSentiment:
    """Tests for the sentiment scale."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("extreme_fear", 0),
            ("fear", 1),
            ("neutral", 2),
            ("greed", 3),
            ("extreme_greed", 4),
            ("euphoria", None),
            (None, None),
            ("", None),
        ],
    )
    def test_label_to_index(self, label, expected):
        assert sentiment_label_to_index(label) == expected

    def test_label_fills_missing_score(self, projector, sample_response):
        records = projector.project(sample_response.timeline, ["dca_classic"])

        assert records[0].sentiment == 2
        assert records[1].sentiment == 1
        assert records[2].sentiment is None
