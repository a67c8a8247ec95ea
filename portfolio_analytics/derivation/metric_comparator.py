"""
Metric Comparator.

Ranks strategies on one summary metric. Index 0 of the result is "best".

Sorting rule:
- highest: descending
- lowest, every candidate negative (e.g. drawdown): descending, so the
  value closest to zero ranks first
- lowest otherwise (e.g. volatility): ascending

Strategies without a usable value are reported as None / "N/A" and placed
after the ranked entries. Ties keep the original strategy order.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Union

import structlog

from portfolio_analytics.models.summary import (
    HighlightMode,
    RankedMetric,
    RankedMetricEntry,
    StrategyMetricSummary,
    to_metric_number,
)

logger = structlog.get_logger(__name__)

SummaryLike = Union[StrategyMetricSummary, Mapping[str, Any]]


def format_signed_percent(value: Decimal) -> str:
    return f"{'+' if value >= 0 else ''}{value:.1f}%"


def format_percent(value: Decimal) -> str:
    return f"{value:.1f}%"


def format_ratio(value: Decimal) -> str:
    return f"{value:.2f}"


def format_usd(value: Decimal) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_count(value: Decimal) -> str:
    return f"{value:.0f}"


@dataclass(frozen=True)
class MetricDefinition:
    """Display and ranking defaults for one summary metric."""

    key: str
    label: str
    highlight_mode: HighlightMode
    formatter: Callable[[Decimal], str]


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    definition.key: definition
    for definition in (
        MetricDefinition("final_value", "Final Value", "highest", format_usd),
        MetricDefinition("roi_percent", "ROI", "highest", format_signed_percent),
        MetricDefinition("max_drawdown_percent", "Max Drawdown", "lowest", format_percent),
        MetricDefinition("sharpe_ratio", "Sharpe", "highest", format_ratio),
        MetricDefinition("sortino_ratio", "Sortino", "highest", format_ratio),
        MetricDefinition("calmar_ratio", "Calmar", "highest", format_ratio),
        MetricDefinition("volatility", "Volatility", "lowest", format_ratio),
        MetricDefinition("beta", "Beta", "lowest", format_ratio),
        MetricDefinition("trade_count", "Trades", "lowest", format_count),
        MetricDefinition("total_borrow_events", "Borrow Events", "lowest", format_count),
        MetricDefinition("total_interest_paid", "Interest Paid", "lowest", format_usd),
        MetricDefinition("liquidation_events", "Liquidations", "lowest", format_count),
        MetricDefinition("time_in_leverage_pct", "Time in Leverage", "lowest", format_percent),
    )
}


def read_metric(summary: Optional[SummaryLike], key: str) -> Optional[Decimal]:
    """Metric value as a finite Decimal, or None when absent or not numeric."""
    if summary is None:
        return None
    if isinstance(summary, StrategyMetricSummary):
        return summary.metric(key)
    if isinstance(summary, Mapping):
        return to_metric_number(summary.get(key))
    return None


class MetricComparator:
    """Rank strategies on a summary metric.

    Example:
        comparator = MetricComparator()
        ranked = comparator.compare("max_drawdown_percent", "lowest", response.strategies)
        best = ranked.best
    """

    __slots__ = ("definitions",)

    def __init__(self, definitions: Optional[Mapping[str, MetricDefinition]] = None):
        self.definitions = dict(definitions) if definitions is not None else METRIC_DEFINITIONS

    def compare(
        self,
        metric: str,
        highlight_mode: Optional[HighlightMode],
        summaries: Mapping[str, SummaryLike],
        strategy_order: Optional[Sequence[str]] = None,
    ) -> RankedMetric:
        """Rank every strategy on ``metric``.

        Args:
            metric: Summary field name (e.g. "roi_percent")
            highlight_mode: "highest" or "lowest"; None uses the metric's default
            summaries: Summary per strategy id
            strategy_order: Tie-break order (default: summaries iteration order);
                ids without a summary are ignored

        Returns:
            RankedMetric whose non-null entries are sorted best-first
        """
        definition = self.definitions.get(metric)
        mode: HighlightMode = highlight_mode or (
            definition.highlight_mode if definition else "highest"
        )
        formatter = definition.formatter if definition else format_ratio

        order = [
            strategy_id
            for strategy_id in dict.fromkeys([*(strategy_order or []), *summaries])
            if strategy_id in summaries
        ]

        ranked: list[RankedMetricEntry] = []
        missing: list[RankedMetricEntry] = []
        for strategy_id in order:
            value = read_metric(summaries.get(strategy_id), metric)
            if value is None:
                missing.append(RankedMetricEntry(strategy_id=strategy_id))
            else:
                ranked.append(
                    RankedMetricEntry(
                        strategy_id=strategy_id, value=value, formatted=formatter(value)
                    )
                )

        ranked.sort(key=lambda entry: entry.value, reverse=self._is_descending(mode, ranked))

        logger.debug(
            "metric_compared",
            metric=metric,
            highlight_mode=mode,
            ranked=len(ranked),
            missing=len(missing),
        )
        return RankedMetric(metric=metric, highlight_mode=mode, entries=ranked + missing)

    def compare_all(
        self,
        summaries: Mapping[str, SummaryLike],
        strategy_order: Optional[Sequence[str]] = None,
    ) -> dict[str, RankedMetric]:
        """Rank every registered metric with its default highlight mode."""
        return {
            key: self.compare(key, definition.highlight_mode, summaries, strategy_order)
            for key, definition in self.definitions.items()
        }

    @staticmethod
    def _is_descending(mode: HighlightMode, ranked: Sequence[RankedMetricEntry]) -> bool:
        if mode == "highest":
            return True
        # Negative-is-bad metrics (drawdown): closest to zero is best
        return bool(ranked) and all(entry.value < 0 for entry in ranked)
