"""
Tooltip Aggregator.

Builds the hover breakdown for a single chart record: raw strategy values,
fired signal events with the strategies that fired them, market readings
(sentiment, DMA 200) and one allocation block per strategy holding a
non-zero allocation.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from portfolio_analytics.derivation.allocation_normalizer import AllocationNormalizer
from portfolio_analytics.derivation.strategy_display import (
    get_strategy_color,
    get_strategy_display_name,
    order_strategy_ids,
)
from portfolio_analytics.models.chart import ChartRecord, SignalKey
from portfolio_analytics.models.summary import to_metric_number
from portfolio_analytics.models.tooltip import (
    TooltipAllocation,
    TooltipBundle,
    TooltipEvent,
    TooltipMarketSignal,
    TooltipStrategyValue,
)

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
SENTIMENT_SIGNAL = "Sentiment"
DMA_SIGNAL = "DMA 200"


def format_sentiment(index: int, label: Optional[str]) -> str:
    """``"Neutral (2)"`` style text; ``"Unknown (n)"`` when there is no label."""
    if not label:
        return f"Unknown ({index})"
    words = [word for word in label.split("_") if word]
    return f"{' '.join(word.capitalize() for word in words)} ({index})"


class TooltipAggregator:
    """Assemble a TooltipBundle from one chart record.

    Example:
        aggregator = TooltipAggregator()
        bundle = aggregator.aggregate(records[42], ["dca_classic", "simple_regime"])
    """

    __slots__ = ("_normalizer",)

    def __init__(self, normalizer: Optional[AllocationNormalizer] = None):
        self._normalizer = normalizer or AllocationNormalizer()

    def aggregate(
        self,
        record: ChartRecord,
        sorted_strategy_ids: Optional[Sequence[str]] = None,
    ) -> TooltipBundle:
        """Build the tooltip sections for ``record``.

        Args:
            record: Chart record under the cursor
            sorted_strategy_ids: Canonical strategy ordering; ids present in the
                record but missing here are appended after it

        Returns:
            TooltipBundle with every section in canonical order
        """
        canonical = list(sorted_strategy_ids or [])
        position = {strategy_id: index for index, strategy_id in enumerate(dict.fromkeys(canonical))}
        ordered = order_strategy_ids([*record.values, *record.strategies], canonical)

        bundle = TooltipBundle(
            date=record.date,
            spot_price=self.spot_price(record),
            strategy_ids=ordered,
            strategies=self._strategy_values(record, ordered, position),
            events=self._events(record),
            signals=self._market_signals(record),
            allocations=self._allocations(record, ordered, position),
        )
        logger.debug(
            "tooltip_aggregated",
            date=record.date,
            strategies=len(bundle.strategies),
            events=len(bundle.events),
            allocations=len(bundle.allocations),
        )
        return bundle

    @staticmethod
    def spot_price(record: ChartRecord) -> Optional[Decimal]:
        """BTC price from token_price, falling back to the legacy price field."""
        btc = to_metric_number(record.token_price.get("btc"))
        if btc is not None:
            return btc
        return record.price

    def _strategy_values(
        self,
        record: ChartRecord,
        ordered: Sequence[str],
        position: dict[str, int],
    ) -> list[TooltipStrategyValue]:
        return [
            TooltipStrategyValue(
                strategy_id=strategy_id,
                display_name=get_strategy_display_name(strategy_id),
                value=record.values[strategy_id],
                color=get_strategy_color(strategy_id, position.get(strategy_id)),
            )
            for strategy_id in ordered
            if strategy_id in record.values
        ]

    def _events(self, record: ChartRecord) -> list[TooltipEvent]:
        return [
            TooltipEvent(
                signal=signal,
                name=signal.label,
                value=record.signals[signal],
                strategies=list(record.event_strategies.get(signal, [])),
            )
            for signal in SignalKey
            if signal in record.signals
        ]

    def _market_signals(self, record: ChartRecord) -> list[TooltipMarketSignal]:
        signals: list[TooltipMarketSignal] = []
        if record.sentiment is not None:
            signals.append(
                TooltipMarketSignal(
                    name=SENTIMENT_SIGNAL,
                    value=format_sentiment(record.sentiment, record.sentiment_label),
                )
            )
        if record.dma_200 is not None and record.dma_200.is_finite():
            signals.append(
                TooltipMarketSignal(
                    name=DMA_SIGNAL,
                    value=record.dma_200.quantize(CENT, rounding=ROUND_HALF_UP),
                )
            )
        return signals

    def _allocations(
        self,
        record: ChartRecord,
        ordered: Sequence[str],
        position: dict[str, int],
    ) -> list[TooltipAllocation]:
        allocations: list[TooltipAllocation] = []
        for strategy_id in ordered:
            snapshot = record.strategies.get(strategy_id)
            if snapshot is None or snapshot.portfolio_constituant is None:
                continue
            constituents = snapshot.portfolio_constituant
            percentages = self._normalizer.calculate_percentages(constituents)
            if not percentages.has_allocation:
                continue
            allocations.append(
                TooltipAllocation(
                    strategy_id=strategy_id,
                    display_name=get_strategy_display_name(strategy_id),
                    color=get_strategy_color(strategy_id, position.get(strategy_id)),
                    constituents=constituents,
                    percentages=percentages,
                    spot_breakdown=self._normalizer.spot_breakdown(constituents),
                    index=position.get(strategy_id),
                )
            )
        return allocations
