"""
Timeline Projector.

Walks the raw per-date, per-strategy snapshots and emits one ChartRecord per
date. Output length and order always match the input; dates are never
re-sorted.

Per point:
1. Copy the point's own fields (date, prices, sentiment, DMA).
2. Record each requested strategy's portfolio value.
3. Classify every strategy's events; per signal keep the highest firing
   portfolio value and the display names of the strategies that fired it.
4. Fill the 0-4 sentiment score from the label when no number is given.
"""

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from types import MappingProxyType
from typing import Optional

import structlog

from portfolio_analytics.derivation.signal_classifier import SignalClassifier
from portfolio_analytics.derivation.strategy_display import get_strategy_display_name
from portfolio_analytics.models.chart import ChartRecord, SignalKey
from portfolio_analytics.models.timeline import TimelinePoint

logger = structlog.get_logger(__name__)

SENTIMENT_SCALE = MappingProxyType(
    {
        "extreme_fear": 0,
        "fear": 1,
        "neutral": 2,
        "greed": 3,
        "extreme_greed": 4,
    }
)


def sentiment_label_to_index(label: Optional[str]) -> Optional[int]:
    """Map a regime label onto the five-level scale; None when unknown."""
    if not label:
        return None
    return SENTIMENT_SCALE.get(label)


class TimelineProjector:
    """Project timeline points into chart records.

    Example:
        projector = TimelineProjector()
        records = projector.project(response.timeline, ["dca_classic", "simple_regime"])
    """

    def __init__(
        self,
        classifier: Optional[SignalClassifier] = None,
        display_name: Callable[[str], str] = get_strategy_display_name,
    ):
        """
        Args:
            classifier: Signal classifier (default: SignalClassifier())
            display_name: Maps a strategy id to the name used for attribution
        """
        self._classifier = classifier or SignalClassifier()
        self._display_name = display_name

    def project(
        self,
        timeline: Optional[Sequence[TimelinePoint]],
        strategy_ids: Iterable[str],
    ) -> list[ChartRecord]:
        """Build one chart record per timeline point, in input order.

        Args:
            timeline: Ordered timeline points (None or empty yields [])
            strategy_ids: Strategies whose values are charted

        Returns:
            Chart records with the same length and order as ``timeline``
        """
        if not timeline:
            return []

        ids = list(dict.fromkeys(strategy_ids))
        records = [self.build_record(point, ids) for point in timeline]

        logger.debug(
            "timeline_projected",
            points=len(records),
            strategies=len(ids),
            signal_points=sum(1 for record in records if record.signals),
        )
        return records

    def build_record(self, point: TimelinePoint, strategy_ids: Sequence[str]) -> ChartRecord:
        """Build the chart record for a single point."""
        present = [
            (strategy_id, point.strategies[strategy_id])
            for strategy_id in strategy_ids
            if strategy_id in point.strategies
        ]
        values: dict[str, Decimal] = {
            strategy_id: snapshot.portfolio_value for strategy_id, snapshot in present
        }

        signals: dict[SignalKey, Decimal] = {}
        event_strategies: dict[SignalKey, list[str]] = {}
        for strategy_id, snapshot in present:
            fired = self._classifier.classify_snapshot(snapshot)
            if not fired:
                continue
            name = self._display_name(strategy_id)
            for signal in fired:
                current = signals.get(signal)
                if current is None or snapshot.portfolio_value > current:
                    signals[signal] = snapshot.portfolio_value
                names = event_strategies.setdefault(signal, [])
                if name not in names:
                    names.append(name)

        sentiment = point.sentiment
        if sentiment is None:
            sentiment = sentiment_label_to_index(point.sentiment_label)

        return ChartRecord(
            date=point.date,
            token_price=dict(point.token_price),
            price=point.price,
            sentiment=sentiment,
            sentiment_label=point.sentiment_label,
            dma_200=point.dma_200,
            strategies=dict(point.strategies),
            extra_fields=dict(point.model_extra or {}),
            values=values,
            signals=signals,
            event_strategies=event_strategies,
        )
