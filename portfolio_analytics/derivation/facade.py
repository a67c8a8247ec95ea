"""
BacktestAnalytics facade.

Composes the derivation calculators over one BacktestResponse:

    - TimelineProjector (chart records)
    - DomainCalculator (y-axis bounds)
    - MetricComparator (ranked summaries)
    - TooltipAggregator (hover breakdown)
    - timeline enrichment, sampling and day counts

Derived outputs are memoized per input object. The cache is purely a
performance aid: a fresh facade without a cache returns identical results.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any, Optional, Union

import structlog

from portfolio_analytics.cache.derivation_cache import DerivationCache, derivation_key
from portfolio_analytics.derivation.domain_calculator import DomainCalculator
from portfolio_analytics.derivation.metric_comparator import MetricComparator
from portfolio_analytics.derivation.signal_classifier import SignalClassifier
from portfolio_analytics.derivation.strategy_display import (
    get_primary_strategy_id,
    sort_strategy_ids,
)
from portfolio_analytics.derivation.timeline_enrichment import (
    calculate_actual_days,
    enrich_with_dma,
    sample_timeline,
)
from portfolio_analytics.derivation.timeline_projector import TimelineProjector
from portfolio_analytics.derivation.tooltip_aggregator import TooltipAggregator
from portfolio_analytics.models.chart import ChartRecord
from portfolio_analytics.models.response import BacktestResponse
from portfolio_analytics.models.summary import HighlightMode, RankedMetric
from portfolio_analytics.models.timeline import TimelinePoint
from portfolio_analytics.models.tooltip import TooltipBundle

logger = structlog.get_logger(__name__)


class BacktestAnalytics:
    """Unified entry point for every derivation over one backtest response.

    Example:
        analytics = BacktestAnalytics(parse_backtest_response(payload))
        records = analytics.chart_records(sample=True)
        lower, upper = analytics.y_axis_domain()
        drawdown = analytics.compare_metric("max_drawdown_percent")
        bundle = analytics.tooltip(records[-1])
    """

    def __init__(
        self,
        response: BacktestResponse,
        cache: Optional[DerivationCache[Any]] = None,
        classifier: Optional[SignalClassifier] = None,
    ):
        """
        Args:
            response: Parsed backtest response
            cache: Memo cache shared across facades (default: a private cache)
            classifier: Signal classifier shared by projection and sampling
        """
        self.response = response
        self._cache = cache if cache is not None else DerivationCache()
        self._classifier = classifier or SignalClassifier()
        self._projector = TimelineProjector(classifier=self._classifier)
        self._domain = DomainCalculator()
        self._comparator = MetricComparator()
        self._tooltip = TooltipAggregator()

    def sorted_strategy_ids(self) -> list[str]:
        """Every strategy id in the response, DCA baseline first."""
        return sort_strategy_ids(self.response.strategy_ids)

    def primary_strategy_id(self) -> Optional[str]:
        return get_primary_strategy_id(self.sorted_strategy_ids())

    def prepared_timeline(self, enrich: bool = False, sample: bool = False) -> list[TimelinePoint]:
        """Timeline after optional DMA enrichment and chart sampling.

        Args:
            enrich: Recompute dma_200 from the reference price
            sample: Downsample long timelines, keeping activity points up to
                the sampling budget
        """
        return [point.model_copy(deep=True) for point in self._prepared(enrich, sample)]

    def chart_records(
        self,
        strategy_ids: Optional[Iterable[str]] = None,
        enrich: bool = False,
        sample: bool = False,
    ) -> list[ChartRecord]:
        """Project the (prepared) timeline into chart records.

        Args:
            strategy_ids: Strategies to chart (default: every strategy, sorted)
            enrich: See prepared_timeline
            sample: See prepared_timeline

        Returns:
            One record per prepared timeline point, in timeline order
        """
        ids = self._resolve_ids(strategy_ids)
        return [record.model_copy(deep=True) for record in self._records(ids, enrich, sample)]

    def y_axis_domain(
        self,
        strategy_ids: Optional[Iterable[str]] = None,
        enrich: bool = False,
        sample: bool = False,
    ) -> tuple[Decimal, Decimal]:
        """Padded y-axis bounds for the charted strategies."""
        ids = self._resolve_ids(strategy_ids)
        timeline = self.response.timeline
        key = derivation_key(
            "y_axis_domain", timeline, ids, enrich, sample, self._classifier.periodic_signal
        )
        cached = self._cache.get(key, timeline)
        if cached is not None:
            return cached

        domain = self._domain.calculate(self._records(ids, enrich, sample), ids)
        self._cache.set(key, timeline, domain)
        return domain

    def compare_metric(
        self,
        metric: str,
        highlight_mode: Optional[HighlightMode] = None,
    ) -> RankedMetric:
        """Rank every strategy on one summary metric, ties in sorted-id order."""
        summaries = self.response.strategies
        key = derivation_key("compare_metric", summaries, metric, highlight_mode)
        ranked = self._cache.get(key, summaries)
        if ranked is None:
            ranked = self._comparator.compare(
                metric, highlight_mode, summaries, sort_strategy_ids(summaries)
            )
            self._cache.set(key, summaries, ranked)
        return ranked.model_copy(deep=True)

    def compare_all(self) -> dict[str, RankedMetric]:
        """Rank every registered metric with its default highlight mode."""
        return {key: self.compare_metric(key) for key in self._comparator.definitions}

    def tooltip(
        self,
        record: Union[ChartRecord, int],
        strategy_ids: Optional[Sequence[str]] = None,
    ) -> TooltipBundle:
        """Tooltip bundle for a chart record (or an index into the unsampled records)."""
        if isinstance(record, int):
            record = self.chart_records()[record]
        canonical = list(strategy_ids) if strategy_ids is not None else self.sorted_strategy_ids()
        return self._tooltip.aggregate(record, canonical)

    def actual_days(self) -> Union[int, float]:
        """Inclusive calendar days covered by the timeline."""
        return calculate_actual_days(self.response.timeline)

    def clear_cache(self) -> None:
        """Drop memoized derivations of this facade's inputs."""
        removed = self._cache.invalidate_source(self.response.timeline)
        removed += self._cache.invalidate_source(self.response.strategies)
        logger.debug("analytics_cache_cleared", removed=removed)

    def _resolve_ids(self, strategy_ids: Optional[Iterable[str]]) -> tuple[str, ...]:
        if strategy_ids is None:
            return tuple(self.sorted_strategy_ids())
        return tuple(dict.fromkeys(strategy_ids))

    def _prepared(self, enrich: bool, sample: bool) -> list[TimelinePoint]:
        timeline = self.response.timeline
        key = derivation_key(
            "prepared_timeline", timeline, enrich, sample, self._classifier.periodic_signal
        )
        cached = self._cache.get(key, timeline)
        if cached is not None:
            return cached

        points: list[TimelinePoint] = list(timeline)
        if enrich:
            points = enrich_with_dma(points)
        if sample:
            points = sample_timeline(points, classifier=self._classifier)

        self._cache.set(key, timeline, points)
        return points

    def _records(self, ids: tuple[str, ...], enrich: bool, sample: bool) -> list[ChartRecord]:
        timeline = self.response.timeline
        key = derivation_key(
            "chart_records", timeline, ids, enrich, sample, self._classifier.periodic_signal
        )
        cached = self._cache.get(key, timeline)
        if cached is not None:
            return cached

        records = self._projector.project(self._prepared(enrich, sample), ids)
        self._cache.set(key, timeline, records)
        return records
