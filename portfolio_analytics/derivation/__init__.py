"""
Backtest derivation engine.

One stateless calculator per concern, composed by BacktestAnalytics:

    - AllocationNormalizer: bucket percentages and unified segments
    - SignalClassifier: transfers and leverage markers to signal keys
    - TimelineProjector: timeline points to chart records
    - DomainCalculator: padded y-axis bounds
    - MetricComparator: ranked cross-strategy metrics
    - TooltipAggregator: point-in-time hover breakdown
"""

from portfolio_analytics.derivation.allocation_normalizer import (
    AllocationNormalizer,
    allocation_summary,
    calculate_total_percentage,
    format_currency,
)
from portfolio_analytics.derivation.domain_calculator import DomainCalculator
from portfolio_analytics.derivation.facade import BacktestAnalytics
from portfolio_analytics.derivation.metric_comparator import (
    METRIC_DEFINITIONS,
    MetricComparator,
    MetricDefinition,
)
from portfolio_analytics.derivation.signal_classifier import SignalClassifier
from portfolio_analytics.derivation.strategy_display import (
    get_primary_strategy_id,
    get_strategy_color,
    get_strategy_display_name,
    order_strategy_ids,
    sort_strategy_ids,
)
from portfolio_analytics.derivation.timeline_enrichment import (
    calculate_actual_days,
    enrich_with_dma,
    sample_timeline,
)
from portfolio_analytics.derivation.timeline_projector import (
    TimelineProjector,
    sentiment_label_to_index,
)
from portfolio_analytics.derivation.tooltip_aggregator import TooltipAggregator

__all__ = [
    "AllocationNormalizer",
    "BacktestAnalytics",
    "DomainCalculator",
    "METRIC_DEFINITIONS",
    "MetricComparator",
    "MetricDefinition",
    "SignalClassifier",
    "TimelineProjector",
    "TooltipAggregator",
    "allocation_summary",
    "calculate_actual_days",
    "calculate_total_percentage",
    "enrich_with_dma",
    "format_currency",
    "get_primary_strategy_id",
    "get_strategy_color",
    "get_strategy_display_name",
    "order_strategy_ids",
    "sample_timeline",
    "sentiment_label_to_index",
    "sort_strategy_ids",
]
