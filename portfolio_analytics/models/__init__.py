"""
Data models for the backtest analytics engine.

Input models (timeline, snapshots, summaries) are frozen once received;
derived models (chart records, rankings, tooltips) are rebuilt per input.
"""

from portfolio_analytics.models.allocation import (
    AllocationPercentages,
    StrategyBuckets,
    UnifiedCategory,
    UnifiedSegment,
)
from portfolio_analytics.models.chart import (
    LEVERAGE_SIGNALS,
    TRADE_SIGNALS,
    ChartRecord,
    SignalKey,
)
from portfolio_analytics.models.constituents import (
    BreakdownBucket,
    BucketValue,
    PortfolioConstituents,
    ScalarBucket,
)
from portfolio_analytics.models.response import BacktestResponse, parse_backtest_response
from portfolio_analytics.models.summary import (
    HighlightMode,
    RankedMetric,
    RankedMetricEntry,
    StrategyMetricSummary,
)
from portfolio_analytics.models.timeline import (
    SnapshotMetrics,
    StrategySnapshot,
    TimelinePoint,
    Transfer,
    TransferMetadata,
)
from portfolio_analytics.models.tooltip import (
    TooltipAllocation,
    TooltipBundle,
    TooltipEvent,
    TooltipMarketSignal,
    TooltipStrategyValue,
)

__all__ = [
    "AllocationPercentages",
    "BacktestResponse",
    "BreakdownBucket",
    "BucketValue",
    "ChartRecord",
    "HighlightMode",
    "LEVERAGE_SIGNALS",
    "PortfolioConstituents",
    "RankedMetric",
    "RankedMetricEntry",
    "ScalarBucket",
    "SignalKey",
    "SnapshotMetrics",
    "StrategyBuckets",
    "StrategyMetricSummary",
    "StrategySnapshot",
    "TRADE_SIGNALS",
    "TimelinePoint",
    "TooltipAllocation",
    "TooltipBundle",
    "TooltipEvent",
    "TooltipMarketSignal",
    "TooltipStrategyValue",
    "Transfer",
    "TransferMetadata",
    "UnifiedCategory",
    "UnifiedSegment",
    "parse_backtest_response",
]
