"""
Timeline enrichment and sampling.

Helpers applied to the raw timeline before projection:

- enrich_with_dma: rolling simple moving average of the reference price
- sample_timeline: downsample long timelines, preferring points where a
  strategy actually did something
- calculate_actual_days: inclusive calendar span covered by the timeline
"""

import math
from collections import deque
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

import structlog

from portfolio_analytics.config import settings
from portfolio_analytics.derivation.signal_classifier import SignalClassifier
from portfolio_analytics.models.timeline import TimelinePoint

logger = structlog.get_logger(__name__)

REFERENCE_ASSET = "btc"
SECONDS_PER_DAY = 86400


def _finite_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float) and math.isfinite(value):
        return Decimal(str(value))
    return None


def reference_price(point: TimelinePoint) -> Optional[Decimal]:
    """BTC price when usable, else the first finite numeric token price."""
    btc = _finite_decimal(point.token_price.get(REFERENCE_ASSET))
    if btc is not None:
        return btc
    for value in point.token_price.values():
        price = _finite_decimal(value)
        if price is not None:
            return price
    return None


def enrich_with_dma(
    timeline: Optional[Sequence[TimelinePoint]],
    window: Optional[int] = None,
) -> list[TimelinePoint]:
    """Attach a rolling moving average of the reference price as ``dma_200``.

    The average is emitted only once ``window`` consecutive prices are
    available. A point without a usable price resets the window and gets None.

    Args:
        timeline: Ordered timeline points
        window: Window length in points (default settings.dma_window)

    Returns:
        New points (copies) with dma_200 set; the input is not modified
    """
    if not timeline:
        return []

    size = window or settings.dma_window
    prices: deque[Decimal] = deque(maxlen=size)
    running_sum = Decimal("0")
    enriched: list[TimelinePoint] = []

    for point in timeline:
        price = reference_price(point)
        if price is None:
            prices.clear()
            running_sum = Decimal("0")
            dma = None
        else:
            if len(prices) == size:
                running_sum -= prices[0]
            prices.append(price)
            running_sum += price
            dma = running_sum / size if len(prices) == size else None
        enriched.append(point.model_copy(update={"dma_200": dma}))

    return enriched


def sample_timeline(
    timeline: Optional[Sequence[TimelinePoint]],
    min_points: Optional[int] = None,
    max_points: Optional[int] = None,
    classifier: Optional[SignalClassifier] = None,
) -> list[TimelinePoint]:
    """Downsample a timeline for plotting, preferring meaningful points.

    Critical points (first, last, and any point where a non-periodic strategy
    has an event or transfers) are kept while they fit the budget. The budget
    grows with the number of critical points, capped at ``max_points``. When
    there are more critical points than the budget they are themselves evenly
    subsampled; otherwise remaining slots are filled with evenly spaced
    non-critical points. Order is preserved.

    Args:
        timeline: Ordered timeline points
        min_points: Timelines this short are returned unchanged
        max_points: Upper bound on the sampled length

    Returns:
        Sampled points in original order
    """
    if not timeline:
        return []

    minimum = min_points or settings.min_chart_points
    maximum = max(max_points or settings.max_chart_points, minimum)
    if len(timeline) <= minimum:
        return list(timeline)

    classifier = classifier or SignalClassifier()
    last = len(timeline) - 1
    critical = [
        index
        for index, point in enumerate(timeline)
        if index in (0, last)
        or any(classifier.has_activity(snapshot) for snapshot in point.strategies.values())
    ]

    effective_max = max(minimum, min(maximum, len(critical) + minimum))
    if len(timeline) <= effective_max:
        return list(timeline)

    if len(critical) >= effective_max:
        keep = _evenly_spaced(critical, effective_max)
    else:
        critical_set = set(critical)
        others = [index for index in range(len(timeline)) if index not in critical_set]
        keep = critical + _evenly_spaced(others, effective_max - len(critical))

    sampled = [timeline[index] for index in sorted(set(keep))]
    logger.debug(
        "timeline_sampled",
        original_points=len(timeline),
        sampled_points=len(sampled),
        critical_points=len(critical),
    )
    return sampled


def _evenly_spaced(indices: Sequence[int], count: int) -> list[int]:
    if count <= 0:
        return []
    if count >= len(indices):
        return list(indices)
    if count == 1:
        return [indices[0]]
    step = (len(indices) - 1) / (count - 1)
    return [indices[round(i * step)] for i in range(count)]


def _parse_date(value: str) -> Union[date, datetime]:
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _as_timestamp(value: Union[date, datetime]) -> float:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return (value - datetime(1970, 1, 1)).total_seconds()
        return value.timestamp()
    return float((value - date(1970, 1, 1)).days * SECONDS_PER_DAY)


def calculate_actual_days(timeline: Optional[Sequence[TimelinePoint]]) -> Union[int, float]:
    """Inclusive number of calendar days between the first and last point.

    Returns 0 for fewer than two points, otherwise
    ``ceil(|last - first| in days) + 1``. A malformed date yields ``nan``
    (no recovery is attempted).
    """
    if not timeline or len(timeline) < 2:
        return 0
    try:
        first = _as_timestamp(_parse_date(timeline[0].date))
        last = _as_timestamp(_parse_date(timeline[-1].date))
    except ValueError:
        logger.debug(
            "timeline_date_unparseable",
            first=timeline[0].date,
            last=timeline[-1].date,
        )
        return math.nan
    return math.ceil(abs(last - first) / SECONDS_PER_DAY) + 1
