"""
Domain Calculator.

Computes a padded ``(lower, upper)`` y-axis range from projected chart
records. Portfolio value cannot be negative, so the lower bound is clamped
at zero even when padding would push it below.
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Optional

from portfolio_analytics.config import settings
from portfolio_analytics.models.chart import ChartRecord

ZERO = Decimal("0")


class DomainCalculator:
    """Calculate plot axis bounds.

    Example:
        calculator = DomainCalculator()
        lower, upper = calculator.calculate(records, ["dca_classic", "simple_regime"])
    """

    __slots__ = ("padding_ratio", "default_range")

    def __init__(
        self,
        padding_ratio: Optional[Decimal] = None,
        default_range: Optional[tuple[Decimal, Decimal]] = None,
    ):
        """
        Args:
            padding_ratio: Fraction of the value range added at each end
            default_range: Range returned when there are no values
        """
        self.padding_ratio = (
            settings.domain_padding_ratio if padding_ratio is None else padding_ratio
        )
        self.default_range = default_range or (
            settings.default_domain_min,
            settings.default_domain_max,
        )

    def collect_values(
        self,
        records: Iterable[ChartRecord],
        strategy_ids: Iterable[str],
    ) -> list[Decimal]:
        """Every strategy value of the requested ids and every populated signal slot."""
        ids = list(dict.fromkeys(strategy_ids))
        values: list[Decimal] = []
        for record in records:
            for strategy_id in ids:
                value = record.values.get(strategy_id)
                if value is not None:
                    values.append(value)
            values.extend(record.signals.values())
        return values

    def calculate(
        self,
        records: Optional[Sequence[ChartRecord]],
        strategy_ids: Iterable[str],
    ) -> tuple[Decimal, Decimal]:
        """Padded (lower, upper) bounds with the lower bound floored at zero.

        Args:
            records: Chart records from the timeline projector
            strategy_ids: Strategies included in the scan

        Returns:
            (max(0, min - padding), max + padding), or the default range when
            no values exist
        """
        values = self.collect_values(records or [], strategy_ids)
        if not values:
            return self.default_range

        low = min(values)
        high = max(values)
        padding = (high - low) * self.padding_ratio
        return max(ZERO, low - padding), high + padding
