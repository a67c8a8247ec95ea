"""
Signal Classifier.

Maps low-level portfolio events onto the fixed signal vocabulary:

- Bucket transfers (directional, from -> to):
    spot -> stable | lp     SELL_SPOT
    stable -> spot          BUY_SPOT
    stable -> lp            BUY_LP
    lp -> spot | stable     SELL_LP
- Leverage markers "borrow" / "repay" / "liquidate" map 1:1.

Snapshots marked as a plain periodic contribution (DCA) are excluded
entirely so routine accumulation is never drawn as a trade.
"""

from types import MappingProxyType
from typing import Optional

from portfolio_analytics.config import settings
from portfolio_analytics.models.chart import SignalKey
from portfolio_analytics.models.timeline import StrategySnapshot, Transfer

TRANSFER_SIGNALS = MappingProxyType(
    {
        ("spot", "stable"): SignalKey.SELL_SPOT,
        ("spot", "lp"): SignalKey.SELL_SPOT,
        ("stable", "spot"): SignalKey.BUY_SPOT,
        ("stable", "lp"): SignalKey.BUY_LP,
        ("lp", "spot"): SignalKey.SELL_LP,
        ("lp", "stable"): SignalKey.SELL_LP,
    }
)

BORROW_SIGNALS = MappingProxyType(
    {
        "borrow": SignalKey.BORROW,
        "repay": SignalKey.REPAY,
        "liquidate": SignalKey.LIQUIDATE,
    }
)


class SignalClassifier:
    """Classify one strategy snapshot into trading signals.

    Pure classification; accumulation across strategies is the caller's job.

    Example:
        classifier = SignalClassifier()
        signals = classifier.classify_snapshot(point.strategies["simple_regime"])
    """

    __slots__ = ("periodic_signal",)

    def __init__(self, periodic_signal: Optional[str] = None):
        """
        Args:
            periodic_signal: metrics.signal value marking a periodic contribution
        """
        self.periodic_signal = periodic_signal or settings.periodic_contribution_signal

    def classify_transfer(self, from_bucket: str, to_bucket: str) -> Optional[SignalKey]:
        return TRANSFER_SIGNALS.get((from_bucket, to_bucket))

    def classify_borrow_event(self, marker: Optional[str]) -> Optional[SignalKey]:
        if not isinstance(marker, str):
            return None
        return BORROW_SIGNALS.get(marker)

    def is_periodic_contribution(self, snapshot: StrategySnapshot) -> bool:
        return snapshot.metrics.signal == self.periodic_signal

    def classify_transfers(self, transfers: list[Transfer]) -> list[SignalKey]:
        """Signals for each transfer, in order, without duplicates."""
        signals: list[SignalKey] = []
        for transfer in transfers:
            signal = self.classify_transfer(transfer.from_bucket, transfer.to_bucket)
            if signal is not None and signal not in signals:
                signals.append(signal)
        return signals

    def classify_snapshot(self, snapshot: StrategySnapshot) -> list[SignalKey]:
        """All signals fired by one snapshot.

        Args:
            snapshot: Strategy state at one date

        Returns:
            Transfer signals followed by the leverage signal, if any; empty
            for periodic contributions
        """
        if self.is_periodic_contribution(snapshot):
            return []

        signals = self.classify_transfers(snapshot.metrics.transfers)

        marker = snapshot.metrics.borrow_event or snapshot.event
        borrow_signal = self.classify_borrow_event(marker)
        if borrow_signal is not None and borrow_signal not in signals:
            signals.append(borrow_signal)
        return signals

    def has_activity(self, snapshot: StrategySnapshot) -> bool:
        """True when a non-periodic snapshot carries an event or any transfer."""
        if self.is_periodic_contribution(snapshot):
            return False
        return bool(snapshot.event) or bool(snapshot.metrics.transfers)
