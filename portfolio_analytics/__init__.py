"""Derivation engine turning multi-strategy backtest results into chart-ready analytics."""

from portfolio_analytics.derivation import BacktestAnalytics
from portfolio_analytics.errors import BacktestPayloadError
from portfolio_analytics.models import BacktestResponse, parse_backtest_response

__all__ = [
    "BacktestAnalytics",
    "BacktestPayloadError",
    "BacktestResponse",
    "parse_backtest_response",
]

__version__ = "0.1.0"
