"""Exceptions raised at the payload boundary of the analytics package."""

from typing import Any


class BacktestPayloadError(Exception):
    """
    Raised when a raw backtest service payload cannot be parsed.

    Derivations themselves never raise for data-shape problems; this error is
    only produced by ``parse_backtest_response``.

    Attributes:
        errors: Structured validation errors reported by pydantic
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)
