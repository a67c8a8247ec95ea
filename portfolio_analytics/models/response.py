"""Backtest service response model and parser."""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from portfolio_analytics.errors import BacktestPayloadError
from portfolio_analytics.models.summary import StrategyMetricSummary
from portfolio_analytics.models.timeline import TimelinePoint

__all__ = ["BacktestResponse", "parse_backtest_response"]

logger = structlog.get_logger(__name__)


class BacktestResponse(BaseModel):
    """
    Multi-strategy backtest result.

    Attributes:
        timeline: Dated points in service order (the order is never changed)
        strategies: Aggregate summary per strategy id
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    timeline: list[TimelinePoint] = Field(default_factory=list)
    strategies: dict[str, StrategyMetricSummary] = Field(default_factory=dict)

    @field_validator("timeline", mode="before")
    @classmethod
    def default_timeline(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    @field_validator("strategies", mode="before")
    @classmethod
    def default_strategies(cls, v: Any) -> Any:
        return v if isinstance(v, Mapping) else {}

    @property
    def strategy_ids(self) -> list[str]:
        """Strategy ids from the summary map, then any seen only in the timeline."""
        ids = list(self.strategies)
        seen = set(ids)
        for point in self.timeline:
            for strategy_id in point.strategies:
                if strategy_id not in seen:
                    seen.add(strategy_id)
                    ids.append(strategy_id)
        return ids


def parse_backtest_response(payload: Mapping[str, Any]) -> BacktestResponse:
    """
    Validate a raw service payload into a BacktestResponse.

    Raises:
        BacktestPayloadError: If the payload does not match the response shape
    """
    try:
        response = BacktestResponse.model_validate(payload)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        logger.warning(
            "backtest_payload_invalid",
            error_count=len(errors),
            first_error=errors[0]["msg"] if errors else None,
        )
        raise BacktestPayloadError("Invalid backtest payload", errors=errors) from e

    logger.debug(
        "backtest_payload_parsed",
        points=len(response.timeline),
        strategies=len(response.strategies),
    )
    return response
