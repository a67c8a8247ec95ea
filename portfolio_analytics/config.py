"""
Analytics configuration module using Pydantic Settings.

Centralizes the tunable constants of the backtest derivation engine: default
axis range, padding ratio, moving-average window, chart sampling limits,
cache sizing and logging output.
"""

from decimal import Decimal
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsSettings(BaseSettings):
    """
    Derivation engine settings with validation.

    Settings are loaded from ANALYTICS_* environment variables with fallback
    to a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Axis domain
    default_domain_min: Decimal = Field(
        default=Decimal("0"),
        description="Lower bound returned when no chart values exist",
    )
    default_domain_max: Decimal = Field(
        default=Decimal("1000"),
        description="Upper bound returned when no chart values exist",
    )
    domain_padding_ratio: Decimal = Field(
        default=Decimal("0.05"),
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Fraction of the value range added above and below the extrema",
    )

    # Timeline enrichment and sampling
    dma_window: int = Field(
        default=200,
        ge=2,
        description="Rolling window (points) for the long moving-average reference price",
    )
    min_chart_points: int = Field(
        default=90,
        ge=2,
        description="Timelines at or below this length are never sampled",
    )
    max_chart_points: int = Field(
        default=150,
        ge=2,
        description="Upper bound on sampled chart points",
    )

    # Strategy conventions
    periodic_contribution_signal: str = Field(
        default="dca",
        description="metrics.signal value marking a routine periodic contribution",
    )
    baseline_strategy_id: str = Field(
        default="dca_classic",
        description="Strategy id of the DCA baseline shown first in comparisons",
    )

    # Memoization
    cache_ttl_seconds: int = Field(
        default=900,
        ge=1,
        description="Time-to-live for memoized derivations",
    )
    cache_max_entries: int = Field(
        default=64,
        ge=1,
        le=10000,
        description="Maximum memoized derivations kept before LRU eviction",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum structlog level emitted",
    )
    log_renderer: Literal["console", "json"] = Field(
        default="console",
        description="structlog renderer used by configure_logging",
    )

    @model_validator(mode="after")
    def validate_ranges(self) -> "AnalyticsSettings":
        """Reject inverted default domains and sampling limits."""
        if self.default_domain_min >= self.default_domain_max:
            raise ValueError("default_domain_min must be lower than default_domain_max")
        if self.min_chart_points > self.max_chart_points:
            raise ValueError("min_chart_points must not exceed max_chart_points")
        return self


# Global settings instance
settings = AnalyticsSettings()
