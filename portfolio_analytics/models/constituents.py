"""
Portfolio constituent models.

The backtest service reports the Spot and LP buckets either as a single
number or as a per-asset ``{symbol: value}`` mapping. Both shapes are coerced
into an explicit tagged variant so every consumer handles them separately.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "ScalarBucket",
    "BreakdownBucket",
    "BucketValue",
    "PortfolioConstituents",
    "coerce_bucket",
]


class ScalarBucket(BaseModel):
    """Bucket reported as one aggregate value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    value: Decimal = Decimal("0")

    def total(self) -> Decimal:
        return self.value

    def asset_value(self, symbol: str) -> Decimal:
        # An aggregate cannot be attributed to a single asset
        return Decimal("0")


class BreakdownBucket(BaseModel):
    """Bucket reported per asset symbol (e.g. ``{"btc": 3000, "eth": 2000}``)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["breakdown"] = "breakdown"
    assets: dict[str, Decimal] = Field(default_factory=dict)

    def total(self) -> Decimal:
        return sum(self.assets.values(), Decimal("0"))

    def asset_value(self, symbol: str) -> Decimal:
        return self.assets.get(symbol, Decimal("0"))


BucketValue = Annotated[Union[ScalarBucket, BreakdownBucket], Field(discriminator="kind")]


def coerce_bucket(raw: Any) -> Any:
    """Convert the service's number-or-mapping shape into a tagged bucket payload."""
    if isinstance(raw, (ScalarBucket, BreakdownBucket)):
        return raw
    if raw is None:
        return {"kind": "scalar", "value": Decimal("0")}
    if isinstance(raw, Mapping):
        if raw.get("kind") in ("scalar", "breakdown"):
            return raw
        return {"kind": "breakdown", "assets": dict(raw)}
    return {"kind": "scalar", "value": raw}


class PortfolioConstituents(BaseModel):
    """
    Split of one snapshot's portfolio value into Spot, Stable and LP buckets.

    Attributes:
        spot: Direct asset holdings (scalar or per-asset breakdown)
        stable: Stablecoin holdings (always scalar)
        lp: Liquidity-pool positions (scalar or per-asset breakdown)
    """

    model_config = ConfigDict(frozen=True)

    spot: BucketValue = Field(default_factory=ScalarBucket)
    stable: Decimal = Decimal("0")
    lp: BucketValue = Field(default_factory=ScalarBucket)

    @field_validator("spot", "lp", mode="before")
    @classmethod
    def coerce_bucket_shape(cls, v: Any) -> Any:
        return coerce_bucket(v)

    @field_validator("stable", mode="before")
    @classmethod
    def default_missing_stable(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v
