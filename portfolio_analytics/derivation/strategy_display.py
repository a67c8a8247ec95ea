"""
Strategy display helpers.

Display names, colours and ordering for strategy ids. Every function takes its
lookup tables as arguments (with immutable defaults) so there is no shared
mutable state.
"""

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Optional

from portfolio_analytics.config import settings

DEFAULT_PALETTE: tuple[str, ...] = (
    "#3b82f6",
    "#22c55e",
    "#f59e0b",
    "#ec4899",
    "#8b5cf6",
    "#06b6d4",
    "#ef4444",
    "#84cc16",
)

DISPLAY_NAME_OVERRIDES: Mapping[str, str] = MappingProxyType(
    {
        "dca_classic": "DCA Classic",
    }
)

FIXED_STRATEGY_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "dca_classic": "#6b7280",
    }
)


def get_strategy_display_name(
    strategy_id: str,
    overrides: Mapping[str, str] = DISPLAY_NAME_OVERRIDES,
) -> str:
    """Human-readable name: override if known, else title-cased snake_case."""
    if strategy_id in overrides:
        return overrides[strategy_id]
    words = [word for word in strategy_id.replace("-", "_").split("_") if word]
    if not words:
        return strategy_id
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _string_hash(value: str) -> int:
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return h


def get_strategy_color(
    strategy_id: str,
    index: Optional[int] = None,
    palette: Sequence[str] = DEFAULT_PALETTE,
    fixed_colors: Mapping[str, str] = FIXED_STRATEGY_COLORS,
) -> str:
    """Pick a colour: fixed colour, then palette slot by index, then a stable hash slot."""
    if strategy_id in fixed_colors:
        return fixed_colors[strategy_id]
    if not palette:
        raise ValueError("palette must contain at least one colour")
    if index is not None and index >= 0:
        return palette[index % len(palette)]
    return palette[_string_hash(strategy_id) % len(palette)]


def sort_strategy_ids(
    strategy_ids: Iterable[str],
    baseline_id: Optional[str] = None,
) -> list[str]:
    """Order ids for legends: baseline first, the rest alphabetically by display name."""
    baseline = baseline_id or settings.baseline_strategy_id
    unique = list(dict.fromkeys(strategy_ids))
    others = sorted(
        (strategy_id for strategy_id in unique if strategy_id != baseline),
        key=lambda strategy_id: get_strategy_display_name(strategy_id).lower(),
    )
    if baseline in unique:
        return [baseline, *others]
    return others


def get_primary_strategy_id(
    strategy_ids: Sequence[str],
    baseline_id: Optional[str] = None,
) -> Optional[str]:
    """First non-baseline strategy, falling back to the baseline, else None."""
    baseline = baseline_id or settings.baseline_strategy_id
    for strategy_id in strategy_ids:
        if strategy_id != baseline:
            return strategy_id
    return strategy_ids[0] if strategy_ids else None


def order_strategy_ids(
    available_ids: Iterable[str],
    canonical_ids: Optional[Sequence[str]] = None,
) -> list[str]:
    """
    Reorder available ids to follow the canonical ordering.

    Ids missing from the canonical ordering are appended in their original
    order; every available id appears exactly once.
    """
    available = list(dict.fromkeys(available_ids))
    if not canonical_ids:
        return available
    present = set(available)
    ordered = [strategy_id for strategy_id in dict.fromkeys(canonical_ids) if strategy_id in present]
    placed = set(ordered)
    return ordered + [strategy_id for strategy_id in available if strategy_id not in placed]
