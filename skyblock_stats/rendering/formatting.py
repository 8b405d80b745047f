"""Number formatting for the banner text."""

from typing import Optional, Sequence

from ..core.entities import SenitherWeight

NO_INVENTORY_TEXT = "No Inventory API"


def format_thousands(value: float) -> str:
    """Truncate to an integer and add thousands separators."""
    return f"{int(value):,}"


def format_networth(total_networth: Optional[float]) -> str:
    if total_networth is None:
        return NO_INVENTORY_TEXT
    return format_thousands(total_networth)


def format_senither_weight(weight: SenitherWeight) -> str:
    """Format as ``"{total} ({overflow})"``."""
    return "{total} ({overflow})".format(
        total=format_thousands(weight.total_weight),
        overflow=format_thousands(weight.total_weight_with_overflow),
    )


def format_slayer_xp(xp: int) -> str:
    """Shorten slayer xp with a K or M suffix and one decimal."""
    if xp >= 1_000_000:
        return f"{xp / 1_000_000:.1f}M"
    if xp >= 1_000:
        return f"{xp / 1_000:.1f}K"
    return f"{float(xp):.1f}"


def skill_average(levels: Sequence[int]) -> float:
    return sum(levels) / len(levels)


def format_skill_average(levels: Sequence[int]) -> str:
    return f"Skill Average: {skill_average(levels):.2f}"
