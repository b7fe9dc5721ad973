"""
Number formatting helpers shared by stats responses.

Every helper tolerates an empty denominator and never produces NaN or
infinity.
"""
from typing import Optional

NOT_AVAILABLE = "n.d."


def percentage(value: float, total: float) -> float:
    """Return value / total * 100, or 0.0 when total is zero."""
    if not total:
        return 0.0
    return value / total * 100


def average(total: float, count: int) -> Optional[float]:
    """Return total / count, or None when count is zero."""
    if not count:
        return None
    return total / count


def format_decimal(value: Optional[float], digits: int = 1) -> str:
    """Render a number with a decimal comma (12.5 -> "12,5")."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.{digits}f}".replace(".", ",")


def format_percentage(value: float, total: float, digits: int = 1) -> str:
    """Render value / total as a percentage string ("12,5%")."""
    return f"{format_decimal(percentage(value, total), digits)}%"
