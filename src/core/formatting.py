"""
Number and date formatting helpers.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from core.config import HOURS_PRECISION


def round_half_up(value: float, digits: int) -> float:
    """Round half away from zero (2.25 -> 2.3), unlike the builtin round()."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def minutes_to_hours(minutes: float) -> float:
    """Convert minutes to hours with 0.1 precision."""
    return round_half_up(minutes / 60, HOURS_PRECISION)


def minutes_to_hhmm(minutes: int) -> str:
    """Format minutes as HH:MM, empty string for zero."""
    if not minutes:
        return ""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def format_date_display(d: date) -> str:
    """Format date as M/D/YYYY (platform-safe, no zero-padding)."""
    return f"{d.month}/{d.day}/{d.year}"
