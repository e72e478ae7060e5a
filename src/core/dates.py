"""
Calendar helpers shared by the parser, the aggregator and the analytics.

Day keys are ISO dates (``YYYY-MM-DD``), month keys are ``YYYY-MM``.
"""

import calendar
from datetime import date

from core.config import BILLING_CUTOFF_DAY


def days_in_month(year: int, month: int) -> int:
    """Number of days in the month, leap-year aware."""
    return calendar.monthrange(year, month)[1]


def day_key(year: int, month: int, day: int) -> str:
    return f"{year}-{month:02d}-{day:02d}"


def month_key(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def parse_month_key(key: str) -> tuple[int, int] | None:
    """
    Split a ``YYYY-MM`` (or ``YYYY-MM-DD``) key into (year, month).

    Returns None for keys with non-numeric parts or a month outside 1-12.
    """
    parts = key.split("-")
    if len(parts) < 2:
        return None
    try:
        year = int(parts[0])
        month = int(parts[1])
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


def get_monthly_date_range(month_str: str | None, today: date | None = None) -> tuple[date, date]:
    """
    Calculate the first and last day of a month.

    Args:
        month_str: Optional month string (YYYY-MM). Uses the effective billing
            period of ``today`` if None.

    Returns:
        Tuple of (first_of_month, last_of_month)
    """
    if month_str:
        parsed = parse_month_key(month_str)
        if parsed is None:
            raise ValueError(f"Invalid month '{month_str}', expected YYYY-MM")
        year, month = parsed
    else:
        year, month = compute_effective_billing_period(today or date.today())

    return date(year, month, 1), date(year, month, days_in_month(year, month))


def compute_effective_billing_period(
    d: date, cutoff_day: int = BILLING_CUTOFF_DAY
) -> tuple[int, int]:
    """
    Billing period (year, month) a date belongs to.

    Before the cutoff day the previous month is still being billed.
    """
    if d.day < cutoff_day:
        if d.month == 1:
            return d.year - 1, 12
        return d.year, d.month - 1
    return d.year, d.month


def format_billing_period_label(year: int, month: int) -> str:
    """Format a billing period as 'November 2025'."""
    return date(year, month, 1).strftime("%B %Y")
