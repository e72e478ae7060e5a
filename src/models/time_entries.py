"""
Data models for time entries and the derived time index.

Persisted records use TypedDict like the repository rows they come from;
derived values are frozen dataclasses and never persisted.
"""

from dataclasses import dataclass, field
from typing import NotRequired, TypedDict


class TimeEntry(TypedDict):
    """One worked interval for a customer on a given day."""
    date: str  # YYYY-MM-DD
    start: str | None  # HH:MM
    end: str | None  # HH:MM
    pause_minutes: int
    notes: str
    id: NotRequired[str]
    duration_minutes: NotRequired[int]
    error_message: NotRequired[str | None]


@dataclass(frozen=True)
class ParsedBulkLine:
    """Structured reading of one pasted line."""

    is_empty: bool
    start: str | None = None
    end: str | None = None
    pause_minutes: int = 0
    notes: str = ""


@dataclass(frozen=True)
class BulkLineResult:
    date: str  # YYYY-MM-DD
    parsed: ParsedBulkLine


@dataclass(frozen=True)
class CustomerTimeIndex:
    """Minutes worked for one customer, keyed by day and by month."""

    customer_name: str
    per_day_minutes: dict[str, int] = field(default_factory=dict)  # YYYY-MM-DD -> minutes
    per_month_minutes: dict[str, int] = field(default_factory=dict)  # YYYY-MM -> minutes
    customer_id: str | None = None
    hourly_rate: float | None = None


@dataclass(frozen=True)
class TimesheetStats:
    total_minutes_this_month: int
    average_monthly_minutes_this_year: int
    total_revenue_this_month: float | None = None


@dataclass(frozen=True)
class TimeChartPrepared:
    """Chart rows: each row has a 'label' plus one hours value per customer."""

    rows: list[dict[str, str | float]]
    customer_names: list[str]


@dataclass(frozen=True)
class RoiItem:
    customer_name: str
    total_hours: float
    revenue: float
    roi_per_hour: float


@dataclass(frozen=True)
class AvailablePeriods:
    years: list[int]
    months_by_year: dict[int, list[int]]
