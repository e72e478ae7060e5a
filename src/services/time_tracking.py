"""
Time entry aggregation.

Builds the per-customer index of minutes worked, keyed by day and by month.
The index is always rebuilt from the entries; it is never patched in place.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from core.dates import month_key, parse_month_key
from core.formatting import round_half_up
from core.repositories import TimeEntryRepository
from models.time_entries import BulkLineResult, CustomerTimeIndex, TimeEntry, TimesheetStats
from services.timesheet_parser import normalize_time

logger = logging.getLogger(__name__)


def _minutes_of_day(hhmm: str | None) -> int | None:
    normalized = normalize_time(hhmm) if hhmm else None
    if normalized is None:
        return None
    hours, minutes = normalized.split(":")
    return int(hours) * 60 + int(minutes)


def calculate_duration_minutes(
    start: str | None, end: str | None, pause_minutes: int | None = 0
) -> int:
    """Worked minutes between start and end minus the pause, never negative."""
    start_min = _minutes_of_day(start)
    end_min = _minutes_of_day(end)
    if start_min is None or end_min is None:
        return 0
    raw = max(0, end_min - start_min)
    return max(0, raw - (pause_minutes or 0))


def build_customer_index(
    customer_name: str,
    entries: Iterable[TimeEntry],
    customer_id: str | None = None,
    hourly_rate: float | None = None,
) -> CustomerTimeIndex:
    """
    Aggregate one customer's entries into per-day and per-month minutes.

    Entries without start or end are skipped. Days with zero minutes are not
    listed, so every month total is exactly the sum of its listed days.
    """
    per_day: dict[str, int] = defaultdict(int)
    per_month: dict[str, int] = defaultdict(int)

    for entry in entries:
        if not entry.get("start") or not entry.get("end"):
            continue
        period = parse_month_key(entry["date"])
        if period is None:
            logger.debug("Skipping entry with malformed date %r", entry["date"])
            continue
        minutes = calculate_duration_minutes(
            entry["start"], entry["end"], entry.get("pause_minutes")
        )
        if minutes <= 0:
            continue
        per_day[entry["date"]] += minutes
        per_month[month_key(*period)] += minutes

    return CustomerTimeIndex(
        customer_name=customer_name,
        per_day_minutes=dict(sorted(per_day.items())),
        per_month_minutes=dict(sorted(per_month.items())),
        customer_id=customer_id,
        hourly_rate=hourly_rate,
    )


def build_time_index(
    repository: TimeEntryRepository, customers: Iterable[str]
) -> list[CustomerTimeIndex]:
    """Rebuild the full index for the given customers, in the given order."""
    index = [
        build_customer_index(customer, repository.load_time_entries(customer))
        for customer in customers
    ]
    logger.info("Built time index for %d customers", len(index))
    return index


# =============================================================================
# ENTRY MAINTENANCE
# =============================================================================


def upsert_entry(entries: list[TimeEntry], entry: TimeEntry) -> list[TimeEntry]:
    """Return a new list with the entry for ``entry['date']`` replaced or added, sorted by date."""
    updated = [e for e in entries if e["date"] != entry["date"]]
    updated.append(entry)
    return sorted(updated, key=lambda e: e["date"])


def entry_from_parsed(result: BulkLineResult) -> TimeEntry:
    parsed = result.parsed
    return {
        "date": result.date,
        "start": parsed.start,
        "end": parsed.end,
        "pause_minutes": parsed.pause_minutes,
        "notes": parsed.notes,
        "duration_minutes": calculate_duration_minutes(
            parsed.start, parsed.end, parsed.pause_minutes
        ),
    }


def apply_bulk_results(
    repository: TimeEntryRepository, customer: str, results: Iterable[BulkLineResult]
) -> tuple[int, int]:
    """
    Write parsed bulk lines through the repository.

    Empty lines delete the day's entry, all other lines upsert it.

    Returns:
        Tuple of (upserted count, deleted count)
    """
    upserted = deleted = 0
    for result in results:
        if result.parsed.is_empty:
            repository.delete_entry(customer, result.date)
            deleted += 1
        else:
            repository.upsert_entry(customer, entry_from_parsed(result))
            upserted += 1
    logger.info("Applied bulk paste for %s: %d upserted, %d deleted", customer, upserted, deleted)
    return upserted, deleted


# =============================================================================
# STATS
# =============================================================================


def compute_timesheet_stats(
    entries: list[TimeEntry],
    year: int,
    hourly_rate: float | None = None,
    today: date | None = None,
) -> TimesheetStats:
    """
    Totals for one month's timesheet.

    The monthly average spreads the month's total over the months elapsed in
    ``year`` (all 12 for past years).
    """
    today = today or date.today()
    total = sum(
        calculate_duration_minutes(e.get("start"), e.get("end"), e.get("pause_minutes"))
        for e in entries
    )
    months_so_far = today.month if year == today.year else 12
    average = int(round_half_up(total / max(1, months_so_far), 0))
    revenue = round_half_up(total * hourly_rate / 60, 0) if hourly_rate is not None else None
    return TimesheetStats(
        total_minutes_this_month=total,
        average_monthly_minutes_this_year=average,
        total_revenue_this_month=revenue,
    )
