"""
Time analytics over the customer time index.

Chart series, revenue-per-hour (ROI) rankings and the periods that have data.
Every call recomputes from the index it is given.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from core.config import ROI_PRECISION, TIME_VIEW_MODES
from core.dates import day_key, days_in_month, month_key, parse_month_key
from core.formatting import minutes_to_hours, round_half_up
from models.time_entries import AvailablePeriods, CustomerTimeIndex, RoiItem, TimeChartPrepared
from services.revenue_metrics import ClientTotal

logger = logging.getLogger(__name__)


def prepare_time_chart_data(
    index: list[CustomerTimeIndex],
    view_mode: str,
    year: int,
    month: int | None = None,
    today: date | None = None,
) -> TimeChartPrepared:
    """
    Build chart rows of hours per customer.

    Args:
        index: Customer time index; column order follows it
        view_mode: "monthly" (12 rows, YYYY-MM) or "daily" (one row per day, YYYY-MM-DD)
        year: Year to chart
        month: Month for the daily view, defaults to the current month

    Returns:
        TimeChartPrepared with rows in ascending calendar order
    """
    if view_mode not in TIME_VIEW_MODES:
        raise ValueError(
            f"Unknown view mode '{view_mode}' (valid: {', '.join(sorted(TIME_VIEW_MODES))})"
        )

    customer_names = [ci.customer_name for ci in index]

    if view_mode == "monthly":
        labels = [month_key(year, m) for m in range(1, 13)]
        source = "per_month_minutes"
    else:
        month = month or (today or date.today()).month
        labels = [day_key(year, month, d) for d in range(1, days_in_month(year, month) + 1)]
        source = "per_day_minutes"

    rows = []
    for label in labels:
        row: dict[str, str | float] = {"label": label}
        for ci in index:
            row[ci.customer_name] = minutes_to_hours(getattr(ci, source).get(label, 0))
        rows.append(row)

    return TimeChartPrepared(rows=rows, customer_names=customer_names)


def _rank(items: list[RoiItem]) -> list[RoiItem]:
    """Sort by ROI descending, ties by revenue descending; stable otherwise."""
    return sorted(items, key=lambda i: (-i.roi_per_hour, -i.revenue))


def compute_roi(index: list[CustomerTimeIndex]) -> list[RoiItem]:
    """Hours per customer without revenue data; revenue and ROI are 0."""
    items = [
        RoiItem(
            customer_name=ci.customer_name,
            total_hours=minutes_to_hours(sum(ci.per_day_minutes.values())),
            revenue=0,
            roi_per_hour=0,
        )
        for ci in index
    ]
    return _rank(items)


def _minutes_in_year(ci: CustomerTimeIndex, year: int) -> int:
    total = 0
    for key, minutes in ci.per_month_minutes.items():
        period = parse_month_key(key)
        if period is None:
            logger.debug("Skipping malformed month key %r for %s", key, ci.customer_name)
            continue
        if period[0] == year:
            total += minutes
    return total


def compute_invoice_based_roi(
    per_client_totals: Iterable[ClientTotal],
    index: list[CustomerTimeIndex],
    year: int,
) -> list[RoiItem]:
    """
    Revenue per hour for each invoiced client in ``year``.

    Negative totals (credit notes) count as zero revenue. Clients without
    tracked time get an ROI of 0.
    """
    minutes_by_client: dict[str, int] = defaultdict(int)
    for ci in index:
        minutes_by_client[ci.customer_name] += _minutes_in_year(ci, year)

    items = []
    for client_total in per_client_totals:
        hours = minutes_to_hours(minutes_by_client.get(client_total.client, 0))
        revenue = max(0.0, client_total.total)
        roi = round_half_up(revenue / hours, ROI_PRECISION) if hours > 0 else 0
        items.append(
            RoiItem(
                customer_name=client_total.client,
                total_hours=hours,
                revenue=revenue,
                roi_per_hour=roi,
            )
        )
    return _rank(items)


def compute_available_periods(index: list[CustomerTimeIndex]) -> AvailablePeriods:
    """Years (descending) and months per year (ascending) that have month totals."""
    months_by_year: dict[int, set[int]] = defaultdict(set)
    for ci in index:
        for key in ci.per_month_minutes:
            period = parse_month_key(key)
            if period is None:
                continue
            year, month = period
            months_by_year[year].add(month)

    years = sorted(months_by_year, reverse=True)
    return AvailablePeriods(
        years=years,
        months_by_year={y: sorted(months_by_year[y]) for y in years},
    )
