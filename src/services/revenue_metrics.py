"""
Revenue and tax metrics over invoices.

Deleted invoices never count. An invoice's amount is its stored total, or the
sum of its line items when no total is stored.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta

from core.config import (
    DAYS_PER_YEAR,
    DOMESTIC_VAT_ID_PREFIX,
    SMALL_BUSINESS_CURRENT_YEAR_LIMIT,
    SMALL_BUSINESS_PREVIOUS_YEAR_LIMIT,
    TOP_CLIENTS_LIMIT,
    VAT_EXEMPTION_MARKERS,
    VAT_RATE_PERCENT,
)
from core.dates import month_key
from models.invoices import Invoice

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class RevenueMetrics:
    total_ytd: float
    projected_annual: float
    average_monthly: float


@dataclass(frozen=True)
class MonthlyTotal:
    month: str  # YYYY-MM
    total: float


@dataclass(frozen=True)
class ClientTotal:
    client: str
    total: float
    share: float = 0.0  # share of the YTD total, set for top clients only


@dataclass(frozen=True)
class BasicMetrics:
    total_all_time: float
    total_ytd: float
    total_mtd: float
    unpaid_total: float
    outstanding_count: int
    paid_total_ytd: float
    num_invoices_ytd: int
    average_invoice_ytd: float
    monthly_totals_current_year: list[MonthlyTotal] = field(default_factory=list)
    per_client_totals_ytd: list[ClientTotal] = field(default_factory=list)
    top_clients_ytd: list[ClientTotal] = field(default_factory=list)
    top_client_share_ytd: float = 0.0


@dataclass(frozen=True)
class NetInvariantScenario:
    """VAT added on top of the current prices."""

    vat_due: float
    gross_increase: float


@dataclass(frozen=True)
class GrossInvariantScenario:
    """Current totals treated as gross, VAT carved out of them."""

    vat_due: float
    net_after_vat: float
    revenue_delta: float  # negative


@dataclass(frozen=True)
class VatSimulation:
    rate: float  # percent
    taxable_net_ytd: float
    reverse_charge_net_ytd: float
    non_taxable_net_ytd: float
    net_invariant: NetInvariantScenario
    gross_invariant: GrossInvariantScenario


@dataclass(frozen=True)
class SmallBusinessMonitor:
    previous_year_total: float
    current_year_total_ytd: float
    previous_year_exceeded: bool
    current_year_projection: float
    current_year_projection_exceeded: bool
    current_year_threshold_remaining: float  # negative once the limit is passed
    estimated_crossing_date: date | None = None


# =============================================================================
# HELPERS
# =============================================================================


def _dated_invoices(invoices: list[Invoice]) -> list[Invoice]:
    return [inv for inv in invoices if not inv.is_deleted and inv.invoice_date is not None]


def _invoices_for_year(invoices: list[Invoice], year: int) -> list[Invoice]:
    return [inv for inv in _dated_invoices(invoices) if inv.invoice_date.year == year]


# =============================================================================
# REVENUE METRICS
# =============================================================================


def compute_revenue_metrics(
    invoices: list[Invoice], year: int | None = None, today: date | None = None
) -> RevenueMetrics:
    """
    Year-to-date revenue with projection and monthly average.

    For the current year only invoices dated up to today count; the average
    runs from the first invoiced month to the current month and the projection
    extrapolates the daily run-rate to a full year. Past and future years average
    over 12 months and project their actual total. All values floor at 0.
    """
    today = today or date.today()
    year = year or today.year

    for_year = _invoices_for_year(invoices, year)
    if year == today.year:
        for_year = [inv for inv in for_year if inv.invoice_date <= today]

    if not for_year:
        return RevenueMetrics(total_ytd=0, projected_annual=0, average_monthly=0)

    total = sum(inv.net_total for inv in for_year)

    if year != today.year:
        return RevenueMetrics(
            total_ytd=max(0.0, total),
            projected_annual=max(0.0, total),
            average_monthly=max(0.0, total / 12),
        )

    first_month = min(inv.invoice_date for inv in for_year).month
    months_elapsed = max(1, today.month - first_month + 1)
    day_of_year = today.timetuple().tm_yday

    return RevenueMetrics(
        total_ytd=max(0.0, total),
        projected_annual=max(0.0, total / day_of_year * DAYS_PER_YEAR),
        average_monthly=max(0.0, total / months_elapsed),
    )


# =============================================================================
# BASIC METRICS
# =============================================================================


def monthly_totals_for_year(invoices: list[Invoice], year: int) -> list[MonthlyTotal]:
    """Invoice totals per month of ``year``, ascending; months without invoices are omitted."""
    totals: dict[str, float] = defaultdict(float)
    for inv in _invoices_for_year(invoices, year):
        totals[month_key(year, inv.invoice_date.month)] += inv.net_total
    return [MonthlyTotal(month=m, total=t) for m, t in sorted(totals.items())]


def per_client_totals(invoices: list[Invoice], year: int) -> list[ClientTotal]:
    """Invoice totals per client for ``year``, largest first."""
    totals: dict[str, float] = defaultdict(float)
    for inv in _invoices_for_year(invoices, year):
        totals[inv.client] += inv.net_total
    items = [ClientTotal(client=c, total=t) for c, t in totals.items()]
    return sorted(items, key=lambda i: -i.total)


def extract_invoice_years(invoices: list[Invoice], today: date | None = None) -> list[int]:
    """Years with invoices, descending. The current year is always included."""
    today = today or date.today()
    years = {inv.invoice_date.year for inv in _dated_invoices(invoices)}
    years.add(today.year)
    return sorted(years, reverse=True)


def compute_basic_metrics(invoices: list[Invoice], today: date | None = None) -> BasicMetrics:
    """Dashboard totals for the current year and month."""
    today = today or date.today()
    year = today.year

    total_all_time = total_ytd = total_mtd = unpaid_total = paid_total_ytd = 0.0
    outstanding_count = num_invoices_ytd = 0

    for inv in _dated_invoices(invoices):
        net = inv.net_total
        total_all_time += net

        if inv.invoice_date.year == year:
            total_ytd += net
            num_invoices_ytd += 1
            if inv.is_paid:
                paid_total_ytd += net
            if inv.invoice_date.month == today.month:
                total_mtd += net

        # Outstanding receivables (only positive amounts)
        if not inv.is_paid and net > 0:
            unpaid_total += net
            outstanding_count += 1

    client_totals = per_client_totals(invoices, year)
    top_clients = [
        ClientTotal(client=c.client, total=c.total, share=c.total / total_ytd if total_ytd > 0 else 0)
        for c in client_totals[:TOP_CLIENTS_LIMIT]
    ]

    return BasicMetrics(
        total_all_time=total_all_time,
        total_ytd=total_ytd,
        total_mtd=total_mtd,
        unpaid_total=unpaid_total,
        outstanding_count=outstanding_count,
        paid_total_ytd=paid_total_ytd,
        num_invoices_ytd=num_invoices_ytd,
        average_invoice_ytd=total_ytd / num_invoices_ytd if num_invoices_ytd else 0,
        monthly_totals_current_year=monthly_totals_for_year(invoices, year),
        per_client_totals_ytd=client_totals,
        top_clients_ytd=top_clients,
        top_client_share_ytd=top_clients[0].share if top_clients else 0,
    )


# =============================================================================
# TAX METRICS
# =============================================================================


def is_reverse_charge(invoice: Invoice) -> bool:
    """A client VAT ID from outside the home country means reverse charge."""
    vat_id = (invoice.client_vat_id or "").strip()
    if not vat_id:
        return False
    return not vat_id.upper().startswith(DOMESTIC_VAT_ID_PREFIX)


def is_non_taxable(invoice: Invoice) -> bool:
    if invoice.client_vat_exempt:
        return True
    reason = (invoice.tax_exemption_reason or "").lower()
    return any(marker in reason for marker in VAT_EXEMPTION_MARKERS)


def compute_vat_simulation(
    invoices: list[Invoice], today: date | None = None, rate_percent: float | None = None
) -> VatSimulation:
    """
    What charging VAT would have meant for this year's invoices.

    Positive invoice amounts of the current year are split into reverse
    charge, explicitly non-taxable and taxable. Rectifications and other
    negative amounts are ignored. Two scenarios are computed on the taxable
    part: adding VAT on top of the net prices, or keeping the gross prices
    and carving the VAT out of them.
    """
    today = today or date.today()
    rate = VAT_RATE_PERCENT if rate_percent is None else rate_percent

    taxable = reverse_charge = non_taxable = 0.0
    for inv in _invoices_for_year(invoices, today.year):
        net = inv.net_total
        if net <= 0:
            continue
        if is_reverse_charge(inv):
            reverse_charge += net
        elif is_non_taxable(inv):
            non_taxable += net
        else:
            taxable += net

    factor = rate / 100
    net_after_vat = taxable / (1 + factor)

    return VatSimulation(
        rate=rate,
        taxable_net_ytd=taxable,
        reverse_charge_net_ytd=reverse_charge,
        non_taxable_net_ytd=non_taxable,
        net_invariant=NetInvariantScenario(vat_due=taxable * factor, gross_increase=taxable * factor),
        gross_invariant=GrossInvariantScenario(
            vat_due=taxable - net_after_vat,
            net_after_vat=net_after_vat,
            revenue_delta=net_after_vat - taxable,
        ),
    )


def compute_small_business_monitor(
    invoices: list[Invoice], today: date | None = None
) -> SmallBusinessMonitor:
    """
    Turnover against the small-business limits.

    Last year's total is checked against SMALL_BUSINESS_PREVIOUS_YEAR_LIMIT and
    this year's run-rate projection against SMALL_BUSINESS_CURRENT_YEAR_LIMIT.
    When the current limit is still ahead, the crossing date is estimated from
    the average revenue per day so far.
    """
    today = today or date.today()

    previous_total = sum(inv.net_total for inv in _invoices_for_year(invoices, today.year - 1))
    current_total = sum(inv.net_total for inv in _invoices_for_year(invoices, today.year))

    day_of_year = today.timetuple().tm_yday
    per_day = current_total / day_of_year
    projection = per_day * DAYS_PER_YEAR
    remaining = SMALL_BUSINESS_CURRENT_YEAR_LIMIT - current_total

    crossing = None
    if per_day > 0 and remaining > 0:
        crossing = today + timedelta(days=math.ceil(remaining / per_day))

    return SmallBusinessMonitor(
        previous_year_total=previous_total,
        current_year_total_ytd=current_total,
        previous_year_exceeded=previous_total > SMALL_BUSINESS_PREVIOUS_YEAR_LIMIT,
        current_year_projection=projection,
        current_year_projection_exceeded=projection > SMALL_BUSINESS_CURRENT_YEAR_LIMIT,
        current_year_threshold_remaining=remaining,
        estimated_crossing_date=crossing,
    )
