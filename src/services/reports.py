"""
Excel report generation for timesheets and time/revenue analytics.
"""

import logging
from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.config import (
    INVOICE_HEADERS,
    MAX_COLUMN_WIDTH,
    MIN_COLUMN_WIDTH,
    REVENUE_ROW_LABELS,
    ROI_HEADERS,
    TIME_REPORT_SHEETS,
    TIMESHEET_HEADERS,
    TIMESHEET_SHEET_NAME,
)
from core.dates import day_key, days_in_month
from core.formatting import format_date_display, minutes_to_hhmm
from models.invoices import Invoice
from models.time_entries import CustomerTimeIndex, TimeEntry
from services.invoice_lifecycle import describe_invoice
from services.revenue_metrics import compute_revenue_metrics, per_client_totals
from services.time_analytics import compute_invoice_based_roi, prepare_time_chart_data
from services.time_tracking import calculate_duration_minutes

logger = logging.getLogger(__name__)


def write_header_row(ws, headers: list[str]) -> None:
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)


def autofit_columns(ws) -> None:
    """Size columns to their longest value, within MIN/MAX_COLUMN_WIDTH."""
    for col_idx, column in enumerate(ws.iter_cols(values_only=True), start=1):
        longest = max((len(str(v)) for v in column if v is not None), default=0)
        width = min(MAX_COLUMN_WIDTH, max(MIN_COLUMN_WIDTH, longest + 2))
        ws.column_dimensions[get_column_letter(col_idx)].width = width


# =============================================================================
# TIMESHEET WORKBOOK
# =============================================================================


def write_timesheet_sheet(ws, year: int, month: int, entries: list[TimeEntry]) -> int:
    """
    Write one row per day of the month plus a TOTAL row.

    Days without an entry get an empty row. Returns the total minutes.
    """
    write_header_row(ws, TIMESHEET_HEADERS)
    by_date = {entry["date"]: entry for entry in entries}

    total_minutes = 0
    for day in range(1, days_in_month(year, month) + 1):
        key = day_key(year, month, day)
        entry = by_date.get(key)
        row_idx = day + 1

        if entry is None:
            row_data = [key, "", "", "", "", ""]
        else:
            minutes = calculate_duration_minutes(
                entry.get("start"), entry.get("end"), entry.get("pause_minutes")
            )
            total_minutes += minutes
            row_data = [
                key,
                entry.get("start") or "",
                entry.get("pause_minutes") if entry.get("start") else "",
                entry.get("end") or "",
                minutes_to_hhmm(minutes),
                entry.get("notes") or "",
            ]

        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    total_row = ws.max_row + 1
    ws.cell(row=total_row, column=1, value="TOTAL").font = Font(bold=True)
    ws.cell(row=total_row, column=5, value=minutes_to_hhmm(total_minutes)).font = Font(bold=True)
    return total_minutes


def create_timesheet_workbook(
    customer_name: str, year: int, month: int, entries: list[TimeEntry]
) -> Workbook:
    """Monthly timesheet for one customer."""
    wb = Workbook()
    ws = wb.active
    ws.title = TIMESHEET_SHEET_NAME
    total = write_timesheet_sheet(ws, year, month, entries)
    autofit_columns(ws)
    logger.info(
        "Built timesheet for %s %d-%02d: %s worked",
        customer_name, year, month, minutes_to_hhmm(total) or "nothing",
    )
    return wb


# =============================================================================
# TIME REPORT WORKBOOK
# =============================================================================


def write_hours_sheet(ws, index: list[CustomerTimeIndex], year: int) -> None:
    chart = prepare_time_chart_data(index, "monthly", year)
    write_header_row(ws, ["Month"] + chart.customer_names)
    for row_idx, row in enumerate(chart.rows, start=2):
        ws.cell(row=row_idx, column=1, value=row["label"])
        for col_idx, name in enumerate(chart.customer_names, start=2):
            ws.cell(row=row_idx, column=col_idx, value=row[name])


def write_roi_sheet(ws, index: list[CustomerTimeIndex], invoices: list[Invoice], year: int) -> None:
    write_header_row(ws, ROI_HEADERS)
    items = compute_invoice_based_roi(per_client_totals(invoices, year), index, year)
    for row_idx, item in enumerate(items, start=2):
        row_data = [item.customer_name, item.total_hours, item.revenue, item.roi_per_hour]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)


def write_invoices_sheet(ws, invoices: list[Invoice], today: date) -> None:
    write_header_row(ws, INVOICE_HEADERS)
    ordered = sorted(invoices, key=lambda inv: inv.invoice_number)
    for row_idx, invoice in enumerate(ordered, start=2):
        view = describe_invoice(invoice, today)
        actions = view.valid_actions
        allowed = [
            name
            for name, flag in (
                ("pay", actions.can_mark_paid),
                ("download", actions.can_download),
                ("rectify", actions.can_rectify),
                ("delete", actions.can_delete),
            )
            if flag
        ]
        row_data = [
            invoice.invoice_number,
            format_date_display(invoice.invoice_date) if invoice.invoice_date else "",
            invoice.client,
            invoice.net_total,
            view.display_status,
            ", ".join(allowed),
        ]
        for col_idx, value in enumerate(row_data, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)


def write_revenue_sheet(ws, invoices: list[Invoice], year: int, today: date) -> None:
    metrics = compute_revenue_metrics(invoices, year, today)
    values = [metrics.total_ytd, metrics.projected_annual, metrics.average_monthly]
    ws.cell(row=1, column=1, value=str(year)).font = Font(bold=True)
    for row_idx, (label, value) in enumerate(zip(REVENUE_ROW_LABELS, values), start=2):
        ws.cell(row=row_idx, column=1, value=label)
        ws.cell(row=row_idx, column=2, value=round(value, 2))


def create_time_report_workbook(
    index: list[CustomerTimeIndex],
    year: int,
    invoices: list[Invoice],
    today: date | None = None,
) -> Workbook:
    """
    Create the yearly time and revenue report.

    Sheet 1: monthly hours per customer
    Sheet 2: invoice-based revenue per hour
    Sheet 3: invoices with display status and valid actions
    Sheet 4: revenue metrics
    """
    today = today or date.today()
    active = [inv for inv in invoices if not inv.is_deleted]

    wb = Workbook()
    ws_hours = wb.active
    ws_hours.title = TIME_REPORT_SHEETS["hours"]
    write_hours_sheet(ws_hours, index, year)

    ws_roi = wb.create_sheet(title=TIME_REPORT_SHEETS["roi"])
    write_roi_sheet(ws_roi, index, active, year)

    ws_invoices = wb.create_sheet(title=TIME_REPORT_SHEETS["invoices"])
    write_invoices_sheet(ws_invoices, active, today)

    ws_revenue = wb.create_sheet(title=TIME_REPORT_SHEETS["revenue"])
    write_revenue_sheet(ws_revenue, active, year, today)

    for ws in wb.worksheets:
        autofit_columns(ws)
    return wb


def save_workbook(wb: Workbook, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved Excel report to: {output_path}")
    return output_path
