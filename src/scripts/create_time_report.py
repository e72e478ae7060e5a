#!/usr/bin/env python3
"""
Create the yearly time and revenue report.

Reads a JSON export of time entries and invoices:

    {
        "time_entries": {"Acme": [{"date": "2025-11-03", "start": "09:00", ...}]},
        "invoices": [{"id": "...", "invoice_number": "001", ...}]
    }

Generates an Excel report with four sheets:
- Monthly Hours: hours per customer and month
- ROI: invoiced revenue per tracked hour
- Invoices: display status and valid actions per invoice
- Revenue: YTD, projected annual and average monthly revenue

Usage:
    uv run python src/scripts/create_time_report.py data/export.json --year 2025
"""

import argparse
import json
import logging
import sys
import traceback
from datetime import date
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import LOG_LEVEL, OUTPUT_DIR
from core.errors import ErrorCodes, ErrorResponse, TimeledgerError
from core.repositories import InMemoryInvoiceRepository, InMemoryTimeEntryRepository
from core.validation import validate_invoices
from models.invoices import Invoice
from services.reports import create_time_report_workbook, save_workbook
from services.time_analytics import compute_available_periods
from services.time_tracking import build_time_index

INVOICE_LIST = TypeAdapter(list[Invoice])


def load_export(path: Path) -> tuple[InMemoryTimeEntryRepository, InMemoryInvoiceRepository]:
    """Load the JSON export into in-memory repositories."""
    print(f"Reading input file: {path}")
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    data = json.loads(path.read_text(encoding="utf-8"))
    time_entries = InMemoryTimeEntryRepository(data.get("time_entries", {}))
    invoices = InMemoryInvoiceRepository(INVOICE_LIST.validate_python(data.get("invoices", [])))
    return time_entries, invoices


def main(input_file: Path, year: int | None = None) -> Path:
    """Main entry point for the time report."""
    today = date.today()

    # 1. Load data
    time_entries, invoice_repository = load_export(input_file)
    invoices = invoice_repository.load_invoices()
    print(f"Loaded {len(time_entries.customers())} customer(s), {len(invoices)} invoice(s)")

    # 2. Validate invoices
    errors = validate_invoices(invoices)
    print(f"Invoice problems: {len(errors)}")
    for error in errors:
        print(f"  {error}")

    # 3. Build the time index
    index = build_time_index(time_entries, time_entries.customers())
    periods = compute_available_periods(index)
    if year is None:
        year = periods.years[0] if periods.years else today.year
    print(f"Years with tracked time: {', '.join(map(str, periods.years)) or 'none'}")

    # 4. Generate Excel file
    wb = create_time_report_workbook(index, year, invoices, today)
    output_path = OUTPUT_DIR / "reports" / f"time_report_{year}.xlsx"
    return save_workbook(wb, output_path)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate the yearly time and revenue report")
    parser.add_argument("input_file", type=Path, help="JSON export of entries and invoices")
    parser.add_argument(
        "--year",
        type=int,
        help="Report year. Defaults to the latest year with tracked time.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)

    try:
        main(args.input_file, args.year)
    except TimeledgerError as e:
        print(e.to_response().model_dump_json(indent=2))
        sys.exit(1)
    except ValidationError as e:
        response = ErrorResponse(
            error="Invoice data validation failed",
            code=ErrorCodes.VALIDATION_ERROR,
            details=[f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()],
        )
        print(response.model_dump_json(indent=2))
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        print(
            ErrorResponse(
                error="Internal error", code=ErrorCodes.INTERNAL_ERROR, details=[str(e)]
            ).model_dump_json(indent=2)
        )
        sys.exit(1)
