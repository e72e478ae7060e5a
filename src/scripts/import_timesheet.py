#!/usr/bin/env python3
"""
Import pasted time-sheet text for one customer and month.

Each line of the text file is one day, starting at --start-day. Empty lines
clear the day. Writes the resulting monthly timesheet as an Excel workbook.

Usage:
    uv run python src/scripts/import_timesheet.py --customer "Acme" --month 2025-11 pasted.txt
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import LOG_LEVEL, OUTPUT_DIR
from core.dates import get_monthly_date_range
from core.errors import ErrorCodes, ErrorResponse, TimeledgerError
from core.repositories import InMemoryTimeEntryRepository
from core.validation import validate_time_entries
from services.reports import create_timesheet_workbook, save_workbook
from services.time_tracking import apply_bulk_results
from services.timesheet_parser import parse_bulk_time_text


def load_existing_entries(path: Path | None, customer: str) -> InMemoryTimeEntryRepository:
    """Seed the repository from a JSON list of entries, if given."""
    if path is None:
        return InMemoryTimeEntryRepository()
    entries = json.loads(path.read_text(encoding="utf-8"))
    return InMemoryTimeEntryRepository({customer: entries})


def main(
    text_file: Path,
    customer: str,
    month_str: str | None = None,
    start_day: int = 1,
    existing: Path | None = None,
) -> Path:
    """Main entry point for the timesheet import."""
    # 1. Resolve the target month (defaults to the current billing period)
    first_of_month, _ = get_monthly_date_range(month_str)
    year, month = first_of_month.year, first_of_month.month
    print(f"Importing timesheet for {customer}, {year}-{month:02d}")

    # 2. Parse the pasted text
    raw_text = text_file.read_text(encoding="utf-8")
    results = parse_bulk_time_text(raw_text, year, month, start_day)
    for result in results:
        parsed = result.parsed
        if parsed.is_empty:
            print(f"  {result.date}  (cleared)")
        else:
            print(
                f"  {result.date}  {parsed.start or '--:--'}-{parsed.end or '--:--'}"
                f"  pause {parsed.pause_minutes} min  {parsed.notes}"
            )

    # 3. Apply to the entries
    repository = load_existing_entries(existing, customer)
    upserted, deleted = apply_bulk_results(repository, customer, results)
    print(f"\n{upserted} day(s) updated, {deleted} day(s) cleared")

    # 4. Validate
    entries = validate_time_entries(repository.load_time_entries(customer))
    problems = [e for e in entries if e.get("error_message")]
    for entry in problems:
        print(f"  Warning {entry['date']}: {entry['error_message']}")

    # 5. Write the timesheet workbook
    wb = create_timesheet_workbook(customer, year, month, entries)
    safe_name = "".join(c if c.isalnum() else "_" for c in customer).lower()
    output_path = OUTPUT_DIR / "timesheets" / safe_name / f"{safe_name}_{year}_{month:02d}.xlsx"
    return save_workbook(wb, output_path)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import pasted time-sheet text")
    parser.add_argument("text_file", type=Path, help="Text file with one line per day")
    parser.add_argument("--customer", required=True, help="Customer name")
    parser.add_argument(
        "--month",
        help="Target month (YYYY-MM). Defaults to the current billing period.",
    )
    parser.add_argument("--start-day", type=int, default=1, help="Day the first line maps to")
    parser.add_argument("--existing", type=Path, help="JSON file with the month's current entries")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)

    try:
        main(args.text_file, args.customer, args.month, args.start_day, args.existing)
    except (TimeledgerError, ValueError, FileNotFoundError) as e:
        if isinstance(e, TimeledgerError):
            response = e.to_response()
        else:
            response = ErrorResponse(error=str(e), code=ErrorCodes.INVALID_REQUEST)
        print(response.model_dump_json(indent=2))
        sys.exit(1)
