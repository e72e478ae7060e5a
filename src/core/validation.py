"""
Time entry validation and invoice integrity checks.
"""

import logging
from collections import Counter

from core.errors import DataIntegrityError
from models.invoices import Invoice, InvoiceStatus
from models.time_entries import TimeEntry
from services.timesheet_parser import normalize_time

logger = logging.getLogger(__name__)


def _to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def validate_time_entries(entries: list[TimeEntry]) -> list[TimeEntry]:
    """
    Validate time entries and populate the error_message field.

    Checks:
    1. Start and end are valid times (or both absent)
    2. End is not before start
    3. Pause does not exceed the worked interval
    4. At most one entry per day
    """
    date_counts = Counter(entry["date"] for entry in entries)

    for entry in entries:
        start = entry.get("start")
        end = entry.get("end")
        pause = entry.get("pause_minutes") or 0
        errors = []

        # Check 1: Times parse
        start_norm = normalize_time(start) if start else None
        end_norm = normalize_time(end) if end else None
        if start and not start_norm:
            errors.append(f"Invalid start time '{start}'")
        if end and not end_norm:
            errors.append(f"Invalid end time '{end}'")
        if bool(start) != bool(end):
            errors.append("Start and end must both be set")

        # Check 2 and 3: Interval is consistent
        if start_norm and end_norm:
            interval = _to_minutes(end_norm) - _to_minutes(start_norm)
            if interval < 0:
                errors.append(f"End {end_norm} is before start {start_norm}")
            elif pause > interval:
                errors.append(f"Pause of {pause} min exceeds worked interval of {interval} min")
        if pause < 0:
            errors.append("Pause cannot be negative")

        # Check 4: One entry per day
        if date_counts[entry["date"]] > 1:
            errors.append(f"Multiple entries for {entry['date']}")

        entry["error_message"] = "; ".join(errors) if errors else None

    return entries


# =============================================================================
# INVOICE INTEGRITY
# =============================================================================


def rectification_conflicts(invoice: Invoice) -> list[str]:
    """
    List the ways an invoice's rectification fields disagree with each other.

    ``status == rectified``, ``is_rectified`` and ``rectified_by`` all describe
    the same state; any one of them set without the others is a conflict.
    """
    conflicts = []
    status_rectified = invoice.status == InvoiceStatus.RECTIFIED
    label = f"Invoice #{invoice.invoice_number}"

    if invoice.is_rectified and not status_rectified:
        status = invoice.status.value if invoice.status else "unset"
        conflicts.append(f"{label} is flagged rectified but has status '{status}'")
    if status_rectified and not invoice.is_rectified:
        conflicts.append(f"{label} has status 'rectified' but is not flagged rectified")
    if invoice.rectified_by is not None and not (invoice.is_rectified or status_rectified):
        conflicts.append(
            f"{label} links to rectification #{invoice.rectified_by} but is not rectified"
        )
    return conflicts


def validate_invoices(invoices: list[Invoice]) -> list[str]:
    """
    Validate invoice records against each other.

    Returns:
        List of error messages (empty if all valid)
    """
    errors = []
    active = [inv for inv in invoices if not inv.is_deleted]
    numbers = {inv.invoice_number for inv in active}

    counts = Counter(inv.invoice_number for inv in active)
    for number, count in sorted(counts.items()):
        if count > 1:
            errors.append(f"Invoice number #{number} is used {count} times")

    for invoice in active:
        errors.extend(rectification_conflicts(invoice))

        if invoice.rectified_by is not None and str(invoice.rectified_by) not in numbers:
            errors.append(
                f"Invoice #{invoice.invoice_number} is rectified by unknown invoice "
                f"#{invoice.rectified_by}"
            )
        if invoice.rectifies and invoice.rectifies not in numbers:
            errors.append(
                f"Invoice #{invoice.invoice_number} rectifies unknown invoice #{invoice.rectifies}"
            )

    return errors


def require_consistent(invoices: list[Invoice]) -> None:
    """Raise DataIntegrityError if any invoice has conflicting rectification fields."""
    conflicts = []
    for invoice in invoices:
        conflicts.extend(rectification_conflicts(invoice))
    if conflicts:
        logger.warning("Found %d rectification conflicts", len(conflicts))
        raise DataIntegrityError("Invoice rectification state is inconsistent", conflicts)
