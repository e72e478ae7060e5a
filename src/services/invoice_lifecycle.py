"""
Invoice lifecycle.

Derives an invoice's lifecycle state, its display status and the actions the
UI may offer for it. Nothing here persists or sends data; edits return updated
copies for the caller to save.

States (see ``models.invoices``):

    Draft | Sent | Unpaid | Paid | Overdue  ->  open, all actions available
    Rectified(by)                           ->  original cancelled by a rectification
    Rectification(of)                       ->  the cancelling invoice itself

The last two are terminal: no payment toggling, no further rectification, no
deletion, and status edits are ignored.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta

from core.config import RECTIFICATION_DUE_DAYS, RECTIFICATION_MARKERS
from core.errors import InvoiceDependencyError, InvoiceStateError
from core.formatting import format_date_display
from core.validation import rectification_conflicts
from models.invoices import (
    TERMINAL_STATES,
    Draft,
    Invoice,
    InvoiceItem,
    InvoiceState,
    InvoiceStatus,
    Overdue,
    Paid,
    Rectification,
    Rectified,
    Sent,
    Unpaid,
)

logger = logging.getLogger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class ValidActions:
    can_mark_paid: bool
    can_download: bool
    can_rectify: bool
    can_delete: bool


@dataclass(frozen=True)
class InvoiceView:
    """What the invoice list shows for one invoice."""

    display_status: str
    valid_actions: ValidActions
    read_only: bool


@dataclass(frozen=True)
class RectificationPair:
    rectification_invoice: Invoice
    corrected_invoice: Invoice
    original_invoice_updated: Invoice


# =============================================================================
# STATE
# =============================================================================


def is_rectification_invoice(invoice: Invoice) -> bool:
    """
    Whether the invoice cancels another invoice.

    Uses the explicit ``rectifies`` link, falling back to the markers of older
    records: a negative total, a negative line item or a Storno note.
    """
    if invoice.rectifies:
        return True
    if invoice.total is not None and invoice.total < 0:
        return True
    if any(item.price < 0 for item in invoice.items):
        return True
    notes = invoice.notes.lower()
    if any(marker in notes for marker in RECTIFICATION_MARKERS):
        return True
    first_item = invoice.items[0].name.lower() if invoice.items else ""
    return RECTIFICATION_MARKERS[0] in first_item


def invoice_state(invoice: Invoice, today: date | None = None) -> InvoiceState:
    """
    Canonical lifecycle state of an invoice.

    ``is_rectified``, ``status == rectified`` and ``rectified_by`` collapse into
    a single Rectified state; disagreement between them is logged.
    """
    if is_rectification_invoice(invoice):
        return Rectification(of=invoice.rectifies)

    if (
        invoice.is_rectified
        or invoice.status == InvoiceStatus.RECTIFIED
        or invoice.rectified_by is not None
    ):
        for conflict in rectification_conflicts(invoice):
            logger.warning(conflict)
        by = str(invoice.rectified_by) if invoice.rectified_by is not None else None
        return Rectified(by=by)

    if invoice.is_paid or invoice.status == InvoiceStatus.PAID:
        return Paid()

    if invoice.status == InvoiceStatus.DRAFT:
        return Draft()
    if invoice.status == InvoiceStatus.SENT:
        return Sent()
    if invoice.status == InvoiceStatus.UNPAID:
        return Unpaid()
    if invoice.status == InvoiceStatus.OVERDUE:
        return Overdue()

    # No stored status: derive it from the due date
    if invoice.due_date and invoice.due_date < (today or date.today()):
        return Overdue()
    return Unpaid()


def is_read_only(invoice: Invoice) -> bool:
    return isinstance(invoice_state(invoice), TERMINAL_STATES)


def _display_status(state: InvoiceState) -> str:
    if isinstance(state, Rectified) and state.by is not None:
        return f"Rectified (by #{state.by})"
    return state.label


def _valid_actions(state: InvoiceState) -> ValidActions:
    terminal = isinstance(state, TERMINAL_STATES)
    return ValidActions(
        can_mark_paid=not terminal,
        can_download=True,
        can_rectify=not terminal,
        can_delete=not terminal,
    )


def get_display_status(invoice: Invoice, today: date | None = None) -> str:
    """
    Status shown in the invoice list.

    The raw status value ("sent", "overdue", "rectification", ...), or
    "Rectified (by #N)" when the invoice links to its rectification.
    """
    return _display_status(invoice_state(invoice, today))


def get_valid_actions(invoice: Invoice, today: date | None = None) -> ValidActions:
    return _valid_actions(invoice_state(invoice, today))


def describe_invoice(invoice: Invoice, today: date | None = None) -> InvoiceView:
    """Display status, valid actions and read-only flag for one invoice."""
    state = invoice_state(invoice, today)
    actions = _valid_actions(state)
    return InvoiceView(
        display_status=_display_status(state),
        valid_actions=actions,
        read_only=not actions.can_rectify,
    )


# =============================================================================
# EDITS
# =============================================================================


def apply_status_edit(invoice: Invoice, status: InvoiceStatus) -> Invoice:
    """
    Return a copy of the invoice with a new status.

    Read-only invoices are returned unchanged. Rectification goes through
    build_rectification_pair, never through a plain status edit.
    """
    if is_read_only(invoice):
        logger.info("Ignoring status edit on read-only invoice #%s", invoice.invoice_number)
        return invoice
    if status == InvoiceStatus.RECTIFIED:
        raise InvoiceStateError(
            f"Invoice #{invoice.invoice_number} can only be rectified with a rectification invoice"
        )
    return invoice.model_copy(update={"status": status, "is_paid": status == InvoiceStatus.PAID})


def toggle_paid(invoice: Invoice) -> Invoice:
    """Flip the paid flag; read-only invoices are returned unchanged."""
    if is_read_only(invoice):
        logger.info("Ignoring payment toggle on read-only invoice #%s", invoice.invoice_number)
        return invoice
    status = InvoiceStatus.UNPAID if invoice.is_paid else InvoiceStatus.PAID
    return apply_status_edit(invoice, status)


def build_rectification_pair(
    original: Invoice,
    rectification_number: str,
    corrected_number: str,
    today: date | None = None,
) -> RectificationPair:
    """
    Cancel an invoice.

    Produces the rectification invoice (all amounts negated), a draft of the
    corrected replacement invoice and the original marked as rectified. The
    two new numbers are reserved by the caller, in sequence.

    Raises:
        InvoiceStateError: If the original is already rectified or is itself
            a rectification
    """
    if is_read_only(original):
        raise InvoiceStateError(
            f"Invoice #{original.invoice_number} is read-only and cannot be rectified"
        )

    today = today or date.today()
    due = today + timedelta(days=RECTIFICATION_DUE_DAYS)
    original_date = format_date_display(original.invoice_date) if original.invoice_date else "n/a"
    reference = f"invoice #{original.invoice_number} dated {original_date}"

    rectification = original.model_copy(
        update={
            "id": str(uuid.uuid4()),
            "invoice_number": rectification_number,
            "invoice_date": today,
            "due_date": due,
            "items": [InvoiceItem(name=f"Rectification of {reference}", quantity=1, price=0)]
            + [item.model_copy(update={"price": -item.price}) for item in original.items],
            "total": -original.net_total,
            "notes": f"Rectification of {reference}. Fully reverses the original invoice.",
            "status": None,
            "is_paid": False,
            "is_rectified": False,
            "rectified_by": None,
            "rectifies": original.invoice_number,
        }
    )

    corrected = original.model_copy(
        update={
            "id": str(uuid.uuid4()),
            "invoice_number": corrected_number,
            "invoice_date": today,
            "due_date": due,
            "notes": (
                f"Corrected invoice replacing invoice #{original.invoice_number} "
                f"(cancelled by #{rectification_number})."
            ),
            "status": InvoiceStatus.DRAFT,
            "is_paid": False,
            "is_rectified": False,
            "rectified_by": None,
            "rectifies": None,
        }
    )

    original_updated = original.model_copy(
        update={
            "is_rectified": True,
            "rectified_by": rectification_number,
            "status": InvoiceStatus.RECTIFIED,
        }
    )

    logger.info(
        "Rectified invoice #%s with #%s, correction drafted as #%s",
        original.invoice_number,
        rectification_number,
        corrected_number,
    )
    return RectificationPair(
        rectification_invoice=rectification,
        corrected_invoice=corrected,
        original_invoice_updated=original_updated,
    )


def ensure_deletable(invoice: Invoice, invoices: list[Invoice]) -> None:
    """
    Guard for repositories before deleting an invoice.

    Raises:
        InvoiceDependencyError: If the invoice is part of a rectification link
    """
    dependents = [
        other.invoice_number
        for other in invoices
        if other.id != invoice.id
        and not other.is_deleted
        and (
            other.rectifies == invoice.invoice_number
            or (other.rectified_by is not None and str(other.rectified_by) == invoice.invoice_number)
        )
    ]
    if dependents or is_read_only(invoice):
        details = [f"Referenced by invoice #{number}" for number in dependents]
        raise InvoiceDependencyError(
            f"Invoice #{invoice.invoice_number} is part of a rectification and cannot be deleted",
            details,
        )
