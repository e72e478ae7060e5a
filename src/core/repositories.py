"""
Repository boundaries for time entries and invoices.

Storage lives outside this package. The protocols below are the only calls the
domain code makes; the in-memory adapters back the CLI scripts and the tests.
"""

import copy
from typing import Protocol

from core.errors import NotFoundError
from models.invoices import Invoice
from models.time_entries import TimeEntry
from services.invoice_lifecycle import ensure_deletable


class TimeEntryRepository(Protocol):
    def load_time_entries(self, customer: str) -> list[TimeEntry]: ...

    def upsert_entry(self, customer: str, entry: TimeEntry) -> None: ...

    def delete_entry(self, customer: str, entry_date: str) -> None: ...


class InvoiceRepository(Protocol):
    def load_invoices(self) -> list[Invoice]: ...

    def delete_invoice(self, invoice_id: str) -> None: ...


class InMemoryTimeEntryRepository:
    """Time entries per customer, one entry per date."""

    def __init__(self, entries: dict[str, list[TimeEntry]] | None = None):
        self._entries: dict[str, dict[str, TimeEntry]] = {}
        for customer, customer_entries in (entries or {}).items():
            for entry in customer_entries:
                self.upsert_entry(customer, entry)

    def customers(self) -> list[str]:
        return list(self._entries)

    def load_time_entries(self, customer: str) -> list[TimeEntry]:
        """Return copies of the customer's entries, sorted by date."""
        by_date = self._entries.get(customer, {})
        return [copy.deepcopy(by_date[d]) for d in sorted(by_date)]

    def upsert_entry(self, customer: str, entry: TimeEntry) -> None:
        self._entries.setdefault(customer, {})[entry["date"]] = copy.deepcopy(entry)

    def delete_entry(self, customer: str, entry_date: str) -> None:
        """Remove the entry for the date; missing entries are ignored."""
        self._entries.get(customer, {}).pop(entry_date, None)


class InMemoryInvoiceRepository:
    """Invoices keyed by id. Deletion is a soft delete, as in the invoice store."""

    def __init__(self, invoices: list[Invoice] | None = None):
        self._invoices: dict[str, Invoice] = {inv.id: inv for inv in invoices or []}

    def load_invoices(self) -> list[Invoice]:
        return [inv for inv in self._invoices.values() if not inv.is_deleted]

    def get_invoice(self, invoice_id: str) -> Invoice:
        try:
            return self._invoices[invoice_id]
        except KeyError:
            raise NotFoundError(f"Invoice '{invoice_id}' not found") from None

    def save_invoice(self, invoice: Invoice) -> Invoice:
        self._invoices[invoice.id] = invoice
        return invoice

    def delete_invoice(self, invoice_id: str) -> None:
        """
        Soft-delete an invoice.

        Raises:
            NotFoundError: If the id is unknown
            InvoiceDependencyError: If a rectification link references the invoice
        """
        invoice = self.get_invoice(invoice_id)
        ensure_deletable(invoice, self.load_invoices())
        self._invoices[invoice_id] = invoice.model_copy(update={"is_deleted": True})
