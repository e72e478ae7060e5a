"""Tests for the in-memory repository adapters."""

import pytest

from core.errors import InvoiceDependencyError, NotFoundError
from core.repositories import InMemoryInvoiceRepository, InMemoryTimeEntryRepository
from services.invoice_lifecycle import build_rectification_pair


def test_time_entries_are_sorted_and_copied(sample_entry):
    repository = InMemoryTimeEntryRepository(
        {"Acme": [{**sample_entry, "date": "2024-03-09"}, sample_entry]}
    )

    entries = repository.load_time_entries("Acme")
    entries[0]["notes"] = "mutated"

    assert [e["date"] for e in entries] == ["2024-03-04", "2024-03-09"]
    assert repository.load_time_entries("Acme")[0]["notes"] == "Workshop"
    assert repository.customers() == ["Acme"]


def test_delete_missing_entry_is_ignored(sample_entry):
    repository = InMemoryTimeEntryRepository({"Acme": [sample_entry]})
    repository.delete_entry("Acme", "2024-03-05")
    repository.delete_entry("Globex", "2024-03-04")
    assert len(repository.load_time_entries("Acme")) == 1
    assert repository.load_time_entries("Globex") == []


def test_delete_invoice_soft_deletes(sample_invoices):
    repository = InMemoryInvoiceRepository(sample_invoices)

    repository.delete_invoice("inv-3")

    assert "inv-3" not in {inv.id for inv in repository.load_invoices()}
    assert repository.get_invoice("inv-3").is_deleted


def test_delete_unknown_invoice(sample_invoices):
    with pytest.raises(NotFoundError):
        InMemoryInvoiceRepository(sample_invoices).delete_invoice("missing")


def test_delete_rejects_rectification_links(sample_invoice, today):
    pair = build_rectification_pair(sample_invoice, "005", "006", today)
    repository = InMemoryInvoiceRepository(
        [pair.original_invoice_updated, pair.rectification_invoice, pair.corrected_invoice]
    )

    with pytest.raises(InvoiceDependencyError):
        repository.delete_invoice(sample_invoice.id)
    with pytest.raises(InvoiceDependencyError):
        repository.delete_invoice(pair.rectification_invoice.id)

    repository.delete_invoice(pair.corrected_invoice.id)
    assert len(repository.load_invoices()) == 2
