"""
Pytest configuration and shared fixtures.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models.invoices import Invoice, InvoiceStatus  # noqa: E402
from models.time_entries import CustomerTimeIndex  # noqa: E402


@pytest.fixture
def today():
    """Fixed 'today' so date-dependent results are deterministic."""
    return date(2024, 6, 15)


@pytest.fixture
def sample_entry():
    """Sample time entry dictionary for testing."""
    return {
        "date": "2024-03-04",
        "start": "09:00",
        "end": "17:30",
        "pause_minutes": 30,
        "notes": "Workshop",
    }


@pytest.fixture
def sample_index():
    """Two customers with minutes across 2023 and 2024."""
    return [
        CustomerTimeIndex(
            customer_name="Acme",
            per_day_minutes={"2024-01-10": 120, "2024-01-11": 90, "2024-02-01": 60},
            per_month_minutes={"2024-01": 210, "2024-02": 60},
        ),
        CustomerTimeIndex(
            customer_name="Globex",
            per_day_minutes={"2023-12-05": 300, "2024-02-29": 45},
            per_month_minutes={"2023-12": 300, "2024-02": 45},
        ),
    ]


@pytest.fixture
def sample_invoice():
    """Open invoice with two line items."""
    return Invoice(
        id="inv-1",
        invoice_number="001",
        status="sent",
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 15),
        total=1000.0,
        items=[
            {"name": "Consulting", "quantity": 8, "price": 100.0},
            {"name": "Travel", "quantity": 1, "price": 200.0},
        ],
        customer={"id": "c-1", "name": "Acme"},
    )


@pytest.fixture
def sample_invoices(sample_invoice):
    """Invoices across two clients and two years."""
    return [
        sample_invoice,
        sample_invoice.model_copy(
            update={"id": "inv-2", "invoice_number": "002", "invoice_date": date(2024, 5, 10),
                    "total": 500.0, "is_paid": True, "status": InvoiceStatus.PAID}
        ),
        Invoice(
            id="inv-3", invoice_number="003", invoice_date=date(2024, 4, 2), total=300.0,
            client_name="Globex",
        ),
        Invoice(
            id="inv-4", invoice_number="004", invoice_date=date(2023, 11, 20), total=1200.0,
            client_name="Globex", is_paid=True,
        ),
    ]
