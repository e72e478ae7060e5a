"""
Invoice models and the invoice lifecycle state variants.

Invoices are owned by the invoice repository. Records may use the camelCase
keys of the stored documents (``isRectified``, ``rectifiedBy``, ``isDeleted``);
both spellings are accepted.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"
    RECTIFIED = "rectified"


class InvoiceItem(BaseModel):
    name: str = ""
    quantity: float = 1
    price: float = 0
    description: str | None = None


class CustomerRef(BaseModel):
    id: str | None = None
    name: str = ""


class Invoice(BaseModel):
    """Persisted invoice as handed over by the repository."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    invoice_number: str
    status: InvoiceStatus | None = None
    is_paid: bool = False
    is_rectified: bool = Field(False, alias="isRectified")
    rectified_by: str | int | None = Field(None, alias="rectifiedBy")
    # Number of the original invoice this one cancels
    rectifies: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    total: float | None = None
    items: list[InvoiceItem] = []
    notes: str = ""
    customer: CustomerRef | None = None
    client_name: str | None = None
    client_vat_id: str | None = None
    client_vat_exempt: bool = False
    tax_exemption_reason: str | None = None
    is_deleted: bool = Field(False, alias="isDeleted")

    @property
    def net_total(self) -> float:
        """Stored total, or the sum of the line items when no total is stored."""
        if self.total is not None:
            return self.total
        return sum(item.quantity * item.price for item in self.items)

    @property
    def client(self) -> str:
        if self.customer and self.customer.name:
            return self.customer.name
        return self.client_name or "Unknown"


# =============================================================================
# LIFECYCLE STATES
# =============================================================================


@dataclass(frozen=True)
class Draft:
    label = "draft"


@dataclass(frozen=True)
class Sent:
    label = "sent"


@dataclass(frozen=True)
class Unpaid:
    label = "unpaid"


@dataclass(frozen=True)
class Paid:
    label = "paid"


@dataclass(frozen=True)
class Overdue:
    label = "overdue"


@dataclass(frozen=True)
class Rectified:
    """Original invoice cancelled by a rectification invoice."""

    by: str | None = None
    label = "rectified"


@dataclass(frozen=True)
class Rectification:
    """Invoice whose only purpose is to cancel another invoice."""

    of: str | None = None
    label = "rectification"


InvoiceState = Draft | Sent | Unpaid | Paid | Overdue | Rectified | Rectification

TERMINAL_STATES = (Rectified, Rectification)
