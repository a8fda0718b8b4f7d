"""Data models for invoices and their line items.

Money is carried as Decimal end to end; nothing here rounds.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InvoiceStatus(str, Enum):
    """Lifecycle state of a persisted invoice."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class LineField(str, Enum):
    """Editable fields of a line item."""

    CATALOG_REF = "catalog_ref"
    DESCRIPTION = "description"
    QUANTITY = "quantity"
    UNIT_PRICE = "unit_price"


class CatalogEntry(BaseModel):
    """A sellable item as seen by the invoice form."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    unit_price: Decimal = Field(ge=0)


class LineItem(BaseModel):
    """One invoice row.

    ``line_total`` always equals ``quantity * unit_price`` once an edit has
    gone through ``set_line_field``.
    """

    model_config = ConfigDict(frozen=True)

    catalog_ref: str | None = Field(default=None, description="Inventory item id")
    description: str = ""
    quantity: int = Field(default=1, ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    line_total: Decimal = Field(default=Decimal("0"), ge=0)


class InvoiceTotals(BaseModel):
    """Aggregates derived from the line items.

    ``grand_total`` is not floored: a discount larger than subtotal plus tax
    yields a negative total.
    """

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax_rate: Decimal = Field(ge=0, le=100)
    tax_amount: Decimal
    discount_amount: Decimal = Field(ge=0)
    grand_total: Decimal


class InvoiceDraft(BaseModel):
    """State of an invoice being composed, before it is persisted."""

    model_config = ConfigDict(validate_assignment=True)

    customer_id: str | None = None
    issue_date: date = Field(default_factory=date.today)
    due_date: date | None = None
    tax_rate: Decimal = Field(default=Decimal("18"), ge=0, le=100)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None
    line_items: list[LineItem] = Field(default_factory=lambda: [LineItem()])
