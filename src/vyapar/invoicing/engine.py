"""Invoice computation engine.

Pure functions over line item lists: every operation returns a new list and
leaves its input untouched. ``InvoiceForm`` wraps them for a single open form.
"""

import random
from datetime import datetime
from decimal import Decimal
from typing import Any

from .catalog import Catalog
from .errors import LineItemIndexError, NoValidItemsError
from .models import InvoiceDraft, InvoiceTotals, LineField, LineItem

INVOICE_PREFIX = "INV"


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _check_index(items: list[LineItem], index: int) -> None:
    if not 0 <= index < len(items):
        raise LineItemIndexError(index, len(items))


def new_line_item() -> LineItem:
    """A blank row: quantity 1, no price."""
    return LineItem()


def add_line_item(items: list[LineItem]) -> list[LineItem]:
    """Append a blank row."""
    return [*items, new_line_item()]


def remove_line_item(items: list[LineItem], index: int) -> list[LineItem]:
    """Remove the row at ``index``.

    The last remaining row is never removed; the list comes back unchanged.

    Raises:
        LineItemIndexError: If index is out of range
    """
    _check_index(items, index)
    if len(items) <= 1:
        return list(items)
    return [item for i, item in enumerate(items) if i != index]


def set_line_field(
    items: list[LineItem],
    index: int,
    field: LineField | str,
    value: Any,
    catalog: Catalog | None = None
) -> list[LineItem]:
    """Set one field of one row and recompute that row's total.

    Choosing a known catalog entry also copies its description and unit
    price into the row. An unknown reference is stored as-is and the
    derived fields keep their previous values.

    Args:
        items: Current rows
        index: Row to edit
        field: Field to set
        value: New value
        catalog: Catalog used to resolve ``catalog_ref``

    Returns:
        New list with only the edited row replaced

    Raises:
        LineItemIndexError: If index is out of range
        ValueError: If field is unknown or the value fails validation
    """
    _check_index(items, index)
    field = LineField(field)

    data = items[index].model_dump()
    data[field.value] = value
    row = LineItem.model_validate(data)

    # line_total is derived from the validated row, never from the raw value
    if field == LineField.CATALOG_REF and row.catalog_ref and catalog is not None:
        entry = catalog.lookup(row.catalog_ref)
        if entry is not None:
            row = row.model_copy(update={
                "description": entry.description,
                "unit_price": entry.unit_price,
                "line_total": entry.unit_price * row.quantity,
            })
    elif field in (LineField.QUANTITY, LineField.UNIT_PRICE):
        row = row.model_copy(update={"line_total": row.unit_price * row.quantity})

    updated = list(items)
    updated[index] = row
    return updated


def compute_totals(
    items: list[LineItem],
    tax_rate: Decimal | float | int = 0,
    discount_amount: Decimal | float | int = 0
) -> InvoiceTotals:
    """Derive subtotal, tax and grand total from the rows.

    Args:
        items: Rows to sum
        tax_rate: Tax percentage, 0-100
        discount_amount: Flat discount subtracted after tax

    Returns:
        InvoiceTotals; grand_total may be negative
    """
    rate = _to_decimal(tax_rate)
    discount = _to_decimal(discount_amount)

    subtotal = sum((item.line_total for item in items), Decimal("0"))
    tax_amount = subtotal * rate / 100

    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=rate,
        tax_amount=tax_amount,
        discount_amount=discount,
        grand_total=subtotal + tax_amount - discount,
    )


def generate_invoice_number(
    now: datetime | None = None,
    rng: random.Random | None = None,
    prefix: str = INVOICE_PREFIX
) -> str:
    """Generate an invoice number like ``INV-2610-042``.

    Two-digit year and month followed by a random three-digit suffix. The
    generator does not check for collisions; the store's unique constraint on
    ``invoice_number`` does.
    """
    now = now or datetime.now()
    draw = (rng or random).randrange(1000)
    return f"{prefix}-{now:%y%m}-{draw:03d}"


def valid_line_items(items: list[LineItem]) -> list[LineItem]:
    """Rows worth persisting: non-empty description and positive quantity."""
    return [item for item in items if item.description and item.quantity > 0]


def require_valid_items(items: list[LineItem]) -> list[LineItem]:
    """Like valid_line_items, but refuses an empty result.

    Raises:
        NoValidItemsError: If no row survives filtering
    """
    valid = valid_line_items(items)
    if not valid:
        raise NoValidItemsError()
    return valid


class InvoiceForm:
    """State of one open invoice form.

    Owns a draft and the catalog used for item pickers. Totals are computed
    on every read so they never drift from the rows.
    """

    def __init__(self, catalog: Catalog | None = None, draft: InvoiceDraft | None = None):
        self.catalog = catalog
        self.draft = draft or InvoiceDraft()

    @property
    def line_items(self) -> list[LineItem]:
        return list(self.draft.line_items)

    @property
    def totals(self) -> InvoiceTotals:
        return compute_totals(
            self.draft.line_items,
            self.draft.tax_rate,
            self.draft.discount_amount,
        )

    def add_line_item(self) -> None:
        self.draft.line_items = add_line_item(self.draft.line_items)

    def remove_line_item(self, index: int) -> None:
        self.draft.line_items = remove_line_item(self.draft.line_items, index)

    def set_line_field(self, index: int, field: LineField | str, value: Any) -> None:
        self.draft.line_items = set_line_field(
            self.draft.line_items, index, field, value, self.catalog
        )

    def valid_items(self) -> list[LineItem]:
        return require_valid_items(self.draft.line_items)

    def reset(self) -> None:
        """Back to a blank draft (18% tax, no discount, one empty row)."""
        self.draft = InvoiceDraft()
