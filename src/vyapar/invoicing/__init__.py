"""Invoice composition, totals and persistence."""

from .catalog import Catalog, InMemoryCatalog
from .engine import (
    InvoiceForm,
    add_line_item,
    compute_totals,
    generate_invoice_number,
    new_line_item,
    remove_line_item,
    require_valid_items,
    set_line_field,
    valid_line_items,
)
from .errors import InvoiceError, LineItemIndexError, NoValidItemsError
from .models import (
    CatalogEntry,
    InvoiceDraft,
    InvoiceStatus,
    InvoiceTotals,
    LineField,
    LineItem,
)
from .service import MAX_NUMBER_ATTEMPTS, InvoiceService, search_invoices

__all__ = [
    "MAX_NUMBER_ATTEMPTS",
    "Catalog",
    "CatalogEntry",
    "InMemoryCatalog",
    "InvoiceDraft",
    "InvoiceError",
    "InvoiceForm",
    "InvoiceService",
    "InvoiceStatus",
    "InvoiceTotals",
    "LineField",
    "LineItem",
    "LineItemIndexError",
    "NoValidItemsError",
    "add_line_item",
    "compute_totals",
    "generate_invoice_number",
    "new_line_item",
    "remove_line_item",
    "require_valid_items",
    "search_invoices",
    "set_line_field",
    "valid_line_items",
]
