"""Persisting invoices through the data store."""

import random
from datetime import datetime
from typing import Any

from ..store import DataStore, DuplicateRecordError, eq
from .engine import compute_totals, generate_invoice_number, require_valid_items
from .models import InvoiceDraft, InvoiceStatus

# Fresh invoice numbers tried before giving up on a collision streak
MAX_NUMBER_ATTEMPTS = 5


def search_invoices(invoices: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """Filter invoices by number or customer name, case-insensitively."""
    needle = query.lower()
    return [
        invoice for invoice in invoices
        if needle in invoice["invoice_number"].lower()
        or needle in (invoice.get("customer_name") or "").lower()
    ]


class InvoiceService:
    """Creates, lists and updates invoices for one user."""

    def __init__(self, store: DataStore, user_id: str | None = None):
        self._store = store
        self._user_id = user_id
        self._debug_callback: Any | None = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "invoices", message)

    async def create_invoice(
        self,
        draft: InvoiceDraft,
        now: datetime | None = None,
        rng: random.Random | None = None
    ) -> dict[str, Any]:
        """Persist a draft as a new invoice plus its item rows.

        Rows without a description or with a zero quantity are dropped.
        Totals are computed over all rows of the draft, as displayed.

        Returns:
            The stored invoice record

        Raises:
            NoValidItemsError: If no row is worth persisting
            DuplicateRecordError: If every generated number collided
        """
        items = require_valid_items(draft.line_items)
        totals = compute_totals(draft.line_items, draft.tax_rate, draft.discount_amount)

        record = {
            "user_id": self._user_id,
            "customer_id": draft.customer_id or None,
            "issue_date": draft.issue_date,
            "due_date": draft.due_date,
            "subtotal": totals.subtotal,
            "tax_rate": totals.tax_rate,
            "tax_amount": totals.tax_amount,
            "discount_amount": totals.discount_amount,
            "total_amount": totals.grand_total,
            "notes": draft.notes or None,
            "status": InvoiceStatus.DRAFT.value,
        }

        invoice = None
        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            number = generate_invoice_number(now, rng)
            try:
                invoice = await self._store.insert("invoices", {**record, "invoice_number": number})
                break
            except DuplicateRecordError:
                self._debug("warning", f"Invoice number {number} taken (attempt {attempt})")
                if attempt == MAX_NUMBER_ATTEMPTS:
                    raise

        await self._store.insert_many(
            "invoice_items",
            [
                {
                    "invoice_id": invoice["id"],
                    "inventory_id": item.catalog_ref or None,
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "total_price": item.line_total,
                }
                for item in items
            ],
        )

        self._debug("info", f"Created invoice {invoice['invoice_number']} with {len(items)} item(s)")
        return invoice

    async def list_invoices(self) -> list[dict[str, Any]]:
        """All invoices, newest first, with ``customer_name`` attached."""
        invoices = await self._store.select("invoices", order_by="created_at", descending=True)
        customers = await self._store.select("customers")
        names = {customer["id"]: customer["name"] for customer in customers}

        for invoice in invoices:
            invoice["customer_name"] = names.get(invoice.get("customer_id"))
        return invoices

    async def get_items(self, invoice_id: str) -> list[dict[str, Any]]:
        """Item rows of one invoice."""
        return await self._store.select("invoice_items", [eq("invoice_id", invoice_id)])

    async def update_status(
        self,
        invoice_id: str,
        status: InvoiceStatus | str
    ) -> dict[str, Any] | None:
        """Move an invoice to another status.

        Raises:
            ValueError: If status is not a known invoice status
        """
        status = InvoiceStatus(status)
        updated = await self._store.update("invoices", invoice_id, {"status": status.value})
        if updated is not None:
            self._debug("info", f"Invoice {invoice_id} marked as {status.value}")
        return updated

    async def delete_invoice(self, invoice_id: str) -> bool:
        """Delete an invoice; its item rows go with it."""
        for item in await self._store.select("invoice_items", [eq("invoice_id", invoice_id)]):
            await self._store.delete("invoice_items", item["id"])
        return await self._store.delete("invoices", invoice_id)
