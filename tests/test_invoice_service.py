"""Unit tests for InvoiceService against the in-memory store."""
from datetime import date, datetime
from decimal import Decimal

import pytest

from vyapar.invoicing import (
    MAX_NUMBER_ATTEMPTS,
    InvoiceDraft,
    InvoiceService,
    InvoiceStatus,
    LineItem,
    NoValidItemsError,
    search_invoices,
)
from vyapar.store import DuplicateRecordError

NOW = datetime(2026, 10, 18, 12, 0)


class ScriptedRandom:
    """Stand-in for random.Random that replays fixed draws."""

    def __init__(self, *draws: int):
        self._draws = list(draws)

    def randrange(self, stop: int) -> int:
        return self._draws.pop(0) if len(self._draws) > 1 else self._draws[0]


def _draft(**kwargs) -> InvoiceDraft:
    return InvoiceDraft(
        issue_date=date(2026, 10, 18),
        line_items=[
            LineItem(description="Rice", quantity=2, unit_price=Decimal("100"), line_total=Decimal("200")),
            LineItem(description="Dal", quantity=1, unit_price=Decimal("50"), line_total=Decimal("50")),
            LineItem(),
        ],
        **kwargs,
    )


class TestInvoiceService:
    """Tests for creating and managing invoices."""

    @pytest.mark.asyncio
    async def test_create_invoice(self, store):
        """Test that the invoice and its valid rows are stored."""
        service = InvoiceService(store, user_id="user-1")

        invoice = await service.create_invoice(
            _draft(discount_amount=Decimal("10")), NOW, ScriptedRandom(42)
        )

        assert invoice["invoice_number"] == "INV-2610-042"
        assert invoice["status"] == "draft"
        assert invoice["user_id"] == "user-1"
        assert invoice["subtotal"] == Decimal("250")
        assert invoice["tax_amount"] == Decimal("45")
        assert invoice["total_amount"] == Decimal("285")

        items = await service.get_items(invoice["id"])
        assert sorted(i["description"] for i in items) == ["Dal", "Rice"]
        assert all(i["invoice_id"] == invoice["id"] for i in items)

    @pytest.mark.asyncio
    async def test_create_without_valid_items(self, store):
        """Test that a blank form is refused before anything is written."""
        service = InvoiceService(store)

        with pytest.raises(NoValidItemsError):
            await service.create_invoice(InvoiceDraft(), NOW)

        assert await store.count("invoices") == 0

    @pytest.mark.asyncio
    async def test_number_collision_retried(self, store):
        """Test that a taken number is replaced by a fresh draw."""
        await store.insert("invoices", {"invoice_number": "INV-2610-001"})
        events = []
        service = InvoiceService(store)
        service.set_debug_callback(lambda *args: events.append(args))

        invoice = await service.create_invoice(_draft(), NOW, ScriptedRandom(1, 2))

        assert invoice["invoice_number"] == "INV-2610-002"
        assert events[0][0:2] == ("warning", "invoices")

    @pytest.mark.asyncio
    async def test_number_collision_gives_up(self, store):
        """Test that a persistent collision surfaces DuplicateRecordError."""
        await store.insert("invoices", {"invoice_number": "INV-2610-001"})
        events = []
        service = InvoiceService(store)
        service.set_debug_callback(lambda *args: events.append(args))

        with pytest.raises(DuplicateRecordError):
            await service.create_invoice(_draft(), NOW, ScriptedRandom(1))

        assert len(events) == MAX_NUMBER_ATTEMPTS
        assert await store.count("invoice_items") == 0

    @pytest.mark.asyncio
    async def test_list_invoices_newest_first(self, store):
        """Test ordering and customer name lookup."""
        customer = await store.insert("customers", {"name": "Asha Traders"})
        service = InvoiceService(store)
        await store.insert("invoices", {
            "invoice_number": "INV-2609-001", "created_at": datetime(2026, 9, 1),
            "customer_id": customer["id"],
        })
        await store.insert("invoices", {
            "invoice_number": "INV-2610-001", "created_at": datetime(2026, 10, 1),
        })

        invoices = await service.list_invoices()

        assert [i["invoice_number"] for i in invoices] == ["INV-2610-001", "INV-2609-001"]
        assert invoices[1]["customer_name"] == "Asha Traders"
        assert invoices[0]["customer_name"] is None

    @pytest.mark.asyncio
    async def test_update_status(self, store):
        """Test moving an invoice through its lifecycle."""
        service = InvoiceService(store)
        invoice = await service.create_invoice(_draft(), NOW, ScriptedRandom(5))

        updated = await service.update_status(invoice["id"], "paid")
        assert updated["status"] == InvoiceStatus.PAID.value

        with pytest.raises(ValueError):
            await service.update_status(invoice["id"], "refunded")

        assert await service.update_status("missing", InvoiceStatus.SENT) is None

    @pytest.mark.asyncio
    async def test_delete_invoice_removes_items(self, store):
        """Test that deleting an invoice deletes its rows."""
        service = InvoiceService(store)
        invoice = await service.create_invoice(_draft(), NOW, ScriptedRandom(5))

        assert await service.delete_invoice(invoice["id"]) is True
        assert await store.count("invoice_items") == 0
        assert await store.count("invoices") == 0


class TestSearchInvoices:
    """Tests for search_invoices."""

    def test_matches_number_or_customer(self):
        """Test case-insensitive search over number and customer."""
        invoices = [
            {"invoice_number": "INV-2610-001", "customer_name": "Asha Traders"},
            {"invoice_number": "INV-2610-002", "customer_name": None},
        ]

        assert len(search_invoices(invoices, "inv-2610")) == 2
        assert [i["invoice_number"] for i in search_invoices(invoices, "asha")] == ["INV-2610-001"]
        assert search_invoices(invoices, "") == invoices
