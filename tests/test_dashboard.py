"""Unit tests for dashboard rollups and listing helpers."""
from datetime import date, datetime
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vyapar.dashboard import (
    DashboardService,
    StatusCount,
    compute_dashboard_stats,
    count_low_stock,
    monthly_revenue,
    search_customers,
    search_inventory,
    status_distribution,
    stock_status,
    total_revenue,
)

NOW = datetime(2026, 10, 18)

INVOICES = [
    {"status": "paid", "total_amount": Decimal("100"), "issue_date": date(2026, 10, 2),
     "created_at": datetime(2026, 10, 2)},
    {"status": "paid", "total_amount": Decimal("50"), "issue_date": date(2026, 5, 1),
     "created_at": datetime(2026, 5, 1)},
    {"status": "paid", "total_amount": Decimal("70"), "issue_date": date(2026, 4, 30),
     "created_at": datetime(2026, 4, 30)},
    {"status": "paid", "total_amount": Decimal("30"), "issue_date": None,
     "created_at": datetime(2026, 9, 10)},
    {"status": "sent", "total_amount": Decimal("999"), "issue_date": date(2026, 10, 5),
     "created_at": datetime(2026, 10, 5)},
    {"status": "overdue", "total_amount": Decimal("20"), "issue_date": date(2026, 8, 5),
     "created_at": datetime(2026, 8, 5)},
    {"status": "cancelled", "total_amount": Decimal("5"), "issue_date": date(2026, 7, 5),
     "created_at": datetime(2026, 7, 5)},
]


class TestStats:
    """Tests for the pure rollup functions."""

    def test_total_revenue_counts_paid_only(self):
        """Test that only paid invoices contribute revenue."""
        assert total_revenue(INVOICES) == Decimal("250")

    def test_status_distribution(self):
        """Test chart buckets: capitalised, fixed order, empty ones dropped."""
        assert status_distribution(INVOICES) == [
            StatusCount(name="Paid", value=4),
            StatusCount(name="Sent", value=1),
            StatusCount(name="Overdue", value=1),
        ]

    def test_monthly_revenue(self):
        """Test six month buckets ending at the reference month."""
        months = monthly_revenue(INVOICES, NOW)

        assert [(m.month, m.year) for m in months] == [
            ("May", 2026), ("Jun", 2026), ("Jul", 2026),
            ("Aug", 2026), ("Sep", 2026), ("Oct", 2026),
        ]
        assert [m.revenue for m in months] == [
            Decimal("50"), 0, 0, 0, Decimal("30"), Decimal("100"),
        ]

    def test_monthly_revenue_across_year_end(self):
        """Test that the window wraps into the previous year."""
        months = monthly_revenue([], date(2027, 2, 1), months=4)

        assert [(m.month, m.year) for m in months] == [
            ("Nov", 2026), ("Dec", 2026), ("Jan", 2027), ("Feb", 2027),
        ]

    def test_compute_dashboard_stats(self):
        """Test the headline numbers."""
        stats = compute_dashboard_stats(INVOICES, customer_count=3, low_stock_count=2, now=NOW)

        assert stats.total_revenue == Decimal("250")
        assert stats.total_customers == 3
        assert stats.total_invoices == 7
        assert stats.pending_invoices == 2
        assert stats.low_stock_items == 2
        assert len(stats.recent_invoices) == 5
        assert stats.recent_invoices[0]["created_at"] == datetime(2026, 10, 5)

    def test_empty(self):
        """Test a brand new business."""
        stats = compute_dashboard_stats([], 0, 0, NOW)

        assert stats.total_revenue == 0
        assert stats.invoice_status == []
        assert len(stats.monthly_revenue) == 6

    @given(st.lists(st.integers(min_value=0, max_value=100), max_size=30))
    def test_count_low_stock(self, quantities):
        """Property test: low stock means fewer than ten units."""
        items = [{"quantity": q} for q in quantities]

        assert count_low_stock(items) == len([q for q in quantities if q < 10])


class TestInventoryHelpers:
    """Tests for stock badges and search."""

    @pytest.mark.parametrize("quantity,threshold,expected", [
        (0, 10, "Out of Stock"),
        (5, 10, "Low Stock"),
        (10, 10, "Low Stock"),
        (11, 10, "In Stock"),
        (3, 2, "In Stock"),
    ])
    def test_stock_status(self, quantity, threshold, expected):
        """Test the stock badge rules."""
        assert stock_status({"quantity": quantity, "low_stock_threshold": threshold}) == expected

    def test_stock_status_default_threshold(self):
        """Test that a missing threshold defaults to ten."""
        assert stock_status({"quantity": 7}) == "Low Stock"

    @pytest.mark.parametrize("quantity,expected", [
        (0, "Out of Stock"),
        (7, "Low Stock"),
        (12, "In Stock"),
    ])
    def test_stock_status_null_threshold(self, quantity, expected):
        """Test that a null threshold falls back to the default."""
        assert stock_status({"quantity": quantity, "low_stock_threshold": None}) == expected

    def test_stock_status_zero_threshold(self):
        """Test that a zero threshold is respected, not replaced."""
        assert stock_status({"quantity": 3, "low_stock_threshold": 0}) == "In Stock"

    def test_search_inventory(self):
        """Test matching on name, SKU and category."""
        items = [
            {"name": "Basmati Rice", "sku": "RICE-5", "category": "Grocery"},
            {"name": "Soap", "sku": None, "category": "Personal Care"},
        ]

        assert len(search_inventory(items, "rice")) == 1
        assert len(search_inventory(items, "care")) == 1
        assert len(search_inventory(items, "")) == 2

    def test_search_customers(self):
        """Test matching on name, email and phone."""
        customers = [
            {"name": "Asha Traders", "email": "ASHA@example.com", "phone": "+91 98765"},
            {"name": "Ravi Stores", "email": None, "phone": None},
        ]

        assert [c["name"] for c in search_customers(customers, "asha@")] == ["Asha Traders"]
        assert [c["name"] for c in search_customers(customers, "98765")] == ["Asha Traders"]
        assert [c["name"] for c in search_customers(customers, "stores")] == ["Ravi Stores"]


class TestDashboardService:
    """Tests for loading and watching dashboard data."""

    @pytest.mark.asyncio
    async def test_load(self, store):
        """Test stats loaded from the store."""
        await store.insert("customers", {"name": "Asha"})
        await store.insert("inventory", {"name": "Rice", "quantity": 4})
        await store.insert("inventory", {"name": "Soap", "quantity": 40})
        await store.insert("invoices", {
            "invoice_number": "INV-2610-001", "status": "paid",
            "total_amount": Decimal("500"), "issue_date": date(2026, 10, 1),
        })

        stats = await DashboardService(store).load(NOW)

        assert stats.total_customers == 1
        assert stats.low_stock_items == 1
        assert stats.total_revenue == Decimal("500")
        assert stats.monthly_revenue[-1].revenue == Decimal("500")

    @pytest.mark.asyncio
    async def test_watch_reloads_on_change(self, store):
        """Test that writes trigger a fresh rollup."""
        seen = []
        subscription = await DashboardService(store).watch(seen.append)

        await store.insert("customers", {"name": "Asha"})
        await store.insert("customers", {"name": "Ravi"})
        await store.insert("profiles", {"full_name": "ignored"})

        assert [s.total_customers for s in seen] == [1, 2]

        await subscription.unsubscribe()
        await store.insert("customers", {"name": "Meera"})
        assert len(seen) == 2
