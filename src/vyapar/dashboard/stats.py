"""Dashboard rollups over invoice and inventory records.

Everything here is a pure function of the records passed in; fetching is
left to DashboardService.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ..invoicing.models import InvoiceStatus
from .models import DashboardStats, MonthlyRevenue, StatusCount

# Dashboard low-stock cutoff; the inventory page uses each item's own threshold
LOW_STOCK_LIMIT = 10
RECENT_INVOICE_COUNT = 5
REVENUE_MONTHS = 6

PENDING_STATUSES = (InvoiceStatus.SENT.value, InvoiceStatus.OVERDUE.value)
CHART_STATUSES = (
    InvoiceStatus.PAID,
    InvoiceStatus.SENT,
    InvoiceStatus.OVERDUE,
    InvoiceStatus.DRAFT,
)


def _as_date(value: date | datetime | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return value.date()
    return value


def _is_paid(invoice: dict[str, Any]) -> bool:
    return invoice.get("status") == InvoiceStatus.PAID.value


def total_revenue(invoices: list[dict[str, Any]]) -> Decimal:
    """Sum of ``total_amount`` over paid invoices."""
    return sum(
        (Decimal(str(inv["total_amount"])) for inv in invoices if _is_paid(inv)),
        Decimal("0"),
    )


def count_low_stock(inventory: list[dict[str, Any]], limit: int = LOW_STOCK_LIMIT) -> int:
    """Items with fewer than ``limit`` units on hand."""
    return sum(1 for item in inventory if (item.get("quantity") or 0) < limit)


def status_distribution(invoices: list[dict[str, Any]]) -> list[StatusCount]:
    """Invoice counts per chart status, empty buckets dropped."""
    counts = [
        StatusCount(
            name=status.value.capitalize(),
            value=sum(1 for inv in invoices if inv.get("status") == status.value),
        )
        for status in CHART_STATUSES
    ]
    return [count for count in counts if count.value > 0]


def monthly_revenue(
    invoices: list[dict[str, Any]],
    now: datetime | date,
    months: int = REVENUE_MONTHS
) -> list[MonthlyRevenue]:
    """Paid revenue per month for the ``months`` months ending at ``now``.

    Invoices are bucketed by issue date, falling back to creation time.
    """
    buckets: list[MonthlyRevenue] = []
    year, month = now.year, now.month
    for _ in range(months):
        buckets.insert(0, MonthlyRevenue(
            month=date(year, month, 1).strftime("%b"),
            year=year,
        ))
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)

    index = {(b.year, b.month): b for b in buckets}
    for invoice in invoices:
        if not _is_paid(invoice):
            continue
        issued = _as_date(invoice.get("issue_date")) or _as_date(invoice.get("created_at"))
        if issued is None:
            continue
        bucket = index.get((issued.year, issued.strftime("%b")))
        if bucket is not None:
            bucket.revenue += Decimal(str(invoice["total_amount"]))

    return buckets


def compute_dashboard_stats(
    invoices: list[dict[str, Any]],
    customer_count: int,
    low_stock_count: int,
    now: datetime | date | None = None
) -> DashboardStats:
    """Roll invoice records up into dashboard numbers.

    Args:
        invoices: Invoice records, any order
        customer_count: Number of customers
        low_stock_count: Number of low-stock inventory items
        now: Reference time for the revenue chart

    Returns:
        DashboardStats
    """
    now = now or datetime.now()
    newest_first = sorted(
        invoices,
        key=lambda inv: (inv.get("created_at") is not None, inv.get("created_at")),
        reverse=True,
    )

    return DashboardStats(
        total_revenue=total_revenue(invoices),
        total_customers=customer_count,
        total_invoices=len(invoices),
        pending_invoices=sum(1 for inv in invoices if inv.get("status") in PENDING_STATUSES),
        low_stock_items=low_stock_count,
        recent_invoices=newest_first[:RECENT_INVOICE_COUNT],
        monthly_revenue=monthly_revenue(invoices, now),
        invoice_status=status_distribution(invoices),
    )
