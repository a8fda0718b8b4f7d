"""Data models for dashboard analytics."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class StatusCount(BaseModel):
    """Number of invoices in one status."""

    name: str
    value: int = Field(ge=0)


class MonthlyRevenue(BaseModel):
    """Paid revenue for one calendar month."""

    month: str = Field(description="Abbreviated month name, e.g. 'Oct'")
    year: int
    revenue: Decimal = Decimal("0")


class DashboardStats(BaseModel):
    """Headline numbers shown on the dashboard."""

    total_revenue: Decimal = Decimal("0")
    total_customers: int = Field(default=0, ge=0)
    total_invoices: int = Field(default=0, ge=0)
    pending_invoices: int = Field(default=0, ge=0)
    low_stock_items: int = Field(default=0, ge=0)
    recent_invoices: list[dict[str, Any]] = Field(default_factory=list)
    monthly_revenue: list[MonthlyRevenue] = Field(default_factory=list)
    invoice_status: list[StatusCount] = Field(default_factory=list)
