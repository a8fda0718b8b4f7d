"""Dashboard analytics and listing helpers."""

from .inventory import search_customers, search_inventory, stock_status
from .models import DashboardStats, MonthlyRevenue, StatusCount
from .service import DashboardService
from .stats import (
    compute_dashboard_stats,
    count_low_stock,
    monthly_revenue,
    status_distribution,
    total_revenue,
)

__all__ = [
    "DashboardService",
    "DashboardStats",
    "MonthlyRevenue",
    "StatusCount",
    "compute_dashboard_stats",
    "count_low_stock",
    "monthly_revenue",
    "search_customers",
    "search_inventory",
    "status_distribution",
    "stock_status",
    "total_revenue",
]
