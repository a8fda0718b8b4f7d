"""Fetching dashboard data from the store and keeping it fresh."""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from ..store import ChangeEvent, DataStore, Subscription, lt
from .models import DashboardStats
from .stats import LOW_STOCK_LIMIT, compute_dashboard_stats

WATCHED_COLLECTIONS = ("invoices", "customers", "inventory")


class DashboardService:
    """Loads dashboard stats and reloads them whenever the data changes."""

    def __init__(self, store: DataStore):
        self._store = store
        self._debug_callback: Any | None = None

    def set_debug_callback(self, callback: Any) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "dashboard", message)

    async def load(self, now: datetime | None = None) -> DashboardStats:
        """Fetch invoices, customer and low-stock counts and roll them up."""
        invoices = await self._store.select("invoices", order_by="created_at", descending=True)
        customer_count = await self._store.count("customers")
        low_stock_count = await self._store.count("inventory", [lt("quantity", LOW_STOCK_LIMIT)])

        self._debug(
            "debug",
            f"Loaded {len(invoices)} invoices, {customer_count} customers, "
            f"{low_stock_count} low-stock items"
        )
        return compute_dashboard_stats(invoices, customer_count, low_stock_count, now)

    async def watch(
        self,
        callback: Callable[[DashboardStats], Awaitable[None] | None]
    ) -> Subscription:
        """Re-fetch everything after any change to invoices, customers or inventory.

        Args:
            callback: Receives the freshly computed stats

        Returns:
            Subscription; call ``unsubscribe()`` when the dashboard closes
        """
        async def on_change(event: ChangeEvent) -> None:
            self._debug("debug", f"{event.collection} {event.kind.value}, reloading")
            result = callback(await self.load())
            if result is not None:
                await result

        return await self._store.subscribe(WATCHED_COLLECTIONS, on_change)
