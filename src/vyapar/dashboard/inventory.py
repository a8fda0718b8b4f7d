"""Listing helpers for the customers and inventory pages."""

from typing import Any

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

DEFAULT_LOW_STOCK_THRESHOLD = 10


def stock_status(item: dict[str, Any]) -> str:
    """Stock badge for an inventory record."""
    quantity = item.get("quantity") or 0
    threshold = item.get("low_stock_threshold")
    if threshold is None:
        threshold = DEFAULT_LOW_STOCK_THRESHOLD
    if quantity == 0:
        return OUT_OF_STOCK
    if quantity <= threshold:
        return LOW_STOCK
    return IN_STOCK


def _contains(value: str | None, needle: str) -> bool:
    return bool(value) and needle in value.lower()


def search_inventory(items: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """Match name, SKU or category, case-insensitively."""
    needle = query.lower()
    return [
        item for item in items
        if _contains(item.get("name"), needle)
        or _contains(item.get("sku"), needle)
        or _contains(item.get("category"), needle)
    ]


def search_customers(customers: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """Match name or email case-insensitively, or phone literally."""
    needle = query.lower()
    return [
        customer for customer in customers
        if _contains(customer.get("name"), needle)
        or _contains(customer.get("email"), needle)
        or query in (customer.get("phone") or "")
    ]
