"""Catalog lookup used to prefill line items."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from .models import CatalogEntry


class Catalog(ABC):
    """Resolves an inventory reference to a description and price."""

    @abstractmethod
    def lookup(self, ref: str) -> CatalogEntry | None:
        """Return the entry for ``ref``, or None if unknown."""

    @abstractmethod
    def entries(self) -> list[CatalogEntry]:
        """All entries, for pickers."""


class InMemoryCatalog(Catalog):
    """Catalog backed by a dict of entries."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self._entries = {entry.id: entry for entry in entries}

    @classmethod
    def from_inventory(cls, records: Iterable[dict[str, Any]]) -> "InMemoryCatalog":
        """Build a catalog from ``inventory`` collection records.

        Uses the item ``name`` as description and ``selling_price`` as
        unit price.
        """
        return cls(
            CatalogEntry(
                id=str(record["id"]),
                description=record["name"],
                unit_price=Decimal(str(record.get("selling_price") or 0)),
            )
            for record in records
        )

    def lookup(self, ref: str) -> CatalogEntry | None:
        return self._entries.get(ref)

    def entries(self) -> list[CatalogEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
