"""In-memory data store.

Simple dict-based storage for tests and offline use.
Data is lost when the application exits.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from .base import ChangeCallback, DataStore, Subscription, dispatch_change
from .models import (
    COLLECTIONS,
    UNIQUE_COLUMNS,
    ChangeEvent,
    ChangeKind,
    DuplicateRecordError,
    Filter,
    check_collection,
)


def _sort_key(column: str):
    def key(record: dict[str, Any]) -> tuple[bool, Any]:
        value = record.get(column)
        return (value is None, value)
    return key


class InMemoryDataStore(DataStore):
    """In-memory data store (session-only).

    Subscribers are notified synchronously, after the write, from the
    coroutine that performed it.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self._subscribers: list[tuple[Subscription, ChangeCallback]] = []

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    def _table(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._tables[check_collection(collection)]

    def _check_unique(self, collection: str, record: dict[str, Any], record_id: str) -> None:
        for column in UNIQUE_COLUMNS.get(collection, ()):
            if column not in record:
                continue
            for other_id, other in self._tables[collection].items():
                if other_id != record_id and other.get(column) == record[column]:
                    raise DuplicateRecordError(collection, column, record[column])

    async def _notify(self, collection: str, kind: ChangeKind, record_id: str) -> None:
        event = ChangeEvent(collection=collection, kind=kind, record_id=record_id)
        for subscription, callback in list(self._subscribers):
            if subscription.active and collection in subscription.collections:
                await dispatch_change(callback, event)

    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        table = self._table(collection)
        stored = {
            "created_at": datetime.now(timezone.utc),
            **record,
        }
        stored["id"] = str(stored.get("id") or uuid4())
        self._check_unique(collection, stored, stored["id"])

        table[stored["id"]] = stored
        await self._notify(collection, ChangeKind.INSERT, stored["id"])
        return dict(stored)

    async def select(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None
    ) -> list[dict[str, Any]]:
        records = [
            dict(record)
            for record in self._table(collection).values()
            if all(f.matches(record) for f in filters or [])
        ]
        if order_by:
            records.sort(key=_sort_key(order_by), reverse=descending)
        if limit is not None:
            records = records[:limit]
        return records

    async def count(self, collection: str, filters: list[Filter] | None = None) -> int:
        return len(await self.select(collection, filters))

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        record = self._table(collection).get(record_id)
        return dict(record) if record is not None else None

    async def update(
        self,
        collection: str,
        record_id: str,
        changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        table = self._table(collection)
        if record_id not in table:
            return None

        updated = {**table[record_id], **changes, "id": record_id}
        self._check_unique(collection, updated, record_id)
        table[record_id] = updated
        await self._notify(collection, ChangeKind.UPDATE, record_id)
        return dict(updated)

    async def delete(self, collection: str, record_id: str) -> bool:
        table = self._table(collection)
        if table.pop(record_id, None) is None:
            return False
        await self._notify(collection, ChangeKind.DELETE, record_id)
        return True

    async def subscribe(
        self,
        collections: Iterable[str],
        callback: ChangeCallback
    ) -> Subscription:
        names = [check_collection(name) for name in collections]
        subscription = Subscription(names, self._cancel)
        self._subscribers.append((subscription, callback))
        return subscription

    async def _cancel(self, subscription: Subscription) -> None:
        self._subscribers = [
            (sub, cb) for sub, cb in self._subscribers if sub is not subscription
        ]

    @property
    def backend_type(self) -> str:
        return "memory"
