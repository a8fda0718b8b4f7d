"""Abstract base class for data stores.

The application never talks to a database directly; pages and services get a
DataStore injected. The abstraction hides:
- Storage engine (in-memory dict, PostgreSQL)
- Connection management
- Query construction
- How change notifications are delivered
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from .models import ChangeEvent, Filter

ChangeCallback = Callable[[ChangeEvent], Awaitable[None] | None]


async def dispatch_change(callback: ChangeCallback, event: ChangeEvent) -> None:
    """Invoke a subscriber, awaiting it if it is a coroutine function."""
    result = callback(event)
    if inspect.isawaitable(result):
        await result


class Subscription:
    """Handle returned by DataStore.subscribe."""

    def __init__(self, collections: Iterable[str], on_cancel: Callable[["Subscription"], Awaitable[None]]):
        self.collections = frozenset(collections)
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def unsubscribe(self) -> None:
        """Stop receiving change events. Safe to call twice."""
        if not self._active:
            return
        self._active = False
        await self._on_cancel(self)


class DataStore(ABC):
    """Abstract record store with change notification.

    Records are plain dicts keyed by column name. Every record has a string
    ``id`` assigned by the store on insert.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the store.

        Raises:
            ConnectionError: If connection fails
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert one record.

        Returns:
            The stored record including its ``id``

        Raises:
            ValueError: If the collection is unknown or a unique value clashes
        """

    async def insert_many(
        self,
        collection: str,
        records: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert several records, in order."""
        return [await self.insert(collection, record) for record in records]

    @abstractmethod
    async def select(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Read records matching every filter."""

    @abstractmethod
    async def count(self, collection: str, filters: list[Filter] | None = None) -> int:
        """Count records matching every filter."""

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """Read one record by id."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        record_id: str,
        changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Apply changes to one record.

        Returns:
            The updated record, or None if not found
        """

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> bool:
        """Delete one record.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    async def subscribe(
        self,
        collections: Iterable[str],
        callback: ChangeCallback
    ) -> Subscription:
        """Call ``callback`` after any insert, update or delete in ``collections``."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
