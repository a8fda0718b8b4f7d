"""PostgreSQL data store implementation."""

import asyncio
import json
from collections.abc import Iterable
from typing import Any
from uuid import UUID

import asyncpg

from ..base import ChangeCallback, DataStore, Subscription, dispatch_change
from ..models import ChangeEvent, DuplicateRecordError, Filter, FilterOp, check_collection
from . import schema

_OPERATORS = {
    FilterOp.EQ: "=",
    FilterOp.LT: "<",
    FilterOp.LTE: "<=",
    FilterOp.GT: ">",
    FilterOp.GTE: ">=",
}

_UUID_COLUMNS = frozenset({"id", "customer_id", "invoice_id", "inventory_id"})


def _to_db(column: str, value: Any) -> Any:
    if column in _UUID_COLUMNS and isinstance(value, str):
        return UUID(value)
    return value


def _from_db(row: asyncpg.Record) -> dict[str, Any]:
    return {
        key: str(value) if isinstance(value, UUID) else value
        for key, value in dict(row).items()
    }


class PostgresDataStore(DataStore):
    """
    PostgreSQL data store with LISTEN/NOTIFY change feeds.

    Hides all Postgres-specific details:
    - Connection pooling
    - SQL query construction
    - Trigger-based change notification
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        min_pool_size: int = 2,
        max_pool_size: int = 10
    ):
        """
        Initialize Postgres data store.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            min_pool_size: Minimum connection pool size
            max_pool_size: Maximum connection pool size
        """
        self._host = host
        self._port = port
        self._database = database
        self._user = user
        self._password = password
        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None
        self._listen_conn: asyncpg.Connection | None = None
        self._subscribers: list[tuple[Subscription, ChangeCallback]] = []
        self._tasks: set[asyncio.Task] = set()

    async def connect(self) -> None:
        """Establish database connection pool."""
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                host=self._host,
                port=self._port,
                database=self._database,
                user=self._user,
                password=self._password,
                min_size=self._min_pool_size,
                max_size=self._max_pool_size,
                command_timeout=60.0
            )
        except Exception as e:
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}") from e

    async def disconnect(self) -> None:
        """Stop listening and close the pool."""
        await self._stop_listening()
        self._subscribers.clear()
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Not connected to database")
        return self._pool

    async def initialize_schema(self) -> None:
        """Create tables, indexes and change-notification triggers."""
        pool = self._require_pool()

        async with pool.acquire() as conn, conn.transaction():
            await conn.execute(schema.ENABLE_PGCRYPTO_EXTENSION)
            for statement in schema.CREATE_TABLES:
                await conn.execute(statement)

            await conn.execute(schema.CREATE_INVOICES_CREATED_AT_INDEX)
            await conn.execute(schema.CREATE_INVENTORY_QUANTITY_INDEX)

            await conn.execute(schema.CREATE_NOTIFY_FUNCTION)
            for table in schema.COLLECTION_COLUMNS:
                await conn.execute(schema.DROP_NOTIFY_TRIGGER.format(table=table))
                await conn.execute(schema.CREATE_NOTIFY_TRIGGER.format(table=table))

    async def drop_schema(self) -> None:
        """
        Drop all tables and the notification function.

        WARNING: This destroys all data!
        """
        pool = self._require_pool()
        async with pool.acquire() as conn:
            await conn.execute(schema.DROP_ALL)

    def _check_columns(self, collection: str, columns: Iterable[str]) -> list[str]:
        allowed = set(schema.COLLECTION_COLUMNS[check_collection(collection)]) | {"id", "created_at"}
        columns = list(columns)
        unknown = [column for column in columns if column not in allowed]
        if unknown:
            raise ValueError(f"Unknown column(s) for {collection}: {', '.join(unknown)}")
        return columns

    def _where(
        self,
        collection: str,
        filters: list[Filter] | None,
        params: list[Any]
    ) -> str:
        conditions = []
        for f in filters or []:
            self._check_columns(collection, [f.column])
            if f.op == FilterOp.EQ and f.value is None:
                conditions.append(f"{f.column} IS NULL")
                continue
            params.append(_to_db(f.column, f.value))
            conditions.append(f"{f.column} {_OPERATORS[f.op]} ${len(params)}")
        return f"WHERE {' AND '.join(conditions)}" if conditions else ""

    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        pool = self._require_pool()
        columns = self._check_columns(collection, record.keys())

        if columns:
            placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
            sql = (
                f"INSERT INTO {collection} ({', '.join(columns)}) "
                f"VALUES ({placeholders}) RETURNING *"
            )
        else:
            sql = f"INSERT INTO {collection} DEFAULT VALUES RETURNING *"

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(sql, *(_to_db(c, record[c]) for c in columns))
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(collection, e.constraint_name or "unique", None) from e

        return _from_db(row)

    async def insert_many(
        self,
        collection: str,
        records: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert several records in one transaction."""
        pool = self._require_pool()
        results = []

        try:
            async with pool.acquire() as conn, conn.transaction():
                for record in records:
                    columns = self._check_columns(collection, record.keys())
                    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
                    row = await conn.fetchrow(
                        f"INSERT INTO {collection} ({', '.join(columns)}) "
                        f"VALUES ({placeholders}) RETURNING *",
                        *(_to_db(c, record[c]) for c in columns)
                    )
                    results.append(_from_db(row))
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(collection, e.constraint_name or "unique", None) from e

        return results

    async def select(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None
    ) -> list[dict[str, Any]]:
        pool = self._require_pool()
        params: list[Any] = []
        sql = f"SELECT * FROM {check_collection(collection)} {self._where(collection, filters, params)}"

        if order_by:
            self._check_columns(collection, [order_by])
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            params.append(limit)
            sql += f" LIMIT ${len(params)}"

        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *params)
        return [_from_db(row) for row in rows]

    async def count(self, collection: str, filters: list[Filter] | None = None) -> int:
        pool = self._require_pool()
        params: list[Any] = []
        sql = f"SELECT COUNT(*) FROM {check_collection(collection)} {self._where(collection, filters, params)}"

        async with pool.acquire() as conn:
            return await conn.fetchval(sql, *params)

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        pool = self._require_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT * FROM {check_collection(collection)} WHERE id = $1",
                UUID(record_id)
            )
        return _from_db(row) if row is not None else None

    async def update(
        self,
        collection: str,
        record_id: str,
        changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        pool = self._require_pool()
        columns = [c for c in self._check_columns(collection, changes.keys()) if c != "id"]
        if not columns:
            return await self.get(collection, record_id)

        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"UPDATE {collection} SET {assignments} WHERE id = $1 RETURNING *",
                    UUID(record_id),
                    *(_to_db(c, changes[c]) for c in columns)
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateRecordError(collection, e.constraint_name or "unique", None) from e

        return _from_db(row) if row is not None else None

    async def delete(self, collection: str, record_id: str) -> bool:
        pool = self._require_pool()
        async with pool.acquire() as conn:
            result = await conn.execute(
                f"DELETE FROM {check_collection(collection)} WHERE id = $1",
                UUID(record_id)
            )
        return result != "DELETE 0"

    async def subscribe(
        self,
        collections: Iterable[str],
        callback: ChangeCallback
    ) -> Subscription:
        names = [check_collection(name) for name in collections]
        pool = self._require_pool()

        if self._listen_conn is None:
            self._listen_conn = await pool.acquire()
            await self._listen_conn.add_listener(schema.CHANGE_CHANNEL, self._on_notification)

        subscription = Subscription(names, self._cancel)
        self._subscribers.append((subscription, callback))
        return subscription

    async def _cancel(self, subscription: Subscription) -> None:
        self._subscribers = [
            (sub, cb) for sub, cb in self._subscribers if sub is not subscription
        ]
        if not self._subscribers:
            await self._stop_listening()

    async def _stop_listening(self) -> None:
        if self._listen_conn is None:
            return
        conn, self._listen_conn = self._listen_conn, None
        await conn.remove_listener(schema.CHANGE_CHANNEL, self._on_notification)
        if self._pool is not None:
            await self._pool.release(conn)

    def _on_notification(
        self,
        connection: asyncpg.Connection,
        pid: int,
        channel: str,
        payload: str
    ) -> None:
        event = ChangeEvent.model_validate(json.loads(payload))
        for subscription, callback in list(self._subscribers):
            if subscription.active and event.collection in subscription.collections:
                task = asyncio.ensure_future(dispatch_change(callback, event))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    @property
    def backend_type(self) -> str:
        return "postgres"
