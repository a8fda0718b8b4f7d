"""Data models for the data store layer."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

COLLECTIONS: frozenset[str] = frozenset({
    "customers",
    "inventory",
    "invoices",
    "invoice_items",
    "profiles",
})


def check_collection(collection: str) -> str:
    """Validate a collection name."""
    if collection not in COLLECTIONS:
        raise ValueError(
            f"Unknown collection: {collection}. "
            f"Supported collections: {', '.join(sorted(COLLECTIONS))}"
        )
    return collection


class FilterOp(str, Enum):
    """Comparison applied by a filter."""

    EQ = "eq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"


class Filter(BaseModel):
    """A single ``column <op> value`` condition."""

    model_config = ConfigDict(frozen=True)

    column: str
    op: FilterOp = FilterOp.EQ
    value: Any = None

    def matches(self, record: dict[str, Any]) -> bool:
        """Evaluate the condition against an in-memory record."""
        actual = record.get(self.column)
        if self.op == FilterOp.EQ:
            return actual == self.value
        if actual is None or self.value is None:
            return False
        if self.op == FilterOp.LT:
            return actual < self.value
        if self.op == FilterOp.LTE:
            return actual <= self.value
        if self.op == FilterOp.GT:
            return actual > self.value
        return actual >= self.value


def eq(column: str, value: Any) -> Filter:
    return Filter(column=column, op=FilterOp.EQ, value=value)


def lt(column: str, value: Any) -> Filter:
    return Filter(column=column, op=FilterOp.LT, value=value)


class ChangeKind(str, Enum):
    """Kind of write that triggered a change notification."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ChangeEvent(BaseModel):
    """Notification delivered to subscribers after a write."""

    model_config = ConfigDict(frozen=True)

    collection: str
    kind: ChangeKind
    record_id: str | None = Field(default=None, description="Id of the written record")


# Columns whose values must be unique within a collection
UNIQUE_COLUMNS: dict[str, tuple[str, ...]] = {
    "invoices": ("invoice_number",),
}


class DuplicateRecordError(ValueError):
    """An insert or update would break a unique constraint."""

    def __init__(self, collection: str, column: str, value: Any):
        super().__init__(f"Duplicate {column} {value!r} in {collection}")
        self.collection = collection
        self.column = column
        self.value = value
