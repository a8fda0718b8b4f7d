"""Data store abstraction layer for vyapar."""

from .base import DataStore, Subscription
from .factory import create_data_store
from .in_memory import InMemoryDataStore
from .models import (
    COLLECTIONS,
    ChangeEvent,
    ChangeKind,
    DuplicateRecordError,
    Filter,
    FilterOp,
    eq,
    lt,
)

__all__ = [
    "COLLECTIONS",
    "ChangeEvent",
    "ChangeKind",
    "DataStore",
    "DuplicateRecordError",
    "Filter",
    "FilterOp",
    "InMemoryDataStore",
    "Subscription",
    "create_data_store",
    "eq",
    "lt",
]
