"""Factory for creating data stores."""

from typing import Any

from .base import DataStore


def create_data_store(backend: str = "memory", **config: Any) -> DataStore:
    """
    Create a data store instance.

    Args:
        backend: Backend type ("memory" or "postgres")
        **config: Backend-specific configuration

    Returns:
        DataStore instance (call ``connect()`` before use)

    Raises:
        ValueError: If backend type is not supported

    Example:
        >>> store = create_data_store(
        ...     backend="postgres",
        ...     host="localhost",
        ...     port=5432,
        ...     database="vyapar",
        ...     user="vyapar",
        ...     password="vyapar_dev"
        ... )
        >>> await store.connect()
    """
    if backend == "memory":
        from .in_memory import InMemoryDataStore
        return InMemoryDataStore(**config)

    elif backend == "postgres":
        from .postgres import PostgresDataStore
        return PostgresDataStore(**config)

    raise ValueError(
        f"Unsupported data store backend: {backend}. "
        f"Supported backends: memory, postgres"
    )
