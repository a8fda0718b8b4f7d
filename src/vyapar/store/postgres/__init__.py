from .backend import PostgresDataStore

__all__ = ["PostgresDataStore"]
