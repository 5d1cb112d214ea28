"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteInventoryStore,
    close_pool,
    get_pool,
)

__all__ = [
    # SQLite stores
    "SQLiteCatalogStore",
    "SQLiteInventoryStore",
    # Connection pool
    "ConnectionPool",
    "get_pool",
    "close_pool",
]
