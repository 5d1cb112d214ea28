"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    SQLiteTransaction,
    close_pool,
    get_pool,
)
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore

# Type aliases for convenience
CatalogStore = SQLiteCatalogStore
InventoryStore = SQLiteInventoryStore

# Aliases used by the application wiring
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_inventory_store: SQLiteInventoryStore | None = None
_catalog_store: SQLiteCatalogStore | None = None


async def get_inventory_store() -> SQLiteInventoryStore:
    """Get singleton inventory store instance."""
    global _inventory_store
    if _inventory_store is None:
        _inventory_store = SQLiteInventoryStore()
    return _inventory_store


async def get_catalog_store() -> SQLiteCatalogStore:
    """Get singleton catalog store instance."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = SQLiteCatalogStore()
    return _catalog_store


__all__ = [
    # Connection
    "ConnectionPool",
    "SQLiteTransaction",
    "get_pool",
    "close_pool",
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteCatalogStore",
    "SQLiteInventoryStore",
    # Type aliases
    "CatalogStore",
    "InventoryStore",
    # Factory functions
    "get_catalog_store",
    "get_inventory_store",
]
