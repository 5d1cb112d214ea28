"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import IUnitOfWork, TransactionContext

__all__ = [
    "ICatalogStore",
    "IInventoryStore",
    "IUnitOfWork",
    "TransactionContext",
]
