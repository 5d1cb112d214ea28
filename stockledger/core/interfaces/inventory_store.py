"""Abstract interface for inventory record and movement storage."""

from abc import ABC, abstractmethod

from stockledger.core.entities.inventory import (
    InventoryLevel,
    InventoryRecord,
    LedgerDrift,
    Movement,
    MovementFilters,
    StockDrift,
)
from stockledger.core.interfaces.transaction import TransactionContext


class IInventoryStore(ABC):
    """Interface for inventory record and movement ledger persistence."""

    # Records
    @abstractmethod
    async def ensure_record(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> InventoryRecord:
        """Return the record for the pair, creating it with zero quantity if absent.

        Must be a single conditional insert, never check-then-insert.
        """
        pass

    @abstractmethod
    async def get_record(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> InventoryRecord | None:
        """Get the record for a (product, branch) pair."""
        pass

    @abstractmethod
    async def save_record(
        self, tx: TransactionContext, record: InventoryRecord
    ) -> InventoryRecord:
        """Persist quantity, reservation and timestamp changes of a record."""
        pass

    @abstractmethod
    async def sum_quantity(self, tx: TransactionContext, product_id: str) -> int:
        """Sum on-hand quantity of a product across all branches."""
        pass

    @abstractmethod
    async def list_levels(
        self,
        tx: TransactionContext,
        company_id: str,
        branch_id: str | None = None,
        product_id: str | None = None,
    ) -> list[InventoryLevel]:
        """
        List records of active, tracked products joined with metadata.

        Ordered by quantity ascending then product name. Low/out-of-stock
        flags are left unset for the caller to derive.
        """
        pass

    @abstractmethod
    async def list_valuation_rows(
        self,
        tx: TransactionContext,
        company_id: str,
        branch_id: str | None = None,
    ) -> list[tuple[InventoryRecord, float | None]]:
        """List records with their unit cost (cost, else price; None if unknown)."""
        pass

    # Ledger
    @abstractmethod
    async def append_movement(self, tx: TransactionContext, movement: Movement) -> Movement:
        """Append a movement to the ledger. Movements are never updated."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        tx: TransactionContext,
        company_id: str,
        filters: MovementFilters,
        limit: int,
        offset: int,
    ) -> list[Movement]:
        """List movements for a company, newest first."""
        pass

    @abstractmethod
    async def count_movements(
        self, tx: TransactionContext, company_id: str, filters: MovementFilters
    ) -> int:
        """Count movements matching the filters."""
        pass

    @abstractmethod
    async def sum_movements(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> int:
        """Sum signed movement quantities for a pair."""
        pass

    # Reconciliation
    @abstractmethod
    async def count_records(self, tx: TransactionContext, company_id: str) -> int:
        """Count inventory records belonging to a company."""
        pass

    @abstractmethod
    async def find_ledger_drift(
        self, tx: TransactionContext, company_id: str
    ) -> list[LedgerDrift]:
        """Records whose quantity differs from the sum of their movements."""
        pass

    @abstractmethod
    async def find_stock_drift(
        self, tx: TransactionContext, company_id: str
    ) -> list[StockDrift]:
        """Products whose stock differs from the sum of their records."""
        pass
