"""Core domain entities."""

from stockledger.core.entities.catalog import Branch, Product
from stockledger.core.entities.inventory import (
    UNLIMITED,
    AvailabilityResult,
    InventoryLevel,
    InventoryRecord,
    LedgerDrift,
    Movement,
    MovementFilters,
    MovementPage,
    MovementType,
    ReconciliationReport,
    ReferenceType,
    StockDrift,
    TransferResult,
    ValuationReport,
)

__all__ = [
    # Catalog
    "Branch",
    "Product",
    # Inventory
    "UNLIMITED",
    "AvailabilityResult",
    "InventoryLevel",
    "InventoryRecord",
    "LedgerDrift",
    "Movement",
    "MovementFilters",
    "MovementPage",
    "MovementType",
    "ReconciliationReport",
    "ReferenceType",
    "StockDrift",
    "TransferResult",
    "ValuationReport",
]
