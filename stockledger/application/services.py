"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. The API layer should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from stockledger.core.services import (
    AvailabilityQueryService,
    LedgerReconciler,
    MovementLedgerQuery,
    StockOperationsEngine,
    TotalStockAggregator,
)

if TYPE_CHECKING:
    from stockledger.core.interfaces import ICatalogStore, IInventoryStore, IUnitOfWork


# Singleton service instances
_stock_engine: StockOperationsEngine | None = None
_availability_service: AvailabilityQueryService | None = None
_movement_query: MovementLedgerQuery | None = None
_reconciler: LedgerReconciler | None = None


async def _default_dependencies() -> tuple["IUnitOfWork", "IInventoryStore", "ICatalogStore"]:
    # Lazy import infrastructure to avoid circular imports
    from stockledger.infrastructure.storage.sqlite import (
        get_catalog_store,
        get_connection_pool,
        get_inventory_store,
    )

    return await get_connection_pool(), await get_inventory_store(), await get_catalog_store()


async def get_stock_engine(
    unit_of_work: "IUnitOfWork | None" = None,
    inventory_store: "IInventoryStore | None" = None,
    catalog_store: "ICatalogStore | None" = None,
) -> StockOperationsEngine:
    """
    Get or create StockOperationsEngine instance.

    Creates infrastructure dependencies if not provided.
    Passing any override builds a fresh, uncached engine.

    Args:
        unit_of_work: Optional unit of work override
        inventory_store: Optional inventory store override
        catalog_store: Optional catalog store override

    Returns:
        Configured StockOperationsEngine
    """
    global _stock_engine

    overridden = any(dep is not None for dep in (unit_of_work, inventory_store, catalog_store))
    if _stock_engine is not None and not overridden:
        return _stock_engine

    default_uow, default_inventory, default_catalog = await _default_dependencies()
    inventory = inventory_store or default_inventory
    catalog = catalog_store or default_catalog
    engine = StockOperationsEngine(
        unit_of_work=unit_of_work or default_uow,
        inventory_store=inventory,
        catalog_store=catalog,
        aggregator=TotalStockAggregator(inventory, catalog),
    )

    if not overridden:
        _stock_engine = engine
    return engine


async def get_availability_service() -> AvailabilityQueryService:
    """Get or create AvailabilityQueryService instance."""
    global _availability_service

    if _availability_service is None:
        uow, inventory, catalog = await _default_dependencies()
        _availability_service = AvailabilityQueryService(uow, inventory, catalog)

    return _availability_service


async def get_movement_query() -> MovementLedgerQuery:
    """Get or create MovementLedgerQuery instance."""
    global _movement_query

    if _movement_query is None:
        uow, inventory, _ = await _default_dependencies()
        _movement_query = MovementLedgerQuery(uow, inventory)

    return _movement_query


async def get_reconciler() -> LedgerReconciler:
    """Get or create LedgerReconciler instance."""
    global _reconciler

    if _reconciler is None:
        uow, inventory, _ = await _default_dependencies()
        _reconciler = LedgerReconciler(uow, inventory)

    return _reconciler


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _stock_engine, _availability_service, _movement_query, _reconciler

    _stock_engine = None
    _availability_service = None
    _movement_query = None
    _reconciler = None
