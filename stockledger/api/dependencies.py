"""
Dependency injection container for FastAPI.

Provides service instances and the tenant id to route handlers.
"""

from fastapi import Header, HTTPException, status

from stockledger.application.services import (
    get_availability_service,
    get_movement_query,
    get_reconciler,
    get_stock_engine,
)
from stockledger.config import bind_tenant
from stockledger.core.services import (
    AvailabilityQueryService,
    LedgerReconciler,
    MovementLedgerQuery,
    StockOperationsEngine,
)


def get_company_id(
    x_company_id: str | None = Header(default=None, alias="X-Company-ID"),
) -> str:
    """Resolve the tenant for the request and bind it to the log context."""
    if not x_company_id or not x_company_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Company-ID header",
        )
    company_id = x_company_id.strip()
    bind_tenant(company_id)
    return company_id


# Service dependencies
async def get_engine() -> StockOperationsEngine:
    """Get stock operations engine."""
    return await get_stock_engine()


async def get_availability() -> AvailabilityQueryService:
    """Get availability query service."""
    return await get_availability_service()


async def get_movements_query() -> MovementLedgerQuery:
    """Get movement ledger query."""
    return await get_movement_query()


async def get_ledger_reconciler() -> LedgerReconciler:
    """Get ledger reconciler."""
    return await get_reconciler()
