"""Inventory management endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_availability,
    get_company_id,
    get_engine,
    get_ledger_reconciler,
    get_movements_query,
)
from stockledger.application.dto.requests import (
    AddStockRequest,
    AdjustStockRequest,
    ReleaseReservationRequest,
    RemoveStockRequest,
    ReserveStockRequest,
    TransferStockRequest,
)
from stockledger.application.dto.responses import (
    AvailabilityResponse,
    ErrorResponse,
    InventoryLevelResponse,
    InventoryLevelsResponse,
    InventoryRecordResponse,
    MovementPageResponse,
    MovementResponse,
    ReconciliationResponse,
    TransferResponse,
    ValuationResponse,
)
from stockledger.core.entities import MovementFilters, MovementType
from stockledger.core.services import (
    AvailabilityQueryService,
    LedgerReconciler,
    MovementLedgerQuery,
    StockOperationsEngine,
)

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

NOT_FOUND = {404: {"model": ErrorResponse}}
MUTATION_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _levels(levels: list) -> InventoryLevelsResponse:
    return InventoryLevelsResponse(
        items=[InventoryLevelResponse.from_entity(level) for level in levels],
        total=len(levels),
    )


# --- Reports ---


@router.get("/levels", response_model=InventoryLevelsResponse)
async def get_inventory_levels(
    branch_id: str | None = None,
    low_stock_only: bool = False,
    company_id: str = Depends(get_company_id),
    service: AvailabilityQueryService = Depends(get_availability),
) -> InventoryLevelsResponse:
    """Current stock per product and branch, lowest quantity first."""
    levels = await service.get_inventory_levels(
        company_id, branch_id=branch_id, low_stock_only=low_stock_only
    )
    return _levels(levels)


@router.get("/low-stock", response_model=InventoryLevelsResponse)
async def get_low_stock_alerts(
    branch_id: str | None = None,
    company_id: str = Depends(get_company_id),
    service: AvailabilityQueryService = Depends(get_availability),
) -> InventoryLevelsResponse:
    """Low-stock and out-of-stock rows."""
    levels = await service.get_low_stock_alerts(company_id, branch_id=branch_id)
    return _levels(levels)


@router.get(
    "/products/{product_id}",
    response_model=InventoryLevelsResponse,
    responses=NOT_FOUND,
)
async def get_product_inventory(
    product_id: str,
    company_id: str = Depends(get_company_id),
    service: AvailabilityQueryService = Depends(get_availability),
) -> InventoryLevelsResponse:
    """Per-branch breakdown for one product."""
    levels = await service.get_product_inventory(company_id, product_id)
    return _levels(levels)


@router.get("/valuation", response_model=ValuationResponse)
async def get_inventory_valuation(
    branch_id: str | None = None,
    company_id: str = Depends(get_company_id),
    service: AvailabilityQueryService = Depends(get_availability),
) -> ValuationResponse:
    """Stock value at cost, falling back to price."""
    report = await service.get_inventory_valuation(company_id, branch_id=branch_id)
    return ValuationResponse.from_entity(report)


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def check_availability(
    product_id: str,
    branch_id: str,
    quantity: int = Query(..., gt=0),
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> AvailabilityResponse:
    """Whether a branch can fulfil a quantity. -1 means stock is not tracked."""
    result = await engine.check_availability(company_id, product_id, branch_id, quantity)
    return AvailabilityResponse.from_entity(result)


@router.get("/movements", response_model=MovementPageResponse)
async def get_movements(
    product_id: str | None = None,
    branch_id: str | None = None,
    type: MovementType | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int | None = None,
    company_id: str = Depends(get_company_id),
    query: MovementLedgerQuery = Depends(get_movements_query),
) -> MovementPageResponse:
    """Movement history, newest first. Out-of-range page and limit are clamped."""
    result = await query.get_movements(
        company_id,
        MovementFilters(
            product_id=product_id,
            branch_id=branch_id,
            type=type,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        ),
    )
    return MovementPageResponse.from_entity(result)


@router.get("/reconcile", response_model=ReconciliationResponse)
async def reconcile(
    company_id: str = Depends(get_company_id),
    reconciler: LedgerReconciler = Depends(get_ledger_reconciler),
) -> ReconciliationResponse:
    """Compare stock records with the movement ledger."""
    report = await reconciler.reconcile(company_id)
    return ReconciliationResponse.from_entity(report)


# --- Mutations ---


@router.post(
    "/add",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=MUTATION_ERRORS,
)
async def add_stock(
    request: AddStockRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> MovementResponse:
    """Receive stock (IN movement)."""
    movement = await engine.add_stock(
        company_id,
        request.product_id,
        request.branch_id,
        request.quantity,
        unit_cost=request.unit_cost,
        reference=request.reference,
        notes=request.notes,
        performed_by=request.performed_by,
    )
    return MovementResponse.from_entity(movement)


@router.post(
    "/remove",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=MUTATION_ERRORS,
)
async def remove_stock(
    request: RemoveStockRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> MovementResponse:
    """Issue stock (OUT movement) with balance check."""
    movement = await engine.remove_stock(
        company_id,
        request.product_id,
        request.branch_id,
        request.quantity,
        reference=request.reference,
        notes=request.notes,
        performed_by=request.performed_by,
    )
    return MovementResponse.from_entity(movement)


@router.post(
    "/adjust",
    response_model=MovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses=MUTATION_ERRORS,
)
async def adjust_stock(
    request: AdjustStockRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> MovementResponse:
    """Set a counted quantity (ADJUSTMENT movement)."""
    movement = await engine.adjust_stock(
        company_id,
        request.product_id,
        request.branch_id,
        request.new_quantity,
        request.reason,
        notes=request.notes,
        performed_by=request.performed_by,
    )
    return MovementResponse.from_entity(movement)


@router.post(
    "/transfer",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses=MUTATION_ERRORS,
)
async def transfer_stock(
    request: TransferStockRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> TransferResponse:
    """Move stock between branches (two TRANSFER movements, one reference)."""
    result = await engine.transfer_stock(
        company_id,
        request.product_id,
        request.from_branch_id,
        request.to_branch_id,
        request.quantity,
        notes=request.notes,
        performed_by=request.performed_by,
    )
    return TransferResponse.from_entity(result)


@router.post(
    "/reserve",
    response_model=InventoryRecordResponse,
    responses=MUTATION_ERRORS,
)
async def reserve_stock(
    request: ReserveStockRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> InventoryRecordResponse:
    """Hold available stock."""
    record = await engine.reserve_stock(
        company_id,
        request.product_id,
        request.branch_id,
        request.quantity,
        reference=request.reference,
    )
    return InventoryRecordResponse.from_entity(record)


@router.post(
    "/release",
    response_model=InventoryRecordResponse,
    responses=MUTATION_ERRORS,
)
async def release_reservation(
    request: ReleaseReservationRequest,
    company_id: str = Depends(get_company_id),
    engine: StockOperationsEngine = Depends(get_engine),
) -> InventoryRecordResponse:
    """Release held stock."""
    record = await engine.release_reservation(
        company_id,
        request.product_id,
        request.branch_id,
        request.quantity,
    )
    return InventoryRecordResponse.from_entity(record)
