"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between the stock services and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from stockledger.core.entities import (
    AvailabilityResult,
    InventoryLevel,
    InventoryRecord,
    Movement,
    MovementPage,
    ReconciliationReport,
    TransferResult,
    ValuationReport,
)


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- Inventory ---


class MovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    product_id: str
    branch_id: str
    type: str
    quantity: int
    unit_cost: float | None = None
    reference: str | None = None
    reference_type: str | None = None
    notes: str | None = None
    performed_by: str | None = None
    created_at: datetime
    product_name: str | None = None
    product_sku: str | None = None
    branch_name: str | None = None

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            product_id=movement.product_id,
            branch_id=movement.branch_id,
            type=movement.type.value,
            quantity=movement.quantity,
            unit_cost=movement.unit_cost,
            reference=movement.reference,
            reference_type=movement.reference_type,
            notes=movement.notes,
            performed_by=movement.performed_by,
            created_at=movement.created_at,
            product_name=movement.product_name,
            product_sku=movement.product_sku,
            branch_name=movement.branch_name,
        )


class TransferResponse(BaseModel):
    """Both legs of a transfer."""

    reference: str
    out_movement: MovementResponse
    in_movement: MovementResponse

    @classmethod
    def from_entity(cls, result: TransferResult) -> "TransferResponse":
        return cls(
            reference=result.reference,
            out_movement=MovementResponse.from_entity(result.out_movement),
            in_movement=MovementResponse.from_entity(result.in_movement),
        )


class InventoryRecordResponse(BaseModel):
    """Current stock of one product at one branch."""

    product_id: str
    branch_id: str
    quantity: int
    reserved_quantity: int
    available_quantity: int
    last_restocked: datetime | None = None
    last_count_date: datetime | None = None
    updated_at: datetime

    @classmethod
    def from_entity(cls, record: InventoryRecord) -> "InventoryRecordResponse":
        return cls(
            product_id=record.product_id,
            branch_id=record.branch_id,
            quantity=record.quantity,
            reserved_quantity=record.reserved_quantity,
            available_quantity=record.available_quantity,
            last_restocked=record.last_restocked,
            last_count_date=record.last_count_date,
            updated_at=record.updated_at,
        )


class InventoryLevelResponse(BaseModel):
    """Inventory level with product and branch metadata."""

    product_id: str
    product_name: str | None = None
    product_sku: str | None = None
    branch_id: str
    branch_name: str | None = None
    quantity: int | None = None
    reserved_quantity: int | None = None
    available_quantity: int | None = None
    low_stock_threshold: int | None = None
    is_low_stock: bool = False
    is_out_of_stock: bool = False
    last_restocked: datetime | None = None
    last_count_date: datetime | None = None
    unavailable: bool = False

    @classmethod
    def from_entity(cls, level: InventoryLevel) -> "InventoryLevelResponse":
        return cls(**level.model_dump())


class InventoryLevelsResponse(BaseModel):
    """List of inventory levels."""

    items: list[InventoryLevelResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Availability check result. -1 quantities mean stock is not tracked."""

    available: bool
    current_stock: int
    reserved_quantity: int
    available_quantity: int
    message: str | None = None

    @classmethod
    def from_entity(cls, result: AvailabilityResult) -> "AvailabilityResponse":
        return cls(**result.model_dump())


class ValuationResponse(BaseModel):
    """Inventory valuation report."""

    total_value: float
    total_quantity: int
    average_cost_per_unit: float
    weighted_average_cost_per_unit: float
    items_count: int
    unavailable_items: int = 0

    @classmethod
    def from_entity(cls, report: ValuationReport) -> "ValuationResponse":
        return cls(**report.model_dump())


class MovementPageResponse(BaseModel):
    """Paginated movement history."""

    movements: list[MovementResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_entity(cls, page: MovementPage) -> "MovementPageResponse":
        return cls(
            movements=[MovementResponse.from_entity(m) for m in page.movements],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class LedgerDriftResponse(BaseModel):
    product_id: str
    branch_id: str
    record_quantity: int
    ledger_quantity: int


class StockDriftResponse(BaseModel):
    product_id: str
    product_stock: int
    records_quantity: int


class ReconciliationResponse(BaseModel):
    """Ledger reconciliation report."""

    company_id: str
    consistent: bool
    records_checked: int
    ledger_drift: list[LedgerDriftResponse]
    stock_drift: list[StockDriftResponse]
    checked_at: datetime

    @classmethod
    def from_entity(cls, report: ReconciliationReport) -> "ReconciliationResponse":
        return cls(
            company_id=report.company_id,
            consistent=report.is_consistent,
            records_checked=report.records_checked,
            ledger_drift=[LedgerDriftResponse(**d.model_dump()) for d in report.ledger_drift],
            stock_drift=[StockDriftResponse(**d.model_dump()) for d in report.stock_drift],
            checked_at=report.checked_at,
        )
