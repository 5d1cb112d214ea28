"""Inventory domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(UTC)


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"
    TRANSFER = "TRANSFER"


class ReferenceType(str, Enum):
    """Default reference types written by the engine."""

    PURCHASE = "purchase"
    SALE = "sale"
    ADJUSTMENT = "adjustment"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


class InventoryRecord(BaseModel):
    """Current on-hand and reserved quantity for one product at one branch."""

    product_id: str
    branch_id: str
    quantity: int = 0
    reserved_quantity: int = 0
    last_restocked: datetime | None = None
    last_count_date: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def available_quantity(self) -> int:
        """On-hand quantity not held by reservations."""
        return self.quantity - self.reserved_quantity


class Movement(BaseModel):
    """One immutable, signed quantity delta against a product at a branch."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    product_id: str
    branch_id: str
    type: MovementType
    quantity: int  # signed delta
    unit_cost: float | None = None
    reference: str | None = None
    reference_type: str | None = None
    notes: str | None = None
    performed_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    # Display fields, filled by ledger queries only
    product_name: str | None = None
    product_sku: str | None = None
    branch_name: str | None = None


class TransferResult(BaseModel):
    """Both legs of a committed transfer."""

    reference: str
    out_movement: Movement
    in_movement: Movement


class InventoryLevel(BaseModel):
    """Inventory record joined with product and branch metadata.

    When a row cannot be evaluated it is returned with ``unavailable=True``
    and its numeric fields left as ``None``.
    """

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


UNLIMITED = -1


class AvailabilityResult(BaseModel):
    """Answer to a point availability check.

    ``current_stock`` and ``available_quantity`` are -1 for products that
    do not track inventory.
    """

    available: bool
    current_stock: int
    reserved_quantity: int
    available_quantity: int
    message: str | None = None

    @classmethod
    def unlimited(cls) -> "AvailabilityResult":
        return cls(
            available=True,
            current_stock=UNLIMITED,
            reserved_quantity=0,
            available_quantity=UNLIMITED,
        )

    @property
    def is_unlimited(self) -> bool:
        return self.available_quantity == UNLIMITED


class MovementFilters(BaseModel):
    """Filters for ledger queries."""

    product_id: str | None = None
    branch_id: str | None = None
    type: MovementType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    page: int = 1
    limit: int | None = None


class MovementPage(BaseModel):
    """One page of ledger entries, newest first."""

    movements: list[Movement]
    total: int
    page: int
    limit: int
    total_pages: int


class ValuationReport(BaseModel):
    """Inventory valuation at cost (falling back to price)."""

    total_value: float = 0.0
    total_quantity: int = 0
    average_cost_per_unit: float = 0.0  # unweighted mean of per-row unit cost
    weighted_average_cost_per_unit: float = 0.0
    items_count: int = 0
    unavailable_items: int = 0


class LedgerDrift(BaseModel):
    """A record whose quantity disagrees with its movement sum."""

    product_id: str
    branch_id: str
    record_quantity: int
    ledger_quantity: int


class StockDrift(BaseModel):
    """A product whose denormalized stock disagrees with its records."""

    product_id: str
    product_stock: int
    records_quantity: int


class ReconciliationReport(BaseModel):
    """Result of checking the ledger against the materialized state."""

    company_id: str
    records_checked: int = 0
    ledger_drift: list[LedgerDrift] = Field(default_factory=list)
    stock_drift: list[StockDrift] = Field(default_factory=list)
    checked_at: datetime = Field(default_factory=utcnow)

    @property
    def is_consistent(self) -> bool:
        return not self.ledger_drift and not self.stock_drift
