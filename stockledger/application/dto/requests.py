"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and the stock services.
"""

from pydantic import BaseModel, Field


class AddStockRequest(BaseModel):
    """Request to receive stock at a branch (IN movement)."""

    product_id: str = Field(..., description="Product ID")
    branch_id: str = Field(..., description="Receiving branch ID")
    quantity: int = Field(..., gt=0, description="Quantity to receive")
    unit_cost: float | None = Field(default=None, ge=0, description="Cost per unit")
    reference: str | None = Field(
        default=None,
        description="PO or invoice reference",
        examples=["PO-2026-0142"],
    )
    notes: str | None = Field(default=None, description="Additional notes")
    performed_by: str | None = Field(default=None, description="User performing the change")


class RemoveStockRequest(BaseModel):
    """Request to issue stock from a branch (OUT movement)."""

    product_id: str = Field(..., description="Product ID")
    branch_id: str = Field(..., description="Issuing branch ID")
    quantity: int = Field(..., gt=0, description="Quantity to issue")
    reference: str | None = Field(default=None, description="Sale or order reference")
    notes: str | None = Field(default=None, description="Additional notes")
    performed_by: str | None = Field(default=None, description="User performing the change")


class AdjustStockRequest(BaseModel):
    """Request to set a counted quantity."""

    product_id: str = Field(..., description="Product ID")
    branch_id: str = Field(..., description="Counted branch ID")
    new_quantity: int = Field(..., ge=0, description="Counted on-hand quantity")
    reason: str = Field(
        ...,
        min_length=1,
        description="Why the count differs",
        examples=["Stock count", "Damaged goods"],
    )
    notes: str | None = Field(default=None, description="Additional notes")
    performed_by: str | None = Field(default=None, description="User performing the change")


class TransferStockRequest(BaseModel):
    """Request to move stock between two branches."""

    product_id: str = Field(..., description="Product ID")
    from_branch_id: str = Field(..., description="Source branch ID")
    to_branch_id: str = Field(..., description="Destination branch ID")
    quantity: int = Field(..., gt=0, description="Quantity to move")
    notes: str | None = Field(default=None, description="Additional notes")
    performed_by: str | None = Field(default=None, description="User performing the change")


class ReserveStockRequest(BaseModel):
    """Request to hold stock for an order."""

    product_id: str = Field(..., description="Product ID")
    branch_id: str = Field(..., description="Branch holding the stock")
    quantity: int = Field(..., gt=0, description="Quantity to reserve")
    reference: str | None = Field(default=None, description="Order reference")


class ReleaseReservationRequest(BaseModel):
    """Request to release held stock."""

    product_id: str = Field(..., description="Product ID")
    branch_id: str = Field(..., description="Branch holding the stock")
    quantity: int = Field(..., gt=0, description="Quantity to release")
