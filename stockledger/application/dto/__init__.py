"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
"""

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
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    InventoryLevelResponse,
    InventoryLevelsResponse,
    InventoryRecordResponse,
    MovementPageResponse,
    MovementResponse,
    ReconciliationResponse,
    TransferResponse,
    ValuationResponse,
)

__all__ = [
    # Requests
    "AddStockRequest",
    "RemoveStockRequest",
    "AdjustStockRequest",
    "TransferStockRequest",
    "ReserveStockRequest",
    "ReleaseReservationRequest",
    # Responses
    "AvailabilityResponse",
    "ComponentHealthResponse",
    "ErrorResponse",
    "HealthResponse",
    "InventoryLevelResponse",
    "InventoryLevelsResponse",
    "InventoryRecordResponse",
    "MovementPageResponse",
    "MovementResponse",
    "ReconciliationResponse",
    "TransferResponse",
    "ValuationResponse",
]
