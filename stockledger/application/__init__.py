"""
Application layer - DTOs and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Providing factory functions for dependency injection
"""

from stockledger.application.dto import (
    AddStockRequest,
    AdjustStockRequest,
    AvailabilityResponse,
    ErrorResponse,
    HealthResponse,
    InventoryLevelResponse,
    InventoryLevelsResponse,
    InventoryRecordResponse,
    MovementPageResponse,
    MovementResponse,
    ReconciliationResponse,
    ReleaseReservationRequest,
    RemoveStockRequest,
    ReserveStockRequest,
    TransferResponse,
    TransferStockRequest,
    ValuationResponse,
)
from stockledger.application.services import (
    get_availability_service,
    get_movement_query,
    get_reconciler,
    get_stock_engine,
    reset_services,
)

__all__ = [
    # Request DTOs
    "AddStockRequest",
    "RemoveStockRequest",
    "AdjustStockRequest",
    "TransferStockRequest",
    "ReserveStockRequest",
    "ReleaseReservationRequest",
    # Response DTOs
    "AvailabilityResponse",
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
    # Service factories
    "get_stock_engine",
    "get_availability_service",
    "get_movement_query",
    "get_reconciler",
    "reset_services",
]
