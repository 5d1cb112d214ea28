"""
Domain exceptions for the stock ledger.

Every engine failure aborts the enclosing transaction; callers decide
whether to retry (TransactionConflictError) or surface the error.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Lookup Exceptions
class NotFoundError(LedgerError):
    """Base exception for missing or foreign-tenant entities."""

    pass


class ProductNotFoundError(NotFoundError):
    """Product does not exist or belongs to another company."""

    def __init__(self, product_id: str, company_id: str | None = None):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id, "company_id": company_id},
        )


class BranchNotFoundError(NotFoundError):
    """Branch does not exist or belongs to another company."""

    def __init__(self, branch_id: str, company_id: str | None = None, role: str | None = None):
        label = f"{role.capitalize()} branch" if role else "Branch"
        super().__init__(
            f"{label} not found: {branch_id}",
            code="BRANCH_NOT_FOUND",
            details={"branch_id": branch_id, "company_id": company_id, "role": role},
        )


class InventoryRecordNotFoundError(NotFoundError):
    """No inventory record exists for the product at the branch."""

    def __init__(self, product_id: str, branch_id: str):
        super().__init__(
            f"Inventory record not found for product {product_id} at branch {branch_id}",
            code="INVENTORY_RECORD_NOT_FOUND",
            details={"product_id": product_id, "branch_id": branch_id},
        )


# Stock Exceptions
class StockError(LedgerError):
    """Base exception for stock invariant violations."""

    pass


class InsufficientStockError(StockError):
    """On-hand quantity would go negative."""

    def __init__(self, product_id: str, branch_id: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id} at branch {branch_id}: "
            f"requested {requested}, on hand {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "branch_id": branch_id,
                "requested": requested,
                "available": available,
            },
        )


class InsufficientAvailableStockError(StockError):
    """Unreserved quantity cannot cover a reservation."""

    def __init__(
        self,
        product_id: str,
        branch_id: str,
        requested: int,
        available: int,
        reserved: int,
    ):
        super().__init__(
            f"Insufficient available stock for reservation of product {product_id} "
            f"at branch {branch_id}: requested {requested}, available {available} "
            f"({reserved} reserved)",
            code="INSUFFICIENT_AVAILABLE_STOCK",
            details={
                "product_id": product_id,
                "branch_id": branch_id,
                "requested": requested,
                "available": available,
                "reserved": reserved,
            },
        )


class InvalidOperationError(StockError):
    """Operation is malformed (same-branch transfer, non-positive quantity)."""

    def __init__(self, operation: str, reason: str, **details: Any):
        super().__init__(
            f"Invalid {operation}: {reason}",
            code="INVALID_OPERATION",
            details={"operation": operation, "reason": reason, **details},
        )


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class TransactionConflictError(StorageError):
    """The store could not obtain its locks in time; safe to retry."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Transaction conflict during {operation}: {error}",
            code="TRANSACTION_CONFLICT",
            details={"operation": operation, "error": error, "retryable": True},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
