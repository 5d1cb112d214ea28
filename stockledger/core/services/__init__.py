"""
Core business logic services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockledger.core.services.availability import AvailabilityQueryService, evaluate_level
from stockledger.core.services.movement_ledger import MovementLedgerQuery
from stockledger.core.services.reconciler import LedgerReconciler
from stockledger.core.services.stock_operations import StockOperationsEngine, new_reference
from stockledger.core.services.total_stock import TotalStockAggregator

__all__ = [
    # Mutations
    "StockOperationsEngine",
    "TotalStockAggregator",
    "new_reference",
    # Reporting
    "AvailabilityQueryService",
    "evaluate_level",
    # Ledger
    "MovementLedgerQuery",
    "LedgerReconciler",
]
