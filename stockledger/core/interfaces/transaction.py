"""
Abstract unit of work and the transaction handle it hands out.

Every store call that belongs to one atomic ledger operation receives
the same TransactionContext; nothing outside the context manager that
produced it may use it.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class TransactionContext(ABC):
    """Handle to one open transaction."""

    @property
    @abstractmethod
    def transaction_id(self) -> str:
        """Short identifier used to correlate log events."""
        pass

    @property
    @abstractmethod
    def read_only(self) -> bool:
        """True for snapshot reads; stores refuse writes through it."""
        pass


class IUnitOfWork(ABC):
    """Opens transactions against the backing store."""

    @abstractmethod
    def transaction(self, operation: str) -> AbstractAsyncContextManager[TransactionContext]:
        """
        Open a write transaction.

        Commits when the block exits normally, rolls back on any exception.
        Lock contention that outlasts the store timeout raises
        TransactionConflictError.
        """
        pass

    @abstractmethod
    def snapshot(self, operation: str) -> AbstractAsyncContextManager[TransactionContext]:
        """Open a read-only transaction with a consistent view."""
        pass
