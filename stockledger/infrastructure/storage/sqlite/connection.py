"""
Async SQLite connection pool with aiosqlite.

The pool is also the unit of work for the ledger: write transactions
start with BEGIN IMMEDIATE so the database write lock is held from the
first read, which serializes concurrent read-check-write sequences.
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import DatabaseError, TransactionConflictError
from stockledger.core.interfaces.transaction import IUnitOfWork, TransactionContext

logger = get_logger(__name__)


class SQLiteTransaction(TransactionContext):
    """Transaction handle bound to one pooled connection."""

    def __init__(self, connection: aiosqlite.Connection, read_only: bool):
        self._connection = connection
        self._read_only = read_only
        self._transaction_id = uuid.uuid4().hex[:8]
        self._closed = False

    @property
    def transaction_id(self) -> str:
        return self._transaction_id

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._closed:
            raise RuntimeError(f"Transaction {self._transaction_id} is closed")
        return self._connection

    def close(self) -> None:
        self._closed = True


def _translate_error(operation: str, error: aiosqlite.Error) -> Exception:
    """Map driver errors onto the storage exception taxonomy."""
    message = str(error)
    if isinstance(error, aiosqlite.OperationalError) and (
        "locked" in message.lower() or "busy" in message.lower()
    ):
        return TransactionConflictError(operation, message)
    return DatabaseError(operation, message)


class ConnectionPool(IUnitOfWork):
    """
    Async SQLite connection pool.

    Manages a pool of connections with configurable size.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 5000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await self._create_connection()
                self._connections.append(conn)
                await self._pool.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        """Create a connection in autocommit mode; transactions are explicit."""
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)

        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        await conn.execute("PRAGMA foreign_keys=ON")

        conn.row_factory = aiosqlite.Row

        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            await self._pool.put(conn)

    @asynccontextmanager
    async def transaction(self, operation: str = "transaction") -> AsyncIterator[SQLiteTransaction]:
        """
        Run a block inside one write transaction.

        Commits on success, rolls back on any exception (including
        cancellation) and translates driver errors.
        """
        async with self._begin(operation, "BEGIN IMMEDIATE", read_only=False) as tx:
            yield tx

    @asynccontextmanager
    async def snapshot(self, operation: str = "snapshot") -> AsyncIterator[SQLiteTransaction]:
        """Run a block of reads against one consistent WAL snapshot."""
        async with self._begin(operation, "BEGIN", read_only=True) as tx:
            yield tx

    @asynccontextmanager
    async def _begin(
        self, operation: str, statement: str, read_only: bool
    ) -> AsyncIterator[SQLiteTransaction]:
        async with self.acquire() as conn:
            tx = SQLiteTransaction(conn, read_only=read_only)
            try:
                await conn.execute(statement)
            except aiosqlite.Error as e:
                tx.close()
                error = _translate_error(operation, e)
                logger.warning(
                    "transaction_begin_failed",
                    operation=operation,
                    tx=tx.transaction_id,
                    error=str(e),
                )
                raise error from e

            try:
                yield tx
                await conn.commit()
            except aiosqlite.Error as e:
                await conn.rollback()
                logger.warning(
                    "transaction_rolled_back",
                    operation=operation,
                    tx=tx.transaction_id,
                    error=str(e),
                )
                raise _translate_error(operation, e) from e
            except BaseException:
                await conn.rollback()
                raise
            finally:
                tx.close()

    async def close(self) -> None:
        """Close all connections in the pool."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._initialized = False
            logger.info("connection_pool_closed")


# Process-wide pool used by the application wiring; services receive it explicitly
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the application connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the application connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
