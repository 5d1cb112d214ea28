"""Shared constants and direct-database helpers for tests."""

from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.core.interfaces import IUnitOfWork, TransactionContext

COMPANY = "co-acme"
OTHER_COMPANY = "co-globex"

# Tracked, threshold 5, cost 6.0
WIDGET = "prod-widget"
# Tracked, no threshold, no cost (valued at price 20.0)
GADGET = "prod-gadget"
# Service item, stock not tracked
SERVICE = "prod-service"
# Belongs to OTHER_COMPANY
FOREIGN_PRODUCT = "prod-foreign"

MAIN_STORE = "br-main"
WAREHOUSE = "br-warehouse"
FOREIGN_BRANCH = "br-foreign"


async def fetch_quantity(db_path: Path, product_id: str, branch_id: str) -> tuple[int, int] | None:
    """Read (quantity, reserved_quantity) straight from the database."""
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute(
            "SELECT quantity, reserved_quantity FROM inventory_records "
            "WHERE product_id = ? AND branch_id = ?",
            (product_id, branch_id),
        )
        row = await cursor.fetchone()
    return (row[0], row[1]) if row else None


async def fetch_ledger_sum(db_path: Path, product_id: str, branch_id: str) -> int:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute(
            "SELECT COALESCE(SUM(quantity), 0) FROM inventory_movements "
            "WHERE product_id = ? AND branch_id = ?",
            (product_id, branch_id),
        )
        row = await cursor.fetchone()
    return row[0]


async def fetch_product_stock(db_path: Path, product_id: str) -> int:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT stock FROM products WHERE id = ?", (product_id,))
        row = await cursor.fetchone()
    return row[0]


async def fetch_movement_count(db_path: Path) -> int:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("SELECT COUNT(*) FROM inventory_movements")
        row = await cursor.fetchone()
    return row[0]


class FakeTransaction(TransactionContext):
    def __init__(self, read_only: bool):
        self._read_only = read_only

    @property
    def transaction_id(self) -> str:
        return "fake"

    @property
    def read_only(self) -> bool:
        return self._read_only


class FakeUnitOfWork(IUnitOfWork):
    """Records which operations opened transactions."""

    def __init__(self):
        self.opened: list[tuple[str, bool]] = []

    @asynccontextmanager
    async def transaction(self, operation: str):
        self.opened.append((operation, False))
        yield FakeTransaction(read_only=False)

    @asynccontextmanager
    async def snapshot(self, operation: str):
        self.opened.append((operation, True))
        yield FakeTransaction(read_only=True)
