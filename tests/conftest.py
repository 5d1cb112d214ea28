"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest

from stockledger.config import reset_settings
from stockledger.core.services import (
    AvailabilityQueryService,
    LedgerReconciler,
    MovementLedgerQuery,
    StockOperationsEngine,
)
from stockledger.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteCatalogStore,
    SQLiteInventoryStore,
)
from stockledger.infrastructure.storage.sqlite.migrations import run_migrations
from tests.helpers import (
    COMPANY,
    FOREIGN_BRANCH,
    FOREIGN_PRODUCT,
    GADGET,
    MAIN_STORE,
    OTHER_COMPANY,
    SERVICE,
    WAREHOUSE,
    WIDGET,
)


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a throwaway data dir for every test."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "ledger.db"


async def seed_catalog(db_path: Path) -> None:
    """Insert two tenants with their products and branches."""
    async with aiosqlite.connect(db_path) as conn:
        await conn.executemany(
            "INSERT INTO branches (id, company_id, name) VALUES (?, ?, ?)",
            [
                (MAIN_STORE, COMPANY, "Main Store"),
                (WAREHOUSE, COMPANY, "Warehouse"),
                (FOREIGN_BRANCH, OTHER_COMPANY, "Globex Depot"),
            ],
        )
        await conn.executemany(
            """
            INSERT INTO products (
                id, company_id, name, sku, active, track_inventory,
                low_stock_threshold, price, cost
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (WIDGET, COMPANY, "Widget", "WID-001", 1, 1, 5, 10.0, 6.0),
                (GADGET, COMPANY, "Gadget", "GAD-001", 1, 1, None, 20.0, None),
                (SERVICE, COMPANY, "Installation", None, 1, 0, None, 50.0, None),
                (FOREIGN_PRODUCT, OTHER_COMPANY, "Sprocket", "SPR-001", 1, 1, 3, 4.0, 2.0),
            ],
        )
        await conn.commit()


@pytest.fixture
async def ledger_db(temp_db_path: Path) -> AsyncGenerator[Path, None]:
    """Migrated and seeded temporary database."""
    await run_migrations(temp_db_path)
    await seed_catalog(temp_db_path)
    yield temp_db_path


@pytest.fixture
async def pool(ledger_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool (unit of work) over the seeded database."""
    p = ConnectionPool(ledger_db, pool_size=5, busy_timeout=10000)
    await p.initialize()
    yield p
    await p.close()


@pytest.fixture
def inventory_store() -> SQLiteInventoryStore:
    return SQLiteInventoryStore()


@pytest.fixture
def catalog_store() -> SQLiteCatalogStore:
    return SQLiteCatalogStore()


@pytest.fixture
def engine(pool, inventory_store, catalog_store) -> StockOperationsEngine:
    return StockOperationsEngine(pool, inventory_store, catalog_store)


@pytest.fixture
def availability(pool, inventory_store, catalog_store) -> AvailabilityQueryService:
    return AvailabilityQueryService(pool, inventory_store, catalog_store)


@pytest.fixture
def ledger_query(pool, inventory_store) -> MovementLedgerQuery:
    return MovementLedgerQuery(pool, inventory_store)


@pytest.fixture
def reconciler(pool, inventory_store) -> LedgerReconciler:
    return LedgerReconciler(pool, inventory_store)
