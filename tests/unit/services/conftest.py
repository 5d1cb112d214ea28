"""Fixtures for service tests that run without a database."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stockledger.core.entities import Branch, Product
from tests.helpers import COMPANY, MAIN_STORE, WAREHOUSE, WIDGET, FakeUnitOfWork


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def mock_catalog_store():
    store = AsyncMock()
    store.get_product.return_value = Product(
        id=WIDGET, company_id=COMPANY, name="Widget", low_stock_threshold=5, price=10.0, cost=6.0
    )

    async def get_branch(tx, branch_id, company_id):
        names = {MAIN_STORE: "Main Store", WAREHOUSE: "Warehouse"}
        if branch_id not in names:
            return None
        return Branch(id=branch_id, company_id=company_id, name=names[branch_id])

    store.get_branch.side_effect = get_branch
    return store


@pytest.fixture
def mock_inventory_store():
    store = AsyncMock()
    store.sum_quantity.return_value = 0

    async def append_movement(tx, movement):
        return movement.model_copy(update={"id": 1})

    store.append_movement.side_effect = append_movement
    store.save_record.side_effect = lambda tx, record: record
    return store


@pytest.fixture
def mock_aggregator():
    aggregator = MagicMock()
    aggregator.update_product_total_stock = AsyncMock(return_value=0)
    return aggregator
