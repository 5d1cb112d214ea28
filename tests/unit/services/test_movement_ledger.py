"""Tests for MovementLedgerQuery."""

from datetime import timedelta

from stockledger.core.entities import MovementFilters, MovementType
from stockledger.core.entities.inventory import utcnow
from stockledger.core.services import MovementLedgerQuery
from tests.helpers import (
    COMPANY,
    FOREIGN_BRANCH,
    FOREIGN_PRODUCT,
    GADGET,
    MAIN_STORE,
    OTHER_COMPANY,
    WAREHOUSE,
    WIDGET,
)


class TestPagination:
    async def test_empty_ledger(self, ledger_query):
        page = await ledger_query.get_movements(COMPANY)

        assert page.movements == []
        assert page.total == 0
        assert page.total_pages == 0
        assert page.page == 1
        assert page.limit == 50

    async def test_pages_newest_first(self, engine, ledger_query):
        for qty in range(1, 6):
            await engine.add_stock(COMPANY, WIDGET, MAIN_STORE, qty)

        first = await ledger_query.get_movements(COMPANY, MovementFilters(limit=2))
        last = await ledger_query.get_movements(COMPANY, MovementFilters(page=3, limit=2))

        assert first.total == 5
        assert first.total_pages == 3
        assert [m.quantity for m in first.movements] == [5, 4]
        assert [m.quantity for m in last.movements] == [1]

    async def test_limit_clamped_to_max(self, ledger_query):
        page = await ledger_query.get_movements(COMPANY, MovementFilters(limit=500))
        assert page.limit == 100

    async def test_limit_and_page_clamped_to_one(self, ledger_query):
        page = await ledger_query.get_movements(COMPANY, MovementFilters(page=0, limit=0))
        assert page.limit == 1
        assert page.page == 1

    async def test_page_sizes_from_constructor(self, pool, inventory_store):
        query = MovementLedgerQuery(pool, inventory_store, default_page_size=7, max_page_size=9)

        assert (await query.get_movements(COMPANY)).limit == 7
        assert (await query.get_movements(COMPANY, MovementFilters(limit=50))).limit == 9

    async def test_page_past_end_is_empty(self, engine, ledger_query):
        await engine.add_stock(COMPANY, WIDGET, MAIN_STORE, 1)

        page = await ledger_query.get_movements(COMPANY, MovementFilters(page=4))

        assert page.movements == []
        assert page.total == 1


class TestFilters:
    async def test_type_and_product(self, engine, ledger_query):
        await engine.add_stock(COMPANY, WIDGET, MAIN_STORE, 10)
        await engine.remove_stock(COMPANY, WIDGET, MAIN_STORE, 3)
        await engine.transfer_stock(COMPANY, WIDGET, MAIN_STORE, WAREHOUSE, 2)
        await engine.add_stock(COMPANY, GADGET, MAIN_STORE, 1)

        transfers = await ledger_query.get_movements(
            COMPANY, MovementFilters(type=MovementType.TRANSFER)
        )
        gadget = await ledger_query.get_movements(COMPANY, MovementFilters(product_id=GADGET))
        warehouse = await ledger_query.get_movements(
            COMPANY, MovementFilters(branch_id=WAREHOUSE)
        )

        assert transfers.total == 2
        assert {m.quantity for m in transfers.movements} == {-2, 2}
        assert [m.quantity for m in gadget.movements] == [1]
        assert [m.quantity for m in warehouse.movements] == [2]

    async def test_date_range(self, engine, ledger_query):
        await engine.add_stock(COMPANY, WIDGET, MAIN_STORE, 1)
        now = utcnow()

        future = await ledger_query.get_movements(
            COMPANY, MovementFilters(start_date=now + timedelta(hours=1))
        )
        window = await ledger_query.get_movements(
            COMPANY,
            MovementFilters(start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=1)),
        )

        assert future.total == 0
        assert window.total == 1

    async def test_display_fields(self, engine, ledger_query):
        await engine.add_stock(COMPANY, WIDGET, WAREHOUSE, 1, reference="PO-77")

        movement = (await ledger_query.get_movements(COMPANY)).movements[0]

        assert movement.product_name == "Widget"
        assert movement.product_sku == "WID-001"
        assert movement.branch_name == "Warehouse"
        assert movement.reference == "PO-77"


class TestTenantScope:
    async def test_only_own_movements(self, engine, ledger_query):
        await engine.add_stock(COMPANY, WIDGET, MAIN_STORE, 1)
        await engine.add_stock(OTHER_COMPANY, FOREIGN_PRODUCT, FOREIGN_BRANCH, 2)

        ours = await ledger_query.get_movements(COMPANY)
        theirs = await ledger_query.get_movements(OTHER_COMPANY)

        assert [m.product_id for m in ours.movements] == [WIDGET]
        assert [m.product_id for m in theirs.movements] == [FOREIGN_PRODUCT]

    async def test_foreign_product_filter_returns_nothing(self, engine, ledger_query):
        await engine.add_stock(OTHER_COMPANY, FOREIGN_PRODUCT, FOREIGN_BRANCH, 2)

        page = await ledger_query.get_movements(
            COMPANY, MovementFilters(product_id=FOREIGN_PRODUCT)
        )

        assert page.total == 0
