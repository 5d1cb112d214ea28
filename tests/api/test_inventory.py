"""API tests for inventory endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from stockledger.api.dependencies import (
    get_availability,
    get_engine,
    get_ledger_reconciler,
    get_movements_query,
)
from stockledger.api.main import app
from stockledger.core.entities import (
    AvailabilityResult,
    InventoryLevel,
    InventoryRecord,
    LedgerDrift,
    Movement,
    MovementFilters,
    MovementPage,
    MovementType,
    ReconciliationReport,
    TransferResult,
    ValuationReport,
)
from stockledger.core.exceptions import (
    BranchNotFoundError,
    InsufficientAvailableStockError,
    InsufficientStockError,
    InvalidOperationError,
    ProductNotFoundError,
    TransactionConflictError,
)
from stockledger.core.services import (
    AvailabilityQueryService,
    LedgerReconciler,
    MovementLedgerQuery,
    StockOperationsEngine,
)
from tests.helpers import COMPANY, MAIN_STORE, WAREHOUSE, WIDGET

HEADERS = {"X-Company-ID": COMPANY}


def _movement(quantity: int, branch_id: str = MAIN_STORE, **kwargs) -> Movement:
    return Movement(
        id=kwargs.pop("id", 1),
        product_id=WIDGET,
        branch_id=branch_id,
        type=kwargs.pop("type", MovementType.IN if quantity > 0 else MovementType.OUT),
        quantity=quantity,
        **kwargs,
    )


@pytest.fixture
def mock_engine():
    engine = AsyncMock(spec=StockOperationsEngine)
    engine.add_stock.return_value = _movement(10, reference_type="purchase")
    engine.remove_stock.return_value = _movement(-3, reference_type="sale")
    engine.adjust_stock.return_value = _movement(
        -2, type=MovementType.ADJUSTMENT, notes="Cycle count. Previous: 10, New: 8."
    )
    engine.transfer_stock.return_value = TransferResult(
        reference="TRF-20260118093015-3F9A1C",
        out_movement=_movement(-4, type=MovementType.TRANSFER, reference="TRF-20260118093015-3F9A1C"),
        in_movement=_movement(
            4, WAREHOUSE, id=2, type=MovementType.TRANSFER, reference="TRF-20260118093015-3F9A1C"
        ),
    )
    engine.reserve_stock.return_value = InventoryRecord(
        product_id=WIDGET, branch_id=MAIN_STORE, quantity=10, reserved_quantity=4
    )
    engine.release_reservation.return_value = InventoryRecord(
        product_id=WIDGET, branch_id=MAIN_STORE, quantity=10, reserved_quantity=0
    )
    engine.check_availability.return_value = AvailabilityResult(
        available=True, current_stock=10, reserved_quantity=4, available_quantity=6
    )
    return engine


@pytest.fixture
def mock_availability():
    service = AsyncMock(spec=AvailabilityQueryService)
    level = InventoryLevel(
        product_id=WIDGET,
        product_name="Widget",
        branch_id=MAIN_STORE,
        branch_name="Main Store",
        quantity=3,
        reserved_quantity=0,
        available_quantity=3,
        low_stock_threshold=5,
        is_low_stock=True,
    )
    service.get_inventory_levels.return_value = [level]
    service.get_low_stock_alerts.return_value = [level]
    service.get_product_inventory.return_value = [level]
    service.get_inventory_valuation.return_value = ValuationReport(
        total_value=60.0,
        total_quantity=10,
        average_cost_per_unit=6.0,
        weighted_average_cost_per_unit=6.0,
        items_count=1,
    )
    return service


@pytest.fixture
def mock_movements():
    query = AsyncMock(spec=MovementLedgerQuery)
    query.get_movements.return_value = MovementPage(
        movements=[_movement(5, id=2), _movement(-1, id=1)],
        total=7,
        page=1,
        limit=2,
        total_pages=4,
    )
    return query


@pytest.fixture
def mock_reconciler():
    reconciler = AsyncMock(spec=LedgerReconciler)
    reconciler.reconcile.return_value = ReconciliationReport(company_id=COMPANY, records_checked=2)
    return reconciler


@pytest.fixture
async def client(mock_engine, mock_availability, mock_movements, mock_reconciler):
    app.dependency_overrides[get_engine] = lambda: mock_engine
    app.dependency_overrides[get_availability] = lambda: mock_availability
    app.dependency_overrides[get_movements_query] = lambda: mock_movements
    app.dependency_overrides[get_ledger_reconciler] = lambda: mock_reconciler
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestTenantHeader:
    async def test_missing_company_header(self, client: AsyncClient, mock_availability):
        response = await client.get("/api/inventory/levels")

        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_COMPANY"
        mock_availability.get_inventory_levels.assert_not_called()

    async def test_blank_company_header(self, client: AsyncClient):
        response = await client.get("/api/inventory/levels", headers={"X-Company-ID": "  "})
        assert response.status_code == 400

    async def test_company_passed_to_service(self, client: AsyncClient, mock_availability):
        await client.get("/api/inventory/levels", headers={"X-Company-ID": "co-initech"})
        assert mock_availability.get_inventory_levels.await_args.args[0] == "co-initech"


class TestMutations:
    async def test_add_returns_201(self, client: AsyncClient, mock_engine):
        response = await client.post(
            "/api/inventory/add",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 10, "unit_cost": 6.0},
            headers=HEADERS,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["quantity"] == 10
        assert data["type"] == "IN"
        mock_engine.add_stock.assert_awaited_once()
        assert mock_engine.add_stock.await_args.args == (COMPANY, WIDGET, MAIN_STORE, 10)
        assert mock_engine.add_stock.await_args.kwargs["unit_cost"] == 6.0

    async def test_add_rejects_non_positive_quantity(self, client: AsyncClient, mock_engine):
        response = await client.post(
            "/api/inventory/add",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 0},
            headers=HEADERS,
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        mock_engine.add_stock.assert_not_called()

    async def test_remove_insufficient_stock_is_409(self, client: AsyncClient, mock_engine):
        mock_engine.remove_stock.side_effect = InsufficientStockError(
            WIDGET, MAIN_STORE, requested=5, available=2
        )

        response = await client.post(
            "/api/inventory/remove",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 5},
            headers=HEADERS,
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "INSUFFICIENT_STOCK"
        assert data["path"] == "/api/inventory/remove"

    async def test_adjust(self, client: AsyncClient, mock_engine):
        response = await client.post(
            "/api/inventory/adjust",
            json={
                "product_id": WIDGET,
                "branch_id": MAIN_STORE,
                "new_quantity": 8,
                "reason": "Cycle count",
            },
            headers=HEADERS,
        )

        assert response.status_code == 201
        assert response.json()["type"] == "ADJUSTMENT"
        assert mock_engine.adjust_stock.await_args.args[3:] == (8, "Cycle count")

    async def test_adjust_requires_reason(self, client: AsyncClient):
        response = await client.post(
            "/api/inventory/adjust",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "new_quantity": 8, "reason": ""},
            headers=HEADERS,
        )
        assert response.status_code == 422

    async def test_transfer_returns_both_legs(self, client: AsyncClient):
        response = await client.post(
            "/api/inventory/transfer",
            json={
                "product_id": WIDGET,
                "from_branch_id": MAIN_STORE,
                "to_branch_id": WAREHOUSE,
                "quantity": 4,
            },
            headers=HEADERS,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["out_movement"]["quantity"] == -4
        assert data["in_movement"]["quantity"] == 4
        assert data["out_movement"]["reference"] == data["reference"]

    async def test_same_branch_transfer_is_400(self, client: AsyncClient, mock_engine):
        mock_engine.transfer_stock.side_effect = InvalidOperationError(
            "transfer_stock", "cannot transfer to the same branch"
        )

        response = await client.post(
            "/api/inventory/transfer",
            json={
                "product_id": WIDGET,
                "from_branch_id": MAIN_STORE,
                "to_branch_id": MAIN_STORE,
                "quantity": 1,
            },
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_OPERATION"

    async def test_unknown_branch_is_404(self, client: AsyncClient, mock_engine):
        mock_engine.add_stock.side_effect = BranchNotFoundError("br-missing", COMPANY)

        response = await client.post(
            "/api/inventory/add",
            json={"product_id": WIDGET, "branch_id": "br-missing", "quantity": 1},
            headers=HEADERS,
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "BRANCH_NOT_FOUND"

    async def test_conflict_is_503_with_retry_after(self, client: AsyncClient, mock_engine):
        mock_engine.add_stock.side_effect = TransactionConflictError(
            "record_movement", "database is locked"
        )

        response = await client.post(
            "/api/inventory/add",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 1},
            headers=HEADERS,
        )

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert response.json()["error_code"] == "TRANSACTION_CONFLICT"


class TestReservations:
    async def test_reserve(self, client: AsyncClient):
        response = await client.post(
            "/api/inventory/reserve",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 4},
            headers=HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["reserved_quantity"] == 4
        assert data["available_quantity"] == 6

    async def test_reserve_beyond_available_is_409(self, client: AsyncClient, mock_engine):
        mock_engine.reserve_stock.side_effect = InsufficientAvailableStockError(
            WIDGET, MAIN_STORE, requested=20, available=6, reserved=4
        )

        response = await client.post(
            "/api/inventory/reserve",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 20},
            headers=HEADERS,
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "INSUFFICIENT_AVAILABLE_STOCK"

    async def test_release(self, client: AsyncClient):
        response = await client.post(
            "/api/inventory/release",
            json={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 4},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["reserved_quantity"] == 0


class TestReports:
    async def test_levels(self, client: AsyncClient, mock_availability):
        response = await client.get(
            "/api/inventory/levels",
            params={"branch_id": MAIN_STORE, "low_stock_only": "true"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["is_low_stock"] is True
        assert mock_availability.get_inventory_levels.await_args.kwargs == {
            "branch_id": MAIN_STORE,
            "low_stock_only": True,
        }

    async def test_low_stock(self, client: AsyncClient):
        response = await client.get("/api/inventory/low-stock", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["items"][0]["product_name"] == "Widget"

    async def test_product_breakdown_not_found(self, client: AsyncClient, mock_availability):
        mock_availability.get_product_inventory.side_effect = ProductNotFoundError(
            "prod-foreign", COMPANY
        )

        response = await client.get("/api/inventory/products/prod-foreign", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"

    async def test_valuation(self, client: AsyncClient):
        response = await client.get("/api/inventory/valuation", headers=HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["total_value"] == 60.0
        assert data["unavailable_items"] == 0

    async def test_availability(self, client: AsyncClient, mock_engine):
        response = await client.get(
            "/api/inventory/availability",
            params={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 5},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["available"] is True
        assert mock_engine.check_availability.await_args.args == (COMPANY, WIDGET, MAIN_STORE, 5)

    async def test_availability_for_untracked_product(self, client: AsyncClient, mock_engine):
        mock_engine.check_availability.return_value = AvailabilityResult.unlimited()

        response = await client.get(
            "/api/inventory/availability",
            params={"product_id": "prod-service", "branch_id": MAIN_STORE, "quantity": 1000},
            headers=HEADERS,
        )

        data = response.json()
        assert data["available"] is True
        assert data["current_stock"] == -1
        assert data["available_quantity"] == -1

    async def test_availability_rejects_zero_quantity(self, client: AsyncClient, mock_engine):
        response = await client.get(
            "/api/inventory/availability",
            params={"product_id": WIDGET, "branch_id": MAIN_STORE, "quantity": 0},
            headers=HEADERS,
        )

        assert response.status_code == 422
        mock_engine.check_availability.assert_not_called()

    async def test_movements(self, client: AsyncClient, mock_movements):
        response = await client.get(
            "/api/inventory/movements",
            params={"type": "TRANSFER", "page": 1, "limit": 2},
            headers=HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 7
        assert data["total_pages"] == 4
        assert [m["id"] for m in data["movements"]] == [2, 1]

        company_id, filters = mock_movements.get_movements.await_args.args
        assert company_id == COMPANY
        assert filters == MovementFilters(type=MovementType.TRANSFER, page=1, limit=2)

    async def test_movements_rejects_unknown_type(self, client: AsyncClient):
        response = await client.get(
            "/api/inventory/movements", params={"type": "LOST"}, headers=HEADERS
        )
        assert response.status_code == 422

    async def test_reconcile_consistent(self, client: AsyncClient):
        response = await client.get("/api/inventory/reconcile", headers=HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["consistent"] is True
        assert data["records_checked"] == 2

    async def test_reconcile_reports_drift(self, client: AsyncClient, mock_reconciler):
        mock_reconciler.reconcile.return_value = ReconciliationReport(
            company_id=COMPANY,
            records_checked=1,
            ledger_drift=[
                LedgerDrift(
                    product_id=WIDGET, branch_id=MAIN_STORE, record_quantity=9, ledger_quantity=6
                )
            ],
        )

        response = await client.get("/api/inventory/reconcile", headers=HEADERS)

        data = response.json()
        assert data["consistent"] is False
        assert data["ledger_drift"][0]["record_quantity"] == 9
