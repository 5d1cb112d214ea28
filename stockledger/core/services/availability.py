"""Read-only stock reports: levels, low-stock alerts, per-product breakdown, valuation."""

from stockledger.config import get_logger
from stockledger.core.entities.inventory import InventoryLevel, ValuationReport
from stockledger.core.exceptions import ProductNotFoundError
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import IUnitOfWork

logger = get_logger(__name__)


def evaluate_level(level: InventoryLevel) -> InventoryLevel:
    """Fill in available quantity and the low/out-of-stock flags."""
    if level.unavailable:
        return level

    available = level.quantity - level.reserved_quantity
    threshold = level.low_stock_threshold
    return level.model_copy(
        update={
            "available_quantity": available,
            "is_out_of_stock": available <= 0,
            "is_low_stock": threshold is not None and available <= threshold,
        }
    )


class AvailabilityQueryService:
    """Reporting over the materialized inventory records."""

    def __init__(
        self,
        unit_of_work: IUnitOfWork,
        inventory_store: IInventoryStore,
        catalog_store: ICatalogStore,
    ) -> None:
        self._uow = unit_of_work
        self._inventory_store = inventory_store
        self._catalog_store = catalog_store

    async def get_inventory_levels(
        self,
        company_id: str,
        branch_id: str | None = None,
        low_stock_only: bool = False,
    ) -> list[InventoryLevel]:
        """
        Inventory levels for a company, lowest quantity first.

        Args:
            company_id: Tenant to report on
            branch_id: Restrict to one branch
            low_stock_only: Keep only low-stock and out-of-stock rows
        """
        async with self._uow.snapshot("get_inventory_levels") as tx:
            rows = await self._inventory_store.list_levels(tx, company_id, branch_id=branch_id)

        levels = [evaluate_level(row) for row in rows]
        if low_stock_only:
            levels = [lvl for lvl in levels if lvl.is_low_stock or lvl.is_out_of_stock]
        return levels

    async def get_low_stock_alerts(
        self, company_id: str, branch_id: str | None = None
    ) -> list[InventoryLevel]:
        return await self.get_inventory_levels(company_id, branch_id, low_stock_only=True)

    async def get_product_inventory(
        self, company_id: str, product_id: str
    ) -> list[InventoryLevel]:
        """Per-branch breakdown for one product owned by the company."""
        async with self._uow.snapshot("get_product_inventory") as tx:
            product = await self._catalog_store.get_product(tx, product_id, company_id)
            if product is None:
                raise ProductNotFoundError(product_id, company_id)
            rows = await self._inventory_store.list_levels(
                tx, company_id, product_id=product_id
            )
        return [evaluate_level(row) for row in rows]

    async def get_inventory_valuation(
        self, company_id: str, branch_id: str | None = None
    ) -> ValuationReport:
        """
        Value stock at cost, falling back to price.

        Rows without a usable unit cost are counted in unavailable_items
        and left out of every sum.
        """
        async with self._uow.snapshot("get_inventory_valuation") as tx:
            rows = await self._inventory_store.list_valuation_rows(
                tx, company_id, branch_id=branch_id
            )

        total_value = 0.0
        total_quantity = 0
        unit_costs: list[float] = []
        unavailable = 0

        for record, unit_cost in rows:
            if unit_cost is None:
                unavailable += 1
                continue
            total_value += record.quantity * unit_cost
            total_quantity += record.quantity
            unit_costs.append(unit_cost)

        if unavailable:
            logger.warning(
                "valuation_rows_unavailable",
                company_id=company_id,
                branch_id=branch_id,
                count=unavailable,
            )

        return ValuationReport(
            total_value=total_value,
            total_quantity=total_quantity,
            average_cost_per_unit=sum(unit_costs) / len(unit_costs) if unit_costs else 0.0,
            weighted_average_cost_per_unit=(
                total_value / total_quantity if total_quantity else 0.0
            ),
            items_count=len(rows),
            unavailable_items=unavailable,
        )
