"""Paginated, tenant-scoped reads of the movement ledger."""

import math

from stockledger.config import get_settings
from stockledger.core.entities.inventory import MovementFilters, MovementPage
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import IUnitOfWork


class MovementLedgerQuery:
    """Newest-first movement history for a company."""

    def __init__(
        self,
        unit_of_work: IUnitOfWork,
        inventory_store: IInventoryStore,
        default_page_size: int | None = None,
        max_page_size: int | None = None,
    ) -> None:
        settings = get_settings().inventory
        self._uow = unit_of_work
        self._inventory_store = inventory_store
        self._default_page_size = default_page_size or settings.default_page_size
        self._max_page_size = max_page_size or settings.max_page_size

    def _clamp(self, filters: MovementFilters) -> tuple[int, int]:
        page = max(1, filters.page)
        limit = filters.limit if filters.limit is not None else self._default_page_size
        limit = min(max(1, limit), self._max_page_size)
        return page, limit

    async def get_movements(
        self, company_id: str, filters: MovementFilters | None = None
    ) -> MovementPage:
        filters = filters or MovementFilters()
        page, limit = self._clamp(filters)

        async with self._uow.snapshot("get_movements") as tx:
            total = await self._inventory_store.count_movements(tx, company_id, filters)
            movements = await self._inventory_store.list_movements(
                tx, company_id, filters, limit=limit, offset=(page - 1) * limit
            )

        return MovementPage(
            movements=movements,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )
