"""Denormalized cross-branch stock total on the product."""

from stockledger.config import get_logger
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import TransactionContext

logger = get_logger(__name__)


class TotalStockAggregator:
    """
    Keeps Product.stock equal to the sum of its inventory records.

    Only ever called with the transaction of the mutation that changed the
    records, so no reader can observe the two out of step.
    """

    def __init__(self, inventory_store: IInventoryStore, catalog_store: ICatalogStore) -> None:
        self._inventory_store = inventory_store
        self._catalog_store = catalog_store

    async def update_product_total_stock(self, tx: TransactionContext, product_id: str) -> int:
        """Recompute and store the product's total stock. Returns the new total."""
        total = await self._inventory_store.sum_quantity(tx, product_id)
        await self._catalog_store.set_product_stock(tx, product_id, total)
        logger.debug(
            "product_total_stock_updated",
            product_id=product_id,
            stock=total,
            tx=tx.transaction_id,
        )
        return total
