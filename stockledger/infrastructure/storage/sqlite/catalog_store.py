"""SQLite implementation of tenant-scoped product and branch lookups."""

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.catalog import Branch, Product
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.transaction import TransactionContext
from stockledger.infrastructure.storage.sqlite.inventory_store import connection_for

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """Reads the products and branches tables shared with the host application."""

    async def get_product(
        self, tx: TransactionContext, product_id: str, company_id: str
    ) -> Product | None:
        conn = connection_for(tx)
        cursor = await conn.execute(
            "SELECT * FROM products WHERE id = ? AND company_id = ?",
            (product_id, company_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_product(row)

    async def get_branch(
        self, tx: TransactionContext, branch_id: str, company_id: str
    ) -> Branch | None:
        conn = connection_for(tx)
        cursor = await conn.execute(
            "SELECT * FROM branches WHERE id = ? AND company_id = ?",
            (branch_id, company_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Branch(id=row["id"], company_id=row["company_id"], name=row["name"])

    async def set_product_stock(
        self, tx: TransactionContext, product_id: str, stock: int
    ) -> None:
        conn = connection_for(tx, write=True)
        await conn.execute(
            "UPDATE products SET stock = ? WHERE id = ?",
            (stock, product_id),
        )
        logger.debug("product_stock_updated", product_id=product_id, stock=stock)

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        """Convert a database row to a Product entity."""
        return Product(
            id=row["id"],
            company_id=row["company_id"],
            name=row["name"],
            sku=row["sku"],
            active=bool(row["active"]),
            track_inventory=bool(row["track_inventory"]),
            low_stock_threshold=row["low_stock_threshold"],
            price=float(row["price"]) if row["price"] is not None else 0.0,
            cost=float(row["cost"]) if row["cost"] is not None else None,
            stock=int(row["stock"]),
        )
