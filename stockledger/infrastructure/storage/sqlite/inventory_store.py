"""SQLite implementation of inventory record and movement storage."""

from datetime import UTC, datetime
from typing import Any

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    InventoryLevel,
    InventoryRecord,
    LedgerDrift,
    Movement,
    MovementFilters,
    MovementType,
    StockDrift,
    utcnow,
)
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import TransactionContext
from stockledger.infrastructure.storage.sqlite.connection import SQLiteTransaction

logger = get_logger(__name__)


def to_db_time(value: datetime | None) -> str | None:
    """Serialize a timestamp as fixed-width UTC ISO text so it sorts lexically."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_time(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def connection_for(tx: TransactionContext, write: bool = False) -> aiosqlite.Connection:
    """Unwrap the SQLite connection from a transaction handle."""
    if not isinstance(tx, SQLiteTransaction):
        raise TypeError(f"Expected SQLiteTransaction, got {type(tx).__name__}")
    if write and tx.read_only:
        raise RuntimeError(f"Transaction {tx.transaction_id} is read-only")
    return tx.connection


_LEVELS_SELECT = """
    SELECT
        r.product_id, r.branch_id, r.quantity, r.reserved_quantity,
        r.last_restocked, r.last_count_date,
        p.name AS product_name, p.sku AS product_sku,
        p.low_stock_threshold, b.name AS branch_name
    FROM inventory_records r
    JOIN products p ON p.id = r.product_id
    JOIN branches b ON b.id = r.branch_id
    WHERE p.company_id = ? AND p.active = 1 AND p.track_inventory = 1
"""


class SQLiteInventoryStore(IInventoryStore):
    """SQLite implementation of the inventory record store and movement ledger."""

    async def ensure_record(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> InventoryRecord:
        """Atomically create the record if missing, then read it."""
        conn = connection_for(tx, write=True)
        now = to_db_time(utcnow())
        cursor = await conn.execute(
            """
            INSERT INTO inventory_records (
                product_id, branch_id, quantity, reserved_quantity, created_at, updated_at
            ) VALUES (?, ?, 0, 0, ?, ?)
            ON CONFLICT (product_id, branch_id) DO NOTHING
            """,
            (product_id, branch_id, now, now),
        )
        if cursor.rowcount:
            logger.info(
                "inventory_record_created",
                product_id=product_id,
                branch_id=branch_id,
                tx=tx.transaction_id,
            )
        record = await self.get_record(tx, product_id, branch_id)
        if record is None:
            raise RuntimeError(f"Record for {product_id}/{branch_id} vanished after upsert")
        return record

    async def get_record(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> InventoryRecord | None:
        conn = connection_for(tx)
        cursor = await conn.execute(
            "SELECT * FROM inventory_records WHERE product_id = ? AND branch_id = ?",
            (product_id, branch_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    async def save_record(
        self, tx: TransactionContext, record: InventoryRecord
    ) -> InventoryRecord:
        conn = connection_for(tx, write=True)
        record.updated_at = utcnow()
        await conn.execute(
            """
            UPDATE inventory_records SET
                quantity = ?,
                reserved_quantity = ?,
                last_restocked = ?,
                last_count_date = ?,
                updated_at = ?
            WHERE product_id = ? AND branch_id = ?
            """,
            (
                record.quantity,
                record.reserved_quantity,
                to_db_time(record.last_restocked),
                to_db_time(record.last_count_date),
                to_db_time(record.updated_at),
                record.product_id,
                record.branch_id,
            ),
        )
        return record

    async def sum_quantity(self, tx: TransactionContext, product_id: str) -> int:
        conn = connection_for(tx)
        cursor = await conn.execute(
            "SELECT COALESCE(SUM(quantity), 0) FROM inventory_records WHERE product_id = ?",
            (product_id,),
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def list_levels(
        self,
        tx: TransactionContext,
        company_id: str,
        branch_id: str | None = None,
        product_id: str | None = None,
    ) -> list[InventoryLevel]:
        conn = connection_for(tx)
        query = _LEVELS_SELECT
        params: list[Any] = [company_id]
        if branch_id:
            query += " AND r.branch_id = ?"
            params.append(branch_id)
        if product_id:
            query += " AND r.product_id = ?"
            params.append(product_id)
        query += " ORDER BY r.quantity ASC, p.name ASC"

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_level(row) for row in rows]

    async def list_valuation_rows(
        self,
        tx: TransactionContext,
        company_id: str,
        branch_id: str | None = None,
    ) -> list[tuple[InventoryRecord, float | None]]:
        conn = connection_for(tx)
        query = """
            SELECT r.*, p.cost, p.price
            FROM inventory_records r
            JOIN products p ON p.id = r.product_id
            WHERE p.company_id = ? AND p.active = 1 AND p.track_inventory = 1
        """
        params: list[Any] = [company_id]
        if branch_id:
            query += " AND r.branch_id = ?"
            params.append(branch_id)

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        result = []
        for row in rows:
            unit_cost = row["cost"] if row["cost"] is not None else row["price"]
            try:
                unit_cost = float(unit_cost) if unit_cost is not None else None
            except (TypeError, ValueError):
                unit_cost = None
            result.append((self._row_to_record(row), unit_cost))
        return result

    async def append_movement(self, tx: TransactionContext, movement: Movement) -> Movement:
        conn = connection_for(tx, write=True)
        cursor = await conn.execute(
            """
            INSERT INTO inventory_movements (
                product_id, branch_id, type, quantity, unit_cost,
                reference, reference_type, notes, performed_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.product_id,
                movement.branch_id,
                movement.type.value,
                movement.quantity,
                movement.unit_cost,
                movement.reference,
                movement.reference_type,
                movement.notes,
                movement.performed_by,
                to_db_time(movement.created_at),
            ),
        )
        stored = movement.model_copy(update={"id": cursor.lastrowid})
        logger.info(
            "stock_movement_recorded",
            movement_id=stored.id,
            type=stored.type.value,
            qty=stored.quantity,
            product_id=stored.product_id,
            branch_id=stored.branch_id,
            tx=tx.transaction_id,
        )
        return stored

    def _movement_where(
        self, company_id: str, filters: MovementFilters
    ) -> tuple[str, list[Any]]:
        clauses = ["p.company_id = ?"]
        params: list[Any] = [company_id]
        if filters.product_id:
            clauses.append("m.product_id = ?")
            params.append(filters.product_id)
        if filters.branch_id:
            clauses.append("m.branch_id = ?")
            params.append(filters.branch_id)
        if filters.type:
            clauses.append("m.type = ?")
            params.append(filters.type.value)
        if filters.start_date:
            clauses.append("m.created_at >= ?")
            params.append(to_db_time(filters.start_date))
        if filters.end_date:
            clauses.append("m.created_at <= ?")
            params.append(to_db_time(filters.end_date))
        return " AND ".join(clauses), params

    async def list_movements(
        self,
        tx: TransactionContext,
        company_id: str,
        filters: MovementFilters,
        limit: int,
        offset: int,
    ) -> list[Movement]:
        conn = connection_for(tx)
        where, params = self._movement_where(company_id, filters)
        cursor = await conn.execute(
            f"""
            SELECT m.*, p.name AS product_name, p.sku AS product_sku, b.name AS branch_name
            FROM inventory_movements m
            JOIN products p ON p.id = m.product_id
            LEFT JOIN branches b ON b.id = m.branch_id
            WHERE {where}
            ORDER BY m.created_at DESC, m.id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def count_movements(
        self, tx: TransactionContext, company_id: str, filters: MovementFilters
    ) -> int:
        conn = connection_for(tx)
        where, params = self._movement_where(company_id, filters)
        cursor = await conn.execute(
            f"""
            SELECT COUNT(*)
            FROM inventory_movements m
            JOIN products p ON p.id = m.product_id
            WHERE {where}
            """,
            params,
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def sum_movements(
        self, tx: TransactionContext, product_id: str, branch_id: str
    ) -> int:
        conn = connection_for(tx)
        cursor = await conn.execute(
            """
            SELECT COALESCE(SUM(quantity), 0) FROM inventory_movements
            WHERE product_id = ? AND branch_id = ?
            """,
            (product_id, branch_id),
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def count_records(self, tx: TransactionContext, company_id: str) -> int:
        conn = connection_for(tx)
        cursor = await conn.execute(
            """
            SELECT COUNT(*) FROM inventory_records r
            JOIN products p ON p.id = r.product_id
            WHERE p.company_id = ?
            """,
            (company_id,),
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def find_ledger_drift(
        self, tx: TransactionContext, company_id: str
    ) -> list[LedgerDrift]:
        conn = connection_for(tx)
        cursor = await conn.execute(
            """
            SELECT r.product_id, r.branch_id, r.quantity AS record_quantity,
                   COALESCE(SUM(m.quantity), 0) AS ledger_quantity
            FROM inventory_records r
            JOIN products p ON p.id = r.product_id
            LEFT JOIN inventory_movements m
                ON m.product_id = r.product_id AND m.branch_id = r.branch_id
            WHERE p.company_id = ?
            GROUP BY r.product_id, r.branch_id
            HAVING r.quantity != COALESCE(SUM(m.quantity), 0)
            ORDER BY r.product_id, r.branch_id
            """,
            (company_id,),
        )
        rows = await cursor.fetchall()
        return [
            LedgerDrift(
                product_id=row["product_id"],
                branch_id=row["branch_id"],
                record_quantity=row["record_quantity"],
                ledger_quantity=row["ledger_quantity"],
            )
            for row in rows
        ]

    async def find_stock_drift(
        self, tx: TransactionContext, company_id: str
    ) -> list[StockDrift]:
        conn = connection_for(tx)
        cursor = await conn.execute(
            """
            SELECT p.id AS product_id, p.stock AS product_stock,
                   COALESCE(SUM(r.quantity), 0) AS records_quantity
            FROM products p
            LEFT JOIN inventory_records r ON r.product_id = p.id
            WHERE p.company_id = ?
            GROUP BY p.id
            HAVING p.stock != COALESCE(SUM(r.quantity), 0)
            ORDER BY p.id
            """,
            (company_id,),
        )
        rows = await cursor.fetchall()
        return [
            StockDrift(
                product_id=row["product_id"],
                product_stock=row["product_stock"],
                records_quantity=row["records_quantity"],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> InventoryRecord:
        """Convert a database row to an InventoryRecord entity."""
        return InventoryRecord(
            product_id=row["product_id"],
            branch_id=row["branch_id"],
            quantity=int(row["quantity"]),
            reserved_quantity=int(row["reserved_quantity"]),
            last_restocked=from_db_time(row["last_restocked"]),
            last_count_date=from_db_time(row["last_count_date"]),
            created_at=from_db_time(row["created_at"]) or utcnow(),
            updated_at=from_db_time(row["updated_at"]) or utcnow(),
        )

    @staticmethod
    def _row_to_level(row: aiosqlite.Row) -> InventoryLevel:
        """Convert a joined row; rows with unreadable values come back unavailable."""
        try:
            return InventoryLevel(
                product_id=row["product_id"],
                product_name=row["product_name"],
                product_sku=row["product_sku"] or None,
                branch_id=row["branch_id"],
                branch_name=row["branch_name"],
                quantity=int(row["quantity"]),
                reserved_quantity=int(row["reserved_quantity"]),
                low_stock_threshold=(
                    int(row["low_stock_threshold"])
                    if row["low_stock_threshold"] is not None
                    else None
                ),
                last_restocked=from_db_time(row["last_restocked"]),
                last_count_date=from_db_time(row["last_count_date"]),
            )
        except (TypeError, ValueError) as e:
            logger.warning(
                "inventory_level_unavailable",
                product_id=row["product_id"],
                branch_id=row["branch_id"],
                error=str(e),
            )
            return InventoryLevel(
                product_id=row["product_id"],
                product_name=row["product_name"],
                branch_id=row["branch_id"],
                branch_name=row["branch_name"],
                unavailable=True,
            )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        """Convert a database row to a Movement entity."""
        keys = row.keys()
        return Movement(
            id=row["id"],
            product_id=row["product_id"],
            branch_id=row["branch_id"],
            type=MovementType(row["type"]),
            quantity=int(row["quantity"]),
            unit_cost=float(row["unit_cost"]) if row["unit_cost"] is not None else None,
            reference=row["reference"],
            reference_type=row["reference_type"],
            notes=row["notes"],
            performed_by=row["performed_by"],
            created_at=from_db_time(row["created_at"]) or utcnow(),
            product_name=row["product_name"] if "product_name" in keys else None,
            product_sku=row["product_sku"] if "product_sku" in keys else None,
            branch_name=row["branch_name"] if "branch_name" in keys else None,
        )
