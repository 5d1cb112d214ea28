"""Audit of the materialized stock against the movement ledger."""

from stockledger.config import get_logger
from stockledger.core.entities.inventory import ReconciliationReport
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import IUnitOfWork

logger = get_logger(__name__)


class LedgerReconciler:
    """
    Recomputes stock from the ledger and reports every disagreement.

    Checks two things in one snapshot:
    - each inventory record's quantity equals the sum of its movements
    - each product's stock equals the sum of its inventory records
    Nothing is repaired; drift is reported for an operator to act on.
    """

    def __init__(self, unit_of_work: IUnitOfWork, inventory_store: IInventoryStore) -> None:
        self._uow = unit_of_work
        self._inventory_store = inventory_store

    async def reconcile(self, company_id: str) -> ReconciliationReport:
        async with self._uow.snapshot("reconcile") as tx:
            records_checked = await self._inventory_store.count_records(tx, company_id)
            ledger_drift = await self._inventory_store.find_ledger_drift(tx, company_id)
            stock_drift = await self._inventory_store.find_stock_drift(tx, company_id)

        report = ReconciliationReport(
            company_id=company_id,
            records_checked=records_checked,
            ledger_drift=ledger_drift,
            stock_drift=stock_drift,
        )

        if report.is_consistent:
            logger.info(
                "ledger_reconciled",
                company_id=company_id,
                records_checked=records_checked,
            )
        else:
            logger.warning(
                "ledger_drift_detected",
                company_id=company_id,
                records_checked=records_checked,
                ledger_drift=len(ledger_drift),
                stock_drift=len(stock_drift),
            )
        return report
