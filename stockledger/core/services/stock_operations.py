"""
Stock operations engine.

Every mutating operation runs as one unit of work:
validate ownership -> get-or-create record -> check invariant ->
write record -> append movement(s) -> recompute product total.
A failure at any step rolls the whole unit back.
"""

import uuid

from stockledger.config import get_logger
from stockledger.core.entities.catalog import Branch, Product
from stockledger.core.entities.inventory import (
    AvailabilityResult,
    InventoryRecord,
    Movement,
    MovementType,
    ReferenceType,
    TransferResult,
    utcnow,
)
from stockledger.core.exceptions import (
    BranchNotFoundError,
    InsufficientAvailableStockError,
    InsufficientStockError,
    InvalidOperationError,
    InventoryRecordNotFoundError,
    ProductNotFoundError,
)
from stockledger.core.interfaces.catalog_store import ICatalogStore
from stockledger.core.interfaces.inventory_store import IInventoryStore
from stockledger.core.interfaces.transaction import IUnitOfWork, TransactionContext
from stockledger.core.services.total_stock import TotalStockAggregator

logger = get_logger(__name__)


def new_reference(prefix: str) -> str:
    """Generate a movement reference such as TRF-20260118093015-3F9A1C."""
    return f"{prefix}-{utcnow():%Y%m%d%H%M%S}-{uuid.uuid4().hex[:6].upper()}"


def _require_positive(operation: str, quantity: int) -> None:
    if quantity <= 0:
        raise InvalidOperationError(operation, "quantity must be positive", quantity=quantity)


class StockOperationsEngine:
    """
    Mutates per-branch stock while preserving the ledger invariants.

    The unit of work, stores and aggregator are injected so tests and
    multiple databases can each build their own engine.
    """

    def __init__(
        self,
        unit_of_work: IUnitOfWork,
        inventory_store: IInventoryStore,
        catalog_store: ICatalogStore,
        aggregator: TotalStockAggregator | None = None,
    ) -> None:
        self._uow = unit_of_work
        self._inventory_store = inventory_store
        self._catalog_store = catalog_store
        self._aggregator = aggregator or TotalStockAggregator(inventory_store, catalog_store)

    # ==================== Ownership ====================

    async def _require_product(
        self, tx: TransactionContext, company_id: str, product_id: str
    ) -> Product:
        product = await self._catalog_store.get_product(tx, product_id, company_id)
        if product is None:
            raise ProductNotFoundError(product_id, company_id)
        return product

    async def _require_branch(
        self,
        tx: TransactionContext,
        company_id: str,
        branch_id: str,
        role: str | None = None,
    ) -> Branch:
        branch = await self._catalog_store.get_branch(tx, branch_id, company_id)
        if branch is None:
            raise BranchNotFoundError(branch_id, company_id, role=role)
        return branch

    # ==================== Movements ====================

    async def record_movement(
        self,
        company_id: str,
        movement_type: MovementType,
        product_id: str,
        branch_id: str,
        quantity: int,
        unit_cost: float | None = None,
        reference: str | None = None,
        reference_type: str | None = None,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> Movement:
        """
        Apply a signed quantity delta to one (product, branch) pair.

        Args:
            company_id: Tenant owning the product and branch
            movement_type: Ledger type of the movement
            product_id: Product to move
            branch_id: Branch holding the stock
            quantity: Signed delta; negative removes stock

        Returns:
            The appended movement

        Raises:
            ProductNotFoundError / BranchNotFoundError: not owned by company_id
            InvalidOperationError: zero delta
            InsufficientStockError: on-hand quantity would go negative
        """
        if quantity == 0:
            raise InvalidOperationError("movement", "quantity delta must be non-zero")

        async with self._uow.transaction("record_movement") as tx:
            movement = Movement(
                product_id=product_id,
                branch_id=branch_id,
                type=movement_type,
                quantity=quantity,
                unit_cost=unit_cost,
                reference=reference,
                reference_type=reference_type,
                notes=notes,
                performed_by=performed_by,
                created_at=utcnow(),
            )
            return await self._apply_movement(tx, company_id, movement)

    async def _apply_movement(
        self, tx: TransactionContext, company_id: str, movement: Movement
    ) -> Movement:
        await self._require_product(tx, company_id, movement.product_id)
        await self._require_branch(tx, company_id, movement.branch_id)

        record = await self._inventory_store.ensure_record(
            tx, movement.product_id, movement.branch_id
        )
        new_quantity = record.quantity + movement.quantity
        if new_quantity < 0:
            raise InsufficientStockError(
                movement.product_id,
                movement.branch_id,
                requested=-movement.quantity,
                available=record.quantity,
            )

        record.quantity = new_quantity
        if movement.quantity > 0:
            record.last_restocked = movement.created_at
        await self._inventory_store.save_record(tx, record)

        stored = await self._inventory_store.append_movement(tx, movement)
        await self._aggregator.update_product_total_stock(tx, movement.product_id)
        return stored

    async def add_stock(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        quantity: int,
        unit_cost: float | None = None,
        reference: str | None = None,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> Movement:
        """Receive stock at a branch (IN, referenced as a purchase)."""
        _require_positive("add_stock", quantity)
        return await self.record_movement(
            company_id,
            MovementType.IN,
            product_id,
            branch_id,
            quantity,
            unit_cost=unit_cost,
            reference=reference,
            reference_type=ReferenceType.PURCHASE.value,
            notes=notes,
            performed_by=performed_by,
        )

    async def remove_stock(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        quantity: int,
        reference: str | None = None,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> Movement:
        """Issue stock from a branch (OUT, referenced as a sale)."""
        _require_positive("remove_stock", quantity)
        return await self.record_movement(
            company_id,
            MovementType.OUT,
            product_id,
            branch_id,
            -quantity,
            reference=reference,
            reference_type=ReferenceType.SALE.value,
            notes=notes,
            performed_by=performed_by,
        )

    # ==================== Adjustments ====================

    async def adjust_stock(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        new_quantity: int,
        reason: str,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> Movement:
        """
        Set the counted quantity at a branch.

        The current quantity is read inside the write transaction, so two
        concurrent adjustments each record the delta they actually applied.
        """
        if new_quantity < 0:
            raise InvalidOperationError(
                "adjust_stock", "new quantity cannot be negative", new_quantity=new_quantity
            )

        async with self._uow.transaction("adjust_stock") as tx:
            await self._require_product(tx, company_id, product_id)
            await self._require_branch(tx, company_id, branch_id)

            record = await self._inventory_store.ensure_record(tx, product_id, branch_id)
            previous = record.quantity
            now = utcnow()

            record.quantity = new_quantity
            record.last_count_date = now
            await self._inventory_store.save_record(tx, record)

            detail = f"{reason}. Previous: {previous}, New: {new_quantity}."
            if notes:
                detail = f"{detail} {notes}"

            movement = await self._inventory_store.append_movement(
                tx,
                Movement(
                    product_id=product_id,
                    branch_id=branch_id,
                    type=MovementType.ADJUSTMENT,
                    quantity=new_quantity - previous,
                    reference=new_reference("ADJ"),
                    reference_type=ReferenceType.ADJUSTMENT.value,
                    notes=detail,
                    performed_by=performed_by,
                    created_at=now,
                ),
            )
            await self._aggregator.update_product_total_stock(tx, product_id)

        logger.info(
            "stock_adjusted",
            product_id=product_id,
            branch_id=branch_id,
            previous=previous,
            new=new_quantity,
            reason=reason,
        )
        return movement

    # ==================== Transfers ====================

    async def transfer_stock(
        self,
        company_id: str,
        product_id: str,
        from_branch_id: str,
        to_branch_id: str,
        quantity: int,
        notes: str | None = None,
        performed_by: str | None = None,
    ) -> TransferResult:
        """
        Move stock between two branches of the same company.

        Both records are touched in ascending branch id order so that two
        opposite transfers between the same pair lock in the same order.
        """
        if from_branch_id == to_branch_id:
            raise InvalidOperationError(
                "transfer_stock", "cannot transfer to the same branch", branch_id=from_branch_id
            )
        _require_positive("transfer_stock", quantity)

        async with self._uow.transaction("transfer_stock") as tx:
            await self._require_product(tx, company_id, product_id)
            source_branch = await self._require_branch(tx, company_id, from_branch_id, "source")
            dest_branch = await self._require_branch(tx, company_id, to_branch_id, "destination")

            source: InventoryRecord | None
            if from_branch_id < to_branch_id:
                source = await self._inventory_store.get_record(tx, product_id, from_branch_id)
                dest = await self._inventory_store.ensure_record(tx, product_id, to_branch_id)
            else:
                dest = await self._inventory_store.ensure_record(tx, product_id, to_branch_id)
                source = await self._inventory_store.get_record(tx, product_id, from_branch_id)

            if source is None or source.quantity < quantity:
                raise InsufficientStockError(
                    product_id,
                    from_branch_id,
                    requested=quantity,
                    available=source.quantity if source else 0,
                )

            now = utcnow()
            source.quantity -= quantity
            dest.quantity += quantity
            dest.last_restocked = now
            for record in sorted((source, dest), key=lambda r: r.branch_id):
                await self._inventory_store.save_record(tx, record)

            reference = new_reference("TRF")
            suffix = f" {notes}" if notes else ""
            out_movement = await self._inventory_store.append_movement(
                tx,
                Movement(
                    product_id=product_id,
                    branch_id=from_branch_id,
                    type=MovementType.TRANSFER,
                    quantity=-quantity,
                    reference=reference,
                    reference_type=ReferenceType.TRANSFER_OUT.value,
                    notes=f"Transfer to {dest_branch.name}.{suffix}",
                    performed_by=performed_by,
                    created_at=now,
                ),
            )
            in_movement = await self._inventory_store.append_movement(
                tx,
                Movement(
                    product_id=product_id,
                    branch_id=to_branch_id,
                    type=MovementType.TRANSFER,
                    quantity=quantity,
                    reference=reference,
                    reference_type=ReferenceType.TRANSFER_IN.value,
                    notes=f"Transfer from {source_branch.name}.{suffix}",
                    performed_by=performed_by,
                    created_at=now,
                ),
            )
            await self._aggregator.update_product_total_stock(tx, product_id)

        logger.info(
            "stock_transferred",
            product_id=product_id,
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            quantity=quantity,
            reference=reference,
        )
        return TransferResult(
            reference=reference, out_movement=out_movement, in_movement=in_movement
        )

    # ==================== Reservations ====================

    async def reserve_stock(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        quantity: int,
        reference: str | None = None,
    ) -> InventoryRecord:
        """Hold unreserved stock without changing on-hand quantity."""
        _require_positive("reserve_stock", quantity)

        async with self._uow.transaction("reserve_stock") as tx:
            await self._require_product(tx, company_id, product_id)
            await self._require_branch(tx, company_id, branch_id)

            record = await self._inventory_store.get_record(tx, product_id, branch_id)
            if record is None:
                raise InventoryRecordNotFoundError(product_id, branch_id)

            if record.available_quantity < quantity:
                raise InsufficientAvailableStockError(
                    product_id,
                    branch_id,
                    requested=quantity,
                    available=record.available_quantity,
                    reserved=record.reserved_quantity,
                )

            record.reserved_quantity += quantity
            await self._inventory_store.save_record(tx, record)
            await self._aggregator.update_product_total_stock(tx, product_id)

        logger.info(
            "stock_reserved",
            product_id=product_id,
            branch_id=branch_id,
            quantity=quantity,
            reserved=record.reserved_quantity,
            reference=reference,
        )
        return record

    async def release_reservation(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        quantity: int,
    ) -> InventoryRecord:
        """Release held stock. Reserved quantity never drops below zero."""
        _require_positive("release_reservation", quantity)

        async with self._uow.transaction("release_reservation") as tx:
            await self._require_product(tx, company_id, product_id)
            await self._require_branch(tx, company_id, branch_id)

            record = await self._inventory_store.get_record(tx, product_id, branch_id)
            if record is None:
                raise InventoryRecordNotFoundError(product_id, branch_id)

            if quantity > record.reserved_quantity:
                logger.warning(
                    "reservation_over_release",
                    product_id=product_id,
                    branch_id=branch_id,
                    requested=quantity,
                    reserved=record.reserved_quantity,
                )

            record.reserved_quantity = max(0, record.reserved_quantity - quantity)
            await self._inventory_store.save_record(tx, record)
            await self._aggregator.update_product_total_stock(tx, product_id)

        logger.info(
            "reservation_released",
            product_id=product_id,
            branch_id=branch_id,
            quantity=quantity,
            reserved=record.reserved_quantity,
        )
        return record

    # ==================== Availability ====================

    async def check_availability(
        self,
        company_id: str,
        product_id: str,
        branch_id: str,
        requested_quantity: int,
    ) -> AvailabilityResult:
        """Read-only check whether a branch can fulfil a quantity."""
        _require_positive("check_availability", requested_quantity)

        async with self._uow.snapshot("check_availability") as tx:
            product = await self._require_product(tx, company_id, product_id)
            if not product.track_inventory:
                return AvailabilityResult.unlimited()

            await self._require_branch(tx, company_id, branch_id)
            record = await self._inventory_store.get_record(tx, product_id, branch_id)

        if record is None:
            return AvailabilityResult(
                available=False,
                current_stock=0,
                reserved_quantity=0,
                available_quantity=0,
                message="Product not found in this branch",
            )

        available_quantity = record.available_quantity
        available = available_quantity >= requested_quantity
        return AvailabilityResult(
            available=available,
            current_stock=record.quantity,
            reserved_quantity=record.reserved_quantity,
            available_quantity=available_quantity,
            message=(
                None
                if available
                else f"Only {available_quantity} units available "
                f"({record.reserved_quantity} reserved)"
            ),
        )
