"""Abstract interface for the product catalog and branch registry."""

from abc import ABC, abstractmethod

from stockledger.core.entities.catalog import Branch, Product
from stockledger.core.interfaces.transaction import TransactionContext


class ICatalogStore(ABC):
    """Tenant-scoped product and branch lookups."""

    @abstractmethod
    async def get_product(
        self, tx: TransactionContext, product_id: str, company_id: str
    ) -> Product | None:
        """Get a product if it exists and belongs to the company."""
        pass

    @abstractmethod
    async def get_branch(
        self, tx: TransactionContext, branch_id: str, company_id: str
    ) -> Branch | None:
        """Get a branch if it exists and belongs to the company."""
        pass

    @abstractmethod
    async def set_product_stock(
        self, tx: TransactionContext, product_id: str, stock: int
    ) -> None:
        """Write the denormalized total stock of a product."""
        pass
