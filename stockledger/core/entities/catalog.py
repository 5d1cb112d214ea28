"""Catalog entities owned by the host application and read by the ledger."""

from pydantic import BaseModel


class Product(BaseModel):
    """Product as seen by the inventory engine."""

    id: str
    company_id: str
    name: str
    sku: str | None = None
    active: bool = True
    track_inventory: bool = True
    low_stock_threshold: int | None = None
    price: float = 0.0
    cost: float | None = None
    stock: int = 0  # denormalized total across branches


class Branch(BaseModel):
    """Branch (store/warehouse) of a company."""

    id: str
    company_id: str
    name: str
