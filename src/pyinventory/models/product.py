"""Product model."""

from __future__ import annotations

from pydantic import Field

from pyinventory.models._base import InventoryBaseModel, InventoryEnum, Timestamp, utcnow


class ProductStatus(InventoryEnum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def derive_stock_status(stock: int, min_stock: int) -> ProductStatus:
    """Classify a stock level against its minimum threshold.

    Empty stock wins over the low-stock threshold, so ``stock=0`` is
    always ``out_of_stock`` even when ``min_stock`` is 0.
    """
    if stock <= 0:
        return ProductStatus.OUT_OF_STOCK
    if stock <= min_stock:
        return ProductStatus.LOW_STOCK
    return ProductStatus.IN_STOCK


class ProductDraft(InventoryBaseModel):
    """Caller-supplied fields for a new product.

    ``id``, ``status`` and the timestamps are assigned by the manager.
    """

    name: str
    category: str = ""
    sku: str = ""
    product_code: str = ""
    price: float = Field(default=0.0, ge=0)
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)
    description: str | None = None
    image: str | None = None
    location: str | None = None
    supplier: str | None = None


class Product(ProductDraft):
    """A stocked product as stored remotely and in the ``products`` mirror."""

    id: str
    status: ProductStatus = ProductStatus.IN_STOCK
    created_at: Timestamp = Field(default_factory=utcnow)
    updated_at: Timestamp = Field(default_factory=utcnow)

    @property
    def needs_restock(self) -> bool:
        return self.status is not ProductStatus.IN_STOCK
