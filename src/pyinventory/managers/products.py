"""Product manager."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyinventory._api import products as _products_api
from pyinventory._constants import STORE_KEY_PRODUCTS
from pyinventory.managers._base import RecordManager, coerce_model, merge_changes
from pyinventory.models._base import generate_record_id, utcnow
from pyinventory.models.product import Product, ProductDraft, derive_stock_status
from pyinventory.notifications import stock_alert
from pyinventory.permissions import Action


class ProductManager(RecordManager[Product]):
    """Stocked products, mirrored under the ``products`` store key.

    ``status`` is always derived from ``stock`` and ``min_stock``; a value
    supplied by the caller is ignored. Saving a product that ends up low or
    out of stock raises a stock alert.
    """

    resource = "products"
    record_label = "Product"
    store_key = STORE_KEY_PRODUCTS
    model = Product

    async def _fetch(self) -> list[Product]:
        return await _products_api.fetch_products(self._transport)

    def _alert_if_low(self, product: Product) -> None:
        if product.needs_restock:
            self._notifier.notify(*stock_alert(product.name, product.stock, product.min_stock))

    async def add(self, draft: ProductDraft | Mapping[str, Any]) -> Product:
        """Create a product.

        Parameters
        ----------
        draft : ProductDraft or mapping
            Caller-supplied fields; camelCase or snake_case keys.

        Returns
        -------
        Product
            The stored record, identical remotely and locally.
        """
        self._authorize(Action.CREATE)
        fields = coerce_model(ProductDraft, draft)
        now = utcnow()
        product = Product(
            **fields.model_dump(),
            id=generate_record_id("prod"),
            status=derive_stock_status(fields.stock, fields.min_stock),
            created_at=now,
            updated_at=now,
        )

        remote = await self._write(
            "create product",
            lambda: _products_api.create_product(self._transport, product),
            lambda records: [*records, product],
        )
        self._announce("Product Added", f"{product.name} has been added", remote=remote)
        self._alert_if_low(product)
        return product

    async def update(self, product_id: str, changes: Mapping[str, Any]) -> Product:
        """Apply *changes* to an existing product and recompute its status."""
        self._authorize(Action.UPDATE)
        current = self.get(product_id)
        merged = merge_changes(current, changes)
        product = merged.model_copy(
            update={
                "status": derive_stock_status(merged.stock, merged.min_stock),
                "updated_at": utcnow(),
            }
        )

        remote = await self._write(
            "update product",
            lambda: _products_api.update_product(self._transport, product),
            self._replace(product),
        )
        self._announce("Product Updated", product.name, remote=remote)
        self._alert_if_low(product)
        return product

    async def delete(self, product_id: str) -> None:
        self._authorize(Action.DELETE)
        product = self.get(product_id)
        remote = await self._write(
            "delete product",
            lambda: _products_api.delete_product(self._transport, product_id),
            self._without(product_id),
        )
        self._announce("Product Deleted", product.name, remote=remote)
