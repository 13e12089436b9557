"""Product endpoints.

Endpoints:
  - GET/POST   /api/products
  - PUT/DELETE /api/products/{id}
"""

from __future__ import annotations

from pyinventory._api._common import create_record, delete_record, fetch_records, update_record
from pyinventory._constants import PRODUCTS_ENDPOINT
from pyinventory._transport import Transport
from pyinventory.models.product import Product


async def fetch_products(transport: Transport) -> list[Product]:
    return await fetch_records(transport, PRODUCTS_ENDPOINT, Product)


async def create_product(transport: Transport, product: Product) -> None:
    await create_record(transport, PRODUCTS_ENDPOINT, product)


async def update_product(transport: Transport, product: Product) -> None:
    await update_record(transport, PRODUCTS_ENDPOINT, product.id, product)


async def delete_product(transport: Transport, product_id: str) -> None:
    await delete_record(transport, PRODUCTS_ENDPOINT, product_id)
