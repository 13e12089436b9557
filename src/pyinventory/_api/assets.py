"""Asset endpoints.

Endpoints:
  - GET/POST   /api/assets
  - PUT/DELETE /api/assets/{id}

Borrow and return are plain ``PUT`` updates carrying the new status and
borrow record.
"""

from __future__ import annotations

from pyinventory._api._common import create_record, delete_record, fetch_records, update_record
from pyinventory._constants import ASSETS_ENDPOINT
from pyinventory._transport import Transport
from pyinventory.models.asset import Asset


async def fetch_assets(transport: Transport) -> list[Asset]:
    return await fetch_records(transport, ASSETS_ENDPOINT, Asset)


async def create_asset(transport: Transport, asset: Asset) -> None:
    await create_record(transport, ASSETS_ENDPOINT, asset)


async def update_asset(transport: Transport, asset: Asset) -> None:
    await update_record(transport, ASSETS_ENDPOINT, asset.id, asset)


async def delete_asset(transport: Transport, asset_id: str) -> None:
    await delete_record(transport, ASSETS_ENDPOINT, asset_id)
