"""Asset manager: CRUD plus the borrow/return lifecycle."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pyinventory._api import assets as _assets_api
from pyinventory._constants import STORE_KEY_ASSETS
from pyinventory.exceptions import InvalidStateTransitionError
from pyinventory.managers._base import RecordManager, coerce_model, merge_changes
from pyinventory.models._base import generate_record_id, utcnow
from pyinventory.models.asset import Asset, AssetDraft, AssetStatus, BorrowRecord, BorrowRequest
from pyinventory.permissions import Action


class AssetManager(RecordManager[Asset]):
    """Tracked assets, mirrored under the ``assets`` store key.

    Lifecycle guards::

        available --borrow--> borrowed --return_asset--> available

    A borrowed asset cannot be deleted. Guard violations raise
    :class:`InvalidStateTransitionError` before any I/O.
    """

    resource = "assets"
    record_label = "Asset"
    store_key = STORE_KEY_ASSETS
    model = Asset

    async def _fetch(self) -> list[Asset]:
        return await _assets_api.fetch_assets(self._transport)

    def _guard(self, asset: Asset, *, action: str, allowed: AssetStatus, message: str) -> None:
        if asset.status is allowed:
            return
        raise self._reject(
            "Action Not Allowed",
            InvalidStateTransitionError(message, record_id=asset.id, status=asset.status.value, action=action),
        )

    async def _save(self, operation: str, asset: Asset) -> bool:
        return await self._write(
            operation,
            lambda: _assets_api.update_asset(self._transport, asset),
            self._replace(asset),
        )

    async def add(self, draft: AssetDraft | Mapping[str, Any]) -> Asset:
        self._authorize(Action.CREATE)
        fields = coerce_model(AssetDraft, draft)
        now = utcnow()
        asset = Asset(
            **fields.model_dump(),
            id=generate_record_id("asset"),
            maintenance_history=[],
            created_at=now,
            updated_at=now,
        )

        remote = await self._write(
            "create asset",
            lambda: _assets_api.create_asset(self._transport, asset),
            lambda records: [*records, asset],
        )
        self._announce("Asset Added", f"{asset.name} has been added", remote=remote)
        return asset

    async def update(self, asset_id: str, changes: Mapping[str, Any]) -> Asset:
        self._authorize(Action.UPDATE)
        current = self.get(asset_id)
        asset = merge_changes(current, changes).model_copy(update={"updated_at": utcnow()})
        remote = await self._save("update asset", asset)
        self._announce("Asset Updated", asset.name, remote=remote)
        return asset

    async def delete(self, asset_id: str) -> None:
        self._authorize(Action.DELETE)
        asset = self.get(asset_id)
        if asset.status is AssetStatus.BORROWED:
            raise self._reject(
                "Action Not Allowed",
                InvalidStateTransitionError(
                    "Cannot delete asset that is currently borrowed",
                    record_id=asset_id,
                    status=asset.status.value,
                    action=Action.DELETE.value,
                ),
            )

        remote = await self._write(
            "delete asset",
            lambda: _assets_api.delete_asset(self._transport, asset_id),
            self._without(asset_id),
        )
        self._announce("Asset Deleted", asset.name, remote=remote)

    async def borrow(self, request: BorrowRequest | Mapping[str, Any]) -> Asset:
        """Lend an ``available`` asset to the borrower named in *request*."""
        self._authorize(Action.BORROW)
        borrow = coerce_model(BorrowRequest, request)
        current = self.get(borrow.asset_id)
        self._guard(
            current,
            action=Action.BORROW.value,
            allowed=AssetStatus.AVAILABLE,
            message="Asset is not available for borrowing",
        )

        now = utcnow()
        asset = current.model_copy(
            update={
                "status": AssetStatus.BORROWED,
                "borrowed_by": BorrowRecord(
                    user_id=borrow.borrower_user_id,
                    user_name=borrow.borrower_user_name,
                    borrow_date=now,
                    expected_return_date=borrow.expected_return_date,
                    notes=borrow.notes,
                ),
                "updated_at": now,
            }
        )
        remote = await self._save("borrow asset", asset)
        self._announce("Asset Borrowed", f"{asset.name} lent to {borrow.borrower_user_name}", remote=remote)
        return asset

    async def return_asset(self, asset_id: str, notes: str | None = None) -> Asset:
        """Return a ``borrowed`` asset; the borrow record keeps its history."""
        self._authorize(Action.RETURN)
        current = self.get(asset_id)
        self._guard(
            current,
            action=Action.RETURN.value,
            allowed=AssetStatus.BORROWED,
            message="Asset is not currently borrowed",
        )

        now = utcnow()
        borrowed_by = current.borrowed_by
        if borrowed_by is not None:
            borrowed_by = borrowed_by.model_copy(
                update={"actual_return_date": now, "notes": notes or borrowed_by.notes}
            )
        asset = current.model_copy(
            update={"status": AssetStatus.AVAILABLE, "borrowed_by": borrowed_by, "updated_at": now}
        )
        remote = await self._save("return asset", asset)
        self._announce("Asset Returned", asset.name, remote=remote)
        return asset
