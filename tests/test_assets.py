from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from pyinventory.exceptions import InvalidStateTransitionError, NetworkError, PermissionDeniedError
from pyinventory.managers.assets import AssetManager
from pyinventory.models.asset import AssetStatus, BorrowRequest
from pyinventory.models.user import UserRole


@dataclass
class Caller:
    role: UserRole | None = UserRole.SUPER_ADMIN


def _manager(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any, **kwargs: Any) -> AssetManager:
    healthy = kwargs.get("healthy", True)
    return AssetManager(
        config,
        backend,
        store,
        roles=kwargs.get("roles", Caller()),
        is_remote_viable=lambda: healthy,
        notifier=notifier,
        sleep=sleep,
    )


def _stored_asset(**overrides: Any) -> dict[str, Any]:
    asset = {
        "id": "asset-1",
        "name": "Projector",
        "category": "AV",
        "serialNumber": "PJ-77",
        "status": "available",
        "condition": "good",
        "maintenanceHistory": [],
        "createdAt": "2026-01-01T00:00:00Z",
        "updatedAt": "2026-01-01T00:00:00Z",
    }
    asset.update(overrides)
    return asset


_BORROWED = {
    "userId": "u-2",
    "userName": "Budi",
    "borrowDate": "2026-02-01T09:00:00Z",
    "notes": "for the offsite",
}


@pytest.mark.asyncio
async def test_add_asset_offline(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any) -> None:
    manager = _manager(config, backend, store, notifier, sleep, healthy=False)

    asset = await manager.add({"name": "Laptop", "category": "IT", "purchasePrice": 1500})

    assert asset.id.startswith("asset-")
    assert asset.status is AssetStatus.AVAILABLE
    assert asset.maintenance_history == []
    assert store.get("assets")[0]["purchasePrice"] == 1500
    assert notifier.titles() == ["Asset Added Locally"]


@pytest.mark.asyncio
async def test_borrowed_asset_cannot_be_deleted(
    config: Any, backend: Any, store: Any, notifier: Any, sleep: Any
) -> None:
    store.set("assets", [_stored_asset(status="borrowed", borrowedBy=_BORROWED)])
    manager = _manager(config, backend, store, notifier, sleep)

    with pytest.raises(InvalidStateTransitionError) as exc_info:
        await manager.delete("asset-1")

    assert exc_info.value.status == "borrowed"
    assert exc_info.value.action == "delete"
    assert backend.calls == []
    assert store.get("assets")[0]["status"] == "borrowed"
    assert [a.id for a in manager.records] == ["asset-1"]


@pytest.mark.asyncio
async def test_borrow_writes_status_and_record(
    config: Any, backend: Any, store: Any, notifier: Any, sleep: Any
) -> None:
    store.set("assets", [_stored_asset()])
    backend.route("PUT", "/api/assets/asset-1", {"success": True})
    manager = _manager(config, backend, store, notifier, sleep)

    asset = await manager.borrow(
        BorrowRequest(
            asset_id="asset-1",
            borrower_user_id="u-2",
            borrower_user_name="Budi",
            expected_return_date="2026-02-10T00:00:00Z",
        )
    )

    assert asset.status is AssetStatus.BORROWED
    assert asset.borrowed_by is not None
    assert asset.borrowed_by.user_name == "Budi"
    body = backend.calls[0][2]
    assert body["status"] == "borrowed"
    assert body["borrowedBy"]["userId"] == "u-2"
    assert store.get("assets") == [body]
    assert notifier.titles() == ["Asset Borrowed"]


@pytest.mark.asyncio
async def test_borrow_requires_available(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any) -> None:
    store.set("assets", [_stored_asset(status="maintenance")])
    manager = _manager(config, backend, store, notifier, sleep)

    with pytest.raises(InvalidStateTransitionError, match="not available"):
        await manager.borrow({"assetId": "asset-1", "borrowerUserId": "u-2", "borrowerUserName": "Budi"})

    assert backend.calls == []
    assert notifier.titles() == ["Action Not Allowed"]


@pytest.mark.asyncio
async def test_return_keeps_borrow_history(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any) -> None:
    store.set("assets", [_stored_asset(status="borrowed", borrowedBy=_BORROWED)])
    backend.route("PUT", "/api/assets/asset-1", {"success": True})
    manager = _manager(config, backend, store, notifier, sleep)

    asset = await manager.return_asset("asset-1")

    assert asset.status is AssetStatus.AVAILABLE
    assert asset.borrowed_by is not None
    assert asset.borrowed_by.actual_return_date is not None
    assert asset.borrowed_by.notes == "for the offsite"
    assert store.get("assets")[0]["status"] == "available"


@pytest.mark.asyncio
async def test_return_with_notes_overrides(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any) -> None:
    store.set("assets", [_stored_asset(status="borrowed", borrowedBy=_BORROWED)])
    manager = _manager(config, backend, store, notifier, sleep, healthy=False)

    asset = await manager.return_asset("asset-1", notes="lens cap missing")

    assert asset.borrowed_by is not None
    assert asset.borrowed_by.notes == "lens cap missing"


@pytest.mark.asyncio
async def test_return_requires_borrowed(config: Any, backend: Any, store: Any, notifier: Any, sleep: Any) -> None:
    store.set("assets", [_stored_asset()])
    manager = _manager(config, backend, store, notifier, sleep)

    with pytest.raises(InvalidStateTransitionError) as exc_info:
        await manager.return_asset("asset-1")

    assert exc_info.value.action == "return"
    assert exc_info.value.status == "available"


@pytest.mark.asyncio
async def test_permission_checked_before_state_guard(
    config: Any, backend: Any, store: Any, notifier: Any, sleep: Any
) -> None:
    store.set("assets", [_stored_asset(status="borrowed", borrowedBy=_BORROWED)])
    manager = _manager(config, backend, store, notifier, sleep, roles=Caller(UserRole.USER))

    with pytest.raises(PermissionDeniedError):
        await manager.delete("asset-1")

    assert notifier.titles() == ["Permission Denied"]


@pytest.mark.asyncio
async def test_failed_remote_borrow_changes_nothing(
    config: Any, backend: Any, store: Any, notifier: Any, sleep: Any
) -> None:
    store.set("assets", [_stored_asset()])
    backend.route("PUT", "/api/assets/asset-1", NetworkError("down", endpoint="/api/assets/asset-1"))
    manager = _manager(config, backend, store, notifier, sleep)

    with pytest.raises(NetworkError):
        await manager.borrow({"assetId": "asset-1", "borrowerUserId": "u-2", "borrowerUserName": "Budi"})

    assert store.get("assets") == [_stored_asset()]
    assert manager.get("asset-1").status is AssetStatus.AVAILABLE
