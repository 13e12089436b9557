from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import pytest

from pyinventory.client import InventoryClient
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import InventoryError, UnauthorizedError
from pyinventory.hybrid import DataSource
from pyinventory.models.product import ProductStatus
from pyinventory.session import SessionState
from pyinventory.storage import MemoryStore


@dataclass
class _FakeResponse:
    status: int
    body: str | bytes
    charset: str | None = "utf-8"

    async def read(self) -> bytes:
        return self.body.encode() if isinstance(self.body, str) else self.body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeInventoryServer:
    """``aiohttp.ClientSession`` stand-in routing on method and path."""

    routes: dict[tuple[str, str], tuple[int, Any]] = field(default_factory=dict)
    requests: list[tuple[str, str, dict[str, str], Any]] = field(default_factory=list)
    closed: bool = False

    def route(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        path = urlsplit(url).path
        self.requests.append((method, path, kwargs.get("headers", {}), kwargs.get("json")))
        status, body = self.routes.get((method, path), (200, {"success": True, "data": []}))
        return _FakeResponse(status, json.dumps(body))

    def paths(self, method: str) -> list[str]:
        return [path for m, path, _headers, _body in self.requests if m == method]

    async def close(self) -> None:
        self.closed = True


def _config(**overrides: Any) -> InventoryConfig:
    values: dict[str, Any] = {
        "base_url": "http://inventory.test",
        "auto_refresh": False,
        "token_refresh_interval": 0,
        "retries": 0,
    }
    values.update(overrides)
    return InventoryConfig(**values)


def _product(product_id: str, stock: int = 50) -> dict[str, Any]:
    return {"id": product_id, "name": f"Item {product_id}", "stock": stock, "minStock": 5}


_LOGIN_OK = {
    "success": True,
    "data": {"token": "jwt-1", "user": {"id": "u-1", "email": "admin@b.com", "role": "admin"}},
}


async def _settle(client: InventoryClient) -> None:
    task = client._recovery_task
    if task is not None:
        await task


@pytest.mark.asyncio
async def test_components_require_context() -> None:
    client = InventoryClient(_config())

    with pytest.raises(InventoryError, match="not initialized"):
        _ = client.products


@pytest.mark.asyncio
async def test_healthy_start_loads_everything_remotely(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"status": "OK"})
    server.route("GET", "/api/products", {"success": True, "data": [_product("prod-1")]})
    store = MemoryStore()

    async with InventoryClient(_config(), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        await _settle(client)

        assert client.monitor.is_healthy
        assert client.monitor.is_running
        assert client.products.source.result is not None
        assert client.products.source.result.source is DataSource.REMOTE
        assert [p.id for p in client.products.records] == ["prod-1"]
        assert store.get("products")[0]["id"] == "prod-1"
        assert client.notifications.notifications[0].title == "Connection Restored"
        assert "/api/analytics/overview" in server.paths("GET")

    assert server.closed is False
    assert client.monitor.is_running is False


@pytest.mark.asyncio
async def test_unhealthy_start_serves_local_data(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"message": "maintenance"}, status=503)
    store = MemoryStore({"products": [_product("prod-local")]})

    async with InventoryClient(_config(), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        result = await client.products.load()

        assert result.source is DataSource.LOCAL_FALLBACK
        assert [p.id for p in result.data] == ["prod-local"]
        assert server.paths("GET") == ["/health"]


@pytest.mark.asyncio
async def test_login_then_add_product_end_to_end(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"status": "OK"})
    server.route("POST", "/api/auth/login", _LOGIN_OK)
    server.route("POST", "/api/products", {"success": True})
    store = MemoryStore()

    async with InventoryClient(_config(), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        await _settle(client)
        await client.session.login("admin@b.com", "x")
        product = await client.products.add({"name": "Router", "stock": 5, "minStock": 10})

    assert product.status is ProductStatus.LOW_STOCK
    method, path, headers, body = server.requests[-1]
    assert (method, path) == ("POST", "/api/products")
    assert headers["authorization"] == "Bearer jwt-1"
    assert body["id"] == product.id
    assert store.get("products")[-1]["id"] == product.id
    assert store.get("auth-token") == "jwt-1"


@pytest.mark.asyncio
async def test_unauthorized_response_drops_session(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"status": "OK"})
    server.route("POST", "/api/auth/login", _LOGIN_OK)
    store = MemoryStore()

    async with InventoryClient(_config(), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        await _settle(client)
        await client.session.login("admin@b.com", "x")
        server.route("GET", "/api/products", {"message": "jwt expired"}, status=401)

        with pytest.raises(UnauthorizedError):
            await client.transport.get("/api/products")
        await client.transport.get("/api/assets")

        assert client.session.state is SessionState.ANONYMOUS
        assert client.session.token is None
        assert store.get("auth-token") is None
        assert "authorization" not in server.requests[-1][2]


@pytest.mark.asyncio
async def test_restored_session_is_verified_on_enter(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"status": "OK"})
    server.route("GET", "/api/auth/verify", {"success": True, "data": {"valid": True}})
    store = MemoryStore({"user": {"id": "u-1", "email": "a@b.com", "role": "admin"}, "auth-token": "jwt-old"})

    async with InventoryClient(_config(), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        assert client.session.is_authenticated
        assert server.requests[0][1] == "/api/auth/verify"
        assert server.requests[0][2]["authorization"] == "Bearer jwt-old"


@pytest.mark.asyncio
async def test_offline_client_never_touches_network(sleep: Any) -> None:
    server = FakeInventoryServer()
    store = MemoryStore({"assets": [{"id": "asset-1", "name": "Projector"}]})

    async with InventoryClient(InventoryConfig(auto_refresh=False), session=server, store=store, sleep=sleep) as client:  # type: ignore[arg-type]
        result = await client.assets.load()
        assert client.is_remote_viable() is False
        assert client.monitor.is_running is False

    assert result.data[0].name == "Projector"
    assert server.requests == []


@pytest.mark.asyncio
async def test_auto_refresh_tasks_stop_on_exit(sleep: Any) -> None:
    sleep.block_at = 30.0
    server = FakeInventoryServer()
    server.route("GET", "/health", {"status": "OK"})

    async with InventoryClient(_config(auto_refresh=True), session=server, store=MemoryStore(), sleep=sleep) as client:  # type: ignore[arg-type]
        await _settle(client)
        await asyncio.sleep(0)
        assert client.products.source.auto_refresh_running
        products = client.products

    assert products.source.auto_refresh_running is False
