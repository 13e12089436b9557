from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyinventory.config import InventoryConfig
from pyinventory.exceptions import NetworkError
from pyinventory.models.envelope import ApiErr, ApiOk, ApiResponse, parse_envelope
from pyinventory.models.notification import NotificationType
from pyinventory.storage import MemoryStore


@dataclass
class RecordingSleep:
    """Sleep stand-in: records delays and yields once instead of waiting.

    Delays at or above ``block_at`` park the caller until it is cancelled,
    which keeps interval loops from spinning during a test.
    """

    block_at: float | None = None
    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.block_at is not None and delay >= self.block_at:
            await asyncio.Event().wait()
        await asyncio.sleep(0)


@dataclass
class RecordingNotifier:
    entries: list[tuple[NotificationType, str, str]] = field(default_factory=list)

    def notify(self, type_: NotificationType, title: str, message: str = "") -> None:
        self.entries.append((type_, title, message))

    def titles(self) -> list[str]:
        return [title for _type, title, _message in self.entries]


@dataclass
class FakeBackend:
    """Scripted transport double keyed by ``(method, endpoint)``.

    Each route holds a queue of outcomes; the last one repeats. An outcome
    is an ``ApiOk``/``ApiErr``, a raw JSON body, or an exception to raise.
    """

    routes: dict[tuple[str, str], list[Any]] = field(default_factory=dict)
    calls: list[tuple[str, str, Any]] = field(default_factory=list)

    def route(self, method: str, endpoint: str, *outcomes: Any) -> None:
        self.routes[(method, endpoint)] = list(outcomes)

    def count(self, method: str, endpoint: str) -> int:
        return sum(1 for m, e, _body in self.calls if (m, e) == (method, endpoint))

    async def request(self, endpoint: str, method: str = "GET", body: Any = None) -> ApiResponse:
        self.calls.append((method, endpoint, body))
        queue = self.routes.get((method, endpoint))
        if not queue:
            raise NetworkError(f"Unexpected request {method} {endpoint}", endpoint=endpoint)
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, (ApiOk, ApiErr)):
            return outcome
        return parse_envelope(outcome)

    async def get(self, endpoint: str) -> ApiResponse:
        return await self.request(endpoint, "GET")

    async def post(self, endpoint: str, body: Any = None) -> ApiResponse:
        return await self.request(endpoint, "POST", body)

    async def put(self, endpoint: str, body: Any = None) -> ApiResponse:
        return await self.request(endpoint, "PUT", body)

    async def patch(self, endpoint: str, body: Any = None) -> ApiResponse:
        return await self.request(endpoint, "PATCH", body)

    async def delete(self, endpoint: str) -> ApiResponse:
        return await self.request(endpoint, "DELETE")


@pytest.fixture
def config() -> InventoryConfig:
    return InventoryConfig(base_url="http://inventory.test", token_refresh_interval=0)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
