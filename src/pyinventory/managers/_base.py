"""Shared read/write machinery for the product and asset managers.

These helpers keep the concrete managers small. A manager owns exactly
one local-store key and the in-memory list mirrored from it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, Protocol, TypeVar

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from pyinventory._transport import SleepFunc, Transport
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import InventoryError, InventoryValidationError, PermissionDeniedError, RecordNotFoundError
from pyinventory.hybrid import DataSource, HybridDataSource, HybridResult
from pyinventory.models._base import InventoryBaseModel
from pyinventory.models.notification import NotificationType
from pyinventory.models.user import UserRole
from pyinventory.notifications import Notifier, NullNotifier, api_error
from pyinventory.permissions import Action, require
from pyinventory.storage import LocalStore

_logger = logging.getLogger(__name__)

R = TypeVar("R", bound=InventoryBaseModel)
D = TypeVar("D", bound=InventoryBaseModel)

#: Fields callers may never change through ``update``.
_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class RoleProvider(Protocol):
    """Where managers read the caller's role from (the session manager)."""

    @property
    def role(self) -> UserRole | None:
        ...


def coerce_model(model: type[D], value: D | Mapping[str, Any]) -> D:
    """Accept a model instance or a camelCase/snake_case mapping."""
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(dict(value))
    except ValidationError as exc:
        raise InventoryValidationError(f"Invalid {model.__name__}: {exc}") from exc


def merge_changes(record: R, changes: Mapping[str, Any]) -> R:
    """Apply *changes* on top of *record*, re-validating the result."""
    merged = record.model_dump()
    for key, value in changes.items():
        field = to_snake(key)
        if field in _IMMUTABLE_FIELDS:
            continue
        merged[field] = value
    try:
        return type(record).model_validate(merged)
    except ValidationError as exc:
        raise InventoryValidationError(f"Invalid {type(record).__name__} update: {exc}") from exc


class RecordManager(Generic[R]):
    """CRUD over one resource with a remote-first dual write.

    Reads go through a :class:`HybridDataSource`; every committed remote
    read is mirrored into the local store as the last-known-good copy.

    Writes check the caller's role first, then write to the remote when it
    is viable and mirror the identical record locally only after the remote
    accepted it. With no viable remote the local store is written directly.
    A failed remote write propagates unchanged and leaves the local store
    as it was.
    """

    resource: str = "records"
    record_label: str = "Record"
    store_key: str = ""
    model: type[R]

    def __init__(
        self,
        config: InventoryConfig,
        transport: Transport,
        store: LocalStore,
        *,
        roles: RoleProvider,
        is_remote_viable: Callable[[], bool],
        notifier: Notifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store
        self._roles = roles
        self._is_remote_viable = is_remote_viable
        self._notifier: Notifier = notifier or NullNotifier()
        self._records: list[R] = self._read_local()
        self._source: HybridDataSource[list[R]] = HybridDataSource(
            self.resource,
            remote_fetch=self._fetch,
            local_fallback=self._read_local,
            is_remote_viable=is_remote_viable,
            max_attempts=config.hybrid_max_attempts,
            retry_delay=config.hybrid_retry_delay,
            refresh_interval=config.auto_refresh_interval,
            notifier=self._notifier,
            sleep=sleep,
        )
        self._source.subscribe(self._on_result)

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    async def _fetch(self) -> list[R]:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Local mirror
    # ------------------------------------------------------------------

    def _read_local(self) -> list[R]:
        raw = self._store.get(self.store_key)
        if not isinstance(raw, list):
            return []
        records: list[R] = []
        for entry in raw:
            try:
                records.append(self.model.model_validate(entry))
            except ValidationError:
                _logger.debug("Skipping unreadable %s entry in local store: %r", self.resource, entry)
        return records

    def _write_local(self, records: list[R]) -> None:
        self._store.set(self.store_key, [record.to_wire() for record in records])

    def _on_result(self, result: HybridResult[list[R]]) -> None:
        if result.data is self._records:
            # Published by a write; already mirrored.
            return
        self._records = list(result.data)
        if result.is_remote:
            self._write_local(self._records)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def source(self) -> HybridDataSource[list[R]]:
        return self._source

    @property
    def records(self) -> list[R]:
        """Current in-memory records (identical to the local mirror)."""
        return list(self._records)

    def get(self, record_id: str) -> R:
        for record in self._records:
            if getattr(record, "id", None) == record_id:
                return record
        raise RecordNotFoundError(f"{self.record_label} {record_id} not found", record_id=record_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self) -> HybridResult[list[R]]:
        """Resolve the collection (remote first, local fallback)."""
        return await self._source.load()

    async def refresh(self) -> HybridResult[list[R]]:
        return await self._source.refresh()

    def start_auto_refresh(self) -> None:
        self._source.start_auto_refresh()

    async def stop_auto_refresh(self) -> None:
        await self._source.stop_auto_refresh()

    # ------------------------------------------------------------------
    # Write helpers
    # ------------------------------------------------------------------

    def _authorize(self, action: Action) -> None:
        try:
            require(self._roles.role, action, resource=self.resource)
        except PermissionDeniedError as exc:
            self._notifier.notify(NotificationType.ERROR, "Permission Denied", str(exc))
            raise

    def _reject(self, title: str, error: InventoryError) -> InventoryError:
        self._notifier.notify(NotificationType.ERROR, title, str(error))
        return error

    async def _write(
        self,
        operation: str,
        remote_call: Callable[[], Awaitable[None]],
        mutate: Callable[[list[R]], list[R]],
    ) -> bool:
        """Run the dual write; returns whether the remote was written."""
        remote = self._is_remote_viable()
        if remote:
            try:
                await remote_call()
            except InventoryError as exc:
                _logger.warning("Remote %s failed: %s", operation, exc)
                self._notifier.notify(*api_error(operation, str(exc)))
                raise
        self._records = mutate(list(self._records))
        self._write_local(self._records)
        self._source.publish(self._records, source=DataSource.REMOTE if remote else DataSource.LOCAL_FALLBACK)
        _logger.debug("%s %s (%s)", self.resource, operation, "remote+local" if remote else "local only")
        return remote

    def _announce(self, title: str, message: str, *, remote: bool) -> None:
        if not remote:
            title = f"{title} Locally"
        self._notifier.notify(NotificationType.SUCCESS, title, message)

    @staticmethod
    def _replace(updated: R) -> Callable[[list[R]], list[R]]:
        record_id = getattr(updated, "id", None)
        return lambda records: [updated if getattr(r, "id", None) == record_id else r for r in records]

    @staticmethod
    def _without(record_id: str) -> Callable[[list[R]], list[R]]:
        return lambda records: [r for r in records if getattr(r, "id", None) != record_id]
