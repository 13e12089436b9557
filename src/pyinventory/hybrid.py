"""Remote-first reads with retry, backoff and local fallback.

A :class:`HybridDataSource` resolves one logical resource. Each load
follows the same steps:

1. If the remote is not viable (not configured or reported unhealthy),
   answer from the local fallback straight away.
2. Otherwise call the remote fetch. Success is stored as ``REMOTE`` and
   resets the retry counter.
3. On failure a retry-eligible load retries after ``2**attempt`` times
   the base delay until ``max_attempts`` retries are spent, then answers
   from the local fallback with the last error attached.

Failures never escape :meth:`HybridDataSource.load`; callers always get a
:class:`HybridResult` whose ``data`` is populated.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Generic, TypeVar

from pyinventory._transport import SleepFunc
from pyinventory.models._base import utcnow
from pyinventory.models.notification import NotificationType
from pyinventory.notifications import Notifier, NullNotifier

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class DataSource(StrEnum):
    REMOTE = "remote"
    LOCAL_FALLBACK = "local_fallback"


@dataclass(frozen=True, slots=True)
class HybridResult(Generic[T]):
    """One resolved value and where it came from.

    ``error`` is set only when a remote attempt failed and ``data`` is the
    local fallback.
    """

    data: T
    source: DataSource
    fetched_at: datetime = field(default_factory=utcnow)
    error: Exception | None = None

    @property
    def is_remote(self) -> bool:
        return self.source is DataSource.REMOTE


@dataclass(slots=True)
class RetryState:
    """Retry bookkeeping for the load currently in flight."""

    attempt: int = 0
    max_attempts: int = 3

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def reset(self) -> None:
        self.attempt = 0


ResultListener = Callable[[HybridResult[T]], None]


class HybridDataSource(Generic[T]):
    """Resolve a resource from the remote, falling back to a local mirror.

    Parameters
    ----------
    name : str
        Resource name used in logs and notifications.
    remote_fetch : callable
        Coroutine function returning fresh data; may raise anything.
    local_fallback : callable
        Returns the local data. Must not raise.
    is_remote_viable : callable
        Consulted before every load.
    max_attempts : int
        Retries per retry-eligible load before falling back.
    retry_delay : float
        Base for the ``2**attempt * retry_delay`` backoff.
    refresh_interval : float
        Seconds between auto-refresh polls.
    """

    def __init__(
        self,
        name: str,
        *,
        remote_fetch: Callable[[], Awaitable[T]],
        local_fallback: Callable[[], T],
        is_remote_viable: Callable[[], bool],
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        refresh_interval: float = 30.0,
        notifier: Notifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._name = name
        self._remote_fetch = remote_fetch
        self._local_fallback = local_fallback
        self._is_remote_viable = is_remote_viable
        self._retry = RetryState(max_attempts=max_attempts)
        self._retry_delay = retry_delay
        self._refresh_interval = refresh_interval
        self._notifier: Notifier = notifier or NullNotifier()
        self._sleep = sleep
        self._lock = asyncio.Lock()
        # Bumped by refresh(); a chain started under an older generation
        # stops at its next suspension point without committing.
        self._generation = 0
        self._result: HybridResult[T] | None = None
        self._auto_task: asyncio.Task[None] | None = None
        self._listeners: list[ResultListener[T]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def result(self) -> HybridResult[T] | None:
        """The most recent committed result, if any load has finished."""
        return self._result

    @property
    def data(self) -> T:
        if self._result is not None:
            return self._result.data
        return self._local_fallback()

    @property
    def retry_state(self) -> RetryState:
        return self._retry

    @property
    def is_loading(self) -> bool:
        return self._lock.locked()

    def subscribe(self, listener: ResultListener[T]) -> Callable[[], None]:
        """Receive every committed result; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, *, retry: bool = True) -> HybridResult[T]:
        """Resolve the resource once. Loads on one instance never overlap."""
        generation = self._generation
        async with self._lock:
            if generation != self._generation and self._result is not None:
                return self._result
            return await self._resolve(self._generation, retry=retry)

    def publish(self, data: T, *, source: DataSource) -> HybridResult[T]:
        """Commit data produced outside a load, such as the outcome of a write.

        Loads still in flight are superseded so they cannot overwrite it
        with data fetched before the write.
        """
        self._generation += 1
        return self._commit(self._generation, HybridResult(data=data, source=source))

    async def refresh(self) -> HybridResult[T]:
        """Manual refresh: reset the retry counter and supersede any running chain."""
        self._generation += 1
        self._retry.reset()
        return await self.load()

    async def _resolve(self, generation: int, *, retry: bool) -> HybridResult[T]:
        if not self._is_remote_viable():
            return self._commit(generation, self._fallback(None))

        while True:
            try:
                data = await self._remote_fetch()
            except Exception as exc:
                if generation != self._generation:
                    return self._current_or_fallback(exc)
                if retry and not self._retry.exhausted:
                    self._retry.attempt += 1
                    delay = (2**self._retry.attempt) * self._retry_delay
                    _logger.debug(
                        "%s remote fetch failed (%s); retry %d/%d in %.1fs",
                        self._name,
                        exc,
                        self._retry.attempt,
                        self._retry.max_attempts,
                        delay,
                    )
                    await self._sleep(delay)
                    if generation != self._generation:
                        return self._current_or_fallback(exc)
                    if not self._is_remote_viable():
                        return self._commit(generation, self._fallback(exc))
                    continue

                _logger.warning("%s remote fetch failed; using local data: %s", self._name, exc)
                self._notifier.notify(
                    NotificationType.ERROR,
                    "Connection Issue",
                    f"Using local {self._name} data. Will retry automatically.",
                )
                return self._commit(generation, self._fallback(exc))

            self._retry.reset()
            return self._commit(generation, HybridResult(data=data, source=DataSource.REMOTE))

    def _fallback(self, error: Exception | None) -> HybridResult[T]:
        return HybridResult(data=self._local_fallback(), source=DataSource.LOCAL_FALLBACK, error=error)

    def _current_or_fallback(self, error: Exception) -> HybridResult[T]:
        if self._result is not None:
            return self._result
        return self._fallback(error)

    def _commit(self, generation: int, result: HybridResult[T]) -> HybridResult[T]:
        if generation != self._generation:
            # Superseded: hand back the newer committed result, or this one uncommitted.
            return self._result if self._result is not None else result
        self._result = result
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                _logger.debug("%s result listener failed", self._name, exc_info=True)
        return result

    # ------------------------------------------------------------------
    # Auto refresh
    # ------------------------------------------------------------------

    @property
    def auto_refresh_running(self) -> bool:
        return self._auto_task is not None and not self._auto_task.done()

    def start_auto_refresh(self) -> None:
        """Poll every ``refresh_interval`` seconds (idempotent).

        A poll only runs while the last committed result came from the
        remote; running on local data never re-enters the retry cascade.
        """
        if self.auto_refresh_running:
            return
        self._auto_task = asyncio.get_running_loop().create_task(
            self._auto_refresh_loop(),
            name=f"pyinventory-refresh-{self._name}",
        )

    async def stop_auto_refresh(self) -> None:
        task = self._auto_task
        self._auto_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _auto_refresh_loop(self) -> None:
        while True:
            await self._sleep(self._refresh_interval)
            if self._result is None or not self._result.is_remote:
                continue
            await self.load(retry=False)
