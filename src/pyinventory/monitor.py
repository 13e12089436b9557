"""Remote connectivity supervision."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

from pyinventory._api.auth import health_check
from pyinventory._transport import SleepFunc, Transport
from pyinventory.config import InventoryConfig
from pyinventory.models._base import utcnow
from pyinventory.models.metrics import ConnectionMetrics
from pyinventory.models.notification import NotificationType
from pyinventory.notifications import Notifier, NullNotifier

_logger = logging.getLogger(__name__)

MetricsListener = Callable[[ConnectionMetrics], None]
TransitionListener = Callable[[bool], None]


class ConnectivityMonitor:
    """Probe the remote on an interval and classify it healthy or not.

    ``healthy`` means the probe succeeded in under
    ``config.healthy_threshold_ms``. Metrics start out unhealthy, so no
    remote call is attempted before the first successful probe.

    Every tick publishes a fresh :class:`ConnectionMetrics` to metrics
    listeners; only changes of ``healthy`` reach transition listeners and
    the notifier.
    """

    def __init__(
        self,
        config: InventoryConfig,
        transport: Transport,
        *,
        notifier: Notifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._config = config
        self._transport = transport
        self._notifier: Notifier = notifier or NullNotifier()
        self._sleep = sleep
        self._clock = clock
        self._enabled = config.remote_configured
        self._metrics = ConnectionMetrics()
        self._task: asyncio.Task[None] | None = None
        self._metrics_listeners: list[MetricsListener] = []
        self._transition_listeners: list[TransitionListener] = []

    @property
    def metrics(self) -> ConnectionMetrics:
        return self._metrics

    @property
    def is_healthy(self) -> bool:
        return self._metrics.healthy

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: MetricsListener) -> Callable[[], None]:
        """Receive the metrics published after every probe."""
        self._metrics_listeners.append(listener)
        return lambda: self._discard(self._metrics_listeners, listener)

    def on_transition(self, listener: TransitionListener) -> Callable[[], None]:
        """Receive the new ``healthy`` flag whenever it flips."""
        self._transition_listeners.append(listener)
        return lambda: self._discard(self._transition_listeners, listener)

    @staticmethod
    def _discard(listeners: list[Callable[..., None]], listener: Callable[..., None]) -> None:
        with contextlib.suppress(ValueError):
            listeners.remove(listener)

    async def measure_latency(self) -> float | None:
        """Round-trip time of one probe in milliseconds, ``None`` on failure."""
        if not self._enabled:
            return None
        started = self._clock()
        try:
            await health_check(self._transport, self._config.health_endpoint)
        except Exception as exc:
            _logger.debug("Health probe failed: %s", exc)
            return None
        return (self._clock() - started) * 1000.0

    async def tick(self) -> ConnectionMetrics:
        """Probe once and publish the resulting metrics."""
        latency = await self.measure_latency()
        previous = self._metrics
        healthy = latency is not None and latency < self._config.healthy_threshold_ms
        self._metrics = ConnectionMetrics(
            latency_ms=latency,
            last_success_at=utcnow() if healthy else previous.last_success_at,
            consecutive_failures=0 if healthy else previous.consecutive_failures + 1,
            healthy=healthy,
        )

        for listener in list(self._metrics_listeners):
            try:
                listener(self._metrics)
            except Exception:
                _logger.debug("metrics listener failed", exc_info=True)

        if previous.healthy != healthy:
            self._announce(healthy)
        return self._metrics

    def _announce(self, healthy: bool) -> None:
        if healthy:
            _logger.info("Remote connection restored (latency=%.0fms)", self._metrics.latency_ms or 0.0)
            self._notifier.notify(
                NotificationType.SUCCESS,
                "Connection Restored",
                "API connection is working normally",
            )
        else:
            _logger.warning("Remote connection degraded (failures=%d)", self._metrics.consecutive_failures)
            self._notifier.notify(
                NotificationType.ERROR,
                "Connection Issues",
                "API connection is experiencing problems",
            )
        for listener in list(self._transition_listeners):
            try:
                listener(healthy)
            except Exception:
                _logger.debug("transition listener failed", exc_info=True)

    # ------------------------------------------------------------------
    # Interval control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Probe every ``config.monitor_interval`` seconds (idempotent).

        The first probe happens one interval after starting; call
        :meth:`tick` directly for an immediate reading.
        """
        if not self._enabled or self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pyinventory-connectivity")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def set_enabled(self, enabled: bool) -> None:
        """Enable or disable probing, e.g. when a remote is (un)configured."""
        self._enabled = enabled
        if enabled:
            self.start()
        else:
            await self.stop()

    async def _run(self) -> None:
        while self._enabled:
            await self._sleep(self._config.monitor_interval)
            await self.tick()
