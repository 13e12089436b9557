"""High-level async client wiring the inventory data-access layer together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyinventory._transport import HttpTransport, SleepFunc
from pyinventory.analytics import AnalyticsReader
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import InventoryError
from pyinventory.managers.assets import AssetManager
from pyinventory.managers.products import ProductManager
from pyinventory.monitor import ConnectivityMonitor
from pyinventory.notifications import NotificationCenter, ToastCallback
from pyinventory.session import SessionManager
from pyinventory.storage import LocalStore, open_store

_logger = logging.getLogger(__name__)


class InventoryClient:
    """Async client for the inventory API with a local offline mirror.

    Usage::

        async with InventoryClient(InventoryConfig.from_env()) as client:
            await client.session.login("a@b.com", "secret")
            result = await client.products.load()
            print(result.source, len(result.data))

    Entering the context restores any persisted session, takes a first
    connectivity reading and starts the background tasks (connectivity
    probes, token refresh, auto-refresh polling). Leaving it cancels them
    and closes the HTTP session if the client created it.
    """

    def __init__(
        self,
        config: InventoryConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        store: LocalStore | None = None,
        on_toast: ToastCallback | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._config = config or InventoryConfig()
        self._external_session = session is not None
        self._http_session = session
        self._sleep = sleep
        self._store: LocalStore = store if store is not None else open_store(self._config.store_path)
        self._notifications = NotificationCenter(self._store, on_toast=on_toast)
        self._session = SessionManager(self._config, self._store, notifier=self._notifications, sleep=sleep)
        self._transport: HttpTransport | None = None
        self._monitor: ConnectivityMonitor | None = None
        self._products: ProductManager | None = None
        self._assets: AssetManager | None = None
        self._analytics: AnalyticsReader | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._recovery_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> InventoryClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        transport = HttpTransport(self._config, self._http_session, auth=self._session, sleep=self._sleep)
        self._transport = transport
        self._session.bind_transport(transport)

        notifier = self._notifications
        self._monitor = ConnectivityMonitor(self._config, transport, notifier=notifier, sleep=self._sleep)
        manager_kwargs: dict[str, Any] = {
            "roles": self._session,
            "is_remote_viable": self.is_remote_viable,
            "notifier": notifier,
            "sleep": self._sleep,
        }
        self._products = ProductManager(self._config, transport, self._store, **manager_kwargs)
        self._assets = AssetManager(self._config, transport, self._store, **manager_kwargs)
        self._analytics = AnalyticsReader(
            self._config,
            transport,
            is_remote_viable=self.is_remote_viable,
            notifier=notifier,
            sleep=self._sleep,
        )
        self._unsubscribe = self._monitor.on_transition(self._on_connectivity_change)

        try:
            await self._session.init()
            if self._config.remote_configured:
                await self._monitor.tick()
                self._monitor.start()
            if self._config.auto_refresh:
                self._products.start_auto_refresh()
                self._assets.start_auto_refresh()
                self._analytics.start_auto_refresh()
        except BaseException:
            await self.__aexit__(None, None, None)
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        recovery = self._recovery_task
        self._recovery_task = None
        if recovery is not None and not recovery.done():
            recovery.cancel()
            await asyncio.gather(recovery, return_exceptions=True)
        if self._monitor is not None:
            await self._monitor.stop()
        for manager in (self._products, self._assets, self._analytics):
            if manager is not None:
                await manager.stop_auto_refresh()
        await self._session.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @staticmethod
    def _require(component: Any, name: str) -> Any:
        if component is None:
            raise InventoryError(f"Client not initialized ({name}). Use 'async with InventoryClient(...) as client:'")
        return component

    @property
    def config(self) -> InventoryConfig:
        return self._config

    @property
    def store(self) -> LocalStore:
        return self._store

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def transport(self) -> HttpTransport:
        transport: HttpTransport = self._require(self._transport, "transport")
        return transport

    @property
    def monitor(self) -> ConnectivityMonitor:
        monitor: ConnectivityMonitor = self._require(self._monitor, "monitor")
        return monitor

    @property
    def products(self) -> ProductManager:
        products: ProductManager = self._require(self._products, "products")
        return products

    @property
    def assets(self) -> AssetManager:
        assets: AssetManager = self._require(self._assets, "assets")
        return assets

    @property
    def analytics(self) -> AnalyticsReader:
        analytics: AnalyticsReader = self._require(self._analytics, "analytics")
        return analytics

    def is_remote_viable(self) -> bool:
        """A remote is configured and the last probe reported it healthy."""
        return self._config.remote_configured and self._monitor is not None and self._monitor.is_healthy

    # ------------------------------------------------------------------
    # Connectivity recovery
    # ------------------------------------------------------------------

    def _on_connectivity_change(self, healthy: bool) -> None:
        if not healthy:
            return
        if self._recovery_task is not None and not self._recovery_task.done():
            return
        self._recovery_task = asyncio.get_running_loop().create_task(
            self.refresh_all(),
            name="pyinventory-recovery",
        )

    async def refresh_all(self) -> None:
        """Manually refresh every hybrid source (products, assets, analytics)."""
        _logger.debug("Refreshing all data sources")
        await asyncio.gather(
            self.products.refresh(),
            self.assets.refresh(),
            self.analytics.refresh_all(),
        )
