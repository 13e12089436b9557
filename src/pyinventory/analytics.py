"""Read-only analytics views resolved through hybrid sources.

Figures are never computed here. While the remote is unavailable each
view resolves to an empty list, and the overview to zeroed KPIs with
full stock health.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from pyinventory._api import analytics as _analytics_api
from pyinventory._transport import SleepFunc, Transport
from pyinventory.config import InventoryConfig
from pyinventory.hybrid import HybridDataSource, HybridResult
from pyinventory.models.analytics import AnalyticsOverview
from pyinventory.notifications import Notifier

AnalyticsRows = list[dict[str, Any]]

#: List-shaped views, keyed by their endpoint path segment.
LIST_VIEWS: tuple[str, ...] = ("trends", "category-analysis", "stock-velocity", "insights", "alerts")


class AnalyticsReader:
    """One :class:`HybridDataSource` per analytics view plus stock movements."""

    def __init__(
        self,
        config: InventoryConfig,
        transport: Transport,
        *,
        is_remote_viable: Callable[[], bool],
        notifier: Notifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._transport = transport

        def _source(name: str, fetch: Any, fallback: Any) -> HybridDataSource[Any]:
            return HybridDataSource(
                name,
                remote_fetch=fetch,
                local_fallback=fallback,
                is_remote_viable=is_remote_viable,
                max_attempts=config.hybrid_max_attempts,
                retry_delay=config.hybrid_retry_delay,
                refresh_interval=config.auto_refresh_interval,
                notifier=notifier,
                sleep=sleep,
            )

        self._overview: HybridDataSource[AnalyticsOverview] = _source(
            "analytics overview",
            lambda: _analytics_api.fetch_overview(self._transport),
            AnalyticsOverview,
        )
        self._views: dict[str, HybridDataSource[AnalyticsRows]] = {
            view: _source(f"analytics {view}", self._view_fetcher(view), list) for view in LIST_VIEWS
        }
        self._movements: HybridDataSource[AnalyticsRows] = _source(
            "stock movements",
            lambda: _analytics_api.fetch_stock_movements(self._transport),
            list,
        )

    def _view_fetcher(self, view: str) -> Callable[[], Any]:
        return lambda: _analytics_api.fetch_view(self._transport, view)

    @property
    def sources(self) -> list[HybridDataSource[Any]]:
        return [self._overview, *self._views.values(), self._movements]

    def source(self, view: str) -> HybridDataSource[Any]:
        """The hybrid source behind *view* (``overview``, a list view or ``movements``)."""
        if view == "overview":
            return self._overview
        if view == "movements":
            return self._movements
        try:
            return self._views[view]
        except KeyError:
            raise ValueError(f"Unknown analytics view {view!r}") from None

    async def overview(self) -> HybridResult[AnalyticsOverview]:
        return await self._overview.load()

    async def trends(self) -> HybridResult[AnalyticsRows]:
        return await self._views["trends"].load()

    async def category_analysis(self) -> HybridResult[AnalyticsRows]:
        return await self._views["category-analysis"].load()

    async def stock_velocity(self) -> HybridResult[AnalyticsRows]:
        return await self._views["stock-velocity"].load()

    async def insights(self) -> HybridResult[AnalyticsRows]:
        return await self._views["insights"].load()

    async def alerts(self) -> HybridResult[AnalyticsRows]:
        return await self._views["alerts"].load()

    async def stock_movements(self) -> HybridResult[AnalyticsRows]:
        return await self._movements.load()

    async def refresh_all(self) -> None:
        await asyncio.gather(*(source.refresh() for source in self.sources))

    def start_auto_refresh(self) -> None:
        for source in self.sources:
            source.start_auto_refresh()

    async def stop_auto_refresh(self) -> None:
        for source in self.sources:
            await source.stop_auto_refresh()
