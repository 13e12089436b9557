"""Analytics payload shapes that need a non-empty local default."""

from __future__ import annotations

from pyinventory.models._base import InventoryBaseModel


class AnalyticsOverview(InventoryBaseModel):
    """KPI block from ``/api/analytics/overview``.

    The defaults are what the dashboard shows when only local data is
    available.
    """

    total_products: int = 0
    total_value: float = 0.0
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    stock_movements: int = 0
    avg_daily_movements: float = 0.0
    turnover_rate: float = 0.0
    stock_health: float = 100.0
