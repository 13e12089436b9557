"""Analytics and stock-movement endpoints (read only).

Endpoints:
  - GET /api/analytics/{overview|trends|category-analysis|stock-velocity|insights|alerts}
  - GET /api/stock/movements

Payloads are passed through as decoded JSON; no figures are computed
client side.
"""

from __future__ import annotations

from typing import Any

from pyinventory._api._common import unwrap, validate_one
from pyinventory._constants import ANALYTICS_ENDPOINT, ANALYTICS_VIEWS, STOCK_MOVEMENTS_ENDPOINT
from pyinventory._transport import Transport
from pyinventory.models.analytics import AnalyticsOverview


def analytics_endpoint(view: str) -> str:
    if view not in ANALYTICS_VIEWS:
        raise ValueError(f"view must be one of {ANALYTICS_VIEWS}, got {view!r}")
    return f"{ANALYTICS_ENDPOINT}/{view}"


async def fetch_overview(transport: Transport) -> AnalyticsOverview:
    endpoint = analytics_endpoint("overview")
    data = unwrap(await transport.get(endpoint), endpoint=endpoint)
    return validate_one(data or {}, AnalyticsOverview, endpoint=endpoint)


async def fetch_view(transport: Transport, view: str) -> list[dict[str, Any]]:
    """Fetch a list-shaped analytics view (everything except ``overview``)."""
    endpoint = analytics_endpoint(view)
    data = unwrap(await transport.get(endpoint), endpoint=endpoint)
    return list(data) if isinstance(data, list) else []


async def fetch_stock_movements(transport: Transport) -> list[dict[str, Any]]:
    data = unwrap(await transport.get(STOCK_MOVEMENTS_ENDPOINT), endpoint=STOCK_MOVEMENTS_ENDPOINT)
    return list(data) if isinstance(data, list) else []
