from __future__ import annotations

from typing import Any

import pytest

from pyinventory._api import analytics as analytics_api
from pyinventory._api import auth as auth_api
from pyinventory._api import products as products_api
from pyinventory.exceptions import ApiError, AuthenticationError, InvalidResponseError
from pyinventory.models.analytics import AnalyticsOverview


def test_parse_login_response_requires_token_and_user() -> None:
    token, user = auth_api.parse_login_response({"token": "jwt", "user": {"id": "u-1", "email": "a@b.com"}})
    assert token == "jwt"
    assert user.email == "a@b.com"

    with pytest.raises(AuthenticationError):
        auth_api.parse_login_response({"token": "", "user": {"id": "u-1", "email": "a@b.com"}})
    with pytest.raises(AuthenticationError):
        auth_api.parse_login_response({"token": "jwt", "user": {"email": "a@b.com"}})
    with pytest.raises(AuthenticationError):
        auth_api.parse_login_response(None)


@pytest.mark.asyncio
async def test_refresh_token_without_token_is_api_error(backend: Any) -> None:
    backend.route("POST", "/api/auth/refresh", {"success": True, "data": {}})

    with pytest.raises(ApiError):
        await auth_api.refresh_token(backend)


@pytest.mark.asyncio
async def test_fetch_products_rejects_non_list(backend: Any) -> None:
    backend.route("GET", "/api/products", {"success": True, "data": {"id": "prod-1"}})

    with pytest.raises(InvalidResponseError):
        await products_api.fetch_products(backend)


@pytest.mark.asyncio
async def test_fetch_products_empty_data_is_empty_list(backend: Any) -> None:
    backend.route("GET", "/api/products", {"success": True})

    assert await products_api.fetch_products(backend) == []


@pytest.mark.asyncio
async def test_fetch_overview_and_views(backend: Any) -> None:
    backend.route("GET", "/api/analytics/overview", {"success": True, "data": {"totalProducts": 12, "stockHealth": 80}})
    backend.route("GET", "/api/analytics/alerts", {"success": True, "data": [{"productId": "prod-1"}]})

    overview = await analytics_api.fetch_overview(backend)
    alerts = await analytics_api.fetch_view(backend, "alerts")

    assert overview == AnalyticsOverview(total_products=12, stock_health=80)
    assert alerts == [{"productId": "prod-1"}]


def test_unknown_analytics_view_rejected() -> None:
    with pytest.raises(ValueError, match="view must be one of"):
        analytics_api.analytics_endpoint("revenue")
