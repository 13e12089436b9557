"""Authentication endpoints.

Endpoints:
  - POST /api/auth/login
  - POST /api/auth/refresh
  - GET  /api/auth/verify
  - GET  /health (connectivity probe)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyinventory._api._common import unwrap
from pyinventory._constants import AUTH_LOGIN_ENDPOINT, AUTH_REFRESH_ENDPOINT, AUTH_VERIFY_ENDPOINT
from pyinventory._redact import redact_for_log
from pyinventory._transport import Transport
from pyinventory.exceptions import ApiError, AuthenticationError
from pyinventory.models.envelope import ApiErr
from pyinventory.models.user import UserIdentity

_logger = logging.getLogger(__name__)


def parse_login_response(data: Any) -> tuple[str, UserIdentity]:
    """Extract ``(token, user)`` from the login ``data`` payload.

    Raises
    ------
    AuthenticationError
        If the payload lacks a token or a usable user object.
    """
    _logger.debug("login data=%s", redact_for_log(data))
    if not isinstance(data, dict):
        raise AuthenticationError("Login response missing data", endpoint=AUTH_LOGIN_ENDPOINT)

    token = data.get("token")
    user = data.get("user")
    if not isinstance(token, str) or not token or not isinstance(user, dict):
        raise AuthenticationError("Login response missing token or user", endpoint=AUTH_LOGIN_ENDPOINT)

    try:
        identity = UserIdentity.model_validate(user)
    except ValidationError as exc:
        raise AuthenticationError(f"Login response has an invalid user: {exc}", endpoint=AUTH_LOGIN_ENDPOINT) from exc
    return token, identity


async def login(transport: Transport, email: str, password: str) -> tuple[str, UserIdentity]:
    """Exchange credentials for ``(token, user)``.

    Transport errors propagate unchanged; ``success: false`` envelopes
    become :class:`AuthenticationError`.
    """
    response = await transport.post(AUTH_LOGIN_ENDPOINT, {"email": email, "password": password})
    if isinstance(response, ApiErr):
        raise AuthenticationError(f"Login failed: {response.message}", endpoint=AUTH_LOGIN_ENDPOINT)
    return parse_login_response(response.data)


async def refresh_token(transport: Transport) -> str:
    """Return a renewed token.

    Raises
    ------
    ApiError
        If the envelope reports failure or carries no token.
    """
    data = unwrap(await transport.post(AUTH_REFRESH_ENDPOINT), endpoint=AUTH_REFRESH_ENDPOINT)
    token = data.get("token") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise ApiError("Refresh response missing token", endpoint=AUTH_REFRESH_ENDPOINT)
    return token


async def verify_token(transport: Transport) -> Any:
    """Check the current token; raises on any failure."""
    return unwrap(await transport.get(AUTH_VERIFY_ENDPOINT), endpoint=AUTH_VERIFY_ENDPOINT)


async def health_check(transport: Transport, endpoint: str) -> Any:
    return unwrap(await transport.get(endpoint), endpoint=endpoint)
