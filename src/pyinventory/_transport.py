"""HTTP transport with timeout, bounded retries and status classification."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import aiohttp

from pyinventory._constants import USER_AGENT
from pyinventory._redact import redact_for_log
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import (
    ForbiddenError,
    HttpError,
    InvalidResponseError,
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    UnauthorizedError,
)
from pyinventory.models.envelope import ApiResponse, parse_envelope

_logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class AuthProvider(Protocol):
    """What the transport needs from the session owner."""

    def auth_headers(self) -> dict[str, str]:
        ...

    def handle_unauthorized(self) -> None:
        ...


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request(self, endpoint: str, method: str = "GET", body: Any = None) -> ApiResponse:
        ...

    async def get(self, endpoint: str) -> ApiResponse:
        ...

    async def post(self, endpoint: str, body: Any = None) -> ApiResponse:
        ...

    async def put(self, endpoint: str, body: Any = None) -> ApiResponse:
        ...

    async def patch(self, endpoint: str, body: Any = None) -> ApiResponse:
        ...

    async def delete(self, endpoint: str) -> ApiResponse:
        ...


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay before retry number *attempt* (1-based): ``base * 2**(attempt-1)``."""
    return base_delay * (2 ** (attempt - 1))


def _error_message(text: str, fallback: str) -> tuple[str, str]:
    """Pull ``message``/``error`` and ``code`` out of an error body if it is JSON."""
    try:
        parsed = json.loads(text) if text else {}
    except json.JSONDecodeError:
        return fallback, ""
    if not isinstance(parsed, dict):
        return fallback, ""
    message = parsed.get("message") or parsed.get("error") or fallback
    return str(message), str(parsed.get("code") or "")


def _decode_body(raw: bytes, charset: str) -> str | None:
    """Decode a body with its declared charset; ``None`` when the bytes do not match."""
    try:
        return raw.decode(charset)
    except (UnicodeDecodeError, LookupError):
        return None


class HttpTransport:
    """JSON-over-HTTP transport for the inventory API.

    Every attempt is a fresh request built with the session's current
    token, so a token dropped by a 401 is only missing from attempts that
    start afterwards. Retries (HTTP 429 and connection failures) are
    strictly serial and wait ``retry_delay * 2**(attempt-1)`` seconds.
    Timeouts are not retried.
    """

    def __init__(
        self,
        config: InventoryConfig,
        http_session: aiohttp.ClientSession,
        *,
        auth: AuthProvider | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._config = config
        self._http = http_session
        self._auth = auth
        self._sleep = sleep

    @property
    def auth(self) -> AuthProvider | None:
        return self._auth

    @auth.setter
    def auth(self, provider: AuthProvider | None) -> None:
        self._auth = provider

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        if self._auth is not None:
            headers.update(self._auth.auth_headers())
        return headers

    async def request(self, endpoint: str, method: str = "GET", body: Any = None) -> ApiResponse:
        """Execute a request and classify the outcome.

        Returns
        -------
        ApiResponse
            ``ApiOk`` or ``ApiErr`` parsed from a 2xx body.

        Raises
        ------
        UnauthorizedError
            HTTP 401 (the session token is dropped first).
        ForbiddenError
            HTTP 403.
        RateLimitedError
            HTTP 429 after ``retries`` retries.
        HttpError
            Any other non-2xx status.
        RequestTimeoutError
            The request exceeded ``config.timeout``.
        NetworkError
            Connection failure after ``retries`` retries.
        InvalidResponseError
            A 2xx body that is not JSON.
        """
        url = f"{self._config.api_base}{endpoint}"
        timeout = aiohttp.ClientTimeout(total=self._config.timeout)
        retries = self._config.retries
        attempt = 1

        while True:
            headers = self._build_headers()
            _logger.debug(
                "%s %s attempt=%d headers=%s body=%s",
                method,
                url,
                attempt,
                redact_for_log(headers),
                redact_for_log(body),
            )
            try:
                async with self._http.request(
                    method,
                    url,
                    json=body,
                    headers=headers,
                    timeout=timeout,
                ) as resp:
                    status = resp.status
                    raw = await resp.read()
                    charset = resp.charset or "utf-8"
            except TimeoutError as exc:
                raise RequestTimeoutError(
                    f"Request timeout: {endpoint}",
                    status_code=408,
                    endpoint=endpoint,
                ) from exc
            except aiohttp.ClientError as exc:
                if attempt <= retries:
                    delay = backoff_delay(self._config.retry_delay, attempt)
                    _logger.debug("%s %s failed (%s); retrying in %.1fs", method, endpoint, exc, delay)
                    await self._sleep(delay)
                    attempt += 1
                    continue
                raise NetworkError(
                    f"Request to {endpoint} failed: {exc}",
                    endpoint=endpoint,
                ) from exc

            text = _decode_body(raw, charset)

            if status == 401:
                if self._auth is not None:
                    self._auth.handle_unauthorized()
                raise UnauthorizedError("Authentication required", status_code=401, endpoint=endpoint)

            if status == 403:
                raise ForbiddenError("Access forbidden", status_code=403, endpoint=endpoint)

            if status == 429:
                if attempt <= retries:
                    delay = backoff_delay(self._config.retry_delay, attempt)
                    _logger.debug("%s %s rate limited; retrying in %.1fs", method, endpoint, delay)
                    await self._sleep(delay)
                    attempt += 1
                    continue
                raise RateLimitedError("Too many requests", status_code=429, endpoint=endpoint)

            if not 200 <= status < 300:
                message, code = _error_message(text or "", f"HTTP {status} from {endpoint}")
                raise HttpError(message, status_code=status, endpoint=endpoint, code=code)

            if text is None:
                raise InvalidResponseError(
                    f"Response from {endpoint} is not valid {charset}",
                    status_code=status,
                    endpoint=endpoint,
                )
            if not text.strip():
                return parse_envelope(None)
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError as exc:
                raise InvalidResponseError(
                    f"Invalid JSON from {endpoint}: {text[:200]}",
                    status_code=status,
                    endpoint=endpoint,
                ) from exc

            _logger.debug("%s %s -> %d %s", method, endpoint, status, redact_for_log(decoded))
            return parse_envelope(decoded)

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
