"""Custom exception hierarchy for pyinventory."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable classification carried by every pyinventory error."""

    CONFIG = "config"
    NOT_CONFIGURED = "not_configured"
    NETWORK = "network"
    TIMEOUT = "timeout"
    INVALID_RESPONSE = "invalid_response"
    HTTP = "http"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    API = "api"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    PERMISSION_DENIED = "permission_denied"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    NOT_FOUND = "not_found"


class InventoryError(Exception):
    """Base exception for all pyinventory errors."""

    kind: ErrorKind = ErrorKind.API


class InventoryConfigError(InventoryError):
    """Invalid or missing configuration."""

    kind = ErrorKind.CONFIG


class NotConfiguredError(InventoryConfigError):
    """No remote API is configured (or the client is not initialised)."""

    kind = ErrorKind.NOT_CONFIGURED


class TransportError(InventoryError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class NetworkError(TransportError):
    """Connection failure after all retries were spent."""


class RequestTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""

    kind = ErrorKind.TIMEOUT


class InvalidResponseError(TransportError):
    """A 2xx response whose body could not be decoded."""

    kind = ErrorKind.INVALID_RESPONSE


class HttpError(TransportError):
    """Server answered with a non-2xx status."""

    kind = ErrorKind.HTTP

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        endpoint: str = "",
        code: str = "",
    ) -> None:
        self.code = code
        super().__init__(message, status_code=status_code, endpoint=endpoint)

    @property
    def status(self) -> int:
        return self.status_code or 0


class UnauthorizedError(HttpError):
    """HTTP 401. The session token has already been dropped when this is raised."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(HttpError):
    """HTTP 403."""

    kind = ErrorKind.FORBIDDEN


class RateLimitedError(HttpError):
    """HTTP 429 after exhausting all automatic retry attempts."""

    kind = ErrorKind.RATE_LIMITED


class ApiError(InventoryError):
    """The API answered ``{"success": false}`` (application-level error)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class AuthenticationError(ApiError):
    """Login failed or the response carried no usable token."""

    kind = ErrorKind.AUTHENTICATION


class InventoryValidationError(InventoryError):
    """Input handed to a manager could not be turned into a valid record."""

    kind = ErrorKind.VALIDATION


class PermissionDeniedError(InventoryError):
    """The current role lacks the capability required for an action."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, message: str, *, action: str, role: str | None) -> None:
        self.action = action
        self.role = role
        super().__init__(message)


class InvalidStateTransitionError(InventoryError):
    """An asset lifecycle guard rejected the requested operation.

    Raised for deleting a borrowed asset, borrowing an asset that is not
    ``available`` and returning an asset that is not ``borrowed``.
    """

    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(self, message: str, *, record_id: str, status: str, action: str) -> None:
        self.record_id = record_id
        self.status = status
        self.action = action
        super().__init__(message)


class RecordNotFoundError(InventoryError):
    """No record with the given id exists in memory or in the local mirror."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, *, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(message)
