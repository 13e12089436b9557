"""Typed form of the ``{success, data, message, error}`` response envelope.

The API wraps every payload in the same loosely typed object. The
transport turns it into a two-variant sum type right at the boundary so
callers never probe optional fields:

* :class:`ApiOk` - ``success`` was true (or absent, as on ``/health``).
* :class:`ApiErr` - ``success`` was false; ``message`` explains why.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pyinventory.exceptions import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ApiOk(Generic[T]):
    data: T
    message: str | None = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ApiErr:
    kind: ErrorKind
    message: str

    @property
    def success(self) -> bool:
        return False


ApiResponse = ApiOk[Any] | ApiErr


def parse_envelope(body: Any) -> ApiResponse:
    """Classify a decoded JSON body.

    Bodies that are not objects, or objects without a ``success`` key,
    are returned whole as ``ApiOk`` data.
    """
    if not isinstance(body, dict) or "success" not in body:
        return ApiOk(data=body)

    message = body.get("message")
    if body.get("success") is True:
        return ApiOk(
            data=body.get("data"),
            message=message if isinstance(message, str) else None,
        )

    reason = body.get("error") or message or "API request failed"
    return ApiErr(kind=ErrorKind.API, message=str(reason))
