"""Shared helpers for inventory API endpoint modules.

This module centralizes the most repeated patterns:
- turning an ``ApiErr`` envelope into an ``ApiError``
- validating record lists/objects returned under ``data``
- the create/update/delete calls shared by products and assets

It is internal to pyinventory and may change at any time.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyinventory._transport import Transport
from pyinventory.exceptions import ApiError, InvalidResponseError
from pyinventory.models._base import InventoryBaseModel
from pyinventory.models.envelope import ApiErr, ApiResponse

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R", bound=InventoryBaseModel)


def unwrap(response: ApiResponse, *, endpoint: str) -> Any:
    """Return the envelope's ``data`` or raise :class:`ApiError`."""
    if isinstance(response, ApiErr):
        raise ApiError(f"{endpoint} failed: {response.message}", endpoint=endpoint)
    return response.data


def validate_list(data: Any, model: type[M], *, endpoint: str) -> list[M]:
    """Validate a ``data`` array into *model* instances."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise InvalidResponseError(f"{endpoint} returned {type(data).__name__}, expected a list", endpoint=endpoint)
    try:
        return [model.model_validate(item) for item in data]
    except ValidationError as exc:
        raise InvalidResponseError(f"{endpoint} returned malformed records: {exc}", endpoint=endpoint) from exc


def validate_one(data: Any, model: type[M], *, endpoint: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseError(f"{endpoint} returned a malformed record: {exc}", endpoint=endpoint) from exc


async def fetch_records(transport: Transport, endpoint: str, model: type[R]) -> list[R]:
    """``GET`` a collection endpoint and validate its records."""
    response = await transport.get(endpoint)
    return validate_list(unwrap(response, endpoint=endpoint), model, endpoint=endpoint)


async def create_record(transport: Transport, endpoint: str, record: InventoryBaseModel) -> Any:
    """``POST`` a fully built record; returns whatever ``data`` the API echoes."""
    response = await transport.post(endpoint, record.to_wire())
    return unwrap(response, endpoint=endpoint)


async def update_record(transport: Transport, endpoint: str, record_id: str, record: InventoryBaseModel) -> Any:
    path = f"{endpoint}/{record_id}"
    response = await transport.put(path, record.to_wire())
    return unwrap(response, endpoint=path)


async def delete_record(transport: Transport, endpoint: str, record_id: str) -> None:
    path = f"{endpoint}/{record_id}"
    response = await transport.delete(path)
    unwrap(response, endpoint=path)
