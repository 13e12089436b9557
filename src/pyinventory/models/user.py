"""Authenticated user identity."""

from __future__ import annotations

from typing import Any

from pydantic import model_validator

from pyinventory.models._base import InventoryBaseModel, InventoryEnum


class UserRole(InventoryEnum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class UserIdentity(InventoryBaseModel):
    """The user returned by ``/api/auth/login`` and persisted under ``user``.

    ``name`` falls back to the email when the API omits it; ``username``
    mirrors the email as the dashboard does.
    """

    id: str
    email: str
    name: str = ""
    username: str = ""
    role: UserRole = UserRole.USER

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        filled = dict(values)
        if "_id" in filled and "id" not in filled:
            filled["id"] = filled.pop("_id")
        if "id" in filled:
            filled["id"] = str(filled["id"])
        email = filled.get("email") or ""
        if not filled.get("name"):
            filled["name"] = email
        if not filled.get("username"):
            filled["username"] = email
        return filled
