"""Role capability table consulted before every entity operation."""

from __future__ import annotations

from enum import StrEnum

from pyinventory.exceptions import PermissionDeniedError
from pyinventory.models.user import UserRole


class Action(StrEnum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BORROW = "borrow"
    RETURN = "return"


_MANAGE = frozenset(Action)

ROLE_CAPABILITIES: dict[UserRole, frozenset[Action]] = {
    UserRole.USER: frozenset({Action.READ}),
    UserRole.ADMIN: _MANAGE,
    UserRole.SUPER_ADMIN: _MANAGE,
}


def is_allowed(role: UserRole | None, action: Action) -> bool:
    """Whether *role* may perform *action*. No role means anonymous: nothing."""
    if role is None:
        return False
    return action in ROLE_CAPABILITIES.get(role, frozenset())


def require(role: UserRole | None, action: Action, *, resource: str = "records") -> None:
    """Raise :class:`PermissionDeniedError` unless *role* may perform *action*."""
    if is_allowed(role, action):
        return
    raise PermissionDeniedError(
        f"You do not have permission to {action.value} {resource}",
        action=action.value,
        role=role.value if role is not None else None,
    )
