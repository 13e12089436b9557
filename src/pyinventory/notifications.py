"""User-visible notification channel.

Core components announce outcomes through the :class:`Notifier`
protocol and never wait on it. :class:`NotificationCenter` is the
shipped implementation: it keeps a history persisted under the
``notifications`` store key and forwards every entry to an optional
toast callback supplied by the presentation layer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from pydantic import ValidationError

from pyinventory._constants import STORE_KEY_NOTIFICATIONS
from pyinventory.models.notification import Notification, NotificationType
from pyinventory.storage import LocalStore

_logger = logging.getLogger(__name__)

ToastCallback = Callable[[Notification], None]


class Notifier(Protocol):
    def notify(self, type_: NotificationType, title: str, message: str = "") -> None:
        ...


class NullNotifier:
    """Notifier that only logs. Used when no channel is wired."""

    def notify(self, type_: NotificationType, title: str, message: str = "") -> None:
        _logger.debug("notification type=%s title=%s message=%s", type_, title, message)


class NotificationCenter:
    """Persisted notification history with toast fan-out."""

    def __init__(self, store: LocalStore, *, on_toast: ToastCallback | None = None) -> None:
        self._store = store
        self._on_toast = on_toast
        self._items: list[Notification] = self._load()

    def _load(self) -> list[Notification]:
        raw = self._store.get(STORE_KEY_NOTIFICATIONS)
        if not isinstance(raw, list):
            return []
        items: list[Notification] = []
        for entry in raw:
            try:
                items.append(Notification.model_validate(entry))
            except ValidationError:
                _logger.debug("Dropping unreadable stored notification %r", entry)
        return items

    def _save(self) -> None:
        self._store.set(STORE_KEY_NOTIFICATIONS, [n.to_wire() for n in self._items])

    @property
    def notifications(self) -> list[Notification]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def notify(self, type_: NotificationType, title: str, message: str = "") -> None:
        self.add(type_, title, message)

    def add(self, type_: NotificationType, title: str, message: str = "") -> str:
        """Record a notification (newest first) and show it as a toast."""
        notification = Notification(type=type_, title=title, message=message)
        self._items.insert(0, notification)
        self._save()
        if self._on_toast is not None:
            try:
                self._on_toast(notification)
            except Exception:
                _logger.debug("toast callback failed", exc_info=True)
        return notification.id

    def mark_as_read(self, notification_id: str) -> None:
        self._items = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n for n in self._items
        ]
        self._save()

    def mark_all_as_read(self) -> None:
        self._items = [n.model_copy(update={"read": True}) for n in self._items]
        self._save()

    def remove(self, notification_id: str) -> None:
        self._items = [n for n in self._items if n.id != notification_id]
        self._save()

    def clear(self) -> None:
        self._items = []
        self._save()

    # ------------------------------------------------------------------
    # Canned notifications
    # ------------------------------------------------------------------

    def notify_stock_alert(self, product_name: str, current_stock: int, min_stock: int) -> str:
        return self.add(*stock_alert(product_name, current_stock, min_stock))

    def notify_api_error(self, operation: str, error: str) -> str:
        return self.add(*api_error(operation, error))


def stock_alert(product_name: str, current_stock: int, min_stock: int) -> tuple[NotificationType, str, str]:
    """``(type, title, message)`` for a product at or below its minimum."""
    if current_stock <= 0:
        return NotificationType.ERROR, "Out of Stock Alert", f"{product_name} is out of stock!"
    return (
        NotificationType.WARNING,
        "Low Stock Alert",
        f"{product_name} is running low ({current_stock}/{min_stock} remaining)",
    )


def api_error(operation: str, error: str) -> tuple[NotificationType, str, str]:
    return NotificationType.ERROR, "API Error", f"Failed to {operation}: {error}"
