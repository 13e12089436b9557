"""User-visible notification record."""

from __future__ import annotations

from pydantic import Field

from pyinventory.models._base import InventoryBaseModel, InventoryEnum, Timestamp, generate_record_id, utcnow


class NotificationType(InventoryEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class Notification(InventoryBaseModel):
    id: str = Field(default_factory=lambda: generate_record_id("notif"))
    type: NotificationType = NotificationType.INFO
    title: str
    message: str = ""
    timestamp: Timestamp = Field(default_factory=utcnow)
    read: bool = False
