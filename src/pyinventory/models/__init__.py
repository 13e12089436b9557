"""Data models for inventory API records."""

from pyinventory.models._base import InventoryBaseModel, InventoryEnum, Timestamp, parse_timestamp
from pyinventory.models.analytics import AnalyticsOverview
from pyinventory.models.asset import (
    Asset,
    AssetCondition,
    AssetDraft,
    AssetStatus,
    BorrowRecord,
    BorrowRequest,
    MaintenanceRecord,
)
from pyinventory.models.envelope import ApiErr, ApiOk, ApiResponse, parse_envelope
from pyinventory.models.metrics import ConnectionMetrics
from pyinventory.models.notification import Notification, NotificationType
from pyinventory.models.product import Product, ProductDraft, ProductStatus, derive_stock_status
from pyinventory.models.user import UserIdentity, UserRole

__all__ = [
    "AnalyticsOverview",
    "ApiErr",
    "ApiOk",
    "ApiResponse",
    "Asset",
    "AssetCondition",
    "AssetDraft",
    "AssetStatus",
    "BorrowRecord",
    "BorrowRequest",
    "ConnectionMetrics",
    "InventoryBaseModel",
    "InventoryEnum",
    "MaintenanceRecord",
    "Notification",
    "NotificationType",
    "Product",
    "ProductDraft",
    "ProductStatus",
    "Timestamp",
    "UserIdentity",
    "UserRole",
    "derive_stock_status",
    "parse_envelope",
    "parse_timestamp",
]
