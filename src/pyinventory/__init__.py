"""pyinventory - Async inventory API client with a resilient offline mirror."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyinventory")
except PackageNotFoundError:
    __version__ = "0+local"

from pyinventory.analytics import AnalyticsReader
from pyinventory.client import InventoryClient
from pyinventory.config import InventoryConfig
from pyinventory.exceptions import (
    ApiError,
    AuthenticationError,
    ErrorKind,
    ForbiddenError,
    HttpError,
    InvalidResponseError,
    InvalidStateTransitionError,
    InventoryConfigError,
    InventoryError,
    InventoryValidationError,
    NetworkError,
    NotConfiguredError,
    PermissionDeniedError,
    RateLimitedError,
    RecordNotFoundError,
    RequestTimeoutError,
    TransportError,
    UnauthorizedError,
)
from pyinventory.hybrid import DataSource, HybridDataSource, HybridResult
from pyinventory.managers import AssetManager, ProductManager
from pyinventory.models import (
    AnalyticsOverview,
    Asset,
    AssetCondition,
    AssetDraft,
    AssetStatus,
    BorrowRecord,
    BorrowRequest,
    ConnectionMetrics,
    Notification,
    NotificationType,
    Product,
    ProductDraft,
    ProductStatus,
    UserIdentity,
    UserRole,
)
from pyinventory.monitor import ConnectivityMonitor
from pyinventory.notifications import NotificationCenter
from pyinventory.permissions import Action
from pyinventory.session import SessionManager, SessionState
from pyinventory.storage import JsonFileStore, LocalStore, MemoryStore

__all__ = [
    "__version__",
    "Action",
    "AnalyticsOverview",
    "AnalyticsReader",
    "ApiError",
    "Asset",
    "AssetCondition",
    "AssetDraft",
    "AssetManager",
    "AssetStatus",
    "AuthenticationError",
    "BorrowRecord",
    "BorrowRequest",
    "ConnectionMetrics",
    "ConnectivityMonitor",
    "DataSource",
    "ErrorKind",
    "ForbiddenError",
    "HttpError",
    "HybridDataSource",
    "HybridResult",
    "InvalidResponseError",
    "InvalidStateTransitionError",
    "InventoryClient",
    "InventoryConfig",
    "InventoryConfigError",
    "InventoryError",
    "InventoryValidationError",
    "JsonFileStore",
    "LocalStore",
    "MemoryStore",
    "NetworkError",
    "NotConfiguredError",
    "Notification",
    "NotificationCenter",
    "NotificationType",
    "PermissionDeniedError",
    "Product",
    "ProductDraft",
    "ProductManager",
    "ProductStatus",
    "RateLimitedError",
    "RecordNotFoundError",
    "RequestTimeoutError",
    "SessionManager",
    "SessionState",
    "TransportError",
    "UnauthorizedError",
    "UserIdentity",
    "UserRole",
]
