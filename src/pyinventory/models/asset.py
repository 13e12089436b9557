"""Asset models: tracked equipment that can be borrowed and returned."""

from __future__ import annotations

from pydantic import Field

from pyinventory.models._base import (
    InventoryBaseModel,
    InventoryEnum,
    OptionalTimestamp,
    Timestamp,
    utcnow,
)


class AssetStatus(InventoryEnum):
    AVAILABLE = "available"
    BORROWED = "borrowed"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class AssetCondition(InventoryEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class BorrowRecord(InventoryBaseModel):
    """Who holds a borrowed asset, and until when."""

    user_id: str
    user_name: str
    borrow_date: Timestamp = Field(default_factory=utcnow)
    expected_return_date: OptionalTimestamp = None
    actual_return_date: OptionalTimestamp = None
    notes: str | None = None


class BorrowRequest(InventoryBaseModel):
    asset_id: str
    borrower_user_id: str
    borrower_user_name: str
    expected_return_date: OptionalTimestamp = None
    notes: str | None = None


class MaintenanceRecord(InventoryBaseModel):
    date: Timestamp = Field(default_factory=utcnow)
    description: str
    cost: float | None = None
    performed_by: str | None = None


class AssetDraft(InventoryBaseModel):
    """Caller-supplied fields for a new asset."""

    name: str
    category: str = ""
    serial_number: str | None = None
    location: str | None = None
    status: AssetStatus = AssetStatus.AVAILABLE
    condition: AssetCondition | None = None
    purchase_date: OptionalTimestamp = None
    purchase_price: float | None = Field(default=None, ge=0)
    description: str | None = None


class Asset(AssetDraft):
    """An asset as stored remotely and in the ``assets`` mirror."""

    id: str
    borrowed_by: BorrowRecord | None = None
    maintenance_history: list[MaintenanceRecord] = Field(default_factory=list)
    created_at: Timestamp = Field(default_factory=utcnow)
    updated_at: Timestamp = Field(default_factory=utcnow)

    @property
    def is_borrowed(self) -> bool:
        return self.status is AssetStatus.BORROWED
