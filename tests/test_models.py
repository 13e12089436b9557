from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyinventory.exceptions import ErrorKind
from pyinventory.models import (
    ApiErr,
    ApiOk,
    Asset,
    AssetStatus,
    Product,
    ProductStatus,
    UserIdentity,
    UserRole,
    parse_envelope,
    parse_timestamp,
)
from pyinventory.models._base import generate_record_id


def test_product_parses_camel_case_and_round_trips_to_wire() -> None:
    product = Product.model_validate(
        {
            "id": "prod-1",
            "name": "Router",
            "productCode": "RT-1",
            "minStock": 10,
            "stock": 5,
            "status": "Low-Stock",
            "description": "",
            "createdAt": 1767225600000,
        }
    )

    assert product.product_code == "RT-1"
    assert product.status is ProductStatus.LOW_STOCK
    assert product.description is None
    assert product.created_at == datetime(2026, 1, 1, tzinfo=UTC)
    wire = product.to_wire()
    assert wire["minStock"] == 10
    assert wire["createdAt"].startswith("2026-01-01T00:00:00")
    assert "description" not in wire


def test_product_rejects_negative_stock() -> None:
    with pytest.raises(ValidationError):
        Product.model_validate({"id": "prod-1", "name": "Router", "stock": -1})


def test_asset_with_borrow_record() -> None:
    asset = Asset.model_validate(
        {
            "id": "asset-1",
            "name": "Projector",
            "status": "borrowed",
            "borrowedBy": {"userId": "u-1", "userName": "Budi", "borrowDate": "2026-02-01T09:00:00Z"},
        }
    )

    assert asset.is_borrowed
    assert asset.status is AssetStatus.BORROWED
    assert asset.borrowed_by is not None
    assert asset.borrowed_by.borrow_date.tzinfo is not None


def test_user_identity_defaults_name_to_email() -> None:
    user = UserIdentity.model_validate({"_id": 42, "email": "a@b.com", "role": "super_admin"})

    assert user.id == "42"
    assert user.name == "a@b.com"
    assert user.username == "a@b.com"
    assert user.role is UserRole.SUPER_ADMIN


def test_generated_ids_have_prefix_and_are_unique() -> None:
    first, second = generate_record_id("prod"), generate_record_id("prod")

    assert first.startswith("prod-")
    assert len(first.split("-")) == 3
    assert first != second


def test_parse_timestamp_variants() -> None:
    expected = datetime(2026, 1, 1, tzinfo=UTC)

    assert parse_timestamp(1767225600) == expected
    assert parse_timestamp(1767225600000) == expected
    assert parse_timestamp("2026-01-01T00:00:00Z") == expected
    assert parse_timestamp(datetime(2026, 1, 1)) == expected
    assert parse_timestamp(None) is None


def test_envelope_classification() -> None:
    assert parse_envelope({"success": True, "data": [1]}) == ApiOk(data=[1])
    assert parse_envelope({"status": "OK"}) == ApiOk(data={"status": "OK"})
    assert parse_envelope(None) == ApiOk(data=None)

    err = parse_envelope({"success": False, "message": "Product not found"})
    assert err == ApiErr(kind=ErrorKind.API, message="Product not found")
    assert err.success is False
    assert parse_envelope({"success": False}) == ApiErr(kind=ErrorKind.API, message="API request failed")
