"""Base model and enum for inventory API records.

Every record model inherits from :class:`InventoryBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and blank
  strings so the field default is used.
* :meth:`InventoryBaseModel.to_wire` producing the camelCase JSON form
  written to the remote API and to the local mirror.

Status enums inherit from :class:`InventoryEnum` which tolerates
case and separator differences (``"Low-Stock"`` -> ``low_stock``).
"""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def utcnow() -> datetime:
    return datetime.now(UTC)


def generate_record_id(prefix: str) -> str:
    """Return an id of the form ``<prefix>-<epoch ms>-<9 random chars>``."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce epoch seconds/milliseconds or ISO strings to an aware datetime.

    Naive datetimes are assumed to be UTC. Returns ``None`` for ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        parsed = datetime.fromisoformat(text)
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    raise ValueError(f"unsupported timestamp value: {value!r}")


Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Annotated type accepting epoch ints (seconds or ms) and ISO-8601 strings."""

OptionalTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]


class InventoryEnum(StrEnum):
    """Base for record status enums."""

    @classmethod
    def _missing_(cls, value: object) -> InventoryEnum | None:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class InventoryBaseModel(BaseModel):
    """Base for inventory API records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        """Drop ``None`` and blank strings so field defaults apply."""
        if not isinstance(values, dict):
            return values
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible camelCase dict (the remote and local-mirror format)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
