"""Scrub credentials from payloads before they reach DEBUG logs.

Every authenticated request carries a bearer token, and login bodies carry
a password. Keys are compared after dropping case and ``-``/``_``, so
``auth-token``, ``authToken`` and ``AUTH_TOKEN`` are all caught. Bearer
values that appear inside free text (error messages, echoed headers) are
masked as well.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "authtoken",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
        "setcookie",
        "xapikey",
    }
)

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)
_MAX_DEPTH = 20


def _normalize_key(key: object) -> str:
    return str(key).replace("-", "").replace("_", "").lower()


def is_sensitive_key(key: object) -> bool:
    return _normalize_key(key) in _SENSITIVE_KEYS


def _scrub_text(text: str, max_string: int) -> str:
    text = _BEARER_RE.sub(rf"\1{REDACTED}", text)
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to log.

    Mappings have sensitive keys replaced by ``<redacted>``; sequences and
    nested mappings are walked; pydantic models are dumped by alias first.
    Long strings are truncated to *max_string* characters.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _scrub_text(value, max_string)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)

    nested = _depth + 1
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if is_sensitive_key(key) else redact_for_log(item, max_string=max_string, _depth=nested)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=nested) for item in value]
    return _scrub_text(repr(value), max_string)
