from __future__ import annotations

import json
from pathlib import Path

import pytest

from pyinventory.exceptions import InventoryConfigError
from pyinventory.storage import JsonFileStore, MemoryStore, open_store


def test_memory_store_returns_copies() -> None:
    store = MemoryStore({"products": [{"id": "prod-1"}]})

    products = store.get("products")
    products.append({"id": "prod-2"})

    assert store.get("products") == [{"id": "prod-1"}]
    store.remove("products")
    store.remove("products")
    assert store.get("products") is None


def test_json_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "mirror" / "inventory.json"
    store = JsonFileStore(path)
    store.set("auth-token", "jwt-1")
    store.set("assets", [{"id": "asset-1"}])

    reopened = JsonFileStore(path)

    assert reopened.get("auth-token") == "jwt-1"
    assert reopened.get("assets") == [{"id": "asset-1"}]
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_store_remove_rewrites_file(tmp_path: Path) -> None:
    path = tmp_path / "inventory.json"
    store = JsonFileStore(path)
    store.set("user", {"id": "u-1"})
    store.set("auth-token", "jwt-1")

    store.remove("auth-token")

    assert json.loads(path.read_text(encoding="utf-8")) == {"user": {"id": "u-1"}}


def test_corrupt_file_starts_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "inventory.json"
    path.write_text("{broken", encoding="utf-8")

    store = JsonFileStore(path)

    assert store.get("products") is None
    assert "not valid JSON" in caplog.text


def test_non_object_file_starts_empty(tmp_path: Path) -> None:
    path = tmp_path / "inventory.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileStore(path).get("products") is None


def test_unreadable_path_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(InventoryConfigError):
        JsonFileStore(tmp_path)


def test_open_store_picks_backend(tmp_path: Path) -> None:
    assert isinstance(open_store(None), MemoryStore)
    assert isinstance(open_store(str(tmp_path / "inventory.json")), JsonFileStore)
