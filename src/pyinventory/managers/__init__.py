"""Entity managers: authorization, state guards and dual-write CRUD."""

from pyinventory.managers._base import RecordManager, RoleProvider
from pyinventory.managers.assets import AssetManager
from pyinventory.managers.products import ProductManager

__all__ = [
    "AssetManager",
    "ProductManager",
    "RecordManager",
    "RoleProvider",
]
