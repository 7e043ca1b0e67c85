"""SQLite-backed inventory store."""

from .inventory import InventoryDB, InventoryStore
from .schema import ensure_schema

__all__ = [
    "InventoryDB",
    "InventoryStore",
    "ensure_schema",
]
