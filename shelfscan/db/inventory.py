"""Inventory store: where identified and manually entered products end up."""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import date, timedelta
from pathlib import Path
from typing import Any

from .schema import ensure_schema

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("product_name",)


class InventoryStore(ABC):
    """Abstract base for anything that can persist an inventory record.

    A record is a dict with ``barcode``, ``product_name``, ``category``,
    ``expiry_date`` and ``ai_confidence``.
    """

    @abstractmethod
    def add_inventory_item(self, item: dict[str, Any]) -> int:
        """Persist one record and return its ID.

        The record must be readable once this returns. Raise on failure.
        """
        ...


class InventoryDB(InventoryStore):
    """Manages the inventory_items table."""

    def __init__(self, db_path: str | Path = "~/.config/shelfscan/inventory.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def add_inventory_item(self, item: dict[str, Any]) -> int:
        missing = [f for f in _REQUIRED_FIELDS if not item.get(f)]
        if missing:
            raise ValueError(f"Inventory item is missing {', '.join(missing)}")

        expiry = item.get("expiry_date")
        if isinstance(expiry, date):
            expiry = expiry.isoformat()

        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO inventory_items
               (barcode, product_name, category, expiry_date, ai_confidence)
               VALUES (?, ?, ?, ?, ?)""",
            (
                item.get("barcode") or "Manual Entry",
                item["product_name"],
                item.get("category") or "General",
                expiry or None,
                float(item.get("ai_confidence") or 0.0),
            ),
        )
        conn.commit()
        logger.debug("Inserted inventory item %s: %s", cur.lastrowid, item["product_name"])
        return cur.lastrowid

    def get_inventory(self) -> list[dict]:
        """Return all items, soonest expiry first."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM inventory_items
               ORDER BY expiry_date IS NULL, expiry_date, id"""
        ).fetchall()
        return [dict(r) for r in rows]

    def get_expiring_soon(self, days: int = 3, today: date | None = None) -> list[dict]:
        """Return items expiring within the given number of days (expired included)."""
        conn = self._get_conn()
        limit = ((today or date.today()) + timedelta(days=days)).isoformat()
        rows = conn.execute(
            """SELECT * FROM inventory_items
               WHERE expiry_date IS NOT NULL
                 AND expiry_date <= ?
               ORDER BY expiry_date, id""",
            (limit,),
        ).fetchall()
        return [dict(r) for r in rows]

    def delete_item(self, item_id: int) -> None:
        """Delete an inventory item by ID."""
        conn = self._get_conn()
        conn.execute("DELETE FROM inventory_items WHERE id = ?", (item_id,))
        conn.commit()
