"""Tests for InventoryDB."""

from datetime import date

import pytest

from shelfscan.db.inventory import InventoryDB, InventoryStore


@pytest.fixture
def db(tmp_path):
    """Create a temporary InventoryDB."""
    inventory = InventoryDB(db_path=tmp_path / "test.db")
    yield inventory
    inventory.close()


@pytest.fixture
def sample_items():
    return [
        {
            "barcode": "4901234567890",
            "product_name": "Organic Milk",
            "category": "Dairy",
            "expiry_date": "2025-01-17",
            "ai_confidence": 0.85,
        },
        {
            "barcode": "Manual Entry",
            "product_name": "Frozen Chicken",
            "category": "Meat",
            "expiry_date": "2025-01-13",
            "ai_confidence": 1.0,
        },
    ]


def test_is_inventory_store(db):
    assert isinstance(db, InventoryStore)


def test_add_inventory_item_returns_id(db, sample_items):
    item_id = db.add_inventory_item(sample_items[0])
    assert isinstance(item_id, int)


def test_added_item_is_visible(db, sample_items):
    """A record is readable as soon as the write returns."""
    db.add_inventory_item(sample_items[0])
    items = db.get_inventory()

    assert len(items) == 1
    assert items[0]["product_name"] == "Organic Milk"
    assert items[0]["barcode"] == "4901234567890"
    assert items[0]["ai_confidence"] == 0.85


def test_get_inventory_orders_by_expiry(db, sample_items):
    for item in sample_items:
        db.add_inventory_item(item)
    db.add_inventory_item({"product_name": "Salt"})

    names = [i["product_name"] for i in db.get_inventory()]
    assert names == ["Frozen Chicken", "Organic Milk", "Salt"]


def test_get_inventory_empty(db):
    assert db.get_inventory() == []


def test_add_defaults(db):
    """Missing barcode and category get the manual-entry defaults."""
    db.add_inventory_item({"product_name": "Eggs", "expiry_date": date(2025, 2, 1)})
    item = db.get_inventory()[0]

    assert item["barcode"] == "Manual Entry"
    assert item["category"] == "General"
    assert item["expiry_date"] == "2025-02-01"
    assert item["ai_confidence"] == 0.0


def test_add_requires_product_name(db):
    with pytest.raises(ValueError, match="product_name"):
        db.add_inventory_item({"product_name": "", "expiry_date": "2025-01-01"})
    assert db.get_inventory() == []


def test_get_expiring_soon(db, sample_items):
    for item in sample_items:
        db.add_inventory_item(item)

    soon = db.get_expiring_soon(days=3, today=date(2025, 1, 11))
    assert [i["product_name"] for i in soon] == ["Frozen Chicken"]

    later = db.get_expiring_soon(days=7, today=date(2025, 1, 11))
    assert len(later) == 2


def test_get_expiring_soon_includes_expired(db, sample_items):
    db.add_inventory_item(sample_items[1])
    expired = db.get_expiring_soon(days=0, today=date(2025, 3, 1))
    assert len(expired) == 1


def test_delete_item(db, sample_items):
    item_id = db.add_inventory_item(sample_items[0])
    db.delete_item(item_id)
    assert db.get_inventory() == []
