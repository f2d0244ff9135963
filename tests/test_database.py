import mongomock
import pytest
from pymongo.errors import BulkWriteError

import database
from schemas import InventoryItem, MenuItem
from store import INVENTORY_ITEMS, MENU_ITEMS, MongoStore


@pytest.fixture()
def mongo_db():
    """
    In-process MongoDB stand-in, one fresh database per test.
    """
    return mongomock.MongoClient(tz_aware=True)["pos_test"]


@pytest.fixture()
def mongo_store(mongo_db):
    return MongoStore(mongo_db)


def test_mongo_store_seeds_once_and_keeps_order(mongo_store, mongo_db):
    assert mongo_store.collections() == []
    ids = [i.id for i in mongo_store.get_inventory_items()]
    assert ids == ["inv-1", "inv-2", "inv-3"]
    assert set(mongo_db.list_collection_names()) == {INVENTORY_ITEMS}

    mongo_store.set_inventory_items(list(reversed(mongo_store.get_inventory_items())))
    assert [i.id for i in mongo_store.get_inventory_items()] == ["inv-3", "inv-2", "inv-1"]


def test_mongo_store_emptied_collection_stays_empty(mongo_store, mongo_db):
    mongo_store.set_menu_items([])
    assert MENU_ITEMS in mongo_db.list_collection_names()
    assert mongo_store.get_menu_items() == []


def test_mongo_store_order_deducts_inventory(mongo_store):
    from schemas import Order, OrderItem

    order = Order(
        order_number="INV202405011200-001",
        items=[OrderItem(menu_item_id="2", name="Kentang Goreng", price=20000, quantity=2)],
        total=40000,
    )
    result = mongo_store.add_order(order)

    assert result.ok
    assert [o.id for o in mongo_store.get_orders()] == [order.id]
    potato = next(i for i in mongo_store.get_inventory_items() if i.id == "inv-2")
    assert potato.quantity == pytest.approx(19.6)


def test_replace_never_exposes_a_partial_collection(mongo_store, mongo_db, monkeypatch):
    mongo_store.get_inventory_items()
    seen = []
    real_insert_many = mongomock.Collection.insert_many

    def counting_insert_many(self, documents, *args, **kwargs):
        seen.append(mongo_db[INVENTORY_ITEMS].count_documents({}))
        return real_insert_many(self, documents, *args, **kwargs)

    monkeypatch.setattr(mongomock.Collection, "insert_many", counting_insert_many)
    mongo_store.set_inventory_items(mongo_store.get_inventory_items()[:2])

    assert seen == [3]
    assert len(mongo_store.get_inventory_items()) == 2


def test_failed_replace_keeps_previous_contents(mongo_store, mongo_db):
    seeded = [i.id for i in mongo_store.get_inventory_items()]
    dup = InventoryItem(id="x", name="Dup", quantity=1, unit="kg")

    with pytest.raises(BulkWriteError):
        mongo_store.set_inventory_items([dup, dup])

    assert [i.id for i in mongo_store.get_inventory_items()] == seeded
    assert INVENTORY_ITEMS + database.STAGING_SUFFIX not in mongo_db.list_collection_names()


def test_mongo_store_menu_update_round_trip(mongo_store):
    item = MenuItem(name="Seblak", price=15000, category="Main Course",
                    recipe=[{"inventory_id": "inv-1", "amount": 50, "unit": "Gram"}])
    mongo_store.add_menu_item(item)

    stored = mongo_store.get_menu_item(item.id)
    assert stored.recipe[0].unit == "g"
    assert mongo_store.update_menu_item(stored.model_copy(update={"price": 16000}))
    assert mongo_store.get_menu_item(item.id).price == 16000
    assert mongo_store.delete_menu_item(item.id)
