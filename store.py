"""
Persistence facade for the POS.

Every collection is read and written whole: reads return the current list,
writes replace it. There is no locking, so two writers interleaving lose the
earlier write (last writer wins). A single till does not need more.

`PosStore` implements the per-entity get/set/add/update/delete calls on top
of two primitives, `_load` and `_save`. `MemoryStore` keeps the collections
in a dict; `MongoStore` keeps one MongoDB collection per entity.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from pymongo.database import Database

import database
from inventory import DeductionResult, deduct_inventory
from schemas import Customer, InventoryItem, MenuItem, Order, RecipeIngredient, Shift, StaffMember, now_utc

logger = logging.getLogger(__name__)

MENU_ITEMS = "menu_items"
INVENTORY_ITEMS = "inventory_items"
ORDERS = "orders"
CUSTOMERS = "customers"
STAFF = "staff"
SHIFTS = "shifts"
COLLECTIONS = (MENU_ITEMS, INVENTORY_ITEMS, ORDERS, CUSTOMERS, STAFF, SHIFTS)


def default_menu_items() -> List[MenuItem]:
    return [
        MenuItem(
            id="1",
            name="Burger Sapi",
            price=35000,
            category="Main Course",
            description="Burger sapi dengan keju",
            recipe=[RecipeIngredient(inventory_id="inv-1", amount=150, unit="g")],
        ),
        MenuItem(
            id="2",
            name="Kentang Goreng",
            price=20000,
            category="Side Dish",
            description="Kentang goreng renyah",
            recipe=[RecipeIngredient(inventory_id="inv-2", amount=0.2, unit="kg")],
        ),
        MenuItem(
            id="3",
            name="Es Teh",
            price=10000,
            category="Beverage",
            description="Minuman teh dingin menyegarkan",
            recipe=[RecipeIngredient(inventory_id="inv-3", amount=10, unit="g")],
        ),
        MenuItem(id="4", name="Pizza", price=75000, category="Main Course",
                 description="Pizza keju dengan saus tomat"),
        MenuItem(id="5", name="Es Krim", price=18000, category="Dessert", description="Es krim vanilla"),
    ]


def default_inventory_items() -> List[InventoryItem]:
    return [
        InventoryItem(id="inv-1", name="Daging Sapi", quantity=10, unit="kg", cost_price=120000, threshold_quantity=5),
        InventoryItem(id="inv-2", name="Kentang", quantity=20, unit="kg", cost_price=15000, threshold_quantity=8),
        InventoryItem(id="inv-3", name="Daun Teh", quantity=5, unit="kg", cost_price=30000, threshold_quantity=2),
    ]


class PosStore:
    kind = "abstract"

    def _load(self, name: str) -> Optional[List[dict]]:
        """Return the stored documents, or None if the collection was never written."""
        raise NotImplementedError

    def _save(self, name: str, docs: List[dict]) -> None:
        raise NotImplementedError

    def collections(self) -> List[str]:
        return [name for name in COLLECTIONS if self._load(name) is not None]

    # ----- Menu items -----
    def get_menu_items(self) -> List[MenuItem]:
        docs = self._load(MENU_ITEMS)
        if docs is None:
            items = default_menu_items()
            self.set_menu_items(items)
            return items
        return [MenuItem.model_validate(d) for d in docs]

    def set_menu_items(self, items: List[MenuItem]) -> None:
        self._save(MENU_ITEMS, [i.model_dump() for i in items])

    def get_menu_item(self, item_id: str) -> Optional[MenuItem]:
        return next((i for i in self.get_menu_items() if i.id == item_id), None)

    def add_menu_item(self, item: MenuItem) -> None:
        items = self.get_menu_items()
        items.append(item)
        self.set_menu_items(items)

    def update_menu_item(self, item: MenuItem) -> bool:
        items = self.get_menu_items()
        for n, existing in enumerate(items):
            if existing.id == item.id:
                items[n] = item
                self.set_menu_items(items)
                return True
        return False

    def delete_menu_item(self, item_id: str) -> bool:
        items = self.get_menu_items()
        kept = [i for i in items if i.id != item_id]
        self.set_menu_items(kept)
        return len(kept) != len(items)

    # ----- Inventory items -----
    def get_inventory_items(self) -> List[InventoryItem]:
        docs = self._load(INVENTORY_ITEMS)
        if docs is None:
            items = default_inventory_items()
            self.set_inventory_items(items)
            return items
        return [InventoryItem.model_validate(d) for d in docs]

    def set_inventory_items(self, items: List[InventoryItem]) -> None:
        self._save(INVENTORY_ITEMS, [i.model_dump() for i in items])

    def add_inventory_item(self, item: InventoryItem) -> None:
        items = self.get_inventory_items()
        items.append(item)
        self.set_inventory_items(items)

    def update_inventory_item(self, item: InventoryItem) -> bool:
        items = self.get_inventory_items()
        for n, existing in enumerate(items):
            if existing.id == item.id:
                items[n] = item
                self.set_inventory_items(items)
                return True
        return False

    def delete_inventory_item(self, item_id: str) -> bool:
        items = self.get_inventory_items()
        kept = [i for i in items if i.id != item_id]
        self.set_inventory_items(kept)
        return len(kept) != len(items)

    def get_low_stock_items(self) -> List[InventoryItem]:
        return [i for i in self.get_inventory_items() if i.is_low_stock]

    # ----- Orders -----
    def get_orders(self) -> List[Order]:
        return [Order.model_validate(d) for d in self._load(ORDERS) or []]

    def get_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.get_orders() if o.id == order_id), None)

    def add_order(self, order: Order) -> Optional[DeductionResult]:
        """Append the order, then take its ingredients off stock.

        The order is already stored when deduction runs; a failure there is
        logged and never undoes the order.
        """
        docs = self._load(ORDERS) or []
        docs.append(order.model_dump())
        self._save(ORDERS, docs)
        try:
            return self.apply_deduction(order)
        except Exception:
            logger.exception("Inventory deduction failed for order %s", order.order_number,
                             extra={"order_number": order.order_number})
            return None

    def apply_deduction(self, order: Order) -> DeductionResult:
        updated, result = deduct_inventory(order, self.get_menu_items(), self.get_inventory_items())
        self.set_inventory_items(updated)
        if result.skipped:
            logger.info(
                "Order %s: %d deductions applied, %d recipe entries skipped",
                order.order_number, len(result.deductions), len(result.skipped),
            )
        return result

    # ----- Customers -----
    def get_customers(self) -> List[Customer]:
        return [Customer.model_validate(d) for d in self._load(CUSTOMERS) or []]

    def set_customers(self, customers: List[Customer]) -> None:
        self._save(CUSTOMERS, [c.model_dump() for c in customers])

    def get_customer_by_contact(self, contact: str) -> Optional[Customer]:
        return next((c for c in self.get_customers() if c.contact == contact), None)

    def update_customer(self, customer: Customer) -> Customer:
        """Insert or overwrite the customer with the same contact."""
        customers = self.get_customers()
        for n, existing in enumerate(customers):
            if existing.contact == customer.contact:
                customer = customer.model_copy(update={"id": existing.id})
                customers[n] = customer
                break
        else:
            customers.append(customer)
        self.set_customers(customers)
        return customer

    def record_customer_visit(self, name: str, contact: str, amount: float,
                              when: Optional[datetime] = None) -> Customer:
        when = when or now_utc()
        existing = self.get_customer_by_contact(contact)
        if existing is None:
            customer = Customer(name=name, contact=contact, last_visit_date=when,
                                last_transaction_amount=amount, visit_count=1, total_spent=amount)
        else:
            customer = existing.model_copy(update={
                "name": name,
                "last_visit_date": when,
                "last_transaction_amount": amount,
                "visit_count": existing.visit_count + 1,
                "total_spent": existing.total_spent + amount,
            })
        return self.update_customer(customer)

    def delete_customer(self, customer_id: str) -> bool:
        customers = self.get_customers()
        kept = [c for c in customers if c.id != customer_id]
        self.set_customers(kept)
        return len(kept) != len(customers)

    # ----- Staff -----
    def get_staff(self) -> List[StaffMember]:
        return [StaffMember.model_validate(d) for d in self._load(STAFF) or []]

    def set_staff(self, staff: List[StaffMember]) -> None:
        self._save(STAFF, [m.model_dump() for m in staff])

    def get_staff_member(self, member_id: str) -> Optional[StaffMember]:
        return next((m for m in self.get_staff() if m.id == member_id), None)

    def get_staff_by_email(self, email: str) -> Optional[StaffMember]:
        email = email.strip().lower()
        return next((m for m in self.get_staff() if m.email == email), None)

    def add_staff_member(self, member: StaffMember) -> None:
        staff = self.get_staff()
        staff.append(member)
        self.set_staff(staff)

    def update_staff_member(self, member: StaffMember) -> bool:
        staff = self.get_staff()
        for n, existing in enumerate(staff):
            if existing.id == member.id:
                staff[n] = member
                self.set_staff(staff)
                return True
        return False

    def delete_staff_member(self, member_id: str) -> bool:
        staff = self.get_staff()
        kept = [m for m in staff if m.id != member_id]
        self.set_staff(kept)
        return len(kept) != len(staff)

    # ----- Shifts -----
    def get_shifts(self) -> List[Shift]:
        return [Shift.model_validate(d) for d in self._load(SHIFTS) or []]

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        return next((s for s in self.get_shifts() if s.id == shift_id), None)

    def get_active_shift(self, cashier_id: str) -> Optional[Shift]:
        return next((s for s in self.get_shifts() if s.cashier_id == cashier_id and s.status == "active"), None)

    def add_shift(self, shift: Shift) -> None:
        docs = self._load(SHIFTS) or []
        docs.append(shift.model_dump())
        self._save(SHIFTS, docs)

    def update_shift(self, shift: Shift) -> bool:
        shifts = self.get_shifts()
        for n, existing in enumerate(shifts):
            if existing.id == shift.id:
                shifts[n] = shift
                self._save(SHIFTS, [s.model_dump() for s in shifts])
                return True
        return False


class MemoryStore(PosStore):
    kind = "memory"

    def __init__(self):
        self._data: Dict[str, List[dict]] = {}

    def _load(self, name: str) -> Optional[List[dict]]:
        docs = self._data.get(name)
        return None if docs is None else [dict(d) for d in docs]

    def _save(self, name: str, docs: List[dict]) -> None:
        self._data[name] = [dict(d) for d in docs]


class MongoStore(PosStore):
    kind = "mongo"

    def __init__(self, db: Database):
        self.db = db

    def _load(self, name: str) -> Optional[List[dict]]:
        if not database.collection_exists(self.db, name):
            return None
        return database.get_documents(self.db, name)

    def _save(self, name: str, docs: List[dict]) -> None:
        database.replace_documents(self.db, name, docs)
