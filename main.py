import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
import database
from logging_setup import setup_json_logging
from orders import CheckoutError, MenuItemNotFound, checkout
from reports import filter_orders, sales_summary
from schemas import (
    CATEGORIES,
    CheckoutRequest,
    Customer,
    CustomerIn,
    InventoryItem,
    InventoryItemIn,
    MenuItem,
    MenuItemIn,
    Order,
    ReportFilter,
    SalesSummary,
    Shift,
    ShiftClose,
    ShiftOpen,
    ShiftReport,
    StaffMember,
    StaffMemberIn,
    now_utc,
)
from shifts import ShiftAlreadyClosed, ShiftError, ShiftNotFound, close_shift, open_shift, shift_report
from store import MemoryStore, MongoStore, PosStore

logger = logging.getLogger(__name__)

app = FastAPI(title="Restaurant POS API")
setup_json_logging()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Utility

_store: Optional[PosStore] = None


def get_store() -> PosStore:
    global _store
    if _store is None:
        db = database.get_db() if config.POS_STORE == "mongo" else None
        if config.POS_STORE == "mongo" and db is None:
            logger.warning("POS_STORE=mongo but DATABASE_URL is not set, using in-memory store")
        _store = MongoStore(db) if db is not None else MemoryStore()
    return _store


@app.get("/")
def read_root():
    return {"message": "Restaurant POS API"}


@app.get("/test")
def test_database(store: PosStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "store": store.kind,
        "database_url": "✅ Set" if config.DATABASE_URL else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        response["collections"] = store.collections()
        response["connection_status"] = "Connected"
    except Exception as e:
        response["connection_status"] = f"❌ Error: {str(e)[:80]}"
    return response

# ----- Menu Management -----
@app.get("/menu", response_model=List[MenuItem])
def list_menu_items(category: Optional[str] = None, store: PosStore = Depends(get_store)):
    items = store.get_menu_items()
    if category:
        items = [it for it in items if it.category == category]
    return items

@app.post("/menu", response_model=MenuItem, status_code=201)
def create_menu_item(payload: MenuItemIn, store: PosStore = Depends(get_store)):
    item = MenuItem(**payload.model_dump())
    store.add_menu_item(item)
    return item

@app.get("/menu/categories", response_model=List[str])
def list_categories(store: PosStore = Depends(get_store)):
    used = {it.category for it in store.get_menu_items()}
    return [c for c in CATEGORIES if c in used]

@app.get("/menu/{item_id}", response_model=MenuItem)
def get_menu_item(item_id: str, store: PosStore = Depends(get_store)):
    item = store.get_menu_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item

@app.put("/menu/{item_id}", response_model=MenuItem)
def update_menu_item(item_id: str, payload: MenuItemIn, store: PosStore = Depends(get_store)):
    item = MenuItem(id=item_id, **payload.model_dump())
    if not store.update_menu_item(item):
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item

@app.delete("/menu/{item_id}")
def delete_menu_item(item_id: str, store: PosStore = Depends(get_store)):
    if not store.delete_menu_item(item_id):
        raise HTTPException(status_code=404, detail="Menu item not found")
    return {"ok": True}

# ----- Inventory Management -----
def _inventory_out(item: InventoryItem) -> dict:
    d = item.model_dump()
    d["low_stock"] = item.is_low_stock
    return d

@app.get("/inventory", response_model=List[dict])
def list_inventory_items(store: PosStore = Depends(get_store)):
    return [_inventory_out(it) for it in store.get_inventory_items()]

@app.get("/inventory/low-stock", response_model=List[dict])
def list_low_stock(store: PosStore = Depends(get_store)):
    return [_inventory_out(it) for it in store.get_low_stock_items()]

@app.post("/inventory", response_model=dict, status_code=201)
def create_inventory_item(payload: InventoryItemIn, store: PosStore = Depends(get_store)):
    item = InventoryItem(**payload.model_dump())
    store.add_inventory_item(item)
    return _inventory_out(item)

@app.put("/inventory/{item_id}", response_model=dict)
def update_inventory_item(item_id: str, payload: InventoryItemIn, store: PosStore = Depends(get_store)):
    existing = next((it for it in store.get_inventory_items() if it.id == item_id), None)
    if not existing:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    item = InventoryItem(id=item_id, created_at=existing.created_at, updated_at=now_utc(), **payload.model_dump())
    store.update_inventory_item(item)
    return _inventory_out(item)

@app.delete("/inventory/{item_id}")
def delete_inventory_item(item_id: str, store: PosStore = Depends(get_store)):
    if not store.delete_inventory_item(item_id):
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return {"ok": True}

# ----- Customer Management -----
@app.get("/customers", response_model=List[Customer])
def list_customers(store: PosStore = Depends(get_store)):
    return store.get_customers()

@app.post("/customers", response_model=Customer)
def save_customer(payload: CustomerIn, store: PosStore = Depends(get_store)):
    existing = store.get_customer_by_contact(payload.contact)
    if existing:
        customer = existing.model_copy(update=payload.model_dump())
    else:
        customer = Customer(**payload.model_dump())
    return store.update_customer(customer)

@app.delete("/customers/{customer_id}")
def delete_customer(customer_id: str, store: PosStore = Depends(get_store)):
    if not store.delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"ok": True}

# ----- Order Management -----
@app.post("/orders", response_model=Order, status_code=201)
def create_order(payload: CheckoutRequest, store: PosStore = Depends(get_store)):
    try:
        return checkout(store, payload)
    except MenuItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/orders", response_model=List[Order])
def list_orders(
    q: Optional[str] = None,
    payment_method: Optional[str] = None,
    cashier_id: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    store: PosStore = Depends(get_store),
):
    return filter_orders(
        store.get_orders(),
        q=q,
        date_from=date_from,
        date_to=date_to,
        payment_method=payment_method,
        cashier_id=cashier_id,
        cashier_names=_cashier_names(store),
    )

@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: str, store: PosStore = Depends(get_store)):
    o = store.get_order(order_id)
    if not o:
        raise HTTPException(status_code=404, detail="Order not found")
    return o

# ----- Receipt (data) -----
@app.get("/orders/{order_id}/receipt")
def get_order_receipt(order_id: str, store: PosStore = Depends(get_store)):
    o = store.get_order(order_id)
    if not o:
        raise HTTPException(status_code=404, detail="Order not found")
    receipt = o.model_dump(mode="json")
    for line in receipt["items"]:
        line["line_total"] = round(line["price"] * line["quantity"], 2)
    return receipt

# ----- Staff Management -----
def _cashier_names(store: PosStore) -> dict:
    return {m.id: m.full_name for m in store.get_staff()}

@app.get("/staff", response_model=List[StaffMember])
def list_staff(store: PosStore = Depends(get_store)):
    return store.get_staff()

@app.post("/staff", response_model=StaffMember, status_code=201)
def create_staff_member(payload: StaffMemberIn, store: PosStore = Depends(get_store)):
    if store.get_staff_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    member = StaffMember(**payload.model_dump())
    store.add_staff_member(member)
    return member

@app.get("/staff/{member_id}", response_model=StaffMember)
def get_staff_member(member_id: str, store: PosStore = Depends(get_store)):
    member = store.get_staff_member(member_id)
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member

@app.put("/staff/{member_id}", response_model=StaffMember)
def update_staff_member(member_id: str, payload: StaffMemberIn, store: PosStore = Depends(get_store)):
    other = store.get_staff_by_email(payload.email)
    if other and other.id != member_id:
        raise HTTPException(status_code=400, detail="Email already registered")
    member = StaffMember(id=member_id, **payload.model_dump())
    if not store.update_staff_member(member):
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member

@app.delete("/staff/{member_id}")
def delete_staff_member(member_id: str, store: PosStore = Depends(get_store)):
    if not store.delete_staff_member(member_id):
        raise HTTPException(status_code=404, detail="Staff member not found")
    return {"ok": True}

# ----- Shifts -----
@app.get("/shifts", response_model=List[Shift])
def list_shifts(cashier_id: Optional[str] = None, store: PosStore = Depends(get_store)):
    shifts = store.get_shifts()
    if cashier_id:
        shifts = [s for s in shifts if s.cashier_id == cashier_id]
    return sorted(shifts, key=lambda s: s.start_time, reverse=True)

@app.post("/shifts", response_model=Shift, status_code=201)
def start_shift(payload: ShiftOpen, store: PosStore = Depends(get_store)):
    try:
        return open_shift(store, payload)
    except ShiftError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.post("/shifts/{shift_id}/close", response_model=Shift)
def end_shift(shift_id: str, payload: ShiftClose, store: PosStore = Depends(get_store)):
    try:
        return close_shift(store, shift_id, payload)
    except ShiftNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ShiftAlreadyClosed as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/shifts/{shift_id}", response_model=ShiftReport)
def get_shift_report(shift_id: str, store: PosStore = Depends(get_store)):
    shift = store.get_shift(shift_id)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    return shift_report(store, shift)

# ----- Reports -----
@app.post("/reports/sales", response_model=SalesSummary)
def sales_report(filters: ReportFilter, store: PosStore = Depends(get_store)):
    return sales_summary(
        store.get_orders(),
        store.get_menu_items(),
        date_from=filters.date_from,
        date_to=filters.date_to,
        cashier_id=filters.cashier_id,
        cashier_names=_cashier_names(store),
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
