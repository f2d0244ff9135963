"""
Database Schemas for the Restaurant POS

Each stored model maps to one collection (see store.COLLECTIONS). Ids are
opaque strings generated by the API, not database ids.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from units import normalize_unit

Category = Literal["Main Course", "Side Dish", "Beverage", "Dessert"]
CATEGORIES: List[str] = ["Main Course", "Side Dish", "Beverage", "Dessert"]

PaymentMethod = Literal["cash", "card", "qris"]

StaffRole = Literal["owner", "warehouse_admin", "cashier"]


def new_id() -> str:
    return uuid.uuid4().hex


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class RecipeIngredient(BaseModel):
    inventory_id: str = Field(..., min_length=1, description="Reference to InventoryItem id")
    amount: float = Field(..., gt=0, description="Amount consumed per unit sold")
    unit: str = Field(..., min_length=1, description="Unit the amount is measured in")

    @field_validator("unit")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_unit(v)


def _valid_ingredient(entry) -> bool:
    if isinstance(entry, RecipeIngredient):
        return True
    if not isinstance(entry, dict):
        return False
    try:
        amount = float(entry.get("amount") or 0)
    except (TypeError, ValueError):
        return False
    return bool(entry.get("inventory_id")) and bool(str(entry.get("unit") or "").strip()) and amount > 0


class MenuItemIn(BaseModel):
    name: str = Field(..., min_length=1, description="Item name")
    price: float = Field(..., ge=0, description="Selling price")
    category: Category
    image_url: Optional[str] = None
    description: Optional[str] = Field(None, description="Short description")
    is_available: bool = Field(True, description="Available to order")
    recipe: List[RecipeIngredient] = Field(default_factory=list, description="Stock consumed per unit sold")

    @field_validator("recipe", mode="before")
    @classmethod
    def _drop_incomplete_ingredients(cls, v):
        # half-filled recipe rows are dropped, not rejected
        if v is None:
            return []
        return [entry for entry in v if _valid_ingredient(entry)]


class MenuItem(MenuItemIn):
    id: str = Field(default_factory=new_id)


class InventoryItemIn(BaseModel):
    name: str = Field(..., min_length=1, description="Inventory item name")
    quantity: float = Field(..., ge=0, description="Current stock level")
    unit: str = Field("pcs", description="Unit the stock is counted in")
    cost_price: float = Field(0, ge=0, description="Purchase price per unit")
    threshold_quantity: Optional[float] = Field(None, ge=0, description="Low-stock alert level")


class InventoryItem(InventoryItemIn):
    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)

    @property
    def is_low_stock(self) -> bool:
        return self.threshold_quantity is not None and self.quantity <= self.threshold_quantity


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1, description="Phone number, unique per customer")
    notes: Optional[str] = None


class Customer(CustomerIn):
    id: str = Field(default_factory=new_id)
    last_visit_date: datetime = Field(default_factory=now_utc)
    last_transaction_amount: float = 0
    visit_count: int = Field(0, ge=0)
    total_spent: float = Field(0, ge=0)


class OrderItem(BaseModel):
    menu_item_id: str = Field(..., description="Reference to MenuItem id")
    name: str = Field(..., description="Snapshot of name for receipt")
    price: float = Field(..., ge=0, description="Snapshot of unit price for receipt")
    quantity: int = Field(..., ge=1)
    category: Optional[str] = Field(None, description="Snapshot of menu category for sales reports")


class Order(BaseModel):
    id: str = Field(default_factory=new_id)
    order_number: str
    items: List[OrderItem]
    total: float = Field(..., ge=0)
    date: datetime = Field(default_factory=now_utc)
    payment_method: PaymentMethod = "cash"
    cashier_id: str = "unknown"
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    amount_paid: Optional[float] = None
    change: Optional[float] = None


class CheckoutItem(BaseModel):
    menu_item_id: str
    quantity: int = Field(1, ge=1)


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem]
    payment_method: PaymentMethod = "cash"
    amount_paid: Optional[float] = Field(None, ge=0, description="Cash tendered")
    cashier_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None


class StaffMemberIn(BaseModel):
    email: str = Field(..., min_length=3, description="Unique per staff member")
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    role: StaffRole = "cashier"
    active: bool = True

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()


class StaffMember(StaffMemberIn):
    id: str = Field(default_factory=new_id)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ShiftOpen(BaseModel):
    cashier_id: str = Field(..., min_length=1)
    cash_drawer_start: float = Field(0, ge=0)


class ShiftClose(BaseModel):
    cash_drawer_end: float = Field(..., ge=0)


class Shift(BaseModel):
    id: str = Field(default_factory=new_id)
    cashier_id: str
    start_time: datetime = Field(default_factory=now_utc)
    end_time: Optional[datetime] = None
    cash_drawer_start: float = Field(0, ge=0)
    cash_drawer_end: Optional[float] = None
    status: Literal["active", "closed"] = "active"


class ReportFilter(BaseModel):
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    cashier_id: Optional[str] = None


class SalesBreakdown(BaseModel):
    name: str
    amount: float
    count: int


class SalesSummary(BaseModel):
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    total_sales: float = 0
    transaction_count: int = 0
    sales_by_category: List[SalesBreakdown] = Field(default_factory=list)
    sales_by_cashier: List[SalesBreakdown] = Field(default_factory=list)
    sales_by_payment_method: List[SalesBreakdown] = Field(default_factory=list)


class ShiftReport(BaseModel):
    shift: Shift
    cashier_name: Optional[str] = None
    summary: SalesSummary
    cash_sales: float = 0
    expected_cash: float = 0
    cash_difference: Optional[float] = Field(None, description="Counted minus expected, once closed")
