"""
Checkout: turn a list of requested menu items into a stored order.
"""
import logging
import random
from datetime import datetime
from typing import Optional

from cart import Cart
from schemas import CheckoutRequest, Order, now_utc
from store import PosStore

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


class EmptyOrder(CheckoutError):
    pass


class MenuItemNotFound(CheckoutError):
    def __init__(self, menu_item_id: str):
        super().__init__(f"Menu item not found: {menu_item_id}")
        self.menu_item_id = menu_item_id


class MenuItemUnavailable(CheckoutError):
    def __init__(self, name: str):
        super().__init__(f"Menu item not available: {name}")
        self.name = name


class InsufficientPayment(CheckoutError):
    def __init__(self, total: float, paid: float):
        super().__init__(f"Cash paid {paid} is less than total {total}")
        self.total = total
        self.paid = paid


def generate_order_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """INV + date + hour/minute + random three digit suffix, e.g. INV202610191430-042."""
    now = now or now_utc()
    suffix = (rng or random).randint(0, 999)
    return f"INV{now:%Y%m%d}{now:%H%M}-{suffix:03d}"


def build_cart(store: PosStore, payload: CheckoutRequest) -> Cart:
    menu = {m.id: m for m in store.get_menu_items()}
    cart = Cart()
    for it in payload.items:
        mi = menu.get(it.menu_item_id)
        if mi is None:
            raise MenuItemNotFound(it.menu_item_id)
        if not mi.is_available:
            raise MenuItemUnavailable(mi.name)
        cart.add(mi, it.quantity)
    return cart


def checkout(store: PosStore, payload: CheckoutRequest, now: Optional[datetime] = None) -> Order:
    if not payload.items:
        raise EmptyOrder("Order has no items")
    now = now or now_utc()

    cart = build_cart(store, payload)
    total = round(cart.total(), 2)

    change = None
    if payload.payment_method == "cash" and payload.amount_paid is not None:
        if payload.amount_paid < total:
            raise InsufficientPayment(total, payload.amount_paid)
        change = round(payload.amount_paid - total, 2)

    order = Order(
        order_number=generate_order_number(now),
        items=cart.lines,
        total=total,
        date=now,
        payment_method=payload.payment_method,
        cashier_id=payload.cashier_id or "unknown",
        customer_name=payload.customer_name,
        customer_contact=payload.customer_contact,
        amount_paid=payload.amount_paid,
        change=change,
    )
    logger.info("Creating order %s with %d lines, total %s", order.order_number, len(order.items), total,
                extra={"order_number": order.order_number})
    store.add_order(order)

    if payload.customer_name and payload.customer_contact:
        store.record_customer_visit(payload.customer_name, payload.customer_contact, total, now)

    return order
