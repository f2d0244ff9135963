"""
Receipt search and sales summaries over stored orders.
"""
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from schemas import MenuItem, Order, SalesBreakdown, SalesSummary

UNCATEGORIZED = "Uncategorized"


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _in_range(order: Order, date_from: Optional[datetime], date_to: Optional[datetime]) -> bool:
    when = as_utc(order.date)
    if date_from and when < date_from:
        return False
    if date_to and when > date_to:
        return False
    return True


def matches_search(order: Order, q: str, cashier_names: Mapping[str, str]) -> bool:
    """Case-insensitive match on receipt id or number, date, payment method or cashier."""
    q = q.strip().lower()
    if not q:
        return True
    cashier_name = cashier_names.get(order.cashier_id, "")
    haystack = (
        order.id,
        order.order_number,
        as_utc(order.date).date().isoformat(),
        order.payment_method,
        order.cashier_id,
        cashier_name,
    )
    return any(q in value.lower() for value in haystack)


def filter_orders(
    orders: Iterable[Order],
    q: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    payment_method: Optional[str] = None,
    cashier_id: Optional[str] = None,
    cashier_names: Optional[Mapping[str, str]] = None,
) -> List[Order]:
    date_from, date_to = as_utc(date_from), as_utc(date_to)
    cashier_names = cashier_names or {}
    out = []
    for o in orders:
        if payment_method and o.payment_method != payment_method:
            continue
        if cashier_id and o.cashier_id != cashier_id:
            continue
        if not _in_range(o, date_from, date_to):
            continue
        if q and not matches_search(o, q, cashier_names):
            continue
        out.append(o)
    return sorted(out, key=lambda o: as_utc(o.date), reverse=True)


def _breakdown(amounts: Dict[str, float], counts: Dict[str, int]) -> List[SalesBreakdown]:
    rows = [SalesBreakdown(name=k, amount=round(v, 2), count=counts[k]) for k, v in amounts.items()]
    return sorted(rows, key=lambda r: (-r.amount, r.name))


def sales_summary(
    orders: Iterable[Order],
    menu_items: Sequence[MenuItem] = (),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    cashier_id: Optional[str] = None,
    cashier_names: Optional[Mapping[str, str]] = None,
) -> SalesSummary:
    """Totals for the selected orders, broken down by category, cashier and payment method.

    Categories come from the snapshot on each order line; lines from before
    that snapshot existed fall back to the current menu.
    """
    date_from, date_to = as_utc(date_from), as_utc(date_to)
    cashier_names = cashier_names or {}
    menu_category = {m.id: m.category for m in menu_items}

    selected = filter_orders(orders, date_from=date_from, date_to=date_to, cashier_id=cashier_id)

    by_category, category_qty = defaultdict(float), defaultdict(int)
    by_cashier, cashier_count = defaultdict(float), defaultdict(int)
    by_payment, payment_count = defaultdict(float), defaultdict(int)
    total = 0.0

    for o in selected:
        total += o.total
        cashier = cashier_names.get(o.cashier_id, o.cashier_id)
        by_cashier[cashier] += o.total
        cashier_count[cashier] += 1
        by_payment[o.payment_method] += o.total
        payment_count[o.payment_method] += 1
        for line in o.items:
            category = line.category or menu_category.get(line.menu_item_id) or UNCATEGORIZED
            by_category[category] += line.price * line.quantity
            category_qty[category] += line.quantity

    return SalesSummary(
        date_from=date_from,
        date_to=date_to,
        total_sales=round(total, 2),
        transaction_count=len(selected),
        sales_by_category=_breakdown(by_category, category_qty),
        sales_by_cashier=_breakdown(by_cashier, cashier_count),
        sales_by_payment_method=_breakdown(by_payment, payment_count),
    )
