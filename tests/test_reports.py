from datetime import datetime, timezone

from reports import UNCATEGORIZED, filter_orders, sales_summary
from schemas import MenuItem, Order, OrderItem


def _at(day, hour=12):
    return datetime(2024, 5, day, hour, tzinfo=timezone.utc)


def _order(number, when, cashier, method, *lines):
    items = [OrderItem(menu_item_id=m, name=m, price=p, quantity=q, category=c) for m, p, q, c in lines]
    return Order(
        id=f"id-{number}",
        order_number=f"INV{number}",
        items=items,
        total=sum(p * q for _, p, q, _ in lines),
        date=when,
        payment_method=method,
        cashier_id=cashier,
    )


ORDERS = [
    _order("001", _at(13), "c1", "cash", ("burger", 35000, 2, "Main Course"), ("tea", 10000, 2, "Beverage")),
    _order("002", _at(14), "c1", "card", ("pizza", 75000, 1, "Main Course")),
    _order("003", _at(15, 9), "c2", "qris", ("tea", 10000, 1, "Beverage"), ("old", 5000, 1, None)),
]


def test_search_matches_number_date_method_and_cashier_name():
    names = {"c2": "Bob Cashier"}
    assert [o.order_number for o in filter_orders(ORDERS, q="inv002")] == ["INV002"]
    assert [o.order_number for o in filter_orders(ORDERS, q="2024-05-13")] == ["INV001"]
    assert [o.order_number for o in filter_orders(ORDERS, q="QRIS")] == ["INV003"]
    assert [o.order_number for o in filter_orders(ORDERS, q="bob", cashier_names=names)] == ["INV003"]
    assert filter_orders(ORDERS, q="nothing-like-this") == []


def test_filters_combine_and_sort_newest_first():
    assert [o.order_number for o in filter_orders(ORDERS)] == ["INV003", "INV002", "INV001"]
    assert [o.order_number for o in filter_orders(ORDERS, cashier_id="c1", payment_method="card")] == ["INV002"]
    window = filter_orders(ORDERS, date_from=_at(13, 0), date_to=datetime(2024, 5, 14, 23, 59))
    assert [o.order_number for o in window] == ["INV002", "INV001"]


def test_sales_summary_groups_by_category_cashier_and_payment():
    menu = [MenuItem(id="old", name="Kerupuk", price=5000, category="Side Dish")]
    summary = sales_summary(ORDERS, menu, cashier_names={"c1": "Ani"})

    assert summary.total_sales == 180000
    assert summary.transaction_count == 3
    by_category = {r.name: (r.amount, r.count) for r in summary.sales_by_category}
    assert by_category == {"Main Course": (145000, 3), "Beverage": (30000, 3), "Side Dish": (5000, 1)}
    assert [(r.name, r.amount, r.count) for r in summary.sales_by_cashier] == [("Ani", 165000, 2), ("c2", 15000, 1)]
    assert {r.name: r.amount for r in summary.sales_by_payment_method} == {"cash": 90000, "card": 75000, "qris": 15000}


def test_sales_summary_unknown_category_and_cashier_filter():
    summary = sales_summary(ORDERS, [], cashier_id="c2")
    assert summary.transaction_count == 1
    assert {r.name for r in summary.sales_by_category} == {"Beverage", UNCATEGORIZED}


def test_empty_summary():
    summary = sales_summary([], [])
    assert summary.total_sales == 0
    assert summary.sales_by_category == []
