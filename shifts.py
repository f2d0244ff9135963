"""
Cashier shifts: open with a counted cash drawer, close with the end count,
and report the sales rung up in between.
"""
import logging
from datetime import datetime
from typing import Optional

from reports import sales_summary
from schemas import Shift, ShiftClose, ShiftOpen, ShiftReport, now_utc
from store import PosStore

logger = logging.getLogger(__name__)


class ShiftError(Exception):
    pass


class ShiftNotFound(ShiftError):
    pass


class ShiftAlreadyOpen(ShiftError):
    pass


class ShiftAlreadyClosed(ShiftError):
    pass


class StaffInactive(ShiftError):
    pass


def open_shift(store: PosStore, payload: ShiftOpen, now: Optional[datetime] = None) -> Shift:
    member = store.get_staff_member(payload.cashier_id)
    if member is not None and not member.active:
        raise StaffInactive(f"Staff member {member.full_name} is not active")
    if store.get_active_shift(payload.cashier_id):
        raise ShiftAlreadyOpen(f"Cashier {payload.cashier_id} already has an active shift")

    shift = Shift(cashier_id=payload.cashier_id, start_time=now or now_utc(),
                  cash_drawer_start=payload.cash_drawer_start)
    store.add_shift(shift)
    logger.info("Shift %s opened for %s", shift.id, shift.cashier_id)
    return shift


def close_shift(store: PosStore, shift_id: str, payload: ShiftClose, now: Optional[datetime] = None) -> Shift:
    shift = store.get_shift(shift_id)
    if shift is None:
        raise ShiftNotFound(f"Shift not found: {shift_id}")
    if shift.status == "closed":
        raise ShiftAlreadyClosed(f"Shift {shift_id} is already closed")

    shift = shift.model_copy(update={
        "status": "closed",
        "end_time": now or now_utc(),
        "cash_drawer_end": payload.cash_drawer_end,
    })
    store.update_shift(shift)
    logger.info("Shift %s closed for %s", shift.id, shift.cashier_id)
    return shift


def shift_report(store: PosStore, shift: Shift, now: Optional[datetime] = None) -> ShiftReport:
    """Sales by the shift's cashier between its start and its end (or now, while active)."""
    member = store.get_staff_member(shift.cashier_id)
    names = {member.id: member.full_name} if member else {}
    summary = sales_summary(
        store.get_orders(),
        store.get_menu_items(),
        date_from=shift.start_time,
        date_to=shift.end_time or now or now_utc(),
        cashier_id=shift.cashier_id,
        cashier_names=names,
    )
    cash_sales = next((r.amount for r in summary.sales_by_payment_method if r.name == "cash"), 0.0)
    expected = round(shift.cash_drawer_start + cash_sales, 2)
    difference = None
    if shift.cash_drawer_end is not None:
        difference = round(shift.cash_drawer_end - expected, 2)
    return ShiftReport(
        shift=shift,
        cashier_name=member.full_name if member else None,
        summary=summary,
        cash_sales=cash_sales,
        expected_cash=expected,
        cash_difference=difference,
    )
