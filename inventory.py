"""
Stock deduction for completed orders.

Every order line is expanded through its menu item's recipe and the matching
inventory items are decremented, converting the recipe unit into the unit
the stock is kept in. Stale references and unit pairs without a conversion
factor are skipped and reported; nothing here raises for them.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from schemas import InventoryItem, MenuItem, Order, now_utc
from units import convert_unit, normalize_unit

logger = logging.getLogger(__name__)

SKIP_MISSING_MENU_ITEM = "missing_menu_item"
SKIP_NO_RECIPE = "no_recipe"
SKIP_MISSING_INVENTORY_ITEM = "missing_inventory_item"
SKIP_NO_CONVERSION = "no_conversion"


@dataclass
class Deduction:
    inventory_id: str
    amount: float
    unit: str
    before: float
    after: float


@dataclass
class SkippedEntry:
    menu_item_id: str
    reason: str
    inventory_id: Optional[str] = None


@dataclass
class DeductionResult:
    deductions: List[Deduction] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(s.reason == SKIP_NO_CONVERSION for s in self.skipped)


def deduction_amount(amount: float, quantity: int, recipe_unit: str, stock_unit: str) -> Optional[float]:
    """Amount to take off stock for `quantity` portions, in the stock unit.

    None means the recipe unit cannot be expressed in the stock unit.
    """
    raw = amount * quantity
    if normalize_unit(recipe_unit) == normalize_unit(stock_unit):
        return raw
    return convert_unit(raw, recipe_unit, stock_unit)


def deduct_inventory(
    order: Order,
    menu_items: Sequence[MenuItem],
    inventory_items: Sequence[InventoryItem],
    now: Optional[datetime] = None,
) -> Tuple[List[InventoryItem], DeductionResult]:
    """Return the inventory collection after consuming `order`'s ingredients.

    The input items are not modified; the returned list keeps the input
    order and contains every item, touched or not.
    """
    now = now or now_utc()
    menu_by_id: Dict[str, MenuItem] = {m.id: m for m in menu_items}
    stock: Dict[str, InventoryItem] = {i.id: i.model_copy() for i in inventory_items}
    result = DeductionResult()

    for line in order.items:
        menu_item = menu_by_id.get(line.menu_item_id)
        if menu_item is None:
            result.skipped.append(SkippedEntry(line.menu_item_id, SKIP_MISSING_MENU_ITEM))
            continue
        if not menu_item.recipe:
            result.skipped.append(SkippedEntry(line.menu_item_id, SKIP_NO_RECIPE))
            continue

        for ingredient in menu_item.recipe:
            item = stock.get(ingredient.inventory_id)
            if item is None:
                logger.warning(
                    "Inventory item %s in recipe of %s not found, skipping",
                    ingredient.inventory_id, menu_item.name,
                    extra={"order_number": order.order_number, "menu_item_id": menu_item.id,
                           "inventory_id": ingredient.inventory_id},
                )
                result.skipped.append(
                    SkippedEntry(line.menu_item_id, SKIP_MISSING_INVENTORY_ITEM, ingredient.inventory_id)
                )
                continue

            amount = deduction_amount(ingredient.amount, line.quantity, ingredient.unit, item.unit)
            if amount is None:
                logger.warning(
                    "Cannot deduct %s: no conversion from recipe unit %s to stock unit %s",
                    item.name, ingredient.unit, item.unit,
                    extra={"order_number": order.order_number, "menu_item_id": menu_item.id,
                           "inventory_id": item.id, "recipe_unit": ingredient.unit,
                           "stock_unit": item.unit},
                )
                result.skipped.append(
                    SkippedEntry(line.menu_item_id, SKIP_NO_CONVERSION, ingredient.inventory_id)
                )
                continue

            before = item.quantity
            item.quantity = max(0.0, before - amount)
            item.updated_at = now
            result.deductions.append(
                Deduction(item.id, amount, normalize_unit(item.unit), before, item.quantity)
            )

    return [stock[i.id] for i in inventory_items], result
