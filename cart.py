from typing import Dict, List

from schemas import MenuItem, OrderItem


class Cart:
    """Lines a cashier is about to sell, keyed by menu item id."""

    def __init__(self):
        self._lines: Dict[str, OrderItem] = {}

    def add(self, item: MenuItem, quantity: int = 1) -> OrderItem:
        line = self._lines.get(item.id)
        if line is None:
            line = OrderItem(menu_item_id=item.id, name=item.name, price=item.price,
                             quantity=quantity, category=item.category)
        else:
            line = line.model_copy(update={"quantity": line.quantity + quantity})
        self._lines[item.id] = line
        return line

    def remove(self, menu_item_id: str) -> None:
        line = self._lines.get(menu_item_id)
        if line is None:
            return
        if line.quantity > 1:
            self._lines[menu_item_id] = line.model_copy(update={"quantity": line.quantity - 1})
        else:
            del self._lines[menu_item_id]

    def clear(self) -> None:
        self._lines.clear()

    @property
    def lines(self) -> List[OrderItem]:
        return list(self._lines.values())

    def total(self) -> float:
        return sum(line.price * line.quantity for line in self._lines.values())

    def __len__(self):
        return len(self._lines)
