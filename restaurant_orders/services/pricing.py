"""
Menu Price Resolver

Prices every cart line from the restaurant's own menu. The buyer only ever
sends a menu item id and a quantity; unit prices always come from the
server-side menu, so a client cannot tamper with what it is charged.

Pure functions, no I/O.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, Union

from restaurant_orders.core.exceptions import InvalidQuantity, LineItemNotFound
from restaurant_orders.services.restaurants.base import MenuItemRecord

_WHOLE_NUMBER = re.compile(r"[0-9]+")


class CartLine(Protocol):
    menu_item_id: str
    quantity: Union[int, str]


@dataclass(frozen=True)
class PricedLine:
    """A cart line priced from the menu. Amounts are in cents."""
    menu_item_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


def parse_quantity(value: Union[int, str]) -> int:
    """
    Parse a cart quantity into a positive int.

    Accepts ints and strings of ASCII digits ("2"). Zero, negatives,
    fractions, booleans and anything non-numeric raise InvalidQuantity.
    """
    if isinstance(value, bool):
        raise InvalidQuantity(value)
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, str) and _WHOLE_NUMBER.fullmatch(value.strip()):
        quantity = int(value.strip())
    else:
        raise InvalidQuantity(value)

    if quantity < 1:
        raise InvalidQuantity(value)
    return quantity


def resolve_line_items(
    cart: Iterable[CartLine],
    menu: Sequence[MenuItemRecord],
) -> list[PricedLine]:
    """
    Price each cart line by exact menu item id match.

    Args:
        cart: Lines with menu_item_id and quantity
        menu: The restaurant's menu

    Returns:
        list[PricedLine]: One priced line per cart line, in cart order

    Raises:
        LineItemNotFound: A menu_item_id is not on the menu
        InvalidQuantity: A quantity is not a positive whole number
    """
    by_id = {str(item.id): item for item in menu}

    priced = []
    for line in cart:
        menu_item = by_id.get(str(line.menu_item_id))
        if menu_item is None:
            raise LineItemNotFound(line.menu_item_id)
        priced.append(
            PricedLine(
                menu_item_id=str(menu_item.id),
                name=menu_item.name,
                unit_price=menu_item.price,
                quantity=parse_quantity(line.quantity),
            )
        )
    return priced


def cart_subtotal(lines: Iterable[PricedLine]) -> int:
    """Sum of unit_price * quantity over the lines, in cents."""
    return sum(line.subtotal for line in lines)
