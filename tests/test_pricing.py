"""
Tests for the menu price resolver.
"""

import pytest

from restaurant_orders.core.exceptions import InvalidQuantity, LineItemNotFound
from restaurant_orders.schemas import CartItemRequest
from restaurant_orders.services.pricing import (
    PricedLine,
    cart_subtotal,
    parse_quantity,
    resolve_line_items,
)
from restaurant_orders.services.restaurants import MenuItemRecord

MENU = (
    MenuItemRecord(id="m1", name="Burger", price=500),
    MenuItemRecord(id="m2", name="Fries", price=250),
    MenuItemRecord(id="m3", name="Soda", price=199),
)


def cart(*lines):
    return [CartItemRequest(menu_item_id=i, quantity=q) for i, q in lines]


def test_resolves_prices_from_menu():
    priced = resolve_line_items(cart(("m1", "2")), MENU)

    assert priced == [PricedLine(menu_item_id="m1", name="Burger", unit_price=500, quantity=2)]


def test_keeps_cart_order():
    priced = resolve_line_items(cart(("m3", 1), ("m1", 1), ("m2", 3)), MENU)

    assert [line.menu_item_id for line in priced] == ["m3", "m1", "m2"]


def test_client_supplied_name_is_ignored():
    line = CartItemRequest(menu_item_id="m2", name="Free Lobster", quantity=1)

    priced = resolve_line_items([line], MENU)

    assert priced[0].name == "Fries"
    assert priced[0].unit_price == 250


def test_subtotal_is_exact_integer_arithmetic():
    priced = resolve_line_items(cart(("m3", 3), ("m1", 2), ("m2", "7")), MENU)

    assert cart_subtotal(priced) == 199 * 3 + 500 * 2 + 250 * 7
    assert isinstance(cart_subtotal(priced), int)


def test_unknown_item_fails_whole_cart():
    with pytest.raises(LineItemNotFound) as exc_info:
        resolve_line_items(cart(("m1", 1), ("ghost", 1)), MENU)

    assert exc_info.value.menu_item_id == "ghost"
    assert exc_info.value.status_code == 400


def test_empty_menu_rejects_everything():
    with pytest.raises(LineItemNotFound):
        resolve_line_items(cart(("m1", 1)), ())


@pytest.mark.parametrize("value, expected", [(1, 1), ("2", 2), (" 12 ", 12), (99, 99)])
def test_parse_quantity_accepts_positive_whole_numbers(value, expected):
    assert parse_quantity(value) == expected


@pytest.mark.parametrize("value", [0, "0", -1, "-3", "two", "", "1.5", 1.5, True, None])
def test_parse_quantity_rejects_invalid(value):
    with pytest.raises(InvalidQuantity):
        parse_quantity(value)


def test_invalid_quantity_in_cart():
    with pytest.raises(InvalidQuantity):
        resolve_line_items(cart(("m1", "0")), MENU)


@pytest.mark.parametrize("value", [True, False, 2.0, "lots"])
def test_cart_item_rejects_non_integer_quantity(value):
    with pytest.raises(InvalidQuantity):
        CartItemRequest(menu_item_id="m1", quantity=value)


def test_cart_item_parses_string_quantity():
    assert CartItemRequest(menu_item_id="m1", quantity=" 3 ").quantity == 3
