"""
Tests for owner-authorized status updates and order listings.
"""

import pytest

from restaurant_orders.core.exceptions import (
    InvalidStatusTransition,
    OrderNotFound,
    OrderStatusConflict,
    RestaurantNotFound,
    Unauthorized,
)
from restaurant_orders.models import OrderStatus
from restaurant_orders.schemas import CartItemRequest
from restaurant_orders.services.fulfillment import FulfillmentService
from restaurant_orders.services.orders import InMemoryOrderStore, OrderLineItem, OrderRecord

from tests.conftest import BUYER_ID, OWNER_ID


@pytest.mark.asyncio
async def test_owner_moves_order_forward(fulfillment_service, order_store, placed_order_id):
    updated = await fulfillment_service.update_status(
        placed_order_id, OrderStatus.IN_PROGRESS, OWNER_ID
    )

    assert updated.status == OrderStatus.IN_PROGRESS
    assert (await order_store.get_by_id(placed_order_id)).status == OrderStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_full_lifecycle_walk(fulfillment_service, order_store, placed_order_id):
    for status in (
        OrderStatus.PAID,
        OrderStatus.IN_PROGRESS,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    ):
        updated = await fulfillment_service.update_status(placed_order_id, status, OWNER_ID)
        assert updated.status == status

    assert (await order_store.get_by_id(placed_order_id)).status == OrderStatus.DELIVERED


@pytest.mark.asyncio
async def test_non_owner_is_refused(fulfillment_service, order_store, placed_order_id):
    with pytest.raises(Unauthorized) as exc_info:
        await fulfillment_service.update_status(placed_order_id, OrderStatus.DELIVERED, "owner-2")

    assert exc_info.value.status_code == 403
    assert (await order_store.get_by_id(placed_order_id)).status == OrderStatus.PLACED


@pytest.mark.asyncio
async def test_buyer_cannot_update_own_order(fulfillment_service, placed_order_id):
    with pytest.raises(Unauthorized):
        await fulfillment_service.update_status(placed_order_id, OrderStatus.DELIVERED, BUYER_ID)


@pytest.mark.asyncio
async def test_unknown_order(fulfillment_service):
    with pytest.raises(OrderNotFound):
        await fulfillment_service.update_status("missing", OrderStatus.PAID, OWNER_ID)


@pytest.mark.asyncio
async def test_update_does_not_touch_other_fields(
    fulfillment_service, order_store, placed_order_id
):
    before = await order_store.get_by_id(placed_order_id)

    await fulfillment_service.update_status(placed_order_id, OrderStatus.PAID, OWNER_ID)

    after = await order_store.get_by_id(placed_order_id)
    assert after.total_amount is None
    assert after.line_items == before.line_items
    assert after.delivery_details == before.delivery_details


@pytest.mark.asyncio
async def test_strict_mode_only_allows_next_status(order_store, restaurants, placed_order_id):
    strict = FulfillmentService(order_store, restaurants, strict_transitions=True)

    with pytest.raises(InvalidStatusTransition):
        await strict.update_status(placed_order_id, OrderStatus.DELIVERED, OWNER_ID)

    updated = await strict.update_status(placed_order_id, OrderStatus.PAID, OWNER_ID)
    assert updated.status == OrderStatus.PAID

    with pytest.raises(InvalidStatusTransition):
        await strict.update_status(placed_order_id, OrderStatus.PLACED, OWNER_ID)


class RacingStore(InMemoryOrderStore):
    """Another writer changes the status between read and write."""

    async def compare_and_set_status(self, order_id, expected_status, new_status, extra=None):
        await super().compare_and_set_status(order_id, expected_status, OrderStatus.PAID)
        return await super().compare_and_set_status(
            order_id, expected_status, new_status, extra
        )


@pytest.mark.asyncio
async def test_concurrent_change_raises_conflict(restaurants, delivery_details):
    store = RacingStore()
    order = OrderRecord(
        restaurant_id="r1",
        account_id=BUYER_ID,
        line_items=(OrderLineItem(menu_item_id="m1", name="Burger", quantity=1),),
        delivery_details=delivery_details,
    )
    await store.create(order)

    service = FulfillmentService(store, restaurants)
    with pytest.raises(OrderStatusConflict):
        await service.update_status(order.id, OrderStatus.IN_PROGRESS, OWNER_ID)

    assert (await store.get_by_id(order.id)).status == OrderStatus.PAID


@pytest.mark.asyncio
async def test_owner_listing_only_shows_own_restaurant(
    fulfillment_service, checkout_service, delivery_details, placed_order_id
):
    await checkout_service.create_checkout(
        [CartItemRequest(menu_item_id="n1", quantity=1)], delivery_details, "r2", BUYER_ID
    )

    orders = await fulfillment_service.list_orders_for_restaurant_owner(OWNER_ID)

    assert [o.id for o in orders] == [placed_order_id]


@pytest.mark.asyncio
async def test_owner_listing_without_restaurant(fulfillment_service):
    with pytest.raises(RestaurantNotFound):
        await fulfillment_service.list_orders_for_restaurant_owner(BUYER_ID)


@pytest.mark.asyncio
async def test_account_listing(fulfillment_service, placed_order_id):
    assert [o.id for o in await fulfillment_service.list_orders_for_account(BUYER_ID)] == [
        placed_order_id
    ]
    assert await fulfillment_service.list_orders_for_account("stranger") == []
