"""
Fulfillment Authorizer & Status Transitioner

Lets the account that owns a restaurant move that restaurant's orders
through the lifecycle:

    placed -> paid -> inProgress -> outForDelivery -> delivered

By default any lifecycle status may be requested. With
strict_transitions=True only the immediate successor of the current
status is accepted.
"""

import logging

from restaurant_orders.core.exceptions import (
    InvalidStatusTransition,
    OrderNotFound,
    OrderStatusConflict,
    RestaurantNotFound,
    Unauthorized,
)
from restaurant_orders.models import OrderStatus
from restaurant_orders.services.orders.base import OrderRecord, OrderStore
from restaurant_orders.services.restaurants.base import RestaurantProvider

logger = logging.getLogger(__name__)


class FulfillmentService:

    def __init__(
        self,
        order_store: OrderStore,
        restaurants: RestaurantProvider,
        strict_transitions: bool = False,
    ):
        self.order_store = order_store
        self.restaurants = restaurants
        self.strict_transitions = strict_transitions

    async def update_status(
        self,
        order_id: str,
        requested_status: OrderStatus,
        account_id: str,
    ) -> OrderRecord:
        """
        Set an order's status on behalf of its restaurant's owner.

        Raises:
            OrderNotFound: No such order
            Unauthorized: account_id does not own the order's restaurant
            InvalidStatusTransition: Strict mode and not the next status
            OrderStatusConflict: The order changed between read and write
        """
        order = await self.order_store.get_by_id(order_id)
        if order is None:
            raise OrderNotFound()

        restaurant = await self.restaurants.get_restaurant_by_id(order.restaurant_id)
        if restaurant is None or restaurant.owner_account_id != account_id:
            logger.warning(f"Account {account_id} refused status update on order {order_id}")
            raise Unauthorized()

        if self.strict_transitions and requested_status != order.status.next_status:
            raise InvalidStatusTransition(
                f"Cannot move order from {order.status.value} to {requested_status.value}"
            )

        applied = await self.order_store.compare_and_set_status(
            order_id, order.status, requested_status
        )
        if not applied:
            raise OrderStatusConflict()

        logger.info(
            f"Order {order_id}: {order.status.value} -> {requested_status.value} "
            f"by {account_id}"
        )
        return order.with_changes(status=requested_status)

    async def list_orders_for_restaurant_owner(self, account_id: str) -> list[OrderRecord]:
        """
        Orders of the restaurant owned by account_id, newest first.

        Raises:
            RestaurantNotFound: The account owns no restaurant
        """
        restaurant = await self.restaurants.get_restaurant_by_owner(account_id)
        if restaurant is None:
            raise RestaurantNotFound()
        return await self.order_store.find_by_restaurant(restaurant.id)

    async def list_orders_for_account(self, account_id: str) -> list[OrderRecord]:
        """Orders placed by account_id, newest first."""
        return await self.order_store.find_by_account(account_id)
