"""
Checkout Session Builder

Turns a buyer's cart into a hosted checkout session:

    1. Load the restaurant
    2. Price the cart from the restaurant's menu
    3. Persist the order as PLACED (before the provider is contacted)
    4. Ask the payment provider for a checkout session
    5. Return the hosted page URL

The PLACED order is kept whatever the provider does afterwards. An
abandoned or failed checkout simply leaves an inert PLACED order; it only
becomes PAID through a verified payment callback.
"""

import logging
from typing import Iterable

from restaurant_orders.core.exceptions import (
    CheckoutSessionFailed,
    PaymentProviderError,
    RestaurantNotFound,
)
from restaurant_orders.services.orders.base import (
    DeliveryDetails,
    OrderLineItem,
    OrderRecord,
    OrderStore,
)
from restaurant_orders.services.payment.base import BasePaymentProvider, CheckoutRequest
from restaurant_orders.services.pricing import CartLine, cart_subtotal, resolve_line_items
from restaurant_orders.services.restaurants.base import RestaurantProvider

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Creates orders and their provider checkout sessions.

    Args:
        order_store: Where the PLACED order is written
        restaurants: Source of menus and delivery prices
        payment_provider: Hosts the checkout page
        frontend_url: Base URL for the success/cancel redirects
        currency: Three-letter currency code for every line
    """

    def __init__(
        self,
        order_store: OrderStore,
        restaurants: RestaurantProvider,
        payment_provider: BasePaymentProvider,
        frontend_url: str,
        currency: str = "cad",
    ):
        self.order_store = order_store
        self.restaurants = restaurants
        self.payment_provider = payment_provider
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency

    async def create_checkout(
        self,
        cart: Iterable[CartLine],
        delivery_details: DeliveryDetails,
        restaurant_id: str,
        account_id: str,
    ) -> str:
        """
        Create a PLACED order and a checkout session for it.

        Returns:
            str: Hosted checkout URL to redirect the buyer to

        Raises:
            RestaurantNotFound: Unknown restaurant
            LineItemNotFound: A cart item is not on the menu
            InvalidQuantity: A quantity is not a positive whole number
            PaymentProviderError: The provider call failed
            CheckoutSessionFailed: The provider returned no URL
        """
        restaurant = await self.restaurants.get_restaurant_by_id(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFound(f"Restaurant not found: {restaurant_id}")

        # Priced before anything is written: a bad cart leaves no order behind
        priced = resolve_line_items(cart, restaurant.menu)

        order = OrderRecord(
            restaurant_id=restaurant.id,
            account_id=account_id,
            line_items=tuple(
                OrderLineItem(
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    quantity=line.quantity,
                )
                for line in priced
            ),
            delivery_details=delivery_details,
        )
        order_id = await self.order_store.create(order)

        logger.info(
            f"Order {order_id} placed - restaurant={restaurant.id} - "
            f"{len(priced)} line(s) - subtotal={cart_subtotal(priced)}"
        )

        request = CheckoutRequest(
            line_items=priced,
            delivery_fee=restaurant.delivery_price,
            currency=self.currency,
            metadata={"orderId": order_id, "restaurantId": restaurant.id},
            success_url=f"{self.frontend_url}/order-status?success=true",
            cancel_url=f"{self.frontend_url}/detail/{restaurant.id}?cancelled=true",
        )

        try:
            session = await self.payment_provider.create_checkout_session(request)
        except PaymentProviderError:
            logger.warning(f"Order {order_id}: checkout session failed, order left PLACED")
            raise
        except Exception as e:
            logger.exception(f"Order {order_id}: unexpected payment provider error")
            raise PaymentProviderError(str(e)) from e

        if not session.url:
            logger.error(f"Order {order_id}: provider returned no checkout URL")
            raise CheckoutSessionFailed()

        logger.info(f"Order {order_id}: checkout session {session.session_id} ready")
        return session.url
