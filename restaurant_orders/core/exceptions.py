"""
Domain Exceptions

Every failure the ordering core can report is an OrderingError subclass.
Each one carries the HTTP status code the API answers with and a message
that is safe to show the caller. The FastAPI exception handler in main.py
turns them into ErrorResponse bodies.
"""

from typing import Optional


class OrderingError(Exception):
    """Base class for all ordering/payment errors."""

    status_code: int = 500
    default_message: str = "Order processing error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error(self) -> str:
        """Machine-readable error name."""
        return type(self).__name__


# =============================================================================
# PRICING
# =============================================================================

class LineItemNotFound(OrderingError):
    status_code = 400
    default_message = "Menu item not found"

    def __init__(self, menu_item_id: str):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item not found: {menu_item_id}")


class InvalidQuantity(OrderingError):
    status_code = 400
    default_message = "Quantity must be a positive whole number"

    def __init__(self, quantity: object):
        self.quantity = quantity
        super().__init__(f"Invalid quantity: {quantity!r}")


# =============================================================================
# CHECKOUT
# =============================================================================

class RestaurantNotFound(OrderingError):
    status_code = 404
    default_message = "Restaurant not found"


class CheckoutSessionFailed(OrderingError):
    status_code = 502
    default_message = "Error creating checkout session"


class PaymentProviderError(OrderingError):
    status_code = 502
    default_message = "Payment provider error"


# =============================================================================
# WEBHOOK
# =============================================================================

class InvalidSignature(OrderingError):
    status_code = 400
    default_message = "Webhook signature verification failed"


# =============================================================================
# ORDERS / FULFILLMENT
# =============================================================================

class OrderNotFound(OrderingError):
    status_code = 404
    default_message = "Order not found"


class Unauthorized(OrderingError):
    status_code = 403
    default_message = "Not authorized to update this order"


class InvalidStatusTransition(OrderingError):
    status_code = 409
    default_message = "Status transition not allowed"


class OrderStatusConflict(OrderingError):
    status_code = 409
    default_message = "Order was modified concurrently, please retry"


# =============================================================================
# STORAGE
# =============================================================================

class StoreUnavailable(OrderingError):
    status_code = 503
    default_message = "Order store temporarily unavailable"
