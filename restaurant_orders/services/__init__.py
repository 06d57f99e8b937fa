"""
                        Services Module

Business logic for the ordering core. Collaborators follow the base /
mock-or-memory / real pattern so development and tests run without
external accounts.

Services:
    - pricing: Menu price resolution (pure)
    - checkout: Checkout session builder
    - reconciliation: Payment webhook verification and reconciliation
    - fulfillment: Owner-only status transitions and order listings
    - payment: Stripe / mock payment providers
    - orders: SQL / in-memory order stores
    - restaurants: SQL / in-memory restaurant providers
"""

from restaurant_orders.services.checkout import CheckoutService
from restaurant_orders.services.fulfillment import FulfillmentService
from restaurant_orders.services.reconciliation import (
    PaymentReconciler,
    ReconcileOutcome,
    WebhookAck,
)

__all__ = [
    "CheckoutService",
    "FulfillmentService",
    "PaymentReconciler",
    "ReconcileOutcome",
    "WebhookAck",
]
