"""
Payment Callback Verifier & Reconciler

Applies a verified "checkout.session.completed" event to its order:
PLACED -> PAID, exactly once, with total_amount taken from the event.

The provider delivers at least once and retries until it sees a 2xx, so
every path below decides between:

    ack    (200) - handled or deliberately dropped; stop redelivery
    reject (4xx/5xx) - invite redelivery

Only a bad signature (InvalidSignature) and a store outage
(StoreUnavailable) reject. Both propagate as exceptions; everything else
returns a WebhookAck.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from restaurant_orders.models import OrderStatus
from restaurant_orders.services.orders.base import OrderStore
from restaurant_orders.services.payment.base import BasePaymentProvider, PaymentEvent

logger = logging.getLogger(__name__)


class ReconcileOutcome(str, enum.Enum):
    PAID = "paid"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"
    ORDER_NOT_FOUND = "order_not_found"
    MISSING_AMOUNT = "missing_amount"


@dataclass(frozen=True)
class WebhookAck:
    """Acknowledgement returned to the provider."""
    outcome: ReconcileOutcome
    order_id: Optional[str] = None
    status_code: int = 200

    def to_dict(self) -> dict:
        return {
            "received": True,
            "outcome": self.outcome.value,
            "order_id": self.order_id,
        }


class PaymentReconciler:
    """
    Verifies payment callbacks and reconciles them against orders.

    Example:
        >>> reconciler = PaymentReconciler(order_store, provider)
        >>> ack = await reconciler.handle_callback(body, signature)
        >>> ack.outcome
        <ReconcileOutcome.PAID: 'paid'>
    """

    def __init__(self, order_store: OrderStore, payment_provider: BasePaymentProvider):
        self.order_store = order_store
        self.payment_provider = payment_provider

    async def handle_callback(self, raw_payload: bytes, signature_header: Optional[str]) -> WebhookAck:
        """
        Verify, parse and reconcile one webhook delivery.

        Raises:
            InvalidSignature: The payload is not authentic; nothing was touched
            StoreUnavailable: The order store failed; the provider should retry
        """
        event = await self.payment_provider.verify_and_parse_event(raw_payload, signature_header)

        if not event.is_checkout_completed:
            logger.info(f"Webhook {event.event_id}: ignoring event type {event.type}")
            return WebhookAck(outcome=ReconcileOutcome.IGNORED)

        return await self.reconcile(event)

    async def reconcile(self, event: PaymentEvent) -> WebhookAck:
        """Apply a verified checkout-completed event to its order."""
        order_id = event.order_id
        order = await self.order_store.get_by_id(order_id) if order_id else None

        if order is None:
            # Acknowledged anyway: redelivering cannot make an unknown order appear
            logger.warning(f"Webhook {event.event_id}: OrderNotFound (orderId={order_id!r})")
            return WebhookAck(outcome=ReconcileOutcome.ORDER_NOT_FOUND, order_id=order_id)

        if order.status != OrderStatus.PLACED:
            logger.info(
                f"Webhook {event.event_id}: order {order_id} already {order.status.value}, "
                f"duplicate delivery ignored"
            )
            return WebhookAck(outcome=ReconcileOutcome.DUPLICATE, order_id=order_id)

        if event.amount_total is None:
            # A paid order always carries its amount; leave it PLACED for follow-up
            logger.error(f"Webhook {event.event_id}: no amount_total for order {order_id}, not marked paid")
            return WebhookAck(outcome=ReconcileOutcome.MISSING_AMOUNT, order_id=order_id)

        applied = await self.order_store.compare_and_set_status(
            order_id,
            OrderStatus.PLACED,
            OrderStatus.PAID,
            {"total_amount": event.amount_total},
        )

        if not applied:
            # Another delivery (or writer) moved the order first
            logger.info(f"Webhook {event.event_id}: order {order_id} changed concurrently, duplicate")
            return WebhookAck(outcome=ReconcileOutcome.DUPLICATE, order_id=order_id)

        logger.info(f"Order {order_id} PAID - total_amount={event.amount_total}")
        return WebhookAck(outcome=ReconcileOutcome.PAID, order_id=order_id)
