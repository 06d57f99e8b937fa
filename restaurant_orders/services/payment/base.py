"""
Payment Provider Abstract Base Class

Defines the interface contract for all payment provider implementations.
Both MockPaymentProvider and StripePaymentProvider implement these methods,
so checkout and reconciliation behave identically regardless of which one
is active.

Design Pattern: Strategy Pattern
    - The provider is built once at startup from Settings and injected
    - Tests and local development swap in the mock without code changes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from restaurant_orders.services.pricing import PricedLine

CHECKOUT_COMPLETED = "checkout.session.completed"


@dataclass
class CheckoutRequest:
    """
    Everything the provider needs to host one checkout.

    Attributes:
        line_items: Priced cart lines (unit prices in cents)
        delivery_fee: Flat delivery charge in cents
        currency: Three-letter currency code
        metadata: Opaque key/values echoed back in payment events
        success_url: Where the buyer lands after paying
        cancel_url: Where the buyer lands after cancelling
    """
    line_items: list[PricedLine]
    delivery_fee: int
    currency: str
    metadata: dict[str, str]
    success_url: str
    cancel_url: str

    @property
    def amount_total(self) -> int:
        """What the buyer will be charged, in cents."""
        return sum(line.subtotal for line in self.line_items) + self.delivery_fee


@dataclass
class CheckoutSessionResult:
    """
    Standardized result of creating a checkout session.

    Attributes:
        session_id: Provider session identifier (Stripe format: cs_xxx)
        url: Hosted checkout page, None if the provider returned none
        response_time_ms: Time taken by the provider call
    """
    session_id: Optional[str] = None
    url: Optional[str] = None
    response_time_ms: float = 0.0


@dataclass
class PaymentEvent:
    """
    A verified payment notification.

    Attributes:
        type: Event type tag (e.g. "checkout.session.completed")
        event_id: Provider event identifier
        order_id: Order id from the session metadata, if any
        restaurant_id: Restaurant id from the session metadata, if any
        amount_total: Amount paid in cents, if the event carries one
        raw: The parsed payload
    """
    type: str
    event_id: Optional[str] = None
    order_id: Optional[str] = None
    restaurant_id: Optional[str] = None
    amount_total: Optional[int] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_checkout_completed(self) -> bool:
        return self.type == CHECKOUT_COMPLETED

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PaymentEvent":
        """Build an event from a Stripe-shaped payload (data.object holds the session)."""
        session = (payload.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}
        amount_total = session.get("amount_total")
        return cls(
            type=str(payload.get("type", "")),
            event_id=payload.get("id"),
            order_id=metadata.get("orderId"),
            restaurant_id=metadata.get("restaurantId"),
            amount_total=int(amount_total) if amount_total is not None else None,
            raw=payload,
        )


class BasePaymentProvider(ABC):
    """
    Abstract base class for payment providers.

    Example:
        >>> provider = build_payment_provider(settings)
        >>> result = await provider.create_checkout_session(request)
        >>> result.url
        'https://checkout.stripe.com/c/pay/cs_test_...'
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "mock", "stripe")
        """
        pass

    @abstractmethod
    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSessionResult:
        """
        Create a hosted checkout session.

        Args:
            request: Priced lines, delivery fee, metadata and redirect targets

        Returns:
            CheckoutSessionResult: Session id and hosted page URL

        Raises:
            PaymentProviderError: The provider rejected or failed the call
        """
        pass

    @abstractmethod
    async def verify_and_parse_event(
        self,
        payload: bytes,
        signature: Optional[str],
    ) -> PaymentEvent:
        """
        Verify and parse a webhook from the payment provider.

        Args:
            payload: Raw request body bytes
            signature: Signature header from the request

        Returns:
            PaymentEvent: The verified event

        Raises:
            InvalidSignature: Missing, malformed or mismatched signature
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment provider.

        Returns:
            bool: True if service is reachable and operational
        """
        pass
