"""
Mock Payment Provider Implementation

Simulates Stripe Checkout without making real API calls.
Used in development mode (ENV_MODE=development) to:
    - Test the complete checkout -> webhook -> fulfillment flow locally
    - Run the simulation script without a Stripe account
    - Drive the test suite

Behavior:
    - Generates Stripe-like session IDs (cs_mock_xxx) and hosted URLs
    - Optionally simulates latency and checkout failures
    - Verifies webhooks through the Stripe SDK, so a bad signature is
      rejected exactly as it would be in production
    - Signs payloads with compute_signature_header for simulations and tests
"""

import asyncio
import hashlib
import hmac
import json
import logging
import random
import time
import uuid
from typing import Optional

from restaurant_orders.core.exceptions import PaymentProviderError
from restaurant_orders.services.payment.base import (
    CHECKOUT_COMPLETED,
    BasePaymentProvider,
    CheckoutRequest,
    CheckoutSessionResult,
    PaymentEvent,
)
from restaurant_orders.services.payment.stripe import construct_payment_event

logger = logging.getLogger(__name__)


def compute_signature_header(
    payload: bytes,
    secret: str,
    timestamp: Optional[int] = None,
) -> str:
    """Sign a payload the way Stripe signs webhook deliveries."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def build_checkout_completed_payload(
    order_id: str,
    amount_total: Optional[int],
    restaurant_id: Optional[str] = None,
    event_type: str = CHECKOUT_COMPLETED,
) -> bytes:
    """
    Build a Stripe-shaped checkout.session.completed body.

    amount_total=None leaves the amount out of the session object.
    """
    metadata = {"orderId": order_id}
    if restaurant_id:
        metadata["restaurantId"] = restaurant_id
    session = {
        "id": f"cs_mock_{uuid.uuid4().hex[:24]}",
        "object": "checkout.session",
        "payment_status": "paid",
        "metadata": metadata,
    }
    if amount_total is not None:
        session["amount_total"] = amount_total
    body = {
        "id": f"evt_mock_{uuid.uuid4().hex[:24]}",
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }
    return json.dumps(body).encode("utf-8")


class MockPaymentProvider(BasePaymentProvider):
    """
    Mock implementation of the payment provider.

    Attributes:
        webhook_secret: Secret webhooks must be signed with
        failure_rate: Probability of a simulated checkout failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        tolerance: Maximum webhook timestamp age in seconds
        sessions: Every CheckoutRequest received, oldest first

    Example:
        >>> provider = MockPaymentProvider(webhook_secret="whsec_test")
        >>> result = await provider.create_checkout_session(request)
        >>> result.url.startswith("https://checkout.mock.local/")
        True
    """

    # Simulated failure reasons (mimics real Stripe error messages)
    FAILURE_REASONS = [
        "The API key provided does not have access to Checkout.",
        "An error occurred while creating the checkout session.",
        "Request rate limit exceeded.",
    ]

    def __init__(
        self,
        webhook_secret: str,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        tolerance: int = 300,
        base_url: str = "https://checkout.mock.local",
    ):
        self.webhook_secret = webhook_secret
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.tolerance = tolerance
        self.base_url = base_url.rstrip("/")
        self.sessions: list[CheckoutRequest] = []

        logger.info(
            f"MockPaymentProvider initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def _generate_session_id(self) -> str:
        """Generate a Stripe-like checkout session ID."""
        return f"cs_mock_{uuid.uuid4().hex[:24]}"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSessionResult:
        latency_ms = await self._simulate_latency()

        if self._should_fail():
            reason = random.choice(self.FAILURE_REASONS)
            logger.debug(f"Mock: Checkout session failed - {reason}")
            raise PaymentProviderError(reason)

        self.sessions.append(request)
        session_id = self._generate_session_id()

        logger.info(
            f"Mock: Checkout session created - {session_id} - "
            f"{request.amount_total} {request.currency.upper()} - "
            f"order={request.metadata.get('orderId')}"
        )

        return CheckoutSessionResult(
            session_id=session_id,
            url=f"{self.base_url}/pay/{session_id}",
            response_time_ms=latency_ms,
        )

    def sign(self, payload: bytes, timestamp: Optional[int] = None) -> str:
        """Signature header for a payload, for simulations and tests."""
        return compute_signature_header(payload, self.webhook_secret, timestamp)

    async def verify_and_parse_event(
        self,
        payload: bytes,
        signature: Optional[str],
    ) -> PaymentEvent:
        event = construct_payment_event(payload, signature, self.webhook_secret, self.tolerance)
        logger.debug(f"Mock: Webhook verified - {event.type}")
        return event

    async def health_check(self) -> bool:
        """
        Mock health check always returns True.

        In development, we assume the mock provider is always available.
        """
        logger.debug("Mock: Health check passed")
        return True
