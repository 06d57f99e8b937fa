"""
Stripe Payment Provider Implementation

Production implementation using the official Stripe Python SDK.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - STRIPE_SECRET_KEY must be set in environment
    - STRIPE_WEBHOOK_SECRET for webhook verification

Security Notes:
    - The API key is passed on every call; nothing is written to the
      module-level stripe.api_key
    - Webhook signatures are always verified, there is no unverified fallback
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

import stripe

from restaurant_orders.core.exceptions import InvalidSignature, PaymentProviderError
from restaurant_orders.services.payment.base import (
    BasePaymentProvider,
    CheckoutRequest,
    CheckoutSessionResult,
    PaymentEvent,
)

logger = logging.getLogger(__name__)


def construct_payment_event(
    payload: bytes,
    signature: Optional[str],
    webhook_secret: str,
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    api_key: Optional[str] = None,
) -> PaymentEvent:
    """
    Verify a "t=<ts>,v1=<hmac>" signed webhook body and parse it.

    Shared by the Stripe and mock providers so both accept and reject
    exactly the same deliveries. A tolerance of 0 disables the timestamp
    check.

    Raises:
        InvalidSignature: Missing, malformed, mismatched or stale signature,
            or a body that is not a JSON object
    """
    if not signature:
        logger.warning("Webhook without signature header")
        raise InvalidSignature("Missing signature header")

    try:
        event = stripe.Webhook.construct_event(
            payload,
            signature,
            webhook_secret,
            tolerance,
            api_key=api_key,
        )
    except stripe.SignatureVerificationError as e:
        logger.warning(f"Webhook signature invalid - {e}")
        raise InvalidSignature(str(e)) from e
    except (ValueError, AttributeError) as e:
        # Signed, but not a JSON object
        raise InvalidSignature("Invalid webhook payload") from e

    return PaymentEvent.from_payload(event.to_dict())


class StripePaymentProvider(BasePaymentProvider):
    """
    Production Stripe Checkout provider.

    Example:
        >>> provider = StripePaymentProvider(
        ...     secret_key="sk_test_...",
        ...     webhook_secret="whsec_...",
        ... )
        >>> result = await provider.create_checkout_session(request)
    """

    def __init__(
        self,
        secret_key: Optional[str],
        webhook_secret: Optional[str],
        tolerance: int = 300,
    ):
        """
        Raises:
            ValueError: If the secret key or webhook secret is not configured
        """
        if not secret_key:
            raise ValueError(
                "STRIPE_SECRET_KEY is required for production mode. "
                "Set it in your .env file or environment variables."
            )
        if not webhook_secret:
            raise ValueError(
                "STRIPE_WEBHOOK_SECRET is required to verify payment callbacks."
            )

        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._tolerance = tolerance

        logger.info("StripePaymentProvider initialized")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "stripe"

    @staticmethod
    def build_session_params(request: CheckoutRequest) -> dict[str, Any]:
        """
        Shape a CheckoutRequest the way Stripe Checkout expects it.

        Each cart line becomes a price_data line item; the delivery fee is a
        fixed-amount shipping rate.
        """
        line_items = [
            {
                "price_data": {
                    "currency": request.currency,
                    "unit_amount": line.unit_price,
                    "product_data": {"name": line.name},
                },
                "quantity": line.quantity,
            }
            for line in request.line_items
        ]
        return {
            "line_items": line_items,
            "shipping_options": [
                {
                    "shipping_rate_data": {
                        "display_name": "Delivery",
                        "type": "fixed_amount",
                        "fixed_amount": {
                            "amount": request.delivery_fee,
                            "currency": request.currency,
                        },
                    },
                },
            ],
            "mode": "payment",
            "metadata": dict(request.metadata),
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
        }

    async def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSessionResult:
        start_time = datetime.now()
        params = self.build_session_params(request)

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=self._secret_key,
                **params,
            )
        except stripe.AuthenticationError as e:
            logger.critical(f"Stripe: Authentication failed - {e}")
            raise PaymentProviderError("Payment service configuration error") from e
        except stripe.APIConnectionError as e:
            logger.error(f"Stripe: Connection error - {e}")
            raise PaymentProviderError("Payment service temporarily unavailable") from e
        except stripe.StripeError as e:
            logger.error(f"Stripe: Failed to create checkout session - {e}")
            raise PaymentProviderError(e.user_message or str(e)) from e

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000

        logger.info(
            f"Stripe: Checkout session created - {session.id} - "
            f"order={request.metadata.get('orderId')}"
        )

        return CheckoutSessionResult(
            session_id=session.id,
            url=session.url,
            response_time_ms=elapsed_ms,
        )

    async def verify_and_parse_event(
        self,
        payload: bytes,
        signature: Optional[str],
    ) -> PaymentEvent:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw request body
            signature: Stripe-Signature header value
        """
        event = construct_payment_event(
            payload,
            signature,
            self._webhook_secret,
            self._tolerance,
            api_key=self._secret_key,
        )
        logger.debug(f"Stripe: Webhook verified - {event.type}")
        return event

    async def health_check(self) -> bool:
        """
        Verify Stripe API connectivity.

        Makes a lightweight API call to verify credentials and connectivity.
        """
        try:
            await asyncio.to_thread(stripe.Account.retrieve, api_key=self._secret_key)
            logger.debug("Stripe: Health check passed")
            return True

        except stripe.StripeError as e:
            logger.error(f"Stripe: Health check failed - {e}")
            return False
