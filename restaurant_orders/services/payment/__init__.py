"""
Payment Provider Factory

Builds the payment provider once, at application startup, from explicit
settings. The instance is stored on app.state and handed to the checkout
and reconciliation services; nothing here keeps a process-wide client.

Usage:
    from restaurant_orders.services.payment import build_payment_provider

    provider = build_payment_provider(settings)
    result = await provider.create_checkout_session(request)

Environment Switching:
    - ENV_MODE=development → MockPaymentProvider (no API calls)
    - ENV_MODE=staging → StripePaymentProvider (test keys)
    - ENV_MODE=production → StripePaymentProvider (live keys)
"""

import logging

from restaurant_orders.core.config import Settings
from restaurant_orders.services.payment.base import (
    CHECKOUT_COMPLETED,
    BasePaymentProvider,
    CheckoutRequest,
    CheckoutSessionResult,
    PaymentEvent,
)
from restaurant_orders.services.payment.mock import MockPaymentProvider
from restaurant_orders.services.payment.stripe import StripePaymentProvider

logger = logging.getLogger(__name__)


def build_payment_provider(settings: Settings) -> BasePaymentProvider:
    """
    Build the configured payment provider.

    Returns:
        BasePaymentProvider: MockPaymentProvider in development,
        StripePaymentProvider otherwise

    Raises:
        ValueError: If staging/production but Stripe keys are not configured
    """
    if settings.is_development:
        logger.info("Payment Provider: Using MockPaymentProvider (development mode)")
        return MockPaymentProvider(
            webhook_secret=settings.webhook_secret,
            failure_rate=settings.mock_payment_failure_rate,
            tolerance=settings.stripe_webhook_tolerance,
        )

    logger.info(
        f"Payment Provider: Using StripePaymentProvider "
        f"({settings.env_mode.value} mode)"
    )
    return StripePaymentProvider(
        secret_key=settings.stripe_secret_key,
        webhook_secret=settings.stripe_webhook_secret,
        tolerance=settings.stripe_webhook_tolerance,
    )


__all__ = [
    "build_payment_provider",
    "CHECKOUT_COMPLETED",
    "BasePaymentProvider",
    "CheckoutRequest",
    "CheckoutSessionResult",
    "PaymentEvent",
    "MockPaymentProvider",
    "StripePaymentProvider",
]
