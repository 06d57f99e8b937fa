"""
Tests for the payment providers and the provider factory.
"""

import time

import pytest

from restaurant_orders.core.config import Settings
from restaurant_orders.core.exceptions import InvalidSignature
from restaurant_orders.services.payment import (
    CheckoutRequest,
    MockPaymentProvider,
    StripePaymentProvider,
    build_payment_provider,
)
from restaurant_orders.services.payment.mock import (
    build_checkout_completed_payload,
    compute_signature_header,
)
from restaurant_orders.services.pricing import PricedLine

from tests.conftest import WEBHOOK_SECRET


@pytest.fixture
def checkout_request() -> CheckoutRequest:
    return CheckoutRequest(
        line_items=[
            PricedLine(menu_item_id="m1", name="Burger", unit_price=500, quantity=2),
            PricedLine(menu_item_id="m2", name="Fries", unit_price=250, quantity=1),
        ],
        delivery_fee=300,
        currency="cad",
        metadata={"orderId": "o1", "restaurantId": "r1"},
        success_url="http://frontend.test/order-status?success=true",
        cancel_url="http://frontend.test/detail/r1?cancelled=true",
    )


@pytest.fixture
def stripe_provider() -> StripePaymentProvider:
    return StripePaymentProvider(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


# ============================================================================
# Mock provider
# ============================================================================


@pytest.mark.asyncio
async def test_mock_session_has_hosted_url(checkout_request):
    provider = MockPaymentProvider(webhook_secret=WEBHOOK_SECRET)

    result = await provider.create_checkout_session(checkout_request)

    assert result.session_id.startswith("cs_mock_")
    assert result.url == f"https://checkout.mock.local/pay/{result.session_id}"
    assert provider.sessions == [checkout_request]
    assert checkout_request.amount_total == 500 * 2 + 250 + 300


@pytest.mark.asyncio
async def test_mock_verifies_its_own_signature(payment_provider):
    payload = build_checkout_completed_payload("o1", 1300, restaurant_id="r1")

    event = await payment_provider.verify_and_parse_event(payload, payment_provider.sign(payload))

    assert event.is_checkout_completed
    assert event.order_id == "o1"
    assert event.restaurant_id == "r1"
    assert event.amount_total == 1300


@pytest.mark.asyncio
async def test_mock_accepts_any_matching_v1(payment_provider):
    payload = build_checkout_completed_payload("o1", 1300)
    good = payment_provider.sign(payload)
    timestamp, digest = good.split(",")
    header = f"{timestamp},v1=deadbeef,{digest}"

    event = await payment_provider.verify_and_parse_event(payload, header)

    assert event.order_id == "o1"


@pytest.mark.asyncio
async def test_mock_rejects_wrong_secret(payment_provider):
    payload = build_checkout_completed_payload("o1", 1300)

    with pytest.raises(InvalidSignature):
        await payment_provider.verify_and_parse_event(
            payload, compute_signature_header(payload, "whsec_other")
        )


@pytest.mark.asyncio
async def test_mock_rejects_signed_garbage(payment_provider):
    payload = b"not json"

    with pytest.raises(InvalidSignature):
        await payment_provider.verify_and_parse_event(payload, payment_provider.sign(payload))


@pytest.mark.asyncio
async def test_mock_tolerance_can_be_disabled():
    provider = MockPaymentProvider(webhook_secret=WEBHOOK_SECRET, tolerance=0)
    payload = build_checkout_completed_payload("o1", 1300)

    event = await provider.verify_and_parse_event(payload, provider.sign(payload, timestamp=1))

    assert event.order_id == "o1"


@pytest.mark.asyncio
async def test_mock_rejects_stale_timestamp(payment_provider):
    payload = build_checkout_completed_payload("o1", 1300)
    header = payment_provider.sign(payload, timestamp=int(time.time()) - 3600)

    with pytest.raises(InvalidSignature):
        await payment_provider.verify_and_parse_event(payload, header)


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["", "garbage", "t=abc,v1=00", "t=123"])
async def test_mock_rejects_malformed_headers(payment_provider, header):
    payload = build_checkout_completed_payload("o1", 1300)

    with pytest.raises(InvalidSignature):
        await payment_provider.verify_and_parse_event(payload, header)


@pytest.mark.asyncio
async def test_mock_rejects_signed_non_object_body(payment_provider):
    payload = b"[1, 2, 3]"

    with pytest.raises(InvalidSignature):
        await payment_provider.verify_and_parse_event(payload, payment_provider.sign(payload))


@pytest.mark.asyncio
async def test_mock_and_stripe_agree_on_signatures(payment_provider, stripe_provider):
    payload = build_checkout_completed_payload("o1", 1300, restaurant_id="r1")
    header = compute_signature_header(payload, WEBHOOK_SECRET)

    from_mock = await payment_provider.verify_and_parse_event(payload, header)
    from_stripe = await stripe_provider.verify_and_parse_event(payload, header)

    assert from_mock.order_id == from_stripe.order_id == "o1"
    assert from_mock.amount_total == from_stripe.amount_total == 1300
    assert from_mock.raw == from_stripe.raw


# ============================================================================
# Stripe provider
# ============================================================================


def test_stripe_requires_keys():
    with pytest.raises(ValueError):
        StripePaymentProvider(secret_key=None, webhook_secret=WEBHOOK_SECRET)
    with pytest.raises(ValueError):
        StripePaymentProvider(secret_key="sk_test_123", webhook_secret="")


def test_stripe_session_params(checkout_request):
    params = StripePaymentProvider.build_session_params(checkout_request)

    assert params["mode"] == "payment"
    assert params["line_items"][0] == {
        "price_data": {
            "currency": "cad",
            "unit_amount": 500,
            "product_data": {"name": "Burger"},
        },
        "quantity": 2,
    }
    assert len(params["line_items"]) == 2
    shipping = params["shipping_options"][0]["shipping_rate_data"]
    assert shipping["type"] == "fixed_amount"
    assert shipping["fixed_amount"] == {"amount": 300, "currency": "cad"}
    assert params["metadata"] == {"orderId": "o1", "restaurantId": "r1"}
    assert params["success_url"].endswith("/order-status?success=true")
    assert params["cancel_url"].endswith("/detail/r1?cancelled=true")


@pytest.mark.asyncio
async def test_stripe_verifies_stripe_style_signature(stripe_provider):
    payload = build_checkout_completed_payload("o1", 1300)
    header = compute_signature_header(payload, WEBHOOK_SECRET, int(time.time()))

    event = await stripe_provider.verify_and_parse_event(payload, header)

    assert event.is_checkout_completed
    assert event.amount_total == 1300


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "t=1,v1=abc"])
async def test_stripe_rejects_bad_signatures(stripe_provider, header):
    payload = build_checkout_completed_payload("o1", 1300)

    with pytest.raises(InvalidSignature):
        await stripe_provider.verify_and_parse_event(payload, header)


@pytest.mark.asyncio
async def test_stripe_rejects_wrong_secret(stripe_provider):
    payload = build_checkout_completed_payload("o1", 1300)

    with pytest.raises(InvalidSignature):
        await stripe_provider.verify_and_parse_event(
            payload, compute_signature_header(payload, "whsec_other")
        )


# ============================================================================
# Factory
# ============================================================================


def test_factory_uses_mock_in_development(settings):
    provider = build_payment_provider(settings)

    assert isinstance(provider, MockPaymentProvider)
    assert provider.webhook_secret == WEBHOOK_SECRET


def test_factory_mock_falls_back_to_development_secret():
    settings = Settings(_env_file=None, env_mode="development", stripe_webhook_secret=None)

    provider = build_payment_provider(settings)

    assert provider.webhook_secret == "whsec_development"


def test_factory_uses_stripe_in_production():
    settings = Settings(
        _env_file=None,
        env_mode="production",
        stripe_secret_key="sk_live_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
    )

    provider = build_payment_provider(settings)

    assert isinstance(provider, StripePaymentProvider)
    assert provider.provider_name == "stripe"


def test_factory_refuses_production_without_keys():
    settings = Settings(_env_file=None, env_mode="production", stripe_secret_key=None)

    with pytest.raises(ValueError):
        build_payment_provider(settings)
