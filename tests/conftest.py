"""
Shared test fixtures for the restaurant ordering test suite.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from restaurant_orders.core.config import Settings
from restaurant_orders.main import create_app
from restaurant_orders.services.checkout import CheckoutService
from restaurant_orders.services.fulfillment import FulfillmentService
from restaurant_orders.services.orders import DeliveryDetails, InMemoryOrderStore
from restaurant_orders.services.payment import MockPaymentProvider
from restaurant_orders.services.reconciliation import PaymentReconciler
from restaurant_orders.services.restaurants import (
    InMemoryRestaurantProvider,
    MenuItemRecord,
    RestaurantRecord,
)
from restaurant_orders.schemas import CartItemRequest

WEBHOOK_SECRET = "whsec_test_secret"
OWNER_ID = "owner-1"
BUYER_ID = "buyer-1"


# ============================================================================
# Configuration & collaborators
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env_mode="development",
        storage_backend="memory",
        stripe_webhook_secret=WEBHOOK_SECRET,
        frontend_url="http://frontend.test/",
        stripe_currency="cad",
    )


@pytest.fixture
def restaurant() -> RestaurantRecord:
    return RestaurantRecord(
        id="r1",
        owner_account_id=OWNER_ID,
        name="Burger Barn",
        delivery_price=300,
        menu=(
            MenuItemRecord(id="m1", name="Burger", price=500),
            MenuItemRecord(id="m2", name="Fries", price=250),
        ),
    )


@pytest.fixture
def other_restaurant() -> RestaurantRecord:
    return RestaurantRecord(
        id="r2",
        owner_account_id="owner-2",
        name="Noodle Nook",
        delivery_price=450,
        menu=(MenuItemRecord(id="n1", name="Ramen", price=1400),),
    )


@pytest.fixture
def order_store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def restaurants(restaurant, other_restaurant) -> InMemoryRestaurantProvider:
    return InMemoryRestaurantProvider([restaurant, other_restaurant])


@pytest.fixture
def payment_provider() -> MockPaymentProvider:
    return MockPaymentProvider(webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def delivery_details() -> DeliveryDetails:
    return DeliveryDetails(
        name="Jane Doe",
        email="jane@example.com",
        address_line1="12 King St",
        city="Toronto",
    )


# ============================================================================
# Services
# ============================================================================


@pytest.fixture
def checkout_service(order_store, restaurants, payment_provider, settings) -> CheckoutService:
    return CheckoutService(
        order_store=order_store,
        restaurants=restaurants,
        payment_provider=payment_provider,
        frontend_url=settings.frontend_url,
        currency=settings.stripe_currency,
    )


@pytest.fixture
def reconciler(order_store, payment_provider) -> PaymentReconciler:
    return PaymentReconciler(order_store, payment_provider)


@pytest.fixture
def fulfillment_service(order_store, restaurants) -> FulfillmentService:
    return FulfillmentService(order_store, restaurants)


@pytest_asyncio.fixture
async def placed_order_id(checkout_service, payment_provider, delivery_details) -> str:
    """An order for 2 x Burger at r1, left PLACED."""
    await checkout_service.create_checkout(
        cart=[CartItemRequest(menu_item_id="m1", quantity="2")],
        delivery_details=delivery_details,
        restaurant_id="r1",
        account_id=BUYER_ID,
    )
    return payment_provider.sessions[-1].metadata["orderId"]


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def app(settings, order_store, restaurants, payment_provider):
    return create_app(
        settings,
        order_store=order_store,
        restaurants=restaurants,
        payment_provider=payment_provider,
    )


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
