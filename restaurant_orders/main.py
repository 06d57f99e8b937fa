"""
FastAPI Application Entry Point

Restaurant Orders API - checkout, payment reconciliation and fulfillment.

Endpoints:
    - POST  /api/order/checkout/create-checkout-session: Start a checkout
    - POST  /api/order/checkout/webhook: Payment provider callback
    - GET   /api/order: Orders placed by the caller
    - GET   /api/my/restaurant/order: Orders of the caller's restaurant
    - PATCH /api/my/restaurant/order/{order_id}/status: Advance an order
    - GET   /health: System health check

The caller's account id comes from the upstream auth gateway
(X-Account-Id header).

Run:
    uvicorn restaurant_orders.main:app_factory --factory --port 7000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from restaurant_orders.core.auth import get_current_account_id
from restaurant_orders.core.config import Settings, StorageBackend, get_settings, setup_logging
from restaurant_orders.core.exceptions import OrderingError, OrderNotFound, Unauthorized
from restaurant_orders.database import create_engine, create_session_maker, init_db
from restaurant_orders.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    ErrorResponse,
    HealthResponse,
    OrderResponse,
    OrderStatusUpdate,
    WebhookAckResponse,
)
from restaurant_orders.services.checkout import CheckoutService
from restaurant_orders.services.fulfillment import FulfillmentService
from restaurant_orders.services.orders import InMemoryOrderStore, OrderStore, SqlOrderStore
from restaurant_orders.services.payment import BasePaymentProvider, build_payment_provider
from restaurant_orders.services.reconciliation import PaymentReconciler
from restaurant_orders.services.restaurants import (
    InMemoryRestaurantProvider,
    RestaurantProvider,
    SqlRestaurantProvider,
    demo_restaurant,
)

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Storage: {settings.storage_backend.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    engine = app.state.engine
    if engine is not None:
        await init_db(engine)
        logger.info("✅ Database initialized")

    logger.info(f"✅ Payment Provider: {app.state.payment_provider.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    if engine is not None:
        await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    *,
    order_store: Optional[OrderStore] = None,
    restaurants: Optional[RestaurantProvider] = None,
    payment_provider: Optional[BasePaymentProvider] = None,
) -> FastAPI:
    """
    Build the application and its services.

    Collaborators that are not passed in are built from settings, once.
    Tests pass in-memory stores and a mock provider.
    """
    settings = settings or get_settings()

    engine = None
    if order_store is None or restaurants is None:
        if settings.storage_backend == StorageBackend.SQL:
            engine = create_engine(settings.database_url, echo=settings.database_echo)
            session_maker = create_session_maker(engine)
            if order_store is None:
                order_store = SqlOrderStore(session_maker)
            if restaurants is None:
                restaurants = SqlRestaurantProvider(session_maker)
        else:
            if order_store is None:
                order_store = InMemoryOrderStore()
            if restaurants is None:
                restaurants = InMemoryRestaurantProvider(
                    [demo_restaurant()] if settings.is_development else []
                )

    if payment_provider is None:
        payment_provider = build_payment_provider(settings)

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Order placement, payment reconciliation and fulfillment "
            "for a multi-restaurant food-ordering platform."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.order_store = order_store
    app.state.restaurants = restaurants
    app.state.payment_provider = payment_provider
    app.state.checkout_service = CheckoutService(
        order_store=order_store,
        restaurants=restaurants,
        payment_provider=payment_provider,
        frontend_url=settings.frontend_url,
        currency=settings.stripe_currency,
    )
    app.state.reconciler = PaymentReconciler(order_store, payment_provider)
    app.state.fulfillment_service = FulfillmentService(
        order_store,
        restaurants,
        strict_transitions=settings.strict_status_transitions,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)
    return app


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


def get_reconciler(request: Request) -> PaymentReconciler:
    return request.app.state.reconciler


def get_fulfillment_service(request: Request) -> FulfillmentService:
    return request.app.state.fulfillment_service


# =============================================================================
# ROUTES
# =============================================================================

def register_routes(app: FastAPI) -> None:

    @app.get("/", tags=["Root"])
    async def root(request: Request) -> dict[str, str]:
        """API root with navigation links."""
        settings: Settings = request.app.state.settings
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/health",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(request: Request) -> HealthResponse:
        """Verify the order store and payment provider are reachable."""
        store: OrderStore = request.app.state.order_store
        provider: BasePaymentProvider = request.app.state.payment_provider

        db_status = "healthy" if await store.health_check() else "unhealthy"
        payment_status = "healthy" if await provider.health_check() else "unhealthy"

        overall = "operational" if db_status == payment_status == "healthy" else "degraded"

        return HealthResponse(
            status=overall,
            database=db_status,
            payment_service=payment_status,
            timestamp=datetime.now(),
        )

    # =========================================================================
    # CHECKOUT & PAYMENT WEBHOOK
    # =========================================================================

    @app.post(
        "/api/order/checkout/create-checkout-session",
        response_model=CheckoutSessionResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            502: {"model": ErrorResponse},
        },
        tags=["Checkout"],
        summary="Create Checkout Session",
    )
    async def create_checkout_session(
        payload: CheckoutSessionRequest,
        account_id: str = Depends(get_current_account_id),
        checkout: CheckoutService = Depends(get_checkout_service),
    ) -> CheckoutSessionResponse:
        """
        Place an order and return the hosted checkout URL.

        Unit prices come from the restaurant's menu, never from the request.
        """
        logger.info(
            f"Checkout requested by {account_id} for restaurant {payload.restaurant_id}"
        )
        url = await checkout.create_checkout(
            cart=payload.cart_items,
            delivery_details=payload.delivery_details.to_domain(),
            restaurant_id=payload.restaurant_id,
            account_id=account_id,
        )
        return CheckoutSessionResponse(url=url)

    @app.post(
        "/api/order/checkout/webhook",
        response_model=WebhookAckResponse,
        responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
        tags=["Checkout"],
        summary="Payment Provider Webhook",
    )
    async def payment_webhook(
        request: Request,
        stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
        reconciler: PaymentReconciler = Depends(get_reconciler),
    ) -> JSONResponse:
        """
        Reconcile a payment callback.

        2xx stops provider redelivery; 400 (bad signature) and 503 (store
        unavailable) invite it.
        """
        body = await request.body()
        ack = await reconciler.handle_callback(body, stripe_signature)
        return JSONResponse(status_code=ack.status_code, content=ack.to_dict())

    # =========================================================================
    # ORDERS
    # =========================================================================

    @app.get(
        "/api/order",
        response_model=list[OrderResponse],
        tags=["Orders"],
        summary="List My Orders",
    )
    async def get_my_orders(
        account_id: str = Depends(get_current_account_id),
        fulfillment: FulfillmentService = Depends(get_fulfillment_service),
    ) -> list[OrderResponse]:
        orders = await fulfillment.list_orders_for_account(account_id)
        return [OrderResponse.from_record(order) for order in orders]

    @app.get(
        "/api/my/restaurant/order",
        response_model=list[OrderResponse],
        responses={404: {"model": ErrorResponse}},
        tags=["Restaurant Orders"],
        summary="List My Restaurant's Orders",
    )
    async def get_my_restaurant_orders(
        account_id: str = Depends(get_current_account_id),
        fulfillment: FulfillmentService = Depends(get_fulfillment_service),
    ) -> list[OrderResponse]:
        orders = await fulfillment.list_orders_for_restaurant_owner(account_id)
        return [OrderResponse.from_record(order) for order in orders]

    @app.patch(
        "/api/my/restaurant/order/{order_id}/status",
        response_model=OrderResponse,
        responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Restaurant Orders"],
        summary="Update Order Status",
    )
    async def update_order_status(
        order_id: str,
        payload: OrderStatusUpdate,
        account_id: str = Depends(get_current_account_id),
        fulfillment: FulfillmentService = Depends(get_fulfillment_service),
    ) -> OrderResponse:
        try:
            order = await fulfillment.update_status(order_id, payload.status, account_id)
        except OrderNotFound:
            # Same answer as "not your order": existence is not disclosed
            raise Unauthorized()
        return OrderResponse.from_record(order)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(OrderingError)
    async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
        """Render domain errors with their status code."""
        if exc.status_code >= 500:
            logger.error(f"{exc.error} on {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.error} on {request.url.path}: {exc.message}")

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.error, detail=exc.message).model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")
        settings: Settings = request.app.state.settings

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                detail=str(exc) if settings.debug else "An unexpected error occurred",
            ).model_dump(),
        )


# =============================================================================
# APPLICATION ENTRY POINT
# =============================================================================

def app_factory() -> FastAPI:
    """
    Build the application for uvicorn.

    Nothing is constructed at import time, so importing this module never
    needs a valid configuration.

    Usage:
        uvicorn restaurant_orders.main:app_factory --factory
    """
    setup_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "restaurant_orders.main:app_factory",
        factory=True,
        host=_settings.api_host,
        port=_settings.api_port,
    )
