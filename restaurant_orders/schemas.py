"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase (cartItems, menuItemId, deliveryDetails, ...);
Python attributes stay snake_case through an alias generator.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from restaurant_orders.models import OrderStatus
from restaurant_orders.services.orders.base import DeliveryDetails, OrderRecord
from restaurant_orders.services.pricing import parse_quantity


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class CartItemRequest(CamelModel):
    """Single cart line. Prices are never accepted from the client."""
    menu_item_id: str = Field(..., min_length=1, examples=["m1"])
    name: Optional[str] = Field(None, max_length=100, examples=["Burger"])
    quantity: int = Field(..., examples=["2"])

    @field_validator("quantity", mode="before")
    @classmethod
    def check_quantity(cls, v):
        # Raises InvalidQuantity (400) instead of letting lax mode turn true into 1
        return parse_quantity(v)


class DeliveryDetailsRequest(CamelModel):
    email: EmailStr = Field(..., examples=["jane@example.com"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    address_line1: str = Field(..., min_length=1, max_length=255, examples=["12 King St"])
    city: str = Field(..., min_length=1, max_length=50, examples=["Toronto"])

    def to_domain(self) -> DeliveryDetails:
        return DeliveryDetails(
            name=self.name,
            email=self.email,
            address_line1=self.address_line1,
            city=self.city,
        )


class CheckoutSessionRequest(CamelModel):
    """Request schema for creating a checkout session."""
    cart_items: List[CartItemRequest] = Field(..., min_length=1)
    delivery_details: DeliveryDetailsRequest
    restaurant_id: str = Field(..., min_length=1)


class OrderStatusUpdate(CamelModel):
    status: OrderStatus = Field(..., examples=["inProgress"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class CheckoutSessionResponse(CamelModel):
    url: str


class OrderItemResponse(CamelModel):
    menu_item_id: str
    name: str
    quantity: int


class DeliveryDetailsResponse(CamelModel):
    email: str
    name: str
    address_line1: str
    city: str


class OrderResponse(CamelModel):
    """Response schema for a single order."""
    id: str
    restaurant_id: str
    account_id: str
    cart_items: List[OrderItemResponse]
    delivery_details: DeliveryDetailsResponse
    total_amount: Optional[int]
    status: OrderStatus
    created_at: datetime

    @classmethod
    def from_record(cls, order: OrderRecord) -> "OrderResponse":
        return cls(
            id=order.id,
            restaurant_id=order.restaurant_id,
            account_id=order.account_id,
            cart_items=[OrderItemResponse.model_validate(item) for item in order.line_items],
            delivery_details=DeliveryDetailsResponse.model_validate(order.delivery_details),
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
        )


class WebhookAckResponse(BaseModel):
    received: bool = True
    outcome: str
    order_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    payment_service: str
    timestamp: datetime
