"""
Order Store Abstract Base Class

Defines the interface contract for order persistence. The ordering core
only ever talks to an OrderStore; the SQL and in-memory implementations
are interchangeable behind it.

The status field is never updated with a separate read and write. Every
status change goes through compare_and_set_status so that a payment
callback and a fulfillment update racing on the same order cannot lose
each other's write.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from restaurant_orders.models import OrderStatus, utcnow


@dataclass(frozen=True)
class OrderLineItem:
    """One cart line as captured at order time."""
    menu_item_id: str
    name: str
    quantity: int

    def to_dict(self) -> dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderLineItem":
        return cls(
            menu_item_id=str(data["menu_item_id"]),
            name=data["name"],
            quantity=int(data["quantity"]),
        )


@dataclass(frozen=True)
class DeliveryDetails:
    name: str
    email: str
    address_line1: str
    city: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "address_line1": self.address_line1,
            "city": self.city,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryDetails":
        return cls(
            name=data["name"],
            email=data["email"],
            address_line1=data["address_line1"],
            city=data["city"],
        )


def new_order_id() -> str:
    """Generate an opaque order identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class OrderRecord:
    """
    Order as seen by the ordering core.

    Attributes:
        id: Opaque unique identifier
        restaurant_id: Restaurant the order was placed with
        account_id: Account that placed the order
        line_items: Cart lines (immutable after creation)
        delivery_details: Delivery contact
        status: Lifecycle status
        total_amount: Amount paid in cents, None until reconciled
        created_at: Creation time (UTC)
    """
    restaurant_id: str
    account_id: str
    line_items: tuple[OrderLineItem, ...]
    delivery_details: DeliveryDetails
    status: OrderStatus = OrderStatus.PLACED
    total_amount: Optional[int] = None
    id: str = field(default_factory=new_order_id)
    created_at: datetime = field(default_factory=utcnow)

    def with_changes(self, **changes: Any) -> "OrderRecord":
        return replace(self, **changes)


class OrderStore(ABC):
    """
    Abstract base class for order stores.

    Implementations must make compare_and_set_status atomic with respect to
    every other writer of the same order, including writers in other
    processes.
    """

    @abstractmethod
    async def create(self, order: OrderRecord) -> str:
        """
        Persist a new order.

        Returns:
            str: The order identifier
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        """Fetch an order, None if it does not exist."""
        pass

    @abstractmethod
    async def find_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        """All orders of a restaurant, newest first."""
        pass

    @abstractmethod
    async def find_by_account(self, account_id: str) -> list[OrderRecord]:
        """All orders placed by an account, newest first."""
        pass

    @abstractmethod
    async def compare_and_set_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        extra: Optional[dict[str, Any]] = None,
    ) -> bool:
        """
        Set the status only if the stored status equals expected_status.

        Args:
            order_id: Order to update
            expected_status: Status the order must currently have
            new_status: Status to write
            extra: Additional fields written in the same update
                (only "total_amount" is accepted)

        Returns:
            bool: True if the update was applied, False if the order is
            missing or its status did not match
        """
        pass

    async def health_check(self) -> bool:
        """Verify the store is reachable."""
        return True


UPDATABLE_FIELDS = frozenset({"total_amount"})


def check_extra_fields(extra: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Reject writes to anything but the fields a status change may carry."""
    extra = dict(extra or {})
    unknown = set(extra) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated with a status change: {sorted(unknown)}")
    return extra
