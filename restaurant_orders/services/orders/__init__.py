"""
Order Store Package

Usage:
    from restaurant_orders.services.orders import SqlOrderStore

    store = SqlOrderStore(session_maker)
    order_id = await store.create(order)
"""

from restaurant_orders.services.orders.base import (
    DeliveryDetails,
    OrderLineItem,
    OrderRecord,
    OrderStore,
    new_order_id,
)
from restaurant_orders.services.orders.memory import InMemoryOrderStore
from restaurant_orders.services.orders.sql import SqlOrderStore

__all__ = [
    "DeliveryDetails",
    "OrderLineItem",
    "OrderRecord",
    "OrderStore",
    "new_order_id",
    "InMemoryOrderStore",
    "SqlOrderStore",
]
