"""
In-Memory Order Store

Keeps orders in a dict for local demos and tests. Updates never await
between the status check and the write, so a compare-and-set is atomic
within the event loop that owns the store. It is not shared across
processes; use SqlOrderStore for that.
"""

import logging
from typing import Any, Optional

from restaurant_orders.models import OrderStatus
from restaurant_orders.services.orders.base import (
    OrderRecord,
    OrderStore,
    check_extra_fields,
)

logger = logging.getLogger(__name__)


class InMemoryOrderStore(OrderStore):
    """Dict-backed order store."""

    def __init__(self):
        self._orders: dict[str, OrderRecord] = {}

    def __len__(self) -> int:
        return len(self._orders)

    async def create(self, order: OrderRecord) -> str:
        if order.id in self._orders:
            raise ValueError(f"Order {order.id} already exists")
        self._orders[order.id] = order
        logger.debug(f"Memory: Order {order.id} created")
        return order.id

    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        return self._orders.get(order_id)

    async def find_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        return self._newest_first(
            o for o in self._orders.values() if o.restaurant_id == restaurant_id
        )

    async def find_by_account(self, account_id: str) -> list[OrderRecord]:
        return self._newest_first(
            o for o in self._orders.values() if o.account_id == account_id
        )

    async def compare_and_set_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        extra: Optional[dict[str, Any]] = None,
    ) -> bool:
        changes = check_extra_fields(extra)
        current = self._orders.get(order_id)
        if current is None or current.status != expected_status:
            return False
        self._orders[order_id] = current.with_changes(status=new_status, **changes)
        return True

    @staticmethod
    def _newest_first(orders) -> list[OrderRecord]:
        return sorted(orders, key=lambda o: o.created_at, reverse=True)
