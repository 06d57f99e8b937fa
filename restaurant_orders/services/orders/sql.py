"""
SQL Order Store

SQLAlchemy async implementation of OrderStore (PostgreSQL via psycopg in
deployment, SQLite via aiosqlite in tests).

compare_and_set_status issues a single conditional UPDATE
(... WHERE id = :id AND status = :expected) and judges success by the
affected row count, so the check and the write are one statement in the
database no matter how many API processes share it.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restaurant_orders.core.exceptions import StoreUnavailable
from restaurant_orders.models import Order, OrderStatus, utcnow
from restaurant_orders.services.orders.base import (
    DeliveryDetails,
    OrderLineItem,
    OrderRecord,
    OrderStore,
    check_extra_fields,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


def to_record(row: Order) -> OrderRecord:
    """Convert an ORM row into an OrderRecord."""
    return OrderRecord(
        id=row.id,
        restaurant_id=row.restaurant_id,
        account_id=row.account_id,
        line_items=tuple(OrderLineItem.from_dict(item) for item in row.line_items),
        delivery_details=DeliveryDetails.from_dict(row.delivery_details),
        status=row.status,
        total_amount=row.total_amount,
        created_at=row.created_at,
    )


class SqlOrderStore(OrderStore):
    """Order store backed by the orders table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_maker() as session:
                yield session
        except TRANSIENT_ERRORS as e:
            logger.error(f"SQL: Order store unavailable - {e}")
            raise StoreUnavailable() from e

    async def create(self, order: OrderRecord) -> str:
        row = Order(
            id=order.id,
            restaurant_id=order.restaurant_id,
            account_id=order.account_id,
            line_items=[item.to_dict() for item in order.line_items],
            delivery_details=order.delivery_details.to_dict(),
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
        )
        async with self._session() as session:
            session.add(row)
            await session.commit()
        logger.debug(f"SQL: Order {order.id} created")
        return order.id

    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        async with self._session() as session:
            row = await session.get(Order, order_id)
            return to_record(row) if row else None

    async def find_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        return await self._find(Order.restaurant_id == restaurant_id)

    async def find_by_account(self, account_id: str) -> list[OrderRecord]:
        return await self._find(Order.account_id == account_id)

    async def _find(self, criterion) -> list[OrderRecord]:
        query = select(Order).where(criterion).order_by(Order.created_at.desc())
        async with self._session() as session:
            result = await session.execute(query)
            return [to_record(row) for row in result.scalars().all()]

    async def compare_and_set_status(
        self,
        order_id: str,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        extra: Optional[dict[str, Any]] = None,
    ) -> bool:
        changes = check_extra_fields(extra)
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == expected_status)
            .values(status=new_status, updated_at=utcnow(), **changes)
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
        applied = result.rowcount == 1
        logger.debug(
            f"SQL: CAS order {order_id} {expected_status.value}->{new_status.value} "
            f"applied={applied}"
        )
        return applied

    async def health_check(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(select(1))
            return True
        except StoreUnavailable:
            return False
