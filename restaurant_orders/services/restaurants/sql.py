"""
SQL Restaurant Provider

Reads restaurants and their menu items from the restaurants/menu_items
tables.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from restaurant_orders.core.exceptions import StoreUnavailable
from restaurant_orders.models import Restaurant
from restaurant_orders.services.orders.sql import TRANSIENT_ERRORS
from restaurant_orders.services.restaurants.base import (
    MenuItemRecord,
    RestaurantProvider,
    RestaurantRecord,
)

logger = logging.getLogger(__name__)


def to_record(row: Restaurant) -> RestaurantRecord:
    return RestaurantRecord(
        id=row.id,
        owner_account_id=row.owner_account_id,
        name=row.name,
        delivery_price=row.delivery_price,
        menu=tuple(
            MenuItemRecord(id=item.id, name=item.name, price=item.price)
            for item in row.menu_items
        ),
    )


class SqlRestaurantProvider(RestaurantProvider):

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def get_restaurant_by_id(self, restaurant_id: str) -> Optional[RestaurantRecord]:
        return await self._get_one(Restaurant.id == restaurant_id)

    async def get_restaurant_by_owner(self, account_id: str) -> Optional[RestaurantRecord]:
        return await self._get_one(Restaurant.owner_account_id == account_id)

    async def _get_one(self, criterion) -> Optional[RestaurantRecord]:
        query = (
            select(Restaurant)
            .where(criterion)
            .options(selectinload(Restaurant.menu_items))
        )
        try:
            async with self._session_maker() as session:
                result = await session.execute(query)
                row = result.scalar_one_or_none()
                return to_record(row) if row else None
        except TRANSIENT_ERRORS as e:
            logger.error(f"SQL: Restaurant store unavailable - {e}")
            raise StoreUnavailable("Restaurant store temporarily unavailable") from e
