"""
In-Memory Restaurant Provider

Used by tests and by the development server when STORAGE_BACKEND=memory.
"""

import logging
from typing import Iterable, Optional

from restaurant_orders.services.restaurants.base import (
    MenuItemRecord,
    RestaurantProvider,
    RestaurantRecord,
)

logger = logging.getLogger(__name__)


def demo_restaurant() -> RestaurantRecord:
    """Fixed demo restaurant so the simulation script knows the ids."""
    return RestaurantRecord(
        id="demo-restaurant",
        owner_account_id="demo-owner",
        name="Burger Barn",
        delivery_price=300,
        menu=(
            MenuItemRecord(id="m1", name="Burger", price=500),
            MenuItemRecord(id="m2", name="Fries", price=250),
            MenuItemRecord(id="m3", name="Milkshake", price=450),
        ),
    )


class InMemoryRestaurantProvider(RestaurantProvider):

    def __init__(self, restaurants: Iterable[RestaurantRecord] = ()):
        self._restaurants: dict[str, RestaurantRecord] = {}
        for restaurant in restaurants:
            self.add(restaurant)

    def add(self, restaurant: RestaurantRecord) -> None:
        self._restaurants[restaurant.id] = restaurant
        logger.debug(f"Memory: Restaurant {restaurant.id} registered")

    async def get_restaurant_by_id(self, restaurant_id: str) -> Optional[RestaurantRecord]:
        return self._restaurants.get(restaurant_id)

    async def get_restaurant_by_owner(self, account_id: str) -> Optional[RestaurantRecord]:
        for restaurant in self._restaurants.values():
            if restaurant.owner_account_id == account_id:
                return restaurant
        return None
