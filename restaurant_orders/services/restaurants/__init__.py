"""
Restaurant Provider Package
"""

from restaurant_orders.services.restaurants.base import (
    MenuItemRecord,
    RestaurantProvider,
    RestaurantRecord,
)
from restaurant_orders.services.restaurants.memory import (
    InMemoryRestaurantProvider,
    demo_restaurant,
)
from restaurant_orders.services.restaurants.sql import SqlRestaurantProvider

__all__ = [
    "MenuItemRecord",
    "RestaurantProvider",
    "RestaurantRecord",
    "InMemoryRestaurantProvider",
    "demo_restaurant",
    "SqlRestaurantProvider",
]
