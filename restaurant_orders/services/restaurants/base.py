"""
Restaurant Provider Abstract Base Class

Read-only access to restaurants, their menus and owning accounts. The
ordering core never writes restaurant data.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class MenuItemRecord:
    """A menu entry with its authoritative price in cents."""
    id: str
    name: str
    price: int


@dataclass(frozen=True)
class RestaurantRecord:
    """
    Restaurant as needed by checkout and fulfillment.

    Attributes:
        id: Restaurant identifier
        owner_account_id: Account allowed to manage the restaurant's orders
        name: Display name
        delivery_price: Flat delivery fee in cents
        menu: Menu entries
    """
    id: str
    owner_account_id: str
    name: str
    delivery_price: int
    menu: tuple[MenuItemRecord, ...] = field(default_factory=tuple)


class RestaurantProvider(ABC):

    @abstractmethod
    async def get_restaurant_by_id(self, restaurant_id: str) -> Optional[RestaurantRecord]:
        """Fetch a restaurant with its menu, None if it does not exist."""
        pass

    @abstractmethod
    async def get_restaurant_by_owner(self, account_id: str) -> Optional[RestaurantRecord]:
        """Fetch the restaurant owned by an account, None if it owns none."""
        pass
