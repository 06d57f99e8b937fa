"""
SQLAlchemy Database Models

Orders placed against a restaurant's menu, plus the read-only restaurant
and menu tables the ordering core prices carts from.

Money columns are integers in the smallest currency unit (cents).
"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_orders.database import Base


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PLACED = "placed"
    PAID = "paid"
    IN_PROGRESS = "inProgress"
    OUT_FOR_DELIVERY = "outForDelivery"
    DELIVERED = "delivered"

    @property
    def next_status(self) -> Optional["OrderStatus"]:
        """Immediate successor in the lifecycle, None once delivered."""
        position = ORDER_LIFECYCLE.index(self)
        if position + 1 < len(ORDER_LIFECYCLE):
            return ORDER_LIFECYCLE[position + 1]
        return None


ORDER_LIFECYCLE = (
    OrderStatus.PLACED,
    OrderStatus.PAID,
    OrderStatus.IN_PROGRESS,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """
    Main Order table.

    Created as PLACED before the buyer is sent to the payment provider.
    total_amount stays NULL until the payment callback is reconciled.
    """
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(String(64), index=True)
    account_id: Mapped[str] = mapped_column(String(64), index=True)

    # [{"menu_item_id": ..., "name": ..., "quantity": ...}]
    line_items: Mapped[list] = mapped_column(JSON, nullable=False)
    # {"name": ..., "email": ..., "address_line1": ..., "city": ...}
    delivery_details: Mapped[dict] = mapped_column(JSON, nullable=False)

    total_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(
            OrderStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PLACED,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=utcnow
    )

    def __repr__(self):
        return f"<Order #{self.id} - restaurant={self.restaurant_id} - {self.status.value}>"


class Restaurant(Base):
    """Restaurant owned by one account, with its menu and delivery price."""
    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner_account_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    city: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    delivery_price: Mapped[int] = mapped_column(Integer)

    menu_items: Mapped[list["MenuItem"]] = relationship(
        back_populates="restaurant",
        cascade="all, delete-orphan",
        order_by="MenuItem.position",
    )

    def __repr__(self):
        return f"<Restaurant {self.id} - {self.name}>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(100))
    price: Mapped[int] = mapped_column(Integer)
    position: Mapped[int] = mapped_column(Integer, default=0)

    restaurant: Mapped[Restaurant] = relationship(back_populates="menu_items")
