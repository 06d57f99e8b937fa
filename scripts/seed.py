"""
Database Seed Script

Creates the tables and inserts the demo restaurant and its menu into the
configured SQL database (DATABASE_URL), so the simulation script can run
against STORAGE_BACKEND=sql.

Run from project root: python scripts/seed.py
"""

import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restaurant_orders.core.config import get_settings, setup_logging  # noqa: E402
from restaurant_orders.database import create_engine, create_session_maker, init_db  # noqa: E402
from restaurant_orders.models import MenuItem, Restaurant  # noqa: E402
from restaurant_orders.services.restaurants import demo_restaurant  # noqa: E402

logger = logging.getLogger("seed")


async def seed() -> None:
    settings = get_settings()
    engine = create_engine(settings.database_url, echo=settings.database_echo)
    await init_db(engine)
    session_maker = create_session_maker(engine)

    demo = demo_restaurant()
    try:
        async with session_maker() as session:
            if await session.get(Restaurant, demo.id) is not None:
                logger.info(f"Restaurant {demo.id} already present, nothing to do")
                return

            restaurant = Restaurant(
                id=demo.id,
                owner_account_id=demo.owner_account_id,
                name=demo.name,
                city="Toronto",
                delivery_price=demo.delivery_price,
            )
            restaurant.menu_items = [
                MenuItem(id=item.id, name=item.name, price=item.price, position=position)
                for position, item in enumerate(demo.menu)
            ]
            session.add(restaurant)
            await session.commit()
            logger.info(f"✅ Seeded {demo.name} ({demo.id}) with {len(demo.menu)} menu items")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed())
