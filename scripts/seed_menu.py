"""
Menu Seeding Script

Creates the tables and loads the starter catalog into an empty database.
Run from project root: python scripts/seed_menu.py
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from serb_burger.core.config import get_settings, setup_logging
from serb_burger.database import async_session_maker, engine, init_db
from serb_burger.seed import seed_catalog


async def main() -> bool:
    await init_db()
    async with async_session_maker() as session:
        seeded = await seed_catalog(session)
    await engine.dispose()
    return seeded


if __name__ == "__main__":
    setup_logging()
    settings = get_settings()

    print("=" * 60)
    print(f"SEEDING MENU: {settings.restaurant_name}")
    print(f"Database: {settings.database_url.split('@')[-1]}")
    print("=" * 60)

    if asyncio.run(main()):
        print("Catalog loaded")
    else:
        print("Catalog already present, nothing to do")
