"""
Initialize the database: create all tables and seed the admin account.
Run with: python -m scripts.init_db
"""

import asyncio
from authtracker.database import create_tables, engine
from authtracker.logging_config import configure_logging
from authtracker.main import seed_admin_user


async def init():
    print("Creating database tables...")
    await create_tables()
    await seed_admin_user()
    print("All tables created and admin account seeded.")
    await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(init())
