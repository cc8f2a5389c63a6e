"""Initialize database schema for the purchase portal.

Creates the products, manufacturers and orders tables.
Pass --drop to recreate them from scratch.
"""

import asyncio
import sys

from portal.config import settings
from portal.db import RowStore
from portal.models import Base


async def init_database(drop: bool = False):
    """Create all database tables."""
    print(f"Initializing database: {settings.db.url.split('@')[-1]}")

    store = RowStore(settings.db.url, echo=settings.db.echo)
    await store.open()
    try:
        async with store.engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
                print("✓ Dropped existing tables")

            await conn.run_sync(Base.metadata.create_all)
            print("✓ Created all tables")
    finally:
        await store.close()

    print("\n✅ Database initialization complete!")
    print(f"Tables created: {', '.join(Base.metadata.tables.keys())}")


async def main():
    """Main entry point."""
    try:
        await init_database(drop="--drop" in sys.argv[1:])
    except Exception as e:
        print(f"\n❌ Error initializing database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
