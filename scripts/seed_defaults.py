"""Seed default categories, muscle groups, starter exercises and quotes into the configured database.

Usage: python scripts/seed_defaults.py
"""

import asyncio
import os
import sys

# Add parent directory to path so we can import fit_tracker modules
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fit_tracker.core.config import get_settings
from fit_tracker.storage.provider import open_sql_provider
from fit_tracker.storage.seed import seed_defaults


async def main():
    settings = get_settings()
    if not settings.database_configured:
        print("No database configured (set DATABASE_URL or DATABASE_HOST).")
        sys.exit(1)

    print("Connecting to database...")
    provider = await open_sql_provider(settings)
    try:
        async with provider.session() as storage:
            created = await seed_defaults(storage)
    finally:
        await provider.dispose()

    for table, count in created.items():
        print(f"{table}: {count} created")
    print("Seeding completed")


if __name__ == "__main__":
    asyncio.run(main())
