"""Fill missing workout durations from summed exercise timers, for every user.

Usage: python scripts/backfill_durations.py
"""

import asyncio
import os
import sys

# Add parent directory to path so we can import fit_tracker modules
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from fit_tracker.core.config import get_settings
from fit_tracker.services.durations import backfill_durations
from fit_tracker.storage.provider import open_sql_provider


async def main():
    settings = get_settings()
    if not settings.database_configured:
        print("No database configured (set DATABASE_URL or DATABASE_HOST).")
        sys.exit(1)

    provider = await open_sql_provider(settings)
    total = 0
    try:
        async with provider.session() as storage:
            user_ids = await storage.list_user_ids()
        print(f"Checking workouts for {len(user_ids)} users...")
        for user_id in user_ids:
            # one transaction per user
            async with provider.session() as storage:
                updated = await backfill_durations(storage, user_id)
            if updated:
                print(f"  {user_id}: {updated} workouts updated")
            total += updated
    finally:
        await provider.dispose()

    print(f"Done. {total} workout durations updated.")


if __name__ == "__main__":
    asyncio.run(main())
