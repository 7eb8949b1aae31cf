"""
Generate trips for every active schedule of an organization.

Usage:
    python scripts/generate_trips.py <organization_id> <start_date> <end_date>

Dates are YYYY-MM-DD and inclusive. Running the same window again only
reports skipped trips.
"""
import asyncio
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from transit_scheduler.config.database import db_config
from transit_scheduler.config.settings import settings
from transit_scheduler.services.schedule_service import get_schedules
from transit_scheduler.services.schedule_dates import window_days
from transit_scheduler.services.trip_generator import generate_trips_from_schedule


async def main(org_id: str, start_date: str, end_date: str):
    if window_days(start_date, end_date) > settings.MAX_GENERATION_DAYS:
        print(f"Window is longer than {settings.MAX_GENERATION_DAYS} days; split it into smaller runs")
        return

    await db_config.connect_db()
    await db_config.ensure_indexes()

    schedules = await get_schedules(org_id, is_active=True)
    print(f"Found {len(schedules)} active schedule(s) for org {org_id}")

    total_created = 0
    total_skipped = 0
    total_errors = 0
    for schedule in schedules:
        name = schedule.get("schedule_name") or schedule.get("_id")
        result = await generate_trips_from_schedule(schedule, start_date, end_date, org_id)
        print(f"  {name} ({schedule.get('departure_time')}): "
              f"created={result.created} skipped={result.skipped} errors={len(result.errors)}")
        for err in result.errors:
            print(f"    ✗ {err}")
        total_created += result.created
        total_skipped += result.skipped
        total_errors += len(result.errors)

    print(f"Trips created: {total_created}, skipped: {total_skipped}, failed dates: {total_errors}")
    await db_config.close_db()


if __name__ == '__main__':
    if len(sys.argv) < 4:
        print("Usage: python scripts/generate_trips.py <organization_id> <start_date> <end_date>")
        sys.exit(1)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(sys.argv[1], sys.argv[2], sys.argv[3]))
