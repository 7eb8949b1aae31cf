"""
Vehicle / driver availability
Checks a proposed departure against the trips a vehicle or driver already has
on the same day. Conflicts are returned, never raised; the caller decides
whether a conflict blocks saving.
"""
import logging
from typing import Dict, List, Optional, Tuple

from transit_scheduler.config.database import Collections
from transit_scheduler.config.settings import settings
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.models.schedule import AvailabilityResult
from transit_scheduler.models.trip import TripStatus

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def minutes_of_day(value: str) -> int:
    """'HH:MM', 'HH:MM:SS' or 'YYYY-MM-DDTHH:MM[...]' -> minutes after midnight"""
    time_part = value.split("T", 1)[1] if "T" in value else value
    hour, minute = time_part[:5].split(":")
    return int(hour) * 60 + int(minute)


def time_interval(
    start: str,
    end: Optional[str],
    default_minutes: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Half-open [start, end) in minutes. A missing end assumes the default trip
    duration; an end at or before the start rolls over midnight.
    """
    if default_minutes is None:
        default_minutes = settings.DEFAULT_TRIP_DURATION_MINUTES
    s = minutes_of_day(start)
    e = minutes_of_day(end) if end else s + default_minutes
    if e <= s:
        e += MINUTES_PER_DAY
    return s, e


def times_overlap(
    start1: str,
    end1: Optional[str],
    start2: str,
    end2: Optional[str],
    default_minutes: Optional[int] = None,
) -> bool:
    """[s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1"""
    s1, e1 = time_interval(start1, end1, default_minutes)
    s2, e2 = time_interval(start2, end2, default_minutes)
    return s1 < e2 and s2 < e1


async def _trips_for_resource(
    organization_id: str,
    field: str,
    resource_id: str,
    trip_date: str,
    exclude_schedule_id: Optional[str],
) -> List[Dict]:
    query: Dict = {
        "organization_id": organization_id,
        field: resource_id,
        "trip_date": trip_date,
        "status": {"$ne": TripStatus.CANCELLED.value},
    }
    if exclude_schedule_id:
        query["schedule_id"] = {"$ne": exclude_schedule_id}
    return await db_ops.get_all(
        Collections.TRIPS,
        query,
        limit=settings.MAX_TRIPS_LISTED,
        sort=[("scheduled_departure", 1)],
    )


async def check_availability(
    organization_id: str,
    vehicle_id: Optional[str],
    driver_id: Optional[str],
    date: str,
    departure_time: str,
    arrival_time: Optional[str] = None,
    exclude_schedule_id: Optional[str] = None,
) -> AvailabilityResult:
    """
    Report whether the vehicle and the driver are free for the candidate
    departure on `date`. Each resource is only checked when its id is given.
    """
    result = AvailabilityResult()

    checks = (
        ("vehicle_id", vehicle_id, "vehicle_available", "Vehicle"),
        ("driver_id", driver_id, "driver_available", "Driver"),
    )
    for field, resource_id, flag, label in checks:
        if not resource_id:
            continue
        trips = await _trips_for_resource(organization_id, field, resource_id, date, exclude_schedule_id)
        for trip in trips:
            if times_overlap(
                departure_time,
                arrival_time,
                trip["scheduled_departure"],
                trip.get("scheduled_arrival"),
            ):
                setattr(result, flag, False)
                result.conflicts.append(f"{label} busy on trip {trip.get('trip_code')}")

    if result.conflicts:
        logger.info(
            "Availability conflicts for org=%s date=%s: %s",
            organization_id, date, result.conflicts,
        )
    return result
