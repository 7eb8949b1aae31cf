"""
Trip Generator
Materializes the trips of a route schedule over a date window.

Dates are processed one at a time: each date awaits its existence check and
its insert before the next date starts, so two dates of the same batch never
race on the same idempotency key. A failed date is recorded in the result and
the batch moves on; trips inserted earlier in the batch are kept.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from transit_scheduler.config.database import Collections
from transit_scheduler.config.settings import settings
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.models.schedule import GenerationResult
from transit_scheduler.models.trip import TripStatus
from transit_scheduler.services.schedule_dates import DateLike, expand_schedule_dates

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "Error inesperado"


def scheduled_departure(trip_date: str, departure_time: str) -> str:
    return f"{trip_date}T{departure_time[:5]}"


def idempotency_key(organization_id: str, route_id: str, trip_date: str, departure_time: str) -> Dict[str, str]:
    """The fields that identify one generated trip. trip_code is derived from the same fields."""
    return {
        "organization_id": organization_id,
        "route_id": route_id,
        "trip_date": trip_date,
        "scheduled_departure": scheduled_departure(trip_date, departure_time),
    }


def build_trip_code(route_id: str, trip_date: str, departure_time: str) -> str:
    """TRP-<ROUT>-<YYYYMMDD>-<HHMM>; the same route, date and time always give the same code"""
    return "-".join([
        settings.TRIP_CODE_PREFIX,
        str(route_id)[:4].upper(),
        trip_date.replace("-", ""),
        departure_time[:5].replace(":", ""),
    ])


def resolve_arrival(
    trip_date: str,
    departure_time: str,
    arrival_time: Optional[str],
    duration_minutes: Optional[int],
) -> Optional[str]:
    """
    Arrival from the schedule when set, otherwise departure plus the route's
    estimated duration, otherwise None. An arrival at or before the departure
    is taken to be on the next day.
    """
    departure = datetime.fromisoformat(scheduled_departure(trip_date, departure_time))
    if arrival_time:
        arrival = datetime.fromisoformat(f"{trip_date}T{arrival_time[:5]}")
        if arrival <= departure:
            arrival += timedelta(days=1)
        return arrival.strftime("%Y-%m-%dT%H:%M")
    if duration_minutes:
        return (departure + timedelta(minutes=duration_minutes)).strftime("%Y-%m-%dT%H:%M")
    return None


async def _load_route(route_id: str, organization_id: str) -> Optional[Dict]:
    return await db_ops.get_by_id(Collections.TRANSPORT_ROUTES, route_id, organization_id)


async def resolve_total_seats(schedule: Mapping[str, Any], organization_id: str) -> int:
    """Seats from the schedule, otherwise the default vehicle's capacity, otherwise 0"""
    seats = schedule.get("available_seats")
    if not seats and schedule.get("default_vehicle_id"):
        vehicle = await db_ops.get_by_id(
            Collections.VEHICLES, schedule["default_vehicle_id"], organization_id
        )
        seats = (vehicle or {}).get("passenger_capacity")
    return int(seats or 0)


async def generate_trips_from_schedule(
    schedule: Mapping[str, Any],
    start_date: DateLike,
    end_date: DateLike,
    organization_id: str,
) -> GenerationResult:
    """
    Create one trip per expanded date of `schedule` in [start_date, end_date].
    Dates that already have a trip are skipped, so running the same window
    twice creates nothing the second time.
    """
    result = GenerationResult()
    dates = expand_schedule_dates(schedule, start_date, end_date)
    schedule_id = str(schedule.get("_id")) if schedule.get("_id") is not None else None
    route_id = str(schedule["route_id"])
    departure_time = schedule["departure_time"]

    route = None
    total_seats = None
    for trip_date in dates:
        try:
            key = idempotency_key(organization_id, route_id, trip_date, departure_time)
            if await db_ops.get_one(Collections.TRIPS, key, {"_id": 1}):
                result.skipped += 1
                continue

            if route is None:
                route = await _load_route(route_id, organization_id) or {}

            if total_seats is None:
                total_seats = await resolve_total_seats(schedule, organization_id)
            trip = {
                **key,
                "schedule_id": schedule_id,
                "trip_code": build_trip_code(route_id, trip_date, departure_time),
                "scheduled_arrival": resolve_arrival(
                    trip_date,
                    departure_time,
                    schedule.get("arrival_time"),
                    route.get("estimated_duration_minutes"),
                ),
                "vehicle_id": schedule.get("default_vehicle_id"),
                "driver_id": schedule.get("default_driver_id"),
                "total_seats": total_seats,
                "available_seats": total_seats,
                "base_fare": schedule.get("fare_override") or route.get("base_fare") or 0,
                "currency": route.get("currency") or settings.DEFAULT_CURRENCY,
                "status": TripStatus.SCHEDULED.value,
            }

            try:
                await db_ops.create(Collections.TRIPS, trip)
            except DuplicateKeyError:
                # Another batch created it between the check and the insert
                result.skipped += 1
                continue
            except PyMongoError as exc:
                logger.warning("Trip insert failed for %s on %s: %s", route_id, trip_date, exc)
                result.errors.append(f"{trip_date}: {exc}")
                continue

            result.created += 1
        except Exception:
            logger.exception("Unexpected error generating trip for %s on %s", route_id, trip_date)
            result.errors.append(f"{trip_date}: {UNEXPECTED_ERROR}")

    logger.info(
        "Generated trips for schedule %s (%s..%s): created=%d skipped=%d errors=%d",
        schedule_id, start_date, end_date, result.created, result.skipped, len(result.errors),
    )
    return result
