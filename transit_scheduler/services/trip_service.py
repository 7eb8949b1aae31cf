"""
Trip services – listing and status changes for generated trips.
"""
from datetime import datetime
from typing import Dict, List, Optional, Any

from transit_scheduler.config.database import Collections
from transit_scheduler.config.settings import settings
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.models.trip import TripStatus
from transit_scheduler.utils.helpers import serialize_doc, serialize_docs

# Allowed status moves; completed and cancelled are final
STATUS_TRANSITIONS = {
    TripStatus.SCHEDULED: {TripStatus.BOARDING, TripStatus.CANCELLED},
    TripStatus.BOARDING: {TripStatus.IN_TRANSIT, TripStatus.CANCELLED},
    TripStatus.IN_TRANSIT: {TripStatus.COMPLETED, TripStatus.CANCELLED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}


async def get_trips(
    organization_id: str,
    date: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    status: Optional[str] = None,
    route_id: Optional[str] = None,
    vehicle_id: Optional[str] = None,
    driver_id: Optional[str] = None,
) -> List[Dict]:
    query: Dict[str, Any] = {"organization_id": organization_id}
    if date:
        query["trip_date"] = date
    elif date_from or date_to:
        query["trip_date"] = {}
        if date_from:
            query["trip_date"]["$gte"] = date_from
        if date_to:
            query["trip_date"]["$lte"] = date_to
    if status and status != "all":
        query["status"] = status
    if route_id:
        query["route_id"] = route_id
    if vehicle_id:
        query["vehicle_id"] = vehicle_id
    if driver_id:
        query["driver_id"] = driver_id

    docs = await db_ops.get_all(
        Collections.TRIPS,
        query,
        limit=settings.MAX_TRIPS_LISTED,
        sort=[("trip_date", -1), ("scheduled_departure", 1)],
    )
    return serialize_docs(docs)


async def get_trip(organization_id: str, trip_id: str) -> Optional[Dict]:
    return serialize_doc(await db_ops.get_by_id(Collections.TRIPS, trip_id, organization_id))


async def update_trip_status(
    organization_id: str,
    trip_id: str,
    status: TripStatus,
    reason: Optional[str] = None,
) -> Dict:
    """
    Move a trip to `status`. Raises LookupError when the trip does not exist
    and ValueError when the move is not allowed from its current status.
    """
    trip = await db_ops.get_by_id(Collections.TRIPS, trip_id, organization_id)
    if not trip:
        raise LookupError(f"Trip {trip_id} not found.")

    current = TripStatus(trip.get("status", TripStatus.SCHEDULED.value))
    if status not in STATUS_TRANSITIONS[current]:
        raise ValueError(f"Cannot change trip status from '{current.value}' to '{status.value}'.")

    updates: Dict[str, Any] = {"status": status.value}
    if status == TripStatus.IN_TRANSIT:
        updates["actual_departure"] = datetime.utcnow()
    elif status == TripStatus.COMPLETED:
        updates["actual_arrival"] = datetime.utcnow()
    elif status == TripStatus.CANCELLED and reason:
        updates["delay_reason"] = reason

    updated = await db_ops.update(Collections.TRIPS, trip_id, updates, organization_id)
    return serialize_doc(updated)
