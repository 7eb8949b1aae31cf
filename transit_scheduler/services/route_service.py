"""
Transport route services – deletion, duplication and the ordered stop list.
"""
import logging
from typing import Dict, List, Optional

from transit_scheduler.config.database import Collections
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.utils.helpers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

# Route fields carried over to a duplicate
_COPIED_ROUTE_FIELDS = (
    "route_type",
    "origin_stop_id",
    "destination_stop_id",
    "estimated_distance_km",
    "estimated_duration_minutes",
    "base_fare",
    "currency",
)

_COPIED_STOP_FIELDS = (
    "stop_id",
    "stop_order",
    "estimated_arrival_minutes",
    "estimated_departure_minutes",
    "dwell_time_minutes",
    "fare_from_origin",
    "is_boarding_allowed",
    "is_alighting_allowed",
)


async def get_route(organization_id: str, route_id: str) -> Optional[Dict]:
    return await db_ops.get_by_id(Collections.TRANSPORT_ROUTES, route_id, organization_id)


async def _raw_route_stops(organization_id: str, route_id: str) -> List[Dict]:
    return await db_ops.get_all(
        Collections.ROUTE_STOPS,
        {"organization_id": organization_id, "route_id": route_id},
        limit=500,
        sort=[("stop_order", 1)],
    )


async def delete_route(organization_id: str, route_id: str) -> bool:
    """
    Delete a route together with its stops and schedules.
    Trips already generated from it are left in place.
    """
    if not await get_route(organization_id, route_id):
        return False
    scope = {"organization_id": organization_id, "route_id": route_id}
    stops = await db_ops.delete_many(Collections.ROUTE_STOPS, scope)
    schedules = await db_ops.delete_many(Collections.ROUTE_SCHEDULES, scope)
    await db_ops.delete(Collections.TRANSPORT_ROUTES, route_id, organization_id)
    logger.info("Deleted route %s with %d stop(s) and %d schedule(s)", route_id, stops, schedules)
    return True


async def duplicate_route(organization_id: str, route_id: str) -> Dict:
    """
    Copy a route and its stops as an inactive draft named "<name> (copy)"
    with code "<code>_COPY". Raises ValueError when the route does not exist;
    a taken code surfaces as DuplicateKeyError.
    """
    original = await get_route(organization_id, route_id)
    if not original:
        raise ValueError(f"Route {route_id} not found.")

    copy = {field: original.get(field) for field in _COPIED_ROUTE_FIELDS}
    copy.update({
        "organization_id": organization_id,
        "name": f"{original['name']} (copy)",
        "code": f"{original['code']}_COPY",
        "is_active": False,
    })
    created = await db_ops.create(Collections.TRANSPORT_ROUTES, copy)
    new_route_id = str(created["_id"])

    for stop in await _raw_route_stops(organization_id, route_id):
        stop_copy = {field: stop.get(field) for field in _COPIED_STOP_FIELDS}
        stop_copy["organization_id"] = organization_id
        stop_copy["route_id"] = new_route_id
        await db_ops.create(Collections.ROUTE_STOPS, stop_copy)

    logger.info("Duplicated route %s as %s", route_id, new_route_id)
    return serialize_doc(created)


# ============================================
# Route stops
# ============================================

async def get_route_stops(organization_id: str, route_id: str) -> List[Dict]:
    return serialize_docs(await _raw_route_stops(organization_id, route_id))


async def _get_route_stop(organization_id: str, route_id: str, route_stop_id: str) -> Optional[Dict]:
    stop = await db_ops.get_by_id(Collections.ROUTE_STOPS, route_stop_id, organization_id)
    if not stop or stop.get("route_id") != route_id:
        return None
    return stop


async def add_route_stop(organization_id: str, route_id: str, data: Dict) -> Dict:
    if not await get_route(organization_id, route_id):
        raise ValueError(f"Route {route_id} not found.")
    data["organization_id"] = organization_id
    data["route_id"] = route_id
    created = await db_ops.create(Collections.ROUTE_STOPS, data)
    return serialize_doc(created)


async def update_route_stop(
    organization_id: str, route_id: str, route_stop_id: str, data: Dict
) -> Optional[Dict]:
    if not await _get_route_stop(organization_id, route_id, route_stop_id):
        return None
    updated = await db_ops.update(Collections.ROUTE_STOPS, route_stop_id, data, organization_id)
    return serialize_doc(updated)


async def delete_route_stop(organization_id: str, route_id: str, route_stop_id: str) -> bool:
    if not await _get_route_stop(organization_id, route_id, route_stop_id):
        return False
    return await db_ops.delete(Collections.ROUTE_STOPS, route_stop_id, organization_id)


async def reorder_route_stops(organization_id: str, route_id: str, order: List[Dict]) -> List[Dict]:
    """
    Set stop_order for the given stops of a route. Every id must belong to the
    route; otherwise LookupError is raised and nothing is changed.
    """
    current = {str(stop["_id"]) for stop in await _raw_route_stops(organization_id, route_id)}
    unknown = [item["id"] for item in order if item["id"] not in current]
    if unknown:
        raise LookupError(f"Stops not on route {route_id}: {', '.join(unknown)}")

    for item in order:
        await db_ops.update(
            Collections.ROUTE_STOPS, item["id"], {"stop_order": item["stop_order"]}, organization_id
        )
    return await get_route_stops(organization_id, route_id)
