"""
Route schedule services – persistence and validation for recurrence rules.
"""
import logging
from typing import Dict, List, Optional, Any

from transit_scheduler.config.database import Collections
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.models.schedule import ScheduleBase
from transit_scheduler.utils.helpers import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

# Fields a stored schedule document may carry besides the validated ones
_SYSTEM_FIELDS = ("_id", "organization_id", "created_at", "updated_at")


async def create_schedule(organization_id: str, data: Dict) -> Dict:
    route = await db_ops.get_by_id(Collections.TRANSPORT_ROUTES, data["route_id"], organization_id)
    if not route:
        raise ValueError(f"Route {data['route_id']} not found.")
    data["organization_id"] = organization_id
    created = await db_ops.create(Collections.ROUTE_SCHEDULES, data)
    logger.info("Created schedule %s for route %s", created["_id"], data["route_id"])
    return serialize_doc(created)


async def get_schedules(
    organization_id: str,
    route_id: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> List[Dict]:
    query: Dict[str, Any] = {"organization_id": organization_id}
    if route_id:
        query["route_id"] = route_id
    if is_active is not None:
        query["is_active"] = is_active
    docs = await db_ops.get_all(
        Collections.ROUTE_SCHEDULES, query, limit=500, sort=[("departure_time", 1)]
    )
    return serialize_docs(docs)


async def get_schedule(organization_id: str, schedule_id: str) -> Optional[Dict]:
    """Raw schedule document (ObjectId kept) or None"""
    return await db_ops.get_by_id(Collections.ROUTE_SCHEDULES, schedule_id, organization_id)


async def update_schedule(organization_id: str, schedule_id: str, data: Dict) -> Dict:
    """
    Apply a partial update. The merged schedule is validated as a whole so a
    change of recurrence_type cannot leave the rule without its fields.
    Raises ValueError when the schedule does not exist and pydantic's
    ValidationError when the merged rule is invalid.
    """
    existing = await get_schedule(organization_id, schedule_id)
    if not existing:
        raise ValueError(f"Schedule {schedule_id} not found.")

    merged = {k: v for k, v in existing.items() if k not in _SYSTEM_FIELDS}
    merged.update(data)
    validated = ScheduleBase.model_validate(merged).model_dump(mode="json")

    if validated["route_id"] != existing.get("route_id"):
        route = await db_ops.get_by_id(Collections.TRANSPORT_ROUTES, validated["route_id"], organization_id)
        if not route:
            raise ValueError(f"Route {validated['route_id']} not found.")

    updated = await db_ops.update(Collections.ROUTE_SCHEDULES, schedule_id, validated, organization_id)
    return serialize_doc(updated)


async def delete_schedule(organization_id: str, schedule_id: str) -> bool:
    return await db_ops.delete(Collections.ROUTE_SCHEDULES, schedule_id, organization_id)


async def toggle_schedule(organization_id: str, schedule_id: str, is_active: bool) -> Optional[Dict]:
    updated = await db_ops.update(
        Collections.ROUTE_SCHEDULES, schedule_id, {"is_active": is_active}, organization_id
    )
    return serialize_doc(updated)


async def duplicate_schedule(organization_id: str, schedule_id: str) -> Dict:
    """Copy a schedule as an inactive draft."""
    original = await get_schedule(organization_id, schedule_id)
    if not original:
        raise ValueError(f"Schedule {schedule_id} not found.")

    copy = {k: v for k, v in original.items() if k not in _SYSTEM_FIELDS}
    copy["schedule_name"] = f"{original.get('schedule_name') or 'Schedule'} (copy)"
    copy["is_active"] = False
    copy["organization_id"] = organization_id
    created = await db_ops.create(Collections.ROUTE_SCHEDULES, copy)
    return serialize_doc(created)
