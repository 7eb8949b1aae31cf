"""
Transport route endpoints
"""
from fastapi import APIRouter, HTTPException, status, Depends, Query
from typing import List, Optional
from pymongo.errors import DuplicateKeyError
from transit_scheduler.models.transport import (
    TransportRouteCreate,
    TransportRouteUpdate,
    TransportRouteResponse,
    RouteStopCreate,
    RouteStopUpdate,
    RouteStopResponse,
    RouteStopReorder,
)
from transit_scheduler.services import route_service
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.config.database import Collections
from transit_scheduler.config.settings import settings
from transit_scheduler.utils.helpers import serialize_doc, serialize_docs
from transit_scheduler.utils.auth import get_organization_id

router = APIRouter(prefix="/transport-routes", tags=["Transport: Routes"])

@router.post("/", response_model=TransportRouteResponse, status_code=status.HTTP_201_CREATED)
async def create_route(
    route: TransportRouteCreate,
    organization_id: str = Depends(get_organization_id)
):
    """Create a new transport route"""
    route_dict = route.model_dump(mode="json")
    route_dict["organization_id"] = organization_id
    try:
        created_route = await db_ops.create(Collections.TRANSPORT_ROUTES, route_dict)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail=f"Route code '{route.code}' already exists")
    return serialize_doc(created_route)

@router.get("/", response_model=List[TransportRouteResponse])
async def get_routes(
    is_active: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    organization_id: str = Depends(get_organization_id)
):
    """Get the organization's routes, newest first"""
    filter_query = {"organization_id": organization_id}
    if is_active is not None:
        filter_query["is_active"] = is_active

    routes = await db_ops.get_all(
        Collections.TRANSPORT_ROUTES, filter_query, skip=skip, limit=limit, sort=[("created_at", -1)]
    )
    return serialize_docs(routes)

@router.get("/{route_id}", response_model=TransportRouteResponse)
async def get_route(
    route_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Get route by ID"""
    route = await db_ops.get_by_id(Collections.TRANSPORT_ROUTES, route_id, organization_id)
    if not route:
        raise HTTPException(status_code=404, detail="Route not found")
    return serialize_doc(route)

@router.put("/{route_id}", response_model=TransportRouteResponse)
async def update_route(
    route_id: str,
    route_update: TransportRouteUpdate,
    organization_id: str = Depends(get_organization_id)
):
    """Update route"""
    update_data = route_update.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        updated_route = await db_ops.update(Collections.TRANSPORT_ROUTES, route_id, update_data, organization_id)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail=f"Route code '{update_data.get('code')}' already exists")
    if not updated_route:
        raise HTTPException(status_code=404, detail="Route not found")

    return serialize_doc(updated_route)

@router.patch("/{route_id}/status", response_model=TransportRouteResponse)
async def toggle_route_status(
    route_id: str,
    is_active: bool,
    organization_id: str = Depends(get_organization_id)
):
    """Activate or deactivate a route"""
    updated_route = await db_ops.update(
        Collections.TRANSPORT_ROUTES, route_id, {"is_active": is_active}, organization_id
    )
    if not updated_route:
        raise HTTPException(status_code=404, detail="Route not found")
    return serialize_doc(updated_route)

@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route(
    route_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Delete a route with its stops and schedules"""
    deleted = await route_service.delete_route(organization_id, route_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Route not found")

@router.post("/{route_id}/duplicate", response_model=TransportRouteResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_route(
    route_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Copy a route and its stops as an inactive draft"""
    try:
        return await route_service.duplicate_route(organization_id, route_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="A copy of this route already exists")


# ============================================
# Route stops
# ============================================

@router.get("/{route_id}/stops", response_model=List[RouteStopResponse])
async def get_route_stops(
    route_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Stops of a route in travel order"""
    if not await route_service.get_route(organization_id, route_id):
        raise HTTPException(status_code=404, detail="Route not found")
    return await route_service.get_route_stops(organization_id, route_id)

@router.post("/{route_id}/stops", response_model=RouteStopResponse, status_code=status.HTTP_201_CREATED)
async def add_route_stop(
    route_id: str,
    stop: RouteStopCreate,
    organization_id: str = Depends(get_organization_id)
):
    try:
        return await route_service.add_route_stop(organization_id, route_id, stop.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/{route_id}/stops/reorder", response_model=List[RouteStopResponse])
async def reorder_route_stops(
    route_id: str,
    payload: RouteStopReorder,
    organization_id: str = Depends(get_organization_id)
):
    """Assign new stop_order values; returns the stops in their new order"""
    if not await route_service.get_route(organization_id, route_id):
        raise HTTPException(status_code=404, detail="Route not found")
    try:
        return await route_service.reorder_route_stops(
            organization_id, route_id, [item.model_dump() for item in payload.stops]
        )
    except LookupError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.put("/{route_id}/stops/{route_stop_id}", response_model=RouteStopResponse)
async def update_route_stop(
    route_id: str,
    route_stop_id: str,
    stop_update: RouteStopUpdate,
    organization_id: str = Depends(get_organization_id)
):
    update_data = stop_update.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = await route_service.update_route_stop(organization_id, route_id, route_stop_id, update_data)
    if not updated:
        raise HTTPException(status_code=404, detail="Route stop not found")
    return updated

@router.delete("/{route_id}/stops/{route_stop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route_stop(
    route_id: str,
    route_stop_id: str,
    organization_id: str = Depends(get_organization_id)
):
    deleted = await route_service.delete_route_stop(organization_id, route_id, route_stop_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Route stop not found")
