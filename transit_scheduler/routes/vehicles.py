"""
Vehicle endpoints
"""
from fastapi import APIRouter, HTTPException, status, Depends, Query
from typing import List, Optional
from transit_scheduler.models.transport import VehicleCreate, VehicleUpdate, VehicleResponse
from transit_scheduler.database.db_operations import db_ops
from transit_scheduler.config.database import Collections
from transit_scheduler.config.settings import settings
from transit_scheduler.utils.helpers import serialize_doc, serialize_docs
from transit_scheduler.utils.auth import get_organization_id

router = APIRouter(prefix="/vehicles", tags=["Transport: Vehicles"])

@router.post("/", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    organization_id: str = Depends(get_organization_id)
):
    """Register a vehicle"""
    vehicle_dict = vehicle.model_dump()
    vehicle_dict["organization_id"] = organization_id
    created_vehicle = await db_ops.create(Collections.VEHICLES, vehicle_dict)
    return serialize_doc(created_vehicle)

@router.get("/", response_model=List[VehicleResponse])
async def get_vehicles(
    vehicle_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    organization_id: str = Depends(get_organization_id)
):
    """Get vehicles with optional filtering"""
    filter_query = {"organization_id": organization_id}
    if vehicle_type:
        filter_query["vehicle_type"] = {"$regex": vehicle_type, "$options": "i"}
    if is_active is not None:
        filter_query["is_active"] = is_active

    vehicles = await db_ops.get_all(
        Collections.VEHICLES, filter_query, skip=skip, limit=limit, sort=[("plate", 1)]
    )
    return serialize_docs(vehicles)

@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Get vehicle by ID"""
    vehicle = await db_ops.get_by_id(Collections.VEHICLES, vehicle_id, organization_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return serialize_doc(vehicle)

@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str,
    vehicle_update: VehicleUpdate,
    organization_id: str = Depends(get_organization_id)
):
    """Update vehicle"""
    update_data = vehicle_update.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated_vehicle = await db_ops.update(Collections.VEHICLES, vehicle_id, update_data, organization_id)
    if not updated_vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")

    return serialize_doc(updated_vehicle)

@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str,
    organization_id: str = Depends(get_organization_id)
):
    """Delete vehicle"""
    deleted = await db_ops.delete(Collections.VEHICLES, vehicle_id, organization_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Vehicle not found")
