"""
Trip endpoints
"""
from fastapi import APIRouter, HTTPException, Depends
from typing import List, Optional

from transit_scheduler.models.trip import TripResponse, TripStatusUpdate
from transit_scheduler.services import trip_service
from transit_scheduler.utils.auth import get_organization_id

router = APIRouter(prefix="/trips", tags=["Transport: Trips"])


@router.get("/", response_model=List[TripResponse])
async def list_trips(
    date: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    status: Optional[str] = None,
    route_id: Optional[str] = None,
    vehicle_id: Optional[str] = None,
    driver_id: Optional[str] = None,
    organization_id: str = Depends(get_organization_id),
):
    """Trips newest day first, earliest departure first within a day"""
    return await trip_service.get_trips(
        organization_id,
        date=date,
        date_from=date_from,
        date_to=date_to,
        status=status,
        route_id=route_id,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
    )


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str,
    organization_id: str = Depends(get_organization_id),
):
    trip = await trip_service.get_trip(organization_id, trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


@router.patch("/{trip_id}/status", response_model=TripResponse)
async def update_trip_status(
    trip_id: str,
    payload: TripStatusUpdate,
    organization_id: str = Depends(get_organization_id),
):
    try:
        return await trip_service.update_trip_status(organization_id, trip_id, payload.status, payload.reason)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
