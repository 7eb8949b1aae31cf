"""
Route schedule endpoints
Recurrence rules, trip generation and vehicle/driver availability.
"""
from fastapi import APIRouter, HTTPException, status, Depends, Query
from pydantic import ValidationError
from typing import List, Optional

from transit_scheduler.models.schedule import (
    ScheduleCreate,
    ScheduleUpdate,
    ScheduleResponse,
    DateWindow,
    GenerationResult,
    AvailabilityRequest,
    AvailabilityResult,
)
from transit_scheduler.models.schedule import normalize_date
from transit_scheduler.utils.helpers import serialize_doc
from transit_scheduler.services import schedule_service
from transit_scheduler.services.availability import check_availability
from transit_scheduler.services.schedule_dates import expand_schedule_dates, window_days
from transit_scheduler.services.trip_generator import generate_trips_from_schedule
from transit_scheduler.config.settings import settings
from transit_scheduler.utils.auth import get_organization_id

router = APIRouter(prefix="/schedules", tags=["Transport: Schedules"])


async def _get_or_404(organization_id: str, schedule_id: str) -> dict:
    schedule = await schedule_service.get_schedule(organization_id, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule


def _check_window_size(start_date: str, end_date: str):
    if window_days(start_date, end_date) > settings.MAX_GENERATION_DAYS:
        raise HTTPException(
            status_code=400,
            detail=f"Date window is longer than {settings.MAX_GENERATION_DAYS} days",
        )


# ============================================
# CRUD
# ============================================

@router.post("/", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    payload: ScheduleCreate,
    organization_id: str = Depends(get_organization_id),
):
    try:
        return await schedule_service.create_schedule(organization_id, payload.model_dump(mode="json"))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/", response_model=List[ScheduleResponse])
async def list_schedules(
    route_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    organization_id: str = Depends(get_organization_id),
):
    """Schedules of the organization ordered by departure time"""
    return await schedule_service.get_schedules(organization_id, route_id, is_active)


@router.post("/check-availability", response_model=AvailabilityResult)
async def check_schedule_availability(
    payload: AvailabilityRequest,
    organization_id: str = Depends(get_organization_id),
):
    """
    Check a proposed departure against the trips the vehicle and driver
    already have that day. Conflicts do not block anything by themselves.
    """
    return await check_availability(
        organization_id=organization_id,
        vehicle_id=payload.vehicle_id,
        driver_id=payload.driver_id,
        date=payload.date,
        departure_time=payload.departure_time,
        arrival_time=payload.arrival_time,
        exclude_schedule_id=payload.exclude_schedule_id,
    )


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    organization_id: str = Depends(get_organization_id),
):
    return serialize_doc(await _get_or_404(organization_id, schedule_id))


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    organization_id: str = Depends(get_organization_id),
):
    update_data = payload.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        return await schedule_service.update_schedule(organization_id, schedule_id, update_data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: str,
    organization_id: str = Depends(get_organization_id),
):
    deleted = await schedule_service.delete_schedule(organization_id, schedule_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Schedule not found")


@router.patch("/{schedule_id}/status", response_model=ScheduleResponse)
async def toggle_schedule_status(
    schedule_id: str,
    is_active: bool,
    organization_id: str = Depends(get_organization_id),
):
    updated = await schedule_service.toggle_schedule(organization_id, schedule_id, is_active)
    if not updated:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return updated


@router.post("/{schedule_id}/duplicate", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_schedule(
    schedule_id: str,
    organization_id: str = Depends(get_organization_id),
):
    """Copy a schedule as an inactive draft"""
    try:
        return await schedule_service.duplicate_schedule(organization_id, schedule_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================
# Trip generation
# ============================================

@router.get("/{schedule_id}/preview-dates", response_model=List[str])
async def preview_schedule_dates(
    schedule_id: str,
    start_date: str = Query(..., description="YYYY-MM-DD"),
    end_date: str = Query(..., description="YYYY-MM-DD"),
    organization_id: str = Depends(get_organization_id),
):
    """Dates the schedule would generate trips for, without creating anything"""
    schedule = await _get_or_404(organization_id, schedule_id)
    try:
        start, end = normalize_date(start_date), normalize_date(end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _check_window_size(start, end)
    return expand_schedule_dates(schedule, start, end)


@router.post("/{schedule_id}/generate-trips", response_model=GenerationResult)
async def generate_trips(
    schedule_id: str,
    window: DateWindow,
    organization_id: str = Depends(get_organization_id),
):
    """
    Create the schedule's trips in the window. Existing trips are skipped;
    dates that fail are listed in `errors` and do not stop the batch.
    """
    schedule = await _get_or_404(organization_id, schedule_id)
    if not schedule.get("is_active", True):
        raise HTTPException(status_code=400, detail="Schedule is inactive")
    _check_window_size(window.start_date, window.end_date)
    return await generate_trips_from_schedule(
        schedule, window.start_date, window.end_date, organization_id
    )
