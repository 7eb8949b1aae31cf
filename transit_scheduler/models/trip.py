"""
Trip models
A trip is one concrete, dated departure generated from a schedule.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TripStatus(str, Enum):
    SCHEDULED = "scheduled"
    BOARDING = "boarding"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TripResponse(BaseModel):
    id: str = Field(alias="_id")
    organization_id: str
    route_id: str
    schedule_id: Optional[str] = None
    trip_code: str
    trip_date: str                    # YYYY-MM-DD
    scheduled_departure: str          # YYYY-MM-DDTHH:MM
    scheduled_arrival: Optional[str] = None
    actual_departure: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    total_seats: int = 0
    available_seats: int = 0
    base_fare: float = 0
    currency: Optional[str] = None
    status: TripStatus = TripStatus.SCHEDULED
    delay_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


class TripStatusUpdate(BaseModel):
    status: TripStatus
    reason: Optional[str] = None
