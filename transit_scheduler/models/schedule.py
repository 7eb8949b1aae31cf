"""
Route schedule models
A schedule is a recurrence rule describing on which days a route departs.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SPECIFIC_DATES = "specific_dates"


def normalize_time(value: str) -> str:
    """Accept HH:MM or HH:MM:SS and return HH:MM"""
    try:
        parts = value.strip().split(":")
        hour, minute = int(parts[0]), int(parts[1])
    except (ValueError, IndexError, AttributeError):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return f"{hour:02d}:{minute:02d}"


def normalize_date(value: str) -> str:
    """Accept an ISO date string and return YYYY-MM-DD"""
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()[:10]).isoformat()
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")


class ScheduleBase(BaseModel):
    route_id: str
    schedule_name: Optional[str] = None
    recurrence_type: RecurrenceType
    days_of_week: List[int] = []     # 0 = Sunday ... 6 = Saturday
    specific_dates: List[str] = []   # YYYY-MM-DD
    departure_time: str              # HH:MM
    arrival_time: Optional[str] = None
    default_vehicle_id: Optional[str] = None
    default_driver_id: Optional[str] = None
    available_seats: Optional[int] = Field(None, ge=0)
    fare_override: Optional[float] = Field(None, ge=0)
    valid_from: str                  # YYYY-MM-DD
    valid_until: Optional[str] = None
    is_active: bool = True
    metadata: Dict[str, Any] = {}

    @field_validator("departure_time")
    @classmethod
    def _departure(cls, v):
        return normalize_time(v)

    @field_validator("arrival_time")
    @classmethod
    def _arrival(cls, v):
        return normalize_time(v) if v else None

    @field_validator("valid_from")
    @classmethod
    def _valid_from(cls, v):
        return normalize_date(v)

    @field_validator("valid_until")
    @classmethod
    def _valid_until(cls, v):
        return normalize_date(v) if v else None

    @model_validator(mode="after")
    def _recurrence_fields(self):
        # Only the fields of the chosen kind are checked; the others are kept as sent
        if self.recurrence_type == RecurrenceType.WEEKLY:
            for day in self.days_of_week:
                if day < 0 or day > 6:
                    raise ValueError("days_of_week values must be between 0 (Sunday) and 6 (Saturday)")
            if not self.days_of_week:
                raise ValueError("weekly schedules need at least one day in days_of_week")
            self.days_of_week = sorted(set(self.days_of_week))
        if self.recurrence_type == RecurrenceType.SPECIFIC_DATES:
            if not self.specific_dates:
                raise ValueError("specific_dates schedules need at least one date")
            self.specific_dates = sorted({normalize_date(d) for d in self.specific_dates})
        if self.valid_until and self.valid_until < self.valid_from:
            raise ValueError("valid_until must not be before valid_from")
        return self


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleUpdate(BaseModel):
    """Partial update; the merged document is re-validated against ScheduleBase"""
    route_id: Optional[str] = None
    schedule_name: Optional[str] = None
    recurrence_type: Optional[RecurrenceType] = None
    days_of_week: Optional[List[int]] = None
    specific_dates: Optional[List[str]] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    default_vehicle_id: Optional[str] = None
    default_driver_id: Optional[str] = None
    available_seats: Optional[int] = Field(None, ge=0)
    fare_override: Optional[float] = Field(None, ge=0)
    valid_from: Optional[str] = None
    valid_until: Optional[str] = None
    is_active: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None


class ScheduleResponse(BaseModel):
    id: str = Field(alias="_id")
    organization_id: str
    route_id: str
    schedule_name: Optional[str] = None
    # Stored kinds are echoed as-is, even ones the generator does not know
    recurrence_type: str
    days_of_week: List[int] = []
    specific_dates: List[str] = []
    departure_time: str
    arrival_time: Optional[str] = None
    default_vehicle_id: Optional[str] = None
    default_driver_id: Optional[str] = None
    available_seats: Optional[int] = None
    fare_override: Optional[float] = None
    valid_from: str
    valid_until: Optional[str] = None
    is_active: bool = True
    metadata: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


# ============================================
# Trip generation / availability payloads
# ============================================
class DateWindow(BaseModel):
    start_date: str  # YYYY-MM-DD
    end_date: str    # YYYY-MM-DD

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates(cls, v):
        return normalize_date(v)


class GenerationResult(BaseModel):
    """Outcome of one generation batch. Never persisted."""
    created: int = 0
    skipped: int = 0
    errors: List[str] = []  # "<date>: <message>"


class AvailabilityRequest(BaseModel):
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    date: str
    departure_time: str
    arrival_time: Optional[str] = None
    exclude_schedule_id: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _date(cls, v):
        return normalize_date(v)

    @field_validator("departure_time")
    @classmethod
    def _departure(cls, v):
        return normalize_time(v)

    @field_validator("arrival_time")
    @classmethod
    def _arrival(cls, v):
        return normalize_time(v) if v else None


class AvailabilityResult(BaseModel):
    vehicle_available: bool = True
    driver_available: bool = True
    conflicts: List[str] = []

    @property
    def fully_available(self) -> bool:
        return self.vehicle_available and self.driver_available
