"""
Transport route and vehicle models and schemas
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class RouteType(str, Enum):
    PASSENGER = "passenger"
    CARGO = "cargo"
    MIXED = "mixed"


# ============================================
# Transport Route - a line trips run on
# ============================================
class TransportRouteBase(BaseModel):
    name: str = Field(..., min_length=1, description="e.g. Bogotá to Tunja")
    code: str = Field(..., min_length=1)
    route_type: RouteType = RouteType.PASSENGER
    origin_stop_id: Optional[str] = None
    destination_stop_id: Optional[str] = None
    estimated_distance_km: Optional[float] = Field(None, ge=0)
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    base_fare: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    is_active: bool = True

class TransportRouteCreate(TransportRouteBase):
    pass

class TransportRouteUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1)
    route_type: Optional[RouteType] = None
    origin_stop_id: Optional[str] = None
    destination_stop_id: Optional[str] = None
    estimated_distance_km: Optional[float] = Field(None, ge=0)
    estimated_duration_minutes: Optional[int] = Field(None, ge=0)
    base_fare: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    is_active: Optional[bool] = None

class TransportRouteResponse(TransportRouteBase):
    id: str = Field(alias="_id")
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True


# ============================================
# Route Stop - an ordered stop along a route
# ============================================
class RouteStopBase(BaseModel):
    stop_id: str = Field(..., min_length=1)
    stop_order: int = Field(..., ge=0)
    estimated_arrival_minutes: Optional[int] = Field(None, ge=0, description="Minutes after departure from origin")
    estimated_departure_minutes: Optional[int] = Field(None, ge=0)
    dwell_time_minutes: Optional[int] = Field(None, ge=0)
    fare_from_origin: Optional[float] = Field(None, ge=0)
    is_boarding_allowed: bool = True
    is_alighting_allowed: bool = True

class RouteStopCreate(RouteStopBase):
    pass

class RouteStopUpdate(BaseModel):
    stop_id: Optional[str] = Field(None, min_length=1)
    stop_order: Optional[int] = Field(None, ge=0)
    estimated_arrival_minutes: Optional[int] = Field(None, ge=0)
    estimated_departure_minutes: Optional[int] = Field(None, ge=0)
    dwell_time_minutes: Optional[int] = Field(None, ge=0)
    fare_from_origin: Optional[float] = Field(None, ge=0)
    is_boarding_allowed: Optional[bool] = None
    is_alighting_allowed: Optional[bool] = None

class RouteStopResponse(RouteStopBase):
    id: str = Field(alias="_id")
    organization_id: str
    route_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True

class StopOrder(BaseModel):
    id: str
    stop_order: int = Field(..., ge=0)

class RouteStopReorder(BaseModel):
    stops: List[StopOrder] = Field(..., min_length=1)


# ============================================
# Vehicle - source of default seat capacity
# ============================================
class VehicleBase(BaseModel):
    plate: str = Field(..., min_length=1)
    vehicle_type: str = Field(..., description="Bus, Buseta, Van, etc.")
    brand: Optional[str] = None
    model: Optional[str] = None
    passenger_capacity: int = Field(..., ge=0, description="Number of passengers")
    is_active: bool = True

class VehicleCreate(VehicleBase):
    pass

class VehicleUpdate(BaseModel):
    plate: Optional[str] = Field(None, min_length=1)
    vehicle_type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    passenger_capacity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

class VehicleResponse(VehicleBase):
    id: str = Field(alias="_id")
    organization_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        populate_by_name = True
