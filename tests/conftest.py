"""
Shared fixtures: an in-memory async MongoDB behind the app's db_config.
"""
import pytest
from mongomock_motor import AsyncMongoMockClient

from transit_scheduler.config.database import db_config, Collections
from transit_scheduler.database.db_operations import db_ops

ORG_ID = "org-1"


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    db_config.client = client
    db_config.database = client["transit_scheduler_test"]
    await db_config.ensure_indexes()
    yield db_config.database
    db_config.client = None
    db_config.database = None


@pytest.fixture
async def route(db):
    doc = await db_ops.create(Collections.TRANSPORT_ROUTES, {
        "organization_id": ORG_ID,
        "name": "Bogotá - Tunja",
        "code": "BOG-TUN",
        "route_type": "passenger",
        "estimated_duration_minutes": 150,
        "base_fare": 45000,
        "currency": "COP",
        "is_active": True,
    })
    return doc


@pytest.fixture
async def vehicle(db):
    doc = await db_ops.create(Collections.VEHICLES, {
        "organization_id": ORG_ID,
        "plate": "ABC123",
        "vehicle_type": "Bus",
        "passenger_capacity": 40,
        "is_active": True,
    })
    return doc


@pytest.fixture
def make_schedule(route):
    """Build a schedule document for the seeded route"""
    def _make(**overrides):
        schedule = {
            "_id": "sched-1",
            "organization_id": ORG_ID,
            "route_id": str(route["_id"]),
            "recurrence_type": "daily",
            "days_of_week": [],
            "specific_dates": [],
            "departure_time": "08:00",
            "arrival_time": None,
            "default_vehicle_id": None,
            "default_driver_id": None,
            "available_seats": None,
            "fare_override": None,
            "valid_from": "2024-01-01",
            "valid_until": None,
            "is_active": True,
        }
        schedule.update(overrides)
        return schedule
    return _make
