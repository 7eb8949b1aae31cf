"""
Tests for trip generation from route schedules.
"""
from pymongo.errors import PyMongoError

from transit_scheduler.config.database import Collections
from transit_scheduler.database.db_operations import DBOperations, db_ops
from transit_scheduler.services import trip_generator
from transit_scheduler.services.trip_generator import (
    build_trip_code,
    generate_trips_from_schedule,
    idempotency_key,
    resolve_arrival,
)

ORG_ID = "org-1"


async def _trips(**query):
    query.setdefault("organization_id", ORG_ID)
    return await db_ops.get_all(Collections.TRIPS, query, limit=1000, sort=[("trip_date", 1)])


def test_trip_code_is_deterministic():
    code = build_trip_code("abcd1234", "2024-06-03", "08:00")
    assert code == "TRP-ABCD-20240603-0800"
    assert build_trip_code("abcd1234", "2024-06-03", "08:00") == code
    assert build_trip_code("abcd1234", "2024-06-03", "08:00:00") == code


def test_idempotency_key_fields():
    assert idempotency_key(ORG_ID, "r1", "2024-06-03", "08:00") == {
        "organization_id": ORG_ID,
        "route_id": "r1",
        "trip_date": "2024-06-03",
        "scheduled_departure": "2024-06-03T08:00",
    }


def test_resolve_arrival_prefers_schedule_time():
    assert resolve_arrival("2024-06-03", "08:00", "10:15", 150) == "2024-06-03T10:15"


def test_resolve_arrival_from_route_duration():
    assert resolve_arrival("2024-06-03", "08:00", None, 150) == "2024-06-03T10:30"
    assert resolve_arrival("2024-06-03", "23:00", None, 90) == "2024-06-04T00:30"


def test_resolve_arrival_overnight_and_missing():
    assert resolve_arrival("2024-06-03", "22:00", "02:00", None) == "2024-06-04T02:00"
    assert resolve_arrival("2024-06-03", "08:00", None, None) is None


async def test_creates_one_trip_per_date(db, route, make_schedule):
    schedule = make_schedule(recurrence_type="weekly", days_of_week=[1, 3, 5], valid_from="2024-06-01")
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-10", ORG_ID)

    assert result.created == 4
    assert result.skipped == 0
    assert result.errors == []

    trips = await _trips()
    assert [t["trip_date"] for t in trips] == ["2024-06-03", "2024-06-05", "2024-06-07", "2024-06-10"]
    first = trips[0]
    route_id = str(route["_id"])
    assert first["route_id"] == route_id
    assert first["schedule_id"] == "sched-1"
    assert first["trip_code"] == f"TRP-{route_id[:4].upper()}-20240603-0800"
    assert first["scheduled_departure"] == "2024-06-03T08:00"
    assert first["scheduled_arrival"] == "2024-06-03T10:30"
    assert first["status"] == "scheduled"
    assert first["base_fare"] == 45000
    assert first["currency"] == "COP"
    assert first["total_seats"] == 0
    assert first["available_seats"] == 0


async def test_second_run_skips_everything(db, route, make_schedule):
    schedule = make_schedule()
    first = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-07", ORG_ID)
    second = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-07", ORG_ID)

    assert first.created == 7
    assert second.created == 0
    assert second.skipped == first.created
    assert len(await _trips()) == 7


async def test_overlapping_window_only_creates_new_dates(db, route, make_schedule):
    schedule = make_schedule()
    await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-05", ORG_ID)
    result = await generate_trips_from_schedule(schedule, "2024-06-04", "2024-06-08", ORG_ID)
    assert result.created == 3
    assert result.skipped == 2


async def test_one_failed_insert_does_not_stop_the_batch(db, route, make_schedule, monkeypatch):
    original_create = DBOperations.create

    async def flaky_create(collection_name, document):
        if document.get("trip_date") == "2024-06-03":
            raise PyMongoError("simulated store failure")
        return await original_create(collection_name, document)

    monkeypatch.setattr(db_ops, "create", flaky_create)

    schedule = make_schedule()
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-05", ORG_ID)

    assert result.created == 4
    assert result.skipped == 0
    assert result.errors == ["2024-06-03: simulated store failure"]
    assert [t["trip_date"] for t in await _trips()] == [
        "2024-06-01", "2024-06-02", "2024-06-04", "2024-06-05",
    ]


async def test_unexpected_error_is_recorded_generically(db, route, make_schedule, monkeypatch):
    async def broken_seats(schedule, organization_id):
        raise RuntimeError("boom")

    monkeypatch.setattr(trip_generator, "resolve_total_seats", broken_seats)

    result = await generate_trips_from_schedule(make_schedule(), "2024-06-01", "2024-06-02", ORG_ID)
    assert result.created == 0
    assert result.errors == ["2024-06-01: Error inesperado", "2024-06-02: Error inesperado"]


async def test_duplicate_insert_from_concurrent_batch_counts_as_skipped(db, route, make_schedule, monkeypatch):
    schedule = make_schedule()
    await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-01", ORG_ID)

    # Existence check misses, as if the other batch inserted right after it
    async def miss(*args, **kwargs):
        return None

    monkeypatch.setattr(db_ops, "get_one", miss)
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-01", ORG_ID)
    assert result.created == 0
    assert result.skipped == 1
    assert result.errors == []


async def test_seats_come_from_schedule_then_vehicle(db, route, vehicle, make_schedule):
    from_vehicle = make_schedule(default_vehicle_id=str(vehicle["_id"]), default_driver_id="drv-1")
    await generate_trips_from_schedule(from_vehicle, "2024-06-01", "2024-06-01", ORG_ID)

    explicit = make_schedule(departure_time="14:00", available_seats=12, default_vehicle_id=str(vehicle["_id"]))
    await generate_trips_from_schedule(explicit, "2024-06-01", "2024-06-01", ORG_ID)

    morning, afternoon = sorted(await _trips(), key=lambda t: t["scheduled_departure"])
    assert morning["total_seats"] == 40
    assert morning["available_seats"] == 40
    assert morning["vehicle_id"] == str(vehicle["_id"])
    assert morning["driver_id"] == "drv-1"
    assert afternoon["total_seats"] == 12


async def test_fare_override_and_arrival_time_win(db, route, make_schedule):
    schedule = make_schedule(fare_override=30000, arrival_time="09:45")
    await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-01", ORG_ID)
    trip = (await _trips())[0]
    assert trip["base_fare"] == 30000
    assert trip["scheduled_arrival"] == "2024-06-01T09:45"


async def test_missing_route_falls_back_to_defaults(db, make_schedule):
    schedule = make_schedule(route_id="000000000000000000000000")
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-01", ORG_ID)
    assert result.created == 1
    trip = (await _trips())[0]
    assert trip["base_fare"] == 0
    assert trip["scheduled_arrival"] is None


async def test_empty_expansion_creates_nothing(db, route, make_schedule):
    schedule = make_schedule(valid_from="2025-01-01")
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-30", ORG_ID)
    assert result.model_dump() == {"created": 0, "skipped": 0, "errors": []}


async def test_failed_existence_lookup_is_recorded_and_batch_continues(db, route, make_schedule, monkeypatch):
    original_get_one = DBOperations.get_one

    async def flaky_get_one(collection_name, filter_query, projection=None):
        if filter_query.get("trip_date") == "2024-06-02":
            raise PyMongoError("lookup timed out")
        return await original_get_one(collection_name, filter_query, projection)

    monkeypatch.setattr(db_ops, "get_one", flaky_get_one)

    result = await generate_trips_from_schedule(make_schedule(), "2024-06-01", "2024-06-03", ORG_ID)
    assert result.created == 2
    assert result.skipped == 0
    assert result.errors == ["2024-06-02: Error inesperado"]
    assert [t["trip_date"] for t in await _trips()] == ["2024-06-01", "2024-06-03"]


async def test_failed_route_lookup_is_retried_on_the_next_date(db, route, make_schedule, monkeypatch):
    original_load = trip_generator._load_route
    calls = []

    async def flaky_load(route_id, organization_id):
        calls.append(route_id)
        if len(calls) == 1:
            raise PyMongoError("route lookup failed")
        return await original_load(route_id, organization_id)

    monkeypatch.setattr(trip_generator, "_load_route", flaky_load)

    result = await generate_trips_from_schedule(make_schedule(), "2024-06-01", "2024-06-03", ORG_ID)
    assert result.created == 2
    assert result.errors == ["2024-06-01: Error inesperado"]
    assert len(calls) == 2
    assert all(t["base_fare"] == 45000 for t in await _trips())


async def test_vehicle_capacity_is_looked_up_once_per_batch(db, route, vehicle, make_schedule, monkeypatch):
    original_get_by_id = DBOperations.get_by_id
    vehicle_lookups = []

    async def counting_get_by_id(collection_name, doc_id, organization_id=None):
        if collection_name == Collections.VEHICLES:
            vehicle_lookups.append(doc_id)
        return await original_get_by_id(collection_name, doc_id, organization_id)

    monkeypatch.setattr(db_ops, "get_by_id", counting_get_by_id)

    schedule = make_schedule(default_vehicle_id=str(vehicle["_id"]))
    result = await generate_trips_from_schedule(schedule, "2024-06-01", "2024-06-05", ORG_ID)
    assert result.created == 5
    assert len(vehicle_lookups) == 1
    assert {t["total_seats"] for t in await _trips()} == {40}
