"""Integration tests: SQLAlchemy fleet directory and job ledger on in-memory SQLite."""
import pytest

from conftest import make_vehicle
from errors import AlreadyExistsError, InvalidStateError, NotFoundError
from services.fleet_service import FleetService
from services.job_service import JobService
from storage.records import DeliveryDetails, Job
from storage.sql import SqlJobStorage, SqlVehicleStorage

pytestmark = pytest.mark.integration


@pytest.fixture
def sql_vehicles(sql_session_factory):
    return SqlVehicleStorage(sql_session_factory)


@pytest.fixture
def sql_jobs(sql_session_factory):
    return SqlJobStorage(sql_session_factory)


def test_vehicle_create_get_and_duplicate(sql_vehicles):
    created = sql_vehicles.create_vehicle(make_vehicle("v1", battery_level=73.25))
    assert created.last_updated is not None
    found = sql_vehicles.get_vehicle("v1")
    assert found.battery_level == 73.25
    assert found.battery_range_km == pytest.approx(293.0)
    with pytest.raises(AlreadyExistsError):
        sql_vehicles.create_vehicle(make_vehicle("v1"))
    with pytest.raises(NotFoundError):
        sql_vehicles.get_vehicle("v2")


def test_vehicle_status_compare_and_set(sql_vehicles):
    sql_vehicles.create_vehicle(make_vehicle("v1"))
    sql_vehicles.update_vehicle_status("v1", "busy", "ride-1", expected_status="available")
    with pytest.raises(InvalidStateError):
        sql_vehicles.update_vehicle_status("v1", "busy", "ride-2", expected_status="available")
    v = sql_vehicles.get_vehicle("v1")
    assert (v.status, v.current_job_id) == ("busy", "ride-1")

    sql_vehicles.update_vehicle_status("v1", "available")
    assert sql_vehicles.get_vehicle("v1").current_job_id is None


def test_vehicle_status_unknown_id_is_not_found(sql_vehicles):
    with pytest.raises(NotFoundError):
        sql_vehicles.update_vehicle_status("ghost", "busy", "ride-1", expected_status="available")


def test_vehicle_location_and_status(sql_vehicles):
    sql_vehicles.create_vehicle(make_vehicle("v1"))
    sql_vehicles.update_vehicle_status("v1", "busy", "ride-1")
    sql_vehicles.update_vehicle_location_and_status("v1", 45.5, -122.6, "charging", 22.5)
    v = sql_vehicles.get_vehicle("v1")
    assert (v.location_lat, v.location_lng, v.status) == (45.5, -122.6, "charging")
    assert v.current_job_id is None
    assert v.battery_level == 22.5


def test_vehicle_report_keeps_assignment_until_vehicle_reports_its_job(sql_vehicles):
    sql_vehicles.create_vehicle(make_vehicle("v1"))
    sql_vehicles.update_vehicle_status("v1", "busy", "ride-1", expected_status="available")
    sql_vehicles.update_vehicle_location_and_status("v1", 45.5, -122.6, "available", 70.0)
    v = sql_vehicles.get_vehicle("v1")
    assert (v.status, v.current_job_id, v.battery_level) == ("busy", "ride-1", 70.0)

    sql_vehicles.update_vehicle_location_and_status("v1", 45.5, -122.6, "busy", 69.5, job_id="ride-1")
    v = sql_vehicles.get_vehicle("v1")
    assert (v.status, v.current_job_id) == ("busy", "ride-1")


def test_vehicle_region_status_query(sql_vehicles):
    sql_vehicles.create_vehicle(make_vehicle("v2"))
    sql_vehicles.create_vehicle(make_vehicle("v1"))
    sql_vehicles.create_vehicle(make_vehicle("v3", status="busy"))
    sql_vehicles.create_vehicle(make_vehicle("v4", region="eu-west-1"))
    ids = [v.id for v in sql_vehicles.get_vehicles_by_region_and_status("us-west-2", "available")]
    assert ids == ["v1", "v2"]


def test_job_round_trip_with_delivery_details(sql_jobs):
    job = Job(
        id="delivery-1",
        job_type="delivery",
        customer_id="c1",
        region="us-west-2",
        pickup_lat=45.52,
        pickup_lng=-122.68,
        destination_lat=45.53,
        destination_lng=-122.65,
        delivery_details=DeliveryDetails(restaurant_name="Lardo", items=["a", "b"], instructions="door"),
        fare_amount=8.99,
        base_fare=8.99,
    )
    sql_jobs.create_job(job)
    stored = sql_jobs.get_job("delivery-1")
    assert stored.delivery_details == DeliveryDetails(restaurant_name="Lardo", items=["a", "b"], instructions="door")
    assert stored.fare_amount == 8.99
    with pytest.raises(AlreadyExistsError):
        sql_jobs.create_job(job)


def test_job_status_updates_and_queries(sql_jobs):
    for n in (1, 2):
        sql_jobs.create_job(
            Job(
                id=f"ride-{n}",
                job_type="ride",
                customer_id="c1",
                region="us-west-2",
                pickup_lat=0,
                pickup_lng=0,
                destination_lat=0,
                destination_lng=0,
            )
        )
    sql_jobs.update_job_status("ride-2", "assigned", "v1")
    assert [j.id for j in sql_jobs.get_jobs_by_status("pending")] == ["ride-1"]
    assigned = sql_jobs.get_jobs_by_vehicle("v1")
    assert [j.id for j in assigned] == ["ride-2"]
    assert assigned[0].assigned_at is not None

    sql_jobs.update_job_status("ride-2", "completed")
    assert sql_jobs.get_job("ride-2").completed_at is not None
    with pytest.raises(NotFoundError):
        sql_jobs.update_job_status("ride-9", "completed")


def test_job_service_on_sql_storage(sql_vehicles, sql_jobs):
    fleet = FleetService(sql_vehicles)
    jobs = JobService(sql_jobs, fleet)
    fleet.register_vehicle(make_vehicle("v1"))

    job = jobs.create_ride_job("c1", "us-west-2", 37.7749, -122.4194, 37.7849, -122.4094)
    assert job.status == "assigned"
    assert fleet.get_vehicle("v1").status == "busy"

    jobs.complete_job(job.id)
    assert fleet.get_vehicle("v1").status == "available"
    assert jobs.get_revenue()["completed_jobs"] == 1


def test_job_numbering_continues_after_restart(sql_vehicles, sql_jobs):
    fleet = FleetService(sql_vehicles)
    JobService(sql_jobs, fleet).create_ride_job("c1", "us-west-2", 0, 0, 0.01, 0.01)
    again = JobService(sql_jobs, fleet).create_ride_job("c1", "us-west-2", 0, 0, 0.01, 0.01)
    assert again.id == "ride-2"


def test_update_vehicle_and_job_records(sql_vehicles, sql_jobs):
    sql_vehicles.create_vehicle(make_vehicle("v1"))
    updated = sql_vehicles.update_vehicle(make_vehicle("v1", battery_level=12.345, status="maintenance"))
    assert updated.battery_level == 12.345
    assert updated.status == "maintenance"
    with pytest.raises(NotFoundError):
        sql_vehicles.update_vehicle(make_vehicle("ghost"))

    sql_jobs.create_job(
        Job(
            id="ride-1",
            job_type="ride",
            customer_id="c1",
            region="us-west-2",
            pickup_lat=0,
            pickup_lng=0,
            destination_lat=0,
            destination_lng=0,
        )
    )
    job = sql_jobs.get_job("ride-1")
    job.status = "failed"
    assert sql_jobs.update_job(job).status == "failed"
