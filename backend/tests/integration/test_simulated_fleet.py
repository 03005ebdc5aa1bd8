"""Integration tests: simulated vehicles driving jobs through the HTTP API in process."""
import random

import httpx
import pytest

from api.deps import get_demo_generator, get_fleet_service, get_job_service
from main import app
from simulator_core.clients import FleetServiceClient, JobServiceClient
from simulator_core.routing import RoutingService
from simulator_core.vehicle import SimulatedVehicle

pytestmark = pytest.mark.integration

PIONEER_SQUARE = (45.5188, -122.6793)
POWELLS = (45.5230, -122.6814)


@pytest.fixture
def asgi_clients(fleet_service, job_service, demo_generator):
    app.dependency_overrides[get_fleet_service] = lambda: fleet_service
    app.dependency_overrides[get_job_service] = lambda: job_service
    app.dependency_overrides[get_demo_generator] = lambda: demo_generator
    transport = httpx.ASGITransport(app=app)
    fleet_client = FleetServiceClient("http://fleet.test/api", transport=transport)
    job_client = JobServiceClient("http://fleet.test/api", transport=transport)
    try:
        yield fleet_client, job_client
    finally:
        app.dependency_overrides.clear()


def _vehicle(fleet_client, job_client, vehicle_id="sim-vehicle-1", battery=90.0):
    return SimulatedVehicle(
        vehicle_id,
        "us-west-2",
        *PIONEER_SQUARE,
        fleet_client=fleet_client,
        job_client=job_client,
        routing=RoutingService(""),
        speed=0.002,
        battery_level=battery,
        rng=random.Random(0),
    )


async def test_vehicle_registers_picks_up_and_completes_ride(asgi_clients, fleet_service, job_service):
    fleet_client, job_client = asgi_clients
    vehicle = _vehicle(fleet_client, job_client)
    await vehicle.register_with_fleet_retry()
    assert fleet_service.get_vehicle("sim-vehicle-1").battery_level == 90.0

    job = job_service.create_ride_job("c1", "us-west-2", *PIONEER_SQUARE, *POWELLS)
    assert job.assigned_vehicle_id == "sim-vehicle-1"

    for _ in range(100):
        await vehicle.tick()
        if job_service.get_job(job.id).status == "completed":
            break

    assert job_service.get_job(job.id).status == "completed"
    stored = fleet_service.get_vehicle("sim-vehicle-1")
    assert stored.status == "available"
    assert stored.current_job_id is None
    assert stored.battery_level < 90.0
    assert stored.battery_level == pytest.approx(vehicle.battery_level)
    assert job_service.get_revenue()["ride_count"] == 1
    await fleet_client.aclose()
    await job_client.aclose()


async def test_duplicate_registration_is_rejected(asgi_clients):
    fleet_client, job_client = asgi_clients
    await _vehicle(fleet_client, job_client).register_with_fleet_retry()

    async def no_wait(seconds):
        pass

    from errors import RegistrationError

    with pytest.raises(RegistrationError):
        await _vehicle(fleet_client, job_client).register_with_fleet_retry(max_attempts=2, sleep=no_wait)
    await fleet_client.aclose()
    await job_client.aclose()


async def test_low_battery_vehicle_reports_charging_and_is_not_dispatched(asgi_clients, fleet_service, job_service):
    fleet_client, job_client = asgi_clients
    vehicle = _vehicle(fleet_client, job_client, battery=25.0)
    await vehicle.register_with_fleet_retry()

    await vehicle.tick()
    await vehicle.tick()
    assert fleet_service.get_vehicle("sim-vehicle-1").status == "charging"

    job = job_service.create_ride_job("c1", "us-west-2", *PIONEER_SQUARE, *POWELLS)
    assert job.status == "pending"
    await fleet_client.aclose()
    await job_client.aclose()


class RideCreatedAfterFirstPoll:
    """Job client whose first poll comes back empty just before a ride is dispatched to the vehicle."""

    def __init__(self, inner, job_service):
        self.inner = inner
        self.job_service = job_service
        self.job = None

    async def get_assigned_jobs(self, vehicle_id):
        jobs = await self.inner.get_assigned_jobs(vehicle_id)
        if self.job is None:
            self.job = self.job_service.create_ride_job("c1", "us-west-2", *PIONEER_SQUARE, *POWELLS)
        return jobs

    async def complete_job(self, job_id):
        await self.inner.complete_job(job_id)


async def test_assignment_between_poll_and_report_is_kept(asgi_clients, fleet_service, job_service):
    fleet_client, job_client = asgi_clients
    racing_jobs = RideCreatedAfterFirstPoll(job_client, job_service)
    vehicle = _vehicle(fleet_client, racing_jobs)
    await vehicle.register_with_fleet_retry()

    await vehicle.tick()
    job = racing_jobs.job
    assert job.assigned_vehicle_id == "sim-vehicle-1"
    assert vehicle.current_job is None
    stored = fleet_service.get_vehicle("sim-vehicle-1")
    assert (stored.status, stored.current_job_id) == ("busy", job.id)

    # Still out of the dispatch pool, so a second ride waits.
    second = job_service.create_ride_job("c2", "us-west-2", *PIONEER_SQUARE, *POWELLS)
    assert second.status == "pending"

    await vehicle.tick()
    assert vehicle.current_job_id == job.id
    stored = fleet_service.get_vehicle("sim-vehicle-1")
    assert (stored.status, stored.current_job_id) == ("busy", job.id)
    await fleet_client.aclose()
    await job_client.aclose()
