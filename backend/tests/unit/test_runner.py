"""Unit tests: fleet simulator startup and shutdown."""
import asyncio
import random

import pytest

from errors import ServiceError
from simulator_core.runner import FleetSimulator
from simulator_core.spawn_locations import PORTLAND_SPAWN_LOCATIONS
from simulator_core.vehicle import SimulatedVehicle

pytestmark = pytest.mark.unit


class RecordingFleetClient:
    def __init__(self, reject=()):
        self.reject = set(reject)
        self.registered = []
        self.reports = 0

    async def register_vehicle(self, vehicle):
        if vehicle["id"] in self.reject:
            raise ServiceError("rejected")
        self.registered.append(vehicle)
        return vehicle

    async def report_location(self, *args, **kwargs):
        self.reports += 1


class EmptyJobClient:
    async def get_assigned_jobs(self, vehicle_id):
        return []

    async def complete_job(self, job_id):
        pass


async def test_starts_vehicles_at_spawn_points_and_stops():
    fleet = RecordingFleetClient()
    simulator = FleetSimulator(
        fleet_client=fleet,
        job_client=EmptyJobClient(),
        region="us-west-2",
        vehicle_count=3,
        tick_interval_s=0.01,
        stagger_s=0,
        rng=random.Random(9),
    )
    assert await simulator.start() == 3
    assert [v["id"] for v in fleet.registered] == ["sim-vehicle-1", "sim-vehicle-2", "sim-vehicle-3"]
    spawn_points = {(s.lat, s.lng) for s in PORTLAND_SPAWN_LOCATIONS}
    assert all((v["location_lat"], v["location_lng"]) in spawn_points for v in fleet.registered)

    await asyncio.sleep(0.05)
    await asyncio.wait_for(simulator.stop(), timeout=1.0)
    assert fleet.reports >= 3


async def test_vehicle_that_cannot_register_is_skipped(monkeypatch):
    original = SimulatedVehicle.register_with_fleet_retry

    async def no_wait(seconds):
        pass

    async def quick_register(self, **kwargs):
        await original(self, max_attempts=2, sleep=no_wait)

    monkeypatch.setattr(SimulatedVehicle, "register_with_fleet_retry", quick_register)
    fleet = RecordingFleetClient(reject={"sim-vehicle-2"})
    simulator = FleetSimulator(
        fleet_client=fleet,
        job_client=EmptyJobClient(),
        region="us-west-2",
        vehicle_count=3,
        tick_interval_s=10,
        stagger_s=0,
    )
    try:
        assert await simulator.start() == 2
    finally:
        await simulator.stop()
    assert [v.id for v in simulator.vehicles] == ["sim-vehicle-1", "sim-vehicle-3"]


async def test_stop_during_registration_ends_startup():
    fleet = RecordingFleetClient(reject={"sim-vehicle-1", "sim-vehicle-2"})
    simulator = FleetSimulator(
        fleet_client=fleet,
        job_client=EmptyJobClient(),
        region="us-west-2",
        vehicle_count=2,
        stagger_s=0,
    )
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, stop.set)

    # Registration backoff alone would take minutes.
    assert await asyncio.wait_for(simulator.start(stop), timeout=2.0) == 0
    assert fleet.registered == []
    await simulator.stop()


async def test_start_with_stop_already_set_registers_nothing():
    fleet = RecordingFleetClient()
    simulator = FleetSimulator(
        fleet_client=fleet,
        job_client=EmptyJobClient(),
        region="us-west-2",
        vehicle_count=3,
    )
    stop = asyncio.Event()
    stop.set()
    assert await simulator.start(stop) == 0
    assert fleet.registered == []
