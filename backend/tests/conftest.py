# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["STORAGE_BACKEND"] = "memory"

import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from api.deps import get_demo_generator, get_fleet_service, get_job_service
from db import build_engine, init_db
from main import app
from services.demo import DemoJobGenerator
from services.fleet_service import FleetService
from services.job_service import JobService
from storage.memory import MemoryJobStorage, MemoryVehicleStorage
from storage.records import Vehicle
from utils.telemetry import TelemetrySink

SF_LAT, SF_LNG = 37.7749, -122.4194


class RecordingTelemetrySink(TelemetrySink):
    """Keeps emitted records in memory for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[str, dict]] = []

    def _send(self, stream, payload):
        self.records.append((stream, payload))

    def events(self, stream: str) -> list[str]:
        return [p.get("event") for s, p in self.records if s == stream]


def make_vehicle(vehicle_id="v1", region="us-west-2", lat=SF_LAT, lng=SF_LNG, battery_level=100.0, status="available"):
    return Vehicle(
        id=vehicle_id,
        region=region,
        status=status,
        battery_level=battery_level,
        location_lat=lat,
        location_lng=lng,
    )


@pytest.fixture
def vehicle_storage():
    """Fresh fleet directory per test."""
    return MemoryVehicleStorage()


@pytest.fixture
def job_storage():
    """Fresh job ledger per test."""
    return MemoryJobStorage()


@pytest.fixture
def telemetry():
    return RecordingTelemetrySink()


@pytest.fixture
def fleet_service(vehicle_storage):
    return FleetService(vehicle_storage)


@pytest.fixture
def job_service(job_storage, fleet_service, telemetry):
    return JobService(job_storage, fleet_service, telemetry=telemetry)


@pytest.fixture
def demo_generator(job_service):
    return DemoJobGenerator(job_service, region="us-west-2", max_active_jobs=5, rng=random.Random(7))


@pytest.fixture
def client(fleet_service, job_service, demo_generator):
    """API test client; services are overridden with the per-test instances, cleared on teardown."""
    app.dependency_overrides[get_fleet_service] = lambda: fleet_service
    app.dependency_overrides[get_job_service] = lambda: job_service
    app.dependency_overrides[get_demo_generator] = lambda: demo_generator
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sql_session_factory():
    """Isolated in-memory SQLite database per test."""
    engine = build_engine("sqlite://")
    init_db(engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    finally:
        engine.dispose()
