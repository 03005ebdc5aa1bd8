"""Fleet dispatch service: FastAPI backend for vehicles, jobs, revenue and demo traffic."""
import logging
import os
import subprocess
import sys

from fastapi import FastAPI

# Dispatch, assignment and sweep activity is logged at INFO level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("services").setLevel(logging.INFO)
from fastapi.middleware.cors import CORSMiddleware

from api.demo import router as demo_router
from api.jobs import router as jobs_router
from api.vehicles import router as vehicles_router
from schemas.health import HealthResponse
from services.demo import DemoJobGenerator
from services.fleet_service import FleetService
from services.job_service import JobService
from services.processor import JobProcessor
from storage import MemoryJobStorage, MemoryVehicleStorage
from utils.config import (
    DEMO_MAX_ACTIVE_JOBS,
    DEMO_REGION,
    PENDING_JOB_INTERVAL_S,
    PORT,
    STORAGE_BACKEND,
    TELEMETRY_URL,
)
from utils.telemetry import build_telemetry_sink

LOG = logging.getLogger(__name__)

app = FastAPI(
    title="Fleet Dispatch Service",
    description="Autonomous ride and delivery fleet: vehicle directory, job dispatch and demo traffic",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vehicles_router, prefix="/api")
app.include_router(jobs_router, prefix="/api")
app.include_router(demo_router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
def api_health() -> HealthResponse:
    """Liveness check; reports which storage backend is active."""
    return HealthResponse(storage=STORAGE_BACKEND)


def _run_migrations() -> None:
    """Bring the database to the latest alembic revision."""
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")


def _build_storage():
    """Vehicle and job storage for the configured backend."""
    if STORAGE_BACKEND == "sql":
        from db import SessionLocal
        from storage.sql import SqlJobStorage, SqlVehicleStorage

        _run_migrations()
        return SqlVehicleStorage(SessionLocal), SqlJobStorage(SessionLocal)
    if STORAGE_BACKEND != "memory":
        raise RuntimeError(f"Unknown STORAGE_BACKEND {STORAGE_BACKEND!r} (expected 'memory' or 'sql')")
    return MemoryVehicleStorage(), MemoryJobStorage()


@app.on_event("startup")
async def startup() -> None:
    """Build storage and services, start the pending-job sweep."""
    vehicle_storage, job_storage = _build_storage()
    telemetry = build_telemetry_sink(TELEMETRY_URL)
    fleet_service = FleetService(vehicle_storage)
    job_service = JobService(job_storage, fleet_service, telemetry=telemetry)

    app.state.telemetry = telemetry
    app.state.fleet_service = fleet_service
    app.state.job_service = job_service
    app.state.job_processor = JobProcessor(job_service, interval_s=PENDING_JOB_INTERVAL_S)
    app.state.demo_generator = DemoJobGenerator(
        job_service, region=DEMO_REGION, max_active_jobs=DEMO_MAX_ACTIVE_JOBS
    )
    app.state.job_processor.start()
    LOG.info("Fleet dispatch service started with %s storage", STORAGE_BACKEND)


@app.on_event("shutdown")
async def shutdown() -> None:
    """Stop background tasks and close the telemetry sink."""
    await app.state.demo_generator.stop()
    await app.state.job_processor.stop()
    app.state.telemetry.close()


@app.get("/")
def root() -> dict:
    """Root info."""
    return {"service": "fleet-dispatch", "docs": "/docs", "health": "/api/health"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
