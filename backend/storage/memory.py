"""In-memory vehicle and job storage guarded by a lock per store."""
import copy
import threading
from typing import Optional

from errors import AlreadyExistsError, InvalidStateError, NotFoundError
from storage.records import ASSIGNED, COMPLETED, Job, Vehicle, resolve_reported_status, utcnow


class MemoryVehicleStorage:
    """Fleet directory backed by a dict. Safe for concurrent callers."""

    def __init__(self) -> None:
        self._vehicles: dict[str, Vehicle] = {}
        self._lock = threading.RLock()

    def _get(self, vehicle_id: str) -> Vehicle:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"vehicle {vehicle_id} not found")
        return vehicle

    def create_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            if vehicle.id in self._vehicles:
                raise AlreadyExistsError(f"vehicle {vehicle.id} already exists")
            stored = copy.deepcopy(vehicle)
            stored.last_updated = utcnow()
            self._vehicles[stored.id] = stored
            return copy.deepcopy(stored)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        with self._lock:
            return copy.deepcopy(self._get(vehicle_id))

    def update_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            existing = self._get(vehicle.id)
            stored = copy.deepcopy(vehicle)
            # id and region never change after registration
            stored.region = existing.region
            stored.last_updated = utcnow()
            self._vehicles[stored.id] = stored
            return copy.deepcopy(stored)

    def get_vehicles_by_region_and_status(self, region: str, status: str) -> list[Vehicle]:
        with self._lock:
            return [
                copy.deepcopy(v)
                for v in self._vehicles.values()
                if v.region == region and v.status == status
            ]

    def get_all_vehicles(self) -> list[Vehicle]:
        with self._lock:
            return [copy.deepcopy(v) for v in self._vehicles.values()]

    def update_vehicle_location(self, vehicle_id: str, lat: float, lng: float) -> None:
        with self._lock:
            vehicle = self._get(vehicle_id)
            vehicle.location_lat = lat
            vehicle.location_lng = lng
            vehicle.last_updated = utcnow()

    def update_vehicle_location_and_status(
        self,
        vehicle_id: str,
        lat: float,
        lng: float,
        status: str,
        battery_level: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> None:
        with self._lock:
            vehicle = self._get(vehicle_id)
            vehicle.location_lat = lat
            vehicle.location_lng = lng
            vehicle.status, vehicle.current_job_id = resolve_reported_status(
                vehicle.status, vehicle.current_job_id, status, job_id
            )
            if battery_level is not None:
                vehicle.battery_level = float(battery_level)
            vehicle.last_updated = utcnow()

    def update_vehicle_status(
        self,
        vehicle_id: str,
        status: str,
        job_id: Optional[str] = None,
        *,
        expected_status: Optional[str] = None,
    ) -> None:
        """Set status and current_job_id together. With expected_status, acts as compare-and-set."""
        with self._lock:
            vehicle = self._get(vehicle_id)
            if expected_status is not None and vehicle.status != expected_status:
                raise InvalidStateError(
                    f"vehicle {vehicle_id} is {vehicle.status}, expected {expected_status}"
                )
            vehicle.status = status
            vehicle.current_job_id = job_id
            vehicle.last_updated = utcnow()


class MemoryJobStorage:
    """Job ledger backed by an insertion-ordered dict. Safe for concurrent callers."""

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.RLock()

    def _get(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError(f"job {job_id} not found")
        return job

    def create_job(self, job: Job) -> Job:
        with self._lock:
            if job.id in self._jobs:
                raise AlreadyExistsError(f"job {job.id} already exists")
            self._jobs[job.id] = copy.deepcopy(job)
            return copy.deepcopy(job)

    def get_job(self, job_id: str) -> Job:
        with self._lock:
            return copy.deepcopy(self._get(job_id))

    def update_job(self, job: Job) -> Job:
        with self._lock:
            self._get(job.id)
            self._jobs[job.id] = copy.deepcopy(job)
            return copy.deepcopy(job)

    def get_jobs_by_status(self, status: str) -> list[Job]:
        with self._lock:
            return [copy.deepcopy(j) for j in self._jobs.values() if j.status == status]

    def get_jobs_by_vehicle(self, vehicle_id: str) -> list[Job]:
        with self._lock:
            return [
                copy.deepcopy(j)
                for j in self._jobs.values()
                if j.assigned_vehicle_id == vehicle_id
            ]

    def get_all_jobs(self) -> list[Job]:
        with self._lock:
            return [copy.deepcopy(j) for j in self._jobs.values()]

    def update_job_status(self, job_id: str, status: str, vehicle_id: Optional[str] = None) -> None:
        with self._lock:
            job = self._get(job_id)
            job.status = status
            if vehicle_id is not None:
                job.assigned_vehicle_id = vehicle_id
            now = utcnow()
            if status == ASSIGNED:
                job.assigned_at = now
            elif status == COMPLETED:
                job.completed_at = now
