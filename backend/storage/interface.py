"""Storage contracts for the fleet directory (vehicles) and job ledger (jobs).

Every implementation raises NotFoundError for unknown ids and AlreadyExistsError
on duplicate creates, and returns copies so callers only change stored state
through these operations.
"""
from typing import Optional, Protocol

from storage.records import Job, Vehicle


class VehicleStorage(Protocol):
    def create_vehicle(self, vehicle: Vehicle) -> Vehicle: ...

    def get_vehicle(self, vehicle_id: str) -> Vehicle: ...

    def update_vehicle(self, vehicle: Vehicle) -> Vehicle: ...

    def get_vehicles_by_region_and_status(self, region: str, status: str) -> list[Vehicle]: ...

    def get_all_vehicles(self) -> list[Vehicle]: ...

    def update_vehicle_location(self, vehicle_id: str, lat: float, lng: float) -> None: ...

    def update_vehicle_location_and_status(
        self,
        vehicle_id: str,
        lat: float,
        lng: float,
        status: str,
        battery_level: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> None: ...

    def update_vehicle_status(
        self,
        vehicle_id: str,
        status: str,
        job_id: Optional[str] = None,
        *,
        expected_status: Optional[str] = None,
    ) -> None: ...


class JobStorage(Protocol):
    def create_job(self, job: Job) -> Job: ...

    def get_job(self, job_id: str) -> Job: ...

    def update_job(self, job: Job) -> Job: ...

    def get_jobs_by_status(self, status: str) -> list[Job]: ...

    def get_jobs_by_vehicle(self, vehicle_id: str) -> list[Job]: ...

    def get_all_jobs(self) -> list[Job]: ...

    def update_job_status(self, job_id: str, status: str, vehicle_id: Optional[str] = None) -> None: ...
