"""Fleet service: vehicle registration, position reports, job assignment and dispatch."""
import logging
from typing import Optional

from errors import InvalidStateError
from services.dispatcher import find_nearest_vehicle
from storage.interface import VehicleStorage
from storage.records import AVAILABLE, BUSY, CHARGING, MAINTENANCE, VEHICLE_STATUSES, Vehicle

LOG = logging.getLogger(__name__)

_STATUS_ORDER = {AVAILABLE: 0, BUSY: 1, CHARGING: 2, MAINTENANCE: 3}


class FleetService:
    """Operations on the fleet directory. The storage object is injected."""

    def __init__(self, storage: VehicleStorage) -> None:
        self.storage = storage

    def register_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Add a vehicle. Raises AlreadyExistsError for a duplicate id."""
        if vehicle.status not in VEHICLE_STATUSES:
            raise InvalidStateError(f"unknown vehicle status {vehicle.status!r}")
        created = self.storage.create_vehicle(vehicle)
        LOG.info(
            "Vehicle %s registered in %s at (%.5f, %.5f), battery %.1f%%",
            created.id,
            created.region,
            created.location_lat,
            created.location_lng,
            created.battery_level,
        )
        return created

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        return self.storage.get_vehicle(vehicle_id)

    def update_vehicle_location(self, vehicle_id: str, lat: float, lng: float) -> None:
        self.storage.update_vehicle_location(vehicle_id, lat, lng)

    def update_vehicle_location_and_status(
        self,
        vehicle_id: str,
        lat: float,
        lng: float,
        status: str,
        battery_level: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> None:
        """Apply a vehicle's own report. A busy report names its job; a stale "available" report does not undo an assignment."""
        if status not in VEHICLE_STATUSES:
            raise InvalidStateError(f"unknown vehicle status {status!r}")
        self.storage.update_vehicle_location_and_status(vehicle_id, lat, lng, status, battery_level, job_id)

    def assign_job(self, vehicle_id: str, job_id: str) -> None:
        """Mark the vehicle busy with job_id. Fails with InvalidStateError if it is no longer available."""
        self.storage.update_vehicle_status(vehicle_id, BUSY, job_id, expected_status=AVAILABLE)

    def complete_job(self, vehicle_id: str) -> None:
        """Release the vehicle: available, no current job."""
        self.storage.update_vehicle_status(vehicle_id, AVAILABLE, None)

    def find_nearest_available_vehicle(
        self,
        region: str,
        pickup_lat: float,
        pickup_lng: float,
        trip_distance_km: float,
    ) -> Vehicle:
        return find_nearest_vehicle(self.storage, region, pickup_lat, pickup_lng, trip_distance_km)

    def get_all_vehicles(self) -> list[Vehicle]:
        """All vehicles ordered available, busy, charging, maintenance, then by id."""
        vehicles = self.storage.get_all_vehicles()
        vehicles.sort(key=lambda v: (_STATUS_ORDER.get(v.status, len(_STATUS_ORDER)), v.id))
        return vehicles
