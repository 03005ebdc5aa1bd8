"""Dispatch: read-only selection of the nearest available vehicle with enough range."""
import logging

from errors import NoVehicleAvailableError
from storage.interface import VehicleStorage
from storage.records import AVAILABLE, Vehicle
from utils.geo import distance_km

LOG = logging.getLogger(__name__)

# Multiplier on (distance to pickup + trip distance) covering approach, trip and reserve.
SAFETY_BUFFER = 1.2


def required_range_km(distance_to_pickup_km: float, trip_distance_km: float) -> float:
    """Battery range a vehicle needs to take a job."""
    return (distance_to_pickup_km + trip_distance_km) * SAFETY_BUFFER


def find_nearest_vehicle(
    vehicles: VehicleStorage,
    region: str,
    pickup_lat: float,
    pickup_lng: float,
    trip_distance_km: float,
) -> Vehicle:
    """
    Return the available vehicle in region closest to the pickup whose battery range
    covers required_range_km. Ties on distance go to the lowest vehicle id.

    Does not reserve the vehicle: committing it to a job is a separate assignment.
    Raises NoVehicleAvailableError when no candidate qualifies.
    """
    best: Vehicle | None = None
    best_key: tuple[float, str] | None = None

    for vehicle in vehicles.get_vehicles_by_region_and_status(region, AVAILABLE):
        to_pickup = distance_km(vehicle.location_lat, vehicle.location_lng, pickup_lat, pickup_lng)
        needed = required_range_km(to_pickup, trip_distance_km)
        if vehicle.battery_range_km < needed:
            LOG.debug(
                "Vehicle %s skipped: range %.1f km < required %.1f km",
                vehicle.id,
                vehicle.battery_range_km,
                needed,
            )
            continue
        key = (to_pickup, vehicle.id)
        if best_key is None or key < best_key:
            best, best_key = vehicle, key

    if best is None:
        raise NoVehicleAvailableError(
            f"no available vehicle in {region} with sufficient battery for {trip_distance_km:.2f} km trip"
        )
    return best
