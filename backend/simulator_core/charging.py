"""Charging stations per region and nearest-station lookup."""
from dataclasses import dataclass

from utils.geo import distance_km


@dataclass(frozen=True)
class ChargingStation:
    id: str
    lat: float
    lng: float


PORTLAND_STATIONS: tuple[ChargingStation, ...] = (
    ChargingStation("pioneer-place", 45.5188, -122.6746),
    ChargingStation("lloyd-center", 45.5311, -122.6536),
    ChargingStation("ohsu-campus", 45.4993, -122.6859),
    ChargingStation("pdx-airport", 45.5898, -122.5951),
    ChargingStation("hawthorne-whole-foods", 45.5122, -122.6208),
)

DEFAULT_STATIONS: tuple[ChargingStation, ...] = (
    ChargingStation("default-station-1", 37.7749, -122.4194),
    ChargingStation("default-station-2", 37.7849, -122.4094),
)

_STATIONS_BY_REGION = {"us-west-2": PORTLAND_STATIONS}


def get_charging_stations(region: str) -> tuple[ChargingStation, ...]:
    """Stations for region; regions without their own set use the defaults."""
    return _STATIONS_BY_REGION.get(region, DEFAULT_STATIONS)


def find_nearest_charging_station(region: str, lat: float, lng: float) -> ChargingStation:
    """Nearest station in region. With no stations at all, charge where the vehicle stands."""
    stations = get_charging_stations(region)
    if not stations:
        return ChargingStation("emergency-station", lat, lng)
    return min(stations, key=lambda s: distance_km(lat, lng, s.lat, s.lng))
