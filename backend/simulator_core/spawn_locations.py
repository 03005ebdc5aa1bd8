"""Safe spawn points for simulated vehicles (Portland parking lots, transit hubs and parks)."""
import random
from typing import NamedTuple, Optional


class SpawnLocation(NamedTuple):
    name: str
    lat: float
    lng: float


PORTLAND_SPAWN_LOCATIONS: tuple[SpawnLocation, ...] = (
    # Downtown parking
    SpawnLocation("Pioneer Courthouse Square", 45.5188, -122.6793),
    SpawnLocation("Union Station Parking", 45.5289, -122.6765),
    SpawnLocation("Portland Building Lot", 45.5145, -122.6794),
    # Shopping centers
    SpawnLocation("Lloyd Center Parking", 45.5311, -122.6536),
    SpawnLocation("Pioneer Place Garage", 45.5188, -122.6746),
    # Hospital and university
    SpawnLocation("OHSU Campus Parking", 45.4993, -122.6859),
    SpawnLocation("Portland State Parking", 45.5118, -122.6839),
    # Neighborhood commercial
    SpawnLocation("Hawthorne District", 45.5122, -122.6208),
    SpawnLocation("Alberta Arts District", 45.5581, -122.6656),
    SpawnLocation("Mississippi District", 45.5459, -122.6759),
    SpawnLocation("Pearl District", 45.5266, -122.6908),
    SpawnLocation("NW 23rd Avenue", 45.5298, -122.6979),
    # Transit hubs
    SpawnLocation("PDX Airport Pickup", 45.5898, -122.5951),
    SpawnLocation("Eastbank Esplanade", 45.5152, -122.6647),
    # Parks
    SpawnLocation("Washington Park", 45.5099, -122.7161),
    SpawnLocation("Laurelhurst Park", 45.5162, -122.6295),
    SpawnLocation("Mount Tabor Park", 45.5118, -122.5933),
)


def random_spawn_location(rng: Optional[random.Random] = None) -> SpawnLocation:
    return (rng or random).choice(PORTLAND_SPAWN_LOCATIONS)
