# Simulator core: vehicle state machine, routing, charging stations, service clients, fleet runner
from simulator_core.charging import ChargingStation, find_nearest_charging_station, get_charging_stations
from simulator_core.clients import AssignedJob, FleetServiceClient, JobServiceClient
from simulator_core.routing import Route, RoutePoint, RoutingService, straight_line_route
from simulator_core.runner import FleetSimulator
from simulator_core.vehicle import SimulatedVehicle

__all__ = [
    "AssignedJob",
    "ChargingStation",
    "FleetServiceClient",
    "FleetSimulator",
    "JobServiceClient",
    "Route",
    "RoutePoint",
    "RoutingService",
    "SimulatedVehicle",
    "find_nearest_charging_station",
    "get_charging_stations",
    "straight_line_route",
]
