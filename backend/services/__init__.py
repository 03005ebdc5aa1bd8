# Services: dispatch, fleet directory operations, job orchestration, pricing, background sweeps
from services.dispatcher import SAFETY_BUFFER, find_nearest_vehicle
from services.fleet_service import FleetService
from services.job_service import JobService
from services.pricing import Fare, PricingConfig

__all__ = [
    "Fare",
    "FleetService",
    "JobService",
    "PricingConfig",
    "SAFETY_BUFFER",
    "find_nearest_vehicle",
]
