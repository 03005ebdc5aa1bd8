# Schemas package
from .health import HealthResponse
from .jobs import JobCreate, JobResponse, RevenueResponse
from .vehicles import LocationUpdate, VehicleRegister, VehicleResponse

__all__ = [
    "HealthResponse",
    "JobCreate",
    "JobResponse",
    "LocationUpdate",
    "RevenueResponse",
    "VehicleRegister",
    "VehicleResponse",
]
