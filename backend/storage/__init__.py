# Storage: fleet directory (vehicles) and job ledger (jobs), in-memory or SQL
from storage.interface import JobStorage, VehicleStorage
from storage.memory import MemoryJobStorage, MemoryVehicleStorage
from storage.records import DeliveryDetails, Job, Vehicle

__all__ = [
    "DeliveryDetails",
    "Job",
    "JobStorage",
    "MemoryJobStorage",
    "MemoryVehicleStorage",
    "Vehicle",
    "VehicleStorage",
]
