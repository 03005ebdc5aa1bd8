"""Vehicle and job records held by the fleet directory and job ledger."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Vehicle status
AVAILABLE = "available"
BUSY = "busy"
CHARGING = "charging"
MAINTENANCE = "maintenance"
VEHICLE_STATUSES = (AVAILABLE, BUSY, CHARGING, MAINTENANCE)

# Job status
PENDING = "pending"
ASSIGNED = "assigned"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
FAILED = "failed"
JOB_STATUSES = (PENDING, ASSIGNED, IN_PROGRESS, COMPLETED, FAILED)
ACTIVE_JOB_STATUSES = frozenset({PENDING, ASSIGNED})

# Job type
RIDE = "ride"
DELIVERY = "delivery"
JOB_TYPES = (RIDE, DELIVERY)

# 4.0 km per battery percent (400 km on a full pack).
DEFAULT_DRAIN_RATE_KM_PER_PERCENT = 4.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_reported_status(
    stored_status: str,
    stored_job_id: Optional[str],
    reported_status: str,
    reported_job_id: Optional[str],
) -> tuple[str, Optional[str]]:
    """Status and current_job_id to store after a vehicle's own position report.

    An "available" report from a vehicle that has not seen its assignment yet
    (stored busy with a job, report carries none) keeps the assignment. A busy
    report without a job id keeps the stored one. Any other status clears it.
    """
    if reported_status == AVAILABLE and stored_status == BUSY and stored_job_id and reported_job_id is None:
        return BUSY, stored_job_id
    if reported_status == BUSY:
        return BUSY, reported_job_id or stored_job_id
    return reported_status, None


@dataclass
class Vehicle:
    """Fleet directory entry. battery_range_km is derived from battery_level on every read."""

    id: str
    region: str
    status: str = AVAILABLE
    battery_level: float = 100.0
    location_lat: float = 0.0
    location_lng: float = 0.0
    current_job_id: Optional[str] = None
    vehicle_type: str = "sedan"
    drain_rate_km_per_percent: float = DEFAULT_DRAIN_RATE_KM_PER_PERCENT
    last_updated: Optional[datetime] = None

    @property
    def battery_range_km(self) -> float:
        return self.battery_level * self.drain_rate_km_per_percent


@dataclass
class DeliveryDetails:
    restaurant_name: str = ""
    items: list[str] = field(default_factory=list)
    instructions: str = ""


@dataclass
class Job:
    """Ride or delivery request as stored in the job ledger."""

    id: str
    job_type: str
    customer_id: str
    region: str
    pickup_lat: float
    pickup_lng: float
    destination_lat: float
    destination_lng: float
    estimated_distance_km: float = 0.0
    status: str = PENDING
    assigned_vehicle_id: Optional[str] = None
    delivery_details: Optional[DeliveryDetails] = None
    fare_amount: float = 0.0
    base_fare: float = 0.0
    distance_fare: float = 0.0
    created_at: datetime = field(default_factory=utcnow)
    assigned_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
