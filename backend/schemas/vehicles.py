"""Pydantic schemas for vehicle (fleet) API."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VehicleStatus = Literal["available", "busy", "charging", "maintenance"]


class VehicleRegister(BaseModel):
    """Payload a simulated vehicle sends to register. battery_range_km is recomputed server-side."""

    id: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    status: VehicleStatus = "available"
    battery_level: float = Field(..., ge=0, le=100)
    battery_range_km: Optional[float] = None
    location_lat: float = Field(..., ge=-90, le=90)
    location_lng: float = Field(..., ge=-180, le=180)
    vehicle_type: str = "sedan"


class VehicleResponse(BaseModel):
    """Vehicle in list/detail responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    region: str
    status: str
    battery_level: float
    battery_range_km: float
    location_lat: float
    location_lng: float
    current_job_id: Optional[str] = None
    vehicle_type: str
    last_updated: Optional[datetime] = None


class LocationUpdate(BaseModel):
    """Periodic position report. Status, battery and the job the vehicle is executing are optional."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    status: Optional[VehicleStatus] = None
    battery_level: Optional[float] = Field(default=None, ge=0, le=100)
    current_job_id: Optional[str] = None


class JobAssignment(BaseModel):
    """Payload for assigning a job to a vehicle."""

    job_id: str = Field(..., min_length=1)
