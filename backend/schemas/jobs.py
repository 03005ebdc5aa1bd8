"""Pydantic schemas for job API."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DeliveryDetailsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    restaurant_name: str = ""
    items: list[str] = Field(default_factory=list)
    instructions: str = ""


class JobCreate(BaseModel):
    """Payload for creating a ride or delivery job."""

    job_type: Literal["ride", "delivery"]
    customer_id: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    destination_lat: float = Field(..., ge=-90, le=90)
    destination_lng: float = Field(..., ge=-180, le=180)
    delivery_details: Optional[DeliveryDetailsSchema] = None


class JobResponse(BaseModel):
    """Job in list/detail responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    job_type: str
    status: str
    assigned_vehicle_id: Optional[str] = None
    pickup_lat: float
    pickup_lng: float
    destination_lat: float
    destination_lng: float
    estimated_distance_km: float
    customer_id: str
    region: str
    delivery_details: Optional[DeliveryDetailsSchema] = None
    fare_amount: float
    base_fare: float
    distance_fare: float
    created_at: datetime
    assigned_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class RevenueResponse(BaseModel):
    """Revenue over completed jobs."""

    total_revenue: float
    ride_revenue: float
    delivery_revenue: float
    completed_jobs: int
    ride_count: int
    delivery_count: int
    avg_ride_fare: float
    avg_delivery_fare: float


class ActiveJobCount(BaseModel):
    active_jobs: int


class ProcessPendingResponse(BaseModel):
    message: str = "Pending jobs processed"
    assigned: int


class DemoStatus(BaseModel):
    running: bool
    status: str = "ok"
