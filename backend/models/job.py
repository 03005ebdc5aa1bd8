"""Job model for DB persistence."""
from datetime import datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from models import Base


class Job(Base):
    """Job table: ride or delivery request, pricing and lifecycle timestamps."""

    __tablename__ = "job"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    job_type: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)
    assigned_vehicle_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    customer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    region: Mapped[str] = mapped_column(String(64), nullable=False)
    pickup_lat: Mapped[float] = mapped_column(Float, nullable=False)
    pickup_lng: Mapped[float] = mapped_column(Float, nullable=False)
    destination_lat: Mapped[float] = mapped_column(Float, nullable=False)
    destination_lng: Mapped[float] = mapped_column(Float, nullable=False)
    estimated_distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # {"restaurant_name": ..., "items": [...], "instructions": ...} for deliveries.
    delivery_details: Mapped[dict | None] = mapped_column(JSON(), nullable=True)
    fare_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    base_fare: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    distance_fare: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
