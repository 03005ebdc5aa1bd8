"""Vehicle model for DB persistence."""
from datetime import datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class Vehicle(Base):
    """Vehicle table: identity, region, status, battery, position, current job."""

    __tablename__ = "vehicle"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    region: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="available", index=True)
    # Float, not Numeric: fractional drain must survive a round trip.
    battery_level: Mapped[float] = mapped_column(Float, nullable=False)
    drain_rate_km_per_percent: Mapped[float] = mapped_column(Float, nullable=False, default=4.0)
    location_lat: Mapped[float] = mapped_column(Float, nullable=False)
    location_lng: Mapped[float] = mapped_column(Float, nullable=False)
    current_job_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    vehicle_type: Mapped[str] = mapped_column(String(32), nullable=False, default="sedan")
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
