"""SQLAlchemy models for the SQL storage backend (vehicle and job tables)."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by the vehicle and job tables."""
