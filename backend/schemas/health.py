"""Health check response schema."""
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response for GET /api/health: service name and active storage backend."""

    status: str = "ok"
    service: str = "fleet-dispatch"
    storage: str = "memory"
