"""Health check schemas."""

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    service: str
    timestamp: str
