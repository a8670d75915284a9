"""Health check response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Overall service health with one entry per dependency check."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    checks: dict[str, str] = Field(default_factory=dict)
    timestamp: datetime
