"""Common schema models shared across API endpoints."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field


class HealthStatusEnum(str, Enum):
    """Health status values for service components."""
    healthy = "healthy"
    unhealthy = "unhealthy"
    degraded = "degraded"


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = Field(default=False, examples=[False])
    error: str = Field(..., examples=["You don't have a pay-as-you-go plan yet"])
    status_code: Optional[int] = Field(default=None, examples=[404])
    details: Optional[Any] = None
    request_id: Optional[str] = Field(default=None, examples=["a1b2c3d4"])


class HealthStatus(BaseModel):
    """Service health status."""
    status: HealthStatusEnum = Field(default=HealthStatusEnum.healthy, examples=["healthy"])
    version: str = Field(default="1.0.0", examples=["1.0.0"])
    timestamp: datetime
    components: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
