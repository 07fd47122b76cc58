"""Request and response schemas for the plan API."""

from .common import ErrorResponse, HealthStatus, HealthStatusEnum
from .plan import (
    CreatePlanRequest,
    CreditRequest,
    CreditResponse,
    OverviewResponse,
    PlanStatusResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthStatus",
    "HealthStatusEnum",
    "CreatePlanRequest",
    "CreditRequest",
    "CreditResponse",
    "OverviewResponse",
    "PlanStatusResponse",
]
