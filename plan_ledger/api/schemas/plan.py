"""Plan API schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from plan_ledger.core.plan.schemas import (
    Classification,
    Credit,
    CreditGateway,
    CreditType,
    Plan,
    PlanLocation,
    PlanOverview,
)


class CreatePlanRequest(BaseModel):
    """Request to provision a plan. A starting balance requires a staff role."""
    location: PlanLocation = Field(default=PlanLocation.USER, examples=["user"])
    amount: Optional[Decimal] = Field(default=None, ge=0, examples=["5.00"])


class CreditRequest(BaseModel):
    """
    Staff request to charge up a plan.

    Without `entry_id` the caller's own resolved plan is credited.
    """
    type: CreditType = Field(..., examples=["web"])
    amount: Decimal = Field(..., gt=0, examples=["10.00"])
    gateway: Optional[CreditGateway] = Field(default=None, examples=["STRIPE"])
    location: PlanLocation = Field(default=PlanLocation.USER, examples=["user"])
    entry_id: Optional[str] = Field(default=None, examples=["123456789012345678"])


class PlanStatusResponse(BaseModel):
    """Plan snapshot of the resolved entry."""
    success: bool = True
    entry_id: str
    location: PlanLocation
    classification: Classification
    active: bool
    plan: Optional[Plan] = None


class CreditResponse(BaseModel):
    """Recorded charge-up and the resulting plan."""
    success: bool = True
    entry_id: str
    location: PlanLocation
    credit: Credit
    plan: Plan


class OverviewResponse(BaseModel):
    """Usage overview of the resolved entry."""
    success: bool = True
    overview: PlanOverview
