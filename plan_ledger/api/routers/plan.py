"""Plan API endpoints: overview, status, provisioning and charge-ups."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from plan_ledger.core.plan.entries import resolve_entry
from plan_ledger.core.plan.exceptions import PlanAccessDeniedError
from plan_ledger.core.plan.schemas import PlanLocation
from plan_ledger.core.plan.service import PlanService

from ..dependencies import RequestContext, get_request_context, get_service, require_staff
from ..schemas.common import ErrorResponse
from ..schemas.plan import (
    CreatePlanRequest,
    CreditRequest,
    CreditResponse,
    OverviewResponse,
    PlanStatusResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/overview",
    response_model=OverviewResponse,
    operation_id="getPlanOverview",
    summary="Get the usage overview",
    responses={
        403: {"model": ErrorResponse, "description": "Guild plan viewed without the manage permission"},
        404: {"model": ErrorResponse, "description": "Plan billing without a provisioned plan"},
    },
)
async def get_overview(
    ctx: RequestContext = Depends(get_request_context),
    service: PlanService = Depends(get_service),
):
    """
    Build the plan/subscription overview for the caller.

    The overview is resolved to the guild when the guild carries the
    entitlement, to the user otherwise.
    """
    overview = service.build_overview(ctx.billing, can_manage_guild=ctx.can_manage_guild)
    return OverviewResponse(overview=overview)


@router.get(
    "/status",
    response_model=PlanStatusResponse,
    operation_id="getPlanStatus",
    summary="Get the resolved plan snapshot",
)
async def get_status(
    ctx: RequestContext = Depends(get_request_context),
    service: PlanService = Depends(get_service),
):
    """Return the normalized plan of the resolved entry and whether it has credit left."""
    classification = service.classify(ctx.billing)
    entry = resolve_entry(ctx.billing, classification)

    return PlanStatusResponse(
        entry_id=entry.id,
        location=entry.location,
        classification=classification,
        active=service.is_active(entry),
        plan=service.get_plan(entry),
    )


@router.post(
    "/",
    response_model=PlanStatusResponse,
    operation_id="createPlan",
    summary="Provision a plan",
    responses={
        400: {"model": ErrorResponse, "description": "Guild plan requested outside of a guild"},
        403: {"model": ErrorResponse, "description": "Missing manage permission or staff role"},
    },
)
async def create_plan(
    request: CreatePlanRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: PlanService = Depends(get_service),
):
    """
    Provision a plan on the user or the guild.

    Idempotent: an existing plan is returned unchanged. Only staff may
    provision a plan with a starting balance.
    """
    if request.amount and not ctx.billing.user.is_staff:
        raise HTTPException(
            status_code=403,
            detail="You must be a moderator to create a plan with a starting balance"
        )

    if request.location == PlanLocation.GUILD:
        if ctx.billing.guild is None:
            raise HTTPException(
                status_code=400,
                detail="X-Guild-ID header required to create a guild plan"
            )
        if ctx.can_manage_guild is not True:
            raise PlanAccessDeniedError(ctx.billing.guild.id)
        entry = ctx.billing.guild
    else:
        entry = ctx.billing.user

    plan = await service.create_plan(entry, request.amount)

    return PlanStatusResponse(
        entry_id=entry.id,
        location=entry.location,
        classification=service.classify(ctx.billing),
        active=service.is_active(entry),
        plan=plan,
    )


@router.post(
    "/credits",
    response_model=CreditResponse,
    operation_id="creditPlan",
    summary="Charge up a plan (staff only)",
    responses={
        403: {"model": ErrorResponse, "description": "Caller is not staff"},
        404: {"model": ErrorResponse, "description": "Resolved entry has no plan"},
    },
)
async def credit_plan(
    request: CreditRequest,
    ctx: RequestContext = Depends(require_staff),
    service: PlanService = Depends(get_service),
):
    """
    Append a credit to a plan's history and raise its total.

    Credits the entry named by `location` and `entry_id`, or the caller's
    resolved entry when no `entry_id` is given.
    """
    if request.entry_id:
        entry = await service.fetch_entry(request.location, request.entry_id)
    else:
        entry = resolve_entry(ctx.billing, service.classify(ctx.billing))

    credit = await service.credit(entry, request.type, request.amount, request.gateway)
    logger.info(f"Plan of {entry.kind} {entry.id} charged up by staff user {ctx.user_id}")

    return CreditResponse(
        entry_id=entry.id,
        location=entry.location,
        credit=credit,
        plan=service.get_plan(entry),
    )
