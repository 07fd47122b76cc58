"""Shared dependencies for API routes.

Billing context: the acting user, the guild the request was made in and
whether the user may manage that guild are passed as headers by the
chat front-end.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from plan_ledger.core.plan.entries import BillingContext
from plan_ledger.core.plan.service import PlanService, get_plan_service

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Billing context of a request plus the caller's guild permission."""
    billing: BillingContext
    can_manage_guild: Optional[bool] = None

    @property
    def user_id(self) -> str:
        return self.billing.user.id

    @property
    def guild_id(self) -> Optional[str]:
        return self.billing.guild.id if self.billing.guild else None


def get_service() -> PlanService:
    """Get the shared PlanService instance."""
    return get_plan_service()


async def get_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID")
) -> str:
    """
    Extract the acting user ID from the request header.

    Raises:
        HTTPException 400: If header is missing
    """
    if not x_user_id:
        raise HTTPException(
            status_code=400,
            detail="X-User-ID header required for billing operations"
        )
    return x_user_id


async def get_guild_id(
    x_guild_id: Optional[str] = Header(None, alias="X-Guild-ID")
) -> Optional[str]:
    """Extract the guild ID; absent for direct messages."""
    return x_guild_id or None


async def get_can_manage_guild(
    x_manage_guild: Optional[bool] = Header(None, alias="X-Manage-Guild")
) -> Optional[bool]:
    """
    Whether the acting user holds the manage permission in the guild.

    None when the front-end has no member context for the request.
    """
    return x_manage_guild


async def get_request_context(
    user_id: str = Depends(get_user_id),
    guild_id: Optional[str] = Depends(get_guild_id),
    can_manage_guild: Optional[bool] = Depends(get_can_manage_guild),
    service: PlanService = Depends(get_service),
) -> RequestContext:
    """
    Fetch the user (and guild) entries for the request.

    Missing entries are created on first contact.
    """
    billing = await service.fetch_context(user_id, guild_id)
    return RequestContext(billing=billing, can_manage_guild=can_manage_guild)


async def require_staff(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """
    Require the acting user to hold a staff role (owner or moderator).

    Raises:
        HTTPException 403: If the user is not staff
    """
    if not ctx.billing.user.is_staff:
        logger.warning(f"User {ctx.user_id} attempted a staff-only plan operation")
        raise HTTPException(
            status_code=403,
            detail="You must be a moderator to grant credit"
        )
    return ctx
