"""
Billing entries and entry resolution.

An entry is the billing account a plan hangs off: either a user or a guild.
Both share the same shape (`id`, raw `plan` document, `subscription`) so the
ledger treats them uniformly; the `kind` tag tells them apart.

Usage:
    context = BillingContext(user=user_entry, guild=guild_entry)
    classification = classifier.classify(context)
    entry = resolve_entry(context, classification)
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field

from .schemas import (
    BillingType,
    Classification,
    PlanLocation,
    Subscription,
    utc_now,
)


class UserRole(str, Enum):
    """Staff and perk roles a user can hold."""
    TESTER = "tester"
    INVESTOR = "investor"
    ADVERTISER = "advertiser"
    MODERATOR = "moderator"
    OWNER = "owner"


# Roles allowed to grant credit and seed plan balances
STAFF_ROLES = (UserRole.OWNER, UserRole.MODERATOR)


class UserMetadata(BaseModel):
    """Contact information of a user."""
    email: Optional[str] = None


class UserEntry(BaseModel):
    """User billing account."""
    kind: Literal["user"] = "user"
    id: str
    plan: Optional[Dict[str, Any]] = None  # raw persisted plan document
    subscription: Optional[Subscription] = None
    metadata: UserMetadata = Field(default_factory=UserMetadata)
    roles: List[str] = Field(default_factory=list)

    @property
    def location(self) -> PlanLocation:
        return PlanLocation.USER

    def has_role(self, *roles: UserRole) -> bool:
        """Whether the user holds any of the given roles."""
        return any(role.value in self.roles for role in roles)

    @property
    def is_staff(self) -> bool:
        return self.has_role(*STAFF_ROLES)


class GuildEntry(BaseModel):
    """Guild (group) billing account."""
    kind: Literal["guild"] = "guild"
    id: str
    plan: Optional[Dict[str, Any]] = None
    subscription: Optional[Subscription] = None

    @property
    def location(self) -> PlanLocation:
        return PlanLocation.GUILD


Entry = Union[UserEntry, GuildEntry]


class BillingContext(BaseModel):
    """The acting user and, when invoked inside one, the guild."""
    user: UserEntry
    guild: Optional[GuildEntry] = None


class Classifier(Protocol):
    """Entitlement resolver deciding the billing model and location."""

    def classify(self, context: BillingContext) -> Classification:
        ...


def resolve_entry(context: BillingContext, classification: Classification) -> Entry:
    """
    Pick the entry whose plan is charged or credited.

    Args:
        context: Acting user and optional guild
        classification: Classification computed for this context

    Returns:
        The guild entry for guild billing, the user entry otherwise
    """
    if classification.location == PlanLocation.GUILD and context.guild is not None:
        return context.guild
    return context.user


class SubscriptionClassifier:
    """
    Default classifier based on the entries' own subscription and plan state.

    Priority: active user subscription, active guild subscription,
    user plan, guild plan. A provisioned plan counts as premium even when
    exhausted so that its overview can still be shown.
    """

    def classify(self, context: BillingContext) -> Classification:
        now = utc_now()
        user, guild = context.user, context.guild

        if user.subscription is not None and user.subscription.is_active(now):
            return Classification(premium=True, type=BillingType.SUBSCRIPTION, location=PlanLocation.USER)

        if guild is not None and guild.subscription is not None and guild.subscription.is_active(now):
            return Classification(premium=True, type=BillingType.SUBSCRIPTION, location=PlanLocation.GUILD)

        if user.plan is not None:
            return Classification(premium=True, type=BillingType.PLAN, location=PlanLocation.USER)

        if guild is not None and guild.plan is not None:
            return Classification(premium=True, type=BillingType.PLAN, location=PlanLocation.GUILD)

        return Classification(premium=False, type=BillingType.PLAN, location=PlanLocation.USER)


__all__ = [
    "UserRole",
    "STAFF_ROLES",
    "UserMetadata",
    "UserEntry",
    "GuildEntry",
    "Entry",
    "BillingContext",
    "Classifier",
    "resolve_entry",
    "SubscriptionClassifier",
]
