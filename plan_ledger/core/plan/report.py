"""
ReportBuilder - Turns ledger state into a usage overview.

The overview is presentation neutral: the rendering layer decides how the
expenses, credits and progress are drawn.
"""

import logging
from typing import Optional

from .entries import BillingContext, resolve_entry
from .exceptions import PlanAccessDeniedError, PlanNotProvisionedError
from .ledger import PlanLedger
from .schemas import (
    BillingType,
    Classification,
    Plan,
    PlanLocation,
    PlanOverview,
    PlanUsage,
)

logger = logging.getLogger(__name__)


def usage_percentage(plan: Plan) -> Optional[float]:
    """Share of the total that was used, in percent; None without any total."""
    if plan.total <= 0:
        return None
    return round(float(plan.used / plan.total * 100), 1)


class ReportBuilder:
    """Builds plan/subscription overviews for users and guilds."""

    def __init__(self, ledger: PlanLedger):
        self._ledger = ledger
        self._settings = ledger.settings

    def _can_purchase(
        self,
        context: BillingContext,
        classification: Classification,
        can_manage_guild: Optional[bool],
    ) -> bool:
        """Whether the purchase call-to-action should be shown."""
        if context.user.metadata.email is None:
            return False
        if classification.location == PlanLocation.GUILD:
            return can_manage_guild is True
        return True

    def _plan_usage(self, plan: Plan) -> PlanUsage:
        size = self._settings.report_history_size

        return PlanUsage(
            used=plan.used,
            total=plan.total,
            expenses=plan.expenses[-size:],
            credits=plan.history[-size:],
            exhausted=plan.exhausted,
            percentage=usage_percentage(plan),
        )

    def build_overview(
        self,
        context: BillingContext,
        classification: Optional[Classification] = None,
        can_manage_guild: Optional[bool] = None,
    ) -> PlanOverview:
        """
        Build the usage overview for a billing context.

        Args:
            context: Acting user and optional guild
            classification: Precomputed classification (default: ledger classifier)
            can_manage_guild: Whether the caller may manage the guild;
                None when there is no member context

        Returns:
            PlanOverview for the resolved location

        Raises:
            PlanAccessDeniedError: Guild plan viewed without the manage permission
            PlanNotProvisionedError: Plan billing without a plan on the entry
        """
        if classification is None:
            classification = self._ledger.classify(context)

        show_purchase = self._can_purchase(context, classification, can_manage_guild)
        overview = PlanOverview(
            premium=classification.premium,
            location=classification.location,
            show_purchase_button=show_purchase,
            shop_url=self._settings.shop_url,
        )

        if not classification.premium:
            if show_purchase:
                overview.purchase_options = [BillingType.PLAN, BillingType.SUBSCRIPTION]
            return overview

        entry = resolve_entry(context, classification)
        overview.billing_type = classification.type
        overview.show_settings_button = True

        if classification.type == BillingType.PLAN:
            if classification.location == PlanLocation.GUILD and can_manage_guild is not True:
                logger.info(f"Denied plan overview of guild {entry.id} to user {context.user.id}")
                raise PlanAccessDeniedError(entry.id)

            plan = self._ledger.get_plan(entry)
            if plan is None:
                raise PlanNotProvisionedError(entry.id, entry.location.value)

            overview.plan = self._plan_usage(plan)

        elif classification.type == BillingType.SUBSCRIPTION:
            overview.subscription = entry.subscription

        if show_purchase:
            overview.purchase_options = [classification.type]

        return overview


__all__ = ["ReportBuilder", "usage_percentage"]
