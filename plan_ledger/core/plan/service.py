"""
PlanService - Facade for the plan ledger.

Unified interface over the focused components:
- PlanLedger: plan reads and writes
- ExpenseRecorder: per-category expense pricing
- ReportBuilder: usage overviews

The entry repository is chosen from the environment: PostgreSQL when the
database is enabled, the in-memory repository otherwise.
"""

import logging
from typing import Optional

from .config import PlanSettings
from .entries import BillingContext, Classifier, Entry
from .expenses import ExpenseRecorder
from .ledger import Amount, PlanLedger, Target
from .report import ReportBuilder
from .schemas import (
    Classification,
    Credit,
    CreditGateway,
    CreditType,
    Plan,
    PlanLocation,
    PlanOverview,
)

logger = logging.getLogger(__name__)


class PlanService:
    """Facade wiring the ledger, the expense recorder and the report builder."""

    def __init__(
        self,
        repository,
        classifier: Optional[Classifier] = None,
        settings: Optional[PlanSettings] = None,
    ):
        self.repository = repository
        self.ledger = PlanLedger(repository, classifier=classifier, settings=settings)
        self.expenses = ExpenseRecorder(self.ledger)
        self.reports = ReportBuilder(self.ledger)
        logger.info(f"PlanService initialized with {type(repository).__name__}")

    # =========================================================================
    # Entries
    # =========================================================================

    async def fetch_context(self, user_id: str, guild_id: Optional[str] = None) -> BillingContext:
        """Fetch the user (and guild) entries of a request."""
        return await self.repository.fetch_context(user_id, guild_id)

    async def fetch_entry(self, location: PlanLocation, entry_id: str) -> Entry:
        """Fetch a single user or guild entry."""
        return await self.repository.fetch_entry(location.value, entry_id)

    def classify(self, context: BillingContext) -> Classification:
        return self.ledger.classify(context)

    # =========================================================================
    # Ledger (delegates to PlanLedger)
    # =========================================================================

    def get_plan(self, target: Target) -> Optional[Plan]:
        return self.ledger.get_plan(target)

    def is_active(self, target: Target) -> bool:
        return self.ledger.is_active(target)

    async def create_plan(self, target: Target, amount: Optional[Amount] = None) -> Plan:
        return await self.ledger.create_plan(target, amount)

    async def credit(
        self,
        target: Target,
        type: CreditType,
        amount: Amount,
        gateway: Optional[CreditGateway] = None,
    ) -> Credit:
        return await self.ledger.apply_credit(target, type, amount, gateway)

    # =========================================================================
    # Reports (delegates to ReportBuilder)
    # =========================================================================

    def build_overview(
        self,
        context: BillingContext,
        can_manage_guild: Optional[bool] = None,
    ) -> PlanOverview:
        return self.reports.build_overview(context, can_manage_guild=can_manage_guild)


# Module-level instance for convenience
_plan_service: Optional[PlanService] = None


def get_plan_service() -> PlanService:
    """Get or create the PlanService instance."""
    global _plan_service
    if _plan_service is None:
        from plan_ledger.db.connection import db
        from plan_ledger.db.repositories import InMemoryEntryRepository, SqlEntryRepository

        if db.config.enabled:
            repository = SqlEntryRepository(db)
        else:
            logger.warning("Database disabled, plans are kept in memory only")
            repository = InMemoryEntryRepository()

        _plan_service = PlanService(repository)
    return _plan_service


def reset_plan_service() -> None:
    """Drop the cached PlanService (primarily for testing)."""
    global _plan_service
    _plan_service = None


__all__ = [
    "PlanService",
    "get_plan_service",
    "reset_plan_service",
]
