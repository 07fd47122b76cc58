"""
PlanLedger - Pay-as-you-go accounting for users and guilds.

Single responsibility: reading, creating and mutating plans. Every write
replaces the whole plan document through the entry repository.

Writes on the same entry are serialized with a per-entry asyncio.Lock. Under
the lock the plan is re-read from the repository, so entry objects fetched
by concurrent requests never write back a stale balance. The caller's entry
is refreshed with the persisted plan after each write.
Writers in other processes are not coordinated (last write wins).
"""

import asyncio
import logging
import weakref
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ValidationError

from .config import PlanSettings, get_plan_settings
from .entries import (
    BillingContext,
    Classifier,
    Entry,
    SubscriptionClassifier,
    resolve_entry,
)
from .exceptions import PlanNotProvisionedError
from .schemas import (
    EXPENSE_DATA_MODELS,
    Classification,
    Credit,
    CreditGateway,
    CreditType,
    Expense,
    ExpenseType,
    Plan,
)

logger = logging.getLogger(__name__)

Target = Union[Entry, BillingContext]
Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    """Convert a numeric value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _validate_items(raw: Any, model: type, field: str) -> list:
    """Validate a persisted list field, dropping entries that don't parse."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning(f"Malformed plan field '{field}' ({type(raw).__name__}), resetting to empty")
        return []

    items = []
    for item in raw:
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {field} entry: {e.error_count()} validation error(s)")
    return items


def normalize_plan(raw: Optional[Dict[str, Any]]) -> Optional[Plan]:
    """
    Normalize a persisted plan document into a Plan snapshot.

    Missing totals default to 0, missing or malformed sequences to empty.

    Args:
        raw: Plan document as stored on the entry

    Returns:
        Plan, or None if the entry has no plan
    """
    if raw is None:
        return None

    total = raw.get("total")
    used = raw.get("used")

    return Plan(
        total=to_decimal(total) if total is not None else Decimal("0"),
        used=to_decimal(used) if used is not None else Decimal("0"),
        expenses=_validate_items(raw.get("expenses"), Expense, "expenses"),
        history=_validate_items(raw.get("history"), Credit, "history"),
    )


class PlanLedger:
    """
    Plan ledger core.

    Responsibilities:
    - Resolve the entry a billing request targets
    - Provide normalized plan snapshots
    - Apply expenses (with bonus rate) and credits
    - Provision new plans
    """

    def __init__(
        self,
        repository,
        classifier: Optional[Classifier] = None,
        settings: Optional[PlanSettings] = None,
    ):
        """
        Initialize PlanLedger.

        Args:
            repository: Persistence port exposing `fetch_entry(kind, id)`
                and `update_entry(entry, fields)`
            classifier: Entitlement classifier (default: SubscriptionClassifier)
            settings: Pricing and history settings (default: environment)
        """
        self._repository = repository
        self._classifier = classifier or SubscriptionClassifier()
        self._settings = settings or get_plan_settings()
        # Locks live only while a write holds or awaits them
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @property
    def settings(self) -> PlanSettings:
        return self._settings

    # =========================================================================
    # Resolution
    # =========================================================================

    def classify(self, context: BillingContext) -> Classification:
        """Classify a billing context through the configured classifier."""
        return self._classifier.classify(context)

    def resolve(self, target: Target) -> Entry:
        """Resolve a billing context to its authoritative entry."""
        if isinstance(target, BillingContext):
            return resolve_entry(target, self.classify(target))
        return target

    def _lock_for(self, entry: Entry) -> asyncio.Lock:
        key = f"{entry.kind}:{entry.id}"
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    # =========================================================================
    # Reads
    # =========================================================================

    def get_plan(self, target: Target) -> Optional[Plan]:
        """
        Get a normalized snapshot of the entry's plan.

        Returns:
            Plan, or None if the entry has no plan
        """
        return normalize_plan(self.resolve(target).plan)

    def is_active(self, target: Target) -> bool:
        """Whether the entry has a plan with credit left."""
        plan = self.get_plan(target)
        if plan is None:
            return False
        return plan.total - plan.used > 0

    # =========================================================================
    # Writes
    # =========================================================================

    async def _refresh(self, entry: Entry) -> Optional[Plan]:
        """Re-read the entry's plan from the repository into the caller's entry."""
        stored = await self._repository.fetch_entry(entry.kind, entry.id)
        entry.plan = stored.plan
        return self.get_plan(entry)

    async def _write(self, entry: Entry, plan: Plan) -> None:
        updated = await self._repository.update_entry(
            entry, {"plan": plan.model_dump(mode="json")}
        )
        entry.plan = updated.plan

    def _expense_data(
        self, type: ExpenseType, data: Union[BaseModel, Dict[str, Any], None]
    ) -> Optional[Dict[str, Any]]:
        if data is None:
            return None
        if not isinstance(data, BaseModel):
            data = EXPENSE_DATA_MODELS[type].model_validate(data)
        return data.model_dump(mode="json", exclude_none=True)

    async def apply_expense(
        self,
        target: Target,
        type: ExpenseType,
        used: Amount,
        data: Union[BaseModel, Dict[str, Any], None] = None,
        bonus: Amount = Decimal("0"),
    ) -> Optional[Expense]:
        """
        Deduct an expense from the entry's plan.

        The bonus rate inflates the deduction applied to the running total;
        the recorded expense keeps the raw `used` amount.

        Args:
            target: Entry or billing context to charge
            type: Expense category
            used: Raw cost of the usage
            data: Category-specific payload
            bonus: Markup rate applied on top of `used`

        Returns:
            The recorded Expense, or None if the entry has no plan
        """
        entry = self.resolve(target)
        used = to_decimal(used)
        bonus = to_decimal(bonus)

        async with self._lock_for(entry):
            plan = await self._refresh(entry)
            if plan is None:
                logger.debug(f"Skipping {type.value} expense for {entry.kind} {entry.id}: no plan")
                return None

            expense = Expense(type=type, used=used, data=self._expense_data(type, data))

            additional = used + used * bonus
            updated_used = max(plan.used + additional, Decimal("0"))

            cap = self._settings.max_expense_history
            kept = plan.expenses[-(cap - 1):] if cap > 1 else []

            await self._write(
                entry,
                plan.model_copy(update={"expenses": [*kept, expense], "used": updated_used}),
            )

        logger.debug(
            f"Applied {type.value} expense of {used} (bonus rate {bonus}) "
            f"to {entry.kind} {entry.id}: used={updated_used}"
        )
        return expense

    async def apply_credit(
        self,
        target: Target,
        type: CreditType,
        amount: Amount,
        gateway: Optional[CreditGateway] = None,
    ) -> Credit:
        """
        Add a charge-up to the entry's plan.

        Args:
            target: Entry or billing context to credit
            type: Credit type ('web', 'grant')
            amount: Amount charged up
            gateway: Payment gateway used, if any

        Returns:
            The recorded Credit

        Raises:
            PlanNotProvisionedError: If the entry has no plan
        """
        entry = self.resolve(target)
        credit = Credit(type=type, amount=to_decimal(amount), gateway=gateway)

        async with self._lock_for(entry):
            plan = await self._refresh(entry)
            if plan is None:
                raise PlanNotProvisionedError(entry.id, entry.location.value)

            updated_total = plan.total + credit.amount

            await self._write(
                entry,
                plan.model_copy(update={"history": [*plan.history, credit], "total": updated_total}),
            )

        logger.info(
            f"Credited {credit.amount} ({type.value}"
            f"{f', {gateway.value}' if gateway else ''}) to {entry.kind} {entry.id}: total={updated_total}"
        )
        return credit

    async def create_plan(self, target: Target, amount: Optional[Amount] = None) -> Plan:
        """
        Provision a plan for the entry.

        Returns the existing plan unchanged if one is already there.

        Args:
            target: Entry or billing context to provision
            amount: Initial total (default: 0)

        Returns:
            The entry's plan
        """
        entry = self.resolve(target)

        async with self._lock_for(entry):
            existing = await self._refresh(entry)
            if existing is not None:
                return existing

            plan = Plan(total=to_decimal(amount) if amount is not None else Decimal("0"))
            await self._write(entry, plan)

        logger.info(f"Created plan for {entry.kind} {entry.id} with total={plan.total}")
        return plan


__all__ = [
    "PlanLedger",
    "normalize_plan",
    "to_decimal",
]
