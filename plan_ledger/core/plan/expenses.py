"""
ExpenseRecorder - Per-category expense pricing.

Each method computes the raw cost of one kind of usage from the pricing
settings, attaches the category payload and hands it to the ledger together
with the category's bonus rate. Expenses are only recorded after the usage
was delivered, so callers invoke these once the provider call succeeded.
"""

from decimal import Decimal
from typing import Optional

from .config import PlanSettings
from .ledger import PlanLedger, Target, Amount, to_decimal
from .schemas import (
    ChatExpenseData,
    ChatTokens,
    DallEExpenseData,
    DescribeExpenseData,
    Expense,
    ExpenseType,
    ImageExpenseData,
    SummaryExpenseData,
    VideoExpenseData,
)

_MS_PER_SECOND = Decimal("1000")
_TOKENS_PER_UNIT = Decimal("1000")


class ExpenseRecorder:
    """Records usage expenses on the plan ledger, one method per category."""

    def __init__(self, ledger: PlanLedger, settings: Optional[PlanSettings] = None):
        self._ledger = ledger
        self._settings = settings or ledger.settings

    @property
    def ledger(self) -> PlanLedger:
        return self._ledger

    async def expense_for_chat(
        self,
        target: Target,
        used: Amount,
        model: str,
        prompt_tokens: Optional[int] = None,
        completion_tokens: Optional[int] = None,
        duration: Optional[int] = None,
    ) -> Optional[Expense]:
        """
        Record a conversational generation; `used` is the already computed cost.
        """
        tokens = None
        if prompt_tokens is not None and completion_tokens is not None:
            tokens = ChatTokens(prompt=prompt_tokens, completion=completion_tokens)

        return await self._ledger.apply_expense(
            target,
            ExpenseType.CHAT,
            used=to_decimal(used),
            data=ChatExpenseData(model=model, tokens=tokens, duration=duration),
            bonus=self._settings.chat_bonus_rate,
        )

    async def expense_for_image(self, target: Target, kudos: int) -> Optional[Expense]:
        """Record a community image generation priced in kudos."""
        return await self._ledger.apply_expense(
            target,
            ExpenseType.IMAGE,
            used=Decimal(kudos) / self._settings.image_kudos_per_unit,
            data=ImageExpenseData(kudos=kudos),
            bonus=self._settings.image_bonus_rate,
        )

    async def expense_for_dalle_image(self, target: Target, count: int) -> Optional[Expense]:
        """Record an external provider image generation of `count` images."""
        return await self._ledger.apply_expense(
            target,
            ExpenseType.DALLE,
            used=Decimal(count) * self._settings.dalle_price_per_image,
            data=DallEExpenseData(count=count),
            bonus=self._settings.dalle_bonus_rate,
        )

    async def expense_for_image_description(self, target: Target, duration: int) -> Optional[Expense]:
        """Record an image description that took `duration` milliseconds."""
        return await self._ledger.apply_expense(
            target,
            ExpenseType.DESCRIBE,
            used=Decimal(duration) / _MS_PER_SECOND * self._settings.describe_price_per_second,
            data=DescribeExpenseData(duration=duration),
            bonus=self._settings.describe_bonus_rate,
        )

    def video_cost(self, duration: int, model_id: str) -> Decimal:
        """Raw cost of a generated video; flat-rate models ignore the duration."""
        if model_id in self._settings.video_flat_rate_models:
            return self._settings.video_flat_price
        return Decimal(duration) / _MS_PER_SECOND * self._settings.video_price_per_second

    async def expense_for_video(self, target: Target, duration: int, model_id: str) -> Optional[Expense]:
        """Record a video generation of `duration` milliseconds."""
        return await self._ledger.apply_expense(
            target,
            ExpenseType.VIDEO,
            used=self.video_cost(duration, model_id),
            data=VideoExpenseData(duration=duration),
            bonus=self._settings.video_bonus_rate,
        )

    async def expense_for_summary(
        self,
        target: Target,
        prompt_tokens: int,
        completion_tokens: int,
        url: str,
    ) -> Optional[Expense]:
        """Record a content summarization of `url`."""
        total = prompt_tokens + completion_tokens

        return await self._ledger.apply_expense(
            target,
            ExpenseType.SUMMARY,
            used=Decimal(total) / _TOKENS_PER_UNIT * self._settings.summary_price_per_1k_tokens,
            data=SummaryExpenseData(tokens=total, url=url),
            bonus=self._settings.summary_bonus_rate,
        )


__all__ = ["ExpenseRecorder"]
