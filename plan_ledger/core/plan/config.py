"""
Plan ledger configuration.

All settings are configurable via environment variables with PLAN_ prefix,
e.g. PLAN_DALLE_PRICE_PER_IMAGE=0.04 or PLAN_VIDEO_FLAT_RATE_MODELS='["gen2"]'.
"""

from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from plan_ledger import constants


class PlanSettings(BaseSettings):
    """Pricing policy and history limits for the plan ledger."""

    model_config = SettingsConfigDict(env_prefix="PLAN_", extra="ignore")

    # History limits
    max_expense_history: int = Field(
        default=constants.PLAN_MAX_EXPENSE_HISTORY,
        ge=1,
        description="Maximum number of expenses kept on a plan",
    )
    report_history_size: int = Field(
        default=constants.PLAN_REPORT_HISTORY_SIZE,
        ge=1,
        description="Number of expenses/credits shown in an overview",
    )

    # Pricing
    image_kudos_per_unit: Decimal = Field(
        default=constants.IMAGE_KUDOS_PER_UNIT,
        gt=0,
        description="Kudos that cost one unit of currency",
    )
    dalle_price_per_image: Decimal = Field(default=constants.DALLE_PRICE_PER_IMAGE)
    describe_price_per_second: Decimal = Field(default=constants.DESCRIBE_PRICE_PER_SECOND)
    video_price_per_second: Decimal = Field(default=constants.VIDEO_PRICE_PER_SECOND)
    video_flat_price: Decimal = Field(default=constants.VIDEO_FLAT_PRICE)
    video_flat_rate_models: List[str] = Field(
        default_factory=lambda: list(constants.VIDEO_FLAT_RATE_MODELS),
        description="Video models billed with a flat price per generation",
    )
    summary_price_per_1k_tokens: Decimal = Field(default=constants.SUMMARY_PRICE_PER_1K_TOKENS)

    # Bonus rates
    chat_bonus_rate: Decimal = Field(default=constants.CHAT_BONUS_RATE)
    image_bonus_rate: Decimal = Field(default=constants.IMAGE_BONUS_RATE)
    dalle_bonus_rate: Decimal = Field(default=constants.DALLE_BONUS_RATE)
    describe_bonus_rate: Decimal = Field(default=constants.DESCRIBE_BONUS_RATE)
    video_bonus_rate: Decimal = Field(default=constants.VIDEO_BONUS_RATE)
    summary_bonus_rate: Decimal = Field(default=constants.SUMMARY_BONUS_RATE)

    # Generation
    max_video_prompt_length: int = Field(default=constants.MAX_VIDEO_PROMPT_LENGTH, ge=1)
    default_video_model: str = Field(default=constants.DEFAULT_VIDEO_MODEL)

    # Presentation
    shop_url: str = Field(default=constants.DEFAULT_SHOP_URL)


@lru_cache
def get_plan_settings() -> PlanSettings:
    """Get cached plan settings instance."""
    return PlanSettings()


__all__ = ["PlanSettings", "get_plan_settings"]
