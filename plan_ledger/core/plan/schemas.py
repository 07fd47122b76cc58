"""
Pydantic schemas for the plan ledger.

Provides the persisted plan document (plan, expenses, credits), the typed
expense payloads per usage category, and the overview returned to the
presentation layer.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ExpenseType(str, Enum):
    """Usage category an expense is tagged with."""
    CHAT = "chat"
    IMAGE = "image"  # community image generation
    DALLE = "dall-e"  # external provider image generation
    DESCRIBE = "describe"
    VIDEO = "video"
    SUMMARY = "summary"


class CreditType(str, Enum):
    """What kind of charge-up a credit is."""
    WEB = "web"
    GRANT = "grant"


class CreditGateway(str, Enum):
    """Payment gateway a web charge-up went through."""
    BITCOIN = "BITCOIN"
    ETHEREUM = "ETHEREUM"
    BINANCE_COIN = "BINANCE_COIN"
    MONERO = "MONERO"
    STRIPE = "STRIPE"
    PAYPAL = "PAYPAL"
    BINANCE = "BINANCE"


class PlanLocation(str, Enum):
    """Which entry a plan or subscription belongs to."""
    USER = "user"
    GUILD = "guild"


class BillingType(str, Enum):
    """Billing model of a premium entry."""
    PLAN = "plan"
    SUBSCRIPTION = "subscription"


# =============================================================================
# Ledger documents
# =============================================================================


class Expense(BaseModel):
    """A single debit line-item against a plan."""
    type: ExpenseType
    time: datetime = Field(default_factory=utc_now)
    used: Decimal  # raw cost, before the bonus rate
    data: Optional[Dict[str, Any]] = None


class Credit(BaseModel):
    """A single charge-up against a plan's total."""
    type: CreditType
    gateway: Optional[CreditGateway] = None
    time: datetime = Field(default_factory=utc_now)
    amount: Decimal


class Plan(BaseModel):
    """Pay-as-you-go balance owned by a user or a guild."""
    total: Decimal = Decimal("0")
    used: Decimal = Decimal("0")
    expenses: List[Expense] = Field(default_factory=list)
    history: List[Credit] = Field(default_factory=list)

    @property
    def remaining(self) -> Decimal:
        return self.total - self.used

    @property
    def exhausted(self) -> bool:
        return self.used >= self.total


class Subscription(BaseModel):
    """Time-boxed premium subscription."""
    since: datetime
    expires: datetime

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.expires > (now or utc_now())


class Classification(BaseModel):
    """Entitlement classification of a billing context."""
    premium: bool
    type: BillingType = BillingType.PLAN
    location: PlanLocation = PlanLocation.USER


# =============================================================================
# Expense payloads (the `data` field, keyed by expense type)
# =============================================================================


class ChatTokens(BaseModel):
    prompt: int
    completion: int


class ChatExpenseData(BaseModel):
    model: str
    tokens: Optional[ChatTokens] = None
    duration: Optional[int] = None


class ImageExpenseData(BaseModel):
    kudos: int


class DallEExpenseData(BaseModel):
    count: int


class DescribeExpenseData(BaseModel):
    duration: int


class VideoExpenseData(BaseModel):
    duration: int


class SummaryExpenseData(BaseModel):
    tokens: int
    url: str


EXPENSE_DATA_MODELS = {
    ExpenseType.CHAT: ChatExpenseData,
    ExpenseType.IMAGE: ImageExpenseData,
    ExpenseType.DALLE: DallEExpenseData,
    ExpenseType.DESCRIBE: DescribeExpenseData,
    ExpenseType.VIDEO: VideoExpenseData,
    ExpenseType.SUMMARY: SummaryExpenseData,
}


# =============================================================================
# Overview (report builder output)
# =============================================================================


class PlanUsage(BaseModel):
    """Plan section of an overview."""
    used: Decimal
    total: Decimal
    expenses: List[Expense]
    credits: List[Credit]
    exhausted: bool
    percentage: Optional[float] = None  # omitted when total is 0


class PlanOverview(BaseModel):
    """
    Presentation-neutral usage overview for a user or guild.

    Consumed by the rendering layer (embeds, buttons).
    """
    premium: bool
    billing_type: Optional[BillingType] = None
    location: PlanLocation
    plan: Optional[PlanUsage] = None
    subscription: Optional[Subscription] = None
    show_purchase_button: bool = False
    purchase_options: List[BillingType] = Field(default_factory=list)
    show_settings_button: bool = False
    shop_url: str


__all__ = [
    "utc_now",
    "ExpenseType",
    "CreditType",
    "CreditGateway",
    "PlanLocation",
    "BillingType",
    "Expense",
    "Credit",
    "Plan",
    "Subscription",
    "Classification",
    "ChatTokens",
    "ChatExpenseData",
    "ImageExpenseData",
    "DallEExpenseData",
    "DescribeExpenseData",
    "VideoExpenseData",
    "SummaryExpenseData",
    "EXPENSE_DATA_MODELS",
    "PlanUsage",
    "PlanOverview",
]
