"""
Plan ledger module.

Provides pay-as-you-go plans shared between users and guilds: expense and
credit accounting, per-category pricing, entry resolution and usage
overviews.
"""

from .config import PlanSettings, get_plan_settings
from .schemas import (
    BillingType,
    Classification,
    Credit,
    CreditGateway,
    CreditType,
    Expense,
    ExpenseType,
    Plan,
    PlanLocation,
    PlanOverview,
    PlanUsage,
    Subscription,
)
from .exceptions import (
    PlanLedgerError,
    PlanNotProvisionedError,
    PlanAccessDeniedError,
    PersistenceError,
    InvalidGenerationRequestError,
    GenerationFailedError,
)
from .entries import (
    BillingContext,
    Classifier,
    Entry,
    GuildEntry,
    SubscriptionClassifier,
    UserEntry,
    UserMetadata,
    resolve_entry,
)
from .ledger import PlanLedger, normalize_plan
from .expenses import ExpenseRecorder
from .report import ReportBuilder
from .viewers import CreditVisibility, format_credit_usage
from .generation import (
    BilledGeneration,
    BilledVideo,
    VideoModel,
    VideoProvider,
    VideoResult,
)
from .service import PlanService, get_plan_service, reset_plan_service

__all__ = [
    # Config
    "PlanSettings",
    "get_plan_settings",
    # Schemas
    "BillingType",
    "Classification",
    "Credit",
    "CreditGateway",
    "CreditType",
    "Expense",
    "ExpenseType",
    "Plan",
    "PlanLocation",
    "PlanOverview",
    "PlanUsage",
    "Subscription",
    # Exceptions
    "PlanLedgerError",
    "PlanNotProvisionedError",
    "PlanAccessDeniedError",
    "PersistenceError",
    "InvalidGenerationRequestError",
    "GenerationFailedError",
    # Entries
    "BillingContext",
    "Classifier",
    "Entry",
    "GuildEntry",
    "SubscriptionClassifier",
    "UserEntry",
    "UserMetadata",
    "resolve_entry",
    # Ledger
    "PlanLedger",
    "normalize_plan",
    "ExpenseRecorder",
    "ReportBuilder",
    # Viewers
    "CreditVisibility",
    "format_credit_usage",
    # Generation
    "BilledGeneration",
    "BilledVideo",
    "VideoModel",
    "VideoProvider",
    "VideoResult",
    # Service
    "PlanService",
    "get_plan_service",
    "reset_plan_service",
]
