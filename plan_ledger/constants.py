"""Application-wide constants and pricing defaults.

This module centralizes the policy constants used by the plan ledger so that
repricing does not require touching the accounting logic. Every value here is
only a default; `PlanSettings` allows overriding them through the environment.
"""

from decimal import Decimal

# =============================================================================
# Ledger Limits
# =============================================================================
PLAN_MAX_EXPENSE_HISTORY = 500
PLAN_REPORT_HISTORY_SIZE = 10

# =============================================================================
# Expense Pricing (USD)
# =============================================================================
IMAGE_KUDOS_PER_UNIT = Decimal("4500")
DALLE_PRICE_PER_IMAGE = Decimal("0.02")
DESCRIBE_PRICE_PER_SECOND = Decimal("0.0023")
VIDEO_PRICE_PER_SECOND = Decimal("0.0023")
VIDEO_FLAT_PRICE = Decimal("0.01")
VIDEO_FLAT_RATE_MODELS = ["gen2"]
SUMMARY_PRICE_PER_1K_TOKENS = Decimal("0.002")

# =============================================================================
# Bonus Rates (markup applied on top of the raw cost)
# =============================================================================
CHAT_BONUS_RATE = Decimal("0")
IMAGE_BONUS_RATE = Decimal("0.10")
DALLE_BONUS_RATE = Decimal("0.10")
DESCRIBE_BONUS_RATE = Decimal("0.10")
VIDEO_BONUS_RATE = Decimal("0.05")
SUMMARY_BONUS_RATE = Decimal("0.10")

# =============================================================================
# Generation Limits
# =============================================================================
MAX_VIDEO_PROMPT_LENGTH = 200
DEFAULT_VIDEO_MODEL = "zeroscope"

# =============================================================================
# Shop
# =============================================================================
DEFAULT_SHOP_URL = "/shop"

# =============================================================================
# API Configuration
# =============================================================================
DOCS_URL = "/docs"
REDOC_URL = "/redoc"
OPENAPI_URL = "/openapi.json"
DEFAULT_API_PREFIX = "/api/v1"

# =============================================================================
# Persistence Collections
# =============================================================================
COLLECTION_USERS = "users"
COLLECTION_GUILDS = "guilds"
