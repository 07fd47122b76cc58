"""Per-message credit usage display.

Users pick how much of their plan usage is appended to each chat response.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from .schemas import Plan


class CreditVisibility(str, Enum):
    """How plan usage is shown below a response."""
    DETAILED = "detailed"
    FULL = "full"
    USED = "used"
    PERCENTAGE = "percentage"
    HIDE = "hide"


def format_credit_usage(
    plan: Plan,
    visibility: CreditVisibility,
    cost: Optional[Decimal] = None,
    completion_tokens: Optional[int] = None,
) -> Optional[str]:
    """
    Format the plan usage line for a response.

    Args:
        plan: Plan after the response was billed
        visibility: User's chosen visibility
        cost: Cost of this response, if known
        completion_tokens: Generated tokens of this response, if known

    Returns:
        Display string, or None if nothing should be shown
    """
    balance = f"${plan.used:.2f} / ${plan.total:.2f}"

    if visibility == CreditVisibility.DETAILED:
        if completion_tokens is not None:
            return f"{completion_tokens} tokens • {balance}"
        if cost is not None:
            return f"${cost:.4f} • {balance}"
        return balance

    if visibility == CreditVisibility.FULL:
        return balance

    if visibility == CreditVisibility.USED:
        return f"${plan.used:.2f}"

    if visibility == CreditVisibility.PERCENTAGE:
        if plan.used <= 0 or plan.total <= 0:
            return None
        return f"{plan.used / plan.total * 100:.1f}%"

    return None


__all__ = ["CreditVisibility", "format_credit_usage"]
