"""Unit tests for per-message credit usage display."""

from decimal import Decimal

import pytest

from plan_ledger.core.plan.schemas import Plan
from plan_ledger.core.plan.viewers import CreditVisibility, format_credit_usage


@pytest.fixture
def plan():
    return Plan(total=Decimal("10"), used=Decimal("2.5"))


class TestFormatCreditUsage:
    """Tests for format_credit_usage."""

    def test_detailed_with_tokens(self, plan):
        result = format_credit_usage(plan, CreditVisibility.DETAILED, cost=Decimal("0.01"), completion_tokens=120)
        assert result == "120 tokens • $2.50 / $10.00"

    def test_detailed_with_cost(self, plan):
        result = format_credit_usage(plan, CreditVisibility.DETAILED, cost=Decimal("0.0123"))
        assert result == "$0.0123 • $2.50 / $10.00"

    def test_detailed_balance_only(self, plan):
        assert format_credit_usage(plan, CreditVisibility.DETAILED) == "$2.50 / $10.00"

    def test_full(self, plan):
        assert format_credit_usage(plan, CreditVisibility.FULL, cost=Decimal("1")) == "$2.50 / $10.00"

    def test_used(self, plan):
        assert format_credit_usage(plan, CreditVisibility.USED) == "$2.50"

    def test_percentage(self, plan):
        assert format_credit_usage(plan, CreditVisibility.PERCENTAGE) == "25.0%"

    def test_percentage_hidden_without_usage(self):
        assert format_credit_usage(Plan(total=Decimal("10")), CreditVisibility.PERCENTAGE) is None

    def test_hide(self, plan):
        assert format_credit_usage(plan, CreditVisibility.HIDE) is None

    def test_detailed_with_zero_cost(self, plan):
        result = format_credit_usage(plan, CreditVisibility.DETAILED, cost=Decimal("0"))
        assert result == "$0.0000 • $2.50 / $10.00"

    def test_detailed_with_zero_tokens(self, plan):
        result = format_credit_usage(plan, CreditVisibility.DETAILED, cost=Decimal("0.01"), completion_tokens=0)
        assert result == "0 tokens • $2.50 / $10.00"
