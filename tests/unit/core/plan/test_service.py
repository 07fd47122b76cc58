"""Unit tests for the PlanService facade."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from plan_ledger.core.plan.schemas import CreditType, PlanLocation
from plan_ledger.core.plan.service import PlanService, get_plan_service, reset_plan_service


class TestGetPlanService:
    """Tests for repository selection."""

    def test_in_memory_when_database_disabled(self):
        with patch("plan_ledger.db.connection.db.config.enabled", False):
            service = get_plan_service()

        assert type(service.repository).__name__ == "InMemoryEntryRepository"
        assert get_plan_service() is service

    def test_sql_when_database_enabled(self):
        with patch("plan_ledger.db.connection.db.config.enabled", True):
            service = get_plan_service()

        assert type(service.repository).__name__ == "SqlEntryRepository"

    def test_reset(self):
        with patch("plan_ledger.db.connection.db.config.enabled", False):
            first = get_plan_service()
            reset_plan_service()
            second = get_plan_service()

        assert first is not second


class TestPlanServiceFlow:
    """Tests for the facade delegation."""

    @pytest.mark.asyncio
    async def test_create_credit_and_overview(self, repository, plan_settings):
        service = PlanService(repository, settings=plan_settings)
        context = await service.fetch_context("user-1")

        await service.create_plan(context.user, "1")
        await service.credit(context, CreditType.GRANT, "4")
        await service.expenses.expense_for_dalle_image(context, count=50)

        overview = service.build_overview(context)
        assert overview.plan.total == Decimal("5")
        assert overview.plan.used == Decimal("1.1")
        assert overview.plan.percentage == 22.0
        assert service.is_active(context) is True

    @pytest.mark.asyncio
    async def test_credit_entry_fetched_by_location(self, repository, plan_settings, funded_guild):
        service = PlanService(repository, settings=plan_settings)

        guild = await service.fetch_entry(PlanLocation.GUILD, "guild-1")
        await service.credit(guild, CreditType.GRANT, "1")

        assert service.get_plan(guild).total == Decimal("21")
        assert service.get_plan(funded_guild).total == Decimal("20")
