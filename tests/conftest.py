"""Shared test fixtures and configuration."""

import os
from datetime import timedelta

import pytest


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def in_memory_env(monkeypatch):
    """Run unit tests without a database."""
    monkeypatch.setenv("DATABASE_ENABLED", "false")


@pytest.fixture(autouse=True)
def reset_plan_service_singleton():
    """Reset the PlanService singleton before and after each test."""
    from plan_ledger.core.plan.service import reset_plan_service

    reset_plan_service()
    yield
    reset_plan_service()


# =============================================================================
# Ledger Fixtures
# =============================================================================

@pytest.fixture
def plan_settings():
    """Plan settings with the default pricing."""
    from plan_ledger.core.plan.config import PlanSettings
    return PlanSettings()


@pytest.fixture
def repository():
    """Fresh in-memory entry repository."""
    from plan_ledger.db.repositories import InMemoryEntryRepository
    return InMemoryEntryRepository()


@pytest.fixture
def ledger(repository, plan_settings):
    """PlanLedger over the in-memory repository."""
    from plan_ledger.core.plan.ledger import PlanLedger
    return PlanLedger(repository, settings=plan_settings)


@pytest.fixture
def recorder(ledger):
    """ExpenseRecorder over the test ledger."""
    from plan_ledger.core.plan.expenses import ExpenseRecorder
    return ExpenseRecorder(ledger)


# =============================================================================
# Entry Fixtures
# =============================================================================

def make_plan_document(total="0", used="0", expenses=None, history=None):
    """Build a persisted plan document."""
    return {
        "total": str(total),
        "used": str(used),
        "expenses": expenses if expenses is not None else [],
        "history": history if history is not None else [],
    }


@pytest.fixture
def plan_document():
    """Factory for persisted plan documents."""
    return make_plan_document


@pytest.fixture
def user_entry():
    """User without a plan."""
    from plan_ledger.core.plan.entries import UserEntry
    return UserEntry(id="user-1")


@pytest.fixture
def funded_user(repository):
    """User with a plan of total 10, nothing used, stored in the repository."""
    from plan_ledger.core.plan.entries import UserEntry
    entry = UserEntry(
        id="user-1",
        plan=make_plan_document(total="10"),
        metadata={"email": "user@example.com"},
    )
    repository.add_entry(entry)
    return entry


@pytest.fixture
def guild_entry():
    """Guild without a plan."""
    from plan_ledger.core.plan.entries import GuildEntry
    return GuildEntry(id="guild-1")


@pytest.fixture
def funded_guild(repository):
    """Guild with a plan of total 20, 5 used, stored in the repository."""
    from plan_ledger.core.plan.entries import GuildEntry
    entry = GuildEntry(id="guild-1", plan=make_plan_document(total="20", used="5"))
    repository.add_entry(entry)
    return entry


@pytest.fixture
def active_subscription():
    """Subscription expiring in 30 days."""
    from plan_ledger.core.plan.schemas import Subscription, utc_now
    now = utc_now()
    return Subscription(since=now - timedelta(days=1), expires=now + timedelta(days=30))


@pytest.fixture
def expired_subscription():
    """Subscription that expired yesterday."""
    from plan_ledger.core.plan.schemas import Subscription, utc_now
    now = utc_now()
    return Subscription(since=now - timedelta(days=31), expires=now - timedelta(days=1))


# =============================================================================
# Integration Test Markers
# =============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires a real PostgreSQL)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless RUN_INTEGRATION_TESTS is set."""
    if not os.getenv("RUN_INTEGRATION_TESTS"):
        skip_integration = pytest.mark.skip(
            reason="Set RUN_INTEGRATION_TESTS=1 to run integration tests"
        )
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)

