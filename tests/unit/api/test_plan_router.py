"""Unit tests for the plan API router."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

USER_HEADERS = {"X-User-ID": "user-1"}
GUILD_HEADERS = {"X-User-ID": "user-1", "X-Guild-ID": "guild-1"}
MANAGER_HEADERS = {**GUILD_HEADERS, "X-Manage-Guild": "true"}
STAFF_HEADERS = {"X-User-ID": "mod-1"}
STAFF_MANAGER_HEADERS = {**STAFF_HEADERS, "X-Guild-ID": "guild-1", "X-Manage-Guild": "true"}


@pytest.fixture
def plan_service(repository, plan_settings):
    """PlanService over a fresh in-memory repository with one moderator."""
    from plan_ledger.core.plan.entries import UserEntry
    from plan_ledger.core.plan.service import PlanService

    repository.add_entry(UserEntry(id="mod-1", roles=["moderator"]))
    return PlanService(repository, settings=plan_settings)


@pytest.fixture
def client(plan_service):
    """Test client with the plan service overridden."""
    from plan_ledger.api.app import create_app
    from plan_ledger.api.dependencies import get_service

    app = create_app()
    app.dependency_overrides[get_service] = lambda: plan_service
    return TestClient(app)


class TestHeaders:
    """Tests for billing header handling."""

    def test_missing_user_header(self, client):
        response = client.get("/api/v1/plan/status")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert "X-User-ID" in data["error"]
        assert "X-Request-ID" in response.headers


class TestCreatePlanEndpoint:
    """Tests for POST /plan/."""

    def test_create_user_plan(self, client):
        response = client.post("/api/v1/plan/", json={}, headers=USER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["location"] == "user"
        assert data["active"] is False
        assert Decimal(data["plan"]["total"]) == Decimal("0")

    def test_staff_creates_plan_with_balance(self, client):
        response = client.post("/api/v1/plan/", json={"amount": "5"}, headers=STAFF_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["entry_id"] == "mod-1"
        assert data["active"] is True
        assert Decimal(data["plan"]["total"]) == Decimal("5")

    def test_balance_requires_staff(self, client):
        response = client.post("/api/v1/plan/", json={"amount": "5"}, headers=USER_HEADERS)

        assert response.status_code == 403
        assert response.json()["success"] is False

        status = client.get("/api/v1/plan/status", headers=USER_HEADERS).json()
        assert status["plan"] is None

    def test_zero_balance_allowed_without_staff(self, client):
        response = client.post("/api/v1/plan/", json={"amount": "0"}, headers=USER_HEADERS)

        assert response.status_code == 200

    def test_create_is_idempotent(self, client):
        client.post("/api/v1/plan/", json={"amount": "5"}, headers=STAFF_HEADERS)
        response = client.post("/api/v1/plan/", json={"amount": "50"}, headers=STAFF_HEADERS)

        assert Decimal(response.json()["plan"]["total"]) == Decimal("5")

    def test_create_guild_plan_as_manager(self, client):
        response = client.post("/api/v1/plan/", json={"location": "guild"}, headers=MANAGER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["entry_id"] == "guild-1"
        assert data["active"] is False

    def test_create_guild_plan_without_permission(self, client):
        response = client.post("/api/v1/plan/", json={"location": "guild"}, headers=GUILD_HEADERS)

        assert response.status_code == 403
        assert "Manage Server" in response.json()["error"]

    def test_create_guild_plan_outside_guild(self, client):
        response = client.post("/api/v1/plan/", json={"location": "guild"}, headers=USER_HEADERS)

        assert response.status_code == 400

    def test_negative_amount_rejected(self, client):
        response = client.post("/api/v1/plan/", json={"amount": "-1"}, headers=USER_HEADERS)

        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"


class TestStatusEndpoint:
    """Tests for GET /plan/status."""

    def test_status_without_plan(self, client):
        response = client.get("/api/v1/plan/status", headers=USER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["plan"] is None
        assert data["active"] is False
        assert data["classification"]["premium"] is False

    def test_status_resolves_guild_plan(self, client):
        client.post("/api/v1/plan/", json={"location": "guild", "amount": "2"}, headers=STAFF_MANAGER_HEADERS)

        response = client.get("/api/v1/plan/status", headers=GUILD_HEADERS)

        data = response.json()
        assert data["entry_id"] == "guild-1"
        assert data["location"] == "guild"
        assert data["active"] is True


class TestCreditsEndpoint:
    """Tests for POST /plan/credits."""

    def test_credit_without_plan(self, client):
        response = client.post("/api/v1/plan/credits", json={"type": "grant", "amount": "1"}, headers=STAFF_HEADERS)

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "plan_not_provisioned"
        assert data["error"] == "You don't have a pay-as-you-go plan yet"

    def test_credit_with_gateway(self, client):
        client.post("/api/v1/plan/", json={"amount": "10"}, headers=STAFF_HEADERS)

        response = client.post(
            "/api/v1/plan/credits",
            json={"type": "web", "amount": "5.00", "gateway": "STRIPE"},
            headers=STAFF_HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["credit"]["gateway"] == "STRIPE"
        assert Decimal(data["plan"]["total"]) == Decimal("15")
        assert len(data["plan"]["history"]) == 1

    def test_grant_requires_staff(self, client):
        client.post("/api/v1/plan/", json={}, headers=USER_HEADERS)

        response = client.post("/api/v1/plan/credits", json={"type": "grant", "amount": "100"}, headers=USER_HEADERS)

        assert response.status_code == 403
        assert "moderator" in response.json()["error"]
        status = client.get("/api/v1/plan/status", headers=USER_HEADERS).json()
        assert Decimal(status["plan"]["total"]) == Decimal("0")

    def test_web_credit_requires_staff(self, client):
        response = client.post(
            "/api/v1/plan/credits",
            json={"type": "web", "amount": "5", "gateway": "STRIPE"},
            headers=USER_HEADERS,
        )

        assert response.status_code == 403

    def test_staff_credits_another_user(self, client):
        client.post("/api/v1/plan/", json={}, headers=USER_HEADERS)

        response = client.post(
            "/api/v1/plan/credits",
            json={"type": "grant", "amount": "3", "entry_id": "user-1"},
            headers=STAFF_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["entry_id"] == "user-1"
        status = client.get("/api/v1/plan/status", headers=USER_HEADERS).json()
        assert Decimal(status["plan"]["total"]) == Decimal("3")
        assert status["active"] is True

    def test_staff_credits_guild(self, client):
        client.post("/api/v1/plan/", json={"location": "guild"}, headers=MANAGER_HEADERS)

        response = client.post(
            "/api/v1/plan/credits",
            json={"type": "grant", "amount": "2", "location": "guild", "entry_id": "guild-1"},
            headers=STAFF_HEADERS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "guild"
        assert Decimal(data["plan"]["total"]) == Decimal("2")

    def test_unknown_gateway_rejected(self, client):
        response = client.post(
            "/api/v1/plan/credits",
            json={"type": "web", "amount": "5", "gateway": "CASH"},
            headers=STAFF_HEADERS,
        )

        assert response.status_code == 422


class TestOverviewEndpoint:
    """Tests for GET /plan/overview."""

    def test_overview_of_user_plan(self, client):
        client.post("/api/v1/plan/", json={"amount": "10"}, headers=STAFF_HEADERS)

        response = client.get("/api/v1/plan/overview", headers=STAFF_HEADERS)

        assert response.status_code == 200
        overview = response.json()["overview"]
        assert overview["premium"] is True
        assert overview["billing_type"] == "plan"
        assert overview["plan"]["exhausted"] is False
        assert overview["plan"]["percentage"] == 0.0

    def test_overview_guild_plan_forbidden(self, client):
        client.post("/api/v1/plan/", json={"location": "guild", "amount": "2"}, headers=STAFF_MANAGER_HEADERS)

        response = client.get("/api/v1/plan/overview", headers=GUILD_HEADERS)

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_overview_not_premium(self, client):
        response = client.get("/api/v1/plan/overview", headers=USER_HEADERS)

        assert response.status_code == 200
        overview = response.json()["overview"]
        assert overview["premium"] is False
        assert overview["show_purchase_button"] is False


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_in_memory(self, client, monkeypatch):
        from plan_ledger.db.connection import db
        monkeypatch.setattr(db.config, "enabled", False)

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"]["status"] == "disabled"
        assert data["components"]["plan_service"]["repository"] == "InMemoryEntryRepository"
