"""API tests for role checks.
Ensures routes reject callers whose role lacks the permission, before any
service work happens.
"""

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from claimdesk.api.deps import (
    get_claims_service,
    get_current_active_user,
    get_enrollment_service,
    get_policy_service,
    get_user_service,
)
from claimdesk.api.main import app
from claimdesk.core.enums import Role
from claimdesk.db.unit_of_work import get_uow
from claimdesk.utils.errors import AuthenticationError

client = TestClient(app)


def _build_user(role: Role = Role.CUSTOMER) -> SimpleNamespace:
    """Create a simple user-like object for dependency overrides."""
    now = datetime.now(UTC)
    return SimpleNamespace(
        id=uuid4(),
        email="user@claimdesk.io",
        username="user",
        full_name="Test User",
        phone=None,
        address=None,
        role=role,
        enabled=True,
        created_at=now,
        updated_at=now,
        last_login=None,
    )


class _UntouchableService:
    """Fails the test if a route reaches its service."""

    def __getattr__(self, name):
        raise AssertionError(f"service.{name} must not be called")


class _DummyUnitOfWork:
    async def commit(self) -> None:
        raise AssertionError("commit must not be called")


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    """Ensure dependency overrides are isolated per test."""
    app.dependency_overrides.clear()
    for factory in (get_claims_service, get_enrollment_service, get_policy_service, get_user_service):
        app.dependency_overrides[factory] = _UntouchableService
    app.dependency_overrides[get_uow] = _DummyUnitOfWork
    yield
    app.dependency_overrides.clear()


def _login_as(role: Role) -> SimpleNamespace:
    user = _build_user(role)
    app.dependency_overrides[get_current_active_user] = lambda: user
    return user


def test_health_check():
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "claimdesk-api"}


def test_root_lists_api_information():
    assert client.get("/").json()["name"] == "ClaimDesk API"


def test_current_user_profile():
    """GET /users/me returns the caller without touching the database."""
    user = _login_as(Role.AGENT)

    response = client.get("/api/users/me")

    assert response.status_code == 200
    payload = response.json()
    assert payload["id"] == str(user.id)
    assert payload["role"] == "AGENT"
    assert "hashed_password" not in payload


def test_missing_token_is_rejected():
    response = client.get("/api/claims/mine")
    assert response.status_code in (401, 403)


def test_invalid_token_is_rejected():
    def _reject():
        raise AuthenticationError("Invalid token")

    app.dependency_overrides[get_current_active_user] = _reject

    response = client.get("/api/users/me", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize(
    ("role", "method", "path", "body"),
    [
        (Role.CUSTOMER, "post", "/api/claims/{id}/review", {"status": "APPROVED"}),
        (Role.AGENT, "post", "/api/claims/{id}/review", {"status": "APPROVED"}),
        (Role.CUSTOMER, "post", "/api/claims/{id}/assign", {"adjuster_id": str(uuid4())}),
        (Role.CLAIM_ADJUSTER, "delete", "/api/claims/{id}", None),
        (Role.CUSTOMER, "get", "/api/claims", None),
        (Role.CUSTOMER, "get", "/api/enrollments/user/{id}", None),
        (Role.CLAIM_ADJUSTER, "get", "/api/enrollments/user/{id}", None),
        (Role.AGENT, "post", "/api/policies", {"name": "x", "coverage_amount": "1", "premium_amount": "1"}),
        (Role.AGENT, "get", "/api/users", None),
        (Role.CUSTOMER, "get", "/api/users/agents", None),
    ],
)
def test_role_is_forbidden(role, method, path, body):
    _login_as(role)
    url = path.format(id=uuid4())

    if body is None:
        response = client.request(method, url)
    else:
        response = client.request(method, url, json=body)

    assert response.status_code == 403
