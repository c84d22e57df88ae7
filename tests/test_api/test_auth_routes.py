"""API tests for authentication routes.
Registration, login (form and JSON), token refresh and profile access.
"""

import pytest

from claimdesk.core.enums import Role
from claimdesk.utils.auth import create_refresh_token

pytestmark = pytest.mark.api

NEW_USER = {
    "username": "newcustomer",
    "email": "newcustomer@claimdesk.io",
    "password": "Str0ng#Passw0rd!",
    "full_name": "New Customer",
}


async def test_register_then_login(api):
    registered = await api.post("/api/auth/register", json=NEW_USER)

    assert registered.status_code == 201, registered.text
    assert registered.json()["role"] == "CUSTOMER"
    assert "password" not in registered.json()

    login = await api.post(
        "/api/auth/login",
        data={"username": NEW_USER["email"], "password": NEW_USER["password"]},
    )
    assert login.status_code == 200, login.text
    tokens = login.json()
    assert tokens["token_type"] == "bearer"

    me = await api.get("/api/users/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "newcustomer"


async def test_register_cannot_choose_role(api):
    registered = await api.post("/api/auth/register", json={**NEW_USER, "role": "ADMIN"})

    assert registered.status_code == 201
    assert registered.json()["role"] == "CUSTOMER"


async def test_duplicate_registration(api):
    await api.post("/api/auth/register", json=NEW_USER)

    response = await api.post("/api/auth/register", json={**NEW_USER, "email": "other@claimdesk.io"})

    assert response.status_code == 409


async def test_weak_password_rejected(api):
    response = await api.post("/api/auth/register", json={**NEW_USER, "password": "password"})
    assert response.status_code == 422


async def test_json_login_wrong_password(api, create_account):
    await create_account(Role.CUSTOMER, "jane")

    response = await api.post("/api/auth/login/json", json={"login": "jane", "password": "Wr0ng#Password!"})

    assert response.status_code == 401


async def test_disabled_account_cannot_log_in(api, create_account, password):
    await create_account(Role.AGENT, "retired", enabled=False)

    response = await api.post("/api/auth/login/json", json={"login": "retired", "password": password})

    assert response.status_code == 401
    assert response.json()["detail"] == "Account is disabled"


async def test_disabled_account_token_rejected(api, create_account, auth_headers):
    user = await create_account(Role.AGENT, "retired", enabled=False)

    response = await api.get("/api/users/me", headers=auth_headers(user))

    assert response.status_code == 401


async def test_refresh_issues_new_pair(api, create_account):
    user = await create_account(Role.CUSTOMER, "jane")

    response = await api.post(
        "/api/auth/refresh", json={"refresh_token": create_refresh_token({"sub": str(user.id)})}
    )

    assert response.status_code == 200, response.text
    assert response.json()["access_token"]


async def test_access_token_cannot_refresh(api, create_account, auth_headers):
    user = await create_account(Role.CUSTOMER, "jane")
    access_token = auth_headers(user)["Authorization"].removeprefix("Bearer ")

    response = await api.post("/api/auth/refresh", json={"refresh_token": access_token})

    assert response.status_code == 401


async def test_refresh_token_cannot_authenticate(api, create_account):
    user = await create_account(Role.CUSTOMER, "jane")
    refresh = create_refresh_token({"sub": str(user.id)})

    response = await api.get("/api/users/me", headers={"Authorization": f"Bearer {refresh}"})

    assert response.status_code == 401
