"""
Unit Tests for Token Authentication
Tokens are checked the way every protected route checks them: through the
``get_current_user`` / ``get_current_active_user`` dependencies
"""

from datetime import timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from claimdesk.api.config import settings
from claimdesk.api.deps import get_current_active_user, get_current_user
from claimdesk.core.enums import Role
from claimdesk.utils.auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from claimdesk.utils.errors import AuthenticationError


class _Session:
    """Stands in for the unit of work's session; knows one set of users."""

    def __init__(self, *users):
        self.users = {user.id: user for user in users}

    async def get(self, model, key):
        return self.users.get(key)


def _user(role: Role = Role.CUSTOMER, enabled: bool = True) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), role=role, enabled=enabled)


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


async def _authenticate(token: str, *users):
    return await get_current_user(_bearer(token), SimpleNamespace(session=_Session(*users)))


@pytest.mark.unit
class TestPasswordHashing:
    def test_hash_is_salted_bcrypt(self):
        first = get_password_hash("Str0ng#Passw0rd!")
        second = get_password_hash("Str0ng#Passw0rd!")

        assert first.startswith("$2b$")
        assert first != second
        assert verify_password("Str0ng#Passw0rd!", first)
        assert verify_password("Str0ng#Passw0rd!", second)

    def test_wrong_password_does_not_verify(self):
        assert not verify_password("Wr0ng#Passw0rd!", get_password_hash("Str0ng#Passw0rd!"))


@pytest.mark.unit
class TestTokenClaims:
    def test_access_token_carries_subject_role_and_type(self):
        user_id = str(uuid4())

        payload = decode_token(create_access_token({"sub": user_id, "role": Role.AGENT.value}))

        assert payload["sub"] == user_id
        assert payload["role"] == "AGENT"
        assert payload["type"] == "access"

    def test_refresh_token_is_typed_refresh(self):
        assert decode_token(create_refresh_token({"sub": str(uuid4())}))["type"] == "refresh"

    def test_expired_token_does_not_decode(self):
        token = create_access_token({"sub": str(uuid4())}, expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_token_signed_with_another_key_does_not_decode(self):
        forged = jwt.encode(
            {"sub": str(uuid4()), "type": "access"},
            "not-the-configured-secret-key-000000",
            algorithm=settings.JWT_ALGORITHM,
        )
        assert decode_token(forged) is None


@pytest.mark.unit
class TestCurrentUser:
    async def test_access_token_resolves_the_user(self):
        user = _user(Role.CLAIM_ADJUSTER)

        resolved = await _authenticate(create_access_token({"sub": str(user.id)}), user)

        assert resolved is user

    async def test_refresh_token_cannot_authenticate(self):
        user = _user()

        with pytest.raises(AuthenticationError) as exc_info:
            await _authenticate(create_refresh_token({"sub": str(user.id)}), user)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token type"

    @pytest.mark.parametrize(
        ("claims", "detail"),
        [
            ({}, "Invalid token payload"),
            ({"sub": "not-a-uuid"}, "Invalid user ID in token"),
            ({"sub": str(uuid4())}, "User not found"),
        ],
    )
    async def test_unusable_subject(self, claims, detail):
        with pytest.raises(AuthenticationError) as exc_info:
            await _authenticate(create_access_token(claims), _user())

        assert exc_info.value.detail == detail

    async def test_garbage_token(self):
        with pytest.raises(AuthenticationError, match="Invalid token"):
            await _authenticate("invalid.token.here")

    async def test_disabled_account_is_rejected(self):
        user = _user(Role.AGENT, enabled=False)
        resolved = await _authenticate(create_access_token({"sub": str(user.id)}), user)

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_active_user(resolved)

        assert exc_info.value.detail == "User account is disabled"

    async def test_enabled_account_passes(self):
        user = _user()
        assert await get_current_active_user(user) is user
