"""
Fixtures for API tests.

``api`` drives the real application over ASGI with the database, file
storage and clock swapped for the test doubles from the root conftest.
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from claimdesk.api.deps import get_clock, get_file_storage
from claimdesk.api.main import app
from claimdesk.core.enums import Role
from claimdesk.db.connection import create_session_maker
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.user import User
from claimdesk.utils.auth import create_access_token, get_password_hash


@pytest.fixture
async def api(engine, storage, clock):
    session_maker = create_session_maker(engine)

    async def override_uow():
        async with UnitOfWork(session_maker) as uow:
            yield uow

    app.dependency_overrides[get_uow] = override_uow
    app.dependency_overrides[get_file_storage] = lambda: storage
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def create_account(engine, password):
    """Factory committing a user so every request session can see it."""
    session_maker = create_session_maker(engine)
    hashed = get_password_hash(password)

    async def _create(role: Role, username: str, enabled: bool = True) -> User:
        user = User(
            id=uuid4(),
            username=username,
            email=f"{username}@claimdesk.io",
            hashed_password=hashed,
            full_name=username.title(),
            role=role,
            enabled=enabled,
        )
        async with session_maker() as session:
            session.add(user)
            await session.commit()
        return user

    return _create


@pytest.fixture
def auth_headers():
    """Bearer headers carrying an access token for ``user``."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def accounts(create_account):
    return {
        "admin": await create_account(Role.ADMIN, "admin"),
        "agent": await create_account(Role.AGENT, "agent"),
        "adjuster": await create_account(Role.CLAIM_ADJUSTER, "adjuster"),
        "customer": await create_account(Role.CUSTOMER, "customer"),
    }
