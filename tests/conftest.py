"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.

Services run against an in-memory SQLite database (aiosqlite) with a pinned
clock and an in-memory file store.
"""

import os

# Settings are read at import time; configure them before importing the app
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-claimdesk-unit-tests-0001")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-claimdesk-unit-tests-01")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_CREATE_TABLES", "false")

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from claimdesk.core.clock import FixedClock
from claimdesk.core.enums import PolicyStatus, Role
from claimdesk.core.exceptions import StorageError
from claimdesk.db.connection import configure_sqlite_transactions, create_session_maker
from claimdesk.models import Base
from claimdesk.models.policy import Policy
from claimdesk.models.user import User
from claimdesk.services.claims_service import ClaimsService
from claimdesk.services.document_service import DocumentService
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.services.policy_service import PolicyService
from claimdesk.services.ticket_service import TicketService
from claimdesk.services.user_service import UserService
from claimdesk.utils.auth import get_password_hash

TEST_PASSWORD = "Str0ng#Passw0rd!"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


class InMemoryFileStorage:
    """FileStorage double keeping blobs in a dict."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.fail_writes = False
        self.fail_deletes = False

    async def write(self, name: str, data: bytes, content_type: str | None = None) -> str:
        if self.fail_writes:
            raise StorageError("Storage unavailable")
        self.blobs[name] = data
        return name

    async def read(self, path: str) -> bytes:
        try:
            return self.blobs[path]
        except KeyError as err:
            raise StorageError(f"Missing blob: {path}") from err

    async def delete(self, path: str) -> None:
        if self.fail_deletes:
            raise StorageError("Storage unavailable")
        self.blobs.pop(path, None)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite_transactions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with create_session_maker(engine)() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 15, 9, 30, tzinfo=UTC))


@pytest.fixture
def storage():
    return InMemoryFileStorage()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def user_service(session, clock):
    return UserService(session, clock)


@pytest.fixture
def policy_service(session, clock):
    return PolicyService(session, clock)


@pytest.fixture
def enrollment_service(session, clock):
    return EnrollmentService(session, clock)


@pytest.fixture
def document_service(session, clock, storage):
    return DocumentService(session, storage, clock, max_size_bytes=1024, timeout_seconds=5)


@pytest.fixture
def claims_service(session, clock, document_service, enrollment_service):
    return ClaimsService(session, clock, documents=document_service, enrollments=enrollment_service)


@pytest.fixture
def ticket_service(session, clock):
    return TicketService(session, clock)


# =============================================================================
# Data
# =============================================================================


@pytest.fixture
def password():
    """Plain-text password of every user created by ``make_user``."""
    return TEST_PASSWORD


@pytest.fixture
def make_user(session):
    """Factory inserting a user with ``TEST_PASSWORD``."""

    async def _make(role: Role = Role.CUSTOMER, username: str | None = None, enabled: bool = True) -> User:
        username = username or f"{role.value.lower()}_{uuid4().hex[:8]}"
        user = User(
            id=uuid4(),
            username=username,
            email=f"{username}@claimdesk.io",
            hashed_password=TEST_PASSWORD_HASH,
            full_name=username.title(),
            role=role,
            enabled=enabled,
        )
        session.add(user)
        await session.flush()
        return user

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN, "admin")


@pytest.fixture
async def agent(make_user):
    return await make_user(Role.AGENT, "agent")


@pytest.fixture
async def adjuster(make_user):
    return await make_user(Role.CLAIM_ADJUSTER, "adjuster")


@pytest.fixture
async def customer(make_user):
    return await make_user(Role.CUSTOMER, "customer")


@pytest.fixture
def make_policy(session):
    """Factory inserting an ACTIVE policy."""

    async def _make(
        coverage: str = "10000.00",
        duration_months: int | None = 12,
        status: PolicyStatus = PolicyStatus.ACTIVE,
        name: str = "Family Health Plus",
    ) -> Policy:
        policy = Policy(
            id=uuid4(),
            policy_number=f"POL-20250115-{uuid4().hex[:6].upper()}",
            name=name,
            coverage_amount=Decimal(coverage),
            premium_amount=Decimal("120.00"),
            duration_months=duration_months,
            status=status,
        )
        session.add(policy)
        await session.flush()
        return policy

    return _make


@pytest.fixture
async def policy(make_policy):
    return await make_policy()


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
