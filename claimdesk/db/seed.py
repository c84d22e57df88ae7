"""
Default account seeding.

Creates one enabled account per role when it does not exist yet. Used on
startup when ``SEED_DEFAULT_USERS`` is set.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.core.enums import Role
from claimdesk.models.user import User
from claimdesk.schemas.user import UserCreate
from claimdesk.services.user_service import UserService
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ACCOUNTS: tuple[tuple[str, str, str, Role], ...] = (
    ("admin", "admin@claimdesk.io", "System Administrator", Role.ADMIN),
    ("agent", "agent@claimdesk.io", "Default Agent", Role.AGENT),
    ("adjuster", "adjuster@claimdesk.io", "Default Claim Adjuster", Role.CLAIM_ADJUSTER),
    ("user", "user@claimdesk.io", "Default Customer", Role.CUSTOMER),
)


async def seed_default_users(session: AsyncSession, password: str) -> list[User]:
    """
    Create the default accounts that are missing.

    Returns:
        The accounts created by this call
    """
    service = UserService(session)
    created: list[User] = []

    for username, email, full_name, role in DEFAULT_ACCOUNTS:
        result = await session.execute(select(User.id).where(User.username == username))
        if result.first() is not None:
            continue

        user = await service.register(
            UserCreate(username=username, email=email, full_name=full_name, password=password),
            role=role,
        )
        created.append(user)

    if created:
        logger.info(f"Seeded default accounts: {', '.join(u.username for u in created)}")
    return created
