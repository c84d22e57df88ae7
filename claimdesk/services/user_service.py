"""
User Service.

Provides:
- Registration and administrator account creation
- Credential checks (disabled users are rejected)
- Profile updates, enable/disable, deletion
- Role-based listings (active agents and adjusters)
"""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import func, or_, select

from claimdesk.core.enums import Role
from claimdesk.core.exceptions import (
    AuthenticationFailedError,
    DuplicateKeyError,
    UserNotFoundError,
)
from claimdesk.models.user import User
from claimdesk.schemas.user import UserCreate, UserUpdate
from claimdesk.services.base import BaseService
from claimdesk.utils.auth import get_password_hash, verify_password
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)


class UserService(BaseService):
    """Identity store operations."""

    # =========================================================================
    # Create Operations
    # =========================================================================

    async def register(self, data: UserCreate, role: Role = Role.CUSTOMER) -> User:
        """
        Create an account.

        Raises:
            DuplicateKeyError: If the username or email is already taken
        """
        await self._ensure_unique(username=data.username, email=data.email)

        user = User(
            id=uuid4(),
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            phone=data.phone,
            address=data.address,
            role=role,
            enabled=True,
        )
        self.session.add(user)
        await self._flush(DuplicateKeyError("Username or email already registered"))

        logger.info(f"Registered user {user.username} with role {role.value}")
        return user

    async def _ensure_unique(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_id: UUID | None = None,
    ) -> None:
        # Login accepts either column, so each value must be free in both
        if username is not None and await self._login_taken(username, exclude_id):
            raise DuplicateKeyError(f"Username already taken: {username}")

        if email is not None and await self._login_taken(email, exclude_id):
            raise DuplicateKeyError(f"Email already registered: {email}")

    async def _login_taken(self, value: str, exclude_id: UUID | None) -> bool:
        query = select(User.id).where(
            or_(
                func.lower(User.username) == value.lower(),
                func.lower(User.email) == value.lower(),
            )
        )
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        return (await self.session.execute(query)).first() is not None

    # =========================================================================
    # Authentication
    # =========================================================================

    async def authenticate(self, login: str, password: str) -> User:
        """
        Check credentials by username or email.

        An exact username match wins over an email match.

        Raises:
            AuthenticationFailedError: Unknown user, wrong password or disabled account
        """
        user = await self._find_by_login(login)

        if user is None or not verify_password(password, user.hashed_password):
            raise AuthenticationFailedError("Incorrect username or password")

        if not user.enabled:
            raise AuthenticationFailedError("Account is disabled")

        user.last_login = self.clock.now()
        await self._flush()

        logger.info(f"User logged in: {user.username}")
        return user

    async def _find_by_login(self, login: str) -> User | None:
        for column in (User.username, User.email):
            result = await self.session.execute(
                select(User).where(func.lower(column) == login.lower())
            )
            user = result.scalars().first()
            if user is not None:
                return user
        return None

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> User:
        user = await self.get(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise AuthenticationFailedError("Current password is incorrect")

        user.hashed_password = get_password_hash(new_password)
        await self._flush()
        return user

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get(self, user_id: UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return user

    async def get_by_username(self, username: str) -> User:
        result = await self.session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(f"User not found: {username}")
        return user

    async def list_users(self, skip: int = 0, limit: int = 100) -> Sequence[User]:
        result = await self.session.execute(
            select(User).order_by(User.username).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_by_role(self, role: Role, enabled_only: bool = False) -> Sequence[User]:
        query = select(User).where(User.role == role)
        if enabled_only:
            query = query.where(User.enabled.is_(True))
        result = await self.session.execute(query.order_by(User.username))
        return result.scalars().all()

    async def list_active_agents(self) -> Sequence[User]:
        return await self.list_by_role(Role.AGENT, enabled_only=True)

    async def list_active_adjusters(self) -> Sequence[User]:
        return await self.list_by_role(Role.CLAIM_ADJUSTER, enabled_only=True)

    async def count_by_role(self, role: Role) -> int:
        result = await self.session.execute(select(func.count(User.id)).where(User.role == role))
        return result.scalar_one()

    async def count_users(self) -> int:
        return (await self.session.execute(select(func.count(User.id)))).scalar_one()

    # =========================================================================
    # Update Operations
    # =========================================================================

    async def update_user(self, user_id: UUID, data: UserUpdate, allow_role_change: bool = False) -> User:
        """
        Update profile fields. Only provided fields change.

        ``role`` is ignored unless ``allow_role_change`` is set (administrators).
        """
        user = await self.get(user_id)
        changes = data.model_dump(exclude_unset=True)

        role = changes.pop("role", None)
        if role is not None and allow_role_change:
            user.role = role

        if "email" in changes and changes["email"] is None:
            del changes["email"]
        if "email" in changes:
            await self._ensure_unique(email=changes["email"], exclude_id=user.id)

        for field, value in changes.items():
            setattr(user, field, value)

        await self._flush(DuplicateKeyError("Email already registered"))
        logger.info(f"User profile updated: {user.username}")
        return user

    async def enable_user(self, user_id: UUID) -> User:
        return await self._set_enabled(user_id, True)

    async def disable_user(self, user_id: UUID) -> User:
        return await self._set_enabled(user_id, False)

    async def _set_enabled(self, user_id: UUID, enabled: bool) -> User:
        user = await self.get(user_id)
        user.enabled = enabled
        await self._flush()
        logger.info(f"User {user.username} {'enabled' if enabled else 'disabled'}")
        return user

    # =========================================================================
    # Delete Operations
    # =========================================================================

    async def delete_user(self, user_id: UUID) -> None:
        """Hard delete. Fails with ConflictError while other records reference the user."""
        user = await self.get(user_id)
        await self.session.delete(user)
        await self._flush()
        logger.info(f"User account deleted: {user.username}")
