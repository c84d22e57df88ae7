"""
FastAPI Dependencies
Dependency injection for authentication, authorization and services
Source: https://fastapi.tiangolo.com/tutorial/dependencies/
"""

from collections.abc import Callable, Coroutine
from functools import lru_cache
from typing import Any
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from claimdesk.api.config import settings
from claimdesk.core.clock import Clock, SystemClock
from claimdesk.core.enums import Role
from claimdesk.core.permissions import has_permission
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.user import User
from claimdesk.services.claims_service import ClaimsService
from claimdesk.services.dashboard_service import DashboardService
from claimdesk.services.document_service import DocumentService
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.services.policy_service import PolicyService
from claimdesk.services.storage import FileStorage, build_file_storage
from claimdesk.services.ticket_service import TicketService
from claimdesk.services.user_service import UserService
from claimdesk.utils.auth import decode_token
from claimdesk.utils.errors import AuthenticationError, PermissionDeniedError

# HTTP Bearer token security scheme
# Source: https://swagger.io/docs/specification/authentication/bearer-authentication/
security = HTTPBearer()


# =============================================================================
# Authentication
# =============================================================================


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        AuthenticationError: If token is invalid or user not found

    Source: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/#get-the-current-user
    """
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid token")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise AuthenticationError("Invalid token payload")

    try:
        user_id = UUID(user_id_str)
    except ValueError as err:
        raise AuthenticationError("Invalid user ID in token") from err

    user = await uow.session.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get current user, rejecting disabled accounts.

    Raises:
        AuthenticationError: If user is disabled
    """
    if not current_user.enabled:
        raise AuthenticationError("User account is disabled")
    return current_user


# =============================================================================
# Authorization
# =============================================================================


def require_permission(permission: str) -> Callable[..., Coroutine[Any, Any, User]]:
    """
    Dependency factory checking the caller's role against ROLE_PERMISSIONS.

    Example:
        >>> @router.post("/", dependencies=[Depends(require_permission(POLICIES_WRITE))])
    """

    async def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if not has_permission(current_user.role, permission):
            raise PermissionDeniedError(
                f"Role {current_user.role.value} lacks permission '{permission}'"
            )
        return current_user

    return checker


def require_roles(*roles: Role) -> Callable[..., Coroutine[Any, Any, User]]:
    """Dependency factory admitting only the listed roles."""

    async def checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in roles:
            raise PermissionDeniedError(
                f"Requires one of: {', '.join(role.value for role in roles)}"
            )
        return current_user

    return checker


# =============================================================================
# Collaborators
# =============================================================================


def get_clock() -> Clock:
    return SystemClock()


@lru_cache
def get_file_storage() -> FileStorage:
    return build_file_storage(settings)


def get_user_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
) -> UserService:
    return UserService(uow.session, clock)


def get_policy_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
) -> PolicyService:
    return PolicyService(uow.session, clock)


def get_enrollment_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
) -> EnrollmentService:
    return EnrollmentService(uow.session, clock)


def get_document_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
    storage: FileStorage = Depends(get_file_storage),
) -> DocumentService:
    return DocumentService(
        uow.session,
        storage,
        clock,
        max_size_bytes=settings.upload_max_size_bytes,
        timeout_seconds=settings.STORAGE_TIMEOUT_SECONDS,
    )


def get_claims_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
    documents: DocumentService = Depends(get_document_service),
) -> ClaimsService:
    return ClaimsService(uow.session, clock, documents=documents)


def get_ticket_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
) -> TicketService:
    return TicketService(uow.session, clock)


def get_dashboard_service(
    uow: UnitOfWork = Depends(get_uow),
    clock: Clock = Depends(get_clock),
) -> DashboardService:
    return DashboardService(uow.session, clock)
