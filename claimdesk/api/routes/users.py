"""
User Routes
Self-service profile and administrator account management
Source: https://fastapi.tiangolo.com/tutorial/sql-databases/
"""

from collections.abc import Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, status

from claimdesk.api.deps import get_current_active_user, get_user_service, require_permission
from claimdesk.core.enums import Role
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import USERS_MANAGE, USERS_READ
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.user import User
from claimdesk.schemas.user import AdminUserCreate, PasswordChange, UserResponse, UserUpdate
from claimdesk.services.user_service import UserService
from claimdesk.utils.errors import to_http_exception

router = APIRouter(prefix="/users", tags=["Users"])


# =============================================================================
# Current User
# =============================================================================


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
) -> User:
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    """
    Update current user's profile. A ``role`` in the body is ignored.

    Source: https://datatracker.ietf.org/doc/html/rfc5789
    """
    try:
        user = await service.update_user(current_user.id, user_update)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return user


@router.post("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_active_user),
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    try:
        await service.change_password(current_user.id, data.current_password, data.new_password)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err


# =============================================================================
# Directory
# =============================================================================


@router.get(
    "/agents",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(USERS_READ))],
)
async def list_agents(service: UserService = Depends(get_user_service)) -> Sequence[User]:
    """Enabled agents, e.g. for enrollment assistance."""
    return await service.list_active_agents()


@router.get(
    "/adjusters",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(USERS_READ))],
)
async def list_adjusters(service: UserService = Depends(get_user_service)) -> Sequence[User]:
    """Enabled claim adjusters, e.g. for claim assignment."""
    return await service.list_active_adjusters()


# =============================================================================
# Administration
# =============================================================================


@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def list_users(
    skip: int = 0,
    limit: int = 100,
    service: UserService = Depends(get_user_service),
) -> Sequence[User]:
    return await service.list_users(skip=skip, limit=limit)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def create_user(
    user_data: AdminUserCreate,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    """Create an account with any role."""
    try:
        user = await service.register(user_data, role=user_data.role)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return user


@router.get(
    "/role/{role}",
    response_model=list[UserResponse],
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def list_users_by_role(
    role: Role,
    service: UserService = Depends(get_user_service),
) -> Sequence[User]:
    return await service.list_by_role(role)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(USERS_READ))],
)
async def get_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
) -> User:
    try:
        return await service.get(user_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def update_user(
    user_id: UUID,
    user_update: UserUpdate,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    try:
        user = await service.update_user(user_id, user_update, allow_role_change=True)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return user


@router.post(
    "/{user_id}/enable",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def enable_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    try:
        user = await service.enable_user(user_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return user


@router.post(
    "/{user_id}/disable",
    response_model=UserResponse,
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def disable_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    try:
        user = await service.disable_user(user_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(USERS_MANAGE))],
)
async def delete_user(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    try:
        await service.delete_user(user_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
