"""
Policy Routes
Policy catalog browsing and administration
"""

from collections.abc import Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from claimdesk.api.deps import get_policy_service, require_permission
from claimdesk.core.enums import PolicyStatus
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import POLICIES_DELETE, POLICIES_READ, POLICIES_WRITE
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.policy import Policy
from claimdesk.models.user import User
from claimdesk.schemas.policy import (
    PolicyCreate,
    PolicyResponse,
    PolicyStatusUpdate,
    PolicyUpdate,
)
from claimdesk.services.policy_service import PolicyService
from claimdesk.utils.errors import to_http_exception

router = APIRouter(prefix="/policies", tags=["Policies"])


@router.get(
    "",
    response_model=list[PolicyResponse],
    dependencies=[Depends(require_permission(POLICIES_READ))],
)
async def list_policies(
    status_filter: PolicyStatus | None = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    service: PolicyService = Depends(get_policy_service),
) -> Sequence[Policy]:
    if status_filter is not None:
        return await service.list_by_status(status_filter)
    return await service.list_policies(skip=skip, limit=limit)


@router.get(
    "/active",
    response_model=list[PolicyResponse],
    dependencies=[Depends(require_permission(POLICIES_READ))],
)
async def list_active_policies(
    service: PolicyService = Depends(get_policy_service),
) -> Sequence[Policy]:
    return await service.list_active()


@router.get(
    "/search",
    response_model=list[PolicyResponse],
    dependencies=[Depends(require_permission(POLICIES_READ))],
)
async def search_policies(
    keyword: str = Query(..., min_length=1),
    service: PolicyService = Depends(get_policy_service),
) -> Sequence[Policy]:
    """Case-insensitive match on the policy name."""
    return await service.search(keyword)


@router.get(
    "/number/{policy_number}",
    response_model=PolicyResponse,
    dependencies=[Depends(require_permission(POLICIES_READ))],
)
async def get_policy_by_number(
    policy_number: str,
    service: PolicyService = Depends(get_policy_service),
) -> Policy:
    try:
        return await service.get_by_number(policy_number)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err


@router.get(
    "/{policy_id}",
    response_model=PolicyResponse,
    dependencies=[Depends(require_permission(POLICIES_READ))],
)
async def get_policy(
    policy_id: UUID,
    service: PolicyService = Depends(get_policy_service),
) -> Policy:
    try:
        return await service.get_policy(policy_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err


@router.post("", response_model=PolicyResponse, status_code=status.HTTP_201_CREATED)
async def create_policy(
    data: PolicyCreate,
    current_user: User = Depends(require_permission(POLICIES_WRITE)),
    service: PolicyService = Depends(get_policy_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Policy:
    try:
        policy = await service.create_policy(data, created_by=current_user.id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return policy


@router.patch(
    "/{policy_id}",
    response_model=PolicyResponse,
    dependencies=[Depends(require_permission(POLICIES_WRITE))],
)
async def update_policy(
    policy_id: UUID,
    data: PolicyUpdate,
    service: PolicyService = Depends(get_policy_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Policy:
    try:
        policy = await service.update_policy(policy_id, data)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return policy


@router.put(
    "/{policy_id}/status",
    response_model=PolicyResponse,
    dependencies=[Depends(require_permission(POLICIES_WRITE))],
)
async def update_policy_status(
    policy_id: UUID,
    data: PolicyStatusUpdate,
    service: PolicyService = Depends(get_policy_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Policy:
    try:
        policy = await service.update_status(policy_id, data.status)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return policy


@router.post(
    "/{policy_id}/cancel",
    response_model=PolicyResponse,
    dependencies=[Depends(require_permission(POLICIES_WRITE))],
)
async def cancel_policy(
    policy_id: UUID,
    service: PolicyService = Depends(get_policy_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Policy:
    try:
        policy = await service.cancel_policy(policy_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return policy


@router.delete(
    "/{policy_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(POLICIES_DELETE))],
)
async def delete_policy(
    policy_id: UUID,
    service: PolicyService = Depends(get_policy_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    """Soft-delete a CANCELLED policy."""
    try:
        await service.delete_policy(policy_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
