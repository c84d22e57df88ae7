"""
Enrollment Routes
Policy enrollment for customers and by agents on a customer's behalf
"""

from collections.abc import Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, status

from claimdesk.api.deps import (
    get_current_active_user,
    get_enrollment_service,
    require_permission,
    require_roles,
)
from claimdesk.core.enums import Role
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import (
    ENROLLMENTS_CANCEL,
    ENROLLMENTS_CREATE,
    ENROLLMENTS_ENROLL_OTHERS,
    ENROLLMENTS_MANAGE,
    ENROLLMENTS_READ_ALL,
    has_permission,
)
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.enrollment import Enrollment
from claimdesk.models.user import User
from claimdesk.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
)
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.utils.errors import PermissionDeniedError, to_http_exception

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


def _is_party(enrollment: Enrollment, user: User) -> bool:
    return user.id in (enrollment.policyholder_id, enrollment.agent_id)


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    data: EnrollmentCreate,
    current_user: User = Depends(require_permission(ENROLLMENTS_CREATE)),
    service: EnrollmentService = Depends(get_enrollment_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Enrollment:
    """
    Enroll in a policy.

    With ``policyholder_id`` set to another user, the caller enrolls that
    user and is recorded as the assisting agent.
    """
    policyholder_id = data.policyholder_id or current_user.id
    agent_id = None
    if policyholder_id != current_user.id:
        if not has_permission(current_user.role, ENROLLMENTS_ENROLL_OTHERS):
            raise PermissionDeniedError("Cannot enroll other users")
        agent_id = current_user.id

    try:
        enrollment = await service.enroll(data.policy_id, policyholder_id, agent_id=agent_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return enrollment


@router.get("/mine", response_model=list[EnrollmentResponse])
async def list_my_enrollments(
    current_user: User = Depends(get_current_active_user),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> Sequence[Enrollment]:
    return await service.list_by_policyholder(current_user.id)


@router.get("/assisted", response_model=list[EnrollmentResponse])
async def list_assisted_enrollments(
    current_user: User = Depends(require_permission(ENROLLMENTS_ENROLL_OTHERS)),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> Sequence[Enrollment]:
    """Enrollments the calling agent created for customers."""
    return await service.list_by_agent(current_user.id)


@router.get(
    "",
    response_model=list[EnrollmentResponse],
    dependencies=[Depends(require_permission(ENROLLMENTS_READ_ALL))],
)
async def list_enrollments(
    policy_id: UUID | None = None,
    skip: int = 0,
    limit: int = 100,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> Sequence[Enrollment]:
    if policy_id is not None:
        return await service.list_by_policy(policy_id)
    return await service.list_all(skip=skip, limit=limit)


@router.get(
    "/user/{user_id}",
    response_model=list[EnrollmentResponse],
    dependencies=[Depends(require_roles(Role.ADMIN, Role.AGENT))],
)
async def list_active_enrollments_for_user(
    user_id: UUID,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> Sequence[Enrollment]:
    """ACTIVE enrollments of a user: the policies they can claim against."""
    return await service.list_active_for_user(user_id)


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: UUID,
    current_user: User = Depends(get_current_active_user),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> Enrollment:
    try:
        enrollment = await service.get(enrollment_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    if not _is_party(enrollment, current_user) and not has_permission(
        current_user.role, ENROLLMENTS_READ_ALL
    ):
        raise PermissionDeniedError("Not your enrollment")
    return enrollment


@router.post("/{enrollment_id}/cancel", response_model=EnrollmentResponse)
async def cancel_enrollment(
    enrollment_id: UUID,
    current_user: User = Depends(require_permission(ENROLLMENTS_CANCEL)),
    service: EnrollmentService = Depends(get_enrollment_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Enrollment:
    try:
        enrollment = await service.get(enrollment_id)
        if not _is_party(enrollment, current_user) and not has_permission(
            current_user.role, ENROLLMENTS_MANAGE
        ):
            raise PermissionDeniedError("Not your enrollment")
        enrollment = await service.cancel(enrollment_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return enrollment


@router.put(
    "/{enrollment_id}/status",
    response_model=EnrollmentResponse,
    dependencies=[Depends(require_permission(ENROLLMENTS_MANAGE))],
)
async def update_enrollment_status(
    enrollment_id: UUID,
    data: EnrollmentStatusUpdate,
    service: EnrollmentService = Depends(get_enrollment_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Enrollment:
    try:
        enrollment = await service.update_status(enrollment_id, data.status)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return enrollment


@router.delete(
    "/{enrollment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(ENROLLMENTS_MANAGE))],
)
async def delete_enrollment(
    enrollment_id: UUID,
    service: EnrollmentService = Depends(get_enrollment_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    """Hard-delete a CANCELLED enrollment."""
    try:
        await service.delete(enrollment_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
