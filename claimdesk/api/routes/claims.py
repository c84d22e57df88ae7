"""
Claims Routes
Claim submission, assignment, review and tracking
Source: https://fastapi.tiangolo.com/tutorial/request-forms-and-files/
"""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from claimdesk.api.config import settings
from claimdesk.api.deps import get_claims_service, get_current_active_user, require_permission
from claimdesk.core.enums import ClaimStatus
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import (
    CLAIMS_ASSIGN,
    CLAIMS_CANCEL,
    CLAIMS_MANAGE,
    CLAIMS_READ_ALL,
    CLAIMS_REVIEW,
    CLAIMS_SUBMIT,
    CLAIMS_SUBMIT_FOR_OTHERS,
    CLAIMS_UPDATE,
    has_permission,
)
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.claim import Claim, ClaimStatusHistory
from claimdesk.models.user import User
from claimdesk.schemas.claim import (
    ClaimAssign,
    ClaimCreate,
    ClaimResponse,
    ClaimReview,
    ClaimStatusHistoryResponse,
    ClaimStatusUpdate,
    ClaimSubmissionResponse,
    ClaimUpdate,
)
from claimdesk.services.claims_service import ClaimsService
from claimdesk.services.document_service import UploadedFile
from claimdesk.utils.errors import PermissionDeniedError, to_http_exception

router = APIRouter(prefix="/claims", tags=["Claims"])


def is_claim_party(claim: Claim, user: User) -> bool:
    """Claimant, filing agent or assigned adjuster."""
    return user.id in (claim.claimant_id, claim.agent_id, claim.adjuster_id)


def ensure_can_view(claim: Claim, user: User) -> None:
    if not is_claim_party(claim, user) and not has_permission(user.role, CLAIMS_READ_ALL):
        raise PermissionDeniedError("Not your claim")


def _resolve_claimant(requested: UUID | None, current_user: User) -> tuple[UUID, UUID | None]:
    """Return (claimant_id, agent_id) for a submission by ``current_user``."""
    claimant_id = requested or current_user.id
    if claimant_id == current_user.id:
        return claimant_id, None
    if not has_permission(current_user.role, CLAIMS_SUBMIT_FOR_OTHERS):
        raise PermissionDeniedError("Cannot submit claims for other users")
    return claimant_id, current_user.id


# =============================================================================
# Submission
# =============================================================================


@router.post("", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def submit_claim(
    data: ClaimCreate,
    current_user: User = Depends(require_permission(CLAIMS_SUBMIT)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    claimant_id, agent_id = _resolve_claimant(data.claimant_id, current_user)
    try:
        claim = await service.submit_claim(data, claimant_id, agent_id=agent_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.post(
    "/with-documents",
    response_model=ClaimSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_claim_with_documents(
    policy_id: UUID = Form(...),
    claim_amount: Decimal = Form(..., gt=0),
    description: str = Form(..., min_length=1),
    reason: str | None = Form(None, max_length=500),
    claim_date: date | None = Form(None),
    claimant_id: UUID | None = Form(None),
    files: list[UploadFile] | None = File(None),
    current_user: User = Depends(require_permission(CLAIMS_SUBMIT)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> ClaimSubmissionResponse:
    """
    Submit a claim with attachments (multipart form).

    The claim is created even if some attachments are rejected; those are
    listed under ``failed_attachments``.
    """
    claimant, agent_id = _resolve_claimant(claimant_id, current_user)
    try:
        data = ClaimCreate(
            policy_id=policy_id,
            claim_amount=claim_amount,
            description=description,
            reason=reason,
            claim_date=claim_date,
        )
    except ValidationError as err:
        raise RequestValidationError(err.errors()) from err

    # Read one byte past the limit so oversize files are still detected
    uploads = [
        UploadedFile(
            filename=upload.filename or "unnamed",
            data=await upload.read(settings.upload_max_size_bytes + 1),
            content_type=upload.content_type,
        )
        for upload in files or []
    ]

    try:
        submission = await service.submit_claim_with_documents(
            data, claimant, uploads, agent_id=agent_id
        )
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    return ClaimSubmissionResponse.model_validate(submission, from_attributes=True)


# =============================================================================
# Listings
# =============================================================================


@router.get("/mine", response_model=list[ClaimResponse])
async def list_my_claims(
    current_user: User = Depends(get_current_active_user),
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    return await service.list_by_claimant(current_user.id)


@router.get("/filed", response_model=list[ClaimResponse])
async def list_filed_claims(
    current_user: User = Depends(require_permission(CLAIMS_SUBMIT_FOR_OTHERS)),
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    """Claims the calling agent filed for customers."""
    return await service.list_by_agent(current_user.id)


@router.get("/assigned", response_model=list[ClaimResponse])
async def list_assigned_claims(
    current_user: User = Depends(require_permission(CLAIMS_REVIEW)),
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    return await service.list_by_adjuster(current_user.id)


@router.get(
    "",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_permission(CLAIMS_READ_ALL))],
)
async def list_claims(
    status_filter: ClaimStatus | None = Query(None, alias="status"),
    policy_id: UUID | None = None,
    skip: int = 0,
    limit: int = 100,
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    if status_filter is not None:
        return await service.list_by_status(status_filter)
    if policy_id is not None:
        return await service.list_by_policy(policy_id)
    return await service.list_claims(skip=skip, limit=limit)


@router.get(
    "/pending",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_permission(CLAIMS_READ_ALL))],
)
async def list_pending_claims(
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    """Claims awaiting a decision (PENDING or UNDER_REVIEW)."""
    return await service.list_pending()


@router.get(
    "/unassigned",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_permission(CLAIMS_READ_ALL))],
)
async def list_unassigned_claims(
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[Claim]:
    return await service.list_unassigned()


@router.get(
    "/stats",
    dependencies=[Depends(require_permission(CLAIMS_READ_ALL))],
)
async def get_claims_stats(
    service: ClaimsService = Depends(get_claims_service),
) -> dict[str, int]:
    """Claim counts by status."""
    return await service.get_claims_stats()


@router.get("/number/{claim_number}", response_model=ClaimResponse)
async def get_claim_by_number(
    claim_number: str,
    current_user: User = Depends(get_current_active_user),
    service: ClaimsService = Depends(get_claims_service),
) -> Claim:
    try:
        claim = await service.get_claim_by_number(claim_number)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    ensure_can_view(claim, current_user)
    return claim


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(
    claim_id: UUID,
    current_user: User = Depends(get_current_active_user),
    service: ClaimsService = Depends(get_claims_service),
) -> Claim:
    try:
        claim = await service.get_claim(claim_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    ensure_can_view(claim, current_user)
    return claim


@router.get("/{claim_id}/history", response_model=list[ClaimStatusHistoryResponse])
async def get_claim_history(
    claim_id: UUID,
    current_user: User = Depends(get_current_active_user),
    service: ClaimsService = Depends(get_claims_service),
) -> Sequence[ClaimStatusHistory]:
    try:
        claim = await service.get_claim(claim_id)
        ensure_can_view(claim, current_user)
        return await service.get_status_history(claim_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err


# =============================================================================
# Lifecycle
# =============================================================================


@router.patch("/{claim_id}", response_model=ClaimResponse)
async def update_claim(
    claim_id: UUID,
    data: ClaimUpdate,
    current_user: User = Depends(require_permission(CLAIMS_UPDATE)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    """Edit a PENDING claim."""
    try:
        claim = await service.get_claim(claim_id)
        if current_user.id not in (claim.claimant_id, claim.agent_id) and not has_permission(
            current_user.role, CLAIMS_MANAGE
        ):
            raise PermissionDeniedError("Not your claim")
        claim = await service.update_claim(claim_id, data)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.post(
    "/{claim_id}/assign",
    response_model=ClaimResponse,
)
async def assign_adjuster(
    claim_id: UUID,
    data: ClaimAssign,
    current_user: User = Depends(require_permission(CLAIMS_ASSIGN)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    try:
        claim = await service.assign_adjuster(claim_id, data.adjuster_id, changed_by=current_user.id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.post("/{claim_id}/review", response_model=ClaimResponse)
async def review_claim(
    claim_id: UUID,
    decision: ClaimReview,
    current_user: User = Depends(require_permission(CLAIMS_REVIEW)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    """Approve or reject a claim under review."""
    try:
        claim = await service.review_claim(claim_id, decision, adjuster_id=current_user.id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.put("/{claim_id}/status", response_model=ClaimResponse)
async def update_claim_status(
    claim_id: UUID,
    data: ClaimStatusUpdate,
    current_user: User = Depends(require_permission(CLAIMS_MANAGE)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    try:
        claim = await service.update_claim_status(
            claim_id, data.status, changed_by=current_user.id, reason=data.reason
        )
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.post("/{claim_id}/cancel", response_model=ClaimResponse)
async def cancel_claim(
    claim_id: UUID,
    current_user: User = Depends(require_permission(CLAIMS_CANCEL)),
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Claim:
    """Withdraw your own PENDING claim."""
    try:
        claim = await service.cancel_claim(claim_id, requester_id=current_user.id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return claim


@router.delete(
    "/{claim_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(CLAIMS_MANAGE))],
)
async def delete_claim(
    claim_id: UUID,
    service: ClaimsService = Depends(get_claims_service),
    uow: UnitOfWork = Depends(get_uow),
) -> None:
    """Delete a CANCELLED claim together with its documents."""
    try:
        await service.delete_claim(claim_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
