"""
Claim Lifecycle Service.

Provides:
- Claim submission with eligibility and coverage checks
- Submission with attachments (per-file outcome reported back)
- Adjuster assignment and review decisions
- Status changes validated by ClaimStateMachine, with history rows
- Claimant cancellation and administrative deletion
- Claim queries and statistics

Usage:
    service = ClaimsService(session, clock, documents=document_service)
    claim = await service.submit_claim(data, claimant_id=user.id)
    claim = await service.assign_adjuster(claim.id, adjuster.id)
    claim = await service.review_claim(claim.id, decision, adjuster.id)
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.core.clock import Clock
from claimdesk.core.enums import ClaimStatus, Role
from claimdesk.core.exceptions import (
    AccessDeniedError,
    ClaimDeskError,
    ClaimNotFoundError,
    CoverageExceededError,
    InvalidAmountError,
    InvalidAssigneeError,
    InvalidStateError,
    NotEnrolledError,
    PolicyNotFoundError,
    UserNotFoundError,
)
from claimdesk.core.identifiers import add_with_reference, generate_claim_number
from claimdesk.models.claim import Claim, ClaimStatusHistory
from claimdesk.models.document import Document
from claimdesk.models.policy import Policy
from claimdesk.models.user import User
from claimdesk.schemas.claim import ClaimCreate, ClaimReview, ClaimUpdate
from claimdesk.services.base import BaseService
from claimdesk.services.claim_state_machine import OPEN_STATUSES, ClaimStateMachine
from claimdesk.services.document_service import DocumentService, UploadedFile
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

REVIEW_DECISIONS = (ClaimStatus.APPROVED, ClaimStatus.REJECTED)


@dataclass
class AttachmentFailure:
    filename: str
    reason: str


@dataclass
class ClaimSubmission:
    """A submitted claim and what happened to each of its attachments."""

    claim: Claim
    documents: list[Document] = field(default_factory=list)
    failed_attachments: list[AttachmentFailure] = field(default_factory=list)


class ClaimsService(BaseService):
    """Claim lifecycle operations."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock | None = None,
        documents: DocumentService | None = None,
        enrollments: EnrollmentService | None = None,
        state_machine: ClaimStateMachine | None = None,
    ):
        super().__init__(session, clock)
        self.documents = documents
        self.enrollments = enrollments or EnrollmentService(session, self.clock)
        self.state_machine = state_machine or ClaimStateMachine()

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit_claim(
        self,
        data: ClaimCreate,
        claimant_id: UUID,
        agent_id: UUID | None = None,
    ) -> Claim:
        """
        File a new claim in PENDING status.

        Args:
            data: Claim details; ``claim_date`` defaults to today
            claimant_id: Policyholder the claim is filed for
            agent_id: Agent filing on the claimant's behalf, if any

        Raises:
            PolicyNotFoundError: Unknown or deleted policy
            UserNotFoundError: Unknown claimant
            NotEnrolledError: Claimant has no ACTIVE enrollment in the policy
            CoverageExceededError: Amount is above the policy coverage
        """
        policy = await self.session.get(Policy, data.policy_id)
        if policy is None or policy.deleted_at is not None:
            raise PolicyNotFoundError(f"Policy not found: {data.policy_id}")

        if await self.session.get(User, claimant_id) is None:
            raise UserNotFoundError(f"User not found: {claimant_id}")

        if not await self.enrollments.has_active_enrollment(claimant_id, policy.id):
            raise NotEnrolledError(
                f"User {claimant_id} holds no active enrollment in policy {policy.policy_number}"
            )

        if data.claim_amount > policy.coverage_amount:
            raise CoverageExceededError(data.claim_amount, policy.coverage_amount)

        claim_date = data.claim_date or self.clock.today()

        def build(claim_number: str) -> Claim:
            return Claim(
                id=uuid4(),
                claim_number=claim_number,
                policy_id=policy.id,
                claimant_id=claimant_id,
                agent_id=agent_id,
                claim_amount=data.claim_amount,
                claim_date=claim_date,
                description=data.description,
                reason=data.reason,
                status=ClaimStatus.PENDING,
            )

        claim = await add_with_reference(
            self.session, build, generate_claim_number, self.clock.today()
        )
        self._record_history(claim, None, ClaimStatus.PENDING, agent_id or claimant_id, "Claim submitted")
        await self._flush()

        logger.info(
            f"Claim {claim.claim_number} submitted for policy {policy.policy_number} "
            f"(amount: {claim.claim_amount})"
        )
        return claim

    async def submit_claim_with_documents(
        self,
        data: ClaimCreate,
        claimant_id: UUID,
        uploads: Sequence[UploadedFile],
        agent_id: UUID | None = None,
    ) -> ClaimSubmission:
        """
        Submit a claim, then upload each attachment.

        The claim is kept even when attachments fail; every failure is
        returned in ``failed_attachments``.
        """
        if self.documents is None:
            raise RuntimeError("ClaimsService needs a DocumentService to accept attachments")

        claim = await self.submit_claim(data, claimant_id, agent_id)
        submission = ClaimSubmission(claim=claim)
        uploader = agent_id or claimant_id

        for upload in uploads:
            try:
                async with self.session.begin_nested():
                    document = await self.documents.upload(
                        claim.id,
                        upload.filename,
                        upload.data,
                        upload.content_type,
                        uploaded_by=uploader,
                    )
            except ClaimDeskError as err:
                logger.warning(
                    f"Attachment {upload.filename} rejected for claim {claim.claim_number}: {err}"
                )
                submission.failed_attachments.append(AttachmentFailure(upload.filename, str(err)))
                continue
            submission.documents.append(document)

        return submission

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def assign_adjuster(
        self,
        claim_id: UUID,
        adjuster_id: UUID,
        changed_by: UUID | None = None,
    ) -> Claim:
        """
        Assign (or reassign) an adjuster and move the claim to UNDER_REVIEW.

        Raises:
            ClaimNotFoundError: Unknown claim
            InvalidStateError: Claim is APPROVED, REJECTED or CANCELLED
            UserNotFoundError: Unknown adjuster
            InvalidAssigneeError: User is not an enabled CLAIM_ADJUSTER
        """
        claim = await self.get_claim(claim_id)
        self._validate(claim, ClaimStatus.UNDER_REVIEW, has_adjuster=True)

        adjuster = await self.session.get(User, adjuster_id)
        if adjuster is None:
            raise UserNotFoundError(f"User not found: {adjuster_id}")
        if adjuster.role != Role.CLAIM_ADJUSTER or not adjuster.enabled:
            raise InvalidAssigneeError(
                f"User {adjuster.username} is not an active claim adjuster"
            )

        claim.adjuster_id = adjuster.id
        self._transition(
            claim, ClaimStatus.UNDER_REVIEW, changed_by, f"Assigned to {adjuster.username}"
        )
        await self._flush()

        logger.info(f"Claim {claim.claim_number} assigned to adjuster {adjuster.username}")
        return claim

    async def review_claim(self, claim_id: UUID, decision: ClaimReview, adjuster_id: UUID) -> Claim:
        """
        Record an adjuster's decision.

        An approval without an amount approves the full claim amount.

        Raises:
            InvalidStateError: Decision is not APPROVED/REJECTED, or the claim
                is not UNDER_REVIEW
            InvalidAmountError: Approved amount outside 0..claim_amount
            ConflictError: ``expected_version`` does not match
        """
        if decision.status not in REVIEW_DECISIONS:
            raise InvalidStateError(
                f"Review decision must be APPROVED or REJECTED, got {decision.status.value}"
            )

        claim = await self.get_claim(claim_id)
        self._check_version(claim, decision.expected_version)

        if claim.status != ClaimStatus.UNDER_REVIEW:
            raise InvalidStateError(
                f"Claim {claim.claim_number} is {claim.status.value}; only claims under review can be reviewed"
            )

        approved_amount = decision.approved_amount
        if approved_amount is None and decision.status == ClaimStatus.APPROVED:
            approved_amount = claim.claim_amount
        if approved_amount is not None:
            self._check_approved_amount(claim, approved_amount)

        claim.adjuster_id = adjuster_id
        claim.approved_amount = approved_amount
        claim.remarks = decision.remarks
        self._transition(claim, decision.status, adjuster_id, decision.remarks)
        await self._flush()

        logger.info(f"Claim {claim.claim_number} reviewed: {decision.status.value}")
        return claim

    async def update_claim(self, claim_id: UUID, data: ClaimUpdate) -> Claim:
        """
        Edit a PENDING claim. The new amount is re-checked against coverage.

        Raises:
            InvalidStateError: Claim is no longer PENDING
            CoverageExceededError: New amount is above the policy coverage
            ConflictError: ``expected_version`` does not match
        """
        claim = await self.get_claim(claim_id)
        self._check_version(claim, data.expected_version)

        if claim.status != ClaimStatus.PENDING:
            raise InvalidStateError(
                f"Claim {claim.claim_number} is {claim.status.value}; only PENDING claims can be edited"
            )

        if data.claim_amount is not None:
            policy = await self.session.get(Policy, claim.policy_id)
            if policy is not None and data.claim_amount > policy.coverage_amount:
                raise CoverageExceededError(data.claim_amount, policy.coverage_amount)
            claim.claim_amount = data.claim_amount
        if data.description is not None:
            claim.description = data.description
        if "reason" in data.model_fields_set:
            claim.reason = data.reason

        await self._flush()
        logger.info(f"Claim {claim.claim_number} updated")
        return claim

    async def update_claim_status(
        self,
        claim_id: UUID,
        status: ClaimStatus,
        changed_by: UUID | None = None,
        reason: str | None = None,
    ) -> Claim:
        """
        Move a claim to ``status`` if the transition table allows it.

        Raises:
            InvalidStateError: Transition not allowed, or UNDER_REVIEW/APPROVED/
                REJECTED requested for a claim without an adjuster
        """
        claim = await self.get_claim(claim_id)
        self._validate(claim, status, has_adjuster=claim.adjuster_id is not None)

        if status == ClaimStatus.APPROVED and claim.approved_amount is None:
            claim.approved_amount = claim.claim_amount

        self._transition(claim, status, changed_by, reason)
        await self._flush()
        return claim

    async def cancel_claim(self, claim_id: UUID, requester_id: UUID) -> Claim:
        """
        Withdraw a claim. Only the claimant may cancel, and only while PENDING.

        Raises:
            AccessDeniedError: Requester is not the claimant
            InvalidStateError: Claim is not PENDING
        """
        claim = await self.get_claim(claim_id)
        if claim.claimant_id != requester_id:
            raise AccessDeniedError(f"Only the claimant can cancel claim {claim.claim_number}")

        self._validate(claim, ClaimStatus.CANCELLED)
        self._transition(claim, ClaimStatus.CANCELLED, requester_id, "Cancelled by claimant")
        await self._flush()

        logger.info(f"Claim {claim.claim_number} cancelled by claimant")
        return claim

    async def delete_claim(self, claim_id: UUID) -> None:
        """
        Hard-delete a CANCELLED claim with its documents and history.

        Raises:
            InvalidStateError: Claim is not CANCELLED
            StorageError: A document blob could not be removed
        """
        claim = await self.get_claim(claim_id)
        if claim.status != ClaimStatus.CANCELLED:
            raise InvalidStateError(
                f"Only cancelled claims can be deleted (current: {claim.status.value})"
            )
        if self.documents is None:
            raise RuntimeError("ClaimsService needs a DocumentService to delete claims")

        removed = await self.documents.delete_by_claim(claim.id)
        await self.session.execute(
            delete(ClaimStatusHistory).where(ClaimStatusHistory.claim_id == claim.id)
        )
        await self.session.delete(claim)
        await self._flush()

        logger.info(f"Deleted claim {claim.claim_number} ({removed} documents)")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate(self, claim: Claim, status: ClaimStatus, has_adjuster: bool = False) -> None:
        result = self.state_machine.validate_transition(claim.status, status, has_adjuster)
        if not result.success:
            raise InvalidStateError(f"Claim {claim.claim_number}: {result.error}")

    def _transition(
        self,
        claim: Claim,
        new_status: ClaimStatus,
        changed_by: UUID | None,
        reason: str | None = None,
    ) -> None:
        previous = claim.status
        claim.status = new_status
        self._record_history(claim, previous, new_status, changed_by, reason)
        logger.info(f"Claim {claim.claim_number}: {previous.value} -> {new_status.value}")

    def _record_history(
        self,
        claim: Claim,
        previous: ClaimStatus | None,
        new_status: ClaimStatus,
        changed_by: UUID | None,
        reason: str | None,
    ) -> None:
        self.session.add(
            ClaimStatusHistory(
                id=uuid4(),
                claim_id=claim.id,
                previous_status=previous,
                new_status=new_status,
                changed_at=self.clock.now(),
                changed_by=changed_by,
                reason=reason[:500] if reason else None,
            )
        )

    @staticmethod
    def _check_approved_amount(claim: Claim, amount: Decimal) -> None:
        if amount < 0 or amount > claim.claim_amount:
            raise InvalidAmountError(
                f"Approved amount {amount} must be between 0 and the claim amount {claim.claim_amount}"
            )

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_claim(self, claim_id: UUID) -> Claim:
        claim = await self.session.get(Claim, claim_id)
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")
        return claim

    async def get_claim_by_number(self, claim_number: str) -> Claim:
        result = await self.session.execute(select(Claim).where(Claim.claim_number == claim_number))
        claim = result.scalar_one_or_none()
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_number}")
        return claim

    async def list_claims(self, skip: int = 0, limit: int = 100) -> Sequence[Claim]:
        result = await self.session.execute(
            select(Claim).order_by(Claim.created_at.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_by_status(self, status: ClaimStatus) -> Sequence[Claim]:
        return await self._list_where(Claim.status == status)

    async def list_by_claimant(self, claimant_id: UUID) -> Sequence[Claim]:
        return await self._list_where(Claim.claimant_id == claimant_id)

    async def list_by_agent(self, agent_id: UUID) -> Sequence[Claim]:
        return await self._list_where(Claim.agent_id == agent_id)

    async def list_by_adjuster(self, adjuster_id: UUID) -> Sequence[Claim]:
        return await self._list_where(Claim.adjuster_id == adjuster_id)

    async def list_by_policy(self, policy_id: UUID) -> Sequence[Claim]:
        return await self._list_where(Claim.policy_id == policy_id)

    async def list_pending(self) -> Sequence[Claim]:
        """Claims still awaiting a decision (PENDING or UNDER_REVIEW)."""
        return await self._list_where(Claim.status.in_(OPEN_STATUSES))

    async def list_unassigned(self) -> Sequence[Claim]:
        """PENDING claims that have no adjuster yet."""
        return await self._list_where(
            Claim.adjuster_id.is_(None), Claim.status == ClaimStatus.PENDING
        )

    async def _list_where(self, *conditions: ColumnElement[bool]) -> Sequence[Claim]:
        result = await self.session.execute(
            select(Claim).where(*conditions).order_by(Claim.created_at.desc())
        )
        return result.scalars().all()

    async def count_by_status(self, status: ClaimStatus) -> int:
        result = await self.session.execute(
            select(func.count(Claim.id)).where(Claim.status == status)
        )
        return result.scalar_one()

    async def get_claims_stats(self) -> dict[str, int]:
        """Claim counts keyed by status, including statuses with no claims."""
        result = await self.session.execute(
            select(Claim.status, func.count(Claim.id)).group_by(Claim.status)
        )
        counts = {status.value: 0 for status in ClaimStatus}
        for status, count in result.all():
            counts[status.value] = count
        counts["total"] = sum(counts.values())
        return counts

    async def get_status_history(self, claim_id: UUID) -> Sequence[ClaimStatusHistory]:
        await self.get_claim(claim_id)
        result = await self.session.execute(
            select(ClaimStatusHistory)
            .where(ClaimStatusHistory.claim_id == claim_id)
            .order_by(ClaimStatusHistory.changed_at)
        )
        return result.scalars().all()
