"""
Enrollment Ledger Service.

Manages a policyholder's participation in a policy and answers the
eligibility question asked by claim submission: does this user hold an
ACTIVE enrollment in this policy?

Invariant: at most one ACTIVE or PENDING enrollment per (policyholder,
policy). Checked here and backed by a partial unique index.
"""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import exists, select

from claimdesk.core.enums import OPEN_ENROLLMENT_STATUSES, EnrollmentStatus
from claimdesk.core.exceptions import (
    AlreadyEnrolledError,
    EnrollmentNotFoundError,
    InvalidStateError,
    PolicyNotFoundError,
    UserNotFoundError,
)
from claimdesk.models.enrollment import Enrollment
from claimdesk.models.policy import Policy
from claimdesk.models.user import User
from claimdesk.services.base import BaseService
from claimdesk.utils.dates import add_months
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)


class EnrollmentService(BaseService):
    """Enrollment CRUD and eligibility lookups."""

    async def enroll(
        self,
        policy_id: UUID,
        policyholder_id: UUID,
        agent_id: UUID | None = None,
    ) -> Enrollment:
        """
        Enroll a user in a policy, effective today.

        Raises:
            PolicyNotFoundError: Unknown or deleted policy
            UserNotFoundError: Unknown policyholder
            InvalidStateError: Policy is not ACTIVE
            AlreadyEnrolledError: An ACTIVE or PENDING enrollment exists for the pair
        """
        policy = await self.session.get(Policy, policy_id)
        if policy is None or policy.deleted_at is not None:
            raise PolicyNotFoundError(f"Policy not found: {policy_id}")

        if await self.session.get(User, policyholder_id) is None:
            raise UserNotFoundError(f"User not found: {policyholder_id}")

        if not policy.is_enrollable:
            raise InvalidStateError(
                f"Policy {policy.policy_number} is {policy.status.value} and not open for enrollment"
            )

        if await self.is_enrolled(policyholder_id, policy_id):
            raise AlreadyEnrolledError(
                f"User {policyholder_id} is already enrolled in policy {policy.policy_number}"
            )

        start_date = self.clock.today()
        end_date = (
            add_months(start_date, policy.duration_months)
            if policy.duration_months
            else None
        )

        enrollment = Enrollment(
            id=uuid4(),
            policy_id=policy.id,
            policyholder_id=policyholder_id,
            agent_id=agent_id,
            enrollment_date=start_date,
            start_date=start_date,
            end_date=end_date,
            status=EnrollmentStatus.ACTIVE,
        )
        self.session.add(enrollment)
        await self._flush(
            AlreadyEnrolledError(
                f"User {policyholder_id} is already enrolled in policy {policy.policy_number}"
            )
        )

        logger.info(f"Enrolled user {policyholder_id} in policy {policy.policy_number}")
        return enrollment

    # =========================================================================
    # Eligibility
    # =========================================================================

    async def is_enrolled(self, user_id: UUID, policy_id: UUID) -> bool:
        """True when an ACTIVE or PENDING enrollment exists for the pair."""
        return await self._exists(user_id, policy_id, OPEN_ENROLLMENT_STATUSES)

    async def has_active_enrollment(self, user_id: UUID, policy_id: UUID) -> bool:
        """True when an ACTIVE enrollment exists; gates claim submission."""
        return await self._exists(user_id, policy_id, (EnrollmentStatus.ACTIVE,))

    async def _exists(
        self,
        user_id: UUID,
        policy_id: UUID,
        statuses: Sequence[EnrollmentStatus],
        exclude_id: UUID | None = None,
    ) -> bool:
        condition = (
            (Enrollment.policyholder_id == user_id)
            & (Enrollment.policy_id == policy_id)
            & Enrollment.status.in_(statuses)
        )
        if exclude_id is not None:
            condition = condition & (Enrollment.id != exclude_id)
        result = await self.session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get(self, enrollment_id: UUID) -> Enrollment:
        enrollment = await self.session.get(Enrollment, enrollment_id)
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment not found: {enrollment_id}")
        return enrollment

    async def list_all(self, skip: int = 0, limit: int = 100) -> Sequence[Enrollment]:
        result = await self.session.execute(
            select(Enrollment).order_by(Enrollment.created_at.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_by_policyholder(self, user_id: UUID) -> Sequence[Enrollment]:
        result = await self.session.execute(
            select(Enrollment)
            .where(Enrollment.policyholder_id == user_id)
            .order_by(Enrollment.created_at.desc())
        )
        return result.scalars().all()

    async def list_by_agent(self, agent_id: UUID) -> Sequence[Enrollment]:
        result = await self.session.execute(
            select(Enrollment)
            .where(Enrollment.agent_id == agent_id)
            .order_by(Enrollment.created_at.desc())
        )
        return result.scalars().all()

    async def list_by_policy(self, policy_id: UUID) -> Sequence[Enrollment]:
        result = await self.session.execute(
            select(Enrollment)
            .where(Enrollment.policy_id == policy_id)
            .order_by(Enrollment.created_at.desc())
        )
        return result.scalars().all()

    async def list_active_for_user(self, user_id: UUID) -> Sequence[Enrollment]:
        result = await self.session.execute(
            select(Enrollment)
            .where(
                Enrollment.policyholder_id == user_id,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .order_by(Enrollment.start_date)
        )
        return result.scalars().all()

    # =========================================================================
    # Update Operations
    # =========================================================================

    async def cancel(self, enrollment_id: UUID) -> Enrollment:
        """Mark an enrollment CANCELLED. Cancelling twice is harmless."""
        enrollment = await self.get(enrollment_id)
        enrollment.status = EnrollmentStatus.CANCELLED
        await self._flush()
        logger.info(f"Cancelled enrollment {enrollment.id}")
        return enrollment

    async def update_status(self, enrollment_id: UUID, status: EnrollmentStatus) -> Enrollment:
        """
        Administrative status override.

        Raises:
            AlreadyEnrolledError: Re-opening would create a second open enrollment
        """
        enrollment = await self.get(enrollment_id)

        if status in OPEN_ENROLLMENT_STATUSES and await self._exists(
            enrollment.policyholder_id,
            enrollment.policy_id,
            OPEN_ENROLLMENT_STATUSES,
            exclude_id=enrollment.id,
        ):
            raise AlreadyEnrolledError(
                f"User {enrollment.policyholder_id} already holds an open enrollment "
                f"in policy {enrollment.policy_id}"
            )

        enrollment.status = status
        await self._flush(AlreadyEnrolledError("An open enrollment already exists for this pair"))
        logger.info(f"Enrollment {enrollment.id} status set to {status.value}")
        return enrollment

    # =========================================================================
    # Delete Operations
    # =========================================================================

    async def delete(self, enrollment_id: UUID) -> None:
        """
        Hard-delete an enrollment.

        Raises:
            InvalidStateError: Unless the enrollment is CANCELLED
        """
        enrollment = await self.get(enrollment_id)
        if enrollment.status != EnrollmentStatus.CANCELLED:
            raise InvalidStateError(
                f"Only cancelled enrollments can be deleted (current: {enrollment.status.value})"
            )

        await self.session.delete(enrollment)
        await self._flush()
        logger.info(f"Deleted enrollment {enrollment_id}")
