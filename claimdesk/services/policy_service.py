"""
Policy Catalog Service.

Provides:
- Policy creation with generated POL numbers
- Partial updates and free-form status changes
- Catalog queries (active, by status, name search)
- Cancellation and soft deletion (CANCELLED policies only)
"""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import Select, func, select

from claimdesk.core.enums import PolicyStatus
from claimdesk.core.exceptions import InvalidStateError, PolicyNotFoundError
from claimdesk.core.identifiers import add_with_reference, generate_policy_number
from claimdesk.models.policy import Policy
from claimdesk.schemas.policy import PolicyCreate, PolicyUpdate
from claimdesk.services.base import BaseService
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)


def _catalog() -> Select[tuple[Policy]]:
    """Base query over policies that have not been deleted."""
    return select(Policy).where(Policy.deleted_at.is_(None))


class PolicyService(BaseService):
    """Catalog CRUD."""

    async def create_policy(self, data: PolicyCreate, created_by: UUID | None = None) -> Policy:
        def build(policy_number: str) -> Policy:
            return Policy(
                id=uuid4(),
                policy_number=policy_number,
                name=data.name,
                description=data.description,
                coverage_amount=data.coverage_amount,
                premium_amount=data.premium_amount,
                duration_months=data.duration_months,
                status=PolicyStatus.ACTIVE,
                created_by_id=created_by,
            )

        policy = await add_with_reference(
            self.session, build, generate_policy_number, self.clock.today()
        )
        logger.info(f"Created policy {policy.policy_number} ({policy.name})")
        return policy

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get_policy(self, policy_id: UUID) -> Policy:
        result = await self.session.execute(_catalog().where(Policy.id == policy_id))
        policy = result.scalar_one_or_none()
        if policy is None:
            raise PolicyNotFoundError(f"Policy not found: {policy_id}")
        return policy

    async def get_by_number(self, policy_number: str) -> Policy:
        result = await self.session.execute(
            _catalog().where(Policy.policy_number == policy_number)
        )
        policy = result.scalar_one_or_none()
        if policy is None:
            raise PolicyNotFoundError(f"Policy not found: {policy_number}")
        return policy

    async def list_policies(self, skip: int = 0, limit: int = 100) -> Sequence[Policy]:
        result = await self.session.execute(
            _catalog().order_by(Policy.created_at.desc()).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def list_by_status(self, status: PolicyStatus) -> Sequence[Policy]:
        result = await self.session.execute(
            _catalog().where(Policy.status == status).order_by(Policy.name)
        )
        return result.scalars().all()

    async def list_active(self) -> Sequence[Policy]:
        return await self.list_by_status(PolicyStatus.ACTIVE)

    async def search(self, keyword: str) -> Sequence[Policy]:
        """Case-insensitive substring match on the policy name."""
        pattern = f"%{keyword.strip().lower()}%"
        result = await self.session.execute(
            _catalog().where(func.lower(Policy.name).like(pattern)).order_by(Policy.name)
        )
        return result.scalars().all()

    async def count_policies(self, status: PolicyStatus | None = None) -> int:
        query = select(func.count(Policy.id)).where(Policy.deleted_at.is_(None))
        if status is not None:
            query = query.where(Policy.status == status)
        return (await self.session.execute(query)).scalar_one()

    # =========================================================================
    # Update Operations
    # =========================================================================

    async def update_policy(self, policy_id: UUID, data: PolicyUpdate) -> Policy:
        policy = await self.get_policy(policy_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field not in ("description", "duration_months"):
                continue
            setattr(policy, field, value)

        await self._flush()
        logger.info(f"Updated policy {policy.policy_number}")
        return policy

    async def update_status(self, policy_id: UUID, status: PolicyStatus) -> Policy:
        """Set any status. Existing enrollments are not touched."""
        policy = await self.get_policy(policy_id)
        previous = policy.status
        policy.status = status
        await self._flush()
        logger.info(f"Policy {policy.policy_number}: {previous.value} -> {status.value}")
        return policy

    async def cancel_policy(self, policy_id: UUID) -> Policy:
        return await self.update_status(policy_id, PolicyStatus.CANCELLED)

    # =========================================================================
    # Delete Operations
    # =========================================================================

    async def delete_policy(self, policy_id: UUID) -> None:
        """
        Soft-delete a policy.

        Raises:
            InvalidStateError: Unless the policy has been cancelled first
        """
        policy = await self.get_policy(policy_id)
        if policy.status != PolicyStatus.CANCELLED:
            raise InvalidStateError(
                f"Policy {policy.policy_number} must be CANCELLED before deletion "
                f"(current: {policy.status.value})"
            )

        policy.deleted_at = self.clock.now()
        await self._flush()
        logger.info(f"Deleted policy {policy.policy_number}")
