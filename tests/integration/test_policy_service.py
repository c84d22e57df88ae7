"""
Integration Tests for the Policy Catalog
"""

import re
from decimal import Decimal
from uuid import uuid4

import pytest

from claimdesk.core.enums import PolicyStatus
from claimdesk.core.exceptions import InvalidStateError, PolicyNotFoundError
from claimdesk.schemas.policy import PolicyCreate, PolicyUpdate


def _policy(name: str = "Dental Basic", coverage: str = "5000.00") -> PolicyCreate:
    return PolicyCreate(
        name=name,
        description="Routine dental care",
        coverage_amount=Decimal(coverage),
        premium_amount=Decimal("25.00"),
        duration_months=12,
    )


@pytest.mark.integration
class TestPolicyCatalog:
    async def test_create_assigns_number_and_active_status(self, policy_service, admin):
        policy = await policy_service.create_policy(_policy(), created_by=admin.id)

        assert re.fullmatch(r"POL-20250115-[A-Z0-9]{6}", policy.policy_number)
        assert policy.status == PolicyStatus.ACTIVE
        assert policy.created_by_id == admin.id
        assert await policy_service.get_by_number(policy.policy_number) is policy

    async def test_search_is_case_insensitive(self, policy_service):
        await policy_service.create_policy(_policy("Dental Basic"))
        await policy_service.create_policy(_policy("Dental Premium"))
        await policy_service.create_policy(_policy("Travel Cover"))

        names = [p.name for p in await policy_service.search("  DENTAL ")]

        assert names == ["Dental Basic", "Dental Premium"]

    async def test_partial_update(self, policy_service):
        policy = await policy_service.create_policy(_policy())

        await policy_service.update_policy(
            policy.id, PolicyUpdate(coverage_amount=Decimal("7500.00"), description=None)
        )

        assert policy.coverage_amount == Decimal("7500.00")
        assert policy.description is None
        assert policy.name == "Dental Basic"

    async def test_list_active_and_counts(self, policy_service):
        first = await policy_service.create_policy(_policy("A Plan"))
        await policy_service.create_policy(_policy("B Plan"))
        await policy_service.update_status(first.id, PolicyStatus.INACTIVE)

        assert [p.name for p in await policy_service.list_active()] == ["B Plan"]
        assert await policy_service.count_policies() == 2
        assert await policy_service.count_policies(PolicyStatus.INACTIVE) == 1

    async def test_unknown_policy(self, policy_service):
        with pytest.raises(PolicyNotFoundError):
            await policy_service.get_policy(uuid4())


@pytest.mark.integration
class TestPolicyDeletion:
    async def test_delete_requires_cancellation(self, policy_service):
        policy = await policy_service.create_policy(_policy())

        with pytest.raises(InvalidStateError, match="CANCELLED"):
            await policy_service.delete_policy(policy.id)

    async def test_deleted_policy_is_hidden(self, policy_service, clock):
        policy = await policy_service.create_policy(_policy())
        await policy_service.cancel_policy(policy.id)

        await policy_service.delete_policy(policy.id)

        assert policy.deleted_at == clock.now()
        assert await policy_service.list_policies() == []
        assert await policy_service.count_policies() == 0
        with pytest.raises(PolicyNotFoundError):
            await policy_service.get_policy(policy.id)
