"""
Role-specific dashboard summaries.

Each role gets its own set of counters; the builder is picked from
``DashboardService.builders`` by the user's role.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.core.clock import Clock
from claimdesk.core.enums import ClaimStatus, PolicyStatus, Role, TicketStatus
from claimdesk.models.user import User
from claimdesk.services.claims_service import ClaimsService
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.services.policy_service import PolicyService
from claimdesk.services.ticket_service import TicketService
from claimdesk.services.user_service import UserService

Summary = dict[str, Any]


class DashboardService:
    """Read-only aggregation over the other services."""

    def __init__(self, session: AsyncSession, clock: Clock | None = None):
        self.users = UserService(session, clock)
        self.policies = PolicyService(session, clock)
        self.enrollments = EnrollmentService(session, clock)
        self.claims = ClaimsService(session, clock, enrollments=self.enrollments)
        self.tickets = TicketService(session, clock)

        self.builders: dict[Role, Callable[[User], Awaitable[Summary]]] = {
            Role.ADMIN: self._admin_summary,
            Role.AGENT: self._agent_summary,
            Role.CLAIM_ADJUSTER: self._adjuster_summary,
            Role.CUSTOMER: self._customer_summary,
        }

    async def summary(self, user: User) -> Summary:
        data = await self.builders[user.role](user)
        return {"role": user.role.value, **data}

    async def _admin_summary(self, user: User) -> Summary:
        claim_stats = await self.claims.get_claims_stats()
        return {
            "total_policies": await self.policies.count_policies(),
            "active_policies": await self.policies.count_policies(PolicyStatus.ACTIVE),
            "total_claims": claim_stats["total"],
            "pending_claims": claim_stats[ClaimStatus.PENDING.value],
            "approved_claims": claim_stats[ClaimStatus.APPROVED.value],
            "rejected_claims": claim_stats[ClaimStatus.REJECTED.value],
            "total_users": await self.users.count_users(),
            "total_agents": await self.users.count_by_role(Role.AGENT),
            "total_adjusters": await self.users.count_by_role(Role.CLAIM_ADJUSTER),
            "open_tickets": await self.tickets.count_by_status(TicketStatus.OPEN),
        }

    async def _agent_summary(self, user: User) -> Summary:
        return {
            "total_enrollments": len(await self.enrollments.list_by_agent(user.id)),
            "total_claims": len(await self.claims.list_by_agent(user.id)),
            "active_policies": len(await self.policies.list_active()),
            "total_customers": await self.users.count_by_role(Role.CUSTOMER),
            "assigned_tickets": len(await self.tickets.list_assigned_to(user.id)),
            "open_tickets": len(await self.tickets.list_open()),
        }

    async def _adjuster_summary(self, user: User) -> Summary:
        return {
            "assigned_claims": len(await self.claims.list_by_adjuster(user.id)),
            "pending_claims": len(await self.claims.list_pending()),
            "unassigned_claims": len(await self.claims.list_unassigned()),
            "approved_claims": await self.claims.count_by_status(ClaimStatus.APPROVED),
            "rejected_claims": await self.claims.count_by_status(ClaimStatus.REJECTED),
        }

    async def _customer_summary(self, user: User) -> Summary:
        return {
            "total_enrollments": len(await self.enrollments.list_by_policyholder(user.id)),
            "active_enrollments": len(await self.enrollments.list_active_for_user(user.id)),
            "total_claims": len(await self.claims.list_by_claimant(user.id)),
            "total_tickets": len(await self.tickets.list_by_user(user.id)),
            "available_policies": len(await self.policies.list_active()),
        }
