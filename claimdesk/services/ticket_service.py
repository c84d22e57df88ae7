"""
Support Ticket Service.

Tickets move OPEN -> IN_PROGRESS (on assignment) -> RESOLVED / CLOSED.
Status overrides are free-form; ``resolved_at`` is stamped whenever a
ticket enters RESOLVED or CLOSED.
"""

from collections.abc import Sequence
from uuid import UUID, uuid4

from sqlalchemy import func, select

from claimdesk.core.enums import Role, TicketPriority, TicketStatus
from claimdesk.core.exceptions import (
    InvalidAssigneeError,
    TicketNotFoundError,
    UserNotFoundError,
)
from claimdesk.core.identifiers import add_with_reference, generate_ticket_number
from claimdesk.models.support_ticket import SupportTicket
from claimdesk.models.user import User
from claimdesk.schemas.ticket import TicketCreate
from claimdesk.services.base import BaseService
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

OPEN_TICKET_STATUSES = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS)
CLOSING_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


class TicketService(BaseService):
    """Support ticket tracking."""

    async def create_ticket(self, data: TicketCreate, requester_id: UUID) -> SupportTicket:
        def build(ticket_number: str) -> SupportTicket:
            return SupportTicket(
                id=uuid4(),
                ticket_number=ticket_number,
                requester_id=requester_id,
                subject=data.subject,
                description=data.description,
                status=TicketStatus.OPEN,
                priority=data.priority or TicketPriority.MEDIUM,
            )

        ticket = await add_with_reference(
            self.session, build, generate_ticket_number, self.clock.today()
        )
        logger.info(f"Ticket {ticket.ticket_number} opened ({ticket.priority.value})")
        return ticket

    async def assign_ticket(self, ticket_id: UUID, assignee_id: UUID) -> SupportTicket:
        """
        Hand the ticket to a staff member and mark it IN_PROGRESS.

        Raises:
            UserNotFoundError: Unknown assignee
            InvalidAssigneeError: Assignee is a customer
        """
        ticket = await self.get(ticket_id)

        assignee = await self.session.get(User, assignee_id)
        if assignee is None:
            raise UserNotFoundError(f"User not found: {assignee_id}")
        if assignee.role == Role.CUSTOMER:
            raise InvalidAssigneeError(f"Tickets cannot be assigned to customer {assignee.username}")

        ticket.assignee_id = assignee.id
        ticket.status = TicketStatus.IN_PROGRESS
        await self._flush()

        logger.info(f"Ticket {ticket.ticket_number} assigned to {assignee.username}")
        return ticket

    async def resolve_ticket(self, ticket_id: UUID, resolution: str) -> SupportTicket:
        ticket = await self.get(ticket_id)
        ticket.resolution = resolution
        ticket.status = TicketStatus.RESOLVED
        ticket.resolved_at = self.clock.now()
        await self._flush()

        logger.info(f"Ticket {ticket.ticket_number} resolved")
        return ticket

    async def update_status(self, ticket_id: UUID, status: TicketStatus) -> SupportTicket:
        ticket = await self.get(ticket_id)
        ticket.status = status
        if status in CLOSING_STATUSES:
            ticket.resolved_at = self.clock.now()
        await self._flush()

        logger.info(f"Ticket {ticket.ticket_number} status set to {status.value}")
        return ticket

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get(self, ticket_id: UUID) -> SupportTicket:
        ticket = await self.session.get(SupportTicket, ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket not found: {ticket_id}")
        return ticket

    async def get_by_number(self, ticket_number: str) -> SupportTicket:
        result = await self.session.execute(
            select(SupportTicket).where(SupportTicket.ticket_number == ticket_number)
        )
        ticket = result.scalar_one_or_none()
        if ticket is None:
            raise TicketNotFoundError(f"Ticket not found: {ticket_number}")
        return ticket

    async def list_all(self, skip: int = 0, limit: int = 100) -> Sequence[SupportTicket]:
        result = await self.session.execute(
            select(SupportTicket)
            .order_by(SupportTicket.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return result.scalars().all()

    async def list_by_user(self, user_id: UUID) -> Sequence[SupportTicket]:
        """Tickets raised by a user, newest first."""
        result = await self.session.execute(
            select(SupportTicket)
            .where(SupportTicket.requester_id == user_id)
            .order_by(SupportTicket.created_at.desc())
        )
        return result.scalars().all()

    async def list_by_status(self, status: TicketStatus) -> Sequence[SupportTicket]:
        result = await self.session.execute(
            select(SupportTicket)
            .where(SupportTicket.status == status)
            .order_by(SupportTicket.created_at.desc())
        )
        return result.scalars().all()

    async def list_open(self) -> Sequence[SupportTicket]:
        result = await self.session.execute(
            select(SupportTicket)
            .where(SupportTicket.status.in_(OPEN_TICKET_STATUSES))
            .order_by(SupportTicket.created_at)
        )
        return result.scalars().all()

    async def list_assigned_to(self, assignee_id: UUID) -> Sequence[SupportTicket]:
        result = await self.session.execute(
            select(SupportTicket)
            .where(SupportTicket.assignee_id == assignee_id)
            .order_by(SupportTicket.created_at.desc())
        )
        return result.scalars().all()

    async def count_by_status(self, status: TicketStatus) -> int:
        result = await self.session.execute(
            select(func.count(SupportTicket.id)).where(SupportTicket.status == status)
        )
        return result.scalar_one()
