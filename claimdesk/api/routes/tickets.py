"""
Support Ticket Routes
"""

from collections.abc import Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from claimdesk.api.deps import get_current_active_user, get_ticket_service, require_permission
from claimdesk.core.enums import TicketStatus
from claimdesk.core.exceptions import ClaimDeskError
from claimdesk.core.permissions import (
    TICKETS_ASSIGN,
    TICKETS_CREATE,
    TICKETS_READ_ALL,
    TICKETS_RESOLVE,
    has_permission,
)
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.support_ticket import SupportTicket
from claimdesk.models.user import User
from claimdesk.schemas.ticket import (
    TicketAssign,
    TicketCreate,
    TicketResolve,
    TicketResponse,
    TicketStatusUpdate,
)
from claimdesk.services.ticket_service import TicketService
from claimdesk.utils.errors import PermissionDeniedError, to_http_exception

router = APIRouter(prefix="/tickets", tags=["Support"])


def _ensure_can_view(ticket: SupportTicket, user: User) -> None:
    if user.id not in (ticket.requester_id, ticket.assignee_id) and not has_permission(
        user.role, TICKETS_READ_ALL
    ):
        raise PermissionDeniedError("Not your ticket")


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    current_user: User = Depends(require_permission(TICKETS_CREATE)),
    service: TicketService = Depends(get_ticket_service),
    uow: UnitOfWork = Depends(get_uow),
) -> SupportTicket:
    try:
        ticket = await service.create_ticket(data, requester_id=current_user.id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return ticket


@router.get("/mine", response_model=list[TicketResponse])
async def list_my_tickets(
    current_user: User = Depends(get_current_active_user),
    service: TicketService = Depends(get_ticket_service),
) -> Sequence[SupportTicket]:
    return await service.list_by_user(current_user.id)


@router.get("/assigned", response_model=list[TicketResponse])
async def list_assigned_tickets(
    current_user: User = Depends(get_current_active_user),
    service: TicketService = Depends(get_ticket_service),
) -> Sequence[SupportTicket]:
    return await service.list_assigned_to(current_user.id)


@router.get(
    "",
    response_model=list[TicketResponse],
    dependencies=[Depends(require_permission(TICKETS_READ_ALL))],
)
async def list_tickets(
    status_filter: TicketStatus | None = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    service: TicketService = Depends(get_ticket_service),
) -> Sequence[SupportTicket]:
    if status_filter is not None:
        return await service.list_by_status(status_filter)
    return await service.list_all(skip=skip, limit=limit)


@router.get(
    "/open",
    response_model=list[TicketResponse],
    dependencies=[Depends(require_permission(TICKETS_READ_ALL))],
)
async def list_open_tickets(
    service: TicketService = Depends(get_ticket_service),
) -> Sequence[SupportTicket]:
    """OPEN and IN_PROGRESS tickets, oldest first."""
    return await service.list_open()


@router.get("/number/{ticket_number}", response_model=TicketResponse)
async def get_ticket_by_number(
    ticket_number: str,
    current_user: User = Depends(get_current_active_user),
    service: TicketService = Depends(get_ticket_service),
) -> SupportTicket:
    try:
        ticket = await service.get_by_number(ticket_number)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    _ensure_can_view(ticket, current_user)
    return ticket


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: UUID,
    current_user: User = Depends(get_current_active_user),
    service: TicketService = Depends(get_ticket_service),
) -> SupportTicket:
    try:
        ticket = await service.get(ticket_id)
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    _ensure_can_view(ticket, current_user)
    return ticket


@router.post(
    "/{ticket_id}/assign",
    response_model=TicketResponse,
    dependencies=[Depends(require_permission(TICKETS_ASSIGN))],
)
async def assign_ticket(
    ticket_id: UUID,
    data: TicketAssign,
    service: TicketService = Depends(get_ticket_service),
    uow: UnitOfWork = Depends(get_uow),
) -> SupportTicket:
    try:
        ticket = await service.assign_ticket(ticket_id, data.assignee_id)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return ticket


@router.post(
    "/{ticket_id}/resolve",
    response_model=TicketResponse,
    dependencies=[Depends(require_permission(TICKETS_RESOLVE))],
)
async def resolve_ticket(
    ticket_id: UUID,
    data: TicketResolve,
    service: TicketService = Depends(get_ticket_service),
    uow: UnitOfWork = Depends(get_uow),
) -> SupportTicket:
    try:
        ticket = await service.resolve_ticket(ticket_id, data.resolution)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return ticket


@router.put(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    dependencies=[Depends(require_permission(TICKETS_RESOLVE))],
)
async def update_ticket_status(
    ticket_id: UUID,
    data: TicketStatusUpdate,
    service: TicketService = Depends(get_ticket_service),
    uow: UnitOfWork = Depends(get_uow),
) -> SupportTicket:
    try:
        ticket = await service.update_status(ticket_id, data.status)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err
    return ticket
