"""
Support Ticket Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from claimdesk.core.enums import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    priority: TicketPriority | None = None


class TicketAssign(BaseModel):
    assignee_id: UUID


class TicketResolve(BaseModel):
    resolution: str = Field(..., min_length=1)


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketResponse(BaseModel):
    id: UUID
    ticket_number: str
    requester_id: UUID
    assignee_id: UUID | None = None
    subject: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    resolution: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
