"""
Support Ticket Model
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.core.enums import TicketPriority, TicketStatus
from claimdesk.models.base import Base, TimeStampedModel, UUIDModel


class SupportTicket(Base, UUIDModel, TimeStampedModel):
    """
    Support request raised by a user.

    ``resolved_at`` is stamped whenever the ticket enters RESOLVED or CLOSED.
    """

    __tablename__ = "support_tickets"

    ticket_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)

    requester_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assignee_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus, native_enum=False, length=32),
        default=TicketStatus.OPEN,
        nullable=False,
        index=True,
    )
    priority: Mapped[TicketPriority] = mapped_column(
        Enum(TicketPriority, native_enum=False, length=16),
        default=TicketPriority.MEDIUM,
        nullable=False,
    )

    resolution: Mapped[str | None] = mapped_column(Text)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<SupportTicket {self.ticket_number} ({self.status.value})>"
