"""
Claim Model
Insurance claims and their status history.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.core.enums import ClaimStatus
from claimdesk.models.base import Base, TimeStampedModel, UUIDModel


class Claim(Base, UUIDModel, TimeStampedModel):
    """
    Insurance claim filed against a policy.

    References to the policy and the participating users are plain foreign
    keys; callers join explicitly by id. Documents are removed by the claims
    service before a claim row is deleted.
    """

    __tablename__ = "claims"
    __table_args__ = (
        CheckConstraint("claim_amount > 0", name="ck_claims_amount_positive"),
        CheckConstraint(
            "approved_amount IS NULL OR approved_amount >= 0",
            name="ck_claims_approved_non_negative",
        ),
    )

    claim_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)

    # Participants
    policy_id: Mapped[UUID] = mapped_column(
        ForeignKey("policies.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    claimant_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    agent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    adjuster_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Amounts
    claim_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    approved_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    # Details
    claim_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500))
    remarks: Mapped[str | None] = mapped_column(Text)

    status: Mapped[ClaimStatus] = mapped_column(
        Enum(ClaimStatus, native_enum=False, length=32),
        default=ClaimStatus.PENDING,
        nullable=False,
        index=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Claim {self.claim_number} ({self.status.value})>"


class ClaimStatusHistory(Base, UUIDModel):
    """
    Status change history for a claim.

    One row per transition, including the initial PENDING on submission.
    """

    __tablename__ = "claim_status_history"

    claim_id: Mapped[UUID] = mapped_column(
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    previous_status: Mapped[ClaimStatus | None] = mapped_column(
        Enum(ClaimStatus, native_enum=False, length=32),
        nullable=True,
    )
    new_status: Mapped[ClaimStatus] = mapped_column(
        Enum(ClaimStatus, native_enum=False, length=32),
        nullable=False,
    )
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    changed_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[str | None] = mapped_column(String(500))

    def __repr__(self) -> str:
        previous = self.previous_status.value if self.previous_status else "-"
        return f"<ClaimStatusHistory {previous} -> {self.new_status.value}>"
