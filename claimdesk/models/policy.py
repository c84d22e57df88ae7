"""
Policy Model
Insurance policy definitions offered in the catalog.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.core.enums import PolicyStatus
from claimdesk.models.base import Base, TimeStampedModel, UUIDModel


class Policy(Base, UUIDModel, TimeStampedModel):
    """
    Catalog policy.

    Coverage and premium are strictly positive. ``deleted_at`` marks a soft
    delete; deleted policies are hidden from every catalog query.
    """

    __tablename__ = "policies"
    __table_args__ = (
        CheckConstraint("coverage_amount > 0", name="ck_policies_coverage_positive"),
        CheckConstraint("premium_amount > 0", name="ck_policies_premium_positive"),
        CheckConstraint(
            "duration_months IS NULL OR duration_months > 0",
            name="ck_policies_duration_positive",
        ),
    )

    policy_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)

    coverage_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    premium_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    duration_months: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[PolicyStatus] = mapped_column(
        Enum(PolicyStatus, native_enum=False, length=32),
        default=PolicyStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    created_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_enrollable(self) -> bool:
        return self.status == PolicyStatus.ACTIVE and self.deleted_at is None

    def __repr__(self) -> str:
        return f"<Policy {self.policy_number} {self.name}>"
