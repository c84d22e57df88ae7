"""
Enrollment Model
Links a policyholder to a policy for a date range.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, text
from sqlalchemy.orm import Mapped, mapped_column

from claimdesk.core.enums import EnrollmentStatus
from claimdesk.models.base import Base, TimeStampedModel, UUIDModel

# At most one ACTIVE or PENDING enrollment per (policyholder, policy)
_OPEN_ENROLLMENT = text("status IN ('ACTIVE', 'PENDING')")


class Enrollment(Base, UUIDModel, TimeStampedModel):
    """
    Policy enrollment.

    ``end_date`` is ``start_date`` plus the policy duration at enrollment
    time, or NULL for open-ended policies.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        Index(
            "uq_enrollments_open_per_policyholder",
            "policyholder_id",
            "policy_id",
            unique=True,
            postgresql_where=_OPEN_ENROLLMENT,
            sqlite_where=_OPEN_ENROLLMENT,
        ),
    )

    policy_id: Mapped[UUID] = mapped_column(
        ForeignKey("policies.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    policyholder_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    agent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)

    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus, native_enum=False, length=32),
        default=EnrollmentStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Enrollment {self.policyholder_id} -> {self.policy_id} ({self.status.value})>"
