"""
Enrollment Schemas
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from claimdesk.core.enums import EnrollmentStatus


class EnrollmentCreate(BaseModel):
    """
    Enrollment request.

    Customers enroll themselves and leave ``policyholder_id`` empty; agents
    and administrators enroll a customer by id.
    """

    policy_id: UUID
    policyholder_id: UUID | None = None


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentResponse(BaseModel):
    id: UUID
    policy_id: UUID
    policyholder_id: UUID
    agent_id: UUID | None = None
    enrollment_date: date
    start_date: date
    end_date: date | None = None
    status: EnrollmentStatus
    created_at: datetime
    version: int

    model_config = {"from_attributes": True}
