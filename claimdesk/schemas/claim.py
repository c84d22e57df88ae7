"""
Claim Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from claimdesk.core.enums import ClaimStatus
from claimdesk.schemas.document import AttachmentFailureResponse, DocumentResponse


class ClaimCreate(BaseModel):
    """
    Claim submission.

    ``claimant_id`` is only used when an agent files on a customer's behalf;
    customers always file for themselves.
    """

    policy_id: UUID
    claim_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: str = Field(..., min_length=1)
    reason: str | None = Field(None, max_length=500)
    claim_date: date | None = None
    claimant_id: UUID | None = None


class ClaimUpdate(BaseModel):
    """Editable fields of a PENDING claim."""

    claim_amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: str | None = Field(None, min_length=1)
    reason: str | None = Field(None, max_length=500)
    expected_version: int | None = None


class ClaimAssign(BaseModel):
    adjuster_id: UUID


class ClaimReview(BaseModel):
    """Adjuster decision. ``status`` must be APPROVED or REJECTED."""

    status: ClaimStatus
    approved_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    remarks: str | None = None
    expected_version: int | None = None


class ClaimStatusUpdate(BaseModel):
    status: ClaimStatus
    reason: str | None = Field(None, max_length=500)


class ClaimResponse(BaseModel):
    id: UUID
    claim_number: str
    policy_id: UUID
    claimant_id: UUID
    agent_id: UUID | None = None
    adjuster_id: UUID | None = None
    claim_amount: Decimal
    approved_amount: Decimal | None = None
    claim_date: date
    description: str
    reason: str | None = None
    remarks: str | None = None
    status: ClaimStatus
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"from_attributes": True}


class ClaimStatusHistoryResponse(BaseModel):
    previous_status: ClaimStatus | None = None
    new_status: ClaimStatus
    changed_at: datetime
    changed_by: UUID | None = None
    reason: str | None = None

    model_config = {"from_attributes": True}


class ClaimSubmissionResponse(BaseModel):
    """A new claim plus the outcome of each attachment upload."""

    claim: ClaimResponse
    documents: list[DocumentResponse] = []
    failed_attachments: list[AttachmentFailureResponse] = []

    model_config = {"from_attributes": True}
