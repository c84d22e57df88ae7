"""
Policy Schemas
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from claimdesk.core.enums import PolicyStatus


class PolicyCreate(BaseModel):
    """Schema for adding a policy to the catalog."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    coverage_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    premium_amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    duration_months: int | None = Field(None, gt=0, le=600)


class PolicyUpdate(BaseModel):
    """Partial update. Only provided fields are changed."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    coverage_amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    premium_amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    duration_months: int | None = Field(None, gt=0, le=600)
    status: PolicyStatus | None = None


class PolicyStatusUpdate(BaseModel):
    status: PolicyStatus


class PolicyResponse(BaseModel):
    id: UUID
    policy_number: str
    name: str
    description: str | None = None
    coverage_amount: Decimal
    premium_amount: Decimal
    duration_months: int | None = None
    status: PolicyStatus
    created_by_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"from_attributes": True}
