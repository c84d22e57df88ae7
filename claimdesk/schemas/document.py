"""
Document Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from claimdesk.core.enums import DocumentType


class DocumentResponse(BaseModel):
    id: UUID
    claim_id: UUID
    original_filename: str
    document_type: DocumentType
    file_size: int
    content_type: str | None = None
    uploaded_by_id: UUID | None = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class AttachmentFailureResponse(BaseModel):
    """An attachment that could not be stored alongside a new claim."""

    filename: str
    reason: str

    model_config = {"from_attributes": True}
