"""
Services Layer for ClaimDesk.

Exports the domain services used by the API routes.
"""

from claimdesk.services.claim_state_machine import ClaimStateMachine
from claimdesk.services.claims_service import (
    AttachmentFailure,
    ClaimsService,
    ClaimSubmission,
)
from claimdesk.services.dashboard_service import DashboardService
from claimdesk.services.document_service import (
    DocumentService,
    UploadedFile,
    classify_document,
)
from claimdesk.services.enrollment_service import EnrollmentService
from claimdesk.services.policy_service import PolicyService
from claimdesk.services.storage import (
    FileStorage,
    LocalFileStorage,
    MinioFileStorage,
    build_file_storage,
)
from claimdesk.services.ticket_service import TicketService
from claimdesk.services.user_service import UserService

__all__ = [
    # Claims
    "ClaimStateMachine",
    "ClaimsService",
    "ClaimSubmission",
    "AttachmentFailure",
    # Catalog and enrollment
    "PolicyService",
    "EnrollmentService",
    # Documents
    "DocumentService",
    "UploadedFile",
    "classify_document",
    "FileStorage",
    "LocalFileStorage",
    "MinioFileStorage",
    "build_file_storage",
    # Support and identity
    "TicketService",
    "UserService",
    "DashboardService",
]
