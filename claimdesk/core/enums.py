"""
Core Enumerations for ClaimDesk.

Closed sets of values shared by the models, schemas and services.
Values are stored as their upper-case names.
"""

from enum import Enum


# =============================================================================
# Identity
# =============================================================================


class Role(str, Enum):
    """Roles that mediate access to every operation."""

    ADMIN = "ADMIN"
    AGENT = "AGENT"
    CLAIM_ADJUSTER = "CLAIM_ADJUSTER"
    CUSTOMER = "CUSTOMER"


# =============================================================================
# Policy Catalog
# =============================================================================


class PolicyStatus(str, Enum):
    """Lifecycle of a catalog policy. Only ACTIVE policies are enrollable."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    CANCELLED = "CANCELLED"


class EnrollmentStatus(str, Enum):
    """Status of a policyholder's participation in a policy."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


OPEN_ENROLLMENT_STATUSES: tuple[EnrollmentStatus, ...] = (
    EnrollmentStatus.ACTIVE,
    EnrollmentStatus.PENDING,
)


# =============================================================================
# Claims
# =============================================================================


class ClaimStatus(str, Enum):
    """
    Claim lifecycle status.

    PENDING -> UNDER_REVIEW -> APPROVED | REJECTED
    PENDING -> CANCELLED
    """

    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class DocumentType(str, Enum):
    """Supported claim attachment types."""

    PDF = "PDF"
    JPG = "JPG"
    PNG = "PNG"
    DOC = "DOC"
    DOCX = "DOCX"


# =============================================================================
# Support
# =============================================================================


class TicketStatus(str, Enum):
    """Support ticket status."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class TicketPriority(str, Enum):
    """Support ticket priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"
