"""
SQLAlchemy Models for ClaimDesk.

Importing this package registers every table on ``Base.metadata``.
"""

from claimdesk.models.base import Base, TimeStampedModel, UUIDModel
from claimdesk.models.user import User
from claimdesk.models.policy import Policy
from claimdesk.models.enrollment import Enrollment
from claimdesk.models.claim import Claim, ClaimStatusHistory
from claimdesk.models.document import Document
from claimdesk.models.support_ticket import SupportTicket

__all__ = [
    "Base",
    "TimeStampedModel",
    "UUIDModel",
    "User",
    "Policy",
    "Enrollment",
    "Claim",
    "ClaimStatusHistory",
    "Document",
    "SupportTicket",
]
