"""
Domain Exceptions for ClaimDesk.

Raised by the service layer at the point a rule is violated and propagated
unchanged to the caller. The API layer translates them to HTTP responses
through ``claimdesk.utils.errors.to_http_exception``.
"""


class ClaimDeskError(Exception):
    """Base exception for all domain errors."""

    pass


# =============================================================================
# Lookup
# =============================================================================


class NotFoundError(ClaimDeskError):
    """Raised when an entity id cannot be resolved."""

    pass


class UserNotFoundError(NotFoundError):
    pass


class PolicyNotFoundError(NotFoundError):
    pass


class EnrollmentNotFoundError(NotFoundError):
    pass


class ClaimNotFoundError(NotFoundError):
    pass


class DocumentNotFoundError(NotFoundError):
    pass


class TicketNotFoundError(NotFoundError):
    pass


# =============================================================================
# Eligibility
# =============================================================================


class NotEnrolledError(ClaimDeskError):
    """Raised when a claimant holds no ACTIVE enrollment in the claimed policy."""

    pass


class AlreadyEnrolledError(ClaimDeskError):
    """Raised when an ACTIVE or PENDING enrollment already exists for the pair."""

    pass


# =============================================================================
# Validation
# =============================================================================


class InvalidAmountError(ClaimDeskError):
    """Raised when a monetary amount is outside its permitted range."""

    pass


class CoverageExceededError(InvalidAmountError):
    """Raised when a claim amount exceeds the policy coverage amount."""

    def __init__(self, claim_amount, coverage_amount):
        super().__init__(
            f"Claim amount {claim_amount} exceeds policy coverage {coverage_amount}"
        )
        self.claim_amount = claim_amount
        self.coverage_amount = coverage_amount


class InvalidStateError(ClaimDeskError):
    """Raised when an operation is not permitted in the entity's current status."""

    pass


class InvalidAssigneeError(ClaimDeskError):
    """Raised when a user cannot take on the assigned work (wrong role, disabled)."""

    pass


class UnsupportedDocumentTypeError(ClaimDeskError):
    """Raised when an upload's extension does not map to a DocumentType."""

    pass


class InvalidDocumentError(ClaimDeskError):
    """Raised for empty uploads and uploads over the size limit."""

    pass


# =============================================================================
# Persistence
# =============================================================================


class DuplicateKeyError(ClaimDeskError):
    """Raised when a unique key (username, email, generated number) is taken."""

    pass


class ConflictError(ClaimDeskError):
    """Raised when a record was changed by a concurrent writer."""

    pass


class StorageError(ClaimDeskError):
    """Raised when reading, writing or deleting a stored file fails."""

    pass


# =============================================================================
# Identity
# =============================================================================


class AuthenticationFailedError(ClaimDeskError):
    """Raised for bad credentials or disabled accounts."""

    pass


class AccessDeniedError(ClaimDeskError):
    """Raised when the acting user does not own the entity being changed."""

    pass
