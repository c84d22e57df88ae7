"""
Role-based permissions.

Roles map to permission strings through a lookup table; routes declare the
permission they need and never branch on the role themselves.
"""

from claimdesk.core.enums import Role

# Policies
POLICIES_READ = "policies:read"
POLICIES_WRITE = "policies:write"
POLICIES_DELETE = "policies:delete"

# Enrollments
ENROLLMENTS_CREATE = "enrollments:create"
ENROLLMENTS_ENROLL_OTHERS = "enrollments:enroll_others"
ENROLLMENTS_READ_ALL = "enrollments:read_all"
ENROLLMENTS_CANCEL = "enrollments:cancel"
ENROLLMENTS_MANAGE = "enrollments:manage"

# Claims
CLAIMS_SUBMIT = "claims:submit"
CLAIMS_SUBMIT_FOR_OTHERS = "claims:submit_for_others"
CLAIMS_READ_ALL = "claims:read_all"
CLAIMS_UPDATE = "claims:update"
CLAIMS_CANCEL = "claims:cancel"
CLAIMS_ASSIGN = "claims:assign"
CLAIMS_REVIEW = "claims:review"
CLAIMS_MANAGE = "claims:manage"

# Documents
DOCUMENTS_UPLOAD = "documents:upload"
DOCUMENTS_READ = "documents:read"
DOCUMENTS_DELETE = "documents:delete"

# Support
TICKETS_CREATE = "tickets:create"
TICKETS_READ_ALL = "tickets:read_all"
TICKETS_ASSIGN = "tickets:assign"
TICKETS_RESOLVE = "tickets:resolve"

# Identity
USERS_READ = "users:read"
USERS_MANAGE = "users:manage"

_CUSTOMER = frozenset(
    {
        POLICIES_READ,
        ENROLLMENTS_CREATE,
        ENROLLMENTS_CANCEL,
        CLAIMS_SUBMIT,
        CLAIMS_UPDATE,
        CLAIMS_CANCEL,
        DOCUMENTS_UPLOAD,
        DOCUMENTS_READ,
        TICKETS_CREATE,
    }
)

_AGENT = frozenset(
    {
        POLICIES_READ,
        ENROLLMENTS_CREATE,
        ENROLLMENTS_ENROLL_OTHERS,
        ENROLLMENTS_READ_ALL,
        ENROLLMENTS_CANCEL,
        CLAIMS_SUBMIT,
        CLAIMS_SUBMIT_FOR_OTHERS,
        CLAIMS_READ_ALL,
        DOCUMENTS_UPLOAD,
        DOCUMENTS_READ,
        TICKETS_CREATE,
        TICKETS_READ_ALL,
        TICKETS_RESOLVE,
        USERS_READ,
    }
)

_CLAIM_ADJUSTER = frozenset(
    {
        POLICIES_READ,
        CLAIMS_READ_ALL,
        CLAIMS_ASSIGN,
        CLAIMS_REVIEW,
        DOCUMENTS_READ,
        TICKETS_CREATE,
        USERS_READ,
    }
)

ROLE_PERMISSIONS: dict[Role, frozenset[str]] = {
    Role.CUSTOMER: _CUSTOMER,
    Role.AGENT: _AGENT,
    Role.CLAIM_ADJUSTER: _CLAIM_ADJUSTER,
    Role.ADMIN: _CUSTOMER
    | _AGENT
    | _CLAIM_ADJUSTER
    | {
        POLICIES_WRITE,
        POLICIES_DELETE,
        ENROLLMENTS_MANAGE,
        CLAIMS_MANAGE,
        DOCUMENTS_DELETE,
        TICKETS_ASSIGN,
        USERS_MANAGE,
    },
}


def has_permission(role: Role, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
