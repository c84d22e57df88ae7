"""
HTTP Exceptions
API-facing errors and the translation from domain errors
Source: https://fastapi.tiangolo.com/tutorial/handling-errors/
"""

from fastapi import HTTPException, status

from claimdesk.core.exceptions import (
    AccessDeniedError,
    AlreadyEnrolledError,
    AuthenticationFailedError,
    ClaimDeskError,
    ConflictError,
    DuplicateKeyError,
    InvalidAmountError,
    InvalidAssigneeError,
    InvalidDocumentError,
    InvalidStateError,
    NotEnrolledError,
    NotFoundError,
    StorageError,
    UnsupportedDocumentTypeError,
)


class AuthenticationError(HTTPException):
    """Raised when authentication fails"""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedError(HTTPException):
    """Raised when user lacks permission"""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


# Most specific class wins: lookup walks the exception's MRO
ERROR_STATUS_CODES: dict[type[ClaimDeskError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    NotEnrolledError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AlreadyEnrolledError: status.HTTP_409_CONFLICT,
    InvalidAmountError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidStateError: status.HTTP_409_CONFLICT,
    InvalidAssigneeError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnsupportedDocumentTypeError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    InvalidDocumentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateKeyError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_502_BAD_GATEWAY,
    AccessDeniedError: status.HTTP_403_FORBIDDEN,
}


def to_http_exception(err: ClaimDeskError) -> HTTPException:
    """
    Translate a domain error into the HTTPException returned to the client.

    Example:
        >>> try:
        ...     claim = await service.submit_claim(data, user.id)
        ... except ClaimDeskError as err:
        ...     raise to_http_exception(err) from err
    """
    if isinstance(err, AuthenticationFailedError):
        return AuthenticationError(str(err))

    for cls in type(err).__mro__:
        code = ERROR_STATUS_CODES.get(cls)
        if code is not None:
            return HTTPException(status_code=code, detail=str(err))

    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
