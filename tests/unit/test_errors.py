"""
Unit Tests for Domain Error Translation
"""

from decimal import Decimal

import pytest
from fastapi import status

from claimdesk.core.exceptions import (
    AccessDeniedError,
    AlreadyEnrolledError,
    AuthenticationFailedError,
    ClaimDeskError,
    ClaimNotFoundError,
    ConflictError,
    CoverageExceededError,
    DuplicateKeyError,
    InvalidDocumentError,
    InvalidStateError,
    NotEnrolledError,
    StorageError,
    UnsupportedDocumentTypeError,
)
from claimdesk.utils.errors import AuthenticationError, to_http_exception


@pytest.mark.unit
class TestToHttpException:
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (ClaimNotFoundError("Claim not found"), status.HTTP_404_NOT_FOUND),
            (NotEnrolledError("No active enrollment"), status.HTTP_422_UNPROCESSABLE_ENTITY),
            (AlreadyEnrolledError("Already enrolled"), status.HTTP_409_CONFLICT),
            (InvalidStateError("Claim is APPROVED"), status.HTTP_409_CONFLICT),
            (DuplicateKeyError("Username taken"), status.HTTP_409_CONFLICT),
            (ConflictError("Stale version"), status.HTTP_409_CONFLICT),
            (UnsupportedDocumentTypeError(".exe"), status.HTTP_415_UNSUPPORTED_MEDIA_TYPE),
            (InvalidDocumentError("Empty file"), status.HTTP_422_UNPROCESSABLE_ENTITY),
            (StorageError("Bucket unavailable"), status.HTTP_502_BAD_GATEWAY),
            (AccessDeniedError("Not your claim"), status.HTTP_403_FORBIDDEN),
        ],
    )
    def test_status_codes(self, error, expected):
        exc = to_http_exception(error)

        assert exc.status_code == expected
        assert exc.detail == str(error)

    def test_subclass_uses_parent_mapping(self):
        exc = to_http_exception(CoverageExceededError(Decimal("1500"), Decimal("1000")))

        assert exc.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "exceeds policy coverage" in exc.detail

    def test_authentication_failure_is_401_with_bearer_challenge(self):
        exc = to_http_exception(AuthenticationFailedError("Incorrect username or password"))

        assert isinstance(exc, AuthenticationError)
        assert exc.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc.headers == {"WWW-Authenticate": "Bearer"}

    def test_unmapped_error_falls_back_to_400(self):
        assert to_http_exception(ClaimDeskError("Something odd")).status_code == 400
