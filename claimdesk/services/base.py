"""
Shared service plumbing.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from claimdesk.core.clock import Clock, SystemClock
from claimdesk.core.exceptions import ClaimDeskError, ConflictError


class BaseService:
    """
    Base for services operating on one session.

    Collaborators are passed in explicitly; services never open sessions
    or read the system clock on their own.
    """

    def __init__(self, session: AsyncSession, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()

    async def _flush(self, on_integrity_error: ClaimDeskError | None = None) -> None:
        """
        Flush pending changes, translating driver errors to domain errors.

        Args:
            on_integrity_error: Error to raise for a constraint violation;
                defaults to ConflictError
        """
        try:
            await self.session.flush()
        except StaleDataError as err:
            raise ConflictError("Record was modified by another transaction") from err
        except IntegrityError as err:
            if on_integrity_error is not None:
                raise on_integrity_error from err
            raise ConflictError(f"Constraint violation: {err.orig}") from err

    @staticmethod
    def _check_version(entity, expected_version: int | None) -> None:  # type: ignore[no-untyped-def]
        """Compare-and-swap guard for clients that echo back the version they read."""
        if expected_version is not None and entity.version != expected_version:
            raise ConflictError(
                f"{type(entity).__name__} {entity.id} is at version {entity.version}, "
                f"expected {expected_version}"
            )
