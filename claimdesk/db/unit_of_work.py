"""
Unit of Work.

Wraps one AsyncSession in an explicit transaction boundary: everything done
through ``uow.session`` inside ``async with UnitOfWork(...)`` is committed
when the block exits normally and rolled back when it raises.

Example:
    >>> async with UnitOfWork(get_session_maker()) as uow:
    ...     service = ClaimsService(uow.session, clock=SystemClock())
    ...     await service.submit_claim(data, claimant_id)
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from claimdesk.core.exceptions import ConflictError
from claimdesk.db.connection import get_session_maker
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)


class UnitOfWork:
    """Async context manager owning a session and its transaction."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork used outside of its 'async with' block")
        return self._session

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_maker()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.session.close()
            self._session = None

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            ConflictError: If a versioned row changed underneath us or a
                constraint failed at commit time
        """
        try:
            await self.session.commit()
        except StaleDataError as err:
            await self.session.rollback()
            raise ConflictError("Record was modified by another transaction") from err
        except IntegrityError as err:
            await self.session.rollback()
            raise ConflictError(f"Constraint violation on commit: {err.orig}") from err

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("Unit of work rolled back")


async def get_uow() -> AsyncGenerator[UnitOfWork, None]:
    """
    FastAPI dependency yielding a request-scoped unit of work.

    Routes call ``await uow.commit()`` themselves so that commit failures are
    translated into the response; the exit commit is then a no-op.
    """
    async with UnitOfWork(get_session_maker()) as uow:
        yield uow
