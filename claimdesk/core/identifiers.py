"""
Human-readable reference numbers.

Format: ``<PREFIX>-<YYYYMMDD>-<6 chars from A-Z0-9>``
Example: CLM-20250114-7KQ2ZD

Numbers are random, not sequential. Uniqueness is enforced by a unique
constraint on the owning column; ``add_with_reference`` inserts inside a
SAVEPOINT and retries with a fresh number when the constraint trips.
"""

import secrets
import string
from collections.abc import Callable
from datetime import date
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.core.exceptions import DuplicateKeyError
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

CLAIM_PREFIX = "CLM"
POLICY_PREFIX = "POL"
TICKET_PREFIX = "TKT"

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 6
MAX_INSERT_ATTEMPTS = 3

T = TypeVar("T")


def generate_reference(prefix: str, today: date) -> str:
    """Build a reference number for ``today`` with a random suffix."""
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{prefix}-{today:%Y%m%d}-{suffix}"


def generate_claim_number(today: date) -> str:
    return generate_reference(CLAIM_PREFIX, today)


def generate_policy_number(today: date) -> str:
    return generate_reference(POLICY_PREFIX, today)


def generate_ticket_number(today: date) -> str:
    return generate_reference(TICKET_PREFIX, today)


async def add_with_reference(
    session: AsyncSession,
    build: Callable[[str], T],
    generate: Callable[[date], str],
    today: date,
) -> T:
    """
    Insert an entity carrying a freshly generated reference number.

    Args:
        session: Active session
        build: Factory creating the (unsaved) entity for a given number
        generate: Number generator, e.g. ``generate_claim_number``
        today: Date embedded in the number

    Returns:
        The flushed entity

    Raises:
        DuplicateKeyError: If every attempt collided with an existing number
    """
    for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
        entity = build(generate(today))
        try:
            async with session.begin_nested():
                session.add(entity)
        except IntegrityError as err:
            logger.warning(f"Reference number collision (attempt {attempt}): {err.orig}")
            continue
        return entity

    raise DuplicateKeyError(
        f"Could not allocate a unique reference number after {MAX_INSERT_ATTEMPTS} attempts"
    )
