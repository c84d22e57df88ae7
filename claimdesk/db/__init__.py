"""
Database module for ClaimDesk.

Exports database connection utilities and the unit of work.
"""

from claimdesk.db.connection import (
    check_db_connection,
    close_db_connection,
    create_session_maker,
    get_engine,
    get_session_maker,
    init_models,
)
from claimdesk.db.unit_of_work import UnitOfWork, get_uow

__all__ = [
    "check_db_connection",
    "close_db_connection",
    "create_session_maker",
    "get_engine",
    "get_session_maker",
    "init_models",
    "UnitOfWork",
    "get_uow",
]
