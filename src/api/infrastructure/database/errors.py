"""Classification of database failures."""

from __future__ import annotations

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


def is_connection_error(error: BaseException) -> bool:
    """Return True if ``error`` means the database could not be reached.

    Covers driver-level connectivity failures, pool checkout timeouts,
    socket errors and any DBAPIError raised on an invalidated connection.
    Constraint violations and other statement errors return False.
    """
    if isinstance(error, (OperationalError, InterfaceError, PoolTimeoutError, OSError)):
        return True
    return isinstance(error, DBAPIError) and bool(error.connection_invalidated)
