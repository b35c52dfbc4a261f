"""Database infrastructure - shared engine and session primitives."""

from infrastructure.database.dependencies import (
    check_database,
    close_database_connections,
    get_engine,
    get_session,
)
from infrastructure.database.errors import is_connection_error

__all__ = [
    "check_database",
    "close_database_connections",
    "get_engine",
    "get_session",
    "is_connection_error",
]
