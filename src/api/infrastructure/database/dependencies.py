"""Database dependency injection for FastAPI.

Provides the async session factory for the registration store with
explicit transaction management and connection pooling.
"""

from __future__ import annotations

import threading
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Module-level engine instance (created on first use)
_engine: AsyncEngine | None = None

# Module-level sessionmaker instance (created with the engine)
_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_engine() -> AsyncEngine:
    """Get the database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine
    """
    global _engine, _sessionmaker
    if _engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _engine is None:
                settings = get_database_settings()
                _engine = create_engine(settings)
                _sessionmaker = async_sessionmaker(
                    _engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.engine_created(
                    connection_string=settings.connection_string,
                    pool_size=settings.pool_max_connections,
                )
    return _engine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a session for registration operations (FastAPI dependency).

    The session is configured to NOT auto-commit. Callers must explicitly
    manage transactions using `async with session.begin()`.

    Usage:
        @router.post("/registrations")
        async def register(
            session: AsyncSession = Depends(get_session)
        ):
            async with session.begin():
                # mutations here
                # transaction commits at end of `with` block

    Yields:
        AsyncSession for database operations
    """
    # Ensure engine and sessionmaker are initialized
    get_engine()
    assert _sessionmaker is not None

    async with _sessionmaker() as session:
        yield session


async def check_database() -> bool:
    """Run a trivial query to verify the database is reachable.

    Returns:
        True if the query succeeded, False otherwise
    """
    try:
        async with get_engine().connect() as connection:
            await connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        _probe.health_check_failed(e)
        return False


async def close_database_connections() -> None:
    """Close all database engine connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets the sessionmaker to allow reinitialization.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _probe.engine_disposed()
        _engine = None
        _sessionmaker = None
