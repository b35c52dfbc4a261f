"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance.
Use docker-compose for testing.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings
from registration.infrastructure import models  # noqa: F401  (registers tables)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        REGISTRAR_DB_HOST, REGISTRAR_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("REGISTRAR_DB_HOST", "localhost"),
        port=int(os.getenv("REGISTRAR_DB_PORT", "5432")),
        database=os.getenv("REGISTRAR_DB_DATABASE", "registrar"),
        username=os.getenv("REGISTRAR_DB_USERNAME", "registrar"),
        password=SecretStr(
            os.getenv("REGISTRAR_DB_PASSWORD", "registrar_dev_password")
        ),
    )


@pytest_asyncio.fixture
async def engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine against a schema with the registration tables."""
    engine = create_engine(integration_db_settings)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(
    engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Provide a session factory for tests that need several sessions.

    Concurrency tests use one session per simulated request.
    """
    yield async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def clean_registrations(engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Empty the registration table before and after each test."""

    async def cleanup() -> None:
        async with engine.begin() as connection:
            await connection.execute(text("DELETE FROM group_registrations"))

    await cleanup()
    yield
    await cleanup()
