"""Unit test fixtures with mocked dependencies."""

import pytest
from pydantic import SecretStr


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password=SecretStr("testpass"),
        pool_max_connections=10,
    )
