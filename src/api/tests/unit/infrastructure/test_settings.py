"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    AuditSettings,
    DatabaseSettings,
    PrefixPolicySettings,
    RegistrationSettings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_size(self):
        """Should have a sensible pool size default."""
        settings = DatabaseSettings()
        assert 1 <= settings.pool_max_connections <= 20

    def test_pool_max_must_be_positive(self):
        """Pool size must be >= 1."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=0)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)


class TestDatabaseSettingsEnvironment:
    """Tests for loading database settings from the environment."""

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("REGISTRAR_DB_HOST", "db.internal")
        monkeypatch.setenv("REGISTRAR_DB_PORT", "6543")
        monkeypatch.setenv("REGISTRAR_DB_PASSWORD", "hunter2")

        settings = DatabaseSettings()

        assert settings.host == "db.internal"
        assert settings.port == 6543
        assert settings.password.get_secret_value() == "hunter2"

    def test_connection_string_omits_password(self, mock_db_settings):
        assert mock_db_settings.connection_string == (
            "postgresql://testuser@testhost:5432/testdb"
        )
        assert "testpass" not in mock_db_settings.connection_string


class TestPrefixPolicySettings:
    """Tests for configuration service settings."""

    def test_defaults(self):
        settings = PrefixPolicySettings()

        assert settings.api_token is None
        assert settings.timeout_seconds == 5.0
        assert settings.cache_ttl_seconds == 30.0

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("REGISTRAR_PREFIX_POLICY_BASE_URL", "https://scim.example.com")
        monkeypatch.setenv("REGISTRAR_PREFIX_POLICY_API_TOKEN", "token")
        monkeypatch.setenv("REGISTRAR_PREFIX_POLICY_CACHE_TTL_SECONDS", "0")

        settings = PrefixPolicySettings()

        assert settings.base_url == "https://scim.example.com"
        assert settings.api_token.get_secret_value() == "token"
        assert settings.cache_ttl_seconds == 0

    @pytest.mark.parametrize(
        "kwargs", [{"timeout_seconds": 0}, {"cache_ttl_seconds": -1}, {"cache_ttl_seconds": 301}]
    )
    def test_rejects_out_of_range_values(self, kwargs):
        with pytest.raises(ValidationError):
            PrefixPolicySettings(**kwargs)


class TestAuditSettings:
    """Tests for audit sink settings."""

    def test_logs_only_by_default(self):
        settings = AuditSettings()

        assert settings.events_url is None
        assert settings.source == "group-registrar"

    def test_reads_events_url(self, monkeypatch):
        monkeypatch.setenv("REGISTRAR_AUDIT_EVENTS_URL", "http://events/v1/events")

        assert AuditSettings().events_url == "http://events/v1/events"


class TestRegistrationSettings:
    """Tests for workflow settings."""

    def test_dispatches_on_create_by_default(self):
        assert RegistrationSettings().dispatch_on_create is True

    def test_dispatch_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("REGISTRAR_DISPATCH_ON_CREATE", "false")

        assert RegistrationSettings().dispatch_on_create is False
