"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        REGISTRAR_DB_HOST: Database host (default: localhost)
        REGISTRAR_DB_PORT: Database port (default: 5432)
        REGISTRAR_DB_DATABASE: Database name (default: registrar)
        REGISTRAR_DB_USERNAME: Database user (default: registrar)
        REGISTRAR_DB_PASSWORD: Database password (required in production)
        REGISTRAR_DB_POOL_MAX_CONNECTIONS: Engine pool size (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="registrar", description="Database name")
    username: str = Field(default="registrar", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class PrefixPolicySettings(BaseSettings):
    """Settings for the SCIM configuration service holding prefix policies.

    Environment variables:
        REGISTRAR_PREFIX_POLICY_BASE_URL: Base URL of the configuration service
        REGISTRAR_PREFIX_POLICY_API_TOKEN: Optional bearer token
        REGISTRAR_PREFIX_POLICY_TIMEOUT_SECONDS: Request timeout (default: 5)
        REGISTRAR_PREFIX_POLICY_CACHE_TTL_SECONDS: Cache lifetime, 0 disables (default: 30)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_PREFIX_POLICY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8081",
        description="Base URL of the configuration service",
    )
    api_token: SecretStr | None = Field(
        default=None,
        description="Bearer token for the configuration service",
    )
    timeout_seconds: float = Field(
        default=5.0,
        description="Request timeout in seconds",
        gt=0,
    )
    cache_ttl_seconds: float = Field(
        default=30.0,
        description="How long resolved prefixes are reused, 0 disables caching",
        ge=0,
        le=300,
    )


class AuditSettings(BaseSettings):
    """Settings for the audit sink.

    Environment variables:
        REGISTRAR_AUDIT_EVENTS_URL: Events service endpoint; unset logs only
        REGISTRAR_AUDIT_TIMEOUT_SECONDS: Delivery timeout (default: 2)
        REGISTRAR_AUDIT_SOURCE: Source name stamped on records (default: group-registrar)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    events_url: str | None = Field(
        default=None,
        description="Endpoint of the Events service",
    )
    timeout_seconds: float = Field(
        default=2.0,
        description="Delivery timeout in seconds",
        gt=0,
    )
    source: str = Field(
        default="group-registrar",
        description="Source name stamped on audit records",
    )


class RegistrationSettings(BaseSettings):
    """Workflow settings.

    Environment variables:
        REGISTRAR_DISPATCH_ON_CREATE: Move new registrations straight to
            PROCESSING (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dispatch_on_create: bool = Field(
        default=True,
        description="Acknowledge dispatch of all sub-processes at creation",
    )


class Settings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Group Registrar API", description="Application name")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_prefix_policy_settings() -> PrefixPolicySettings:
    """Get cached prefix policy settings."""
    return PrefixPolicySettings()


@lru_cache
def get_audit_settings() -> AuditSettings:
    """Get cached audit settings."""
    return AuditSettings()


@lru_cache
def get_registration_settings() -> RegistrationSettings:
    """Get cached workflow settings."""
    return RegistrationSettings()
