"""Unit tests for infrastructure domain probes.

Tests that domain probes correctly capture domain events
following the Domain Oriented Observability pattern.
"""

from unittest.mock import MagicMock

import structlog

from infrastructure.observability import ObservationContext
from infrastructure.observability.probes import DefaultConnectionProbe
from infrastructure.observability.startup_probe import DefaultStartupProbe
from registration.infrastructure.observability import (
    DefaultAuditSinkProbe,
    DefaultPrefixPolicyProbe,
    DefaultRegistrationRepositoryProbe,
)


class TestConnectionProbe:
    """Tests for ConnectionProbe protocol and implementation."""

    def test_default_probe_creates_with_default_logger(self):
        """Default probe should work without explicit logger."""
        probe = DefaultConnectionProbe()
        assert probe._logger is not None

    def test_engine_created_logs_info(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultConnectionProbe(logger=mock_logger)

        probe.engine_created(
            connection_string="postgresql://u@h:5432/db", pool_size=10
        )

        mock_logger.info.assert_called_once_with(
            "database_engine_created",
            connection_string="postgresql://u@h:5432/db",
            pool_size=10,
        )

    def test_health_check_failed_logs_error(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultConnectionProbe(logger=mock_logger)

        probe.health_check_failed(OSError("refused"))

        mock_logger.error.assert_called_once_with(
            "database_health_check_failed", error="refused"
        )


class TestStartupProbe:
    """Tests for StartupProbe."""

    def test_application_started_logs_version(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultStartupProbe(logger=mock_logger)

        probe.application_started(version="0.1.0", dispatch_on_create=True)

        mock_logger.info.assert_called_once_with(
            "application_started", version="0.1.0", dispatch_on_create=True
        )


class TestRegistrationRepositoryProbe:
    """Tests for RegistrationRepositoryProbe."""

    def test_sub_status_conflict_logs_warning(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultRegistrationRepositoryProbe(logger=mock_logger)

        probe.sub_status_conflict("r1", "owner", "PROCESSING")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["registration_id"] == "r1"


class TestPrefixPolicyProbe:
    """Tests for PrefixPolicyProbe."""

    def test_lookup_failed_logs_error_with_context(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultPrefixPolicyProbe(logger=mock_logger).with_context(
            ObservationContext(request_id="req-1")
        )

        probe.lookup_failed("payments", reason="HTTP error", status_code=502)

        mock_logger.error.assert_called_once_with(
            "prefix_policy_lookup_failed",
            app_name="payments",
            reason="HTTP error",
            status_code=502,
            request_id="req-1",
        )


class TestAuditSinkProbe:
    """Tests for AuditSinkProbe."""

    def test_delivery_failed_logs_warning(self):
        mock_logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultAuditSinkProbe(logger=mock_logger)

        probe.audit_delivery_failed("HttpAuditSink", "RegistrationCreated", "boom")

        mock_logger.warning.assert_called_once_with(
            "audit_delivery_failed",
            sink="HttpAuditSink",
            event_type="RegistrationCreated",
            error="boom",
        )


class TestObservationContext:
    """Tests for ObservationContext."""

    def test_as_dict_skips_unset_values(self):
        assert ObservationContext().as_dict() == {}

    def test_as_dict_includes_request_id(self):
        context = ObservationContext(request_id="req-1")

        assert context.as_dict() == {"request_id": "req-1"}

