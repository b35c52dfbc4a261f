"""Domain probe for audit sink delivery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class AuditSinkProbe(Protocol):
    """Domain probe for audit record delivery."""

    def audit_record_delivered(self, sink: str, event_type: str) -> None:
        """Record that a sink accepted an audit record."""
        ...

    def audit_delivery_failed(self, sink: str, event_type: str, error: str) -> None:
        """Record that a sink failed to accept an audit record."""
        ...

    def with_context(self, context: ObservationContext) -> AuditSinkProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditSinkProbe:
    """Default implementation of AuditSinkProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuditSinkProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditSinkProbe(logger=self._logger, context=context)

    def audit_record_delivered(self, sink: str, event_type: str) -> None:
        """Record that a sink accepted an audit record."""
        self._logger.debug(
            "audit_record_delivered",
            sink=sink,
            event_type=event_type,
            **self._get_context_kwargs(),
        )

    def audit_delivery_failed(self, sink: str, event_type: str, error: str) -> None:
        """Record that a sink failed to accept an audit record."""
        self._logger.warning(
            "audit_delivery_failed",
            sink=sink,
            event_type=event_type,
            error=error,
            **self._get_context_kwargs(),
        )
