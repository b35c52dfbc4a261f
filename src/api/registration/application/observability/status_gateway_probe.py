"""Domain probe for inbound status reports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class StatusGatewayProbe(Protocol):
    """Domain probe for the status update gateway."""

    def status_reported(
        self, registration_id: str, sub_process: str, status: str
    ) -> None:
        """Record that a status report was accepted."""
        ...

    def status_report_rejected(
        self,
        registration_id: str,
        sub_process: str,
        status: str,
        kind: str,
        error: str,
    ) -> None:
        """Record that a status report was rejected."""
        ...

    def with_context(self, context: ObservationContext) -> StatusGatewayProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStatusGatewayProbe:
    """Default implementation of StatusGatewayProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStatusGatewayProbe:
        """Create a new probe with observation context bound."""
        return DefaultStatusGatewayProbe(logger=self._logger, context=context)

    def status_reported(
        self, registration_id: str, sub_process: str, status: str
    ) -> None:
        """Record that a status report was accepted."""
        self._logger.info(
            "status_reported",
            registration_id=registration_id,
            sub_process=sub_process,
            status=status,
            **self._get_context_kwargs(),
        )

    def status_report_rejected(
        self,
        registration_id: str,
        sub_process: str,
        status: str,
        kind: str,
        error: str,
    ) -> None:
        """Record that a status report was rejected."""
        self._logger.warning(
            "status_report_rejected",
            registration_id=registration_id,
            sub_process=sub_process,
            status=status,
            kind=kind,
            error=error,
            **self._get_context_kwargs(),
        )
