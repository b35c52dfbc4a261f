"""Protocol for registration workflow observability.

Defines the interface for domain probes that capture application-level
domain events for the registration workflow.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class RegistrationServiceProbe(Protocol):
    """Domain probe for registration workflow operations."""

    def registration_created(
        self,
        registration_id: str,
        group_name: str,
        target_app: str,
        owner_id: str,
    ) -> None:
        """Record that a registration was admitted and persisted."""
        ...

    def registration_rejected(
        self,
        group_name: str,
        target_app: str,
        kind: str,
        error: str,
    ) -> None:
        """Record that a registration request was rejected."""
        ...

    def sub_status_transitioned(
        self,
        registration_id: str,
        sub_process: str,
        old_status: str,
        new_status: str,
        overall_status: str,
    ) -> None:
        """Record that a sub-status transition was applied."""
        ...

    def audit_emit_failed(self, event_type: str, error: str) -> None:
        """Record that an audit record could not be delivered."""
        ...

    def with_context(self, context: ObservationContext) -> RegistrationServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRegistrationServiceProbe:
    """Default implementation of RegistrationServiceProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultRegistrationServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRegistrationServiceProbe(logger=self._logger, context=context)

    def registration_created(
        self,
        registration_id: str,
        group_name: str,
        target_app: str,
        owner_id: str,
    ) -> None:
        """Record that a registration was admitted and persisted."""
        self._logger.info(
            "registration_created",
            registration_id=registration_id,
            group_name=group_name,
            target_app=target_app,
            owner_id=owner_id,
            **self._get_context_kwargs(),
        )

    def registration_rejected(
        self,
        group_name: str,
        target_app: str,
        kind: str,
        error: str,
    ) -> None:
        """Record that a registration request was rejected."""
        self._logger.warning(
            "registration_rejected",
            group_name=group_name,
            target_app=target_app,
            kind=kind,
            error=error,
            **self._get_context_kwargs(),
        )

    def sub_status_transitioned(
        self,
        registration_id: str,
        sub_process: str,
        old_status: str,
        new_status: str,
        overall_status: str,
    ) -> None:
        """Record that a sub-status transition was applied."""
        self._logger.info(
            "sub_status_transitioned",
            registration_id=registration_id,
            sub_process=sub_process,
            old_status=old_status,
            new_status=new_status,
            overall_status=overall_status,
            **self._get_context_kwargs(),
        )

    def audit_emit_failed(self, event_type: str, error: str) -> None:
        """Record that an audit record could not be delivered."""
        self._logger.warning(
            "audit_emit_failed",
            event_type=event_type,
            error=error,
            **self._get_context_kwargs(),
        )
