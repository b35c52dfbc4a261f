"""Domain probe for registration store operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to name reservation and sub-status
compare-and-set operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class RegistrationRepositoryProbe(Protocol):
    """Domain probe for registration repository operations."""

    def registration_saved(self, registration_id: str, group_name: str) -> None:
        """Record that a registration was inserted and its name reserved."""
        ...

    def registration_retrieved(self, registration_id: str) -> None:
        """Record that a registration was retrieved."""
        ...

    def registration_not_found(self, registration_id: str) -> None:
        """Record that a registration was not found."""
        ...

    def duplicate_group_name(self, group_name: str) -> None:
        """Record that a name reservation hit the uniqueness constraint."""
        ...

    def sub_status_updated(
        self, registration_id: str, sub_process: str, status: str
    ) -> None:
        """Record that a sub-status compare-and-set was applied."""
        ...

    def sub_status_conflict(
        self, registration_id: str, sub_process: str, expected: str
    ) -> None:
        """Record that a compare-and-set found a different stored status."""
        ...

    def store_unavailable(self, operation: str, error: str) -> None:
        """Record that the database could not be reached."""
        ...

    def with_context(self, context: ObservationContext) -> RegistrationRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRegistrationRepositoryProbe:
    """Default implementation of RegistrationRepositoryProbe using structlog."""

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
    ) -> DefaultRegistrationRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultRegistrationRepositoryProbe(logger=self._logger, context=context)

    def registration_saved(self, registration_id: str, group_name: str) -> None:
        """Record that a registration was inserted and its name reserved."""
        self._logger.info(
            "registration_saved",
            registration_id=registration_id,
            group_name=group_name,
            **self._get_context_kwargs(),
        )

    def registration_retrieved(self, registration_id: str) -> None:
        """Record that a registration was retrieved."""
        self._logger.debug(
            "registration_retrieved",
            registration_id=registration_id,
            **self._get_context_kwargs(),
        )

    def registration_not_found(self, registration_id: str) -> None:
        """Record that a registration was not found."""
        self._logger.debug(
            "registration_not_found",
            registration_id=registration_id,
            **self._get_context_kwargs(),
        )

    def duplicate_group_name(self, group_name: str) -> None:
        """Record that a name reservation hit the uniqueness constraint."""
        self._logger.warning(
            "duplicate_group_name",
            group_name=group_name,
            **self._get_context_kwargs(),
        )

    def sub_status_updated(
        self, registration_id: str, sub_process: str, status: str
    ) -> None:
        """Record that a sub-status compare-and-set was applied."""
        self._logger.debug(
            "sub_status_updated",
            registration_id=registration_id,
            sub_process=sub_process,
            status=status,
            **self._get_context_kwargs(),
        )

    def sub_status_conflict(
        self, registration_id: str, sub_process: str, expected: str
    ) -> None:
        """Record that a compare-and-set found a different stored status."""
        self._logger.warning(
            "sub_status_conflict",
            registration_id=registration_id,
            sub_process=sub_process,
            expected=expected,
            **self._get_context_kwargs(),
        )

    def store_unavailable(self, operation: str, error: str) -> None:
        """Record that the database could not be reached."""
        self._logger.error(
            "registration_store_unavailable",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
