"""Port for the audit sink side channel."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from registration.domain.events import DomainEvent


@runtime_checkable
class IAuditSink(Protocol):
    """Receives a structured record for every significant transition.

    Delivery is best-effort. Implementations may raise; the application
    layer isolates those failures from the committed state change.
    """

    async def emit(self, event: DomainEvent) -> None:
        """Deliver one domain event to the sink."""
        ...
