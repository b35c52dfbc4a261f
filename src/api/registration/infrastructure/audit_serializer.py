"""Serialization of registration domain events into audit records."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, get_args

from registration.domain.events import DomainEvent

# Derive supported events from the DomainEvent type alias
_SUPPORTED_EVENTS: frozenset[str] = frozenset(
    cls.__name__ for cls in get_args(DomainEvent)
)


class RegistrationEventSerializer:
    """Converts registration domain events to JSON-compatible audit records.

    Records have the shape accepted by the Events service:
    ``{"eventType", "source", "aggregateId", "occurredAt", "payload"}``.
    """

    def __init__(self, source: str = "group-registrar"):
        self._source = source

    def serialize(self, event: DomainEvent) -> dict[str, Any]:
        """Convert a domain event to an audit record.

        Raises:
            ValueError: If the event type is not supported
        """
        event_type = type(event).__name__
        if event_type not in _SUPPORTED_EVENTS:
            raise ValueError(f"Unsupported event type: {event_type}")

        payload = asdict(event)
        for key, value in list(payload.items()):
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        return {
            "eventType": event_type,
            "source": self._source,
            "aggregateId": event.registration_id,
            "occurredAt": payload["occurred_at"],
            "payload": payload,
        }
