"""Audit sink implementations.

LoggingAuditSink writes records to the structured log, HttpAuditSink posts
them to the Events service, and CompositeAuditSink fans records out to
several sinks without blocking the caller.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from registration.domain.events import DomainEvent
from registration.infrastructure.audit_serializer import RegistrationEventSerializer
from registration.infrastructure.observability import (
    AuditSinkProbe,
    DefaultAuditSinkProbe,
)
from registration.ports.audit import IAuditSink


class LoggingAuditSink(IAuditSink):
    """Writes every audit record as an ``audit_record`` log event."""

    def __init__(
        self,
        serializer: RegistrationEventSerializer | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        self._serializer = serializer or RegistrationEventSerializer()
        self._logger = logger or structlog.get_logger("audit")

    async def emit(self, event: DomainEvent) -> None:
        record = self._serializer.serialize(event)
        self._logger.info("audit_record", **record)


class HttpAuditSink(IAuditSink):
    """Posts audit records to the Events service.

    Raises httpx.HTTPError on transport failures and non-2xx answers; the
    caller decides whether that matters.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        events_url: str,
        serializer: RegistrationEventSerializer | None = None,
    ):
        """Initialize the sink.

        Args:
            http_client: AsyncClient with timeout configured
            events_url: Absolute URL of the Events service endpoint
            serializer: Optional event serializer for testability
        """
        self._http = http_client
        self._events_url = events_url
        self._serializer = serializer or RegistrationEventSerializer()

    async def emit(self, event: DomainEvent) -> None:
        record = self._serializer.serialize(event)
        response = await self._http.post(self._events_url, json=record)
        response.raise_for_status()


class CompositeAuditSink(IAuditSink):
    """Delivers each record to every registered sink in the background.

    ``emit`` only schedules delivery and returns at once, so a slow or
    hanging sink never holds up the caller. A failing sink does not prevent
    delivery to the others; failures are reported through the probe and
    never propagate. Call ``drain`` before closing the sinks' clients.
    """

    def __init__(
        self,
        sinks: list[IAuditSink] | None = None,
        probe: AuditSinkProbe | None = None,
    ):
        self._sinks: list[IAuditSink] = [s for s in (sinks or []) if s is not None]
        self._probe = probe or DefaultAuditSinkProbe()
        self._background_tasks: set[asyncio.Task] = set()

    def register(self, sink: IAuditSink) -> None:
        """Add a sink."""
        self._sinks.append(sink)

    async def emit(self, event: DomainEvent) -> None:
        for sink in self._sinks:
            task = asyncio.create_task(self._deliver(sink, event))
            self._background_tasks.add(task)
            task.add_done_callback(self._background_tasks.discard)

    async def drain(self) -> None:
        """Wait for every in-flight delivery to finish."""
        while self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    async def _deliver(self, sink: IAuditSink, event: DomainEvent) -> None:
        sink_name = type(sink).__name__
        event_type = type(event).__name__
        try:
            await sink.emit(event)
        except Exception as e:
            self._probe.audit_delivery_failed(sink_name, event_type, repr(e))
        else:
            self._probe.audit_record_delivered(sink_name, event_type)
