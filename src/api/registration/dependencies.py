"""FastAPI dependency injection for the registration context.

HTTP clients for the configuration service and the Events service are
process-wide singletons so that connection pools and the prefix cache
survive across requests. ``close_http_clients`` releases them on shutdown.
"""

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_session
from infrastructure.observability import ObservationContext
from infrastructure.settings import (
    get_audit_settings,
    get_prefix_policy_settings,
    get_registration_settings,
)
from registration.application.observability import (
    DefaultRegistrationServiceProbe,
    DefaultStatusGatewayProbe,
    RegistrationServiceProbe,
    StatusGatewayProbe,
)
from registration.application.services import (
    RegistrationService,
    StatusUpdateGateway,
)
from registration.infrastructure.audit_serializer import RegistrationEventSerializer
from registration.infrastructure.audit_sink import (
    CompositeAuditSink,
    HttpAuditSink,
    LoggingAuditSink,
)
from registration.infrastructure.prefix_policy_client import HttpPrefixPolicyClient
from registration.infrastructure.registration_repository import (
    RegistrationRepository,
)
from registration.ports.audit import IAuditSink
from registration.ports.prefix_policy import IPrefixPolicyClient

# Module-level singletons (created on first use)
_prefix_policy_http: httpx.AsyncClient | None = None
_prefix_policy_client: HttpPrefixPolicyClient | None = None
_audit_http: httpx.AsyncClient | None = None
_audit_sink: CompositeAuditSink | None = None


def get_prefix_policy_client() -> IPrefixPolicyClient:
    """Get the shared prefix policy client.

    Returns:
        HttpPrefixPolicyClient configured from prefix policy settings
    """
    global _prefix_policy_http, _prefix_policy_client
    if _prefix_policy_client is None:
        settings = get_prefix_policy_settings()
        headers = {"Accept": "application/json"}
        if settings.api_token is not None:
            headers["Authorization"] = (
                f"Bearer {settings.api_token.get_secret_value()}"
            )
        _prefix_policy_http = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            headers=headers,
        )
        _prefix_policy_client = HttpPrefixPolicyClient(
            http_client=_prefix_policy_http,
            cache_ttl_seconds=settings.cache_ttl_seconds,
        )
    return _prefix_policy_client


def get_audit_sink() -> IAuditSink:
    """Get the shared audit sink.

    Records always go to the structured log. They are also posted to the
    Events service when an events URL is configured.

    Returns:
        CompositeAuditSink wrapping the configured sinks
    """
    global _audit_http, _audit_sink
    if _audit_sink is None:
        settings = get_audit_settings()
        serializer = RegistrationEventSerializer(source=settings.source)
        sink = CompositeAuditSink([LoggingAuditSink(serializer=serializer)])
        if settings.events_url:
            _audit_http = httpx.AsyncClient(timeout=settings.timeout_seconds)
            sink.register(
                HttpAuditSink(
                    http_client=_audit_http,
                    events_url=settings.events_url,
                    serializer=serializer,
                )
            )
        _audit_sink = sink
    return _audit_sink


async def close_http_clients() -> None:
    """Close the shared HTTP clients and forget the singletons.

    Pending audit deliveries are drained before the clients close.
    """
    global _prefix_policy_http, _prefix_policy_client, _audit_http, _audit_sink

    if _audit_sink is not None:
        await _audit_sink.drain()

    for client in (_prefix_policy_http, _audit_http):
        if client is not None:
            await client.aclose()

    _prefix_policy_http = None
    _prefix_policy_client = None
    _audit_http = None
    _audit_sink = None


def get_observation_context(request: Request) -> ObservationContext:
    """Build the observation context for the current request.

    The caller-supplied X-Request-ID header is used for correlation.
    """
    return ObservationContext(request_id=request.headers.get("X-Request-ID"))


def get_registration_service_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> RegistrationServiceProbe:
    """Get RegistrationServiceProbe instance.

    Returns:
        DefaultRegistrationServiceProbe bound to the request context
    """
    return DefaultRegistrationServiceProbe().with_context(context)


def get_status_gateway_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> StatusGatewayProbe:
    """Get StatusGatewayProbe instance bound to the request context."""
    return DefaultStatusGatewayProbe().with_context(context)


def get_registration_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> RegistrationRepository:
    """Get RegistrationRepository instance.

    Args:
        session: Async database session

    Returns:
        RegistrationRepository bound to the request session
    """
    return RegistrationRepository(session=session)


def get_registration_service(
    registration_repo: Annotated[
        RegistrationRepository, Depends(get_registration_repository)
    ],
    session: Annotated[AsyncSession, Depends(get_session)],
    prefix_policy: Annotated[IPrefixPolicyClient, Depends(get_prefix_policy_client)],
    audit_sink: Annotated[IAuditSink, Depends(get_audit_sink)],
    probe: Annotated[
        RegistrationServiceProbe, Depends(get_registration_service_probe)
    ],
) -> RegistrationService:
    """Get RegistrationService instance.

    Args:
        registration_repo: Registration repository (shares session via
            FastAPI dependency caching)
        session: Database session for transaction management
        prefix_policy: Prefix policy client
        audit_sink: Audit sink
        probe: Registration service probe for observability

    Returns:
        RegistrationService instance
    """
    return RegistrationService(
        session=session,
        registration_repository=registration_repo,
        prefix_policy=prefix_policy,
        audit_sink=audit_sink,
        probe=probe,
        dispatch_on_create=get_registration_settings().dispatch_on_create,
    )


def get_status_gateway(
    service: Annotated[RegistrationService, Depends(get_registration_service)],
    probe: Annotated[StatusGatewayProbe, Depends(get_status_gateway_probe)],
) -> StatusUpdateGateway:
    """Get StatusUpdateGateway instance."""
    return StatusUpdateGateway(registration_service=service, probe=probe)
