"""Domain probe for prefix policy lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class PrefixPolicyProbe(Protocol):
    """Domain probe for prefix policy client operations."""

    def prefixes_resolved(self, app_name: str, prefix_count: int, cached: bool) -> None:
        """Record that the allowed prefixes of an app were resolved."""
        ...

    def app_not_found(self, app_name: str) -> None:
        """Record that the configuration service has no entry for an app."""
        ...

    def lookup_failed(
        self, app_name: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that the configuration service could not answer."""
        ...

    def with_context(self, context: ObservationContext) -> PrefixPolicyProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPrefixPolicyProbe:
    """Default implementation of PrefixPolicyProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPrefixPolicyProbe:
        """Create a new probe with observation context bound."""
        return DefaultPrefixPolicyProbe(logger=self._logger, context=context)

    def prefixes_resolved(self, app_name: str, prefix_count: int, cached: bool) -> None:
        """Record that the allowed prefixes of an app were resolved."""
        self._logger.debug(
            "prefixes_resolved",
            app_name=app_name,
            prefix_count=prefix_count,
            cached=cached,
            **self._get_context_kwargs(),
        )

    def app_not_found(self, app_name: str) -> None:
        """Record that the configuration service has no entry for an app."""
        self._logger.info(
            "prefix_policy_app_not_found",
            app_name=app_name,
            **self._get_context_kwargs(),
        )

    def lookup_failed(
        self, app_name: str, reason: str, status_code: int | None = None
    ) -> None:
        """Record that the configuration service could not answer."""
        self._logger.error(
            "prefix_policy_lookup_failed",
            app_name=app_name,
            reason=reason,
            status_code=status_code,
            **self._get_context_kwargs(),
        )
