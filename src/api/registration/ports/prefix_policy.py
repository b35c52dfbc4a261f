"""Port for the prefix policy collaborator."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPrefixPolicyClient(Protocol):
    """Resolves the allowed group-name prefixes of a target application."""

    async def resolve_allowed_prefixes(self, app_name: str) -> frozenset[str]:
        """Return the allowed prefixes registered for ``app_name``.

        Args:
            app_name: Target application name

        Returns:
            The set of allowed prefixes

        Raises:
            AppNotFoundError: If the app has no registered configuration
            DependencyUnavailableError: If the collaborator cannot be reached
        """
        ...
