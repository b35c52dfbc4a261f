"""HTTP client for the SCIM configuration service's prefix policies.

The configuration service answers
``GET {base_url}/configurations/{app_name}`` with
``{"appName": ..., "allowedPrefixes": [...]}`` or 404 for unknown apps.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from urllib.parse import quote

import httpx

from registration.infrastructure.observability import (
    DefaultPrefixPolicyProbe,
    PrefixPolicyProbe,
)
from registration.ports.exceptions import AppNotFoundError, DependencyUnavailableError
from registration.ports.prefix_policy import IPrefixPolicyClient


class HttpPrefixPolicyClient(IPrefixPolicyClient):
    """Resolves allowed prefixes over HTTP with a short-lived cache.

    Only successful lookups are cached. Unknown apps and failures always go
    back to the configuration service, so a stale entry can at worst make
    an app's policy look as it did up to ``cache_ttl_seconds`` ago.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache_ttl_seconds: float = 30.0,
        probe: PrefixPolicyProbe | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the client.

        Args:
            http_client: AsyncClient with base_url, timeout and auth configured
            cache_ttl_seconds: How long resolved prefixes are reused, 0 disables
            probe: Optional domain probe for observability
            clock: Monotonic time source, replaceable in tests
        """
        self._http = http_client
        self._cache_ttl = cache_ttl_seconds
        self._probe = probe or DefaultPrefixPolicyProbe()
        self._clock = clock
        self._cache: dict[str, tuple[float, frozenset[str]]] = {}

    async def resolve_allowed_prefixes(self, app_name: str) -> frozenset[str]:
        """Return the allowed prefixes registered for ``app_name``.

        Raises:
            AppNotFoundError: If the service has no configuration for the app
            DependencyUnavailableError: On transport errors, timeouts, error
                statuses or malformed responses
        """
        cached = self._cached(app_name)
        if cached is not None:
            self._probe.prefixes_resolved(app_name, len(cached), cached=True)
            return cached

        prefixes = await self._fetch(app_name)
        if self._cache_ttl > 0:
            self._cache[app_name] = (self._clock() + self._cache_ttl, prefixes)

        self._probe.prefixes_resolved(app_name, len(prefixes), cached=False)
        return prefixes

    def _cached(self, app_name: str) -> frozenset[str] | None:
        entry = self._cache.get(app_name)
        if entry is None:
            return None
        expires_at, prefixes = entry
        if self._clock() >= expires_at:
            del self._cache[app_name]
            return None
        return prefixes

    async def _fetch(self, app_name: str) -> frozenset[str]:
        path = f"/configurations/{quote(app_name, safe='')}"
        try:
            response = await self._http.get(path)
        except httpx.HTTPError as e:
            self._probe.lookup_failed(app_name, reason=repr(e))
            raise DependencyUnavailableError(
                f"Configuration service unreachable while resolving '{app_name}'"
            ) from e

        if response.status_code == 404:
            self._probe.app_not_found(app_name)
            raise AppNotFoundError(f"No configuration registered for app '{app_name}'")

        if response.status_code != 200:
            self._probe.lookup_failed(
                app_name, reason="HTTP error", status_code=response.status_code
            )
            raise DependencyUnavailableError(
                f"HTTP {response.status_code}: configuration service failed "
                f"to resolve '{app_name}'"
            )

        try:
            body = response.json()
            raw_prefixes = body["allowedPrefixes"]
            if not isinstance(raw_prefixes, list) or not all(
                isinstance(prefix, str) for prefix in raw_prefixes
            ):
                raise TypeError("allowedPrefixes must be a list of strings")
        except (ValueError, KeyError, TypeError) as e:
            self._probe.lookup_failed(app_name, reason=f"Malformed response: {e!r}")
            raise DependencyUnavailableError(
                f"Configuration service returned a malformed policy for '{app_name}'"
            ) from e

        return frozenset(raw_prefixes)
