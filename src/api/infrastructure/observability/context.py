"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events. Keys must not collide with the arguments of the
    probe methods they are bound to.

    Attributes:
        request_id: Caller-supplied identifier of the current request.

    Example:
        context = ObservationContext(request_id="req-123")
        probe = DefaultStatusGatewayProbe().with_context(context)
    """

    request_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        if self.request_id is None:
            return {}
        return {"request_id": self.request_id}
