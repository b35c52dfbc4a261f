"""Domain-Oriented Observability for the registration application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from registration.application.observability.registration_service_probe import (
    DefaultRegistrationServiceProbe,
    RegistrationServiceProbe,
)
from registration.application.observability.status_gateway_probe import (
    DefaultStatusGatewayProbe,
    StatusGatewayProbe,
)

__all__ = [
    "RegistrationServiceProbe",
    "DefaultRegistrationServiceProbe",
    "StatusGatewayProbe",
    "DefaultStatusGatewayProbe",
]
