"""Application services for the registration context."""

from registration.application.services.registration_service import (
    RegistrationService,
)
from registration.application.services.status_gateway import StatusUpdateGateway

__all__ = [
    "RegistrationService",
    "StatusUpdateGateway",
]
