"""Status update gateway.

Inbound surface through which the directory, owner-verification and
app-configuration actors report their progress. Reports may arrive in any
order across sub-processes; ordering within one sub-process is enforced by
the transition rules, never by queuing.
"""

from __future__ import annotations

from registration.application.observability import (
    DefaultStatusGatewayProbe,
    StatusGatewayProbe,
)
from registration.application.services.registration_service import (
    RegistrationService,
)
from registration.domain.aggregates import GroupRegistration
from registration.domain.exceptions import (
    InvalidTransitionError,
    RegistrationError,
    RegistrationValidationError,
)
from registration.domain.value_objects import RegistrationId, SubProcess, SubStatus
from registration.ports.exceptions import RegistrationNotFoundError


class StatusUpdateGateway:
    """Validates status reports and hands them to the workflow service."""

    def __init__(
        self,
        registration_service: RegistrationService,
        probe: StatusGatewayProbe | None = None,
    ):
        self._service = registration_service
        self._probe = probe or DefaultStatusGatewayProbe()

    async def report_status(
        self,
        registration_id: str,
        sub_process: str,
        status: str,
    ) -> GroupRegistration:
        """Apply a status report from an external actor.

        Args:
            registration_id: Registration id (ULID string)
            sub_process: One of "directory", "owner", "appConfig"
            status: One of "PROCESSING", "COMPLETE", "FAILED"

        Returns:
            The registration after the transition

        Raises:
            RegistrationNotFoundError: If the id is malformed or unknown
            RegistrationValidationError: If the sub-process or status is unknown
            InvalidTransitionError: If the transition is not allowed, including
                any report of PENDING and any report to a terminal sub-process
            DependencyUnavailableError: If the store cannot be reached
        """
        try:
            try:
                registration_id_obj = RegistrationId.from_string(registration_id)
            except ValueError as e:
                raise RegistrationNotFoundError(
                    f"Registration {registration_id} not found"
                ) from e

            try:
                sub_process_obj = SubProcess(sub_process)
            except ValueError as e:
                raise RegistrationValidationError(
                    f"Unknown sub-process {sub_process!r}; expected one of "
                    f"{[p.value for p in SubProcess]}"
                ) from e

            try:
                status_obj = SubStatus(status)
            except ValueError as e:
                raise RegistrationValidationError(
                    f"Unknown status {status!r}; expected one of "
                    f"{[s.value for s in SubStatus if s is not SubStatus.PENDING]}"
                ) from e

            if status_obj is SubStatus.PENDING:
                raise InvalidTransitionError(
                    "PENDING is the initial status and cannot be reported"
                )

            registration = await self._service.apply_transition(
                registration_id=registration_id_obj,
                sub_process=sub_process_obj,
                new_status=status_obj,
            )

        except RegistrationError as e:
            self._probe.status_report_rejected(
                registration_id=registration_id,
                sub_process=sub_process,
                status=status,
                kind=e.kind,
                error=str(e),
            )
            raise

        self._probe.status_reported(
            registration_id=registration_id,
            sub_process=sub_process_obj.value,
            status=status_obj.value,
        )
        return registration
