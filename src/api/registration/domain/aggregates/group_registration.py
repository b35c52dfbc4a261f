"""GroupRegistration aggregate for the registration context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from registration.domain.events import (
    RegistrationCompleted,
    RegistrationCreated,
    RegistrationFailed,
    SubStatusChanged,
)
from registration.domain.exceptions import (
    InvalidTransitionError,
    RegistrationValidationError,
)
from registration.domain.value_objects import (
    OverallStatus,
    Owner,
    RegistrationId,
    SubProcess,
    SubStatus,
    SubStatusState,
    project_overall_status,
    validate_group_name,
)

if TYPE_CHECKING:
    from registration.domain.events import DomainEvent

# Attribute holding the state of each sub-process
SUB_STATUS_FIELDS: dict[SubProcess, str] = {
    SubProcess.DIRECTORY: "directory_status",
    SubProcess.OWNER: "owner_status",
    SubProcess.APP_CONFIG: "app_config_status",
}


@dataclass
class GroupRegistration:
    """Aggregate tracking the registration of one directory group.

    A registration reserves a globally unique group name and then follows
    three independent sub-processes driven by external actors: directory
    registration, owner verification and app configuration propagation.

    Business rules:
    - group name, owner and target app are immutable
    - every sub-status starts at PENDING
    - a sub-status moves PENDING -> PROCESSING -> COMPLETE or FAILED
    - COMPLETE and FAILED are terminal for that sub-process
    - the overall status is derived from the sub-statuses on every read

    Event collection:
    - Creation and every transition record domain events
    - Events can be collected via collect_events() for the audit sink
    """

    id: RegistrationId
    group_name: str
    owner: Owner
    target_app: str
    directory_status: SubStatusState
    owner_status: SubStatusState
    app_config_status: SubStatusState
    created_at: datetime
    updated_at: datetime
    _pending_events: list[DomainEvent] = field(default_factory=list, repr=False)

    @classmethod
    def create(
        cls,
        group_name: str,
        owner: Owner,
        target_app: str,
        now: datetime | None = None,
    ) -> GroupRegistration:
        """Factory method for creating a new registration.

        Generates the ID, starts all three sub-statuses at PENDING and
        records the RegistrationCreated event.

        Args:
            group_name: The group name to register
            owner: The owner identity
            target_app: The application whose prefix policy governs the name
            now: Creation time, defaults to the current UTC time

        Returns:
            A new GroupRegistration with RegistrationCreated recorded

        Raises:
            RegistrationValidationError: If the name or target app is invalid
        """
        validate_group_name(group_name)
        if not target_app or not target_app.strip():
            raise RegistrationValidationError("Target app must not be empty")

        now = now or datetime.now(UTC)
        pending = SubStatusState(status=SubStatus.PENDING, transitioned_at=now)
        registration = cls(
            id=RegistrationId.generate(),
            group_name=group_name,
            owner=owner,
            target_app=target_app,
            directory_status=pending,
            owner_status=pending,
            app_config_status=pending,
            created_at=now,
            updated_at=now,
        )
        registration._pending_events.append(
            RegistrationCreated(
                registration_id=registration.id.value,
                group_name=group_name,
                owner_id=owner.id,
                target_app=target_app,
                occurred_at=now,
            )
        )
        return registration

    @property
    def sub_statuses(self) -> dict[SubProcess, SubStatusState]:
        """Return the state of every sub-process keyed by sub-process."""
        return {
            sub_process: getattr(self, attr)
            for sub_process, attr in SUB_STATUS_FIELDS.items()
        }

    @property
    def overall_status(self) -> OverallStatus:
        """Project the overall status from the current sub-statuses."""
        return project_overall_status(
            state.status for state in self.sub_statuses.values()
        )

    def sub_status(self, sub_process: SubProcess) -> SubStatusState:
        """Get the state of a single sub-process."""
        return getattr(self, SUB_STATUS_FIELDS[sub_process])

    def transition(
        self,
        sub_process: SubProcess,
        new_status: SubStatus,
        at: datetime | None = None,
    ) -> SubStatusState:
        """Move one sub-process to a new status.

        Only the named sub-status and updated_at change.

        Args:
            sub_process: The sub-process being reported on
            new_status: The status it reports
            at: Transition time, defaults to the current UTC time

        Returns:
            The state the sub-process was in before the transition

        Raises:
            InvalidTransitionError: If the sub-process is terminal or the
                new status does not directly follow the current one
        """
        previous = self.sub_status(sub_process)
        if previous.status.is_terminal:
            raise InvalidTransitionError(
                f"Sub-process '{sub_process}' of registration {self.id} is already "
                f"{previous.status}; no further transitions are accepted"
            )
        if not previous.status.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Sub-process '{sub_process}' of registration {self.id} cannot move "
                f"from {previous.status} to {new_status}"
            )

        at = at or datetime.now(UTC)
        setattr(
            self,
            SUB_STATUS_FIELDS[sub_process],
            SubStatusState(status=new_status, transitioned_at=at),
        )
        self.updated_at = at

        self._pending_events.append(
            SubStatusChanged(
                registration_id=self.id.value,
                sub_process=sub_process.value,
                old_status=previous.status.value,
                new_status=new_status.value,
                occurred_at=at,
            )
        )
        return previous

    def dispatch(self, at: datetime | None = None) -> None:
        """Acknowledge dispatch of all three sub-processes.

        Moves every PENDING sub-status to PROCESSING, signalling that the
        external workflows have been initiated.
        """
        at = at or datetime.now(UTC)
        for sub_process in SUB_STATUS_FIELDS:
            if self.sub_status(sub_process).status is SubStatus.PENDING:
                self.transition(sub_process, SubStatus.PROCESSING, at=at)

    def overall_status_before(
        self, sub_process: SubProcess, previous_status: SubStatus
    ) -> OverallStatus:
        """Project the overall status as it was before a single transition."""
        statuses = {
            key: state.status for key, state in self.sub_statuses.items()
        }
        statuses[sub_process] = previous_status
        return project_overall_status(statuses.values())

    def record_outcome(
        self,
        sub_process: SubProcess,
        previous_status: SubStatus,
        at: datetime | None = None,
    ) -> None:
        """Record a terminal event if a transition ended the registration.

        The event is recorded only when the overall status moved from
        PROCESSING to COMPLETE or FAILED, so each registration reaches its
        end state once.

        Args:
            sub_process: The sub-process whose transition was just applied
            previous_status: Its status before that transition
            at: Event time, defaults to the current UTC time
        """
        before = self.overall_status_before(sub_process, previous_status)
        after = self.overall_status
        if before.is_terminal or not after.is_terminal:
            return

        at = at or datetime.now(UTC)
        if after is OverallStatus.COMPLETE:
            self._pending_events.append(
                RegistrationCompleted(
                    registration_id=self.id.value,
                    group_name=self.group_name,
                    occurred_at=at,
                )
            )
        else:
            self._pending_events.append(
                RegistrationFailed(
                    registration_id=self.id.value,
                    group_name=self.group_name,
                    failed_sub_process=sub_process.value,
                    occurred_at=at,
                )
            )

    def collect_events(self) -> list[DomainEvent]:
        """Return and clear pending domain events.

        Returns:
            List of pending domain events
        """
        events = self._pending_events.copy()
        self._pending_events.clear()
        return events
