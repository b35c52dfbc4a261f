"""Repository protocols (ports) for the registration context.

The store is the authority for group name uniqueness and for the
compare-and-set semantics of sub-status transitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from registration.domain.aggregates import GroupRegistration
from registration.domain.value_objects import (
    RegistrationId,
    SubProcess,
    SubStatus,
    SubStatusState,
)


@runtime_checkable
class IRegistrationRepository(Protocol):
    """Repository for GroupRegistration aggregate persistence."""

    async def add(self, registration: GroupRegistration) -> None:
        """Reserve the group name and persist a new registration.

        The check and the insert are one atomic operation: concurrent adds
        for the same name yield exactly one success.

        Args:
            registration: The new GroupRegistration aggregate

        Raises:
            DuplicateGroupNameError: If the group name is already reserved
            DependencyUnavailableError: If the store cannot be reached
        """
        ...

    async def get_by_id(
        self, registration_id: RegistrationId
    ) -> GroupRegistration | None:
        """Retrieve a registration by its ID.

        Args:
            registration_id: The unique identifier of the registration

        Returns:
            The GroupRegistration aggregate, or None if not found
        """
        ...

    async def get_by_name(self, group_name: str) -> GroupRegistration | None:
        """Retrieve the registration holding a group name.

        Args:
            group_name: The group name

        Returns:
            The GroupRegistration aggregate, or None if the name is free
        """
        ...

    async def list_registrations(
        self,
        target_app: str | None = None,
        limit: int = 100,
    ) -> list[GroupRegistration]:
        """List registrations, newest first.

        Args:
            target_app: Only return registrations for this app
            limit: Maximum number of registrations to return

        Returns:
            List of GroupRegistration aggregates
        """
        ...

    async def compare_and_set_sub_status(
        self,
        registration_id: RegistrationId,
        sub_process: SubProcess,
        expected: SubStatus,
        new_state: SubStatusState,
        updated_at: datetime,
    ) -> GroupRegistration | None:
        """Apply a sub-status transition if the stored status is unchanged.

        Only the named sub-status and updated_at are written. Transitions
        of different sub-processes on the same registration do not
        interfere with each other. Writes to one registration are
        serialized, so the returned record reflects every transition
        applied before this one and none applied after it.

        Args:
            registration_id: The registration to update
            sub_process: The sub-process whose status changes
            expected: The status the caller observed before the transition
            new_state: The state to store
            updated_at: New value of the record's updated_at

        Returns:
            The registration as stored immediately after the write, or None
            if the stored status no longer matched ``expected``

        Raises:
            DependencyUnavailableError: If the store cannot be reached
        """
        ...
