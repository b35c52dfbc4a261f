"""Registration workflow service.

Admits registration requests against the target app's prefix policy,
reserves the group name, and applies sub-status transitions reported by
the external directory, owner-verification and app-configuration actors.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.errors import is_connection_error
from registration.application.observability import (
    DefaultRegistrationServiceProbe,
    RegistrationServiceProbe,
)
from registration.domain.aggregates import GroupRegistration
from registration.domain.events import DomainEvent
from registration.domain.exceptions import (
    InvalidPrefixError,
    InvalidTransitionError,
    RegistrationError,
)
from registration.domain.value_objects import (
    OverallStatus,
    Owner,
    PrefixPolicy,
    RegistrationId,
    SubProcess,
    SubStatus,
)
from registration.ports.audit import IAuditSink
from registration.ports.exceptions import (
    AppNotFoundError,
    DependencyUnavailableError,
    RegistrationNotFoundError,
    UnknownApplicationError,
)
from registration.ports.prefix_policy import IPrefixPolicyClient
from registration.ports.repositories import IRegistrationRepository


class RegistrationService:
    """Application service for the group registration workflow.

    Every use case runs in its own database transaction. Audit records are
    emitted only after the transaction has committed, and a failing audit
    sink never affects the outcome. The service performs no retries.
    """

    def __init__(
        self,
        session: AsyncSession,
        registration_repository: IRegistrationRepository,
        prefix_policy: IPrefixPolicyClient,
        audit_sink: IAuditSink | None = None,
        probe: RegistrationServiceProbe | None = None,
        dispatch_on_create: bool = True,
    ):
        """Initialize RegistrationService with dependencies.

        Args:
            session: Database session for transaction management
            registration_repository: Repository for registration persistence
            prefix_policy: Client resolving allowed prefixes per target app
            audit_sink: Optional sink for audit records
            probe: Optional domain probe for observability
            dispatch_on_create: Move new registrations to PROCESSING before
                they are first persisted
        """
        self._session = session
        self._repository = registration_repository
        self._prefix_policy = prefix_policy
        self._audit_sink = audit_sink
        self._probe = probe or DefaultRegistrationServiceProbe()
        self._dispatch_on_create = dispatch_on_create

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Run a block in a transaction, mapping connection loss on commit."""
        try:
            async with self._session.begin():
                yield
        except (SQLAlchemyError, OSError) as e:
            if not is_connection_error(e):
                raise
            raise DependencyUnavailableError("Registration store unavailable") from e

    async def register(
        self,
        group_name: str,
        owner_id: str,
        owner_email: str,
        target_app: str,
    ) -> GroupRegistration:
        """Register a new group.

        Steps: validate the request, resolve the target app's prefix policy,
        check the name against it, then atomically reserve the name by
        persisting the registration. Nothing is persisted unless every
        check passes.

        Args:
            group_name: Group name to register
            owner_id: External identity id of the owner
            owner_email: Contact address of the owner
            target_app: Application whose prefix policy governs the name

        Returns:
            The created GroupRegistration

        Raises:
            RegistrationValidationError: If the request is malformed
            UnknownApplicationError: If the app has no prefix policy
            InvalidPrefixError: If the name matches no allowed prefix
            DuplicateGroupNameError: If the name is already registered
            DependencyUnavailableError: If a dependency cannot be reached
        """
        try:
            owner = Owner.create(id=owner_id, email=owner_email)
            registration = GroupRegistration.create(
                group_name=group_name,
                owner=owner,
                target_app=target_app,
            )

            policy = await self._resolve_policy(target_app)
            if not policy.admits(group_name):
                raise InvalidPrefixError(
                    f"Group name '{group_name}' does not start with any prefix "
                    f"allowed for '{target_app}': {sorted(policy.allowed_prefixes)}"
                )

            if self._dispatch_on_create:
                registration.dispatch(at=registration.created_at)

            async with self._transaction():
                await self._repository.add(registration)

        except RegistrationError as e:
            self._probe.registration_rejected(
                group_name=group_name,
                target_app=target_app,
                kind=e.kind,
                error=str(e),
            )
            raise

        self._probe.registration_created(
            registration_id=registration.id.value,
            group_name=group_name,
            target_app=target_app,
            owner_id=owner.id,
        )
        await self._publish(registration.collect_events())
        return registration

    async def _resolve_policy(self, target_app: str) -> PrefixPolicy:
        try:
            prefixes = await self._prefix_policy.resolve_allowed_prefixes(target_app)
        except AppNotFoundError as e:
            raise UnknownApplicationError(
                f"No prefix policy is registered for application '{target_app}'"
            ) from e
        return PrefixPolicy(app_name=target_app, allowed_prefixes=prefixes)

    async def get_registration(
        self, registration_id: RegistrationId
    ) -> GroupRegistration:
        """Get a registration by ID.

        The overall status of the returned aggregate is projected from the
        sub-statuses as they are stored now.

        Raises:
            RegistrationNotFoundError: If the registration does not exist
        """
        async with self._transaction():
            registration = await self._repository.get_by_id(registration_id)

        if registration is None:
            raise RegistrationNotFoundError(
                f"Registration {registration_id.value} not found"
            )
        return registration

    async def find_by_group_name(self, group_name: str) -> GroupRegistration | None:
        """Get the registration holding a group name, if any."""
        async with self._transaction():
            return await self._repository.get_by_name(group_name)

    async def list_registrations(
        self,
        target_app: str | None = None,
        overall_status: OverallStatus | None = None,
        limit: int = 100,
    ) -> list[GroupRegistration]:
        """List registrations, newest first.

        The overall status is never stored, so filtering on it happens after
        projection and may return fewer than ``limit`` results.

        Args:
            target_app: Only return registrations for this app
            overall_status: Only return registrations in this overall status
            limit: Maximum number of registrations to read

        Returns:
            List of GroupRegistration aggregates
        """
        async with self._transaction():
            registrations = await self._repository.list_registrations(
                target_app=target_app, limit=limit
            )

        if overall_status is None:
            return registrations
        return [r for r in registrations if r.overall_status is overall_status]

    async def apply_transition(
        self,
        registration_id: RegistrationId,
        sub_process: SubProcess,
        new_status: SubStatus,
    ) -> GroupRegistration:
        """Apply a sub-status transition reported by an external actor.

        The transition is validated against the aggregate and then written
        with compare-and-set, so of two concurrent reports for the same
        sub-process only the first succeeds. The terminal outcome is judged
        on the record exactly as this write left it, so a registration
        completes or fails once even when its last reports race.

        Args:
            registration_id: The registration being reported on
            sub_process: The reporting sub-process
            new_status: The reported status

        Returns:
            The registration as stored after the transition

        Raises:
            RegistrationNotFoundError: If the registration does not exist
            InvalidTransitionError: If the transition is not allowed or a
                concurrent report for the same sub-process won
            DependencyUnavailableError: If the store cannot be reached
        """
        at = datetime.now(UTC)

        async with self._transaction():
            registration = await self._repository.get_by_id(registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration {registration_id.value} not found"
                )

            previous = registration.transition(sub_process, new_status, at=at)

            current = await self._repository.compare_and_set_sub_status(
                registration_id=registration_id,
                sub_process=sub_process,
                expected=previous.status,
                new_state=registration.sub_status(sub_process),
                updated_at=at,
            )
            if current is None:
                raise InvalidTransitionError(
                    f"Sub-process '{sub_process}' of registration "
                    f"{registration_id.value} changed concurrently; "
                    f"{previous.status} -> {new_status} was not applied"
                )
            current.record_outcome(sub_process, previous.status, at=at)

        self._probe.sub_status_transitioned(
            registration_id=registration_id.value,
            sub_process=sub_process.value,
            old_status=previous.status.value,
            new_status=new_status.value,
            overall_status=current.overall_status.value,
        )
        await self._publish([*registration.collect_events(), *current.collect_events()])
        return current

    async def _publish(self, events: Sequence[DomainEvent]) -> None:
        """Hand events to the audit sink without letting failures escape.

        The configured sink only schedules delivery, so this returns without
        waiting on the Events service.
        """
        if self._audit_sink is None:
            return
        for event in events:
            try:
                await self._audit_sink.emit(event)
            except Exception as e:
                self._probe.audit_emit_failed(
                    event_type=type(event).__name__, error=repr(e)
                )
