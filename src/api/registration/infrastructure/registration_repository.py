"""PostgreSQL implementation of IRegistrationRepository.

Name reservation relies on the unique index over group_name: the insert
either succeeds or fails with an IntegrityError, with no read-then-write
window in between. Sub-status transitions are conditional UPDATEs that
only match when the stored status is the one the caller observed.

The repository does not manage transactions; the application service
wraps each use case in ``session.begin()``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.errors import is_connection_error
from registration.domain.aggregates import GroupRegistration
from registration.domain.value_objects import (
    Owner,
    RegistrationId,
    SubProcess,
    SubStatus,
    SubStatusState,
)
from registration.infrastructure.models import GroupRegistrationModel
from registration.infrastructure.observability import (
    DefaultRegistrationRepositoryProbe,
    RegistrationRepositoryProbe,
)
from registration.ports.exceptions import (
    DependencyUnavailableError,
    DuplicateGroupNameError,
)
from registration.ports.repositories import IRegistrationRepository

GROUP_NAME_INDEX = "ix_group_registrations_group_name"

# (status column, transitioned_at column) per sub-process
_STATUS_COLUMNS: dict[SubProcess, tuple[str, str]] = {
    SubProcess.DIRECTORY: ("directory_status", "directory_transitioned_at"),
    SubProcess.OWNER: ("owner_status", "owner_transitioned_at"),
    SubProcess.APP_CONFIG: ("app_config_status", "app_config_transitioned_at"),
}


class RegistrationRepository(IRegistrationRepository):
    """Repository managing PostgreSQL storage for GroupRegistration aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: RegistrationRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultRegistrationRepositoryProbe()

    @asynccontextmanager
    async def _unavailable_on_connection_errors(
        self, operation: str
    ) -> AsyncIterator[None]:
        """Translate connectivity failures into DependencyUnavailableError."""
        try:
            yield
        except (SQLAlchemyError, OSError) as e:
            if not is_connection_error(e):
                raise
            self._probe.store_unavailable(operation, str(e))
            raise DependencyUnavailableError(
                f"Registration store unavailable during {operation}"
            ) from e

    async def add(self, registration: GroupRegistration) -> None:
        """Reserve the group name by inserting the registration row.

        Args:
            registration: The new GroupRegistration aggregate

        Raises:
            DuplicateGroupNameError: If the group name is already reserved
            DependencyUnavailableError: If the database cannot be reached
        """
        model = GroupRegistrationModel(
            id=registration.id.value,
            group_name=registration.group_name,
            owner_id=registration.owner.id,
            owner_email=registration.owner.email,
            target_app=registration.target_app,
            created_at=registration.created_at,
            updated_at=registration.updated_at,
        )
        for sub_process, (status_attr, at_attr) in _STATUS_COLUMNS.items():
            state = registration.sub_status(sub_process)
            setattr(model, status_attr, state.status.value)
            setattr(model, at_attr, state.transitioned_at)

        try:
            async with self._unavailable_on_connection_errors("add"):
                self._session.add(model)
                # Flush so the unique index is checked inside this call
                await self._session.flush()
        except IntegrityError as e:
            if GROUP_NAME_INDEX in str(e):
                self._probe.duplicate_group_name(registration.group_name)
                raise DuplicateGroupNameError(
                    f"Group name '{registration.group_name}' is already registered"
                ) from e
            raise

        self._probe.registration_saved(registration.id.value, registration.group_name)

    async def get_by_id(
        self, registration_id: RegistrationId
    ) -> GroupRegistration | None:
        """Fetch a registration from PostgreSQL.

        Always reloads the row so that a read after a compare-and-set in the
        same session sees the latest committed sub-statuses.

        Args:
            registration_id: The unique identifier of the registration

        Returns:
            The GroupRegistration aggregate, or None if not found
        """
        stmt = (
            select(GroupRegistrationModel)
            .where(GroupRegistrationModel.id == registration_id.value)
            .execution_options(populate_existing=True)
        )
        async with self._unavailable_on_connection_errors("get_by_id"):
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

        if model is None:
            self._probe.registration_not_found(registration_id.value)
            return None

        self._probe.registration_retrieved(model.id)
        return self._to_domain(model)

    async def get_by_name(self, group_name: str) -> GroupRegistration | None:
        """Fetch the registration holding a group name.

        Args:
            group_name: The group name

        Returns:
            The GroupRegistration aggregate, or None if the name is free
        """
        stmt = (
            select(GroupRegistrationModel)
            .where(GroupRegistrationModel.group_name == group_name)
            .execution_options(populate_existing=True)
        )
        async with self._unavailable_on_connection_errors("get_by_name"):
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

        if model is None:
            return None

        self._probe.registration_retrieved(model.id)
        return self._to_domain(model)

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
        stmt = select(GroupRegistrationModel).order_by(
            GroupRegistrationModel.created_at.desc(),
            GroupRegistrationModel.id.desc(),
        )
        if target_app is not None:
            stmt = stmt.where(GroupRegistrationModel.target_app == target_app)
        stmt = stmt.limit(limit)

        async with self._unavailable_on_connection_errors("list_registrations"):
            result = await self._session.execute(stmt)
            models = result.scalars().all()

        return [self._to_domain(model) for model in models]

    async def compare_and_set_sub_status(
        self,
        registration_id: RegistrationId,
        sub_process: SubProcess,
        expected: SubStatus,
        new_state: SubStatusState,
        updated_at: datetime,
    ) -> GroupRegistration | None:
        """Conditionally write one sub-status.

        The UPDATE only matches while the stored status equals ``expected``.
        PostgreSQL re-evaluates the condition after waiting on a concurrent
        writer's row lock, so of two racing reports for the same sub-process
        only the first one matches. RETURNING yields the row as this UPDATE
        left it, including transitions committed before it.

        Returns:
            The updated registration, or None if no row matched
        """
        status_attr, at_attr = _STATUS_COLUMNS[sub_process]
        status_column = getattr(GroupRegistrationModel, status_attr)

        stmt = (
            update(GroupRegistrationModel)
            .where(
                GroupRegistrationModel.id == registration_id.value,
                status_column == expected.value,
            )
            .values(
                {
                    status_attr: new_state.status.value,
                    at_attr: new_state.transitioned_at,
                    # updated_at never moves backwards under concurrent reports
                    "updated_at": func.greatest(
                        GroupRegistrationModel.updated_at, updated_at
                    ),
                }
            )
            .returning(GroupRegistrationModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async with self._unavailable_on_connection_errors("compare_and_set_sub_status"):
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()

        if model is None:
            self._probe.sub_status_conflict(
                registration_id.value, sub_process.value, expected.value
            )
            return None

        self._probe.sub_status_updated(
            registration_id.value, sub_process.value, new_state.status.value
        )
        return self._to_domain(model)

    def _to_domain(self, model: GroupRegistrationModel) -> GroupRegistration:
        """Reconstitute a GroupRegistration aggregate from its row."""
        states = {
            sub_process: SubStatusState(
                status=SubStatus(getattr(model, status_attr)),
                transitioned_at=getattr(model, at_attr),
            )
            for sub_process, (status_attr, at_attr) in _STATUS_COLUMNS.items()
        }
        return GroupRegistration(
            id=RegistrationId(value=model.id),
            group_name=model.group_name,
            owner=Owner(id=model.owner_id, email=model.owner_email),
            target_app=model.target_app,
            directory_status=states[SubProcess.DIRECTORY],
            owner_status=states[SubProcess.OWNER],
            app_config_status=states[SubProcess.APP_CONFIG],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
