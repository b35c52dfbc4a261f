"""Fixtures for registration unit tests.

InMemoryRegistrationRepository keeps the store semantics the service relies
on (unique names, compare-and-set on one sub-status) so that concurrency
can be exercised without a database.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from registration.domain.aggregates import GroupRegistration
from registration.domain.value_objects import (
    RegistrationId,
    SubProcess,
    SubStatus,
    SubStatusState,
)
from registration.domain.aggregates.group_registration import SUB_STATUS_FIELDS
from registration.ports.exceptions import AppNotFoundError, DuplicateGroupNameError


class InMemoryRegistrationRepository:
    """IRegistrationRepository backed by a dict, safe under asyncio concurrency."""

    def __init__(self) -> None:
        self._rows: dict[str, GroupRegistration] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _copy(registration: GroupRegistration) -> GroupRegistration:
        stored = copy.copy(registration)
        stored._pending_events = []
        return stored

    async def add(self, registration: GroupRegistration) -> None:
        async with self._lock:
            # Yield so that concurrent callers interleave
            await asyncio.sleep(0)
            if any(
                r.group_name == registration.group_name for r in self._rows.values()
            ):
                raise DuplicateGroupNameError(
                    f"Group name '{registration.group_name}' is already registered"
                )
            self._rows[registration.id.value] = self._copy(registration)

    async def get_by_id(
        self, registration_id: RegistrationId
    ) -> GroupRegistration | None:
        await asyncio.sleep(0)
        row = self._rows.get(registration_id.value)
        return self._copy(row) if row is not None else None

    async def get_by_name(self, group_name: str) -> GroupRegistration | None:
        for row in self._rows.values():
            if row.group_name == group_name:
                return self._copy(row)
        return None

    async def list_registrations(
        self, target_app: str | None = None, limit: int = 100
    ) -> list[GroupRegistration]:
        rows = [
            self._copy(r)
            for r in self._rows.values()
            if target_app is None or r.target_app == target_app
        ]
        rows.sort(key=lambda r: (r.created_at, r.id.value), reverse=True)
        return rows[:limit]

    async def compare_and_set_sub_status(
        self,
        registration_id: RegistrationId,
        sub_process: SubProcess,
        expected: SubStatus,
        new_state: SubStatusState,
        updated_at: datetime,
    ) -> GroupRegistration | None:
        async with self._lock:
            await asyncio.sleep(0)
            row = self._rows.get(registration_id.value)
            if row is None or row.sub_status(sub_process).status is not expected:
                return None
            setattr(row, SUB_STATUS_FIELDS[sub_process], new_state)
            row.updated_at = max(row.updated_at, updated_at)
            return self._copy(row)


class StaticPrefixPolicyClient:
    """IPrefixPolicyClient answering from a fixed mapping."""

    def __init__(self, policies: dict[str, set[str]]):
        self._policies = policies

    async def resolve_allowed_prefixes(self, app_name: str) -> frozenset[str]:
        if app_name not in self._policies:
            raise AppNotFoundError(f"No configuration registered for app '{app_name}'")
        return frozenset(self._policies[app_name])


class RecordingAuditSink:
    """IAuditSink that keeps every emitted event."""

    def __init__(self) -> None:
        self.events: list = []

    async def emit(self, event) -> None:
        self.events.append(event)

    def of_type(self, name: str) -> list:
        return [e for e in self.events if type(e).__name__ == name]


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    return session


@pytest.fixture
def in_memory_repository() -> InMemoryRegistrationRepository:
    return InMemoryRegistrationRepository()


@pytest.fixture
def prefix_policy() -> StaticPrefixPolicyClient:
    return StaticPrefixPolicyClient(
        {
            "payments": {"fin-", "pay-"},
            "hr": {"hr-"},
            "unity_catalog": {"az_adb_", "az_databricks_"},
        }
    )


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()
