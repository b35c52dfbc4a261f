"""Registration domain events.

Events are recorded by the GroupRegistration aggregate and forwarded to the
audit sink once the state change they describe has been committed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class RegistrationCreated:
    """Event raised when a registration is admitted and persisted.

    Attributes:
        registration_id: The ULID of the registration
        group_name: The reserved group name
        owner_id: External identity id of the owner
        target_app: Application whose prefix policy admitted the name
        occurred_at: When the event occurred (UTC)
    """

    registration_id: str
    group_name: str
    owner_id: str
    target_app: str
    occurred_at: datetime


@dataclass(frozen=True)
class SubStatusChanged:
    """Event raised when one sub-process moves to a new status."""

    registration_id: str
    sub_process: str
    old_status: str
    new_status: str
    occurred_at: datetime


@dataclass(frozen=True)
class RegistrationCompleted:
    """Event raised when all three sub-processes have completed."""

    registration_id: str
    group_name: str
    occurred_at: datetime


@dataclass(frozen=True)
class RegistrationFailed:
    """Event raised when the first sub-process fails.

    Attributes:
        registration_id: The ULID of the registration
        group_name: The group name
        failed_sub_process: The sub-process whose failure ended the registration
        occurred_at: When the event occurred (UTC)
    """

    registration_id: str
    group_name: str
    failed_sub_process: str
    occurred_at: datetime


DomainEvent = Union[
    RegistrationCreated,
    SubStatusChanged,
    RegistrationCompleted,
    RegistrationFailed,
]

__all__ = [
    "DomainEvent",
    "RegistrationCompleted",
    "RegistrationCreated",
    "RegistrationFailed",
    "SubStatusChanged",
]
