"""Value objects for the registration domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers, statuses and naming rules.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ulid import ULID

from registration.domain.exceptions import RegistrationValidationError

GROUP_NAME_MAX_LENGTH = 256

# Directory group names: alphanumeric start, then letters, digits, "_", "-", "."
GROUP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class RegistrationId:
    """Identifier for a GroupRegistration aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RegistrationId:
        """Generate a new RegistrationId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> RegistrationId:
        """Create RegistrationId from string value.

        Args:
            value: ULID string

        Returns:
            RegistrationId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid RegistrationId: {value}") from e

        return cls(value=value)


class SubProcess(StrEnum):
    """The three external workflows tracked per registration.

    Values are the names external actors use when reporting status.
    """

    DIRECTORY = "directory"
    OWNER = "owner"
    APP_CONFIG = "appConfig"


class SubStatus(StrEnum):
    """Status of a single sub-process.

    Transitions follow PENDING -> PROCESSING -> {COMPLETE, FAILED}.
    COMPLETE and FAILED are terminal.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Check whether no further transitions are accepted."""
        return self in (SubStatus.COMPLETE, SubStatus.FAILED)

    def can_transition_to(self, target: SubStatus) -> bool:
        """Check whether ``target`` directly follows this status."""
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[SubStatus, frozenset[SubStatus]] = {
    SubStatus.PENDING: frozenset({SubStatus.PROCESSING}),
    SubStatus.PROCESSING: frozenset({SubStatus.COMPLETE, SubStatus.FAILED}),
    SubStatus.COMPLETE: frozenset(),
    SubStatus.FAILED: frozenset(),
}


class OverallStatus(StrEnum):
    """Derived status of a registration as a whole."""

    PROCESSING = "PROCESSING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Check whether the registration has reached an end state."""
        return self is not OverallStatus.PROCESSING


def project_overall_status(statuses: Iterable[SubStatus]) -> OverallStatus:
    """Compute the overall status from the sub-statuses.

    A single FAILED leg fails the registration. Partial success is not an
    end state.
    """
    statuses = list(statuses)
    if any(status is SubStatus.FAILED for status in statuses):
        return OverallStatus.FAILED
    if statuses and all(status is SubStatus.COMPLETE for status in statuses):
        return OverallStatus.COMPLETE
    return OverallStatus.PROCESSING


@dataclass(frozen=True)
class SubStatusState:
    """A sub-process status together with the time it was entered."""

    status: SubStatus
    transitioned_at: datetime


@dataclass(frozen=True)
class Owner:
    """Identity reference of the group owner.

    Attributes:
        id: Opaque external identity id (e.g. an AAD object id)
        email: Contact address
    """

    id: str
    email: str

    @classmethod
    def create(cls, id: str, email: str) -> Owner:
        """Create a validated Owner.

        Raises:
            RegistrationValidationError: If the id is empty or the email
                is not a syntactically valid address
        """
        id = id.strip() if id else ""
        email = email.strip() if email else ""
        if not id:
            raise RegistrationValidationError("Owner id must not be empty")
        if not _EMAIL_PATTERN.match(email):
            raise RegistrationValidationError(
                f"Owner email is not a valid address: {email!r}"
            )
        return cls(id=id, email=email)


def validate_group_name(name: str) -> str:
    """Validate a group name against length and naming rules.

    Args:
        name: Proposed group name

    Returns:
        The name, unchanged

    Raises:
        RegistrationValidationError: If the name is empty, too long or
            contains characters outside the naming convention
    """
    if not name:
        raise RegistrationValidationError("Group name must not be empty")
    if len(name) > GROUP_NAME_MAX_LENGTH:
        raise RegistrationValidationError(
            f"Group name must be at most {GROUP_NAME_MAX_LENGTH} characters"
        )
    if not GROUP_NAME_PATTERN.match(name):
        raise RegistrationValidationError(
            f"Group name {name!r} does not match the naming convention "
            "(letters, digits, '_', '-', '.'; must start with a letter or digit)"
        )
    return name


@dataclass(frozen=True)
class PrefixPolicy:
    """Allowed group-name prefixes registered for a target application."""

    app_name: str
    allowed_prefixes: frozenset[str]

    def admits(self, group_name: str) -> bool:
        """Check whether the name starts with any allowed prefix.

        Matching is case-sensitive. Empty prefixes are ignored so that a
        blank configuration entry cannot admit every name.
        """
        return any(
            prefix and group_name.startswith(prefix)
            for prefix in self.allowed_prefixes
        )
