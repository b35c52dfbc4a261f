"""Domain aggregates for the registration context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from registration.domain.aggregates.group_registration import (
    SUB_STATUS_FIELDS,
    GroupRegistration,
)

__all__ = [
    "GroupRegistration",
    "SUB_STATUS_FIELDS",
]
