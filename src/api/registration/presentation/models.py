"""Pydantic models for registration API requests and responses.

Field names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from registration.domain.aggregates import GroupRegistration
from registration.domain.value_objects import (
    GROUP_NAME_MAX_LENGTH,
    OverallStatus,
    SubProcess,
    SubStatus,
    SubStatusState,
)


class CamelModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OwnerRequest(CamelModel):
    """Owner identity supplied with a registration request."""

    id: str = Field(..., description="External identity id", min_length=1, max_length=255)
    email: str = Field(..., description="Contact address", min_length=3, max_length=320)


class RegisterGroupRequest(CamelModel):
    """Request model for registering a group."""

    group_name: str = Field(
        ...,
        description="Globally unique group name, must start with an allowed prefix",
        min_length=1,
        max_length=GROUP_NAME_MAX_LENGTH,
    )
    owner: OwnerRequest = Field(..., description="Group owner")
    target_app: str = Field(
        ...,
        description="Target application whose prefix policy governs the name",
        min_length=1,
        max_length=255,
    )


class StatusReportRequest(CamelModel):
    """Request model for a sub-process status report."""

    sub_process: SubProcess = Field(..., description="Reporting sub-process")
    status: SubStatus = Field(
        ..., description="Reported status (PROCESSING, COMPLETE or FAILED)"
    )


class OwnerResponse(CamelModel):
    """Response model for the owner identity."""

    id: str
    email: str


class SubStatusResponse(CamelModel):
    """Response model for one sub-process status."""

    status: SubStatus
    transitioned_at: datetime

    @classmethod
    def from_domain(cls, state: SubStatusState) -> SubStatusResponse:
        return cls(status=state.status, transitioned_at=state.transitioned_at)


class SubStatusesResponse(CamelModel):
    """Response model for the three sub-process statuses."""

    directory: SubStatusResponse
    owner: SubStatusResponse
    app_config: SubStatusResponse


class RegistrationResponse(CamelModel):
    """Response model for a group registration."""

    id: str = Field(..., description="Registration ID (ULID format)")
    group_name: str = Field(..., description="Registered group name")
    owner: OwnerResponse
    target_app: str
    sub_statuses: SubStatusesResponse
    overall_status: OverallStatus = Field(
        ..., description="Projected from the sub-statuses at read time"
    )
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, registration: GroupRegistration) -> RegistrationResponse:
        """Convert a GroupRegistration aggregate to an API response.

        Args:
            registration: GroupRegistration domain aggregate

        Returns:
            RegistrationResponse with a freshly projected overall status
        """
        return cls(
            id=registration.id.value,
            group_name=registration.group_name,
            owner=OwnerResponse(
                id=registration.owner.id, email=registration.owner.email
            ),
            target_app=registration.target_app,
            sub_statuses=SubStatusesResponse(
                directory=SubStatusResponse.from_domain(registration.directory_status),
                owner=SubStatusResponse.from_domain(registration.owner_status),
                app_config=SubStatusResponse.from_domain(
                    registration.app_config_status
                ),
            ),
            overall_status=registration.overall_status,
            created_at=registration.created_at,
            updated_at=registration.updated_at,
        )
