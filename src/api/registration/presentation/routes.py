"""HTTP routes for group registrations and status reports."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from registration.application.services import (
    RegistrationService,
    StatusUpdateGateway,
)
from registration.dependencies import get_registration_service, get_status_gateway
from registration.domain.exceptions import (
    RegistrationError,
    RegistrationValidationError,
)
from registration.domain.value_objects import OverallStatus, RegistrationId
from registration.presentation.models import (
    RegisterGroupRequest,
    RegistrationResponse,
    StatusReportRequest,
)

router = APIRouter(
    prefix="/registrations",
    tags=["registrations"],
)

# HTTP status per error kind
_STATUS_BY_KIND: dict[str, int] = {
    "ValidationError": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "UnknownApplication": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "InvalidPrefix": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "DuplicateName": status.HTTP_409_CONFLICT,
    "RegistrationNotFound": status.HTTP_404_NOT_FOUND,
    "InvalidTransition": status.HTTP_409_CONFLICT,
    "DependencyUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}

RETRY_AFTER_SECONDS = "5"


def _to_http_exception(error: RegistrationError) -> HTTPException:
    """Map a registration error to an HTTPException.

    The error kind travels in the X-Error-Kind header so that kinds sharing
    a status code stay distinguishable. Retryable errors carry Retry-After.
    """
    headers = {"X-Error-Kind": error.kind}
    if error.retryable:
        headers["Retry-After"] = RETRY_AFTER_SECONDS
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(
            error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail=str(error),
        headers=headers,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Register group",
    description="Validate a group name against the target app's prefix policy "
    "and reserve it.",
    responses={
        201: {"description": "Registration created"},
        409: {"description": "Group name already registered"},
        422: {"description": "Invalid request, unknown application or invalid prefix"},
        503: {"description": "Configuration service or store unavailable"},
    },
)
async def register_group(
    request: RegisterGroupRequest,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
) -> RegistrationResponse:
    """Register a group.

    Args:
        request: Registration request
        service: Registration workflow service

    Returns:
        RegistrationResponse with the created registration

    Raises:
        HTTPException: 409 if the name is taken, 422 for invalid requests,
            unknown apps or names outside the prefix policy, 503 if a
            dependency is unavailable, 500 for unexpected errors
    """
    try:
        registration = await service.register(
            group_name=request.group_name,
            owner_id=request.owner.id,
            owner_email=request.owner.email,
            target_app=request.target_app,
        )
        return RegistrationResponse.from_domain(registration)

    except RegistrationError as e:
        raise _to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register group",
        )


@router.get(
    "",
    response_model=list[RegistrationResponse],
    summary="List registrations",
    description="List registrations newest first, optionally filtered.",
)
async def list_registrations(
    service: Annotated[RegistrationService, Depends(get_registration_service)],
    group_name: Annotated[str | None, Query(alias="groupName")] = None,
    target_app: Annotated[str | None, Query(alias="targetApp")] = None,
    overall_status: Annotated[OverallStatus | None, Query(alias="overallStatus")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[RegistrationResponse]:
    """List registrations, or look one up by its unique group name.

    ``groupName`` selects at most one registration and cannot be combined
    with the other filters.
    """
    try:
        if group_name is not None:
            if target_app is not None or overall_status is not None:
                raise RegistrationValidationError(
                    "groupName cannot be combined with targetApp or overallStatus"
                )
            found = await service.find_by_group_name(group_name)
            registrations = [found] if found is not None else []
        else:
            registrations = await service.list_registrations(
                target_app=target_app,
                overall_status=overall_status,
                limit=limit,
            )
        return [RegistrationResponse.from_domain(r) for r in registrations]

    except RegistrationError as e:
        raise _to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list registrations",
        )


@router.get("/{registration_id}")
async def get_registration(
    registration_id: str,
    service: Annotated[RegistrationService, Depends(get_registration_service)],
) -> RegistrationResponse:
    """Get a registration by ID with a freshly computed overall status.

    Raises:
        HTTPException: 404 if the ID is malformed or unknown
        HTTPException: 500 for unexpected errors
    """
    try:
        registration_id_obj = RegistrationId.from_string(registration_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registration not found",
            headers={"X-Error-Kind": "RegistrationNotFound"},
        )

    try:
        registration = await service.get_registration(registration_id_obj)
        return RegistrationResponse.from_domain(registration)

    except RegistrationError as e:
        raise _to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve registration",
        )


@router.post(
    "/{registration_id}/status-reports",
    summary="Report sub-process status",
    description="Report the status of the directory, owner or appConfig "
    "sub-process of a registration.",
    responses={
        200: {"description": "Status applied"},
        404: {"description": "Registration not found"},
        409: {"description": "Transition not allowed"},
        503: {"description": "Store unavailable"},
    },
)
async def report_status(
    registration_id: str,
    request: StatusReportRequest,
    gateway: Annotated[StatusUpdateGateway, Depends(get_status_gateway)],
) -> RegistrationResponse:
    """Apply a status report and return the updated registration."""
    try:
        registration = await gateway.report_status(
            registration_id=registration_id,
            sub_process=request.sub_process.value,
            status=request.status.value,
        )
        return RegistrationResponse.from_domain(registration)

    except RegistrationError as e:
        raise _to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to apply status report",
        )
