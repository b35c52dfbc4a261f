"""Unit tests for registration HTTP routes.

Tests the presentation layer: request parsing, camelCase responses and the
mapping of error kinds onto status codes and headers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from registration.application.services import RegistrationService, StatusUpdateGateway
from registration.domain.aggregates import GroupRegistration
from registration.domain.exceptions import (
    InvalidPrefixError,
    InvalidTransitionError,
    RegistrationValidationError,
)
from registration.domain.value_objects import (
    OverallStatus,
    Owner,
    RegistrationId,
    SubProcess,
    SubStatus,
)
from registration.ports.exceptions import (
    DependencyUnavailableError,
    DuplicateGroupNameError,
    RegistrationNotFoundError,
    UnknownApplicationError,
)

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=UTC)

REGISTER_BODY = {
    "groupName": "fin-payments",
    "owner": {"id": "aad-123", "email": "alice@example.com"},
    "targetApp": "payments",
}


@pytest.fixture
def mock_registration_service() -> AsyncMock:
    """Mock RegistrationService for testing."""
    return AsyncMock(spec=RegistrationService)


@pytest.fixture
def mock_status_gateway() -> AsyncMock:
    """Mock StatusUpdateGateway for testing."""
    return AsyncMock(spec=StatusUpdateGateway)


@pytest.fixture
def test_client(
    mock_registration_service: AsyncMock,
    mock_status_gateway: AsyncMock,
) -> TestClient:
    """Create TestClient with mocked dependencies."""
    from registration.dependencies import (
        get_registration_service,
        get_status_gateway,
    )
    from registration.presentation import router

    app = FastAPI()

    app.dependency_overrides[get_registration_service] = (
        lambda: mock_registration_service
    )
    app.dependency_overrides[get_status_gateway] = lambda: mock_status_gateway

    app.include_router(router)

    return TestClient(app)


@pytest.fixture
def registration() -> GroupRegistration:
    created = GroupRegistration.create(
        group_name="fin-payments",
        owner=Owner(id="aad-123", email="alice@example.com"),
        target_app="payments",
        now=T0,
    )
    created.dispatch(at=T0)
    created.collect_events()
    return created


class TestRegisterGroup:
    """Tests for POST /registrar/registrations."""

    def test_returns_201_with_camel_case_body(
        self, test_client, mock_registration_service, registration
    ) -> None:
        mock_registration_service.register.return_value = registration

        response = test_client.post("/registrar/registrations", json=REGISTER_BODY)

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["id"] == registration.id.value
        assert body["groupName"] == "fin-payments"
        assert body["targetApp"] == "payments"
        assert body["owner"] == {"id": "aad-123", "email": "alice@example.com"}
        assert body["overallStatus"] == "PROCESSING"
        assert body["subStatuses"]["appConfig"]["status"] == "PROCESSING"
        assert "transitionedAt" in body["subStatuses"]["directory"]
        assert "createdAt" in body and "updatedAt" in body

    def test_passes_request_fields_to_service(
        self, test_client, mock_registration_service, registration
    ) -> None:
        mock_registration_service.register.return_value = registration

        test_client.post("/registrar/registrations", json=REGISTER_BODY)

        mock_registration_service.register.assert_called_once_with(
            group_name="fin-payments",
            owner_id="aad-123",
            owner_email="alice@example.com",
            target_app="payments",
        )

    @pytest.mark.parametrize(
        ("error", "expected_status", "kind"),
        [
            (RegistrationValidationError("bad name"), 422, "ValidationError"),
            (UnknownApplicationError("no app"), 422, "UnknownApplication"),
            (InvalidPrefixError("no prefix"), 422, "InvalidPrefix"),
            (DuplicateGroupNameError("taken"), 409, "DuplicateName"),
        ],
    )
    def test_maps_error_kinds(
        self,
        test_client,
        mock_registration_service,
        error,
        expected_status,
        kind,
    ) -> None:
        mock_registration_service.register.side_effect = error

        response = test_client.post("/registrar/registrations", json=REGISTER_BODY)

        assert response.status_code == expected_status
        assert response.headers["X-Error-Kind"] == kind
        assert response.json()["detail"] == str(error)
        assert "Retry-After" not in response.headers

    def test_dependency_unavailable_is_503_with_retry_after(
        self, test_client, mock_registration_service
    ) -> None:
        mock_registration_service.register.side_effect = DependencyUnavailableError(
            "configuration service unreachable"
        )

        response = test_client.post("/registrar/registrations", json=REGISTER_BODY)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.headers["X-Error-Kind"] == "DependencyUnavailable"
        assert response.headers["Retry-After"] == "5"

    def test_unexpected_error_is_500(
        self, test_client, mock_registration_service
    ) -> None:
        mock_registration_service.register.side_effect = RuntimeError("boom")

        response = test_client.post("/registrar/registrations", json=REGISTER_BODY)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert "boom" not in response.text

    def test_missing_owner_is_422(
        self, test_client, mock_registration_service
    ) -> None:
        response = test_client.post(
            "/registrar/registrations",
            json={"groupName": "fin-payments", "targetApp": "payments"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_registration_service.register.assert_not_called()


class TestListRegistrations:
    """Tests for GET /registrar/registrations."""

    def test_passes_filters_to_service(
        self, test_client, mock_registration_service, registration
    ) -> None:
        mock_registration_service.list_registrations.return_value = [registration]

        response = test_client.get(
            "/registrar/registrations",
            params={"targetApp": "payments", "overallStatus": "FAILED", "limit": 5},
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 1
        mock_registration_service.list_registrations.assert_called_once_with(
            target_app="payments",
            overall_status=OverallStatus.FAILED,
            limit=5,
        )

    def test_defaults(self, test_client, mock_registration_service) -> None:
        mock_registration_service.list_registrations.return_value = []

        response = test_client.get("/registrar/registrations")

        assert response.json() == []
        mock_registration_service.list_registrations.assert_called_once_with(
            target_app=None, overall_status=None, limit=100
        )

    def test_group_name_looks_up_single_registration(
        self, test_client, mock_registration_service, registration
    ) -> None:
        mock_registration_service.find_by_group_name.return_value = registration

        response = test_client.get(
            "/registrar/registrations", params={"groupName": "fin-payments"}
        )

        assert [r["groupName"] for r in response.json()] == ["fin-payments"]
        mock_registration_service.find_by_group_name.assert_called_once_with(
            "fin-payments"
        )
        mock_registration_service.list_registrations.assert_not_called()

    def test_unknown_group_name_is_empty_list(
        self, test_client, mock_registration_service
    ) -> None:
        mock_registration_service.find_by_group_name.return_value = None

        response = test_client.get(
            "/registrar/registrations", params={"groupName": "fin-free"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    @pytest.mark.parametrize(
        "params",
        [
            {"groupName": "fin-payments", "targetApp": "payments"},
            {"groupName": "fin-payments", "overallStatus": "FAILED"},
        ],
    )
    def test_group_name_with_other_filters_is_422(
        self, test_client, mock_registration_service, params
    ) -> None:
        response = test_client.get("/registrar/registrations", params=params)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.headers["X-Error-Kind"] == "ValidationError"
        mock_registration_service.find_by_group_name.assert_not_called()
        mock_registration_service.list_registrations.assert_not_called()

    @pytest.mark.parametrize("params", [{"limit": 0}, {"overallStatus": "DONE"}])
    def test_invalid_query_is_422(self, test_client, params) -> None:
        response = test_client.get("/registrar/registrations", params=params)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestGetRegistration:
    """Tests for GET /registrar/registrations/{id}."""

    def test_returns_registration(
        self, test_client, mock_registration_service, registration
    ) -> None:
        mock_registration_service.get_registration.return_value = registration

        response = test_client.get(
            f"/registrar/registrations/{registration.id.value}"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == registration.id.value
        mock_registration_service.get_registration.assert_called_once_with(
            registration.id
        )

    def test_malformed_id_is_404(self, test_client, mock_registration_service) -> None:
        response = test_client.get("/registrar/registrations/not-a-ulid")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.headers["X-Error-Kind"] == "RegistrationNotFound"
        mock_registration_service.get_registration.assert_not_called()

    def test_unknown_id_is_404(self, test_client, mock_registration_service) -> None:
        mock_registration_service.get_registration.side_effect = (
            RegistrationNotFoundError("not found")
        )

        response = test_client.get(
            f"/registrar/registrations/{RegistrationId.generate().value}"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.headers["X-Error-Kind"] == "RegistrationNotFound"


class TestReportStatus:
    """Tests for POST /registrar/registrations/{id}/status-reports."""

    def test_applies_report(
        self, test_client, mock_status_gateway, registration
    ) -> None:
        registration.transition(SubProcess.APP_CONFIG, SubStatus.COMPLETE, at=T0)
        mock_status_gateway.report_status.return_value = registration

        response = test_client.post(
            f"/registrar/registrations/{registration.id.value}/status-reports",
            json={"subProcess": "appConfig", "status": "COMPLETE"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["subStatuses"]["appConfig"]["status"] == "COMPLETE"
        mock_status_gateway.report_status.assert_called_once_with(
            registration_id=registration.id.value,
            sub_process="appConfig",
            status="COMPLETE",
        )

    def test_terminal_report_is_409(self, test_client, mock_status_gateway) -> None:
        mock_status_gateway.report_status.side_effect = InvalidTransitionError(
            "owner is already COMPLETE"
        )

        response = test_client.post(
            f"/registrar/registrations/{RegistrationId.generate().value}/status-reports",
            json={"subProcess": "owner", "status": "FAILED"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.headers["X-Error-Kind"] == "InvalidTransition"
        assert response.json()["detail"] == "owner is already COMPLETE"

    def test_unknown_registration_is_404(
        self, test_client, mock_status_gateway
    ) -> None:
        mock_status_gateway.report_status.side_effect = RegistrationNotFoundError(
            "not found"
        )

        response = test_client.post(
            "/registrar/registrations/not-a-ulid/status-reports",
            json={"subProcess": "directory", "status": "PROCESSING"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_sub_process_is_422(
        self, test_client, mock_status_gateway
    ) -> None:
        response = test_client.post(
            f"/registrar/registrations/{RegistrationId.generate().value}/status-reports",
            json={"subProcess": "billing", "status": "COMPLETE"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_status_gateway.report_status.assert_not_called()
