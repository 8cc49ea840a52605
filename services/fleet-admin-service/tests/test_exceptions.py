"""
Tests for custom exception classes.

Covers initialization, message formatting, the user-facing message picked
from backend error bodies, and the exception hierarchy.
"""

import pytest

from app.exceptions import (
    ApiRequestError,
    FleetAdminException,
    RequestTimeoutException,
    ServiceUnavailableException,
    UnauthorizedError,
    ValidationException,
    error_message,
)


def test_fleet_admin_exception_basic() -> None:
    exc = FleetAdminException("Test error")

    assert exc.message == "Test error"
    assert exc.details == {}
    assert str(exc) == "Test error"


def test_fleet_admin_exception_with_details() -> None:
    details = {"code": "ERR001", "context": "test_context"}
    exc = FleetAdminException("Test error", details=details)

    assert exc.details == details


def test_api_request_error_fields() -> None:
    exc = ApiRequestError("GET", "https://api.test/api/v1/vehicles/", 404, {"detail": "Not found."})

    assert exc.method == "GET"
    assert exc.status_code == 404
    assert exc.message == "GET https://api.test/api/v1/vehicles/ failed with status 404"


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"detail": "Not found.", "message": "ignored"}, "Not found."),
        ({"message": "Vehicle is hired"}, "Vehicle is hired"),
        ({"error": "Invalid credentials"}, "Invalid credentials"),
        ({"detail": ""}, "POST https://api.test/x/ failed with status 400"),
        ("<html>Bad gateway</html>", "POST https://api.test/x/ failed with status 400"),
    ],
)
def test_api_request_error_user_message(payload, expected: str) -> None:
    exc = ApiRequestError("POST", "https://api.test/x/", 400, payload)

    assert exc.user_message == expected


def test_unauthorized_error_is_401() -> None:
    exc = UnauthorizedError("GET", "https://api.test/x/", {"detail": "Token expired"})

    assert exc.status_code == 401
    assert isinstance(exc, ApiRequestError)
    assert exc.user_message == "Token expired"


def test_service_unavailable_exception_default_message() -> None:
    exc = ServiceUnavailableException("backend-api")

    assert exc.service_name == "backend-api"
    assert exc.message == "Service 'backend-api' is currently unavailable"


def test_service_unavailable_exception_custom_message() -> None:
    exc = ServiceUnavailableException("backend-api", message="Backend is down for maintenance")

    assert exc.message == "Backend is down for maintenance"


def test_request_timeout_exception() -> None:
    exc = RequestTimeoutException("https://api.test/api/v1/vehicles/", 10.0)

    assert exc.url == "https://api.test/api/v1/vehicles/"
    assert exc.timeout_seconds == 10.0
    assert exc.service_name == "backend-api"
    assert "timed out after 10.0s" in exc.message


def test_validation_exception() -> None:
    exc = ValidationException(field_name="vehicle_id", value="", reason="An identifier is required")

    assert exc.field_name == "vehicle_id"
    assert exc.value == ""
    assert "vehicle_id" in exc.message
    assert "An identifier is required" in exc.message


def test_error_message_prefers_backend_detail() -> None:
    exc = ApiRequestError("GET", "https://api.test/x/", 400, {"detail": "Bad filter"})

    assert error_message(exc) == "Bad filter"


def test_error_message_for_other_errors() -> None:
    assert error_message(ServiceUnavailableException("backend-api", message="Down")) == "Down"
    assert error_message(ValueError("")) == "Request failed"
    assert error_message(ValueError(""), default="Could not load") == "Could not load"


def test_exception_inheritance() -> None:
    for exc in (
        ApiRequestError("GET", "u", 500),
        UnauthorizedError("GET", "u"),
        ServiceUnavailableException("backend-api"),
        RequestTimeoutException("u", 1.0),
        ValidationException("field", "value", "reason"),
    ):
        assert isinstance(exc, FleetAdminException)

    assert isinstance(RequestTimeoutException("u", 1.0), ServiceUnavailableException)
