"""
Exception classes for the fleet admin service.

Every failure of a backend call surfaces as one of these exceptions so that
callers can pick a user-facing message or a fallback without inspecting
httpx internals.
"""

from typing import Any, Dict, Optional


class FleetAdminException(Exception):
    """
    Base exception for all fleet admin service errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ApiRequestError(FleetAdminException):
    """
    Raised when the backend answers with a non-2xx status code.

    Attributes:
        method: HTTP method of the failed request
        url: Full URL of the failed request
        status_code: HTTP status code returned by the backend
        payload: Decoded JSON error body, or the raw text when not JSON
    """

    def __init__(
        self,
        method: str,
        url: str,
        status_code: int,
        payload: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.payload = payload
        message = f"{method} {url} failed with status {status_code}"
        super().__init__(message, details)

    @property
    def user_message(self) -> str:
        """
        Message suitable for showing to the user.

        Prefers the backend's ``detail``, then ``message``, then ``error``
        field before falling back to the generic exception message.
        """
        if isinstance(self.payload, dict):
            for key in ("detail", "message", "error"):
                value = self.payload.get(key)
                if value:
                    return str(value)
        return self.message


class UnauthorizedError(ApiRequestError):
    """Raised when the backend rejects the request with HTTP 401."""

    def __init__(
        self,
        method: str,
        url: str,
        payload: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(method, url, 401, payload, details)


class ServiceUnavailableException(FleetAdminException):
    """
    Raised when the backend cannot be reached at all.

    Used for connection refusals, DNS failures and other transport errors.
    """

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service_name = service_name
        default_message = f"Service '{service_name}' is currently unavailable"
        super().__init__(message or default_message, details)


class RequestTimeoutException(ServiceUnavailableException):
    """Raised when a backend request exceeds the configured timeout."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__("backend-api", message, details)


class ValidationException(FleetAdminException):
    """
    Raised when an argument fails validation before any request is sent.
    """

    def __init__(
        self,
        field_name: str,
        value: Any,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.reason = reason
        message = f"Validation failed for '{field_name}': {reason}"
        super().__init__(message, details)


def error_message(error: BaseException, default: str = "Request failed") -> str:
    """
    Pick the message to display for a failed operation.

    Args:
        error: The exception raised by a client call
        default: Message used when the error carries nothing useful

    Returns:
        Backend-provided detail when available, otherwise the exception text
    """
    if isinstance(error, ApiRequestError):
        return error.user_message
    if isinstance(error, FleetAdminException):
        return error.message or default
    return str(error) or default
