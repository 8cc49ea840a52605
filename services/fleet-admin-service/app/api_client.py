"""
HTTP client module for the fleet management REST API.

Provides the shared async client every domain operation goes through. It
resolves paths under the versioned base URL, attaches the stored bearer token,
decodes JSON bodies and turns transport and HTTP failures into the exceptions
defined in ``app.exceptions``. There is no retry, caching or
circuit breaking: each call is a single request/response.
"""

import re
import time
from typing import Any, Dict, Mapping, Optional

import httpx

from .config import settings
from .exceptions import (
    ApiRequestError,
    FleetAdminException,
    RequestTimeoutException,
    ServiceUnavailableException,
    UnauthorizedError,
)
from .logging_config import get_logger, get_request_id
from .metrics import track_backend_error, track_backend_request
from .token_store import TokenStore

logger = get_logger(__name__)

# Requests to these endpoints never carry a bearer token
AUTH_EXEMPT_PATHS = ("/auth/login", "/auth/register")

_ID_SEGMENT = re.compile(r"^(\d+|[0-9a-fA-F-]{32,36})$")


def unwrap_results(data: Any) -> Any:
    """
    Unwrap a paginated list response.

    Args:
        data: Decoded JSON body

    Returns:
        ``data["results"]`` when the body is a paginated envelope, else ``data``
    """
    if isinstance(data, dict) and "results" in data:
        return data["results"]
    return data


def clean_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop query parameters whose value is None."""
    if not params:
        return None
    return {key: value for key, value in params.items() if value is not None}


def endpoint_label(path: str) -> str:
    """
    Collapse ids in a request path so it can be used as a metrics label.

    ``/vehicles/12/status_history/`` becomes ``/vehicles/{id}/status_history/``.
    """
    segments = path.split("?", 1)[0].strip("/").split("/")
    normalized = ["{id}" if _ID_SEGMENT.match(segment) else segment for segment in segments]
    return "/" + "/".join(normalized) + "/"


class ApiClient:
    """
    Client for the fleet management backend.

    Uses a persistent ``httpx.AsyncClient`` with connection pooling that is
    created on first use. Authentication is handled by request/response event
    hooks so that every verb behaves the same way.

    Attributes:
        base_url: Versioned base URL, always ending with ``/``
        timeout: Request timeout in seconds
        token_store: Source of the bearer token
        clear_auth_on_unauthorized: Clear stored auth keys on HTTP 401
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clear_auth_on_unauthorized: Optional[bool] = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the backend (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            token_store: Token storage (defaults to the configured file)
            transport: Custom httpx transport, mainly for tests
            clear_auth_on_unauthorized: Override the 401 cleanup setting
        """
        self.base_url = (base_url or settings.API_URL).rstrip("/") + "/"
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.token_store = token_store or TokenStore()
        self.clear_auth_on_unauthorized = (
            settings.CLEAR_AUTH_ON_UNAUTHORIZED
            if clear_auth_on_unauthorized is None
            else clear_auth_on_unauthorized
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized ApiClient: base_url={self.base_url}, timeout={self.timeout}s"
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the persistent HTTP client.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "User-Agent": "FleetAdmin/1.0",
                },
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
                event_hooks={
                    "request": [self._attach_auth],
                    "response": [self._handle_unauthorized],
                },
                transport=self._transport,
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def close(self) -> None:
        """
        Close the HTTP client and release connections.

        Should be called during application shutdown.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    async def _attach_auth(self, request: httpx.Request) -> None:
        """Request hook: add the bearer token unless this is a login/register call."""
        url = str(request.url)
        if any(marker in url for marker in AUTH_EXEMPT_PATHS):
            return

        token = self.token_store.get_token()
        if token:
            request.headers["Authorization"] = f"Bearer {token.strip()}"

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        """
        Response hook: report HTTP 401.

        No redirect happens here and the response still fails the call. Stored
        credentials are only cleared when ``clear_auth_on_unauthorized`` is set.
        """
        if response.status_code != 401:
            return

        logger.error(
            "Unauthorized access (401)",
            extra={
                "extra_fields": {
                    "url": str(response.request.url),
                    "method": response.request.method,
                    "clear_auth": self.clear_auth_on_unauthorized,
                }
            },
        )
        if self.clear_auth_on_unauthorized:
            self.token_store.clear_auth()

    def _get_request_headers(self) -> Dict[str, str]:
        """Per-request headers, currently just the tracing request ID."""
        headers: Dict[str, str] = {}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        return headers

    @staticmethod
    def _error_payload(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text[:500]

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        action: Optional[str] = None,
        raw: bool = False,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Send one request to the backend and decode the response.

        Args:
            method: HTTP verb
            path: Resource path relative to the base URL
            params: Query parameters; None values are dropped
            json: JSON request body
            action: Description used in the failure log ("fetching vehicles")
            raw: Return the response bytes instead of decoded JSON
            timeout: Per-request timeout override in seconds

        Returns:
            Decoded JSON body, None for an empty body, or bytes when ``raw``

        Raises:
            UnauthorizedError: Backend answered 401
            ApiRequestError: Backend answered any other non-2xx status
            RequestTimeoutException: Request timed out
            ServiceUnavailableException: Backend could not be reached
        """
        method = method.upper()
        action = action or f"calling {method} {path}"
        endpoint = endpoint_label(path)
        request_timeout = timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT
        start_time = time.perf_counter()

        client = await self._get_client()

        try:
            response = await client.request(
                method,
                path.lstrip("/"),
                params=clean_params(params),
                json=json,
                headers=self._get_request_headers(),
                timeout=request_timeout,
            )
        except httpx.TimeoutException as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_backend_error(endpoint, "timeout")
            logger.error(
                f"Error {action}",
                extra={
                    "extra_fields": {
                        "method": method,
                        "endpoint": endpoint,
                        "error_type": "timeout",
                        "timeout": timeout or self.timeout,
                        "duration_ms": duration_ms,
                    }
                },
            )
            raise RequestTimeoutException(
                f"{self.base_url}{path.lstrip('/')}", timeout or self.timeout
            ) from error
        except httpx.RequestError as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_backend_error(endpoint, "connection_error")
            logger.error(
                f"Error {action}",
                extra={
                    "extra_fields": {
                        "method": method,
                        "endpoint": endpoint,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                        "backend_url": self.base_url,
                        "duration_ms": duration_ms,
                    }
                },
            )
            raise ServiceUnavailableException(
                "backend-api",
                message=f"Cannot connect to backend API at {self.base_url}",
                details={"error_type": type(error).__name__, "error": str(error)},
            ) from error

        duration = time.perf_counter() - start_time
        track_backend_request(method, endpoint, response.status_code, duration)

        if response.is_error:
            payload = self._error_payload(response)
            track_backend_error(endpoint, "http_error")
            logger.error(
                f"Error {action}",
                extra={
                    "extra_fields": {
                        "method": method,
                        "endpoint": endpoint,
                        "status_code": response.status_code,
                        "response_body": response.text[:500],
                        "duration_ms": duration * 1000,
                    }
                },
            )
            url = str(response.request.url)
            if response.status_code == 401:
                raise UnauthorizedError(method, url, payload)
            raise ApiRequestError(method, url, response.status_code, payload)

        logger.debug(
            "Backend request completed",
            extra={
                "extra_fields": {
                    "method": method,
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "duration_ms": duration * 1000,
                    "response_size": len(response.content),
                }
            },
        )

        if raw:
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            logger.error(
                f"Error {action}",
                extra={
                    "extra_fields": {
                        "endpoint": endpoint,
                        "error_type": "invalid_json",
                        "response_body": response.text[:200],
                    }
                },
            )
            raise FleetAdminException(
                f"Backend returned invalid JSON for {method} {endpoint}",
                details={"status_code": response.status_code},
            ) from error

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def get_list(
        self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> Any:
        """GET a list endpoint, unwrapping ``results`` when the response is paginated."""
        return unwrap_results(await self.get(path, params=params, **kwargs))

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def health_check(self) -> bool:
        """
        Check if the backend is reachable and healthy.

        Returns:
            True if the health endpoint answered 200, False otherwise
        """
        try:
            client = await self._get_client()
            response = await client.get(
                settings.API_HEALTH_PATH.lstrip("/"),
                headers=self._get_request_headers(),
                timeout=settings.HEALTH_CHECK_TIMEOUT,
            )
            is_healthy = response.status_code == 200

            if is_healthy:
                logger.debug(
                    "Backend health check passed",
                    extra={"extra_fields": {"backend_url": self.base_url}},
                )
            else:
                logger.warning(
                    "Backend health check failed",
                    extra={
                        "extra_fields": {
                            "backend_url": self.base_url,
                            "status_code": response.status_code,
                            "response_body": response.text[:200],
                        }
                    },
                )

            return is_healthy

        except Exception as error:
            logger.warning(
                "Backend health check failed with exception",
                extra={
                    "extra_fields": {
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return False


# Singleton instance for application-wide use
api_client = ApiClient()
