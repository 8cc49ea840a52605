"""
Fleet Admin Service Tests - API Client Tests.

Tests for ApiClient: bearer token handling, response decoding, 401 handling
and mapping of transport failures onto service exceptions.
"""

from typing import Any, Callable
from unittest.mock import patch

import httpx
import pytest

from app.api_client import ApiClient, clean_params, endpoint_label, unwrap_results
from app.exceptions import (
    ApiRequestError,
    FleetAdminException,
    RequestTimeoutException,
    ServiceUnavailableException,
    UnauthorizedError,
)
from app.logging_config import clear_request_id, set_request_id
from app.token_store import TokenStore


def test_unwrap_results_paginated() -> None:
    assert unwrap_results({"count": 1, "results": [{"id": 1}]}) == [{"id": 1}]


def test_unwrap_results_plain_body() -> None:
    assert unwrap_results([{"id": 1}]) == [{"id": 1}]
    assert unwrap_results({"total": 3}) == {"total": 3}


def test_clean_params_drops_none() -> None:
    assert clean_params({"page": 1, "search": None}) == {"page": 1}
    assert clean_params(None) is None


def test_endpoint_label_collapses_ids() -> None:
    assert endpoint_label("vehicles/12/status_history/") == "/vehicles/{id}/status_history/"
    assert endpoint_label("/dashboard/stats/") == "/dashboard/stats/"


def test_base_url_gets_trailing_slash(token_store: TokenStore) -> None:
    client = ApiClient(base_url="https://api.test/api/v1", token_store=token_store)

    assert client.base_url == "https://api.test/api/v1/"


@pytest.mark.asyncio
async def test_get_resolves_under_base_path(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "vehicles/statistics/", json={"total": 4})

    data = await api.get("/vehicles/statistics/")

    assert data == {"total": 4}
    assert str(backend.last_request.url) == "https://api.test/api/v1/vehicles/statistics/"


@pytest.mark.asyncio
async def test_get_list_unwraps_results(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "contracts/", json={"count": 2, "results": [{"id": 1}, {"id": 2}]})

    contracts = await api.get_list("contracts/", params={"status": "ACTIVE", "search": None})

    assert contracts == [{"id": 1}, {"id": 2}]
    assert backend.last_request.url.params["status"] == "ACTIVE"
    assert "search" not in backend.last_request.url.params


@pytest.mark.asyncio
async def test_bearer_token_attached(
    api: ApiClient, backend: Any, token_store: TokenStore
) -> None:
    token_store.save_session("session-token", {"id": 1})
    backend.add("GET", "dashboard/stats/", json={})

    await api.get("dashboard/stats/")

    assert backend.last_request.headers["Authorization"] == "Bearer session-token"


@pytest.mark.asyncio
async def test_no_token_no_authorization_header(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "dashboard/stats/", json={})

    await api.get("dashboard/stats/")

    assert "Authorization" not in backend.last_request.headers


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["users/auth/login/", "users/auth/register/"])
async def test_auth_endpoints_skip_bearer(
    api: ApiClient, backend: Any, token_store: TokenStore, path: str
) -> None:
    token_store.set_item("access_token", "stale-token")
    backend.add("POST", path, json={"access": "new"})

    await api.post(path, json={"email": "a@b.c", "password": "x"})

    assert "Authorization" not in backend.last_request.headers


@pytest.mark.asyncio
async def test_unauthorized_raises_and_keeps_token(
    api: ApiClient, backend: Any, token_store: TokenStore
) -> None:
    token_store.save_session("expired-on-server")
    backend.add("GET", "vehicles/", status_code=401, json={"detail": "Token is invalid"})

    with pytest.raises(UnauthorizedError) as exc_info:
        await api.get("vehicles/")

    assert exc_info.value.status_code == 401
    assert exc_info.value.user_message == "Token is invalid"
    assert token_store.get_token() == "expired-on-server"


@pytest.mark.asyncio
async def test_unauthorized_clears_auth_when_enabled(
    make_client: Callable[..., ApiClient], backend: Any, token_store: TokenStore
) -> None:
    token_store.save_session("expired-on-server")
    backend.add("GET", "vehicles/", status_code=401, json={"detail": "Token is invalid"})
    client = make_client(clear_auth_on_unauthorized=True)

    with pytest.raises(UnauthorizedError):
        await client.get("vehicles/")
    await client.close()

    assert token_store.get_token() is None


@pytest.mark.asyncio
async def test_http_error_carries_backend_payload(api: ApiClient, backend: Any) -> None:
    backend.add("POST", "contracts/", status_code=400, json={"error": "Vehicle already booked"})

    with pytest.raises(ApiRequestError) as exc_info:
        await api.post("contracts/", json={"vehicle": 7}, action="creating contract")

    error = exc_info.value
    assert error.status_code == 400
    assert error.method == "POST"
    assert error.user_message == "Vehicle already booked"


@pytest.mark.asyncio
async def test_error_is_logged_with_action(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "vehicles/", status_code=500, json={"detail": "boom"})

    with patch("app.api_client.logger") as mock_logger:
        with pytest.raises(ApiRequestError):
            await api.get("vehicles/", action="fetching vehicles")

    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args.args[0] == "Error fetching vehicles"


@pytest.mark.asyncio
async def test_timeout_maps_to_request_timeout(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "vehicles/", error=httpx.ReadTimeout("timed out"))

    with pytest.raises(RequestTimeoutException) as exc_info:
        await api.get("vehicles/")

    assert exc_info.value.service_name == "backend-api"
    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_connection_error_maps_to_service_unavailable(
    api: ApiClient, backend: Any
) -> None:
    backend.add("GET", "vehicles/", error=httpx.ConnectError("Connection refused"))

    with pytest.raises(ServiceUnavailableException) as exc_info:
        await api.get("vehicles/")

    assert not isinstance(exc_info.value, RequestTimeoutException)
    assert exc_info.value.details["error_type"] == "ConnectError"


@pytest.mark.asyncio
async def test_empty_body_returns_none(api: ApiClient, backend: Any) -> None:
    backend.add("DELETE", "vehicles/3/", status_code=204)

    assert await api.delete("vehicles/3/") is None


@pytest.mark.asyncio
async def test_raw_returns_bytes(api: ApiClient, backend: Any) -> None:
    backend.add("POST", "inventory/reports/export/pdf/", content=b"%PDF-1.7 report")

    data = await api.post("inventory/reports/export/pdf/", json={}, raw=True)

    assert data == b"%PDF-1.7 report"


@pytest.mark.asyncio
async def test_invalid_json_raises(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "vehicles/", content=b"<html>maintenance</html>")

    with pytest.raises(FleetAdminException, match="invalid JSON"):
        await api.get("vehicles/")


@pytest.mark.asyncio
async def test_request_id_forwarded(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "dashboard/stats/", json={})
    set_request_id("req-123")
    try:
        await api.get("dashboard/stats/")
    finally:
        clear_request_id()

    assert backend.last_request.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_health_check_healthy(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "health/", json={"status": "ok"})

    assert await api.health_check() is True


@pytest.mark.asyncio
async def test_health_check_unhealthy(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "health/", status_code=503, json={})

    assert await api.health_check() is False


@pytest.mark.asyncio
async def test_health_check_connection_error(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "health/", error=httpx.ConnectError("Connection refused"))

    assert await api.health_check() is False


@pytest.mark.asyncio
async def test_close_releases_client(api: ApiClient, backend: Any) -> None:
    backend.add("GET", "dashboard/stats/", json={})
    await api.get("dashboard/stats/")

    await api.close()

    assert api._client is None
