"""
Fleet Admin Service Tests - Test Configuration.

Provides a scripted fake of the fleet management backend (served through
``httpx.MockTransport``), API client and resource fixtures wired to it, and
sample backend records.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from app.api_client import ApiClient
from app.resources import FleetAdminClient
from app.token_store import TokenStore

BASE_URL = "https://api.test/api/v1"
API_PREFIX = "/api/v1/"


class FakeBackend:
    """
    Callable handler for ``httpx.MockTransport``.

    Routes are keyed by method and path (relative to the API base path).
    Unrouted requests get a DRF-style 404. Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        content: Optional[bytes] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.routes[(method.upper(), API_PREFIX + path.lstrip("/"))] = {
            "json": json,
            "status_code": status_code,
            "content": content,
            "error": error,
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not found."})
        if route["error"] is not None:
            raise route["error"]
        if route["content"] is not None:
            return httpx.Response(route["status_code"], content=route["content"])
        if route["json"] is None:
            return httpx.Response(route["status_code"])
        return httpx.Response(route["status_code"], json=route["json"])

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def token_store(tmp_path) -> TokenStore:
    """Token store backed by a temporary file."""
    return TokenStore(tmp_path / "storage.json")


@pytest.fixture
def make_client(backend: FakeBackend, token_store: TokenStore) -> Callable[..., ApiClient]:
    """Factory for API clients talking to the fake backend."""

    def factory(**kwargs: Any) -> ApiClient:
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("token_store", token_store)
        kwargs.setdefault("transport", httpx.MockTransport(backend))
        return ApiClient(**kwargs)

    return factory


@pytest_asyncio.fixture
async def api(make_client: Callable[..., ApiClient]):
    client = make_client()
    yield client
    await client.close()


@pytest.fixture
def fleet(api: ApiClient) -> FleetAdminClient:
    return FleetAdminClient(api)


@pytest.fixture
def sample_vehicle() -> Dict[str, Any]:
    return {
        "id": 7,
        "make": "Toyota",
        "model": "Probox",
        "registration_number": "KDA 123A",
        "status": "AVAILABLE",
        "condition": "GOOD",
        "purchase_price": "1200000.00",
        "created_at": "2024-01-15T08:00:00Z",
    }


@pytest.fixture
def sample_contracts() -> List[Dict[str, Any]]:
    return [
        {
            "id": 1,
            "vehicle": 7,
            "client_name": "Jane Wanjiru",
            "start_date": "2025-03-01",
            "end_date": "2025-03-03",
            "status": "ACTIVE",
            "total_contract_value": "600.00",
            "security_deposit": "50.00",
        },
        {
            "id": 2,
            "vehicle": 7,
            "client_name": "Otieno Mbugua",
            "start_date": "2025-03-03",
            "end_date": "2025-03-04",
            "status": "ACTIVE",
            "total_contract_value": "400.00",
            "security_deposit": "50.00",
        },
    ]


@pytest.fixture
def sample_payments() -> List[Dict[str, Any]]:
    return [
        {"id": 10, "contract": 1, "amount": "150.00", "status": "SUCCESS"},
        {"id": 11, "contract": 2, "amount": "50.00", "status": "SUCCESS"},
        {"id": 12, "contract": 2, "amount": "500.00", "status": "FAILED"},
    ]


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
