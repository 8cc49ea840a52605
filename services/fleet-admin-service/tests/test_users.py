"""
Tests for the user, auth and loyalty resources.
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.exceptions import ApiRequestError, ValidationException
from app.resources import FleetAdminClient
from app.resources.loyalty import next_tier, points_to_next_tier, tier_benefits
from app.resources.users import EMPTY_USER_DASHBOARD_STATS
from app.token_store import REMEMBER_ME_EXPIRY_KEY, TokenStore


@pytest.mark.asyncio
async def test_clients_mapped_to_client_users(fleet: FleetAdminClient, backend) -> None:
    backend.add(
        "GET",
        "loyalty/clients/",
        json={
            "count": 1,
            "next": None,
            "previous": None,
            "results": [{"id": 5, "name": "Jane", "current_points": 1200, "loyalty_tier": None}],
        },
    )

    page = await fleet.users.clients()

    client = page["results"][0]
    assert page["count"] == 1
    assert client["loyaltyPoints"] == 1200
    assert client["loyaltyTier"] == "Bronze"
    assert client["totalContracts"] == 0


@pytest.mark.asyncio
async def test_dashboard_stats(fleet: FleetAdminClient, backend) -> None:
    backend.add(
        "GET",
        "users/",
        json={
            "count": 3,
            "results": [
                {"id": 1, "status": "Active"},
                {"id": 2, "status": "Active"},
                {"id": 3, "status": "Inactive"},
            ],
        },
    )
    backend.add(
        "GET",
        "loyalty/stats/",
        json={"total_points_in_system": 9000, "average_points_per_client": 3000, "platinum_clients": 1},
    )

    stats = await fleet.users.dashboard_stats()

    assert stats["totalClients"] == 3
    assert stats["activeClients"] == 2
    assert stats["totalLoyaltyPoints"] == 9000
    assert stats["topTierClients"] == 1
    assert stats["newClientsThisMonth"] == 0


@pytest.mark.asyncio
async def test_dashboard_stats_fallback(fleet: FleetAdminClient, backend) -> None:
    backend.add("GET", "users/", json={"count": 0, "results": []})
    backend.add("GET", "loyalty/stats/", status_code=500, json={"detail": "boom"})

    assert await fleet.users.dashboard_stats() == EMPTY_USER_DASHBOARD_STATS


@pytest.mark.asyncio
async def test_login_persists_session(
    fleet: FleetAdminClient, backend, token_store: TokenStore
) -> None:
    backend.add(
        "POST",
        "users/auth/login/",
        json={"access": "jwt-access", "refresh": "jwt-refresh", "user": {"id": 1, "role": "ADMIN"}},
    )

    await fleet.auth.login("admin@fleet.test", "secret")

    assert token_store.get_token() == "jwt-access"
    assert json.loads(backend.last_request.content) == {
        "email": "admin@fleet.test",
        "password": "secret",
    }
    expiry = datetime.fromisoformat(token_store.get_item(REMEMBER_ME_EXPIRY_KEY))
    remaining = expiry - datetime.now(timezone.utc)
    assert timedelta(days=29) < remaining <= timedelta(days=30)


@pytest.mark.asyncio
async def test_login_accepts_token_field(
    fleet: FleetAdminClient, backend, token_store: TokenStore
) -> None:
    backend.add("POST", "users/auth/login/", json={"token": "legacy-token", "user": {"id": 1}})

    await fleet.auth.login("admin@fleet.test", "secret")

    assert token_store.get_token() == "legacy-token"


@pytest.mark.asyncio
async def test_login_without_token_rejected(fleet: FleetAdminClient, backend, token_store) -> None:
    backend.add("POST", "users/auth/login/", json={"user": {"id": 1}})

    with pytest.raises(ValidationException):
        await fleet.auth.login("admin@fleet.test", "secret")

    assert token_store.get_token() is None


@pytest.mark.asyncio
async def test_login_failure_propagates(fleet: FleetAdminClient, backend) -> None:
    backend.add("POST", "users/auth/login/", status_code=400, json={"error": "Invalid credentials"})

    with pytest.raises(ApiRequestError) as exc_info:
        await fleet.auth.login("admin@fleet.test", "wrong")

    assert exc_info.value.user_message == "Invalid credentials"


@pytest.mark.asyncio
async def test_logout_calls_backend_and_clears(
    fleet: FleetAdminClient, backend, token_store: TokenStore
) -> None:
    token_store.save_session("jwt-access")
    backend.add("POST", "users/auth/logout/", json={"detail": "Logged out"})

    await fleet.auth.logout()

    assert backend.last_request.url.path == "/api/v1/users/auth/logout/"
    assert backend.last_request.headers["Authorization"] == "Bearer jwt-access"
    assert token_store.get_token() is None


@pytest.mark.asyncio
async def test_logout_clears_even_when_backend_fails(
    fleet: FleetAdminClient, backend, token_store: TokenStore
) -> None:
    token_store.save_session("jwt-access")
    backend.add("POST", "users/auth/logout/", error=httpx.ConnectError("Connection refused"))

    await fleet.auth.logout()

    assert token_store.get_token() is None


@pytest.mark.asyncio
async def test_logout_without_session_skips_backend(fleet: FleetAdminClient, backend) -> None:
    await fleet.auth.logout()

    assert backend.requests == []


@pytest.mark.parametrize(
    "tier, expected",
    [("Bronze", "Silver"), ("Silver", "Gold"), ("Gold", "Platinum"), ("Platinum", "Platinum")],
)
def test_next_tier(tier: str, expected: str) -> None:
    assert next_tier(tier) == expected


def test_points_to_next_tier() -> None:
    assert points_to_next_tier(1200, "Bronze") == 1800
    assert points_to_next_tier(6000, "Gold") == 4000
    assert points_to_next_tier(50_000, "Platinum") == 0


def test_tier_benefits_are_copies() -> None:
    benefits = tier_benefits("Gold")
    benefits.append("Free lunch")

    assert "Free lunch" not in tier_benefits("Gold")


@pytest.mark.asyncio
async def test_client_summary(fleet: FleetAdminClient, backend) -> None:
    backend.add("GET", "loyalty/clients/5/summary/", json={"client_id": 5, "current_points": 10})

    summary = await fleet.loyalty.client_summary(5)

    assert summary == {"client_id": 5, "current_points": 10}


@pytest.mark.asyncio
async def test_client_summary_falls_back_to_client_record(fleet: FleetAdminClient, backend) -> None:
    backend.add("GET", "loyalty/clients/5/summary/", status_code=500, json={})
    backend.add(
        "GET",
        "loyalty/clients/5/",
        json={"id": 5, "name": "Jane", "current_points": 3200, "loyalty_tier": "Gold"},
    )

    summary = await fleet.loyalty.client_summary(5)

    assert summary["current_points"] == 3200
    assert summary["current_tier"] == "Gold"
    assert summary["next_tier"] == "Platinum"
    assert summary["points_to_next_tier"] == 6800


@pytest.mark.asyncio
async def test_client_summary_raises_original_error(fleet: FleetAdminClient, backend) -> None:
    backend.add("GET", "loyalty/clients/5/summary/", status_code=500, json={"detail": "summary down"})

    with pytest.raises(ApiRequestError) as exc_info:
        await fleet.loyalty.client_summary(5)

    assert exc_info.value.user_message == "summary down"


@pytest.mark.asyncio
async def test_transactions_mapped(fleet: FleetAdminClient, backend) -> None:
    backend.add(
        "GET",
        "loyalty/transactions/",
        json=[
            {
                "id": 1,
                "client": {"id": 5, "name": "Jane"},
                "points": -200,
                "type": "REDEEMED",
                "created_by": None,
            }
        ],
    )

    transactions = await fleet.loyalty.transactions(client_id=5, type="REDEEMED")

    assert transactions[0]["points"] == 200
    assert transactions[0]["type"] == "Redeemed"
    assert transactions[0]["clientName"] == "Jane"
    assert transactions[0]["createdBy"] == "System"
    assert backend.last_request.url.params["client"] == "5"


@pytest.mark.asyncio
async def test_award_points_requires_positive_points(fleet: FleetAdminClient) -> None:
    with pytest.raises(ValidationException):
        await fleet.loyalty.award_points(5, 0)


@pytest.mark.asyncio
async def test_approve_loan(fleet: FleetAdminClient, backend) -> None:
    backend.add("POST", "loans/applications/9/approve/", json={"status": "APPROVED"})

    await fleet.loans.approve(9, approved_by="supervisor@fleet.test")

    assert json.loads(backend.last_request.content) == {"approvedBy": "supervisor@fleet.test"}
