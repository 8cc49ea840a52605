"""
User management endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..analytics import active_user_count
from ..concurrency import gather_with_fallback
from ..exceptions import FleetAdminException
from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters

logger = get_logger(__name__)

EMPTY_USER_DASHBOARD_STATS = {
    "totalClients": 0,
    "activeClients": 0,
    "newClientsThisMonth": 0,
    "totalLoyaltyPoints": 0,
    "averageLoyaltyPoints": 0,
    "topTierClients": 0,
}


def to_client_user(client: Dict[str, Any]) -> Dict[str, Any]:
    """Map a ``/loyalty/clients/`` record onto the ClientUser shape."""
    return {
        "id": client.get("id"),
        "name": client.get("name"),
        "email": client.get("email"),
        "phone": client.get("phone"),
        "role": client.get("role"),
        "status": client.get("status"),
        "branchId": client.get("branchId"),
        "profileImageUrl": client.get("profileImageUrl"),
        "lastLogin": client.get("lastLogin"),
        "createdAt": client.get("createdAt") or datetime.now(timezone.utc).isoformat(),
        "updatedAt": client.get("updatedAt"),
        "idNumber": client.get("idNumber"),
        "physicalAddress": client.get("physicalAddress"),
        # Not exposed by the clients endpoint
        "totalContracts": 0,
        "activeContracts": 0,
        "totalSpent": 0,
        "loyaltyPoints": client.get("current_points") or 0,
        "loyaltyTier": client.get("loyalty_tier") or "Bronze",
    }


class UsersResource(Resource):
    """Endpoints under ``/users/`` plus the client views built on ``/loyalty/clients/``."""

    async def list(
        self, page: int = 1, page_size: int = 20, search: Optional[str] = None
    ) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "users/",
            params=build_filters(page=page, page_size=page_size, search=search),
            action="fetching users",
        )

    async def get(self, user_id: ResourceId) -> Dict[str, Any]:
        self._require_id("user_id", user_id)
        return await self.client.get(f"users/{user_id}/", action="fetching user")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("users/", json=data, action="creating user")

    async def update(self, user_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("user_id", user_id)
        return await self.client.patch(f"users/{user_id}/", json=data, action="updating user")

    async def delete(self, user_id: ResourceId) -> None:
        self._require_id("user_id", user_id)
        await self.client.delete(f"users/{user_id}/", action="deleting user")

    async def search(
        self,
        query: str,
        role: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = {"search": query}
        params.update(build_filters(role=role, status=status, limit=limit))
        return await self.client.get_list("users/search/", params=params, action="searching users")

    async def clients(self, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """
        Client users with their loyalty standing.

        Returns:
            Paginated envelope whose results use the ClientUser shape
        """
        self._require_positive("page_size", page_size)
        data = await self.client.get(
            "loyalty/clients/",
            params={"page": page, "page_size": page_size},
            action="fetching client users",
        )
        envelope = data if isinstance(data, dict) else {}
        results = envelope.get("results", data)
        if not isinstance(results, list):
            results = []

        return {
            "results": [to_client_user(client) for client in results],
            "count": envelope.get("count") or len(results),
            "next": envelope.get("next"),
            "previous": envelope.get("previous"),
        }

    async def get_client(self, client_id: ResourceId) -> Dict[str, Any]:
        self._require_id("client_id", client_id)
        return await self.client.get(
            f"loyalty/clients/{client_id}/", action="fetching client user"
        )

    async def update_client(self, client_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        """Client records are users; updates go through ``/users/``."""
        self._require_id("client_id", client_id)
        return await self.client.patch(
            f"users/{client_id}/", json=data, action="updating client user"
        )

    async def dashboard_stats(self) -> Dict[str, Any]:
        """
        Client counts and loyalty totals for the user management dashboard.

        Computed from the CLIENT user list and the loyalty stats endpoint.
        Any failure yields all-zero stats.
        """
        try:
            users, loyalty_stats = await gather_with_fallback(
                self.client.get(
                    "users/", params={"role": "CLIENT"}, action="fetching client list"
                ),
                self.client.get("loyalty/stats/", action="fetching loyalty stats"),
            )
        except FleetAdminException as error:
            logger.error(
                "Error fetching user dashboard stats",
                extra={"extra_fields": {"error": error.message}},
            )
            return dict(EMPTY_USER_DASHBOARD_STATS)

        clients = users.get("results", []) if isinstance(users, dict) else (users or [])
        loyalty_stats = loyalty_stats or {}

        return {
            "totalClients": len(clients),
            "activeClients": active_user_count(clients),
            "newClientsThisMonth": loyalty_stats.get("new_clients_this_month") or 0,
            "totalLoyaltyPoints": loyalty_stats.get("total_points_in_system") or 0,
            "averageLoyaltyPoints": loyalty_stats.get("average_points_per_client") or 0,
            "topTierClients": loyalty_stats.get("platinum_clients") or 0,
        }
