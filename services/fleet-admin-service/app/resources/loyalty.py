"""
Loyalty programme and loan application endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..exceptions import FleetAdminException
from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters

logger = get_logger(__name__)

TIER_ORDER = ("Bronze", "Silver", "Gold", "Platinum")
TIER_THRESHOLDS = {"Bronze": 1000, "Silver": 3000, "Gold": 5000, "Platinum": 10000}
TIER_BENEFITS = {
    "Bronze": ["5% discount on rentals", "Priority booking"],
    "Silver": ["10% discount on rentals", "Priority booking", "Free upgrades"],
    "Gold": [
        "15% discount on rentals",
        "Priority booking",
        "Free upgrades",
        "Dedicated support",
    ],
    "Platinum": [
        "20% discount on rentals",
        "Priority booking",
        "Free upgrades",
        "Dedicated support",
        "Exclusive events",
    ],
}

TRANSACTION_TYPES = {"EARNED": "Earned", "REDEEMED": "Redeemed"}


def next_tier(tier: str) -> str:
    """Tier above ``tier``; Platinum stays Platinum, unknown tiers lead to Silver."""
    if tier not in TIER_ORDER:
        return "Silver"
    return TIER_ORDER[min(TIER_ORDER.index(tier) + 1, len(TIER_ORDER) - 1)]


def points_to_next_tier(points: int, tier: str) -> int:
    if tier == "Platinum":
        return 0
    return max(0, TIER_THRESHOLDS[next_tier(tier)] - points)


def tier_benefits(tier: str) -> List[str]:
    return list(TIER_BENEFITS.get(tier, ["5% discount on rentals"]))


def summarize_client(client: Dict[str, Any]) -> Dict[str, Any]:
    """Build a loyalty summary from a bare client record."""
    points = client.get("current_points") or 0
    tier = client.get("loyalty_tier") or "Bronze"
    now = datetime.now(timezone.utc).isoformat()
    return {
        "client_id": client.get("id"),
        "client_name": client.get("name"),
        "current_points": points,
        "total_earned": points,
        "total_redeemed": 0,
        "total_expired": 0,
        "current_tier": tier,
        "points_to_next_tier": points_to_next_tier(points, tier),
        "next_tier": next_tier(tier),
        "tier_benefits": tier_benefits(tier),
        "member_since": client.get("createdAt") or now,
        "last_updated": now,
    }


def to_transaction(transaction: Dict[str, Any]) -> Dict[str, Any]:
    client = transaction.get("client")
    created_by = transaction.get("created_by")
    return {
        "id": transaction.get("id"),
        "clientId": client.get("id") if isinstance(client, dict) else client,
        "clientName": client.get("name") if isinstance(client, dict) else "Unknown Client",
        "points": abs(transaction.get("points") or 0),
        "type": TRANSACTION_TYPES.get(transaction.get("type"), "Adjusted"),
        "reason": transaction.get("reason"),
        "balanceAfter": transaction.get("balance_after"),
        "referenceId": transaction.get("reference_id"),
        "createdBy": created_by.get("email") if isinstance(created_by, dict) else "System",
        "createdAt": transaction.get("created_at"),
    }


class LoyaltyResource(Resource):
    """Endpoints under ``/loyalty/``."""

    async def clients(self) -> List[Dict[str, Any]]:
        return await self.client.get_list("loyalty/clients/", action="fetching loyalty clients")

    async def client_points(self, client_id: ResourceId) -> Dict[str, Any]:
        self._require_id("client_id", client_id)
        client = await self.client.get(
            f"loyalty/clients/{client_id}/", action="fetching client loyalty points"
        )
        return summarize_client(client)

    async def client_summary(self, client_id: ResourceId) -> Dict[str, Any]:
        """
        Loyalty summary for one client.

        Falls back to a summary computed from the client record when the
        summary endpoint fails. If that fails too, the original error is raised.
        """
        self._require_id("client_id", client_id)
        try:
            return await self.client.get(
                f"loyalty/clients/{client_id}/summary/",
                action="fetching client loyalty summary",
            )
        except FleetAdminException as error:
            logger.warning(
                "Summary endpoint failed, falling back to client record",
                extra={"extra_fields": {"client_id": client_id, "error": error.message}},
            )
            try:
                client = await self.client.get(
                    f"loyalty/clients/{client_id}/", action="fetching client record"
                )
            except FleetAdminException:
                raise error
            return summarize_client(client)

    async def transactions(
        self,
        client_id: Optional[ResourceId] = None,
        type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        transactions = await self.client.get_list(
            "loyalty/transactions/",
            params=build_filters(client=client_id, type=type, limit=limit),
            action="fetching loyalty transactions",
        )
        return [to_transaction(transaction) for transaction in transactions or []]

    async def create_transaction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "loyalty/transactions/", json=data, action="creating loyalty transaction"
        )

    async def award_points(
        self,
        client_id: ResourceId,
        points: int,
        reason: Optional[str] = None,
        contract_id: Optional[ResourceId] = None,
    ) -> Dict[str, Any]:
        self._require_positive("points", points)
        return await self.client.post(
            "loyalty/transactions/award_points/",
            json=build_filters(
                client_id=client_id, points=points, reason=reason, contract_id=contract_id
            ),
            action="awarding loyalty points",
        )

    async def redeem_points(
        self,
        client_id: ResourceId,
        points: int,
        reason: Optional[str] = None,
        reference_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        self._require_positive("points", points)
        return await self.client.post(
            "loyalty/transactions/redeem_points/",
            json=build_filters(
                client_id=client_id,
                points=points,
                reason=reason,
                reference_id=reference_id,
                metadata=metadata,
            ),
            action="redeeming loyalty points",
        )

    async def renew_points(
        self, client_id: ResourceId, points: int, reason: Optional[str] = None
    ) -> Dict[str, Any]:
        self._require_positive("points", points)
        return await self.client.post(
            "loyalty/transactions/renew_points/",
            json=build_filters(client_id=client_id, points=points, reason=reason),
            action="renewing loyalty points",
        )

    async def rewards(self) -> List[Dict[str, Any]]:
        return await self.client.get_list("loyalty/rewards/", action="fetching loyalty rewards")

    async def can_redeem(self, reward_id: ResourceId, client_id: ResourceId) -> Dict[str, Any]:
        self._require_id("reward_id", reward_id)
        self._require_id("client_id", client_id)
        return await self.client.get(
            f"loyalty/rewards/{reward_id}/can_redeem/",
            params={"client_id": client_id},
            action="checking reward redemption",
        )

    async def stats(self) -> Dict[str, Any]:
        return await self.client.get("loyalty/stats/", action="fetching loyalty stats")


class LoansResource(Resource):
    """Endpoints under ``/loans/``."""

    async def applications(
        self,
        client_id: Optional[ResourceId] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "loans/applications/",
            params=build_filters(client_id=client_id, status=status, limit=limit),
            action="fetching loan applications",
        )

    async def application(self, application_id: ResourceId) -> Dict[str, Any]:
        self._require_id("application_id", application_id)
        return await self.client.get(
            f"loans/applications/{application_id}/", action="fetching loan application"
        )

    async def update_application(
        self, application_id: ResourceId, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_id("application_id", application_id)
        return await self.client.patch(
            f"loans/applications/{application_id}/",
            json=data,
            action="updating loan application",
        )

    async def approve(
        self,
        application_id: ResourceId,
        approved_by: str,
        disbursement_date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._require_id("application_id", application_id)
        return await self.client.post(
            f"loans/applications/{application_id}/approve/",
            json=build_filters(
                approvedBy=approved_by, disbursementDate=disbursement_date, notes=notes
            ),
            action="approving loan application",
        )

    async def reject(
        self, application_id: ResourceId, rejection_reason: str, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        self._require_id("application_id", application_id)
        return await self.client.post(
            f"loans/applications/{application_id}/reject/",
            json=build_filters(rejectionReason=rejection_reason, notes=notes),
            action="rejecting loan application",
        )

    async def dashboard_stats(self) -> Dict[str, Any]:
        return await self.client.get(
            "loans/dashboard/stats/", action="fetching loan dashboard stats"
        )
