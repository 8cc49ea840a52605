"""
Rental contract endpoints.
"""

from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters

logger = get_logger(__name__)


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def expand_booked_dates(contracts: List[Dict[str, Any]]) -> List[date]:
    """
    Every calendar day covered by the given contracts.

    Start and end dates are inclusive. Contracts with a missing or unparseable
    date, or whose end precedes their start, contribute nothing.

    Returns:
        Sorted list of unique dates
    """
    days = set()
    for contract in contracts:
        start = _parse_day(contract.get("start_date"))
        end = _parse_day(contract.get("end_date"))
        if start is None or end is None:
            logger.warning(
                "Skipping contract with unusable dates",
                extra={"extra_fields": {"contract_id": contract.get("id")}},
            )
            continue
        current = start
        while current <= end:
            days.add(current)
            current += timedelta(days=1)
    return sorted(days)


class ContractsResource(Resource):
    """Endpoints under ``/contracts/``."""

    async def list(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        vehicle: Optional[ResourceId] = None,
    ) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "contracts/",
            params=build_filters(status=status, search=search, limit=limit, vehicle=vehicle),
            action="fetching contracts",
        )

    async def pending(self) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "contracts/", params={"status": "PENDING"}, action="fetching pending contracts"
        )

    async def for_vehicle(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            "contracts/", params={"vehicle": vehicle_id}, action="fetching vehicle contracts"
        )

    async def for_select(self) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "contracts/",
            params={"limit": 1000, "status": "ACTIVE"},
            action="fetching contracts for select",
        )

    async def get(self, contract_id: ResourceId) -> Dict[str, Any]:
        self._require_id("contract_id", contract_id)
        return await self.client.get(f"contracts/{contract_id}/", action="fetching contract")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("contracts/", json=data, action="creating contract")

    async def update(self, contract_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("contract_id", contract_id)
        return await self.client.patch(
            f"contracts/{contract_id}/", json=data, action="updating contract"
        )

    async def delete(self, contract_id: ResourceId) -> None:
        self._require_id("contract_id", contract_id)
        await self.client.delete(f"contracts/{contract_id}/", action="deleting contract")

    async def booked_dates(self, vehicle_id: ResourceId) -> List[date]:
        """Days on which the vehicle is already taken by an active contract."""
        self._require_id("vehicle_id", vehicle_id)
        contracts = await self.client.get_list(
            "contracts/",
            params={"vehicle": vehicle_id, "status": "ACTIVE"},
            action="fetching vehicle availability",
        )
        return expand_booked_dates(contracts or [])
