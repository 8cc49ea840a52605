"""
Fleet vehicle endpoints: CRUD, financial views and status tracking.
"""

from typing import Any, Dict, List, Optional

from .base import Resource, ResourceId, build_filters, build_ordering, paginate


class VehiclesResource(Resource):
    """Endpoints under ``/vehicles/``."""

    async def list(
        self,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
        supplier: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """
        Fetch one page of vehicles.

        Sorting by ``year`` is done client-side in the dashboard, so it is
        never sent as an ordering.

        Returns:
            ``{"vehicles": [...], "total_count": int, "total_pages": int}``
        """
        self._require_positive("page_size", page_size)
        params = build_filters(
            page=page,
            page_size=page_size,
            search=search,
            status=status,
            supplier=supplier,
        )
        if sort_by != "year":
            ordering = build_ordering(sort_by, sort_order)
            if ordering:
                params["ordering"] = ordering

        data = await self.client.get("vehicles/", params=params, action="fetching vehicles")
        return paginate(data, page_size, "vehicles")

    async def get(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(f"vehicles/{vehicle_id}/", action="fetching vehicle")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("vehicles/", json=data, action="creating vehicle")

    async def update(self, vehicle_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.put(
            f"vehicles/{vehicle_id}/", json=data, action="updating vehicle"
        )

    async def delete(self, vehicle_id: ResourceId) -> None:
        self._require_id("vehicle_id", vehicle_id)
        await self.client.delete(f"vehicles/{vehicle_id}/", action="deleting vehicle")

    async def for_select(self) -> List[Dict[str, Any]]:
        """All vehicles in one request, for dropdowns."""
        data = await self.client.get(
            "vehicles/",
            params={"page_size": 1000},
            action="fetching vehicles for select",
        )
        if isinstance(data, dict):
            if "vehicles" in data:
                return data["vehicles"]
            return data.get("results", [])
        return data or []

    async def statistics(self) -> Dict[str, Any]:
        return await self.client.get(
            "vehicles/statistics/", action="fetching vehicle statistics"
        )

    async def financial_summary(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/financial_summary/",
            action="fetching vehicle financial summary",
        )

    async def income_breakdown(
        self,
        vehicle_id: ResourceId,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/income_breakdown/",
            params=build_filters(start_date=start_date, end_date=end_date),
            action="fetching vehicle income breakdown",
        )

    async def expense_breakdown(
        self,
        vehicle_id: ResourceId,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/expense_breakdown/",
            params=build_filters(start_date=start_date, end_date=end_date),
            action="fetching vehicle expense breakdown",
        )

    async def profitability_analysis(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/profitability_analysis/",
            action="fetching vehicle profitability analysis",
        )

    async def income_totals(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/income_totals/",
            action="fetching vehicle income totals",
        )

    async def expense_totals(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"vehicles/{vehicle_id}/expense_totals/",
            action="fetching vehicle expense totals",
        )

    async def damage_reports(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            f"vehicles/{vehicle_id}/damage-reports/",
            action="fetching vehicle damage reports",
        )

    # Status tracking

    async def status_overview(self) -> Dict[str, Any]:
        return await self.client.get(
            "vehicles/status_overview/", action="fetching vehicle status overview"
        )

    async def update_status(
        self,
        vehicle_id: ResourceId,
        status: str,
        location: Optional[str] = None,
        reason: Optional[str] = None,
        mileage: Optional[int] = None,
    ) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        payload = build_filters(status=status, location=location, reason=reason, mileage=mileage)
        return await self.client.post(
            f"vehicles/{vehicle_id}/update_status/",
            json=payload,
            action="updating vehicle status",
        )

    async def status_history(self, vehicle_id: ResourceId, days: int = 30) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        self._require_positive("days", days)
        return await self.client.get(
            f"vehicles/{vehicle_id}/status_history/",
            params={"days": days},
            action="fetching vehicle status history",
        )

    async def by_status(self, status: str) -> Dict[str, Any]:
        return await self.client.get(
            "vehicles/by_status/",
            params={"status": status},
            action="fetching vehicles by status",
        )

    async def utilization_stats(self, days: int = 30) -> Dict[str, Any]:
        self._require_positive("days", days)
        return await self.client.get(
            "vehicles/utilization_stats/",
            params={"days": days},
            action="fetching utilization stats",
        )

    async def sync_statuses(self) -> Dict[str, Any]:
        return await self.client.post(
            "vehicles/sync_statuses/", action="syncing vehicle statuses"
        )

    async def search(self, query: str = "", status: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": query}
        if status:
            params["status"] = status
        return await self.client.get(
            "vehicles/search_vehicles/", params=params, action="searching vehicles"
        )
