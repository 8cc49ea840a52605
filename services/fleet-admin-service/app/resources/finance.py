"""
Money flowing in and out of the fleet: maintenance, expenses, payments and invoices.
"""

from typing import Any, Dict, List, Optional

from .base import Resource, ResourceId, build_filters


def to_expense(item: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an ``/expenses/all-expenses/`` row for the expenses table."""
    return {
        "id": item.get("id"),
        "type": item.get("type"),
        "category": item.get("category"),
        "description": item.get("notes") or item.get("item_name") or item.get("type"),
        "amount": item.get("total_amount"),
        "status": item.get("status"),
        "date": item.get("created_at"),
        "vehicle_registration": item.get("vehicle_registration"),
    }


class FinanceResource(Resource):
    """Maintenance, expense, payment and invoice endpoints."""

    # Maintenance

    async def maintenance_for_vehicle(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            "maintenance/",
            params={"vehicle_id": vehicle_id},
            action="fetching maintenance records",
        )

    async def maintenance_records(
        self,
        status: Optional[str] = None,
        maintenance_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "maintenance/",
            params=build_filters(status=status, maintenance_type=maintenance_type, search=search),
            action="fetching maintenance records",
        )

    async def create_maintenance(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "maintenance/", json=data, action="creating maintenance record"
        )

    # Vehicle expenses

    async def vehicle_expenses(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            "vehicle-expenses/",
            params={"vehicle_id": vehicle_id},
            action="fetching vehicle expenses",
        )

    async def vehicle_expense(self, expense_id: ResourceId) -> Dict[str, Any]:
        self._require_id("expense_id", expense_id)
        return await self.client.get(
            f"vehicle-expenses/{expense_id}/", action="fetching vehicle expense"
        )

    async def create_vehicle_expense(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "vehicle-expenses/", json=data, action="creating vehicle expense"
        )

    async def update_vehicle_expense(
        self, expense_id: ResourceId, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_id("expense_id", expense_id)
        return await self.client.patch(
            f"vehicle-expenses/{expense_id}/", json=data, action="updating vehicle expense"
        )

    async def delete_vehicle_expense(self, expense_id: ResourceId) -> None:
        self._require_id("expense_id", expense_id)
        await self.client.delete(
            f"vehicle-expenses/{expense_id}/", action="deleting vehicle expense"
        )

    async def combined_expenses(self) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "vehicle-expenses/", action="fetching combined expenses"
        )

    async def expense_items(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "expense-items/",
            params=build_filters(category=category),
            action="fetching expense items",
        )

    async def expense_statistics(self) -> Dict[str, Any]:
        return await self.client.get(
            "expense-statistics/", action="fetching expense statistics"
        )

    async def all_expenses(self) -> List[Dict[str, Any]]:
        items = await self.client.get(
            "expenses/all-expenses/", action="fetching all expenses"
        )
        return [to_expense(item) for item in items or []]

    # Payments

    async def vehicle_payments(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            "payments/", params={"vehicle": vehicle_id}, action="fetching vehicle payments"
        )

    # Invoices

    async def invoices(
        self,
        page: int = 1,
        page_size: int = 1000,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Any:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "invoices/",
            params=build_filters(page=page, page_size=page_size, search=search, status=status),
            action="fetching invoices",
        )

    async def create_invoice(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("invoices/", json=data, action="creating invoice")

    async def invoice_analytics(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.client.get(
            "invoices/analytics/",
            params=build_filters(start_date=start_date, end_date=end_date),
            action="fetching invoice analytics",
        )

    async def financial_analysis(self, days: int = 30) -> Dict[str, Any]:
        self._require_positive("days", days)
        return await self.client.get(
            "invoices/financial_analysis/",
            params={"days": days},
            action="fetching financial analysis",
        )
