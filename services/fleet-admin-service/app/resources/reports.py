"""
Inventory reporting endpoints and report export.
"""

from typing import Any, Dict, Optional

from .base import Resource, build_filters


class ReportsResource(Resource):
    """Endpoints under ``/inventory/reports/``."""

    async def _report(
        self,
        name: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.client.get(
            f"inventory/reports/{name}/",
            params=build_filters(start_date=start_date, end_date=end_date),
            action=f"fetching {name.replace('_', ' ')} report",
        )

    async def inventory_reports(self) -> Dict[str, Any]:
        return await self.client.get(
            "inventory/vehicles/reports/", action="fetching inventory reports"
        )

    async def vehicle_utilization(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("vehicle_utilization", start_date, end_date)

    async def parts_consumption(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("parts_consumption", start_date, end_date)

    async def stock_value(self) -> Dict[str, Any]:
        return await self._report("stock_value")

    async def low_stock_alerts(self) -> Dict[str, Any]:
        return await self._report("low_stock_alerts")

    async def expense_summary(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("expense_summary", start_date, end_date)

    async def dashboard_summary(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        """Dashboard metrics for the date range (the ``metrics`` member)."""
        data = await self._report("dashboard_summary", start_date, end_date)
        return (data or {}).get("metrics", {})

    async def inventory(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("inventory", start_date, end_date)

    async def turnover(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("turnover", start_date, end_date)

    async def supplier_performance(
        self, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self._report("supplier_performance", start_date, end_date)

    async def export_pdf(self, report_data: Dict[str, Any]) -> bytes:
        """
        Render report data to PDF on the backend.

        Returns:
            PDF document bytes, ready for :func:`app.downloads.save_bytes`
        """
        return await self.client.post(
            "inventory/reports/export/pdf/",
            json=report_data,
            raw=True,
            action="exporting report to PDF",
        )

    async def export_excel(self, report_data: Dict[str, Any]) -> bytes:
        return await self.client.post(
            "inventory/reports/export/excel/",
            json=report_data,
            raw=True,
            action="exporting report to Excel",
        )
