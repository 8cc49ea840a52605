"""
Fleet supplier endpoints (vehicle vendors, payables and payments).
"""

from typing import Any, Dict, List, Optional

from ..exceptions import FleetAdminException
from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters, build_ordering, paginate

logger = get_logger(__name__)

EMPTY_SUPPLIER_STATISTICS = {
    "total_suppliers": 0,
    "total_purchases": 0,
    "total_outstanding": 0,
    "total_vehicles_supplied": 0,
}


class SuppliersResource(Resource):
    """Endpoints under ``/suppliers/``."""

    async def list(
        self, page: int = 1, page_size: int = 20, search: Optional[str] = None
    ) -> Dict[str, Any]:
        """One page of active suppliers, as the paginated envelope."""
        self._require_positive("page_size", page_size)
        params: Dict[str, Any] = {"is_active": "true", "page": page, "page_size": page_size}
        params.update(build_filters(search=search))
        return await self.client.get("suppliers/", params=params, action="fetching suppliers")

    async def list_paginated(
        self,
        page: int = 1,
        page_size: int = 10,
        search: Optional[str] = None,
        is_active: bool = True,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> Dict[str, Any]:
        """
        Returns:
            ``{"suppliers": [...], "total_count": int, "total_pages": int}``
        """
        self._require_positive("page_size", page_size)
        params = build_filters(
            page=page,
            page_size=page_size,
            search=search,
            ordering=build_ordering(sort_by, sort_order),
        )
        params["is_active"] = str(is_active).lower()
        data = await self.client.get(
            "suppliers/", params=params, action="fetching suppliers (paginated)"
        )
        return paginate(data, page_size, "suppliers")

    async def get(self, supplier_id: ResourceId) -> Dict[str, Any]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.get(f"suppliers/{supplier_id}/", action="fetching supplier")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("suppliers/", json=data, action="creating supplier")

    async def update(self, supplier_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.put(
            f"suppliers/{supplier_id}/", json=data, action="updating supplier"
        )

    async def delete(self, supplier_id: ResourceId) -> None:
        self._require_id("supplier_id", supplier_id)
        await self.client.delete(f"suppliers/{supplier_id}/", action="deleting supplier")

    async def statistics(self) -> Dict[str, Any]:
        try:
            return await self.client.get(
                "suppliers/statistics/", action="fetching supplier statistics"
            )
        except FleetAdminException as error:
            logger.warning(
                "Using empty supplier statistics",
                extra={"extra_fields": {"error": error.message}},
            )
            return dict(EMPTY_SUPPLIER_STATISTICS)

    async def items(self, supplier_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.get(
            f"suppliers/{supplier_id}/items/", action="fetching supplier items"
        )

    async def payables(self, supplier_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.get(
            f"suppliers/{supplier_id}/payables/", action="fetching supplier payables"
        )

    async def payments(self, supplier_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.get_list(
            "suppliers/payments/",
            params={"accounts_payable__supplier": supplier_id},
            action="fetching supplier payments",
        )
