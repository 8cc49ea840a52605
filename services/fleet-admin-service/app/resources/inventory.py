"""
Inventory endpoints: stocked vehicles, parts, categories, parts suppliers,
stock usage, stock adjustments and workshop equipment.
"""

from typing import Any, Dict, List, Optional

from ..exceptions import FleetAdminException
from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters

logger = get_logger(__name__)

EMPTY_SUPPLIER_STATS = {
    "total_suppliers": 0,
    "active_suppliers": 0,
    "total_parts": 0,
    "recent_orders": 0,
}

EMPTY_STOCK_USAGE_STATS = {
    "total_usage_records": 0,
    "total_quantity_used": 0,
    "total_usage_value": "0",
    "recent_usage_count": 0,
}


class InventoryResource(Resource):
    """Endpoints under ``/inventory/``."""

    async def _stats_or_default(self, path: str, action: str, default: Dict[str, Any]):
        try:
            return await self.client.get(path, action=action)
        except FleetAdminException as error:
            logger.warning(
                "Using default inventory stats",
                extra={"extra_fields": {"path": path, "error": error.message}},
            )
            return dict(default)

    # Inventory vehicles

    async def items(
        self,
        page: int = 1,
        page_size: int = 20,
        condition: Optional[str] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "inventory/vehicles/",
            params=build_filters(
                page=page,
                page_size=page_size,
                condition=condition,
                search=search,
                ordering=ordering,
            ),
            action="fetching inventory items",
        )

    async def item(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"inventory/vehicles/{vehicle_id}/", action="fetching inventory item"
        )

    async def update_item(self, vehicle_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("vehicle_id", vehicle_id)
        logger.debug(
            "Updating inventory item",
            extra={"extra_fields": {"vehicle_id": vehicle_id, "fields": sorted(data)}},
        )
        return await self.client.put(
            f"inventory/vehicles/{vehicle_id}/", json=data, action="updating inventory item"
        )

    async def delete_item(self, vehicle_id: ResourceId) -> None:
        self._require_id("vehicle_id", vehicle_id)
        await self.client.delete(
            f"inventory/vehicles/{vehicle_id}/", action="deleting inventory item"
        )

    async def detailed_info(self, vehicle_id: ResourceId) -> Dict[str, Any]:
        """Vehicle record plus analytics and contract history."""
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get(
            f"inventory/vehicles/{vehicle_id}/detailed_info/",
            action="fetching vehicle detailed info",
        )

    async def dashboard(self) -> Dict[str, Any]:
        """Inventory dashboard metrics (the ``metrics`` member of the summary)."""
        data = await self.client.get(
            "inventory/vehicles/dashboard_summary/", action="fetching inventory dashboard"
        )
        return (data or {}).get("metrics", {})

    async def locations(self) -> Dict[str, Any]:
        return await self.client.get(
            "inventory/vehicles/locations/", action="fetching inventory locations"
        )

    # Parts

    async def parts(
        self,
        page: int = 1,
        page_size: int = 20,
        category: Optional[ResourceId] = None,
        supplier: Optional[ResourceId] = None,
        unit: Optional[str] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
        low_stock: Optional[bool] = None,
    ) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        params = build_filters(
            page=page,
            page_size=page_size,
            category=category,
            supplier=supplier,
            unit=unit,
            search=search,
            ordering=ordering,
        )
        if low_stock is not None:
            params["low_stock"] = str(low_stock).lower()
        return await self.client.get("inventory/parts/", params=params, action="fetching parts")

    async def part(self, part_id: ResourceId) -> Dict[str, Any]:
        self._require_id("part_id", part_id)
        return await self.client.get(f"inventory/parts/{part_id}/", action="fetching part")

    async def create_part(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("inventory/parts/", json=data, action="creating part")

    async def update_part(self, part_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("part_id", part_id)
        return await self.client.put(
            f"inventory/parts/{part_id}/", json=data, action="updating part"
        )

    async def delete_part(self, part_id: ResourceId) -> None:
        self._require_id("part_id", part_id)
        await self.client.delete(f"inventory/parts/{part_id}/", action="deleting part")

    async def low_stock_parts(self) -> List[Dict[str, Any]]:
        return await self.client.get(
            "inventory/parts/low_stock/", action="fetching low stock parts"
        )

    async def parts_stock_summary(self) -> Dict[str, Any]:
        return await self.client.get(
            "inventory/parts/stock_summary/", action="fetching parts stock summary"
        )

    async def adjust_part_stock(self, part_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("part_id", part_id)
        return await self.client.post(
            f"inventory/parts/{part_id}/adjust_stock/",
            json=data,
            action="adjusting part stock",
        )

    # Categories

    async def categories(self, page: int = 1, page_size: int = 1000) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "inventory/categories/",
            params={"page": page, "page_size": page_size},
            action="fetching part categories",
        )

    async def create_category(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "inventory/categories/", json=data, action="creating part category"
        )

    # Parts suppliers

    async def suppliers(self, page: int = 1, page_size: int = 1000) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "inventory/suppliers/",
            params={"page": page, "page_size": page_size},
            action="fetching inventory suppliers",
        )

    async def supplier(self, supplier_id: ResourceId) -> Dict[str, Any]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.get(
            f"inventory/suppliers/{supplier_id}/", action="fetching inventory supplier"
        )

    async def create_supplier(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "inventory/suppliers/", json=data, action="creating inventory supplier"
        )

    async def update_supplier(
        self, supplier_id: ResourceId, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_id("supplier_id", supplier_id)
        return await self.client.patch(
            f"inventory/suppliers/{supplier_id}/",
            json=data,
            action="updating inventory supplier",
        )

    async def delete_supplier(self, supplier_id: ResourceId) -> None:
        self._require_id("supplier_id", supplier_id)
        await self.client.delete(
            f"inventory/suppliers/{supplier_id}/", action="deleting inventory supplier"
        )

    async def supplier_stats(self) -> Dict[str, Any]:
        return await self._stats_or_default(
            "inventory/suppliers/stats/", "fetching supplier stats", EMPTY_SUPPLIER_STATS
        )

    # Stock usage

    async def stock_usage(
        self,
        page: int = 1,
        page_size: int = 1000,
        vehicle: Optional[ResourceId] = None,
        part: Optional[ResourceId] = None,
        technician: Optional[ResourceId] = None,
        search: Optional[str] = None,
        ordering: Optional[str] = None,
    ) -> Dict[str, Any]:
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "inventory/stock-usage/",
            params=build_filters(
                page=page,
                page_size=page_size,
                vehicle=vehicle,
                part=part,
                technician=technician,
                search=search,
                ordering=ordering,
            ),
            action="fetching stock usage",
        )

    async def stock_usage_detail(self, usage_id: ResourceId) -> Dict[str, Any]:
        self._require_id("usage_id", usage_id)
        return await self.client.get(
            f"inventory/stock-usage/{usage_id}/", action="fetching stock usage detail"
        )

    async def create_stock_usage(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "inventory/stock-usage/", json=data, action="creating stock usage"
        )

    async def stock_usage_by_vehicle(self, vehicle_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("vehicle_id", vehicle_id)
        return await self.client.get_list(
            "inventory/stock-usage/by_vehicle/",
            params={"vehicle_id": vehicle_id},
            action="fetching stock usage by vehicle",
        )

    async def stock_usage_by_part(self, part_id: ResourceId) -> List[Dict[str, Any]]:
        self._require_id("part_id", part_id)
        return await self.client.get_list(
            "inventory/stock-usage/by_part/",
            params={"part_id": part_id},
            action="fetching stock usage by part",
        )

    async def stock_usage_stats(self) -> Dict[str, Any]:
        return await self._stats_or_default(
            "inventory/stock-usage/stats/",
            "fetching stock usage stats",
            EMPTY_STOCK_USAGE_STATS,
        )

    # Stock adjustments

    async def stock_adjustments(self) -> Dict[str, Any]:
        return await self.client.get(
            "inventory/stock-adjustments/", action="fetching stock adjustments"
        )

    async def create_stock_adjustment(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "inventory/stock-adjustments/", json=data, action="creating stock adjustment"
        )

    # Equipment

    async def equipment_list(self) -> List[Dict[str, Any]]:
        return await self.client.get_list(
            "inventory/equipment/", action="fetching equipment list"
        )

    async def equipment(self, equipment_id: ResourceId) -> Dict[str, Any]:
        self._require_id("equipment_id", equipment_id)
        return await self.client.get(
            f"inventory/equipment/{equipment_id}/", action="fetching equipment"
        )

    async def create_equipment(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            "inventory/equipment/", json=data, action="creating equipment"
        )

    async def update_equipment(
        self, equipment_id: ResourceId, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        self._require_id("equipment_id", equipment_id)
        return await self.client.patch(
            f"inventory/equipment/{equipment_id}/", json=data, action="updating equipment"
        )

    async def delete_equipment(self, equipment_id: ResourceId) -> None:
        self._require_id("equipment_id", equipment_id)
        await self.client.delete(
            f"inventory/equipment/{equipment_id}/", action="deleting equipment"
        )
