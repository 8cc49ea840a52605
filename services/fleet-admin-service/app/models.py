"""
Data-transfer models mirrored from the fleet management backend.

The backend owns every invariant; these models only give the fields a name,
a type and a default. Unknown fields are kept so nothing returned by the API
is lost when a payload is validated.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Decimal fields arrive as strings ("1500.00") or numbers depending on the serializer
Amount = Optional[Union[str, float, int]]


class BackendModel(BaseModel):
    """Base for all backend shapes: permissive, keeps unknown fields."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Page(BackendModel):
    """Paginated list envelope."""

    results: List[Any] = Field(default_factory=list)
    count: Optional[int] = 0
    next: Optional[str] = None
    previous: Optional[str] = None


class Supplier(BackendModel):
    id: Union[int, str]
    name: Optional[str] = None
    supplier_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = True


class Vehicle(BackendModel):
    id: Union[int, str]
    make: Optional[str] = None
    model: Optional[str] = None
    registration_number: Optional[str] = None
    status: Optional[str] = None
    classification: Optional[str] = None
    condition: Optional[str] = None
    purchase_price: Amount = None
    created_at: Optional[str] = None


class InventoryItem(BackendModel):
    """Inventory view of a vehicle."""

    vehicle: Optional[Union[int, str, Dict[str, Any]]] = None
    condition: Optional[str] = None
    location: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    registration_number: Optional[str] = None
    purchase_price: Amount = None
    current_value: Amount = None


class Contract(BackendModel):
    id: Optional[Union[int, str]] = None
    client_name: Optional[str] = None
    vehicle: Optional[Union[int, str, Dict[str, Any]]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    contract_type: Optional[str] = None
    total_contract_value: Amount = None
    amount_paid: Amount = None
    balance_due: Amount = None
    security_deposit: Amount = None
    driver_name: Optional[str] = None
    created_at: Optional[str] = None


class Payment(BackendModel):
    id: Optional[Union[int, str]] = None
    contract: Optional[Union[int, str, Dict[str, Any]]] = None
    amount: Amount = None
    method: Optional[str] = None
    status: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: Optional[str] = None


class MaintenanceRecord(BackendModel):
    id: Optional[Union[int, str]] = None
    vehicle: Optional[Union[int, str, Dict[str, Any]]] = None
    maintenance_type: Optional[str] = None
    description: Optional[str] = None
    cost: Amount = None
    scheduled_date: Optional[str] = None
    completed_date: Optional[str] = None
    status: Optional[str] = None


class PartSummary(BackendModel):
    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    unit_cost: Amount = None


class StockUsage(BackendModel):
    id: Optional[Union[int, str]] = None
    part: Optional[Union[int, str, PartSummary]] = None
    vehicle: Optional[Union[int, str, Dict[str, Any]]] = None
    usage_type: Optional[str] = None
    quantity: Optional[float] = None
    quantity_used: Optional[float] = None
    unit_cost: Amount = None
    total_cost: Amount = None


class Part(BackendModel):
    id: Union[int, str]
    sku: Optional[str] = None
    name: Optional[str] = None
    current_stock: Optional[int] = 0
    min_stock_level: Optional[int] = 0
    unit_cost: Amount = None
    is_low_stock: Optional[bool] = False
    stock_value: Amount = None


class JobCard(BackendModel):
    id: int
    job_card_number: Optional[str] = None
    client_name: Optional[str] = None
    registration_number: Optional[str] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    total_job_value: Amount = None
    balance_due: Amount = None
    job_cost: Amount = None
    date_completed: Optional[str] = None


class Equipment(BackendModel):
    id: int
    name: Optional[str] = None
    serial_number: Optional[str] = None
    cost: Amount = None
    condition: Optional[str] = None
    status: Optional[str] = None


class User(BackendModel):
    id: Union[int, str]
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None


class VehicleAnalytics(BackendModel):
    total_revenue: Optional[float] = None
    utilization_rate: Optional[float] = None
    total_contracts: Optional[int] = None
    active_contracts: Optional[int] = None


class VehicleDetailedInfo(BackendModel):
    vehicle_info: InventoryItem = Field(default_factory=InventoryItem)
    analytics: VehicleAnalytics = Field(default_factory=VehicleAnalytics)
    contracts_history: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("vehicle_info", "analytics", mode="before")
    @classmethod
    def null_section_to_empty(cls, value: Any) -> Any:
        """The backend sends ``null`` for sections it has no data for."""
        return {} if value is None else value

    @field_validator("contracts_history", mode="before")
    @classmethod
    def null_history_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value
