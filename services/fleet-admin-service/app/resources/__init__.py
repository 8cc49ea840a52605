"""
Typed wrappers over the backend endpoints, grouped by domain.

``FleetAdminClient`` bundles one wrapper per domain around a shared
``ApiClient``::

    async with ApiClient() as api:
        fleet = FleetAdminClient(api)
        page = await fleet.vehicles.list(page=2, status="AVAILABLE")
"""

from typing import Optional

from ..api_client import ApiClient, api_client
from .auth import AuthResource
from .contracts import ContractsResource
from .dashboard import DashboardResource
from .finance import FinanceResource
from .inventory import InventoryResource
from .job_cards import JobCardsResource
from .loyalty import LoansResource, LoyaltyResource
from .reports import ReportsResource
from .suppliers import SuppliersResource
from .users import UsersResource
from .vehicles import VehiclesResource

__all__ = [
    "AuthResource",
    "ContractsResource",
    "DashboardResource",
    "FinanceResource",
    "FleetAdminClient",
    "InventoryResource",
    "JobCardsResource",
    "LoansResource",
    "LoyaltyResource",
    "ReportsResource",
    "SuppliersResource",
    "UsersResource",
    "VehiclesResource",
]


class FleetAdminClient:
    """All resource wrappers sharing one API client (the module singleton by default)."""

    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client or api_client
        self.vehicles = VehiclesResource(self.client)
        self.contracts = ContractsResource(self.client)
        self.job_cards = JobCardsResource(self.client)
        self.users = UsersResource(self.client)
        self.inventory = InventoryResource(self.client)
        self.reports = ReportsResource(self.client)
        self.suppliers = SuppliersResource(self.client)
        self.finance = FinanceResource(self.client)
        self.dashboard = DashboardResource(self.client)
        self.auth = AuthResource(self.client)
        self.loyalty = LoyaltyResource(self.client)
        self.loans = LoansResource(self.client)
