"""
Fleet Admin Service Package.

Async client for the fleet management REST backend (vehicles, contracts,
garage, inventory, finance, users and loyalty) and a FastAPI service exposing
the dashboards' aggregated views.
"""

__version__ = "1.0.0"
__description__ = "Fleet management admin client and dashboard service"

from .api_client import ApiClient
from .config import settings
from .resources import FleetAdminClient

__all__ = [
    "ApiClient",
    "FleetAdminClient",
    "settings",
    "__version__",
]
