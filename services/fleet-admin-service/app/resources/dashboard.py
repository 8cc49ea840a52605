"""
Admin dashboard endpoints.
"""

from typing import Any, Dict

from .base import Resource


class DashboardResource(Resource):
    async def stats(self) -> Dict[str, Any]:
        return await self.client.get("dashboard/stats/", action="fetching dashboard stats")

    async def activities(self) -> Dict[str, Any]:
        """Recent activity feed: ``{"activities": [...], ...}``."""
        return await self.client.get(
            "dashboard/activities/", action="fetching recent activities"
        )
