"""
Garage job card endpoints.
"""

from typing import Any, Dict, Optional

from ..exceptions import FleetAdminException
from ..logging_config import get_logger
from .base import Resource, ResourceId, build_filters

logger = get_logger(__name__)

EMPTY_JOB_CARD_STATISTICS = {"active_jobs": 0, "pending_approval": 0}


class JobCardsResource(Resource):
    """Endpoints under ``/job-cards/``."""

    async def list(
        self,
        page: int = 1,
        page_size: int = 20,
        registration_number: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch one page of job cards; returns the paginated envelope as-is."""
        self._require_positive("page_size", page_size)
        return await self.client.get(
            "job-cards/",
            params=build_filters(
                page=page,
                page_size=page_size,
                registration_number=registration_number,
                status=status,
                search=search,
            ),
            action="fetching job cards",
        )

    async def get(self, job_card_id: ResourceId) -> Dict[str, Any]:
        self._require_id("job_card_id", job_card_id)
        return await self.client.get(f"job-cards/{job_card_id}/", action="fetching job card")

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.post("job-cards/", json=data, action="creating job card")

    async def update(self, job_card_id: ResourceId, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_id("job_card_id", job_card_id)
        return await self.client.patch(
            f"job-cards/{job_card_id}/", json=data, action="updating job card"
        )

    async def delete(self, job_card_id: ResourceId) -> None:
        self._require_id("job_card_id", job_card_id)
        await self.client.delete(f"job-cards/{job_card_id}/", action="deleting job card")

    async def statistics(self) -> Dict[str, Any]:
        """
        Active and pending-approval job counts.

        Falls back to zero counts when the endpoint is missing or failing so
        the garage overview still renders.
        """
        try:
            return await self.client.get(
                "job-cards/statistics/", action="fetching job card stats"
            )
        except FleetAdminException as error:
            logger.warning(
                "Using empty job card statistics",
                extra={"extra_fields": {"error": error.message}},
            )
            return dict(EMPTY_JOB_CARD_STATISTICS)
