"""
Shared plumbing for resource wrappers.
"""

import math
from typing import Any, Dict, Optional, Union

from ..api_client import ApiClient
from ..exceptions import ValidationException
from ..models import Page

ResourceId = Union[int, str]

# Filter values meaning "no filter" in the dashboard's dropdowns
_EMPTY_FILTER_VALUES = (None, "", "ALL")


def build_filters(**filters: Any) -> Dict[str, Any]:
    """Keep only filters that actually restrict the result set."""
    return {
        key: value for key, value in filters.items() if value not in _EMPTY_FILTER_VALUES
    }


def build_ordering(sort_by: Optional[str], sort_order: str = "asc") -> Optional[str]:
    """
    Build a DRF ``ordering`` value.

    >>> build_ordering("make", "desc")
    '-make'
    """
    if not sort_by:
        return None
    prefix = "-" if sort_order == "desc" else ""
    return f"{prefix}{sort_by}"


def paginate(data: Any, page_size: int, key: str) -> Dict[str, Any]:
    """
    Normalize a list response into ``{key, total_count, total_pages}``.

    A paginated envelope uses its ``count``; a bare list falls back to its
    own length.
    """
    if isinstance(data, dict) and data.get("results") is not None:
        page = Page.model_validate(data)
        items = page.results
        total_count = page.count or 0
    else:
        items = data if isinstance(data, list) else []
        total_count = len(items)

    return {
        key: items,
        "total_count": total_count,
        "total_pages": math.ceil(total_count / page_size),
    }


class Resource:
    """
    Base class for a group of backend endpoints.

    Attributes:
        client: Shared API client used for every call
    """

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    @staticmethod
    def _require_id(field_name: str, value: Optional[ResourceId]) -> ResourceId:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationException(field_name, value, "An identifier is required")
        return value

    @staticmethod
    def _require_positive(field_name: str, value: int) -> int:
        if value <= 0:
            raise ValidationException(field_name, value, "Must be a positive number")
        return value
