"""Helpers for exposing paginated results over HTTP."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import get_settings
from .cursor import DirectedCursor
from .options import QueryOptions
from .page import PageInfo
from .paginator import parse_cursor


class PaginationParams(BaseModel):
    """Query parameters for pagination."""

    limit: Optional[int] = Field(default=None, ge=1, description="Number of items per page, defaults to the configured page size")
    after: Optional[str] = Field(default=None, description="Return items after this cursor")
    before: Optional[str] = Field(default=None, description="Return items before this cursor")
    skip: int = Field(default=0, ge=0, description="Offset, only honored without a cursor")

    @field_validator("limit")
    @classmethod
    def check_max_page_size(cls, v):
        """Validate limit against the configured maximum page size."""
        max_page_size = get_settings().max_page_size
        if v is not None and v > max_page_size:
            raise ValueError(f"Limit must be at most {max_page_size}")
        return v

    @model_validator(mode="after")
    def check_single_cursor(self):
        """Validate at most one cursor is given."""
        if self.after is not None and self.before is not None:
            raise ValueError("Only one of 'after' and 'before' may be supplied")
        return self

    def cursor(self) -> Optional[DirectedCursor]:
        """Decode the supplied cursor token, if any."""
        return parse_cursor(self.after, self.before)

    def to_query_options(self, sort: Any = None, **extra: Any) -> QueryOptions:
        """Build query options for these parameters."""
        return QueryOptions(limit=self.limit, skip=self.skip, sort=sort, **extra)


def create_link_header(
    base_url: str,
    params: Dict[str, Any],
    page_info: PageInfo
) -> Optional[str]:
    """Create Link header for pagination as per RFC 8288.

    Args:
        base_url: Base URL for the resource
        params: Current query parameters
        page_info: Page info of the response

    Returns:
        Link header value or None if no links
    """
    # Paging parameters of the current request don't carry over
    params = {k: v for k, v in params.items() if k not in ("after", "before", "skip") and v is not None}
    links = []

    if page_info.has_next_page and page_info.end_cursor:
        next_params = {**params, "after": page_info.end_cursor.token}
        next_url = f"{base_url}?" + "&".join([f"{k}={v}" for k, v in next_params.items()])
        links.append(f'<{next_url}>; rel="next"')

    if page_info.has_previous_page and page_info.start_cursor:
        prev_params = {**params, "before": page_info.start_cursor.token}
        prev_url = f"{base_url}?" + "&".join([f"{k}={v}" for k, v in prev_params.items()])
        links.append(f'<{prev_url}>; rel="prev"')

    return ", ".join(links) if links else None
