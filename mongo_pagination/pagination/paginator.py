"""Public entry points for cursor-based pagination of a collection."""

from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from ..config import Settings, get_settings
from ..errors.problem_details import InvalidCursor
from .cursor import BackwardCursor, DirectedCursor, ForwardCursor
from .options import CursorOptions, normalize_options
from .page import PageResult, fetch_page

T = TypeVar("T")


def parse_cursor(after: Optional[str] = None, before: Optional[str] = None) -> Optional[DirectedCursor]:
    """Build a directed cursor from ``after``/``before`` tokens.

    ``after`` is a previous page's ``end_cursor``, ``before`` its
    ``start_cursor``.

    Raises:
        DecodeError: If the token is malformed
        InvalidCursor: If both tokens are given
    """
    if after is not None and before is not None:
        raise InvalidCursor("Only one of 'after' and 'before' may be supplied")
    if after is not None:
        return ForwardCursor.from_token(after)
    if before is not None:
        return BackwardCursor.from_token(before)
    return None


class CursorPaginator(Generic[T]):
    """Paginates a collection into pages of ``item_type``."""

    def __init__(self, collection, item_type: Type[T] = dict, settings: Optional[Settings] = None):
        self.collection = collection
        self.item_type = item_type
        self.settings = settings or get_settings()

    def normalize(self, options: Any = None, cursor: Optional[DirectedCursor] = None) -> CursorOptions:
        """Normalize options with the configured defaults."""
        return normalize_options(
            options,
            cursor,
            default_limit=self.settings.default_page_size,
            tie_breaker=self.settings.tie_breaker_field,
            tie_breaker_direction=self.settings.tie_breaker_direction
        )

    async def find_paginated(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        options: Any = None,
        cursor: Optional[DirectedCursor] = None
    ) -> PageResult[T]:
        """Find the page of documents matching ``filter`` positioned by ``cursor``.

        Args:
            filter: Optional filter restricting the result set
            options: Optional query options (limit, skip, sort, projection, ...)
            cursor: Optional cursor taken from a previous ``PageResult``

        Returns:
            The requested page
        """
        return await fetch_page(
            self.collection,
            filter,
            self.normalize(options, cursor),
            cursor,
            self.item_type
        )

    async def paginate(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        options: Any = None,
        after: Optional[str] = None,
        before: Optional[str] = None
    ) -> PageResult[T]:
        """Like ``find_paginated`` but positioned by cursor tokens."""
        return await self.find_paginated(filter, options, parse_cursor(after, before))


async def find_paginated(
    collection,
    filter: Optional[Mapping[str, Any]] = None,
    options: Any = None,
    cursor: Optional[DirectedCursor] = None,
    item_type: Any = dict,
    settings: Optional[Settings] = None
) -> PageResult:
    """Find one page of ``collection``; see ``CursorPaginator.find_paginated``."""
    paginator = CursorPaginator(collection, item_type, settings)
    return await paginator.find_paginated(filter, options, cursor)


async def paginate(
    collection,
    filter: Optional[Mapping[str, Any]] = None,
    options: Any = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
    item_type: Any = dict,
    settings: Optional[Settings] = None
) -> PageResult:
    """Find one page of ``collection`` positioned by cursor tokens."""
    paginator = CursorPaginator(collection, item_type, settings)
    return await paginator.paginate(filter, options, after, before)
