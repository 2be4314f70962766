"""Cursor-based pagination for MongoDB collections."""

from .config import Settings, get_settings
from .constants import ASCENDING, DESCENDING
from .errors import (
    CursorError,
    DecodeError,
    InvalidCursor,
    StoreError,
    SerializationError
)
from .pagination import (
    Edge,
    ForwardCursor,
    BackwardCursor,
    DirectedCursor,
    QueryOptions,
    PageInfo,
    PageResult,
    CursorPaginator,
    find_paginated,
    paginate
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "ASCENDING",
    "DESCENDING",
    "CursorError",
    "DecodeError",
    "InvalidCursor",
    "StoreError",
    "SerializationError",
    "Edge",
    "ForwardCursor",
    "BackwardCursor",
    "DirectedCursor",
    "QueryOptions",
    "PageInfo",
    "PageResult",
    "CursorPaginator",
    "find_paginated",
    "paginate"
]
