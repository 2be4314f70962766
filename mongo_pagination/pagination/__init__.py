"""Pagination module for cursor-based pagination."""

from .cursor import (
    Edge,
    ForwardCursor,
    BackwardCursor,
    DirectedCursor,
    encode_cursor,
    decode_cursor
)
from .options import (
    QueryOptions,
    CursorOptions,
    normalize_options,
    normalize_sort
)
from .query import build_range_filter
from .page import PageInfo, PageResult, fetch_page
from .paginator import CursorPaginator, find_paginated, paginate, parse_cursor
from .http import PaginationParams, create_link_header

__all__ = [
    "Edge",
    "ForwardCursor",
    "BackwardCursor",
    "DirectedCursor",
    "encode_cursor",
    "decode_cursor",
    "QueryOptions",
    "CursorOptions",
    "normalize_options",
    "normalize_sort",
    "build_range_filter",
    "PageInfo",
    "PageResult",
    "fetch_page",
    "CursorPaginator",
    "find_paginated",
    "paginate",
    "parse_cursor",
    "PaginationParams",
    "create_link_header"
]
