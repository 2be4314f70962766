"""Normalization of caller query options into per-call cursor options."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..constants import (
    ASCENDING,
    DESCENDING,
    DEFAULT_LIMIT,
    DEFAULT_TIE_BREAKER_DIRECTION,
    TIE_BREAKER_FIELD,
)
from .cursor import DirectedCursor, is_backward


logger = logging.getLogger(__name__)

SortSpec = Tuple[Tuple[str, int], ...]

_DIRECTION_NAMES = {
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "1": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
    "-1": DESCENDING,
}

# Options forwarded verbatim to find(); count_documents() only takes a subset
_FIND_PASS_THROUGH = (
    "collation",
    "hint",
    "max_time_ms",
    "comment",
    "batch_size",
    "allow_disk_use",
)


def _is_within(path: str, other: str) -> bool:
    """Whether dotted ``path`` equals ``other`` or lies inside it."""
    return path == other or path.startswith(other + ".")


def _excludes(value: Any) -> bool:
    return value in (0, False)


class QueryOptions(BaseModel):
    """Query options supplied by the caller.

    Unknown keys are kept and handed to ``find`` unchanged.
    """

    model_config = ConfigDict(extra="allow")

    limit: Optional[int] = Field(default=None, ge=1, description="Number of items per page")
    skip: int = Field(default=0, ge=0, description="Offset, ignored when a cursor is supplied")
    sort: Any = Field(default=None, description="Ordered field to direction mapping")
    projection: Any = None
    collation: Any = None
    hint: Any = None
    max_time_ms: Optional[int] = Field(default=None, ge=0)
    comment: Any = None
    batch_size: Optional[int] = Field(default=None, ge=0)
    allow_disk_use: Optional[bool] = None
    read_concern: Optional[str] = Field(default=None, description="Read concern level")


class CursorOptions(BaseModel):
    """Normalized options for a single pagination call."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(ge=1, description="Requested page size")
    skip: Optional[int] = None
    sort: SortSpec
    tie_breaker: str = TIE_BREAKER_FIELD
    projection: Any = None
    collation: Any = None
    hint: Any = None
    max_time_ms: Optional[int] = None
    comment: Any = None
    batch_size: Optional[int] = None
    allow_disk_use: Optional[bool] = None
    read_concern: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)

    @property
    def fetch_limit(self) -> int:
        """Page size plus the sentinel item used to detect further pages."""
        return self.limit + 1

    def directed_sort(self, cursor: Optional[DirectedCursor] = None) -> SortSpec:
        """Sort to execute; every direction is inverted when seeking backward."""
        if not is_backward(cursor):
            return self.sort
        return tuple((field, -direction) for field, direction in self.sort)

    def without_skip(self) -> "CursorOptions":
        if self.skip is None:
            return self
        return self.model_copy(update={"skip": None})

    def projection_plan(self) -> Tuple[Optional[Dict[str, Any]], Tuple[str, ...]]:
        """Projection to send with ``find`` and the paths to strip from its results.

        Every edge is built from the sort fields, so they are always fetched.
        Paths the caller projected away are fetched anyway and returned as
        hidden, to be removed before documents reach the caller.
        """
        if self.projection is None:
            return None, ()
        if isinstance(self.projection, Mapping):
            projection = dict(self.projection)
        else:
            projection = {field: 1 for field in self.projection}
        sort_fields = [field for field, _direction in self.sort]
        hidden: List[str] = []

        inclusive = any(not _excludes(value) for key, value in projection.items() if key != "_id")
        if inclusive:
            for field in sort_fields:
                if field == "_id":
                    if _excludes(projection.get("_id", 1)):
                        projection["_id"] = 1
                        hidden.append("_id")
                elif not any(_is_within(field, key) and not _excludes(value) for key, value in projection.items()):
                    projection[field] = 1
                    hidden.append(field)
        else:
            for key in list(projection):
                if any(_is_within(field, key) or _is_within(key, field) for field in sort_fields):
                    del projection[key]
                    hidden.append(key)

        return projection or None, tuple(hidden)

    def find_kwargs(
        self,
        cursor: Optional[DirectedCursor] = None,
        limit: Optional[int] = None,
        include_skip: bool = True
    ) -> Dict[str, Any]:
        """Keyword arguments for ``collection.find``."""
        kwargs: Dict[str, Any] = {
            "sort": list(self.directed_sort(cursor)),
            "limit": self.fetch_limit if limit is None else limit,
        }
        if include_skip and self.skip:
            kwargs["skip"] = self.skip
        projection, _hidden = self.projection_plan()
        if projection is not None:
            kwargs["projection"] = projection
        for name in _FIND_PASS_THROUGH:
            value = getattr(self, name)
            if value is not None:
                kwargs[name] = value
        kwargs.update(self.extra)
        return kwargs

    def count_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``collection.count_documents``; never limited or skipped."""
        kwargs: Dict[str, Any] = {}
        if self.collation is not None:
            kwargs["collation"] = self.collation
        if self.hint is not None:
            kwargs["hint"] = self.hint
        if self.max_time_ms is not None:
            kwargs["maxTimeMS"] = self.max_time_ms
        if self.comment is not None:
            kwargs["comment"] = self.comment
        return kwargs


def coerce_direction(field: str, value: Any) -> int:
    """Map a sort direction onto ASCENDING or DESCENDING.

    Unrecognised values fall back to ascending.
    """
    if isinstance(value, bool):
        logger.warning(f"Boolean sort direction for '{field}', using ascending")
        return ASCENDING
    if isinstance(value, (int, float)):
        return DESCENDING if value < 0 else ASCENDING
    if isinstance(value, str) and value.strip().lower() in _DIRECTION_NAMES:
        return _DIRECTION_NAMES[value.strip().lower()]

    logger.warning(f"Unrecognised sort direction {value!r} for '{field}', using ascending")
    return ASCENDING


def normalize_sort(sort: Any) -> List[Tuple[str, int]]:
    """Turn a mapping, a list of pairs or a field name into an ordered sort list."""
    if sort is None:
        return []
    if isinstance(sort, str):
        return [(sort, ASCENDING)]

    items = sort.items() if isinstance(sort, Mapping) else sort
    normalized: List[Tuple[str, int]] = []
    seen = set()
    for item in items:
        if isinstance(item, str):
            field, direction = item, ASCENDING
        else:
            field, direction = item
        if field in seen:
            continue
        seen.add(field)
        normalized.append((field, coerce_direction(field, direction)))
    return normalized


def normalize_options(
    options: Union[None, Mapping[str, Any], QueryOptions, CursorOptions] = None,
    cursor: Optional[DirectedCursor] = None,
    default_limit: int = DEFAULT_LIMIT,
    tie_breaker: str = TIE_BREAKER_FIELD,
    tie_breaker_direction: int = DEFAULT_TIE_BREAKER_DIRECTION
) -> CursorOptions:
    """Normalize caller options for one pagination call.

    Args:
        options: Raw options, or options already normalized
        cursor: Cursor of the call; when present skip is dropped
        default_limit: Page size used when no limit was requested
        tie_breaker: Unique field appended to the sort when missing
        tie_breaker_direction: Direction of an appended tie-breaker

    Returns:
        Cursor options with a total sort order
    """
    if isinstance(options, CursorOptions):
        return options.without_skip() if cursor is not None else options

    if options is None:
        options = QueryOptions()
    elif not isinstance(options, QueryOptions):
        options = QueryOptions.model_validate(dict(options))

    sort = normalize_sort(options.sort)
    if tie_breaker not in {field for field, _direction in sort}:
        sort.append((tie_breaker, tie_breaker_direction))

    skip = options.skip or None
    if cursor is not None and skip is not None:
        logger.debug(f"Ignoring skip={skip} because a cursor was supplied")
        skip = None

    return CursorOptions(
        limit=options.limit if options.limit is not None else default_limit,
        skip=skip,
        sort=tuple(sort),
        tie_breaker=tie_breaker,
        projection=options.projection,
        collation=options.collation,
        hint=options.hint,
        max_time_ms=options.max_time_ms,
        comment=options.comment,
        batch_size=options.batch_size,
        allow_disk_use=options.allow_disk_use,
        read_concern=options.read_concern,
        extra=dict(options.model_extra or {}),
    )
